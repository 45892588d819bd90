"""Health check utilities for the generation service.

Checks run before a fix session can tell an operator up front that the
service is down or the model is missing. They are optional: the fix
pipeline itself treats an unreachable service as a per-call failure.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import TYPE_CHECKING, Any

import structlog

from checkstyle_fixer.utils.async_helpers import FixerError, with_timeout
from checkstyle_fixer.utils.logging import LogEventNames

if TYPE_CHECKING:
    from checkstyle_fixer.adapters.llm.ollama import OllamaAdapter
    from checkstyle_fixer.config.schema import FixerConfig

log = structlog.get_logger()


class HealthStatus(StrEnum):
    """Health check status values."""

    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class CheckResult:
    """Result of a single health check."""

    name: str
    status: HealthStatus
    message: str
    latency_ms: float | None = None
    details: dict[str, Any] = field(default_factory=dict)


@dataclass
class HealthReport:
    """Overall health report."""

    healthy: bool
    status: HealthStatus
    timestamp: datetime
    checks: list[CheckResult]

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "healthy": self.healthy,
            "status": self.status.value,
            "timestamp": self.timestamp.isoformat(),
            "checks": [
                {
                    "name": c.name,
                    "status": c.status.value,
                    "message": c.message,
                    "latency_ms": c.latency_ms,
                    "details": c.details,
                }
                for c in self.checks
            ],
        }


class HealthChecker:
    """Checks that the generation service is reachable and has the model.

    Checks run one after another; the model check is skipped when the
    service is unreachable.

    Example:
        checker = HealthChecker(config, service)
        report = await checker.run_all_checks()
        if not report.healthy:
            print(report.to_dict())
    """

    def __init__(self, config: FixerConfig, service: OllamaAdapter) -> None:
        """Initialize the health checker.

        Args:
            config: Application configuration
            service: Generation service adapter to probe
        """
        self._config = config
        self._service = service

    async def run_all_checks(self) -> HealthReport:
        """Run all health checks and return a report."""
        log.info(LogEventNames.HEALTH_CHECK_START, base_url=self._config.ollama.base_url)
        start_time = datetime.now(UTC)

        checks = [await self._check_service()]
        if checks[0].status == HealthStatus.HEALTHY:
            checks.append(await self._check_model())

        if all(c.status == HealthStatus.HEALTHY for c in checks):
            overall = HealthStatus.HEALTHY
        elif any(c.status == HealthStatus.UNHEALTHY for c in checks):
            overall = HealthStatus.UNHEALTHY
        else:
            overall = HealthStatus.DEGRADED

        report = HealthReport(
            healthy=overall != HealthStatus.UNHEALTHY,
            status=overall,
            timestamp=start_time,
            checks=checks,
        )

        log.info(
            LogEventNames.HEALTH_CHECK_COMPLETE,
            healthy=report.healthy,
            status=overall.value,
            checks_run=len(checks),
        )
        return report

    async def _check_service(self) -> CheckResult:
        """Probe the version endpoint."""
        start = time.monotonic()
        try:
            version = await with_timeout(
                self._service.get_version(),
                self._config.ollama.health_timeout + 1,
            )
        except FixerError as e:
            return CheckResult(
                name="generation_service",
                status=HealthStatus.UNHEALTHY,
                message=f"Ollama not reachable at {self._config.ollama.base_url}: {e}",
            )

        return CheckResult(
            name="generation_service",
            status=HealthStatus.HEALTHY,
            message="Ollama reachable",
            latency_ms=(time.monotonic() - start) * 1000,
            details={"base_url": self._config.ollama.base_url, "version": version},
        )

    async def _check_model(self) -> CheckResult:
        """Check the configured model is installed."""
        model = self._config.ollama.model
        try:
            present = await self._service.has_model(model)
        except FixerError as e:
            return CheckResult(
                name="model",
                status=HealthStatus.DEGRADED,
                message=f"Could not list models: {e}",
                details={"model": model},
            )

        if not present:
            return CheckResult(
                name="model",
                status=HealthStatus.UNHEALTHY,
                message=f"Model {model} is not installed (run: ollama pull {model})",
                details={"model": model},
            )

        return CheckResult(
            name="model",
            status=HealthStatus.HEALTHY,
            message=f"Model {model} available",
            details={"model": model},
        )
