"""Tests for the health check module."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest

from checkstyle_fixer.config.schema import FixerConfig
from checkstyle_fixer.utils.async_helpers import MalformedResponseError, ServiceUnavailableError
from checkstyle_fixer.utils.health import (
    CheckResult,
    HealthChecker,
    HealthReport,
    HealthStatus,
)


@pytest.fixture
def mock_service() -> MagicMock:
    """A generation service that is up and has the model."""
    service = MagicMock()
    service.get_version = AsyncMock(return_value="0.5.7")
    service.has_model = AsyncMock(return_value=True)
    return service


class TestHealthStatus:
    """Tests for HealthStatus enum."""

    def test_health_status_values(self) -> None:
        assert HealthStatus.HEALTHY.value == "healthy"
        assert HealthStatus.DEGRADED.value == "degraded"
        assert HealthStatus.UNHEALTHY.value == "unhealthy"


class TestCheckResult:
    """Tests for CheckResult dataclass."""

    def test_check_result_defaults(self) -> None:
        result = CheckResult(name="test", status=HealthStatus.HEALTHY, message="OK")
        assert result.latency_ms is None
        assert result.details == {}


class TestHealthReport:
    """Tests for HealthReport dataclass."""

    def test_to_dict(self) -> None:
        timestamp = datetime(2024, 1, 15, 12, 0, 0, tzinfo=UTC)
        report = HealthReport(
            healthy=True,
            status=HealthStatus.HEALTHY,
            timestamp=timestamp,
            checks=[
                CheckResult(
                    name="generation_service",
                    status=HealthStatus.HEALTHY,
                    message="Ollama reachable",
                    latency_ms=4.2,
                    details={"version": "0.5.7"},
                )
            ],
        )

        result = report.to_dict()

        assert result["healthy"] is True
        assert result["status"] == "healthy"
        assert result["timestamp"] == "2024-01-15T12:00:00+00:00"
        assert result["checks"][0]["name"] == "generation_service"
        assert result["checks"][0]["details"] == {"version": "0.5.7"}


class TestHealthChecker:
    """Tests for HealthChecker."""

    @pytest.mark.asyncio
    async def test_all_healthy(self, mock_service: MagicMock) -> None:
        report = await HealthChecker(FixerConfig(), mock_service).run_all_checks()

        assert report.healthy is True
        assert report.status == HealthStatus.HEALTHY
        assert [c.name for c in report.checks] == ["generation_service", "model"]
        assert report.checks[0].details["version"] == "0.5.7"
        mock_service.has_model.assert_awaited_once_with("qwen2.5-coder:7b")

    @pytest.mark.asyncio
    async def test_service_down_skips_model_check(self, mock_service: MagicMock) -> None:
        mock_service.get_version.side_effect = ServiceUnavailableError("connection refused")

        report = await HealthChecker(FixerConfig(), mock_service).run_all_checks()

        assert report.healthy is False
        assert report.status == HealthStatus.UNHEALTHY
        assert len(report.checks) == 1
        assert "connection refused" in report.checks[0].message
        mock_service.has_model.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_model_missing(self, mock_service: MagicMock) -> None:
        mock_service.has_model.return_value = False

        report = await HealthChecker(FixerConfig(), mock_service).run_all_checks()

        assert report.healthy is False
        assert report.checks[1].status == HealthStatus.UNHEALTHY
        assert "ollama pull qwen2.5-coder:7b" in report.checks[1].message

    @pytest.mark.asyncio
    async def test_model_list_unavailable_is_degraded(self, mock_service: MagicMock) -> None:
        mock_service.has_model.side_effect = MalformedResponseError("bad tags reply")

        report = await HealthChecker(FixerConfig(), mock_service).run_all_checks()

        assert report.healthy is True
        assert report.status == HealthStatus.DEGRADED
