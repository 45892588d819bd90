"""Utility functions and helpers.

This module provides various utilities for checkstyle-fixer:
- async_helpers: Exception hierarchy, readiness polling, timeouts
- security: Log redaction, service URL validation
- safe_subprocess: Safe execution of the build command
- logging: Structured logging with secret sanitization
- health: Generation service health checks
"""

from checkstyle_fixer.utils.async_helpers import (
    BuildToolError,
    EmptyFixError,
    FixerError,
    MalformedResponseError,
    ServiceUnavailableError,
    SourceFileNotFoundError,
)
from checkstyle_fixer.utils.health import (
    HealthChecker,
    HealthReport,
    HealthStatus,
)
from checkstyle_fixer.utils.logging import (
    LogEventNames,
    LogFormat,
    LogLevel,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)
from checkstyle_fixer.utils.security import (
    RedactionError,
    SecretRedactor,
    SecurityError,
)

__all__ = [
    # Errors
    "BuildToolError",
    "EmptyFixError",
    "FixerError",
    "MalformedResponseError",
    "ServiceUnavailableError",
    "SourceFileNotFoundError",
    # Health
    "HealthChecker",
    "HealthReport",
    "HealthStatus",
    # Logging
    "LogEventNames",
    "LogFormat",
    "LogLevel",
    "bind_context",
    "clear_context",
    "configure_logging",
    "get_logger",
    "unbind_context",
    # Security
    "RedactionError",
    "SecretRedactor",
    "SecurityError",
]
