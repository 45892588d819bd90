"""Async utility functions and the fixer's exception hierarchy.

This module provides:
- Custom exceptions for the fix pipeline's failure kinds
- A readiness poll for the generation service health endpoint
- Timeout wrappers for async operations

Fix requests themselves are never retried: one failed attempt fails that
diagnostic and the run moves on.
"""

from __future__ import annotations

import asyncio
import builtins
from collections.abc import Awaitable
from typing import TypeVar

import httpx
import structlog
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

log = structlog.get_logger()

T = TypeVar("T")


# =============================================================================
# Custom Exceptions
# =============================================================================


class FixerError(Exception):
    """Base exception for all fixer errors."""


class SourceFileNotFoundError(FixerError):
    """Source file named by a diagnostic does not exist at read time."""

    def __init__(self, path: str) -> None:
        super().__init__(f"Source file not found: {path}")
        self.path = path


class ServiceUnavailableError(FixerError):
    """Generation service could not be reached or refused the request."""


class MalformedResponseError(FixerError):
    """Generation service replied with an envelope we cannot use."""


class EmptyFixError(FixerError):
    """Sanitized model output was empty."""


class BuildToolError(FixerError):
    """The static-analysis build command could not be run."""


class TimeoutError(FixerError):
    """Operation timed out."""


# =============================================================================
# Readiness polling
# =============================================================================


def _log_retry(retry_state: RetryCallState) -> None:
    """Log readiness poll attempts."""
    if retry_state.outcome is None:
        return

    exception = retry_state.outcome.exception()
    if exception:
        log.warning(
            "service_not_ready",
            attempt=retry_state.attempt_number,
            exception_type=type(exception).__name__,
            exception_message=str(exception),
            wait_time=retry_state.next_action.sleep if retry_state.next_action else 0,
        )


def readiness_poll(
    max_attempts: int = 5,
    min_wait: float = 0.5,
    max_wait: float = 10.0,
    retry_on: tuple[type[Exception], ...] = (
        ServiceUnavailableError,
        httpx.TimeoutException,
        httpx.NetworkError,
    ),
) -> AsyncRetrying:
    """Create a tenacity controller for polling a service until it answers.

    Args:
        max_attempts: Maximum number of probes.
        min_wait: Minimum wait between probes (seconds).
        max_wait: Maximum wait between probes (seconds).
        retry_on: Exception types that mean "not ready yet".

    Returns:
        An AsyncRetrying instance to drive with ``async for``.
    """
    return AsyncRetrying(
        stop=stop_after_attempt(max_attempts),
        wait=wait_exponential(multiplier=min_wait, min=min_wait, max=max_wait),
        retry=retry_if_exception_type(retry_on),
        before_sleep=_log_retry,
        reraise=True,
    )


# =============================================================================
# Timeout Utilities
# =============================================================================


async def with_timeout(
    coro: Awaitable[T],
    timeout: float,
    error_message: str | None = None,
) -> T:
    """Execute an awaitable with a timeout.

    Args:
        coro: The coroutine to execute.
        timeout: Timeout in seconds.
        error_message: Custom error message for timeout.

    Returns:
        The result of the coroutine.

    Raises:
        TimeoutError: If the operation times out.
    """
    try:
        return await asyncio.wait_for(coro, timeout=timeout)
    except builtins.TimeoutError as e:
        msg = error_message or f"Operation timed out after {timeout}s"
        log.warning("operation_timeout", timeout=timeout)
        raise TimeoutError(msg) from e

