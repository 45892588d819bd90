"""Ollama generation service adapter.

This module implements the GenerationService protocol against a local
Ollama server using its non-streaming ``/api/generate`` endpoint:

    POST /api/generate
    {"model": ..., "prompt": ..., "stream": false, "options": {"temperature": 0.1}}

Every fix request is a single round trip with a bounded timeout. Failures
are mapped onto ServiceUnavailableError / MalformedResponseError and never
retried here; only the optional readiness probe polls.
"""

from __future__ import annotations

import time
from typing import Any

import httpx
import structlog

from ...config.schema import OllamaConfig
from ...utils.async_helpers import (
    MalformedResponseError,
    ServiceUnavailableError,
    readiness_poll,
)
from ...utils.logging import LogEventNames
from ...utils.security import sanitize_for_logging

log = structlog.get_logger()

GENERATE_PATH = "/api/generate"
VERSION_PATH = "/api/version"
TAGS_PATH = "/api/tags"


def build_generate_payload(model: str, prompt: str, temperature: float) -> dict[str, Any]:
    """Build the JSON body for a non-streaming generate call."""
    return {
        "model": model,
        "prompt": prompt,
        "stream": False,
        "options": {"temperature": temperature},
    }


class OllamaAdapter:
    """Ollama adapter implementing the GenerationService protocol.

    Example:
        async with OllamaAdapter(OllamaConfig()) as service:
            envelope = await service.generate(prompt)
            print(envelope["response"])
    """

    def __init__(
        self,
        config: OllamaConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the Ollama adapter.

        Args:
            config: Ollama-specific configuration.
            transport: Optional httpx transport (used by tests).
        """
        self._config = config
        self._client = httpx.AsyncClient(
            base_url=config.base_url,
            timeout=httpx.Timeout(config.timeout),
            transport=transport,
        )

    @property
    def model_name(self) -> str:
        """Return the model identifier being used."""
        return self._config.model

    @property
    def base_url(self) -> str:
        """Return the service base URL."""
        return self._config.base_url

    async def __aenter__(self) -> OllamaAdapter:
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        timeout: float,
        json: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Perform one HTTP call and decode a JSON object body.

        Raises:
            ServiceUnavailableError: On transport failure or HTTP error status.
            MalformedResponseError: If the body is not a JSON object.
        """
        try:
            response = await self._client.request(method, path, json=json, timeout=timeout)
            response.raise_for_status()
        except httpx.TimeoutException as e:
            log.error(LogEventNames.SERVICE_REQUEST_ERROR, path=path, error="timeout")
            raise ServiceUnavailableError(
                f"Ollama request to {path} timed out after {timeout}s"
            ) from e
        except httpx.HTTPStatusError as e:
            body = sanitize_for_logging(e.response.text)
            log.error(
                LogEventNames.SERVICE_REQUEST_ERROR,
                path=path,
                status_code=e.response.status_code,
                body=body,
            )
            raise ServiceUnavailableError(
                f"Ollama returned HTTP {e.response.status_code} for {path}: {body}"
            ) from e
        except httpx.HTTPError as e:
            log.error(LogEventNames.SERVICE_REQUEST_ERROR, path=path, error=str(e))
            raise ServiceUnavailableError(f"Cannot reach Ollama at {self.base_url}: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            log.error(
                "json_parse_error",
                path=path,
                response_preview=sanitize_for_logging(response.text),
            )
            raise MalformedResponseError(f"Invalid JSON from Ollama {path}: {e}") from e

        if not isinstance(data, dict):
            raise MalformedResponseError(
                f"Expected a JSON object from Ollama {path}, got {type(data).__name__}"
            )
        return data

    async def generate(self, prompt: str) -> dict[str, Any]:
        """Send one non-streaming generate request.

        Args:
            prompt: Complete instruction text.

        Returns:
            Decoded reply envelope (expected to contain ``response``).

        Raises:
            ServiceUnavailableError: If the service cannot be reached or errors.
            MalformedResponseError: If the body is not a JSON object.
        """
        payload = build_generate_payload(self._config.model, prompt, self._config.temperature)

        log.debug(
            LogEventNames.SERVICE_REQUEST_START,
            model=self._config.model,
            prompt_chars=len(prompt),
        )
        start = time.monotonic()

        envelope = await self._request("POST", GENERATE_PATH, self._config.timeout, json=payload)

        log.debug(
            LogEventNames.SERVICE_REQUEST_COMPLETE,
            model=self._config.model,
            latency_ms=round((time.monotonic() - start) * 1000, 1),
        )
        return envelope

    async def get_version(self) -> str:
        """Probe the lightweight version endpoint.

        Returns:
            The server version string.

        Raises:
            ServiceUnavailableError: If the service does not answer in time.
            MalformedResponseError: If the reply has no version.
        """
        data = await self._request("GET", VERSION_PATH, self._config.health_timeout)
        version = data.get("version")
        if not isinstance(version, str) or not version:
            raise MalformedResponseError("Ollama version reply has no 'version' field")
        return version

    async def list_models(self) -> list[str]:
        """Return the names of the models installed on the server."""
        data = await self._request("GET", TAGS_PATH, self._config.health_timeout)
        models = data.get("models") or []
        return [m["name"] for m in models if isinstance(m, dict) and "name" in m]

    async def has_model(self, name: str | None = None) -> bool:
        """Check whether a model (default: the configured one) is installed."""
        wanted = name or self._config.model
        candidates = {wanted} if ":" in wanted else {wanted, f"{wanted}:latest"}
        return any(model in candidates for model in await self.list_models())

    async def wait_until_ready(self, attempts: int = 5) -> str:
        """Poll the version endpoint until the service answers.

        Args:
            attempts: Maximum number of probes.

        Returns:
            The server version string.

        Raises:
            ServiceUnavailableError: If the service never became ready.
        """
        async for attempt in readiness_poll(max_attempts=attempts):
            with attempt:
                version = await self.get_version()
                log.info(LogEventNames.SERVICE_READY, base_url=self.base_url, version=version)
                return version
        raise ServiceUnavailableError(f"Ollama at {self.base_url} never became ready")
