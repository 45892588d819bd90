"""Abstract interface for generation service integrations."""

from typing import Any, Protocol


class GenerationService(Protocol):
    """Abstract interface for text-generation services.

    The fix applicator depends only on this protocol, so tests can supply
    an in-memory fake and other backends can be added as adapters.
    """

    async def generate(self, prompt: str) -> dict[str, Any]:
        """
        Send one prompt and return the decoded reply envelope.

        The call is a single request/response round trip: no streaming and
        no retries.

        Args:
            prompt: Complete instruction text, file content included

        Returns:
            Decoded JSON object as returned by the service

        Raises:
            ServiceUnavailableError: On connection failure, timeout or HTTP error status
            MalformedResponseError: If the body is not a JSON object
        """
        ...

    @property
    def model_name(self) -> str:
        """
        Return the model identifier being used.

        Examples:
            - "qwen2.5-coder:7b"
            - "codellama:13b"
        """
        ...
