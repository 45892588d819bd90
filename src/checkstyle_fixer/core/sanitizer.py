"""Response sanitization for generation service replies.

Models tend to wrap the file in a Markdown code fence. We strip exactly one
leading fence (with its optional language tag) and one trailing fence, then
trim whitespace. Anything else, nested fences included, is left as the model
wrote it.
"""

from __future__ import annotations

import re
from typing import Any

import structlog
from pydantic import BaseModel, ValidationError

from checkstyle_fixer.utils.async_helpers import MalformedResponseError

log = structlog.get_logger()

LEADING_FENCE = re.compile(r"\A```(?:[\w.+#-]*[ \t]*\r?\n)?")
TRAILING_FENCE = re.compile(r"\r?\n?```\Z")


class GenerateEnvelope(BaseModel):
    """Minimal shape of a non-streaming generate reply."""

    response: str
    model: str | None = None
    done: bool | None = None


def parse_envelope(envelope: Any) -> GenerateEnvelope:
    """Validate a decoded reply.

    Raises:
        MalformedResponseError: If ``response`` is missing or not a string
    """
    if not isinstance(envelope, dict):
        raise MalformedResponseError(
            f"Expected a JSON object, got {type(envelope).__name__}"
        )
    try:
        return GenerateEnvelope.model_validate(envelope)
    except ValidationError as e:
        log.error("envelope_validation_error", error=str(e), keys=sorted(envelope))
        raise MalformedResponseError(f"Response envelope failed validation: {e}") from e


def strip_code_fences(text: str) -> str:
    """Remove one leading and one trailing code fence, then trim.

    Example:
        >>> strip_code_fences("```java\\nclass A {}\\n```")
        'class A {}'
    """
    stripped = text.strip()
    stripped = LEADING_FENCE.sub("", stripped, count=1)
    stripped = TRAILING_FENCE.sub("", stripped, count=1)
    return stripped.strip()


def sanitize_response(envelope: Any) -> str:
    """Extract usable file content from a generate reply.

    Args:
        envelope: Decoded JSON body returned by the generation service

    Returns:
        The file body, or an empty string when nothing usable remains.
        Callers must treat empty as a failed fix, not as "unchanged".

    Raises:
        MalformedResponseError: If the envelope has no ``response`` string
    """
    return strip_code_fences(parse_envelope(envelope).response)
