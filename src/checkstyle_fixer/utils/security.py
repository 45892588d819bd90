"""Security utilities for log redaction and service URL validation.

Source files sent to the generation service are never redacted: the model
must see the file verbatim to return a complete replacement. Redaction only
applies to what we emit in logs.
"""

from __future__ import annotations

import ipaddress
import re
from typing import TYPE_CHECKING
from urllib.parse import urlparse

import structlog

if TYPE_CHECKING:
    from collections.abc import Sequence

log = structlog.get_logger()


class SecurityError(Exception):
    """Base exception for security-related errors."""


class RedactionError(SecurityError):
    """Raised when secret redaction fails."""


# Allowed hosts for the generation service (SSRF prevention)
ALLOWED_SERVICE_HOSTS = frozenset({"localhost", "127.0.0.1", "::1"})

ANSI_ESCAPE_PATTERN = re.compile(r"\x1b\[[0-9;]*m")
CONTROL_CHAR_PATTERN = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")


class SecretRedactor:
    """Detects and redacts secrets from text.

    Fails closed: if a pattern cannot be compiled or applied, a
    RedactionError is raised instead of returning the input untouched.

    Usage:
        redactor = SecretRedactor()
        safe_text = redactor.redact(build_output_line)
    """

    # Credentials that commonly leak into Gradle output and environment dumps
    DEFAULT_PATTERNS: tuple[tuple[str, str], ...] = (
        (
            r"(?i)(api[_-]?key|secret|token|password|credential)\s*[=:]\s*[\"']?[\w-]{16,}",
            "Generic secret",
        ),
        (r"(?i)(?:-P|-D)?(?:ossrh|nexus|artifactory|maven|gradle)\w*password=\S+", "Repo password"),
        (r"ghp_[a-zA-Z0-9]{36}", "GitHub PAT"),
        (r"github_pat_[a-zA-Z0-9_]{22,}", "GitHub fine-grained PAT"),
        (r"AKIA[0-9A-Z]{16}", "AWS access key ID"),
        (
            r"(?i)(postgres(?:ql)?|mysql|mongodb(?:\+srv)?|redis|amqp)://[^:]+:[^@]+@[^\s]+",
            "Database connection string",
        ),
        (r"(?i)https?://[^/\s:@]+:[^@\s]+@[^\s]+", "URL with credentials"),
        (r"-----BEGIN (?:RSA |EC |DSA |OPENSSH )?PRIVATE KEY-----", "Private key header"),
        (r"eyJ[a-zA-Z0-9_-]*\.eyJ[a-zA-Z0-9_-]*\.[a-zA-Z0-9_-]*", "JWT token"),
    )

    def __init__(
        self,
        placeholder: str = "[REDACTED]",
        custom_patterns: Sequence[tuple[str, str]] | None = None,
    ) -> None:
        """Initialize the SecretRedactor.

        Args:
            placeholder: String to replace detected secrets with.
            custom_patterns: Additional (pattern, name) tuples to detect.

        Raises:
            RedactionError: If any pattern fails to compile.
        """
        self.placeholder = placeholder
        self._pattern_names: dict[re.Pattern[str], str] = {}

        all_patterns = list(self.DEFAULT_PATTERNS)
        if custom_patterns:
            all_patterns.extend(custom_patterns)

        for pattern_str, name in all_patterns:
            try:
                self._pattern_names[re.compile(pattern_str)] = name
            except re.error as e:
                log.error("pattern_compilation_failed", pattern=pattern_str, error=str(e))
                raise RedactionError(
                    f"Failed to compile secret pattern '{pattern_str}': {e}"
                ) from e

    @property
    def patterns(self) -> list[re.Pattern[str]]:
        """Return the list of compiled patterns."""
        return list(self._pattern_names)

    def redact(self, text: str) -> str:
        """Replace every detected secret in ``text`` with the placeholder.

        Raises:
            RedactionError: If redaction fails for any reason.
        """
        if not text:
            return text

        try:
            result = text
            for pattern in self._pattern_names:
                result = pattern.sub(self.placeholder, result)
            return result
        except Exception as e:
            raise RedactionError(f"Redaction failed: {e}") from e

    def has_secrets(self, text: str) -> bool:
        """Check if text contains any secrets."""
        if not text:
            return False
        return any(pattern.search(text) for pattern in self._pattern_names)


def validate_service_url(url: str, allow_remote: bool = False) -> bool:
    """Validate that a generation service URL is safe (SSRF prevention).

    Only loopback hosts are accepted unless ``allow_remote`` is set.

    Args:
        url: The service base URL to validate.
        allow_remote: If True, allow non-localhost hosts.

    Returns:
        True if the URL is valid and allowed, False otherwise.
    """
    if not url:
        return False

    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        return False

    host = parsed.hostname
    if not host:
        return False

    if host in ALLOWED_SERVICE_HOSTS:
        return True

    try:
        if ipaddress.ip_address(host).is_loopback:
            return True
    except ValueError:
        pass  # Not an IP address

    return allow_remote


def sanitize_for_logging(text: str, limit: int | None = 200) -> str:
    """Strip ANSI escapes and control characters, optionally truncating.

    Model output and build output are echoed into logs as previews; this
    keeps them from forging log lines or corrupting the terminal.

    Args:
        text: The text to sanitize.
        limit: Maximum length of the returned preview (None for no limit).

    Returns:
        The sanitized text.
    """
    if not text:
        return text

    text = ANSI_ESCAPE_PATTERN.sub("", text)
    text = CONTROL_CHAR_PATTERN.sub("", text)

    if limit is not None and len(text) > limit:
        text = text[:limit] + "..."
    return text
