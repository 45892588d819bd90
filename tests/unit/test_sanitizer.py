"""Tests for generation reply sanitization."""

import pytest

from checkstyle_fixer.core.sanitizer import (
    parse_envelope,
    sanitize_response,
    strip_code_fences,
)
from checkstyle_fixer.utils.async_helpers import MalformedResponseError


class TestStripCodeFences:
    """Tests for fence removal."""

    def test_fenced_with_language_tag(self) -> None:
        assert strip_code_fences("```java\nX\n```") == "X"

    def test_fenced_without_language_tag(self) -> None:
        assert strip_code_fences("```\nclass A {}\n```") == "class A {}"

    def test_unfenced_is_trimmed(self) -> None:
        assert strip_code_fences("\n\n  class A {}  \n") == "class A {}"

    def test_surrounding_whitespace_before_fence(self) -> None:
        assert strip_code_fences("  \n```java\nclass A {}\n```\n\n") == "class A {}"

    def test_crlf_fences(self) -> None:
        assert strip_code_fences("```java\r\nclass A {}\r\n```") == "class A {}"

    def test_only_leading_fence(self) -> None:
        assert strip_code_fences("```java\nclass A {}") == "class A {}"

    def test_only_trailing_fence(self) -> None:
        assert strip_code_fences("class A {}\n```") == "class A {}"

    def test_inner_fences_untouched(self) -> None:
        """Only the outermost fence pair is removed."""
        text = "```java\n/**\n * ```\n * example\n * ```\n */\nclass A {}\n```"
        assert strip_code_fences(text) == "/**\n * ```\n * example\n * ```\n */\nclass A {}"

    def test_multiline_body_preserved(self) -> None:
        body = "package a;\n\nclass A {\n    int x;\n}"
        assert strip_code_fences(f"```java\n{body}\n```") == body

    def test_empty_fence(self) -> None:
        assert strip_code_fences("```java\n```") == ""

    def test_whitespace_only(self) -> None:
        assert strip_code_fences("   \n\t ") == ""


class TestParseEnvelope:
    """Tests for envelope validation."""

    def test_valid_envelope(self) -> None:
        parsed = parse_envelope({"model": "m", "response": "X", "done": True})
        assert parsed.response == "X"
        assert parsed.model == "m"

    def test_extra_fields_ignored(self) -> None:
        parsed = parse_envelope({"response": "X", "eval_count": 12, "context": [1, 2]})
        assert parsed.response == "X"

    def test_missing_response(self) -> None:
        with pytest.raises(MalformedResponseError):
            parse_envelope({"model": "m", "done": True})

    def test_non_string_response(self) -> None:
        with pytest.raises(MalformedResponseError):
            parse_envelope({"response": ["a", "b"]})

    def test_not_a_mapping(self) -> None:
        with pytest.raises(MalformedResponseError):
            parse_envelope(["response"])


class TestSanitizeResponse:
    """Tests for the full sanitize step."""

    def test_sanitize_fenced_reply(self) -> None:
        assert sanitize_response({"response": "```java\nclass A {}\n```"}) == "class A {}"

    def test_sanitize_empty_reply(self) -> None:
        assert sanitize_response({"response": "```\n```"}) == ""

    def test_sanitize_malformed(self) -> None:
        with pytest.raises(MalformedResponseError):
            sanitize_response({"error": "model not found"})
