"""Tests for the Checkstyle diagnostic parser."""

import pytest

from checkstyle_fixer.core.diagnostic_parser import DiagnosticParser
from checkstyle_fixer.models.diagnostic import Diagnostic


@pytest.fixture
def parser() -> DiagnosticParser:
    return DiagnosticParser()


class TestParseLine:
    """Tests for single-line parsing."""

    def test_parses_gradle_line(self, parser: DiagnosticParser) -> None:
        """A full Gradle checkstyle line yields every field."""
        line = (
            "[ant:checkstyle] [ERROR] /tmp/F.java:5:8: "
            "Unused import - foo.Bar. [UnusedImports]"
        )
        diagnostic = parser.parse_line(line)

        assert diagnostic == Diagnostic(
            file="/tmp/F.java",
            line=5,
            column=8,
            message="Unused import - foo.Bar.",
            rule="UnusedImports",
        )
        assert diagnostic.raw_line == line

    def test_parses_line_without_prefix(self, parser: DiagnosticParser) -> None:
        diagnostic = parser.parse_line("[ERROR] src/A.java:1:1: Bad. [RuleX]")
        assert diagnostic is not None
        assert diagnostic.file == "src/A.java"
        assert diagnostic.rule == "RuleX"

    def test_message_with_brackets(self, parser: DiagnosticParser) -> None:
        """Only the final bracketed token is the rule."""
        diagnostic = parser.parse_line(
            "[ERROR] /a/B.java:2:3: '[' is preceded with whitespace. [NoWhitespaceBefore]"
        )
        assert diagnostic is not None
        assert diagnostic.message == "'[' is preceded with whitespace."
        assert diagnostic.rule == "NoWhitespaceBefore"

    def test_path_with_spaces(self, parser: DiagnosticParser) -> None:
        diagnostic = parser.parse_line("[ERROR] /my project/src/C.java:4:2: Msg. [Rule]")
        assert diagnostic is not None
        assert diagnostic.file == "/my project/src/C.java"

    def test_trailing_whitespace_and_crlf(self, parser: DiagnosticParser) -> None:
        diagnostic = parser.parse_line("[ERROR] /a/B.java:2:3: Msg. [Rule]  \r\n")
        assert diagnostic is not None
        assert diagnostic.rule == "Rule"

    def test_line_without_marker(self, parser: DiagnosticParser) -> None:
        assert parser.parse_line("/a/B.java:2:3: Msg. [Rule]") is None

    def test_marker_without_diagnostic_shape(self, parser: DiagnosticParser) -> None:
        assert parser.parse_line("[ERROR] Checkstyle rule violations were found.") is None

    def test_missing_column(self, parser: DiagnosticParser) -> None:
        assert parser.parse_line("[ERROR] /a/B.java:2: Msg. [Rule]") is None

    def test_zero_line_number_is_skipped(self, parser: DiagnosticParser) -> None:
        assert parser.parse_line("[ERROR] /a/B.java:0:3: Msg. [Rule]") is None

    def test_wrong_extension(self, parser: DiagnosticParser) -> None:
        assert parser.parse_line("[ERROR] /a/B.kt:2:3: Msg. [Rule]") is None

    def test_missing_rule(self, parser: DiagnosticParser) -> None:
        assert parser.parse_line("[ERROR] /a/B.java:2:3: Msg.") is None

    def test_custom_marker_and_extension(self) -> None:
        parser = DiagnosticParser(marker="[WARN]", extension=".kt")
        diagnostic = parser.parse_line("[WARN] /a/B.kt:2:3: Msg. [Rule]")
        assert diagnostic is not None
        assert diagnostic.file == "/a/B.kt"
        assert parser.parse_line("[ERROR] /a/B.java:2:3: Msg. [Rule]") is None


class TestExtract:
    """Tests for whole-output extraction."""

    def test_extract_preserves_order(
        self, parser: DiagnosticParser, sample_build_output: str
    ) -> None:
        diagnostics = parser.extract(sample_build_output)

        assert [(d.file, d.line) for d in diagnostics] == [
            ("/src/main/java/App.java", 3),
            ("/src/main/java/Util.java", 10),
            ("/src/main/java/App.java", 12),
        ]

    def test_extract_skips_unparseable_marker_lines(
        self, parser: DiagnosticParser, sample_build_output: str
    ) -> None:
        """The summary line carries the marker but is not a diagnostic."""
        assert len(parser.error_lines(sample_build_output)) == 4
        assert len(parser.extract(sample_build_output)) == 3

    def test_extract_empty_output(self, parser: DiagnosticParser) -> None:
        assert parser.extract("") == []

    def test_extract_no_errors(self, parser: DiagnosticParser) -> None:
        assert parser.extract("BUILD SUCCESSFUL in 2s\n") == []

    def test_extract_keeps_duplicates(self, parser: DiagnosticParser) -> None:
        line = "[ERROR] /a/B.java:2:3: Msg. [Rule]"
        assert len(parser.extract(f"{line}\n{line}\n")) == 2


class TestHelpers:
    """Tests for error_lines and contains_diagnostics."""

    def test_error_lines_verbatim(self, parser: DiagnosticParser) -> None:
        text = "noise\n  [ERROR] something odd  \nmore noise\n"
        assert parser.error_lines(text) == ["  [ERROR] something odd  "]

    def test_error_lines_empty(self, parser: DiagnosticParser) -> None:
        assert parser.error_lines("") == []

    def test_contains_diagnostics(
        self, parser: DiagnosticParser, sample_build_output: str
    ) -> None:
        assert parser.contains_diagnostics(sample_build_output) is True

    def test_contains_diagnostics_marker_only(self, parser: DiagnosticParser) -> None:
        assert parser.contains_diagnostics("[ERROR] Build failed") is False

    def test_contains_diagnostics_empty(self, parser: DiagnosticParser) -> None:
        assert parser.contains_diagnostics("") is False
