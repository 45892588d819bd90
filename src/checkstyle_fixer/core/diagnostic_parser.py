"""Parser for Checkstyle diagnostics in build output.

This module implements the DiagnosticParser class that turns the combined
stdout/stderr of a Gradle run into Diagnostic records. Gradle prints many
incidental lines containing ``[ERROR]``; only lines that also match the full
diagnostic shape are kept, the rest are skipped without raising:

    [ant:checkstyle] [ERROR] /src/App.java:5:8: Unused import - foo.Bar. [UnusedImports]
"""

from __future__ import annotations

import re

import structlog

from checkstyle_fixer.models.diagnostic import Diagnostic
from checkstyle_fixer.utils.logging import LogEventNames
from checkstyle_fixer.utils.security import sanitize_for_logging

log = structlog.get_logger()

DEFAULT_MARKER = "[ERROR]"
DEFAULT_EXTENSION = ".java"


class DiagnosticParser:
    """Extracts Diagnostic records from raw build output.

    Responsibilities:
    - Select lines carrying the error marker token
    - Match each against one anchored diagnostic pattern
    - Preserve the order in which diagnostics appear in the output

    Example:
        parser = DiagnosticParser()
        for diagnostic in parser.extract(build_output):
            print(diagnostic.location, diagnostic.rule)
    """

    def __init__(
        self,
        marker: str = DEFAULT_MARKER,
        extension: str = DEFAULT_EXTENSION,
    ) -> None:
        """Initialize the DiagnosticParser.

        Args:
            marker: Token a line must contain to be considered at all
            extension: Source-file extension the reported path must end with
        """
        self.marker = marker
        self.extension = extension
        self._pattern = re.compile(
            re.escape(marker)
            + r"\s+(?P<file>\S(?:.*?\S)?"
            + re.escape(extension)
            + r"):(?P<line>[1-9]\d*):(?P<column>[1-9]\d*):\s*(?P<message>.*?)\s*"
            r"\[(?P<rule>[A-Za-z0-9_.]+)\]\s*$"
        )

    def contains_diagnostics(self, text: str) -> bool:
        """Check whether text holds at least one parseable diagnostic."""
        if not text:
            return False
        return any(self.parse_line(line) is not None for line in self.error_lines(text))

    def error_lines(self, text: str) -> list[str]:
        """Return every line carrying the marker token, verbatim and in order."""
        if not text:
            return []
        return [line for line in text.splitlines() if self.marker in line]

    def parse_line(self, line: str) -> Diagnostic | None:
        """Parse a single output line.

        Args:
            line: One line of tool output

        Returns:
            The Diagnostic, or None if the line is not a full diagnostic
        """
        if self.marker not in line:
            return None

        match = self._pattern.search(line.rstrip("\r\n"))
        if not match:
            return None

        return Diagnostic(
            file=match.group("file"),
            line=int(match.group("line")),
            column=int(match.group("column")),
            message=match.group("message").strip(),
            rule=match.group("rule"),
            raw_line=line.strip(),
        )

    def extract(self, text: str) -> list[Diagnostic]:
        """Extract all diagnostics from build output.

        Args:
            text: Combined stdout/stderr of the analysis run

        Returns:
            Diagnostics in order of first appearance; empty if there are none
        """
        diagnostics: list[Diagnostic] = []
        skipped = 0

        for line in self.error_lines(text):
            diagnostic = self.parse_line(line)
            if diagnostic is None:
                skipped += 1
                log.debug(
                    LogEventNames.DIAGNOSTIC_LINE_SKIPPED,
                    line=sanitize_for_logging(line.strip()),
                )
                continue
            diagnostics.append(diagnostic)

        log.info(
            LogEventNames.DIAGNOSTICS_EXTRACTED,
            count=len(diagnostics),
            skipped=skipped,
            files=len({d.file for d in diagnostics}),
        )
        return diagnostics
