"""Data models for source context."""

from dataclasses import dataclass


@dataclass(frozen=True)
class CodeContext:
    """Code snippet with surrounding context."""

    file_path: str
    start_line: int
    end_line: int
    content: str
    highlight_line: int | None = None  # Line to emphasize (diagnostic location)

    @property
    def line_count(self) -> int:
        """Number of lines in this code context."""
        return self.end_line - self.start_line + 1
