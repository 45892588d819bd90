"""Data models for static-analysis diagnostics."""

from dataclasses import dataclass, field


@dataclass(frozen=True)
class Diagnostic:
    """A single static-analysis finding.

    Built by the diagnostic parser from one matching tool-output line and
    never mutated afterwards.
    """

    file: str  # Path as printed by the tool (absolute or repo-relative)
    line: int  # 1-based
    column: int  # 1-based
    message: str  # e.g. "Unused import - java.util.List."
    rule: str  # e.g. "UnusedImports"
    raw_line: str = field(default="", compare=False, repr=False)

    def __post_init__(self) -> None:
        if self.line < 1:
            raise ValueError(f"Diagnostic line must be >= 1, got {self.line}")
        if self.column < 1:
            raise ValueError(f"Diagnostic column must be >= 1, got {self.column}")
        if not self.rule:
            raise ValueError("Diagnostic rule must not be empty")

    @property
    def location(self) -> str:
        """Location in ``file:line:column`` form."""
        return f"{self.file}:{self.line}:{self.column}"
