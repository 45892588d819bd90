"""Data models for fix requests, outcomes and per-file sessions."""

from dataclasses import dataclass, field
from enum import Enum

from .diagnostic import Diagnostic


class FixStatus(Enum):
    """Outcome of one fix attempt."""

    APPLIED = "applied"
    WOULD_APPLY = "would_apply"
    FILE_NOT_FOUND = "file_not_found"
    READ_FAILED = "read_failed"
    SERVICE_UNAVAILABLE = "service_unavailable"
    MALFORMED_RESPONSE = "malformed_response"
    EMPTY_FIX = "empty_fix"
    WRITE_FAILED = "write_failed"
    ERROR = "error"

    @property
    def succeeded(self) -> bool:
        """True for an applied fix, or one a dry run would have applied."""
        return self in (FixStatus.APPLIED, FixStatus.WOULD_APPLY)


@dataclass(frozen=True)
class FixRequest:
    """One diagnostic plus the file content snapshot it must be fixed against."""

    diagnostic: Diagnostic
    file_content: str
    prompt: str


@dataclass(frozen=True)
class FixOutcome:
    """Result of attempting to fix a single diagnostic."""

    diagnostic: Diagnostic
    status: FixStatus
    error: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status.succeeded


@dataclass
class FileFixSession:
    """Evolving state of one file while its diagnostics are fixed in order.

    ``current_content`` always holds the last successfully written version,
    or the original on-disk content while no fix has succeeded.
    """

    path: str
    original_content: str
    current_content: str = ""
    applied_count: int = 0
    failed_count: int = 0
    would_apply_count: int = 0
    outcomes: list[FixOutcome] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.current_content:
            self.current_content = self.original_content

    def record_success(self, outcome: FixOutcome, new_content: str) -> None:
        """Advance the session to ``new_content``.

        Called after a confirmed write, or with a WOULD_APPLY outcome in a dry
        run, where the content moves forward without touching the disk.
        """
        self.current_content = new_content
        if outcome.status is FixStatus.WOULD_APPLY:
            self.would_apply_count += 1
        else:
            self.applied_count += 1
        self.outcomes.append(outcome)

    def record_failure(self, outcome: FixOutcome) -> None:
        """Count a failed attempt; the current content is left untouched."""
        self.failed_count += 1
        self.outcomes.append(outcome)

    def summary(self) -> "FileFixSummary":
        return FileFixSummary(
            path=self.path,
            total=len(self.outcomes),
            applied=self.applied_count,
            failed=self.failed_count,
            would_apply=self.would_apply_count,
            outcomes=tuple(self.outcomes),
        )


@dataclass(frozen=True)
class FileFixSummary:
    """Per-file counts reported once a file's diagnostics are exhausted."""

    path: str
    total: int
    applied: int
    failed: int
    would_apply: int = 0
    outcomes: tuple[FixOutcome, ...] = ()

    @classmethod
    def all_failed(
        cls, path: str, diagnostics: list[Diagnostic], status: FixStatus, error: str
    ) -> "FileFixSummary":
        """Summary for a group that could not be attempted at all."""
        outcomes = tuple(FixOutcome(d, status, error) for d in diagnostics)
        return cls(
            path=path,
            total=len(outcomes),
            applied=0,
            failed=len(outcomes),
            outcomes=outcomes,
        )


@dataclass(frozen=True)
class RunSummary:
    """End-of-run totals across all files."""

    files: tuple[FileFixSummary, ...] = ()

    @property
    def files_processed(self) -> int:
        return len(self.files)

    @property
    def total(self) -> int:
        return sum(f.total for f in self.files)

    @property
    def applied(self) -> int:
        return sum(f.applied for f in self.files)

    @property
    def failed(self) -> int:
        return sum(f.failed for f in self.files)

    @property
    def would_apply(self) -> int:
        """Fixes a dry run produced but did not write."""
        return sum(f.would_apply for f in self.files)

    @property
    def failures(self) -> tuple[FixOutcome, ...]:
        """Every failed outcome, in processing order."""
        return tuple(o for f in self.files for o in f.outcomes if not o.succeeded)
