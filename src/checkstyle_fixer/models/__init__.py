"""Data models and transfer objects."""

from .analysis import CodeContext
from .diagnostic import Diagnostic
from .fix import (
    FileFixSession,
    FileFixSummary,
    FixOutcome,
    FixRequest,
    FixStatus,
    RunSummary,
)

__all__ = [
    # Diagnostic models
    "Diagnostic",
    # Source context
    "CodeContext",
    # Fix models
    "FixStatus",
    "FixRequest",
    "FixOutcome",
    "FileFixSession",
    "FileFixSummary",
    "RunSummary",
]
