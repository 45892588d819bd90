"""Protocol definitions for pluggable adapters."""

from .llm import GenerationService

__all__ = ["GenerationService"]
