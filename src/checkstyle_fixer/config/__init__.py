"""Configuration loading and validation."""

from .loader import load_config
from .schema import (
    BuildConfig,
    ExtractionConfig,
    FixerConfig,
    FixingConfig,
    LoggingConfig,
    OllamaConfig,
)

__all__ = [
    # Loader
    "load_config",
    # Root config
    "FixerConfig",
    # Sections
    "BuildConfig",
    "ExtractionConfig",
    "FixingConfig",
    "LoggingConfig",
    "OllamaConfig",
]
