"""Configuration loader with YAML parsing and environment variable substitution."""

import os
import re
from pathlib import Path

import yaml

from .schema import FixerConfig

ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


def substitute_env_vars(text: str) -> str:
    """
    Replace ${VAR_NAME} patterns with environment variable values.

    Args:
        text: Text containing ${VAR_NAME} patterns

    Returns:
        Text with environment variables substituted

    Raises:
        ValueError: If a referenced environment variable is not found
    """

    def replacer(match: re.Match[str]) -> str:
        var_name = match.group(1)
        value = os.environ.get(var_name)
        if value is None:
            raise ValueError(f"Environment variable {var_name} not found")
        return value

    return ENV_VAR_PATTERN.sub(replacer, text)


def load_config(path: Path | None = None) -> FixerConfig:
    """
    Load configuration, optionally from a YAML file.

    Without a path the defaults apply, still overridable through
    ``CHECKSTYLE_FIXER_*`` environment variables.

    Args:
        path: Path to YAML configuration file

    Returns:
        Validated FixerConfig instance

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If environment variables are missing or the YAML is not a mapping
        ValidationError: If config doesn't match schema
    """
    if path is None:
        return FixerConfig()

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    raw_yaml = path.read_text()
    config_dict = yaml.safe_load(substitute_env_vars(raw_yaml)) or {}

    if not isinstance(config_dict, dict):
        raise ValueError(f"Configuration root must be a mapping: {path}")

    return FixerConfig.model_validate(config_dict)
