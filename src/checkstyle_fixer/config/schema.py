"""Pydantic models for configuration schema."""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Tasks the original Gradle invocation skips so only static checks run
DEFAULT_EXCLUDED_TASKS = (
    "generateAlphaSchema",
    "compileJava",
    "compileTestJava",
    "compileTestDataJava",
    "compileTestFunctionalJava",
    "test",
    "testFunctional",
)


def _default_build_command() -> list[str]:
    command = ["./gradlew", "check"]
    for task in DEFAULT_EXCLUDED_TASKS:
        command.extend(["-x", task])
    return command


class OllamaConfig(BaseModel):
    """Generation service (Ollama) configuration."""

    base_url: str = "http://localhost:11434"
    model: str = "qwen2.5-coder:7b"
    temperature: float = Field(0.1, ge=0.0, le=2.0)
    timeout: float = Field(120.0, gt=0, description="Fix request timeout in seconds")
    health_timeout: float = Field(5.0, gt=0, description="Version probe timeout in seconds")
    allow_remote_host: bool = False

    @model_validator(mode="after")
    def check_remote_host(self) -> "OllamaConfig":
        """Reject non-loopback service URLs unless explicitly allowed."""
        from urllib.parse import urlparse

        from ..utils.security import validate_service_url

        if not validate_service_url(self.base_url, allow_remote=self.allow_remote_host):
            parsed = urlparse(self.base_url)
            if parsed.scheme in ("http", "https") and parsed.hostname:
                raise ValueError(
                    f"Ollama host {parsed.hostname} not allowed. "
                    f"Set allow_remote_host=true to use non-localhost hosts."
                )
            raise ValueError(f"Invalid Ollama URL: {self.base_url}")
        return self


class BuildConfig(BaseModel):
    """Static-analysis build command configuration."""

    command: list[str] = Field(default_factory=_default_build_command)
    working_dir: Path = Path(".")
    timeout: int = Field(1800, ge=10, description="Build timeout in seconds")

    @field_validator("command")
    @classmethod
    def validate_command(cls, v: list[str]) -> list[str]:
        """Require a non-empty argument vector."""
        if not v or not v[0].strip():
            raise ValueError("Build command must not be empty")
        return v


class ExtractionConfig(BaseModel):
    """Diagnostic extraction configuration."""

    marker: str = Field("[ERROR]", min_length=1)
    extension: str = ".java"

    @field_validator("extension")
    @classmethod
    def validate_extension(cls, v: str) -> str:
        """Require a dotted extension such as ``.java``."""
        if not v.startswith(".") or len(v) < 2:
            raise ValueError(f"Extension must look like '.java', got: {v!r}")
        return v


class FixingConfig(BaseModel):
    """Fix application configuration."""

    atomic_writes: bool = True
    context_lines: int = Field(5, ge=0, le=100)


class FileLoggingConfig(BaseModel):
    """File logging configuration."""

    enabled: bool = False
    path: Path = Path("checkstyle-fixer.log")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "console"
    file: FileLoggingConfig = FileLoggingConfig()


class FixerConfig(BaseSettings):
    """Root configuration for checkstyle-fixer."""

    ollama: OllamaConfig = OllamaConfig()
    build: BuildConfig = BuildConfig()
    extraction: ExtractionConfig = ExtractionConfig()
    fixing: FixingConfig = FixingConfig()
    logging: LoggingConfig = LoggingConfig()

    model_config = SettingsConfigDict(
        env_prefix="CHECKSTYLE_FIXER_",
        env_nested_delimiter="__",
    )
