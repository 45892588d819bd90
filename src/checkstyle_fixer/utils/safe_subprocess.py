"""Safe subprocess wrapper for the static-analysis build command.

This module runs the Gradle check that produces Checkstyle output:
- Never uses shell=True; the command is an argument vector
- Merges stdout and stderr, since diagnostics may land on either
- Enforces a timeout on the whole build

A failing build is the normal case when violations exist, so a non-zero
exit status is returned to the caller rather than raised.
"""

from __future__ import annotations

import asyncio
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

import structlog

from checkstyle_fixer.utils.async_helpers import BuildToolError
from checkstyle_fixer.utils.logging import LogEventNames

log = structlog.get_logger()


class CommandTimeoutError(BuildToolError):
    """Raised when the build command times out."""


@dataclass
class CommandResult:
    """Result of a build command execution."""

    output: str  # stdout and stderr interleaved
    return_code: int
    command: list[str]

    @property
    def success(self) -> bool:
        """Return True if the command succeeded."""
        return self.return_code == 0


class SafeBuildRunner:
    """Runs the configured build command and captures its output.

    Example:
        runner = SafeBuildRunner(["./gradlew", "check"], working_dir=Path("."))
        result = await runner.run()
        diagnostics = parser.extract(result.output)
    """

    DEFAULT_TIMEOUT = 1800

    def __init__(
        self,
        command: list[str],
        working_dir: Path | None = None,
        timeout: int = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the runner.

        Args:
            command: Argument vector, e.g. ``["./gradlew", "check", "-x", "test"]``.
            working_dir: Directory to run in (defaults to the current one).
            timeout: Timeout for the whole build in seconds.

        Raises:
            BuildToolError: If the command is empty.
        """
        if not command:
            raise BuildToolError("Build command must not be empty")

        self._command = list(command)
        self._working_dir = working_dir or Path(".")
        self._timeout = timeout

    @property
    def command(self) -> list[str]:
        """Return a copy of the argument vector."""
        return list(self._command)

    def _resolve_executable(self) -> str:
        """Locate the executable, relative to the working directory if needed.

        Raises:
            BuildToolError: If the executable cannot be found.
        """
        executable = self._command[0]

        if "/" in executable or "\\" in executable:
            candidate = Path(executable)
            if not candidate.is_absolute():
                candidate = self._working_dir / candidate
            if candidate.is_file():
                return executable
        elif shutil.which(executable):
            return executable

        raise BuildToolError(f"Build executable not found: {executable} (in {self._working_dir})")

    async def run(self) -> CommandResult:
        """Run the build command.

        Returns:
            CommandResult with the combined output and exit status.

        Raises:
            BuildToolError: If the command cannot be started.
            CommandTimeoutError: If the command times out.
        """
        self._resolve_executable()
        cmd = self.command

        log.info(
            LogEventNames.BUILD_STARTING,
            command=cmd,
            working_dir=str(self._working_dir),
            timeout=self._timeout,
        )

        def run_sync() -> subprocess.CompletedProcess[str]:
            return subprocess.run(
                cmd,
                cwd=self._working_dir,
                stdout=subprocess.PIPE,
                stderr=subprocess.STDOUT,
                text=True,
                errors="replace",
                timeout=self._timeout,
                shell=False,
            )

        try:
            proc = await asyncio.wait_for(
                asyncio.to_thread(run_sync),
                timeout=self._timeout + 5,  # Extra buffer for thread overhead
            )
        except (subprocess.TimeoutExpired, TimeoutError) as e:
            log.error(LogEventNames.BUILD_ERROR, command=cmd, error="timeout")
            raise CommandTimeoutError(
                f"Build timed out after {self._timeout}s: {' '.join(cmd)}"
            ) from e
        except OSError as e:
            log.error(LogEventNames.BUILD_ERROR, command=cmd, error=str(e))
            raise BuildToolError(f"Could not run build command {cmd[0]}: {e}") from e

        result = CommandResult(output=proc.stdout or "", return_code=proc.returncode, command=cmd)
        log.info(
            LogEventNames.BUILD_FINISHED,
            return_code=result.return_code,
            output_lines=result.output.count("\n"),
        )
        return result
