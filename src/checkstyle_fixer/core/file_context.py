"""Source file access for the fix pipeline.

This module implements the FileContextLoader class that reads source files
named by diagnostics and writes fixed content back. It handles:
- Existence checks immediately before use (files may change mid-run)
- Line windows around a diagnostic, clamped at file boundaries
- Whole-file replacement, atomic via temp-file-and-rename by default
"""

from __future__ import annotations

import os
import tempfile
from pathlib import Path

import structlog

from checkstyle_fixer.models.analysis import CodeContext
from checkstyle_fixer.utils.async_helpers import SourceFileNotFoundError

log = structlog.get_logger()


class FileContextLoader:
    """Reads and writes the source files diagnostics point at.

    Relative paths are resolved against ``base_dir`` (the build's working
    directory), since Gradle may print repo-relative paths.

    Example:
        loader = FileContextLoader(base_dir=Path("."))
        content = loader.read("src/main/java/App.java")
        window = loader.read_window("src/main/java/App.java", line=42, radius=5)
    """

    def __init__(self, base_dir: Path | None = None, atomic_writes: bool = True) -> None:
        """Initialize the FileContextLoader.

        Args:
            base_dir: Directory relative paths are resolved against
            atomic_writes: Write through a temp file and rename when True
        """
        self._base_dir = base_dir or Path(".")
        self._atomic_writes = atomic_writes

    def resolve(self, path: str) -> Path:
        """Resolve a diagnostic path to a filesystem path."""
        candidate = Path(path)
        if candidate.is_absolute():
            return candidate
        return self._base_dir / candidate

    def exists(self, path: str) -> bool:
        """Check that the file is present right now."""
        return self.resolve(path).is_file()

    def read(self, path: str) -> str:
        """Read the full current text of a file.

        Args:
            path: Path as reported by the diagnostic

        Returns:
            The file content

        Raises:
            SourceFileNotFoundError: If the file does not exist at call time
            UnicodeDecodeError: If the file is not valid UTF-8
            OSError: If the file exists but cannot be read
        """
        resolved = self.resolve(path)
        if not resolved.is_file():
            raise SourceFileNotFoundError(path)

        try:
            with resolved.open(encoding="utf-8", newline="") as f:
                return f.read()
        except FileNotFoundError as e:
            # Removed between the check and the open
            raise SourceFileNotFoundError(path) from e

    def read_window(self, path: str, line: int, radius: int) -> CodeContext:
        """Read lines ``[max(1, line - radius), min(last, line + radius)]``.

        Out-of-range requests are clamped, never rejected.

        Args:
            path: Path as reported by the diagnostic
            line: 1-based line to centre the window on
            radius: Number of lines on each side

        Returns:
            CodeContext with the window's text and bounds

        Raises:
            SourceFileNotFoundError: If the file does not exist at call time
        """
        lines = self.read(path).splitlines()
        last_line = max(1, len(lines))

        start = max(1, line - radius)
        end = min(last_line, line + radius)
        if start > end:
            start = end

        return CodeContext(
            file_path=path,
            start_line=start,
            end_line=end,
            content="\n".join(lines[start - 1 : end]),
            highlight_line=line if start <= line <= end else None,
        )

    def write(self, path: str, content: str) -> None:
        """Replace the whole file body with ``content``.

        Raises:
            UnicodeEncodeError: If ``content`` is not encodable as UTF-8;
                the file is left untouched
            OSError: If the file cannot be written
        """
        data = content.encode("utf-8")
        resolved = self.resolve(path)

        if not self._atomic_writes:
            resolved.write_bytes(data)
            return

        fd, tmp_name = tempfile.mkstemp(
            dir=resolved.parent, prefix=f".{resolved.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
            if resolved.exists():
                os.chmod(tmp_name, resolved.stat().st_mode & 0o7777)
            os.replace(tmp_name, resolved)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        log.debug("file_written", path=str(resolved), bytes=len(data))
