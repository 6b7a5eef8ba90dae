"""
clipstudy.exceptions - Custom exception classes.

All Clipstudy-specific exceptions inherit from ClipstudyError.
"""

from __future__ import annotations

from pathlib import Path


class ClipstudyError(Exception):
    """Base exception for all Clipstudy errors."""

    pass


class ConfigError(ClipstudyError):
    """Configuration loading or validation error."""

    pass


class NotAFileError(ClipstudyError):
    """Source path does not name a regular file."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"No such file: {path}")


class ToolError(ClipstudyError):
    """An external tool (ffprobe or ffmpeg) failed."""

    def __init__(
        self,
        tool: str,
        path: Path | None,
        message: str,
        returncode: int | None = None,
        stderr: str | None = None,
    ):
        self.tool = tool
        self.path = path
        self.returncode = returncode
        self.stderr = stderr
        detail = f"{tool} failed"
        if path is not None:
            detail += f" on {path}"
        detail += f": {message}"
        if stderr:
            detail += f"\n{_tail(stderr)}"
        super().__init__(detail)


class ProbeError(ToolError):
    """Metadata probing failed (process, encoding or schema)."""

    pass


class ExtractionProcessError(ToolError):
    """A decode/encode invocation exited non-zero or could not be spawned."""

    pass


class MetadataParseError(ClipstudyError):
    """Malformed stream record or fraction text."""

    pass


class ExtractionOrderError(ClipstudyError):
    """Extractions were not sorted by earliest time."""

    pass


class TagReadError(ClipstudyError):
    """Embedded tags could not be read from a file."""

    pass


class NoAttachedPictureError(ClipstudyError):
    """Tags were read but contain no embedded picture."""

    pass


class PlanError(ClipstudyError):
    """Extraction plan file could not be loaded."""

    pass


class DependencyError(ClipstudyError):
    """Required dependency missing or misconfigured."""

    def __init__(self, dependency: str, message: str, install_hint: str | None = None):
        self.dependency = dependency
        self.message = message
        self.install_hint = install_hint
        super().__init__(f"{dependency}: {message}")


def _tail(text: str, lines: int = 10) -> str:
    return "\n".join(text.strip().splitlines()[-lines:])
