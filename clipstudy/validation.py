"""
clipstudy.validation - Dependency checks and input validation.

Validates the environment and source files before processing.
"""

from __future__ import annotations

import shutil
import subprocess
from pathlib import Path

from clipstudy.exceptions import DependencyError, NotAFileError

INSTALL_HINT = "Install with: brew install ffmpeg (macOS) or apt install ffmpeg (Linux)"


def tool_version(binary: str) -> str:
    """Return the version reported by ``<binary> -version``.

    Raises:
        DependencyError: If the binary is not on PATH
    """
    path = shutil.which(binary)
    if not path:
        raise DependencyError(binary, f"{binary} not found in PATH", INSTALL_HINT)

    try:
        proc = subprocess.run(
            [path, "-version"],
            capture_output=True,
            text=True,
            timeout=5,
        )
        version_line = proc.stdout.split("\n")[0]
        return version_line.split()[2] if version_line else "unknown"
    except (subprocess.TimeoutExpired, IndexError, OSError):
        return "unknown"


def validate_source_file(path: Path) -> Path:
    """Return ``path`` if it names a regular file.

    Raises:
        NotAFileError: If the path is missing or not a regular file
    """
    if not path.is_file():
        raise NotAFileError(path)
    return path
