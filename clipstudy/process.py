"""
clipstudy.process - Non-blocking execution of ffmpeg and ffprobe.

Each call spawns exactly one process and suspends the caller until it exits.
"""

from __future__ import annotations

import asyncio
import shlex
from pathlib import Path

from clipstudy.exceptions import ExtractionProcessError, ToolError
from clipstudy.logging import get_logger

LOGGER = get_logger("process")


async def run_tool(
    argv: list[str],
    tool: str,
    path: Path | None = None,
    error_cls: type[ToolError] = ExtractionProcessError,
) -> bytes:
    """Run a command to completion and return its stdout.

    Args:
        argv: Command and arguments, one token per element
        tool: Tool name reported in errors
        path: Source file the command operates on, reported in errors
        error_cls: ToolError subclass raised on failure

    Returns:
        Raw bytes written to stdout

    Raises:
        ToolError: If the process cannot be spawned or exits non-zero
    """
    LOGGER.debug("Running command: %s", shlex.join(argv))
    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise error_cls(tool, path, f"could not start {argv[0]}: {e}") from e

    try:
        stdout, stderr = await process.communicate()
    except asyncio.CancelledError:
        if process.returncode is None:
            process.kill()
            await process.wait()
        raise

    if process.returncode != 0:
        raise error_cls(
            tool,
            path,
            f"exit status {process.returncode}",
            returncode=process.returncode,
            stderr=stderr.decode("utf-8", errors="replace"),
        )
    return stdout
