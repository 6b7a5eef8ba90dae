"""
clipstudy.extract.pcm - Continuous raw audio decoding through a pipe.

Equivalent to::

    ffmpeg -v quiet -i input.mp4 -acodec pcm_s16le -f s16le -ac 1 -ar 8000 -

The stream holds mono 16-bit signed PCM in the host's native byte order.
"""

from __future__ import annotations

import asyncio
import shlex
import sys
from pathlib import Path
from typing import Any, Generator

from clipstudy.config import ClipstudyConfig
from clipstudy.exceptions import ExtractionProcessError
from clipstudy.logging import get_logger
from clipstudy.probe.streams import StreamId

LOGGER = get_logger("extract.pcm")


def native_pcm_format() -> str:
    """``s16le`` or ``s16be``, matching this machine's byte order."""
    return "s16be" if sys.byteorder == "big" else "s16le"


def build_pcm_command(
    source: Path,
    stream: StreamId | None,
    sample_rate: int,
    ffmpeg_binary: str = "ffmpeg",
) -> list[str]:
    encoding = native_pcm_format()
    argv = [ffmpeg_binary, "-v", "quiet", "-nostdin", "-i", str(source)]
    if stream is not None:
        argv.extend(["-map", stream.map_arg()])
    argv.extend(
        [
            "-acodec",
            f"pcm_{encoding}",
            "-f",
            encoding,
            "-ac",
            "1",
            "-ar",
            str(sample_rate),
            "-",
        ]
    )
    return argv


class AudioPipe:
    """Handle on a running ffmpeg process that streams PCM to stdout.

    Awaiting the handle (or ``wait()``) blocks until ffmpeg exits and raises
    ExtractionProcessError on a non-zero status. The stdout reader and this
    handle are independent: drain the reader, then await the handle.

    Used as an async context manager, leaving the block terminates and
    reaps the process if it is still running.
    """

    def __init__(self, process: asyncio.subprocess.Process, source: Path) -> None:
        self._process = process
        self._source = source
        self._done = False

    @property
    def pid(self) -> int:
        return self._process.pid

    @property
    def returncode(self) -> int | None:
        return self._process.returncode

    async def wait(self) -> None:
        status = await self._process.wait()
        self._done = True
        if status != 0:
            raise ExtractionProcessError(
                "ffmpeg",
                self._source,
                f"audio stream exited with status {status}",
                returncode=status,
            )

    def __await__(self) -> Generator[Any, None, None]:
        return self.wait().__await__()

    def terminate(self) -> None:
        """Ask ffmpeg to stop. Safe to call after it has exited."""
        if self._process.returncode is None:
            LOGGER.debug("Terminating audio stream process %d", self._process.pid)
            try:
                self._process.terminate()
            except ProcessLookupError:
                pass

    async def close(self) -> None:
        """Terminate if still running and reap the process."""
        if not self._done:
            self.terminate()
            await self._process.wait()
            self._done = True

    async def __aenter__(self) -> AudioPipe:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()


async def open_audio_stream(
    source: Path,
    stream: StreamId | None = None,
    sample_rate: int = 16000,
    config: ClipstudyConfig | None = None,
) -> tuple[asyncio.StreamReader, AudioPipe]:
    """Start decoding ``source`` to raw PCM.

    Args:
        source: Media file to decode
        stream: Audio stream to decode, or None for ffmpeg's default choice
        sample_rate: Output sample rate in Hz
        config: Tool settings

    Returns:
        (reader, handle): a buffered reader over the PCM bytes, and the
        handle to await for the exit status

    Raises:
        ExtractionProcessError: If ffmpeg cannot be started
    """
    config = config or ClipstudyConfig()
    argv = build_pcm_command(source, stream, sample_rate, config.ffmpeg_binary)
    LOGGER.debug("Running command: %s", shlex.join(argv))
    try:
        process = await asyncio.create_subprocess_exec(
            *argv,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        raise ExtractionProcessError(
            "ffmpeg", source, f"could not start {argv[0]}: {e}"
        ) from e

    assert process.stdout is not None
    return process.stdout, AudioPipe(process, source)
