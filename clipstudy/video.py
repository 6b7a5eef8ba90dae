"""
clipstudy.video - A media file on disk and the streams inside it.

A Video is probed once with ffprobe and never changes afterwards; every
query reads that snapshot. Extraction and streaming run ffmpeg against the
same path.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from clipstudy.config import ClipstudyConfig
from clipstudy.exceptions import MetadataParseError, ProbeError
from clipstudy.extract.pcm import AudioPipe, open_audio_stream
from clipstudy.extract.scheduler import run_extractions
from clipstudy.extract.spec import Extraction
from clipstudy.lang import Lang
from clipstudy.logging import get_logger
from clipstudy.probe.streams import (
    CodecType,
    ImageSourceType,
    Stream,
    StreamId,
    parse_probe_output,
)
from clipstudy.process import run_tool
from clipstudy.tags import Picture, read_attached_picture
from clipstudy.ui import Ui
from clipstudy.validation import validate_source_file

LOGGER = get_logger("video")


@dataclass(frozen=True)
class Video:
    """A probed media file.

    Attributes:
        path: Source file
        streams: Streams in container order
        config: Tool settings used for extraction
    """

    path: Path
    streams: tuple[Stream, ...]
    config: ClipstudyConfig = field(default_factory=ClipstudyConfig, compare=False)

    @classmethod
    async def probe(cls, path: Path, config: ClipstudyConfig | None = None) -> Video:
        """Probe ``path`` with ffprobe.

        Raises:
            NotAFileError: If path is not a regular file
            ProbeError: If ffprobe fails or its output cannot be parsed
        """
        path = Path(path)
        config = config or ClipstudyConfig()
        validate_source_file(path)

        argv = [
            config.ffprobe_binary,
            "-v",
            "quiet",
            "-show_streams",
            "-of",
            "json",
            str(path),
        ]
        stdout = await run_tool(argv, tool="ffprobe", path=path, error_cls=ProbeError)
        try:
            text = stdout.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ProbeError("ffprobe", path, "output is not valid UTF-8") from e
        LOGGER.debug("Video metadata: %s", text)

        try:
            streams = parse_probe_output(text)
        except MetadataParseError as e:
            raise ProbeError("ffprobe", path, str(e)) from e
        return cls(path=path, streams=tuple(streams), config=config)

    @classmethod
    def probe_sync(cls, path: Path, config: ClipstudyConfig | None = None) -> Video:
        """Blocking wrapper around probe() for callers without an event loop."""
        return asyncio.run(cls.probe(path, config))

    def file_name(self) -> str:
        return self.path.name

    def file_stem(self) -> str:
        """File name stripped of its extension."""
        return self.path.stem

    def primary_video_stream(self) -> Stream | None:
        """Our primary video stream, or the closest equivalent."""
        return next((s for s in self.streams if s.codec_type == CodecType.VIDEO), None)

    def image_source_type(self) -> ImageSourceType | None:
        """What type of image source does this file contain?"""
        primary = self.primary_video_stream()
        if primary is None:
            return None
        if primary.is_attached_pic():
            return ImageSourceType.ATTACHED_PIC
        return ImageSourceType.VIDEO

    def audio_streams(self) -> list[Stream]:
        return [s for s in self.streams if s.codec_type == CodecType.AUDIO]

    def audio_track_for(self, lang: Lang) -> StreamId | None:
        """Choose the first audio stream tagged with ``lang``."""
        for position, stream in enumerate(self.streams):
            if stream.codec_type == CodecType.AUDIO and stream.language() == lang:
                return StreamId(position)
        return None

    async def extract(
        self, extractions: Sequence[Extraction], ui: Ui | None = None
    ) -> int:
        """Perform sorted extractions as efficiently as possible.

        See clipstudy.extract.scheduler.run_extractions.
        """
        return await run_extractions(self.path, extractions, self.config, ui=ui)

    def attached_pic(self) -> Picture:
        """Get the attached picture, typically album art on a music file."""
        return read_attached_picture(self.path)

    async def open_audio_stream(
        self,
        stream: StreamId | None = None,
        sample_rate: int | None = None,
    ) -> tuple[asyncio.StreamReader, AudioPipe]:
        """Start streaming mono 16-bit native-endian PCM from this file."""
        rate = sample_rate if sample_rate is not None else self.config.sample_rate
        return await open_audio_stream(self.path, stream, rate, self.config)
