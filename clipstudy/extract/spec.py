"""
clipstudy.extract.spec - What to extract, and how to ask ffmpeg for it.

An ExtractionSpec is either an ImageSpec (one still frame at an instant) or
an AudioSpec (a clip covering a period). Specs encode themselves as ffmpeg
output options relative to a decode pass that has already fast-seeked to
``time_base``.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Union

from clipstudy.period import Period
from clipstudy.probe.streams import StreamId

MAX_IMAGE_WIDTH = 1024
MAX_IMAGE_HEIGHT = 768


def format_seconds(seconds: float) -> str:
    """Format a time for ``-ss``/``-t`` with millisecond precision."""
    return f"{seconds:.3f}"


def scale_filter(max_width: int, max_height: int) -> str:
    """Scale down (never up) to fit the box, preserving aspect ratio."""
    return f"scale=iw*min(1\\,min({max_width}/iw\\,{max_height}/ih)):-1"


@dataclass(frozen=True)
class Id3Metadata:
    """Tags to embed in an extracted audio clip. Unset fields are omitted."""

    genre: str | None = None
    artist: str | None = None
    album: str | None = None
    track_number: tuple[int, int] | None = None
    track_name: str | None = None
    lyrics: str | None = None

    def tags(self) -> list[tuple[str, str]]:
        """Return (key, value) pairs in ffmpeg's metadata key names."""
        pairs: list[tuple[str, str]] = []
        if self.genre is not None:
            pairs.append(("genre", self.genre))
        if self.artist is not None:
            pairs.append(("artist", self.artist))
        if self.album is not None:
            pairs.append(("album", self.album))
        if self.track_number is not None:
            track, total = self.track_number
            pairs.append(("track", f"{track}/{total}"))
        if self.track_name is not None:
            pairs.append(("title", self.track_name))
        if self.lyrics is not None:
            pairs.append(("lyrics", self.lyrics))
        return pairs

    def args(self) -> list[str]:
        args: list[str] = []
        for key, value in self.tags():
            # One argv token per key=value pair.
            args.extend(["-metadata", f"{key}={value}"])
        return args


@dataclass(frozen=True)
class ImageSpec:
    """Extract one still image at ``time``.

    Only works with genuine video streams, not attached pictures.
    """

    time: float


@dataclass(frozen=True)
class AudioSpec:
    """Extract an audio clip covering ``period``.

    ``stream`` of None lets ffmpeg choose its default audio stream.
    """

    period: Period
    stream: StreamId | None = None
    metadata: Id3Metadata = field(default_factory=Id3Metadata)


ExtractionSpec = Union[ImageSpec, AudioSpec]


def earliest_time(spec: ExtractionSpec) -> float:
    """The earliest time at which we might need to decode data."""
    if isinstance(spec, ImageSpec):
        return spec.time
    if isinstance(spec, AudioSpec):
        return spec.period.begin
    raise TypeError(f"Unknown extraction spec: {spec!r}")


def can_be_batched(spec: ExtractionSpec) -> bool:
    """Can this extraction share a decode pass with others?"""
    if isinstance(spec, ImageSpec):
        # Batching images would mean decoding the whole video, whereas a
        # fast seek grabs one frame almost instantly.
        return False
    if isinstance(spec, AudioSpec):
        return True
    raise TypeError(f"Unknown extraction spec: {spec!r}")


def encode_spec(
    spec: ExtractionSpec,
    time_base: float,
    max_width: int = MAX_IMAGE_WIDTH,
    max_height: int = MAX_IMAGE_HEIGHT,
) -> list[str]:
    """Output options for ``spec`` in a pass that starts at ``time_base``."""
    if isinstance(spec, ImageSpec):
        return [
            "-ss",
            format_seconds(spec.time - time_base),
            "-frames:v",
            "1",
            "-vf",
            scale_filter(max_width, max_height),
            "-f",
            "image2",
        ]
    if isinstance(spec, AudioSpec):
        args: list[str] = []
        if spec.stream is not None:
            args.extend(["-map", spec.stream.map_arg()])
        args.extend(spec.metadata.args())
        args.extend(
            [
                "-ss",
                format_seconds(spec.period.begin - time_base),
                "-t",
                format_seconds(spec.period.duration()),
            ]
        )
        return args
    raise TypeError(f"Unknown extraction spec: {spec!r}")


@dataclass(frozen=True)
class Extraction:
    """A spec plus the file it should be written to."""

    path: Path
    spec: ExtractionSpec

    def earliest_time(self) -> float:
        return earliest_time(self.spec)

    def can_be_batched(self) -> bool:
        return can_be_batched(self.spec)

    def encode(
        self,
        time_base: float,
        max_width: int = MAX_IMAGE_WIDTH,
        max_height: int = MAX_IMAGE_HEIGHT,
    ) -> list[str]:
        """Output options followed by the destination path."""
        return [*encode_spec(self.spec, time_base, max_width, max_height), str(self.path)]
