"""
clipstudy.probe.streams - Stream metadata parsed from ffprobe output.

ffprobe is run with ``-show_streams -of json``; only the fields needed to
pick streams are validated, everything else in a record is ignored.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from enum import Enum
from fractions import Fraction
from types import MappingProxyType
from typing import Annotated, Any, ClassVar, Mapping

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    PlainSerializer,
    ValidationError,
)

from clipstudy.exceptions import MetadataParseError
from clipstudy.lang import Lang

FRACTION_PATTERN = re.compile(r"^(\d+)/(\d+)$")


@dataclass(frozen=True)
class StreamId:
    """Zero-based index of a stream within the file that produced it."""

    index: int

    def map_arg(self) -> str:
        """Value for ffmpeg's ``-map`` option, selecting from input 0."""
        return f"0:{self.index}"


@dataclass(frozen=True)
class CodecType:
    """Codec classification of a stream.

    ``audio``, ``video`` and ``subtitle`` are known; any other string
    (``data``, ``attachment``...) is kept as-is rather than rejected.
    """

    name: str

    AUDIO: ClassVar[CodecType]
    VIDEO: ClassVar[CodecType]
    SUBTITLE: ClassVar[CodecType]

    @classmethod
    def parse(cls, value: Any) -> CodecType:
        if isinstance(value, CodecType):
            return value
        if not isinstance(value, str):
            raise ValueError(f"codec_type must be a string, got {value!r}")
        return cls(value)

    @property
    def is_other(self) -> bool:
        return self not in (CodecType.AUDIO, CodecType.VIDEO, CodecType.SUBTITLE)

    def __str__(self) -> str:
        return self.name


CodecType.AUDIO = CodecType("audio")
CodecType.VIDEO = CodecType("video")
CodecType.SUBTITLE = CodecType("subtitle")


def parse_fraction(text: str) -> Fraction:
    """Parse ffprobe's ``"num/den"`` notation.

    Raises:
        MetadataParseError: If the text is malformed or the denominator is 0
    """
    match = FRACTION_PATTERN.match(text)
    if not match:
        raise MetadataParseError(f"Expected fraction: {text!r}")
    numerator, denominator = int(match.group(1)), int(match.group(2))
    if denominator == 0:
        raise MetadataParseError(f"Found fraction with a denominator of 0: {text!r}")
    return Fraction(numerator, denominator)


class ImageSourceType(Enum):
    """What kind of image source a file contains."""

    # A true video stream, which presumably changes over time.
    VIDEO = "video"
    # An attached picture, which is probably album art.
    ATTACHED_PIC = "attached_pic"


def _freeze(value: dict[str, Any] | None) -> Mapping[str, Any] | None:
    return None if value is None else MappingProxyType(dict(value))


def _thaw(value: Mapping[str, Any] | None) -> dict[str, Any] | None:
    return None if value is None else dict(value)


# Serialized as the bare name so dumped records keep ffprobe's shape.
CodecTypeField = Annotated[
    CodecType,
    BeforeValidator(CodecType.parse),
    PlainSerializer(str, return_type=str),
]

# Read-only views; a probed stream never changes after parsing.
TagsField = Annotated[
    dict[str, str] | None,
    AfterValidator(_freeze),
    PlainSerializer(_thaw, return_type=Any),
]
DispositionField = Annotated[
    dict[str, int] | None,
    AfterValidator(_freeze),
    PlainSerializer(_thaw, return_type=Any),
]


class Stream(BaseModel):
    """An individual content stream within a container."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True, extra="ignore")

    index: int
    codec_type: CodecTypeField
    codec_name: str | None = None
    r_frame_rate: str | None = None
    tags: TagsField = None
    disposition: DispositionField = None

    @property
    def stream_id(self) -> StreamId:
        return StreamId(self.index)

    def language(self) -> Lang | None:
        """Return the language tagged on this stream, if it resolves."""
        if not self.tags or "language" not in self.tags:
            return None
        try:
            return Lang.iso639(self.tags["language"])
        except ValueError:
            return None

    def is_attached_pic(self) -> bool:
        """Does this stream look like cover art attached to a music file?"""
        if not self.disposition:
            return False
        return self.disposition.get("attached_pic") == 1

    def frame_rate(self) -> Fraction | None:
        if self.r_frame_rate is None:
            return None
        return parse_fraction(self.r_frame_rate)


class ProbeResult(BaseModel):
    """Top-level shape of ``ffprobe -show_streams -of json``."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    streams: list[Stream]


def parse_probe_output(text: str) -> list[Stream]:
    """Decode ffprobe JSON into streams, in container order.

    Raises:
        MetadataParseError: If the JSON is invalid or does not match the schema
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise MetadataParseError(f"Invalid probe JSON: {e}") from e
    try:
        return list(ProbeResult.model_validate(data).streams)
    except ValidationError as e:
        raise MetadataParseError(f"Unexpected probe output: {e}") from e

