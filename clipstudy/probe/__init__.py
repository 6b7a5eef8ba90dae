"""
clipstudy.probe - Stream metadata from ffprobe.

Parses ``ffprobe -show_streams`` JSON into immutable stream records used to
choose which streams to extract from.
"""

from __future__ import annotations

from clipstudy.probe.streams import (
    CodecType,
    ImageSourceType,
    ProbeResult,
    Stream,
    StreamId,
    parse_fraction,
    parse_probe_output,
)

__all__ = [
    "CodecType",
    "ImageSourceType",
    "ProbeResult",
    "Stream",
    "StreamId",
    "parse_fraction",
    "parse_probe_output",
]
