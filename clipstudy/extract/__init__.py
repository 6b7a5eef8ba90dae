"""
clipstudy.extract - Image and audio extraction with ffmpeg.

Turns declarative extraction requests into batched ffmpeg decode passes,
and streams raw PCM for live decoding.
"""

from __future__ import annotations

from clipstudy.extract.pcm import AudioPipe, open_audio_stream
from clipstudy.extract.scheduler import DecodePass, plan_passes, run_extractions
from clipstudy.extract.spec import (
    AudioSpec,
    Extraction,
    ExtractionSpec,
    Id3Metadata,
    ImageSpec,
)

__all__ = [
    "AudioPipe",
    "AudioSpec",
    "DecodePass",
    "Extraction",
    "ExtractionSpec",
    "Id3Metadata",
    "ImageSpec",
    "open_audio_stream",
    "plan_passes",
    "run_extractions",
]
