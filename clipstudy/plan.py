"""
clipstudy.plan - Extraction plans stored as JSON or YAML.

A plan is a list of entries, each naming an output path and exactly one of
``image`` or ``audio``::

    - path: out/0001.jpg
      image: {time: 12.5}
    - path: out/0001.mp3
      audio:
        begin: 11.0
        end: 14.2
        stream: 1
        metadata: {artist: Someone, track_number: [1, 40]}

Relative output paths are resolved against the plan file's directory.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from clipstudy.exceptions import PlanError
from clipstudy.extract.spec import AudioSpec, Extraction, Id3Metadata, ImageSpec
from clipstudy.io import read_json
from clipstudy.period import Period
from clipstudy.probe.streams import StreamId


class ImageEntry(BaseModel):
    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    time: float = Field(ge=0.0)


class MetadataEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    genre: str | None = None
    artist: str | None = None
    album: str | None = None
    track_number: tuple[int, int] | None = None
    track_name: str | None = None
    lyrics: str | None = None


class AudioEntry(BaseModel):
    model_config = ConfigDict(extra="forbid", allow_inf_nan=False)

    begin: float = Field(ge=0.0)
    end: float = Field(ge=0.0)
    stream: int | None = Field(default=None, ge=0)
    metadata: MetadataEntry = Field(default_factory=MetadataEntry)

    @model_validator(mode="after")
    def check_order(self) -> AudioEntry:
        if self.end < self.begin:
            raise ValueError("audio end must not be before begin")
        return self


class PlanEntry(BaseModel):
    model_config = ConfigDict(extra="forbid")

    path: Path
    image: ImageEntry | None = None
    audio: AudioEntry | None = None

    @model_validator(mode="after")
    def check_one_kind(self) -> PlanEntry:
        if (self.image is None) == (self.audio is None):
            raise ValueError("each entry needs exactly one of 'image' or 'audio'")
        return self

    def to_extraction(self, base_dir: Path) -> Extraction:
        path = self.path if self.path.is_absolute() else base_dir / self.path
        if self.image is not None:
            return Extraction(path, ImageSpec(self.image.time))
        assert self.audio is not None
        audio = self.audio
        return Extraction(
            path,
            AudioSpec(
                period=Period(audio.begin, audio.end),
                stream=StreamId(audio.stream) if audio.stream is not None else None,
                metadata=Id3Metadata(**audio.metadata.model_dump()),
            ),
        )


def parse_plan(data: Any, base_dir: Path) -> list[Extraction]:
    """Validate raw plan data and convert it to extractions, in file order."""
    if not isinstance(data, list):
        raise PlanError("plan must be a list of entries")
    extractions = []
    for position, raw in enumerate(data):
        try:
            entry = PlanEntry.model_validate(raw)
        except ValidationError as e:
            raise PlanError(f"invalid plan entry {position}: {e}") from e
        extractions.append(entry.to_extraction(base_dir))
    return extractions


def load_plan(path: Path) -> list[Extraction]:
    """Load a plan from a .json, .yaml or .yml file.

    Raises:
        PlanError: If the file cannot be read or does not validate
    """
    try:
        if path.suffix.lower() == ".json":
            data = read_json(path)
        else:
            with open(path, encoding="utf-8") as f:
                data = yaml.safe_load(f)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as e:
        raise PlanError(f"could not read plan {path}: {e}") from e
    return parse_plan(data, path.parent)
