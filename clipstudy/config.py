"""
clipstudy.config - YAML config loading and validation.

Handles loading clipstudy.yaml, applying defaults, and validating the
external tool settings used by probing and extraction.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from clipstudy.exceptions import ConfigError

CONFIG_FILENAME = "clipstudy.yaml"

DEFAULT_BATCH_SIZE = 20


class ClipstudyConfig(BaseModel):
    """Resolved configuration for probing and extraction."""

    model_config = ConfigDict(frozen=True)

    ffmpeg_binary: str = "ffmpeg"
    ffprobe_binary: str = "ffprobe"

    batch_size: int = Field(default=DEFAULT_BATCH_SIZE, gt=0)

    max_image_width: int = Field(default=1024, gt=0)
    max_image_height: int = Field(default=768, gt=0)

    sample_rate: int = Field(default=16000, gt=0)

    @field_validator("ffmpeg_binary", "ffprobe_binary")
    @classmethod
    def validate_binary(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("binary name must not be empty")
        return v


def find_config_file(start: Path | None = None) -> Path | None:
    """Find clipstudy.yaml in ``start`` or any parent directory."""
    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if current == current.parent:
            return None
        current = current.parent


def load_config(path: Path | None = None) -> ClipstudyConfig:
    """Load and validate configuration.

    Args:
        path: A config file, a directory to search from, or None for the
            current working directory

    Returns:
        Validated config; defaults when no config file is found

    Raises:
        ConfigError: If the file is not valid YAML or holds invalid values
    """
    if path is not None and path.is_file():
        config_file: Path | None = path
    else:
        config_file = find_config_file(path)

    if config_file is None:
        return ClipstudyConfig()

    try:
        with open(config_file, encoding="utf-8") as f:
            raw_config = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {config_file}: {e}") from e

    if not isinstance(raw_config, dict):
        raise ConfigError(f"{config_file} must contain a mapping")

    try:
        return ClipstudyConfig(**raw_config)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration in {config_file}: {e}") from e


def create_default_config() -> dict[str, Any]:
    """Create a default config dict suitable for writing to disk."""
    return ClipstudyConfig().model_dump()


def write_config(config: dict[str, Any], path: Path) -> None:
    """Write configuration to a YAML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.dump(config, f, default_flow_style=False, sort_keys=False)
