"""
Test configuration and shared fixtures.
"""

from __future__ import annotations

import json
import stat
from pathlib import Path
from typing import Any, Callable

import pytest

from clipstudy.config import ClipstudyConfig
from clipstudy.probe.streams import Stream
from clipstudy.video import Video


@pytest.fixture
def probe_streams() -> list[dict[str, Any]]:
    """Stream records as ffprobe reports them for a bilingual movie."""
    return [
        {
            "index": 0,
            "codec_name": "h264",
            "codec_type": "video",
            "r_frame_rate": "24000/1001",
            "width": 1920,
            "height": 1080,
            "disposition": {"default": 1, "attached_pic": 0},
        },
        {
            "index": 1,
            "codec_name": "aac",
            "codec_type": "audio",
            "sample_rate": "48000",
            "channels": 2,
            "avg_frame_rate": "0/0",
            "tags": {"language": "eng"},
        },
        {
            "index": 2,
            "codec_name": "ac3",
            "codec_type": "audio",
            "tags": {"language": "fra", "title": "Français"},
        },
        {
            "index": 3,
            "codec_name": "subrip",
            "codec_type": "subtitle",
            "tags": {"language": "eng"},
        },
        {
            "index": 4,
            "codec_name": "bin_data",
            "codec_type": "data",
        },
    ]


@pytest.fixture
def probe_json(probe_streams: list[dict[str, Any]]) -> str:
    return json.dumps({"streams": probe_streams})


@pytest.fixture
def media_file(tmp_path: Path) -> Path:
    """An existing (fake) media file."""
    path = tmp_path / "movie.mkv"
    path.write_bytes(b"not really a movie")
    return path


@pytest.fixture
def sample_video(media_file: Path, probe_streams: list[dict[str, Any]]) -> Video:
    streams = tuple(Stream.model_validate(s) for s in probe_streams)
    return Video(path=media_file, streams=streams)


@pytest.fixture
def make_tool(tmp_path: Path) -> Callable[[str, str], Path]:
    """Write an executable /bin/sh script standing in for ffmpeg or ffprobe."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir(exist_ok=True)

    def _make(name: str, body: str) -> Path:
        script = bin_dir / name
        script.write_text(f"#!/bin/sh\n{body}\n")
        script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return script

    return _make


@pytest.fixture
def fake_ffprobe(make_tool: Callable[[str, str], Path], probe_json: str) -> Path:
    """An ffprobe that prints the sample stream list."""
    return make_tool("ffprobe", f"cat <<'JSON'\n{probe_json}\nJSON")


@pytest.fixture
def tool_config(fake_ffprobe: Path) -> ClipstudyConfig:
    return ClipstudyConfig(ffprobe_binary=str(fake_ffprobe))
