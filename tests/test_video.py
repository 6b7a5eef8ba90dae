"""Tests for clipstudy.video module."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable
from unittest.mock import MagicMock

import pytest

from clipstudy.config import ClipstudyConfig
from clipstudy.exceptions import (
    NoAttachedPictureError,
    NotAFileError,
    ProbeError,
    TagReadError,
)
from clipstudy.lang import Lang
from clipstudy.probe.streams import CodecType, ImageSourceType, Stream, StreamId
from clipstudy.video import Video


def _video(path: Path, *records: dict) -> Video:
    return Video(path=path, streams=tuple(Stream.model_validate(r) for r in records))


class TestProbe:
    def test_probe_parses_streams(self, media_file: Path, tool_config: ClipstudyConfig) -> None:
        video = asyncio.run(Video.probe(media_file, tool_config))
        assert video.path == media_file
        assert len(video.streams) == 5
        assert [s.codec_type for s in video.streams[:4]] == [
            CodecType.VIDEO,
            CodecType.AUDIO,
            CodecType.AUDIO,
            CodecType.SUBTITLE,
        ]

    def test_probe_sync(self, media_file: Path, tool_config: ClipstudyConfig) -> None:
        video = Video.probe_sync(media_file, tool_config)
        assert video.file_name() == "movie.mkv"
        assert video.file_stem() == "movie"

    def test_probe_passes_expected_arguments(
        self, media_file: Path, make_tool: Callable[[str, str], Path], tmp_path: Path
    ) -> None:
        args_file = tmp_path / "args.txt"
        script = make_tool(
            "ffprobe",
            f'printf "%s\\n" "$@" > "{args_file}"\necho \'{{"streams": []}}\'',
        )
        asyncio.run(Video.probe(media_file, ClipstudyConfig(ffprobe_binary=str(script))))
        args = args_file.read_text().splitlines()
        assert args == ["-v", "quiet", "-show_streams", "-of", "json", str(media_file)]

    def test_missing_file(self, tmp_path: Path, tool_config: ClipstudyConfig) -> None:
        with pytest.raises(NotAFileError):
            asyncio.run(Video.probe(tmp_path / "missing.mp4", tool_config))

    def test_directory_is_not_a_file(self, tmp_path: Path, tool_config: ClipstudyConfig) -> None:
        with pytest.raises(NotAFileError):
            asyncio.run(Video.probe(tmp_path, tool_config))

    def test_nonzero_exit(self, media_file: Path, make_tool: Callable[[str, str], Path]) -> None:
        script = make_tool("ffprobe", "echo 'Invalid data found' >&2\nexit 1")
        with pytest.raises(ProbeError) as excinfo:
            asyncio.run(Video.probe(media_file, ClipstudyConfig(ffprobe_binary=str(script))))
        assert excinfo.value.returncode == 1
        assert excinfo.value.path == media_file
        assert "Invalid data found" in str(excinfo.value)

    def test_invalid_json(self, media_file: Path, make_tool: Callable[[str, str], Path]) -> None:
        script = make_tool("ffprobe", "echo 'garbage'")
        with pytest.raises(ProbeError):
            asyncio.run(Video.probe(media_file, ClipstudyConfig(ffprobe_binary=str(script))))

    def test_schema_mismatch(self, media_file: Path, make_tool: Callable[[str, str], Path]) -> None:
        script = make_tool("ffprobe", 'echo \'{"format": {}}\'')
        with pytest.raises(ProbeError):
            asyncio.run(Video.probe(media_file, ClipstudyConfig(ffprobe_binary=str(script))))

    def test_invalid_utf8(self, media_file: Path, make_tool: Callable[[str, str], Path]) -> None:
        script = make_tool("ffprobe", "printf '\\377\\376'")
        with pytest.raises(ProbeError, match="UTF-8"):
            asyncio.run(Video.probe(media_file, ClipstudyConfig(ffprobe_binary=str(script))))

    def test_missing_binary(self, media_file: Path, tmp_path: Path) -> None:
        config = ClipstudyConfig(ffprobe_binary=str(tmp_path / "no-such-ffprobe"))
        with pytest.raises(ProbeError, match="could not start"):
            asyncio.run(Video.probe(media_file, config))


class TestStreamQueries:
    def test_primary_video_stream(self, sample_video: Video) -> None:
        primary = sample_video.primary_video_stream()
        assert primary is not None
        assert primary.index == 0

    def test_no_video_stream(self, media_file: Path) -> None:
        video = _video(media_file, {"index": 0, "codec_type": "audio"})
        assert video.primary_video_stream() is None
        assert video.image_source_type() is None

    def test_image_source_video(self, sample_video: Video) -> None:
        assert sample_video.image_source_type() == ImageSourceType.VIDEO

    def test_image_source_attached_pic(self, media_file: Path) -> None:
        video = _video(
            media_file,
            {"index": 0, "codec_type": "audio"},
            {"index": 1, "codec_type": "video", "disposition": {"attached_pic": 1}},
        )
        assert video.image_source_type() == ImageSourceType.ATTACHED_PIC

    def test_audio_streams(self, sample_video: Video) -> None:
        assert [s.index for s in sample_video.audio_streams()] == [1, 2]

    def test_audio_track_for_language(self, media_file: Path) -> None:
        video = _video(
            media_file,
            {"index": 0, "codec_type": "audio", "tags": {"language": "eng"}},
            {"index": 1, "codec_type": "audio", "tags": {"language": "fra"}},
        )
        assert video.audio_track_for(Lang.iso639("fr")) == StreamId(1)
        assert video.audio_track_for(Lang.iso639("en")) == StreamId(0)
        assert video.audio_track_for(Lang.iso639("de")) is None

    def test_stream_tags_cannot_be_changed(self, sample_video: Video) -> None:
        assert sample_video.audio_track_for(Lang.iso639("fr")) == StreamId(2)
        with pytest.raises(TypeError):
            sample_video.streams[1].tags["language"] = "fra"  # type: ignore[index]
        assert sample_video.audio_track_for(Lang.iso639("fr")) == StreamId(2)

    def test_audio_track_ignores_subtitles(self, media_file: Path) -> None:
        video = _video(
            media_file,
            {"index": 0, "codec_type": "subtitle", "tags": {"language": "fra"}},
            {"index": 1, "codec_type": "audio", "tags": {"language": "fra"}},
        )
        assert video.audio_track_for(Lang.iso639("fra")) == StreamId(1)

    def test_audio_track_first_match_wins(self, media_file: Path) -> None:
        video = _video(
            media_file,
            {"index": 0, "codec_type": "video"},
            {"index": 1, "codec_type": "audio", "tags": {"language": "eng"}},
            {"index": 2, "codec_type": "audio", "tags": {"language": "eng"}},
        )
        assert video.audio_track_for(Lang.iso639("eng")) == StreamId(1)


class TestAttachedPic:
    def test_id3_picture(self, media_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        from mutagen.id3 import APIC, ID3

        tags = ID3()
        tags.add(APIC(encoding=3, mime="image/png", type=3, desc="Cover", data=b"\x89PNG"))
        media = MagicMock()
        media.tags = tags
        media.pictures = []
        monkeypatch.setattr("clipstudy.tags.mutagen.File", lambda path: media)

        picture = _video(media_file).attached_pic()
        assert picture.mime_type == "image/png"
        assert picture.data == b"\x89PNG"
        assert picture.extension() == "png"

    def test_flac_picture(self, media_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        from mutagen.flac import Picture as FlacPicture

        flac_picture = FlacPicture()
        flac_picture.mime = "image/jpeg"
        flac_picture.data = b"\xff\xd8\xff"
        media = MagicMock()
        media.pictures = [flac_picture]
        monkeypatch.setattr("clipstudy.tags.mutagen.File", lambda path: media)

        picture = _video(media_file).attached_pic()
        assert picture.mime_type == "image/jpeg"
        assert picture.extension() == "jpg"

    def test_mp4_cover(self, media_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        from mutagen.mp4 import MP4Cover

        media = MagicMock()
        media.pictures = None
        media.tags = {"covr": [MP4Cover(b"\x89PNG", imageformat=MP4Cover.FORMAT_PNG)]}
        monkeypatch.setattr("clipstudy.tags.mutagen.File", lambda path: media)

        picture = _video(media_file).attached_pic()
        assert picture.mime_type == "image/png"
        assert picture.data == b"\x89PNG"

    def test_no_picture(self, media_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        media = MagicMock()
        media.pictures = None
        media.tags = {"title": ["Song"]}
        monkeypatch.setattr("clipstudy.tags.mutagen.File", lambda path: media)

        with pytest.raises(NoAttachedPictureError):
            _video(media_file).attached_pic()

    def test_no_tag_container(self, media_file: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        media = MagicMock()
        media.tags = None
        monkeypatch.setattr("clipstudy.tags.mutagen.File", lambda path: media)

        with pytest.raises(TagReadError):
            _video(media_file).attached_pic()

    def test_unrecognised_file(self, media_file: Path) -> None:
        with pytest.raises(TagReadError):
            _video(media_file).attached_pic()
