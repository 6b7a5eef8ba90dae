"""Tests for clipstudy.validation module."""

from pathlib import Path

import pytest

from clipstudy.exceptions import DependencyError, NotAFileError
from clipstudy.validation import tool_version, validate_source_file


class TestValidateSourceFile:
    def test_nonexistent_file(self):
        with pytest.raises(NotAFileError):
            validate_source_file(Path("/nonexistent/video.mp4"))

    def test_directory_not_file(self, tmp_path):
        with pytest.raises(NotAFileError):
            validate_source_file(tmp_path)

    def test_valid_file(self, media_file):
        assert validate_source_file(media_file) == media_file


class TestToolVersion:
    def test_missing_binary(self, tmp_path):
        with pytest.raises(DependencyError) as excinfo:
            tool_version(str(tmp_path / "no-ffmpeg"))
        assert excinfo.value.install_hint

    def test_reads_version_line(self, make_tool):
        script = make_tool("ffmpeg", "echo 'ffmpeg version 6.1.1 Copyright (c) 2000-2023'")
        assert tool_version(str(script)) == "6.1.1"

    def test_unparseable_version(self, make_tool):
        script = make_tool("ffprobe", "true")
        assert tool_version(str(script)) == "unknown"
