"""
clipstudy.tags - Embedded cover art, read straight from the tag container.

Music files often carry album art that ffprobe reports as an "attached
picture" video stream. Seeking in it is meaningless, so the picture is read
from the tags with mutagen instead of being decoded by ffmpeg.
"""

from __future__ import annotations

import base64
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import mutagen
from mutagen.flac import Picture as FlacPicture
from mutagen.id3 import ID3
from mutagen.mp4 import MP4Cover

from clipstudy.exceptions import NoAttachedPictureError, TagReadError


@dataclass(frozen=True)
class Picture:
    """An embedded image."""

    mime_type: str
    data: bytes

    def extension(self) -> str:
        """File extension matching the MIME type, e.g. ``"jpg"``."""
        subtype = self.mime_type.split("/")[-1].lower()
        if subtype in ("jpeg", "jpg", ""):
            return "jpg"
        return subtype


def read_attached_picture(path: Path) -> Picture:
    """Return the first embedded picture in ``path``.

    Raises:
        TagReadError: If the file cannot be parsed or has no tags
        NoAttachedPictureError: If the tags hold no picture
    """
    try:
        media = mutagen.File(path)
    except (mutagen.MutagenError, OSError) as e:
        raise TagReadError(f"could not read tags from {path}: {e}") from e
    if media is None or media.tags is None:
        raise TagReadError(f"could not read tags from {path}: no tag container")

    try:
        picture = _first_picture(media)
    except (mutagen.MutagenError, ValueError) as e:
        raise TagReadError(f"could not decode picture in {path}: {e}") from e
    if picture is None:
        raise NoAttachedPictureError(f"no attached picture found in {path}")
    return picture


def _first_picture(media: Any) -> Picture | None:
    # FLAC stores pictures outside the Vorbis comment block.
    pictures = getattr(media, "pictures", None)
    if pictures:
        return Picture(pictures[0].mime, bytes(pictures[0].data))

    tags = media.tags
    if isinstance(tags, ID3):
        frames = tags.getall("APIC")
        if frames:
            return Picture(frames[0].mime, bytes(frames[0].data))
        return None

    for cover in tags.get("covr") or []:
        mime = "image/png" if cover.imageformat == MP4Cover.FORMAT_PNG else "image/jpeg"
        return Picture(mime, bytes(cover))

    for encoded in tags.get("metadata_block_picture") or []:
        picture = FlacPicture(base64.b64decode(encoded))
        return Picture(picture.mime, bytes(picture.data))

    return None
