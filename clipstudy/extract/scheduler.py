"""
clipstudy.extract.scheduler - Run many extractions in few ffmpeg passes.

Every ffmpeg invocation costs roughly one seek-and-decode through the
source, so batchable extractions share passes. Images are never batched:
each gets its own fast-seek pass.

Extractions must be sorted by earliest time. Passes run strictly one after
another; the first failure aborts the rest, and files already written by
earlier passes stay on disk.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from clipstudy.config import DEFAULT_BATCH_SIZE, ClipstudyConfig
from clipstudy.exceptions import ExtractionOrderError
from clipstudy.extract.spec import Extraction, format_seconds
from clipstudy.logging import get_logger
from clipstudy.process import run_tool
from clipstudy.ui import ProgressConfig, Ui

LOGGER = get_logger("extract.scheduler")

EXTRACT_PROGRESS = ProgressConfig(
    emoji="✂️",
    msg="Extracting media",
    done_msg="Extracted media items",
)


@dataclass(frozen=True)
class DecodePass:
    """One ffmpeg invocation: a shared seek plus one output per extraction."""

    time_base: float
    extractions: tuple[Extraction, ...]

    @property
    def size(self) -> int:
        return len(self.extractions)


def check_sorted(extractions: Sequence[Extraction]) -> None:
    """Raise ExtractionOrderError unless sorted ascending by earliest time."""
    for previous, current in zip(extractions, extractions[1:]):
        if current.earliest_time() < previous.earliest_time():
            raise ExtractionOrderError(
                f"Extractions must be sorted by time: {current.path} "
                f"({current.earliest_time()}) comes after {previous.path} "
                f"({previous.earliest_time()})"
            )


def sort_extractions(extractions: Sequence[Extraction]) -> list[Extraction]:
    """Stable sort by earliest time, for callers building lists out of order."""
    return sorted(extractions, key=lambda e: e.earliest_time())


def plan_passes(
    extractions: Sequence[Extraction],
    batch_size: int = DEFAULT_BATCH_SIZE,
) -> list[DecodePass]:
    """Group extractions into decode passes.

    Unbatchable extractions get one pass each, in the order encountered.
    Batchable ones are collected across the whole list and then split into
    chunks of at most ``batch_size``, each seeking to its first (earliest)
    member.

    Raises:
        ExtractionOrderError: If the input is not sorted by earliest time
        ValueError: If batch_size is not positive
    """
    if batch_size <= 0:
        raise ValueError(f"batch_size must be positive, got {batch_size}")
    check_sorted(extractions)

    passes: list[DecodePass] = []
    batch: list[Extraction] = []
    for extraction in extractions:
        if extraction.can_be_batched():
            batch.append(extraction)
        else:
            passes.append(DecodePass(extraction.earliest_time(), (extraction,)))

    for start in range(0, len(batch), batch_size):
        chunk = tuple(batch[start : start + batch_size])
        passes.append(DecodePass(chunk[0].earliest_time(), chunk))
    return passes


def build_command(
    source: Path,
    decode_pass: DecodePass,
    config: ClipstudyConfig | None = None,
) -> list[str]:
    """Build the ffmpeg argv for one decode pass."""
    config = config or ClipstudyConfig()
    argv = [
        config.ffmpeg_binary,
        "-y",
        "-nostdin",
        "-ss",
        format_seconds(decode_pass.time_base),
        "-i",
        str(source),
    ]
    for extraction in decode_pass.extractions:
        argv.extend(
            extraction.encode(
                decode_pass.time_base,
                max_width=config.max_image_width,
                max_height=config.max_image_height,
            )
        )
    return argv


async def run_pass(
    source: Path,
    decode_pass: DecodePass,
    config: ClipstudyConfig | None = None,
) -> None:
    """Run one decode pass, raising ExtractionProcessError on failure."""
    argv = build_command(source, decode_pass, config)
    LOGGER.debug(
        "Decode pass at %s with %d output(s)",
        format_seconds(decode_pass.time_base),
        decode_pass.size,
    )
    await run_tool(argv, tool="ffmpeg", path=source)


async def run_extractions(
    source: Path,
    extractions: Sequence[Extraction],
    config: ClipstudyConfig | None = None,
    ui: Ui | None = None,
) -> int:
    """Perform a list of sorted extractions in as few passes as possible.

    Args:
        source: Media file to extract from
        extractions: Extractions sorted ascending by earliest time
        config: Tool and batching settings
        ui: Optional progress display, advanced once per finished pass

    Returns:
        Number of decode passes run

    Raises:
        ExtractionOrderError: If extractions are unsorted; nothing is run
        ExtractionProcessError: If any pass fails; later passes are skipped
    """
    config = config or ClipstudyConfig()
    passes = plan_passes(extractions, config.batch_size)
    LOGGER.info(
        "Extracting %d item(s) from %s in %d pass(es)",
        len(extractions),
        source,
        len(passes),
    )

    bar = ui.new_progress_bar(EXTRACT_PROGRESS, len(extractions)) if ui else None
    try:
        for decode_pass in passes:
            await run_pass(source, decode_pass, config)
            if bar is not None:
                # Progress moves in whole passes.
                bar.inc(decode_pass.size)
    finally:
        if bar is not None:
            bar.stop()

    if ui is not None and bar is not None:
        ui.finish(EXTRACT_PROGRESS, bar)
    return len(passes)
