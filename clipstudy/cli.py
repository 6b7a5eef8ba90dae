"""
clipstudy.cli - Typer CLI entry point.

Thin commands over probing, extraction, cover art and PCM streaming.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from clipstudy import __version__
from clipstudy.config import CONFIG_FILENAME, create_default_config, load_config, write_config
from clipstudy.exceptions import ClipstudyError, DependencyError
from clipstudy.io import write_bytes, write_json
from clipstudy.logging import configure_logging
from clipstudy.probe.streams import StreamId
from clipstudy.ui import Ui
from clipstudy.utils import format_size
from clipstudy.video import Video

app = typer.Typer(
    name="clipstudy",
    help="Extract still images and audio clips from media files with ffmpeg.",
    add_completion=False,
)
console = Console()

PCM_CHUNK_SIZE = 64 * 1024


def version_callback(value: bool) -> None:
    if value:
        console.print(f"clipstudy {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: bool = typer.Option(
        False,
        "--version",
        help="Show version and exit",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    """Clipstudy - media extraction for study material."""
    configure_logging(verbose)


def _fail(error: Exception) -> None:
    console.print(f"[red]Error: {escape(str(error))}[/red]")
    raise typer.Exit(1)


@app.command("init")
def init_config(
    path: Path = typer.Option(Path("."), "--path", "-d", help="Directory to write the config in"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing config"),
) -> None:
    """Write a clipstudy.yaml with the default settings."""
    config_path = path / CONFIG_FILENAME

    if config_path.exists() and not force:
        console.print(f"[red]Error: '{config_path}' already exists[/red]")
        raise typer.Exit(1)

    try:
        write_config(create_default_config(), config_path)
    except OSError as e:
        _fail(e)

    console.print(f"[green]✓[/green] Wrote default configuration to {config_path}")
    console.print("\nNext step: [cyan]clipstudy doctor[/cyan] (check ffmpeg and ffprobe)")


@app.command("probe")
def probe_cmd(
    source: Path = typer.Argument(..., help="Media file to inspect"),
    output: Path | None = typer.Option(
        None, "--output", "-o", help="Also write the stream list as JSON"
    ),
) -> None:
    """List the streams in a media file."""
    try:
        video = Video.probe_sync(source, load_config())
    except ClipstudyError as e:
        _fail(e)

    table = Table(title=video.file_name())
    table.add_column("Index", style="cyan")
    table.add_column("Type", style="green")
    table.add_column("Codec")
    table.add_column("Language")
    table.add_column("Notes", style="yellow")

    for stream in video.streams:
        language = stream.language()
        notes = "attached picture" if stream.is_attached_pic() else ""
        table.add_row(
            str(stream.index),
            str(stream.codec_type),
            stream.codec_name or "-",
            str(language) if language else "-",
            notes,
        )
    console.print(table)

    source_type = video.image_source_type()
    console.print(f"[dim]Image source: {source_type.value if source_type else 'none'}[/dim]")

    if output is not None:
        write_json(output, [s.model_dump(mode="json") for s in video.streams])
        console.print(f"[dim]  Wrote {output}[/dim]")


@app.command("extract")
def extract_cmd(
    source: Path = typer.Argument(..., help="Media file to extract from"),
    plan_file: Path = typer.Argument(..., help="JSON or YAML extraction plan"),
    sort: bool = typer.Option(
        False, "--sort", help="Sort the plan by time instead of rejecting unsorted plans"
    ),
) -> None:
    """Run an extraction plan against a media file."""
    from clipstudy.extract.scheduler import sort_extractions
    from clipstudy.plan import load_plan

    try:
        extractions = load_plan(plan_file)
        if sort:
            extractions = sort_extractions(extractions)
        for extraction in extractions:
            extraction.path.parent.mkdir(parents=True, exist_ok=True)
        video = Video.probe_sync(source, load_config())
        passes = asyncio.run(video.extract(extractions, ui=Ui()))
    except (ClipstudyError, OSError) as e:
        _fail(e)

    console.print(
        f"\n[green]✓[/green] Extracted {len(extractions)} item(s) in {passes} pass(es)"
    )


@app.command("cover")
def cover_cmd(
    source: Path = typer.Argument(..., help="Music file with embedded art"),
    output: Path | None = typer.Argument(
        None, help="Output image path (default: <stem>.<ext> next to source)"
    ),
) -> None:
    """Save the embedded cover picture of a music file."""
    try:
        video = Video.probe_sync(source, load_config())
        picture = video.attached_pic()
        destination = output or source.with_name(f"{video.file_stem()}.{picture.extension()}")
        write_bytes(destination, picture.data)
    except (ClipstudyError, OSError) as e:
        _fail(e)

    console.print(
        f"[green]✓[/green] Saved {picture.mime_type} cover "
        f"({format_size(len(picture.data))}) to {destination}"
    )


@app.command("pcm")
def pcm_cmd(
    source: Path = typer.Argument(..., help="Media file to decode"),
    output: Path = typer.Argument(..., help="Raw PCM output file"),
    rate: int | None = typer.Option(None, "--rate", "-r", help="Sample rate in Hz"),
    stream: int | None = typer.Option(None, "--stream", "-s", help="Stream index"),
) -> None:
    """Decode audio to raw mono 16-bit native-endian PCM."""

    async def drain() -> int:
        video = await Video.probe(source, load_config())
        selector = StreamId(stream) if stream is not None else None
        reader, pipe = await video.open_audio_stream(selector, rate)
        total = 0
        async with pipe:
            with open(output, "wb") as f:
                while chunk := await reader.read(PCM_CHUNK_SIZE):
                    f.write(chunk)
                    total += len(chunk)
            await pipe
        return total

    try:
        written = asyncio.run(drain())
    except (ClipstudyError, OSError) as e:
        _fail(e)

    console.print(f"[green]✓[/green] Wrote {format_size(written)} of PCM to {output}")


@app.command("doctor")
def run_doctor() -> None:
    """Check dependencies and environment setup."""
    from clipstudy.validation import tool_version

    console.print("[cyan]Running preflight checks...[/cyan]\n")

    try:
        config = load_config()
    except ClipstudyError as e:
        _fail(e)

    table = Table(title="Dependency Status")
    table.add_column("Component", style="cyan")
    table.add_column("Status", style="green")
    table.add_column("Version/Details")

    all_passed = True
    for label, binary in (("FFmpeg", config.ffmpeg_binary), ("FFprobe", config.ffprobe_binary)):
        try:
            table.add_row(label, "✓ Installed", tool_version(binary))
        except DependencyError as e:
            table.add_row(label, "✗ Missing", e.install_hint or "")
            all_passed = False

    console.print(table)

    if all_passed:
        console.print("\n[green]✓ All checks passed[/green]")
    else:
        console.print("\n[yellow]⚠ Some checks failed[/yellow]")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
