"""
clipstudy.ui - Console progress reporting.
"""

from __future__ import annotations

from dataclasses import dataclass

from rich.console import Console
from rich.progress import BarColumn, MofNCompleteColumn, Progress, TextColumn, TimeElapsedColumn


@dataclass(frozen=True)
class ProgressConfig:
    """Labels shown while a long operation runs and once it is done."""

    emoji: str
    msg: str
    done_msg: str


class ProgressBar:
    """A single task on a rich Progress display."""

    def __init__(self, progress: Progress, task_id, total: int) -> None:
        self._progress = progress
        self._task_id = task_id
        self.total = total
        self.completed = 0

    def inc(self, amount: int = 1) -> None:
        self.completed += amount
        self._progress.advance(self._task_id, amount)

    def stop(self) -> None:
        self._progress.stop()


class Ui:
    """Console output for the command line tools."""

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console(stderr=True)

    def new_progress_bar(self, config: ProgressConfig, total: int) -> ProgressBar:
        progress = Progress(
            TextColumn(f"{config.emoji} {config.msg}"),
            BarColumn(),
            MofNCompleteColumn(),
            TimeElapsedColumn(),
            console=self.console,
            transient=True,
        )
        task_id = progress.add_task(config.msg, total=total)
        progress.start()
        return ProgressBar(progress, task_id, total)

    def finish(self, config: ProgressConfig, bar: ProgressBar) -> None:
        bar.stop()
        self.console.print(f"{config.emoji} [green]{config.done_msg}[/green] ({bar.completed})")
