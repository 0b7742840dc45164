from __future__ import annotations
from rich.console import Console
from rich.progress import (
    Progress, BarColumn, TextColumn, TimeElapsedColumn,
    TimeRemainingColumn, MofNCompleteColumn, SpinnerColumn
)
from ..ports.progress import ProgressReporter


class RichProgress(ProgressReporter):
    """Shard-count progress bar on stderr. Use as a context manager."""

    def __init__(self, total: int, *, description: str = "", console: Console | None = None) -> None:
        self.progress = Progress(SpinnerColumn(),
                                 TextColumn("[bold]collecting ranges[/]"),
                                 BarColumn(),
                                 MofNCompleteColumn(),
                                 TextColumn("•"),
                                 TimeElapsedColumn(),
                                 TextColumn("→"),
                                 TimeRemainingColumn(),
                                 TextColumn(" • {task.description}"),
                                 console=console or Console(stderr=True),
                                 transient=False,
                                 expand=True,
                                 )
        self.task = self.progress.add_task(description=description, total=total)

    def advance(self, n: int = 1) -> None:
        self.progress.advance(self.task, n)

    def __enter__(self) -> "RichProgress":
        self.progress.start()
        return self

    def __exit__(self, *exc) -> None:
        self.progress.stop()
