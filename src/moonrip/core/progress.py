"""Progress sinks fed by the subprocess output scrapers.

Steps only ever call ``start``/``update``/``finish``; how the percentage is
drawn is up to the sink the CLI hands in.
"""

from __future__ import annotations

from typing import Protocol

from rich.console import Console
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskID, TextColumn


class ProgressSink(Protocol):
    def start(self, description: str) -> None: ...

    def update(self, percent: float) -> None: ...

    def finish(self) -> None: ...


class NullProgress:
    """Sink that records the last value and draws nothing."""

    def __init__(self) -> None:
        self.description: str | None = None
        self.percent: float = 0.0
        self.updates: int = 0

    def start(self, description: str) -> None:
        self.description = description
        self.percent = 0.0

    def update(self, percent: float) -> None:
        self.percent = percent
        self.updates += 1

    def finish(self) -> None:
        pass


class RichProgress:
    """Single live progress line, cleared when the step finishes."""

    def __init__(self, console: Console | None = None):
        self.console = console or Console()
        self._progress: Progress | None = None
        self._task: TaskID | None = None

    def start(self, description: str) -> None:
        self.finish()
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TextColumn("{task.percentage:>5.1f}%"),
            console=self.console,
            transient=True,
        )
        self._progress.start()
        self._task = self._progress.add_task(description, total=100.0)

    def update(self, percent: float) -> None:
        if self._progress is None or self._task is None:
            return
        self._progress.update(self._task, completed=min(100.0, max(0.0, percent)))

    def finish(self) -> None:
        if self._progress is not None:
            self._progress.stop()
        self._progress = None
        self._task = None
