"""
Manages a Rich progress display for concurrent conversions and prints a line
per finished track. All callbacks arrive from worker threads.
"""

import threading

from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TaskID,
    TextColumn,
    TimeElapsedColumn,
)

from batchflac.models.job import Failure, Job, Outcome


class ProgressManager:
    """
    Shows overall progress plus one spinner per running job, and reports each
    outcome as it arrives: `OK: <output>` for successes and a one-line notice
    for failures (full diagnostics are printed once the batch is over).
    """

    def __init__(self, console: Console, enabled: bool = True):
        self.console = console
        self.enabled = enabled
        self.progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}", justify="left"),
            BarColumn(bar_width=30),
            MofNCompleteColumn(),
            "•",
            TimeElapsedColumn(),
            console=console,
            transient=True,
        )
        self._lock = threading.Lock()
        self._overall_task_id: TaskID | None = None
        self._active_tasks: dict[int, TaskID] = {}

    def initialize_session(self, total_jobs: int):
        if self.enabled:
            self._overall_task_id = self.progress.add_task(
                "[bold blue]Converting", total=total_jobs
            )

    def _truncate(self, name: str, width: int = 50) -> str:
        return name if len(name) <= width else name[: width - 1] + "…"

    def job_started(self, job: Job) -> None:
        with self._lock:
            if self.enabled:
                self._active_tasks[job.index] = self.progress.add_task(
                    f"  {escape(self._truncate(job.output_path.name))}", total=None
                )

    def job_finished(self, outcome: Outcome) -> None:
        with self._lock:
            task_id = self._active_tasks.pop(outcome.index, None)
            if task_id is not None:
                self.progress.remove_task(task_id)
            if self._overall_task_id is not None:
                self.progress.advance(self._overall_task_id)

        if isinstance(outcome, Failure):
            self.console.print(
                f"[red]✗ Failed:[/] {escape(str(outcome.source))} "
                f"[dim]({escape(str(outcome.error))})[/dim]"
            )
        else:
            self.console.print(f"[green]OK:[/] {escape(str(outcome.output_path))}")

    def __enter__(self):
        if self.enabled:
            self.progress.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.enabled:
            self.progress.stop()
        return False
