"""
Fans conversion jobs out over a fixed set of worker threads and collects their
outcomes.

Jobs share no mutable state, so the only synchronisation is a queue of pending
jobs, a queue of results, and an event that stops dispatch when failing fast.
"""

import logging
import os
import queue
import threading
from collections.abc import Iterable
from typing import Protocol

from rich.markup import escape

from batchflac.exceptions import BatchFlacError
from batchflac.models.config import FailurePolicy
from batchflac.models.job import BatchResult, Failure, Job, Outcome
from batchflac.models.stats import ConversionStats

from .invoker import ProcessInvoker

log = logging.getLogger(__name__)


class BatchListener(Protocol):
    """Receives progress callbacks. Called from worker threads."""

    def job_started(self, job: Job) -> None: ...

    def job_finished(self, outcome: Outcome) -> None: ...


class _NullListener:
    def job_started(self, job: Job) -> None:
        pass

    def job_finished(self, outcome: Outcome) -> None:
        pass


def resolve_concurrency(concurrency: int | None, job_count: int) -> int:
    """
    Returns the number of worker threads to start: `concurrency`, or one per
    available CPU when it is 0 or unset, never more than there are jobs.
    """
    width = concurrency or os.cpu_count() or 1
    return max(1, min(width, job_count))


class BatchOrchestrator:
    """Runs a batch of jobs with bounded parallelism under a failure policy."""

    def __init__(
        self,
        invoker: ProcessInvoker,
        policy: FailurePolicy = FailurePolicy.FAIL_FAST,
        listener: BatchListener | None = None,
        stats: ConversionStats | None = None,
    ):
        self.invoker = invoker
        self.policy = policy
        self.listener = listener or _NullListener()
        self.stats = stats or ConversionStats()

    def run_all(
        self, entries: Iterable[Job | Failure], concurrency: int | None = 0
    ) -> BatchResult:
        """
        Runs every job in `entries` and returns the outcomes in manifest order.

        `entries` may contain `Failure`s for records that could not be built;
        they count as already-finished jobs. When failing fast, a known failure
        stops all further dispatch (so a build failure means nothing is
        spawned), while jobs already running are left to finish.
        """
        entries = list(entries)
        jobs = [e for e in entries if isinstance(e, Job)]
        prefailed = [e for e in entries if isinstance(e, Failure)]

        self.stats.jobs_total = len(entries)
        outcomes: dict[int, Outcome] = {}
        for failure in prefailed:
            outcomes[failure.index] = failure
            self.stats.record_failed_build()
            self.listener.job_finished(failure)

        stop = threading.Event()
        if prefailed and self.policy is FailurePolicy.FAIL_FAST:
            log.debug("Build failures present; no jobs will be dispatched.")
            stop.set()

        if jobs and not stop.is_set():
            pending: queue.Queue[Job] = queue.Queue()
            for job in jobs:
                pending.put(job)
            results: queue.Queue[Outcome] = queue.Queue()

            width = resolve_concurrency(concurrency, len(jobs))
            self.stats.workers = width
            log.debug(f"Dispatching {len(jobs)} jobs to {width} workers.")
            workers = [
                threading.Thread(
                    target=self._work,
                    args=(pending, results, stop),
                    name=f"batchflac-worker-{n}",
                    daemon=True,
                )
                for n in range(width)
            ]
            for worker in workers:
                worker.start()
            try:
                for worker in workers:
                    worker.join()
            except KeyboardInterrupt:
                stop.set()
                raise

            while True:
                try:
                    outcome = results.get_nowait()
                except queue.Empty:
                    break
                outcomes[outcome.index] = outcome

        self.stats.finalize()
        result = BatchResult(
            outcomes=tuple(outcomes[i] for i in sorted(outcomes)),
            total=len(entries),
            policy=self.policy,
        )
        if result.not_started:
            log.debug(f"{result.not_started} jobs were not started.")
        return result

    def _work(
        self,
        pending: "queue.Queue[Job]",
        results: "queue.Queue[Outcome]",
        stop: threading.Event,
    ) -> None:
        while not stop.is_set():
            try:
                job = pending.get_nowait()
            except queue.Empty:
                return

            # Every job taken off the queue must produce exactly one outcome.
            try:
                self.stats.job_started()
                self.listener.job_started(job)
                outcome = self.invoker.run(job)
            except Exception as e:
                log.debug(f"Unexpected error running job {job.index}", exc_info=True)
                outcome = Failure(
                    index=job.index,
                    source=job.source,
                    output_path=job.output_path,
                    error=BatchFlacError(f"Unexpected error: {e}"),
                    argv=job.argv,
                )

            results.put(outcome)
            if not outcome.ok and self.policy is FailurePolicy.FAIL_FAST:
                stop.set()
            self.stats.job_finished(outcome.ok)
            try:
                self.listener.job_finished(outcome)
            except Exception as e:
                log.warning(
                    f"Progress listener failed for job {job.index}: {escape(str(e))}"
                )
                log.debug("Listener traceback:", exc_info=True)
