"""
Dataclass for tracking conversion run statistics.
"""

import threading
import time
from dataclasses import dataclass, field


@dataclass
class ConversionStats:
    """Tracks statistics for a conversion run. Updated from worker threads."""

    jobs_total: int = 0
    jobs_converted: int = 0
    jobs_failed: int = 0
    jobs_not_started: int = 0
    active_jobs: int = 0
    peak_concurrent: int = 0
    workers: int = 0
    started_at: float = field(default_factory=time.monotonic, repr=False)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False)

    def job_started(self) -> None:
        with self._lock:
            self.active_jobs += 1
            self.peak_concurrent = max(self.peak_concurrent, self.active_jobs)

    def job_finished(self, success: bool) -> None:
        with self._lock:
            self.active_jobs -= 1
            if success:
                self.jobs_converted += 1
            else:
                self.jobs_failed += 1

    def record_failed_build(self, count: int = 1) -> None:
        """Counts jobs that failed before reaching a worker."""
        with self._lock:
            self.jobs_failed += count

    def finalize(self) -> None:
        with self._lock:
            self.jobs_not_started = max(
                0, self.jobs_total - self.jobs_converted - self.jobs_failed
            )

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self.started_at
