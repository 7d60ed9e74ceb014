"""
Immutable values exchanged between the job builder, the worker threads and the
reporter: the job itself, the outcome of running it, and the batch result.
"""

from dataclasses import dataclass
from pathlib import Path

from batchflac.exceptions import BatchFailedError, BatchFlacError

from .config import FailurePolicy


@dataclass(frozen=True)
class Job:
    """A fully resolved conversion of one manifest record."""

    index: int
    source: Path
    input_path: Path
    output_path: Path
    program: str
    args: tuple[str, ...]
    metadata: tuple[tuple[str, str], ...] = ()

    @property
    def argv(self) -> tuple[str, ...]:
        return (self.program, *self.args)


@dataclass(frozen=True)
class Success:
    """The encoder exited cleanly for a job."""

    index: int
    source: Path
    output_path: Path

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Failure:
    """
    A job that could not be built, launched or completed.

    `argv`, `stdout` and `stderr` are empty when the encoder never ran, and
    `output_path` is None when the job could not be built at all.
    """

    index: int
    source: Path
    output_path: Path | None
    error: BatchFlacError
    argv: tuple[str, ...] = ()
    stdout: bytes = b""
    stderr: bytes = b""
    returncode: int | None = None

    @property
    def ok(self) -> bool:
        return False


Outcome = Success | Failure


@dataclass(frozen=True)
class BatchResult:
    """Outcomes of a batch, in manifest order."""

    outcomes: tuple[Outcome, ...]
    total: int
    policy: FailurePolicy = FailurePolicy.FAIL_FAST

    @property
    def successes(self) -> tuple[Success, ...]:
        return tuple(o for o in self.outcomes if isinstance(o, Success))

    @property
    def failures(self) -> tuple[Failure, ...]:
        return tuple(o for o in self.outcomes if isinstance(o, Failure))

    @property
    def first_failure(self) -> Failure | None:
        """The lowest-index failure, regardless of completion order."""
        failures = self.failures
        return min(failures, key=lambda f: f.index) if failures else None

    @property
    def not_started(self) -> int:
        return self.total - len(self.outcomes)

    @property
    def ok(self) -> bool:
        return not self.failures and self.not_started == 0

    def reported_failures(self) -> tuple[Failure, ...]:
        """
        Failures escalated under the batch's policy: only the first one when
        failing fast, all of them when continuing on error.
        """
        if self.policy is FailurePolicy.FAIL_FAST:
            first = self.first_failure
            return (first,) if first else ()
        return self.failures

    def raise_for_failures(self) -> None:
        """Raises `BatchFailedError` if any job failed or was never started."""
        failures = self.reported_failures()
        if failures or self.not_started:
            raise BatchFailedError(failures, not_started=self.not_started)
