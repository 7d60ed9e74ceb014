"""
Runs a single conversion job through the encoder and turns the result into an
`Outcome`.
"""

import logging
import subprocess

from batchflac.exceptions import EncodeError, EncodeTimeoutError, SpawnError
from batchflac.media.encoder import Encoder
from batchflac.models.job import Failure, Job, Outcome, Success
from batchflac.utils.formatting import format_command

log = logging.getLogger(__name__)


class ProcessInvoker:
    """
    Executes one job and reports the result as data. Encoder problems never
    raise out of `run`; they come back as a `Failure` with diagnostics.
    """

    def __init__(
        self,
        encoder: Encoder,
        verbose: bool = False,
        timeout: float | None = None,
    ):
        self.encoder = encoder
        self.verbose = verbose
        self.timeout = timeout

    def run(self, job: Job) -> Outcome:
        argv = job.argv
        if self.verbose:
            log.info(f"+ {format_command(argv)}", extra={"markup": False})

        try:
            result = self.encoder.run(argv, timeout=self.timeout)
        except subprocess.TimeoutExpired as e:
            return Failure(
                index=job.index,
                source=job.source,
                output_path=job.output_path,
                error=EncodeTimeoutError(
                    f"{job.program} did not finish within {self.timeout:g}s",
                    timeout=self.timeout,
                ),
                argv=argv,
                stdout=e.stdout or b"",
                stderr=e.stderr or b"",
            )
        except OSError as e:
            return Failure(
                index=job.index,
                source=job.source,
                output_path=job.output_path,
                error=SpawnError(f"Failed to execute {job.program}: {e}"),
                argv=argv,
            )

        if result.returncode != 0:
            return Failure(
                index=job.index,
                source=job.source,
                output_path=job.output_path,
                error=EncodeError(
                    f"{job.program} exited with status {result.returncode}",
                    returncode=result.returncode,
                ),
                argv=argv,
                stdout=result.stdout,
                stderr=result.stderr,
                returncode=result.returncode,
            )

        return Success(index=job.index, source=job.source, output_path=job.output_path)
