"""
The boundary to the external audio encoder.

The rest of the application only depends on the `Encoder` protocol, so tests
can substitute a fake that never spawns a process.
"""

import logging
import shutil
import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class EncoderResult:
    """Exit status and captured output of one encoder run."""

    returncode: int
    stdout: bytes = b""
    stderr: bytes = b""


class Encoder(Protocol):
    """Runs an encoder command line to completion and captures its output."""

    def run(self, argv: Sequence[str], timeout: float | None = None) -> EncoderResult:
        """
        Runs `argv` and waits for it to exit.

        Raises:
            OSError: If the process cannot be started.
            subprocess.TimeoutExpired: If `timeout` elapses first.
        """
        ...


class SubprocessEncoder:
    """Runs the encoder as a child process, capturing stdout and stderr."""

    def run(self, argv: Sequence[str], timeout: float | None = None) -> EncoderResult:
        completed = subprocess.run(  # noqa: S603
            [str(arg) for arg in argv],
            stdin=subprocess.DEVNULL,
            capture_output=True,
            timeout=timeout,
            check=False,
        )
        return EncoderResult(completed.returncode, completed.stdout, completed.stderr)

    @staticmethod
    def locate(program: str) -> str | None:
        """Returns the full path of `program` as found on PATH, or None."""
        return shutil.which(program)

    def version(self, program: str) -> str | None:
        """Returns the first line of `<program> -version`, or None if it cannot run."""
        try:
            result = self.run([program, "-hide_banner", "-version"], timeout=15)
        except (OSError, subprocess.TimeoutExpired) as e:
            log.debug(f"Could not query encoder version: {e}")
            return None
        if result.returncode != 0:
            return None
        lines = result.stdout.decode("utf-8", errors="replace").splitlines()
        return lines[0].strip() if lines else None
