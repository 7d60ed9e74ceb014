"""
Defines custom exceptions for the application to allow for more specific error handling.
"""

from pathlib import Path


class BatchFlacError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(BatchFlacError):
    """Raised for invalid or conflicting conversion options."""


class ManifestError(BatchFlacError):
    """Raised when the manifest cannot be read or contains malformed rows."""


class OutputDirectoryError(BatchFlacError):
    """Raised when the output directory cannot be created."""


class BuildError(BatchFlacError):
    """Raised when a manifest record cannot be turned into a conversion job."""


class MissingArtistError(BuildError):
    """Raised when no artist can be resolved for a record."""

    def __init__(self, source: Path):
        self.source = source
        super().__init__(
            f"No artist for '{source}': set the 'artist' column or pass --album-artist."
        )


class DuplicateOutputError(BatchFlacError):
    """Raised when several records would be written to the same output file."""

    def __init__(self, collisions: dict[str, list[int]]):
        self.collisions = collisions
        details = "; ".join(
            f"{path} (rows {', '.join(str(i + 1) for i in rows)})"
            for path, rows in collisions.items()
        )
        super().__init__(f"Several records map to the same output file: {details}")


class SpawnError(BatchFlacError):
    """Raised when the external encoder could not be launched."""


class EncodeError(BatchFlacError):
    """Raised when the encoder ran but exited with a non-zero status."""

    def __init__(self, message: str, returncode: int | None = None):
        self.returncode = returncode
        super().__init__(message)


class EncodeTimeoutError(EncodeError):
    """Raised when the encoder did not finish within the configured timeout."""

    def __init__(self, message: str, timeout: float):
        self.timeout = timeout
        super().__init__(message)


class BatchFailedError(BatchFlacError):
    """
    Summary error for a batch in which jobs failed or were never started.

    Carries the failing outcomes so the caller can report the full diagnostics
    (command line, captured streams) of each one.
    """

    def __init__(self, failures, not_started: int = 0):
        self.failures = tuple(failures)
        self.not_started = not_started
        if not self.failures:
            message = f"{not_started} tracks were not converted"
        elif len(self.failures) == 1:
            failure = self.failures[0]
            target = failure.output_path or "?"
            message = f"Failed to convert {failure.source} into {target}"
        else:
            message = f"{len(self.failures)} tracks failed to convert"
        super().__init__(message)
