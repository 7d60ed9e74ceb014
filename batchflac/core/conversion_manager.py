"""
The main coordinator for a conversion run: prepares the output directory,
plans the jobs and hands them to the orchestrator.
"""

import logging
from collections.abc import Sequence

from rich.markup import escape

from batchflac.exceptions import OutputDirectoryError
from batchflac.media.encoder import Encoder
from batchflac.models.config import ConversionConfig
from batchflac.models.job import BatchResult, Failure, Job
from batchflac.models.stats import ConversionStats
from batchflac.models.track import TrackRecord
from batchflac.utils.path import create_dir

from .invoker import ProcessInvoker
from .job_builder import JobBuilder, check_unique_outputs
from .orchestrator import BatchListener, BatchOrchestrator

log = logging.getLogger(__name__)


class ConversionManager:
    """Orchestrates one conversion run."""

    def __init__(
        self,
        config: ConversionConfig,
        encoder: Encoder,
        listener: BatchListener | None = None,
    ):
        self.config = config
        self.stats = ConversionStats()
        self.builder = JobBuilder(config)
        self.invoker = ProcessInvoker(
            encoder, verbose=config.verbose, timeout=config.job_timeout
        )
        self.orchestrator = BatchOrchestrator(
            self.invoker,
            policy=config.failure_policy,
            listener=listener,
            stats=self.stats,
        )

    def preview(self, records: Sequence[TrackRecord]) -> list[Job | Failure]:
        """
        Plans the jobs for `records` without touching the filesystem.

        Raises:
            DuplicateOutputError: If two records map to the same output file
                and duplicates are not allowed.
        """
        entries = self.builder.plan(records)
        if not self.config.allow_duplicate_outputs:
            check_unique_outputs(e for e in entries if isinstance(e, Job))
        return entries

    def execute(self, records: Sequence[TrackRecord]) -> BatchResult:
        """Converts every record and returns the batch result."""
        entries = self.preview(records)
        if not entries:
            log.info("Manifest lists no tracks. Nothing to do.")
            return BatchResult(outcomes=(), total=0, policy=self.config.failure_policy)

        output_dir = self.config.output_dir
        try:
            create_dir(output_dir)
        except OSError as e:
            raise OutputDirectoryError(
                f"Failed to create output directory '{output_dir}': {e}"
            ) from e
        log.debug(f"Writing output to [dim]{escape(str(output_dir))}[/dim]")
        return self.orchestrator.run_all(entries, self.config.workers)
