"""
Turns manifest records into fully resolved encoder jobs.
"""

import logging
from collections import defaultdict
from collections.abc import Iterable, Sequence
from pathlib import Path

from batchflac.exceptions import BuildError, DuplicateOutputError, MissingArtistError
from batchflac.models.config import ConversionConfig
from batchflac.models.job import Failure, Job
from batchflac.models.track import TrackRecord
from batchflac.utils.path import output_filename

log = logging.getLogger(__name__)

GLOBAL_FLAGS = ("-hide_banner", "-nostdin")
COVER_COMMENT = "Cover (front)"
TARGET_CODEC = "flac"
OUTPUT_EXT = "flac"


class JobBuilder:
    """Builds the immutable `Job` for each manifest record of a run."""

    def __init__(self, config: ConversionConfig):
        self.config = config

    def resolve_input(self, record: TrackRecord) -> Path:
        if self.config.input_dir is not None:
            return self.config.input_dir / record.file
        return record.file

    def resolve_artist(self, record: TrackRecord) -> str:
        """
        Returns the record's own artist, falling back to the album artist
        unless every record is required to name its artist.
        """
        if record.artist:
            return record.artist
        if self.config.album_artist and not self.config.require_track_artist:
            return self.config.album_artist
        raise MissingArtistError(record.file)

    def metadata(self, record: TrackRecord, artist: str) -> list[tuple[str, str]]:
        """Tags to embed, in a fixed order. Unset values are left out entirely."""
        candidates = [
            ("title", record.title),
            ("artist", artist),
            ("album", self.config.album_title),
            ("album_artist", self.config.album_artist),
            ("date", self.config.date),
            ("disc", None if record.disc is None else str(record.disc)),
            ("track", None if record.track is None else str(record.track)),
        ]
        return [(key, value) for key, value in candidates if value]

    def build_args(
        self, input_path: Path, output_path: Path, metadata: Sequence[tuple[str, str]]
    ) -> list[str]:
        """Assembles the encoder arguments (without the program name)."""
        cover = self.config.cover
        args = [*GLOBAL_FLAGS, "-i", str(input_path)]
        if cover is not None:
            args += ["-i", str(cover), "-map", "0:a", "-map", "1:v"]
        else:
            args += ["-map", "0:a"]

        for key, value in metadata:
            args += ["-metadata", f"{key}={value}"]

        if cover is not None:
            args += [
                "-c:v",
                "copy",
                "-disposition:v",
                "attached_pic",
                "-metadata:s:v",
                f"comment={COVER_COMMENT}",
            ]
        args += ["-c:a", TARGET_CODEC, "-y", str(output_path)]
        return args

    def build(self, record: TrackRecord, index: int = 0) -> Job:
        """
        Builds the job for one record.

        Raises:
            MissingArtistError: If no artist can be resolved for the record.
        """
        input_path = self.resolve_input(record)
        artist = self.resolve_artist(record)
        output_path = self.config.output_dir / output_filename(
            record.disc, record.track, artist, record.title, OUTPUT_EXT
        )
        metadata = self.metadata(record, artist)
        return Job(
            index=index,
            source=record.file,
            input_path=input_path,
            output_path=output_path,
            program=self.config.encoder,
            args=tuple(self.build_args(input_path, output_path, metadata)),
            metadata=tuple(metadata),
        )

    def plan(self, records: Iterable[TrackRecord]) -> list[Job | Failure]:
        """
        Builds every record in manifest order. Records that cannot be built
        are returned as `Failure` entries in their place.
        """
        entries: list[Job | Failure] = []
        for index, record in enumerate(records):
            try:
                entries.append(self.build(record, index))
            except BuildError as e:
                log.debug(f"Could not build job for row {index + 1}: {e}")
                entries.append(
                    Failure(index=index, source=record.file, output_path=None, error=e)
                )
        return entries


def find_output_collisions(jobs: Iterable[Job]) -> dict[str, list[int]]:
    """
    Groups jobs that would write the same output file.

    Paths are compared case-insensitively since the default filesystems on
    macOS and Windows are.

    Returns:
        Output path -> manifest indices, for every path used more than once.
    """
    by_path: dict[str, list[int]] = defaultdict(list)
    first_spelling: dict[str, str] = {}
    for job in jobs:
        key = str(job.output_path).casefold()
        first_spelling.setdefault(key, str(job.output_path))
        by_path[key].append(job.index)
    return {
        first_spelling[key]: indices
        for key, indices in by_path.items()
        if len(indices) > 1
    }


def check_unique_outputs(jobs: Iterable[Job]) -> None:
    """Raises `DuplicateOutputError` if two jobs share an output file."""
    if collisions := find_output_collisions(jobs):
        raise DuplicateOutputError(collisions)
