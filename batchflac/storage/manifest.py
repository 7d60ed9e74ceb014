"""
Reads the CSV manifest that lists the tracks to convert.

The whole file is parsed before any conversion starts; a single bad row aborts
the run.
"""

import csv
import logging
from pathlib import Path

from pydantic import ValidationError
from rich.markup import escape

from batchflac.exceptions import ManifestError
from batchflac.models.track import TrackRecord

log = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("file", "title")
OPTIONAL_COLUMNS = ("disc", "track", "artist")


def _describe_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        field = ".".join(str(loc) for loc in item["loc"]) or "row"
        parts.append(f"{field}: {item['msg']}")
    return "; ".join(parts)


def parse_manifest(lines) -> list[TrackRecord]:
    """
    Parses manifest rows from an iterable of CSV lines.

    Returns:
        The records in manifest order.

    Raises:
        ManifestError: If the header is missing required columns or any row
            fails validation. All bad rows are listed in the message.
    """
    reader = csv.DictReader(lines, skipinitialspace=True)
    if reader.fieldnames is None:
        raise ManifestError("Manifest is empty; expected a header row.")

    header = [name.strip().lower() for name in reader.fieldnames]
    reader.fieldnames = header
    if missing := [col for col in REQUIRED_COLUMNS if col not in header]:
        raise ManifestError(
            f"Manifest header is missing required column(s): {', '.join(missing)}."
        )

    records: list[TrackRecord] = []
    problems: list[str] = []
    for row in reader:
        if None in row:
            problems.append(f"line {reader.line_num}: too many fields")
            continue
        fields = {
            col: (row.get(col) or "").strip()
            for col in REQUIRED_COLUMNS + OPTIONAL_COLUMNS
            if col in header
        }
        try:
            records.append(TrackRecord(**fields))
        except ValidationError as e:
            problems.append(f"line {reader.line_num}: {_describe_validation_error(e)}")

    if problems:
        raise ManifestError("Invalid manifest rows: " + " | ".join(problems))
    return records


def read_manifest(path: Path) -> list[TrackRecord]:
    """Reads and validates the manifest at `path`."""
    try:
        with open(path, "r", encoding="utf-8-sig", newline="") as f:
            records = parse_manifest(f)
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestError(f"Could not read manifest '{path}': {e}") from e
    except csv.Error as e:
        raise ManifestError(f"Malformed CSV in '{path}': {e}") from e
    log.debug(
        f"Read {len(records)} records from manifest: [dim]{escape(str(path))}[/dim]"
    )
    return records
