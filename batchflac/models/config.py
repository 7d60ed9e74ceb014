"""
Pydantic model for conversion configuration.
Provides validation for every option of a run.
"""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, field_validator

COVER_EXTENSIONS = (".jpg", ".jpeg", ".png")


class FailurePolicy(str, Enum):
    """What the orchestrator does once a job has failed."""

    FAIL_FAST = "fail-fast"
    CONTINUE = "continue"


class ConversionConfig(BaseModel):
    """A validated, read-only configuration for one conversion run."""

    # Paths
    output_dir: Path
    input_dir: Path | None = None
    cover: Path | None = None

    # Album-level metadata
    album_title: str | None = None
    album_artist: str | None = None
    date: str | None = None

    # Execution
    workers: int = 0
    verbose: bool = False
    failure_policy: FailurePolicy = FailurePolicy.FAIL_FAST
    encoder: str = "ffmpeg"
    job_timeout: float | None = None

    # Schema toggles
    require_track_artist: bool = False
    allow_duplicate_outputs: bool = False

    class Config:
        """Pydantic model configuration."""

        frozen = True
        str_strip_whitespace = True

    @field_validator("album_title", "album_artist", "date", mode="after")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        """Treats empty metadata overrides as unset so no `key=` tag is written."""
        return v or None

    @field_validator("workers")
    @classmethod
    def validate_workers(cls, v: int) -> int:
        """Zero selects one worker per available CPU."""
        if v < 0:
            raise ValueError("Workers must be 0 (all CPUs) or a positive number.")
        return v

    @field_validator("job_timeout")
    @classmethod
    def validate_timeout(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("Timeout must be a positive number of seconds.")
        return v

    @field_validator("encoder")
    @classmethod
    def validate_encoder(cls, v: str) -> str:
        if not v:
            raise ValueError("Encoder executable cannot be empty.")
        return v

    @field_validator("cover")
    @classmethod
    def validate_cover(cls, v: Path | None) -> Path | None:
        """Cover art is attached as a picture stream, so only images are accepted."""
        if v is not None and v.suffix.lower() not in COVER_EXTENSIONS:
            raise ValueError("Cover art must be a .jpg or .png image.")
        return v
