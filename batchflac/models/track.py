"""
Pydantic model for a single manifest row.
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator


class TrackRecord(BaseModel):
    """One track to convert, as described by the manifest."""

    file: Path
    disc: int | None = Field(default=None, ge=0)
    track: int | None = Field(default=None, ge=0)
    title: str
    artist: str | None = None

    class Config:
        """Pydantic model configuration."""

        frozen = True
        str_strip_whitespace = True

    @field_validator("file", mode="before")
    @classmethod
    def validate_file(cls, v: Any) -> Any:
        """Rejects blank paths."""
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("File cannot be empty.")
        return v

    @field_validator("disc", "track", mode="before")
    @classmethod
    def blank_number_to_none(cls, v: Any) -> Any:
        """Blank disc and track cells mean the number is not set."""
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        if not v:
            raise ValueError("Title cannot be empty.")
        return v

    @field_validator("artist", mode="after")
    @classmethod
    def blank_artist_to_none(cls, v: str | None) -> str | None:
        return v or None
