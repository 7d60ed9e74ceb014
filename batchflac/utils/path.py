"""
Utilities for handling file paths and filesystem-safe names.
"""

from pathlib import Path

from pathvalidate import sanitize_filename
from unidecode import unidecode


def create_dir(directory_path: Path) -> None:
    """Creates a directory (and its parents) if it does not already exist."""
    directory_path.mkdir(parents=True, exist_ok=True)


def to_safe_component(text: str) -> str:
    """
    Transliterates `text` to ASCII and strips characters that are not valid in
    a filename on any common platform.

    Diacritics and non-Latin scripts are mapped to their closest ASCII spelling
    ("Motörhead" -> "Motorhead", "東京" -> "Dong Jing"). Applying the function
    to its own output returns the same string.
    """
    name = unidecode(text).strip()
    # Stripping can expose a reserved name ("CON"), so repeat until stable.
    while True:
        safe = sanitize_filename(name, platform="universal").strip()
        if safe == name:
            return safe
        name = safe


def track_prefix(disc: int | None, track: int | None) -> str:
    """Builds the filename prefix from the disc and track numbers."""
    if disc is not None and track is not None:
        return f"{disc}.{track:02d}-"
    if disc is not None:
        return f"{disc}-"
    if track is not None:
        return f"{track:02d}-"
    return ""


def output_filename(
    disc: int | None, track: int | None, artist: str, title: str, ext: str = "flac"
) -> str:
    """Returns `{prefix}{artist}-{title}.{ext}` with artist and title made safe."""
    prefix = track_prefix(disc, track)
    return f"{prefix}{to_safe_component(artist)}-{to_safe_component(title)}.{ext}"
