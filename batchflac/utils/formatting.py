"""
Helper functions for formatting data into human-readable strings.
"""

import shlex
from collections.abc import Sequence


def format_duration(seconds: float) -> str:
    """
    Formats a duration in seconds into a human-readable string (e.g., '2h 34m 12s').
    """
    s = int(seconds)
    hours, remainder = divmod(s, 3600)
    minutes, secs = divmod(remainder, 60)
    parts = []
    if hours > 0:
        parts.append(f"{hours}h")
    if minutes > 0:
        parts.append(f"{minutes}m")
    if secs > 0 or not parts:
        parts.append(f"{secs}s")
    return " ".join(parts)


def format_command(argv: Sequence[str]) -> str:
    """Renders an argument vector as a shell command that can be pasted to re-run it."""
    return shlex.join(str(arg) for arg in argv)


def decode_output(data: bytes) -> str:
    """Decodes captured process output, replacing undecodable bytes."""
    return data.decode("utf-8", errors="replace").rstrip()
