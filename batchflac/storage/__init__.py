"""
Storage Layer.

This package handles reading the track manifest from disk.
"""

from .manifest import parse_manifest, read_manifest

__all__ = ["parse_manifest", "read_manifest"]
