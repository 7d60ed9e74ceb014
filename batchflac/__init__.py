"""
batchflac: convert the tracks of a CSV manifest to tagged FLAC files with ffmpeg.
"""

__version__ = "0.3.0"
