"""
Media Processing Layer.

This package is responsible for running the external audio encoder that
performs the actual conversion and metadata embedding.
"""

from .encoder import Encoder, EncoderResult, SubprocessEncoder

__all__ = ["Encoder", "EncoderResult", "SubprocessEncoder"]
