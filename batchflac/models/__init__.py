"""
Data Models Layer.

This package contains the Pydantic models and immutable dataclasses that
describe a conversion run: configuration, manifest records, jobs, outcomes
and statistics.
"""

from .config import ConversionConfig, FailurePolicy
from .job import BatchResult, Failure, Job, Outcome, Success
from .stats import ConversionStats
from .track import TrackRecord

__all__ = [
    "BatchResult",
    "ConversionConfig",
    "ConversionStats",
    "FailurePolicy",
    "Failure",
    "Job",
    "Outcome",
    "Success",
    "TrackRecord",
]
