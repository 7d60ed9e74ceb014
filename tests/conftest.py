"""Test configuration and fixtures"""

import threading
from pathlib import Path

import pytest

from batchflac.media.encoder import EncoderResult
from batchflac.models.config import ConversionConfig
from batchflac.models.track import TrackRecord


class FakeEncoder:
    """
    Stands in for ffmpeg. Records every argv it is given and answers from a
    script keyed by output file name. A scripted answer may be an
    `EncoderResult`, an exception instance to raise, or a callable taking the
    argv and returning either.
    """

    def __init__(self, script=None):
        self.script = dict(script or {})
        self.calls = []
        self._lock = threading.Lock()

    def run(self, argv, timeout=None):
        argv = tuple(argv)
        with self._lock:
            self.calls.append(argv)
        action = self.script.get(Path(argv[-1]).name, EncoderResult(0))
        if callable(action):
            action = action(argv)
        if isinstance(action, BaseException):
            raise action
        return action

    @property
    def outputs(self):
        return [Path(argv[-1]).name for argv in self.calls]


@pytest.fixture
def fake_encoder():
    return FakeEncoder()


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "out"


@pytest.fixture
def make_config(output_dir):
    """Builds a config writing to the temporary output directory."""

    def _make(**overrides):
        overrides.setdefault("output_dir", output_dir)
        return ConversionConfig(**overrides)

    return _make


def make_record(title="Song", artist="Artist", file=None, disc=None, track=None):
    return TrackRecord(
        file=file or f"{title}.wav",
        disc=disc,
        track=track,
        title=title,
        artist=artist,
    )


@pytest.fixture
def sample_records():
    """An eight-track album, one record per track."""
    return [make_record(title=f"Track {n}", track=n + 1) for n in range(8)]
