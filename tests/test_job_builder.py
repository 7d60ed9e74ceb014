"""Tests for job construction: naming, metadata and encoder arguments"""

from pathlib import Path

import pytest

from batchflac.core.job_builder import (
    JobBuilder,
    check_unique_outputs,
    find_output_collisions,
)
from batchflac.exceptions import DuplicateOutputError, MissingArtistError
from batchflac.models.job import Failure, Job

from .conftest import make_record


def metadata_args(job):
    """Returns the values that follow each -metadata flag."""
    args = list(job.args)
    return [args[i + 1] for i, arg in enumerate(args) if arg == "-metadata"]


def test_single_track_end_to_end(make_config, output_dir):
    config = make_config()
    record = make_record(file="a.wav", disc=1, track=1, title="Song One", artist="Artist")

    job = JobBuilder(config).build(record)

    assert job.output_path == output_dir / "1.01-Artist-Song One.flac"
    assert job.input_path == Path("a.wav")
    assert metadata_args(job) == [
        "title=Song One",
        "artist=Artist",
        "disc=1",
        "track=1",
    ]
    assert list(job.argv) == [
        "ffmpeg",
        "-hide_banner",
        "-nostdin",
        "-i",
        "a.wav",
        "-map",
        "0:a",
        "-metadata",
        "title=Song One",
        "-metadata",
        "artist=Artist",
        "-metadata",
        "disc=1",
        "-metadata",
        "track=1",
        "-c:a",
        "flac",
        "-y",
        str(output_dir / "1.01-Artist-Song One.flac"),
    ]


@pytest.mark.parametrize(
    "disc, track, expected",
    [
        (1, 3, "1.03-"),
        (10, 12, "10.12-"),
        (2, None, "2-"),
        (None, 7, "07-"),
        (None, 123, "123-"),
        (None, None, ""),
    ],
)
def test_filename_prefix(make_config, disc, track, expected):
    job = JobBuilder(make_config()).build(
        make_record(title="Title", artist="Band", disc=disc, track=track)
    )
    assert job.output_path.name == f"{expected}Band-Title.flac"


def test_input_dir_is_joined(make_config, tmp_path):
    config = make_config(input_dir=tmp_path / "wav")
    job = JobBuilder(config).build(make_record(file="disc1/a.wav"))
    assert job.input_path == tmp_path / "wav" / "disc1" / "a.wav"
    assert job.source == Path("disc1/a.wav")


def test_album_metadata_order(make_config):
    config = make_config(album_title="Album", album_artist="Band", date="1999")
    job = JobBuilder(config).build(
        make_record(title="T", artist="A", disc=2, track=4)
    )
    assert metadata_args(job) == [
        "title=T",
        "artist=A",
        "album=Album",
        "album_artist=Band",
        "date=1999",
        "disc=2",
        "track=4",
    ]


def test_unset_values_are_never_emitted_empty(make_config):
    config = make_config(album_title="", album_artist="  ", date=None)
    job = JobBuilder(config).build(make_record(title="T", artist="A"))
    assert metadata_args(job) == ["title=T", "artist=A"]
    assert not any(value.endswith("=") for value in metadata_args(job))


def test_cover_arguments(make_config):
    config = make_config(cover=Path("art/cover.jpg"))
    job = JobBuilder(config).build(make_record(file="a.wav", title="T", artist="A"))
    args = list(job.args)

    assert args[:9] == [
        "-hide_banner",
        "-nostdin",
        "-i",
        "a.wav",
        "-i",
        str(Path("art/cover.jpg")),
        "-map",
        "0:a",
        "-map",
    ]
    assert args[9] == "1:v"
    cover_flags = [
        "-c:v",
        "copy",
        "-disposition:v",
        "attached_pic",
        "-metadata:s:v",
        "comment=Cover (front)",
    ]
    start = args.index("-c:v")
    assert args[start : start + len(cover_flags)] == cover_flags
    assert args[start + len(cover_flags) :] == [
        "-c:a",
        "flac",
        "-y",
        str(job.output_path),
    ]


def test_no_cover_maps_audio_only(make_config):
    job = JobBuilder(make_config()).build(make_record())
    assert "1:v" not in job.args
    assert "-c:v" not in job.args


def test_transliteration_only_affects_filename(make_config):
    record = make_record(title="Café: L'été / Été?", artist="Motörhead")
    job = JobBuilder(make_config()).build(record)

    name = job.output_path.name
    assert name.isascii()
    assert name.startswith("Motorhead-Cafe")
    assert not set('/\\:*?"<>|') & set(name)
    assert metadata_args(job)[:2] == [
        "title=Café: L'été / Été?",
        "artist=Motörhead",
    ]


def test_non_latin_scripts_are_transliterated(make_config):
    job = JobBuilder(make_config()).build(make_record(title="東京", artist="Artist"))
    assert job.output_path.name == "Artist-Dong Jing.flac"
    assert "title=東京" in metadata_args(job)


def test_missing_artist_fails(make_config):
    with pytest.raises(MissingArtistError) as exc_info:
        JobBuilder(make_config()).build(make_record(file="x.wav", artist=None))
    assert exc_info.value.source == Path("x.wav")


def test_album_artist_is_fallback(make_config, output_dir):
    config = make_config(album_artist="Various")
    job = JobBuilder(config).build(make_record(title="Song", artist=None, track=2))

    assert job.output_path == output_dir / "02-Various-Song.flac"
    assert metadata_args(job)[:2] == ["title=Song", "artist=Various"]
    assert "album_artist=Various" in metadata_args(job)


def test_track_artist_wins_over_album_artist(make_config):
    config = make_config(album_artist="Various")
    job = JobBuilder(config).build(make_record(title="Song", artist="Solo"))
    assert job.output_path.name == "Solo-Song.flac"


def test_require_track_artist_ignores_album_artist(make_config):
    config = make_config(album_artist="Various", require_track_artist=True)
    with pytest.raises(MissingArtistError):
        JobBuilder(config).build(make_record(artist=None))


def test_plan_keeps_manifest_order_and_records_build_failures(make_config):
    records = [
        make_record(title="One"),
        make_record(title="Two", artist=None, file="two.wav"),
        make_record(title="Three"),
    ]
    entries = JobBuilder(make_config()).plan(records)

    assert [e.index for e in entries] == [0, 1, 2]
    assert isinstance(entries[0], Job)
    assert isinstance(entries[1], Failure)
    assert isinstance(entries[1].error, MissingArtistError)
    assert entries[1].output_path is None
    assert entries[1].argv == ()
    assert isinstance(entries[2], Job)


def test_collisions_are_detected(make_config):
    builder = JobBuilder(make_config())
    jobs = [
        builder.build(make_record(title="Song", file="a.wav"), 0),
        builder.build(make_record(title="Other", file="b.wav"), 1),
        builder.build(make_record(title="song", file="c.wav"), 2),
    ]

    collisions = find_output_collisions(jobs)

    assert list(collisions.values()) == [[0, 2]]
    assert list(collisions)[0].endswith("Artist-Song.flac")
    with pytest.raises(DuplicateOutputError, match="rows 1, 3"):
        check_unique_outputs(jobs)


def test_distinct_outputs_pass_collision_check(make_config, sample_records):
    builder = JobBuilder(make_config())
    jobs = [builder.build(r, i) for i, r in enumerate(sample_records)]
    assert find_output_collisions(jobs) == {}
    check_unique_outputs(jobs)
