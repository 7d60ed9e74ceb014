"""Tests for manifest parsing"""

import io
from pathlib import Path

import pytest

from batchflac.exceptions import ManifestError
from batchflac.storage.manifest import parse_manifest, read_manifest


def parse(text):
    return parse_manifest(io.StringIO(text))


def test_fields_are_trimmed_and_blanks_are_unset():
    records = parse(
        "file,disc,track,title,artist\n"
        "  a.wav , 1 , 2 ,  Song One  , Artist \n"
        "b.wav,,,Other,\n"
    )

    assert len(records) == 2
    first, second = records
    assert first.file == Path("a.wav")
    assert (first.disc, first.track) == (1, 2)
    assert first.title == "Song One"
    assert first.artist == "Artist"
    assert second.disc is None
    assert second.track is None
    assert second.artist is None


def test_artist_column_is_optional():
    records = parse("file,track,title\na.wav,1,Song\n")
    assert records[0].artist is None
    assert records[0].disc is None


def test_header_is_case_insensitive():
    records = parse("File, Title ,ARTIST\na.wav,Song,Band\n")
    assert records[0].title == "Song"
    assert records[0].artist == "Band"


def test_unicode_values_are_preserved():
    records = parse("file,title,artist\nå.flac,Ça va,Sigur Rós\n")
    assert records[0].title == "Ça va"
    assert records[0].artist == "Sigur Rós"


def test_missing_title_aborts_whole_manifest():
    with pytest.raises(ManifestError, match="line 3"):
        parse("file,title,artist\na.wav,Song,A\nb.wav,  ,A\nc.wav,Third,A\n")


def test_every_bad_row_is_reported():
    with pytest.raises(ManifestError) as exc_info:
        parse("file,disc,title\n,1,Song\nb.wav,x,Song\nc.wav,1,Fine\n")
    message = str(exc_info.value)
    assert "line 2" in message
    assert "line 3" in message
    assert "line 4" not in message


def test_negative_numbers_are_rejected():
    with pytest.raises(ManifestError, match="track"):
        parse("file,track,title\na.wav,-1,Song\n")


def test_missing_required_column():
    with pytest.raises(ManifestError, match="title"):
        parse("file,artist\na.wav,A\n")


def test_empty_manifest():
    with pytest.raises(ManifestError, match="empty"):
        parse("")


def test_header_only_manifest_has_no_records():
    assert parse("file,disc,track,title,artist\n") == []


def test_too_many_fields():
    with pytest.raises(ManifestError, match="too many fields"):
        parse("file,title\na.wav,Song,extra\n")


def test_read_manifest_from_disk(tmp_path):
    manifest = tmp_path / "tracks.csv"
    manifest.write_text(
        "\ufefffile,disc,track,title,artist\na.wav,1,1,Song One,Artist\n",
        encoding="utf-8",
    )
    records = read_manifest(manifest)
    assert records[0].file == Path("a.wav")


def test_read_manifest_missing_file(tmp_path):
    with pytest.raises(ManifestError, match="Could not read manifest"):
        read_manifest(tmp_path / "nope.csv")
