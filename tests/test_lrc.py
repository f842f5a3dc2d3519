"""Tests for LRC parsing and line creation."""

import math

import pytest

from y2pinyin.core.lrc import (
    format_timestamp,
    lyrics_status,
    parse_plain_lyrics,
    parse_synced_lyrics,
    parse_timestamp,
    parse_track,
    split_synced_line,
    strip_timestamps,
)
from y2pinyin.core.models import LyricsStatus, TrackSelection


def upper(text):
    return text.upper()


class TestParseTimestamp:
    def test_valid(self):
        assert parse_timestamp("[01:23.45]") == pytest.approx(83.45)
        assert parse_timestamp("[00:00.00]") == 0.0

    @pytest.mark.parametrize(
        "tag",
        ["", "[1:23.45]", "[01:23]", "[01:23.4]", "[01:23.456]", "[ar:Artist]", "[01:60.00]"],
    )
    def test_invalid(self, tag):
        assert parse_timestamp(tag) is None

    def test_split_line(self):
        assert split_synced_line("[00:03.50]世界") == (3.5, "世界")
        assert split_synced_line("[00:03.50]") == (3.5, "")
        assert split_synced_line("世界") is None

    def test_split_line_with_repeated_tags(self):
        assert split_synced_line("[00:01.00][00:05.00]副歌") == (1.0, "副歌")
        assert split_synced_line("[00:01.00] [00:05.00] ") == (1.0, "")


class TestParseSyncedLyrics:
    def test_two_lines(self, lrc_nihao):
        lines = parse_synced_lyrics(lrc_nihao)
        assert len(lines) == 2
        assert lines[0].source_text == "你好"
        assert lines[0].annotation == "nǐ hǎo"
        assert lines[0].start_time == 1.0
        assert lines[0].end_time == 3.5
        assert lines[1].start_time == 3.5
        assert math.isinf(lines[1].end_time)

    def test_malformed_line_is_dropped(self):
        text = "[00:01.00]一\n[0:02.00]二\n[00:03.00]三"
        lines = parse_synced_lyrics(text, convert=upper)
        assert [line.source_text for line in lines] == ["一", "三"]
        assert lines[0].end_time == 3.0

    def test_metadata_tags_and_blank_lines_ignored(self):
        text = "[ar:Artist]\n[ti:Title]\n\n[00:05.00]first\n\n[00:07.25]second\n"
        lines = parse_synced_lyrics(text, convert=upper)
        assert [line.source_text for line in lines] == ["first", "second"]
        assert [line.annotation for line in lines] == ["FIRST", "SECOND"]

    def test_last_line_unbounded(self):
        lines = parse_synced_lyrics("[00:10.00]only", convert=upper)
        assert lines[0].contains(10_000.0)
        assert not lines[0].is_bounded

    def test_empty_payload(self):
        assert parse_synced_lyrics("") == ()
        assert parse_synced_lyrics("no timestamps here") == ()

    def test_result_is_immutable_sequence(self, lrc_nihao):
        assert isinstance(parse_synced_lyrics(lrc_nihao, convert=upper), tuple)


class TestParsePlainLyrics:
    def test_synthetic_windows(self):
        lines = parse_plain_lyrics("一\n\n二\n三", line_seconds=3.0, convert=upper)
        assert len(lines) == 3
        assert (lines[2].start_time, lines[2].end_time) == (6.0, 9.0)
        assert lines[0].contains(0.0)
        assert not lines[0].contains(3.0)

    def test_rejects_bad_duration(self):
        with pytest.raises(ValueError):
            parse_plain_lyrics("一", line_seconds=0)

    def test_empty(self):
        assert parse_plain_lyrics("") == ()


class TestParseTrack:
    def test_prefers_synced(self, lrclib_record):
        selection = TrackSelection.from_record(lrclib_record)
        lines = parse_track(selection, convert=upper)
        assert lines[1].start_time == 3.5
        assert lyrics_status(selection, lines) is LyricsStatus.READY

    def test_falls_back_to_plain(self, lrclib_plain_record):
        selection = TrackSelection.from_record(lrclib_plain_record)
        lines = parse_track(selection, line_seconds=2.0, convert=upper)
        assert len(lines) == 4
        assert lines[3].start_time == 6.0
        assert lyrics_status(selection, ()) is LyricsStatus.NOT_FOUND

    def test_unparseable_synced_uses_plain(self):
        selection = TrackSelection(
            id=1, track_name="t", artist_name="a",
            plain_lyrics="line one\nline two", synced_lyrics="garbage",
        )
        lines = parse_track(selection, convert=upper)
        assert [line.source_text for line in lines] == ["line one", "line two"]

    def test_instrumental_yields_nothing(self, lrclib_instrumental_record):
        selection = TrackSelection.from_record(lrclib_instrumental_record)
        assert selection.instrumental
        assert parse_track(selection) == ()
        assert lyrics_status(selection, ()) is LyricsStatus.INSTRUMENTAL


def test_strip_timestamps():
    assert strip_timestamps("[00:01.00]你好\n[00:03.50][00:09.00]世界") == "你好\n世界"


@pytest.mark.parametrize(
    "seconds,expected",
    [(0, "00:00.00"), (83.45, "01:23.45"), (-1, "00:00.00"), (math.inf, "--:--.--")],
)
def test_format_timestamp(seconds, expected):
    assert format_timestamp(seconds) == expected
