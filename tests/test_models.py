"""Tests for data models."""

import math

import pytest
from y2pinyin.core.models import (
    NO_LINE,
    LyricLine,
    LyricsStatus,
    PlaybackState,
    TrackSelection,
    VideoMetadata,
)

# ------------------------------
# LyricLine Tests
# ------------------------------


class TestLyricLine:
    def test_defaults_to_open_end(self):
        line = LyricLine("你好", "nǐ hǎo", 1.0)
        assert math.isinf(line.end_time)
        assert not line.is_bounded

    def test_contains_is_half_open(self):
        line = LyricLine("你好", "nǐ hǎo", 1.0, 3.5)
        assert line.contains(1.0)
        assert line.contains(3.49)
        assert not line.contains(3.5)
        assert not line.contains(0.99)

    def test_to_dict(self):
        assert LyricLine("你好", "nǐ hǎo", 1.0, 3.5).to_dict() == {
            "text": "你好", "pinyin": "nǐ hǎo", "start": 1.0, "end": 3.5,
        }
        assert LyricLine("世界", "shì jiè", 3.5).to_dict()["end"] is None

    def test_frozen(self):
        line = LyricLine("你好", "nǐ hǎo", 1.0)
        with pytest.raises(AttributeError):
            line.start_time = 2.0


# ------------------------------
# TrackSelection Tests
# ------------------------------


class TestTrackSelection:
    def test_from_record(self, lrclib_record):
        selection = TrackSelection.from_record(lrclib_record)
        assert selection.id == 101
        assert selection.track_name == "你好世界"
        assert selection.album_name == "专辑"
        assert selection.has_lyrics
        assert selection.is_synced
        assert not selection.instrumental
        assert selection.display_title == "你好世界 - 歌手"

    def test_plain_only(self, lrclib_plain_record):
        selection = TrackSelection.from_record(lrclib_plain_record)
        assert selection.has_lyrics
        assert not selection.is_synced
        assert selection.album_name is None

    def test_instrumental_marker(self, lrclib_instrumental_record):
        selection = TrackSelection.from_record(lrclib_instrumental_record)
        assert selection.instrumental
        assert selection.synced_lyrics is None
        assert not selection.has_lyrics

    def test_search_record_without_lyrics(self):
        selection = TrackSelection.from_record(
            {"id": "7", "name": "晴天", "artistName": "周杰伦", "duration": "269",
             "plainLyrics": "  ", "syncedLyrics": None}
        )
        assert selection.id == 7
        assert selection.track_name == "晴天"
        assert selection.duration == 269.0
        assert not selection.has_lyrics

    def test_bad_duration(self):
        selection = TrackSelection.from_record({"id": 1, "trackName": "x", "duration": "n/a"})
        assert selection.duration is None
        assert selection.display_title == "x"

    def test_to_dict(self, lrclib_record):
        data = TrackSelection.from_record(lrclib_record).to_dict()
        assert data["trackName"] == "你好世界"
        assert data["synced"] is True
        assert "syncedLyrics" not in data


# ------------------------------
# Playback state and metadata
# ------------------------------


def test_playback_state_reset():
    state = PlaybackState(current_time=12.0, active_line_index=3)
    state.reset()
    assert state.current_time == 0.0
    assert state.active_line_index == NO_LINE


def test_status_values():
    assert LyricsStatus.NOT_FOUND.value == "not_found"
    assert LyricsStatus("ready") is LyricsStatus.READY


def test_video_metadata():
    metadata = VideoMetadata("dQw4w9WgXcQ", "晴天 (MV)", "Jay Chou", "晴天")
    assert metadata.url == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
    assert metadata.to_dict() == {
        "videoId": "dQw4w9WgXcQ",
        "title": "晴天 (MV)",
        "authorName": "Jay Chou",
        "searchQuery": "晴天",
    }
