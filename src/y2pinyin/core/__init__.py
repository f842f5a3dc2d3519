"""Core functionality modules."""

from .models import (
    NO_LINE,
    LyricLine,
    LyricsStatus,
    PlaybackState,
    TrackSelection,
    VideoMetadata,
)
from .pinyin import to_pinyin
from .lrc import parse_plain_lyrics, parse_synced_lyrics, parse_track
from .resolver import ActiveLineResolver, find_active_line
from .tracker import PlaybackTracker, Regime, TrackerState
from .seek import SeekCoordinator
from .session import LyricsSession, PlaybackBinding

__all__ = [
    "NO_LINE",
    "LyricLine",
    "LyricsStatus",
    "PlaybackState",
    "TrackSelection",
    "VideoMetadata",
    "to_pinyin",
    "parse_plain_lyrics",
    "parse_synced_lyrics",
    "parse_track",
    "ActiveLineResolver",
    "find_active_line",
    "PlaybackTracker",
    "Regime",
    "TrackerState",
    "SeekCoordinator",
    "LyricsSession",
    "PlaybackBinding",
]
