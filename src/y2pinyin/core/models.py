"""Data models for lyrics, track selections and playback state."""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

# Active line index when nothing is playing or no line matches
NO_LINE = -1

# LRCLIB marks some instrumental records with this synced payload
INSTRUMENTAL_MARKER = "[au: instrumental]"


class LyricsStatus(str, Enum):
    """What the presentation layer should show for the current selection."""

    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    INSTRUMENTAL = "instrumental"
    NOT_FOUND = "not_found"
    ERROR = "error"


@dataclass(frozen=True)
class LyricLine:
    """A single lyric line with its pronunciation annotation and time window."""

    source_text: str
    annotation: str
    start_time: float
    end_time: float = math.inf

    def contains(self, t: float) -> bool:
        """Half-open interval test: start inclusive, end exclusive."""
        return self.start_time <= t < self.end_time

    @property
    def is_bounded(self) -> bool:
        return not math.isinf(self.end_time)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "text": self.source_text,
            "pinyin": self.annotation,
            "start": self.start_time,
            "end": self.end_time if self.is_bounded else None,
        }


def _clean_text(value: Any) -> Optional[str]:
    if not value or not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def _to_float(value: Any) -> Optional[float]:
    try:
        return float(value) if value is not None else None
    except (TypeError, ValueError):
        return None


@dataclass(frozen=True)
class TrackSelection:
    """A lyrics record chosen by the user. Replaced wholesale, never mutated."""

    id: int
    track_name: str
    artist_name: str
    album_name: Optional[str] = None
    duration: Optional[float] = None
    instrumental: bool = False
    plain_lyrics: Optional[str] = None
    synced_lyrics: Optional[str] = None

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "TrackSelection":
        """Build a selection from an LRCLIB JSON record."""
        synced = _clean_text(record.get("syncedLyrics"))
        instrumental = bool(record.get("instrumental", False))
        if synced and synced.lower() == INSTRUMENTAL_MARKER:
            instrumental = True
            synced = None

        return cls(
            id=int(record["id"]),
            track_name=record.get("trackName") or record.get("name") or "",
            artist_name=record.get("artistName") or "",
            album_name=_clean_text(record.get("albumName")),
            duration=_to_float(record.get("duration")),
            instrumental=instrumental,
            plain_lyrics=_clean_text(record.get("plainLyrics")),
            synced_lyrics=synced,
        )

    @property
    def has_lyrics(self) -> bool:
        return bool(self.plain_lyrics or self.synced_lyrics)

    @property
    def is_synced(self) -> bool:
        return bool(self.synced_lyrics)

    @property
    def display_title(self) -> str:
        if self.artist_name:
            return f"{self.track_name} - {self.artist_name}"
        return self.track_name

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "trackName": self.track_name,
            "artistName": self.artist_name,
            "albumName": self.album_name,
            "duration": self.duration,
            "instrumental": self.instrumental,
            "synced": self.is_synced,
        }


@dataclass
class PlaybackState:
    """Shared playback state.

    ``current_time`` is written by the tracker and the seek coordinator,
    ``active_line_index`` only by the active-line resolver.
    """

    current_time: float = 0.0
    active_line_index: int = NO_LINE

    def reset(self) -> None:
        self.current_time = 0.0
        self.active_line_index = NO_LINE


@dataclass(frozen=True)
class VideoMetadata:
    """Metadata for a YouTube video."""

    video_id: str
    title: str
    author_name: str
    search_query: str = ""
    # Music metadata, only known when yt-dlp recognizes the song
    track: Optional[str] = None
    artist: Optional[str] = None
    duration: Optional[float] = None

    @property
    def url(self) -> str:
        return f"https://www.youtube.com/watch?v={self.video_id}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "videoId": self.video_id,
            "title": self.title,
            "authorName": self.author_name,
            "searchQuery": self.search_query,
        }
