"""LRC parsing and LyricLine creation for pinyin lyrics.

This module handles:
- Fixed-format LRC timestamp parsing ([MM:SS.hh])
- Building time-bounded, pinyin-annotated lines from synced lyrics
- Synthetic timing for untimed (plain) lyrics
- Choosing between the two for a track selection
"""

import math
import re
from typing import Callable, List, Optional, Tuple

from ..config import UNTIMED_LINE_SECONDS
from ..utils.logging import get_logger
from .models import LyricLine, LyricsStatus, TrackSelection
from .pinyin import to_pinyin

logger = get_logger(__name__)

Converter = Callable[[str], str]

# ----------------------
# LRC timestamp regex
# ----------------------
_LRC_TS_RE = re.compile(
    r"""
    ^\[                     # opening bracket at line start
    (?P<min>\d{2})          # minutes, two digits
    :
    (?P<sec>\d{2})          # seconds, two digits
    \.
    (?P<frac>\d{2})         # hundredths, two digits
    \]                      # closing bracket
    """,
    re.VERBOSE,
)

# Any leading tag, used when deriving plain text from synced lyrics
_LEADING_TAG_RE = re.compile(r"^(?:\[[^\]]*\]\s*)+")


# ----------------------
# LRC timestamp parsing
# ----------------------
def parse_timestamp(tag: str) -> Optional[float]:
    """Parse a single LRC timestamp like [01:23.45] to seconds."""
    if not tag:
        return None
    match = _LRC_TS_RE.match(tag.strip())
    if not match:
        return None
    return _match_seconds(match)


def _match_seconds(match: re.Match) -> Optional[float]:
    seconds = int(match.group("sec"))
    if seconds >= 60:
        return None
    return int(match.group("min")) * 60 + seconds + int(match.group("frac")) / 100


def split_synced_line(line: str) -> Optional[Tuple[float, str]]:
    """Split one LRC line into (start_time, text), or None if it has no valid tag.

    Only the first tag sets the start time; further leading tags are
    removed from the text.
    """
    match = _LRC_TS_RE.match(line)
    if not match:
        return None
    start_time = _match_seconds(match)
    if start_time is None:
        return None
    return start_time, _LEADING_TAG_RE.sub("", line[match.end():].strip()).strip()


def _non_blank_lines(text: str) -> List[str]:
    return [line.strip() for line in text.splitlines() if line.strip()]


# ----------------------
# Line creation
# ----------------------
def parse_synced_lyrics(
    lrc_text: str, convert: Converter = to_pinyin
) -> Tuple[LyricLine, ...]:
    """Create LyricLines from line-timed lyrics.

    Lines without a parseable leading timestamp (metadata tags, stray
    text) are dropped without aborting the parse. Each line ends where the
    next parsed line starts; the last line never ends.
    """
    if not lrc_text:
        return ()

    timed: List[Tuple[float, str]] = []
    dropped = 0
    for line in _non_blank_lines(lrc_text):
        parsed = split_synced_line(line)
        if parsed is None:
            dropped += 1
            continue
        timed.append(parsed)

    if dropped:
        logger.debug(f"Dropped {dropped} LRC line(s) without a valid timestamp")

    lines: List[LyricLine] = []
    for i, (start_time, text) in enumerate(timed):
        end_time = timed[i + 1][0] if i + 1 < len(timed) else math.inf
        lines.append(
            LyricLine(
                source_text=text,
                annotation=convert(text),
                start_time=start_time,
                end_time=end_time,
            )
        )
    return tuple(lines)


def parse_plain_lyrics(
    text: str,
    line_seconds: float = UNTIMED_LINE_SECONDS,
    convert: Converter = to_pinyin,
) -> Tuple[LyricLine, ...]:
    """Create LyricLines from untimed lyrics.

    Every non-blank line gets a uniform ``line_seconds`` window starting at
    ``index * line_seconds``. This is an approximation so the view can
    scroll; it is not real synchronization.
    """
    if not text:
        return ()
    if line_seconds <= 0:
        raise ValueError("line_seconds must be positive")

    return tuple(
        LyricLine(
            source_text=line,
            annotation=convert(line),
            start_time=i * line_seconds,
            end_time=(i + 1) * line_seconds,
        )
        for i, line in enumerate(_non_blank_lines(text))
    )


def parse_track(
    selection: TrackSelection,
    line_seconds: float = UNTIMED_LINE_SECONDS,
    convert: Converter = to_pinyin,
) -> Tuple[LyricLine, ...]:
    """Build the line sequence for a track selection.

    Synced lyrics win; plain lyrics are the fallback; an instrumental
    track or a record without text yields an empty sequence.
    """
    if selection.synced_lyrics:
        lines = parse_synced_lyrics(selection.synced_lyrics, convert=convert)
        if lines:
            return lines
        logger.warning(
            f"Synced lyrics for track {selection.id} had no valid lines, "
            "falling back to plain lyrics"
        )

    plain = selection.plain_lyrics
    if not plain and selection.synced_lyrics:
        plain = strip_timestamps(selection.synced_lyrics)

    if plain:
        return parse_plain_lyrics(plain, line_seconds=line_seconds, convert=convert)

    return ()


def lyrics_status(selection: TrackSelection, lines: Tuple[LyricLine, ...]) -> LyricsStatus:
    """Status to show once a selection has been parsed into ``lines``."""
    if lines:
        return LyricsStatus.READY
    if selection.instrumental:
        return LyricsStatus.INSTRUMENTAL
    return LyricsStatus.NOT_FOUND


def strip_timestamps(lrc_text: str) -> str:
    """Derive plain lyrics from a synced payload by removing leading tags."""
    out_lines = []
    for line in (lrc_text or "").splitlines():
        out_lines.append(_LEADING_TAG_RE.sub("", line.strip()))
    return "\n".join(out_lines).strip()


def format_timestamp(seconds: float) -> str:
    """Format seconds as mm:ss.xx for display."""
    if math.isinf(seconds):
        return "--:--.--"
    if seconds < 0:
        seconds = 0.0
    centis = int(round(seconds * 100))
    minutes, centis = divmod(centis, 6000)
    secs, centis = divmod(centis, 100)
    return f"{minutes:02d}:{secs:02d}.{centis:02d}"
