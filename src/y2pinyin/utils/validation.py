"""Validation utilities."""

import logging
import math
import re

from ..config import POLL_INTERVAL_RANGE
from ..exceptions import ValidationError

logger = logging.getLogger(__name__)

YOUTUBE_URL_PATTERNS = [
    r"(?:youtube\.com/watch\?(?:.*&)?v=|youtu\.be/)([a-zA-Z0-9_-]{11})",
    r"youtube\.com/(?:embed|v|shorts|live)/([a-zA-Z0-9_-]{11})",
    r"music\.youtube\.com/watch\?(?:.*&)?v=([a-zA-Z0-9_-]{11})",
]


def validate_youtube_url(url: str) -> str:
    """Validate and normalize YouTube URL."""
    if not url or not url.strip():
        raise ValidationError("URL cannot be empty")

    url = url.strip()
    for pattern in YOUTUBE_URL_PATTERNS:
        if re.search(pattern, url):
            return url

    raise ValidationError(f"Invalid YouTube URL: {url}")


def validate_poll_interval(interval: float) -> float:
    """Validate tracker polling interval."""
    low, high = POLL_INTERVAL_RANGE
    if not low <= interval <= high:
        raise ValidationError(f"Poll interval must be between {low} and {high} seconds")
    return interval


def validate_seek_time(seconds: float) -> float:
    """Validate a seek target; negative targets clamp to the track start."""
    if seconds is None or math.isnan(seconds) or math.isinf(seconds):
        raise ValidationError(f"Invalid seek time: {seconds!r}")
    if seconds < 0:
        logger.debug(f"Clamping negative seek time {seconds} to 0")
        return 0.0
    return float(seconds)


def validate_pick(pick: int, count: int) -> int:
    """Validate a 1-based result choice against the number of results."""
    if count <= 0:
        raise ValidationError("No results to choose from")
    if not 1 <= pick <= count:
        raise ValidationError(f"Choice must be between 1 and {count}")
    return pick - 1


def validate_query(query: str) -> str:
    """Validate a free-text search query."""
    cleaned = " ".join((query or "").split())
    if not cleaned:
        raise ValidationError("Search query cannot be empty")
    return cleaned
