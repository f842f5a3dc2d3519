"""Utility modules."""

from .logging import setup_logging, get_logger
from .validation import (
    validate_youtube_url,
    validate_poll_interval,
    validate_seek_time,
    validate_pick,
    validate_query,
)
from .cache import TTLCache, normalize_query

__all__ = [
    "setup_logging",
    "get_logger",
    "validate_youtube_url",
    "validate_poll_interval",
    "validate_seek_time",
    "validate_pick",
    "validate_query",
    "TTLCache",
    "normalize_query",
]
