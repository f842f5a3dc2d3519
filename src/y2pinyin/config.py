"""Configuration settings for Y2Pinyin."""

import os
from pathlib import Path
from typing import Optional

from . import __version__
from .exceptions import ConfigError

# Directories
PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_STATIC_DIR = PACKAGE_DIR / "server" / "static"

# Lyrics provider (can be overridden via environment variables)
LRCLIB_BASE_URL = os.getenv("Y2PINYIN_LRCLIB_URL", "https://lrclib.net").rstrip("/")
USER_AGENT = os.getenv(
    "Y2PINYIN_USER_AGENT",
    f"y2pinyin/{__version__} (https://github.com/y2pinyin/y2pinyin)",
)
HTTP_TIMEOUT = float(os.getenv("Y2PINYIN_HTTP_TIMEOUT", "10"))
SEARCH_LIMIT = int(os.getenv("Y2PINYIN_SEARCH_LIMIT", "20"))

# YouTube metadata
YOUTUBE_OEMBED_URL = "https://www.youtube.com/oembed"

# Result cache
CACHE_TTL = float(os.getenv("Y2PINYIN_CACHE_TTL", "3600"))  # one hour

# Playback sync
POLL_INTERVAL = float(os.getenv("Y2PINYIN_POLL_INTERVAL", "0.15"))
POLL_INTERVAL_RANGE = (0.02, 1.0)
REQUERY_EVERY_TICKS = 20  # estimation ticks between player requeries
SEEK_SETTLE_SECONDS = 2.0  # queried times far from a seek target are ignored this long
SEEK_TOLERANCE = 1.0  # seconds; a queried time this close to the target ends settling

# Untimed lyrics get this many seconds per line (approximation, not real sync)
UNTIMED_LINE_SECONDS = float(os.getenv("Y2PINYIN_UNTIMED_LINE_SECONDS", "3.0"))

# Terminal display
DISPLAY_CONTEXT_LINES = 2  # lines shown before/after the active line

# mpv player
MPV_PATH = os.getenv("Y2PINYIN_MPV_PATH")
MPV_CONNECT_TIMEOUT = 5.0
MPV_QUERY_TIMEOUT = 0.5
MPV_SEEK_TIMEOUT = 2.0

# Static server
SERVER_HOST = os.getenv("Y2PINYIN_HOST", "0.0.0.0")
SERVER_PORT = int(os.getenv("Y2PINYIN_PORT", os.getenv("PORT", "3000")))

APP_INFO = {
    "name": "YouTube Pinyin Karaoke Generator",
    "type": "static",
    "version": __version__,
    "description": (
        "Helps non-Chinese speakers follow along with Chinese songs by "
        "displaying pinyin lyrics alongside original Chinese characters"
    ),
}


def validate_config() -> None:
    """Validate configuration values."""
    if HTTP_TIMEOUT <= 0:
        raise ConfigError("Invalid HTTP timeout")

    if CACHE_TTL <= 0:
        raise ConfigError("Invalid cache TTL")

    if not (POLL_INTERVAL_RANGE[0] <= POLL_INTERVAL <= POLL_INTERVAL_RANGE[1]):
        raise ConfigError(
            f"Poll interval must be between {POLL_INTERVAL_RANGE[0]} and "
            f"{POLL_INTERVAL_RANGE[1]} seconds"
        )

    if UNTIMED_LINE_SECONDS <= 0:
        raise ConfigError("Invalid untimed line duration")

    if not (0 < SERVER_PORT < 65536):
        raise ConfigError("Invalid server port")

    if SEARCH_LIMIT <= 0:
        raise ConfigError("Invalid search limit")


def get_static_dir() -> Path:
    """Get static file directory from environment or the bundled one."""
    static_dir = os.getenv("Y2PINYIN_STATIC_DIR")
    if static_dir:
        return Path(static_dir)
    return DEFAULT_STATIC_DIR


def get_mpv_path() -> Optional[str]:
    """Get the configured mpv binary, if any."""
    return MPV_PATH or None


# Validate config on import
validate_config()
