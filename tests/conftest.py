"""Test configuration and fixtures.

Provides reusable fixtures for:
- Temporary files and directories
- LRCLIB records and fake HTTP sessions
- Fake players and clocks for playback sync tests
"""

import os
import tempfile
from pathlib import Path

import pytest
import requests

from y2pinyin.exceptions import PlayerUnavailableError


def pytest_addoption(parser):
    parser.addoption(
        "--run-network",
        action="store_true",
        default=False,
        help="Run tests that require network access",
    )


def pytest_collection_modifyitems(config, items):
    run_network = config.getoption("--run-network") or os.getenv(
        "RUN_INTEGRATION_TESTS"
    ) == "1"
    if run_network:
        return

    skip_network = pytest.mark.skip(
        reason="requires network access (use --run-network or RUN_INTEGRATION_TESTS=1)"
    )
    for item in items:
        if "network" in item.keywords:
            item.add_marker(skip_network)


# =============================================================================
# Basic Fixtures
# =============================================================================


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_youtube_url():
    """Sample YouTube URL for testing."""
    return "https://www.youtube.com/watch?v=dQw4w9WgXcQ"


# =============================================================================
# HTTP fakes
# =============================================================================


class FakeResponse:
    def __init__(self, status_code=200, json_data=None):
        self.status_code = status_code
        self._json_data = json_data

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self._json_data, Exception):
            raise self._json_data
        return self._json_data


class FakeSession:
    def __init__(self, responses):
        self._responses = list(responses)
        self.calls = []

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append((url, params, headers, timeout))
        if not self._responses:
            raise requests.ConnectionError("no response")
        response = self._responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


@pytest.fixture
def fake_session():
    """Factory for FakeSession objects."""
    return FakeSession


@pytest.fixture
def fake_response():
    """Factory for FakeResponse objects."""
    return FakeResponse


# =============================================================================
# LRCLIB Fixtures
# =============================================================================


@pytest.fixture
def lrc_nihao():
    """Two-line synced lyrics."""
    return "[00:01.00]你好\n[00:03.50]世界"


@pytest.fixture
def lrclib_record(lrc_nihao):
    """LRCLIB record with synced and plain lyrics."""
    return {
        "id": 101,
        "trackName": "你好世界",
        "artistName": "歌手",
        "albumName": "专辑",
        "duration": 200.0,
        "instrumental": False,
        "plainLyrics": "你好\n世界",
        "syncedLyrics": lrc_nihao,
    }


@pytest.fixture
def lrclib_plain_record():
    """LRCLIB record with only untimed lyrics."""
    return {
        "id": 102,
        "trackName": "月亮代表我的心",
        "artistName": "邓丽君",
        "albumName": None,
        "duration": 210.0,
        "instrumental": False,
        "plainLyrics": "你问我爱你有多深\n我爱你有几分\n我的情也真\n我的爱也真",
        "syncedLyrics": None,
    }


@pytest.fixture
def lrclib_instrumental_record():
    """LRCLIB record marked instrumental through the synced payload."""
    return {
        "id": 103,
        "trackName": "Interlude",
        "artistName": "Band",
        "albumName": None,
        "duration": 90.0,
        "instrumental": False,
        "plainLyrics": None,
        "syncedLyrics": "[au: instrumental]",
    }


# =============================================================================
# Playback fakes
# =============================================================================


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, now=100.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakePlayer:
    """In-memory VideoPlayer.

    ``times`` is consumed one value per query; an Exception instance in it
    is raised instead of returned. When it runs out the last value repeats.
    """

    def __init__(self, supports_time_query=True, times=None, seek_error=None):
        self.supports_time_query = supports_time_query
        self.times = list(times or [])
        self.seek_error = seek_error
        self.seeks = []
        self.listener = None
        self.closed = False
        self._last_time = 0.0

    async def get_current_time(self):
        if not self.supports_time_query:
            raise PlayerUnavailableError("queries unsupported")
        if self.times:
            value = self.times.pop(0)
            if isinstance(value, Exception):
                raise value
            self._last_time = value
        return self._last_time

    async def seek(self, seconds):
        if self.seek_error is not None:
            raise self.seek_error
        self.seeks.append(seconds)

    def set_listener(self, listener):
        self.listener = listener

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def fake_player():
    """Factory for FakePlayer objects."""
    return FakePlayer
