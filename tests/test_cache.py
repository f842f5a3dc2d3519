"""Test the result cache."""

import pytest

from y2pinyin.utils.cache import TTLCache, normalize_query


class TestTTLCache:
    """Test cache expiry behavior."""

    def test_put_and_get(self, fake_clock):
        cache = TTLCache(ttl=10, clock=fake_clock)
        cache.put("a", [1, 2])
        assert cache.get("a") == [1, 2]
        assert "a" in cache
        assert len(cache) == 1

    def test_missing_key(self, fake_clock):
        cache = TTLCache(ttl=10, clock=fake_clock)
        assert cache.get("missing") is None
        assert "missing" not in cache

    def test_entry_expires(self, fake_clock):
        """Entries vanish once the window has fully elapsed."""
        cache = TTLCache(ttl=10, clock=fake_clock)
        cache.put("a", "value")
        fake_clock.advance(9.99)
        assert cache.get("a") == "value"
        fake_clock.advance(0.01)
        assert cache.get("a") is None
        assert len(cache) == 0

    def test_put_refreshes_window(self, fake_clock):
        cache = TTLCache(ttl=10, clock=fake_clock)
        cache.put("a", 1)
        fake_clock.advance(8)
        cache.put("a", 2)
        fake_clock.advance(8)
        assert cache.get("a") == 2

    def test_purge_expired(self, fake_clock):
        cache = TTLCache(ttl=5, clock=fake_clock)
        cache.put("old", 1)
        fake_clock.advance(3)
        cache.put("new", 2)
        fake_clock.advance(3)
        assert cache.purge_expired() == 1
        assert cache.get("new") == 2

    def test_clear(self, fake_clock):
        cache = TTLCache(ttl=5, clock=fake_clock)
        cache.put("a", 1)
        cache.clear()
        assert len(cache) == 0

    @pytest.mark.parametrize("ttl", [0, -1])
    def test_invalid_ttl(self, ttl):
        with pytest.raises(ValueError):
            TTLCache(ttl=ttl)


def test_normalize_query():
    assert normalize_query("  Jay   CHOU  晴天 ") == "jay chou 晴天"
    assert normalize_query("晴天") == normalize_query("晴天 ")
