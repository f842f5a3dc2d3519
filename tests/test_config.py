"""Tests for configuration helpers."""

import pytest

from y2pinyin import config
from y2pinyin.exceptions import ConfigError


def test_static_dir_default(monkeypatch):
    monkeypatch.delenv("Y2PINYIN_STATIC_DIR", raising=False)
    assert config.get_static_dir() == config.DEFAULT_STATIC_DIR
    assert (config.DEFAULT_STATIC_DIR / "index.html").exists()


def test_static_dir_from_env(monkeypatch, temp_dir):
    monkeypatch.setenv("Y2PINYIN_STATIC_DIR", str(temp_dir))
    assert config.get_static_dir() == temp_dir


def test_validate_config_defaults():
    config.validate_config()


@pytest.mark.parametrize(
    "name,value",
    [("HTTP_TIMEOUT", 0), ("POLL_INTERVAL", 5.0), ("SERVER_PORT", 70000), ("SEARCH_LIMIT", 0)],
)
def test_validate_config_rejects(monkeypatch, name, value):
    monkeypatch.setattr(config, name, value)
    with pytest.raises(ConfigError):
        config.validate_config()
