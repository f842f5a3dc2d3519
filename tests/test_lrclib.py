"""Tests for the LRCLIB client."""

import pytest
import requests

from y2pinyin.core.lrclib import LrcLibClient
from y2pinyin.exceptions import LyricsFetchError, LyricsNotFoundError


def make_client(fake_session, responses, **kwargs):
    session = fake_session(responses)
    return LrcLibClient("https://lrclib.test/", session=session, **kwargs), session


class TestGetLyrics:
    def test_success(self, fake_session, fake_response, lrclib_record):
        client, session = make_client(fake_session, [fake_response(json_data=lrclib_record)])
        selection = client.get_lyrics(101)
        assert selection.id == 101
        assert selection.track_name == "你好世界"
        assert selection.is_synced
        url, params, headers, timeout = session.calls[0]
        assert url == "https://lrclib.test/api/get/101"
        assert "User-Agent" in headers
        assert timeout == client.timeout

    def test_cached(self, fake_session, fake_response, lrclib_record):
        client, session = make_client(fake_session, [fake_response(json_data=lrclib_record)])
        client.get_lyrics(101)
        client.get_lyrics(101)
        assert len(session.calls) == 1

    def test_not_found(self, fake_session, fake_response):
        client, _ = make_client(fake_session, [fake_response(404, {"message": "not found"})])
        with pytest.raises(LyricsNotFoundError):
            client.get_lyrics(9)

    def test_server_error(self, fake_session, fake_response):
        client, _ = make_client(fake_session, [fake_response(500, {})])
        with pytest.raises(LyricsFetchError) as exc:
            client.get_lyrics(9)
        assert not isinstance(exc.value, LyricsNotFoundError)

    def test_network_error(self, fake_session):
        client, _ = make_client(fake_session, [requests.ConnectionError("offline")])
        with pytest.raises(LyricsFetchError):
            client.get_lyrics(9)

    def test_invalid_json(self, fake_session, fake_response):
        client, _ = make_client(fake_session, [fake_response(json_data=ValueError("bad json"))])
        with pytest.raises(LyricsFetchError):
            client.get_lyrics(9)

    def test_instrumental_marker(self, fake_session, fake_response, lrclib_instrumental_record):
        client, _ = make_client(
            fake_session, [fake_response(json_data=lrclib_instrumental_record)]
        )
        selection = client.get_lyrics(103)
        assert selection.instrumental
        assert selection.synced_lyrics is None


class TestSearch:
    def test_free_text(self, fake_session, fake_response, lrclib_record, lrclib_plain_record):
        client, session = make_client(
            fake_session, [fake_response(json_data=[lrclib_record, lrclib_plain_record])]
        )
        results = client.search("你好 世界")
        assert [r.id for r in results] == [101, 102]
        assert session.calls[0][1] == {"q": "你好 世界"}

    def test_structured(self, fake_session, fake_response):
        client, session = make_client(fake_session, [fake_response(json_data=[])])
        assert client.search(track_name="Song", artist_name="Singer") == []
        assert session.calls[0][1] == {"track_name": "Song", "artist_name": "Singer"}

    def test_cache_key_normalized(self, fake_session, fake_response, lrclib_record):
        client, session = make_client(fake_session, [fake_response(json_data=[lrclib_record])])
        client.search("Hello World")
        client.search("  hello world ")
        assert len(session.calls) == 1

    def test_limit(self, fake_session, fake_response, lrclib_record):
        records = [dict(lrclib_record, id=i) for i in range(1, 6)]
        client, _ = make_client(fake_session, [fake_response(json_data=records)])
        assert len(client.search("x", limit=2)) == 2

    def test_bad_records_skipped(self, fake_session, fake_response, lrclib_record):
        client, _ = make_client(
            fake_session, [fake_response(json_data=[{"name": "no id"}, lrclib_record])]
        )
        assert [r.id for r in client.search("x")] == [101]

    def test_requires_query(self, fake_session):
        client, _ = make_client(fake_session, [])
        with pytest.raises(ValueError):
            client.search()

    def test_unexpected_payload(self, fake_session, fake_response):
        client, _ = make_client(fake_session, [fake_response(json_data={"oops": 1})])
        with pytest.raises(LyricsFetchError):
            client.search("x")


class TestGetByMetadata:
    def test_found(self, fake_session, fake_response, lrclib_record):
        client, session = make_client(fake_session, [fake_response(json_data=lrclib_record)])
        selection = client.get_by_metadata("你好世界", "歌手", duration=199.6)
        assert selection.id == 101
        url, params, _, _ = session.calls[0]
        assert url.endswith("/api/get")
        assert params["duration"] == 200

    def test_missing(self, fake_session, fake_response):
        client, _ = make_client(fake_session, [fake_response(404, {})])
        assert client.get_by_metadata("x", "y") is None


@pytest.mark.network
def test_real_search():
    results = LrcLibClient().search("月亮代表我的心")
    assert results
