"""
LRCLIB client for lyrics search and retrieval.

This module contains only network logic and record decoding:
- requests
- error mapping
- result caching

No parsing of the lyric text itself.
"""

from typing import Any, Dict, List, Optional

import requests  # type: ignore[import-untyped]

from ..config import CACHE_TTL, HTTP_TIMEOUT, LRCLIB_BASE_URL, SEARCH_LIMIT, USER_AGENT
from ..exceptions import LyricsFetchError, LyricsNotFoundError
from ..utils.cache import TTLCache, normalize_query
from ..utils.logging import get_logger
from .models import TrackSelection

logger = get_logger(__name__)


class LrcLibClient:
    """Talks to the LRCLIB HTTP API.

    Search results and full records are cached for ``cache_ttl`` seconds.
    Pass ``session`` to reuse connections or to inject a fake in tests.
    """

    def __init__(
        self,
        base_url: str = LRCLIB_BASE_URL,
        *,
        session: Optional[requests.Session] = None,
        timeout: float = HTTP_TIMEOUT,
        cache_ttl: float = CACHE_TTL,
        user_agent: str = USER_AGENT,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.headers = {"User-Agent": user_agent, "Accept": "application/json"}
        self.search_cache = TTLCache(ttl=cache_ttl)
        self.lyrics_cache = TTLCache(ttl=cache_ttl)

    # ------------------------
    # HTTP helper
    # ------------------------
    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.get(
                url, params=params, headers=self.headers, timeout=self.timeout
            )
        except requests.RequestException as e:
            raise LyricsFetchError(f"Request to {url} failed: {e}") from e

        if resp.status_code == 404:
            raise LyricsNotFoundError(f"No lyrics record at {url}")

        try:
            resp.raise_for_status()
            return resp.json()
        except requests.HTTPError as e:
            raise LyricsFetchError(f"LRCLIB returned HTTP {resp.status_code}") from e
        except ValueError as e:
            raise LyricsFetchError(f"LRCLIB returned invalid JSON: {e}") from e

    # ------------------------
    # Public API
    # ------------------------
    def search(
        self,
        query: Optional[str] = None,
        *,
        track_name: Optional[str] = None,
        artist_name: Optional[str] = None,
        album_name: Optional[str] = None,
        limit: Optional[int] = SEARCH_LIMIT,
    ) -> List[TrackSelection]:
        """Search lyrics records by free text or by track/artist/album."""
        params: Dict[str, str] = {}
        if query and query.strip():
            params["q"] = query.strip()
        if track_name:
            params["track_name"] = track_name.strip()
        if artist_name:
            params["artist_name"] = artist_name.strip()
        if album_name:
            params["album_name"] = album_name.strip()
        if "q" not in params and "track_name" not in params:
            raise ValueError("search needs a query or a track name")

        key = normalize_query("|".join(f"{k}={v}" for k, v in sorted(params.items())))
        results = self.search_cache.get(key)
        if results is None:
            logger.info(f"Searching LRCLIB: {params}")
            data = self._get("/api/search", params=params)
            if not isinstance(data, list):
                raise LyricsFetchError("LRCLIB search returned an unexpected payload")
            results = self._decode_records(data)
            self.search_cache.put(key, results)
        else:
            logger.debug(f"Search cache hit: {key}")

        if limit:
            return results[:limit]
        return list(results)

    def get_lyrics(self, track_id: int) -> TrackSelection:
        """Fetch the full record for ``track_id``.

        Raises LyricsNotFoundError on 404 and LyricsFetchError on any other
        failure.
        """
        cached = self.lyrics_cache.get(track_id)
        if cached is not None:
            logger.debug(f"Lyrics cache hit: {track_id}")
            return cached

        logger.info(f"Fetching lyrics record {track_id}")
        data = self._get(f"/api/get/{int(track_id)}")
        selection = self._decode_record(data)
        self.lyrics_cache.put(track_id, selection)
        return selection

    def get_by_metadata(
        self,
        track_name: str,
        artist_name: str,
        album_name: Optional[str] = None,
        duration: Optional[float] = None,
    ) -> Optional[TrackSelection]:
        """Look up a record by exact signature; None if LRCLIB has no match."""
        params: Dict[str, Any] = {"track_name": track_name, "artist_name": artist_name}
        if album_name:
            params["album_name"] = album_name
        if duration:
            params["duration"] = int(round(duration))

        try:
            data = self._get("/api/get", params=params)
        except LyricsNotFoundError:
            logger.info(f"No LRCLIB match for {track_name} - {artist_name}")
            return None

        selection = self._decode_record(data)
        self.lyrics_cache.put(selection.id, selection)
        return selection

    # ------------------------
    # Decoding
    # ------------------------
    @staticmethod
    def _decode_record(data: Any) -> TrackSelection:
        if not isinstance(data, dict) or "id" not in data:
            raise LyricsFetchError("LRCLIB returned an unexpected record")
        try:
            return TrackSelection.from_record(data)
        except (TypeError, ValueError) as e:
            raise LyricsFetchError(f"Malformed LRCLIB record: {e}") from e

    @classmethod
    def _decode_records(cls, data: List[Any]) -> List[TrackSelection]:
        results = []
        for item in data:
            try:
                results.append(cls._decode_record(item))
            except LyricsFetchError as e:
                logger.debug(f"Skipping search result: {e}")
        return results
