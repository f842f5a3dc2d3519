"""YouTube video id and metadata helpers."""

import re
from typing import Any, Dict, Optional

import requests  # type: ignore[import-untyped]
import yt_dlp

from ..config import HTTP_TIMEOUT, USER_AGENT, YOUTUBE_OEMBED_URL
from ..exceptions import ValidationError, VideoMetadataError
from ..utils.logging import get_logger
from ..utils.validation import YOUTUBE_URL_PATTERNS
from .models import VideoMetadata

logger = get_logger(__name__)

_BARE_ID_RE = re.compile(r"^[a-zA-Z0-9_-]{11}$")

# Decorations that hurt lyric search when left in a video title
_TITLE_NOISE_PATTERNS = [
    r"\s*[(\[]\s*Official\s*(Music\s*)?Video\s*[)\]]",
    r"\s*[(\[]\s*Official\s*(Lyric\s*)?(Audio|Video)\s*[)\]]",
    r"\s*[(\[]\s*(Lyric|Lyrics)\s*(Video)?\s*[)\]]",
    r"\s*[(\[]\s*(Audio|Visualizer|Live|HD|HQ|4K|\d+K)\s*[)\]]",
    r"\s*[(\[]\s*M/?V\s*[)\]]",
    r"\s*[(\[]\s*(動態歌詞|动态歌词|歌詞版|歌词版|高音質|高音质)[^)\]]*[)\]]",
    r"\s*【[^】]*】",
    r"\s*《\s*|\s*》\s*",
    r"\s*M/?V\s*$",
]


def extract_video_id(url: str) -> str:
    """Extract the 11-character YouTube video id from a URL or a bare id."""
    if not url or not url.strip():
        raise ValidationError("URL cannot be empty")

    url = url.strip()
    if _BARE_ID_RE.match(url):
        return url
    for pattern in YOUTUBE_URL_PATTERNS:
        match = re.search(pattern, url)
        if match:
            return match.group(1)
    raise ValidationError(f"Could not find a YouTube video id in: {url}")


def clean_title(title: str) -> str:
    """Strip common video decorations from a title to build a search query."""
    cleaned = title or ""
    for pattern in _TITLE_NOISE_PATTERNS:
        cleaned = re.sub(pattern, " ", cleaned, flags=re.IGNORECASE)
    cleaned = re.sub(r"\s*[|｜]\s*.*$", "", cleaned)  # trailing "| channel" blurbs
    return " ".join(cleaned.split()).strip(" -")


def _oembed_metadata(
    video_id: str, session: Optional[requests.Session], timeout: float
) -> Optional[Dict[str, Any]]:
    sess = session or requests
    watch_url = f"https://www.youtube.com/watch?v={video_id}"
    try:
        resp = sess.get(
            YOUTUBE_OEMBED_URL,
            params={"url": watch_url, "format": "json"},
            headers={"User-Agent": USER_AGENT},
            timeout=timeout,
        )
        resp.raise_for_status()
        data = resp.json()
    except (requests.RequestException, ValueError) as e:
        logger.info(f"oEmbed lookup failed for {video_id}: {e}")
        return None
    if not isinstance(data, dict) or not data.get("title"):
        return None
    return {"title": data["title"], "author_name": data.get("author_name", "")}


def _yt_dlp_metadata(video_id: str) -> Optional[Dict[str, Any]]:
    ydl_opts = {
        "quiet": True,
        "no_warnings": True,
        "skip_download": True,
        "extract_flat": True,
    }
    try:
        with yt_dlp.YoutubeDL(ydl_opts) as ydl:
            info = ydl.extract_info(
                f"https://www.youtube.com/watch?v={video_id}", download=False
            )
    except yt_dlp.utils.DownloadError as e:
        logger.info(f"yt-dlp metadata lookup failed for {video_id}: {e}")
        return None
    if not info or not info.get("title"):
        return None
    return {
        "title": info["title"],
        "author_name": info.get("uploader") or info.get("channel") or "",
        "track": info.get("track"),
        "artist": info.get("artist") or info.get("creator"),
        "duration": info.get("duration"),
    }


def fetch_video_metadata(
    url: str,
    *,
    session: Optional[requests.Session] = None,
    timeout: float = HTTP_TIMEOUT,
    use_yt_dlp: bool = True,
) -> VideoMetadata:
    """Look up title and channel for a YouTube URL.

    Tries YouTube oEmbed first and yt-dlp second. The search query is the
    cleaned title, or "track artist" when yt-dlp knows the music metadata.
    """
    video_id = extract_video_id(url)

    info = _oembed_metadata(video_id, session, timeout)
    if info is None and use_yt_dlp:
        info = _yt_dlp_metadata(video_id)
    if info is None:
        raise VideoMetadataError(f"Could not get metadata for video {video_id}")

    if info.get("track") and info.get("artist"):
        query = f"{info['track']} {info['artist']}"
    else:
        query = clean_title(info["title"]) or info["title"]

    return VideoMetadata(
        video_id=video_id,
        title=info["title"],
        author_name=info.get("author_name", ""),
        search_query=query,
        track=info.get("track"),
        artist=info.get("artist"),
        duration=info.get("duration"),
    )
