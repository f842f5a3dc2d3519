"""Flask app serving the lyrics API and the static single-page client."""

from pathlib import Path
from typing import Callable, Optional, Union

from flask import Flask, abort, jsonify, request, send_from_directory

from ..config import APP_INFO, UNTIMED_LINE_SECONDS, get_static_dir
from ..core.lrc import lyrics_status, parse_track
from ..core.lrclib import LrcLibClient
from ..core.models import LyricsStatus, VideoMetadata
from ..core.youtube import fetch_video_metadata
from ..exceptions import (
    LyricsFetchError,
    LyricsNotFoundError,
    ValidationError,
    VideoMetadataError,
)
from ..utils.logging import get_logger
from ..utils.validation import validate_query

logger = get_logger(__name__)


def create_app(
    client: Optional[LrcLibClient] = None,
    static_dir: Optional[Union[str, Path]] = None,
    video_lookup: Callable[[str], VideoMetadata] = fetch_video_metadata,
    line_seconds: float = UNTIMED_LINE_SECONDS,
) -> Flask:
    """Build the Flask app. Collaborators are injectable for tests."""
    app = Flask(__name__, static_folder=None)
    lrclib = client or LrcLibClient()
    root = Path(static_dir) if static_dir else get_static_dir()

    @app.errorhandler(ValidationError)
    def handle_validation(e):
        return jsonify({"error": str(e)}), 400

    # A missing record is a retryable fetch error, as in LyricsSession
    @app.errorhandler(LyricsNotFoundError)
    def handle_not_found(e):
        return jsonify({"error": str(e), "status": LyricsStatus.ERROR.value, "retry": True}), 404

    @app.errorhandler(LyricsFetchError)
    def handle_fetch_error(e):
        logger.error(f"Lyrics provider error: {e}")
        return jsonify({"error": str(e), "status": LyricsStatus.ERROR.value, "retry": True}), 502

    @app.errorhandler(VideoMetadataError)
    def handle_video_error(e):
        logger.error(f"Video metadata error: {e}")
        return jsonify({"error": str(e), "retry": True}), 502

    @app.get("/api/health")
    def health():
        return jsonify({"status": "ok"})

    @app.get("/api/info")
    def info():
        return jsonify(APP_INFO)

    @app.get("/api/search")
    def search():
        query = validate_query(request.args.get("q", ""))
        results = lrclib.search(query)
        return jsonify([r.to_dict() for r in results])

    @app.get("/api/lyrics/<int:track_id>")
    def lyrics(track_id: int):
        selection = lrclib.get_lyrics(track_id)
        lines = parse_track(selection, line_seconds=line_seconds)
        return jsonify(
            {
                "status": lyrics_status(selection, lines).value,
                "track": selection.to_dict(),
                "lines": [line.to_dict() for line in lines],
            }
        )

    @app.get("/api/video")
    def video():
        metadata = video_lookup(request.args.get("url", ""))
        return jsonify(metadata.to_dict())

    @app.get("/", defaults={"path": ""})
    @app.get("/<path:path>")
    def static_files(path: str):
        if path.startswith("api/"):
            abort(404)
        if path and (root / path).is_file():
            return send_from_directory(root, path)
        if (root / "index.html").is_file():
            return send_from_directory(root, "index.html")
        abort(404)

    return app
