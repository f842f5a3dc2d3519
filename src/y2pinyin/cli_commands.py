"""Execution helpers for CLI commands."""

import asyncio
import functools
import re
import sys
from typing import Any, Callable, List, Optional, Tuple

import click

from .config import get_static_dir
from .core.display import TerminalLyricsView, render_lyrics
from .core.lrc import parse_track
from .core.lrclib import LrcLibClient
from .core.models import LyricsStatus, TrackSelection, VideoMetadata
from .core.player import MpvPlayer
from .core.session import LyricsSession, PlaybackBinding
from .core.youtube import fetch_video_metadata
from .exceptions import LyricsNotFoundError
from .utils.validation import (
    YOUTUBE_URL_PATTERNS,
    validate_pick,
    validate_poll_interval,
    validate_query,
    validate_youtube_url,
)


def looks_like_url(value: str) -> bool:
    """True if the argument should be treated as a YouTube URL."""
    return any(re.search(pattern, value) for pattern in YOUTUBE_URL_PATTERNS)


def resolve_search_query(
    url_or_query: str,
    query: Optional[str],
    *,
    logger,
    video_lookup: Optional[Callable[[str], VideoMetadata]] = None,
) -> Tuple[str, Optional[VideoMetadata]]:
    """Work out the lyrics search query from a URL or free text."""
    video_lookup = video_lookup or fetch_video_metadata
    if query:
        return validate_query(query), None
    if looks_like_url(url_or_query):
        metadata = video_lookup(url_or_query)
        logger.info(f"Video: {metadata.title} ({metadata.author_name})")
        return validate_query(metadata.search_query or metadata.title), metadata
    return validate_query(url_or_query), None


def choose_result(
    client: LrcLibClient,
    search_query: str,
    pick: int,
    *,
    logger,
    metadata: Optional[VideoMetadata] = None,
) -> TrackSelection:
    """Return the ``pick``-th (1-based) result for the query.

    When yt-dlp recognized the song, the best match is first looked up by
    exact track and artist; a search is the fallback.
    """
    if pick == 1 and metadata and metadata.track and metadata.artist:
        logger.info(f"Looking up lyrics for: {metadata.track} - {metadata.artist}")
        selection = client.get_by_metadata(
            metadata.track, metadata.artist, duration=metadata.duration
        )
        if selection is not None:
            logger.info(f"Using: {selection.display_title} (id {selection.id})")
            return selection

    logger.info(f"Searching lyrics for: {search_query}")
    results = client.search(search_query)
    if not results:
        raise LyricsNotFoundError(f"No lyrics found for: {search_query}")
    selection = results[validate_pick(pick, len(results))]
    logger.info(f"Using: {selection.display_title} (id {selection.id})")
    return selection


def format_results(results: List[TrackSelection]) -> List[str]:
    out = []
    for i, r in enumerate(results, 1):
        tags = []
        if r.is_synced:
            tags.append("synced")
        if r.instrumental:
            tags.append("instrumental")
        suffix = f" [{', '.join(tags)}]" if tags else ""
        album = f" / {r.album_name}" if r.album_name else ""
        out.append(f"{i:2d}. {r.track_name} - {r.artist_name}{album}{suffix} (id {r.id})")
    return out


def run_search_command(*, logger, query, limit, client: Optional[LrcLibClient] = None):
    """Execute the `search` command implementation."""
    client = client or LrcLibClient()
    query = validate_query(query)
    results = client.search(query, limit=limit)
    if not results:
        click.echo(f"No lyrics found for: {query}")
        return []
    for row in format_results(results):
        click.echo(row)
    logger.debug(f"{len(results)} result(s) for {query!r}")
    return results


def run_lyrics_command(
    *,
    logger,
    url_or_query,
    query,
    pick,
    show_pinyin,
    show_times,
    client: Optional[LrcLibClient] = None,
    video_lookup: Optional[Callable[[str], VideoMetadata]] = None,
):
    """Execute the `lyrics` command implementation."""
    client = client or LrcLibClient()
    search_query, metadata = resolve_search_query(
        url_or_query, query, logger=logger, video_lookup=video_lookup
    )
    selection = choose_result(client, search_query, pick, logger=logger, metadata=metadata)
    if not selection.has_lyrics and not selection.instrumental:
        selection = client.get_lyrics(selection.id)

    lines = parse_track(selection)
    click.echo(click.style(selection.display_title, bold=True))
    click.echo("")
    if lines:
        click.echo(render_lyrics(lines, show_time=show_times, show_pinyin=show_pinyin))
    elif selection.instrumental:
        click.echo("This track is instrumental.")
    else:
        click.echo("No lyrics found for this track.")
    return lines


PLAY_HELP = "Enter a line number to jump there, r to reload lyrics, q to quit."


def parse_play_command(text: str) -> Tuple[str, Optional[int]]:
    """Map one line of user input to an (action, line index) pair."""
    text = text.strip().lower()
    if not text:
        return "", None
    if text.isdigit():
        return "line", int(text) - 1
    if text in ("r", "retry"):
        return "retry", None
    if text in ("q", "quit"):
        return "quit", None
    return "help", None


async def handle_play_command(
    text: str, *, session: LyricsSession, binding: PlaybackBinding, logger
) -> bool:
    """Run one interactive command. Returns False when the user quits."""
    action, index = parse_play_command(text)
    if action == "line":
        try:
            await binding.seek_to_line(index)
        except IndexError:
            logger.warning(f"No line {index + 1} (lyrics have {len(session.lines)} lines)")
    elif action == "retry":
        await session.retry()
    elif action == "quit":
        return False
    elif action == "help":
        click.echo(PLAY_HELP)
    return True


async def read_commands(reader: asyncio.StreamReader, handle) -> bool:
    """Feed input lines to ``handle`` until it asks to quit or input ends.

    Returns True if the user quit, False on end of input.
    """
    while True:
        line = await reader.readline()
        if not line:
            return False
        if not await handle(line.decode("utf-8", errors="replace")):
            return True


async def open_stdin_reader(logger) -> Tuple[Optional[asyncio.StreamReader], Any]:
    """Attach an asyncio stream to stdin. Returns (None, None) if stdin can't be read."""
    loop = asyncio.get_running_loop()
    reader = asyncio.StreamReader()
    try:
        transport, _ = await loop.connect_read_pipe(
            lambda: asyncio.StreamReaderProtocol(reader), sys.stdin
        )
    except (OSError, ValueError) as e:
        logger.debug(f"Interactive controls disabled, stdin not readable: {e}")
        return None, None
    return reader, transport


async def _wait_for_player(player, commands, handle) -> None:
    closed = asyncio.ensure_future(player.wait_closed())
    if commands is None:
        await closed
        return
    reading = asyncio.ensure_future(read_commands(commands, handle))
    try:
        done, _ = await asyncio.wait({closed, reading}, return_when=asyncio.FIRST_COMPLETED)
        if reading in done and not reading.result():
            # Input ended, keep playing until the player exits
            await closed
    finally:
        for task in (closed, reading):
            task.cancel()
        await asyncio.gather(closed, reading, return_exceptions=True)


async def play_with_lyrics(
    url: str,
    selection: TrackSelection,
    *,
    logger,
    client: LrcLibClient,
    time_query: bool = True,
    interval: float,
    show_pinyin: bool = True,
    controls: bool = True,
    commands: Optional[asyncio.StreamReader] = None,
    player_factory: Callable[..., MpvPlayer] = MpvPlayer,
) -> LyricsStatus:
    """Play ``url`` in mpv and follow along with ``selection``'s lyrics.

    With ``controls``, commands are read from ``commands`` (stdin by
    default) while the video plays: see PLAY_HELP.
    """
    session = LyricsSession(client)
    view = TerminalLyricsView(
        lambda: session.lines,
        show_pinyin=show_pinyin,
        numbered=controls,
        footer=PLAY_HELP if controls else None,
    )
    session.on_active_line = view.on_active_line
    session.on_status = lambda status: view.show_status(status, session.error)

    player = player_factory(url, query_time=time_query)
    binding = PlaybackBinding(session, interval=interval)
    stdin_transport = None
    # Listener first: mpv reports the initial pause state on connect
    binding.attach(player)
    try:
        await player.start()
        await session.select(selection)
        view.set_track(session.selection)
        view.on_active_line(session.active_index)

        if controls and commands is None:
            commands, stdin_transport = await open_stdin_reader(logger)
        handle = functools.partial(
            handle_play_command, session=session, binding=binding, logger=logger
        )
        await _wait_for_player(player, commands if controls else None, handle)
    finally:
        if stdin_transport is not None:
            stdin_transport.close()
        await binding.detach()
        await player.close()
    logger.debug("Playback finished")
    return session.status


def run_play_command(
    *,
    logger,
    url,
    query,
    pick,
    time_query,
    interval,
    show_pinyin,
    controls=True,
    client: Optional[LrcLibClient] = None,
    video_lookup: Optional[Callable[[str], VideoMetadata]] = None,
    play_fn=None,
):
    """Execute the `play` command implementation."""
    play_fn = play_fn or play_with_lyrics
    client = client or LrcLibClient()
    url = validate_youtube_url(url)
    interval = validate_poll_interval(interval)
    search_query, metadata = resolve_search_query(
        url, query, logger=logger, video_lookup=video_lookup
    )
    selection = choose_result(client, search_query, pick, logger=logger, metadata=metadata)
    return asyncio.run(
        play_fn(
            metadata.url if metadata else url,
            selection,
            logger=logger,
            client=client,
            time_query=time_query,
            interval=interval,
            show_pinyin=show_pinyin,
            controls=controls,
        )
    )


def run_video_command(
    *, logger, url, video_lookup: Optional[Callable[[str], VideoMetadata]] = None
):
    """Execute the `video` command implementation."""
    video_lookup = video_lookup or fetch_video_metadata
    metadata = video_lookup(validate_youtube_url(url))
    click.echo(f"Video ID:     {metadata.video_id}")
    click.echo(f"Title:        {metadata.title}")
    click.echo(f"Channel:      {metadata.author_name}")
    click.echo(f"Search query: {metadata.search_query}")
    logger.debug(f"Metadata: {metadata.to_dict()}")
    return metadata


def run_serve_command(*, logger, host, port, static_dir, create_app_fn=None):
    """Execute the `serve` command implementation."""
    if create_app_fn is None:
        from .server import create_app as create_app_fn

    root = static_dir or get_static_dir()
    app = create_app_fn(static_dir=root)
    logger.info(f"Server is running on port {port}")
    logger.info(f"http://localhost:{port}")
    app.run(host=host, port=port)
    return app
