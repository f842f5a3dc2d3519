"""Lyrics session: the current track, its lines and the playback binding."""

import asyncio
import time
from typing import Callable, Optional, Tuple, Union

from ..config import POLL_INTERVAL, UNTIMED_LINE_SECONDS
from ..exceptions import LyricsError, LyricsFetchError
from ..utils.logging import get_logger
from .lrc import lyrics_status, parse_track
from .lrclib import LrcLibClient
from .models import LyricLine, LyricsStatus, PlaybackState, TrackSelection
from .player import VideoPlayer
from .resolver import ActiveLineResolver
from .seek import SeekCoordinator
from .tracker import PlaybackTracker

logger = get_logger(__name__)

SelectionRequest = Union[int, TrackSelection]


class LyricsSession:
    """Owns the selected track, its parsed lines and the playback state.

    Only the most recent ``select`` call may install lines: each call bumps
    a generation token and results from older generations are dropped.
    """

    def __init__(
        self,
        source: Optional[LrcLibClient] = None,
        *,
        line_seconds: float = UNTIMED_LINE_SECONDS,
        on_status: Optional[Callable[[LyricsStatus], None]] = None,
        on_active_line: Optional[Callable[[int], None]] = None,
        parser: Callable[..., Tuple[LyricLine, ...]] = parse_track,
    ):
        self.source = source or LrcLibClient()
        self.line_seconds = line_seconds
        self.parser = parser
        self.on_status = on_status
        self.on_active_line = on_active_line

        self.state = PlaybackState()
        self.resolver = ActiveLineResolver(on_change=self._active_changed)
        self.selection: Optional[TrackSelection] = None
        self.status = LyricsStatus.IDLE
        self.error: Optional[str] = None

        self._generation = 0
        self._last_request: Optional[SelectionRequest] = None

    @property
    def lines(self) -> Tuple[LyricLine, ...]:
        return self.resolver.lines

    @property
    def active_index(self) -> int:
        return self.state.active_line_index

    async def select(self, request: SelectionRequest) -> Optional[Tuple[LyricLine, ...]]:
        """Switch to a new track and load its lines.

        Returns the installed lines, or None if the load failed or a newer
        selection superseded this one.
        """
        self._generation += 1
        generation = self._generation
        self._last_request = request

        # Drop the old track right away so nothing stale is rendered
        self.selection = None
        self.error = None
        self.resolver.load(())
        self.state.reset()
        self._set_status(LyricsStatus.LOADING)

        try:
            selection, lines = await asyncio.to_thread(self._load, request)
        except LyricsFetchError as e:
            if generation != self._generation:
                logger.debug(f"Discarding error from superseded selection: {e}")
                return None
            logger.error(f"Failed to load lyrics: {e}")
            self.error = str(e)
            self._set_status(LyricsStatus.ERROR)
            return None

        if generation != self._generation:
            logger.debug(f"Discarding lyrics for superseded selection {selection.id}")
            return None

        self.selection = selection
        self.resolver.load(lines)
        self.state.reset()
        self.resolver.apply(self.state)

        logger.info(f"Loaded {len(lines)} line(s) for {selection.display_title}")
        self._set_status(lyrics_status(selection, lines))
        return lines

    async def retry(self) -> Optional[Tuple[LyricLine, ...]]:
        """Re-run the last selection after a failure."""
        if self._last_request is None:
            raise LyricsError("Nothing to retry: no track has been selected")
        return await self.select(self._last_request)

    def apply_time(self, t: float) -> int:
        """Record the current playback time and resolve the active line."""
        self.state.current_time = t
        return self.resolver.apply(self.state)

    def _load(self, request: SelectionRequest) -> Tuple[TrackSelection, Tuple[LyricLine, ...]]:
        # Runs in a worker thread: network fetch plus pinyin conversion
        if isinstance(request, TrackSelection) and (request.has_lyrics or request.instrumental):
            selection = request
        else:
            track_id = request.id if isinstance(request, TrackSelection) else int(request)
            selection = self.source.get_lyrics(track_id)
        return selection, self.parser(selection, line_seconds=self.line_seconds)

    def _set_status(self, status: LyricsStatus) -> None:
        self.status = status
        if self.on_status:
            self.on_status(status)

    def _active_changed(self, index: int) -> None:
        if self.on_active_line:
            self.on_active_line(index)


class PlaybackBinding:
    """Connects a player to a session through a tracker and a seek coordinator.

    Attaching a new player first tears down the previous tracker, so there
    is never more than one polling task.
    """

    def __init__(
        self,
        session: LyricsSession,
        player: Optional[VideoPlayer] = None,
        interval: float = POLL_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.session = session
        self.interval = interval
        self.clock = clock
        self.player: Optional[VideoPlayer] = None
        self.tracker: Optional[PlaybackTracker] = None
        self.seeker = SeekCoordinator(session.apply_time, None, None, lines=lambda: session.lines)
        if player is not None:
            self.attach(player)

    def attach(self, player: VideoPlayer) -> PlaybackTracker:
        """Bind ``player``, replacing any previously attached one."""
        self._teardown()
        self.player = player
        self.tracker = PlaybackTracker(
            player, self.session.apply_time, interval=self.interval, clock=self.clock
        )
        self.seeker = SeekCoordinator(
            self.session.apply_time, player, self.tracker, lines=lambda: self.session.lines
        )
        player.set_listener(self.tracker)
        logger.debug(f"Attached player ({self.tracker.regime.value} regime)")
        return self.tracker

    async def detach(self) -> None:
        """Unbind the current player. The player itself is left open."""
        if self.tracker is not None:
            await self.tracker.aclose()
        self._teardown()

    def _teardown(self) -> None:
        if self.player is not None:
            self.player.set_listener(None)
        if self.tracker is not None:
            self.tracker.close()
        self.player = None
        self.tracker = None
        self.seeker = SeekCoordinator(
            self.session.apply_time, None, None, lines=lambda: self.session.lines
        )

    async def seek(self, t: float) -> bool:
        return await self.seeker.seek(t)

    async def seek_to_line(self, index: int) -> bool:
        return await self.seeker.seek_to_line(index)

