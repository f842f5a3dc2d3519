"""User-initiated seeks that keep the lyric view and the player consistent."""

from typing import Callable, Optional, Sequence

from ..exceptions import PlayerError
from ..utils.logging import get_logger
from ..utils.validation import validate_seek_time
from .models import LyricLine
from .player import VideoPlayer
from .tracker import PlaybackTracker

logger = get_logger(__name__)


class SeekCoordinator:
    """Applies a seek locally first, then commands the player.

    ``state_sink`` is the single time-update-and-resolve step (usually
    ``LyricsSession.apply_time``); ``lines`` returns the current line
    snapshot for line-based seeks.
    """

    def __init__(
        self,
        state_sink: Callable[[float], object],
        player: Optional[VideoPlayer],
        tracker: Optional[PlaybackTracker],
        lines: Optional[Callable[[], Sequence[LyricLine]]] = None,
    ):
        self.state_sink = state_sink
        self.player = player
        self.tracker = tracker
        self.lines = lines or (lambda: ())

    async def seek(self, t: float) -> bool:
        """Seek to ``t`` seconds. Returns whether the player took the command."""
        t = validate_seek_time(t)

        # Optimistic update: the view moves before the player confirms
        token = self.tracker.begin_seek(t) if self.tracker else None
        self.state_sink(t)

        accepted = False
        try:
            if self.player is None:
                logger.debug(f"No player attached, seek to {t:.2f}s is local only")
            else:
                try:
                    await self.player.seek(t)
                    accepted = True
                except (PlayerError, OSError) as e:
                    logger.warning(f"Player did not accept seek to {t:.2f}s: {e}")
        finally:
            # Runs on cancellation too
            if self.tracker:
                self.tracker.reanchor(t, token=token, settle=accepted)
        return accepted

    async def seek_to_line(self, index: int) -> bool:
        """Seek to the start of line ``index``."""
        lines = self.lines()
        if not 0 <= index < len(lines):
            raise IndexError(f"Line {index} out of range (0-{len(lines) - 1})")
        return await self.seek(lines[index].start_time)
