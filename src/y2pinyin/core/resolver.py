"""Map playback time to the active lyric line."""

from typing import Callable, Optional, Sequence, Tuple

from ..utils.logging import get_logger
from .models import NO_LINE, LyricLine, PlaybackState

logger = get_logger(__name__)


def find_active_line(lines: Sequence[LyricLine], t: float, start: int = 0) -> int:
    """Return the index of the first line whose window contains ``t``.

    Linear scan from ``start``; NO_LINE if nothing matches.
    """
    for i in range(max(start, 0), len(lines)):
        if lines[i].contains(t):
            return i
    return NO_LINE


class ActiveLineResolver:
    """Resolves the active line for each time update and reports changes.

    Holds the line snapshot for the current track. ``on_change`` fires only
    when the active index actually changes, so the presentation layer does
    not re-scroll on every tick.
    """

    def __init__(self, on_change: Optional[Callable[[int], None]] = None):
        self.on_change = on_change
        self._lines: Tuple[LyricLine, ...] = ()
        self._index = NO_LINE
        self._last_time: Optional[float] = None

    @property
    def lines(self) -> Tuple[LyricLine, ...]:
        return self._lines

    @property
    def active_index(self) -> int:
        return self._index

    @property
    def active_line(self) -> Optional[LyricLine]:
        if self._index == NO_LINE:
            return None
        return self._lines[self._index]

    def load(self, lines: Sequence[LyricLine]) -> None:
        """Install a new line snapshot, replacing the previous one."""
        self._lines = tuple(lines)
        self._last_time = None
        self._set_index(NO_LINE)

    def update(self, t: float) -> int:
        """Resolve the active line for time ``t`` and return its index."""
        if not self._lines:
            self._last_time = t
            self._set_index(NO_LINE)
            return NO_LINE

        forward = self._last_time is not None and t >= self._last_time
        self._last_time = t

        index = NO_LINE
        if forward and self._index != NO_LINE:
            # Monotonic playback: the answer is at or after the current line
            index = find_active_line(self._lines, t, start=self._index)
        if index == NO_LINE:
            index = find_active_line(self._lines, t)

        self._set_index(index)
        return index

    def apply(self, state: PlaybackState) -> int:
        """Resolve from ``state.current_time`` and write the active index back."""
        state.active_line_index = self.update(state.current_time)
        return state.active_line_index

    def _set_index(self, index: int) -> None:
        if index == self._index:
            return
        self._index = index
        logger.debug(f"Active line -> {index}")
        if self.on_change:
            self.on_change(index)
