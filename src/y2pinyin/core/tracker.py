"""Playback position tracking.

Produces a current-time value several times per second from one of two
regimes: asking the player directly, or estimating from a wall-clock
anchor when the player cannot (or can no longer) answer.
"""

import asyncio
import time
from enum import Enum
from typing import Callable, Optional

from ..config import (
    POLL_INTERVAL,
    REQUERY_EVERY_TICKS,
    SEEK_SETTLE_SECONDS,
    SEEK_TOLERANCE,
)
from ..exceptions import PlayerError
from ..utils.logging import get_logger
from ..utils.validation import validate_poll_interval
from .player import VideoPlayer

logger = get_logger(__name__)

# Queried time jumping back further than this is an external seek, not jitter
BACKWARD_JUMP_THRESHOLD = 1.0


class Regime(str, Enum):
    QUERYABLE = "queryable"
    ESTIMATING = "estimating"


class TrackerState(str, Enum):
    IDLE = "idle"
    TRACKING = "tracking"


class PlaybackTracker:
    """Polls or estimates playback time and feeds it to ``on_time``.

    Implements the player listener interface, so it can be handed straight
    to ``player.set_listener``. All methods must be called from the event
    loop thread.
    """

    def __init__(
        self,
        player: VideoPlayer,
        on_time: Callable[[float], None],
        interval: float = POLL_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        requery_every: int = REQUERY_EVERY_TICKS,
    ):
        self.player = player
        self.on_time = on_time
        self.interval = validate_poll_interval(interval)
        self.clock = clock
        self.requery_every = max(1, requery_every)

        self.regime = Regime.QUERYABLE if player.supports_time_query else Regime.ESTIMATING
        self.state = TrackerState.IDLE

        self._anchor_time = 0.0
        self._anchor_wall = clock()
        self._last = 0.0
        self._pending_seek: Optional[float] = None
        self._settle_target: Optional[float] = None
        self._settle_until = 0.0
        self._epoch = 0
        self._estimate_ticks = 0
        self._task: Optional[asyncio.Task] = None
        self._closed = False

    # ---- properties ----

    @property
    def current_time(self) -> float:
        """Last reported time."""
        return self._last

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def closed(self) -> bool:
        return self._closed

    def estimate(self) -> float:
        """Anchor plus elapsed wall time while tracking, frozen while idle."""
        if self.state is TrackerState.TRACKING:
            return self._anchor_time + max(0.0, self.clock() - self._anchor_wall)
        return self._anchor_time

    # ---- player listener ----

    def on_play(self) -> None:
        if self._closed:
            return
        if self.state is not TrackerState.TRACKING:
            # Idle time must not count towards the estimate
            self._anchor_wall = self.clock()
            self.state = TrackerState.TRACKING
        self.start()

    def on_pause(self) -> None:
        self._go_idle()

    def on_end(self) -> None:
        self._go_idle()

    def on_error(self, error: Exception) -> None:
        if self._closed:
            return
        logger.warning(f"Player reported an error, estimating time from now on: {error}")
        self._degrade()

    def _go_idle(self) -> None:
        if self._closed:
            return
        if self.state is TrackerState.TRACKING:
            self._anchor_time = max(self.estimate(), self._last)
            self._anchor_wall = self.clock()
            self.state = TrackerState.IDLE
        self.stop()

    # ---- polling task ----

    def start(self) -> None:
        """Start the polling task. No-op if it is already running."""
        if self._closed or self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())
        self._task.add_done_callback(self._on_task_done)
        logger.debug(f"Tracker polling every {self.interval}s ({self.regime.value})")

    def stop(self) -> None:
        """Stop the polling task. No-op if it is not running."""
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def close(self) -> None:
        """Stop polling for good; later signals are ignored."""
        self._closed = True
        self.state = TrackerState.IDLE
        self.stop()

    async def aclose(self) -> None:
        """Close and wait for the polling task to finish."""
        task = self._task
        self.close()
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    async def _run(self) -> None:
        while True:
            await self.tick()
            await asyncio.sleep(self.interval)

    def _on_task_done(self, task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error(f"Playback tracker stopped: {exc}", exc_info=exc)
        if self._task is task:
            self._task = None

    # ---- seeks ----

    def begin_seek(self, t: float) -> int:
        """Mark an optimistic seek in flight and return its token."""
        t = max(0.0, t)
        self._epoch += 1
        self._pending_seek = t
        self._last = t
        return self._epoch

    def reanchor(self, t: float, token: Optional[int] = None, settle: bool = False) -> bool:
        """Anchor the estimate at ``t`` and reset the monotonic floor.

        With a ``token`` from begin_seek, a seek that has since been
        superseded by a newer one does not re-anchor. With ``settle``, the
        player is assumed to still be moving there: for SEEK_SETTLE_SECONDS,
        queried times further than SEEK_TOLERANCE from ``t`` are ignored.
        """
        if token is not None and token != self._epoch:
            logger.debug(f"Skipping re-anchor to {t:.2f}s from a superseded seek")
            return False
        t = max(0.0, t)
        self._epoch += 1
        self._pending_seek = None
        self._anchor_time = t
        self._anchor_wall = self.clock()
        self._last = t
        self._estimate_ticks = 0
        self._settle_target = t if settle else None
        self._settle_until = self._anchor_wall + SEEK_SETTLE_SECONDS
        return True

    # ---- ticking ----

    async def tick(self) -> float:
        """Compute the current time and push it to ``on_time``."""
        if self._closed:
            return self._last

        if self._pending_seek is not None:
            return self._report(self._pending_seek)

        if self.regime is Regime.QUERYABLE:
            epoch = self._epoch
            t = await self._query()
            if epoch != self._epoch:
                # A seek started while we were waiting on the player
                if self._pending_seek is not None:
                    return self._report(self._pending_seek)
                return self._report(self.estimate())
            if t is None:
                return self._report(self.estimate())
            return self._report_queried(t)

        self._estimate_ticks += 1
        if self.player.supports_time_query and self._estimate_ticks >= self.requery_every:
            self._estimate_ticks = 0
            epoch = self._epoch
            t = await self._query(requery=True)
            if t is not None and epoch == self._epoch:
                logger.info("Player answers time queries again")
                self.regime = Regime.QUERYABLE
                return self._report_queried(t)
        return self._report(self.estimate())

    async def _query(self, requery: bool = False) -> Optional[float]:
        try:
            return await self.player.get_current_time()
        except (PlayerError, OSError, asyncio.TimeoutError, ValueError) as e:
            if requery:
                logger.debug(f"Player still not answering time queries: {e}")
            else:
                logger.info(f"Time query failed, estimating instead: {e}")
                self._degrade()
            return None

    def _degrade(self) -> None:
        if self.regime is Regime.ESTIMATING:
            return
        # The anchor still holds the last successful query
        self.regime = Regime.ESTIMATING
        self._estimate_ticks = 0

    def _report_queried(self, t: float) -> float:
        if self._settle_target is not None:
            if abs(t - self._settle_target) > SEEK_TOLERANCE and self.clock() < self._settle_until:
                logger.debug(f"Ignoring {t:.2f}s while seeking to {self._settle_target:.2f}s")
                return self._report(self.estimate())
            self._settle_target = None
        if t < self._last - BACKWARD_JUMP_THRESHOLD:
            logger.debug(f"Player jumped back to {t:.2f}s, re-anchoring")
            self.reanchor(t)
        t = self._report(t)
        self._anchor_time = t
        self._anchor_wall = self.clock()
        return t

    def _report(self, t: float) -> float:
        t = max(0.0, t, self._last)
        self._last = t
        self.on_time(t)
        return t
