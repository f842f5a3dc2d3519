"""External video player control.

The sync core talks to players through the ``VideoPlayer`` protocol. The
bundled implementation drives mpv over its JSON IPC socket; mpv resolves
YouTube URLs itself through its yt-dlp hook.
"""

import asyncio
import json
import os
import shutil
import tempfile
from typing import Any, Dict, List, Optional, Protocol, Sequence

from ..config import MPV_CONNECT_TIMEOUT, MPV_QUERY_TIMEOUT, MPV_SEEK_TIMEOUT, get_mpv_path
from ..exceptions import PlayerError, PlayerUnavailableError
from ..utils.logging import get_logger
from ..utils.retry import retry_with_backoff

logger = get_logger(__name__)


class PlayerListener(Protocol):
    """Receives play-state notifications from a player."""

    def on_play(self) -> None: ...

    def on_pause(self) -> None: ...

    def on_end(self) -> None: ...

    def on_error(self, error: Exception) -> None: ...


class VideoPlayer(Protocol):
    """Control channel of an embedded/external video player.

    ``get_current_time`` may be unsupported or fail at any time; callers
    must then estimate time themselves.
    """

    supports_time_query: bool

    async def get_current_time(self) -> float: ...

    async def seek(self, seconds: float) -> None: ...

    def set_listener(self, listener: Optional[PlayerListener]) -> None: ...

    async def close(self) -> None: ...


def find_mpv(preferred_path: Optional[str] = None) -> Optional[str]:
    """Locate the mpv binary: explicit path, configured path, then PATH."""
    for candidate in (preferred_path, get_mpv_path()):
        if candidate and os.path.isfile(candidate):
            return candidate
    return shutil.which("mpv")


def _default_ipc_path() -> str:
    return os.path.join(tempfile.gettempdir(), f"y2pinyin-mpv-{os.getpid()}.sock")


class MpvPlayer:
    """mpv process controlled through JSON IPC on a unix socket.

    With ``query_time=False`` the player is command-only: seeks and state
    notifications work, time queries raise PlayerUnavailableError.
    """

    def __init__(
        self,
        url: str,
        *,
        mpv_path: Optional[str] = None,
        query_time: bool = True,
        ipc_path: Optional[str] = None,
        extra_args: Sequence[str] = (),
        query_timeout: float = MPV_QUERY_TIMEOUT,
    ):
        self.url = url
        self.supports_time_query = query_time
        self.query_timeout = query_timeout
        self._mpv_path = mpv_path
        self._extra_args = list(extra_args)
        self.ipc_path = ipc_path or _default_ipc_path()

        self._process: Optional[asyncio.subprocess.Process] = None
        self._reader: Optional[asyncio.StreamReader] = None
        self._writer: Optional[asyncio.StreamWriter] = None
        self._reader_task: Optional[asyncio.Task] = None
        self._listener: Optional[PlayerListener] = None
        self._pending: Dict[int, asyncio.Future] = {}
        self._observers: Dict[int, str] = {}
        self._req_id = 0
        self._closed = False

    # ---- lifecycle ----

    def build_args(self, mpv_bin: str) -> List[str]:
        return [
            mpv_bin,
            self.url,
            f"--input-ipc-server={self.ipc_path}",
            "--force-window=immediate",
            "--keep-open=yes",
            "--terminal=no",
            "--msg-level=all=warn",
            *self._extra_args,
        ]

    async def start(self) -> None:
        """Launch mpv and connect to its IPC socket. Calling twice is a no-op."""
        if self._process is not None:
            return
        if self._closed:
            raise PlayerUnavailableError("Player has been closed")

        mpv_bin = find_mpv(self._mpv_path)
        if not mpv_bin:
            raise PlayerUnavailableError("mpv binary not found (set Y2PINYIN_MPV_PATH or add mpv to PATH)")

        if os.path.exists(self.ipc_path):
            os.remove(self.ipc_path)

        logger.info(f"Starting mpv for {self.url}")
        self._process = await asyncio.create_subprocess_exec(
            *self.build_args(mpv_bin),
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.DEVNULL,
            stderr=asyncio.subprocess.DEVNULL,
        )

        try:
            self._reader, self._writer = await asyncio.wait_for(
                self._connect(), timeout=MPV_CONNECT_TIMEOUT
            )
        except (OSError, asyncio.TimeoutError) as e:
            await self.close()
            raise PlayerUnavailableError(f"Could not connect to mpv IPC socket: {e}") from e

        self._reader_task = asyncio.get_running_loop().create_task(self._read_loop())
        await self._observe("pause")
        await self._observe("eof-reached")

    @retry_with_backoff(max_retries=10, base_delay=0.05, max_delay=0.5, exceptions=(OSError,))
    async def _connect(self):
        return await asyncio.open_unix_connection(self.ipc_path)

    async def close(self) -> None:
        """Tear down exactly what start() set up."""
        self._listener = None

        writer = self._writer
        if writer is not None and not self._closed:
            try:
                await self.command("quit")
            except PlayerError as e:
                logger.debug(f"mpv quit command failed: {e}")
        self._writer = None
        self._closed = True

        if writer is not None:
            writer.close()
            try:
                await writer.wait_closed()
            except OSError as e:
                logger.debug(f"mpv IPC socket did not close cleanly: {e}")

        if self._reader_task is not None:
            self._reader_task.cancel()
            await asyncio.gather(self._reader_task, return_exceptions=True)
            self._reader_task = None

        for future in self._pending.values():
            if not future.done():
                future.set_exception(PlayerUnavailableError("Player closed"))
        self._pending.clear()

        if self._process is not None:
            if self._process.returncode is None:
                self._process.terminate()
                await self._process.wait()
            self._process = None

        if os.path.exists(self.ipc_path):
            os.remove(self.ipc_path)

    async def wait_closed(self) -> int:
        """Wait for the mpv process to exit and return its exit code."""
        if self._process is None:
            return 0
        return await self._process.wait()

    def set_listener(self, listener: Optional[PlayerListener]) -> None:
        self._listener = listener

    @property
    def is_connected(self) -> bool:
        return self._writer is not None and not self._closed

    # ---- protocol helpers ----

    def _next_id(self) -> int:
        self._req_id += 1
        return self._req_id

    async def _send(self, payload: Dict[str, Any]) -> None:
        if not self.is_connected:
            raise PlayerUnavailableError("mpv IPC not connected")
        try:
            self._writer.write((json.dumps(payload) + "\n").encode("utf-8"))
            await self._writer.drain()
        except (OSError, RuntimeError) as e:
            raise PlayerUnavailableError(f"mpv IPC write failed: {e}") from e

    async def command(self, *args: Any) -> None:
        """Fire-and-forget command."""
        await self._send({"command": list(args)})

    async def request(self, *args: Any, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Send a command with request_id and wait for its reply."""
        rid = self._next_id()
        future = asyncio.get_running_loop().create_future()
        self._pending[rid] = future
        try:
            await self._send({"command": list(args), "request_id": rid})
            return await asyncio.wait_for(future, timeout or self.query_timeout)
        except asyncio.TimeoutError as e:
            raise PlayerUnavailableError(f"mpv did not answer {args!r}") from e
        finally:
            self._pending.pop(rid, None)

    async def _observe(self, name: str) -> None:
        obs_id = self._next_id()
        self._observers[obs_id] = name
        await self.command("observe_property", obs_id, name)

    async def _read_loop(self) -> None:
        try:
            while True:
                line = await self._reader.readline()
                if not line:
                    break
                try:
                    msg = json.loads(line.decode("utf-8", errors="replace"))
                except json.JSONDecodeError:
                    logger.debug(f"Ignoring malformed mpv message: {line!r}")
                    continue
                if isinstance(msg, dict):
                    self.dispatch(msg)
        except (OSError, asyncio.IncompleteReadError) as e:
            logger.debug(f"mpv IPC read failed: {e}")

        if not self._closed:
            logger.warning("mpv IPC connection closed")
            if self._writer is not None:
                self._writer.close()
                self._writer = None
            if self._listener:
                self._listener.on_error(PlayerUnavailableError("mpv exited"))

    def dispatch(self, msg: Dict[str, Any]) -> None:
        """Route one decoded IPC message to a pending request or the listener."""
        rid = msg.get("request_id")
        if isinstance(rid, int) and rid in self._pending:
            future = self._pending.pop(rid)
            if not future.done():
                future.set_result(msg)
            return

        event = msg.get("event")
        listener = self._listener
        if listener is None:
            return

        if event == "property-change":
            name = msg.get("name")
            data = msg.get("data")
            if name == "pause" and data is not None:
                if data:
                    listener.on_pause()
                else:
                    listener.on_play()
            elif name == "eof-reached" and data:
                listener.on_end()
        elif event == "end-file" and msg.get("reason") == "error":
            listener.on_error(PlayerError(msg.get("file_error") or "mpv playback error"))

    # ---- VideoPlayer ----

    async def get_current_time(self) -> float:
        if not self.supports_time_query:
            raise PlayerUnavailableError("Time queries are disabled for this player")
        resp = await self.request("get_property", "time-pos")
        data = resp.get("data")
        if resp.get("error") != "success" or data is None:
            raise PlayerUnavailableError(f"mpv time-pos unavailable: {resp.get('error')}")
        return float(data)

    async def seek(self, seconds: float) -> None:
        """Seek and wait for mpv to acknowledge the command."""
        resp = await self.request("seek", float(seconds), "absolute", timeout=MPV_SEEK_TIMEOUT)
        if resp.get("error") != "success":
            raise PlayerError(f"mpv rejected seek to {seconds:.2f}s: {resp.get('error')}")
