# /src/fanpress/session.py
# SubscriberSession - per-connection protocol handler for the real-time channel

import asyncio
import logging
from enum import Enum
from typing import TYPE_CHECKING, Optional, Set

from aiohttp import WSCloseCode, WSMsgType, web

from .errors import MalformedMessage
from .events import ControlType, all_data, encode, parse_control, pong
from .storage.log_store import LogStore

if TYPE_CHECKING:
    from .hub import BroadcastHub

# Strong references to fire-and-forget close tasks until they finish
_closing_tasks: Set[asyncio.Task] = set()


def _finish_close(task: asyncio.Task) -> None:
    _closing_tasks.discard(task)
    if not task.cancelled() and task.exception() is not None:
        logging.getLogger(__name__).error(f"Closing session failed: {task.exception()!r}")


class SessionState(str, Enum):
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"


class SubscriberSession:
    """One WebSocket client: Connecting -> Open -> Closed.

    While open the session answers ``ping`` with ``pong`` and
    ``requestData`` with an ``allData`` snapshot. Anything else is logged
    and ignored. Outbound traffic (broadcasts and replies alike) goes
    through one bounded queue drained by a writer task, so the client sees
    a single ordered stream.
    """

    def __init__(
        self,
        request: web.Request,
        hub: "BroadcastHub",
        store: LogStore,
        queue_size: int = 256,
    ):
        self._request = request
        self._hub = hub
        self._store = store
        self._ws = web.WebSocketResponse()
        self._outbox: asyncio.Queue = asyncio.Queue(maxsize=queue_size)
        self._writer: Optional[asyncio.Task] = None
        self._state = SessionState.CONNECTING
        self.remote = request.remote or "unknown"
        self._logger = logging.getLogger(__name__)

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def ws(self) -> web.WebSocketResponse:
        return self._ws

    # ========== Lifecycle ==========

    async def serve(self) -> web.WebSocketResponse:
        """Run the session until the client goes away.

        Returns:
            The WebSocketResponse, for the aiohttp handler to return
        """
        await self._ws.prepare(self._request)
        self._state = SessionState.OPEN
        self._logger.info(f"New WebSocket connection from {self.remote}")

        self._writer = asyncio.create_task(self._drain())
        self._hub.register(self)

        try:
            async for msg in self._ws:
                if msg.type == WSMsgType.TEXT:
                    self._handle_text(msg.data)
                elif msg.type == WSMsgType.ERROR:
                    self._logger.error(f"WebSocket error from {self.remote}: {self._ws.exception()}")
                    break
                else:
                    self._logger.warning(f"Ignoring {msg.type.name} frame from {self.remote}")
        except ConnectionResetError as e:
            self._logger.warning(f"Connection from {self.remote} reset: {e}")
        finally:
            await self.close()
            self._logger.info(f"WebSocket connection closed from {self.remote}")

        return self._ws

    async def close(self, code: int = WSCloseCode.GOING_AWAY) -> None:
        """Unregister, stop the writer and close the socket. Idempotent."""
        if self._state == SessionState.CLOSED:
            return
        self._state = SessionState.CLOSED
        self._hub.unregister(self)
        await self._stop_writer()
        if not self._ws.closed:
            try:
                await self._ws.close(code=code)
            except (ConnectionResetError, RuntimeError) as e:
                self._logger.debug(f"Close handshake with {self.remote} failed: {e}")

    def abort(self) -> None:
        """Schedule ``close`` without waiting (used by the hub when dropping)."""
        if self._state != SessionState.CLOSED:
            task = asyncio.ensure_future(self.close(code=WSCloseCode.POLICY_VIOLATION))
            _closing_tasks.add(task)
            task.add_done_callback(_finish_close)

    # ========== Outbound ==========

    def deliver(self, message: str) -> bool:
        """Queue a serialized message. False if the session can't take it."""
        if self._state != SessionState.OPEN or self._ws.closed:
            return False
        try:
            self._outbox.put_nowait(message)
        except asyncio.QueueFull:
            self._logger.warning(f"Outbound queue full for {self.remote}")
            return False
        return True

    async def _drain(self) -> None:
        while True:
            message = await self._outbox.get()
            try:
                await self._ws.send_str(message)
            except (ConnectionResetError, RuntimeError) as e:
                self._logger.warning(f"Send to {self.remote} failed: {e}")
                self._hub.unregister(self)
                self.abort()
                return

    async def _stop_writer(self) -> None:
        if self._writer is None:
            return
        writer, self._writer = self._writer, None
        if writer is asyncio.current_task():
            return
        writer.cancel()
        try:
            await writer
        except asyncio.CancelledError:
            pass

    # ========== Inbound ==========

    def _handle_text(self, data: str) -> None:
        try:
            control = parse_control(data)
        except MalformedMessage as e:
            self._logger.warning(f"Ignoring message from {self.remote}: {e}")
            return

        self._logger.debug(f"Received WebSocket message: {control.value}")
        if control == ControlType.PING:
            self.deliver(encode(pong()))
        elif control == ControlType.REQUEST_DATA:
            self.deliver(encode(all_data(self._store.all())))

    def __repr__(self) -> str:
        return f"SubscriberSession(remote={self.remote!r}, state={self._state.value})"
