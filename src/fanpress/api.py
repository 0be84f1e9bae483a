# /src/fanpress/api.py
# Mutation API - HTTP routes over the LogStore, fanning changes out through the hub

import asyncio
import json
import logging
import time
from typing import Any, Dict

from aiohttp import web

from .errors import MalformedInput
from .events import data_added, data_cleared
from .hub import BroadcastHub
from .session import SubscriberSession
from .storage.log_store import LogStore


PERSISTED_HEADER = "X-Persisted"


@web.middleware
async def error_middleware(request: web.Request, handler):
    """Render MalformedInput as a JSON 4xx instead of aiohttp's text page."""
    try:
        return await handler(request)
    except MalformedInput as e:
        logging.getLogger(__name__).warning(f"{request.method} {request.path} rejected: {e}")
        return web.json_response({"success": False, "error": str(e)}, status=e.status)


class DataAPI:
    """HTTP and WebSocket handlers for the fan-press log.

    Owns no data itself: the store and hub are passed in. Each mutation and
    its broadcast happen under one lock, so subscribers see events in the
    order the mutations completed.
    """

    def __init__(self, store: LogStore, hub: BroadcastHub, session_queue_size: int = 256):
        self._store = store
        self._hub = hub
        self._session_queue_size = session_queue_size
        self._lock = asyncio.Lock()
        self._started = time.monotonic()
        self._logger = logging.getLogger(__name__)

    def add_routes(self, app: web.Application, ws_path: str = "/ws") -> None:
        app.router.add_get("/api/data", self.get_data)
        app.router.add_post("/api/data", self.post_data)
        app.router.add_delete("/api/data", self.delete_data)
        app.router.add_get("/health", self.health)
        app.router.add_get(ws_path, self.websocket)

    # ========== /api/data ==========

    async def get_data(self, request: web.Request) -> web.Response:
        return web.json_response(self._store.all())

    async def post_data(self, request: web.Request) -> web.Response:
        fields = await self._read_object(request)

        async with self._lock:
            record = await self._store.append(fields)
            persisted = self._store.last_persist_ok
            self._hub.broadcast(data_added(record.to_dict(), self._store.count))

        self._logger.info(f"Appended record {record.record_id} ({self._store.count} total)")
        return web.json_response(
            {"success": True, "id": record.record_id},
            headers={PERSISTED_HEADER: _flag(persisted)},
        )

    async def delete_data(self, request: web.Request) -> web.Response:
        async with self._lock:
            await self._store.clear()
            persisted = self._store.last_persist_ok
            self._hub.broadcast(data_cleared())

        self._logger.info("Cleared all records")
        return web.json_response({"success": True}, headers={PERSISTED_HEADER: _flag(persisted)})

    # ========== /health ==========

    async def health(self, request: web.Request) -> web.Response:
        return web.json_response({
            "status": "healthy",
            "uptime": round(time.monotonic() - self._started, 3),
            "connections": self._hub.connection_count,
            "records": self._store.count,
            "persisted": self._store.last_persist_ok,
        })

    # ========== Real-time channel ==========

    async def websocket(self, request: web.Request) -> web.WebSocketResponse:
        session = SubscriberSession(request, self._hub, self._store, self._session_queue_size)
        return await session.serve()

    # ========== Helpers ==========

    async def _read_object(self, request: web.Request) -> Dict[str, Any]:
        raw = await request.read()
        if not raw.strip():
            raise MalformedInput("request body is required")
        try:
            body = json.loads(raw, parse_constant=_reject_constant)
        except ValueError as e:
            raise MalformedInput(f"malformed JSON body: {e}") from None
        if not isinstance(body, dict):
            raise MalformedInput(f"body must be a JSON object, got {type(body).__name__}")
        return body


def _flag(value: bool) -> str:
    return "true" if value else "false"


def _reject_constant(token: str):
    raise ValueError(f"{token} is not valid JSON")
