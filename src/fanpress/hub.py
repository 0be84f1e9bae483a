# /src/fanpress/hub.py
# BroadcastHub - registry of open sessions and the single fan-out entry point

import asyncio
import logging
from typing import TYPE_CHECKING, Any, Dict, Set

from .events import connected, encode
from .storage.log_store import LogStore

if TYPE_CHECKING:
    from .session import SubscriberSession


class BroadcastHub:
    """Tracks open subscriber sessions and pushes events to all of them.

    ``broadcast`` never suspends: each event is serialized once and queued
    on every session's outbound queue, so the order of ``broadcast`` calls
    is the order every session observes. A session that cannot accept a
    message (closed, or its queue is full) is dropped instead of raising.
    """

    def __init__(self, store: LogStore):
        self._store = store
        self._sessions: Set["SubscriberSession"] = set()
        self._logger = logging.getLogger(__name__)

    @property
    def connection_count(self) -> int:
        return len(self._sessions)

    def __contains__(self, session: "SubscriberSession") -> bool:
        return session in self._sessions

    def register(self, session: "SubscriberSession") -> None:
        """Add a session and send it the ``connected`` greeting."""
        self._sessions.add(session)
        self._logger.debug(f"Registered {session} ({len(self._sessions)} open)")
        if not session.deliver(encode(connected(self._store.count))):
            self._drop(session)

    def unregister(self, session: "SubscriberSession") -> None:
        """Remove a session. Unknown sessions are ignored."""
        if session in self._sessions:
            self._sessions.discard(session)
            self._logger.debug(f"Unregistered {session} ({len(self._sessions)} open)")

    def broadcast(self, event: Dict[str, Any]) -> int:
        """Queue ``event`` for every open session.

        Returns:
            The number of sessions the event was queued for
        """
        message = encode(event)
        delivered = 0
        for session in list(self._sessions):
            if session.deliver(message):
                delivered += 1
            else:
                self._drop(session)
        self._logger.debug(f"Broadcast {event.get('type')} to {delivered} session(s)")
        return delivered

    async def close_all(self) -> None:
        """Close every open session (server shutdown)."""
        sessions = list(self._sessions)
        self._sessions.clear()
        await asyncio.gather(*(session.close() for session in sessions))
        if sessions:
            self._logger.info(f"Closed {len(sessions)} session(s)")

    def _drop(self, session: "SubscriberSession") -> None:
        self._logger.warning(f"Dropping {session}: cannot accept delivery")
        self.unregister(session)
        session.abort()
