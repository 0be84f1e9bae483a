# /src/fanpress/events/types.py
# Message type tags for the real-time channel

from enum import Enum


class EventType(str, Enum):
    """Server-to-client message types.

    ``dataAdded`` and ``dataCleared`` are broadcast to every open session;
    the rest are sent to a single session.
    """

    CONNECTED = "connected"
    DATA_ADDED = "dataAdded"
    DATA_CLEARED = "dataCleared"
    ALL_DATA = "allData"
    PONG = "pong"


class ControlType(str, Enum):
    """Client-to-server control message types."""
    PING = "ping"
    REQUEST_DATA = "requestData"
