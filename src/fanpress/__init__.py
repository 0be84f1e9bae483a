# /src/fanpress/__init__.py
# Fan-press tracker - real-time sync service for an append-only data log

from .records import Record, IdGenerator
from .storage import LogStore
from .hub import BroadcastHub
from .session import SubscriberSession, SessionState
from .api import DataAPI
from .server import create_app, main
from .config import Settings

# Events
from .events import EventType, ControlType

# Errors
from .errors import (
    FanPressError,
    MalformedInput,
    MalformedMessage,
    PersistFailure,
    LoadFailure,
    ConfigError,
)

__version__ = "1.0.0"

__all__ = [
    # Core
    "Record",
    "IdGenerator",
    "LogStore",
    "BroadcastHub",
    "SubscriberSession",
    "SessionState",
    "DataAPI",
    "create_app",
    "main",
    "Settings",
    # Events
    "EventType",
    "ControlType",
    # Errors
    "FanPressError",
    "MalformedInput",
    "MalformedMessage",
    "PersistFailure",
    "LoadFailure",
    "ConfigError",
]
