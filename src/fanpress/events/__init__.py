# /src/fanpress/events/__init__.py
# Real-time channel message primitives

from .types import EventType, ControlType
from .messages import (
    connected,
    data_added,
    data_cleared,
    all_data,
    pong,
    encode,
    parse_control,
)

__all__ = [
    "EventType",
    "ControlType",
    "connected",
    "data_added",
    "data_cleared",
    "all_data",
    "pong",
    "encode",
    "parse_control",
]
