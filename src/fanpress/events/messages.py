# /src/fanpress/events/messages.py
# Builders for outbound events and the parser for inbound control frames

import json
from typing import Any, Dict, List

from .types import ControlType, EventType
from ..errors import MalformedMessage

CONNECTED_MESSAGE = "Connected to Fan Press real-time sync"


def connected(total_records: int) -> Dict[str, Any]:
    return {
        "type": EventType.CONNECTED.value,
        "totalRecords": total_records,
        "message": CONNECTED_MESSAGE,
    }


def data_added(record: Dict[str, Any], total_records: int) -> Dict[str, Any]:
    return {
        "type": EventType.DATA_ADDED.value,
        "record": record,
        "totalRecords": total_records,
    }


def data_cleared() -> Dict[str, Any]:
    return {"type": EventType.DATA_CLEARED.value}


def all_data(records: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {"type": EventType.ALL_DATA.value, "data": records}


def pong() -> Dict[str, Any]:
    return {"type": EventType.PONG.value}


def encode(event: Dict[str, Any]) -> str:
    """Serialize an event to the JSON text sent on the wire."""
    return json.dumps(event)


def parse_control(raw: str) -> ControlType:
    """Decode an inbound text frame into its control type.

    Args:
        raw: The text payload received from the client

    Returns:
        The ControlType named by the frame's ``type`` field

    Raises:
        MalformedMessage: If the frame is not a JSON object with a known type
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError) as e:
        raise MalformedMessage(f"invalid JSON: {e}") from None

    if not isinstance(data, dict):
        raise MalformedMessage(f"expected an object, got {type(data).__name__}")

    tag = data.get("type")
    try:
        return ControlType(tag)
    except ValueError:
        raise MalformedMessage(f"unknown message type: {tag!r}") from None
