# /src/fanpress/records.py
# Record - one appended entry of the fan-press log

import copy
import math
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, Optional, Union

RecordId = Union[int, float, str]

ID_FIELD = "_id"
TIMESTAMP_FIELD = "_timestamp"


def utc_timestamp(now: Optional[datetime] = None) -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class IdGenerator:
    """Strictly increasing integer ids derived from the millisecond clock.

    Two ids requested within the same millisecond (or after the clock
    stepped backwards) get ``last + 1``, so ids never repeat in-process.
    """

    def __init__(self, clock: Callable[[], float] = time.time):
        self._clock = clock
        self._last = 0

    @property
    def last(self) -> int:
        return self._last

    def next_id(self) -> int:
        candidate = int(self._clock() * 1000)
        self._last = max(candidate, self._last + 1)
        return self._last

    def seed(self, ids: Iterable[Any]) -> None:
        """Advance past every numeric id in ``ids``.

        Non-numeric ids are skipped; float ids (clock + random fraction,
        written by older servers) count as their ceiling.
        """
        for value in ids:
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                continue
            if isinstance(value, float) and not math.isfinite(value):
                continue
            self._last = max(self._last, math.ceil(value))


@dataclass
class Record:
    """A client-supplied mapping plus the server-assigned id and timestamp."""
    record_id: Optional[RecordId]
    timestamp: Optional[str]
    fields: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(cls, fields: Dict[str, Any], record_id: RecordId, timestamp: Optional[str] = None) -> "Record":
        """Build a new record. Client keys named _id/_timestamp are replaced."""
        body = {k: v for k, v in fields.items() if k not in (ID_FIELD, TIMESTAMP_FIELD)}
        return cls(
            record_id=record_id,
            timestamp=timestamp or utc_timestamp(),
            fields=copy.deepcopy(body),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Wire/persisted shape: client fields, then _timestamp and _id."""
        data = copy.deepcopy(self.fields)
        if self.timestamp is not None:
            data[TIMESTAMP_FIELD] = self.timestamp
        if self.record_id is not None:
            data[ID_FIELD] = self.record_id
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Record":
        if not isinstance(data, dict):
            raise ValueError(f"record must be an object, got {type(data).__name__}")
        body = {k: v for k, v in data.items() if k not in (ID_FIELD, TIMESTAMP_FIELD)}
        return cls(
            record_id=data.get(ID_FIELD),
            timestamp=data.get(TIMESTAMP_FIELD),
            fields=body,
        )
