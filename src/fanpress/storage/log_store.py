# /src/fanpress/storage/log_store.py
# LogStore - the authoritative in-memory log and its JSON file (async with aiofiles)

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import aiofiles
import aiofiles.os

from ..errors import LoadFailure, PersistFailure
from ..records import IdGenerator, Record


class LogStore:
    """Ordered, append-only log of Records persisted as one JSON array.

    The in-memory list is the source of truth. Every mutation rewrites the
    whole file first and only then becomes visible to readers, so a mutation
    is never observable while its write is still pending. There is no
    partial-write recovery: a crash mid-write can leave a truncated file
    (which the next ``load()`` treats as corrupt and replaces with an empty
    log).

    A persist failure is logged and the in-memory mutation still stands.

    Mutations and their file writes run under one asyncio.Lock, so the
    order of completed mutations is also the order of file writes.
    """

    def __init__(self, path: Union[str, Path], id_generator: Optional[IdGenerator] = None):
        self._path = Path(path)
        self._records: List[Record] = []
        self._ids = id_generator or IdGenerator()
        self._lock = asyncio.Lock()
        self._last_persist_ok = True
        self._logger = logging.getLogger(__name__)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def count(self) -> int:
        """Number of records currently in the log."""
        return len(self._records)

    @property
    def last_persist_ok(self) -> bool:
        """False when the most recent write to disk failed."""
        return self._last_persist_ok

    # ========== Lifecycle ==========

    async def load(self) -> int:
        """Replace the in-memory log with the persisted file's contents.

        A missing file means an empty log. An unreadable or corrupt file is
        logged and also yields an empty log; this never raises.

        Returns:
            The number of records loaded
        """
        self._records = []

        if not await aiofiles.os.path.exists(self._path):
            self._logger.info(f"No data file at {self._path}, starting with an empty log")
            return 0

        try:
            async with aiofiles.open(self._path, "r", encoding="utf-8") as f:
                raw = await f.read()
            records = self._decode(raw)
        except (OSError, UnicodeDecodeError, LoadFailure) as e:
            self._logger.error(f"Error loading existing data from {self._path}: {e}")
            return 0

        self._records = records
        self._ids.seed(r.record_id for r in records)
        self._logger.info(f"Loaded {len(records)} existing records")
        return len(records)

    async def flush(self) -> bool:
        """Rewrite the file with the current log (used at shutdown)."""
        async with self._lock:
            return await self._persist(self._records)

    # ========== Mutations ==========

    async def append(self, fields: Dict[str, Any]) -> Record:
        """Assign _id and _timestamp, append, and persist the whole log.

        Args:
            fields: The client-supplied mapping

        Returns:
            The stored Record (a copy; later changes to ``fields`` don't leak in)
        """
        async with self._lock:
            record = Record.create(fields, record_id=self._ids.next_id())
            records = self._records + [record]
            await self._persist(records)
            self._records = records
            return record

    async def clear(self) -> None:
        """Reset the log to empty and persist the empty array."""
        async with self._lock:
            await self._persist([])
            self._records = []

    # ========== Reads ==========

    def all(self) -> List[Dict[str, Any]]:
        """Snapshot of the log in append order, as independent dicts."""
        return [r.to_dict() for r in self._records]

    # ========== Internals ==========

    def _decode(self, raw: str) -> List[Record]:
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise LoadFailure(f"invalid JSON: {e}") from None

        if not isinstance(data, list):
            raise LoadFailure(f"expected a JSON array, got {type(data).__name__}")

        records = []
        for index, item in enumerate(data):
            try:
                records.append(Record.from_dict(item))
            except ValueError as e:
                raise LoadFailure(f"entry {index}: {e}") from None
        return records

    async def _persist(self, records: List[Record]) -> bool:
        """Overwrite the file with ``records``. Caller holds the lock."""
        try:
            payload = json.dumps([r.to_dict() for r in records], indent=2)
            await self._write(payload)
        except (OSError, TypeError, ValueError) as e:
            failure = PersistFailure(f"{self._path}: {e}")
            self._logger.error(f"Error saving data: {failure}")
            self._last_persist_ok = False
            return False

        self._last_persist_ok = True
        self._logger.debug(f"Saved {len(records)} records to {self._path}")
        return True

    async def _write(self, payload: str) -> None:
        await aiofiles.os.makedirs(self._path.parent, exist_ok=True)
        async with aiofiles.open(self._path, "w", encoding="utf-8") as f:
            await f.write(payload)

    def __repr__(self) -> str:
        return f"LogStore(path={str(self._path)!r}, records={len(self._records)})"

