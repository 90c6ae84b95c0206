"""InMemoryStore — zero-config, dict-backed storage for development and testing."""

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from jsonkv._internal.clock import Clock, SystemClock, next_timestamp
from jsonkv.codec import decode, encode
from jsonkv.exceptions import CorruptValueError
from jsonkv.record import Record
from jsonkv.stores.base import Store, check_key

logger = logging.getLogger(__name__)


@dataclass
class _Entry:
    payload: bytes
    created_at: datetime
    updated_at: datetime
    seq: int


class InMemoryStore(Store):
    """In-memory store using a plain dict.  Data is lost on process exit.

    Values are kept encoded, exactly like a durable backend would keep
    them, so every read hands out a fresh decoded object.

    Parameters:
        clock: Injectable clock for testing.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self._clock = clock or SystemClock()
        self._data: dict[str, _Entry] = {}
        self._seq = itertools.count()

    async def put(self, key: str, value: Any) -> Record:
        check_key("put", key)
        payload = encode(value)
        entry = self._data.get(key)
        if entry is None:
            now = self._clock.now()
            entry = _Entry(payload, now, now, next(self._seq))
            self._data[key] = entry
        else:
            entry.payload = payload
            entry.updated_at = next_timestamp(self._clock, entry.updated_at)
        return self._to_record(key, entry)

    async def get(self, key: str) -> Record | None:
        entry = self._data.get(key)
        if entry is None:
            return None
        return self._to_record(key, entry)

    async def remove(self, key: str) -> bool:
        return self._data.pop(key, None) is not None

    async def exists(self, key: str) -> bool:
        return key in self._data

    async def scan_all(self) -> list[Record]:
        items = sorted(self._data.items(), key=lambda kv: (kv[1].created_at, kv[1].seq))
        return [self._to_record(key, entry) for key, entry in items]

    async def count(self) -> int:
        return len(self._data)

    async def clear(self) -> int:
        # Swap rather than empty in place: a scan holding the old dict keeps
        # seeing the full pre-clear state.
        removed, self._data = self._data, {}
        return len(removed)

    @staticmethod
    def _to_record(key: str, entry: _Entry) -> Record:
        try:
            value = decode(entry.payload, key=key)
        except CorruptValueError:
            logger.warning("Corrupt payload for key %r", key)
            raise
        return Record(
            key=key,
            value=value,
            created_at=entry.created_at,
            updated_at=entry.updated_at,
        )
