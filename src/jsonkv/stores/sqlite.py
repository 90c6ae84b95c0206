"""SQLiteStore — durable, single-file storage backend using aiosqlite."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from typing import Any

import aiosqlite

from jsonkv._internal.clock import Clock, SystemClock, next_timestamp
from jsonkv.codec import canonical, decode
from jsonkv.exceptions import CorruptValueError, StoreConnectionError, StoreError
from jsonkv.record import Record
from jsonkv.stores.base import Store, check_key

logger = logging.getLogger(__name__)

_CREATE_TABLE = """
CREATE TABLE IF NOT EXISTS kv_store (
    seq        INTEGER PRIMARY KEY AUTOINCREMENT,
    key        TEXT NOT NULL UNIQUE,
    value      TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""

_CREATE_INDEX = """
CREATE INDEX IF NOT EXISTS kv_store_created ON kv_store (created_at, seq)
"""

# A concurrent insert of the same new key turns into an update.
_UPSERT = """
INSERT INTO kv_store (key, value, created_at, updated_at) VALUES (?, ?, ?, ?)
ON CONFLICT (key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
"""


def _format_ts(ts: datetime) -> str:
    return ts.astimezone(UTC).isoformat(timespec="microseconds")


def _parse_ts(text: str) -> datetime:
    return datetime.fromisoformat(text)


@contextmanager
def _translate_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except aiosqlite.Error as exc:
        raise StoreError(operation, str(exc)) from exc


class SQLiteStore(Store):
    """Persistent store backed by a single SQLite file.

    Parameters:
        db_path: Path to the SQLite database file.  Use ``":memory:"``
                 for an in-memory database (useful for testing).
        clock:   Injectable clock for testing.
    """

    def __init__(self, db_path: str = "jsonkv.db", clock: Clock | None = None) -> None:
        self._db_path = db_path
        self._clock = clock or SystemClock()
        self._db: aiosqlite.Connection | None = None
        self._write_lock = asyncio.Lock()

    @property
    def db_path(self) -> str:
        return self._db_path

    async def connect(self) -> None:
        await self._connect()

    async def _connect(self) -> aiosqlite.Connection:
        if self._db is None:
            try:
                db = await aiosqlite.connect(self._db_path)
            except aiosqlite.Error as exc:
                raise StoreConnectionError(f"cannot open {self._db_path!r}: {exc}") from exc
            try:
                await db.execute(_CREATE_TABLE)
                await db.execute(_CREATE_INDEX)
                await db.commit()
            except aiosqlite.Error as exc:
                await db.close()
                raise StoreConnectionError(
                    f"cannot initialize {self._db_path!r}: {exc}"
                ) from exc
            self._db = db
            logger.debug("Opened SQLite store at %s", self._db_path)
        return self._db

    async def close(self) -> None:
        if self._db:
            await self._db.close()
            self._db = None
            logger.debug("Closed SQLite store at %s", self._db_path)

    # ── Store protocol ───────────────────────────────────────

    async def put(self, key: str, value: Any) -> Record:
        check_key("put", key)
        payload = canonical(value)
        db = await self._connect()
        async with self._write_lock:
            with _translate_errors("put"):
                cursor = await db.execute(
                    "SELECT created_at, updated_at FROM kv_store WHERE key = ?",
                    (key,),
                )
                row = await cursor.fetchone()
                if row is None:
                    created_at = updated_at = self._clock.now()
                else:
                    created_at = _parse_ts(row[0])
                    updated_at = next_timestamp(self._clock, _parse_ts(row[1]))
                await db.execute(
                    _UPSERT,
                    (key, payload, _format_ts(created_at), _format_ts(updated_at)),
                )
                await db.commit()
        return Record(
            key=key,
            value=decode(payload, key=key),
            created_at=created_at,
            updated_at=updated_at,
        )

    # Reads run statement and fetch as one call on the connection thread, so
    # a queued DELETE can never land between stepping the first row and the rest.

    async def get(self, key: str) -> Record | None:
        db = await self._connect()
        with _translate_errors("get"):
            rows = list(
                await db.execute_fetchall(
                    "SELECT key, value, created_at, updated_at FROM kv_store WHERE key = ?",
                    (key,),
                )
            )
        if not rows:
            return None
        return self._row_to_record(rows[0])

    async def remove(self, key: str) -> bool:
        db = await self._connect()
        async with self._write_lock:
            with _translate_errors("remove"):
                cursor = await db.execute("DELETE FROM kv_store WHERE key = ?", (key,))
                await db.commit()
        return cursor.rowcount > 0

    async def exists(self, key: str) -> bool:
        db = await self._connect()
        with _translate_errors("exists"):
            rows = await db.execute_fetchall("SELECT 1 FROM kv_store WHERE key = ?", (key,))
        return len(list(rows)) > 0

    async def scan_all(self) -> list[Record]:
        db = await self._connect()
        with _translate_errors("scan_all"):
            rows = await db.execute_fetchall(
                "SELECT key, value, created_at, updated_at FROM kv_store "
                "ORDER BY created_at, seq"
            )
        return [self._row_to_record(row) for row in rows]

    async def count(self) -> int:
        db = await self._connect()
        with _translate_errors("count"):
            rows = list(await db.execute_fetchall("SELECT COUNT(*) FROM kv_store"))
        return int(rows[0][0]) if rows else 0

    async def clear(self) -> int:
        db = await self._connect()
        async with self._write_lock:
            with _translate_errors("clear"):
                cursor = await db.execute("DELETE FROM kv_store")
                await db.commit()
        return cursor.rowcount

    @staticmethod
    def _row_to_record(row: Any) -> Record:
        key, payload, created_at, updated_at = row
        try:
            value = decode(payload, key=key)
        except CorruptValueError:
            logger.warning("Corrupt payload for key %r", key)
            raise
        return Record(
            key=key,
            value=value,
            created_at=_parse_ts(created_at),
            updated_at=_parse_ts(updated_at),
        )
