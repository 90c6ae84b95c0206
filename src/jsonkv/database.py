"""Database — the public key-value facade."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable, Mapping
from enum import Enum
from typing import TYPE_CHECKING, Any, TypeVar

from jsonkv.config import DatabaseConfig, create_store
from jsonkv.exceptions import StoreConnectionError
from jsonkv.locks import KeyLocks
from jsonkv.mutations import MathOp, Mutator
from jsonkv.query import (
    Predicate,
    Transform,
    every_records,
    filter_records,
    find_record,
    keys_containing,
    keys_ending_with,
    keys_starting_with,
    map_records,
    some_records,
)
from jsonkv.stores.base import check_key

if TYPE_CHECKING:
    from jsonkv._internal.clock import Clock
    from jsonkv.record import Record
    from jsonkv.stores.base import Store

logger = logging.getLogger(__name__)

R = TypeVar("R")


def _log_connect_failure(task: asyncio.Task[None]) -> None:
    # Marks the failure as retrieved; awaiting the task still re-raises it.
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None:
        logger.warning("Eager connect failed: %s", exc)


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class Database:
    """Key-value store with JSON values, atomic mutations and in-process queries.

    Every operation connects lazily when the database is disconnected, so
    an explicit :meth:`connect` is optional.  With ``auto_connect`` (the
    default) a database created inside a running event loop starts
    connecting straight away; if that attempt fails the error is raised
    by the next operation.

    Parameters:
        url:          Connection descriptor, e.g. ``"sqlite:///data.db"`` or
                      ``"memory://"``.  Ignored when *config* or *store* is given.
        auto_connect: Connect eagerly on construction.  Ignored when
                      *config* is given.
        config:       Full configuration object.
        store:        Pre-built backend; overrides *url* and *config*.
        clock:        Injectable clock passed to the store built from config.

    Example:
        >>> async with Database("memory://") as db:
        ...     await db.add("counter", 5)
        5
    """

    def __init__(
        self,
        url: str | None = None,
        *,
        auto_connect: bool = True,
        config: DatabaseConfig | None = None,
        store: Store | None = None,
        clock: Clock | None = None,
    ) -> None:
        if config is None:
            if url is None:
                config = DatabaseConfig(auto_connect=auto_connect)
            else:
                config = DatabaseConfig(url=url, auto_connect=auto_connect)
        self._config = config
        self._store: Store = store or create_store(config, clock=clock)
        self._mutator = Mutator(self._store, KeyLocks())
        self._state = ConnectionState.DISCONNECTED
        self._connect_lock = asyncio.Lock()
        self._connect_task: asyncio.Task[None] | None = None

        if config.auto_connect:
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                loop = None  # no loop yet: connect on first use
            if loop is not None:
                self._connect_task = loop.create_task(self.connect())
                self._connect_task.add_done_callback(_log_connect_failure)

    # ── connection lifecycle ─────────────────────────────────

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED

    @property
    def store(self) -> Store:
        return self._store

    @property
    def config(self) -> DatabaseConfig:
        return self._config

    async def connect(self) -> None:
        """Open the backing store.  No-op when already connected.

        Raises:
            StoreConnectionError: If the backend cannot be reached.
        """
        if self._state is ConnectionState.CONNECTED:
            return
        async with self._connect_lock:
            if self._state is ConnectionState.CONNECTED:
                return
            self._state = ConnectionState.CONNECTING
            try:
                await self._store.connect()
            except BaseException:
                self._state = ConnectionState.DISCONNECTED
                raise
            self._state = ConnectionState.CONNECTED
            logger.debug("Connected %s", type(self._store).__name__)

    async def disconnect(self) -> None:
        """Release the backing store.  No-op when already disconnected."""
        task, self._connect_task = self._connect_task, None
        if task is not None:
            try:
                await task
            except StoreConnectionError:
                logger.debug("Discarding failed eager connect of %s", type(self._store).__name__)
        async with self._connect_lock:
            if self._state is not ConnectionState.CONNECTED:
                return
            await self._store.close()
            self._state = ConnectionState.DISCONNECTED
            logger.debug("Disconnected %s", type(self._store).__name__)

    async def _ensure_connected(self) -> None:
        task, self._connect_task = self._connect_task, None
        if task is not None:
            await task
        if self._state is not ConnectionState.CONNECTED:
            await self.connect()

    async def __aenter__(self) -> Database:
        await self._ensure_connected()
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.disconnect()

    # ── single-key operations ────────────────────────────────

    async def set(self, key: str, value: Any) -> Any:
        """Create or overwrite *key*; returns the stored value."""
        check_key("set", key)
        await self._ensure_connected()
        record = await self._store.put(key, value)
        return record.value

    async def get(self, key: str) -> Any:
        """Return the value stored under *key*, or ``None``."""
        record = await self.get_record(key)
        return record.value if record is not None else None

    async def get_record(self, key: str) -> Record | None:
        await self._ensure_connected()
        return await self._store.get(key)

    async def delete(self, key: str) -> bool:
        """Delete *key*.  Returns ``False`` when it did not exist."""
        await self._ensure_connected()
        return await self._store.remove(key)

    async def has(self, key: str) -> bool:
        await self._ensure_connected()
        return await self._store.exists(key)

    async def exists(self, key: str) -> bool:
        return await self.has(key)

    # ── mutations ────────────────────────────────────────────

    async def add(self, key: str, value: int | float) -> int | float:
        await self._ensure_connected()
        return await self._mutator.add(key, value)

    async def subtract(self, key: str, value: int | float) -> int | float:
        await self._ensure_connected()
        return await self._mutator.subtract(key, value)

    async def increment(self, key: str, amount: int | float = 1) -> int | float:
        return await self.add(key, amount)

    async def decrement(self, key: str, amount: int | float = 1) -> int | float:
        return await self.subtract(key, amount)

    async def math(self, key: str, operation: MathOp, value: int | float) -> int | float:
        """Apply ``add``, ``subtract``, ``multiply`` or ``divide`` to a numeric value.

        Dividing by zero leaves the value unchanged instead of failing.

        Raises:
            InvalidOperationError: For any other *operation*.
        """
        await self._ensure_connected()
        return await self._mutator.math(key, operation, value)

    async def push(self, key: str, *values: Any) -> list[Any]:
        await self._ensure_connected()
        return await self._mutator.push(key, *values)

    async def pull(self, key: str, value: Any) -> list[Any]:
        await self._ensure_connected()
        return await self._mutator.pull(key, value)

    # ── inspectors ───────────────────────────────────────────

    async def array_length(self, key: str) -> int:
        await self._ensure_connected()
        return await self._mutator.array_length(key)

    async def array_includes(self, key: str, value: Any) -> bool:
        await self._ensure_connected()
        return await self._mutator.array_includes(key, value)

    async def array_index_of(self, key: str, value: Any) -> int:
        await self._ensure_connected()
        return await self._mutator.array_index_of(key, value)

    async def object_keys(self, key: str) -> list[str]:
        await self._ensure_connected()
        return await self._mutator.object_keys(key)

    async def object_values(self, key: str) -> list[Any]:
        await self._ensure_connected()
        return await self._mutator.object_values(key)

    async def object_has_key(self, key: str, object_key: str) -> bool:
        await self._ensure_connected()
        return await self._mutator.object_has_key(key, object_key)

    # ── bulk reads & queries ─────────────────────────────────

    async def all(self) -> list[Record]:
        """Return every record, oldest first."""
        await self._ensure_connected()
        return await self._store.scan_all()

    async def keys(self) -> list[str]:
        return [r.key for r in await self.all()]

    async def values(self) -> list[Any]:
        return [r.value for r in await self.all()]

    async def size(self) -> int:
        await self._ensure_connected()
        return await self._store.count()

    async def clear(self) -> int:
        """Delete everything; returns how many records were removed."""
        await self._ensure_connected()
        removed = await self._store.clear()
        logger.debug("Cleared %d records", removed)
        return removed

    async def filter(self, predicate: Predicate) -> list[Record]:
        return filter_records(await self.all(), predicate)

    async def map(self, transform: Transform[R]) -> list[R]:
        return map_records(await self.all(), transform)

    async def find(self, predicate: Predicate) -> Record | None:
        return find_record(await self.all(), predicate)

    async def some(self, predicate: Predicate) -> bool:
        return some_records(await self.all(), predicate)

    async def every(self, predicate: Predicate) -> bool:
        return every_records(await self.all(), predicate)

    async def starts_with(self, prefix: str) -> list[Record]:
        return keys_starting_with(await self.all(), prefix)

    async def ends_with(self, suffix: str) -> list[Record]:
        return keys_ending_with(await self.all(), suffix)

    async def includes(self, substring: str) -> list[Record]:
        return keys_containing(await self.all(), substring)

    # ── batch helpers ────────────────────────────────────────

    async def set_many(self, entries: Mapping[str, Any] | Iterable[tuple[str, Any]]) -> None:
        """Set several keys one after another (not as a single transaction)."""
        pairs = list(entries.items()) if isinstance(entries, Mapping) else list(entries)
        for key, _ in pairs:
            check_key("set_many", key)
        for key, value in pairs:
            await self.set(key, value)

    async def get_many(self, keys: Iterable[str]) -> dict[str, Any]:
        """Return ``{key: value}`` for each key, with ``None`` for missing ones."""
        return {key: await self.get(key) for key in keys}

    async def delete_many(self, keys: Iterable[str]) -> int:
        deleted = 0
        for key in keys:
            if await self.delete(key):
                deleted += 1
        return deleted

    async def backup(self) -> list[dict[str, Any]]:
        """Return ``[{"key": ..., "value": ...}]`` for every record, oldest first."""
        return [{"key": r.key, "value": r.value} for r in await self.all()]

    async def restore(self, entries: Iterable[Mapping[str, Any]]) -> int:
        """Replace the whole store with *entries* as produced by :meth:`backup`.

        Keys are validated before anything is cleared.  Returns the number
        of entries written.
        """
        pairs = [(entry["key"], entry.get("value")) for entry in entries]
        for key, _ in pairs:
            check_key("restore", key)
        await self.clear()
        for key, value in pairs:
            await self.set(key, value)
        logger.debug("Restored %d records", len(pairs))
        return len(pairs)
