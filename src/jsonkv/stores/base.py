"""Store protocol — durable mapping from key to JSON value with timestamps."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from jsonkv.exceptions import InvalidKeyError

if TYPE_CHECKING:
    from jsonkv.record import Record


def check_key(operation: str, key: Any) -> str:
    """Return *key* unchanged, or raise :class:`InvalidKeyError`."""
    if not isinstance(key, str) or not key:
        raise InvalidKeyError(operation, key)
    return key


class Store(ABC):
    """Abstract base for all storage backends.

    A store holds one flat key space.  Values are opaque to it beyond
    encoding: it persists the canonical encoding of each value together
    with ``created_at`` / ``updated_at`` timestamps and an insertion
    sequence number used to order :meth:`scan_all`.

    Every write is a single atomic step.  Read-modify-write sequences
    spanning several calls are serialized one level up, by
    :class:`jsonkv.locks.KeyLocks`.
    """

    async def connect(self) -> None:
        """Acquire backend resources.  Must be idempotent."""

    async def close(self) -> None:
        """Release backend resources.  Must be idempotent."""

    @abstractmethod
    async def put(self, key: str, value: Any) -> Record:
        """Create or overwrite a value and return the resulting record.

        ``created_at`` is kept when the key already exists.
        """
        ...

    @abstractmethod
    async def get(self, key: str) -> Record | None:
        """Return the stored record, or ``None`` if not found."""
        ...

    @abstractmethod
    async def remove(self, key: str) -> bool:
        """Delete a record.  Returns ``False`` if the key did not exist."""
        ...

    @abstractmethod
    async def exists(self, key: str) -> bool:
        """Return ``True`` if the key exists."""
        ...

    @abstractmethod
    async def scan_all(self) -> list[Record]:
        """Return every record, oldest first.

        Ordered by ``created_at``; ties broken by insertion sequence.
        """
        ...

    @abstractmethod
    async def count(self) -> int:
        """Return the number of stored records."""
        ...

    @abstractmethod
    async def clear(self) -> int:
        """Delete every record in one atomic step and return how many there were."""
        ...
