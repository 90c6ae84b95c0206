# Copyright (c) 2024 OpenMined
# SPDX-License-Identifier: Apache-2.0
"""Connection configuration and store construction.

A database is described by a single connection descriptor:

* ``memory://``                      :class:`InMemoryStore`
* ``sqlite:///relative/path.db``     :class:`SQLiteStore` (relative path)
* ``sqlite:////absolute/path.db``    :class:`SQLiteStore` (absolute path)
* ``sqlite:///:memory:``             :class:`SQLiteStore` in memory
* ``path/to/file.db``                bare paths ending in ``.db``,
  ``.sqlite`` or ``.sqlite3`` are treated as SQLite files
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, field_validator

from jsonkv.exceptions import StoreConfigError
from jsonkv.stores import InMemoryStore, SQLiteStore

if TYPE_CHECKING:
    from jsonkv._internal.clock import Clock
    from jsonkv.stores.base import Store

MEMORY_SCHEME = "memory://"
SQLITE_SCHEME = "sqlite:///"
_SQLITE_SUFFIXES = (".db", ".sqlite", ".sqlite3")


class DatabaseConfig(BaseModel):
    """Configuration supplied once when a :class:`~jsonkv.Database` is built.

    Attributes:
        url: Connection descriptor (see module docstring).
        auto_connect: Connect eagerly when created inside a running event
            loop.  Operations always connect lazily either way.
    """

    url: str = f"{SQLITE_SCHEME}jsonkv.db"
    auto_connect: bool = True

    @field_validator("url")
    @classmethod
    def _url_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("url cannot be empty")
        return value


def sqlite_path(url: str) -> str | None:
    """Return the SQLite file path a descriptor points at, or ``None``."""
    if url.startswith(SQLITE_SCHEME):
        return url[len(SQLITE_SCHEME) :]
    if "://" not in url and url.lower().endswith(_SQLITE_SUFFIXES):
        return url
    return None


def create_store(config: DatabaseConfig, clock: Clock | None = None) -> Store:
    """Create a store from configuration.

    Args:
        config: Database configuration
        clock: Optional clock passed through to the store

    Returns:
        Store instance (not yet connected)

    Raises:
        StoreConfigError: If the descriptor names no known backend
    """
    url = config.url
    if url == MEMORY_SCHEME:
        return InMemoryStore(clock=clock)

    path = sqlite_path(url)
    if path is None:
        raise StoreConfigError(url, "unsupported connection descriptor")
    if not path:
        raise StoreConfigError(url, "SQLite descriptor requires a path")
    return SQLiteStore(path, clock=clock)
