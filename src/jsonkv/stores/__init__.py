"""Storage backends for jsonkv."""

from jsonkv.stores.base import Store
from jsonkv.stores.memory import InMemoryStore
from jsonkv.stores.sqlite import SQLiteStore

__all__ = ["InMemoryStore", "SQLiteStore", "Store"]
