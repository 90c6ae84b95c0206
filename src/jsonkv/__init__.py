"""jsonkv — an embedded, asynchronous key-value store with JSON values.

Values are plain JSON-compatible Python objects.  Numeric and array
mutations are atomic per key, and bulk queries run in-process over a
consistent snapshot of the whole key space.
"""

from jsonkv.config import DatabaseConfig, create_store
from jsonkv.database import ConnectionState, Database
from jsonkv.exceptions import (
    CorruptValueError,
    InvalidKeyError,
    InvalidOperationError,
    InvalidValueError,
    StoreConfigError,
    StoreConnectionError,
    StoreError,
)
from jsonkv.record import Record
from jsonkv.values import ValueKind, kind_of, values_equal

__all__ = [
    "ConnectionState",
    "CorruptValueError",
    "Database",
    "DatabaseConfig",
    "InvalidKeyError",
    "InvalidOperationError",
    "InvalidValueError",
    "Record",
    "StoreConfigError",
    "StoreConnectionError",
    "StoreError",
    "ValueKind",
    "create_store",
    "kind_of",
    "values_equal",
]
