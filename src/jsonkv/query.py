"""In-process queries over a snapshot of records.

Each function takes the list returned by one ``scan_all`` call and never
goes back to the store, so whatever a predicate does cannot change the
set being iterated.  Predicates and transforms are synchronous and are
called as ``fn(value, key)``.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Any, TypeVar

from jsonkv.record import Record

R = TypeVar("R")

Predicate = Callable[[Any, str], bool]
Transform = Callable[[Any, str], R]


def filter_records(records: Sequence[Record], predicate: Predicate) -> list[Record]:
    return [r for r in records if predicate(r.value, r.key)]


def map_records(records: Sequence[Record], transform: Transform[R]) -> list[R]:
    return [transform(r.value, r.key) for r in records]


def find_record(records: Sequence[Record], predicate: Predicate) -> Record | None:
    """Return the first matching record in snapshot order, or ``None``."""
    for r in records:
        if predicate(r.value, r.key):
            return r
    return None


def some_records(records: Sequence[Record], predicate: Predicate) -> bool:
    return any(predicate(r.value, r.key) for r in records)


def every_records(records: Sequence[Record], predicate: Predicate) -> bool:
    """``True`` when every record matches; vacuously ``True`` on an empty snapshot."""
    return all(predicate(r.value, r.key) for r in records)


# Key matching is plain, case-sensitive string containment (no globs).


def keys_starting_with(records: Sequence[Record], prefix: str) -> list[Record]:
    return [r for r in records if r.key.startswith(prefix)]


def keys_ending_with(records: Sequence[Record], suffix: str) -> list[Record]:
    return [r for r in records if r.key.endswith(suffix)]


def keys_containing(records: Sequence[Record], substring: str) -> list[Record]:
    return [r for r in records if substring in r.key]
