"""Mutator — atomic read-modify-write operations on a single key.

Every mutation reads the current value, derives a new one and writes it
back while holding that key's lock, so two mutations of the same key
never both see the same prior value.  Absent or wrongly-shaped values
are not errors here: numeric operations start from ``0`` and array
operations from ``[]``.

The inspectors (``array_length``, ``object_keys``, ...) are plain reads
returning a neutral default when the stored value has the wrong shape.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal, get_args

from jsonkv.exceptions import InvalidOperationError, InvalidValueError
from jsonkv.locks import KeyLocks
from jsonkv.stores.base import check_key
from jsonkv.values import is_array, is_number, is_object, values_equal

if TYPE_CHECKING:
    from jsonkv.stores.base import Store

MathOp = Literal["add", "subtract", "multiply", "divide"]

MATH_OPS: tuple[str, ...] = get_args(MathOp)


def _check_number(operation: str, operand: Any) -> int | float:
    if not is_number(operand):
        raise InvalidValueError(operation, f"expected a number, got {operand!r}")
    number: int | float = operand
    return number


def apply_math(op: str, current: int | float, operand: int | float) -> int | float:
    """Combine *current* and *operand*; division by zero leaves *current* as is."""
    if op == "add":
        return current + operand
    if op == "subtract":
        return current - operand
    if op == "multiply":
        return current * operand
    if op == "divide":
        return current / operand if operand != 0 else current
    raise InvalidOperationError(op)


class Mutator:
    """Runs mutations against a store under per-key locks.

    Parameters:
        store: Backend holding the values.
        locks: Lock table shared by everything mutating *store*.
    """

    def __init__(self, store: Store, locks: KeyLocks | None = None) -> None:
        self._store = store
        self._locks = locks if locks is not None else KeyLocks()

    @property
    def locks(self) -> KeyLocks:
        return self._locks

    async def _current(self, key: str) -> Any:
        record = await self._store.get(key)
        return record.value if record is not None else None

    # ── numeric ──────────────────────────────────────────────

    async def math(self, key: str, op: MathOp, operand: int | float) -> int | float:
        if op not in MATH_OPS:
            raise InvalidOperationError(op)
        check_key("math", key)
        operand = _check_number("math", operand)
        async with self._locks.hold(key):
            current = await self._current(key)
            base = current if is_number(current) else 0
            result = apply_math(op, base, operand)
            await self._store.put(key, result)
        return result

    async def add(self, key: str, delta: int | float) -> int | float:
        return await self.math(key, "add", delta)

    async def subtract(self, key: str, delta: int | float) -> int | float:
        return await self.math(key, "subtract", delta)

    # ── arrays ───────────────────────────────────────────────

    async def push(self, key: str, *values: Any) -> list[Any]:
        check_key("push", key)
        async with self._locks.hold(key):
            current = await self._current(key)
            base = list(current) if is_array(current) else []
            record = await self._store.put(key, [*base, *values])
        result: list[Any] = record.value
        return result

    async def pull(self, key: str, value: Any) -> list[Any]:
        """Remove every element structurally equal to *value*."""
        check_key("pull", key)
        async with self._locks.hold(key):
            current = await self._current(key)
            if not is_array(current):
                return []
            kept = [item for item in current if not values_equal(item, value)]
            record = await self._store.put(key, kept)
        result: list[Any] = record.value
        return result

    # ── inspectors ───────────────────────────────────────────

    async def array_length(self, key: str) -> int:
        current = await self._current(key)
        return len(current) if is_array(current) else 0

    async def array_includes(self, key: str, value: Any) -> bool:
        return await self.array_index_of(key, value) != -1

    async def array_index_of(self, key: str, value: Any) -> int:
        current = await self._current(key)
        if not is_array(current):
            return -1
        for index, item in enumerate(current):
            if values_equal(item, value):
                return index
        return -1

    async def object_keys(self, key: str) -> list[str]:
        current = await self._current(key)
        return list(current.keys()) if is_object(current) else []

    async def object_values(self, key: str) -> list[Any]:
        current = await self._current(key)
        return list(current.values()) if is_object(current) else []

    async def object_has_key(self, key: str, object_key: str) -> bool:
        if not isinstance(object_key, str):
            return False
        current = await self._current(key)
        return is_object(current) and object_key in current
