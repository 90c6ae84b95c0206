"""The JSON value model: tagging, validation and structural equality.

A *Value* is one of six variants, represented by the matching Python
objects:

========  =====================
Null      ``None``
Bool      ``bool``
Number    ``int`` / ``float``
String    ``str``
Array     ``list`` (``tuple`` accepted on input)
Object    ``dict`` with ``str`` keys
========  =====================

Every consumer dispatches on :func:`kind_of` rather than inspecting types
itself, so ``True`` is never mistaken for the number ``1``.
"""

from __future__ import annotations

import math
from enum import Enum
from typing import Any, TypeAlias

from jsonkv.exceptions import InvalidValueError

Value: TypeAlias = None | bool | int | float | str | list[Any] | dict[str, Any]


class ValueKind(str, Enum):
    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


def kind_of(value: Any) -> ValueKind:
    """Return the variant tag of *value*.

    Raises:
        InvalidValueError: If *value* is not part of the value model.
    """
    if value is None:
        return ValueKind.NULL
    # bool before int: bool is a subclass of int.
    if isinstance(value, bool):
        return ValueKind.BOOL
    if isinstance(value, (int, float)):
        return ValueKind.NUMBER
    if isinstance(value, str):
        return ValueKind.STRING
    if isinstance(value, (list, tuple)):
        return ValueKind.ARRAY
    if isinstance(value, dict):
        return ValueKind.OBJECT
    raise InvalidValueError("validate", f"unsupported type {type(value).__name__}")


def is_number(value: Any) -> bool:
    return kind_of_or_none(value) is ValueKind.NUMBER


def is_array(value: Any) -> bool:
    return kind_of_or_none(value) is ValueKind.ARRAY


def is_object(value: Any) -> bool:
    return kind_of_or_none(value) is ValueKind.OBJECT


def kind_of_or_none(value: Any) -> ValueKind | None:
    """Like :func:`kind_of` but returns ``None`` for foreign types."""
    try:
        return kind_of(value)
    except InvalidValueError:
        return None


def validate(value: Any) -> Value:
    """Check that *value* is a well-formed Value and return a normalized copy.

    Tuples become lists; nested containers are copied so later mutation
    of the caller's object cannot leak into what gets stored.

    Raises:
        InvalidValueError: On foreign types, non-string object keys, or
            non-finite numbers.
    """
    kind = kind_of(value)
    if kind is ValueKind.NUMBER:
        if isinstance(value, float) and not math.isfinite(value):
            raise InvalidValueError("validate", f"non-finite number {value!r}")
        return value
    if kind is ValueKind.ARRAY:
        return [validate(item) for item in value]
    if kind is ValueKind.OBJECT:
        result: dict[str, Any] = {}
        for k, v in value.items():
            if not isinstance(k, str):
                raise InvalidValueError("validate", f"object key {k!r} is not a string")
            result[k] = validate(v)
        return result
    return value


def values_equal(a: Any, b: Any) -> bool:
    """Structural equality over the value model.

    Same tag, then: arrays compare element-wise in order, objects by key
    set and per-key equality regardless of member order, numbers by exact
    value.
    """
    kind_a = kind_of_or_none(a)
    kind_b = kind_of_or_none(b)
    if kind_a is None or kind_a is not kind_b:
        return False
    if kind_a is ValueKind.ARRAY:
        if len(a) != len(b):
            return False
        return all(values_equal(x, y) for x, y in zip(a, b))
    if kind_a is ValueKind.OBJECT:
        if a.keys() != b.keys():
            return False
        return all(values_equal(a[k], b[k]) for k in a)
    if kind_a is ValueKind.NULL:
        return True
    return bool(a == b)
