"""Canonical JSON encoding for stored values.

JSON is self-describing, so no schema is needed per key.  Object members
are written in sorted order with compact separators, which makes the
encoding canonical: equal values always encode to equal bytes.
"""

from __future__ import annotations

import json
import math
from typing import Any

from jsonkv.exceptions import CorruptValueError, InvalidValueError
from jsonkv.values import Value, validate


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-finite number {name}")


def _parse_finite_float(text: str) -> float:
    number = float(text)
    if not math.isfinite(number):
        raise ValueError(f"non-finite number {text}")
    return number


def canonical(value: Any) -> str:
    """Return the canonical JSON text of *value*.

    Raises:
        InvalidValueError: If *value* is outside the value model.
    """
    normalized = validate(value)
    try:
        return json.dumps(
            normalized,
            sort_keys=True,
            separators=(",", ":"),
            ensure_ascii=False,
            allow_nan=False,
        )
    except (TypeError, ValueError) as exc:
        raise InvalidValueError("encode", str(exc)) from exc


def encode(value: Any) -> bytes:
    """Encode *value* to canonical UTF-8 JSON bytes."""
    return canonical(value).encode("utf-8")


def decode(data: bytes | str, key: str | None = None) -> Value:
    """Decode a payload produced by :func:`encode`.

    Args:
        data: Encoded payload, as bytes or text.
        key:  Owning key, used only to enrich the error message.

    Raises:
        CorruptValueError: If *data* is not well-formed UTF-8 JSON or holds a
            non-finite number (including overflowing literals like ``1e400``).
    """
    try:
        text = data.decode("utf-8") if isinstance(data, (bytes, bytearray)) else data
        result: Value = json.loads(
            text, parse_float=_parse_finite_float, parse_constant=_reject_constant
        )
    except (UnicodeDecodeError, ValueError) as exc:
        raise CorruptValueError(str(exc), key=key) from exc
    return result
