"""Custom exceptions for the jsonkv package."""

from __future__ import annotations


class StoreError(Exception):
    """Base exception for every failure raised by jsonkv.

    Attributes:
        operation: Name of the operation that failed (``"set"``, ``"connect"``...).
        detail:    Extra context, possibly empty.
    """

    def __init__(self, operation: str, detail: str = "") -> None:
        self.operation = operation
        self.detail = detail
        msg = f"Store error during '{operation}'"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class StoreConnectionError(StoreError):
    """Raised when the backing store is unreachable or rejects the connection."""

    def __init__(self, detail: str = "") -> None:
        super().__init__("connect", detail)


class StoreConfigError(StoreError):
    """Raised when a connection descriptor cannot be turned into a store."""

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        super().__init__("configure", f"{message} (url={url!r})")


class InvalidKeyError(StoreError):
    """Raised when an empty or non-string key is passed to a write operation."""

    def __init__(self, operation: str, key: object) -> None:
        self.key = key
        super().__init__(operation, f"invalid key {key!r}: keys must be non-empty strings")


class InvalidValueError(StoreError):
    """Raised when a value falls outside the JSON value model."""


class InvalidOperationError(StoreError):
    """Raised when ``math`` receives an operator it does not know."""

    def __init__(self, op: object) -> None:
        self.op = op
        super().__init__("math", f"invalid operation {op!r}")


class CorruptValueError(StoreError):
    """Raised when a stored payload cannot be decoded.

    Attributes:
        key: Key whose payload is corrupt, when known.
    """

    def __init__(self, detail: str, key: str | None = None) -> None:
        self.key = key
        if key is not None:
            detail = f"key {key!r}: {detail}"
        super().__init__("decode", detail)
