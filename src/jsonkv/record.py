"""Record — one stored key with its value and timestamps."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass(frozen=True)
class Record:
    """Immutable snapshot of a stored entry.

    Attributes:
        key:        Unique, non-empty key.
        value:      Decoded value.  A fresh object on every read, so
                    mutating it never touches stored state.
        created_at: When the key was first inserted (UTC).  Never changes.
        updated_at: When the value was last written (UTC).
    """

    key: str
    value: Any
    created_at: datetime
    updated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-serializable view (timestamps as ISO-8601 strings)."""
        return {
            "key": self.key,
            "value": self.value,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }
