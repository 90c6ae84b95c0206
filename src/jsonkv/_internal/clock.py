"""Clock abstraction for record timestamps."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Protocol

_TICK = timedelta(microseconds=1)


class Clock(Protocol):
    """Protocol for getting the current time.  Inject a fake in tests."""

    def now(self) -> datetime: ...


class SystemClock:
    """Default clock backed by the real system time."""

    def now(self) -> datetime:
        return datetime.now(UTC)


def next_timestamp(clock: Clock, previous: datetime | None = None) -> datetime:
    """Return ``clock.now()``, bumped past *previous* when the clock has not moved.

    Keeps ``updated_at`` strictly increasing even when two writes land
    within the clock's resolution (or the clock steps backwards).
    """
    now = clock.now()
    if previous is not None and now <= previous:
        return previous + _TICK
    return now
