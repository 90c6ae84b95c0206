"""Shared test fixtures."""

from datetime import UTC, datetime, timedelta

import pytest

from jsonkv import Database
from jsonkv.stores import InMemoryStore, SQLiteStore


class FakeClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 1_000_000.0):
        self._now = datetime.fromtimestamp(start, tz=UTC)

    def now(self) -> datetime:
        return self._now

    def advance(self, seconds: float) -> None:
        self._now += timedelta(seconds=seconds)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture(params=["memory", "sqlite"])
async def store(request, clock):
    if request.param == "memory":
        s = InMemoryStore(clock=clock)
    else:
        s = SQLiteStore(":memory:", clock=clock)
    await s.connect()
    yield s
    await s.close()


@pytest.fixture
async def db(store):
    database = Database(store=store)
    yield database
    await database.disconnect()
