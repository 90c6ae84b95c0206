"""Tests for SQLiteStore."""

import asyncio

import pytest

from jsonkv.exceptions import CorruptValueError, InvalidKeyError, StoreConnectionError
from jsonkv.stores import SQLiteStore


@pytest.fixture
async def store(tmp_path, clock):
    s = SQLiteStore(str(tmp_path / "kv.db"), clock=clock)
    yield s
    await s.close()


async def test_connects_lazily(store):
    assert store._db is None
    assert await store.get("k") is None
    assert store._db is not None


async def test_put_and_get(store):
    record = await store.put("user:1", {"name": "John", "age": 30, "active": True})
    assert record.value == {"name": "John", "age": 30, "active": True}
    fetched = await store.get("user:1")
    assert fetched == record


async def test_upsert_keeps_created_at(store, clock):
    first = await store.put("k", "a")
    clock.advance(10)
    second = await store.put("k", "b")
    assert second.created_at == first.created_at
    assert second.updated_at > first.updated_at
    assert (await store.get("k")).value == "b"
    assert await store.count() == 1


async def test_updated_at_advances_when_clock_is_still(store):
    first = await store.put("k", 1)
    second = await store.put("k", 1)
    assert second.updated_at > first.updated_at


async def test_remove_is_idempotent(store):
    await store.put("k", 1)
    assert await store.remove("k") is True
    assert await store.remove("k") is False


async def test_empty_key_rejected(store):
    with pytest.raises(InvalidKeyError):
        await store.put("", 1)


async def test_scan_ties_use_insertion_order(store):
    for key in ["zeta", "alpha", "mid"]:
        await store.put(key, key.upper())
    records = await store.scan_all()
    assert [r.key for r in records] == ["zeta", "alpha", "mid"]
    assert [r.value for r in records] == ["ZETA", "ALPHA", "MID"]


async def test_clear_returns_count(store):
    for i in range(5):
        await store.put(f"k{i}", i)
    assert await store.clear() == 5
    assert await store.count() == 0
    assert await store.clear() == 0


async def test_data_survives_reopen(tmp_path, clock):
    path = str(tmp_path / "persist.db")
    first = SQLiteStore(path, clock=clock)
    created = await first.put("k", [1, 2.5, -3])
    await first.close()

    second = SQLiteStore(path, clock=clock)
    try:
        record = await second.get("k")
        assert record.value == [1, 2.5, -3]
        assert record.created_at == created.created_at
    finally:
        await second.close()


async def test_unreachable_path_raises_connection_error(tmp_path):
    s = SQLiteStore(str(tmp_path / "missing" / "dir" / "kv.db"))
    with pytest.raises(StoreConnectionError):
        await s.connect()


async def test_corrupt_row_surfaces(store):
    await store.put("k", 1)
    await store._db.execute("UPDATE kv_store SET value = '{oops' WHERE key = 'k'")
    await store._db.commit()
    with pytest.raises(CorruptValueError):
        await store.get("k")
    with pytest.raises(CorruptValueError):
        await store.scan_all()


async def test_close_is_idempotent(store):
    await store.connect()
    await store.close()
    await store.close()


async def test_scan_racing_clear_is_all_or_nothing(store):
    for i in range(200):
        await store.put(f"k{i}", {"n": i})

    snapshot, removed = await asyncio.gather(store.scan_all(), store.clear())
    assert removed == 200
    assert len(snapshot) in (0, 200)
    assert await store.count() == 0
