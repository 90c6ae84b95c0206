"""Tests for bulk reads and snapshot queries."""

import pytest

from jsonkv.query import every_records, filter_records, keys_containing
from jsonkv.record import Record


@pytest.fixture
async def populated(db, clock):
    await db.set("user:1", {"name": "John", "age": 30})
    clock.advance(1)
    await db.set("user:2", {"name": "Ann", "age": 25})
    clock.advance(1)
    await db.set("config:theme", "dark")
    clock.advance(1)
    await db.set("Session:user", 42)
    return db


async def test_all_in_creation_order(populated):
    records = await populated.all()
    assert [r.key for r in records] == ["user:1", "user:2", "config:theme", "Session:user"]
    assert all(isinstance(r, Record) for r in records)


async def test_keys_and_values(populated):
    assert await populated.keys() == ["user:1", "user:2", "config:theme", "Session:user"]
    assert (await populated.values())[2:] == ["dark", 42]


async def test_filter_by_key(populated):
    users = await populated.filter(lambda value, key: key.startswith("user:"))
    assert [r.key for r in users] == ["user:1", "user:2"]


async def test_filter_by_value(populated):
    adults = await populated.filter(lambda v, k: isinstance(v, dict) and v.get("age", 0) >= 30)
    assert [r.key for r in adults] == ["user:1"]


async def test_map(populated):
    assert await populated.map(lambda v, k: k.upper()) == [
        "USER:1",
        "USER:2",
        "CONFIG:THEME",
        "SESSION:USER",
    ]


async def test_find_returns_first_match(populated):
    found = await populated.find(lambda v, k: k.startswith("user"))
    assert found.key == "user:1"
    assert await populated.find(lambda v, k: False) is None


async def test_some_and_every(populated):
    assert await populated.some(lambda v, k: v == "dark")
    assert not await populated.some(lambda v, k: v == "light")
    assert await populated.every(lambda v, k: ":" in k)
    assert not await populated.every(lambda v, k: isinstance(v, dict))


async def test_empty_store_quantifiers(db):
    assert await db.every(lambda v, k: False) is True
    assert await db.some(lambda v, k: True) is False
    assert await db.find(lambda v, k: True) is None
    assert await db.filter(lambda v, k: True) == []


async def test_filter_and_map_agree_with_size(populated):
    matched = await populated.filter(lambda v, k: True)
    mapped = await populated.map(lambda v, k: v)
    size = await populated.size()
    assert len(matched) == len(mapped) == size == 4


async def test_key_matching_is_case_sensitive(populated):
    assert [r.key for r in await populated.starts_with("user")] == ["user:1", "user:2"]
    assert [r.key for r in await populated.ends_with("user")] == ["Session:user"]
    assert [r.key for r in await populated.includes("user")] == [
        "user:1",
        "user:2",
        "Session:user",
    ]
    assert await populated.starts_with("USER") == []


async def test_key_matching_is_not_a_pattern(populated):
    await populated.set("a*b", 1)
    assert [r.key for r in await populated.includes("*")] == ["a*b"]
    assert await populated.starts_with("user.*") == []


async def test_predicate_mutation_does_not_touch_store(populated):
    def meddle(value, key):
        if isinstance(value, dict):
            value["name"] = "changed"
        return True

    await populated.filter(meddle)
    assert (await populated.get("user:1"))["name"] == "John"


def test_query_functions_work_on_plain_snapshots(clock):
    now = clock.now()
    snapshot = [Record("a", 1, now, now), Record("ab", 2, now, now)]
    assert [r.key for r in filter_records(snapshot, lambda v, k: v > 1)] == ["ab"]
    assert every_records([], lambda v, k: False)
    assert [r.key for r in keys_containing(snapshot, "b")] == ["ab"]
