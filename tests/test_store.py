from __future__ import annotations

import sqlite3
from datetime import UTC, datetime
from unittest.mock import patch

import pytest

from boot.errors.internal import StoreError
from boot.store import (
    CoinSnapshot,
    LocationRecord,
    Notification,
    SeenRecord,
    SQLiteStore,
    WeatherPreference,
)


@pytest.mark.asyncio
async def test_seen_upsert_is_case_insensitive(store):
    when = datetime(2024, 1, 2, 3, 4, 5, tzinfo=UTC)
    await store.put_seen(SeenRecord("Alice", "saying: hi", when))
    await store.put_seen(SeenRecord("alice", "saying: bye", when))
    record = await store.get_seen("ALICE")
    assert record == SeenRecord("alice", "saying: bye", when)


@pytest.mark.asyncio
async def test_seen_missing(store):
    assert await store.get_seen("nobody") is None


@pytest.mark.asyncio
async def test_notifications_capped_and_removed(store):
    for i in range(3):
        await store.add_notification(Notification("bob", "alice", f"msg {i}"))
    first = await store.list_and_clear_notifications("Bob", 2)
    assert [n.message for n in first] == ["msg 0", "msg 1"]
    assert all(n.sender == "alice" for n in first)
    rest = await store.list_and_clear_notifications("bob", 2)
    assert [n.message for n in rest] == ["msg 2"]
    assert await store.list_and_clear_notifications("bob", 2) == []


@pytest.mark.asyncio
async def test_location_round_trip_case_insensitive(store):
    record = LocationRecord("Berlin", "52.52", "13.40", "Germany", "Berlin")
    await store.put_location("Berlin", record)
    assert await store.get_location("berlin") == record


@pytest.mark.asyncio
async def test_location_is_immutable_once_cached(store):
    await store.put_location("paris", LocationRecord("paris", "48.85", "2.35", "France", "Paris"))
    await store.put_location("Paris", LocationRecord("Paris", "0", "0", "Nowhere"))
    cached = await store.get_location("PARIS")
    assert cached is not None
    assert cached.country == "France"


@pytest.mark.asyncio
async def test_location_without_city(store):
    await store.put_location("antarctica", LocationRecord("antarctica", "-80", "0", "Antarctica"))
    cached = await store.get_location("antarctica")
    assert cached is not None
    assert cached.city is None
    assert cached.display_name() == "Antarctica"


@pytest.mark.asyncio
async def test_weather_pref_upsert(store):
    await store.put_weather_pref("Alice", "1", "2")
    await store.put_weather_pref("alice", "3", "4")
    assert await store.get_weather_pref("ALICE") == WeatherPreference("Alice", "3", "4")


@pytest.mark.asyncio
async def test_coin_snapshot_upsert(store):
    await store.put_coin_snapshot(CoinSnapshot("btc", "1d", 100, "g1", "s1"))
    await store.put_coin_snapshot(CoinSnapshot("btc", "7d", 200, "g2", "s2"))
    assert await store.get_coin_snapshot("btc") == CoinSnapshot("btc", "7d", 200, "g2", "s2")
    assert await store.get_coin_snapshot("eth") is None


def test_snapshot_freshness():
    snap = CoinSnapshot("btc", "1d", 1000, "g", "s")
    assert snap.is_fresh(1100, 300, "1d")
    assert not snap.is_fresh(1300, 300, "1d")
    assert not snap.is_fresh(1100, 300, "7d")


@pytest.mark.asyncio
async def test_sqlite_errors_become_store_errors(store):
    with patch("boot.store.sqlite_store.sqlite3.connect", side_effect=sqlite3.OperationalError("boom")):
        with pytest.raises(StoreError) as excinfo:
            await store.get_seen("alice")
    assert excinfo.value.operation == "get_seen"


def test_open_unwritable_path_raises(tmp_path):
    with pytest.raises(StoreError):
        SQLiteStore.open(str(tmp_path / "missing" / "dir" / "db.sqlite"))
