"""SQLite-backed store for seen records, notifications and lookup caches.

Every public method is a coroutine that runs one short blocking unit of work
in the default thread executor, on its own connection, so the event loop is
never blocked and calls from concurrent tasks stay independent.
"""

from __future__ import annotations

import asyncio
import logging
import sqlite3
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime
from functools import partial
from typing import TypeVar

from ..constants import NOTIFICATION_DELIVERY_CAP
from ..errors.internal import StoreError
from .models import (
    CoinSnapshot,
    LocationRecord,
    Notification,
    SeenRecord,
    WeatherPreference,
)

T = TypeVar("T")

_SCHEMA = (
    """CREATE TABLE IF NOT EXISTS seen (
        username    TEXT PRIMARY KEY COLLATE NOCASE,
        message     TEXT NOT NULL,
        time        TEXT NOT NULL)""",
    """CREATE TABLE IF NOT EXISTS notifications (
        id          INTEGER PRIMARY KEY AUTOINCREMENT,
        recipient   TEXT NOT NULL COLLATE NOCASE,
        via         TEXT NOT NULL,
        message     TEXT NOT NULL)""",
    """CREATE TABLE IF NOT EXISTS locations (
        loc         TEXT PRIMARY KEY COLLATE NOCASE,
        lat         TEXT NOT NULL,
        lon         TEXT NOT NULL,
        city        TEXT,
        country     TEXT NOT NULL)""",
    """CREATE TABLE IF NOT EXISTS weather (
        username    TEXT PRIMARY KEY COLLATE NOCASE,
        lat         TEXT NOT NULL,
        lon         TEXT NOT NULL)""",
    """CREATE TABLE IF NOT EXISTS coins (
        coin        TEXT PRIMARY KEY COLLATE NOCASE,
        timeframe   TEXT NOT NULL,
        date        INTEGER NOT NULL,
        data_0      TEXT NOT NULL,
        data_1      TEXT NOT NULL)""",
)


class SQLiteStore:
    """Narrow async persistence interface used by the runner and dispatcher."""

    def __init__(self, db_path: str) -> None:
        self.db_path = db_path

    @classmethod
    def open(cls, db_path: str) -> SQLiteStore:
        """Create the store and its schema (blocking; call before the loop is busy)."""
        store = cls(db_path)
        try:
            with store._connection() as conn:
                conn.execute("PRAGMA journal_mode = WAL")
                for statement in _SCHEMA:
                    conn.execute(statement)
        except sqlite3.Error as e:
            raise StoreError(f"Unable to open database {db_path}: {e}", operation="open") from e
        logging.info(f"🗄️ Store opened: {db_path}")
        return store

    @contextmanager
    def _connection(self) -> Iterator[sqlite3.Connection]:
        conn = sqlite3.connect(self.db_path, timeout=5.0)
        try:
            with conn:  # commit on success, rollback on error
                yield conn
        finally:
            conn.close()

    async def _run(self, fn: Callable[..., T], *args: object) -> T:
        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, partial(fn, *args))
        except sqlite3.Error as e:
            operation = fn.__name__.lstrip("_")
            raise StoreError(f"{operation} failed: {e}", operation=operation) from e

    # ------------------------------ seen ------------------------------ #
    async def get_seen(self, username: str) -> SeenRecord | None:
        return await self._run(self._get_seen, username)

    def _get_seen(self, username: str) -> SeenRecord | None:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT username, message, time FROM seen WHERE username = ?",
                (username,),
            ).fetchone()
        if row is None:
            return None
        return SeenRecord(row[0], row[1], datetime.fromisoformat(row[2]))

    async def put_seen(self, record: SeenRecord) -> None:
        await self._run(self._put_seen, record)

    def _put_seen(self, record: SeenRecord) -> None:
        with self._connection() as conn:
            conn.execute(
                """INSERT INTO seen (username, message, time) VALUES (?, ?, ?)
                ON CONFLICT (username) DO UPDATE SET
                username=excluded.username, message=excluded.message, time=excluded.time""",
                (record.username, record.message, record.timestamp.isoformat()),
            )

    # -------------------------- notifications ------------------------- #
    async def add_notification(self, notification: Notification) -> None:
        await self._run(self._add_notification, notification)

    def _add_notification(self, notification: Notification) -> None:
        with self._connection() as conn:
            conn.execute(
                "INSERT INTO notifications (recipient, via, message) VALUES (?, ?, ?)",
                (notification.recipient, notification.sender, notification.message),
            )

    async def list_and_clear_notifications(
        self, recipient: str, max: int = NOTIFICATION_DELIVERY_CAP  # noqa: A002
    ) -> list[Notification]:
        """Pop up to ``max`` of the oldest notifications for ``recipient``."""
        return await self._run(self._list_and_clear_notifications, recipient, max)

    def _list_and_clear_notifications(self, recipient: str, limit: int) -> list[Notification]:
        with self._connection() as conn:
            rows = conn.execute(
                """SELECT id, recipient, via, message FROM notifications
                WHERE recipient = ? ORDER BY id LIMIT ?""",
                (recipient, limit),
            ).fetchall()
            conn.executemany(
                "DELETE FROM notifications WHERE id = ?", [(row[0],) for row in rows]
            )
        return [Notification(id=r[0], recipient=r[1], sender=r[2], message=r[3]) for r in rows]

    # ---------------------------- locations --------------------------- #
    async def get_location(self, query: str) -> LocationRecord | None:
        return await self._run(self._get_location, query)

    def _get_location(self, query: str) -> LocationRecord | None:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT loc, lat, lon, city, country FROM locations WHERE loc = ?",
                (query,),
            ).fetchone()
        if row is None:
            return None
        return LocationRecord(query=row[0], latitude=row[1], longitude=row[2], city=row[3], country=row[4])

    async def put_location(self, query: str, record: LocationRecord) -> None:
        """Cache a geocoding result; an existing entry for ``query`` is kept."""
        await self._run(self._put_location, query, record)

    def _put_location(self, query: str, record: LocationRecord) -> None:
        with self._connection() as conn:
            conn.execute(
                """INSERT INTO locations (loc, lat, lon, city, country) VALUES (?, ?, ?, ?, ?)
                ON CONFLICT (loc) DO NOTHING""",
                (query, record.latitude, record.longitude, record.city, record.country),
            )

    # ----------------------------- weather ---------------------------- #
    async def get_weather_pref(self, username: str) -> WeatherPreference | None:
        return await self._run(self._get_weather_pref, username)

    def _get_weather_pref(self, username: str) -> WeatherPreference | None:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT username, lat, lon FROM weather WHERE username = ?", (username,)
            ).fetchone()
        return WeatherPreference(*row) if row else None

    async def put_weather_pref(self, username: str, latitude: str, longitude: str) -> None:
        await self._run(self._put_weather_pref, username, latitude, longitude)

    def _put_weather_pref(self, username: str, latitude: str, longitude: str) -> None:
        with self._connection() as conn:
            conn.execute(
                """INSERT INTO weather (username, lat, lon) VALUES (?, ?, ?)
                ON CONFLICT (username) DO UPDATE SET lat=excluded.lat, lon=excluded.lon""",
                (username, latitude, longitude),
            )

    # ------------------------------ coins ----------------------------- #
    async def get_coin_snapshot(self, symbol: str) -> CoinSnapshot | None:
        return await self._run(self._get_coin_snapshot, symbol)

    def _get_coin_snapshot(self, symbol: str) -> CoinSnapshot | None:
        with self._connection() as conn:
            row = conn.execute(
                "SELECT coin, timeframe, date, data_0, data_1 FROM coins WHERE coin = ?",
                (symbol,),
            ).fetchone()
        return CoinSnapshot(*row) if row else None

    async def put_coin_snapshot(self, snapshot: CoinSnapshot) -> None:
        await self._run(self._put_coin_snapshot, snapshot)

    def _put_coin_snapshot(self, snapshot: CoinSnapshot) -> None:
        with self._connection() as conn:
            conn.execute(
                """INSERT INTO coins (coin, timeframe, date, data_0, data_1) VALUES (?, ?, ?, ?, ?)
                ON CONFLICT (coin) DO UPDATE SET timeframe=excluded.timeframe,
                date=excluded.date, data_0=excluded.data_0, data_1=excluded.data_1""",
                (
                    snapshot.symbol,
                    snapshot.timeframe,
                    snapshot.as_of,
                    snapshot.graph_line,
                    snapshot.stats_line,
                ),
            )
