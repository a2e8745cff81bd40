"""Rows persisted by the SQLite store."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(slots=True)
class SeenRecord:
    username: str
    message: str
    timestamp: datetime


@dataclass(slots=True)
class Notification:
    recipient: str
    sender: str
    message: str
    id: int = 0


@dataclass(slots=True)
class LocationRecord:
    """A geocoded free-text query. ``city`` is unknown for some regions."""

    query: str
    latitude: str
    longitude: str
    country: str
    city: str | None = None

    def display_name(self) -> str:
        return f"{self.city}, {self.country}" if self.city else self.country


@dataclass(slots=True)
class WeatherPreference:
    username: str
    latitude: str
    longitude: str


@dataclass(slots=True)
class CoinSnapshot:
    symbol: str
    timeframe: str
    as_of: int  # unix seconds
    graph_line: str
    stats_line: str

    def is_fresh(self, now: int, ttl_seconds: int, timeframe: str) -> bool:
        return self.timeframe == timeframe and 0 <= now - self.as_of < ttl_seconds
