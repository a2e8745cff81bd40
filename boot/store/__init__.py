"""Persistence layer."""

from .models import (
    CoinSnapshot,
    LocationRecord,
    Notification,
    SeenRecord,
    WeatherPreference,
)
from .sqlite_store import SQLiteStore

__all__ = [
    "CoinSnapshot",
    "LocationRecord",
    "Notification",
    "SQLiteStore",
    "SeenRecord",
    "WeatherPreference",
]
