from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest
import pytest_asyncio

from boot.bot.dispatcher import Dispatcher
from boot.bot.hangman import HangmanGame
from boot.bot.sink import ReplySink
from boot.store.sqlite_store import SQLiteStore


@pytest.fixture
def store(tmp_path) -> SQLiteStore:
    return SQLiteStore.open(str(tmp_path / "boot.sqlite"))


@pytest.fixture
def sink() -> ReplySink:
    return ReplySink()


@pytest.fixture
def fetchers() -> MagicMock:
    f = MagicMock()
    f.fetch_title = AsyncMock(return_value=None)
    f.geocode = AsyncMock(return_value=None)
    f.fetch_weather = AsyncMock()
    f.fetch_coin_series = AsyncMock()
    f.fetch_lastfm = AsyncMock(return_value=None)
    return f


@pytest.fixture
def hangman() -> HangmanGame:
    return HangmanGame(words=["python"])


@pytest_asyncio.fixture
async def dispatcher(store, fetchers, sink, hangman):
    d = Dispatcher(store, fetchers, sink, hangman, weather_api_key="key")
    yield d
    await d.cancel_all()

