from __future__ import annotations

import asyncio
import time
from datetime import timedelta
from unittest.mock import AsyncMock

import pytest
from support import make_event, texts

from boot.bot.models import (
    IGNORE,
    Coins,
    HangGuess,
    HangStart,
    Lastfm,
    Location,
    PlainReply,
    Seen,
    Tell,
    Weather,
)
from boot.errors.internal import NetworkError, StoreError
from boot.fetchers.coins import Candle, summarize
from boot.fetchers.weather import WeatherReport
from boot.store.models import CoinSnapshot, LocationRecord, SeenRecord
from boot.utils.helpers import utc_now

BERLIN = LocationRecord("Berlin", "52.52", "13.40", "Germany", "Berlin")


def report() -> WeatherReport:
    return WeatherReport(
        name="Berlin",
        country="DE",
        description="clear sky",
        condition_id=800,
        temperature_c=20.0,
        humidity=40,
        wind_ms=1.0,
        gust_ms=None,
        cloud_cover=0,
        sunrise=0,
        sunset=0,
        utc_offset=0,
    )


@pytest.mark.asyncio
async def test_ignore_and_plain_reply(dispatcher, sink):
    await dispatcher.dispatch(make_event("x"), IGNORE)
    await dispatcher.dispatch(make_event("x"), PlainReply("hello"))
    replies = sink.drain_nowait()
    assert [(r.target, r.text) for r in replies] == [("#chan", "hello")]


@pytest.mark.asyncio
async def test_seen_formats_record(dispatcher, store, sink):
    await store.put_seen(SeenRecord("Bob", "saying: hi", utc_now() - timedelta(hours=2)))
    await dispatcher.dispatch(make_event(".seen bob"), Seen("bob"))
    assert texts(sink) == ["Bob was last seen 2 hours ago saying: hi"]


@pytest.mark.asyncio
async def test_seen_unknown(dispatcher, sink):
    await dispatcher.dispatch(make_event(".seen zed"), Seen("zed"))
    assert texts(sink) == ["zed has not previously been seen"]


@pytest.mark.asyncio
async def test_seen_store_error(dispatcher, store, sink):
    store.get_seen = AsyncMock(side_effect=StoreError("locked"))
    await dispatcher.dispatch(make_event(".seen zed"), Seen("zed"))
    assert texts(sink) == ["SQL error"]


@pytest.mark.asyncio
async def test_tell_stores_and_acknowledges(dispatcher, store, sink):
    await dispatcher.dispatch(make_event(".tell bob hi"), Tell("bob", "hi there"))
    assert texts(sink) == ["Ok, I'll tell bob that"]
    pending = await store.list_and_clear_notifications("bob", 2)
    assert [(n.sender, n.message) for n in pending] == [("alice", "hi there")]


@pytest.mark.asyncio
async def test_tell_store_failure_is_silent(dispatcher, store, sink):
    store.add_notification = AsyncMock(side_effect=StoreError("locked"))
    await dispatcher.dispatch(make_event(".tell bob hi"), Tell("bob", "hi"))
    assert texts(sink) == []


@pytest.mark.asyncio
async def test_location_cache_hit_replies_immediately(dispatcher, store, fetchers, sink):
    await store.put_location("berlin", BERLIN)
    await dispatcher.dispatch(make_event(".loc BERLIN"), Location("BERLIN"))
    assert dispatcher.pending_tasks == 0
    assert texts(sink) == ["Berlin, Germany: https://www.openstreetmap.org/?mlat=52.52&mlon=13.40"]
    fetchers.geocode.assert_not_awaited()


@pytest.mark.asyncio
async def test_location_miss_geocodes_and_caches(dispatcher, store, fetchers, sink):
    fetchers.geocode.return_value = BERLIN
    await dispatcher.dispatch(make_event(".loc Berlin"), Location("Berlin"))
    await dispatcher.drain()
    assert texts(sink) == ["Berlin, Germany: https://www.openstreetmap.org/?mlat=52.52&mlon=13.40"]
    assert await store.get_location("berlin") == BERLIN


@pytest.mark.asyncio
@pytest.mark.parametrize("outcome", [None, NetworkError("down")])
async def test_location_failure_reply(dispatcher, fetchers, sink, outcome):
    if isinstance(outcome, Exception):
        fetchers.geocode.side_effect = outcome
    else:
        fetchers.geocode.return_value = outcome
    await dispatcher.dispatch(make_event(".loc Atlantis"), Location("Atlantis"))
    await dispatcher.drain()
    assert texts(sink) == ["Unable to fetch location for Atlantis"]


@pytest.mark.asyncio
async def test_weather_without_preference_gives_hint(dispatcher, sink):
    await dispatcher.dispatch(make_event(".weather"), Weather(None))
    await dispatcher.drain()
    assert texts(sink) == ["Hint: weather <location>"]


@pytest.mark.asyncio
async def test_weather_resolves_and_remembers(dispatcher, store, fetchers, sink):
    fetchers.geocode.return_value = BERLIN
    fetchers.fetch_weather.return_value = report()
    await dispatcher.dispatch(make_event(".weather Berlin"), Weather("Berlin"))
    await dispatcher.drain()
    assert texts(sink)[0].startswith("Berlin, DE: clear sky, 20.0°C (68.0°F)")
    fetchers.fetch_weather.assert_awaited_once_with("52.52", "13.40", "key")
    pref = await store.get_weather_pref("alice")
    assert (pref.latitude, pref.longitude) == ("52.52", "13.40")

    # second request without a location reuses the stored preference
    await dispatcher.dispatch(make_event(".weather"), Weather(None))
    await dispatcher.drain()
    assert len(texts(sink)) == 1
    assert fetchers.geocode.await_count == 1


@pytest.mark.asyncio
async def test_weather_unknown_location(dispatcher, fetchers, sink):
    await dispatcher.dispatch(make_event(".weather Atlantis"), Weather("Atlantis"))
    await dispatcher.drain()
    assert texts(sink) == ["Unable to fetch location for Atlantis"]


@pytest.mark.asyncio
async def test_weather_fetch_failure_is_silent(dispatcher, store, fetchers, sink):
    await store.put_location("berlin", BERLIN)
    fetchers.fetch_weather.side_effect = NetworkError("timeout")
    await dispatcher.dispatch(make_event(".weather berlin"), Weather("berlin"))
    await dispatcher.drain()
    assert texts(sink) == []


@pytest.mark.asyncio
async def test_weather_cached_location_updates_preference(dispatcher, store, fetchers, sink):
    await store.put_location("berlin", BERLIN)
    await store.put_weather_pref("alice", "48.85", "2.35")
    fetchers.fetch_weather.return_value = report()
    await dispatcher.dispatch(make_event(".weather Berlin"), Weather("Berlin"))
    await dispatcher.drain()
    fetchers.geocode.assert_not_awaited()
    fetchers.fetch_weather.assert_awaited_once_with("52.52", "13.40", "key")
    pref = await store.get_weather_pref("alice")
    assert (pref.latitude, pref.longitude) == ("52.52", "13.40")
    assert len(texts(sink)) == 1


@pytest.mark.asyncio
async def test_weather_without_api_key_only_logs(dispatcher, fetchers, sink):
    dispatcher.weather_api_key = None
    await dispatcher.dispatch(make_event(".weather Berlin"), Weather("Berlin"))
    await dispatcher.drain()
    assert texts(sink) == []
    fetchers.geocode.assert_not_awaited()


@pytest.mark.asyncio
async def test_coins_emit_two_lines_and_snapshot(dispatcher, store, fetchers, sink):
    now = int(time.time())
    fetchers.fetch_coin_series.return_value = summarize(
        "btc", "1d", [Candle(now - 900, 1.0, 2.0), Candle(now, 2.0, 3.0)], spot=4.0, spot_time=now
    )
    await dispatcher.dispatch(make_event(".btc"), Coins("btc", "1d"))
    await dispatcher.drain()
    lines = texts(sink)
    assert len(lines) == 2
    assert lines[0].startswith("BTC 1d: ")
    assert lines[1].startswith("High: ")
    snapshot = await store.get_coin_snapshot("btc")
    assert (snapshot.graph_line, snapshot.stats_line) == tuple(lines)


@pytest.mark.asyncio
async def test_coins_fresh_snapshot_skips_fetch(dispatcher, store, fetchers, sink):
    await store.put_coin_snapshot(CoinSnapshot("btc", "1d", int(time.time()), "graph", "stats"))
    await dispatcher.dispatch(make_event(".btc"), Coins("btc", "1d"))
    await dispatcher.drain()
    assert texts(sink) == ["graph", "stats"]
    fetchers.fetch_coin_series.assert_not_awaited()


@pytest.mark.asyncio
async def test_coins_failure_is_silent(dispatcher, fetchers, sink):
    fetchers.fetch_coin_series.side_effect = NetworkError("down")
    await dispatcher.dispatch(make_event(".btc"), Coins("btc", "1d"))
    await dispatcher.drain()
    assert texts(sink) == []


@pytest.mark.asyncio
async def test_lastfm_reply_and_failure(dispatcher, fetchers, sink):
    fetchers.fetch_lastfm.return_value = "rj is now playing: A - B"
    await dispatcher.dispatch(make_event(".lastfm rj"), Lastfm("rj"))
    await dispatcher.drain()
    fetchers.fetch_lastfm.return_value = None
    await dispatcher.dispatch(make_event(".lastfm rj"), Lastfm("rj"))
    await dispatcher.drain()
    assert texts(sink) == ["rj is now playing: A - B", "No song data found!"]


@pytest.mark.asyncio
async def test_hangman_commands(dispatcher, sink):
    await dispatcher.dispatch(make_event(".hang"), HangStart(""))
    await dispatcher.dispatch(make_event(".hang"), HangStart(""))
    await dispatcher.dispatch(make_event("p"), HangGuess("p"))
    assert texts(sink) == [
        "_ _ _ _ _ _ | attempts: 0/7 | guessed: -",
        "A game is already in progress!",
        "p _ _ _ _ _ | attempts: 0/7 | guessed: -",
    ]


@pytest.mark.asyncio
async def test_idle_guess_is_ignored(dispatcher, sink):
    await dispatcher.dispatch(make_event("p"), HangGuess("p"))
    assert texts(sink) == []


@pytest.mark.asyncio
async def test_titles_keep_link_order(dispatcher, fetchers, sink):
    async def fetch(url: str):
        # later links resolve first
        await asyncio.sleep(0.01 if url.endswith("a") else 0)
        return {"http://x/a": "First", "http://x/b": None, "http://x/c": "Third"}[url]

    fetchers.fetch_title.side_effect = fetch
    dispatcher.spawn_titles("#chan", ["http://x/a", "http://x/b", "http://x/c"])
    await dispatcher.drain()
    assert texts(sink) == ["↪ First", "↪ Third"]


@pytest.mark.asyncio
async def test_task_guard_swallows_unexpected_errors(dispatcher, fetchers, sink):
    fetchers.fetch_lastfm.side_effect = RuntimeError("boom")
    await dispatcher.dispatch(make_event(".lastfm rj"), Lastfm("rj"))
    await dispatcher.drain()
    assert texts(sink) == []
    assert dispatcher.pending_tasks == 0


@pytest.mark.asyncio
async def test_cancel_all(dispatcher, fetchers):
    never = asyncio.Event()

    async def hang(user: str):
        await never.wait()

    fetchers.fetch_lastfm.side_effect = hang
    await dispatcher.dispatch(make_event(".lastfm rj"), Lastfm("rj"))
    assert dispatcher.pending_tasks == 1
    await dispatcher.cancel_all()
    assert dispatcher.pending_tasks == 0
