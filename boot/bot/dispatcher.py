"""Execute classified commands against the store, fetchers and hangman game.

Synchronous commands (plain replies, seen, tell, hangman, location cache
hits) reply from the calling task. Commands that need the network run as
spawned tasks which capture only their target, source and arguments and
report back exclusively through the reply sink.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Coroutine
from typing import Any, Protocol

from ..constants import COIN_SNAPSHOT_TTL_SECONDS, TITLE_PREFIX
from ..errors.handling import log_error
from ..errors.internal import InternalError, StoreError
from ..fetchers import PriceSummary, WeatherReport, format_weather
from ..logs.logger import logger
from ..store.models import CoinSnapshot, LocationRecord, Notification
from ..store.sqlite_store import SQLiteStore
from ..utils.helpers import humanize_past, utc_now
from .hangman import HangmanGame
from .models import (
    Coins,
    Command,
    Event,
    HangGuess,
    HangStart,
    Ignore,
    Lastfm,
    Location,
    PlainReply,
    Seen,
    Tell,
    Weather,
)
from .sink import ReplySink

WEATHER_HINT = "Hint: weather <location>"
LASTFM_FAILURE = "No song data found!"
SQL_ERROR = "SQL error"


class FetcherBundle(Protocol):
    async def fetch_title(self, url: str) -> str | None: ...

    async def geocode(self, query: str) -> LocationRecord | None: ...

    async def fetch_weather(self, latitude: str, longitude: str, api_key: str) -> WeatherReport: ...

    async def fetch_coin_series(self, symbol: str, timeframe: str) -> PriceSummary: ...

    async def fetch_lastfm(self, user: str) -> str | None: ...


def location_link(record: LocationRecord) -> str:
    return (
        f"{record.display_name()}: https://www.openstreetmap.org/"
        f"?mlat={record.latitude}&mlon={record.longitude}"
    )


def location_failure(query: str) -> str:
    return f"Unable to fetch location for {query}"


class Dispatcher:
    """Route commands to handlers and track the tasks they spawn."""

    def __init__(
        self,
        store: SQLiteStore,
        fetchers: FetcherBundle,
        sink: ReplySink,
        hangman: HangmanGame | None = None,
        weather_api_key: str | None = None,
    ) -> None:
        self.store = store
        self.fetchers = fetchers
        self.sink = sink
        self.hangman = hangman or HangmanGame()
        self.weather_api_key = weather_api_key
        self._tasks: set[asyncio.Task[None]] = set()

    # ------------------------------ tasks ----------------------------- #
    @property
    def pending_tasks(self) -> int:
        return len(self._tasks)

    def spawn(self, coro: Coroutine[Any, Any, None], name: str) -> asyncio.Task[None]:
        task = asyncio.create_task(self._guarded(coro, name), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    @staticmethod
    async def _guarded(coro: Coroutine[Any, Any, None], name: str) -> None:
        try:
            await coro
        except asyncio.CancelledError:
            raise
        except Exception as e:  # task boundary
            log_error(f"Task {name} failed", e)

    async def drain(self) -> None:
        """Wait until every spawned task (including ones spawned meanwhile) is done."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def cancel_all(self) -> None:
        if not self._tasks:
            return
        pending = list(self._tasks)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        logger.log_event("dispatcher", "tasks_cancelled", count=len(pending))

    # ----------------------------- dispatch --------------------------- #
    async def dispatch(self, event: Event, command: Command) -> None:
        if isinstance(command, Ignore):
            return
        logger.log_event(
            "dispatcher",
            "command",
            logging.DEBUG,
            user=event.source,
            channel=event.target,
            command=type(command).__name__,
        )
        target, source = event.target, event.source
        if isinstance(command, PlainReply):
            self.sink.emit(target, command.text)
        elif isinstance(command, Seen):
            await self._seen(target, command.nick)
        elif isinstance(command, Tell):
            await self._tell(target, source, command)
        elif isinstance(command, Weather):
            self.spawn(self._weather(target, source, command.location), "weather")
        elif isinstance(command, Location):
            await self._location(target, command.location)
        elif isinstance(command, Coins):
            self.spawn(self._coins(target, command.symbol, command.timeframe), "coins")
        elif isinstance(command, Lastfm):
            self.spawn(self._lastfm(target, command.user), "lastfm")
        elif isinstance(command, HangStart):
            self.sink.emit(target, self.hangman.start(command.difficulty))
        elif isinstance(command, HangGuess):
            reply = self.hangman.guess(command.guess, source)
            if reply is not None:
                self.sink.emit(target, reply)

    def spawn_titles(self, target: str, links: list[str]) -> asyncio.Task[None] | None:
        if not links:
            return None
        return self.spawn(self._titles(target, list(links)), "titles")

    # ----------------------------- handlers --------------------------- #
    async def _seen(self, target: str, nick: str) -> None:
        try:
            record = await self.store.get_seen(nick)
        except StoreError as e:
            log_error("Seen lookup failed", e, {"nick": nick})
            self.sink.emit(target, SQL_ERROR)
            return
        if record is None:
            self.sink.emit(target, f"{nick} has not previously been seen")
            return
        elapsed = (utc_now() - record.timestamp).total_seconds()
        self.sink.emit(
            target, f"{record.username} was last seen {humanize_past(elapsed)} {record.message}"
        )

    async def _tell(self, target: str, source: str, command: Tell) -> None:
        try:
            await self.store.add_notification(
                Notification(recipient=command.nick, sender=source, message=command.message)
            )
        except StoreError as e:
            log_error("Storing notification failed", e, {"recipient": command.nick})
            return
        logger.log_event("notifications", "queued", user=source, recipient=command.nick)
        self.sink.emit(target, f"Ok, I'll tell {command.nick} that")

    async def _cached_location(self, query: str) -> LocationRecord | None:
        try:
            return await self.store.get_location(query)
        except StoreError as e:
            log_error("Location cache lookup failed", e, {"query": query})
            return None

    async def _remember_location(self, query: str, record: LocationRecord) -> None:
        try:
            await self.store.put_location(query, record)
        except StoreError as e:
            log_error("Caching location failed", e, {"query": query})

    async def _location(self, target: str, query: str) -> None:
        cached = await self._cached_location(query)
        if cached is not None:
            logger.log_event("location", "cache_hit", logging.DEBUG, query=query)
            self.sink.emit(target, location_link(cached))
            return
        self.spawn(self._geocode_location(target, query), "location")

    async def _geocode_location(self, target: str, query: str) -> None:
        try:
            record = await self.fetchers.geocode(query)
        except InternalError as e:
            log_error("Geocoding failed", e, {"query": query})
            record = None
        if record is None:
            self.sink.emit(target, location_failure(query))
            return
        await self._remember_location(query, record)
        logger.log_event("location", "geocoded", query=query, place=record.display_name())
        self.sink.emit(target, location_link(record))

    async def _weather(self, target: str, source: str, query: str | None) -> None:
        if not self.weather_api_key:
            logger.log_event("weather", "missing_api_key", logging.WARNING, user=source)
            return
        if query is None:
            try:
                pref = await self.store.get_weather_pref(source)
            except StoreError as e:
                log_error("Weather preference lookup failed", e, {"user": source})
                return
            if pref is None:
                self.sink.emit(target, WEATHER_HINT)
                return
            latitude, longitude = pref.latitude, pref.longitude
        else:
            record = await self._cached_location(query)
            if record is None:
                try:
                    record = await self.fetchers.geocode(query)
                except InternalError as e:
                    log_error("Geocoding for weather failed", e, {"query": query})
                    return
                if record is None:
                    self.sink.emit(target, location_failure(query))
                    return
                await self._remember_location(query, record)
            latitude, longitude = record.latitude, record.longitude
            try:
                await self.store.put_weather_pref(source, latitude, longitude)
            except StoreError as e:
                log_error("Saving weather preference failed", e, {"user": source})
        try:
            report = await self.fetchers.fetch_weather(latitude, longitude, self.weather_api_key)
        except InternalError as e:
            log_error("Weather lookup failed", e, {"lat": latitude, "lon": longitude})
            return
        logger.log_event("weather", "reported", logging.DEBUG, user=source, place=report.name)
        self.sink.emit(target, format_weather(report))

    async def _coins(self, target: str, symbol: str, timeframe: str) -> None:
        now = int(time.time())
        try:
            snapshot = await self.store.get_coin_snapshot(symbol)
        except StoreError as e:
            log_error("Coin snapshot lookup failed", e, {"symbol": symbol})
            snapshot = None
        if snapshot is not None and snapshot.is_fresh(now, COIN_SNAPSHOT_TTL_SECONDS, timeframe):
            logger.log_event("coins", "snapshot_hit", logging.DEBUG, symbol=symbol, timeframe=timeframe)
            self.sink.emit_many(target, [snapshot.graph_line, snapshot.stats_line])
            return
        try:
            summary = await self.fetchers.fetch_coin_series(symbol, timeframe)
        except InternalError as e:
            log_error("Coin price lookup failed", e, {"symbol": symbol, "timeframe": timeframe})
            return
        lines = [summary.graph_line(), summary.stats_line()]
        try:
            await self.store.put_coin_snapshot(
                CoinSnapshot(symbol, timeframe, summary.spot_time, lines[0], lines[1])
            )
        except StoreError as e:
            log_error("Saving coin snapshot failed", e, {"symbol": symbol})
        logger.log_event("coins", "fetched", symbol=symbol, timeframe=timeframe)
        self.sink.emit_many(target, lines)

    async def _lastfm(self, target: str, user: str) -> None:
        try:
            line = await self.fetchers.fetch_lastfm(user)
        except InternalError as e:
            log_error("last.fm lookup failed", e, {"user": user})
            line = None
        self.sink.emit(target, line or LASTFM_FAILURE)

    async def _titles(self, target: str, links: list[str]) -> None:
        titles = await asyncio.gather(*(self.fetchers.fetch_title(url) for url in links))
        lines = [f"{TITLE_PREFIX} {t}" for t in titles if t]
        logger.log_event(
            "titles", "fetched", logging.DEBUG, channel=target, links=len(links), found=len(lines)
        )
        self.sink.emit_many(target, lines)
