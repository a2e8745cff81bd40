"""Central application context for shared async resources."""

from __future__ import annotations

import asyncio
import logging

from .bot.dispatcher import Dispatcher
from .bot.hangman import HangmanGame, load_words
from .bot.runner import BotRunner
from .bot.sink import ReplySink
from .config.model import BotConfig
from .fetchers import Fetchers, HTTPClient, SessionConfig
from .store.sqlite_store import SQLiteStore


class ApplicationContext:
    """Owns the HTTP client, store, reply sink, dispatcher and runner."""

    def __init__(self, config: BotConfig) -> None:
        self.config = config
        self.http: HTTPClient | None = None
        self.store: SQLiteStore | None = None
        self.fetchers: Fetchers | None = None
        self.sink = ReplySink()
        self.dispatcher: Dispatcher | None = None
        self.runner: BotRunner | None = None
        self._lock = asyncio.Lock()

    # ------------------------- Construction ------------------------- #
    @classmethod
    async def create(cls, config: BotConfig) -> ApplicationContext:
        """Build every shared resource from the configuration.

        The SQLite schema is created before returning, so a broken database
        path fails fast with ``StoreError``.
        """
        ctx = cls(config)
        logging.debug("🧪 Creating application context")
        ctx.http = HTTPClient(SessionConfig(user_agent=config.user_agent))
        loop = asyncio.get_running_loop()
        ctx.store = await loop.run_in_executor(None, SQLiteStore.open, config.database)
        ctx.fetchers = Fetchers(ctx.http)
        words = await loop.run_in_executor(None, load_words, config.word_list) if config.games else []
        ctx.dispatcher = Dispatcher(
            ctx.store,
            ctx.fetchers,
            ctx.sink,
            HangmanGame(words=words),
            weather_api_key=config.weather_api_key,
        )
        ctx.runner = BotRunner(ctx.dispatcher, bare_guesses=config.games)
        if not config.weather_api_key:
            logging.warning("⚠️ No weather_api_key configured; weather lookups are disabled")
        return ctx

    # --------------------------- Lifecycle -------------------------- #
    async def shutdown(self) -> None:
        """Cancel in-flight command tasks and release network resources."""
        async with self._lock:
            logging.info("🔻 Application context shutdown initiated")
            if self.dispatcher:
                await self.dispatcher.cancel_all()
            if self.http:
                await self.http.close()
                self.http = None
            logging.info("✅ Application context shutdown complete")
