"""Main event loop: passive per-message duties, then classify and dispatch."""

from __future__ import annotations

import asyncio
import logging

from ..constants import NOTIFICATION_DELIVERY_CAP
from ..errors.handling import log_error
from ..errors.internal import StoreError
from ..logs.logger import logger
from ..store.models import SeenRecord
from ..utils.helpers import extract_links, utc_now
from .classifier import classify
from .dispatcher import Dispatcher
from .models import Event, EventKind


class BotRunner:
    """Consume events strictly in arrival order on one task.

    Store calls are awaited inline so the seen record, notification delivery
    and command for one message complete before the next event starts.
    Network work is handed to the dispatcher's spawned tasks.
    """

    def __init__(self, dispatcher: Dispatcher, *, bare_guesses: bool = False) -> None:
        self.dispatcher = dispatcher
        self.store = dispatcher.store
        self.sink = dispatcher.sink
        self.bare_guesses = bare_guesses
        self.events: asyncio.Queue[Event | None] = asyncio.Queue()
        self.running = False

    def submit(self, event: Event) -> None:
        self.events.put_nowait(event)

    def stop(self) -> None:
        self.events.put_nowait(None)

    async def run(self) -> None:
        self.running = True
        logger.log_event("runner", "started")
        try:
            while True:
                event = await self.events.get()
                if event is None:
                    break
                await self.handle_event(event)
        finally:
            self.running = False
            logger.log_event("runner", "stopped")

    async def handle_event(self, event: Event) -> None:
        try:
            if event.kind is EventKind.MESSAGE:
                await self._on_message(event)
            elif event.kind is EventKind.KICK:
                await self._record_seen(event.target, f"being kicked from {event.text}")
            elif event.kind is EventKind.QUIT:
                reason = event.text.strip()
                await self._record_seen(event.source, f"quitting: {reason}" if reason else "quitting")
            elif event.kind is EventKind.INVITE:
                logger.log_event(
                    "irc", "invited", user=event.source, channel=event.text, nick=event.target
                )
        except Exception as e:  # event boundary
            log_error("Event handling failed", e, {"kind": event.kind.name, "source": event.source})

    async def _on_message(self, event: Event) -> None:
        await self._record_seen(event.source, f"saying: {event.text}")
        await self._deliver_notifications(event)
        if event.is_channel:
            self.dispatcher.spawn_titles(event.target, extract_links(event.text))
        command = classify(event.own_nickname, event.text, bare_guesses=self.bare_guesses)
        await self.dispatcher.dispatch(event, command)

    async def _record_seen(self, username: str, phrase: str) -> None:
        try:
            await self.store.put_seen(SeenRecord(username, phrase, utc_now()))
        except StoreError as e:
            log_error("Recording seen failed", e, {"user": username})
            return
        logger.log_event("seen", "recorded", logging.DEBUG, user=username)

    async def _deliver_notifications(self, event: Event) -> None:
        try:
            pending = await self.store.list_and_clear_notifications(
                event.source, NOTIFICATION_DELIVERY_CAP
            )
        except StoreError as e:
            log_error("Notification delivery failed", e, {"user": event.source})
            return
        if not pending:
            return
        self.sink.emit_many(
            event.target,
            [f"{event.source}, message from {n.sender}: {n.message}" for n in pending],
        )
        logger.log_event(
            "notifications", "delivered", user=event.source, channel=event.target, count=len(pending)
        )
