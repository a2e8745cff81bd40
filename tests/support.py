"""Shared helpers for the test modules."""

from __future__ import annotations

from boot.bot.models import Event, EventKind
from boot.bot.sink import ReplySink


def make_event(
    text: str, source: str = "alice", target: str = "#chan", kind: EventKind = EventKind.MESSAGE
) -> Event:
    return Event("boot", source, target, text, kind)


def texts(sink: ReplySink) -> list[str]:
    return [r.text for r in sink.drain_nowait()]
