"""Ordered outbound reply channel drained by the transport."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Iterable

from .models import OutboundReply


class ReplySink:
    """Multi-producer, single-consumer FIFO of ``(target, text)`` replies.

    ``emit_many`` enqueues without yielding to the loop, so one task's lines
    are never interleaved with another task's.
    """

    def __init__(self) -> None:
        self._queue: asyncio.Queue[OutboundReply] = asyncio.Queue()

    def emit(self, target: str, text: str) -> None:
        self._queue.put_nowait(OutboundReply(target, text))

    def emit_many(self, target: str, lines: Iterable[str]) -> None:
        for line in lines:
            self._queue.put_nowait(OutboundReply(target, line))

    async def get(self) -> OutboundReply:
        return await self._queue.get()

    def get_nowait(self) -> OutboundReply:
        return self._queue.get_nowait()

    def drain_nowait(self) -> list[OutboundReply]:
        """Pop everything currently queued."""
        out: list[OutboundReply] = []
        while not self._queue.empty():
            out.append(self._queue.get_nowait())
        return out

    def empty(self) -> bool:
        return self._queue.empty()

    async def __aiter__(self) -> AsyncIterator[OutboundReply]:
        while True:
            yield await self._queue.get()
