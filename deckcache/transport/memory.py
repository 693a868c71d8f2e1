"""In-process channel source fed through an asyncio queue.

A websocket collaborator (or a test) calls ``publish`` for every frame it
receives; ``SubscriptionManager.consume`` drains the queue in order.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator

from deckcache.models.events import ChannelEvent
from deckcache.transport.base import ChannelSource


class QueueChannelSource(ChannelSource):
    """ChannelSource backed by an unbounded ``asyncio.Queue``."""

    def __init__(self) -> None:
        self._queue: asyncio.Queue[ChannelEvent | None] = asyncio.Queue()
        self.subscriptions: list[tuple[str, dict[str, str]]] = []
        self._closed = False

    async def subscribe(self, channel: str, params: dict[str, str]) -> None:
        self.subscriptions.append((channel, dict(params)))

    def publish(self, event: ChannelEvent) -> None:
        """Enqueue *event* for delivery."""
        if self._closed:
            raise RuntimeError("Channel source is closed")
        self._queue.put_nowait(event)

    async def events(self) -> AsyncIterator[ChannelEvent]:
        while True:
            event = await self._queue.get()
            try:
                if event is None:
                    return
                yield event
            finally:
                self._queue.task_done()

    async def join(self) -> None:
        """Wait until every published event has been handled by the consumer."""
        await self._queue.join()

    async def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._queue.put_nowait(None)
