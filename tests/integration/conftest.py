"""Fixtures wiring a full DeckCacheApp against in-memory collaborators.

The app runs its real bootstrap (registry, cache store, subscriptions) with
a scripted transport and a queue-fed channel source in place of the HTTP
and websocket adapters.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

import pytest

from deckcache.app import DeckCacheApp
from deckcache.models.config import CacheConfig, DeckCacheConfig
from deckcache.transport import QueueChannelSource

from tests.conftest import FakeTransport


@pytest.fixture
def channel_source() -> QueueChannelSource:
    return QueueChannelSource()


@pytest.fixture
async def app(transport: FakeTransport, channel_source: QueueChannelSource) -> AsyncIterator[DeckCacheApp]:
    application = DeckCacheApp(config=DeckCacheConfig(), transport=transport, configure_logging=False)
    await application.start(channel_source)
    try:
        yield application
    finally:
        await application.stop()


@pytest.fixture
async def app_with_default_release(
    transport: FakeTransport, channel_source: QueueChannelSource
) -> AsyncIterator[DeckCacheApp]:
    config = DeckCacheConfig(cache=CacheConfig(default_release=True))
    application = DeckCacheApp(config=config, transport=transport, configure_logging=False)
    await application.start(channel_source)
    try:
        yield application
    finally:
        await application.stop()
