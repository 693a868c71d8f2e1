"""Transport adapters for deckcache.

Exports:
    Transport          -- ABC for REST verbs.
    ChannelSource      -- ABC for real-time channel delivery.
    HttpTransport      -- httpx implementation of Transport.
    QueueChannelSource -- asyncio-queue implementation of ChannelSource.
"""

from deckcache.transport.base import ChannelSource, Transport
from deckcache.transport.http import HttpTransport
from deckcache.transport.memory import QueueChannelSource

__all__ = ["ChannelSource", "HttpTransport", "QueueChannelSource", "Transport"]
