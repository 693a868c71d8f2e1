"""Transport adapter contracts.

The cache core never talks HTTP or websockets itself. A ``Transport``
performs REST verbs; a ``ChannelSource`` delivers real-time channel events
after the core has subscribed to them. Concrete adapters translate their
own failures into ``TransportError``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any

from deckcache.models.events import ChannelEvent
from deckcache.models.resources import HttpMethod


class Transport(ABC):
    """Abstract base class for REST transport adapters."""

    @abstractmethod
    async def request(
        self,
        method: HttpMethod,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        with_credentials: bool = False,
    ) -> dict[str, Any] | None:
        """Perform *method* on *path* and return the decoded JSON body.

        Returns None for empty responses.

        Raises:
            TransportError: On network failure, non-2xx status or an
                undecodable body.
        """

    async def close(self) -> None:  # noqa: B027
        """Release connections held by the adapter."""


class ChannelSource(ABC):
    """Abstract base class for real-time event sources."""

    @abstractmethod
    async def subscribe(self, channel: str, params: dict[str, str]) -> None:
        """Ask the server to start delivering *channel* events matching *params*."""

    @abstractmethod
    def events(self) -> AsyncIterator[ChannelEvent]:
        """Iterate delivered events in delivery order until the source closes."""

    async def close(self) -> None:  # noqa: B027
        """Stop delivering events."""
