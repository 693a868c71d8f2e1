"""Real-time channel event data structures."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime
from uuid import uuid4


@dataclass(frozen=True)
class ChannelEvent:
    """One notification delivered on a real-time channel.

    ``params`` carries the channel's filter fields (e.g. ``groupResource``);
    ``payload`` is opaque to the cache and only logged or inspected by
    custom key extractors.
    """

    channel: str
    params: dict[str, str] = field(default_factory=dict)
    payload: dict[str, object] = field(default_factory=dict)
    event_id: str = field(default_factory=lambda: str(uuid4()))
    received_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC))

    def matches(self, channel: str, filter_: Mapping[str, str]) -> bool:
        """Return True if this event was delivered on *channel* and carries every filter item."""
        if self.channel != channel:
            return False
        return all(self.params.get(k) == v for k, v in filter_.items())
