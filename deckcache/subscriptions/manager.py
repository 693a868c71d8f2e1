"""Subscription bindings between real-time channels and the cache store.

Bindings are declared during bootstrap. Once ``start`` has subscribed them on
a channel source, the set is fixed for the life of the process. Events are
handled one at a time in delivery order and never wait on in-flight fetches.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType

import structlog

from deckcache.cache.store import CacheStore
from deckcache.errors import ConfigurationError
from deckcache.models.events import ChannelEvent
from deckcache.transport.base import ChannelSource

_log = structlog.get_logger(component="subscriptions")

EventCallback = Callable[[ChannelEvent], None]
KeyExtractor = Callable[[ChannelEvent], Iterable[str] | None]


@dataclass(frozen=True)
class SubscriptionBinding:
    """A callback attached to events of one channel that match a filter."""

    channel_name: str
    filter: Mapping[str, str]
    on_event: EventCallback = field(compare=False)
    resource_type: str | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "filter", MappingProxyType(dict(self.filter)))

    def matches(self, event: ChannelEvent) -> bool:
        return event.matches(self.channel_name, self.filter)


class SubscriptionManager:
    """Owns every binding and pumps channel events into them.

    Args:
        cache: Store whose entries resource-type bindings invalidate.
    """

    def __init__(self, cache: CacheStore) -> None:
        self._cache = cache
        self._bindings: list[SubscriptionBinding] = []
        self._bound_types: set[str] = set()
        self._source: ChannelSource | None = None
        self._task: asyncio.Task[None] | None = None
        self.events_processed = 0

    @property
    def bindings(self) -> tuple[SubscriptionBinding, ...]:
        return tuple(self._bindings)

    def subscribe(
        self,
        channel_name: str,
        filter: Mapping[str, str],  # noqa: A002
        on_event: EventCallback,
    ) -> SubscriptionBinding:
        """Register *on_event* for events on *channel_name* matching *filter*."""
        return self._add(SubscriptionBinding(channel_name, filter, on_event))

    def bind_resource(
        self,
        resource_type: str,
        channel_name: str,
        filter: Mapping[str, str],  # noqa: A002
        key_extractor: KeyExtractor | None = None,
    ) -> SubscriptionBinding:
        """Invalidate cached *resource_type* entries whenever a matching event arrives.

        Without a *key_extractor* every entry of the type is invalidated,
        which is what a group-level filter calls for. An extractor may name
        specific keys, or return None to fall back to the whole type.

        Raises:
            ConfigurationError: The type is unknown or already bound.
        """
        self._cache.registry.get(resource_type)
        if resource_type in self._bound_types:
            raise ConfigurationError(f"Resource type '{resource_type}' already has a subscription binding")

        def _invalidate(event: ChannelEvent) -> None:
            keys = key_extractor(event) if key_extractor is not None else None
            changed = self._cache.invalidate(resource_type, keys)
            _log.debug(
                "subscription_invalidated",
                resource_type=resource_type,
                channel=event.channel,
                event_id=event.event_id,
                changed=changed,
            )

        binding = self._add(SubscriptionBinding(channel_name, filter, _invalidate, resource_type=resource_type))
        self._bound_types.add(resource_type)
        return binding

    def dispatch(self, event: ChannelEvent) -> int:
        """Deliver *event* to every matching binding; return how many matched.

        A failing callback is logged and does not stop delivery to the others.
        """
        matched = 0
        for binding in self._bindings:
            if not binding.matches(event):
                continue
            matched += 1
            try:
                binding.on_event(event)
            except Exception as exc:  # noqa: BLE001
                _log.error(
                    "subscription_callback_error",
                    channel=binding.channel_name,
                    resource_type=binding.resource_type,
                    event_id=event.event_id,
                    error=str(exc),
                    exc_info=True,
                )
        self.events_processed += 1
        if not matched:
            _log.debug("subscription_event_unmatched", channel=event.channel, params=event.params)
        return matched

    async def consume(self, source: ChannelSource) -> None:
        """Dispatch events from *source* in delivery order until it closes."""
        async for event in source.events():
            self.dispatch(event)

    async def start(self, source: ChannelSource) -> None:
        """Subscribe every binding on *source* and start consuming in the background."""
        if self._source is not None:
            raise ConfigurationError("Subscriptions are already started")
        self._source = source
        for binding in self._bindings:
            await source.subscribe(binding.channel_name, dict(binding.filter))
            _log.info("subscription_active", channel=binding.channel_name, filter=dict(binding.filter))
        self._task = asyncio.create_task(self.consume(source), name="subscription-consumer")

    async def stop(self) -> None:
        """Stop consuming and close the source."""
        if self._task is not None and not self._task.done():
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)
        self._task = None
        if self._source is not None:
            await self._source.close()

    def _add(self, binding: SubscriptionBinding) -> SubscriptionBinding:
        if self._source is not None:
            raise ConfigurationError(
                f"Cannot bind channel '{binding.channel_name}' after subscriptions were started"
            )
        self._bindings.append(binding)
        return binding
