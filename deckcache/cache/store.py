"""Process-wide cache of resource instances keyed by primary key.

Every entry follows EMPTY -> FETCHING -> READY/STALE. The store is the only
component that mutates entries, through three entry points:

* ``get_or_fetch`` -- serve READY values, otherwise join or start the single
  in-flight fetch for the key.
* ``invalidate``   -- mark READY entries STALE (and refetch eagerly when the
  type's cache policy is dynamic).
* ``put``          -- install a value after a successful save.

An invalidation that arrives while a fetch is outstanding wins over that
fetch: the value it returns is installed as STALE, so the next read fetches
once more.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import Any

import structlog

from deckcache.errors import TransportError
from deckcache.models.resources import CacheEntry, CacheState, ResourceType
from deckcache.registry import ResourceRegistry
from deckcache.resource import Resource
from deckcache.transport.base import Transport

_log = structlog.get_logger(component="cache.store")


def _retrieve_exception(task: asyncio.Task[Any]) -> None:
    # Failures are logged in _fetch and re-raised to awaiting callers; an
    # eager refetch may have none.
    if not task.cancelled():
        task.exception()


class CacheStore:
    """Cache store shared by all instances of every registered resource type.

    Args:
        registry:  Sealed (or sealing) registry used to resolve verbs.
        transport: Adapter that performs the ``get`` and ``update`` verbs.
    """

    def __init__(self, registry: ResourceRegistry, transport: Transport) -> None:
        self._registry = registry
        self._transport = transport
        # resource_type -> key -> entry
        self._entries: dict[str, dict[str, CacheEntry]] = {}

    @property
    def registry(self) -> ResourceRegistry:
        return self._registry

    @property
    def transport(self) -> Transport:
        return self._transport

    # ------------------------------------------------------------------
    # Read-only inspection
    # ------------------------------------------------------------------

    def state(self, resource_type: str, key: str) -> CacheState:
        entry = self._entries.get(resource_type, {}).get(key)
        return CacheState.EMPTY if entry is None else entry.state

    def peek(self, resource_type: str, key: str) -> Resource[Any] | None:
        """Return the held value without fetching, whatever its state."""
        entry = self._entries.get(resource_type, {}).get(key)
        return None if entry is None else entry.value

    def keys(self, resource_type: str) -> list[str]:
        return sorted(self._entries.get(resource_type, {}))

    def fetch_count(self, resource_type: str, key: str) -> int:
        entry = self._entries.get(resource_type, {}).get(key)
        return 0 if entry is None else entry.fetch_count

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    async def get_or_fetch(self, resource_type: str, key: str) -> Resource[Any]:
        """Return the instance for *key*, fetching it at most once at a time.

        Concurrent callers for the same key share one fetch and receive the
        same instance or the same exception. Cancelling a caller does not
        cancel the shared fetch.

        Raises:
            ConfigurationError: *resource_type* is not registered.
            TransportError:     The fetch failed.
        """
        rtype = self._registry.get(resource_type)
        entry = self._entry(resource_type, key)
        if entry.state is CacheState.READY and entry.value is not None:
            return entry.value
        if entry.in_flight is None:
            self._start_fetch(rtype, entry)
        assert entry.in_flight is not None
        return await asyncio.shield(entry.in_flight)

    def invalidate(self, resource_type: str, keys: Iterable[str] | None = None) -> int:
        """Mark entries of *resource_type* stale; all of them when *keys* is None.

        EMPTY and already-STALE entries are left alone. Returns the number of
        entries whose state changed.
        """
        rtype = self._registry.get(resource_type)
        bucket = self._entries.get(resource_type, {})
        targets = list(bucket.values()) if keys is None else [bucket[k] for k in keys if k in bucket]

        changed = 0
        for entry in targets:
            if entry.in_flight is not None:
                if not entry.invalidated_during_fetch:
                    entry.invalidated_during_fetch = True
                    changed += 1
                    _log.debug("cache_invalidated_during_fetch", resource_type=resource_type, key=entry.key)
                if entry.state is CacheState.READY:
                    self._set_stale(rtype, entry)
                continue
            if entry.state is not CacheState.READY:
                continue
            self._set_stale(rtype, entry)
            changed += 1
            _log.debug("cache_invalidated", resource_type=resource_type, key=entry.key)
            if rtype.cache_policy.dynamic_cache:
                self._start_fetch(rtype, entry)
        return changed

    def put(self, resource_type: str, key: str, instance: Resource[Any]) -> None:
        """Install *instance* as the READY value for *key*, without a round trip."""
        rtype = self._registry.get(resource_type)
        entry = self._entry(resource_type, key)
        instance.payload.pop(rtype.stale_flag_field, None)
        entry.value = instance
        entry.state = CacheState.READY
        _log.debug("cache_put", resource_type=resource_type, key=key)

    def write_lock(self, resource_type: str, key: str) -> asyncio.Lock:
        """Lock serializing writers of one key."""
        return self._entry(resource_type, key).write_lock

    def build(self, resource_type: str, raw: dict[str, Any]) -> Resource[Any]:
        """Hydrate *raw* as an instance of *resource_type* without caching it."""
        return Resource.hydrate(self._registry.get(resource_type), raw, self)

    async def stop(self) -> None:
        """Cancel outstanding fetches."""
        tasks = [
            entry.in_flight
            for bucket in self._entries.values()
            for entry in bucket.values()
            if entry.in_flight is not None
        ]
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _entry(self, resource_type: str, key: str) -> CacheEntry:
        bucket = self._entries.setdefault(resource_type, {})
        entry = bucket.get(key)
        if entry is None:
            entry = CacheEntry(resource_type=resource_type, key=key)
            bucket[key] = entry
        return entry

    def _set_stale(self, rtype: ResourceType[Any], entry: CacheEntry) -> None:
        entry.state = CacheState.STALE
        if entry.value is not None:
            entry.value.payload[rtype.stale_flag_field] = True

    def _start_fetch(self, rtype: ResourceType[Any], entry: CacheEntry) -> None:
        prior_state = entry.state
        entry.state = CacheState.FETCHING
        entry.invalidated_during_fetch = False
        entry.fetch_count += 1
        task = asyncio.create_task(
            self._fetch(rtype, entry, prior_state),
            name=f"fetch:{rtype.name}:{entry.key}",
        )
        task.add_done_callback(_retrieve_exception)
        entry.in_flight = task
        _log.debug("cache_fetch_started", resource_type=rtype.name, key=entry.key, prior_state=str(prior_state))

    async def _fetch(self, rtype: ResourceType[Any], entry: CacheEntry, prior_state: CacheState) -> Resource[Any]:
        try:
            route = self._registry.resolve(rtype.name, "get", uid=entry.key)
            raw = await self._transport.request(
                route.http_method,
                route.url,
                with_credentials=route.with_credentials,
            )
            if raw is None:
                raise TransportError(f"GET {route.url} returned an empty body")
            instance = Resource.hydrate(rtype, raw, self)
            if instance.primary_key != entry.key:
                raise TransportError(
                    f"GET {route.url} returned {rtype.name} '{instance.primary_key}', expected '{entry.key}'"
                )
        except BaseException as exc:
            entry.in_flight = None
            entry.invalidated_during_fetch = False
            if entry.state is CacheState.FETCHING:
                entry.state = prior_state
            _log.warning(
                "cache_fetch_failed",
                resource_type=rtype.name,
                key=entry.key,
                state=str(entry.state),
                error=repr(exc),
            )
            raise

        entry.in_flight = None
        if not route.store_response:
            if entry.state is CacheState.FETCHING:
                entry.state = prior_state
            return instance

        entry.value = instance
        if entry.invalidated_during_fetch:
            entry.invalidated_during_fetch = False
            self._set_stale(rtype, entry)
            _log.debug("cache_fetch_landed_stale", resource_type=rtype.name, key=entry.key)
            if rtype.cache_policy.dynamic_cache:
                self._start_fetch(rtype, entry)
        else:
            entry.state = CacheState.READY
            _log.debug("cache_fetch_landed", resource_type=rtype.name, key=entry.key)
        return instance
