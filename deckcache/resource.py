"""Hydrated resource instances.

A ``Resource`` pairs a payload dict with its ``ResourceType`` and the
``CacheStore`` it lives in. Typed access goes through ``model``, a view the
resource type builds over the same dict.
"""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING, Any, Generic

import structlog

from deckcache.errors import TransportError
from deckcache.models.resources import ModelT, Payload, ResourceType, dig

if TYPE_CHECKING:
    from deckcache.cache.store import CacheStore

_log = structlog.get_logger(component="resource")


class Resource(Generic[ModelT]):
    """A typed, hydrated record bound to a cache store."""

    def __init__(self, resource_type: ResourceType[ModelT], payload: Payload, store: CacheStore) -> None:
        self._type = resource_type
        self._store = store
        self.payload = payload

    @classmethod
    def hydrate(cls, resource_type: ResourceType[ModelT], raw: Payload, store: CacheStore) -> Resource[ModelT]:
        """Build an instance from a wire body: normalize it and apply the type tag."""
        payload = resource_type.normalize(copy.deepcopy(raw))
        if resource_type.type_tag is not None:
            payload[resource_type.type_tag_field] = resource_type.type_tag
        return cls(resource_type, payload, store)

    @property
    def resource_type(self) -> ResourceType[ModelT]:
        return self._type

    @property
    def model(self) -> ModelT:
        """Typed view over ``payload`` (live, not a copy)."""
        return self._type.model(self.payload)

    @property
    def primary_key(self) -> str | None:
        value = dig(self.payload, self._type.primary_key_path)
        return None if value is None else str(value)

    @property
    def is_stale(self) -> bool:
        return bool(self.payload.get(self._type.stale_flag_field, False))

    def to_wire(self) -> Payload:
        """Deep copy of the payload without transient fields."""
        transient = self._type.transient_fields
        return {k: copy.deepcopy(v) for k, v in self.payload.items() if k not in transient}

    def route_params(self) -> dict[str, Any]:
        metadata = self.payload.get("metadata") or {}
        return {
            "uid": self.primary_key,
            "name": metadata.get("name"),
            "namespace": metadata.get("namespace"),
        }

    async def save(self) -> None:
        """Send the payload through the ``update`` verb and cache the result.

        Saves of the same key are serialized. On failure the cache entry is
        left as it was and the TransportError propagates.

        Raises:
            ValueError:       The payload has no primary key.
            TransportError:   The update call failed.
            UnknownVerbError: The resource type has no ``update`` verb.
        """
        key = self.primary_key
        if key is None:
            raise ValueError(f"Cannot save {self._type.name} without '{self._type.primary_key_path}'")

        async with self._store.write_lock(self._type.name, key):
            route = self._store.registry.resolve(self._type.name, "update", **self.route_params())
            body = self.to_wire()
            _log.debug("resource_save_started", resource_type=self._type.name, key=key, url=route.url)
            try:
                response = await self._store.transport.request(
                    route.http_method,
                    route.url,
                    json=body,
                    with_credentials=route.with_credentials,
                )
            except TransportError as exc:
                _log.warning(
                    "resource_save_failed",
                    resource_type=self._type.name,
                    key=key,
                    status_code=exc.status_code,
                    error=str(exc),
                )
                raise

            updated: Resource[ModelT] = self
            if route.store_response and response is not None:
                updated = Resource.hydrate(self._type, response, self._store)
            self._store.put(self._type.name, key, updated)
            _log.debug("resource_saved", resource_type=self._type.name, key=key)

    def __repr__(self) -> str:
        return f"Resource({self._type.name!r}, key={self.primary_key!r})"


def primary_key(resource: Resource[Any] | None) -> str | None:
    """Primary key of *resource*, or None when there is no resource."""
    if resource is None:
        return None
    return resource.primary_key
