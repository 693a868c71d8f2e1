"""Resource type and cache entry data structures."""

from __future__ import annotations

import asyncio
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from enum import StrEnum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Generic, TypeVar

if TYPE_CHECKING:
    from deckcache.resource import Resource

ModelT = TypeVar("ModelT")

Payload = dict[str, Any]
Normalizer = Callable[[Payload], Payload]


class HttpMethod(StrEnum):
    """HTTP methods a verb may map to."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"


class CacheState(StrEnum):
    """Lifecycle state of a single cache entry."""

    EMPTY = "empty"
    FETCHING = "fetching"
    READY = "ready"
    STALE = "stale"


@dataclass(frozen=True)
class VerbConfig:
    """How one verb of a resource type maps onto HTTP."""

    http_method: HttpMethod
    store_response: bool = False
    with_credentials: bool = False


@dataclass(frozen=True)
class CachePolicy:
    """Per-type caching behaviour.

    ``dynamic_cache`` re-issues a fetch as soon as an entry turns stale;
    otherwise stale entries are refetched on the next read.
    """

    dynamic_cache: bool = False


@dataclass(frozen=True)
class ResolvedRoute:
    """A verb resolved against the registry, ready for the transport."""

    url: str
    http_method: HttpMethod
    store_response: bool
    with_credentials: bool


def identity(payload: Payload) -> Payload:
    return payload


def dig(payload: Mapping[str, Any] | None, path: str) -> Any:
    """Follow a dotted *path* through nested mappings; None when absent."""
    node: Any = payload
    for part in path.split("."):
        if not isinstance(node, Mapping):
            return None
        node = node.get(part)
    return node


@dataclass(frozen=True)
class ResourceType(Generic[ModelT]):
    """Static configuration of one resource type.

    A domain resource is a value of this class rather than a subclass of a
    shared base: it names its REST route and verbs, the typed model view
    built over the payload, and the fields that never leave the process.

    Attributes:
        name:             Registry key, unique per process.
        route:            Path template, e.g. ``k8s/{group}/{kind}/{name}``.
        verbs:            Verb name -> VerbConfig.
        model:            Factory building the typed view over a payload dict.
        cache_policy:     Caching flags for entries of this type.
        primary_key_path: Dotted path of the primary key inside the payload.
        type_tag:         Value stored under ``type_tag_field`` on hydration.
        type_tag_field:   Payload field carrying the type tag (transient).
        stale_flag_field: Payload field the cache store sets while stale (transient).
        extra_transient_fields: Further top-level fields excluded from updates.
        normalize:        Hook applied to every payload on hydration.
    """

    name: str
    route: str
    verbs: Mapping[str, VerbConfig]
    model: Callable[[Payload], ModelT]
    cache_policy: CachePolicy = field(default_factory=CachePolicy)
    primary_key_path: str = "metadata.uid"
    type_tag: str | None = None
    type_tag_field: str = "klassName"
    stale_flag_field: str = "is_stale"
    extra_transient_fields: frozenset[str] = frozenset()
    normalize: Normalizer = identity

    def __post_init__(self) -> None:
        object.__setattr__(self, "verbs", MappingProxyType(dict(self.verbs)))

    @property
    def transient_fields(self) -> frozenset[str]:
        return frozenset({self.type_tag_field, self.stale_flag_field}) | self.extra_transient_fields


@dataclass
class CacheEntry:
    """One slot of the cache store.

    Only the cache store mutates entries. ``invalidated_during_fetch`` records
    an invalidation that raced an outstanding fetch so the fetched value is
    marked stale again when it lands.
    """

    resource_type: str
    key: str
    state: CacheState = CacheState.EMPTY
    value: Resource[Any] | None = None
    in_flight: asyncio.Task[Resource[Any]] | None = None
    invalidated_during_fetch: bool = False
    fetch_count: int = 0
    write_lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False, compare=False)
