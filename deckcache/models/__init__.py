"""Core data structures for deckcache."""

from deckcache.models.config import CacheConfig, DeckCacheConfig, LogConfig, TransportConfig
from deckcache.models.deckhouse import (
    WEEKDAYS,
    DeckhouseSettings,
    ModuleConfig,
    ReleaseSettings,
    ReleaseWindow,
    ensure_release,
)
from deckcache.models.events import ChannelEvent
from deckcache.models.resources import (
    CacheEntry,
    CachePolicy,
    CacheState,
    HttpMethod,
    ResolvedRoute,
    ResourceType,
    VerbConfig,
)

__all__ = [
    "WEEKDAYS",
    "CacheConfig",
    "CacheEntry",
    "CachePolicy",
    "CacheState",
    "ChannelEvent",
    "DeckCacheConfig",
    "DeckhouseSettings",
    "HttpMethod",
    "LogConfig",
    "ModuleConfig",
    "ReleaseSettings",
    "ReleaseWindow",
    "ResolvedRoute",
    "ResourceType",
    "TransportConfig",
    "VerbConfig",
    "ensure_release",
]
