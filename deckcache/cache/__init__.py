"""Cache layer for deckcache.

Holds one canonical instance per (resource type, primary key) with
single-flight fetches and event-driven invalidation.

Submodules:
    store -- CacheStore with the EMPTY/FETCHING/READY/STALE entry lifecycle.
"""

from deckcache.cache.store import CacheStore

__all__ = ["CacheStore"]
