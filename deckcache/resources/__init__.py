"""Concrete resource types.

To add a resource type:
    1) Create a module here defining a ``register(registry, subscriptions, ...)``
       function that builds its ``ResourceType`` and channel binding.
    2) Call it from ``register_all``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from deckcache.resources import deckhouse

if TYPE_CHECKING:
    from deckcache.models.config import CacheConfig
    from deckcache.registry import ResourceRegistry
    from deckcache.subscriptions import SubscriptionManager

__all__ = ["deckhouse", "register_all"]


def register_all(
    registry: ResourceRegistry,
    subscriptions: SubscriptionManager | None,
    config: CacheConfig,
) -> list[str]:
    """Register every built-in resource type; return their names."""
    deckhouse.register(registry, subscriptions, default_release=config.default_release)
    return registry.names()
