"""The ``deckhouse`` ModuleConfig resource type.

Routes, verbs, caching flags and the real-time channel for the Deckhouse
module settings record. The record is a value of ``ResourceType``; the
typed model is ``ModuleConfig`` from ``deckcache.models.deckhouse``.
"""

from __future__ import annotations

from deckcache.models.deckhouse import ModuleConfig, ensure_release
from deckcache.models.resources import CachePolicy, HttpMethod, ResourceType, VerbConfig, identity
from deckcache.registry import ResourceRegistry
from deckcache.subscriptions import SubscriptionManager

NAME = "deckhouse"
ROUTE = "k8s/deckhouse.io/moduleconfigs/deckhouse"
TYPE_TAG = "DeckhouseModuleSettings"
CHANNEL = "GroupResourceChannel"
GROUP_RESOURCE = "moduleconfigs.deckhouse.io"

VERBS = {
    "get": VerbConfig(HttpMethod.GET, store_response=True, with_credentials=False),
    "update": VerbConfig(HttpMethod.PUT, store_response=False, with_credentials=False),
}


def module_settings_type(*, default_release: bool = False) -> ResourceType[ModuleConfig]:
    """Build the resource type; *default_release* enables the ``ensure_release`` normalizer."""
    return ResourceType(
        name=NAME,
        route=ROUTE,
        verbs=VERBS,
        model=ModuleConfig,
        cache_policy=CachePolicy(dynamic_cache=False),
        type_tag=TYPE_TAG,
        normalize=ensure_release if default_release else identity,
    )


def register(
    registry: ResourceRegistry,
    subscriptions: SubscriptionManager | None = None,
    *,
    default_release: bool = False,
) -> ResourceType[ModuleConfig]:
    """Register the type and, when given a manager, its channel binding."""
    resource_type = module_settings_type(default_release=default_release)
    registry.register(resource_type)
    if subscriptions is not None:
        subscriptions.bind_resource(NAME, CHANNEL, {"groupResource": GROUP_RESOURCE})
    return resource_type
