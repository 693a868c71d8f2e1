"""Real-time subscription bindings.

Exports:
    SubscriptionBinding -- One (channel, filter, callback) registration.
    SubscriptionManager -- Routes channel events to bindings and turns
                           resource-type bindings into cache invalidations.
"""

from deckcache.subscriptions.manager import SubscriptionBinding, SubscriptionManager

__all__ = ["SubscriptionBinding", "SubscriptionManager"]
