"""Exception types raised by the resource cache.

Configuration errors are programmer or startup errors and are not meant to be
recovered from. Transport errors surface unchanged to the caller of
``get_or_fetch`` or ``save``; the cache never retries on its own.
"""

from __future__ import annotations


class DeckCacheError(Exception):
    """Base exception for all deckcache failures."""


class ConfigurationError(DeckCacheError):
    """Duplicate, missing or late registry entry, or an unresolvable route."""


class UnknownVerbError(DeckCacheError):
    """A verb was requested that the resource type never registered."""

    def __init__(self, resource_type: str, verb: str) -> None:
        super().__init__(f"Resource type '{resource_type}' has no verb '{verb}'")
        self.resource_type = resource_type
        self.verb = verb


class TransportError(DeckCacheError):
    """Network or HTTP failure reported by a transport adapter.

    Attributes:
        status_code: HTTP status of the failed response, if one was received.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code
