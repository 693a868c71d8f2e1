"""Resource registry: one immutable entry per resource type.

Types are registered during bootstrap and the registry is then sealed.
Resolution turns ``(type, verb, params)`` into a concrete route for the
transport adapter.
"""

from __future__ import annotations

import string
from typing import Any

import structlog

from deckcache.errors import ConfigurationError, UnknownVerbError
from deckcache.models.resources import ResolvedRoute, ResourceType

_log = structlog.get_logger(component="registry")

_FORMATTER = string.Formatter()


def route_fields(template: str) -> list[str]:
    """Return the placeholder names of a route template, in order."""
    return [name for _, name, _, _ in _FORMATTER.parse(template) if name]


class ResourceRegistry:
    """Holds the static configuration of every resource type."""

    def __init__(self) -> None:
        self._types: dict[str, ResourceType[Any]] = {}
        self._sealed = False

    @property
    def sealed(self) -> bool:
        return self._sealed

    def register(self, resource_type: ResourceType[Any]) -> None:
        """Add *resource_type*.

        Raises:
            ConfigurationError: The name is already registered, the registry
                is sealed, or the type declares no verbs.
        """
        if self._sealed:
            raise ConfigurationError(
                f"Registry is sealed; cannot register resource type '{resource_type.name}'"
            )
        if resource_type.name in self._types:
            raise ConfigurationError(f"Resource type '{resource_type.name}' is already registered")
        if not resource_type.verbs:
            raise ConfigurationError(f"Resource type '{resource_type.name}' declares no verbs")
        self._types[resource_type.name] = resource_type
        _log.debug(
            "resource_type_registered",
            resource_type=resource_type.name,
            route=resource_type.route,
            verbs=sorted(resource_type.verbs),
            dynamic_cache=resource_type.cache_policy.dynamic_cache,
        )

    def seal(self) -> None:
        """Freeze the registry; later registrations fail."""
        self._sealed = True

    def get(self, name: str) -> ResourceType[Any]:
        try:
            return self._types[name]
        except KeyError:
            raise ConfigurationError(f"Resource type '{name}' is not registered") from None

    def names(self) -> list[str]:
        return sorted(self._types)

    def __contains__(self, name: object) -> bool:
        return name in self._types

    def resolve(self, name: str, verb: str, /, **params: Any) -> ResolvedRoute:
        """Resolve *verb* of resource type *name* to a route.

        Placeholders in the route template are filled from *params*; extra
        params are ignored.

        Raises:
            ConfigurationError: Unknown resource type or a placeholder with no value.
            UnknownVerbError:   The type has no such verb.
        """
        resource_type = self.get(name)
        verb_config = resource_type.verbs.get(verb)
        if verb_config is None:
            raise UnknownVerbError(name, verb)

        missing = [f for f in route_fields(resource_type.route) if params.get(f) is None]
        if missing:
            raise ConfigurationError(
                f"Route '{resource_type.route}' of '{name}' is missing parameters: {missing}"
            )
        url = resource_type.route.format(**params)
        return ResolvedRoute(
            url=url,
            http_method=verb_config.http_method,
            store_response=verb_config.store_response,
            with_credentials=verb_config.with_credentials,
        )
