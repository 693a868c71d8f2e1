"""Shared fixtures for deckcache tests.

Provides a scripted in-memory transport, ModuleConfig payload factories and
an isolated registry + cache store per test, so no test touches a real
cluster API.
"""

from __future__ import annotations

import asyncio
import copy
from collections.abc import Callable
from typing import Any

import pytest
import structlog

from deckcache.cache import CacheStore
from deckcache.models.resources import CachePolicy, HttpMethod, ResourceType, VerbConfig
from deckcache.registry import ResourceRegistry
from deckcache.resources import deckhouse
from deckcache.transport.base import Transport

DECKHOUSE_PATH = "k8s/deckhouse.io/moduleconfigs/deckhouse"

# ---------------------------------------------------------------------------
# Payload factories
# ---------------------------------------------------------------------------


def make_module_config(
    uid: str = "uid-1",
    release_channel: str = "Stable",
    release: dict[str, Any] | None = None,
    **settings: Any,
) -> dict[str, Any]:
    """Return a raw ``deckhouse`` ModuleConfig body as the API serves it."""
    body_settings: dict[str, Any] = {"releaseChannel": release_channel, **settings}
    if release is not None:
        body_settings["release"] = release
    return {
        "apiVersion": "deckhouse.io/v1alpha1",
        "kind": "ModuleConfig",
        "metadata": {"name": "deckhouse", "uid": uid, "resourceVersion": "42"},
        "spec": {"version": 1, "settings": body_settings},
        "status": {"message": "", "version": "1"},
    }


def successive_module_configs(*uids: str) -> Callable[[], dict[str, Any]]:
    """Response callable serving one ModuleConfig per call, keyed by *uids* in order."""
    pending = list(uids)

    def _next() -> dict[str, Any]:
        return make_module_config(uid=pending.pop(0))

    return _next


def make_widget(uid: str = "w-1", size: int = 1) -> dict[str, Any]:
    return {"metadata": {"uid": uid, "name": uid}, "spec": {"size": size}}


def widget_type(
    dynamic_cache: bool = False,
    store_get: bool = True,
    store_update: bool = False,
) -> ResourceType[dict[str, Any]]:
    """A second resource type addressed by uid in its route."""
    return ResourceType(
        name="widgets",
        route="k8s/example.io/widgets/{uid}",
        verbs={
            "get": VerbConfig(HttpMethod.GET, store_response=store_get),
            "update": VerbConfig(HttpMethod.PUT, store_response=store_update),
        },
        model=dict,
        cache_policy=CachePolicy(dynamic_cache=dynamic_cache),
        type_tag="Widget",
    )


# ---------------------------------------------------------------------------
# Fake transport
# ---------------------------------------------------------------------------


class FakeTransport(Transport):
    """Scripted transport recording every call.

    ``responses`` maps ``(method, path)`` to a body or a zero-argument
    callable producing one; unknown routes answer with an empty body.
    ``hold()`` keeps every request suspended until the returned event is set.
    """

    def __init__(self) -> None:
        self.responses: dict[tuple[str, str], Any] = {}
        self.calls: list[tuple[str, str, dict[str, Any] | None, bool]] = []
        self.errors: list[Exception] = []
        self.gate: asyncio.Event | None = None
        self.closed = False

    def respond(self, method: str, path: str, body: Any) -> None:
        self.responses[(method, path)] = body

    def hold(self) -> asyncio.Event:
        self.gate = asyncio.Event()
        return self.gate

    def release(self) -> None:
        if self.gate is not None:
            self.gate.set()
        self.gate = None

    def count(self, method: str, path: str | None = None) -> int:
        return sum(1 for m, p, _, _ in self.calls if m == method and (path is None or p == path))

    def bodies(self, method: str) -> list[dict[str, Any] | None]:
        return [body for m, _, body, _ in self.calls if m == method]

    async def request(
        self,
        method: HttpMethod,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        with_credentials: bool = False,
    ) -> dict[str, Any] | None:
        self.calls.append((str(method), path, copy.deepcopy(json), with_credentials))
        gate = self.gate
        if gate is not None:
            await gate.wait()
        if self.errors:
            raise self.errors.pop(0)
        body = self.responses.get((str(method), path))
        if callable(body):
            body = body()
        return copy.deepcopy(body)

    async def close(self) -> None:
        self.closed = True


async def settle(rounds: int = 20) -> None:
    """Let pending tasks run to completion."""
    for _ in range(rounds):
        await asyncio.sleep(0)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def captured_logs():
    """Capture structlog output so tests can assert on log events."""
    with structlog.testing.capture_logs() as logs:
        yield logs


@pytest.fixture
def transport() -> FakeTransport:
    fake = FakeTransport()
    fake.respond("GET", DECKHOUSE_PATH, make_module_config)
    return fake


@pytest.fixture
def registry() -> ResourceRegistry:
    reg = ResourceRegistry()
    deckhouse.register(reg)
    return reg


@pytest.fixture
def store(registry: ResourceRegistry, transport: FakeTransport) -> CacheStore:
    return CacheStore(registry, transport)


@pytest.fixture
def store_factory(transport: FakeTransport) -> Callable[..., CacheStore]:
    """Build a store with deckhouse plus the given extra resource types."""

    def _build(*types: ResourceType[Any]) -> CacheStore:
        reg = ResourceRegistry()
        deckhouse.register(reg)
        for rtype in types:
            reg.register(rtype)
        reg.seal()
        return CacheStore(reg, transport)

    return _build
