"""Application bootstrap for deckcache.

Wires all components in dependency order and manages the asyncio lifecycle.
Startup order: config -> logging -> transport -> registry -> cache
              -> subscriptions

Resource types and their channel bindings are registered during startup and
the registry is sealed before any caller reads through the cache. Shutdown
stops components in reverse order; each stop is guarded so one failure does
not keep the rest running.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from deckcache.config import load_config
from deckcache.errors import DeckCacheError
from deckcache.models.config import DeckCacheConfig
from deckcache.observability.logging import get_logger, setup_logging

if TYPE_CHECKING:
    import structlog

    from deckcache.cache import CacheStore
    from deckcache.registry import ResourceRegistry
    from deckcache.subscriptions import SubscriptionManager
    from deckcache.transport import ChannelSource, Transport

_SHUTDOWN_GRACE_SECONDS = 15


class _ComponentError(DeckCacheError):
    """Raised when a mandatory component fails to start."""

    def __init__(self, component: str, cause: Exception) -> None:
        super().__init__(f"Component '{component}' failed to start: {cause}")
        self.component = component
        self.cause = cause


class DeckCacheApp:
    """Application root. Owns the transport, registry, cache and subscriptions.

    Args:
        config:    Pre-built configuration; loaded from the environment when None.
        transport: Pre-built transport; an ``HttpTransport`` is created when None.
        json_logs: Render logs as JSON (servers) or console lines (CLI).
        configure_logging: Configure structlog on start; embedders that own
            logging pass False.
    """

    def __init__(
        self,
        config: DeckCacheConfig | None = None,
        transport: Transport | None = None,
        *,
        json_logs: bool = True,
        configure_logging: bool = True,
    ) -> None:
        self.config = config
        self._json_logs = json_logs
        self._configure_logging = configure_logging
        self.transport: Transport | None = transport
        self.registry: ResourceRegistry | None = None
        self.cache: CacheStore | None = None
        self.subscriptions: SubscriptionManager | None = None
        self._owns_transport = transport is None
        self._running = False
        self._log: structlog.stdlib.BoundLogger | None = None

    @property
    def running(self) -> bool:
        return self._running

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def start(self, source: ChannelSource | None = None) -> None:
        """Start all components; subscribe bindings on *source* if one is given.

        Raises _ComponentError if a component cannot start.
        """
        # --- 1. Configuration -------------------------------------------
        if self.config is None:
            self.config = load_config()

        # --- 2. Logging -------------------------------------------------
        if self._configure_logging:
            setup_logging(self.config.log.level, json_output=self._json_logs)
        self._log = get_logger("app", version=_deckcache_version())
        self._log.info("deckcache starting")

        try:
            # --- 3. Transport -------------------------------------------
            self._start_transport()

            # --- 4. Registry + cache + bindings -------------------------
            self._start_cache()

            # --- 5. Subscriptions ---------------------------------------
            if source is not None:
                await self._start_subscriptions(source)
        except _ComponentError as exc:
            self._log.error("deckcache startup failed", component=exc.component, error=str(exc.cause))
            await self.stop()
            raise

        self._running = True
        self._log.info(
            "deckcache started",
            resource_types=self.registry.names() if self.registry else [],
            subscriptions=source is not None,
        )

    def _start_transport(self) -> None:
        assert self._log is not None
        assert self.config is not None
        if self.transport is not None:
            return
        try:
            from deckcache.transport import HttpTransport

            self.transport = HttpTransport(
                base_url=self.config.transport.base_url,
                token=self.config.transport.token,
                timeout=float(self.config.transport.timeout_seconds),
            )
            self._log.info("http transport started", base_url=self.config.transport.base_url)
        except Exception as exc:
            raise _ComponentError("transport", exc) from exc

    def _start_cache(self) -> None:
        """Build the registry and cache store, register resource types, seal."""
        assert self._log is not None
        assert self.config is not None
        assert self.transport is not None
        try:
            from deckcache.cache import CacheStore
            from deckcache.registry import ResourceRegistry
            from deckcache.resources import register_all
            from deckcache.subscriptions import SubscriptionManager

            registry = ResourceRegistry()
            cache = CacheStore(registry, self.transport)
            subscriptions = SubscriptionManager(cache)
            names = register_all(registry, subscriptions, self.config.cache)
            registry.seal()

            self.registry = registry
            self.cache = cache
            self.subscriptions = subscriptions
            self._log.info(
                "resource cache started",
                resource_types=names,
                default_release=self.config.cache.default_release,
            )
        except Exception as exc:
            raise _ComponentError("cache", exc) from exc

    async def _start_subscriptions(self, source: ChannelSource) -> None:
        assert self._log is not None
        assert self.subscriptions is not None
        try:
            await self.subscriptions.start(source)
            self._log.info("subscriptions started", bindings=len(self.subscriptions.bindings))
        except Exception as exc:
            raise _ComponentError("subscriptions", exc) from exc

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def stop(self) -> None:
        """Stop components in reverse startup order."""
        if not self._running and self._log is None:
            return

        log = self._log or get_logger("app")
        log.info("deckcache shutting down")
        self._running = False

        await self._stop_component("subscriptions", self.subscriptions)
        await self._stop_component("cache", self.cache)
        if self._owns_transport:
            await self._stop_component("transport", self.transport)
        log.info("deckcache stopped")

    async def _stop_component(self, name: str, component: object | None) -> None:
        """Call stop() or close() on a component, catching all errors."""
        if component is None:
            return
        log = self._log or get_logger("app")
        stop_fn = getattr(component, "stop", None) or getattr(component, "close", None)
        if stop_fn is None:
            return
        try:
            result = stop_fn()
            if asyncio.iscoroutine(result):
                await asyncio.wait_for(result, timeout=_SHUTDOWN_GRACE_SECONDS)
        except TimeoutError:
            log.warning("component stop timed out", component=name, timeout=_SHUTDOWN_GRACE_SECONDS)
        except Exception as exc:
            log.error("component stop raised an error", component=name, error=str(exc))


def _deckcache_version() -> str:
    from deckcache import __version__

    return __version__

