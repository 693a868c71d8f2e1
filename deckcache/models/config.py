"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class TransportConfig:
    """HTTP transport configuration."""

    base_url: str = "http://localhost:8080/api/"
    token: str = ""
    timeout_seconds: int = 10


@dataclass
class CacheConfig:
    """Cache and hydration configuration."""

    default_release: bool = False


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "info"


@dataclass
class DeckCacheConfig:
    """Top-level deckcache configuration."""

    transport: TransportConfig = field(default_factory=TransportConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    log: LogConfig = field(default_factory=LogConfig)
