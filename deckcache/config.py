"""Configuration loading from DECKCACHE_* environment variables.

Every malformed value raises ConfigurationError naming the offending
variable, so the CLI can report it without a traceback.
"""

from __future__ import annotations

import os

from deckcache.errors import ConfigurationError
from deckcache.models.config import CacheConfig, DeckCacheConfig, LogConfig, TransportConfig

_PREFIX = "DECKCACHE_"
_TRUE = frozenset({"true", "1", "yes", "on"})
_FALSE = frozenset({"false", "0", "no", "off", ""})
_LOG_LEVELS = ("debug", "info", "warning", "error")


def _env(key: str, default: str = "") -> str:
    return os.environ.get(_PREFIX + key, default).strip()


def _env_flag(key: str) -> bool:
    raw = _env(key).lower()
    if raw in _TRUE:
        return True
    if raw in _FALSE:
        return False
    raise ConfigurationError(f"{_PREFIX}{key}={raw!r} is not a boolean")


def _env_seconds(key: str, default: int, *, lowest: int, highest: int) -> int:
    raw = _env(key, str(default))
    try:
        seconds = int(raw)
    except ValueError:
        raise ConfigurationError(f"{_PREFIX}{key}={raw!r} is not a whole number of seconds") from None
    return min(max(seconds, lowest), highest)


def _api_url(value: str) -> str:
    if not value.startswith(("http://", "https://")):
        raise ConfigurationError(f"Invalid API url: {value!r}. {_PREFIX}API_URL must start with http:// or https://")
    return value if value.endswith("/") else value + "/"


def _log_level(value: str) -> str:
    level = value.lower()
    if level not in _LOG_LEVELS:
        raise ConfigurationError(f"Invalid log level: {value!r}. {_PREFIX}LOG_LEVEL must be one of {_LOG_LEVELS}")
    return level


def load_config() -> DeckCacheConfig:
    """Build the config tree from the environment.

    Raises:
        ConfigurationError: A variable holds a value that cannot be used.
    """
    return DeckCacheConfig(
        transport=TransportConfig(
            base_url=_api_url(_env("API_URL", "http://localhost:8080/api/")),
            token=_env("API_TOKEN"),
            timeout_seconds=_env_seconds("API_TIMEOUT", 10, lowest=1, highest=120),
        ),
        cache=CacheConfig(default_release=_env_flag("DEFAULT_RELEASE")),
        log=LogConfig(level=_log_level(_env("LOG_LEVEL", "info"))),
    )
