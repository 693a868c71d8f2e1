"""Tests for environment-driven configuration loading."""

from __future__ import annotations

import pytest

from deckcache.config import load_config
from deckcache.errors import ConfigurationError


class TestLoadConfig:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for key in ("API_URL", "API_TOKEN", "API_TIMEOUT", "DEFAULT_RELEASE", "LOG_LEVEL"):
            monkeypatch.delenv(f"DECKCACHE_{key}", raising=False)

        config = load_config()

        assert config.transport.base_url == "http://localhost:8080/api/"
        assert config.transport.token == ""
        assert config.transport.timeout_seconds == 10
        assert config.cache.default_release is False
        assert config.log.level == "info"

    def test_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DECKCACHE_API_URL", "https://deckhouse.example.test/api")
        monkeypatch.setenv("DECKCACHE_API_TOKEN", "t0ken")
        monkeypatch.setenv("DECKCACHE_API_TIMEOUT", "30")
        monkeypatch.setenv("DECKCACHE_DEFAULT_RELEASE", "yes")
        monkeypatch.setenv("DECKCACHE_LOG_LEVEL", "DEBUG")

        config = load_config()

        assert config.transport.base_url == "https://deckhouse.example.test/api/"
        assert config.transport.token == "t0ken"
        assert config.transport.timeout_seconds == 30
        assert config.cache.default_release is True
        assert config.log.level == "debug"

    def test_timeout_is_clamped(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DECKCACHE_API_TIMEOUT", "600")
        assert load_config().transport.timeout_seconds == 120
        monkeypatch.setenv("DECKCACHE_API_TIMEOUT", "0")
        assert load_config().transport.timeout_seconds == 1

    def test_invalid_log_level(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DECKCACHE_LOG_LEVEL", "verbose")
        with pytest.raises(ConfigurationError, match="Invalid log level"):
            load_config()

    def test_invalid_url(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DECKCACHE_API_URL", "deckhouse.example.test")
        with pytest.raises(ConfigurationError, match="Invalid API url"):
            load_config()

    def test_non_numeric_timeout(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DECKCACHE_API_TIMEOUT", "ten")
        with pytest.raises(ConfigurationError, match="DECKCACHE_API_TIMEOUT"):
            load_config()

    def test_unrecognised_flag(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DECKCACHE_DEFAULT_RELEASE", "maybe")
        with pytest.raises(ConfigurationError, match="DECKCACHE_DEFAULT_RELEASE"):
            load_config()

    def test_flag_off_values(self, monkeypatch: pytest.MonkeyPatch) -> None:
        for value in ("false", "0", "no", "OFF"):
            monkeypatch.setenv("DECKCACHE_DEFAULT_RELEASE", value)
            assert load_config().cache.default_release is False
