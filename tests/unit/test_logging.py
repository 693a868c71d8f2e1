"""Tests for the structlog helpers."""

from __future__ import annotations

import pytest

from deckcache.observability.logging import get_logger, setup_logging


class TestLogging:
    def test_unknown_level_is_rejected(self) -> None:
        with pytest.raises(ValueError, match="Unknown log level 'verbose'"):
            setup_logging("verbose")

    def test_logger_binds_component_and_context(self, captured_logs) -> None:
        get_logger("app", version="0.1.0").info("deckcache starting")

        [entry] = captured_logs
        assert entry["event"] == "deckcache starting"
        assert entry["component"] == "app"
        assert entry["version"] == "0.1.0"
        assert entry["log_level"] == "info"
