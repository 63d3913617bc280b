"""Tests for originguard/utils/logger.py."""

from __future__ import annotations

import importlib
import json

import pytest
import structlog

from originguard.constants import MAX_LOGGED_HEADER_CHARS
from originguard.utils import logger as logger_module
from originguard.utils.logger import configure_logging, get_logger, sanitize_header_value


@pytest.fixture
def reset_structlog():
    """Put structlog back to its defaults after a test reconfigures it."""
    yield
    structlog.reset_defaults()


class TestSanitizeHeaderValue:
    def test_none_passes_through(self) -> None:
        assert sanitize_header_value(None) is None

    def test_plain_value_unchanged(self) -> None:
        assert sanitize_header_value("https://a.example") == "https://a.example"

    def test_newlines_escaped(self) -> None:
        sanitized = sanitize_header_value("https://a.example\r\nlevel=critical forged")
        assert "\n" not in sanitized
        assert "\r" not in sanitized
        assert "\\r\\n" in sanitized

    def test_escape_sequences_escaped(self) -> None:
        assert "\x1b" not in sanitize_header_value("\x1b[31mred")

    def test_truncated(self) -> None:
        sanitized = sanitize_header_value("a" * (MAX_LOGGED_HEADER_CHARS + 50))
        assert sanitized.endswith("...[truncated]")
        assert len(sanitized) == MAX_LOGGED_HEADER_CHARS + len("...[truncated]")

    def test_custom_limit(self) -> None:
        assert sanitize_header_value("abcdef", limit=3) == "abc...[truncated]"


class TestConfigureLogging:
    def test_json_output_renders_event(self, capsys: pytest.CaptureFixture, reset_structlog) -> None:
        configure_logging(log_level="INFO", json_output=True)
        get_logger("originguard.test").warning("json logging works", origin="http://a.example")

        line = capsys.readouterr().out.strip()
        event = json.loads(line)
        assert event["event"] == "json logging works"
        assert event["origin"] == "http://a.example"
        assert event["level"] == "warning"
        assert isinstance(event["timestamp"], float)

    def test_console_output_renders_event(self, capsys: pytest.CaptureFixture, reset_structlog) -> None:
        configure_logging(log_level="DEBUG", json_output=False)
        get_logger("originguard.test").debug("console logging works", key="value")

        out = capsys.readouterr().out
        assert "console logging works" in out

    def test_level_filters_lower_events(self, capsys: pytest.CaptureFixture, reset_structlog) -> None:
        configure_logging(log_level="WARNING", json_output=True)
        log = get_logger("originguard.test")
        log.info("filtered out")
        log.warning("kept")

        lines = capsys.readouterr().out.strip().splitlines()
        assert [json.loads(line)["event"] for line in lines] == ["kept"]


class TestImportSideEffects:
    def test_import_leaves_host_configuration_alone(self, monkeypatch: pytest.MonkeyPatch) -> None:
        calls = []
        monkeypatch.setattr(structlog, "configure", lambda **kwargs: calls.append(kwargs))
        importlib.reload(logger_module)
        assert calls == []
