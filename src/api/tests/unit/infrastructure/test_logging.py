"""Unit tests for structlog configuration."""

import io

import pytest
import structlog

from infrastructure.logging import configure_logging


@pytest.fixture(autouse=True)
def reset_structlog():
    yield
    structlog.reset_defaults()


class TestConfigureLogging:
    def test_json_output_without_tty(self, monkeypatch):
        monkeypatch.delenv("FORCE_COLOR", raising=False)
        monkeypatch.setattr("infrastructure.logging.sys.stdout", io.StringIO())

        configure_logging("INFO")

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_force_color_uses_console_renderer(self, monkeypatch):
        monkeypatch.setenv("FORCE_COLOR", "1")

        configure_logging("DEBUG")

        processors = structlog.get_config()["processors"]
        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)

    def test_level_name_is_case_insensitive(self, monkeypatch):
        monkeypatch.setenv("FORCE_COLOR", "0")

        configure_logging("warning")

        assert structlog.get_config()["wrapper_class"] is not None

    def test_unknown_level_raises(self):
        with pytest.raises(ValueError, match="Unknown log level"):
            configure_logging("chatty")
