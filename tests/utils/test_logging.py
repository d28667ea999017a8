"""
Unit tests for micro_kit.utils.logging.
"""

import json
import logging
import sys

import pytest

from micro_kit.config.loader import ConfigFile
from micro_kit.config.logging_settings import LoggingSettings
from micro_kit.exceptions import ConfigError
from micro_kit.utils.logging import (
    StructuredFormatter,
    configure_logging,
    get_logger,
    request_id_var,
    setup_structured_logging,
)


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Leave the root logger as we found it."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    for handler in root.handlers[:]:
        root.removeHandler(handler)
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def _record(msg="Test message", **kwargs):
    return logging.LogRecord(
        name="test_logger",
        level=logging.INFO,
        pathname="/test/path.py",
        lineno=42,
        msg=msg,
        args=(),
        exc_info=kwargs.pop("exc_info", None),
    )


class TestStructuredFormatter:
    """Test the StructuredFormatter class."""

    def test_basic_format(self):
        """Test basic log formatting."""
        log_data = json.loads(StructuredFormatter().format(_record()))

        assert log_data["level"] == "INFO"
        assert log_data["logger"] == "test_logger"
        assert log_data["message"] == "Test message"
        assert log_data["line"] == 42
        assert "timestamp" in log_data
        assert "request_id" not in log_data

    def test_request_id(self):
        """Test the current request ID is attached."""
        token = request_id_var.set("req-1")
        try:
            log_data = json.loads(StructuredFormatter().format(_record()))
        finally:
            request_id_var.reset(token)
        assert log_data["request_id"] == "req-1"

    def test_extra_fields(self):
        """Test extra fields are included and non-JSON values stringified."""
        record = _record()
        record.check_name = "db"
        record.payload = object()
        log_data = json.loads(StructuredFormatter().format(record))
        assert log_data["check_name"] == "db"
        assert log_data["payload"].startswith("<object object")

    def test_exception(self):
        """Test exception info is formatted."""
        try:
            raise ValueError("bad value")
        except ValueError:
            record = _record(exc_info=sys.exc_info())

        log_data = json.loads(StructuredFormatter().format(record))
        assert log_data["exception"]["type"] == "ValueError"
        assert log_data["exception"]["message"] == "bad value"


class TestSetupStructuredLogging:
    """Test programmatic logging setup."""

    def test_json_console(self):
        setup_structured_logging(log_level="DEBUG")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, StructuredFormatter)
        assert root.handlers[0].stream is sys.stdout

    def test_text_stderr(self):
        setup_structured_logging(log_format="text", use_stderr=True)
        handler = logging.getLogger().handlers[0]
        assert not isinstance(handler.formatter, StructuredFormatter)
        assert handler.stream is sys.stderr

    def test_file_handler(self, tmp_path):
        log_file = tmp_path / "app.log"
        setup_structured_logging(log_file=str(log_file))
        get_logger("micro_kit.test").warning("written to file")
        for handler in logging.getLogger().handlers:
            handler.flush()
        lines = log_file.read_text().strip().splitlines()
        assert json.loads(lines[-1])["message"] == "written to file"


class TestConfigureLogging:
    """Test YAML driven configuration."""

    def test_logging_section(self):
        config = ConfigFile.from_string(
            """
logging:
  formatters:
    plain:
      format: "%(levelname)s %(message)s"
  handlers:
    console:
      class: logging.StreamHandler
      formatter: plain
      stream: ext://sys.stderr
  root:
    level: WARNING
    handlers: [console]
"""
        )
        configure_logging(config)
        root = logging.getLogger()
        assert root.level == logging.WARNING
        assert len(root.handlers) == 1
        assert root.handlers[0].stream is sys.stderr

    def test_invalid_logging_section(self):
        config = ConfigFile.from_string(
            "logging:\n  handlers:\n    h:\n      class: no.such.Handler\n"
        )
        with pytest.raises(ConfigError):
            configure_logging(config)

    def test_non_mapping_section(self):
        with pytest.raises(ConfigError):
            configure_logging(ConfigFile.from_string("logging: [a, b]"))

    def test_fallback_settings(self):
        configure_logging(
            ConfigFile.from_string("service: {address: x}"),
            settings=LoggingSettings(log_level="ERROR", log_format="text"),
        )
        root = logging.getLogger()
        assert root.level == logging.ERROR
        assert logging.getLogger("httpx").level == logging.WARNING

    def test_module_loggers_are_named(self):
        """Test package modules log through named loggers from get_logger."""
        from micro_kit.api import api_server
        from micro_kit.monitoring import metrics

        assert metrics.logger is get_logger("micro_kit.monitoring.metrics")
        assert api_server.logger is get_logger("micro_kit.api.api_server")

    def test_settings_from_env(self, monkeypatch):
        monkeypatch.setenv("MICRO_KIT_LOG_LEVEL", "debug")
        monkeypatch.setenv("MICRO_KIT_CONSOLE_OUTPUT", "stderr")
        settings = LoggingSettings.from_env()
        assert settings.log_level == "DEBUG"
        assert settings.use_stderr
        assert settings.to_dict()["log_format"] == "json"
