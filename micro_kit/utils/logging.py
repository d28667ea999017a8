"""
Structured logging for micro_kit services.

This module provides:
- A JSON formatter that attaches the current request ID
- Programmatic setup of console/file handlers
- YAML-driven configuration through ``logging.config.dictConfig``
"""

import json
import logging
import logging.config
import sys
import traceback
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Any

from micro_kit.config.logging_settings import LoggingSettings
from micro_kit.exceptions import ConfigError

# Context variable for request tracking
request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)  # type: ignore[assignment]

_RESERVED_ATTRS = frozenset(
    [
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "message",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "thread",
        "threadName",
        "taskName",
        "exc_info",
        "exc_text",
        "stack_info",
    ]
)


class StructuredFormatter(logging.Formatter):
    """Custom formatter that outputs structured JSON logs."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        request_id = request_id_var.get()
        if request_id:
            log_data["request_id"] = request_id

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__
                if record.exc_info[0]
                else "Unknown",
                "message": str(record.exc_info[1]),
                "traceback": traceback.format_exception(*record.exc_info),
            }

        # Add any extra fields
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


def setup_structured_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    log_file: str | None = None,
    use_stderr: bool = False,
) -> None:
    """
    Set up structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format ("json" or "text")
        log_file: Optional log file path
        use_stderr: If True, send console logs to stderr instead of stdout
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))

    # Remove existing handlers
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stderr if use_stderr else sys.stdout)

    if log_format == "json":
        console_handler.setFormatter(StructuredFormatter())
    else:
        console_handler.setFormatter(
            logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        )

    root_logger.addHandler(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(StructuredFormatter())
        root_logger.addHandler(file_handler)


def configure_logging(config_file=None, settings: LoggingSettings | None = None) -> None:
    """
    Configure process logging from a service config.

    The ``logging`` section of the YAML file is handed to
    ``logging.config.dictConfig`` as-is. Without such a section the fallback
    settings (environment driven by default) are applied instead.

    Args:
        config_file: Optional ``ConfigFile`` to read the ``logging`` section from
        settings: Fallback settings; defaults to ``LoggingSettings.from_env()``

    Raises:
        ConfigError: If the ``logging`` section is not a valid dictConfig schema
    """
    section = config_file.get("logging") if config_file is not None else None

    if section is not None:
        if not isinstance(section, dict):
            raise ConfigError("'logging' must be a mapping", config_key="logging")
        section = dict(section)
        section.setdefault("version", 1)
        section.setdefault("disable_existing_loggers", False)
        try:
            logging.config.dictConfig(section)
        except (ValueError, TypeError, AttributeError, ImportError) as e:
            raise ConfigError(
                f"Invalid logging configuration: {e}", config_key="logging"
            ) from e
        return

    settings = settings or LoggingSettings.from_env()
    settings.ensure_log_directory()
    setup_structured_logging(
        log_level=settings.log_level,
        log_format=settings.log_format,
        log_file=settings.log_file_path,
        use_stderr=settings.use_stderr,
    )
    for name in settings.quiet_loggers:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """Get a module logger."""
    return logging.getLogger(name)
