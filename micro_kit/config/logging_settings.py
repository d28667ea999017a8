"""
Logging configuration settings.

Used when a service's YAML config carries no ``logging`` section; values come
from environment variables with sensible defaults.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass
class LoggingSettings:
    """Fallback logging configuration."""

    log_level: str = "INFO"
    log_format: str = "json"  # json or text
    console_output: str = "stdout"  # stdout or stderr

    # File logging configuration
    log_file_path: str | None = None

    # Third-party loggers that are too chatty at INFO
    quiet_loggers: list[str] = None

    def __post_init__(self):
        """Initialize default values for mutable fields."""
        if self.quiet_loggers is None:
            self.quiet_loggers = ["uvicorn.access", "httpx", "urllib3"]

    @classmethod
    def from_env(cls) -> "LoggingSettings":
        """Create logging settings from environment variables."""
        return cls(
            log_level=os.getenv("MICRO_KIT_LOG_LEVEL", "INFO").upper(),
            log_format=os.getenv("MICRO_KIT_LOG_FORMAT", "json").lower(),
            console_output=os.getenv("MICRO_KIT_CONSOLE_OUTPUT", "stdout").lower(),
            log_file_path=os.getenv("MICRO_KIT_LOG_FILE") or None,
        )

    @property
    def use_stderr(self) -> bool:
        return self.console_output == "stderr"

    def to_dict(self) -> dict[str, Any]:
        """Convert settings to dictionary for serialization."""
        return {
            "log_level": self.log_level,
            "log_format": self.log_format,
            "console_output": self.console_output,
            "log_file_path": self.log_file_path,
            "quiet_loggers": self.quiet_loggers,
        }

    def ensure_log_directory(self):
        """Ensure the log directory exists."""
        if self.log_file_path:
            Path(self.log_file_path).parent.mkdir(parents=True, exist_ok=True)
