"""Configuration loading for micro_kit services."""

from .loader import ConfigFile
from .logging_settings import LoggingSettings
from .settings import (
    DEFAULT_SERVICE_PORT,
    APIConfig,
    BrokerConfig,
    ConsumerSettings,
    ProducerSettings,
)

__all__ = [
    "ConfigFile",
    "LoggingSettings",
    "APIConfig",
    "BrokerConfig",
    "ConsumerSettings",
    "ProducerSettings",
    "DEFAULT_SERVICE_PORT",
]
