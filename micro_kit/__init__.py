"""
micro_kit: standardized configuration, logging, health checking and metrics
for small HTTP services.
"""

from micro_kit.config import APIConfig, BrokerConfig, ConfigFile
from micro_kit.monitoring import (
    Counter,
    FunctionHealthCheck,
    Gauge,
    HealthCheck,
    HealthCheckRegistry,
    HealthStatus,
    Histogram,
    Meter,
    MetricsRegistry,
)
from micro_kit.timestamp import TimeStamp

__version__ = "0.1.0"

__all__ = [
    "APIConfig",
    "BrokerConfig",
    "ConfigFile",
    "Counter",
    "FunctionHealthCheck",
    "Gauge",
    "HealthCheck",
    "HealthCheckRegistry",
    "HealthStatus",
    "Histogram",
    "Meter",
    "MetricsRegistry",
    "TimeStamp",
]
