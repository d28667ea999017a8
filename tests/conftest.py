"""
Pytest configuration for micro_kit tests.

Provides sample health checks, fresh registries and YAML config fixtures.
"""

import os
import sys
import threading
import time

import pytest

# Add the parent directory to the path to enable imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from micro_kit.config.loader import ConfigFile
from micro_kit.monitoring.health_check import (
    HealthCheck,
    HealthCheckRegistry,
    HealthStatus,
)
from micro_kit.monitoring.metrics import MetricsRegistry


class StaticHealthCheck(HealthCheck):
    """Check that always reports the same status."""

    def __init__(self, name: str, status: HealthStatus):
        self._name = name
        self._status = status
        self.calls = 0
        self._lock = threading.Lock()

    def name(self) -> str:
        return self._name

    def check_health(self) -> HealthStatus:
        with self._lock:
            self.calls += 1
        return self._status


class RaisingHealthCheck(HealthCheck):
    """Check whose dependency is unavailable."""

    def __init__(self, name: str = "Raising"):
        self._name = name

    def name(self) -> str:
        return self._name

    def check_health(self) -> HealthStatus:
        raise RuntimeError("dependency lock unavailable")


class SlowHealthCheck(HealthCheck):
    """Check that takes ``delay`` seconds before reporting healthy."""

    def __init__(self, name: str, delay: float):
        self._name = name
        self._delay = delay

    def name(self) -> str:
        return self._name

    def check_health(self) -> HealthStatus:
        time.sleep(self._delay)
        return HealthStatus.HEALTHY


@pytest.fixture
def good_check():
    return StaticHealthCheck("Good", HealthStatus.HEALTHY)


@pytest.fixture
def bad_check():
    return StaticHealthCheck("Bad", HealthStatus.UNHEALTHY)


@pytest.fixture
def health_registry():
    return HealthCheckRegistry()


@pytest.fixture
def metrics_registry():
    return MetricsRegistry("test-reporter")


SERVICE_CONFIG = """
service:
  address: 127.0.0.1
  port: 9090
broker:
  bootstrap: localhost:9092
  client_id: orders
  producer:
    topic: orders.events
    acks: 1
  consumer:
    group_id: orders-workers
    topics: [orders.commands, orders.retries]
    auto_offset_reset: earliest
tags:
  - alpha
  - beta
"""


@pytest.fixture
def service_config_text():
    return SERVICE_CONFIG


@pytest.fixture
def service_config():
    return ConfigFile.from_string(SERVICE_CONFIG)


@pytest.fixture
def config_path(tmp_path):
    path = tmp_path / "service.yaml"
    path.write_text(SERVICE_CONFIG, encoding="utf-8")
    return path
