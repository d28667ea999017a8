"""FastAPI dependencies resolving the registries attached to the app."""

from fastapi import Request

from micro_kit.exceptions import MicroKitException
from micro_kit.monitoring.health_check import HealthCheckRegistry
from micro_kit.monitoring.metrics import MetricsRegistry


def get_health_registry(request: Request) -> HealthCheckRegistry:
    registry = getattr(request.app.state, "health_registry", None)
    if registry is None:
        raise MicroKitException(
            "No health check registry configured", error_code="NOT_CONFIGURED"
        )
    return registry


def get_metrics_registry(request: Request) -> MetricsRegistry:
    registry = getattr(request.app.state, "metrics_registry", None)
    if registry is None:
        raise MicroKitException(
            "No metrics registry configured", error_code="NOT_CONFIGURED"
        )
    return registry
