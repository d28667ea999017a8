"""
Monitoring package for micro_kit services.

This package provides:
- Health checks aggregated by a ``HealthCheckRegistry``
- Metric sources (counter, gauge, meter, histogram) held by a ``MetricsRegistry``
"""

from .health_check import (
    FunctionHealthCheck,
    HealthCheck,
    HealthCheckRegistry,
    HealthReport,
    HealthStatus,
)
from .metrics import (
    Counter,
    CounterSnapshot,
    Gauge,
    GaugeSnapshot,
    Histogram,
    HistogramSnapshot,
    Meter,
    MeterSnapshot,
    Metric,
    MetricSnapshot,
    MetricsRegistry,
    MetricsReport,
)

__all__ = [
    "HealthStatus",
    "HealthCheck",
    "FunctionHealthCheck",
    "HealthCheckRegistry",
    "HealthReport",
    "Metric",
    "Counter",
    "Gauge",
    "Meter",
    "Histogram",
    "MetricSnapshot",
    "CounterSnapshot",
    "GaugeSnapshot",
    "MeterSnapshot",
    "HistogramSnapshot",
    "MetricsRegistry",
    "MetricsReport",
]
