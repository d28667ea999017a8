"""
Metric sources and the metrics registry.

Metric sources wrap ``prometheus_client`` primitives so the same values can be
reported as a JSON snapshot (``MetricsRegistry.report``) and scraped in the
Prometheus text format (``MetricsRegistry.prometheus_text``).

Every source exposes ``snapshot()``, an immutable point-in-time read. A
snapshot of one metric is never torn, but different metrics in the same
report may reflect different instants.
"""

import json
import math
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Any

from prometheus_client import CollectorRegistry, generate_latest
from prometheus_client import Counter as PromCounter
from prometheus_client import Gauge as PromGauge
from prometheus_client import Histogram as PromHistogram
from prometheus_client.metrics_core import Metric as PromMetric
from prometheus_client.registry import Collector

from micro_kit.exceptions import MetricRegistrationError, SerializationError
from micro_kit.utils.logging import get_logger

logger = get_logger(__name__)

# Exponentially weighted moving average constants for meters
METER_TICK_INTERVAL = 5.0
M1_ALPHA = 1 - math.exp(-METER_TICK_INTERVAL / 60.0)
M5_ALPHA = 1 - math.exp(-METER_TICK_INTERVAL / 60.0 / 5)
M15_ALPHA = 1 - math.exp(-METER_TICK_INTERVAL / 60.0 / 15)

# Integer renderings saturate at the signed 64-bit range
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def saturating_int(value: float) -> int:
    """Truncate to an int64, mapping NaN to 0 and clamping infinities."""
    if math.isnan(value):
        return 0
    if math.isinf(value):
        return INT64_MAX if value > 0 else INT64_MIN
    return max(INT64_MIN, min(INT64_MAX, int(value)))


# =============================================================================
# SNAPSHOTS
# =============================================================================


class MetricSnapshot(ABC):
    """Immutable point-in-time read of a metric."""

    @abstractmethod
    def render(self) -> Any:
        """Return a JSON-safe representation of the snapshot."""


@dataclass(frozen=True)
class CounterSnapshot(MetricSnapshot):
    value: float

    def render(self) -> int:
        return saturating_int(self.value)


@dataclass(frozen=True)
class GaugeSnapshot(MetricSnapshot):
    value: float

    def render(self) -> int:
        return saturating_int(self.value)


@dataclass(frozen=True)
class MeterSnapshot(MetricSnapshot):
    count: int
    mean_rate: float
    m1_rate: float
    m5_rate: float
    m15_rate: float

    def render(self) -> int:
        return int(self.count)


@dataclass(frozen=True)
class HistogramSnapshot(MetricSnapshot):
    """Cumulative bucket counts keyed by upper bound, ``+Inf`` last."""

    count: int
    sum: float
    buckets: tuple[tuple[str, int], ...] = field(default_factory=tuple)

    def render(self) -> dict[str, Any]:
        return {
            "count": self.count,
            "sum": self.sum,
            "buckets": dict(self.buckets),
        }


# =============================================================================
# METRIC SOURCES
# =============================================================================


class Metric(ABC):
    """
    Base class for metric sources.

    Args:
        name: Prometheus metric name
        documentation: Help text for the exposition format
        registry: ``CollectorRegistry`` to also register the primitive with;
            ``None`` keeps it unregistered
    """

    kind: str = "untyped"

    def __init__(self, name: str, documentation: str = "", registry=None):
        self.name = name
        self.documentation = documentation or name
        self._primitive = self._create_primitive(registry)

    @abstractmethod
    def _create_primitive(self, registry):
        """Build the backing prometheus_client primitive."""

    @abstractmethod
    def snapshot(self) -> MetricSnapshot:
        """Read the current value without blocking writers for long."""

    def collect(self) -> Iterator[PromMetric]:
        """Yield Prometheus metric families for exposition."""
        return iter(self._primitive.collect())

    def _samples(self) -> list:
        return [sample for family in self._primitive.collect() for sample in family.samples]

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"


class Counter(Metric):
    """Monotonically increasing count."""

    kind = "counter"

    def _create_primitive(self, registry):
        return PromCounter(self.name, self.documentation, registry=registry)

    def inc(self, amount: float = 1) -> None:
        self._primitive.inc(amount)

    def snapshot(self) -> CounterSnapshot:
        for sample in self._samples():
            if sample.name.endswith("_total"):
                return CounterSnapshot(value=sample.value)
        return CounterSnapshot(value=0.0)


class Gauge(Metric):
    """Value that can go up and down."""

    kind = "gauge"

    def _create_primitive(self, registry):
        return PromGauge(self.name, self.documentation, registry=registry)

    def set(self, value: float) -> None:
        self._primitive.set(value)

    def inc(self, amount: float = 1) -> None:
        self._primitive.inc(amount)

    def dec(self, amount: float = 1) -> None:
        self._primitive.dec(amount)

    def snapshot(self) -> GaugeSnapshot:
        samples = self._samples()
        return GaugeSnapshot(value=samples[0].value if samples else 0.0)


class Meter(Metric):
    """
    Event rate meter.

    Tracks the number of events plus the mean rate since creation and
    exponentially weighted 1, 5 and 15 minute rates (events per second).
    Rates are advanced lazily in 5 second ticks whenever the meter is marked
    or read.
    """

    kind = "meter"

    def __init__(
        self,
        name: str,
        documentation: str = "",
        registry=None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._clock = clock
        self._lock = threading.Lock()
        self._count = 0
        self._uncounted = 0
        self._rates = {"m1": 0.0, "m5": 0.0, "m15": 0.0}
        self._initialized = False
        self._start_time = clock()
        self._last_tick = self._start_time
        super().__init__(name, documentation, registry)

    def _create_primitive(self, registry):
        return PromCounter(self.name, self.documentation, registry=registry)

    def mark(self, n: int = 1) -> None:
        """Record ``n`` events."""
        if n < 0:
            raise ValueError("Meter cannot be marked with a negative count")
        with self._lock:
            self._tick_if_necessary()
            self._count += n
            self._uncounted += n
        self._primitive.inc(n)

    def _tick_if_necessary(self) -> None:
        now = self._clock()
        elapsed = now - self._last_tick
        if elapsed < METER_TICK_INTERVAL:
            return
        ticks = int(elapsed // METER_TICK_INTERVAL)
        self._last_tick += ticks * METER_TICK_INTERVAL
        for _ in range(ticks):
            self._tick()

    def _tick(self) -> None:
        instant_rate = self._uncounted / METER_TICK_INTERVAL
        self._uncounted = 0
        if not self._initialized:
            self._rates = {"m1": instant_rate, "m5": instant_rate, "m15": instant_rate}
            self._initialized = True
            return
        for key, alpha in (("m1", M1_ALPHA), ("m5", M5_ALPHA), ("m15", M15_ALPHA)):
            self._rates[key] += alpha * (instant_rate - self._rates[key])

    def snapshot(self) -> MeterSnapshot:
        with self._lock:
            self._tick_if_necessary()
            elapsed = self._clock() - self._start_time
            mean_rate = self._count / elapsed if elapsed > 0 else 0.0
            return MeterSnapshot(
                count=self._count,
                mean_rate=mean_rate,
                m1_rate=self._rates["m1"],
                m5_rate=self._rates["m5"],
                m15_rate=self._rates["m15"],
            )


class Histogram(Metric):
    """Distribution of observed values in cumulative buckets."""

    kind = "histogram"

    def __init__(
        self,
        name: str,
        documentation: str = "",
        registry=None,
        buckets: tuple[float, ...] = PromHistogram.DEFAULT_BUCKETS,
    ):
        self._buckets = buckets
        # Buckets, count and sum are separate values in prometheus_client;
        # this lock keeps a snapshot from seeing half of an observation.
        self._lock = threading.Lock()
        super().__init__(name, documentation, registry)

    def _create_primitive(self, registry):
        return PromHistogram(
            self.name, self.documentation, buckets=self._buckets, registry=registry
        )

    def observe(self, value: float) -> None:
        with self._lock:
            self._primitive.observe(value)

    def collect(self) -> Iterator[PromMetric]:
        with self._lock:
            return iter(list(self._primitive.collect()))

    def snapshot(self) -> HistogramSnapshot:
        with self._lock:
            samples = self._samples()

        count = 0
        total = 0.0
        buckets = []
        for sample in samples:
            if sample.name.endswith("_bucket"):
                buckets.append((sample.labels["le"], int(sample.value)))
            elif sample.name.endswith("_count"):
                count = int(sample.value)
            elif sample.name.endswith("_sum"):
                total = sample.value
        return HistogramSnapshot(count=count, sum=total, buckets=tuple(buckets))


# =============================================================================
# REGISTRY
# =============================================================================


@dataclass(frozen=True)
class MetricsReport:
    """Rendered metrics snapshot in transport form."""

    status_code: int
    body: str
    media_type: str = "application/json"

    @property
    def ok(self) -> bool:
        return self.status_code == 200


class _RegistryCollector(Collector):
    """Exposes every metric of a ``MetricsRegistry`` to prometheus_client."""

    def __init__(self, registry: "MetricsRegistry"):
        self._registry = registry

    def collect(self) -> Iterator[PromMetric]:
        for metric in self._registry.metrics().values():
            yield from metric.collect()


class MetricsRegistry:
    """
    Named collection of metric sources.

    Registration is append-only and names are unique: adding a name twice
    fails and leaves the original metric in place. The lock guarding the map
    is held only while copying it; metrics are snapshotted outside the lock.

    Args:
        reporter_name: Identity of this registry, for multi-registry setups
        collector_registry: Prometheus registry to expose the metrics on.
            A private one is created when omitted.
    """

    def __init__(
        self,
        reporter_name: str,
        collector_registry: CollectorRegistry | None = None,
    ):
        self._reporter_name = reporter_name
        self._metrics: dict[str, Metric] = {}
        self._lock = threading.RLock()
        if collector_registry is None:
            collector_registry = CollectorRegistry(auto_describe=False)
        self.collector_registry = collector_registry
        self.collector_registry.register(_RegistryCollector(self))

    def get_name(self) -> str:
        return self._reporter_name

    def add(self, name: str, metric: Metric) -> None:
        """
        Attach a metric under ``name``.

        Raises:
            MetricRegistrationError: If the name is empty, the metric is not a
                ``Metric`` or the name is already registered
        """
        if not isinstance(name, str) or not name:
            raise MetricRegistrationError(
                str(name), message="Metric name must be a non-empty string"
            )
        if not isinstance(metric, Metric):
            raise MetricRegistrationError(
                name, message=f"Expected Metric for {name}, got {type(metric).__name__}"
            )

        with self._lock:
            if name in self._metrics:
                logger.warning(
                    f"Rejected duplicate metric {name} on reporter {self._reporter_name}"
                )
                raise MetricRegistrationError(name)
            self._metrics[name] = metric
        logger.debug(f"Attached {metric.kind} {name} to reporter {self._reporter_name}")

    def get(self, name: str) -> Metric | None:
        with self._lock:
            return self._metrics.get(name)

    def names(self) -> list[str]:
        with self._lock:
            return list(self._metrics)

    def metrics(self) -> dict[str, Metric]:
        """Return a copy of the name to metric mapping."""
        with self._lock:
            return dict(self._metrics)

    def __contains__(self, name: str) -> bool:
        with self._lock:
            return name in self._metrics

    def __len__(self) -> int:
        with self._lock:
            return len(self._metrics)

    def snapshot(self) -> dict[str, MetricSnapshot]:
        """Snapshot every metric."""
        return {name: metric.snapshot() for name, metric in self.metrics().items()}

    def render(self) -> dict[str, Any]:
        """Snapshot every metric and render it to a JSON-safe value."""
        return {name: snap.render() for name, snap in self.snapshot().items()}

    def report(self) -> MetricsReport:
        """
        Render all metrics as a JSON object of name to value.

        Never raises: a failure while snapshotting or serializing is logged
        and reported as a 500 with a diagnostic body.
        """
        try:
            body = json.dumps(self.render(), sort_keys=True, allow_nan=False)
        except Exception as e:
            logger.error(
                f"Failed to serialize metrics for reporter {self._reporter_name}: {e}",
                exc_info=True,
            )
            error = SerializationError(
                f"Unable to serialize metrics for {self._reporter_name}",
                original_error=f"{type(e).__name__}: {e}",
            )
            return MetricsReport(status_code=500, body=json.dumps(error.to_dict()))

        return MetricsReport(status_code=200, body=body)

    def prometheus_text(self) -> bytes:
        """Return all metrics in the Prometheus text exposition format."""
        return generate_latest(self.collector_registry)
