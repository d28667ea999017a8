"""
Health checks for micro_kit services.

Services register any number of ``HealthCheck`` implementations with a
``HealthCheckRegistry``. Executing the registry evaluates every check and
folds the individual verdicts into a single aggregate status: the service is
healthy only if every check is healthy.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum

from micro_kit.exceptions import HealthCheckTimeoutError

logger = logging.getLogger(__name__)


class HealthStatus(str, Enum):
    """Binary health verdict. Values are the wire tokens."""

    HEALTHY = "Ok"
    UNHEALTHY = "Failed"

    def combine(self, other: "HealthStatus") -> "HealthStatus":
        """Healthy only if both operands are healthy."""
        if self is HealthStatus.HEALTHY and other is HealthStatus.HEALTHY:
            return HealthStatus.HEALTHY
        return HealthStatus.UNHEALTHY

    def __and__(self, other: "HealthStatus") -> "HealthStatus":
        if not isinstance(other, HealthStatus):
            return NotImplemented
        return self.combine(other)

    @classmethod
    def fold(cls, statuses: Iterable["HealthStatus"]) -> "HealthStatus":
        """Combine any number of statuses, starting from the identity ``HEALTHY``."""
        result = cls.HEALTHY
        for status in statuses:
            result = result & status
        return result

    @property
    def token(self) -> str:
        return self.value

    @property
    def status_code(self) -> int:
        """HTTP status code reported for this verdict."""
        return 200 if self is HealthStatus.HEALTHY else 500

    @property
    def is_healthy(self) -> bool:
        return self is HealthStatus.HEALTHY


class HealthCheck(ABC):
    """
    A named unit of work producing a health verdict.

    Implementations are invoked from request-handling threads and must be
    stateless or internally synchronized. A check that cannot determine its
    status should return ``UNHEALTHY``; exceptions are tolerated and mapped to
    ``UNHEALTHY`` by the registry.
    """

    @abstractmethod
    def name(self) -> str:
        """Stable name under which the result is reported."""

    @abstractmethod
    def check_health(self) -> HealthStatus:
        """Evaluate current health."""


class FunctionHealthCheck(HealthCheck):
    """Adapts a zero-argument callable into a ``HealthCheck``.

    The callable may return a ``HealthStatus`` or a ``bool``.
    """

    def __init__(self, name: str, func: Callable[[], "HealthStatus | bool"]):
        self._name = name
        self._func = func

    def name(self) -> str:
        return self._name

    def check_health(self) -> HealthStatus:
        result = self._func()
        if isinstance(result, HealthStatus):
            return result
        return HealthStatus.HEALTHY if result else HealthStatus.UNHEALTHY

    def __repr__(self) -> str:
        return f"FunctionHealthCheck(name={self._name!r})"


@dataclass(frozen=True)
class HealthReport:
    """Result of one registry execution, in transport form."""

    status: HealthStatus
    results: dict[str, HealthStatus] = field(default_factory=dict)

    @property
    def status_code(self) -> int:
        return self.status.status_code

    @property
    def body(self) -> dict[str, str]:
        return {name: status.token for name, status in self.results.items()}


class _TimedCheck:
    """Runs one check on a daemon thread so the caller can stop waiting."""

    def __init__(self, registry: "HealthCheckRegistry", check: HealthCheck, name: str):
        self.name = name
        self.status: HealthStatus | None = None
        self._thread = threading.Thread(
            target=self._run,
            args=(registry, check),
            name=f"health-check-{name}",
            daemon=True,
        )

    def _run(self, registry: "HealthCheckRegistry", check: HealthCheck) -> None:
        self.status = registry._evaluate(check, self.name)

    def start(self) -> None:
        self._thread.start()

    def join(self, timeout: float) -> None:
        self._thread.join(timeout)

    def is_alive(self) -> bool:
        return self._thread.is_alive()


class HealthCheckRegistry:
    """
    Registry of health checks.

    Registration is append-only and allowed at any time. Each ``execute`` call
    is independent: every check is re-evaluated and nothing is cached. The
    internal lock is held only while copying the list of checks, never while
    a check runs, so slow checks do not block registration or other
    executions.

    Args:
        check_timeout: Optional time budget in seconds for each check. When
            set, checks run concurrently on worker threads and any check that
            has not finished in time is reported ``UNHEALTHY``. Stuck checks
            are not cancelled.
    """

    def __init__(self, check_timeout: float | None = None):
        if check_timeout is not None and check_timeout <= 0:
            raise ValueError("check_timeout must be positive")
        self.check_timeout = check_timeout
        self._checks: list[HealthCheck] = []
        self._lock = threading.RLock()

    def register(self, check: HealthCheck) -> None:
        """Append a check. Names are not required to be unique."""
        if not isinstance(check, HealthCheck):
            raise TypeError(
                f"Expected HealthCheck, got {type(check).__name__}"
            )
        with self._lock:
            self._checks.append(check)
        logger.debug(f"Registered health check {check!r}")

    def register_function(
        self, name: str, func: Callable[[], "HealthStatus | bool"]
    ) -> HealthCheck:
        """Register a callable as a check and return the wrapping check."""
        check = FunctionHealthCheck(name, func)
        self.register(check)
        return check

    def __len__(self) -> int:
        with self._lock:
            return len(self._checks)

    def checks(self) -> list[HealthCheck]:
        """Return a copy of the registered checks in registration order."""
        with self._lock:
            return list(self._checks)

    def execute(self) -> tuple[HealthStatus, dict[str, HealthStatus]]:
        """
        Evaluate every registered check.

        Returns:
            Tuple of the aggregate status and a mapping of check name to
            status. When two checks share a name, the later registration wins.
        """
        checks = self.checks()
        named = [(self._name_of(check), check) for check in checks]

        if self.check_timeout is None:
            evaluated = [(name, self._evaluate(check, name)) for name, check in named]
        else:
            evaluated = self._evaluate_with_timeout(named)

        results: dict[str, HealthStatus] = {}
        for name, status in evaluated:
            results[name] = status

        return HealthStatus.fold(results.values()), results

    def report(self) -> HealthReport:
        """Execute all checks and package the outcome for the transport layer."""
        status, results = self.execute()
        if not status.is_healthy:
            failed = sorted(name for name, s in results.items() if not s.is_healthy)
            logger.warning(f"Service unhealthy, failing checks: {', '.join(failed)}")
        return HealthReport(status=status, results=results)

    def _name_of(self, check: HealthCheck) -> str:
        try:
            return str(check.name())
        except Exception as e:
            fallback = type(check).__name__
            logger.warning(
                f"Health check name() failed, reporting as {fallback}: {e}",
                exc_info=True,
            )
            return fallback

    def _evaluate(self, check: HealthCheck, name: str) -> HealthStatus:
        try:
            status = check.check_health()
        except Exception as e:
            logger.warning(f"Health check {name} raised: {e}", exc_info=True)
            return HealthStatus.UNHEALTHY

        if not isinstance(status, HealthStatus):
            logger.warning(
                f"Health check {name} returned {type(status).__name__}, "
                "expected HealthStatus"
            )
            return HealthStatus.UNHEALTHY
        return status

    def _evaluate_with_timeout(
        self, named: list[tuple[str, HealthCheck]]
    ) -> list[tuple[str, HealthStatus]]:
        pending = [_TimedCheck(self, check, name) for name, check in named]
        for timed in pending:
            timed.start()

        deadline = time.monotonic() + self.check_timeout
        evaluated = []
        for timed in pending:
            timed.join(max(0.0, deadline - time.monotonic()))
            if timed.is_alive() or timed.status is None:
                error = HealthCheckTimeoutError(timed.name, self.check_timeout)
                logger.warning(error.message, extra={"check_name": timed.name})
                evaluated.append((timed.name, HealthStatus.UNHEALTHY))
            else:
                evaluated.append((timed.name, timed.status))
        return evaluated
