"""
Tests for the health and metrics HTTP endpoints.
"""

from concurrent.futures import ThreadPoolExecutor

import pytest
from conftest import RaisingHealthCheck, StaticHealthCheck
from fastapi.testclient import TestClient
from prometheus_client import CollectorRegistry

from micro_kit.api.api_server import create_api_app
from micro_kit.exceptions import HealthCheckError
from micro_kit.monitoring.health_check import HealthStatus
from micro_kit.monitoring.metrics import Counter, Gauge, MetricsRegistry


@pytest.fixture
def client(health_registry, metrics_registry):
    app = create_api_app(health_registry, metrics_registry, title="orders")
    return TestClient(app)


class TestHealthEndpoint:
    """Test GET /health."""

    def test_empty_registry_is_healthy(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {}

    def test_all_healthy(self, client, health_registry, good_check):
        health_registry.register(good_check)
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"Good": "Ok"}

    def test_unhealthy_returns_500(self, client, health_registry, good_check, bad_check):
        health_registry.register(good_check)
        health_registry.register(bad_check)

        response = client.get("/health")
        assert response.status_code == 500
        assert response.json() == {"Good": "Ok", "Bad": "Failed"}

    def test_raising_check_reported_failed(self, client, health_registry):
        health_registry.register(RaisingHealthCheck("db"))
        response = client.get("/health")
        assert response.status_code == 500
        assert response.json() == {"db": "Failed"}

    def test_request_id_header(self, client):
        response = client.get("/health", headers={"X-Request-ID": "req-123"})
        assert response.headers["X-Request-ID"] == "req-123"

        generated = client.get("/health")
        assert generated.headers["X-Request-ID"]

    def test_registry_injected_by_reference(self, client, health_registry):
        """Test checks registered after app creation are served."""
        assert client.get("/health").json() == {}
        health_registry.register(StaticHealthCheck("late", HealthStatus.HEALTHY))
        assert client.get("/health").json() == {"late": "Ok"}

    def test_concurrent_requests(self, client, health_registry):
        for i in range(10):
            health_registry.register(StaticHealthCheck(f"c{i}", HealthStatus.HEALTHY))

        with ThreadPoolExecutor(max_workers=8) as pool:
            responses = list(pool.map(lambda _: client.get("/health"), range(40)))

        assert all(r.status_code == 200 for r in responses)
        assert all(len(r.json()) == 10 for r in responses)

    def test_micro_kit_exception_becomes_json_error(
        self, client, health_registry, monkeypatch
    ):
        """Test library exceptions escaping a handler are rendered as JSON."""

        def fail():
            raise HealthCheckError("db", "registry unavailable")

        monkeypatch.setattr(health_registry, "report", fail)
        response = client.get("/health")
        assert response.status_code == 503
        body = response.json()["error"]
        assert body["code"] == "HEALTH_CHECK_ERROR"
        assert body["context"] == {"check_name": "db"}

    def test_unexpected_exception_becomes_500(self, health_registry, monkeypatch):
        """Test unknown exceptions are hidden behind a generic error."""
        app = create_api_app(health_registry)
        client = TestClient(app, raise_server_exceptions=False)

        def fail():
            raise RuntimeError("boom")

        monkeypatch.setattr(health_registry, "report", fail)
        response = client.get("/health")
        assert response.status_code == 500
        assert response.json()["error"]["code"] == "INTERNAL_ERROR"


class TestMetricsEndpoint:
    """Test GET /metrics and GET /metrics/prometheus."""

    def test_report(self, client, metrics_registry):
        counter = Counter("requests")
        gauge = Gauge("connections")
        metrics_registry.add("requests", counter)
        metrics_registry.add("connections", gauge)
        counter.inc(5)
        gauge.set(2)

        response = client.get("/metrics")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/json")
        assert response.json() == {"requests": 5, "connections": 2}

    def test_increment_between_requests(self, client, metrics_registry):
        counter = Counter("requests")
        metrics_registry.add("requests", counter)

        assert client.get("/metrics").json() == {"requests": 0}
        counter.inc()
        assert client.get("/metrics").json() == {"requests": 1}

    def test_serialization_failure(self, client, metrics_registry):
        class Broken(Counter):
            def snapshot(self):
                raise RuntimeError("encoder exploded")

        metrics_registry.add("broken", Broken("broken"))

        response = client.get("/metrics")
        assert response.status_code == 500
        assert response.json()["code"] == "SERIALIZATION_ERROR"

    def test_prometheus(self, client, metrics_registry):
        counter = Counter("requests", "Requests served")
        counter.inc(2)
        metrics_registry.add("requests", counter)

        response = client.get("/metrics/prometheus")
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert "requests_total 2.0" in response.text

    def test_prometheus_uses_injected_collector_registry(self, health_registry):
        shared = CollectorRegistry()
        registry = MetricsRegistry("orders", collector_registry=shared)
        counter = Counter("orders_placed", "Orders accepted")
        counter.inc(7)
        registry.add("orders_placed", counter)
        client = TestClient(create_api_app(health_registry, registry))

        response = client.get("/metrics/prometheus")
        assert response.status_code == 200
        assert "orders_placed_total 7.0" in response.text
        assert shared.get_sample_value("orders_placed_total") == 7.0

    def test_non_finite_gauge_does_not_fail_report(self, client, metrics_registry):
        counter = Counter("requests")
        counter.inc(3)
        gauge = Gauge("load")
        gauge.set(float("nan"))
        metrics_registry.add("requests", counter)
        metrics_registry.add("load", gauge)

        response = client.get("/metrics")
        assert response.status_code == 200
        assert response.json() == {"requests": 3, "load": 0}


class TestAppDefaults:
    """Test app construction without explicit registries."""

    def test_default_registries(self):
        app = create_api_app(title="bare")
        client = TestClient(app)
        assert client.get("/health").json() == {}
        assert client.get("/metrics").json() == {}
        assert app.state.metrics_registry.get_name() == "bare"

    def test_missing_registry_is_reported(self):
        app = create_api_app()
        app.state.health_registry = None
        response = TestClient(app).get("/health")
        assert response.status_code == 500
        assert response.json()["error"]["code"] == "NOT_CONFIGURED"
