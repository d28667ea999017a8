"""
FastAPI HTTP server exposing health and metrics reports.

Registries are owned by the embedding service and injected into the app;
handlers resolve them from ``app.state``.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI

from micro_kit.api.middleware.error_handling import (
    ErrorHandlingMiddleware,
    register_exception_handlers,
)
from micro_kit.api.routers.health import router as health_router
from micro_kit.api.routers.metrics import router as metrics_router
from micro_kit.config.settings import APIConfig
from micro_kit.monitoring.health_check import HealthCheckRegistry
from micro_kit.monitoring.metrics import MetricsRegistry
from micro_kit.utils.logging import get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifecycle."""
    logger.info(
        f"Starting {app.title}: {len(app.state.health_registry)} health checks, "
        f"{len(app.state.metrics_registry)} metrics"
    )
    yield
    logger.info(f"Shutting down {app.title}")


def create_api_app(
    health_registry: HealthCheckRegistry | None = None,
    metrics_registry: MetricsRegistry | None = None,
    title: str = "micro_kit service",
    debug: bool = False,
) -> FastAPI:
    """
    Create the reporting application.

    Args:
        health_registry: Registry executed by ``GET /health``; a new empty one
            if not given
        metrics_registry: Registry reported by ``GET /metrics``; a new one
            named after ``title`` if not given
        title: Service name shown in the OpenAPI docs
        debug: Expose the interactive docs
    """
    app = FastAPI(
        title=title,
        description="Health and metrics reporting endpoints",
        version="1.0.0",
        lifespan=lifespan,
        docs_url="/docs" if debug else None,
        redoc_url=None,
        openapi_url="/openapi.json" if debug else None,
    )

    if health_registry is None:
        health_registry = HealthCheckRegistry()
    if metrics_registry is None:
        metrics_registry = MetricsRegistry(title)
    app.state.health_registry = health_registry
    app.state.metrics_registry = metrics_registry

    app.add_middleware(ErrorHandlingMiddleware)
    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(metrics_router)

    return app


def run_server(app: FastAPI, api_config: APIConfig, log_level: str = "info") -> None:
    """Serve ``app`` on the configured address with uvicorn (blocking)."""
    import uvicorn

    logger.info(f"Listening on {api_config.get_conn()}")
    uvicorn.run(
        app,
        host=api_config.address,
        port=api_config.port,
        log_level=log_level,
        log_config=None,
    )
