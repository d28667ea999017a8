"""
Metrics router.

- ``GET /metrics``: JSON object of metric name to rendered snapshot
- ``GET /metrics/prometheus``: Prometheus text exposition for scraping
"""

from fastapi import APIRouter, Depends, HTTPException, Response
from prometheus_client import CONTENT_TYPE_LATEST

from micro_kit.api.dependencies import get_metrics_registry
from micro_kit.monitoring.metrics import MetricsRegistry
from micro_kit.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/metrics", tags=["Metrics"])


@router.get("")
def metrics_report(
    registry: MetricsRegistry = Depends(get_metrics_registry),
) -> Response:
    """
    Report a snapshot of every registered metric.

    Returns 500 with a diagnostic body if the snapshot cannot be serialized.
    """
    report = registry.report()
    return Response(
        content=report.body,
        status_code=report.status_code,
        media_type=report.media_type,
    )


@router.get("/prometheus")
def prometheus_metrics(
    registry: MetricsRegistry = Depends(get_metrics_registry),
) -> Response:
    """Prometheus metrics endpoint."""
    try:
        content = registry.prometheus_text()
    except Exception as e:
        logger.error(f"Failed to generate metrics: {e}")
        raise HTTPException(status_code=500, detail="Failed to generate metrics") from e

    return Response(content=content, media_type=CONTENT_TYPE_LATEST)
