"""
Health check router.

``GET /health`` executes every registered check and returns a JSON object of
check name to ``"Ok"`` or ``"Failed"``, with status 200 when all checks pass
and 500 otherwise.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from micro_kit.api.dependencies import get_health_registry
from micro_kit.monitoring.health_check import HealthCheckRegistry

router = APIRouter(prefix="/health", tags=["Health"])


# Plain ``def`` so Starlette runs checks on its threadpool
@router.get("", response_model=dict[str, str])
def health_check(
    registry: HealthCheckRegistry = Depends(get_health_registry),
) -> JSONResponse:
    """
    Execute all registered health checks.

    Returns:
        JSONResponse: Check results, status code derived from the aggregate
    """
    report = registry.report()
    return JSONResponse(status_code=report.status_code, content=report.body)
