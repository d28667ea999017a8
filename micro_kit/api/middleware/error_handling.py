"""
Error handling middleware for the micro_kit HTTP API.

Attaches a request ID to every request, logs completion, and turns any
unhandled exception into a structured JSON error response.
"""

import time
import uuid
from collections.abc import Callable

from fastapi import FastAPI, Request, Response
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from micro_kit.exceptions import MicroKitException
from micro_kit.utils.logging import get_logger, request_id_var

logger = get_logger(__name__)


def error_response(exc: Exception, request_id: str | None = None) -> JSONResponse:
    """Build a JSON error response for an exception."""
    if isinstance(exc, MicroKitException):
        status_code = exc.status_code
        payload = exc.to_dict()
    else:
        status_code = 500
        payload = {"code": "INTERNAL_ERROR", "message": "Internal server error"}

    if request_id:
        payload["request_id"] = request_id
    return JSONResponse(status_code=status_code, content={"error": payload})


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """
    Middleware to catch and handle all unhandled exceptions.

    This middleware:
    1. Adds request IDs for tracing (``X-Request-ID``)
    2. Logs each request with its status and duration
    3. Returns structured error responses for unhandled exceptions
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Process the request and handle any exceptions."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request.state.request_id = request_id
        token = request_id_var.set(request_id)
        start_time = time.time()

        try:
            response = await call_next(request)
            response.headers["X-Request-ID"] = request_id

            duration = time.time() - start_time
            logger.info(
                f"{request.method} {request.url.path} completed",
                extra={
                    "request_id": request_id,
                    "status_code": response.status_code,
                    "duration": duration,
                },
            )
            return response

        except Exception as exc:
            duration = time.time() - start_time
            logger.error(
                f"Unhandled exception in {request.method} {request.url.path}",
                exc_info=True,
                extra={
                    "request_id": request_id,
                    "duration": duration,
                    "error_type": type(exc).__name__,
                },
            )
            response = error_response(exc, request_id)
            response.headers["X-Request-ID"] = request_id
            return response

        finally:
            request_id_var.reset(token)


def register_exception_handlers(app: FastAPI) -> None:
    """Convert ``MicroKitException`` raised by handlers into JSON errors."""

    @app.exception_handler(MicroKitException)
    async def _handle_micro_kit_exception(
        request: Request, exc: MicroKitException
    ) -> JSONResponse:
        logger.warning(
            f"{type(exc).__name__} in {request.method} {request.url.path}: {exc.message}"
        )
        return error_response(exc, getattr(request.state, "request_id", None))
