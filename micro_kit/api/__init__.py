"""HTTP transport for health and metrics reports."""

from .api_server import create_api_app, run_server

__all__ = ["create_api_app", "run_server"]
