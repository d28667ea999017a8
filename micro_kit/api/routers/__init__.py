"""Reporting routers for the micro_kit API."""
