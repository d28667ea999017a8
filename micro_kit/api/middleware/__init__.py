"""HTTP middleware for the micro_kit API."""
