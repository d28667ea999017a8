"""Utility helpers for micro_kit."""
