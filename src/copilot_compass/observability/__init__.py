"""Logging and metrics for Copilot Compass."""
