"""Copilot Compass: GitHub Copilot usage reports."""

__version__ = "0.1.0"
