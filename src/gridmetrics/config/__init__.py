"""
gridmetrics configuration.

Pydantic-based settings read from environment variables (GRIDMETRICS_
prefix) and an optional .env file.
"""

from gridmetrics.config.settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
