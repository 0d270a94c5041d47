"""Utility modules for the SearchLens engine."""

from .config import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
