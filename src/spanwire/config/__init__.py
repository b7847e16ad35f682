"""Configuration management for spanwire.

Settings come from ``SPANWIRE_*`` environment variables and optional
``.env`` files. Nothing is loaded at import time; call ``get_settings()``.
"""

from spanwire.config.env_loader import load_env_files
from spanwire.config.settings import SpanwireSettings, get_settings, load_settings

__all__ = [
    "SpanwireSettings",
    "get_settings",
    "load_settings",
    "load_env_files",
]
