"""
Config - Cache configuration.

- settings.py: Settings dataclass read from environment, logging setup
- cache.py: Cache client factory
"""

from .settings import (
    Settings,
    CacheBackend,
    LogLevel,
    configure_logging,
    get_settings,
    reset_settings,
)
from .cache import create_cache_client

__all__ = [
    # Settings
    "Settings",
    "CacheBackend",
    "LogLevel",
    "get_settings",
    "reset_settings",
    "configure_logging",
    # Cache
    "create_cache_client",
]
