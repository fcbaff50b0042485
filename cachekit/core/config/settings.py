"""
Settings - Cache configuration using dataclasses.

Environment variables:
- CACHE_BACKEND: file, redis
- CACHE_PREFIX: Key namespace prefix
- CACHE_DIR: Directory for the file backend
- REDIS_HOST: Redis address (host:port or redis:// URL)
- REDIS_MAX_IDLE / REDIS_MAX_ACTIVE: Pool sizing
- REDIS_DB: Logical database index
- LOG_LEVEL: DEBUG, INFO, WARNING, ERROR (applied by configure_logging)
- LOG_JSON: true/false
"""

import os
from enum import Enum
from typing import Optional
from dataclasses import dataclass, field

from cachekit.common.logging import setup_logging


class CacheBackend(str, Enum):
    """Cache backend options."""
    FILE = "file"
    REDIS = "redis"


class LogLevel(str, Enum):
    """Log level options."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"


@dataclass
class Settings:
    """Cache settings from environment."""

    # Cache
    cache_backend: CacheBackend = field(
        default_factory=lambda: CacheBackend(os.getenv("CACHE_BACKEND", "file"))
    )
    cache_prefix: str = field(
        default_factory=lambda: os.getenv("CACHE_PREFIX", "cachekit")
    )
    cache_dir: str = field(
        default_factory=lambda: os.getenv("CACHE_DIR", "cache")
    )

    # Redis
    redis_host: str = field(
        default_factory=lambda: os.getenv("REDIS_HOST", "localhost:6379")
    )
    redis_max_idle: int = field(
        default_factory=lambda: int(os.getenv("REDIS_MAX_IDLE", "10"))
    )
    redis_max_active: int = field(
        default_factory=lambda: int(os.getenv("REDIS_MAX_ACTIVE", "50"))
    )
    redis_db: int = field(
        default_factory=lambda: int(os.getenv("REDIS_DB", "0"))
    )

    # Logging
    log_level: LogLevel = field(
        default_factory=lambda: LogLevel(os.getenv("LOG_LEVEL", "INFO").upper())
    )
    log_json: bool = field(
        default_factory=lambda: os.getenv("LOG_JSON", "false").lower() == "true"
    )


# Singleton instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get settings singleton."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Forget the cached settings so the environment is read again."""
    global _settings
    _settings = None


def configure_logging(
    settings: Optional[Settings] = None,
    log_file: Optional[str] = None,
    force: bool = False,
) -> None:
    """
    Configure logging from LOG_LEVEL / LOG_JSON.

    Args:
        settings: Settings to apply (default: get_settings())
        log_file: Optional rotating log file
        force: Reconfigure even if logging was already set up
    """
    settings = settings or get_settings()
    setup_logging(
        level=settings.log_level.value,
        log_file=log_file,
        json_format=settings.log_json,
        force=force,
    )
