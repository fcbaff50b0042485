"""
Cache Factory - Create cache client based on configuration.

Uses factory pattern for dependency injection.
"""

from typing import Optional, Union

from ..errors import ConfigurationError
from ..interfaces import CacheProtocol
from .settings import CacheBackend, Settings, get_settings


def _load_settings() -> Settings:
    try:
        return get_settings()
    except ValueError as e:
        raise ConfigurationError("Invalid cache settings in environment", cause=e) from e


def create_cache_client(
    backend: Optional[Union[CacheBackend, str]] = None,
    **kwargs
) -> CacheProtocol:
    """
    Factory for cache clients.

    Args:
        backend: Cache backend (default from settings)
        **kwargs: Backend-specific overrides (prefix, directory, host,
            max_idle, max_active, db)

    Returns:
        CacheProtocol implementation

    Example:
        cache = create_cache_client()  # Uses settings
        cache = create_cache_client(CacheBackend.REDIS, host="cache:6379", db=2)
    """
    settings = _load_settings()
    try:
        backend = CacheBackend(backend or settings.cache_backend)
    except ValueError as e:
        raise ConfigurationError(
            f"Unknown cache backend: {backend}",
            data={"backend": str(backend)},
            cause=e,
        ) from e

    prefix = kwargs.get('prefix', settings.cache_prefix)

    if backend == CacheBackend.FILE:
        from ..connectors.file_cache import FileCache
        directory = kwargs.get('directory', settings.cache_dir)
        return FileCache(prefix=prefix, directory=directory)

    from ..connectors.redis_cache import RedisCache
    host = kwargs.get('host', settings.redis_host)
    if not host:
        raise ConfigurationError("Redis host required for redis backend")
    return RedisCache(
        prefix=prefix,
        host=host,
        max_idle=kwargs.get('max_idle', settings.redis_max_idle),
        max_active=kwargs.get('max_active', settings.redis_max_active),
        db=kwargs.get('db', settings.redis_db),
    )
