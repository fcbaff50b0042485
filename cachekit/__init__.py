"""
cachekit - uniform cache contract over disk and Redis storage.

Structure:
- core/      - Cache contract, backends, config, errors
- common/    - Shared utilities (logging, random source)
- modules/   - Utilities built on the contract (rate limiter, verification codes)

Usage:
    from cachekit import FileCache, RateLimiter, configure_logging

    configure_logging()  # LOG_LEVEL, LOG_JSON
    cache = FileCache("myapp", "/var/cache/myapp")
    limiter = RateLimiter("login:42", max_attempts=3, ttl=60, cache=cache)
"""

from cachekit.core.interfaces import CacheProtocol
from cachekit.core.connectors import FileCache, RedisCache
from cachekit.core.config import configure_logging, create_cache_client
from cachekit.modules import RateLimiter, VerificationCode

__version__ = "1.0.0"

__all__ = [
    "CacheProtocol",
    "FileCache",
    "RedisCache",
    "create_cache_client",
    "configure_logging",
    "RateLimiter",
    "VerificationCode",
]
