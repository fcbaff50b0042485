"""
Connectors - Cache implementations.

- file_cache.py: File-based (single host, no server)
- redis_cache.py: Redis-based (shared, atomic counters)
"""

from .file_cache import FileCache
from .redis_cache import RedisCache

__all__ = [
    "FileCache",
    "RedisCache",
]
