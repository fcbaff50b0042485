"""
Cache contract internals.

- models.py: CacheRecord (value + expiry)
- codec.py: tagged value encoding for the disk backend
- coercion.py: typed accessor conversions
- base.py: BaseCache, the shared half of CacheProtocol
"""

from .base import BaseCache, to_seconds
from .models import CacheRecord, FOREVER_SECONDS

__all__ = [
    'BaseCache',
    'CacheRecord',
    'FOREVER_SECONDS',
    'to_seconds',
]
