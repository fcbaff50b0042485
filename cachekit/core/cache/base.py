"""
BaseCache - shared part of the cache contract.

Backends implement storage primitives (put/get/pull/counters...); the
typed accessors live here and are identical for every backend. A backend
whose storage loses type information overrides ``_numeric_value`` (and
the scalar accessors) to recover it from its own representation.
"""

import math
from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Any, Optional, Tuple, Union

import numpy as np

from cachekit.core.interfaces import TTL
from .coercion import (
    coerce_bool,
    coerce_bytes,
    coerce_float,
    coerce_int,
    coerce_string,
    coerce_uint,
    is_number,
)


def to_seconds(ttl: TTL) -> Optional[float]:
    """
    Normalize a TTL to float seconds.

    None if it is not a duration (or is NaN). Infinity is passed through;
    callers store +inf as an entry without expiry.
    """
    if isinstance(ttl, timedelta):
        return ttl.total_seconds()
    if not is_number(ttl):
        return None
    try:
        seconds = float(ttl)
    except OverflowError:
        return math.inf if ttl > 0 else -math.inf
    return None if math.isnan(seconds) else seconds


class BaseCache(ABC):
    """
    Abstract cache implementing the typed half of CacheProtocol.

    Subclasses provide the namespaced storage operations.
    """

    def __init__(self, prefix: str = ""):
        self._prefix = prefix

    @property
    def prefix(self) -> str:
        """Namespace prefix (immutable per instance)."""
        return self._prefix

    def _namespaced(self, key: str) -> str:
        """Add prefix to key."""
        if not self._prefix:
            return key
        return f"{self._prefix}-{key}"

    # ============== Storage primitives ==============

    @abstractmethod
    def put(self, key: str, value: Any, ttl: TTL) -> bool:
        ...

    @abstractmethod
    def put_forever(self, key: str, value: Any) -> bool:
        ...

    @abstractmethod
    def set(self, key: str, value: Any) -> bool:
        ...

    @abstractmethod
    def get(self, key: str) -> Tuple[Any, bool]:
        ...

    @abstractmethod
    def pull(self, key: str) -> Tuple[Any, bool]:
        ...

    @abstractmethod
    def exists(self, key: str) -> bool:
        ...

    @abstractmethod
    def forget(self, key: str) -> bool:
        ...

    @abstractmethod
    def ttl(self, key: str) -> Tuple[float, bool]:
        ...

    @abstractmethod
    def increment_by(self, key: str, delta: Union[int, float]) -> bool:
        ...

    @abstractmethod
    def decrement_by(self, key: str, delta: Union[int, float]) -> bool:
        ...

    def increment(self, key: str) -> bool:
        """Add 1 to a numeric entry."""
        return self.increment_by(key, 1)

    def decrement(self, key: str) -> bool:
        """Subtract 1 from a numeric entry."""
        return self.decrement_by(key, 1)

    # ============== Typed accessors ==============

    def _numeric_value(self, key: str) -> Tuple[Any, bool]:
        """Stored value as seen by the numeric accessors."""
        return self.get(key)

    def _integer(self, key: str, fallback: Any, dtype: Optional[type] = None,
                 signed: bool = True) -> Tuple[Any, bool]:
        value, found = self._numeric_value(key)
        if not found:
            return fallback, False
        if signed:
            return coerce_int(value, fallback, dtype)
        return coerce_uint(value, fallback, dtype)

    def get_bool(self, key: str, fallback: bool = False) -> Tuple[bool, bool]:
        value, found = self.get(key)
        if not found:
            return fallback, False
        return coerce_bool(value, fallback)

    def get_int(self, key: str, fallback: int = 0) -> Tuple[int, bool]:
        return self._integer(key, fallback)

    def get_int8(self, key: str, fallback: int = 0) -> Tuple[int, bool]:
        return self._integer(key, fallback, np.int8)

    def get_int16(self, key: str, fallback: int = 0) -> Tuple[int, bool]:
        return self._integer(key, fallback, np.int16)

    def get_int32(self, key: str, fallback: int = 0) -> Tuple[int, bool]:
        return self._integer(key, fallback, np.int32)

    def get_int64(self, key: str, fallback: int = 0) -> Tuple[int, bool]:
        return self._integer(key, fallback, np.int64)

    def get_uint(self, key: str, fallback: int = 0) -> Tuple[int, bool]:
        return self._integer(key, fallback, signed=False)

    def get_uint8(self, key: str, fallback: int = 0) -> Tuple[int, bool]:
        return self._integer(key, fallback, np.uint8, signed=False)

    def get_uint16(self, key: str, fallback: int = 0) -> Tuple[int, bool]:
        return self._integer(key, fallback, np.uint16, signed=False)

    def get_uint32(self, key: str, fallback: int = 0) -> Tuple[int, bool]:
        return self._integer(key, fallback, np.uint32, signed=False)

    def get_uint64(self, key: str, fallback: int = 0) -> Tuple[int, bool]:
        return self._integer(key, fallback, np.uint64, signed=False)

    def get_float32(self, key: str, fallback: float = 0.0) -> Tuple[float, bool]:
        value, found = self._numeric_value(key)
        if not found:
            return fallback, False
        return coerce_float(value, fallback, np.float32)

    def get_float64(self, key: str, fallback: float = 0.0) -> Tuple[float, bool]:
        value, found = self._numeric_value(key)
        if not found:
            return fallback, False
        return coerce_float(value, fallback)

    def get_string(self, key: str, fallback: str = "") -> Tuple[str, bool]:
        value, found = self.get(key)
        if not found:
            return fallback, False
        return coerce_string(value, fallback)

    def get_bytes(self, key: str, fallback: bytes = b"") -> Tuple[bytes, bool]:
        value, found = self.get(key)
        if not found:
            return fallback, False
        return coerce_bytes(value, fallback)
