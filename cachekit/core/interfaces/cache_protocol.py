"""
Cache Protocol - Interface for cache implementations.

Implementations:
- FileCache (cachekit.core.connectors.file_cache)
- RedisCache (cachekit.core.connectors.redis_cache)

Keys are caller keys; each implementation namespaces them with its own
prefix. TTLs are seconds (int/float) or ``datetime.timedelta``.
Operations never raise for storage failures, absent keys or type
mismatches: they return ``False`` or ``(fallback, False)``.
"""

from datetime import timedelta
from typing import Protocol, Any, Tuple, Union, runtime_checkable

TTL = Union[int, float, timedelta]


@runtime_checkable
class CacheProtocol(Protocol):
    """Protocol for cache implementations (DI interface)."""

    def put(self, key: str, value: Any, ttl: TTL) -> bool:
        """Create or overwrite an entry expiring after ttl."""
        ...

    def put_forever(self, key: str, value: Any) -> bool:
        """Create or overwrite an entry without expiry."""
        ...

    def set(self, key: str, value: Any) -> bool:
        """Replace the value of an existing entry, keeping its TTL."""
        ...

    def get(self, key: str) -> Tuple[Any, bool]:
        """Get value and existence flag."""
        ...

    def pull(self, key: str) -> Tuple[Any, bool]:
        """Get value and delete the entry in one atomic step."""
        ...

    def exists(self, key: str) -> bool:
        """Check if a non-expired entry exists."""
        ...

    def forget(self, key: str) -> bool:
        """Delete entry (absent keys are not an error)."""
        ...

    def ttl(self, key: str) -> Tuple[float, bool]:
        """Remaining seconds until expiry."""
        ...

    def get_bool(self, key: str, fallback: bool = False) -> Tuple[bool, bool]:
        ...

    def get_int(self, key: str, fallback: int = 0) -> Tuple[int, bool]:
        ...

    def get_int8(self, key: str, fallback: int = 0) -> Tuple[int, bool]:
        ...

    def get_int16(self, key: str, fallback: int = 0) -> Tuple[int, bool]:
        ...

    def get_int32(self, key: str, fallback: int = 0) -> Tuple[int, bool]:
        ...

    def get_int64(self, key: str, fallback: int = 0) -> Tuple[int, bool]:
        ...

    def get_uint(self, key: str, fallback: int = 0) -> Tuple[int, bool]:
        ...

    def get_uint8(self, key: str, fallback: int = 0) -> Tuple[int, bool]:
        ...

    def get_uint16(self, key: str, fallback: int = 0) -> Tuple[int, bool]:
        ...

    def get_uint32(self, key: str, fallback: int = 0) -> Tuple[int, bool]:
        ...

    def get_uint64(self, key: str, fallback: int = 0) -> Tuple[int, bool]:
        ...

    def get_float32(self, key: str, fallback: float = 0.0) -> Tuple[float, bool]:
        ...

    def get_float64(self, key: str, fallback: float = 0.0) -> Tuple[float, bool]:
        ...

    def get_string(self, key: str, fallback: str = "") -> Tuple[str, bool]:
        ...

    def get_bytes(self, key: str, fallback: bytes = b"") -> Tuple[bytes, bool]:
        ...

    def increment(self, key: str) -> bool:
        """Add 1 to a numeric entry."""
        ...

    def increment_by(self, key: str, delta: Union[int, float]) -> bool:
        """Add delta to a numeric entry."""
        ...

    def decrement(self, key: str) -> bool:
        """Subtract 1 from a numeric entry."""
        ...

    def decrement_by(self, key: str, delta: Union[int, float]) -> bool:
        """Subtract delta from a numeric entry."""
        ...
