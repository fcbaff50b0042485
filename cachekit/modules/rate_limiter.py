"""
RateLimiter - bounded attempts counter on top of any CacheProtocol.

The cache entry ``key`` holds the remaining attempts and its TTL is the
lockout window:

    fresh   no entry
    active  counter > 0
    locked  counter <= 0

Usage:
    limiter = RateLimiter("login:42", max_attempts=3, ttl=60, cache=cache)
    if limiter.must_lock():
        wait = limiter.available_in()
    else:
        limiter.hit()
"""

from cachekit.common.logging import get_logger
from cachekit.core.errors import ValidationError
from cachekit.core.interfaces import CacheProtocol, TTL

logger = get_logger(__name__)


class RateLimiter:
    """Attempts limiter backed by a single cache entry."""

    def __init__(self, key: str, max_attempts: int, ttl: TTL, cache: CacheProtocol):
        """
        Create the limiter, seeding the counter only if no entry exists.

        Re-creating a limiter for a key that is already counting never
        resets it.

        Args:
            key: Cache key of the counter
            max_attempts: Attempts allowed per window
            ttl: Window length (seconds or timedelta)
            cache: Any CacheProtocol implementation

        Raises:
            ValidationError: If max_attempts is negative
        """
        if max_attempts < 0:
            raise ValidationError(
                "max_attempts must be >= 0",
                data={"key": key, "max_attempts": max_attempts},
            )
        self.key = key
        self.max_attempts = max_attempts
        self.cache = cache

        if not cache.exists(key):
            if not cache.put(key, max_attempts, ttl):
                logger.warning("Rate limiter could not seed counter", data={"key": key})

    def _counter(self) -> int:
        value, _ = self.cache.get_int(self.key, 0)
        return value

    def hit(self) -> None:
        """Use one attempt; no-op once the counter reached zero."""
        if self._counter() > 0:
            self.cache.decrement(self.key)

    def lock(self) -> None:
        """Force the locked state, keeping the current window."""
        if self.cache.exists(self.key):
            self.cache.set(self.key, 0)

    def reset(self) -> None:
        """Drop the counter, returning to the fresh state."""
        self.cache.forget(self.key)

    def must_lock(self) -> bool:
        """True while the window is running and no attempts are left."""
        value, found = self.cache.get_int(self.key, 0)
        return found and value <= 0

    def total_attempts(self) -> int:
        """Attempts used in the current window."""
        value, found = self.cache.get_int(self.key, 0)
        if not found:
            return 0
        remaining = min(max(value, 0), self.max_attempts)
        return self.max_attempts - remaining

    def retries_left(self) -> int:
        return self.max_attempts - self.total_attempts()

    def available_in(self) -> float:
        """Seconds until the window ends (0 when fresh)."""
        remaining, found = self.cache.ttl(self.key)
        return remaining if found else 0.0
