"""
VerificationCode - short-lived one-time code holder on any CacheProtocol.

Every ``set``/``generate`` replaces the previous code and starts a fresh
validity window; codes are never extended.
"""

from typing import Callable, Optional, Tuple

from cachekit.common.logging import get_logger
from cachekit.common.random import DIGITS, random_string_from_charset
from cachekit.core.errors import VerificationCodeError
from cachekit.core.interfaces import CacheProtocol, TTL

logger = get_logger(__name__)

DEFAULT_CODE_LENGTH = 5

RandomSource = Callable[[int, str], str]


class VerificationCode:
    """Verification code manager backed by a single cache entry."""

    def __init__(
        self,
        key: str,
        ttl: TTL,
        cache: CacheProtocol,
        random_source: Optional[RandomSource] = None,
    ):
        """
        Args:
            key: Cache key of the code
            ttl: Validity window (seconds or timedelta)
            cache: Any CacheProtocol implementation
            random_source: ``(length, charset) -> str``; defaults to the
                OS CSPRNG
        """
        self.key = key
        self.ttl = ttl
        self.cache = cache
        self._random_source = random_source or random_string_from_charset

    def set(self, value: str) -> bool:
        """Store ``value`` as the current code with a fresh TTL."""
        self.cache.forget(self.key)
        stored = self.cache.put(self.key, value, self.ttl)
        if not stored:
            logger.warning("Verification code not stored", data={"key": self.key})
        return stored

    def generate(self) -> str:
        """Generate and store a 5-digit numeric code."""
        return self.generate_n(DEFAULT_CODE_LENGTH)

    def generate_n(self, length: int) -> str:
        """
        Generate and store a numeric code of ``length`` digits.

        Raises:
            VerificationCodeError: If length < 1 or the random source fails
        """
        if length < 1:
            raise VerificationCodeError(
                "Verification code length must be >= 1",
                data={"key": self.key, "length": length},
            )
        try:
            code = self._random_source(length, DIGITS)
        except Exception as e:
            raise VerificationCodeError(
                "Random source failed to produce a code",
                data={"key": self.key, "length": length},
                cause=e,
            ) from e

        self.set(code)
        return code

    def get(self) -> Tuple[str, bool]:
        """Current code and whether one is active."""
        return self.cache.get_string(self.key, "")

    def exists(self) -> bool:
        return self.cache.exists(self.key)

    def clear(self) -> None:
        self.cache.forget(self.key)
