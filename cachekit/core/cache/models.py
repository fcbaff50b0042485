"""
Record model shared by the cache backends.

A record is a value plus an absolute UTC expiry timestamp. An expired
record is semantically absent.
"""

import json
import math
import time
from dataclasses import dataclass
from typing import Any, Optional

from cachekit.core.errors import SerializationError
from .codec import encode_value, decode_value

# "Forever" on the disk backend: 100 years from the write
FOREVER_SECONDS = 100 * 365.25 * 24 * 3600


@dataclass
class CacheRecord:
    """A cached value with its expiry (epoch seconds, UTC)."""
    value: Any
    expires_at: float

    @classmethod
    def with_ttl(cls, value: Any, ttl_seconds: float,
                 now: Optional[float] = None) -> 'CacheRecord':
        now = time.time() if now is None else now
        return cls(value=value, expires_at=now + ttl_seconds)

    @classmethod
    def forever(cls, value: Any, now: Optional[float] = None) -> 'CacheRecord':
        now = time.time() if now is None else now
        return cls(value=value, expires_at=now + FOREVER_SECONDS)

    def is_expired(self, now: Optional[float] = None) -> bool:
        """Check if record is expired."""
        now = time.time() if now is None else now
        return self.expires_at <= now

    def remaining(self, now: Optional[float] = None) -> float:
        """Seconds until expiry (never negative)."""
        now = time.time() if now is None else now
        return max(self.expires_at - now, 0.0)

    def to_dict(self) -> dict:
        return {
            'expires_at': self.expires_at,
            'value': encode_value(self.value),
        }

    @classmethod
    def from_dict(cls, d: dict) -> 'CacheRecord':
        try:
            expires_at = float(d['expires_at'])
            node = d['value']
        except (KeyError, TypeError, ValueError) as e:
            raise SerializationError("Malformed cache record", cause=e) from e
        if math.isnan(expires_at):
            raise SerializationError("Cache record without a valid expiry")
        try:
            value = decode_value(node)
        except (TypeError, ValueError, AttributeError, OverflowError, RecursionError) as e:
            raise SerializationError("Malformed record value", cause=e) from e
        return cls(value=value, expires_at=expires_at)

    def serialize(self) -> str:
        """Encode the record as JSON text."""
        try:
            return json.dumps(self.to_dict())
        except RecursionError as e:
            raise SerializationError("Record value is nested too deeply", cause=e) from e
        except (TypeError, ValueError) as e:
            raise SerializationError("Record is not JSON encodable", cause=e) from e

    @classmethod
    def deserialize(cls, data: str) -> 'CacheRecord':
        """Decode a record from JSON text."""
        try:
            raw = json.loads(data)
        except (ValueError, RecursionError) as e:
            raise SerializationError("Record is not valid JSON", cause=e) from e
        if not isinstance(raw, dict):
            raise SerializationError("Record must be a JSON object")
        return cls.from_dict(raw)
