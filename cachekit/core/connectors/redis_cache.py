"""
RedisCache - Redis-based cache implementation.

Keys are namespaced as ``prefix + "-" + key``. Expiry, ``pull`` and the
counters rely on native Redis primitives, so they are atomic with respect
to every other client of the same server:

- put            SET key value PX <ms>
- put_forever    SET key value
- set            SET key value KEEPTTL XX   (fails when the key is absent)
- pull           MULTI / GET / DEL / EXEC
- counters       INCR, INCRBY, INCRBYFLOAT, DECR, DECRBY run inside a Lua
                 script guarded by EXISTS, so absent keys are never created

Values are stored in Redis' own string form: booleans as 1/0, numbers as
decimal text. ``get`` returns text (``bytes`` when it is not UTF-8) and
the numeric accessors parse it back.

Requires Redis >= 6.0 (KEEPTTL).
"""

import math
from typing import Any, Optional, Tuple, Union

import numpy as np
import redis

from cachekit.common.logging import get_logger
from cachekit.core.cache import FOREVER_SECONDS, BaseCache, to_seconds
from cachekit.core.cache.coercion import as_python_number, is_number, parse_bool, parse_number
from cachekit.core.errors import ConfigurationError
from cachekit.core.interfaces import TTL

logger = get_logger(__name__)

DEFAULT_PORT = 6379

COUNTER_SCRIPT = """
if redis.call('EXISTS', KEYS[1]) == 0 then
    return false
end
if ARGV[1] == 'INCR' or ARGV[1] == 'DECR' then
    return tostring(redis.call(ARGV[1], KEYS[1]))
end
return tostring(redis.call(ARGV[1], KEYS[1], ARGV[2]))
"""


def _wire_number(value: Any) -> Optional[Union[int, float]]:
    """Python number the client can send as decimal text; None otherwise."""
    number = as_python_number(value)
    if number is None:
        return None
    try:
        str(number)
    except ValueError:
        # int longer than sys.get_int_max_str_digits()
        return None
    return number


def _split_host(host: str) -> Tuple[str, int]:
    """Split ``host[:port]`` into its parts."""
    name, sep, port = host.rpartition(":")
    if not sep:
        return host, DEFAULT_PORT
    try:
        return name or "localhost", int(port)
    except ValueError as e:
        raise ConfigurationError(
            "Invalid Redis host address",
            data={"host": host},
            cause=e,
        ) from e


def _build_pool(host: str, db: int, max_active: int,
                pool_timeout: Optional[float]) -> redis.ConnectionPool:
    """Connection pool selecting ``db`` on every new connection."""
    if host.startswith(("redis://", "rediss://", "unix://")):
        if max_active > 0:
            return redis.BlockingConnectionPool.from_url(
                host, db=db, max_connections=max_active, timeout=pool_timeout
            )
        return redis.ConnectionPool.from_url(host, db=db)

    hostname, port = _split_host(host)
    if max_active > 0:
        return redis.BlockingConnectionPool(
            host=hostname,
            port=port,
            db=db,
            max_connections=max_active,
            timeout=pool_timeout,
        )
    # max_active <= 0: unbounded pool
    return redis.ConnectionPool(host=hostname, port=port, db=db)


class RedisCache(BaseCache):
    """
    Redis-based cache implementation.

    Implements CacheProtocol for shared, multi-process use.
    Requires Redis server.
    """

    def __init__(
        self,
        prefix: str,
        host: str = "localhost:6379",
        max_idle: int = 10,
        max_active: int = 50,
        db: int = 0,
        pool_timeout: Optional[float] = None,
        client: Optional[redis.Redis] = None,
    ):
        """
        Initialize Redis cache.

        Args:
            prefix: Key prefix for namespacing
            host: ``host:port`` address (or a redis:// URL)
            max_idle: Idle connections to keep (redis-py keeps every idle
                connection up to max_active; recorded for reporting)
            max_active: Pool size; callers block when all are in use.
                0 or less means unbounded
            db: Logical database selected by every pooled connection
            pool_timeout: Seconds to wait for a free connection (None: wait forever)
            client: Ready-made client, bypasses pool construction
        """
        super().__init__(prefix)
        self.host = host
        self.db = db
        self.max_idle = max_idle
        self.max_active = max_active

        if client is None:
            self._pool = _build_pool(host, db, max_active, pool_timeout)
            client = redis.Redis(connection_pool=self._pool)
            logger.info(
                f"Redis cache initialized: {host}",
                data={"db": db, "max_active": max_active, "max_idle": max_idle},
            )
        else:
            self._pool = None

        self.client = client
        self._counter = client.register_script(COUNTER_SCRIPT)

    # ============== Wire helpers ==============

    @staticmethod
    def _to_wire(value: Any) -> Optional[Union[bytes, str, int, float]]:
        """Redis representation of a scalar value; None if unsupported."""
        if isinstance(value, (bool, np.bool_)):
            return b"1" if value else b"0"
        if is_number(value):
            return _wire_number(value)
        if isinstance(value, str):
            return value
        if isinstance(value, (bytes, bytearray, memoryview)):
            return bytes(value)
        return None

    @staticmethod
    def _from_wire(raw: bytes) -> Union[str, bytes]:
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError:
            return raw

    def _raw(self, key: str) -> Optional[bytes]:
        """GET the stored bytes, None when absent or on error."""
        try:
            return self.client.get(self._namespaced(key))
        except redis.RedisError as e:
            logger.error(f"Redis get error: {e}", data={"key": key})
            return None

    def _encode_or_log(self, key: str, value: Any):
        payload = self._to_wire(value)
        if payload is None:
            logger.warning(
                "Redis cache cannot store value type",
                data={"key": key, "type": type(value).__name__},
            )
        return payload

    # ============== CacheProtocol Implementation ==============

    def put(self, key: str, value: Any, ttl: TTL) -> bool:
        """Set value expiring after ttl."""
        seconds = to_seconds(ttl)
        if seconds is None:
            logger.error("Redis put rejected: invalid ttl", data={"key": key, "ttl": repr(ttl)})
            return False
        if seconds <= 0:
            return self.forget(key)
        if math.isinf(seconds):
            return self.put_forever(key, value)

        payload = self._encode_or_log(key, value)
        if payload is None:
            return False

        px = max(1, round(min(seconds, FOREVER_SECONDS) * 1000))
        try:
            self.client.set(self._namespaced(key), payload, px=px)
            return True
        except redis.RedisError as e:
            logger.error(f"Redis put error: {e}", data={"key": key})
            return False

    def put_forever(self, key: str, value: Any) -> bool:
        """Set value without expiry."""
        payload = self._encode_or_log(key, value)
        if payload is None:
            return False

        try:
            self.client.set(self._namespaced(key), payload)
            return True
        except redis.RedisError as e:
            logger.error(f"Redis put_forever error: {e}", data={"key": key})
            return False

    def set(self, key: str, value: Any) -> bool:
        """Replace value of an existing key, keeping its TTL."""
        payload = self._encode_or_log(key, value)
        if payload is None:
            return False

        try:
            return bool(self.client.set(self._namespaced(key), payload, keepttl=True, xx=True))
        except redis.RedisError as e:
            logger.error(f"Redis set error: {e}", data={"key": key})
            return False

    def get(self, key: str) -> Tuple[Any, bool]:
        """Get value by key."""
        raw = self._raw(key)
        if raw is None:
            return None, False
        return self._from_wire(raw), True

    def pull(self, key: str) -> Tuple[Any, bool]:
        """Get value and delete key in one transaction."""
        name = self._namespaced(key)
        try:
            with self.client.pipeline(transaction=True) as pipe:
                pipe.get(name)
                pipe.delete(name)
                raw, _ = pipe.execute()
        except redis.RedisError as e:
            logger.error(f"Redis pull error: {e}", data={"key": key})
            return None, False

        if raw is None:
            return None, False
        return self._from_wire(raw), True

    def exists(self, key: str) -> bool:
        """Check if key exists."""
        try:
            return self.client.exists(self._namespaced(key)) == 1
        except redis.RedisError as e:
            logger.error(f"Redis exists error: {e}", data={"key": key})
            return False

    def forget(self, key: str) -> bool:
        """Delete key."""
        try:
            self.client.delete(self._namespaced(key))
            return True
        except redis.RedisError as e:
            logger.error(f"Redis delete error: {e}", data={"key": key})
            return False

    def ttl(self, key: str) -> Tuple[float, bool]:
        """
        Remaining seconds until expiry.

        PTTL -2 (absent) reports ``(0.0, False)``; -1 (no expiry) reports
        ``(math.inf, True)``.
        """
        try:
            ms = self.client.pttl(self._namespaced(key))
        except redis.RedisError as e:
            logger.error(f"Redis ttl error: {e}", data={"key": key})
            return 0.0, False

        if ms == -1:
            return math.inf, True
        if ms is None or ms < 0:
            return 0.0, False
        return ms / 1000.0, True

    # ============== Typed accessors over wire text ==============

    def _numeric_value(self, key: str) -> Tuple[Any, bool]:
        value, found = self.get(key)
        if found and isinstance(value, str):
            number = parse_number(value)
            if number is not None:
                return number, True
        return value, found

    def get_bool(self, key: str, fallback: bool = False) -> Tuple[bool, bool]:
        value, found = self.get(key)
        if not found or not isinstance(value, str):
            return fallback, False
        parsed = parse_bool(value)
        if parsed is None:
            return fallback, False
        return parsed, True

    def get_bytes(self, key: str, fallback: bytes = b"") -> Tuple[bytes, bool]:
        raw = self._raw(key)
        if raw is None:
            return fallback, False
        return bytes(raw), True

    # ============== Counters ==============

    def _count(self, key: str, command: str, amount: Any = None) -> bool:
        args = [command] if amount is None else [command, amount]
        try:
            result = self._counter(keys=[self._namespaced(key)], args=args)
        except redis.ResponseError as e:
            logger.warning(f"Redis {command} rejected: {e}", data={"key": key})
            return False
        except redis.RedisError as e:
            logger.error(f"Redis {command} error: {e}", data={"key": key})
            return False
        return result is not None

    def increment(self, key: str) -> bool:
        return self._count(key, "INCR")

    def decrement(self, key: str) -> bool:
        return self._count(key, "DECR")

    def increment_by(self, key: str, delta: Union[int, float]) -> bool:
        step = _wire_number(delta)
        if step is None:
            return False
        if isinstance(step, float):
            return self._count(key, "INCRBYFLOAT", repr(step))
        return self._count(key, "INCRBY", step)

    def decrement_by(self, key: str, delta: Union[int, float]) -> bool:
        step = _wire_number(delta)
        if step is None:
            return False
        if isinstance(step, float):
            # no native DECRBYFLOAT
            return self._count(key, "INCRBYFLOAT", repr(-step))
        return self._count(key, "DECRBY", step)

    # ============== Additional Methods ==============

    def ping(self) -> bool:
        """Check Redis connection."""
        try:
            return bool(self.client.ping())
        except redis.RedisError:
            return False

    def close(self) -> None:
        """Release pooled connections."""
        self.client.close()
        if self._pool is not None:
            self._pool.disconnect()
