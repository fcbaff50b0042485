"""
Pytest configuration for cachekit tests.

Adds project root to sys.path so that 'from cachekit...' imports work
without installation. Defines markers and shared fixtures.

The live Redis fixture connects to REDIS_URL (default
redis://localhost:6379/0) and skips when no server answers; the
fakeredis fixture runs the same Redis code path in-process.
"""
import os
import sys
import uuid
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# Pytest Markers
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (requires services like Redis)")
    config.addinivalue_line("markers", "requires_redis: Requires Redis service")
    config.addinivalue_line("markers", "slow: Slow tests (wait for real TTL expiry)")


# =============================================================================
# Shared Fixtures
# =============================================================================

class FakeClock:
    """Manually advanced epoch clock for FileCache."""

    def __init__(self, start: float = 1_700_000_000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache_dir(tmp_path) -> Path:
    """Not-yet-existing cache directory inside tmp_path."""
    return tmp_path / "cache"


@pytest.fixture
def file_cache(cache_dir, clock):
    """FileCache on a fake clock."""
    from cachekit.core.connectors.file_cache import FileCache
    return FileCache(prefix="test", directory=cache_dir, clock=clock)


@pytest.fixture
def mock_redis():
    """MagicMock standing in for redis.Redis."""
    client = MagicMock(name="redis_client")
    client.counter_script = MagicMock(name="counter_script")
    client.register_script.return_value = client.counter_script
    return client


@pytest.fixture
def mocked_redis_cache(mock_redis):
    from cachekit.core.connectors.redis_cache import RedisCache
    return RedisCache(prefix="test", client=mock_redis)


@pytest.fixture
def redis_cache():
    """
    RedisCache against a live server, isolated by a random prefix.

    Skips the test when Redis is not reachable.
    """
    import redis
    from cachekit.core.connectors.redis_cache import RedisCache

    url = os.getenv("REDIS_URL", "redis://localhost:6379/0")
    admin = redis.Redis.from_url(url, socket_connect_timeout=1)
    try:
        admin.ping()
    except redis.RedisError:
        admin.close()
        pytest.skip(f"Redis not available at {url}")

    prefix = f"cachekit-test-{uuid.uuid4().hex[:8]}"
    cache = RedisCache(prefix=prefix, host=url, max_active=4)

    yield cache

    for name in admin.scan_iter(match=f"{prefix}-*"):
        admin.delete(name)
    cache.close()
    admin.close()


@pytest.fixture
def fake_redis_cache():
    """
    RedisCache on an in-process fakeredis server.

    Runs the real commands (Lua counter script, KEEPTTL XX, MULTI/EXEC)
    without a Redis service.
    """
    import fakeredis
    from cachekit.core.connectors.redis_cache import RedisCache

    client = fakeredis.FakeRedis(server=fakeredis.FakeServer())
    cache = RedisCache(prefix="fake", client=client)

    yield cache

    client.close()


@pytest.fixture(params=[
    "file",
    "fakeredis",
    pytest.param("redis", marks=pytest.mark.requires_redis),
])
def any_cache(request, tmp_path):
    """Each backend in turn, on real time."""
    if request.param == "file":
        from cachekit.core.connectors.file_cache import FileCache
        return FileCache(prefix="contract", directory=tmp_path / "cache")
    if request.param == "fakeredis":
        return request.getfixturevalue("fake_redis_cache")
    return request.getfixturevalue("redis_cache")
