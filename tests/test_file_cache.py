"""Unit tests for FileCache.

Tests the disk backend:
    - Path resolution and on-disk layout
    - Lazy TTL expiry (fake clock)
    - Type-preserving records and typed accessors
    - Read-modify-write counters and concurrency
"""

import hashlib
import json
import math
import os
import time
import threading
from datetime import timedelta

import numpy as np
import pytest


@pytest.mark.unit
class TestFileCacheLayout:
    """Tests for file naming and directory handling."""

    def test_path_is_md5_of_prefix_and_key(self, file_cache, cache_dir):
        """Test file name derivation.

        ЧТО ПРОВЕРЯЕМ:
            File name is md5 hex of "prefix-key"
        """
        expected = hashlib.md5(b"test-user:42").hexdigest()
        assert file_cache.path_for("user:42") == cache_dir / expected

    def test_directory_created_on_first_write(self, file_cache, cache_dir):
        """Test lazy directory creation.

        ЧТО ПРОВЕРЯЕМ:
            Constructor does not touch disk, put() creates the directory
        """
        assert not cache_dir.exists()

        assert file_cache.put("k", "v", 60) is True

        assert cache_dir.is_dir()
        assert file_cache.path_for("k").exists()

    def test_record_is_tagged_json(self, file_cache, clock):
        """Test persisted format.

        ЧТО ПРОВЕРЯЕМ:
            File holds expires_at and a tagged value
        """
        file_cache.put("k", 7, 30)

        raw = json.loads(file_cache.path_for("k").read_text(encoding="utf-8"))

        assert raw["expires_at"] == pytest.approx(clock.now + 30)
        assert raw["value"] == {"t": "int", "v": 7}

    def test_prefixes_isolate_instances(self, cache_dir, clock):
        """Test two prefixes sharing one directory.

        ЧТО ПРОВЕРЯЕМ:
            Same key under different prefixes never collides
        """
        from cachekit.core.connectors.file_cache import FileCache

        first = FileCache("a", cache_dir, clock=clock)
        second = FileCache("b", cache_dir, clock=clock)

        first.put("shared", 1, 60)
        second.put("shared", 2, 60)

        assert first.get("shared") == (1, True)
        assert second.get("shared") == (2, True)

    def test_no_temp_files_left_behind(self, file_cache, cache_dir):
        """Test atomic write cleanup."""
        for i in range(5):
            file_cache.put("k", i, 60)
        file_cache.pull("k")
        file_cache.put("other", "x", 60)

        names = [p.name for p in cache_dir.iterdir()]
        assert names == [file_cache.path_for("other").name]


@pytest.mark.unit
class TestFileCacheExpiry:
    """Tests for lazy TTL enforcement."""

    def test_get_before_and_after_ttl(self, file_cache, clock):
        """Test expiry boundary.

        ЧТО ПРОВЕРЯЕМ:
            Value visible until ttl elapses, absent afterwards
        """
        file_cache.put("otp", "12345", 10)

        clock.advance(9.9)
        assert file_cache.get("otp") == ("12345", True)

        clock.advance(0.1)
        assert file_cache.get("otp") == (None, False)

    def test_expired_file_is_purged_on_read(self, file_cache, clock):
        """Test lazy purge.

        ЧТО ПРОВЕРЯЕМ:
            Reading an expired entry deletes its file
        """
        file_cache.put("k", "v", 5)
        path = file_cache.path_for("k")
        clock.advance(6)

        assert file_cache.exists("k") is False
        assert not path.exists()

    def test_timedelta_ttl(self, file_cache, clock):
        file_cache.put("k", "v", timedelta(minutes=2))

        remaining, found = file_cache.ttl("k")

        assert found is True
        assert remaining == pytest.approx(120)

    def test_ttl_counts_down(self, file_cache, clock):
        file_cache.put("k", "v", 60)
        clock.advance(15)

        assert file_cache.ttl("k") == (pytest.approx(45), True)

    def test_ttl_absent(self, file_cache):
        assert file_cache.ttl("missing") == (0.0, False)

    def test_put_forever_survives_decades(self, file_cache, clock):
        file_cache.put_forever("k", "v")
        clock.advance(50 * 365 * 24 * 3600)

        assert file_cache.get("k") == ("v", True)

    def test_non_positive_ttl_removes_entry(self, file_cache):
        """Test zero ttl.

        ЧТО ПРОВЕРЯЕМ:
            put() with ttl <= 0 succeeds and leaves nothing observable
        """
        file_cache.put("k", "old", 60)

        assert file_cache.put("k", "new", 0) is True
        assert file_cache.exists("k") is False

    def test_invalid_ttl_rejected(self, file_cache):
        assert file_cache.put("k", "v", "soon") is False
        assert file_cache.exists("k") is False


@pytest.mark.unit
class TestFileCacheOperations:
    """Tests for set/pull/forget semantics."""

    def test_set_preserves_expiry(self, file_cache, clock):
        """Test set() keeps the original countdown.

        ЧТО ПРОВЕРЯЕМ:
            TTL measured from put(), not from set()
        """
        file_cache.put("k", "v1", 10)
        clock.advance(6)

        assert file_cache.set("k", "v2") is True
        assert file_cache.ttl("k") == (pytest.approx(4), True)

        clock.advance(4)
        assert file_cache.get("k") == (None, False)

    def test_set_missing_key_fails(self, file_cache):
        assert file_cache.set("missing", 1) is False
        assert file_cache.exists("missing") is False

    def test_pull_returns_once(self, file_cache):
        file_cache.put("k", {"a": 1}, 60)

        assert file_cache.pull("k") == ({"a": 1}, True)
        assert file_cache.pull("k") == (None, False)
        assert file_cache.get("k") == (None, False)

    def test_pull_expired(self, file_cache, clock):
        file_cache.put("k", "v", 1)
        clock.advance(2)

        assert file_cache.pull("k") == (None, False)

    def test_forget_is_idempotent(self, file_cache):
        file_cache.put("k", "v", 60)

        assert file_cache.forget("k") is True
        assert file_cache.forget("k") is True
        assert file_cache.exists("k") is False

    def test_corrupted_file_reported_absent(self, file_cache, cache_dir):
        """Test undecodable record.

        ЧТО ПРОВЕРЯЕМ:
            Garbage on disk is absence, not an exception
        """
        file_cache.put("k", "v", 60)
        path = file_cache.path_for("k")
        path.write_text("not json", encoding="utf-8")

        assert file_cache.get("k") == (None, False)
        assert not path.exists()

    def test_unsupported_value_fails(self, file_cache):
        assert file_cache.put("k", object(), 60) is False
        assert file_cache.exists("k") is False

    def test_write_failure_reported(self, tmp_path, clock):
        """Test storage unavailable.

        ЧТО ПРОВЕРЯЕМ:
            Directory path occupied by a file -> put() returns False
        """
        from cachekit.core.connectors.file_cache import FileCache

        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        cache = FileCache("test", blocker / "cache", clock=clock)

        assert cache.put("k", "v", 60) is False
        assert cache.get("k") == (None, False)


@pytest.mark.unit
class TestFileCacheTypes:
    """Tests for type preservation across the disk round trip."""

    @pytest.mark.parametrize("value", [
        True,
        0,
        -17,
        2 ** 70,
        3.25,
        "text",
        b"\x00\xffraw",
        None,
        [1, "two", 3.0],
        (1, 2),
        {"nested": {"list": [True, None]}},
    ])
    def test_value_round_trip(self, file_cache, value):
        file_cache.put("k", value, 60)

        stored, found = file_cache.get("k")

        assert found is True
        assert stored == value
        assert type(stored) is type(value)

    def test_numpy_scalar_keeps_dtype(self, file_cache):
        file_cache.put("k", np.int16(-300), 60)

        stored, _ = file_cache.get("k")

        assert isinstance(stored, np.int16)
        assert stored == -300

    def test_none_value_is_present(self, file_cache):
        """Test stored None.

        ЧТО ПРОВЕРЯЕМ:
            None is a value; the existence flag tells it from absence
        """
        file_cache.put("k", None, 60)

        assert file_cache.get("k") == (None, True)
        assert file_cache.exists("k") is True

    def test_int_reads_as_int64_and_float64(self, file_cache):
        file_cache.put("k", 42, 60)

        as_int, ok_int = file_cache.get_int64("k", -1)
        as_float, ok_float = file_cache.get_float64("k", -1.0)

        assert ok_int and ok_float
        assert as_int == 42
        assert as_float == pytest.approx(42.0)

    def test_string_cannot_be_int(self, file_cache):
        """Test type mismatch.

        ЧТО ПРОВЕРЯЕМ:
            A stored str is never parsed by numeric accessors on disk
        """
        file_cache.put("k", "42", 60)

        assert file_cache.get_int("k", 7) == (7, False)
        assert file_cache.get_string("k", "") == ("42", True)

    def test_float_narrows_to_int(self, file_cache):
        file_cache.put("k", 9.99, 60)

        assert file_cache.get_int("k") == (9, True)
        assert file_cache.get_uint8("k") == (9, True)

    def test_out_of_range_fails(self, file_cache):
        file_cache.put("k", 300, 60)

        assert file_cache.get_int8("k", 1) == (1, False)
        assert file_cache.get_uint8("k", 1) == (1, False)
        assert file_cache.get_int16("k", 1) == (300, True)

    def test_negative_unsigned_fails(self, file_cache):
        file_cache.put("k", -1, 60)

        assert file_cache.get_uint("k", 5) == (5, False)
        assert file_cache.get_uint64("k", 5) == (5, False)
        assert file_cache.get_int32("k", 5) == (-1, True)

    def test_float32(self, file_cache):
        file_cache.put("k", 0.1, 60)

        value, ok = file_cache.get_float32("k")

        assert ok is True
        assert isinstance(value, np.float32)
        assert value == np.float32(0.1)

    def test_bool_accessor(self, file_cache):
        file_cache.put("flag", True, 60)
        file_cache.put("number", 1, 60)

        assert file_cache.get_bool("flag") == (True, True)
        assert file_cache.get_bool("number", False) == (False, False)
        assert file_cache.get_int("flag", 0) == (0, False)

    def test_bytes_accessor(self, file_cache):
        file_cache.put("blob", b"\x01\x02", 60)
        file_cache.put("text", "abc", 60)

        assert file_cache.get_bytes("blob") == (b"\x01\x02", True)
        assert file_cache.get_bytes("text", b"-") == (b"-", False)
        assert file_cache.get_string("blob", "-") == ("-", False)

    def test_accessors_on_missing_key(self, file_cache):
        assert file_cache.get_int("missing", 3) == (3, False)
        assert file_cache.get_float64("missing", 1.5) == (1.5, False)
        assert file_cache.get_string("missing", "x") == ("x", False)


@pytest.mark.unit
class TestFileCacheCounters:
    """Tests for read-modify-write counters."""

    def test_increment_decrement(self, file_cache):
        file_cache.put("n", 5, 60)

        assert file_cache.increment("n") is True
        assert file_cache.increment_by("n", 10) is True
        assert file_cache.decrement("n") is True
        assert file_cache.decrement_by("n", 4) is True

        assert file_cache.get("n") == (11, True)

    def test_integer_stays_integer(self, file_cache):
        file_cache.put("n", 1, 60)
        file_cache.increment("n")

        value, _ = file_cache.get("n")
        assert type(value) is int

    def test_float_delta_round_trip(self, file_cache):
        file_cache.put("n", 10, 60)

        assert file_cache.increment_by("n", 2.5) is True
        assert file_cache.get_float64("n") == (pytest.approx(12.5), True)
        assert file_cache.decrement_by("n", 2.5) is True
        assert file_cache.get_float64("n") == (pytest.approx(10.0), True)

    def test_counter_preserves_ttl(self, file_cache, clock):
        file_cache.put("n", 3, 30)
        clock.advance(10)

        file_cache.decrement("n")

        assert file_cache.ttl("n") == (pytest.approx(20), True)

    def test_missing_key_fails(self, file_cache):
        assert file_cache.increment("missing") is False
        assert file_cache.exists("missing") is False

    def test_non_numeric_fails_unchanged(self, file_cache):
        file_cache.put("s", "abc", 60)

        assert file_cache.increment("s") is False
        assert file_cache.get("s") == ("abc", True)

    def test_non_numeric_delta_fails(self, file_cache):
        file_cache.put("n", 1, 60)

        assert file_cache.increment_by("n", "2") is False
        assert file_cache.increment_by("n", True) is False
        assert file_cache.get("n") == (1, True)

    def test_concurrent_increments_in_process(self, file_cache):
        """Test striped locks.

        ЧТО ПРОВЕРЯЕМ:
            Threads of one process never lose an increment
        """
        file_cache.put("n", 0, 600)

        def worker():
            for _ in range(25):
                file_cache.increment("n")

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert file_cache.get("n") == (200, True)

    def test_concurrent_pull_single_winner(self, file_cache):
        """Test pull atomicity.

        ЧТО ПРОВЕРЯЕМ:
            Exactly one of many concurrent pulls gets the value
        """
        file_cache.put("k", "secret", 60)
        results = []
        barrier = threading.Barrier(8)

        def worker():
            barrier.wait()
            results.append(file_cache.pull("k"))

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert results.count(("secret", True)) == 1
        assert results.count((None, False)) == 7


@pytest.mark.unit
class TestFileCacheTTLEdges:
    """Tests for non-finite TTLs."""

    def test_nan_ttl_stores_nothing(self, file_cache, clock):
        """Test NaN TTL.

        ЧТО ПРОВЕРЯЕМ:
            put() fails instead of writing a record that never expires
        """
        assert file_cache.put("k", "v", float("nan")) is False
        clock.advance(1e9)

        assert file_cache.exists("k") is False
        assert not file_cache.path_for("k").exists()

    def test_infinite_ttl_is_forever(self, file_cache, clock):
        file_cache.put("k", "v", math.inf)
        clock.advance(50 * 365 * 24 * 3600)

        assert file_cache.get("k") == ("v", True)

    def test_nan_expiry_on_disk_is_discarded(self, file_cache, cache_dir):
        cache_dir.mkdir()
        path = file_cache.path_for("k")
        path.write_text(json.dumps({"expires_at": "NaN", "value": {"t": "str", "v": "v"}}))

        assert file_cache.get("k") == (None, False)
        assert not path.exists()


@pytest.mark.unit
class TestFileCacheLimits:
    def test_deeply_nested_value_fails(self, file_cache):
        """Test recursion limit.

        ЧТО ПРОВЕРЯЕМ:
            A value nested past the recursion limit is rejected, not raised
        """
        nested = []
        for _ in range(5000):
            nested = [nested]

        assert file_cache.put("k", nested, 60) is False
        assert file_cache.exists("k") is False

    def test_failed_put_keeps_previous_value(self, file_cache):
        file_cache.put("k", "old", 60)

        assert file_cache.put("k", 10 ** 5000, 60) is False
        assert file_cache.get("k") == ("old", True)


@pytest.mark.unit
class TestFileCacheCounterTypes:
    """Tests for dtype preservation through counters."""

    def test_int8_keeps_dtype(self, file_cache):
        file_cache.put("n", np.int8(5), 60)

        assert file_cache.increment("n") is True

        value, found = file_cache.get("n")
        assert found is True
        assert isinstance(value, np.int8)
        assert value == 6

    def test_int8_overflow_fails(self, file_cache):
        file_cache.put("n", np.int8(127), 60)

        assert file_cache.increment("n") is False

        value, _ = file_cache.get("n")
        assert isinstance(value, np.int8)
        assert value == 127

    def test_uint8_below_zero_fails(self, file_cache):
        file_cache.put("n", np.uint8(0), 60)

        assert file_cache.decrement("n") is False
        assert file_cache.get_uint8("n") == (0, True)

    def test_float32_keeps_dtype(self, file_cache):
        file_cache.put("n", np.float32(1.5), 60)

        assert file_cache.increment_by("n", 1) is True

        value, _ = file_cache.get("n")
        assert isinstance(value, np.float32)
        assert value == np.float32(2.5)

    def test_int_dtype_with_float_delta_becomes_float(self, file_cache):
        file_cache.put("n", np.int16(10), 60)

        assert file_cache.increment_by("n", 0.5) is True
        assert file_cache.get("n") == (10.5, True)
        assert type(file_cache.get("n")[0]) is float


@pytest.mark.unit
class TestFileCacheClaims:
    """Tests for pull claim files."""

    def _claim(self, file_cache, cache_dir, key, age):
        cache_dir.mkdir(exist_ok=True)
        claim = cache_dir / f"{file_cache.path_for(key).name}.pull-deadbeef"
        claim.write_text("{}")
        stamp = time.time() - age
        os.utime(claim, (stamp, stamp))
        return claim

    def test_pull_leaves_no_claim(self, file_cache, cache_dir):
        file_cache.put("k", "v", 60)

        file_cache.pull("k")

        assert list(cache_dir.iterdir()) == []

    def test_stale_claim_swept_on_open(self, file_cache, cache_dir, clock):
        """Test crash recovery.

        ЧТО ПРОВЕРЯЕМ:
            Claims abandoned by a dead pull are removed when a cache opens
        """
        from cachekit.core.connectors.file_cache import FileCache

        stale = self._claim(file_cache, cache_dir, "old", age=3600)
        fresh = self._claim(file_cache, cache_dir, "new", age=0)

        FileCache(prefix="test", directory=cache_dir, clock=clock)

        assert not stale.exists()
        assert fresh.exists()

    def test_purge_returns_count(self, file_cache, cache_dir):
        self._claim(file_cache, cache_dir, "a", age=3600)
        self._claim(file_cache, cache_dir, "b", age=3600)

        assert file_cache.purge_stale_claims() == 2
        assert file_cache.purge_stale_claims() == 0

    def test_missing_directory(self, file_cache):
        assert file_cache.purge_stale_claims() == 0
