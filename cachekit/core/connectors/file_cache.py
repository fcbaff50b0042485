"""
FileCache - on-disk cache implementation.

One file per entry, named by the md5 of ``prefix + "-" + key``; the body
is a JSON CacheRecord with a tagged value. Expiry is enforced lazily: a
read that finds an expired (or undecodable) record deletes the file and
reports absence. There is no background sweep.

Consistency:
- Writes go through a temp file and ``os.replace``, so readers see the
  old record or the new one, never a partial file.
- ``pull`` claims the file by rename before reading it, so exactly one
  caller receives the value, even across processes.
- Counters and ``set`` are read-modify-write. Striped per-key locks make
  them safe between threads of one process only; two processes mutating
  the same key can still lose an update (last write wins).
"""

import contextlib
import hashlib
import math
import os
import tempfile
import threading
import time
import uuid
from pathlib import Path
from typing import Any, Callable, Optional, Tuple, Union

from cachekit.common.logging import get_logger
from cachekit.core.cache import BaseCache, CacheRecord, to_seconds
from cachekit.core.cache.coercion import as_python_number, keep_dtype
from cachekit.core.errors import SerializationError
from cachekit.core.interfaces import TTL

logger = get_logger(__name__)


class FileCache(BaseCache):
    """
    File-based cache implementation.

    Implements CacheProtocol without any server. The directory is created
    on first write.

    A process that dies inside ``pull`` leaves its ``<md5>.pull-<hex>``
    claim file behind. Claims older than CLAIM_STALE_SECONDS are swept
    when a cache is opened on the directory (see ``purge_stale_claims``).
    """

    LOCK_STRIPES = 64
    CLAIM_STALE_SECONDS = 60.0

    def __init__(
        self,
        prefix: str,
        directory: Union[str, Path],
        clock: Callable[[], float] = time.time,
    ):
        """
        Initialize file cache.

        Args:
            prefix: Key prefix for namespacing
            directory: Directory holding the cache files
            clock: Time source (epoch seconds), injectable for tests
        """
        super().__init__(prefix)
        self.directory = Path(directory).expanduser()
        self._clock = clock
        self._locks = [threading.RLock() for _ in range(self.LOCK_STRIPES)]
        logger.debug(f"File cache initialized: {self.directory}")
        self.purge_stale_claims()

    # ============== Storage helpers ==============

    def purge_stale_claims(self) -> int:
        """Delete claim files abandoned by an interrupted ``pull``."""
        if not self.directory.is_dir():
            return 0
        cutoff = time.time() - self.CLAIM_STALE_SECONDS
        removed = 0
        for claim in self.directory.glob("*.pull-*"):
            try:
                claimed_at = claim.stat().st_mtime
            except OSError:
                continue
            # pull touches the claim right after renaming it
            if claimed_at < cutoff and self._unlink(claim):
                removed += 1
        if removed:
            logger.info(
                "Removed stale pull claims",
                data={"directory": str(self.directory), "count": removed},
            )
        return removed

    def path_for(self, key: str) -> Path:
        """Resolve the file holding ``key``."""
        digest = hashlib.md5(f"{self.prefix}-{key}".encode("utf-8")).hexdigest()
        return self.directory / digest

    def _lock_for(self, path: Path) -> threading.RLock:
        return self._locks[int(path.name[:8], 16) % self.LOCK_STRIPES]

    def _unlink(self, path: Path) -> bool:
        try:
            path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.error(f"File cache delete error: {e}", data={"path": str(path)})
            return False
        return True

    def _read(self, path: Path) -> Optional[CacheRecord]:
        """Load a live record, purging expired or undecodable files."""
        try:
            data = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.error(f"File cache read error: {e}", data={"path": str(path)})
            return None

        try:
            record = CacheRecord.deserialize(data)
        except SerializationError:
            logger.warning("Discarding undecodable cache file", data={"path": str(path)})
            self._unlink(path)
            return None

        if record.is_expired(self._clock()):
            logger.debug("Purging expired cache file", data={"path": str(path)})
            self._unlink(path)
            return None

        return record

    def _write(self, path: Path, record: CacheRecord) -> bool:
        """Replace the file at ``path`` with ``record``."""
        try:
            payload = record.serialize()
        except SerializationError as e:
            logger.warning(f"File cache cannot encode value: {e.message}", data=e.data)
            return False

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".tmp-")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.chmod(tmp_name, 0o644)
                os.replace(tmp_name, path)
            except BaseException:
                with contextlib.suppress(OSError):
                    os.unlink(tmp_name)
                raise
        except OSError as e:
            logger.error(f"File cache write error: {e}", data={"path": str(path)})
            return False

        return True

    # ============== CacheProtocol Implementation ==============

    def put(self, key: str, value: Any, ttl: TTL) -> bool:
        """Create or overwrite an entry expiring after ttl."""
        seconds = to_seconds(ttl)
        if seconds is None:
            logger.error("File cache put rejected: invalid ttl", data={"key": key, "ttl": repr(ttl)})
            return False
        if seconds <= 0:
            return self.forget(key)
        if math.isinf(seconds):
            return self.put_forever(key, value)

        path = self.path_for(key)
        with self._lock_for(path):
            return self._write(path, CacheRecord.with_ttl(value, seconds, self._clock()))

    def put_forever(self, key: str, value: Any) -> bool:
        """Create or overwrite an entry without expiry."""
        path = self.path_for(key)
        with self._lock_for(path):
            return self._write(path, CacheRecord.forever(value, self._clock()))

    def set(self, key: str, value: Any) -> bool:
        """Replace the value of an existing entry, keeping its expiry."""
        path = self.path_for(key)
        with self._lock_for(path):
            record = self._read(path)
            if record is None:
                return False
            record.value = value
            return self._write(path, record)

    def get(self, key: str) -> Tuple[Any, bool]:
        """Get value by key."""
        path = self.path_for(key)
        with self._lock_for(path):
            record = self._read(path)
        if record is None:
            return None, False
        return record.value, True

    def pull(self, key: str) -> Tuple[Any, bool]:
        """Get value and remove the entry."""
        path = self.path_for(key)
        claim = path.with_name(f"{path.name}.pull-{uuid.uuid4().hex}")
        with self._lock_for(path):
            try:
                os.rename(path, claim)
            except FileNotFoundError:
                return None, False
            except OSError as e:
                logger.error(f"File cache pull error: {e}", data={"key": key})
                return None, False
            with contextlib.suppress(OSError):
                os.utime(claim)

            try:
                record = self._read(claim)
            finally:
                self._unlink(claim)

        if record is None:
            return None, False
        return record.value, True

    def exists(self, key: str) -> bool:
        """Check if key exists and not expired."""
        return self.get(key)[1]

    def forget(self, key: str) -> bool:
        """Delete key."""
        path = self.path_for(key)
        with self._lock_for(path):
            return self._unlink(path)

    def ttl(self, key: str) -> Tuple[float, bool]:
        """Remaining seconds until the entry expires."""
        path = self.path_for(key)
        with self._lock_for(path):
            record = self._read(path)
        if record is None:
            return 0.0, False
        return record.remaining(self._clock()), True

    def increment_by(self, key: str, delta: Union[int, float]) -> bool:
        return self._add(key, delta, 1)

    def decrement_by(self, key: str, delta: Union[int, float]) -> bool:
        return self._add(key, delta, -1)

    def _add(self, key: str, delta: Union[int, float], sign: int) -> bool:
        """Read-modify-write the numeric value of ``key``."""
        step = as_python_number(delta)
        if step is None:
            return False

        path = self.path_for(key)
        with self._lock_for(path):
            record = self._read(path)
            if record is None:
                return False
            current = as_python_number(record.value)
            if current is None:
                return False
            try:
                result = current + sign * step
            except OverflowError:
                return False
            value, ok = keep_dtype(record.value, result)
            if not ok:
                return False
            record.value = value
            return self._write(path, record)
