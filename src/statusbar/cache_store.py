"""File-backed key/value cache shared by the slow collectors.

Entries live under a per-repository directory (the git common dir, so linked
worktrees share one cache). A TTL entry is two sibling files:

    <key>            the value
    <key>.timestamp  integer epoch seconds of the write

There is no locking. Concurrent writers may interleave, but every value is a
re-derivation of the same external state and the timestamp is always written
after the data, so a reader never pairs a fresh timestamp with missing data.
"""

from __future__ import annotations

import logging
from pathlib import Path

from statusbar.gateway.time.abc import Time

logger = logging.getLogger(__name__)

TIMESTAMP_SUFFIX = ".timestamp"


class CacheStore:
    """Per-invocation cache handle rooted at one directory.

    Constructed once per status line run and passed to each collector.
    No method raises: unreadable or corrupt files are misses and failed
    writes are dropped.
    """

    def __init__(self, *, root: Path, time: Time) -> None:
        self._root = root
        self._time = time

    @property
    def root(self) -> Path:
        return self._root

    def path(self, key: str) -> Path:
        """Location of the data file for key."""
        return self._root / key

    def read(self, key: str, ttl_seconds: float) -> str | None:
        """Return the cached value if both files exist and the entry is fresh.

        Args:
            key: Cache key (may contain "/" for nested names such as branches)
            ttl_seconds: Maximum age of the entry

        Returns:
            The stripped value, or None on a miss, stale entry or corrupt file
        """
        data_path = self.path(key)
        timestamp_path = data_path.with_name(data_path.name + TIMESTAMP_SUFFIX)
        try:
            written_at = int(timestamp_path.read_text(encoding="utf-8").strip())
        except (OSError, ValueError):
            return None

        if self._time.now() - written_at >= ttl_seconds:
            return None

        try:
            return data_path.read_text(encoding="utf-8").strip()
        except (OSError, UnicodeDecodeError):
            return None

    def write(self, key: str, value: str) -> None:
        """Store value with the current time. Data first, timestamp last."""
        data_path = self.path(key)
        timestamp_path = data_path.with_name(data_path.name + TIMESTAMP_SUFFIX)
        try:
            data_path.parent.mkdir(parents=True, exist_ok=True)
            data_path.write_text(value, encoding="utf-8")
            timestamp_path.write_text(str(int(self._time.now())), encoding="utf-8")
        except OSError as e:
            logger.debug("Cache write failed for %s: %s", key, e)

    def read_raw(self, key: str) -> str | None:
        """Read a single-file entry that carries no timestamp."""
        try:
            return self.path(key).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError):
            return None

    def write_raw(self, key: str, value: str) -> None:
        data_path = self.path(key)
        try:
            data_path.parent.mkdir(parents=True, exist_ok=True)
            data_path.write_text(value, encoding="utf-8")
        except OSError as e:
            logger.debug("Cache write failed for %s: %s", key, e)

    def age_seconds(self, key: str) -> float | None:
        """Seconds since the data file for key was last modified, if it exists."""
        try:
            mtime = self.path(key).stat().st_mtime
        except OSError:
            return None
        return self._time.now() - mtime
