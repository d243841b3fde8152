"""Time-bounded cache of raw model responses."""

import hashlib
import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)


def make_cache_key(kind: str, content: str) -> str:
    """Derive the cache key for a prompt of a given analysis kind.

    Uses a digest over the full content, so two prompts that share a long
    common prefix and the same length still get distinct keys.
    """
    digest = hashlib.sha256(content.encode("utf-8")).hexdigest()
    return f"{kind}:{digest}:{len(content)}"


@dataclass(frozen=True)
class CacheEntry:
    """A cached model response and the monotonic time it was stored."""

    key: str
    response: str
    timestamp: float


class AnalysisCache:
    """Memoizes model responses for a fixed time-to-live.

    Expiry is checked on every read, so a stale entry is never returned even
    if cleanup has not run yet. The entry bound is enforced by cleanup(),
    not on insert.

    Example usage:
        cache = AnalysisCache(ttl=300, max_entries=1000)
        key = make_cache_key("summary", prompt)
        if (cached := cache.get(key)) is None:
            cache.set(key, call_model(prompt))
    """

    def __init__(
        self,
        ttl: float = 300.0,
        max_entries: int = 1000,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the cache.

        Args:
            ttl: Seconds an entry stays valid.
            max_entries: Upper bound enforced by cleanup().
            clock: Monotonic time source (injectable for tests).
        """
        self._ttl = ttl
        self._max_entries = max_entries
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def _is_live(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.timestamp < self._ttl

    def get(self, key: str) -> Optional[str]:
        """Return the cached response for key, or None if absent or expired."""
        now = self._clock()
        with self._lock:
            entry = self._entries.get(key)
            if entry is None or not self._is_live(entry, now):
                return None
            return entry.response

    def set(self, key: str, response: str) -> None:
        """Store (or overwrite) a response under key."""
        with self._lock:
            self._entries[key] = CacheEntry(key=key, response=response, timestamp=self._clock())

    def cleanup(self) -> int:
        """Drop expired entries, then the oldest ones beyond max_entries.

        Returns:
            Number of entries removed.
        """
        now = self._clock()
        with self._lock:
            before = len(self._entries)
            self._entries = {
                key: entry for key, entry in self._entries.items() if self._is_live(entry, now)
            }
            overflow = len(self._entries) - self._max_entries
            if overflow > 0:
                oldest = sorted(self._entries.values(), key=lambda e: e.timestamp)[:overflow]
                for entry in oldest:
                    del self._entries[entry.key]
            removed = before - len(self._entries)

        if removed:
            logger.debug("Cache cleanup removed %d entries", removed)
        return removed

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    @property
    def ttl(self) -> float:
        return self._ttl

    @property
    def max_entries(self) -> int:
        return self._max_entries
