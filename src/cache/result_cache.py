"""In-process TTL cache shared by the content gateway and per-user views.

Resolving one user's pages can take dozens of remote calls, and the same
space listings and page subtrees are consulted for many users, so every layer
memoizes through a single ResultCache. Entries expire after their TTL and can
be dropped explicitly by key or key prefix.
"""

import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar('T')

_MISSING = object()


@dataclass
class CacheEntry:
    """A cached value and the monotonic time it expires at."""
    key: str
    value: Any
    expires_at: float


class ResultCache:
    """Thread-safe key/value memoization with per-entry TTL.

    Reads and writes to the entry map are serialized by a lock; compute
    functions run outside the lock, so two requests missing the same key at
    the same moment may both compute it (the last write wins).

    Example:
        >>> cache = ResultCache()
        >>> spaces = cache.get_or_compute("confluence:spaces", 1800, api_fetch_spaces)
        >>> cache.invalidate("confluence:spaces")
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        """Initialize an empty cache.

        Args:
            clock: Monotonic clock in seconds (injectable for tests)
        """
        self._clock = clock
        self._entries: Dict[str, CacheEntry] = {}
        self._lock = threading.Lock()

    def _lookup(self, key: str) -> Any:
        """Return the live value for key or _MISSING. Caller holds the lock."""
        entry = self._entries.get(key)
        if entry is None:
            return _MISSING
        if entry.expires_at <= self._clock():
            del self._entries[key]
            return _MISSING
        return entry.value

    def get(self, key: str, default: Any = None) -> Any:
        with self._lock:
            value = self._lookup(key)
        return default if value is _MISSING else value

    def set(self, key: str, value: Any, ttl: float) -> None:
        """Store value under key for ttl seconds. A non-positive ttl stores nothing."""
        if ttl <= 0:
            return
        with self._lock:
            self._entries[key] = CacheEntry(key, value, self._clock() + ttl)

    def get_or_compute(self, key: str, ttl: float, compute: Callable[[], T]) -> T:
        """Return the cached value for key, computing and storing it on a miss.

        If compute raises, nothing is stored and the exception propagates.

        Args:
            key: Cache key
            ttl: Time to live in seconds for a freshly computed value
            compute: Zero-argument function producing the value

        Returns:
            The cached or freshly computed value
        """
        with self._lock:
            value = self._lookup(key)
        if value is not _MISSING:
            logger.debug(f"Cache hit: {key}")
            return value

        logger.debug(f"Cache miss: {key}")
        value = compute()
        self.set(key, value, ttl)
        return value

    def invalidate(self, key: str) -> bool:
        """Remove key immediately. Returns True if an entry was removed."""
        with self._lock:
            removed = self._entries.pop(key, None) is not None
        if removed:
            logger.debug(f"Cache invalidated: {key}")
        return removed

    def invalidate_prefix(self, prefix: str) -> int:
        """Remove every key starting with prefix. Returns the number removed."""
        with self._lock:
            doomed = [key for key in self._entries if key.startswith(prefix)]
            for key in doomed:
                del self._entries[key]
        if doomed:
            logger.debug(f"Cache invalidated {len(doomed)} entries under {prefix}")
        return len(doomed)

    def clear(self) -> None:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info(f"Cleared {count} cached Confluence entries")

    def __len__(self) -> int:
        with self._lock:
            now = self._clock()
            return sum(1 for entry in self._entries.values() if entry.expires_at > now)
