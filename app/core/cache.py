# app/core/cache.py - In-process TTL cache for derived statistics
import logging
import threading
from typing import Any, Callable, Optional

from cachetools import TLRUCache

from app.core.config import settings

logger = logging.getLogger(__name__)

_MISSING = object()


def _expires_at(key: str, entry: tuple, now: float) -> float:
    timeout, _ = entry
    return now + timeout


class CacheManager:
    """Thread-safe key/value cache with per-entry expiry and LRU eviction"""

    def __init__(self, default_timeout: Optional[float] = None, max_entries: Optional[int] = None):
        self.default_timeout = default_timeout or settings.CACHE_DEFAULT_TIMEOUT
        self.max_entries = max_entries or settings.CACHE_MAX_ENTRIES
        # Entries are stored as (timeout, value) so each key can carry its own TTL
        self._store = TLRUCache(maxsize=self.max_entries, ttu=_expires_at)
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: str, default: Any = None) -> Any:
        """Get value from cache."""
        with self._lock:
            entry = self._store.get(key, _MISSING)
            if entry is _MISSING:
                self.misses += 1
                return default
            self.hits += 1
            return entry[1]

    def set(self, key: str, value: Any, timeout: Optional[float] = None) -> None:
        """Set value in cache."""
        with self._lock:
            self._store[key] = (timeout or self.default_timeout, value)

    def get_or_set(self, key: str, factory: Callable[[], Any], timeout: Optional[float] = None) -> Any:
        value = self.get(key, _MISSING)
        if value is _MISSING:
            value = factory()
            self.set(key, value, timeout)
        return value

    def delete(self, key: str) -> bool:
        """Delete key from cache."""
        with self._lock:
            return self._store.pop(key, _MISSING) is not _MISSING

    def delete_prefix(self, prefix: str) -> int:
        """Delete every key starting with prefix; returns the number removed"""
        with self._lock:
            self._store.expire()
            keys = [key for key in list(self._store.keys()) if key.startswith(prefix)]
            for key in keys:
                self._store.pop(key, None)
        if keys:
            logger.debug(f"Cache invalidated {len(keys)} keys under {prefix}")
        return len(keys)

    def exists(self, key: str) -> bool:
        """Check if key exists in cache."""
        return self.get(key, _MISSING) is not _MISSING

    def clear(self) -> None:
        with self._lock:
            self._store.clear()

    def stats(self) -> dict:
        with self._lock:
            self._store.expire()
            size = len(self._store)
        return {"entries": size, "hits": self.hits, "misses": self.misses}


# Global cache instance
cache = CacheManager()


def get_cache() -> CacheManager:
    """Dependency to get cache instance."""
    return cache
