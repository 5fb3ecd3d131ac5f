"""In-memory caching for weather responses.

Dictionary-based LRU cache with optional TTL and hit/miss statistics.
"""

import time
from dataclasses import dataclass
from threading import Lock
from typing import Any


@dataclass
class CacheStats:
    """Statistics for a cache instance."""
    hits: int = 0
    misses: int = 0
    size: int = 0
    max_size: int = 0

    @property
    def hit_rate(self) -> str:
        """Return hit rate as percentage string."""
        total = self.hits + self.misses
        if total == 0:
            return "0.0%"
        return f"{(self.hits / total * 100):.1f}%"

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            "hit_rate": self.hit_rate,
            "hits": self.hits,
            "misses": self.misses,
            "size": self.size,
            "max_size": self.max_size,
        }


class DictCache:
    """Thread-safe dictionary cache with LRU eviction and optional TTL."""

    def __init__(self, max_size: int, ttl_seconds: float | None = None):
        self.max_size = max_size
        self.ttl = ttl_seconds
        self._cache: dict[Any, tuple[Any, float]] = {}
        self._lock = Lock()
        self._hits = 0
        self._misses = 0

    def get(self, key: Any) -> Any | None:
        """Get cached value if available and not expired."""
        with self._lock:
            if key in self._cache:
                value, timestamp = self._cache[key]
                if self.ttl is None or (time.time() - timestamp < self.ttl):
                    # Re-insert to mark as most recently used
                    del self._cache[key]
                    self._cache[key] = (value, timestamp)
                    self._hits += 1
                    return value
                del self._cache[key]
            self._misses += 1
            return None

    def set(self, key: Any, value: Any) -> None:
        """Store value in cache with LRU eviction."""
        with self._lock:
            self._cache.pop(key, None)
            self._cache[key] = (value, time.time())
            # Dicts keep insertion order, so the first keys are least recently used
            while len(self._cache) > self.max_size:
                del self._cache[next(iter(self._cache))]

    def clear(self) -> int:
        """Clear all cached entries. Returns number of entries cleared."""
        with self._lock:
            count = len(self._cache)
            self._cache.clear()
            self._hits = 0
            self._misses = 0
            return count

    def stats(self) -> CacheStats:
        """Return cache statistics."""
        with self._lock:
            return CacheStats(
                hits=self._hits,
                misses=self._misses,
                size=len(self._cache),
                max_size=self.max_size,
            )
