"""Caching of search results and counts.

Keys include the store version, so any mutation makes every older entry
unreachable; entries are never served across a store change.
"""

import threading
import time
from collections import OrderedDict
from typing import Any, Hashable

from closet_filter.models.filter_state import FilterState


class TTLCache:
    """Simple TTL cache with max size limit (LRU eviction)."""

    def __init__(self, maxsize: int = 128, ttl: int = 3600):
        """Initialize cache.

        Args:
            maxsize: Maximum number of items to cache
            ttl: Time-to-live in seconds
        """
        self.maxsize = maxsize
        self.ttl = ttl
        self._cache: OrderedDict[Hashable, tuple[float, Any]] = OrderedDict()
        self._lock = threading.Lock()
        self.hits = 0
        self.misses = 0

    def get(self, key: Hashable) -> Any | None:
        """Get item from cache if not expired."""
        with self._lock:
            if key not in self._cache:
                self.misses += 1
                return None

            timestamp, value = self._cache[key]
            if time.monotonic() - timestamp > self.ttl:
                del self._cache[key]
                self.misses += 1
                return None

            # Move to end (most recently used)
            self._cache.move_to_end(key)
            self.hits += 1
            return value

    def set(self, key: Hashable, value: Any) -> None:
        """Set item in cache."""
        with self._lock:
            self._cache.pop(key, None)
            # Remove oldest items if at capacity
            while len(self._cache) >= self.maxsize:
                self._cache.popitem(last=False)
            self._cache[key] = (time.monotonic(), value)

    def clear(self) -> None:
        """Clear all cached items and reset counters."""
        with self._lock:
            self._cache.clear()
            self.hits = 0
            self.misses = 0

    def __len__(self) -> int:
        return len(self._cache)

    def stats(self) -> dict[str, int]:
        return {
            "size": len(self._cache),
            "maxsize": self.maxsize,
            "ttl": self.ttl,
            "hits": self.hits,
            "misses": self.misses,
        }


def make_filter_key(state: FilterState) -> str:
    """Order-independent key for a filter state."""
    sizes = ",".join(str(s) for s in sorted(state.size_filters))
    colors = ",".join(sorted(state.color_filters))
    categories = ",".join(sorted(state.category_filters))
    return f"sizes:{sizes}|colors:{colors}|categories:{categories}|search:{state.search_text}"


def make_cache_key(kind: str, version: int, state: FilterState, *extra: Any) -> tuple:
    """Cache key for a query of ``kind`` against a given store version."""
    return (kind, version, make_filter_key(state), *extra)
