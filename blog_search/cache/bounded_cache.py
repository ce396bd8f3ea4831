"""
bounded_cache.py
----------------
Thread-safe Least Recently Used (LRU) cache with per-entry time-to-live.
Used by the query engine to memoize results per query type.
"""

import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Generic, Hashable, Optional, TypeVar

from blog_search.shared.config import DEFAULT_CACHE_CAPACITY, DEFAULT_CACHE_TTL_SECONDS

K = TypeVar("K", bound=Hashable)
V = TypeVar("V")


@dataclass(frozen=True)
class CacheStats:
    """Snapshot of cumulative cache counters."""
    hits: int = 0
    misses: int = 0
    puts: int = 0
    removals: int = 0
    evictions: int = 0

    @property
    def requests(self) -> int:
        return self.hits + self.misses

    @property
    def hit_rate(self) -> float:
        """Fraction of lookups that hit, 0.0 before any lookup."""
        return self.hits / self.requests if self.requests else 0.0

    @property
    def miss_rate(self) -> float:
        return self.misses / self.requests if self.requests else 0.0

    def __add__(self, other: "CacheStats") -> "CacheStats":
        return CacheStats(
            hits=self.hits + other.hits,
            misses=self.misses + other.misses,
            puts=self.puts + other.puts,
            removals=self.removals + other.removals,
            evictions=self.evictions + other.evictions,
        )

    def __str__(self) -> str:
        return (f"Hits: {self.hits} | Misses: {self.misses} | Hit rate: {self.hit_rate:.2%} | "
                f"Puts: {self.puts} | Removals: {self.removals} | Evictions: {self.evictions}")


@dataclass
class CacheEntry(Generic[V]):
    value: V
    expires_at: float  # absolute clock time, 0 = never expires

    def is_expired(self, now: float) -> bool:
        return self.expires_at > 0 and now > self.expires_at


class BoundedCache(Generic[K, V]):
    """
    LRU cache bounded by entry count, with optional expiry per entry.
    Recency is the OrderedDict order: oldest first, most recently used last.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CACHE_CAPACITY,
        default_ttl: float = DEFAULT_CACHE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity <= 0:
            raise ValueError(f"Cache capacity must be positive, got {capacity}")
        if default_ttl < 0:
            raise ValueError(f"Cache TTL cannot be negative, got {default_ttl}")
        self.capacity = capacity
        self.default_ttl = default_ttl
        self._clock = clock
        self._entries: "OrderedDict[K, CacheEntry[V]]" = OrderedDict()
        self._lock = threading.Lock()
        self._hits = 0
        self._misses = 0
        self._puts = 0
        self._removals = 0
        self._evictions = 0

    # ------------------- Lookup -------------------

    def get(self, key: Optional[K], is_valid: Optional[Callable[[V], bool]] = None) -> Optional[V]:
        """
        Return cached value if present and unexpired, marking it most recently used.
        An entry rejected by is_valid is dropped and counted as a miss.
        """
        with self._lock:
            entry = self._entries.get(key) if key is not None else None
            if entry is None:
                self._misses += 1
                return None
            if entry.is_expired(self._clock()) or (is_valid is not None and not is_valid(entry.value)):
                del self._entries[key]
                self._misses += 1
                return None
            self._entries.move_to_end(key)
            self._hits += 1
            return entry.value

    def contains_key(self, key: Optional[K]) -> bool:
        """Presence check that leaves recency and counters untouched."""
        with self._lock:
            entry = self._entries.get(key) if key is not None else None
            return entry is not None and not entry.is_expired(self._clock())

    # ------------------- Mutation -------------------

    def put(self, key: K, value: V, ttl: Optional[float] = None) -> None:
        """
        Insert or replace an entry. ttl=None uses the default, ttl=0 never expires.
        Inserting a new key into a full cache first drops expired entries, then
        evicts the least recently used entry if none were expired.
        None is not a storable value.
        """
        if value is None:
            raise ValueError("Cannot cache None; get() uses None to signal a miss")
        if ttl is None:
            ttl = self.default_ttl
        if ttl < 0:
            raise ValueError(f"Cache TTL cannot be negative, got {ttl}")

        with self._lock:
            expires_at = self._clock() + ttl if ttl > 0 else 0
            if key in self._entries:
                self._entries.move_to_end(key)
            elif len(self._entries) >= self.capacity:
                self._purge_expired()
                if len(self._entries) >= self.capacity:
                    self._entries.popitem(last=False)  # remove oldest (LRU)
                    self._evictions += 1
            self._entries[key] = CacheEntry(value, expires_at)
            self._puts += 1

    def remove(self, key: Optional[K]) -> bool:
        """Remove an entry, returning whether one was present."""
        with self._lock:
            if key is None or key not in self._entries:
                return False
            del self._entries[key]
            self._removals += 1
            return True

    def clear(self) -> None:
        """Drop every entry; cumulative counters are kept."""
        with self._lock:
            self._entries.clear()

    def cleanup_expired(self) -> int:
        """Sweep expired entries. Maintenance only, so counters are not touched."""
        with self._lock:
            return self._purge_expired()

    def _purge_expired(self) -> int:
        # Caller holds the lock
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if entry.is_expired(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    # ------------------- Observation -------------------

    def size(self) -> int:
        """Number of unexpired entries."""
        with self._lock:
            now = self._clock()
            return sum(1 for entry in self._entries.values() if not entry.is_expired(now))

    def is_empty(self) -> bool:
        return self.size() == 0

    def get_stats(self) -> CacheStats:
        with self._lock:
            return CacheStats(self._hits, self._misses, self._puts, self._removals, self._evictions)

    def reset_stats(self) -> None:
        with self._lock:
            self._hits = self._misses = self._puts = self._removals = self._evictions = 0

    def stats(self) -> str:
        """Return cache statistics for debugging."""
        return f"Cache: {self.size()}/{self.capacity} | {self.get_stats()}"

    def __contains__(self, key: K) -> bool:
        return self.contains_key(key)

    def __len__(self) -> int:
        return self.size()
