"""
In-memory TTL cache with sliding expiry.
Backs the live-session registry; evicted values are handed to a callback
so owners can release what they hold.
"""
import time
from threading import Lock
from typing import Callable, Dict, Generic, List, Optional, TypeVar

T = TypeVar("T")


class CacheEntry(Generic[T]):
    """Single cache entry with expiration tracking."""

    def __init__(self, value: T, ttl_seconds: Optional[float]) -> None:
        self.value = value
        self.ttl_seconds = ttl_seconds
        self.expires_at: Optional[float] = None
        self.touch()

    def touch(self) -> None:
        """Push expiry forward by the entry's TTL."""
        if self.ttl_seconds:
            self.expires_at = time.monotonic() + self.ttl_seconds

    def is_expired(self) -> bool:
        if self.expires_at is None:
            return False
        return time.monotonic() > self.expires_at


class InMemoryCache(Generic[T]):
    """
    Thread-safe in-memory cache; reads refresh an entry's expiry.

    Usage:
        sessions: InMemoryCache[FeedSession] = InMemoryCache(
            default_ttl_seconds=1800, on_evict=lambda s: s.close()
        )
    """

    def __init__(
        self,
        default_ttl_seconds: Optional[float] = None,
        on_evict: Optional[Callable[[T], None]] = None,
    ) -> None:
        self._store: Dict[str, CacheEntry[T]] = {}
        self._default_ttl = default_ttl_seconds
        self._on_evict = on_evict
        self._lock = Lock()

    def get(self, key: str) -> Optional[T]:
        """Get value by key, returns None if not found or expired."""
        expired: Optional[T] = None
        with self._lock:
            entry = self._store.get(key)
            if entry is None:
                return None
            if entry.is_expired():
                del self._store[key]
                expired = entry.value
            else:
                entry.touch()
                return entry.value
        self._evicted(expired)
        return None

    def set(self, key: str, value: T, ttl_seconds: Optional[float] = None) -> None:
        """Set value with optional TTL."""
        ttl = ttl_seconds if ttl_seconds is not None else self._default_ttl
        with self._lock:
            self._store[key] = CacheEntry(value, ttl)

    def pop(self, key: str) -> Optional[T]:
        """Remove and return a value without running the eviction callback."""
        with self._lock:
            entry = self._store.pop(key, None)
        return entry.value if entry is not None else None

    def delete(self, key: str) -> bool:
        """Delete key and evict its value, returns True if existed."""
        value = self.pop(key)
        if value is None:
            return False
        self._evicted(value)
        return True

    def clear(self) -> None:
        """Evict all entries."""
        with self._lock:
            values = [entry.value for entry in self._store.values()]
            self._store.clear()
        for value in values:
            self._evicted(value)

    def size(self) -> int:
        """Return number of entries (including possibly expired)."""
        with self._lock:
            return len(self._store)

    def cleanup_expired(self) -> int:
        """Evict expired entries, return count removed."""
        with self._lock:
            expired_keys = [k for k, v in self._store.items() if v.is_expired()]
            expired: List[T] = [self._store.pop(k).value for k in expired_keys]
        for value in expired:
            self._evicted(value)
        return len(expired)

    def _evicted(self, value: Optional[T]) -> None:
        if value is not None and self._on_evict is not None:
            self._on_evict(value)
