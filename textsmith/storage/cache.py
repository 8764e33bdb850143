"""Fixed-capacity recency cache for computed results."""

from __future__ import annotations

import hashlib
import logging
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import Any, Callable, List, Mapping, Optional, Protocol

import orjson

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 100


@dataclass(slots=True)
class CacheEntry:
    key: str
    value: Any
    last_accessed_at: float


class CacheStore(Protocol):
    """Durable backing for cache entries across restarts."""

    def load_entry(self, key: str) -> Optional[CacheEntry]: ...

    def save_entry(self, entry: CacheEntry) -> None: ...

    def delete_entry(self, key: str) -> None: ...


def cache_key(kind: str, text: str, options: Optional[Mapping[str, Any]] = None) -> str:
    """Deterministic key over the request kind, text and options."""
    canonical = orjson.dumps(
        {"kind": kind, "text": text, "options": dict(options or {})},
        option=orjson.OPT_SORT_KEYS,
    )
    return hashlib.sha256(canonical).hexdigest()


class BoundedCache:
    """
    Least-recently-used cache holding at most ``capacity`` entries.

    Entries are kept in access order, so the head of the table is always the
    entry with the smallest ``last_accessed_at``. All mutations happen under a
    single lock.
    """

    def __init__(
        self,
        capacity: int = DEFAULT_CAPACITY,
        store: Optional[CacheStore] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._store = store
        self._clock = clock
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        """Membership test that leaves recency untouched."""
        return key in self._entries

    def keys(self) -> List[str]:
        """Keys from least to most recently used."""
        with self._lock:
            return list(self._entries)

    def entry(self, key: str) -> Optional[CacheEntry]:
        return self._entries.get(key)

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None:
                entry.last_accessed_at = self._next_timestamp(entry.last_accessed_at)
                self._entries.move_to_end(key)
                return entry.value
            if self._store is None:
                return None
            entry = self._store.load_entry(key)
            if entry is None:
                return None
            logger.debug(f"Restored cache entry {key} from store")
            entry.last_accessed_at = self._next_timestamp(entry.last_accessed_at)
            self._entries[key] = entry
            self._evict_overflow()
            return entry.value

    def put(self, key: str, value: Any) -> None:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                entry = CacheEntry(key=key, value=value, last_accessed_at=self._next_timestamp())
                self._entries[key] = entry
            else:
                entry.value = value
                entry.last_accessed_at = self._next_timestamp(entry.last_accessed_at)
                self._entries.move_to_end(key)
            if self._store is not None:
                self._store.save_entry(entry)
            self._evict_overflow()

    def invalidate(self, key: str) -> bool:
        with self._lock:
            removed = self._entries.pop(key, None) is not None
            if self._store is not None:
                self._store.delete_entry(key)
            return removed

    def clear(self) -> None:
        with self._lock:
            keys = list(self._entries)
            self._entries.clear()
            if self._store is not None:
                for key in keys:
                    self._store.delete_entry(key)

    def _next_timestamp(self, previous: float = float("-inf")) -> float:
        # Access times never move backwards, even if the clock does.
        newest = next(reversed(self._entries.values()), None)
        floor = max(previous, newest.last_accessed_at if newest else previous)
        return max(self._clock(), floor)

    def _evict_overflow(self) -> None:
        while len(self._entries) > self.capacity:
            key, _ = self._entries.popitem(last=False)
            logger.debug(f"Evicted cache entry {key}")
            if self._store is not None:
                self._store.delete_entry(key)
