"""Bounded in-memory structures: recency cache and undo history."""

from textsmith.storage.cache import BoundedCache, CacheEntry, CacheStore, cache_key
from textsmith.storage.history import (
    BoundedHistory,
    HistoryStack,
    HistoryStore,
    InMemoryHistoryStore,
    UndoAction,
)

__all__ = [
    "BoundedCache",
    "BoundedHistory",
    "CacheEntry",
    "CacheStore",
    "HistoryStack",
    "HistoryStore",
    "InMemoryHistoryStore",
    "UndoAction",
    "cache_key",
]
