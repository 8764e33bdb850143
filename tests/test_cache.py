import threading

import pytest

from textsmith.storage.cache import BoundedCache, CacheEntry, cache_key


class TickingClock:
    """Strictly increasing clock."""

    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        self.now += 1.0
        return self.now


class RecordingStore:
    def __init__(self) -> None:
        self.entries = {}
        self.deleted = []

    def load_entry(self, key):
        return self.entries.get(key)

    def save_entry(self, entry):
        self.entries[entry.key] = entry

    def delete_entry(self, key):
        self.deleted.append(key)
        self.entries.pop(key, None)


def test_overflow_evicts_least_recently_accessed():
    cache = BoundedCache(capacity=3, clock=TickingClock())
    for key in ["a", "b", "c", "d"]:
        cache.put(key, key.upper())

    assert len(cache) == 3
    assert "a" not in cache
    assert all(key in cache for key in ["b", "c", "d"])


def test_get_refreshes_recency():
    cache = BoundedCache(capacity=2, clock=TickingClock())
    cache.put("a", 1)
    cache.put("b", 2)
    assert cache.get("a") == 1
    cache.put("c", 3)

    assert "b" not in cache
    assert cache.keys() == ["a", "c"]


def test_access_times_never_decrease():
    cache = BoundedCache(capacity=5, clock=TickingClock())
    cache.put("a", 1)
    first = cache.entry("a").last_accessed_at
    cache.get("a")
    second = cache.entry("a").last_accessed_at
    cache.put("a", 2)
    third = cache.entry("a").last_accessed_at
    assert first < second < third


def test_put_existing_key_overwrites_without_duplicating():
    cache = BoundedCache(capacity=2, clock=TickingClock())
    cache.put("a", 1)
    cache.put("a", 2)
    assert len(cache) == 1
    assert cache.get("a") == 2


def test_miss_returns_none_and_invalidate():
    cache = BoundedCache()
    assert cache.capacity == 100
    assert cache.get("missing") is None
    cache.put("k", "v")
    assert cache.invalidate("k") is True
    assert cache.invalidate("k") is False
    assert len(cache) == 0


def test_store_hooks_follow_evictions_and_restore_misses():
    store = RecordingStore()
    cache = BoundedCache(capacity=1, store=store, clock=TickingClock())
    cache.put("a", 1)
    cache.put("b", 2)

    assert store.deleted == ["a"]
    assert "b" in store.entries

    store.entries["z"] = CacheEntry(key="z", value=26, last_accessed_at=0.0)
    assert cache.get("z") == 26
    assert "z" in cache and "b" not in cache
    assert cache.entry("z").last_accessed_at > 0.0

    cache.clear()
    assert len(cache) == 0
    assert "z" in store.deleted


def test_capacity_must_be_positive():
    with pytest.raises(ValueError):
        BoundedCache(capacity=0)


def test_cache_key_is_deterministic_over_option_order():
    first = cache_key("transform", "Hello.", {"tone": "formal", "style": "concise"})
    second = cache_key("transform", "Hello.", {"style": "concise", "tone": "formal"})
    assert first == second
    assert first != cache_key("analyze", "Hello.", {"tone": "formal", "style": "concise"})
    assert first != cache_key("transform", "Hello!", {"tone": "formal", "style": "concise"})


def test_concurrent_puts_respect_capacity():
    cache = BoundedCache(capacity=10)

    def writer(worker: int) -> None:
        for index in range(200):
            cache.put(f"{worker}-{index}", index)
            cache.get(f"{worker}-{index // 2}")

    threads = [threading.Thread(target=writer, args=(worker,)) for worker in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert len(cache) == 10
    stamps = [cache.entry(key).last_accessed_at for key in cache.keys()]
    assert stamps == sorted(stamps)
