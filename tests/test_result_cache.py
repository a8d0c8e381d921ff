from api.services.result_cache import CacheEntry, ResultCache, cache_key, evict_expired


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def test_key_is_stable_under_ordering():
    assert cache_key({"a": 1, "b": [1, 2], "c": {"x": 1, "y": 2}}) == cache_key(
        {"c": {"y": 2, "x": 1}, "b": [1, 2], "a": 1}
    )
    assert cache_key({"a": 1}) != cache_key({"a": 2})


def test_entry_evicted_after_expiry():
    clock = FakeClock()
    cache = ResultCache(ttl_seconds=60, max_entries=10, clock=clock)
    cache.put("k", {"v": 1})
    clock.now += 59
    assert cache.get("k") == {"v": 1}
    clock.now += 2
    assert cache.get("k") is None
    assert len(cache) == 0


def test_evict_expired_is_pure():
    entries = {
        "old": CacheEntry(value=1, computed_at=0.0, expires_at=10.0),
        "new": CacheEntry(value=2, computed_at=5.0, expires_at=100.0),
    }
    kept = evict_expired(entries, now=50.0)
    assert list(kept) == ["new"]
    assert set(entries) == {"old", "new"}


def test_get_or_compute_runs_once():
    calls = []
    cache = ResultCache(ttl_seconds=60, max_entries=10, clock=FakeClock())

    def compute():
        calls.append(1)
        return {"answer": 42}

    first = cache.get_or_compute({"q": 1}, compute)
    second = cache.get_or_compute({"q": 1}, compute)
    assert first[0] == second[0] == {"answer": 42}
    assert first[1] == second[1]
    assert (first[2], second[2]) == (False, True)
    assert len(calls) == 1


def test_oldest_entry_dropped_when_full():
    clock = FakeClock()
    cache = ResultCache(ttl_seconds=600, max_entries=2, clock=clock)
    cache.put("a", 1)
    clock.now += 1
    cache.put("b", 2)
    clock.now += 1
    cache.put("c", 3)
    assert cache.get("a") is None
    assert cache.get("b") == 2 and cache.get("c") == 3


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("RESULT_CACHE_TTL_SECONDS", "5")
    monkeypatch.setenv("RESULT_CACHE_MAX_ENTRIES", "3")
    cache = ResultCache()
    assert cache.ttl_seconds == 5.0
    assert cache.max_entries == 3
