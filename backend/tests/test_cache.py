"""Tests for the in-memory TTL cache."""

from barcount.core.cache import TTLCache


class TestTTLCache:
    def test_set_and_get(self):
        cache = TTLCache(default_ttl_seconds=60)
        cache.set("products:all", [1, 2])

        assert cache.get("products:all") == [1, 2]
        assert cache.stats()["hits"] == 1

    def test_miss(self):
        cache = TTLCache()

        assert cache.get("nothing") is None
        assert cache.stats()["misses"] == 1

    def test_zero_ttl_expires_immediately(self):
        cache = TTLCache()
        cache.set("k", "v", ttl_seconds=0)

        assert cache.get("k") is None
        assert cache.stats()["total_keys"] == 0

    def test_invalidate_prefix(self):
        cache = TTLCache()
        cache.set("products:all", 1)
        cache.set("products:active", 2)
        cache.set("sessions:1", 3)

        assert cache.invalidate("products:") == 2
        assert cache.get("products:all") is None
        assert cache.get("sessions:1") == 3

    def test_delete_and_clear(self):
        cache = TTLCache()
        cache.set("a", 1)
        cache.set("b", 2)

        cache.delete("a")
        assert cache.get("a") is None

        cache.clear()
        assert cache.stats()["total_keys"] == 0

    def test_size_limit(self):
        cache = TTLCache(max_entries=10)
        for i in range(25):
            cache.set(f"k{i}", i)

        assert cache.stats()["total_keys"] <= 10
        assert cache.get("k24") == 24
