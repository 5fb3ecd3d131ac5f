from unittest.mock import patch

from gpx_wind.cache import CacheStats, DictCache


class TestDictCache:
    def test_get_missing(self):
        cache = DictCache(max_size=2)
        assert cache.get("a") is None
        assert cache.stats().misses == 1

    def test_set_and_get(self):
        cache = DictCache(max_size=2)
        cache.set(("45.0", "7.0"), {"x": 1})
        assert cache.get(("45.0", "7.0")) == {"x": 1}
        assert cache.stats().hits == 1

    def test_lru_eviction(self):
        cache = DictCache(max_size=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")  # "b" is now least recently used
        cache.set("c", 3)
        assert cache.get("a") == 1
        assert cache.get("b") is None
        assert cache.get("c") == 3

    def test_ttl_expiry(self):
        cache = DictCache(max_size=2, ttl_seconds=10)
        with patch("gpx_wind.cache.time.time", return_value=1000.0):
            cache.set("a", 1)
        with patch("gpx_wind.cache.time.time", return_value=1005.0):
            assert cache.get("a") == 1
        with patch("gpx_wind.cache.time.time", return_value=1011.0):
            assert cache.get("a") is None
        assert cache.stats().size == 0

    def test_clear(self):
        cache = DictCache(max_size=5)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.get("a")
        assert cache.clear() == 2
        stats = cache.stats()
        assert stats.size == 0
        assert stats.hits == 0


class TestCacheStats:
    def test_hit_rate(self):
        assert CacheStats(hits=1, misses=3).hit_rate == "25.0%"
        assert CacheStats().hit_rate == "0.0%"

    def test_to_dict(self):
        d = CacheStats(hits=2, misses=2, size=1, max_size=10).to_dict()
        assert d == {"hit_rate": "50.0%", "hits": 2, "misses": 2, "size": 1, "max_size": 10}
