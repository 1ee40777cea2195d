import pytest

from thrift_tools.cache import AstCache, CacheError, CacheManager, TtlCache


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestTtlCache:
    def test_get_and_set(self):
        cache = TtlCache()
        cache.set("a", 1)
        assert cache.get("a") == 1
        assert "a" in cache
        assert cache.get("missing") is None

    def test_entries_expire(self):
        clock = FakeClock()
        cache = TtlCache(ttl_seconds=10, clock=clock)
        cache.set("a", 1)
        clock.now = 9.9
        assert cache.get("a") == 1
        clock.now = 10.0
        assert cache.get("a") is None
        assert len(cache) == 0

    def test_oldest_evicted_when_full(self):
        cache = TtlCache(max_size=2)
        cache.set("a", 1)
        cache.set("b", 2)
        cache.set("c", 3)
        assert cache.get("a") is None
        assert cache.get("b") == 2
        assert cache.get("c") == 3

    def test_all_expired_entries_dropped_on_overflow(self):
        clock = FakeClock()
        cache = TtlCache(max_size=3, ttl_seconds=10, clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)
        clock.now = 8
        cache.set("c", 3)
        clock.now = 12
        cache.set("d", 4)
        assert len(cache) == 2
        assert cache.get("c") == 3
        assert cache.get("d") == 4

    def test_clear_expired(self):
        clock = FakeClock()
        cache = TtlCache(ttl_seconds=1, clock=clock)
        cache.set("a", 1)
        cache.set("b", 2)
        clock.now = 2
        assert cache.clear_expired() == 2
        assert len(cache) == 0

    def test_delete_and_clear(self):
        cache = TtlCache()
        cache.set("a", 1)
        cache.set("b", 2)
        cache.delete("a")
        assert len(cache) == 1
        cache.clear()
        assert len(cache) == 0

    def test_invalid_size(self):
        with pytest.raises(CacheError):
            TtlCache(max_size=0)


class TestAstCache:
    def test_same_content_returns_same_instance(self):
        cache = AstCache()
        first = cache.get("file:///a.thrift", "struct A {}")
        assert cache.get("file:///a.thrift", "struct A {}") is first

    def test_changed_content_reparses(self):
        cache = AstCache()
        first = cache.get("file:///a.thrift", "struct A {}")
        second = cache.get("file:///a.thrift", "struct B {}")
        assert second is not first
        assert second.body[0].name == "B"

    def test_clear_forces_new_instance(self):
        cache = AstCache()
        first = cache.get("file:///a.thrift", "struct A {}")
        cache.clear()
        assert cache.get("file:///a.thrift", "struct A {}") is not first

    def test_clear_single_uri(self):
        cache = AstCache()
        a = cache.get("a", "struct A {}")
        b = cache.get("b", "struct B {}")
        cache.clear("a")
        assert cache.get("a", "struct A {}") is not a
        assert cache.get("b", "struct B {}") is b

    def test_expiry(self):
        clock = FakeClock()
        cache = AstCache(ttl_seconds=5, clock=clock)
        first = cache.get("a", "struct A {}")
        clock.now = 6
        assert cache.get("a", "struct A {}") is not first


class TestCacheManager:
    def test_registered_cache(self):
        manager = CacheManager()
        manager.register("segments", max_size=4)
        manager.set("segments", "k", "v")
        assert manager.get("segments", "k") == "v"
        assert manager.cache("segments").max_size == 4

    def test_unknown_cache_raises(self):
        manager = CacheManager()
        with pytest.raises(CacheError, match="Cache 'nope' is not registered"):
            manager.get("nope", "k")

    def test_clear_all(self):
        manager = CacheManager()
        manager.register("a")
        manager.register("b")
        manager.set("a", 1, 1)
        manager.set("b", 2, 2)
        manager.clear()
        assert manager.get("a", 1) is None
        assert manager.get("b", 2) is None

    def test_shared_clock(self):
        clock = FakeClock()
        manager = CacheManager(clock=clock)
        manager.register("a", ttl_seconds=1)
        manager.set("a", "k", "v")
        clock.now = 1
        assert manager.get("a", "k") is None
