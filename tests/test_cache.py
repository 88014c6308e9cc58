"""Tests for the response cache: keys, expiry, LRU eviction and stats."""

from __future__ import annotations

import pytest

from universal_gateway.gateway.cache import ResponseCache


@pytest.fixture
def cache(clock):
    return ResponseCache(max_size=3, default_ttl=300.0, clock=clock)


class TestGenerateKey:
    def test_param_order_does_not_matter(self):
        k1 = ResponseCache.generate_key("github", "/search/repositories", {"q": "fastapi", "page": 2, "sort": "stars"})
        k2 = ResponseCache.generate_key("github", "/search/repositories", {"sort": "stars", "q": "fastapi", "page": 2})
        assert k1 == k2

    def test_format(self):
        key = ResponseCache.generate_key("github", "/users/octocat/repos", {"page": 1, "direction": "desc"})
        assert key == "github:/users/octocat/repos:direction=desc&page=1"

    def test_no_params(self):
        assert ResponseCache.generate_key("x", "/users/a") == "x:/users/a:"
        assert ResponseCache.generate_key("x", "/users/a", {}) == "x:/users/a:"

    def test_distinct_inputs_distinct_keys(self):
        keys = {
            ResponseCache.generate_key("github", "/users/a"),
            ResponseCache.generate_key("news", "/users/a"),
            ResponseCache.generate_key("github", "/users/b"),
            ResponseCache.generate_key("github", "/users/a", {"page": 1}),
            ResponseCache.generate_key("github", "/users/a", {"page": 2}),
        }
        assert len(keys) == 5


class TestGetSet:
    def test_get_returns_same_object(self, cache):
        value = {"login": "octocat", "repos": [1, 2, 3]}
        cache.set("k", value, ttl=60)
        assert cache.get("k") is value

    def test_unknown_key_is_miss(self, cache):
        assert cache.get("missing") is None
        stats = cache.get_stats()
        assert stats["misses"] == 1
        assert stats["total_requests"] == 1

    def test_already_expired_ttl(self, cache):
        cache.set("k", "v", ttl=-1)
        assert cache.get("k") is None
        stats = cache.get_stats()
        assert stats["misses"] == 1
        assert stats["hits"] == 0
        assert stats["size"] == 0  # removed on read

    def test_default_ttl_used_when_none(self, cache, clock):
        cache.set("k", "v")
        clock.advance(299)
        assert cache.get("k") == "v"
        clock.advance(2)
        assert cache.get("k") is None

    def test_explicit_ttl(self, cache, clock):
        cache.set("k", "v", ttl=10)
        clock.advance(9.5)
        assert cache.has("k")
        clock.advance(1)
        assert cache.get("k") is None

    def test_sets_counter(self, cache):
        cache.set("a", 1)
        cache.set("a", 2)
        assert cache.get_stats()["sets"] == 2
        assert cache.get("a") == 2

    def test_invalid_max_size(self):
        with pytest.raises(ValueError):
            ResponseCache(max_size=0)


class TestEviction:
    def test_never_exceeds_max_size(self, cache):
        for i in range(10):
            cache.set(f"k{i}", i)
            assert len(cache) <= cache.max_size

        stats = cache.get_stats()
        assert stats["size"] == 3
        assert stats["evictions"] == 7

    def test_one_eviction_beyond_capacity(self, cache):
        for i in range(4):
            cache.set(f"k{i}", i)
        assert cache.get_stats()["evictions"] == 1
        assert not cache.has("k0")

    def test_lru_scenario(self, clock):
        cache = ResponseCache(max_size=2, clock=clock)
        cache.set("A", "a")
        clock.advance(1)
        cache.set("B", "b")
        clock.advance(1)
        assert cache.get("A") == "a"  # refresh A
        clock.advance(1)
        cache.set("C", "c")

        assert cache.has("A")
        assert cache.has("C")
        assert not cache.has("B")
        assert cache.get_stats()["evictions"] == 1

    def test_lru_with_identical_timestamps(self, clock):
        # Clock never advances: recency order still decides
        cache = ResponseCache(max_size=2, clock=clock)
        cache.set("A", "a")
        cache.set("B", "b")
        cache.get("A")
        cache.set("C", "c")

        assert cache.has("A")
        assert not cache.has("B")

    def test_overwrite_at_capacity_does_not_evict(self, cache):
        for key in ("a", "b", "c"):
            cache.set(key, key)
        cache.set("b", "new")
        assert cache.get_stats()["evictions"] == 0
        assert len(cache) == 3

    def test_evict_lru_on_empty_cache(self, cache):
        assert cache.evict_lru() is None
        assert cache.get_stats()["evictions"] == 0


class TestCleanup:
    def test_removes_only_expired(self, cache, clock):
        cache.set("short", 1, ttl=10)
        cache.set("long", 2, ttl=100)
        cache.set("shorter", 3, ttl=5)
        clock.advance(20)

        removed = cache.cleanup()

        assert removed == 2
        assert len(cache) == 1
        assert cache.get("long") == 2

    def test_nothing_expired(self, cache):
        cache.set("a", 1)
        assert cache.cleanup() == 0
        assert len(cache) == 1


class TestHasDelete:
    def test_has_does_not_touch_counters(self, cache):
        cache.set("a", 1)
        assert cache.has("a") is True
        assert cache.has("b") is False
        stats = cache.get_stats()
        assert stats["hits"] == 0
        assert stats["misses"] == 0
        assert stats["total_requests"] == 0

    def test_has_does_not_refresh_access_order(self, clock):
        cache = ResponseCache(max_size=2, clock=clock)
        cache.set("A", "a")
        clock.advance(1)
        cache.set("B", "b")
        clock.advance(1)
        cache.has("A")
        cache.set("C", "c")
        assert not cache.has("A")

    def test_has_removes_expired(self, cache, clock):
        cache.set("a", 1, ttl=1)
        clock.advance(5)
        assert cache.has("a") is False
        assert len(cache) == 0

    def test_delete(self, cache):
        cache.set("a", 1)
        assert cache.delete("a") is True
        assert cache.delete("a") is False
        assert len(cache) == 0


class TestStats:
    def test_empty_stats(self, cache):
        stats = cache.get_stats()
        assert stats["hit_rate"] == 0.0
        assert stats["size"] == 0
        assert stats["max_size"] == 3
        assert stats["memory_usage"] == 0

    def test_hit_rate(self, cache):
        cache.set("a", 1)
        cache.get("a")
        cache.get("b")
        stats = cache.get_stats()
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == 0.5

    def test_memory_usage_is_estimate(self, cache):
        cache.set("a", {"name": "x" * 50})
        usage = cache.get_stats()["memory_usage"]
        assert usage > 100
        cache.set("b", {"name": "y" * 50})
        assert cache.get_stats()["memory_usage"] > usage

    def test_clear_resets_everything(self, cache):
        cache.set("a", 1)
        cache.get("a")
        cache.get("b")
        cache.clear()

        stats = cache.get_stats()
        assert stats["size"] == 0
        assert stats["hits"] == 0
        assert stats["misses"] == 0
        assert stats["sets"] == 0
        assert stats["total_requests"] == 0
        assert cache.get("a") is None
