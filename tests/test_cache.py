"""Tests for the route cache: keys, TTL expiry, capacity and eviction order."""

import itertools
import threading

import pytest

from stoproute.routing import Leg, RouteCache, RouteResult, Stop, cache_key


def _result(*ids: str) -> RouteResult:
    stops = tuple(Stop(i, 0.0, float(n)) for n, i in enumerate(ids))
    legs = tuple(Leg(a.stop_id, b.stop_id, 100.0, 10.0) for a, b in zip(stops, stops[1:]))
    return RouteResult(
        ordered_stops=stops,
        legs=legs,
        total_distance_meters=100.0 * len(legs),
        total_duration_seconds=10.0 * len(legs),
    )


class TestCacheKey:
    """Test canonical stop-set keys."""

    def test_order_independent(self):
        ids = ["a", "b", "c", "d"]
        keys = {cache_key(p) for p in itertools.permutations(ids)}
        assert len(keys) == 1

    def test_membership_dependent(self):
        assert cache_key(["a", "b"]) != cache_key(["a", "c"])
        assert cache_key(["a", "b"]) != cache_key(["a", "b", "c"])

    def test_separator_in_ids_does_not_collide(self):
        """Identities containing separators stay distinct."""
        assert cache_key(["a,b", "c"]) != cache_key(["a", "b,c"])

    def test_accepts_any_iterable(self):
        assert cache_key({"x", "y"}) == cache_key(("y", "x"))


class TestRouteCacheExpiry:
    """Test TTL behaviour with a controlled clock."""

    def test_hit_within_ttl(self, clock):
        cache = RouteCache(ttl_seconds=300, max_entries=5, timer=clock)
        result = _result("a", "b")
        cache.put(["a", "b"], result)

        clock.advance(299)
        assert cache.get(["b", "a"]) is result

    def test_miss_after_ttl(self, clock):
        cache = RouteCache(ttl_seconds=300, max_entries=5, timer=clock)
        cache.put(["a", "b"], _result("a", "b"))

        clock.advance(301)
        assert cache.get(["a", "b"]) is None
        assert len(cache) == 0

    def test_hit_at_exactly_ttl(self, clock):
        """An entry aged exactly the TTL is still served."""
        cache = RouteCache(ttl_seconds=300, max_entries=5, timer=clock)
        result = _result("a", "b")
        cache.put(["a", "b"], result)

        clock.advance(300)
        assert cache.get(["a", "b"]) is result
        assert len(cache) == 1

    def test_miss_just_past_ttl(self, clock):
        cache = RouteCache(ttl_seconds=300, max_entries=5, timer=clock)
        cache.put(["a", "b"], _result("a", "b"))

        clock.advance(300.001)
        assert cache.get(["a", "b"]) is None

    def test_stale_entry_removed_on_get(self, clock):
        cache = RouteCache(ttl_seconds=60, max_entries=5, timer=clock)
        cache.put(["a", "b"], _result("a", "b"))
        clock.advance(120)

        cache.get(["a", "b"])
        assert cache.stats()["size"] == 0

    def test_overwrite_refreshes_created_at(self, clock):
        cache = RouteCache(ttl_seconds=100, max_entries=5, timer=clock)
        cache.put(["a", "b"], _result("a", "b"))
        clock.advance(80)
        newer = _result("b", "a")
        cache.put(["a", "b"], newer)
        clock.advance(80)

        assert cache.get(["a", "b"]) is newer
        assert cache.created_at(["a", "b"]) == 1080.0

    def test_miss_on_unknown_key(self):
        cache = RouteCache()
        assert cache.get(["nope", "never"]) is None


class TestRouteCacheCapacity:
    """Test bounded size and oldest-first eviction."""

    def test_never_exceeds_capacity(self, clock):
        cache = RouteCache(ttl_seconds=1000, max_entries=3, timer=clock)
        for i in range(10):
            cache.put([f"k{i}", "x"], _result(f"k{i}", "x"))
            clock.advance(1)
            assert len(cache) <= 3
        assert len(cache) == 3

    def test_evicts_oldest_created_at(self, clock):
        cache = RouteCache(ttl_seconds=1000, max_entries=3, timer=clock)
        for name in ("first", "second", "third"):
            cache.put([name, "x"], _result(name, "x"))
            clock.advance(1)

        cache.put(["fourth", "x"], _result("fourth", "x"))

        assert cache.get(["first", "x"]) is None
        assert cache.get(["second", "x"]) is not None
        assert cache.get(["third", "x"]) is not None
        assert cache.get(["fourth", "x"]) is not None

    def test_reads_do_not_protect_old_entries(self, clock):
        """Eviction is by creation time, not by recent use."""
        cache = RouteCache(ttl_seconds=1000, max_entries=2, timer=clock)
        cache.put(["old", "x"], _result("old", "x"))
        clock.advance(1)
        cache.put(["new", "x"], _result("new", "x"))
        clock.advance(1)

        assert cache.get(["old", "x"]) is not None
        cache.put(["newest", "x"], _result("newest", "x"))

        assert cache.get(["old", "x"]) is None
        assert cache.get(["new", "x"]) is not None

    def test_single_eviction_per_insert(self, clock):
        cache = RouteCache(ttl_seconds=1000, max_entries=4, timer=clock)
        for i in range(4):
            cache.put([f"k{i}", "x"], _result(f"k{i}", "x"))
            clock.advance(1)

        cache.put(["k4", "x"], _result("k4", "x"))
        assert len(cache) == 4
        assert [cache.get([f"k{i}", "x"]) is not None for i in range(5)] == [False, True, True, True, True]

    def test_overwrite_at_capacity_evicts_nothing(self, clock):
        cache = RouteCache(ttl_seconds=1000, max_entries=2, timer=clock)
        cache.put(["a", "x"], _result("a", "x"))
        clock.advance(1)
        cache.put(["b", "x"], _result("b", "x"))
        clock.advance(1)

        cache.put(["a", "x"], _result("x", "a"))
        assert cache.get(["a", "x"]) is not None
        assert cache.get(["b", "x"]) is not None

    def test_expired_entries_free_space_first(self, clock):
        cache = RouteCache(ttl_seconds=10, max_entries=2, timer=clock)
        cache.put(["a", "x"], _result("a", "x"))
        clock.advance(20)
        cache.put(["b", "x"], _result("b", "x"))
        cache.put(["c", "x"], _result("c", "x"))

        assert cache.get(["b", "x"]) is not None
        assert cache.get(["c", "x"]) is not None


class TestRouteCacheMaintenance:
    """Test clear, stats and configuration validation."""

    def test_clear(self):
        cache = RouteCache()
        cache.put(["a", "b"], _result("a", "b"))
        cache.clear()
        assert len(cache) == 0
        assert cache.get(["a", "b"]) is None

    def test_stats_counts_hits_and_misses(self):
        cache = RouteCache(ttl_seconds=60, max_entries=7)
        cache.put(["a", "b"], _result("a", "b"))
        cache.get(["a", "b"])
        cache.get(["c", "d"])

        stats = cache.stats()
        assert stats == {"size": 1, "max_entries": 7, "ttl_seconds": 60, "hits": 1, "misses": 1}

    def test_defaults(self):
        cache = RouteCache()
        assert cache.ttl_seconds == 300
        assert cache.max_entries == 50

    @pytest.mark.parametrize("kwargs", [{"max_entries": 0}, {"ttl_seconds": 0}, {"ttl_seconds": -5}])
    def test_invalid_configuration(self, kwargs):
        with pytest.raises(ValueError):
            RouteCache(**kwargs)

    def test_concurrent_puts_respect_capacity(self):
        cache = RouteCache(ttl_seconds=600, max_entries=10)

        def writer(offset):
            for i in range(50):
                cache.put([f"t{offset}-{i}", "x"], _result(f"t{offset}-{i}", "x"))

        threads = [threading.Thread(target=writer, args=(n,)) for n in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert len(cache) == 10
