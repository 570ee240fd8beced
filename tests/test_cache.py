#tests\test_cache.py

"""Test the two-timer usage cache."""

import pytest

from capacity_engine.monitor.aggregator import calculate_fleet_stats, calculate_location_capacity
from capacity_engine.monitor.cache import UsageCache
from capacity_engine.monitor.calculator import calculate_node_usage


@pytest.fixture
def cache(clock):
    return UsageCache(ttl_seconds=120, full_update_interval_seconds=300, clock=clock)


@pytest.fixture
def usages(make_node):
    return [
        calculate_node_usage(make_node(1, location_id=1), []),
        calculate_node_usage(make_node(2, location_id=2), []),
    ]


class TestNodeEntries:
    """Test per-node TTL."""

    def test_miss_on_empty_cache(self, cache):
        assert cache.get_node_usage(1) is None

    def test_hit_within_ttl(self, cache, clock, usages):
        cache.set_node_usage(usages[0])
        clock.advance(119)

        assert cache.get_node_usage(1) == usages[0]

    def test_expired_after_ttl(self, cache, clock, usages):
        cache.set_node_usage(usages[0])
        clock.advance(120)

        assert cache.get_node_usage(1) is None


class TestFleetTimer:
    """Test the full-update interval and its precedence."""

    def test_needs_full_update_initially(self, cache):
        assert cache.needs_full_update()

    def test_no_snapshot_before_first_refresh(self, cache, usages):
        for usage in usages:
            cache.set_node_usage(usage)

        assert cache.fleet_snapshot() is None

    def test_snapshot_after_replace(self, cache, usages):
        cache.replace_fleet(usages)

        snapshot = cache.fleet_snapshot()

        assert not cache.needs_full_update()
        assert sorted(u.node_id for u in snapshot) == [1, 2]

    def test_snapshot_stale_when_any_entry_expires(self, cache, clock, usages):
        cache.replace_fleet(usages)
        clock.advance(100)
        cache.set_node_usage(usages[0])
        clock.advance(30)

        assert cache.fleet_snapshot() is None
        assert cache.get_node_usage(1) == usages[0]

    def test_fleet_expiry_invalidates_fresh_entries(self, cache, clock, usages):
        """Test an entry inside its TTL is dropped once the fleet timer expires."""
        cache.replace_fleet(usages)
        clock.advance(250)
        cache.set_node_usage(usages[0])
        clock.advance(60)

        assert cache.needs_full_update()
        assert cache.get_node_usage(1) is None

    def test_mark_full_update_completed(self, cache, clock):
        cache.mark_full_update_completed()
        clock.advance(300)
        assert not cache.needs_full_update()

        clock.advance(1)
        assert cache.needs_full_update()

    def test_replace_drops_derived_entries(self, cache, usages):
        cache.set_location_summary(calculate_location_capacity(1, usages))
        cache.set_fleet_stats(calculate_fleet_stats(usages))

        cache.replace_fleet(usages[:1])

        assert cache.get_location_summary(1) is None
        assert cache.get_fleet_stats() is None
        assert cache.get_node_usage(2) is None


class TestDerivedEntries:
    """Test location summaries and fleet stats."""

    def test_location_summary_roundtrip(self, cache, usages):
        summary = calculate_location_capacity(1, usages)
        cache.set_location_summary(summary)

        assert cache.get_location_summary(1) == summary
        assert cache.get_location_summary(2) is None

    def test_stats_expire(self, cache, clock, usages):
        cache.set_fleet_stats(calculate_fleet_stats(usages))
        clock.advance(121)

        assert cache.get_fleet_stats() is None

    def test_clear(self, cache, usages):
        cache.replace_fleet(usages)
        cache.set_location_summary(calculate_location_capacity(1, usages))
        cache.set_fleet_stats(calculate_fleet_stats(usages))

        cache.clear()

        assert cache.fleet_snapshot() is None
        assert cache.get_node_usage(1) is None
        assert cache.get_location_summary(1) is None
        assert cache.get_fleet_stats() is None
        assert cache.needs_full_update()


class TestInvalidation:
    """Test empty fleets and derived-entry invalidation."""

    def test_empty_fleet_snapshot(self, cache):
        cache.replace_fleet([])

        assert cache.fleet_snapshot() == []

    def test_fleet_refresh_due_only_after_load(self, cache, clock, usages):
        assert not cache.fleet_refresh_due()

        cache.replace_fleet(usages)
        clock.advance(301)

        assert cache.fleet_refresh_due()

    def test_node_update_drops_its_location_and_stats(self, cache, usages):
        cache.replace_fleet(usages)
        cache.set_location_summary(calculate_location_capacity(1, usages))
        cache.set_location_summary(calculate_location_capacity(2, usages))
        cache.set_fleet_stats(calculate_fleet_stats(usages))

        cache.set_node_usage(usages[0])

        assert cache.get_location_summary(1) is None
        assert cache.get_location_summary(2) is not None
        assert cache.get_fleet_stats() is None
