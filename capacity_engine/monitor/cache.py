# capacity_engine/monitor/cache.py
"""
Usage cache with two independent freshness timers.

- Per-entry TTL: an entry is served only while younger than the TTL.
- Fleet timer: when the full-update interval has elapsed since the last
  fleet refresh, every per-entry value is invalid until the next refresh.
"""

import time
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Dict, List, Optional

from capacity_engine.core.models import FleetStats, LocationCapacitySummary, NodeResourceUsage


@dataclass(frozen=True)
class CacheEntry:
    value: Any
    stored_at: float


class UsageCache:
    """In-process cache for node usage, location summaries and fleet stats."""

    def __init__(
        self,
        ttl_seconds: float = 120.0,
        full_update_interval_seconds: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._ttl = ttl_seconds
        self._full_update_interval = full_update_interval_seconds
        self._clock = clock
        self._lock = Lock()

        self._nodes: Dict[int, CacheEntry] = {}
        self._locations: Dict[int, CacheEntry] = {}
        self._stats: Optional[CacheEntry] = None
        self._last_full_update: Optional[float] = None

    # -------------------------
    # FRESHNESS
    # -------------------------

    def _fleet_expired(self, now: float) -> bool:
        if self._last_full_update is None:
            return False
        return now - self._last_full_update > self._full_update_interval

    def _is_valid(self, entry: Optional[CacheEntry], now: float) -> bool:
        if entry is None:
            return False
        if self._fleet_expired(now):
            return False
        return now - entry.stored_at < self._ttl

    def needs_full_update(self) -> bool:
        """True before the first fleet refresh or once the fleet timer expired."""
        with self._lock:
            return self._last_full_update is None or self._fleet_expired(self._clock())

    def fleet_refresh_due(self) -> bool:
        """True once a loaded fleet has outlived the full-update interval."""
        with self._lock:
            return self._fleet_expired(self._clock())

    def mark_full_update_completed(self) -> None:
        with self._lock:
            self._last_full_update = self._clock()

    # -------------------------
    # NODES
    # -------------------------

    def get_node_usage(self, node_id: int) -> Optional[NodeResourceUsage]:
        with self._lock:
            entry = self._nodes.get(node_id)
            if self._is_valid(entry, self._clock()):
                return entry.value
            return None

    def set_node_usage(self, usage: NodeResourceUsage) -> None:
        """Store one node and drop the summaries derived from its old value."""
        with self._lock:
            previous = self._nodes.get(usage.node_id)
            self._nodes[usage.node_id] = CacheEntry(usage, self._clock())

            self._locations.pop(usage.location_id, None)
            if previous is not None:
                self._locations.pop(previous.value.location_id, None)
            self._stats = None

    def fleet_snapshot(self) -> Optional[List[NodeResourceUsage]]:
        """
        All node entries, or None if any of them is stale or a fleet
        refresh is due.
        """
        with self._lock:
            now = self._clock()
            if self._last_full_update is None or self._fleet_expired(now):
                return None
            if not all(self._is_valid(e, now) for e in self._nodes.values()):
                return None
            return [e.value for e in self._nodes.values()]

    def replace_fleet(self, usages: List[NodeResourceUsage]) -> None:
        """Swap in a complete fleet and drop everything derived from the old one."""
        with self._lock:
            now = self._clock()
            self._nodes = {u.node_id: CacheEntry(u, now) for u in usages}
            self._locations = {}
            self._stats = None
            self._last_full_update = now

    # -------------------------
    # LOCATIONS
    # -------------------------

    def get_location_summary(self, location_id: int) -> Optional[LocationCapacitySummary]:
        with self._lock:
            entry = self._locations.get(location_id)
            if self._is_valid(entry, self._clock()):
                return entry.value
            return None

    def set_location_summary(self, summary: LocationCapacitySummary) -> None:
        with self._lock:
            self._locations[summary.location_id] = CacheEntry(summary, self._clock())

    # -------------------------
    # STATS
    # -------------------------

    def get_fleet_stats(self) -> Optional[FleetStats]:
        with self._lock:
            if self._is_valid(self._stats, self._clock()):
                return self._stats.value
            return None

    def set_fleet_stats(self, stats: FleetStats) -> None:
        with self._lock:
            self._stats = CacheEntry(stats, self._clock())

    def clear(self) -> None:
        with self._lock:
            self._nodes = {}
            self._locations = {}
            self._stats = None
            self._last_full_update = None
