# capacity_engine/monitor/service.py
"""Node monitor service - cache-backed fleet usage accessors."""

import logging
from collections import defaultdict
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional

from capacity_engine.core.errors import PanelNotFoundError
from capacity_engine.core.models import (
    FleetStats, LocationCapacitySummary, NodeResourceUsage, WorkloadDescriptor
)
from capacity_engine.core.source import PanelDataSource
from capacity_engine.monitor.aggregator import calculate_fleet_stats, calculate_location_capacity
from capacity_engine.monitor.cache import UsageCache
from capacity_engine.monitor.calculator import calculate_node_usage
from capacity_engine.monitor.config import MonitorConfig
from capacity_engine.monitor.singleflight import SingleFlight

logger = logging.getLogger(__name__)

FLEET_KEY = "full-fleet"


class NodeMonitorService:
    """
    Tracks resource allocation of every node on the panel.

    Refresh is lazy: reads hit the cache and only a miss or a forced
    refresh reaches the data source. Data source failures are logged and
    turned into empty results.
    """

    def __init__(
        self,
        source: PanelDataSource,
        config: Optional[MonitorConfig] = None,
        cache: Optional[UsageCache] = None,
    ):
        self._source = source
        self._config = config or MonitorConfig()
        self._cache = cache or UsageCache(
            ttl_seconds=self._config.cache_ttl_seconds,
            full_update_interval_seconds=self._config.full_update_interval_seconds,
        )
        self._flights = SingleFlight()

    @property
    def cache(self) -> UsageCache:
        return self._cache

    @property
    def config(self) -> MonitorConfig:
        return self._config

    # ============================================
    # NODES
    # ============================================

    def get_node_usage(self, node_id: int, force_refresh: bool = False) -> Optional[NodeResourceUsage]:
        """Usage of one node, or None if unknown or unavailable."""
        if not force_refresh:
            if self._cache.fleet_refresh_due():
                # Fleet refresh takes priority over per-node fetches
                usages = self.get_all_nodes_usage()
                return next((u for u in usages if u.node_id == node_id), None)

            cached = self._cache.get_node_usage(node_id)
            if cached:
                return cached

        try:
            return self._flights.do(f"node:{node_id}", lambda: self._refresh_node(node_id))
        except PanelNotFoundError:
            logger.warning(f"[monitor] node {node_id} not found on panel")
            return None
        except Exception as e:
            logger.error(f"[monitor] error getting usage for node {node_id}: {e}", exc_info=True)
            return None

    def _refresh_node(self, node_id: int) -> Optional[NodeResourceUsage]:
        with ThreadPoolExecutor(max_workers=2) as pool:
            node_future = pool.submit(self._source.get_node_details, node_id)
            servers_future = pool.submit(self._source.get_servers_by_node, node_id)
            node = node_future.result()
            servers = servers_future.result()

        if node is None:
            logger.warning(f"[monitor] node {node_id} not found on panel")
            return None

        usage = calculate_node_usage(node, servers)
        self._cache.set_node_usage(usage)
        return usage

    def get_all_nodes_usage(self, force_refresh: bool = False) -> List[NodeResourceUsage]:
        """Usage of every node, refreshed as one batch when stale."""
        if not force_refresh:
            snapshot = self._cache.fleet_snapshot()
            if snapshot is not None:
                return snapshot

        try:
            return self._flights.do(FLEET_KEY, self._refresh_fleet)
        except Exception as e:
            logger.error(f"[monitor] error getting usage for all nodes: {e}", exc_info=True)
            return []

    def _refresh_fleet(self) -> List[NodeResourceUsage]:
        logger.info("[monitor] performing full nodes monitoring update")

        with ThreadPoolExecutor(max_workers=self._config.fetch_workers) as pool:
            nodes_future = pool.submit(self._source.get_all_nodes)
            servers_future = pool.submit(self._source.get_all_servers)
            nodes = nodes_future.result()
            servers = servers_future.result()

        servers_by_node: Dict[int, List[WorkloadDescriptor]] = defaultdict(list)
        for server in servers:
            servers_by_node[server.node_id].append(server)

        usages = [calculate_node_usage(node, servers_by_node.get(node.id, [])) for node in nodes]

        self._cache.replace_fleet(usages)

        logger.info(f"[monitor] updated monitoring data for {len(usages)} nodes")
        return usages

    def get_location_nodes(self, location_id: int, force_refresh: bool = False) -> List[NodeResourceUsage]:
        """Nodes belonging to a location, maintenance nodes included."""
        return [
            usage for usage in self.get_all_nodes_usage(force_refresh)
            if usage.location_id == location_id
        ]

    # ============================================
    # LOCATIONS
    # ============================================

    def get_location_capacity(
        self,
        location_id: int,
        force_refresh: bool = False,
    ) -> Optional[LocationCapacitySummary]:
        """Capacity summary of a location, or None if no node belongs to it."""
        try:
            if not force_refresh:
                cached = self._cache.get_location_summary(location_id)
                if cached:
                    return cached

            usages = self.get_all_nodes_usage(force_refresh)
            if not any(u.location_id == location_id for u in usages):
                logger.warning(f"[monitor] location {location_id} has no known nodes")
                return None

            summary = calculate_location_capacity(location_id, usages)
            self._cache.set_location_summary(summary)
            return summary
        except Exception as e:
            logger.error(f"[monitor] error getting capacity for location {location_id}: {e}", exc_info=True)
            return None

    def get_all_locations_capacity(self, force_refresh: bool = False) -> List[LocationCapacitySummary]:
        """One summary per location present in the fleet, ordered by id."""
        try:
            usages = self.get_all_nodes_usage(force_refresh)
            location_ids = sorted({u.location_id for u in usages})

            summaries = [calculate_location_capacity(lid, usages) for lid in location_ids]
            for summary in summaries:
                self._cache.set_location_summary(summary)

            return summaries
        except Exception as e:
            logger.error(f"[monitor] error getting capacity for all locations: {e}", exc_info=True)
            return []

    # ============================================
    # STATS
    # ============================================

    def get_monitoring_stats(self, force_refresh: bool = False) -> FleetStats:
        """Fleet-wide statistics; zeroed stats when unavailable."""
        try:
            if not force_refresh:
                cached = self._cache.get_fleet_stats()
                if cached:
                    return cached

            stats = calculate_fleet_stats(self.get_all_nodes_usage(force_refresh))
            self._cache.set_fleet_stats(stats)
            return stats
        except Exception as e:
            logger.error(f"[monitor] error getting monitoring stats: {e}", exc_info=True)
            return FleetStats.empty()

    # ============================================
    # MAINTENANCE
    # ============================================

    def clear_cache(self) -> None:
        self._cache.clear()
        logger.info("[monitor] monitoring cache cleared")

    def refresh_all_data(self) -> FleetStats:
        """Drop the cache and recompute nodes, locations and stats."""
        logger.info("[monitor] force refreshing all monitoring data")
        self.clear_cache()

        self.get_all_nodes_usage(force_refresh=True)
        # Locations and stats reuse the snapshot just written
        self.get_all_locations_capacity()
        stats = self.get_monitoring_stats()

        logger.info("[monitor] all monitoring data refreshed")
        return stats
