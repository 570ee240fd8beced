# capacity_engine/placement/evaluator.py
"""Capacity evaluator - admissibility checks for locations and nodes."""

import logging
from typing import Iterable, List, Optional, Tuple

from capacity_engine.core.models import NodeResourceUsage, ResourceRequirement, round2
from capacity_engine.core.scoring import (
    calculate_fit_score, calculate_load_score, placement_sort_key
)
from capacity_engine.monitor.aggregator import calculate_location_capacity
from capacity_engine.monitor.calculator import usage_percentage
from capacity_engine.monitor.service import NodeMonitorService
from capacity_engine.placement.results import (
    CapacityCheckResult, NodeCapacityCheck, RecommendedNode, ResourceAmounts, UtilizationAfter
)

logger = logging.getLogger(__name__)

HIGH_UTILIZATION_THRESHOLD = 90.0
MIN_REDUNDANT_NODES = 2

WARNING_LOCATION_UNAVAILABLE = "Location not found or unavailable"
WARNING_CHECK_FAILED = "Error occurred while checking capacity"
WARNING_MEMORY_HIGH = "Memory utilization will exceed 90% after creation"
WARNING_DISK_HIGH = "Disk utilization will exceed 90% after creation"
WARNING_LOW_REDUNDANCY = "Location has limited redundancy (less than 2 active nodes)"
WARNING_FRAGMENTED = "No optimal nodes found, but capacity exists"


class CapacityEvaluator:
    """
    Decides whether a location can take a workload and which of its
    nodes are worth considering.

    Every check returns a well-formed result; failures are reported in
    the result, never raised.
    """

    def __init__(self, monitor: NodeMonitorService):
        self._monitor = monitor
        self._config = monitor.config

    # ============================================
    # LOCATION CHECK
    # ============================================

    def check_location_capacity(
        self,
        location_id: int,
        requirement: ResourceRequirement,
        force_refresh: bool = False,
    ) -> CapacityCheckResult:
        check, _ = self.evaluate_location(location_id, requirement, force_refresh)
        return check

    def evaluate_location(
        self,
        location_id: int,
        requirement: ResourceRequirement,
        force_refresh: bool = False,
    ) -> Tuple[CapacityCheckResult, List[NodeResourceUsage]]:
        """
        Location check plus the node snapshot it was computed from.

        The summary is aggregated from the same fleet read, so a forced
        refresh that fails is reported as an unavailable location.
        """
        try:
            nodes = self._monitor.get_all_nodes_usage(force_refresh)
            location_nodes = [n for n in nodes if n.location_id == location_id]

            if not location_nodes:
                return CapacityCheckResult.unavailable(
                    location_id, requirement, WARNING_LOCATION_UNAVAILABLE
                ), []

            summary = calculate_location_capacity(location_id, location_nodes)

            can_accommodate = (
                summary.available_memory >= requirement.memory and
                summary.available_disk >= requirement.disk and
                summary.active_nodes > 0
            )

            memory_after = usage_percentage(
                summary.allocated_memory + requirement.memory, summary.total_memory
            )
            disk_after = usage_percentage(
                summary.allocated_disk + requirement.disk, summary.total_disk
            )

            recommended = self.recommend_nodes(location_nodes, requirement)

            warnings = []
            if memory_after > HIGH_UTILIZATION_THRESHOLD:
                warnings.append(WARNING_MEMORY_HIGH)
            if disk_after > HIGH_UTILIZATION_THRESHOLD:
                warnings.append(WARNING_DISK_HIGH)
            if summary.active_nodes < MIN_REDUNDANT_NODES:
                warnings.append(WARNING_LOW_REDUNDANCY)
            if not recommended and can_accommodate:
                warnings.append(WARNING_FRAGMENTED)

            check = CapacityCheckResult(
                can_accommodate=can_accommodate,
                location_id=location_id,
                location_status=summary.status,
                available_nodes=summary.active_nodes,
                total_capacity=ResourceAmounts(
                    memory=summary.total_memory, disk=summary.total_disk
                ),
                available_capacity=ResourceAmounts(
                    memory=summary.available_memory, disk=summary.available_disk
                ),
                required_resources=requirement,
                utilization_after_creation=UtilizationAfter(
                    memory_percentage=round2(memory_after),
                    disk_percentage=round2(disk_after),
                ),
                recommended_nodes=recommended,
                warnings=warnings,
            )
            return check, location_nodes

        except Exception as e:
            logger.error(
                f"[evaluator] error checking capacity for location {location_id}: {e}",
                exc_info=True,
            )
            return CapacityCheckResult.unavailable(location_id, requirement, WARNING_CHECK_FAILED), []

    def recommend_nodes(
        self,
        nodes: Iterable[NodeResourceUsage],
        requirement: ResourceRequirement,
    ) -> List[RecommendedNode]:
        """Best-fitting non-maintenance nodes with headroom for the requirement."""
        scored = []
        for node in nodes:
            if node.maintenance_mode or not node.can_fit(requirement):
                continue
            load = calculate_load_score(node, self._config.memory_per_workload_mb)
            fit = calculate_fit_score(node, requirement)
            scored.append((placement_sort_key(fit, load, node.node_id), node, load, fit))

        scored.sort(key=lambda item: item[0])

        return [
            RecommendedNode(
                node_id=node.node_id,
                node_name=node.node_name,
                load_score=float(load),
                fit_score=fit,
            )
            for _, node, load, fit in scored[:self._config.max_recommendations]
        ]

    # ============================================
    # NODE CHECK
    # ============================================

    def check_node_capacity(
        self,
        node_id: int,
        requirement: ResourceRequirement,
        force_refresh: bool = False,
    ) -> NodeCapacityCheck:
        """Whether one specific node can take the requirement."""
        usage = self._monitor.get_node_usage(node_id, force_refresh)

        if usage is None:
            return NodeCapacityCheck(
                node_id=node_id,
                found=False,
                can_accommodate=False,
                required_resources=requirement,
                available_resources=ResourceAmounts(memory=0, disk=0),
            )

        can_accommodate = usage.can_fit(requirement) and not usage.maintenance_mode

        utilization_after = None
        if can_accommodate:
            utilization_after = UtilizationAfter(
                memory_percentage=round2(usage_percentage(
                    usage.allocated_memory + requirement.memory, usage.effective_memory_limit
                )),
                disk_percentage=round2(usage_percentage(
                    usage.allocated_disk + requirement.disk, usage.effective_disk_limit
                )),
            )

        return NodeCapacityCheck(
            node_id=node_id,
            found=True,
            can_accommodate=can_accommodate,
            required_resources=requirement,
            available_resources=ResourceAmounts(
                memory=usage.available_memory, disk=usage.available_disk
            ),
            utilization_after=utilization_after,
            node_status=usage.status,
        )

    # ============================================
    # MULTI-LOCATION
    # ============================================

    def check_multi_location_capacity(
        self,
        location_ids: Iterable[int],
        requirement: ResourceRequirement,
        force_refresh: bool = False,
    ) -> List[CapacityCheckResult]:
        location_ids = list(location_ids)
        if force_refresh and location_ids:
            # Refresh once for the whole batch
            self._monitor.get_all_nodes_usage(force_refresh=True)

        return [
            self.check_location_capacity(location_id, requirement)
            for location_id in location_ids
        ]

    def recommend_locations(
        self,
        requirement: ResourceRequirement,
        location_ids: Optional[Iterable[int]] = None,
        limit: int = 3,
        force_refresh: bool = False,
    ) -> List[CapacityCheckResult]:
        """Admissible locations with the most free capacity first."""
        if location_ids is None:
            location_ids = [
                s.location_id for s in self._monitor.get_all_locations_capacity(force_refresh)
            ]
            force_refresh = False

        checks = self.check_multi_location_capacity(location_ids, requirement, force_refresh)
        viable = [c for c in checks if c.can_accommodate]
        viable.sort(key=lambda c: (
            -(c.available_capacity.memory + c.available_capacity.disk),
            c.location_id,
        ))
        return viable[:limit]
