# capacity_engine/placement/selector.py
"""Node selector - picks the node that should host a new workload."""

import logging

from capacity_engine.core.models import NodeStatus, ResourceRequirement
from capacity_engine.core.scoring import (
    calculate_fit_score, calculate_load_score, placement_sort_key
)
from capacity_engine.monitor.service import NodeMonitorService
from capacity_engine.placement.evaluator import CapacityEvaluator
from capacity_engine.placement.results import (
    AlternativeNode, NodeSelectionResult, SelectedNode, SelectionFailure
)

logger = logging.getLogger(__name__)

REASON_LOWER_FIT = "Lower fit score"
REASON_HIGHER_LOAD = "Higher load score"

STATUS_REMARKS = {
    NodeStatus.AVAILABLE: "Node has excellent availability",
    NodeStatus.LIMITED: "Node has limited capacity but is still viable",
    NodeStatus.FULL: "Node is close to full but can still fit the request",
}


def _format_mb(value: float) -> str:
    if float(value).is_integer():
        return f"{value:.0f}"
    return f"{value:.2f}"


class NodeSelector:
    """
    Ranks the viable nodes of a location and returns the winner.

    Flow:
    1. Location admissibility via the capacity evaluator (fail fast)
    2. Viable nodes: not in maintenance, enough headroom
    3. Score: fit descending, load ascending
    4. Winner plus up to N alternatives
    """

    def __init__(self, monitor: NodeMonitorService, evaluator: CapacityEvaluator):
        self._monitor = monitor
        self._evaluator = evaluator
        self._config = monitor.config

    def select_optimal_node(
        self,
        location_id: int,
        requirement: ResourceRequirement,
        force_refresh: bool = False,
    ) -> NodeSelectionResult:
        try:
            check, nodes = self._evaluator.evaluate_location(location_id, requirement, force_refresh)

            if not check.can_accommodate:
                available = check.available_capacity
                return NodeSelectionResult.failed(
                    SelectionFailure.LOCATION_NOT_ADMISSIBLE,
                    "Location cannot accommodate the required resources. "
                    f"Available: {_format_mb(available.memory)}MB memory, "
                    f"{_format_mb(available.disk)}MB disk. "
                    f"Required: {requirement.memory}MB memory, {requirement.disk}MB disk.",
                )

            # Rank the same snapshot the admissibility check used
            location_nodes = [node for node in nodes if not node.maintenance_mode]
            viable = [node for node in location_nodes if node.can_fit(requirement)]

            if not viable:
                logger.info(f"[selector] no viable nodes in location {location_id}")
                return NodeSelectionResult.failed(
                    SelectionFailure.NO_VIABLE_NODES,
                    "No viable nodes found that can accommodate the requirements",
                )

            scored = []
            for node in viable:
                load = calculate_load_score(node, self._config.memory_per_workload_mb)
                fit = calculate_fit_score(node, requirement)
                scored.append((node, load, fit))

            scored.sort(key=lambda item: placement_sort_key(item[2], item[1], item[0].node_id))

            winner, winner_load, winner_fit = scored[0]

            reason = (
                f"Selected based on optimal fit score ({winner_fit}) "
                f"and load score ({float(winner_load)})"
            )
            remark = STATUS_REMARKS.get(winner.status)
            if remark:
                reason += f". {remark}"

            alternatives = [
                AlternativeNode(
                    node_id=node.node_id,
                    node_name=node.node_name,
                    load_score=float(load),
                    fit_score=fit,
                    reason_not_selected=REASON_LOWER_FIT if fit < winner_fit else REASON_HIGHER_LOAD,
                )
                for node, load, fit in scored[1:1 + self._config.max_alternatives]
            ]

            logger.info(
                f"[selector] selected node {winner.node_id} ({winner.node_name}) "
                f"for location {location_id}"
            )

            return NodeSelectionResult(
                success=True,
                selected_node=SelectedNode(
                    node_id=winner.node_id,
                    node_name=winner.node_name,
                    node_uuid=winner.node_uuid,
                    fqdn=winner.fqdn,
                    location_id=winner.location_id,
                    available_memory=winner.available_memory,
                    available_disk=winner.available_disk,
                    current_load_score=float(winner_load),
                    fit_score=winner_fit,
                    selection_reason=reason,
                ),
                alternatives=alternatives,
            )

        except Exception as e:
            logger.error(
                f"[selector] error selecting node for location {location_id}: {e}",
                exc_info=True,
            )
            return NodeSelectionResult.failed(
                SelectionFailure.INTERNAL_ERROR,
                "An error occurred while selecting the optimal node",
            )
