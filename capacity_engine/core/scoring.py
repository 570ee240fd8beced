# capacity_engine/core/scoring.py
"""
Node scoring for placement.

Load score ranks nodes on general pressure (lower is better).
Fit score ranks nodes against one requirement (higher is better).
"""

import math
from dataclasses import dataclass
from typing import Optional, Tuple

from capacity_engine.core.models import (
    NodeResourceUsage, NodeStatus, ResourceRequirement, round2
)


# Load score weights
MEMORY_WEIGHT = 0.4
DISK_WEIGHT = 0.3
SERVER_DENSITY_WEIGHT = 0.2
AVAILABILITY_WEIGHT = 0.1

# Fit score weights
EFFICIENCY_WEIGHT = 0.3
UTILIZATION_WEIGHT = 0.2
TARGET_UTILIZATION = 70.0

DEFAULT_MEMORY_PER_WORKLOAD_MB = 1024

AVAILABILITY_PENALTY = {
    NodeStatus.AVAILABLE: 0.0,
    NodeStatus.LIMITED: 50.0,
    NodeStatus.FULL: 100.0,
    NodeStatus.MAINTENANCE: 100.0,
}


@dataclass(frozen=True)
class LoadScore:
    """
    Load score of a node.

    A node in maintenance is unselectable and carries no numeric value.
    Instances are unordered; sort with sort_key().
    """
    value: Optional[float] = None

    @classmethod
    def unselectable(cls) -> "LoadScore":
        return cls(value=None)

    @classmethod
    def scored(cls, value: float) -> "LoadScore":
        return cls(value=round2(value))

    @property
    def is_selectable(self) -> bool:
        return self.value is not None

    def sort_key(self) -> Tuple[int, float]:
        """Selectable scores ascending, unselectable last."""
        if self.value is None:
            return (1, 0.0)
        return (0, self.value)

    def __float__(self) -> float:
        if self.value is None:
            return math.inf
        return self.value


def _post_allocation_percentage(allocated: float, required: float, limit: float) -> float:
    if limit <= 0:
        return 0.0
    return (allocated + required) / limit * 100


def calculate_load_score(
    usage: NodeResourceUsage,
    memory_per_workload_mb: int = DEFAULT_MEMORY_PER_WORKLOAD_MB,
) -> LoadScore:
    """Weighted pressure of a node, independent of any requirement."""
    if usage.maintenance_mode:
        return LoadScore.unselectable()

    # Rough ceiling on how many workloads the node can hold
    estimated_max_servers = math.floor(usage.effective_memory_limit / memory_per_workload_mb)
    if estimated_max_servers > 0:
        server_density = min(100.0, usage.total_servers / estimated_max_servers * 100)
    else:
        server_density = 0.0

    score = (
        usage.memory_usage_percentage * MEMORY_WEIGHT +
        usage.disk_usage_percentage * DISK_WEIGHT +
        server_density * SERVER_DENSITY_WEIGHT +
        AVAILABILITY_PENALTY[usage.status] * AVAILABILITY_WEIGHT
    )
    return LoadScore.scored(score)


def calculate_fit_score(usage: NodeResourceUsage, requirement: ResourceRequirement) -> float:
    """How well a requirement fits a node; 0 when it cannot fit."""
    if usage.maintenance_mode:
        return 0.0

    if not usage.can_fit(requirement):
        return 0.0

    # Reward requirements that use a meaningful share of the free space
    memory_efficiency = (
        min(100.0, requirement.memory / usage.available_memory * 100)
        if usage.available_memory > 0 else 0.0
    )
    disk_efficiency = (
        min(100.0, requirement.disk / usage.available_disk * 100)
        if usage.available_disk > 0 else 0.0
    )

    memory_after = _post_allocation_percentage(
        usage.allocated_memory, requirement.memory, usage.effective_memory_limit
    )
    disk_after = _post_allocation_percentage(
        usage.allocated_disk, requirement.disk, usage.effective_disk_limit
    )
    memory_utilization_score = 100 - abs(memory_after - TARGET_UTILIZATION)
    disk_utilization_score = 100 - abs(disk_after - TARGET_UTILIZATION)

    fit = (
        memory_efficiency * EFFICIENCY_WEIGHT +
        disk_efficiency * EFFICIENCY_WEIGHT +
        memory_utilization_score * UTILIZATION_WEIGHT +
        disk_utilization_score * UTILIZATION_WEIGHT
    )
    return max(0.0, round2(fit))


def placement_sort_key(fit_score: float, load_score: LoadScore, node_id: int):
    """Fit descending, then load ascending, then node id for stable output."""
    return (-fit_score, load_score.sort_key(), node_id)
