#capacity_engine\placement\results.py
"""Result types returned by the capacity evaluator and the node selector."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from capacity_engine.core.models import NodeStatus, ResourceRequirement


# ============================================
# CAPACITY CHECK
# ============================================

@dataclass(frozen=True)
class ResourceAmounts:
    memory: float
    disk: float


@dataclass(frozen=True)
class UtilizationAfter:
    memory_percentage: float
    disk_percentage: float


@dataclass(frozen=True)
class RecommendedNode:
    node_id: int
    node_name: str
    load_score: float
    fit_score: float


@dataclass(frozen=True)
class CapacityCheckResult:
    """Admissibility of a requirement in one location."""
    can_accommodate: bool
    location_id: int
    location_status: NodeStatus
    available_nodes: int
    total_capacity: ResourceAmounts
    available_capacity: ResourceAmounts
    required_resources: ResourceRequirement
    utilization_after_creation: UtilizationAfter
    recommended_nodes: List[RecommendedNode] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @classmethod
    def unavailable(
        cls,
        location_id: int,
        requirement: ResourceRequirement,
        warning: str,
    ) -> "CapacityCheckResult":
        """Non-admissible result for a location that could not be evaluated."""
        return cls(
            can_accommodate=False,
            location_id=location_id,
            location_status=NodeStatus.MAINTENANCE,
            available_nodes=0,
            total_capacity=ResourceAmounts(memory=0, disk=0),
            available_capacity=ResourceAmounts(memory=0, disk=0),
            required_resources=requirement,
            utilization_after_creation=UtilizationAfter(memory_percentage=0.0, disk_percentage=0.0),
            warnings=[warning],
        )


@dataclass(frozen=True)
class NodeCapacityCheck:
    """Admissibility of a requirement on one specific node."""
    node_id: int
    found: bool
    can_accommodate: bool
    required_resources: ResourceRequirement
    available_resources: ResourceAmounts
    utilization_after: Optional[UtilizationAfter] = None
    node_status: Optional[NodeStatus] = None


# ============================================
# NODE SELECTION
# ============================================

class SelectionFailure(Enum):
    """Why no node was selected."""
    LOCATION_NOT_ADMISSIBLE = "location_not_admissible"
    NO_VIABLE_NODES = "no_viable_nodes"
    INTERNAL_ERROR = "internal_error"


@dataclass(frozen=True)
class SelectedNode:
    node_id: int
    node_name: str
    node_uuid: str
    fqdn: str
    location_id: int
    available_memory: float
    available_disk: float
    current_load_score: float
    fit_score: float
    selection_reason: str


@dataclass(frozen=True)
class AlternativeNode:
    node_id: int
    node_name: str
    load_score: float
    fit_score: float
    reason_not_selected: str


@dataclass(frozen=True)
class NodeSelectionResult:
    success: bool
    selected_node: Optional[SelectedNode] = None
    alternatives: List[AlternativeNode] = field(default_factory=list)
    error: Optional[str] = None
    failure_reason: Optional[SelectionFailure] = None

    @classmethod
    def failed(cls, reason: SelectionFailure, error: str) -> "NodeSelectionResult":
        return cls(success=False, error=error, failure_reason=reason)
