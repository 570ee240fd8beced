#capacity_engine\core\models.py
"""Capacity domain models: raw panel descriptors and computed usage records."""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from capacity_engine.core.errors import CapacityValidationError


def round2(value: float) -> float:
    """Round half-up to two decimal places."""
    return math.floor(value * 100 + 0.5) / 100


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


# ============================================
# ENUMS
# ============================================

class NodeStatus(Enum):
    """Capacity status of a node or a location."""
    AVAILABLE = "available"
    LIMITED = "limited"
    FULL = "full"
    MAINTENANCE = "maintenance"


# ============================================
# PANEL DESCRIPTORS
# ============================================

@dataclass(frozen=True)
class NodeDescriptor:
    """Node attributes as reported by the panel."""
    id: int
    name: str
    location_id: int
    uuid: str = ""
    fqdn: str = ""
    maintenance_mode: bool = False

    memory: int = 0  # MB
    disk: int = 0  # MB
    memory_overallocate: int = 0  # percent
    disk_overallocate: int = 0  # percent


@dataclass(frozen=True)
class WorkloadDescriptor:
    """Server attributes as reported by the panel."""
    id: int
    node_id: int
    suspended: bool = False
    memory: int = 0  # MB, declared limit
    disk: int = 0  # MB, declared limit


# ============================================
# REQUIREMENTS
# ============================================

@dataclass(frozen=True)
class ResourceRequirement:
    """Resources a prospective workload needs."""
    memory: int  # MB
    disk: int  # MB
    cpu: Optional[int] = None  # percent, informational only

    def __post_init__(self):
        if self.memory < 0 or self.disk < 0:
            raise CapacityValidationError("memory and disk requirements must be non-negative")
        if self.cpu is not None and self.cpu < 0:
            raise CapacityValidationError("cpu requirement must be non-negative")


# ============================================
# COMPUTED USAGE
# ============================================

@dataclass(frozen=True)
class NodeResourceUsage:
    """Point-in-time allocation snapshot of one node."""
    node_id: int
    node_name: str
    node_uuid: str
    location_id: int
    fqdn: str
    maintenance_mode: bool

    # Capacity
    total_memory: int
    total_disk: int
    memory_overallocate: int
    disk_overallocate: int

    # Reserved by hosted workloads
    allocated_memory: int
    allocated_disk: int

    total_servers: int
    active_servers: int
    suspended_servers: int

    memory_usage_percentage: float
    disk_usage_percentage: float
    effective_memory_limit: float
    effective_disk_limit: float
    available_memory: float
    available_disk: float

    status: NodeStatus
    last_updated: datetime = field(default_factory=utcnow)

    def can_fit(self, requirement: ResourceRequirement) -> bool:
        """Check if the node has headroom for the requirement."""
        return (
            self.available_memory >= requirement.memory and
            self.available_disk >= requirement.disk
        )


@dataclass(frozen=True)
class LocationCapacitySummary:
    """Aggregate capacity of all nodes sharing a location."""
    location_id: int
    total_nodes: int
    active_nodes: int
    maintenance_nodes: int

    total_memory: int
    total_disk: int
    allocated_memory: int
    allocated_disk: int
    available_memory: float
    available_disk: float

    memory_usage_percentage: float
    disk_usage_percentage: float
    total_servers: int

    status: NodeStatus
    last_updated: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class FleetStats:
    """Fleet-wide monitoring statistics."""
    total_nodes: int
    active_nodes: int
    maintenance_nodes: int
    total_servers: int
    total_memory: int
    total_disk: int
    allocated_memory: int
    allocated_disk: int
    overall_memory_usage: float
    overall_disk_usage: float
    last_updated: datetime = field(default_factory=utcnow)

    @classmethod
    def empty(cls) -> "FleetStats":
        return cls(
            total_nodes=0,
            active_nodes=0,
            maintenance_nodes=0,
            total_servers=0,
            total_memory=0,
            total_disk=0,
            allocated_memory=0,
            allocated_disk=0,
            overall_memory_usage=0.0,
            overall_disk_usage=0.0,
        )
