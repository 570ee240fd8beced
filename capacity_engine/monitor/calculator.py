# capacity_engine/monitor/calculator.py
"""Node usage calculation from raw panel descriptors."""

from datetime import datetime
from typing import Iterable, Optional

from capacity_engine.core.models import (
    NodeDescriptor, NodeResourceUsage, NodeStatus, WorkloadDescriptor, round2, utcnow
)

FULL_THRESHOLD = 95.0
LIMITED_THRESHOLD = 80.0


def classify_status(maintenance: bool, memory_percentage: float, disk_percentage: float) -> NodeStatus:
    """
    Derive capacity status.

    The maintenance flag wins over any numeric threshold.
    """
    if maintenance:
        return NodeStatus.MAINTENANCE

    max_usage = max(memory_percentage, disk_percentage)
    if max_usage >= FULL_THRESHOLD:
        return NodeStatus.FULL
    if max_usage >= LIMITED_THRESHOLD:
        return NodeStatus.LIMITED
    return NodeStatus.AVAILABLE


def effective_limit(total: int, overallocate: int) -> float:
    return total + total * overallocate / 100


def usage_percentage(allocated: float, limit: float) -> float:
    if limit <= 0:
        return 0.0
    return allocated / limit * 100


def calculate_node_usage(
    node: NodeDescriptor,
    workloads: Iterable[WorkloadDescriptor],
    computed_at: Optional[datetime] = None,
) -> NodeResourceUsage:
    """Compute the usage snapshot of one node from its hosted workloads."""
    workloads = list(workloads)

    effective_memory = effective_limit(node.memory, node.memory_overallocate)
    effective_disk = effective_limit(node.disk, node.disk_overallocate)

    allocated_memory = sum(w.memory or 0 for w in workloads)
    allocated_disk = sum(w.disk or 0 for w in workloads)

    memory_pct = usage_percentage(allocated_memory, effective_memory)
    disk_pct = usage_percentage(allocated_disk, effective_disk)

    suspended = sum(1 for w in workloads if w.suspended)

    return NodeResourceUsage(
        node_id=node.id,
        node_name=node.name,
        node_uuid=node.uuid,
        location_id=node.location_id,
        fqdn=node.fqdn,
        maintenance_mode=node.maintenance_mode,
        total_memory=node.memory,
        total_disk=node.disk,
        memory_overallocate=node.memory_overallocate,
        disk_overallocate=node.disk_overallocate,
        allocated_memory=allocated_memory,
        allocated_disk=allocated_disk,
        total_servers=len(workloads),
        active_servers=len(workloads) - suspended,
        suspended_servers=suspended,
        memory_usage_percentage=round2(memory_pct),
        disk_usage_percentage=round2(disk_pct),
        effective_memory_limit=effective_memory,
        effective_disk_limit=effective_disk,
        available_memory=max(0.0, effective_memory - allocated_memory),
        available_disk=max(0.0, effective_disk - allocated_disk),
        status=classify_status(node.maintenance_mode, memory_pct, disk_pct),
        last_updated=computed_at or utcnow(),
    )
