# capacity_engine/monitor/aggregator.py
"""Location and fleet aggregation over node usage snapshots."""

from typing import Iterable

from capacity_engine.core.models import (
    FleetStats, LocationCapacitySummary, NodeResourceUsage, NodeStatus, round2
)
from capacity_engine.monitor.calculator import classify_status, usage_percentage


def calculate_location_capacity(
    location_id: int,
    usages: Iterable[NodeResourceUsage],
) -> LocationCapacitySummary:
    """
    Reduce the nodes of one location into a capacity summary.

    Percentages come from summed totals, not averaged per node.
    A location without active nodes is reported as maintenance.
    """
    nodes = [u for u in usages if u.location_id == location_id]

    total_memory = sum(n.total_memory for n in nodes)
    total_disk = sum(n.total_disk for n in nodes)
    allocated_memory = sum(n.allocated_memory for n in nodes)
    allocated_disk = sum(n.allocated_disk for n in nodes)

    memory_pct = usage_percentage(allocated_memory, total_memory)
    disk_pct = usage_percentage(allocated_disk, total_disk)

    maintenance_nodes = sum(1 for n in nodes if n.maintenance_mode)
    active_nodes = len(nodes) - maintenance_nodes

    if active_nodes == 0:
        status = NodeStatus.MAINTENANCE
    else:
        status = classify_status(False, memory_pct, disk_pct)

    return LocationCapacitySummary(
        location_id=location_id,
        total_nodes=len(nodes),
        active_nodes=active_nodes,
        maintenance_nodes=maintenance_nodes,
        total_memory=total_memory,
        total_disk=total_disk,
        allocated_memory=allocated_memory,
        allocated_disk=allocated_disk,
        available_memory=sum(n.available_memory for n in nodes),
        available_disk=sum(n.available_disk for n in nodes),
        memory_usage_percentage=round2(memory_pct),
        disk_usage_percentage=round2(disk_pct),
        total_servers=sum(n.total_servers for n in nodes),
        status=status,
    )


def calculate_fleet_stats(usages: Iterable[NodeResourceUsage]) -> FleetStats:
    """Overall statistics across every known node."""
    nodes = list(usages)

    total_memory = sum(n.total_memory for n in nodes)
    total_disk = sum(n.total_disk for n in nodes)
    allocated_memory = sum(n.allocated_memory for n in nodes)
    allocated_disk = sum(n.allocated_disk for n in nodes)
    maintenance_nodes = sum(1 for n in nodes if n.maintenance_mode)

    return FleetStats(
        total_nodes=len(nodes),
        active_nodes=len(nodes) - maintenance_nodes,
        maintenance_nodes=maintenance_nodes,
        total_servers=sum(n.total_servers for n in nodes),
        total_memory=total_memory,
        total_disk=total_disk,
        allocated_memory=allocated_memory,
        allocated_disk=allocated_disk,
        overall_memory_usage=round2(usage_percentage(allocated_memory, total_memory)),
        overall_disk_usage=round2(usage_percentage(allocated_disk, total_disk)),
    )
