# capacity_engine/api/routes/capacity.py
"""Capacity monitoring and placement API routes."""

from typing import List

from fastapi import APIRouter, Depends, HTTPException

from capacity_engine.api.schemas.capacity import (
    CapacityCheckResponse,
    FleetStatsResponse,
    LocationDetailResponse,
    LocationSummaryResponse,
    MultiLocationCheckRequest,
    MultiLocationCheckResponse,
    NodeCapacityCheckResponse,
    NodeSelectionResponse,
    NodeUsageResponse,
    RequirementRequest,
)
from capacity_engine.container import (
    get_capacity_evaluator, get_monitor_service, get_node_selector
)
from capacity_engine.monitor.service import NodeMonitorService
from capacity_engine.placement.evaluator import CapacityEvaluator
from capacity_engine.placement.selector import NodeSelector

router = APIRouter(prefix="/capacity", tags=["capacity"])


# ============================================
# NODES
# ============================================

@router.get("/nodes", response_model=List[NodeUsageResponse])
def list_nodes(
    force_refresh: bool = False,
    monitor: NodeMonitorService = Depends(get_monitor_service),
):
    """List usage of every node on the panel."""
    usages = sorted(monitor.get_all_nodes_usage(force_refresh), key=lambda u: u.node_id)
    return [NodeUsageResponse.model_validate(u) for u in usages]


@router.get("/nodes/{node_id}", response_model=NodeUsageResponse)
def get_node(
    node_id: int,
    force_refresh: bool = False,
    monitor: NodeMonitorService = Depends(get_monitor_service),
):
    """Get usage of one node."""
    usage = monitor.get_node_usage(node_id, force_refresh)

    if not usage:
        raise HTTPException(status_code=404, detail="Node not found or unavailable")

    return NodeUsageResponse.model_validate(usage)


@router.post("/nodes/{node_id}/check", response_model=NodeCapacityCheckResponse)
def check_node(
    node_id: int,
    request: RequirementRequest,
    force_refresh: bool = False,
    evaluator: CapacityEvaluator = Depends(get_capacity_evaluator),
):
    """Check whether a node can take the requested resources."""
    check = evaluator.check_node_capacity(node_id, request.to_requirement(), force_refresh)

    if not check.found:
        raise HTTPException(status_code=404, detail="Node not found or unavailable")

    return NodeCapacityCheckResponse.model_validate(check)


# ============================================
# LOCATIONS
# ============================================

@router.get("/locations", response_model=List[LocationSummaryResponse])
def list_locations(
    force_refresh: bool = False,
    monitor: NodeMonitorService = Depends(get_monitor_service),
):
    """List capacity summaries of every location."""
    return [
        LocationSummaryResponse.model_validate(s)
        for s in monitor.get_all_locations_capacity(force_refresh)
    ]


@router.get("/locations/{location_id}", response_model=LocationDetailResponse)
def get_location(
    location_id: int,
    include_nodes: bool = False,
    force_refresh: bool = False,
    monitor: NodeMonitorService = Depends(get_monitor_service),
):
    """Get capacity summary of one location, optionally with its nodes."""
    summary = monitor.get_location_capacity(location_id, force_refresh)

    if not summary:
        raise HTTPException(status_code=404, detail="Location not found or unavailable")

    nodes = None
    if include_nodes:
        nodes = [
            NodeUsageResponse.model_validate(u)
            for u in sorted(monitor.get_location_nodes(location_id), key=lambda u: u.node_id)
        ]

    return LocationDetailResponse(
        location=LocationSummaryResponse.model_validate(summary),
        nodes=nodes,
    )


@router.post("/locations/{location_id}/check", response_model=CapacityCheckResponse)
def check_location(
    location_id: int,
    request: RequirementRequest,
    force_refresh: bool = False,
    evaluator: CapacityEvaluator = Depends(get_capacity_evaluator),
):
    """Check whether a location can take the requested resources."""
    check = evaluator.check_location_capacity(location_id, request.to_requirement(), force_refresh)
    return CapacityCheckResponse.model_validate(check)


@router.post("/locations/{location_id}/select", response_model=NodeSelectionResponse)
def select_node(
    location_id: int,
    request: RequirementRequest,
    force_refresh: bool = False,
    selector: NodeSelector = Depends(get_node_selector),
):
    """Pick the node that should host the requested resources."""
    result = selector.select_optimal_node(location_id, request.to_requirement(), force_refresh)
    return NodeSelectionResponse.model_validate(result)


@router.post("/check", response_model=MultiLocationCheckResponse)
def check_locations(
    request: MultiLocationCheckRequest,
    force_refresh: bool = False,
    monitor: NodeMonitorService = Depends(get_monitor_service),
    evaluator: CapacityEvaluator = Depends(get_capacity_evaluator),
):
    """Check several locations (all by default) and rank the viable ones."""
    requirement = request.to_requirement()

    location_ids = request.location_ids
    if location_ids is None:
        location_ids = [s.location_id for s in monitor.get_all_locations_capacity(force_refresh)]
        force_refresh = False

    checks = evaluator.check_multi_location_capacity(location_ids, requirement, force_refresh)
    recommended = evaluator.recommend_locations(
        requirement, location_ids=location_ids, limit=request.limit
    )

    return MultiLocationCheckResponse(
        capacity_checks=[CapacityCheckResponse.model_validate(c) for c in checks],
        recommended_locations=[CapacityCheckResponse.model_validate(c) for c in recommended],
    )


# ============================================
# FLEET
# ============================================

@router.get("/stats", response_model=FleetStatsResponse)
def get_stats(
    force_refresh: bool = False,
    monitor: NodeMonitorService = Depends(get_monitor_service),
):
    """Fleet-wide monitoring statistics."""
    return FleetStatsResponse.model_validate(monitor.get_monitoring_stats(force_refresh))


@router.post("/refresh", response_model=FleetStatsResponse)
def refresh(monitor: NodeMonitorService = Depends(get_monitor_service)):
    """Drop cached data and recompute everything from the panel."""
    return FleetStatsResponse.model_validate(monitor.refresh_all_data())


@router.delete("/cache")
def clear_cache(monitor: NodeMonitorService = Depends(get_monitor_service)):
    """Drop cached monitoring data."""
    monitor.clear_cache()
    return {"status": "cleared"}
