from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from capacity_engine.core.models import NodeStatus, ResourceRequirement
from capacity_engine.placement.results import SelectionFailure


class Schema(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# ============================================
# REQUESTS
# ============================================

class RequirementRequest(BaseModel):
    memory: int = Field(..., ge=1)
    disk: int = Field(..., ge=1)
    cpu: Optional[int] = Field(default=None, ge=0)

    def to_requirement(self) -> ResourceRequirement:
        return ResourceRequirement(memory=self.memory, disk=self.disk, cpu=self.cpu)


class MultiLocationCheckRequest(RequirementRequest):
    location_ids: Optional[List[int]] = None
    limit: int = Field(default=3, ge=1)


# ============================================
# USAGE
# ============================================

class NodeUsageResponse(Schema):
    node_id: int
    node_name: str
    node_uuid: str
    location_id: int
    fqdn: str
    maintenance_mode: bool
    total_memory: int
    total_disk: int
    memory_overallocate: int
    disk_overallocate: int
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
    last_updated: datetime


class LocationSummaryResponse(Schema):
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
    last_updated: datetime


class LocationDetailResponse(BaseModel):
    location: LocationSummaryResponse
    nodes: Optional[List[NodeUsageResponse]] = None


class FleetStatsResponse(Schema):
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
    last_updated: datetime


# ============================================
# CHECKS
# ============================================

class RequirementResponse(Schema):
    memory: int
    disk: int
    cpu: Optional[int] = None


class ResourceAmountsResponse(Schema):
    memory: float
    disk: float


class UtilizationAfterResponse(Schema):
    memory_percentage: float
    disk_percentage: float


class RecommendedNodeResponse(Schema):
    node_id: int
    node_name: str
    load_score: float
    fit_score: float


class CapacityCheckResponse(Schema):
    can_accommodate: bool
    location_id: int
    location_status: NodeStatus
    available_nodes: int
    total_capacity: ResourceAmountsResponse
    available_capacity: ResourceAmountsResponse
    required_resources: RequirementResponse
    utilization_after_creation: UtilizationAfterResponse
    recommended_nodes: List[RecommendedNodeResponse]
    warnings: List[str]


class NodeCapacityCheckResponse(Schema):
    node_id: int
    found: bool
    can_accommodate: bool
    required_resources: RequirementResponse
    available_resources: ResourceAmountsResponse
    utilization_after: Optional[UtilizationAfterResponse] = None
    node_status: Optional[NodeStatus] = None


class MultiLocationCheckResponse(BaseModel):
    capacity_checks: List[CapacityCheckResponse]
    recommended_locations: List[CapacityCheckResponse]


# ============================================
# SELECTION
# ============================================

class SelectedNodeResponse(Schema):
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


class AlternativeNodeResponse(Schema):
    node_id: int
    node_name: str
    load_score: float
    fit_score: float
    reason_not_selected: str


class NodeSelectionResponse(Schema):
    success: bool
    selected_node: Optional[SelectedNodeResponse] = None
    alternatives: List[AlternativeNodeResponse] = Field(default_factory=list)
    error: Optional[str] = None
    failure_reason: Optional[SelectionFailure] = None
