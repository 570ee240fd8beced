#capacity_engine\container.py

"""Dependency injection container - wires all services together."""

from functools import lru_cache

from capacity_engine.infrastructure.panel.client import PanelClient
from capacity_engine.infrastructure.panel.config import get_panel_settings

from capacity_engine.monitor.config import MonitorSettings
from capacity_engine.monitor.service import NodeMonitorService
from capacity_engine.placement.evaluator import CapacityEvaluator
from capacity_engine.placement.selector import NodeSelector


# ============================================
# DATA SOURCE
# ============================================

@lru_cache
def get_panel_client() -> PanelClient:
    settings = get_panel_settings()
    return PanelClient(
        panel_url=settings.base_url,
        api_key=settings.panel_api_key,
        timeout=settings.request_timeout,
        per_page=settings.per_page,
    )


# ============================================
# SERVICES
# ============================================

@lru_cache
def get_monitor_service() -> NodeMonitorService:
    return NodeMonitorService(
        source=get_panel_client(),
        config=MonitorSettings().to_config(),
    )


@lru_cache
def get_capacity_evaluator() -> CapacityEvaluator:
    return CapacityEvaluator(monitor=get_monitor_service())


@lru_cache
def get_node_selector() -> NodeSelector:
    return NodeSelector(
        monitor=get_monitor_service(),
        evaluator=get_capacity_evaluator(),
    )
