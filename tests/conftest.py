#tests\conftest.py

"""Pytest configuration and fixtures."""

import pytest

from capacity_engine.core.models import NodeDescriptor, WorkloadDescriptor
from capacity_engine.infrastructure.memory.source import InMemoryPanelDataSource
from capacity_engine.monitor.cache import UsageCache
from capacity_engine.monitor.config import MonitorConfig
from capacity_engine.monitor.service import NodeMonitorService
from capacity_engine.placement.evaluator import CapacityEvaluator
from capacity_engine.placement.selector import NodeSelector


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


# ============================================
# FACTORIES
# ============================================

@pytest.fixture
def make_node():
    """Factory for panel node descriptors."""
    def _make(
        node_id: int,
        location_id: int = 1,
        memory: int = 8192,
        disk: int = 51200,
        memory_overallocate: int = 0,
        disk_overallocate: int = 0,
        maintenance_mode: bool = False,
    ) -> NodeDescriptor:
        return NodeDescriptor(
            id=node_id,
            name=f"node-{node_id}",
            uuid=f"uuid-{node_id}",
            location_id=location_id,
            fqdn=f"node{node_id}.example.com",
            maintenance_mode=maintenance_mode,
            memory=memory,
            disk=disk,
            memory_overallocate=memory_overallocate,
            disk_overallocate=disk_overallocate,
        )
    return _make


@pytest.fixture
def make_server():
    """Factory for panel server descriptors with unique ids."""
    counter = {"next": 1}

    def _make(node_id: int, memory: int = 1024, disk: int = 0, suspended: bool = False) -> WorkloadDescriptor:
        server_id = counter["next"]
        counter["next"] += 1
        return WorkloadDescriptor(
            id=server_id,
            node_id=node_id,
            suspended=suspended,
            memory=memory,
            disk=disk,
        )
    return _make


# ============================================
# SERVICES
# ============================================

@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config():
    return MonitorConfig(fetch_workers=2)


@pytest.fixture
def source():
    """Empty in-memory panel; tests add nodes and servers."""
    return InMemoryPanelDataSource()


@pytest.fixture
def monitor(source, config, clock):
    cache = UsageCache(
        ttl_seconds=config.cache_ttl_seconds,
        full_update_interval_seconds=config.full_update_interval_seconds,
        clock=clock,
    )
    return NodeMonitorService(source=source, config=config, cache=cache)


@pytest.fixture
def evaluator(monitor):
    return CapacityEvaluator(monitor=monitor)


@pytest.fixture
def selector(monitor, evaluator):
    return NodeSelector(monitor=monitor, evaluator=evaluator)
