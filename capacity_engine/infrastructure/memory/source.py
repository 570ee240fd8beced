# capacity_engine/infrastructure/memory/source.py

from collections import Counter
from threading import Lock
from typing import Dict, Iterable, List, Optional

from capacity_engine.core.errors import PanelError
from capacity_engine.core.models import NodeDescriptor, WorkloadDescriptor
from capacity_engine.core.source import PanelDataSource


class InMemoryPanelDataSource(PanelDataSource):
    """Fixture data source. Counts calls and can be told to fail."""

    def __init__(
        self,
        nodes: Iterable[NodeDescriptor] = (),
        servers: Iterable[WorkloadDescriptor] = (),
    ):
        self._nodes: Dict[int, NodeDescriptor] = {n.id: n for n in nodes}
        self._servers: List[WorkloadDescriptor] = list(servers)
        self._lock = Lock()
        self.calls: Counter = Counter()
        self.fail_with: Optional[Exception] = None

    def _record(self, name: str) -> None:
        with self._lock:
            self.calls[name] += 1
        if self.fail_with is not None:
            raise self.fail_with

    def put_node(self, node: NodeDescriptor) -> None:
        with self._lock:
            self._nodes[node.id] = node

    def add_server(self, server: WorkloadDescriptor) -> None:
        with self._lock:
            self._servers.append(server)

    def get_all_nodes(self) -> List[NodeDescriptor]:
        self._record("get_all_nodes")
        return list(self._nodes.values())

    def get_node_details(self, node_id: int) -> Optional[NodeDescriptor]:
        self._record("get_node_details")
        return self._nodes.get(node_id)

    def get_servers_by_node(self, node_id: int) -> List[WorkloadDescriptor]:
        self._record("get_servers_by_node")
        return [s for s in self._servers if s.node_id == node_id]

    def get_all_servers(self) -> List[WorkloadDescriptor]:
        self._record("get_all_servers")
        return list(self._servers)


class UnavailablePanelDataSource(InMemoryPanelDataSource):
    """Data source whose every call fails like an unreachable panel."""

    def __init__(self):
        super().__init__()
        self.fail_with = PanelError("Cannot connect to panel", code="CONNECTION_ERROR")
