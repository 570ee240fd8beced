# capacity_engine/core/source.py

from abc import ABC, abstractmethod
from typing import List, Optional

from capacity_engine.core.models import NodeDescriptor, WorkloadDescriptor


class PanelDataSource(ABC):
    """
    Read contract for node and server attributes held by the panel.
    """

    @abstractmethod
    def get_all_nodes(self) -> List[NodeDescriptor]:
        """
        Fetch every node on the panel.
        Raises PanelError if the panel cannot be reached.
        """
        raise NotImplementedError

    @abstractmethod
    def get_node_details(self, node_id: int) -> Optional[NodeDescriptor]:
        """
        Fetch a single node.
        Returns None if the node does not exist.
        """
        raise NotImplementedError

    @abstractmethod
    def get_servers_by_node(self, node_id: int) -> List[WorkloadDescriptor]:
        """
        Fetch servers placed on one node.
        """
        raise NotImplementedError

    @abstractmethod
    def get_all_servers(self) -> List[WorkloadDescriptor]:
        """
        Fetch every server on the panel in one batch.
        Used for full-fleet refreshes.
        """
        raise NotImplementedError
