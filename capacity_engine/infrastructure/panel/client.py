# capacity_engine/infrastructure/panel/client.py
"""Panel application API client for node and server attributes."""

import logging
from typing import Any, Dict, List, Optional

import requests

from capacity_engine.core.errors import (
    PanelConfigurationError, PanelError, PanelNotFoundError
)
from capacity_engine.core.models import NodeDescriptor, WorkloadDescriptor
from capacity_engine.core.source import PanelDataSource

logger = logging.getLogger(__name__)

ACCEPT_HEADER = "Application/vnd.pterodactyl.v1+json"


def attributes_to_node(attrs: Dict[str, Any]) -> NodeDescriptor:
    """Convert panel node attributes to a descriptor."""
    return NodeDescriptor(
        id=attrs["id"],
        name=attrs.get("name", ""),
        uuid=attrs.get("uuid", ""),
        location_id=attrs["location_id"],
        fqdn=attrs.get("fqdn", ""),
        maintenance_mode=bool(attrs.get("maintenance_mode", False)),
        memory=attrs.get("memory") or 0,
        disk=attrs.get("disk") or 0,
        memory_overallocate=attrs.get("memory_overallocate") or 0,
        disk_overallocate=attrs.get("disk_overallocate") or 0,
    )


def attributes_to_workload(attrs: Dict[str, Any]) -> WorkloadDescriptor:
    """Convert panel server attributes to a descriptor."""
    limits = attrs.get("limits") or {}
    return WorkloadDescriptor(
        id=attrs["id"],
        node_id=attrs["node"],
        suspended=bool(attrs.get("suspended", False)),
        memory=limits.get("memory") or 0,
        disk=limits.get("disk") or 0,
    )


class PanelClient(PanelDataSource):
    """Client for the panel application API."""

    def __init__(self, panel_url: str, api_key: str, timeout: int = 30, per_page: int = 100):
        """
        Initialize client.

        Args:
            panel_url: Base URL of the panel (e.g., "https://panel.example.com")
            api_key: Application API key
            timeout: Request timeout in seconds
            per_page: Page size for list endpoints
        """
        if not panel_url or not api_key:
            raise PanelConfigurationError(
                "Missing panel configuration. Set PANEL_URL and PANEL_API_KEY.",
                status_code=500,
                code="MISSING_CONFIG",
            )

        self.base_url = panel_url.rstrip('/')
        self.timeout = timeout
        self.per_page = per_page
        self._headers = {
            "Authorization": f"Bearer {api_key}",
            "Accept": ACCEPT_HEADER,
        }

    # -------------------------
    # HTTP
    # -------------------------

    def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            response = requests.get(
                url,
                headers=self._headers,
                params=params,
                timeout=self.timeout
            )
        except requests.exceptions.Timeout:
            raise PanelError(f"Panel request timeout after {self.timeout}s", code="TIMEOUT")
        except requests.exceptions.ConnectionError:
            raise PanelError(f"Cannot connect to panel at {self.base_url}", code="CONNECTION_ERROR")

        if not response.ok:
            raise self._error_from_response(response)

        try:
            return response.json()
        except ValueError as e:
            raise PanelError(
                "Failed to parse API response",
                status_code=response.status_code,
                code="PARSE_ERROR",
                details=str(e),
            ) from e

    @staticmethod
    def _error_from_response(response: requests.Response) -> PanelError:
        message = f"HTTP {response.status_code}: {response.reason}"
        code = str(response.status_code)
        details = None

        try:
            data = response.json()
            errors = data.get("errors") if isinstance(data, dict) else None
            if isinstance(errors, list) and errors:
                message = ", ".join(
                    str(err.get("detail") or err.get("message") or "") for err in errors
                )
                code = errors[0].get("code") or code
                details = errors
        except ValueError:
            pass

        error_cls = PanelNotFoundError if response.status_code == 404 else PanelError
        return error_cls(message, status_code=response.status_code, code=code, details=details)

    def _get_all_pages(self, path: str) -> List[Dict[str, Any]]:
        """Collect attributes from every page of a list endpoint."""
        items: List[Dict[str, Any]] = []
        page = 1

        while True:
            data = self._get(path, params={"page": page, "per_page": self.per_page})
            items.extend(
                obj["attributes"] for obj in data.get("data", []) if obj.get("attributes")
            )

            pagination = (data.get("meta") or {}).get("pagination") or {}
            total_pages = pagination.get("total_pages", 1)
            if page >= total_pages:
                break
            page += 1

        return items

    # -------------------------
    # DATA SOURCE
    # -------------------------

    def get_all_nodes(self) -> List[NodeDescriptor]:
        nodes = [attributes_to_node(a) for a in self._get_all_pages("/api/application/nodes")]
        logger.debug(f"[panel] fetched {len(nodes)} nodes")
        return nodes

    def get_node_details(self, node_id: int) -> Optional[NodeDescriptor]:
        try:
            data = self._get(f"/api/application/nodes/{node_id}")
        except PanelNotFoundError:
            return None

        attrs = data.get("attributes")
        if not attrs:
            return None
        return attributes_to_node(attrs)

    def get_all_servers(self) -> List[WorkloadDescriptor]:
        servers = [
            attributes_to_workload(a) for a in self._get_all_pages("/api/application/servers")
        ]
        logger.debug(f"[panel] fetched {len(servers)} servers")
        return servers

    def get_servers_by_node(self, node_id: int) -> List[WorkloadDescriptor]:
        # The application API has no node filter for servers
        return [s for s in self.get_all_servers() if s.node_id == node_id]
