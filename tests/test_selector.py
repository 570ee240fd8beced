#tests\test_selector.py

"""Test optimal node selection."""

from capacity_engine.core.errors import PanelError
from capacity_engine.core.models import ResourceRequirement
from capacity_engine.placement.results import SelectionFailure
from capacity_engine.placement.selector import REASON_HIGHER_LOAD, REASON_LOWER_FIT


REQUIREMENT = ResourceRequirement(memory=2048, disk=1024)


class TestSelection:
    """Test ranking and the winner."""

    def test_single_node(self, selector, source, make_node, make_server):
        source.put_node(make_node(1))
        source.add_server(make_server(1, memory=2048))

        result = selector.select_optimal_node(1, REQUIREMENT)

        assert result.success
        assert result.failure_reason is None
        assert result.selected_node.node_id == 1
        assert result.selected_node.fqdn == "node1.example.com"
        assert result.selected_node.current_load_score == 12.5
        assert result.selected_node.fit_score == 33.0
        assert result.selected_node.selection_reason == (
            "Selected based on optimal fit score (33.0) and load score (12.5). "
            "Node has excellent availability"
        )
        assert result.alternatives == []

    def test_equal_fit_prefers_lower_load(self, selector, source, make_node, make_server):
        """Test same allocation spread over more servers loses on density."""
        source.put_node(make_node(1))
        source.put_node(make_node(2))
        for _ in range(4):
            source.add_server(make_server(1, memory=512))
        source.add_server(make_server(2, memory=2048))

        result = selector.select_optimal_node(1, REQUIREMENT)

        assert result.success
        assert result.selected_node.node_id == 2
        assert len(result.alternatives) == 1

        alternative = result.alternatives[0]
        assert alternative.node_id == 1
        assert alternative.fit_score == result.selected_node.fit_score
        assert alternative.load_score > result.selected_node.current_load_score
        assert alternative.reason_not_selected == REASON_HIGHER_LOAD

    def test_higher_fit_wins(self, selector, source, make_node, make_server):
        source.put_node(make_node(1))
        source.put_node(make_node(2))
        source.add_server(make_server(2, memory=3072))

        result = selector.select_optimal_node(1, REQUIREMENT)

        assert result.selected_node.node_id == 2
        assert result.alternatives[0].node_id == 1
        assert result.alternatives[0].reason_not_selected == REASON_LOWER_FIT

    def test_identical_nodes_deterministic(self, selector, source, make_node):
        for node_id in (3, 1, 2):
            source.put_node(make_node(node_id))

        first = selector.select_optimal_node(1, REQUIREMENT)
        second = selector.select_optimal_node(1, REQUIREMENT, force_refresh=True)

        assert first.selected_node.node_id == 1
        assert second.selected_node.node_id == 1
        assert [a.node_id for a in first.alternatives] == [2, 3]

    def test_alternatives_capped(self, selector, source, make_node):
        for node_id in range(1, 7):
            source.put_node(make_node(node_id))

        result = selector.select_optimal_node(1, REQUIREMENT)

        assert len(result.alternatives) == 3

    def test_maintenance_node_skipped(self, selector, source, make_node):
        source.put_node(make_node(1, memory=65536, maintenance_mode=True))
        source.put_node(make_node(2))

        result = selector.select_optimal_node(1, REQUIREMENT)

        assert result.selected_node.node_id == 2
        assert all(a.node_id != 1 for a in result.alternatives)

    def test_limited_node_remark(self, selector, source, make_node, make_server):
        source.put_node(make_node(1, memory=10000))
        source.add_server(make_server(1, memory=8000))

        result = selector.select_optimal_node(1, ResourceRequirement(memory=1000, disk=0))

        assert result.selected_node.selection_reason.endswith(
            "Node has limited capacity but is still viable"
        )


class TestSelectionFailures:
    """Test failure reasons."""

    def test_location_not_admissible(self, selector, source, make_node, make_server):
        source.put_node(make_node(1))
        source.add_server(make_server(1, memory=2048))

        result = selector.select_optimal_node(1, ResourceRequirement(memory=10000, disk=1024))

        assert not result.success
        assert result.selected_node is None
        assert result.failure_reason == SelectionFailure.LOCATION_NOT_ADMISSIBLE
        assert result.error == (
            "Location cannot accommodate the required resources. "
            "Available: 6144MB memory, 51200MB disk. "
            "Required: 10000MB memory, 1024MB disk."
        )

    def test_unknown_location_not_admissible(self, selector, source):
        result = selector.select_optimal_node(3, REQUIREMENT)

        assert result.failure_reason == SelectionFailure.LOCATION_NOT_ADMISSIBLE

    def test_no_viable_nodes(self, selector, source, make_node, make_server):
        """Test capacity exists in aggregate but no single node fits."""
        source.put_node(make_node(1))
        source.put_node(make_node(2))
        source.add_server(make_server(1, memory=7192))
        source.add_server(make_server(2, memory=7192))

        result = selector.select_optimal_node(1, ResourceRequirement(memory=1500, disk=0))

        assert not result.success
        assert result.failure_reason == SelectionFailure.NO_VIABLE_NODES
        assert result.error == "No viable nodes found that can accommodate the requirements"

    def test_internal_error(self, selector, evaluator, source, make_node, monkeypatch):
        source.put_node(make_node(1))

        def boom(*args, **kwargs):
            raise RuntimeError("unexpected")

        monkeypatch.setattr(evaluator, "evaluate_location", boom)

        result = selector.select_optimal_node(1, REQUIREMENT)

        assert not result.success
        assert result.failure_reason == SelectionFailure.INTERNAL_ERROR
        assert result.error == "An error occurred while selecting the optimal node"

    def test_forced_selection_with_failing_panel(self, selector, source, make_node):
        source.put_node(make_node(1))
        assert selector.select_optimal_node(1, REQUIREMENT).success

        source.fail_with = PanelError("Cannot connect to panel", code="CONNECTION_ERROR")
        result = selector.select_optimal_node(1, REQUIREMENT, force_refresh=True)

        assert not result.success
        assert result.selected_node is None
        assert result.failure_reason == SelectionFailure.LOCATION_NOT_ADMISSIBLE
