"""
Tests for the map session that owns the live graph state.
"""

from collections.abc import Generator
from datetime import datetime
from typing import Any

import pytest

from cortex_map.layout import ForceDirectedEngine, RadialEngine
from cortex_map.session import MapSession
from cortex_map.shared.config import MapConfig
from cortex_map.shared.exceptions import ExportInProgressError, LayoutError
from cortex_map.shared.models import ExportSettings, NodeType


@pytest.fixture
def session(fast_config: MapConfig, example_payload: dict[str, Any]) -> Generator[MapSession]:
    session = MapSession(fast_config)
    session.load(example_payload)
    yield session
    session.close()


class TestLoading:
    """Tests for loading datasets."""

    def test_load_builds_graph_and_layout(self, session: MapSession) -> None:
        """Test loading normalizes the payload and starts the layout."""
        assert len(session.graph.nodes) == 5
        assert isinstance(session.layout_engine, ForceDirectedEngine)
        assert set(session.positions()) == set(session.graph.node_ids())

    def test_reload_replaces_graph(
        self, session: MapSession, large_payload: dict[str, Any]
    ) -> None:
        """Test loading another payload stops the old simulation."""
        old_simulation = session.layout_engine.simulation
        session.load(large_payload)
        assert old_simulation.is_stopped
        assert len(session.graph.nodes) == 139

    def test_transform_survives_rebuilds(
        self, session: MapSession, large_payload: dict[str, Any]
    ) -> None:
        """Test pan and zoom are kept across reloads and grouping changes."""
        session.view.pan(40.0, -25.0)
        session.view.zoom_in()
        transform = session.view.transform

        session.load(large_payload)
        assert session.view.transform == transform

        session.set_grouping(True, threshold=5)
        assert session.view.transform == transform

        session.set_grouping(False)
        assert session.view.transform == transform

    def test_unknown_layout(self, fast_config: MapConfig) -> None:
        """Test an unknown layout name is rejected."""
        with pytest.raises(LayoutError):
            MapSession(fast_config, layout="spiral")


class TestGrouping:
    """Tests for grouping toggles."""

    def test_grouping_rebuilds(
        self, fast_config: MapConfig, large_payload: dict[str, Any]
    ) -> None:
        """Test enabling grouping swaps in the grouped graph."""
        session = MapSession(fast_config)
        session.load(large_payload)
        session.set_grouping(True)
        assert len(session.graph.nodes_of_type(NodeType.SUBDOMAIN_GROUP)) == 4
        assert len(session.base_graph.nodes) == 139

        session.set_grouping(False)
        assert session.graph is session.base_graph
        session.close()

    def test_radial_follows_grouping(self, fast_config: MapConfig) -> None:
        """Test the radial engine switches to grouped placement with grouping."""
        session = MapSession(fast_config, layout="radial")
        session.set_grouping(True, threshold=10)
        assert isinstance(session.layout_engine, RadialEngine)
        assert session.layout_engine.grouped
        assert session.filter_state.grouping_threshold == 10


class TestFiltering:
    """Tests for filters that must keep positions."""

    def test_type_toggle_keeps_positions(self, session: MapSession) -> None:
        """Test hiding a type only re-filters."""
        session.run_layout()
        before = session.positions()
        session.set_type_visible(NodeType.SERVICE, False)
        assert "service-1.2.3.4-80" not in session.visible.node_ids
        assert session.positions() == before

        session.toggle_type(NodeType.SERVICE)
        assert "service-1.2.3.4-80" in session.visible.node_ids

    def test_node_limit(self, session: MapSession) -> None:
        """Test the per-type node limit."""
        session.set_node_limit(1)
        subdomains = [n for n in session.visible.nodes if n.type == NodeType.SUBDOMAIN]
        assert [n.id for n in subdomains] == ["subdomain-a.ex.com"]

    def test_hover_cleared_when_hidden(self, session: MapSession) -> None:
        """Test hiding the hovered node clears the hover."""
        session.hover("ip-1.2.3.4")
        assert session.highlight.hovered is not None
        session.set_type_visible(NodeType.IP, False)
        assert session.highlight.hovered is None

    def test_clear_search(self, session: MapSession) -> None:
        """Test clearing the search drops matches and hover."""
        session.search("ex.com")
        session.hover("ip-1.2.3.4")
        session.clear_search()
        assert session.filter_state.search_query == ""
        assert session.highlight.matches == frozenset()
        assert session.highlight.hovered is None

        session.set_node_limit(None)
        assert session.highlight.matches == frozenset()

    def test_search_survives_refilter(self, session: MapSession) -> None:
        """Test search matches are recomputed over the visible nodes."""
        assert session.search("ex.com") == {
            "domain-ex.com",
            "subdomain-a.ex.com",
            "subdomain-b.ex.com",
        }
        session.set_type_visible(NodeType.SUBDOMAIN, False)
        assert session.highlight.matches == {"domain-ex.com"}


class TestLayoutSwitch:
    """Tests for changing layout strategy."""

    def test_switch_to_radial(self, session: MapSession) -> None:
        """Test switching strategy recomputes positions and re-clamps zoom."""
        for _ in range(20):
            session.view.zoom_in()
        session.set_layout("radial")
        assert isinstance(session.layout_engine, RadialEngine)
        assert session.view.transform.k == 2.0
        assert session.positions()["domain-ex.com"] == (400.0, 300.0)
        assert session.interaction.layout is session.layout_engine


class TestSceneAndExport:
    """Tests for scene building and exports from a session."""

    def test_scene(self, session: MapSession) -> None:
        """Test the scene covers the visible nodes with the current transform."""
        session.set_show_labels(False)
        scene = session.scene()
        assert len(scene.nodes) == 5
        assert scene.title == "ex.com"
        assert not scene.show_labels

    def test_export(self, session: MapSession) -> None:
        """Test exporting writes the requested artifacts."""
        session.run_layout()
        paths = session.export(
            ("json", "pdf"), ExportSettings(include_graph=False), datetime(2024, 1, 2)
        )
        assert paths["json"].name == "ex.com_2024-01-02.json"
        assert paths["pdf"].exists()

    def test_export_busy(self, session: MapSession) -> None:
        """Test a second export while one runs is refused."""
        with session.exporter.exclusive("png"):
            with pytest.raises(ExportInProgressError):
                session.export(("json",))


class TestNodeClicks:
    """Tests for node click notifications."""

    def test_click_reaches_callback(
        self, fast_config: MapConfig, example_payload: dict[str, Any]
    ) -> None:
        """Test a press and release on a node is reported to the session user."""
        clicks: list[str] = []
        session = MapSession(fast_config, layout="radial", on_node_click=clicks.append)
        session.load(example_payload)

        session.interaction.pointer_down(5.0, 5.0, "ip-1.2.3.4")
        session.interaction.pointer_up(5.0, 5.0)
        assert clicks == ["ip-1.2.3.4"]

        session.interaction.pointer_down(5.0, 5.0)
        session.interaction.pointer_up(5.0, 5.0)
        assert clicks == ["ip-1.2.3.4"]
        session.close()
