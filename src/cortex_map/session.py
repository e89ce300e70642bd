"""
Map session: the single owner of the live graph state.

A session holds the payload, the filter state, the (possibly grouped) graph,
the layout engine with its position arena and the view-transform controller.
Payload and grouping changes rebuild the graph and restart the layout; type
toggles, node limits and search only re-filter, so positions survive. The
view transform survives everything except an explicit reset.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from pathlib import Path
from typing import Any

from .export import ExportCoordinator
from .graph import GraphNormalizer, GroupingEngine, ReconPayload, parse_payload
from .interaction import (
    HighlightEngine,
    InteractionController,
    Scene,
    ViewTransformController,
    VisibleGraph,
    build_scene,
    visible_subgraph,
)
from .layout import BaseLayoutEngine, RadialEngine, create_layout_engine
from .shared.config import MapConfig
from .shared.models import ExportSettings, FilterState, GraphData, NodeType


class MapSession:
    """Coordinates normalization, grouping, layout, filtering and export."""

    def __init__(
        self,
        config: MapConfig | None = None,
        layout: str | None = None,
        on_node_click: Callable[[str], None] | None = None,
    ):
        """Initialize a session.

        Args:
            config: Map configuration
            layout: Layout strategy name, overriding ``config.layout``
            on_node_click: Called with the node id when a node is clicked
        """
        self.config = config or MapConfig()
        self.logger = logging.getLogger(__name__)

        self.normalizer = GraphNormalizer()
        self.grouping = GroupingEngine()
        self.highlight = HighlightEngine()
        self.exporter = ExportCoordinator(self.config)

        self.filter_state = FilterState(grouping_threshold=self.config.grouping_threshold)
        self.layout_name = layout or self.config.layout
        self.layout_engine: BaseLayoutEngine = self._create_engine(self.layout_name)
        self.view = ViewTransformController.from_config(self.config, self.layout_name)
        self.interaction = InteractionController(
            self.view, self.layout_engine, on_node_click=on_node_click
        )

        self.payload = ReconPayload()
        self.base_graph = GraphData()
        self.graph = GraphData()
        self.visible = VisibleGraph()

    def _create_engine(self, name: str) -> BaseLayoutEngine:
        engine = create_layout_engine(name, self.config)
        if isinstance(engine, RadialEngine):
            engine.grouped = self.filter_state.grouping_enabled
        return engine

    # Dataset and grouping: full rebuild

    def load(self, payload: ReconPayload | dict[str, Any] | None) -> GraphData:
        """Replace the dataset and rebuild the graph.

        Args:
            payload: Parsed payload or decoded JSON

        Returns:
            The graph now being displayed
        """
        if not isinstance(payload, ReconPayload):
            payload = parse_payload(payload)
        self.payload = payload
        self.base_graph = self.normalizer.normalize(payload)
        return self._rebuild()

    def set_grouping(self, enabled: bool, threshold: int | None = None) -> GraphData:
        self.filter_state.grouping_enabled = enabled
        if threshold is not None:
            self.filter_state.grouping_threshold = threshold
        if isinstance(self.layout_engine, RadialEngine):
            self.layout_engine.grouped = enabled
        return self._rebuild()

    def set_layout(self, name: str) -> GraphData:
        """Switch layout strategy; positions are recomputed, the transform re-clamped."""
        engine = self._create_engine(name)
        self.layout_engine.stop()
        self.layout_name = name
        self.layout_engine = engine
        self.interaction.attach_layout(engine)
        self.view.set_scale_extent(self.config.scale_extent_for(name))
        return self._rebuild()

    def _rebuild(self) -> GraphData:
        state = self.filter_state
        self.graph = self.grouping.apply(
            self.base_graph,
            state.grouping_threshold,
            root_domain=self.payload.target,
            enabled=state.grouping_enabled,
        )
        self.interaction.pointer_leave()
        # Stops the previous simulation before the new one starts
        self.layout_engine.layout(self.graph)
        self._refilter()
        self.logger.info(
            f"Session graph rebuilt: {len(self.graph.nodes)} nodes, {len(self.graph.edges)} edges "
            f"(layout={self.layout_name}, grouping={'on' if state.grouping_enabled else 'off'})"
        )
        return self.graph

    # Filtering: positions persist

    def set_type_visible(self, node_type: NodeType, visible: bool) -> VisibleGraph:
        if visible:
            self.filter_state.visible_types.add(node_type.base_type)
        else:
            self.filter_state.visible_types.discard(node_type.base_type)
        return self._refilter()

    def toggle_type(self, node_type: NodeType) -> VisibleGraph:
        return self.set_type_visible(
            node_type, not self.filter_state.is_type_visible(node_type)
        )

    def set_node_limit(self, limit: int | None) -> VisibleGraph:
        self.filter_state.node_limit = limit
        return self._refilter()

    def set_show_labels(self, show: bool) -> None:
        self.filter_state.show_labels = show

    def search(self, query: str) -> frozenset[str]:
        self.filter_state.search_query = query
        return self.highlight.update_search(self.visible, query)

    def clear_search(self) -> None:
        """Drop the search query together with any hover emphasis."""
        self.filter_state.search_query = ""
        self.highlight.reset()

    def _refilter(self) -> VisibleGraph:
        self.visible = visible_subgraph(self.graph, self.filter_state)
        self.highlight.update_search(self.visible, self.filter_state.search_query)
        hovered = self.highlight.hovered
        if hovered is not None:
            self.highlight.hover(self.visible, hovered.focus)
        return self.visible

    # Hover

    def hover(self, node_id: str) -> None:
        self.highlight.hover(self.visible, node_id)

    def leave(self) -> None:
        self.highlight.clear_hover()

    # Layout stepping

    def tick(self) -> bool:
        return self.layout_engine.tick()

    def run_layout(self) -> int:
        return self.layout_engine.run()

    def positions(self) -> dict[str, tuple[float, float]]:
        return self.layout_engine.positions()

    def scene(self) -> Scene:
        """Scene for the current state (visible nodes with positions and emphasis)."""
        return build_scene(
            self.visible,
            self.layout_engine.arena,
            self.highlight,
            self.view.transform,
            show_labels=self.filter_state.show_labels,
            title=self.payload.target,
        )

    # Export: reads state, never mutates it

    def export(
        self,
        formats: tuple[str, ...] = ("json", "pdf", "png"),
        settings: ExportSettings | None = None,
        moment: datetime | None = None,
    ) -> dict[str, Path]:
        """Export the current dataset and scene.

        Reports always use the full ungrouped payload; the graph image shows
        the scene as currently displayed.
        """
        return self.exporter.export_all(
            self.payload,
            settings=settings,
            scene=self.scene(),
            formats=formats,
            moment=moment,
        )

    def close(self) -> None:
        self.layout_engine.stop()
