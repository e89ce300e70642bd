"""
Filtering and highlighting of the rendered graph.

Visibility is derived from :class:`FilterState` (type toggles and the
per-type node limit); emphasis comes from the search query and from the
hovered node's neighborhood. Hidden nodes never leave dangling edges.
"""

import logging
from dataclasses import dataclass, field

from ..graph.styles import DIMMED_EDGE_OPACITY, DIMMED_OPACITY
from ..shared.models import Edge, FilterState, GraphData, Node, NodeType

EDGE_OPACITY = 0.6
EDGE_WIDTH = 1.5
EMPHASIZED_EDGE_WIDTH = 2.5


@dataclass(frozen=True)
class VisibleGraph:
    """Visible subset of a graph under a filter state."""

    nodes: tuple[Node, ...] = ()
    edges: tuple[Edge, ...] = ()
    node_ids: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class Neighborhood:
    """A hovered node, its incident edges and the nodes at their other end."""

    focus: str
    node_ids: frozenset[str]
    edge_ids: frozenset[str]


def visible_subgraph(graph: GraphData, state: FilterState) -> VisibleGraph:
    """Filter a graph by visible types and per-type node limit.

    Args:
        graph: Graph to filter
        state: Current filter state

    Returns:
        Visible nodes and the edges whose endpoints are both visible
    """
    counts: dict[NodeType, int] = {}
    nodes: list[Node] = []
    for node in graph.nodes:
        if not state.is_type_visible(node.type):
            continue
        if state.node_limit is not None:
            seen = counts.get(node.type, 0)
            if seen >= state.node_limit:
                continue
            counts[node.type] = seen + 1
        nodes.append(node)

    node_ids = frozenset(node.id for node in nodes)
    edges = tuple(
        edge for edge in graph.edges if edge.source in node_ids and edge.target in node_ids
    )
    return VisibleGraph(nodes=tuple(nodes), edges=edges, node_ids=node_ids)


def search_matches(nodes: tuple[Node, ...] | list[Node], query: str) -> frozenset[str]:
    """Ids of nodes whose label contains ``query`` (case-insensitive)."""
    needle = query.strip().lower()
    if not needle:
        return frozenset()
    return frozenset(node.id for node in nodes if needle in node.label.lower())


def neighborhood(edges: tuple[Edge, ...] | list[Edge], node_id: str) -> Neighborhood:
    node_ids = {node_id}
    edge_ids = set()
    for edge in edges:
        if edge.source == node_id:
            node_ids.add(edge.target)
            edge_ids.add(edge.id)
        elif edge.target == node_id:
            node_ids.add(edge.source)
            edge_ids.add(edge.id)
    return Neighborhood(focus=node_id, node_ids=frozenset(node_ids), edge_ids=frozenset(edge_ids))


class HighlightEngine:
    """Tracks search matches and hover state and derives render opacities."""

    def __init__(self) -> None:
        self.matches: frozenset[str] = frozenset()
        self.hovered: Neighborhood | None = None
        self.logger = logging.getLogger(__name__)

    def update_search(self, visible: VisibleGraph, query: str) -> frozenset[str]:
        self.matches = search_matches(visible.nodes, query)
        if query.strip():
            self.logger.debug(f"Search '{query}' matched {len(self.matches)} nodes")
        return self.matches

    def hover(self, visible: VisibleGraph, node_id: str) -> Neighborhood | None:
        """Emphasize a visible node's neighborhood; hidden nodes clear hover."""
        if node_id not in visible.node_ids:
            self.hovered = None
            return None
        self.hovered = neighborhood(visible.edges, node_id)
        return self.hovered

    def clear_hover(self) -> None:
        self.hovered = None

    def reset(self) -> None:
        self.matches = frozenset()
        self.hovered = None

    @property
    def highlighted_ids(self) -> frozenset[str]:
        if self.hovered is not None:
            return self.hovered.node_ids
        return self.matches

    def node_opacity(self, node_id: str) -> float:
        highlighted = self.highlighted_ids
        if not highlighted or node_id in highlighted:
            return 1.0
        return DIMMED_OPACITY

    def edge_opacity(self, edge: Edge) -> float:
        if self.hovered is None:
            return EDGE_OPACITY
        return 1.0 if edge.id in self.hovered.edge_ids else DIMMED_EDGE_OPACITY

    def edge_width(self, edge: Edge) -> float:
        if self.hovered is not None and edge.id in self.hovered.edge_ids:
            return EMPHASIZED_EDGE_WIDTH
        return EDGE_WIDTH
