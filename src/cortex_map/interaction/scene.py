"""
Rendered scene: what a view draws for the current state.
"""

from dataclasses import dataclass, field

from ..graph.styles import display_label
from ..layout.arena import PositionArena
from ..shared.models import NodeType, ViewTransform
from .highlight import HighlightEngine, VisibleGraph


@dataclass(frozen=True)
class SceneNode:
    id: str
    label: str
    display_label: str
    type: NodeType
    x: float
    y: float
    size: float
    color: str
    opacity: float


@dataclass(frozen=True)
class SceneEdge:
    id: str
    source: str
    target: str
    x1: float
    y1: float
    x2: float
    y2: float
    color: str | None
    opacity: float
    width: float


@dataclass(frozen=True)
class Scene:
    """Visible nodes and edges with positions and emphasis, in model space."""

    nodes: tuple[SceneNode, ...] = ()
    edges: tuple[SceneEdge, ...] = ()
    transform: ViewTransform = field(default_factory=ViewTransform)
    highlighted: frozenset[str] = field(default_factory=frozenset)
    show_labels: bool = True
    title: str | None = None

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def node(self, node_id: str) -> SceneNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None


def build_scene(
    visible: VisibleGraph,
    arena: PositionArena,
    highlight: HighlightEngine,
    transform: ViewTransform,
    show_labels: bool = True,
    title: str | None = None,
) -> Scene:
    """Combine visibility, positions and emphasis into a scene.

    Nodes without a position yet are left out, together with their edges.
    """
    node_count = len(visible.nodes)
    nodes: list[SceneNode] = []
    placed: dict[str, tuple[float, float]] = {}
    for node in visible.nodes:
        position = arena.position(node.id)
        if position is None:
            continue
        placed[node.id] = position
        nodes.append(
            SceneNode(
                id=node.id,
                label=node.label,
                display_label=display_label(node.label, node_count),
                type=node.type,
                x=position[0],
                y=position[1],
                size=node.size,
                color=node.color,
                opacity=highlight.node_opacity(node.id),
            )
        )

    edges = [
        SceneEdge(
            id=edge.id,
            source=edge.source,
            target=edge.target,
            x1=placed[edge.source][0],
            y1=placed[edge.source][1],
            x2=placed[edge.target][0],
            y2=placed[edge.target][1],
            color=edge.color,
            opacity=highlight.edge_opacity(edge),
            width=highlight.edge_width(edge),
        )
        for edge in visible.edges
        if edge.source in placed and edge.target in placed
    ]

    return Scene(
        nodes=tuple(nodes),
        edges=tuple(edges),
        transform=transform,
        highlighted=highlight.highlighted_ids,
        show_labels=show_labels,
        title=title,
    )
