"""
Core data models for CorteX Map using simple dataclasses.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import networkx as nx


class NodeType(str, Enum):
    """Kinds of vertices in the relationship graph."""

    DOMAIN = "domain"
    SUBDOMAIN = "subdomain"
    IP = "ip"
    SERVICE = "service"
    SUBDOMAIN_GROUP = "subdomain-group"
    IP_GROUP = "ip-group"
    SERVICE_GROUP = "service-group"

    @property
    def is_group(self) -> bool:
        return self.value.endswith("-group")

    @property
    def base_type(self) -> "NodeType":
        """Ungrouped type this type stands for (identity for plain types)."""
        if self.is_group:
            return NodeType(self.value[: -len("-group")])
        return self

    def group_type(self) -> "NodeType":
        """Synthetic group type for a groupable plain type."""
        return NodeType(f"{self.base_type.value}-group")


BASE_NODE_TYPES = (NodeType.DOMAIN, NodeType.SUBDOMAIN, NodeType.IP, NodeType.SERVICE)
GROUPABLE_NODE_TYPES = (NodeType.SUBDOMAIN, NodeType.IP, NodeType.SERVICE)


class EdgeKind(str, Enum):
    """Relationship kinds between nodes."""

    HAS_SUBDOMAIN = "has_subdomain"
    RESOLVES_TO = "resolves_to"
    RUNS = "runs"
    HAS_IP = "has_ip"


@dataclass(frozen=True)
class Node:
    """A vertex of the relationship graph.

    Nodes are immutable. Positions live in the layout engine's arena, keyed
    by ``id``.
    """

    id: str
    label: str
    type: NodeType
    group: str | None = None
    data: Any = field(default=None, compare=False)
    size: float = 20.0
    color: str = "#A35CFF"
    member_ids: tuple[str, ...] = ()

    @property
    def member_count(self) -> int:
        return len(self.member_ids)


@dataclass(frozen=True)
class Edge:
    """A directed relationship between two nodes."""

    id: str
    source: str
    target: str
    kind: EdgeKind
    color: str | None = None


@dataclass(frozen=True)
class GraphData:
    """Output of the normalizer and grouping stages, immutable per build."""

    nodes: tuple[Node, ...] = ()
    edges: tuple[Edge, ...] = ()

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def node_ids(self) -> list[str]:
        return [node.id for node in self.nodes]

    def get_node(self, node_id: str) -> Node | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def nodes_of_type(self, node_type: NodeType) -> list[Node]:
        return [node for node in self.nodes if node.type == node_type]

    def to_networkx(self) -> nx.DiGraph:
        """Build a NetworkX view of the graph (node and edge attributes preserved)."""
        graph = nx.DiGraph()
        for node in self.nodes:
            graph.add_node(node.id, label=node.label, type=node.type.value, group=node.group)
        for edge in self.edges:
            graph.add_edge(edge.source, edge.target, id=edge.id, kind=edge.kind.value)
        return graph


@dataclass
class NodeState:
    """Mutable simulation record for one node (position, velocity, pin)."""

    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    fx: float | None = None
    fy: float | None = None

    @property
    def is_pinned(self) -> bool:
        return self.fx is not None and self.fy is not None


@dataclass(frozen=True)
class ViewTransform:
    """Translation and scale applied uniformly to the rendered scene."""

    x: float = 0.0
    y: float = 0.0
    k: float = 1.0


def _all_base_types() -> set[NodeType]:
    return set(BASE_NODE_TYPES)


@dataclass
class FilterState:
    """User-controlled visibility, grouping and search settings."""

    visible_types: set[NodeType] = field(default_factory=_all_base_types)
    grouping_enabled: bool = False
    grouping_threshold: int = 50
    search_query: str = ""
    node_limit: int | None = None  # Max nodes shown per type
    show_labels: bool = True

    def is_type_visible(self, node_type: NodeType) -> bool:
        return node_type.base_type in self.visible_types


@dataclass(frozen=True)
class ExportSettings:
    """Per-invocation export configuration; never touches live graph state."""

    include_graph: bool = True
    include_subdomains: bool = True
    include_ips: bool = True
    include_services: bool = True
    paginate: bool = True
    fit_to_page: bool = True
    items_per_page: int = 40
