"""
Grouping engine for high-cardinality node classes.

Collapses subdomains, IPs and services into synthetic group nodes when a
class grows beyond the grouping threshold, rewriting edges so that the
grouped graph stays reachability-equivalent to the original one.
"""

import logging

from ..shared.models import GROUPABLE_NODE_TYPES, Edge, GraphData, Node, NodeType
from .keys import KeyFunction, default_key_functions
from .normalizer import make_edge_id
from .styles import NODE_COLORS, group_node_size

GROUP_KIND_NAMES: dict[NodeType, str] = {
    NodeType.SUBDOMAIN: "Subdomains",
    NodeType.IP: "IPs",
    NodeType.SERVICE: "Services",
}


def make_group_id(node_type: NodeType, key: str) -> str:
    return f"group_{node_type.value}_{key}"


class GroupingEngine:
    """Builds grouped views of a graph without touching the source graph."""

    def __init__(self, key_functions: dict[NodeType, KeyFunction] | None = None):
        """Initialize the grouping engine.

        Args:
            key_functions: Bucket key function per node type. Defaults are
                created per call from the root domain when not given.
        """
        self.key_functions = key_functions
        self.logger = logging.getLogger(__name__)

    def apply(
        self,
        graph: GraphData,
        threshold: int,
        root_domain: str | None = None,
        enabled: bool = True,
    ) -> GraphData:
        """Collapse every class whose node count exceeds ``threshold``.

        Args:
            graph: Normalized graph (never modified)
            threshold: Node count a class must exceed to be grouped
            root_domain: Target domain used to derive subdomain keys
            enabled: When False the graph is returned unchanged

        Returns:
            Grouped graph, or ``graph`` itself when nothing was collapsed
        """
        if not enabled or graph.is_empty:
            return graph

        key_functions = self.key_functions or default_key_functions(root_domain)
        collapsed: dict[str, str] = {}
        group_nodes: dict[str, Node] = {}

        for node_type in GROUPABLE_NODE_TYPES:
            nodes = graph.nodes_of_type(node_type)
            if len(nodes) <= threshold:
                continue

            key_function = key_functions.get(node_type)
            if key_function is None:
                continue

            buckets: dict[str, list[Node]] = {}
            for node in nodes:
                key = key_function(node)
                if key is None:
                    continue
                buckets.setdefault(key, []).append(node)

            for key, members in buckets.items():
                # Singletons stay ordinary nodes
                if len(members) < 2:
                    continue
                group_node = self._create_group_node(node_type, key, members)
                group_nodes[group_node.id] = group_node
                for member in members:
                    collapsed[member.id] = group_node.id

            self.logger.debug(
                f"Grouped {len(nodes)} {node_type.value} nodes into "
                f"{sum(1 for m in buckets.values() if len(m) > 1)} groups"
            )

        if not collapsed:
            return graph

        grouped = GraphData(
            nodes=self._rewrite_nodes(graph, collapsed, group_nodes),
            edges=self._rewrite_edges(graph, collapsed),
        )
        self.logger.info(
            f"Grouping collapsed {len(collapsed)} nodes into {len(group_nodes)} groups "
            f"({len(graph.nodes)} -> {len(grouped.nodes)} nodes)"
        )
        return grouped

    def _create_group_node(self, node_type: NodeType, key: str, members: list[Node]) -> Node:
        group_type = node_type.group_type()
        count = len(members)
        return Node(
            id=make_group_id(node_type, key),
            label=f"{GROUP_KIND_NAMES[node_type]} {key} ({count})",
            type=group_type,
            group=key,
            data={"members": [member.label for member in members]},
            size=group_node_size(count),
            color=NODE_COLORS[group_type],
            member_ids=tuple(member.id for member in members),
        )

    def _rewrite_nodes(
        self, graph: GraphData, collapsed: dict[str, str], group_nodes: dict[str, Node]
    ) -> tuple[Node, ...]:
        # Each group takes the position of its first member in insertion order
        nodes: list[Node] = []
        emitted: set[str] = set()
        for node in graph.nodes:
            group_id = collapsed.get(node.id)
            if group_id is None:
                nodes.append(node)
            elif group_id not in emitted:
                emitted.add(group_id)
                nodes.append(group_nodes[group_id])
        return tuple(nodes)

    def _rewrite_edges(self, graph: GraphData, collapsed: dict[str, str]) -> tuple[Edge, ...]:
        edges: list[Edge] = []
        seen: set[tuple[str, str, str]] = set()
        for edge in graph.edges:
            source = collapsed.get(edge.source, edge.source)
            target = collapsed.get(edge.target, edge.target)
            if source == target:
                continue
            key = (source, target, edge.kind.value)
            if key in seen:
                continue
            seen.add(key)

            if source == edge.source and target == edge.target:
                edges.append(edge)
            else:
                edges.append(
                    Edge(
                        id=make_edge_id(source, target),
                        source=source,
                        target=target,
                        kind=edge.kind,
                        color=edge.color,
                    )
                )
        return tuple(edges)


def group_graph(
    graph: GraphData, threshold: int, root_domain: str | None = None
) -> GraphData:
    """Convenience wrapper around :class:`GroupingEngine`."""
    return GroupingEngine().apply(graph, threshold, root_domain=root_domain)
