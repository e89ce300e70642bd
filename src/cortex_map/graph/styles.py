"""
Presentation attributes for graph nodes and edges.

Standard color and size scheme for consistency across the interactive view,
the PNG snapshot and the report.
"""

from ..shared.models import EdgeKind, NodeType

NODE_COLORS: dict[NodeType, str] = {
    NodeType.DOMAIN: "#ef4444",
    NodeType.SUBDOMAIN: "#8b5cf6",
    NodeType.IP: "#10b981",
    NodeType.SERVICE: "#3b82f6",
    NodeType.SUBDOMAIN_GROUP: "#6366f1",
    NodeType.IP_GROUP: "#0ea5e9",
    NodeType.SERVICE_GROUP: "#f59e0b",
}

NODE_SIZES: dict[NodeType, float] = {
    NodeType.DOMAIN: 30.0,
    NodeType.SUBDOMAIN: 15.0,
    NodeType.IP: 12.0,
    NodeType.SERVICE: 10.0,
}

# Well-known subdomain prefixes and service categories get their own colors
SUBDOMAIN_GROUP_COLORS: dict[str, str] = {
    "api": "#F472B6",
    "dev": "#4ADE80",
    "staging": "#FBBF24",
    "test": "#60A5FA",
    "prod": "#F87171",
    "admin": "#C084FC",
}

SERVICE_GROUP_COLORS: dict[str, str] = {
    "web": "#F472B6",
    "email": "#4ADE80",
    "file": "#60A5FA",
    "remote": "#F87171",
    "dns": "#C084FC",
    "other": "#94A3B8",
}

EDGE_COLORS: dict[EdgeKind, str] = {
    EdgeKind.HAS_SUBDOMAIN: "#8b5cf6",
    EdgeKind.RESOLVES_TO: "#10b981",
    EdgeKind.HAS_IP: "#10b981",
    EdgeKind.RUNS: "#3b82f6",
}

GROUP_BASE_SIZE = 25.0
GROUP_SIZE_PER_MEMBER = 0.5
GROUP_SIZE_MEMBER_CAP = 50

DIMMED_OPACITY = 0.3
DIMMED_EDGE_OPACITY = 0.1


def node_color(node_type: NodeType, group: str | None = None) -> str:
    """Fill color for a node, taking well-known group keys into account."""
    if group is not None:
        if node_type == NodeType.SUBDOMAIN and group in SUBDOMAIN_GROUP_COLORS:
            return SUBDOMAIN_GROUP_COLORS[group]
        if node_type == NodeType.SERVICE and group in SERVICE_GROUP_COLORS:
            return SERVICE_GROUP_COLORS[group]
    return NODE_COLORS.get(node_type, "#A35CFF")


def node_size(node_type: NodeType) -> float:
    return NODE_SIZES.get(node_type, 20.0)


def group_node_size(member_count: int) -> float:
    """Render size of a group node: grows with members, capped."""
    return GROUP_BASE_SIZE + min(member_count, GROUP_SIZE_MEMBER_CAP) * GROUP_SIZE_PER_MEMBER


def edge_color(kind: EdgeKind) -> str:
    return EDGE_COLORS.get(kind, "#a8a8a8")


def display_label(label: str, node_count: int) -> str:
    """Truncate a label so dense graphs stay readable.

    Args:
        label: Full node label
        node_count: Number of nodes in the rendered graph

    Returns:
        The label, cut and ending in an ellipsis when longer than 15
        characters (graphs over 50 nodes) or 25 characters (otherwise)
    """
    max_length = 15 if node_count > 50 else 25
    if len(label) > max_length:
        return label[: max_length - 2] + "..."
    return label
