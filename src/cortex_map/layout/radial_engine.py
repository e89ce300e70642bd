"""
Radial layout engine for reconnaissance graphs.

Deterministic placement: the target sits at the center, subdomains on an
upper arc, IPs on a lower arc at a smaller radius and services just outside
their host IP. In grouped mode every group gets a sector anchor with its
members on a small satellite circle around it.
"""

import logging
import math
from typing import Any

from ..shared.config import MapConfig
from ..shared.models import EdgeKind, GraphData, Node, NodeState, NodeType
from .arena import BaseLayoutEngine, PositionArena

DEFAULT_RADIUS = 200.0
IP_RADIUS_RATIO = 0.7
DOMAIN_RADIUS_RATIO = 0.35
SERVICE_OFFSET = 50.0
SERVICE_SPREAD = 0.15  # radians between sibling services
FALLBACK_OFFSET = 150.0
SATELLITE_RADIUS = 50.0
GROUPED_SERVICE_RADIUS = 40.0

Point = tuple[float, float]


def _arc_fraction(index: int, count: int) -> float:
    return index / max(count - 1, 1)


class RadialEngine(BaseLayoutEngine):
    """Engine for deterministic radial and grouped-radial layouts."""

    name = "radial"

    def __init__(
        self,
        config: MapConfig | None = None,
        grouped: bool = False,
        radius: float = DEFAULT_RADIUS,
    ):
        """Initialize the radial engine.

        Args:
            config: Map configuration (viewport center)
            grouped: Place nodes by group sectors instead of plain arcs
            radius: Outer ring radius in model units
        """
        super().__init__()
        self.config = config or MapConfig()
        self.grouped = grouped
        self.radius = radius
        self.logger = logging.getLogger(__name__)

    def layout(self, graph: GraphData) -> PositionArena:
        """Compute positions for every node of ``graph``.

        Args:
            graph: Graph to lay out

        Returns:
            A fresh arena holding the computed positions
        """
        self.graph = graph
        arena = PositionArena()
        for node_id, (x, y) in self.compute_positions(graph).items():
            arena.set(node_id, NodeState(x=x, y=y))
        self.arena = arena
        self.logger.info(
            f"Radial layout placed {len(arena)} nodes ({'grouped' if self.grouped else 'plain'})"
        )
        return arena

    def compute_positions(self, graph: GraphData) -> dict[str, Point]:
        """Pure position computation; identical input gives identical output."""
        positions: dict[str, Point] = {}
        by_type: dict[NodeType, list[Node]] = {}
        for node in graph.nodes:
            by_type.setdefault(node.type.base_type, []).append(node)

        self._place_domains(by_type.get(NodeType.DOMAIN, []), positions)
        if self.grouped:
            self._place_grouped_subdomains(by_type.get(NodeType.SUBDOMAIN, []), positions)
            self._place_ips_full_circle(by_type.get(NodeType.IP, []), positions)
            self._place_grouped_services(graph, by_type.get(NodeType.SERVICE, []), positions)
        else:
            self._place_subdomain_arc(by_type.get(NodeType.SUBDOMAIN, []), positions)
            self._place_ip_arc(by_type.get(NodeType.IP, []), positions)
            self._place_services(graph, by_type.get(NodeType.SERVICE, []), positions)
        return positions

    @property
    def center(self) -> Point:
        return self.config.center

    def _place_domains(self, nodes: list[Node], positions: dict[str, Point]) -> None:
        cx, cy = self.center
        if not nodes:
            return
        positions[nodes[0].id] = (cx, cy)

        # Additional domains from domains[] sit on a small inner ring
        extra = nodes[1:]
        ring = self.radius * DOMAIN_RADIUS_RATIO
        for i, node in enumerate(extra):
            angle = 2 * math.pi * i / len(extra)
            positions[node.id] = (cx + ring * math.cos(angle), cy + ring * math.sin(angle))

    def _place_subdomain_arc(self, nodes: list[Node], positions: dict[str, Point]) -> None:
        cx, cy = self.center
        for i, node in enumerate(nodes):
            angle = math.pi * (0.2 + 0.6 * _arc_fraction(i, len(nodes)))
            positions[node.id] = (
                cx + self.radius * math.cos(angle),
                cy - self.radius * math.sin(angle),
            )

    def _place_ip_arc(self, nodes: list[Node], positions: dict[str, Point]) -> None:
        cx, cy = self.center
        ring = self.radius * IP_RADIUS_RATIO
        for i, node in enumerate(nodes):
            angle = math.pi * (0.2 + 0.6 * _arc_fraction(i, len(nodes)))
            positions[node.id] = (cx + ring * math.cos(angle), cy + ring * math.sin(angle))

    def _service_parents(self, graph: GraphData) -> dict[str, str]:
        parents: dict[str, str] = {}
        for edge in graph.edges:
            if edge.kind == EdgeKind.RUNS and edge.target not in parents:
                parents[edge.target] = edge.source
        return parents

    def _fallback(self) -> Point:
        cx, cy = self.center
        return cx, cy + FALLBACK_OFFSET

    def _place_services(
        self, graph: GraphData, nodes: list[Node], positions: dict[str, Point]
    ) -> None:
        cx, cy = self.center
        parents = self._service_parents(graph)
        siblings: dict[str, list[Node]] = {}
        for node in nodes:
            parent = parents.get(node.id)
            if parent is None or parent not in positions:
                positions[node.id] = self._fallback()
            else:
                siblings.setdefault(parent, []).append(node)

        # Services sit one radial step outside their host, fanned out by index
        for parent, children in siblings.items():
            px, py = positions[parent]
            distance = math.hypot(px - cx, py - cy)
            base_angle = math.atan2(py - cy, px - cx) if distance > 0 else math.pi / 2
            for i, node in enumerate(children):
                angle = base_angle + (i - (len(children) - 1) / 2) * SERVICE_SPREAD
                reach = distance + SERVICE_OFFSET
                positions[node.id] = (cx + reach * math.cos(angle), cy + reach * math.sin(angle))

    def _place_grouped_subdomains(self, nodes: list[Node], positions: dict[str, Point]) -> None:
        cx, cy = self.center
        groups: dict[str, list[Node]] = {}
        for node in nodes:
            groups.setdefault(node.group or "other", []).append(node)

        ring = self.radius * IP_RADIUS_RATIO
        for gi, members in enumerate(groups.values()):
            anchor_angle = 2 * math.pi * gi / len(groups)
            ax = cx + ring * math.cos(anchor_angle)
            ay = cy + ring * math.sin(anchor_angle)
            for j, node in enumerate(members):
                angle = 2 * math.pi * j / len(members)
                positions[node.id] = (
                    ax + SATELLITE_RADIUS * math.cos(angle),
                    ay + SATELLITE_RADIUS * math.sin(angle),
                )

    def _place_ips_full_circle(self, nodes: list[Node], positions: dict[str, Point]) -> None:
        cx, cy = self.center
        for i, node in enumerate(nodes):
            angle = 2 * math.pi * i / len(nodes)
            positions[node.id] = (
                cx + self.radius * math.cos(angle),
                cy + self.radius * math.sin(angle),
            )

    def _place_grouped_services(
        self, graph: GraphData, nodes: list[Node], positions: dict[str, Point]
    ) -> None:
        parents = self._service_parents(graph)
        groups: dict[str, list[Node]] = {}
        for node in nodes:
            groups.setdefault(node.group or "other", []).append(node)

        for members in groups.values():
            for index, node in enumerate(members):
                parent = parents.get(node.id)
                if parent is None or parent not in positions:
                    positions[node.id] = self._fallback()
                    continue
                px, py = positions[parent]
                angle = math.pi / 4 + (math.pi / 2) * (index / len(members))
                positions[node.id] = (
                    px + GROUPED_SERVICE_RADIUS * math.cos(angle),
                    py + GROUPED_SERVICE_RADIUS * math.sin(angle),
                )

    def get_layout_config(self) -> dict[str, Any]:
        """Get radial layout configuration.

        Returns:
            Configuration dictionary for the radial layout
        """
        cx, cy = self.center
        return {
            "center": {"x": cx, "y": cy},
            "radius": self.radius,
            "ip_radius": self.radius * IP_RADIUS_RATIO,
            "grouped": self.grouped,
            "service_offset": SERVICE_OFFSET,
            "satellite_radius": SATELLITE_RADIUS,
        }
