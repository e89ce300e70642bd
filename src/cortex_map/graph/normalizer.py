"""
Graph normalization for reconnaissance payloads.

Turns a parsed :class:`ReconPayload` into a :class:`GraphData` with stable
node ids, typed vertices and typed relationships. Node and edge insertion is
idempotent, so duplicated entries in the payload collapse onto one vertex.
"""

import logging
from dataclasses import replace
from typing import Any

from ..shared.models import Edge, EdgeKind, GraphData, Node, NodeType
from .keys import ip_group_key, service_group_key, subdomain_group_key
from .payload import IpEntry, ReconPayload, ServiceEntry, SubdomainEntry, parse_payload
from .styles import edge_color, node_color, node_size


def make_node_id(node_type: NodeType, key: str) -> str:
    """Stable node id for a type and its natural key (``ip-1.2.3.4``)."""
    return f"{node_type.value}-{key}"


def make_edge_id(source: str, target: str) -> str:
    return f"edge_{source}_{target}"


class _GraphBuilder:
    """Accumulates nodes and edges while preserving insertion order."""

    def __init__(self) -> None:
        self.nodes: dict[str, Node] = {}
        self.edges: list[Edge] = []
        self._edge_keys: set[tuple[str, str, EdgeKind]] = set()
        self.dropped_edges = 0

    def add_node(self, node: Node) -> str:
        # First occurrence wins; later duplicates only return the id
        if node.id not in self.nodes:
            self.nodes[node.id] = node
        return node.id

    def add_edge(self, source: str, target: str, kind: EdgeKind) -> bool:
        """Add an edge between two existing nodes.

        Returns:
            True if a new edge was added
        """
        if source not in self.nodes or target not in self.nodes:
            self.dropped_edges += 1
            return False
        key = (source, target, kind)
        if key in self._edge_keys:
            return False
        self._edge_keys.add(key)
        self.edges.append(
            Edge(
                id=make_edge_id(source, target),
                source=source,
                target=target,
                kind=kind,
                color=edge_color(kind),
            )
        )
        return True

    def build(self) -> GraphData:
        return GraphData(nodes=tuple(self.nodes.values()), edges=tuple(self.edges))


class GraphNormalizer:
    """Builds the relationship graph from a reconnaissance payload.

    Entities are processed in a fixed order (target, subdomains, domains,
    IPs, services) so the same payload always yields the same graph.
    """

    def __init__(self) -> None:
        self.logger = logging.getLogger(__name__)
        self._root_domain: str | None = None
        self._resolved_ips: set[str] = set()
        self._service_count = 0

    def normalize(self, payload: ReconPayload | dict[str, Any] | None) -> GraphData:
        """Normalize a payload into graph data.

        Args:
            payload: Parsed payload, or the decoded JSON object

        Returns:
            Graph data; empty when the payload carries nothing
        """
        if not isinstance(payload, ReconPayload):
            payload = parse_payload(payload)

        if payload.is_empty:
            self.logger.debug("Empty payload, nothing to normalize")
            return GraphData()

        builder = _GraphBuilder()
        self._root_domain = payload.target
        self._resolved_ips = set()
        self._service_count = 0

        target_id = None
        if payload.target:
            target_id = self._add_domain(builder, payload.target, is_target=True)

        for subdomain in payload.subdomains:
            self._add_subdomain(builder, subdomain, parent_id=target_id)

        for domain in payload.domains:
            domain_id = self._add_domain(builder, domain.domain)
            if target_id is not None and domain_id != target_id:
                builder.add_edge(target_id, domain_id, EdgeKind.HAS_SUBDOMAIN)
            for subdomain in domain.subdomains:
                self._add_subdomain(builder, subdomain, parent_id=domain_id)

        for ip in payload.ips:
            ip_id = self._add_ip(builder, ip)
            self._link_unresolved_ip(builder, target_id, ip_id)

        for service in payload.services:
            ip_id = self._add_service(builder, service)
            if ip_id is not None:
                self._link_unresolved_ip(builder, target_id, ip_id)

        graph = builder.build()
        self.logger.info(
            f"Normalized payload for {payload.target or 'unknown target'}: "
            f"{len(graph.nodes)} nodes, {len(graph.edges)} edges"
        )
        if builder.dropped_edges:
            self.logger.debug(f"Dropped {builder.dropped_edges} edges with missing endpoints")
        return graph

    def _link_unresolved_ip(
        self, builder: _GraphBuilder, target_id: str | None, ip_id: str
    ) -> None:
        # Only IPs no subdomain resolves to hang directly off the target
        if target_id is not None and ip_id not in self._resolved_ips:
            builder.add_edge(target_id, ip_id, EdgeKind.HAS_IP)

    def _add_domain(self, builder: _GraphBuilder, domain: str, is_target: bool = False) -> str:
        return builder.add_node(
            Node(
                id=make_node_id(NodeType.DOMAIN, domain),
                label=domain,
                type=NodeType.DOMAIN,
                data={"domain": domain, "is_target": is_target},
                size=node_size(NodeType.DOMAIN),
                color=node_color(NodeType.DOMAIN),
            )
        )

    def _add_subdomain(
        self, builder: _GraphBuilder, subdomain: SubdomainEntry, parent_id: str | None
    ) -> str:
        group = subdomain_group_key(subdomain.name, self._root_domain)
        sub_id = builder.add_node(
            Node(
                id=make_node_id(NodeType.SUBDOMAIN, subdomain.name),
                label=subdomain.name,
                type=NodeType.SUBDOMAIN,
                group=group,
                data=subdomain,
                size=node_size(NodeType.SUBDOMAIN),
                color=node_color(NodeType.SUBDOMAIN, group),
            )
        )
        if parent_id is not None and parent_id != sub_id:
            builder.add_edge(parent_id, sub_id, EdgeKind.HAS_SUBDOMAIN)

        for ip in subdomain.ips:
            ip_id = self._add_ip(builder, ip)
            builder.add_edge(sub_id, ip_id, EdgeKind.RESOLVES_TO)
            self._resolved_ips.add(ip_id)
        return sub_id

    def _add_ip(self, builder: _GraphBuilder, ip: IpEntry) -> str:
        ip_id = builder.add_node(
            Node(
                id=make_node_id(NodeType.IP, ip.ip),
                label=ip.ip,
                type=NodeType.IP,
                group=ip_group_key(ip.ip),
                data=ip,
                size=node_size(NodeType.IP),
                color=node_color(NodeType.IP),
            )
        )
        existing = builder.nodes[ip_id]
        # Host details from an IP record replace a bare mention seen earlier
        if ip.from_record and not getattr(existing.data, "from_record", False):
            builder.nodes[ip_id] = replace(existing, data=ip)
        for service in ip.services:
            self._add_service(builder, service)
        return ip_id

    def _add_service(self, builder: _GraphBuilder, service: ServiceEntry) -> str | None:
        """Add a service node and its ``runs`` edge.

        Returns:
            Id of the host IP node, or None when the service has no IP
        """
        index = self._service_count
        self._service_count += 1

        if service.ip is not None and service.port is not None:
            key = f"{service.ip}-{service.port}"
        else:
            parts = [p for p in (service.ip, service.port) if p is not None]
            key = "-".join(str(p) for p in parts + [service.display_name, index])

        label = service.display_name
        if service.port is not None and service.name:
            label = f"{service.name}:{service.port}"

        group = service_group_key(service.display_name)
        service_id = builder.add_node(
            Node(
                id=make_node_id(NodeType.SERVICE, key),
                label=label,
                type=NodeType.SERVICE,
                group=group,
                data=service,
                size=node_size(NodeType.SERVICE),
                color=node_color(NodeType.SERVICE, group),
            )
        )

        if service.ip is None:
            return None

        ip_id = make_node_id(NodeType.IP, service.ip)
        if ip_id not in builder.nodes:
            self._add_ip(builder, IpEntry(ip=service.ip))
        builder.add_edge(ip_id, service_id, EdgeKind.RUNS)
        return ip_id


def normalize_payload(payload: ReconPayload | dict[str, Any] | None) -> GraphData:
    """Convenience wrapper around :class:`GraphNormalizer`."""
    return GraphNormalizer().normalize(payload)
