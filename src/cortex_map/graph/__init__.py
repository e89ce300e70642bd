"""
Graph construction: payload parsing, normalization and grouping.
"""

from .grouping import GroupingEngine, group_graph, make_group_id
from .keys import (
    SERVICE_CATEGORIES,
    default_key_functions,
    ip_group_key,
    service_category,
    service_group_key,
    subdomain_group_key,
)
from .normalizer import GraphNormalizer, make_edge_id, make_node_id, normalize_payload
from .payload import (
    DomainEntry,
    IpEntry,
    ReconPayload,
    ServiceEntry,
    SubdomainEntry,
    load_payload,
    parse_payload,
)
from .styles import display_label, group_node_size, node_color

__all__ = [
    # Payload model
    "ReconPayload",
    "SubdomainEntry",
    "DomainEntry",
    "IpEntry",
    "ServiceEntry",
    "parse_payload",
    "load_payload",
    # Normalization
    "GraphNormalizer",
    "normalize_payload",
    "make_node_id",
    "make_edge_id",
    # Grouping
    "GroupingEngine",
    "group_graph",
    "make_group_id",
    "SERVICE_CATEGORIES",
    "default_key_functions",
    "subdomain_group_key",
    "ip_group_key",
    "service_category",
    "service_group_key",
    # Presentation
    "display_label",
    "group_node_size",
    "node_color",
]
