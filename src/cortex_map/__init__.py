"""
CorteX Map - Relationship graph engine for passive reconnaissance results.

This package provides functionality for:
- Normalizing loosely-structured reconnaissance payloads into a typed graph
- Grouping high-cardinality node classes for large targets
- Force-directed and radial layouts
- Pan/zoom/drag interaction, filtering and neighborhood highlighting
- JSON, paginated PDF and PNG exports
"""

__version__ = "0.1.0"

from .graph import GraphNormalizer, GroupingEngine, ReconPayload, load_payload, parse_payload
from .session import MapSession
from .shared.config import MapConfig, load_config
from .shared.exceptions import CortexMapError
from .shared.models import EdgeKind, ExportSettings, FilterState, GraphData, NodeType
from .shared.output import OutputManager

__all__ = [
    "MapSession",
    "MapConfig",
    "load_config",
    "CortexMapError",
    "ReconPayload",
    "parse_payload",
    "load_payload",
    "GraphNormalizer",
    "GroupingEngine",
    "GraphData",
    "NodeType",
    "EdgeKind",
    "FilterState",
    "ExportSettings",
    "OutputManager",
]
