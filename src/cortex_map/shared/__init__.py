"""
Shared module for core functionality.

Contains core models, configuration, exceptions, logging and output
naming shared across CorteX Map.
"""

from .config import MapConfig, SimulationConfig, config_from_dict, load_config
from .exceptions import (
    ConfigurationError,
    CortexMapError,
    ExportError,
    ExportInProgressError,
    ExportWriteError,
    LayoutError,
    PayloadError,
    RenderCaptureError,
    create_error_context,
    wrap_external_error,
)
from .logging import get_logger, setup_logging
from .models import (
    BASE_NODE_TYPES,
    GROUPABLE_NODE_TYPES,
    Edge,
    EdgeKind,
    ExportSettings,
    FilterState,
    GraphData,
    Node,
    NodeState,
    NodeType,
    ViewTransform,
)
from .output import OutputManager

__all__ = [
    # Core models
    "BASE_NODE_TYPES",
    "GROUPABLE_NODE_TYPES",
    "NodeType",
    "EdgeKind",
    "Node",
    "Edge",
    "GraphData",
    "NodeState",
    "ViewTransform",
    "FilterState",
    "ExportSettings",
    # Configuration
    "MapConfig",
    "SimulationConfig",
    "config_from_dict",
    "load_config",
    # Core exceptions
    "CortexMapError",
    "ConfigurationError",
    "PayloadError",
    "LayoutError",
    "ExportError",
    "RenderCaptureError",
    "ExportWriteError",
    "ExportInProgressError",
    "wrap_external_error",
    "create_error_context",
    # Management
    "OutputManager",
    # Utils
    "setup_logging",
    "get_logger",
]
