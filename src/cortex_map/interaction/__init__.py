"""
Interaction layer: view transform, pointer gestures, filtering and highlight.
"""

from .gestures import GestureState, InteractionController, PointerEvent, next_gesture_state
from .highlight import (
    HighlightEngine,
    Neighborhood,
    VisibleGraph,
    neighborhood,
    search_matches,
    visible_subgraph,
)
from .scene import Scene, SceneEdge, SceneNode, build_scene
from .view_transform import (
    PanEvent,
    ResetEvent,
    TransformEvent,
    ViewTransformController,
    ZoomEvent,
)

__all__ = [
    # View transform
    "ViewTransformController",
    "PanEvent",
    "ZoomEvent",
    "ResetEvent",
    "TransformEvent",
    # Gestures
    "GestureState",
    "PointerEvent",
    "InteractionController",
    "next_gesture_state",
    # Scene
    "Scene",
    "SceneNode",
    "SceneEdge",
    "build_scene",
    # Filter and highlight
    "HighlightEngine",
    "Neighborhood",
    "VisibleGraph",
    "neighborhood",
    "search_matches",
    "visible_subgraph",
]
