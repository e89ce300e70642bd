"""
Pointer gesture handling.

An explicit state machine replaces ambient event listeners: a gesture starts
on pointer-down, either on a node (dragging the node) or on the background
(panning the canvas), and ends on pointer-up or pointer-leave. The two kinds
of drag never mix within one gesture.
"""

import logging
import math
from collections.abc import Callable
from enum import Enum
from typing import Protocol

from .view_transform import ViewTransformController


class GestureState(str, Enum):
    IDLE = "idle"
    DRAGGING_NODE = "dragging-node"
    PANNING_CANVAS = "panning-canvas"


class PointerEvent(str, Enum):
    DOWN_ON_NODE = "down-on-node"
    DOWN_ON_BACKGROUND = "down-on-background"
    MOVE = "move"
    UP = "up"
    LEAVE = "leave"


def next_gesture_state(state: GestureState, event: PointerEvent) -> GestureState:
    """Pure transition function of the gesture machine."""
    if state == GestureState.IDLE:
        if event == PointerEvent.DOWN_ON_NODE:
            return GestureState.DRAGGING_NODE
        if event == PointerEvent.DOWN_ON_BACKGROUND:
            return GestureState.PANNING_CANVAS
        return GestureState.IDLE

    if event in (PointerEvent.UP, PointerEvent.LEAVE):
        return GestureState.IDLE
    # Pointer-down while a gesture is active and moves keep the gesture
    return state


class DragTarget(Protocol):
    def drag_start(self, node_id: str) -> None: ...

    def drag_to(self, node_id: str, x: float, y: float) -> None: ...

    def drag_end(self, node_id: str) -> None: ...


class InteractionController:
    """Routes pointer input to the view transform or the layout engine."""

    def __init__(
        self,
        view: ViewTransformController,
        layout: DragTarget | None = None,
        on_node_click: Callable[[str], None] | None = None,
        click_tolerance: float = 3.0,
    ):
        """Initialize the interaction controller.

        Args:
            view: Controller that owns the view transform
            layout: Layout engine receiving node drags
            on_node_click: Called with the node id on a click without movement
            click_tolerance: Pointer travel (device units) still counted as a click
        """
        self.view = view
        self.layout = layout
        self.on_node_click = on_node_click
        self.click_tolerance = click_tolerance
        self.state = GestureState.IDLE
        self.logger = logging.getLogger(__name__)

        self._node_id: str | None = None
        self._origin: tuple[float, float] = (0.0, 0.0)
        self._last: tuple[float, float] = (0.0, 0.0)
        self._moved = False

    def attach_layout(self, layout: DragTarget) -> None:
        """Route node drags to a new layout engine, ending any gesture."""
        self.pointer_leave()
        self.layout = layout

    def pointer_down(self, x: float, y: float, node_id: str | None = None) -> GestureState:
        if self.state != GestureState.IDLE:
            return self.state

        event = PointerEvent.DOWN_ON_NODE if node_id is not None else PointerEvent.DOWN_ON_BACKGROUND
        self.state = next_gesture_state(self.state, event)
        self._origin = self._last = (x, y)
        self._moved = False
        self._node_id = node_id

        if self.state == GestureState.DRAGGING_NODE and self.layout is not None:
            self.layout.drag_start(node_id)
        return self.state

    def pointer_move(self, x: float, y: float) -> GestureState:
        if self.state == GestureState.IDLE:
            return self.state

        if math.hypot(x - self._origin[0], y - self._origin[1]) > self.click_tolerance:
            self._moved = True

        if self.state == GestureState.PANNING_CANVAS:
            self.view.pan(x - self._last[0], y - self._last[1])
        elif self.state == GestureState.DRAGGING_NODE and self.layout is not None:
            model_x, model_y = self.view.to_model(x, y)
            self.layout.drag_to(self._node_id, model_x, model_y)

        self._last = (x, y)
        self.state = next_gesture_state(self.state, PointerEvent.MOVE)
        return self.state

    def pointer_up(self, x: float, y: float) -> GestureState:
        if self.state == GestureState.IDLE:
            return self.state

        node_id = self._node_id
        clicked = self.state == GestureState.DRAGGING_NODE and not self._moved
        self._finish(PointerEvent.UP)

        if clicked and node_id is not None and self.on_node_click is not None:
            self.logger.debug(f"Node clicked: {node_id}")
            self.on_node_click(node_id)
        return self.state

    def pointer_leave(self) -> GestureState:
        if self.state != GestureState.IDLE:
            self._finish(PointerEvent.LEAVE)
        return self.state

    def _finish(self, event: PointerEvent) -> None:
        if self.state == GestureState.DRAGGING_NODE and self.layout is not None:
            self.layout.drag_end(self._node_id)
        self.state = next_gesture_state(self.state, event)
        self._node_id = None
        self._moved = False
