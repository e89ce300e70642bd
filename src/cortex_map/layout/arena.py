"""
Position arena shared by the layout engines.

The arena holds one :class:`NodeState` per node id. The layout engine that
created it is its only writer; everything else reads :meth:`snapshot`.
"""

from collections.abc import Iterator
from typing import Any

from ..shared.models import GraphData, NodeState


class PositionArena:
    """Owned store of node simulation records indexed by node id."""

    def __init__(self) -> None:
        self._states: dict[str, NodeState] = {}

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._states

    def __len__(self) -> int:
        return len(self._states)

    def __iter__(self) -> Iterator[str]:
        return iter(self._states)

    def get(self, node_id: str) -> NodeState | None:
        return self._states.get(node_id)

    def set(self, node_id: str, state: NodeState) -> None:
        self._states[node_id] = state

    def position(self, node_id: str) -> tuple[float, float] | None:
        state = self._states.get(node_id)
        if state is None:
            return None
        return state.x, state.y

    def snapshot(self) -> dict[str, tuple[float, float]]:
        """Copy of all positions; safe to hold across ticks."""
        return {node_id: (state.x, state.y) for node_id, state in self._states.items()}


class BaseLayoutEngine:
    """Common surface of layout strategies.

    Engines compute positions for a :class:`GraphData` with :meth:`layout`,
    advance with :meth:`tick` and honour pointer drags. The default
    implementation is static: ticks do nothing and drags move the node.
    """

    name = "base"

    def __init__(self) -> None:
        self.arena = PositionArena()
        self.graph = GraphData()

    @property
    def is_running(self) -> bool:
        return False

    def layout(self, graph: GraphData) -> PositionArena:
        raise NotImplementedError

    def tick(self) -> bool:
        return False

    def run(self) -> int:
        """Advance until the layout settles; returns the number of ticks."""
        ticks = 0
        while self.tick():
            ticks += 1
        return ticks

    def stop(self) -> None:
        pass

    def get_layout_config(self) -> dict[str, Any]:
        return {"name": self.name}

    def positions(self) -> dict[str, tuple[float, float]]:
        return self.arena.snapshot()

    def drag_start(self, node_id: str) -> None:
        state = self.arena.get(node_id)
        if state is not None:
            state.fx, state.fy = state.x, state.y

    def drag_to(self, node_id: str, x: float, y: float) -> None:
        state = self.arena.get(node_id)
        if state is not None:
            state.x, state.y = x, y
            state.fx, state.fy = x, y

    def drag_end(self, node_id: str) -> None:
        state = self.arena.get(node_id)
        if state is not None:
            state.fx = state.fy = None
