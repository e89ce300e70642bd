"""
Layout engines for different placement strategies.

This module provides the physics-based force engine and the deterministic
radial engine, both producing positions into a :class:`PositionArena`.
"""

from ..shared.config import MapConfig
from ..shared.exceptions import LayoutError, create_error_context
from .arena import BaseLayoutEngine, PositionArena
from .force_engine import ForceDirectedEngine, ForceSimulation, charge_strength, link_distance
from .radial_engine import RadialEngine

LAYOUT_ENGINES: dict[str, type[BaseLayoutEngine]] = {
    ForceDirectedEngine.name: ForceDirectedEngine,
    RadialEngine.name: RadialEngine,
}


def create_layout_engine(name: str, config: MapConfig | None = None) -> BaseLayoutEngine:
    """Create a layout engine by strategy name.

    Args:
        name: ``force`` or ``radial``
        config: Map configuration passed to the engine

    Returns:
        New engine instance

    Raises:
        LayoutError: If the strategy name is unknown
    """
    engine_class = LAYOUT_ENGINES.get(name)
    if engine_class is None:
        raise LayoutError(
            f"Unknown layout strategy: {name}",
            create_error_context(available=", ".join(sorted(LAYOUT_ENGINES))),
        )
    return engine_class(config)


__all__ = [
    "BaseLayoutEngine",
    "PositionArena",
    "ForceDirectedEngine",
    "ForceSimulation",
    "RadialEngine",
    "LAYOUT_ENGINES",
    "create_layout_engine",
    "charge_strength",
    "link_distance",
]
