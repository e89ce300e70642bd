"""
Configuration for CorteX Map.

Defaults live on :class:`MapConfig`; an optional TOML file may override them
through its ``[cortex_map]`` table.
"""

import tomllib
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any

from .exceptions import ConfigurationError, create_error_context


@dataclass(frozen=True)
class SimulationConfig:
    """Parameters of the force simulation."""

    alpha_min: float = 0.001
    alpha_decay: float | None = None  # Derived from alpha_min and max_iterations when None
    alpha_target_on_drag: float = 0.3
    velocity_decay: float = 0.4
    max_iterations: int = 300
    energy_threshold: float = 0.05
    position_strength: float = 0.1
    collision_padding: float = 1.5
    drag_cooldown_ticks: int = 30
    seed: int = 0


@dataclass(frozen=True)
class MapConfig:
    """Configuration for graph building, layout, interaction and export."""

    viewport_width: float = 800.0
    viewport_height: float = 600.0
    layout: str = "force"
    grouping_threshold: int = 50

    # Zoom bounds differ between the free-form and the radial view
    force_scale_extent: tuple[float, float] = (0.1, 10.0)
    radial_scale_extent: tuple[float, float] = (0.5, 2.0)
    zoom_factor: float = 1.2
    wheel_zoom_factor: float = 1.1

    simulation: SimulationConfig = field(default_factory=SimulationConfig)

    # Export settings
    items_per_page: int = 40
    generator_name: str = "CorteX Map"
    page_margin_mm: float = 10.0
    output_dir: Path = Path("outputs")

    @property
    def center(self) -> tuple[float, float]:
        return self.viewport_width / 2, self.viewport_height / 2

    def scale_extent_for(self, layout: str) -> tuple[float, float]:
        """Zoom bounds for a layout strategy name."""
        if layout == "radial":
            return self.radial_scale_extent
        return self.force_scale_extent


def _coerce(name: str, value: Any) -> Any:
    if name == "output_dir":
        return Path(value)
    if name.endswith("_scale_extent"):
        low, high = value
        return (float(low), float(high))
    return value


def config_from_dict(values: dict[str, Any], base: MapConfig | None = None) -> MapConfig:
    """Apply a mapping of overrides on top of a configuration.

    Args:
        values: Override values; a nested ``simulation`` table is supported
        base: Configuration to override (defaults to ``MapConfig()``)

    Returns:
        New configuration

    Raises:
        ConfigurationError: If an unknown key is present
    """
    base = base or MapConfig()
    known = {f.name for f in fields(MapConfig)}
    overrides: dict[str, Any] = {}

    for key, value in values.items():
        if key not in known:
            raise ConfigurationError(
                f"Unknown configuration key: {key}", create_error_context(key=key)
            )
        if key == "simulation":
            sim_known = {f.name for f in fields(SimulationConfig)}
            unknown = set(value) - sim_known
            if unknown:
                raise ConfigurationError(
                    "Unknown simulation configuration keys",
                    create_error_context(keys=", ".join(sorted(unknown))),
                )
            overrides[key] = replace(base.simulation, **value)
        else:
            overrides[key] = _coerce(key, value)

    return replace(base, **overrides)


def load_config(config_path: Path | None = None) -> MapConfig:
    """Load configuration from a TOML file.

    Args:
        config_path: Path to a TOML file, or None for defaults

    Returns:
        Loaded configuration

    Raises:
        ConfigurationError: If the file cannot be read or parsed
    """
    if config_path is None:
        return MapConfig()

    try:
        with open(config_path, "rb") as f:
            document = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        raise ConfigurationError(
            f"Could not load configuration: {e}", create_error_context(path=str(config_path))
        ) from e

    return config_from_dict(document.get("cortex_map", {}))
