"""
View-transform controller.

Owns the pan/zoom state of the rendered scene. A model point maps to the
screen as ``screen = k * (model + t)``, so pans are applied in model space
(device delta divided by the scale) and zooms keep the zoom center fixed on
screen.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from ..shared.config import MapConfig
from ..shared.exceptions import ConfigurationError, create_error_context
from ..shared.models import ViewTransform

MIN_ZOOM_FACTOR = 1.2


@dataclass(frozen=True)
class PanEvent:
    dx: float
    dy: float


@dataclass(frozen=True)
class ZoomEvent:
    """Multiplicative zoom around a screen point (viewport center if None)."""

    factor: float
    cx: float | None = None
    cy: float | None = None


@dataclass(frozen=True)
class ResetEvent:
    pass


TransformEvent = PanEvent | ZoomEvent | ResetEvent


class ViewTransformController:
    """Sole owner and writer of the :class:`ViewTransform`."""

    def __init__(
        self,
        scale_extent: tuple[float, float] = (0.1, 10.0),
        zoom_factor: float = MIN_ZOOM_FACTOR,
        viewport: tuple[float, float] = (800.0, 600.0),
        wheel_zoom_factor: float = 1.1,
    ):
        """Initialize the controller.

        Args:
            scale_extent: Inclusive (min, max) bounds for the scale
            zoom_factor: Multiplier for zoom in/out steps (at least 1.2)
            viewport: Viewport width and height in device units
            wheel_zoom_factor: Multiplier for a single modified wheel step

        Raises:
            ConfigurationError: If the scale extent or zoom factor is invalid
        """
        low, high = scale_extent
        if not 0 < low <= 1 <= high:
            raise ConfigurationError(
                "Scale extent must satisfy 0 < min <= 1 <= max",
                create_error_context(min=low, max=high),
            )
        if zoom_factor < MIN_ZOOM_FACTOR:
            raise ConfigurationError(
                f"Zoom factor must be at least {MIN_ZOOM_FACTOR}",
                create_error_context(zoom_factor=zoom_factor),
            )

        self.scale_extent = (float(low), float(high))
        self.zoom_factor = zoom_factor
        self.wheel_zoom_factor = wheel_zoom_factor
        self.viewport = viewport
        self._transform = ViewTransform()
        self.logger = logging.getLogger(__name__)

    @classmethod
    def from_config(cls, config: MapConfig, layout: str | None = None) -> "ViewTransformController":
        return cls(
            scale_extent=config.scale_extent_for(layout or config.layout),
            zoom_factor=config.zoom_factor,
            viewport=(config.viewport_width, config.viewport_height),
            wheel_zoom_factor=config.wheel_zoom_factor,
        )

    @property
    def transform(self) -> ViewTransform:
        return self._transform

    @property
    def viewport_center(self) -> tuple[float, float]:
        return self.viewport[0] / 2, self.viewport[1] / 2

    def _clamp(self, k: float) -> float:
        low, high = self.scale_extent
        return min(max(k, low), high)

    def set_scale_extent(self, scale_extent: tuple[float, float]) -> ViewTransform:
        """Switch zoom bounds (e.g. on layout change), re-clamping the scale."""
        self.scale_extent = (float(scale_extent[0]), float(scale_extent[1]))
        t = self._transform
        clamped = self._clamp(t.k)
        if clamped != t.k:
            self._transform = self._zoomed(t, clamped, self.viewport_center)
        return self._transform

    def _zoomed(self, t: ViewTransform, k: float, center: tuple[float, float]) -> ViewTransform:
        # Keep the model point under ``center`` fixed on screen
        cx, cy = center
        return ViewTransform(
            x=t.x + cx / k - cx / t.k,
            y=t.y + cy / k - cy / t.k,
            k=k,
        )

    def zoom_by(self, factor: float, center: tuple[float, float] | None = None) -> ViewTransform:
        """Multiply the scale by ``factor`` around a screen point.

        Args:
            factor: Scale multiplier (> 1 zooms in)
            center: Screen point to keep fixed, viewport center by default

        Returns:
            The new transform
        """
        t = self._transform
        k = self._clamp(t.k * factor)
        if k == t.k:
            return t
        self._transform = self._zoomed(t, k, center or self.viewport_center)
        return self._transform

    def zoom_in(self) -> ViewTransform:
        return self.zoom_by(self.zoom_factor)

    def zoom_out(self) -> ViewTransform:
        return self.zoom_by(1 / self.zoom_factor)

    def pan(self, dx: float, dy: float) -> ViewTransform:
        """Pan by a device-space delta, converted to model space."""
        t = self._transform
        self._transform = ViewTransform(x=t.x + dx / t.k, y=t.y + dy / t.k, k=t.k)
        return self._transform

    def reset(self) -> ViewTransform:
        self._transform = ViewTransform()
        return self._transform

    def wheel(
        self, delta_y: float, modifier: bool, pointer: tuple[float, float] | None = None
    ) -> bool:
        """Handle a wheel step.

        Args:
            delta_y: Wheel delta; negative scrolls up (zoom in)
            modifier: Whether the zoom modifier key is held
            pointer: Pointer position to zoom around

        Returns:
            True if the event was consumed as a zoom
        """
        if not modifier or delta_y == 0:
            return False
        factor = self.wheel_zoom_factor if delta_y < 0 else 1 / self.wheel_zoom_factor
        self.zoom_by(factor, pointer)
        return True

    def to_screen(self, x: float, y: float) -> tuple[float, float]:
        t = self._transform
        return t.k * (x + t.x), t.k * (y + t.y)

    def to_model(self, sx: float, sy: float) -> tuple[float, float]:
        t = self._transform
        return sx / t.k - t.x, sy / t.k - t.y

    def apply(self, event: TransformEvent) -> ViewTransform:
        if isinstance(event, PanEvent):
            return self.pan(event.dx, event.dy)
        if isinstance(event, ZoomEvent):
            center = None if event.cx is None or event.cy is None else (event.cx, event.cy)
            return self.zoom_by(event.factor, center)
        if isinstance(event, ResetEvent):
            return self.reset()
        raise TypeError(f"Unsupported transform event: {event!r}")

    def replay(
        self, events: Iterable[TransformEvent], origin: ViewTransform | None = None
    ) -> ViewTransform:
        """Apply a recorded event sequence starting from ``origin``.

        Replaying the same sequence from the same origin always reaches the
        same transform.
        """
        self._transform = origin if origin is not None else ViewTransform()
        for event in events:
            self.apply(event)
        self.logger.debug(f"Replayed transform events, now at {self._transform}")
        return self._transform
