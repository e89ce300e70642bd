"""
Export coordination.

All exports of a session go through one :class:`ExportCoordinator`, which
lets only one export run at a time (they share the output naming scheme and
the rasterizer). Artifacts are written to a temporary file and moved into
place, so a failed export leaves any earlier artifact untouched.
"""

import logging
import os
import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path

from ..graph.payload import ReconPayload
from ..interaction.scene import Scene
from ..shared.config import MapConfig
from ..shared.exceptions import ExportInProgressError, ExportWriteError, create_error_context
from ..shared.models import ExportSettings
from ..shared.output import OutputManager
from .json_export import build_json_snapshot, write_json_snapshot
from .page_plan import PageGeometry, ReportPlan, ReportPlanner, SnapshotImage
from .pdf_writer import render_pdf
from .snapshot import render_snapshot, save_snapshot
from .tables import build_sections

EXPORT_FORMATS = ("json", "pdf", "png")


class ExportCoordinator:
    """Serializes and performs JSON, PDF and PNG exports."""

    def __init__(self, config: MapConfig | None = None, output_manager: OutputManager | None = None):
        """Initialize the coordinator.

        Args:
            config: Map configuration (viewport, page margin, generator name)
            output_manager: Path builder for artifacts
        """
        self.config = config or MapConfig()
        self.output = output_manager or OutputManager(self.config.output_dir)
        self.logger = logging.getLogger(__name__)
        self._lock = threading.Lock()

    @property
    def is_busy(self) -> bool:
        return self._lock.locked()

    @contextmanager
    def exclusive(self, kind: str) -> Iterator[None]:
        """Hold the export slot for the duration of one export.

        Raises:
            ExportInProgressError: If another export is already running
        """
        if not self._lock.acquire(blocking=False):
            raise ExportInProgressError(
                "An export is already in progress", create_error_context(requested=kind)
            )
        try:
            yield
        finally:
            self._lock.release()

    def default_settings(self) -> ExportSettings:
        return ExportSettings(items_per_page=self.config.items_per_page)

    def _write(self, output_path: Path, writer: Callable[[Path], object]) -> Path:
        partial = output_path.with_name(output_path.name + ".part")
        try:
            writer(partial)
            os.replace(partial, output_path)
        except (OSError, ValueError) as e:
            partial.unlink(missing_ok=True)
            self.logger.error(f"Export to {output_path} failed: {e}")
            raise ExportWriteError(
                f"Could not write {output_path.name}: {e}",
                create_error_context(path=str(output_path)),
            ) from e
        self.logger.info(f"Exported {output_path}")
        return output_path

    def export_json(
        self,
        payload: ReconPayload,
        settings: ExportSettings | None = None,
        moment: datetime | None = None,
    ) -> Path:
        """Write the JSON snapshot ``<target>_<date>.json``."""
        with self.exclusive("json"):
            return self._export_json(payload, settings or self.default_settings(), moment)

    def _export_json(
        self, payload: ReconPayload, settings: ExportSettings, moment: datetime | None
    ) -> Path:
        moment = moment or datetime.now()
        snapshot = build_json_snapshot(payload, settings, moment)
        path = self.output.get_json_path(payload.target, moment)
        return self._write(path, lambda p: write_json_snapshot(snapshot, p))

    def plan_report(
        self,
        payload: ReconPayload,
        settings: ExportSettings,
        scene: Scene | None = None,
        moment: datetime | None = None,
    ) -> ReportPlan:
        """Plan the paginated report without writing anything."""
        capture = None
        if settings.include_graph and scene is not None and not scene.is_empty:
            capture = self._capture(scene)

        planner = ReportPlanner(
            target=payload.target,
            settings=settings,
            generated_at=moment or datetime.now(),
            geometry=PageGeometry(margin=self.config.page_margin_mm),
            generator_name=self.config.generator_name,
        )
        return planner.plan(build_sections(payload, settings), capture)

    def _capture(self, scene: Scene) -> Callable[[], SnapshotImage]:
        def capture() -> SnapshotImage:
            return render_snapshot(
                scene, self.config.viewport_width, self.config.viewport_height
            )

        return capture

    def export_pdf(
        self,
        payload: ReconPayload,
        settings: ExportSettings | None = None,
        scene: Scene | None = None,
        moment: datetime | None = None,
    ) -> Path:
        """Write the paginated report ``<target>_relatório_<date>.pdf``."""
        with self.exclusive("pdf"):
            return self._export_pdf(payload, settings or self.default_settings(), scene, moment)

    def _export_pdf(
        self,
        payload: ReconPayload,
        settings: ExportSettings,
        scene: Scene | None,
        moment: datetime | None,
    ) -> Path:
        moment = moment or datetime.now()
        plan = self.plan_report(payload, settings, scene, moment)
        path = self.output.get_report_path(payload.target, moment)
        title = f"Report for {payload.target or 'unknown target'}"
        return self._write(path, lambda p: render_pdf(plan, p, title=title))

    def export_png(self, scene: Scene, target: str | None) -> Path:
        """Write the rasterized graph ``cortex-map-<target>.png``.

        Raises:
            RenderCaptureError: If the scene cannot be rasterized
        """
        with self.exclusive("png"):
            return self._export_png(scene, target)

    def _export_png(self, scene: Scene, target: str | None) -> Path:
        image = render_snapshot(scene, self.config.viewport_width, self.config.viewport_height)
        path = self.output.get_snapshot_path(target)
        return self._write(path, lambda p: save_snapshot(image, p))

    def export_all(
        self,
        payload: ReconPayload,
        settings: ExportSettings | None = None,
        scene: Scene | None = None,
        formats: tuple[str, ...] = EXPORT_FORMATS,
        moment: datetime | None = None,
    ) -> dict[str, Path]:
        """Run several exports under a single hold of the export slot.

        Returns:
            Written path per format
        """
        settings = settings or self.default_settings()
        moment = moment or datetime.now()
        results: dict[str, Path] = {}
        with self.exclusive("all"):
            if "json" in formats:
                results["json"] = self._export_json(payload, settings, moment)
            if "pdf" in formats:
                results["pdf"] = self._export_pdf(payload, settings, scene, moment)
            if "png" in formats and scene is not None:
                results["png"] = self._export_png(scene, payload.target)
        return results
