"""
Output naming and organization for CorteX Map exports.
"""

import re
from datetime import datetime
from pathlib import Path

from .exceptions import ExportWriteError, create_error_context


class OutputManager:
    """Builds artifact paths for JSON, PDF and PNG exports."""

    def __init__(self, base_output_dir: Path = Path("outputs")):
        """Initialize output manager.

        Args:
            base_output_dir: Base directory for all outputs
        """
        self.base_dir = Path(base_output_dir)

    def _ensure_dir_exists(self, dir_path: Path) -> Path:
        """Ensure directory exists, creating it if necessary.

        Args:
            dir_path: Directory path to ensure exists

        Returns:
            The directory path

        Raises:
            ExportWriteError: If the directory cannot be created
        """
        try:
            dir_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise ExportWriteError(
                f"Could not create output directory {dir_path}: {e}",
                create_error_context(path=str(dir_path)),
            ) from e
        return dir_path

    def clean_target_name(self, target: str | None) -> str:
        """Make a reconnaissance target safe for use in filenames.

        Args:
            target: Target domain as given by the payload

        Returns:
            Filesystem-safe name, ``export`` when the target is missing
        """
        if not target:
            return "export"
        # Keep dots and hyphens, which are common in domain names
        clean_name = re.sub(r"[^\w\-.]", "_", target.strip())
        return clean_name.strip(".") or "export"

    @staticmethod
    def iso_date(moment: datetime | None = None) -> str:
        return (moment or datetime.now()).strftime("%Y-%m-%d")

    def get_json_path(self, target: str | None, moment: datetime | None = None) -> Path:
        """Path for the JSON snapshot: ``<target>_<ISODate>.json``."""
        filename = f"{self.clean_target_name(target)}_{self.iso_date(moment)}.json"
        return self._ensure_dir_exists(self.base_dir) / filename

    def get_report_path(self, target: str | None, moment: datetime | None = None) -> Path:
        """Path for the paginated report: ``<target>_relatório_<ISODate>.pdf``."""
        filename = f"{self.clean_target_name(target)}_relatório_{self.iso_date(moment)}.pdf"
        return self._ensure_dir_exists(self.base_dir) / filename

    def get_snapshot_path(self, target: str | None) -> Path:
        """Path for the rasterized graph: ``cortex-map-<target>.png``."""
        filename = f"cortex-map-{self.clean_target_name(target)}.png"
        return self._ensure_dir_exists(self.base_dir) / filename
