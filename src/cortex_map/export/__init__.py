"""
Report exporting: JSON snapshot, paginated PDF report and PNG snapshot.
"""

from .coordinator import EXPORT_FORMATS, ExportCoordinator
from .json_export import build_json_snapshot, write_json_snapshot
from .page_plan import (
    ImageOp,
    LineOp,
    PageGeometry,
    ReportPlan,
    ReportPlanner,
    SnapshotImage,
    TextOp,
)
from .pdf_writer import render_pdf
from .snapshot import render_snapshot, save_snapshot
from .tables import TableSection, build_sections, escape_cell, format_row, split_row

__all__ = [
    "ExportCoordinator",
    "EXPORT_FORMATS",
    # JSON
    "build_json_snapshot",
    "write_json_snapshot",
    # Report planning
    "ReportPlanner",
    "ReportPlan",
    "PageGeometry",
    "SnapshotImage",
    "TextOp",
    "LineOp",
    "ImageOp",
    "render_pdf",
    # Tables
    "TableSection",
    "build_sections",
    "escape_cell",
    "format_row",
    "split_row",
    # PNG
    "render_snapshot",
    "save_snapshot",
]
