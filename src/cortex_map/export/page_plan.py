"""
Deterministic page planning for the paginated report.

The planner walks the report content with a running vertical cursor
(``y_pos``, millimetres from the top of the page) and emits draw operations
per page. A content block that would overflow the page starts a new page,
re-emitting column headers. Footers carrying "Page i of N" are added only
once the total page count is known. The plan is pure data; rendering it is
the PDF writer's job.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import datetime

from ..shared.exceptions import RenderCaptureError
from ..shared.models import ExportSettings
from .tables import TableSection, split_row

logger = logging.getLogger(__name__)

RGB = tuple[int, int, int]

TITLE_COLOR: RGB = (75, 0, 130)
TEXT_COLOR: RGB = (0, 0, 0)
MUTED_COLOR: RGB = (100, 100, 100)
FOOTER_COLOR: RGB = (120, 120, 120)
RULE_COLOR: RGB = (200, 200, 200)
ERROR_COLOR: RGB = (255, 0, 0)

GRAPH_TITLE = "Graph Visualization"
CAPTURE_ERROR_NOTICE = "Could not capture the graph. See the log for details."
MAX_IMAGE_HEIGHT_RATIO = 0.75


@dataclass(frozen=True)
class TextOp:
    x: float
    y: float
    text: str
    font_size: float = 12
    color: RGB = TEXT_COLOR


@dataclass(frozen=True)
class LineOp:
    x1: float
    y1: float
    x2: float
    y2: float
    color: RGB = RULE_COLOR


@dataclass(frozen=True)
class ImageOp:
    x: float
    y: float
    width: float
    height: float
    data: bytes = field(repr=False)


DrawOp = TextOp | LineOp | ImageOp


@dataclass(frozen=True)
class PageGeometry:
    """Page size and margin in millimetres (landscape A4 by default)."""

    width: float = 297.0
    height: float = 210.0
    margin: float = 10.0

    @property
    def content_width(self) -> float:
        return self.width - 2 * self.margin

    @property
    def content_height(self) -> float:
        return self.height - 2 * self.margin


@dataclass(frozen=True)
class SnapshotImage:
    """A rasterized graph image (PNG bytes) and its pixel size."""

    data: bytes = field(repr=False)
    width_px: int
    height_px: int


@dataclass
class ReportPlan:
    geometry: PageGeometry
    pages: list[list[DrawOp]]

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def texts(self, page_index: int) -> list[str]:
        """Text content of one page (0-based), in drawing order."""
        return [op.text for op in self.pages[page_index] if isinstance(op, TextOp)]


class ReportPlanner:
    """Lays out report content onto fixed-size pages."""

    def __init__(
        self,
        target: str | None,
        settings: ExportSettings,
        generated_at: datetime,
        geometry: PageGeometry | None = None,
        generator_name: str = "CorteX Map",
    ):
        """Initialize the planner.

        Args:
            target: Reconnaissance target shown in headers
            settings: Export settings (graph, pagination, fit-to-page)
            generated_at: Timestamp printed in the header and footers
            geometry: Page geometry, landscape A4 with 10 mm margins by default
            generator_name: Name printed in the footer
        """
        self.target = target or "unknown target"
        self.settings = settings
        self.generated_at = generated_at
        self.geometry = geometry or PageGeometry()
        self.generator_name = generator_name
        self.pages: list[list[DrawOp]] = []
        self.y_pos = 0.0

    def plan(
        self,
        sections: list[TableSection],
        capture: Callable[[], SnapshotImage] | None = None,
    ) -> ReportPlan:
        """Plan the whole report.

        Args:
            sections: Table sections in report order
            capture: Callable producing the graph image; a
                :class:`RenderCaptureError` it raises becomes an in-document notice

        Returns:
            The finished plan, footers included
        """
        self.pages = [[]]
        self._add_title_header()

        if self.settings.include_graph and capture is not None:
            self._add_graph(capture)

        for section in sections:
            self._add_section(section)

        self._add_footers()
        logger.debug(f"Planned report for {self.target}: {len(self.pages)} pages")
        return ReportPlan(geometry=self.geometry, pages=self.pages)

    @property
    def _margin(self) -> float:
        return self.geometry.margin

    def _draw(self, op: DrawOp) -> None:
        self.pages[-1].append(op)

    def _text(self, x: float, y: float, text: str, size: float, color: RGB = TEXT_COLOR) -> None:
        self._draw(TextOp(x=x, y=y, text=text, font_size=size, color=color))

    def _stamp(self) -> tuple[str, str]:
        return (
            self.generated_at.strftime("%Y-%m-%d"),
            self.generated_at.strftime("%H:%M:%S"),
        )

    def _add_title_header(self) -> None:
        margin = self._margin
        date, time = self._stamp()
        self._text(margin, margin + 10, f"Report for {self.target}", 20, TITLE_COLOR)
        self._text(margin, margin + 16, f"Generated on {date} {time}", 10, MUTED_COLOR)
        self.y_pos = margin + 25

    def _new_page(self) -> None:
        self.pages.append([])
        self.y_pos = self._margin + 15
        self._text(
            self._margin,
            self._margin + 5,
            f"{self.target} - Page {len(self.pages)}",
            10,
            MUTED_COLOR,
        )

    def check_new_page(self, block_height: float) -> bool:
        """Start a new page if a block of ``block_height`` would overflow.

        Returns:
            True if a page was added
        """
        if self.y_pos + block_height + 10 > self.geometry.height - self._margin:
            self._new_page()
            return True
        return False

    def _add_graph(self, capture: Callable[[], SnapshotImage]) -> None:
        try:
            image = capture()
            if image.width_px <= 0 or image.height_px <= 0:
                raise RenderCaptureError("Captured graph image is empty")
        except RenderCaptureError as e:
            logger.warning(f"Graph capture failed, continuing without image: {e}")
            self._text(self._margin, self.y_pos, CAPTURE_ERROR_NOTICE, 12, ERROR_COLOR)
            self.y_pos += 10
            return

        geometry = self.geometry
        image_width = geometry.content_width
        image_height = image.height_px * image_width / image.width_px
        max_height = geometry.content_height * MAX_IMAGE_HEIGHT_RATIO
        if self.settings.fit_to_page and image_height > max_height:
            image_height = max_height
            image_width = image.width_px * image_height / image.height_px

        self.check_new_page(image_height + 15)
        self._text(self._margin, self.y_pos, GRAPH_TITLE, 14, TITLE_COLOR)
        self.y_pos += 8

        x = self._margin + (geometry.content_width - image_width) / 2
        self._draw(ImageOp(x=x, y=self.y_pos, width=image_width, height=image_height, data=image.data))
        self.y_pos += image_height + 10

    def _add_column_headers(self, headers: tuple[str, ...], column_width: float) -> None:
        margin = self._margin
        for index, header in enumerate(headers):
            self._text(margin + column_width * index, self.y_pos, header, 10, MUTED_COLOR)
        self.y_pos += 5
        self._draw(LineOp(margin, self.y_pos, self.geometry.width - margin, self.y_pos))
        self.y_pos += 5

    def _add_section(self, section: TableSection) -> None:
        geometry = self.geometry
        margin = self._margin
        rows = list(section.rows)

        self.check_new_page(30)
        self._text(margin, self.y_pos, f"{section.title} ({len(rows)})", 14, TITLE_COLOR)
        self.y_pos += 8

        column_width = geometry.content_width / len(section.headers)
        self._add_column_headers(section.headers, column_width)

        if self.settings.paginate:
            per_page = max(1, self.settings.items_per_page)
        else:
            per_page = max(1, len(rows))
        chunks = [rows[i : i + per_page] for i in range(0, len(rows), per_page)]

        for chunk_index, chunk in enumerate(chunks):
            if chunk_index > 0:
                self._new_page()
                self._add_column_headers(section.headers, column_width)

            for row in chunk:
                if self.y_pos > geometry.height - margin - 15:
                    self._new_page()
                    self._add_column_headers(section.headers, column_width)
                for index, cell in enumerate(split_row(row)):
                    self._text(margin + column_width * index, self.y_pos, cell, 10)
                self.y_pos += 5

            if len(chunks) > 1:
                self._text(
                    margin,
                    geometry.height - margin - 5,
                    f"Page {chunk_index + 1} of {len(chunks)} for {section.title}",
                    8,
                    MUTED_COLOR,
                )

        self.y_pos += 10

    def _add_footers(self) -> None:
        date, time = self._stamp()
        total = len(self.pages)
        for number, page in enumerate(self.pages, start=1):
            page.append(
                TextOp(
                    x=self._margin,
                    y=self.geometry.height - 5,
                    text=f"{self.generator_name} on {date} {time} | Page {number} of {total}",
                    font_size=8,
                    color=FOOTER_COLOR,
                )
            )
