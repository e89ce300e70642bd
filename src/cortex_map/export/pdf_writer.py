"""
PDF rendering of a report plan with reportlab.

Plan coordinates are millimetres from the top-left corner; reportlab draws
in points from the bottom-left, so every y is flipped against page height.
"""

import logging
from io import BytesIO
from pathlib import Path

from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from .page_plan import DrawOp, ImageOp, LineOp, ReportPlan, TextOp

logger = logging.getLogger(__name__)

FONT_NAME = "Helvetica"


def _rgb(color: tuple[int, int, int]) -> tuple[float, float, float]:
    return color[0] / 255, color[1] / 255, color[2] / 255


def _draw_op(c: canvas.Canvas, op: DrawOp, page_height: float) -> None:
    if isinstance(op, TextOp):
        c.setFont(FONT_NAME, op.font_size)
        c.setFillColorRGB(*_rgb(op.color))
        c.drawString(op.x * mm, (page_height - op.y) * mm, op.text)
    elif isinstance(op, LineOp):
        c.setStrokeColorRGB(*_rgb(op.color))
        c.line(op.x1 * mm, (page_height - op.y1) * mm, op.x2 * mm, (page_height - op.y2) * mm)
    elif isinstance(op, ImageOp):
        c.drawImage(
            ImageReader(BytesIO(op.data)),
            op.x * mm,
            (page_height - op.y - op.height) * mm,
            width=op.width * mm,
            height=op.height * mm,
        )


def render_pdf(plan: ReportPlan, output_path: Path, title: str | None = None) -> Path:
    """Render a plan to a PDF file.

    Args:
        plan: Planned pages
        output_path: Destination file
        title: Document title metadata

    Returns:
        The written path
    """
    geometry = plan.geometry
    # invariant=1 keeps the output free of creation timestamps and random ids
    c = canvas.Canvas(
        str(output_path),
        pagesize=(geometry.width * mm, geometry.height * mm),
        invariant=1,
    )
    if title:
        c.setTitle(title)

    for page in plan.pages:
        for op in page:
            _draw_op(c, op, geometry.height)
        c.showPage()
    c.save()

    logger.debug(f"Rendered {plan.page_count} pages to {output_path}")
    return output_path
