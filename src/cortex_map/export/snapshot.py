"""
Rasterized PNG snapshot of the rendered scene using matplotlib.
"""

import logging
from io import BytesIO
from pathlib import Path

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

from ..interaction.scene import Scene  # noqa: E402
from ..shared.exceptions import RenderCaptureError, create_error_context  # noqa: E402
from .page_plan import SnapshotImage  # noqa: E402

logger = logging.getLogger(__name__)

BACKGROUND_COLOR = "#1f2937"
LABEL_COLOR = "#e5e7eb"
POINTS_PER_PIXEL = 0.72


def render_snapshot(
    scene: Scene,
    width: float = 800.0,
    height: float = 600.0,
    scale: float = 1.0,
) -> SnapshotImage:
    """Rasterize a scene as it appears in the viewport.

    Args:
        scene: Scene to draw (model coordinates plus view transform)
        width: Viewport width in pixels
        height: Viewport height in pixels
        scale: Resolution multiplier

    Returns:
        PNG image data and pixel size

    Raises:
        RenderCaptureError: If the scene is empty or rasterization fails
    """
    if scene.is_empty:
        raise RenderCaptureError("Nothing to capture: the scene has no visible nodes")

    t = scene.transform

    def to_screen(x: float, y: float) -> tuple[float, float]:
        return t.k * (x + t.x), t.k * (y + t.y)

    dpi = 100 * scale
    fig, ax = plt.subplots(figsize=(width / 100, height / 100), dpi=dpi)
    try:
        fig.patch.set_facecolor(BACKGROUND_COLOR)
        ax.set_facecolor(BACKGROUND_COLOR)
        ax.set_xlim(0, width)
        ax.set_ylim(height, 0)
        ax.axis("off")
        fig.subplots_adjust(left=0, right=1, top=1, bottom=0)

        for edge in scene.edges:
            x1, y1 = to_screen(edge.x1, edge.y1)
            x2, y2 = to_screen(edge.x2, edge.y2)
            ax.plot(
                [x1, x2],
                [y1, y2],
                color=edge.color or "#a8a8a8",
                alpha=edge.opacity,
                linewidth=edge.width,
                zorder=1,
            )

        for node in scene.nodes:
            x, y = to_screen(node.x, node.y)
            diameter = 2 * node.size * t.k * POINTS_PER_PIXEL
            ax.scatter(
                [x],
                [y],
                s=diameter**2,
                c=node.color,
                alpha=node.opacity,
                edgecolors="white",
                linewidths=0.5,
                zorder=2,
            )
            if scene.show_labels:
                ax.text(
                    x,
                    y + node.size * t.k + 4,
                    node.display_label,
                    color=LABEL_COLOR,
                    alpha=node.opacity,
                    fontsize=7,
                    ha="center",
                    va="top",
                    zorder=3,
                )

        buffer = BytesIO()
        fig.savefig(buffer, format="png", dpi=dpi, facecolor=BACKGROUND_COLOR)
    except (ValueError, RuntimeError, OSError) as e:
        raise RenderCaptureError(
            f"Failed to rasterize graph: {e}", create_error_context(nodes=len(scene.nodes))
        ) from e
    finally:
        plt.close(fig)

    width_px = int(round(width * scale))
    height_px = int(round(height * scale))
    logger.debug(f"Rendered snapshot {width_px}x{height_px} with {len(scene.nodes)} nodes")
    return SnapshotImage(data=buffer.getvalue(), width_px=width_px, height_px=height_px)


def save_snapshot(image: SnapshotImage, output_path: Path) -> Path:
    with open(output_path, "wb") as f:
        f.write(image.data)
    return output_path
