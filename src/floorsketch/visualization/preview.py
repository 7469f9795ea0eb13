from __future__ import annotations

import io
import logging
from typing import List, Optional, Tuple

import matplotlib
matplotlib.use('Agg')  # headless backend, previews are written to files
from matplotlib import pyplot as plt
from matplotlib.patches import Polygon as PolygonPatch
from PIL import Image

from ..core.config import GeometryConfig
from ..core.history import Snapshot

logger = logging.getLogger(__name__)

# Soft fill colours for polygon overlays (cycled per polygon)
POLYGON_FILL_COLORS: List[str] = [
    '#9bd6ff',  # pale blue
    '#c5f5c9',  # pale green
    '#ffe0b3',  # pale orange
    '#f7c6ff',  # pale violet
]


def _bounds(snapshot: Snapshot) -> Optional[Tuple[float, float, float, float]]:
    xs: List[float] = []
    ys: List[float] = []
    for poly in snapshot.polygons:
        xs.extend(v.x for v in poly.vertices)
        ys.extend(v.y for v in poly.vertices)
    xs.extend(v.x for v in snapshot.open_path)
    ys.extend(v.y for v in snapshot.open_path)
    if not xs:
        return None
    return min(xs), min(ys), max(xs), max(ys)


def render_preview(
    snapshot: Snapshot,
    config: Optional[GeometryConfig] = None,
    size: Tuple[float, float] = (6, 6),
    dpi: int = 100,
    show_labels: bool = True,
) -> Image.Image:
    """Draw finalized polygons and the open path into a Pillow image.

    Polygons are filled from the overlay palette and labelled with their
    area at the centroid; the open path is drawn as a dashed red polyline
    with vertex names. The y axis is inverted so the picture matches the
    canvas, where y grows downward.
    """
    config = config or GeometryConfig()
    fig = plt.figure(figsize=size, dpi=dpi)
    ax = fig.add_subplot(111)
    for idx, poly in enumerate(snapshot.polygons):
        fill_colour = POLYGON_FILL_COLORS[idx % len(POLYGON_FILL_COLORS)]
        ax.add_patch(PolygonPatch(poly.points, closed=True, facecolor=fill_colour,
                                  edgecolor='blue', linewidth=2, alpha=0.8))
        if show_labels:
            cx, cy = poly.centroid
            label = poly.metadata.get('name') or f"#{poly.id}"
            ax.text(cx, cy, f"{label}\n{poly.area:.1f} sq {config.unit}",
                    ha='center', va='center', fontsize=8)
    path = snapshot.open_path
    if path:
        xs = [v.x for v in path]
        ys = [v.y for v in path]
        ax.plot(xs, ys, color='red', linestyle='--', linewidth=1.5, marker='o', markersize=3)
        if show_labels:
            for v in path:
                ax.annotate(v.name, (v.x, v.y), textcoords='offset points', xytext=(4, 4),
                            fontsize=7, color='red')
    bounds = _bounds(snapshot)
    if bounds is not None:
        min_x, min_y, max_x, max_y = bounds
        pad = max(max_x - min_x, max_y - min_y, config.scale) * 0.1
        ax.set_xlim(min_x - pad, max_x + pad)
        ax.set_ylim(min_y - pad, max_y + pad)
    ax.set_aspect('equal')
    ax.invert_yaxis()
    ax.set_xticks([])
    ax.set_yticks([])
    buffer = io.BytesIO()
    fig.savefig(buffer, format='png', bbox_inches='tight')
    plt.close(fig)
    buffer.seek(0)
    img = Image.open(buffer)
    img.load()
    logger.debug(f"Rendered preview {img.size[0]}x{img.size[1]} "
                 f"({len(snapshot.polygons)} polygons, {len(path)} open vertices)")
    return img
