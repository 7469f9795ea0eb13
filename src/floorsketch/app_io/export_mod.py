from __future__ import annotations

import csv
import io
import json
import logging
import os
from typing import Iterable, Optional, Union

import pymupdf as fitz

from ..core.config import GeometryConfig
from ..core.history import Snapshot
from ..core.model import Polygon
from ..visualization.preview import render_preview

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]


def export_csv(polygons: Iterable[Polygon], path: PathLike, unit: str = "ft") -> int:
    """Write one row per polygon; returns the number of rows written.

    Area and perimeter are in real units; the header names the unit.
    """
    rows = 0
    with open(path, 'w', encoding='utf-8', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(['polygon_id', f'area_sq_{unit}', f'perimeter_{unit}', 'vertex_count', 'metadata'])
        for poly in polygons:
            writer.writerow([
                poly.id,
                f"{poly.area:.4f}",
                f"{poly.perimeter:.4f}",
                len(poly.vertices),
                json.dumps(poly.metadata, sort_keys=True),
            ])
            rows += 1
    logger.info(f"Exported {rows} polygons to {path}")
    return rows


def export_pdf(snapshot: Snapshot, config: Optional[GeometryConfig], path: PathLike) -> None:
    """Write a one-page PDF with the rendered preview of ``snapshot``."""
    img = render_preview(snapshot, config)
    buffer = io.BytesIO()
    img.save(buffer, format='PNG')
    doc = fitz.open()
    try:
        # A4 portrait, image fitted inside a 36pt margin
        page = doc.new_page(width=595, height=842)
        margin = 36
        rect = fitz.Rect(margin, margin, page.rect.width - margin, page.rect.height - margin)
        page.insert_image(rect, stream=buffer.getvalue(), keep_proportion=True)
        doc.save(os.fspath(path))
    finally:
        doc.close()
    logger.info(f"Exported PDF preview to {path}")
