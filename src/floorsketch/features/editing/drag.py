from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from ...core.errors import ValidationResult
from ...core.geometry import corner_angle, project_onto_line
from ...core.model import Point, PointLike, Polygon, as_point

if TYPE_CHECKING:
    from .draw import PathBuilder

logger = logging.getLogger(__name__)


def straighten_vertex(prev: PointLike, point: PointLike, nxt: PointLike, tolerance_deg: float) -> Optional[Point]:
    """Project ``point`` onto the line prev-next when its corner is nearly straight."""
    deg = corner_angle(prev, point, nxt)
    if abs(deg - 180.0) <= tolerance_deg or abs(deg) <= tolerance_deg:
        return project_onto_line(point, prev, nxt)
    return None


def move_polygon_vertex(
    builder: "PathBuilder",
    polygon_id: int,
    index: int,
    point: PointLike,
    straight_snap: bool = False,
) -> ValidationResult:
    """Move one corner of a finalized polygon.

    The edited ring is validated as a closed ring; on success the polygon is
    replaced by a new one with the same id and metadata, and the previous
    version is kept for :func:`undo_last_vertex_move`. On failure nothing
    changes.
    """
    poly = builder.get_polygon(polygon_id)
    if poly is None:
        raise KeyError(f"No polygon with id {polygon_id}")
    vertices = list(poly.vertices)
    n = len(vertices)
    if not 0 <= index < n:
        raise IndexError(f"Vertex index {index} out of range for polygon {polygon_id}")
    new_x, new_y = as_point(point)
    if straight_snap:
        snapped = straighten_vertex(vertices[index - 1], (new_x, new_y), vertices[(index + 1) % n],
                                    builder.config.straight_snap_tolerance_degrees)
        if snapped is not None:
            logger.debug(f"Snapped to straight at {vertices[index].name}")
            new_x, new_y = snapped
    vertices[index] = vertices[index].moved(new_x, new_y)
    # the ring is already closed, so there is no gap left to bridge
    result = builder.validator.validate_cycle(vertices, closing_gap=0.0)
    if not result.valid:
        logger.warning(f"Vertex move rejected: {result.reason}")
        return result
    moved = Polygon.from_vertices(poly.id, vertices, builder.config.scale, poly.metadata)
    builder.replace_polygon(moved)
    builder._vertex_move_backup = poly
    logger.info(f"Moved {vertices[index].name} of polygon {polygon_id}")
    return result


def undo_last_vertex_move(builder: "PathBuilder") -> Optional[Polygon]:
    """Undo the last vertex movement, if available."""
    backup = builder._vertex_move_backup
    if backup is None:
        return None
    builder._vertex_move_backup = None
    if builder.get_polygon(backup.id) is None:
        # the polygon was reopened or removed since the move
        return None
    builder.replace_polygon(backup)
    return backup
