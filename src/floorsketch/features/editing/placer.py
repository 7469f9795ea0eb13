from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ...core.config import GeometryConfig
from ...core.errors import ValidationCode, ValidationResult
from ...core.geometry import angle_difference, heading_degrees, points_equal, polar_offset
from ...core.model import Point, PointLike, Vertex, as_point
from .snap import SnapCandidate, SnapResolver

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Placement:
    """Outcome of turning one input into a candidate vertex.

    ``path`` is the working copy after the append-or-merge decision; the
    builder commits it (or the closing ring) only once closure is settled.
    """

    path: List[Vertex]
    vertex: Vertex
    merged: bool
    snap: Optional[SnapCandidate] = None


def _is_number(value) -> bool:
    if isinstance(value, bool):
        return False
    try:
        return not math.isnan(float(value))
    except (TypeError, ValueError):
        return False


class VertexPlacer:
    """Computes the next vertex from polar or cartesian input."""

    def __init__(self, config: GeometryConfig, snapper: SnapResolver) -> None:
        self.config = config
        self.snapper = snapper

    def check_polar_input(self, distance_value, angle_degrees) -> ValidationResult:
        if not _is_number(distance_value) or not _is_number(angle_degrees):
            return ValidationResult.fail(
                ValidationCode.INVALID_INPUT,
                "Distance and angle must be numbers",
                distance=distance_value,
                angle=angle_degrees,
            )
        if math.isinf(float(distance_value)) or math.isinf(float(angle_degrees)):
            return ValidationResult.fail(
                ValidationCode.INVALID_INPUT,
                "Distance and angle must be finite",
                distance=distance_value,
                angle=angle_degrees,
            )
        if float(distance_value) <= 0:
            return ValidationResult.fail(
                ValidationCode.INVALID_INPUT,
                f"Distance must be greater than zero, got {distance_value}",
                distance=distance_value,
            )
        return ValidationResult.ok()

    def polar_target(self, last: Vertex, distance_value: float, angle_degrees: float) -> Point:
        return polar_offset(last, self.config.to_px(float(distance_value)), float(angle_degrees))

    def resolve(self, raw: PointLike, last: Optional[Vertex] = None) -> Tuple[Point, Optional[SnapCandidate]]:
        """Apply snapping; falls back to ``raw`` when the snap lands on ``last``."""
        raw_pt = as_point(raw)
        snap = self.snapper.find_snap(raw_pt)
        if snap is None:
            return raw_pt, None
        if last is not None and points_equal(snap.point, last, self.config.duplicate_tolerance):
            logger.debug("Snap target coincides with the last vertex; keeping raw point")
            return raw_pt, None
        return snap.point, snap

    def is_continuation(self, path: Sequence[Vertex], target: PointLike) -> bool:
        """True when ``last -> target`` keeps the heading of ``prev -> last``."""
        if len(path) < 2:
            return False
        prev, last = path[-2], path[-1]
        previous = heading_degrees(prev, last)
        current = heading_degrees(last, target)
        return angle_difference(previous, current) < self.config.collinear_tolerance_degrees

    def place(self, path: Sequence[Vertex], target: PointLike, snap: Optional[SnapCandidate] = None) -> Placement:
        """Append ``target`` or merge it into the last vertex.

        A straight continuation replaces the last vertex (keeping its name)
        so a wall entered in several pieces still has one corner at each end.
        """
        x, y = as_point(target)
        working = list(path)
        if self.is_continuation(working, (x, y)):
            last = working[-1]
            vertex = Vertex(x, y, last.name)
            working[-1] = vertex
            logger.debug(f"Same direction as previous edge; extending {last.name} to ({x:.1f}, {y:.1f})")
            return Placement(working, vertex, True, snap)
        vertex = Vertex(x, y, f"p{len(working)}")
        working.append(vertex)
        return Placement(working, vertex, False, snap)
