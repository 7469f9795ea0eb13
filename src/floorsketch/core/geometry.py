from __future__ import annotations

import math
from typing import NamedTuple, Optional, Tuple

from .model import Point, PointLike, as_point


class Projection(NamedTuple):
    point: Point
    distance: float
    t: float


class Intersection(NamedTuple):
    point: Point
    t: float
    u: float


def distance(a: PointLike, b: PointLike) -> float:
    ax, ay = as_point(a)
    bx, by = as_point(b)
    return math.hypot(bx - ax, by - ay)


def points_equal(a: PointLike, b: PointLike, tolerance: float = 1.0) -> bool:
    """Per-axis coincidence test used for duplicate vertex detection."""
    ax, ay = as_point(a)
    bx, by = as_point(b)
    return abs(ax - bx) < tolerance and abs(ay - by) < tolerance


def polar_offset(origin: PointLike, length: float, angle_degrees: float) -> Point:
    """Move ``length`` from ``origin`` along a compass-style angle.

    0 deg points right and 90 deg points up; y is subtracted because the
    canvas y axis grows downward.
    """
    ox, oy = as_point(origin)
    rad = math.radians(angle_degrees)
    return (ox + length * math.cos(rad), oy - length * math.sin(rad))


def heading_degrees(start: PointLike, end: PointLike) -> float:
    """Direction of ``start -> end`` in the same convention as :func:`polar_offset`."""
    sx, sy = as_point(start)
    ex, ey = as_point(end)
    return math.degrees(math.atan2(-(ey - sy), ex - sx)) % 360.0


def angle_difference(a: float, b: float) -> float:
    """Smallest absolute difference between two headings, wrapped at 360."""
    diff = abs(a - b) % 360.0
    return min(diff, 360.0 - diff)


def corner_angle(a: PointLike, b: PointLike, c: PointLike) -> float:
    """Unsigned angle ABC in degrees (180 means A, B, C are in a straight line)."""
    ax, ay = as_point(a)
    bx, by = as_point(b)
    cx, cy = as_point(c)
    v1 = (ax - bx, ay - by)
    v2 = (cx - bx, cy - by)
    dot = v1[0] * v2[0] + v1[1] * v2[1]
    det = v1[0] * v2[1] - v1[1] * v2[0]
    return abs(math.degrees(math.atan2(det, dot)))


def project_onto_segment(p: PointLike, start: PointLike, end: PointLike) -> Projection:
    """Closest point to ``p`` on the segment, with the parameter clamped to [0, 1]."""
    px, py = as_point(p)
    sx, sy = as_point(start)
    ex, ey = as_point(end)
    dx = ex - sx
    dy = ey - sy
    len_sq = dx * dx + dy * dy
    if len_sq == 0:
        return Projection((sx, sy), math.hypot(px - sx, py - sy), 0.0)
    t = ((px - sx) * dx + (py - sy) * dy) / len_sq
    t = max(0.0, min(1.0, t))
    snap = (sx + t * dx, sy + t * dy)
    return Projection(snap, math.hypot(px - snap[0], py - snap[1]), t)


def project_onto_line(p: PointLike, a: PointLike, c: PointLike) -> Optional[Point]:
    """Projection of ``p`` onto the infinite line through ``a`` and ``c``."""
    px, py = as_point(p)
    ax, ay = as_point(a)
    cx, cy = as_point(c)
    acx, acy = cx - ax, cy - ay
    ac_len2 = acx * acx + acy * acy
    if ac_len2 <= 1e-9:
        return None
    t = ((px - ax) * acx + (py - ay) * acy) / ac_len2
    return (ax + t * acx, ay + t * acy)


def segment_intersection(
    p1: PointLike,
    p2: PointLike,
    p3: PointLike,
    p4: PointLike,
    epsilon: float = 1e-4,
) -> Optional[Intersection]:
    """Proper crossing of segments p1-p2 and p3-p4.

    Near-parallel pairs (|determinant| < epsilon) and touches at an endpoint
    are not reported: both parameters must lie strictly inside (0, 1).
    """
    x1, y1 = as_point(p1)
    x2, y2 = as_point(p2)
    x3, y3 = as_point(p3)
    x4, y4 = as_point(p4)
    denom = (x1 - x2) * (y3 - y4) - (y1 - y2) * (x3 - x4)
    if abs(denom) < epsilon:
        return None
    t = ((x1 - x3) * (y3 - y4) - (y1 - y3) * (x3 - x4)) / denom
    u = -((x1 - x2) * (y1 - y3) - (y1 - y2) * (x1 - x3)) / denom
    if 0 < t < 1 and 0 < u < 1:
        return Intersection((x1 + t * (x2 - x1), y1 + t * (y2 - y1)), t, u)
    return None


def ring_edges(count: int, closed: bool = True) -> Tuple[Tuple[int, int], ...]:
    """Index pairs of the edges of a ring (or open chain) with ``count`` vertices."""
    if count < 2:
        return ()
    last = count if closed else count - 1
    return tuple((i, (i + 1) % count) for i in range(last))
