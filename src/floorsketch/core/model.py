from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional, Sequence, Tuple, Union

Point = Tuple[float, float]


@dataclass(frozen=True)
class Vertex:
    """A named corner of a path, in internal (canvas) units."""

    x: float
    y: float
    name: str = ""

    @property
    def xy(self) -> Point:
        return (self.x, self.y)

    def renamed(self, name: str) -> "Vertex":
        return replace(self, name=name)

    def moved(self, x: float, y: float) -> "Vertex":
        return replace(self, x=x, y=y)


PointLike = Union[Vertex, Point]


def as_point(p: PointLike) -> Point:
    if isinstance(p, Vertex):
        return (p.x, p.y)
    x, y = p
    return (float(x), float(y))


def _coords(points: Iterable[PointLike]) -> List[Point]:
    return [as_point(p) for p in points]


def renumber(vertices: Iterable[Vertex]) -> List[Vertex]:
    """Return copies of ``vertices`` named ``p0..pN-1`` in order."""
    return [v.renamed(f"p{i}") for i, v in enumerate(vertices)]


def signed_area(points: Sequence[PointLike]) -> float:
    """Signed shoelace area of the closed ring through ``points``.

    Positive means counter-clockwise with the y axis pointing up, which is
    clockwise on screen where y grows downward.
    """
    pts = _coords(points)
    if len(pts) < 3:
        return 0.0
    area = 0.0
    n = len(pts)
    for i in range(n):
        x1, y1 = pts[i]
        x2, y2 = pts[(i + 1) % n]
        area += x1 * y2 - x2 * y1
    return area / 2.0


def shoelace_area(points: Sequence[PointLike]) -> float:
    """Return the absolute area of a polygon using the shoelace formula."""
    return abs(signed_area(points))


def polygon_perimeter(points: Sequence[PointLike]) -> float:
    """Return the perimeter length of a polygon."""
    pts = _coords(points)
    if len(pts) < 2:
        return 0.0
    perim = 0.0
    n = len(pts)
    for i in range(n):
        x1, y1 = pts[i]
        x2, y2 = pts[(i + 1) % n]
        perim += math.hypot(x2 - x1, y2 - y1)
    return perim


def centroid(points: Sequence[PointLike]) -> Optional[Point]:
    """Arithmetic mean of the vertex coordinates.

    This is not the area-weighted centroid and drifts for concave or unevenly
    subdivided outlines; it is only meant for placing labels.
    """
    pts = _coords(points)
    if not pts:
        return None
    n = len(pts)
    return (sum(p[0] for p in pts) / n, sum(p[1] for p in pts) / n)


def winding(points: Sequence[PointLike]) -> Optional[str]:
    """Return ``"ccw"`` or ``"cw"`` for the ring, or None when it has no area."""
    area = signed_area(points)
    if area > 0:
        return "ccw"
    if area < 0:
        return "cw"
    return None


def real_area(area_px: float, scale: float) -> float:
    return area_px / (scale * scale)


def point_in_polygon(pt: PointLike, polygon: Sequence[PointLike]) -> bool:
    """Ray casting test; points exactly on an edge may fall either way."""
    x, y = as_point(pt)
    pts = _coords(polygon)
    n = len(pts)
    if n < 3:
        return False
    inside = False
    p1x, p1y = pts[0]
    for i in range(1, n + 1):
        p2x, p2y = pts[i % n]
        if min(p1y, p2y) < y <= max(p1y, p2y) and x <= max(p1x, p2x):
            xinters = (y - p1y) * (p2x - p1x) / (p2y - p1y) + p1x
            if p1x == p2x or x <= xinters:
                inside = not inside
        p1x, p1y = p2x, p2y
    return inside


@dataclass(frozen=True)
class Polygon:
    """A finalized room outline.

    Vertices are copied in at creation time; edits go through
    ``dataclasses.replace`` or :meth:`from_vertices` and yield a new object.
    """

    id: int
    vertices: Tuple[Vertex, ...]
    area: float
    centroid: Point
    area_px: float = 0.0
    signed_area: float = 0.0
    perimeter: float = 0.0
    winding: Optional[str] = None
    metadata: dict = field(default_factory=dict, hash=False)

    @classmethod
    def from_vertices(
        cls,
        polygon_id: int,
        vertices: Iterable[Vertex],
        scale: float,
        metadata: Optional[dict] = None,
    ) -> "Polygon":
        ring = tuple(renumber(Vertex(v.x, v.y, v.name) for v in vertices))
        s_area = signed_area(ring)
        area_px = abs(s_area)
        center = centroid(ring) or (0.0, 0.0)
        return cls(
            id=polygon_id,
            vertices=ring,
            area=real_area(area_px, scale),
            centroid=center,
            area_px=area_px,
            signed_area=s_area,
            perimeter=polygon_perimeter(ring) / scale,
            winding=winding(ring),
            metadata=dict(metadata or {}),
        )

    @property
    def points(self) -> List[Point]:
        return [v.xy for v in self.vertices]

    def __len__(self) -> int:
        return len(self.vertices)

    def contains(self, point: PointLike) -> bool:
        return point_in_polygon(point, self.vertices)
