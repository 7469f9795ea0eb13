from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from ...core.geometry import distance
from ...core.model import Point, PointLike, Polygon, Vertex


@dataclass(frozen=True)
class HelperPoint:
    """Axis-aligned guide: a point sharing one coordinate with the last vertex."""
    x: float
    y: float
    kind: str
    polygon_id: Optional[int] = None

    @property
    def xy(self) -> Point:
        return (self.x, self.y)


def _key(x: float, y: float) -> Tuple[float, float]:
    return (round(x, 6), round(y, 6))


def helper_points(path: Sequence[Vertex], polygons: Iterable[Polygon] = ()) -> List[HelperPoint]:
    """Projections of earlier vertices onto the row and column of the last vertex."""
    if not path:
        return []
    last = path[-1]
    found: Dict[Tuple[float, float], HelperPoint] = {}

    def add(x: float, y: float, kind: str, pid: Optional[int] = None) -> None:
        if _key(x, y) == _key(last.x, last.y):
            return
        found.setdefault(_key(x, y), HelperPoint(x, y, kind, pid))

    for vertex in path[:-1]:
        add(vertex.x, last.y, 'projection')
        add(last.x, vertex.y, 'projection')
    if len(path) >= 2:
        add(path[0].x, path[1].y, 'special_projection')
    for poly in polygons:
        for vertex in poly.vertices:
            add(vertex.x, last.y, 'polygon_projection', poly.id)
            add(last.x, vertex.y, 'polygon_projection', poly.id)
    return list(found.values())


def find_nearest_helper(
    helpers: Iterable[HelperPoint], point: PointLike, radius: float = 20.0
) -> Optional[HelperPoint]:
    best = None
    best_dist = radius
    for helper in helpers:
        d = distance(point, helper.xy)
        if d <= best_dist:
            best, best_dist = helper, d
    return best
