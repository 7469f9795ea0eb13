from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterator, Optional, Sequence, Tuple, Union

from ...core.config import GeometryConfig
from ...core.geometry import distance, project_onto_segment, ring_edges
from ...core.model import Point, PointLike, Polygon, Vertex, as_point

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EdgeProjection:
    start: Vertex
    end: Vertex
    t: float
    edge_index: int
    polygon_id: Optional[int] = None


@dataclass(frozen=True)
class SnapCandidate:
    point: Point
    source: Union[Vertex, EdgeProjection]
    distance: float

    @property
    def kind(self) -> str:
        return 'vertex' if isinstance(self.source, Vertex) else 'edge'


class SnapResolver:
    """Find a substitute point on existing geometry near a raw input point.

    Vertices of the open path and of every finalized polygon win over any
    point on an edge, however close the edge is.
    """

    def __init__(
        self,
        config: GeometryConfig,
        open_path: Callable[[], Sequence[Vertex]],
        polygons: Callable[[], Sequence[Polygon]],
    ) -> None:
        self.config = config
        self._open_path = open_path
        self._polygons = polygons

    def _rings(self) -> Iterator[Tuple[Sequence[Vertex], bool, Optional[int]]]:
        yield self._open_path(), False, None
        for poly in self._polygons():
            yield poly.vertices, True, poly.id

    def find_snap(self, point: PointLike, radius: Optional[float] = None) -> Optional[SnapCandidate]:
        radius = self.config.snap_radius if radius is None else radius
        target = as_point(point)
        snap = self.find_vertex_snap(target, radius)
        if snap is None:
            snap = self.find_edge_snap(target, radius)
        if snap is not None:
            logger.debug(f"Snapped ({target[0]:.1f}, {target[1]:.1f}) to {snap.kind} at "
                         f"({snap.point[0]:.1f}, {snap.point[1]:.1f})")
        return snap

    def find_vertex_snap(self, point: Point, radius: float) -> Optional[SnapCandidate]:
        best: Optional[SnapCandidate] = None
        for vertices, _closed, _pid in self._rings():
            for vertex in vertices:
                d = distance(point, vertex)
                if d <= radius and (best is None or d < best.distance):
                    best = SnapCandidate(vertex.xy, vertex, d)
        return best

    def find_edge_snap(self, point: Point, radius: float) -> Optional[SnapCandidate]:
        best: Optional[SnapCandidate] = None
        for vertices, closed, pid in self._rings():
            for idx, (i, j) in enumerate(ring_edges(len(vertices), closed=closed)):
                start, end = vertices[i], vertices[j]
                proj = project_onto_segment(point, start, end)
                if proj.distance <= radius and (best is None or proj.distance < best.distance):
                    source = EdgeProjection(start, end, proj.t, idx, pid)
                    best = SnapCandidate(proj.point, source, proj.distance)
        return best
