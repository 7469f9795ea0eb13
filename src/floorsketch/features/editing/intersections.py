from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from ...core.geometry import points_equal, segment_intersection
from ...core.model import Point, Vertex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelfIntersection:
    point: Point
    edge_a: Tuple[int, int]
    edge_b: Tuple[int, int]

    def edges(self) -> Tuple[int, int]:
        """Start indices of the two crossing edges."""
        return (self.edge_a[0], self.edge_b[0])


def find_self_intersections(path: Sequence[Vertex], epsilon: float = 1e-4) -> List[SelfIntersection]:
    """Every proper crossing between non-adjacent edges of the closed ring."""
    found: List[SelfIntersection] = []
    n = len(path)
    if n < 4:
        return found
    for i in range(n):
        p1 = path[i]
        p2 = path[(i + 1) % n]
        for j in range(i + 2, n):
            # edges n-1 and 0 share p0
            if i == 0 and j == n - 1:
                continue
            p3 = path[j]
            p4 = path[(j + 1) % n]
            hit = segment_intersection(p1, p2, p3, p4, epsilon)
            if hit is not None:
                found.append(SelfIntersection(hit.point, (i, (i + 1) % n), (j, (j + 1) % n)))
    return found


def remove_duplicate_vertices(path: Sequence[Vertex], tolerance: float = 1.0) -> List[Vertex]:
    """Drop every vertex that coincides with its successor (wrap edge included)."""
    n = len(path)
    if n < 2:
        return list(path)
    return [v for i, v in enumerate(path) if not points_equal(v, path[(i + 1) % n], tolerance)]


def reverse_between(path: Sequence[Vertex], crossing: SelfIntersection) -> Optional[List[Vertex]]:
    """Reverse the vertices lying between the two crossing edges.

    For edges (i, i+1) and (j, j+1) that is the run ``i+1 .. j``; on a
    figure-eight this swaps the two lobes into a simple ring.
    """
    start = crossing.edge_a[1]
    stop = crossing.edge_b[0]
    if start >= stop:
        return None
    candidate = list(path)
    candidate[start:stop + 1] = reversed(candidate[start:stop + 1])
    return candidate


def repair_single_intersection(
    path: Sequence[Vertex],
    crossings: Sequence[SelfIntersection],
    epsilon: float = 1e-4,
) -> Optional[List[Vertex]]:
    """Best-effort fix, only attempted when exactly one crossing exists.

    Returns None unless the rearranged ring is free of crossings.
    """
    if len(crossings) != 1:
        return None
    candidate = reverse_between(path, crossings[0])
    if candidate is None:
        return None
    if find_self_intersections(candidate, epsilon):
        logger.debug("Reversal left crossings behind; repair abandoned")
        return None
    return candidate
