from __future__ import annotations

from typing import List, Optional, Sequence

from ...core.config import GeometryConfig
from ...core.geometry import distance
from ...core.model import PointLike, Vertex


class ClosureDetector:
    """Decides whether a freshly computed point connects back to ``p0``."""

    def __init__(self, config: GeometryConfig) -> None:
        self.config = config

    def gap(self, path: Sequence[Vertex], point: PointLike) -> Optional[float]:
        if not path:
            return None
        return distance(point, path[0])

    def is_closing(self, path: Sequence[Vertex], point: PointLike, ring_length: Optional[int] = None) -> bool:
        """True when ``point`` lands within the closure threshold of ``p0``.

        ``ring_length`` is the number of vertices that would be closed; below
        three the point is an ordinary placement, not a closure attempt.
        """
        if ring_length is not None and ring_length < 3:
            return False
        gap = self.gap(path, point)
        return gap is not None and gap <= self.config.closure_threshold

    @staticmethod
    def closing_ring(working: Sequence[Vertex]) -> List[Vertex]:
        """Ring to close from a working path whose last entry is the closing point.

        After a merge that entry replaced the previous last vertex, so the
        straight run ends at ``p0`` instead of at an intermediate corner.
        """
        return list(working[:-1])
