from __future__ import annotations

import logging
import math
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple

from ...core.config import GeometryConfig
from ...core.errors import (
    PathStateError,
    ResumeSelectionError,
    ValidationCode,
    ValidationResult,
)
from ...core.geometry import points_equal
from ...core.history import Snapshot
from ...core.model import PointLike, Polygon, Vertex, as_point, renumber
from .closure import ClosureDetector
from .helpers import HelperPoint, helper_points
from .placer import Placement, VertexPlacer
from .snap import SnapCandidate, SnapResolver
from .validation import PathStatistics, PathValidator, path_statistics

logger = logging.getLogger(__name__)


class BuilderState(Enum):
    IDLE = "idle"
    AWAITING_FIRST_VERTEX = "awaiting_first_vertex"
    AWAITING_NEXT_VERTEX = "awaiting_next_vertex"
    AWAITING_RESUME_SELECTION = "awaiting_resume_selection"
    CLOSED = "closed"


class PlacementStatus(Enum):
    PLACED = "placed"        # first vertex of a path
    APPENDED = "appended"
    MERGED = "merged"        # last vertex extended along the same heading
    CLOSED = "closed"
    REJECTED = "rejected"


@dataclass(frozen=True)
class PlacementResult:
    status: PlacementStatus
    vertex: Optional[Vertex] = None
    polygon: Optional[Polygon] = None
    validation: ValidationResult = field(default_factory=ValidationResult.ok)
    snap: Optional[SnapCandidate] = None
    repaired: bool = False
    warnings: Tuple[ValidationResult, ...] = ()

    @property
    def accepted(self) -> bool:
        return self.status is not PlacementStatus.REJECTED

    @property
    def code(self) -> Optional[ValidationCode]:
        return self.validation.code

    @classmethod
    def rejected(cls, validation: ValidationResult) -> "PlacementResult":
        return cls(PlacementStatus.REJECTED, validation=validation)


_ACTIVE_STATES = (
    BuilderState.AWAITING_FIRST_VERTEX,
    BuilderState.AWAITING_NEXT_VERTEX,
    BuilderState.AWAITING_RESUME_SELECTION,
)


class PathBuilder:
    """Interactive polygon construction from point and distance/angle input.

    The builder owns the open path and the list of finalized polygons. Every
    public call runs to completion (snap, merge, closure, validation) before
    returning; a call made while another is still running raises
    :class:`PathStateError`.
    """

    def __init__(self, config: Optional[GeometryConfig] = None, polygons: Iterable[Polygon] = ()) -> None:
        self.config = config or GeometryConfig()
        self._state = BuilderState.IDLE
        self._path: List[Vertex] = []
        self._polygons: List[Polygon] = list(polygons)
        self._next_id = self._following_id(self._polygons)
        self._busy = False
        self._vertex_move_backup: Optional[Polygon] = None
        self.snapper = SnapResolver(self.config, lambda: self._path, lambda: self._polygons)
        self.placer = VertexPlacer(self.config, self.snapper)
        self.closure = ClosureDetector(self.config)
        self.validator = PathValidator(self.config)

    # ----- Read-only views -----
    @property
    def state(self) -> BuilderState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is not BuilderState.IDLE

    @property
    def open_path(self) -> Tuple[Vertex, ...]:
        return tuple(self._path)

    @property
    def polygons(self) -> Tuple[Polygon, ...]:
        return tuple(self._polygons)

    def get_polygon(self, polygon_id: int) -> Optional[Polygon]:
        for poly in self._polygons:
            if poly.id == polygon_id:
                return poly
        return None

    def polygon_at(self, point: PointLike) -> Optional[Polygon]:
        """Topmost (most recently closed) polygon containing ``point``."""
        for poly in reversed(self._polygons):
            if poly.contains(point):
                return poly
        return None

    def helper_points(self) -> List[HelperPoint]:
        return helper_points(self._path, self._polygons)

    def statistics(self) -> PathStatistics:
        return path_statistics(self._path, self.config)

    # ----- Mode transitions -----
    def activate(self) -> BuilderState:
        with self._exclusive("activate"):
            if self._state in _ACTIVE_STATES:
                return self._state
            if self._path:
                self._state = BuilderState.AWAITING_RESUME_SELECTION
                logger.info(f"Drawing activated; choose a vertex to resume ({len(self._path)} in open path)")
            else:
                self._state = BuilderState.AWAITING_FIRST_VERTEX
                logger.info("Drawing activated")
            return self._state

    def deactivate(self) -> BuilderState:
        """Leave drawing mode; the open path is kept for a later resume."""
        with self._exclusive("deactivate"):
            self._state = BuilderState.IDLE
            return self._state

    def reset(self) -> BuilderState:
        return self.deactivate()

    def begin_resume(self) -> BuilderState:
        """Ask for a resume vertex while drawing, e.g. to continue a finished room."""
        with self._exclusive("begin_resume"):
            if self._state not in (BuilderState.AWAITING_FIRST_VERTEX, BuilderState.AWAITING_NEXT_VERTEX,
                                   BuilderState.CLOSED):
                raise PathStateError(f"Cannot resume from state {self._state.value}")
            if not self._path and not self._polygons:
                raise PathStateError("Nothing to resume from")
            self._state = BuilderState.AWAITING_RESUME_SELECTION
            return self._state

    # ----- Vertex input -----
    def place_first_vertex(self, point: PointLike) -> PlacementResult:
        with self._exclusive("place_first_vertex"):
            if self._state not in (BuilderState.AWAITING_FIRST_VERTEX, BuilderState.CLOSED):
                raise PathStateError(f"place_first_vertex is not allowed in state {self._state.value}")
            bad = self._check_point(point)
            if bad is not None:
                return PlacementResult.rejected(bad)
            target, snap = self.placer.resolve(point)
            vertex = Vertex(target[0], target[1], "p0")
            self._path = [vertex]
            self._state = BuilderState.AWAITING_NEXT_VERTEX
            logger.info(f"Placed p0 at ({vertex.x:.1f}, {vertex.y:.1f})")
            return PlacementResult(PlacementStatus.PLACED, vertex=vertex, snap=snap)

    def place_next_vertex(self, distance: float, angle_degrees: float) -> PlacementResult:
        """Place a vertex ``distance`` real units away from the last one.

        ``angle_degrees`` follows the compass-on-screen convention: 0 is to
        the right, 90 is up.
        """
        with self._exclusive("place_next_vertex"):
            self._require_open_path("place_next_vertex")
            check = self.placer.check_polar_input(distance, angle_degrees)
            if not check.valid:
                logger.debug(f"Rejected input: {check.reason}")
                return PlacementResult.rejected(check)
            raw = self.placer.polar_target(self._path[-1], distance, angle_degrees)
            return self._place_candidate(raw)

    def place_vertex_at(self, point: PointLike) -> PlacementResult:
        """Place the next vertex at a canvas point (click, helper point)."""
        with self._exclusive("place_vertex_at"):
            self._require_open_path("place_vertex_at")
            bad = self._check_point(point)
            if bad is not None:
                return PlacementResult.rejected(bad)
            return self._place_candidate(point)

    def close(self) -> PlacementResult:
        """Try to close the open path as it stands."""
        with self._exclusive("close"):
            self._require_open_path("close")
            return self._attempt_closure(list(self._path), closing_gap=None)

    def select_resume_vertex(self, index: int, polygon_id: Optional[int] = None) -> Tuple[Vertex, ...]:
        """Continue drawing from vertex ``index``.

        Without ``polygon_id`` the open path is cut back to ``[0..index]``.
        With it, that finalized polygon is removed and its first
        ``index + 1`` vertices become the open path.
        """
        with self._exclusive("select_resume_vertex"):
            if self._state is not BuilderState.AWAITING_RESUME_SELECTION:
                raise PathStateError(f"select_resume_vertex is not allowed in state {self._state.value}")
            if polygon_id is None:
                self._check_index(index, len(self._path), "open path")
                dropped = len(self._path) - index - 1
                self._path = self._path[:index + 1]
                logger.info(f"Resuming from {self._path[-1].name}; dropped {dropped} vertices")
            else:
                poly = self.get_polygon(polygon_id)
                if poly is None:
                    raise ResumeSelectionError(f"No polygon with id {polygon_id}")
                self._check_index(index, len(poly.vertices), f"polygon {polygon_id}")
                if self._path:
                    logger.warning(f"Discarding open path of {len(self._path)} vertices to reopen polygon {polygon_id}")
                self._polygons = [p for p in self._polygons if p.id != polygon_id]
                self._path = renumber(poly.vertices[:index + 1])
                logger.info(f"Reopened polygon {polygon_id} at p{index}")
            self._state = BuilderState.AWAITING_NEXT_VERTEX
            return tuple(self._path)

    def undo(self) -> Optional[Vertex]:
        """Remove the most recent vertex; returns it, or None when nothing was removed."""
        with self._exclusive("undo"):
            if self._state not in _ACTIVE_STATES or not self._path:
                return None
            removed = self._path.pop()
            logger.info(f"Undid placement of {removed.name}")
            if not self._path:
                self._state = BuilderState.AWAITING_FIRST_VERTEX
            return removed

    # ----- Persistence collaborator -----
    def snapshot(self, description: str = "") -> Snapshot:
        return Snapshot(tuple(self._path), tuple(self._polygons), description)

    def restore(self, snapshot: Snapshot) -> None:
        with self._exclusive("restore"):
            self._path = list(snapshot.open_path)
            self._polygons = list(snapshot.polygons)
            self._next_id = max(self._next_id, self._following_id(self._polygons))
            if self._state is not BuilderState.IDLE:
                self._state = (BuilderState.AWAITING_NEXT_VERTEX if self._path
                               else BuilderState.AWAITING_FIRST_VERTEX)

    def replace_polygon(self, polygon: Polygon) -> Polygon:
        """Swap in an edited copy of an existing polygon (matched by id)."""
        with self._exclusive("replace_polygon"):
            for idx, existing in enumerate(self._polygons):
                if existing.id == polygon.id:
                    self._polygons[idx] = polygon
                    return existing
            raise KeyError(f"No polygon with id {polygon.id}")

    # ----- Internals -----
    @contextmanager
    def _exclusive(self, operation: str) -> Iterator[None]:
        if self._busy:
            raise PathStateError(f"{operation} called while another operation is running")
        self._busy = True
        try:
            yield
        finally:
            self._busy = False

    def _require_open_path(self, operation: str) -> None:
        if not self._path:
            raise PathStateError(f"{operation} requires a first vertex")
        if self._state is not BuilderState.AWAITING_NEXT_VERTEX:
            raise PathStateError(f"{operation} is not allowed in state {self._state.value}")

    @staticmethod
    def _check_index(index: int, size: int, where: str) -> None:
        if isinstance(index, bool) or not isinstance(index, int) or not 0 <= index < size:
            raise ResumeSelectionError(f"Vertex index {index!r} out of range for {where} ({size} vertices)")

    @staticmethod
    def _following_id(polygons: Sequence[Polygon]) -> int:
        return max((p.id for p in polygons), default=0) + 1

    def _check_point(self, point: PointLike) -> Optional[ValidationResult]:
        try:
            x, y = as_point(point)
        except (TypeError, ValueError):
            return ValidationResult.fail(ValidationCode.INVALID_INPUT, f"Not a point: {point!r}")
        if math.isnan(x) or math.isnan(y) or math.isinf(x) or math.isinf(y):
            return ValidationResult.fail(ValidationCode.INVALID_INPUT, "Point coordinates must be finite numbers")
        position = self.validator.check_position((x, y))
        return None if position.valid else position

    def _place_candidate(self, raw: PointLike) -> PlacementResult:
        last = self._path[-1]
        target, snap = self.placer.resolve(raw, last)
        if points_equal(target, last, self.config.duplicate_tolerance):
            return PlacementResult.rejected(ValidationResult.fail(
                ValidationCode.INVALID_INPUT,
                f"New vertex would coincide with {last.name}",
                vertex_name=last.name,
            ))
        placement = self.placer.place(self._path, target, snap)
        # the closing point sits on p0 and is not stored
        ring = self.closure.closing_ring(placement.path)
        if self.closure.is_closing(self._path, target, len(ring)):
            return self._attempt_closure(ring, self.closure.gap(self._path, target), placement)
        first = self._path[0]
        if points_equal(target, first, self.config.duplicate_tolerance):
            return PlacementResult.rejected(ValidationResult.fail(
                ValidationCode.INVALID_INPUT,
                f"New vertex would coincide with {first.name}",
                vertex_name=first.name,
            ))
        self._path = placement.path
        status = PlacementStatus.MERGED if placement.merged else PlacementStatus.APPENDED
        return PlacementResult(
            status,
            vertex=placement.vertex,
            snap=snap,
            warnings=tuple(self.validator.check_incremental(self._path)),
        )

    def _attempt_closure(
        self,
        ring: List[Vertex],
        closing_gap: Optional[float],
        placement: Optional[Placement] = None,
    ) -> PlacementResult:
        snap = placement.snap if placement else None
        result = self.validator.validate_cycle(ring, closing_gap)
        repaired = False
        if not result.valid:
            repair = self.validator.fix_path(ring)
            if repair.was_fixed:
                retry = self.validator.validate_cycle(repair.path, closing_gap)
                if retry.valid:
                    logger.info(f"Closure repaired automatically ({result.code.value})")
                    ring, result, repaired = repair.path, retry, True
        if not result.valid:
            # self._path was never touched, so the user gets it back as it was
            logger.warning(f"Closure rejected: {result.reason}")
            return PlacementResult(PlacementStatus.REJECTED, validation=result, snap=snap)
        polygon = Polygon.from_vertices(self._next_id, ring, self.config.scale)
        self._next_id += 1
        self._polygons.append(polygon)
        self._path = []
        self._state = BuilderState.CLOSED
        logger.info(f"Polygon {polygon.id} closed: {len(polygon.vertices)} vertices, "
                    f"area={polygon.area:.1f} sq {self.config.unit}")
        return PlacementResult(
            PlacementStatus.CLOSED,
            polygon=polygon,
            validation=result,
            snap=snap,
            repaired=repaired,
        )


def set_polygon_metadata(builder: PathBuilder, polygon_id: int, **fields: str) -> Polygon:
    """Attach room metadata (id, name, ...) to a finalized polygon.

    Empty values are dropped; the polygon is replaced by a copy.
    """
    poly = builder.get_polygon(polygon_id)
    if poly is None:
        raise KeyError(f"No polygon with id {polygon_id}")
    metadata = dict(poly.metadata)
    for key, value in fields.items():
        value = str(value).strip() if value is not None else ""
        if value:
            metadata[key] = value
        else:
            metadata.pop(key, None)
    updated = replace(poly, metadata=metadata)
    builder.replace_polygon(updated)
    return updated
