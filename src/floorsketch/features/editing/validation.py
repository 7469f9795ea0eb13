from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, NamedTuple, Optional, Sequence

from ...core.config import GeometryConfig
from ...core.errors import ValidationCode, ValidationResult
from ...core.geometry import distance, points_equal
from ...core.model import PointLike, Vertex, as_point, polygon_perimeter, renumber, shoelace_area, winding
from .intersections import (
    SelfIntersection,
    find_self_intersections,
    remove_duplicate_vertices,
    repair_single_intersection,
)

logger = logging.getLogger(__name__)


@dataclass
class RepairResult:
    path: List[Vertex]
    was_fixed: bool
    original_length: int
    fixed_length: int
    remaining_intersections: List[SelfIntersection] = field(default_factory=list)


class PathStatistics(NamedTuple):
    vertex_count: int
    total_length: float
    area: float
    average_edge_length: float
    self_intersections: int


class PathValidator:
    """Geometric acceptance rules for a ring that is about to be closed."""

    def __init__(self, config: Optional[GeometryConfig] = None) -> None:
        self.config = config or GeometryConfig()

    def validate_cycle(self, path: Sequence[Vertex], closing_gap: Optional[float] = None) -> ValidationResult:
        """Run every rule in order and return the first failure.

        ``closing_gap`` is the distance still to be bridged back to ``p0``;
        when omitted the distance from the last vertex to ``p0`` is used.
        """
        checks: List[Callable[[], ValidationResult]] = [
            lambda: self.validate_vertex_count(path),
            lambda: self.validate_edge_lengths(path),
            lambda: self.validate_closure(path, closing_gap),
            lambda: self.validate_self_intersections(path),
            lambda: self.validate_minimum_area(path),
            lambda: self.validate_geometric_properties(path),
        ]
        for check in checks:
            result = check()
            if not result.valid:
                logger.debug(f"Validation failed - {result.reason}")
                return result
        return ValidationResult.ok()

    def validate_vertex_count(self, path: Sequence[Vertex]) -> ValidationResult:
        cfg = self.config
        count = len(path)
        if count < cfg.min_vertices:
            return ValidationResult.fail(
                ValidationCode.INSUFFICIENT_VERTICES,
                f"Path must have at least {cfg.min_vertices} vertices, found {count}",
                vertex_count=count,
            )
        if count > cfg.max_vertices:
            return ValidationResult.fail(
                ValidationCode.TOO_MANY_VERTICES,
                f"Path has too many vertices ({count}), maximum is {cfg.max_vertices}",
                vertex_count=count,
            )
        return ValidationResult.ok()

    def validate_edge_lengths(self, path: Sequence[Vertex]) -> ValidationResult:
        cfg = self.config
        n = len(path)
        for i in range(n):
            length = cfg.to_real(distance(path[i], path[(i + 1) % n]))
            if length < cfg.min_edge_length:
                return ValidationResult.fail(
                    ValidationCode.EDGE_TOO_SHORT,
                    f"Edge {i} is too short ({length:.2f} {cfg.unit}), minimum is {cfg.min_edge_length} {cfg.unit}",
                    edge_index=i,
                    length=length,
                )
            if length > cfg.max_edge_length:
                return ValidationResult.fail(
                    ValidationCode.EDGE_TOO_LONG,
                    f"Edge {i} is too long ({length:.2f} {cfg.unit}), maximum is {cfg.max_edge_length} {cfg.unit}",
                    edge_index=i,
                    length=length,
                )
        return ValidationResult.ok()

    def validate_closure(self, path: Sequence[Vertex], closing_gap: Optional[float] = None) -> ValidationResult:
        if len(path) < 3:
            return ValidationResult.ok()
        gap = distance(path[-1], path[0]) if closing_gap is None else closing_gap
        if gap > self.config.max_closure_distance:
            return ValidationResult.fail(
                ValidationCode.CLOSURE_TOO_LARGE,
                f"Path closure distance is too large ({gap:.1f} px)",
                distance=gap,
            )
        return ValidationResult.ok()

    def validate_self_intersections(self, path: Sequence[Vertex]) -> ValidationResult:
        crossings = find_self_intersections(path, self.config.intersection_epsilon)
        if crossings:
            return ValidationResult.fail(
                ValidationCode.SELF_INTERSECTIONS,
                f"Path has {len(crossings)} self-intersection(s)",
                intersections=[c.edges() for c in crossings],
                points=[c.point for c in crossings],
            )
        return ValidationResult.ok()

    def validate_minimum_area(self, path: Sequence[Vertex]) -> ValidationResult:
        cfg = self.config
        area = shoelace_area(path) / (cfg.scale * cfg.scale)
        if area < cfg.min_area:
            return ValidationResult.fail(
                ValidationCode.AREA_TOO_SMALL,
                f"Area is too small ({area:.2f} sq {cfg.unit}), minimum is {cfg.min_area} sq {cfg.unit}",
                area=area,
            )
        return ValidationResult.ok()

    def validate_geometric_properties(self, path: Sequence[Vertex]) -> ValidationResult:
        cfg = self.config
        if len(path) == 3 and shoelace_area(path) < cfg.degenerate_area_tolerance:
            return ValidationResult.fail(
                ValidationCode.DEGENERATE_TRIANGLE,
                "Triangle is degenerate (collinear points)",
            )
        n = len(path)
        for i in range(n):
            if points_equal(path[i], path[(i + 1) % n], cfg.duplicate_tolerance):
                return ValidationResult.fail(
                    ValidationCode.DUPLICATE_VERTICES,
                    f"Duplicate consecutive vertices at index {i}",
                    vertex_index=i,
                )
        return ValidationResult.ok()

    def fix_path(self, path: Sequence[Vertex]) -> RepairResult:
        """Best-effort cleanup: drop duplicates, untangle a single crossing, renumber."""
        cfg = self.config
        fixed = remove_duplicate_vertices(path, cfg.duplicate_tolerance)
        was_fixed = len(fixed) != len(path)
        if was_fixed:
            logger.info(f"Removed {len(path) - len(fixed)} duplicate vertices")
        crossings = find_self_intersections(fixed, cfg.intersection_epsilon)
        if crossings:
            untangled = repair_single_intersection(fixed, crossings, cfg.intersection_epsilon)
            if untangled is not None:
                logger.info("Fixed self-intersection by reversing the enclosed vertex run")
                fixed = untangled
                was_fixed = True
                crossings = []
        return RepairResult(
            path=renumber(fixed),
            was_fixed=was_fixed,
            original_length=len(path),
            fixed_length=len(fixed),
            remaining_intersections=crossings,
        )

    def check_position(self, point: PointLike) -> ValidationResult:
        x, y = as_point(point)
        limit = self.config.max_coordinate
        if abs(x) > limit or abs(y) > limit:
            return ValidationResult.fail(
                ValidationCode.COORDINATES_TOO_LARGE,
                "Vertex coordinates are too large",
                point=(x, y),
            )
        return ValidationResult.ok()

    def check_incremental(self, path: Sequence[Vertex]) -> List[ValidationResult]:
        """Advisory warnings for a path that is still being drawn."""
        warnings: List[ValidationResult] = []
        if len(path) >= 3:
            closing = self.config.to_real(distance(path[-1], path[0]))
            if closing > self.config.closure_warning_length:
                warnings.append(ValidationResult.fail(
                    ValidationCode.CLOSURE_EDGE_LONG,
                    f"Closure edge would be very long ({closing:.1f} {self.config.unit})",
                    distance=closing,
                    severity='warning',
                ))
        return warnings

    def path_statistics(self, path: Sequence[Vertex]) -> PathStatistics:
        return path_statistics(path, self.config)


def path_statistics(path: Sequence[Vertex], config: GeometryConfig) -> PathStatistics:
    if not path:
        return PathStatistics(0, 0.0, 0.0, 0.0, 0)
    total_px = polygon_perimeter(path)
    return PathStatistics(
        vertex_count=len(path),
        total_length=config.to_real(total_px),
        area=shoelace_area(path) / (config.scale * config.scale),
        average_edge_length=config.to_real(total_px / len(path)),
        self_intersections=len(find_self_intersections(path, config.intersection_epsilon)),
    )


def orientation(path: Sequence[Vertex]) -> Optional[str]:
    """Winding of the ring; see :func:`floorsketch.core.model.winding`."""
    return winding(path)
