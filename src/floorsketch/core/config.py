from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Mapping

from .errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeometryConfig:
    """Tunables for snapping, merging, closure and validation.

    Lengths suffixed ``_px`` in the docs below are internal canvas units;
    edge limits and areas are real-world units (``unit``), converted with
    ``scale`` internal units per real unit.
    """

    scale: float = 8.0
    unit: str = "ft"
    snap_radius: float = 15.0                 # px
    closure_threshold: float = 20.0           # px
    collinear_tolerance_degrees: float = 1.0
    min_edge_length: float = 0.1              # real units
    max_edge_length: float = 1000.0           # real units
    min_vertices: int = 3
    max_vertices: int = 100
    max_closure_distance: float = 200.0       # px
    min_area: float = 1.0                     # real units squared
    duplicate_tolerance: float = 1.0          # px
    degenerate_area_tolerance: float = 0.01   # px squared
    intersection_epsilon: float = 1e-4
    max_coordinate: float = 50000.0           # px
    closure_warning_length: float = 50.0      # real units
    straight_snap_tolerance_degrees: float = 3.0

    def __post_init__(self) -> None:
        self.check()

    def check(self) -> None:
        numeric = [f.name for f in fields(self) if f.name != 'unit']
        for name in numeric:
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or math.isnan(value):
                raise ConfigError(f"{name} must be a number, got {value!r}")
            if value < 0:
                raise ConfigError(f"{name} must not be negative, got {value!r}")
        if self.scale <= 0:
            raise ConfigError(f"scale must be greater than zero, got {self.scale!r}")
        if self.min_vertices < 3:
            raise ConfigError(f"min_vertices must be at least 3, got {self.min_vertices!r}")
        if self.max_vertices < self.min_vertices:
            raise ConfigError("max_vertices must not be smaller than min_vertices")
        if self.max_edge_length < self.min_edge_length:
            raise ConfigError("max_edge_length must not be smaller than min_edge_length")
        if not isinstance(self.unit, str) or not self.unit:
            raise ConfigError("unit must be a non-empty string")

    def to_px(self, length: float) -> float:
        return length * self.scale

    def to_real(self, length_px: float) -> float:
        return length_px / self.scale

    def with_overrides(self, **overrides: Any) -> "GeometryConfig":
        return replace(self, **overrides)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "GeometryConfig":
        if not isinstance(data, Mapping):
            raise ConfigError(f"configuration must be a mapping, got {type(data).__name__}")
        known = {f.name: f for f in fields(cls)}
        kwargs: Dict[str, Any] = {}
        for key, value in data.items():
            if key not in known:
                logger.warning(f"Ignoring unknown geometry setting {key!r}")
                continue
            if key in ('min_vertices', 'max_vertices') and isinstance(value, float) and value.is_integer():
                value = int(value)
            kwargs[key] = value
        try:
            return cls(**kwargs)
        except TypeError as e:
            raise ConfigError(str(e)) from e
