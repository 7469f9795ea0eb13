"""Incremental polygon construction for floor-plan sketching."""
from .core.config import GeometryConfig
from .core.errors import (
    ConfigError,
    FloorSketchError,
    PathStateError,
    ResumeSelectionError,
    ValidationCode,
    ValidationResult,
)
from .core.history import Snapshot, SnapshotHistory
from .core.model import Polygon, Vertex, centroid, shoelace_area, signed_area
from .features.editing.drag import move_polygon_vertex, undo_last_vertex_move
from .features.editing.draw import (
    BuilderState,
    PathBuilder,
    PlacementResult,
    PlacementStatus,
    set_polygon_metadata,
)
from .features.editing.validation import PathValidator
from .file_io import load_config, save_config

__version__ = "0.1.0"

__all__ = [
    "BuilderState",
    "ConfigError",
    "FloorSketchError",
    "GeometryConfig",
    "PathBuilder",
    "PathStateError",
    "PathValidator",
    "PlacementResult",
    "PlacementStatus",
    "Polygon",
    "ResumeSelectionError",
    "Snapshot",
    "SnapshotHistory",
    "ValidationCode",
    "ValidationResult",
    "Vertex",
    "centroid",
    "load_config",
    "move_polygon_vertex",
    "save_config",
    "set_polygon_metadata",
    "shoelace_area",
    "signed_area",
    "undo_last_vertex_move",
]
