from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ValidationCode(Enum):
    """Reason codes surfaced to the UI layer."""
    INVALID_INPUT = "INVALID_INPUT"
    COORDINATES_TOO_LARGE = "COORDINATES_TOO_LARGE"
    INSUFFICIENT_VERTICES = "INSUFFICIENT_VERTICES"
    TOO_MANY_VERTICES = "TOO_MANY_VERTICES"
    EDGE_TOO_SHORT = "EDGE_TOO_SHORT"
    EDGE_TOO_LONG = "EDGE_TOO_LONG"
    CLOSURE_TOO_LARGE = "CLOSURE_TOO_LARGE"
    SELF_INTERSECTIONS = "SELF_INTERSECTIONS"
    AREA_TOO_SMALL = "AREA_TOO_SMALL"
    DEGENERATE_TRIANGLE = "DEGENERATE_TRIANGLE"
    DUPLICATE_VERTICES = "DUPLICATE_VERTICES"
    # advisory only, never blocks a placement
    CLOSURE_EDGE_LONG = "CLOSURE_EDGE_LONG"


@dataclass(frozen=True)
class ValidationResult:
    valid: bool
    code: Optional[ValidationCode] = None
    reason: str = ""
    context: Dict[str, Any] = field(default_factory=dict, hash=False)

    @classmethod
    def ok(cls) -> "ValidationResult":
        return cls(valid=True)

    @classmethod
    def fail(cls, code: ValidationCode, reason: str, **context: Any) -> "ValidationResult":
        return cls(valid=False, code=code, reason=reason, context=context)

    def __bool__(self) -> bool:
        return self.valid

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {'valid': self.valid}
        if self.code is not None:
            data['code'] = self.code.value
        if self.reason:
            data['reason'] = self.reason
        if self.context:
            data['context'] = dict(self.context)
        return data


class FloorSketchError(Exception):
    """Base class for integration errors raised by the drawing engine."""


class PathStateError(FloorSketchError):
    """An operation was invoked in a state that does not allow it."""


class ResumeSelectionError(FloorSketchError, IndexError):
    """The resume index or polygon id does not name an existing vertex."""


class ConfigError(FloorSketchError, ValueError):
    """Geometry configuration is malformed or out of range."""
