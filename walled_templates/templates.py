"""
Template Data Structures
========================

- ShapeKind: closed set of template shapes
- Template: one area-of-effect request, anchored at an origin
- ValidationError / InvalidParameterError: input validation failures

Templates are plain values. They are created whenever a footprint is
needed and are never modified by the computation.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum

DEFAULT_CONE_ANGLE = 90.0

# Thickness given to a ray template that does not set one, in scene units
RAY_MIN_WIDTH = 1e-3


class ValidationError(Exception):
    """Raised when input validation fails."""

    pass


class InvalidParameterError(ValidationError):
    """Raised when a template carries a negative distance or non-finite values."""

    pass


class ShapeKind(str, Enum):
    """Template shapes. Values match the host's template type tags."""

    CIRCLE = "circle"
    CONE = "cone"
    RECTANGLE = "rect"
    RAY = "ray"


@dataclass(frozen=True)
class Template:
    """An area-of-effect template.

    Attributes:
        x: Origin x in world coordinates
        y: Origin y in world coordinates
        kind: Shape of the template
        distance: Reach of the template in scene units (radius for circles
            and cones, diagonal for rectangles, length for rays)
        direction: Heading in radians, 0 = due east. For rectangles this is
            the direction of the diagonal from the origin corner.
        angle: Cone width in degrees; None or 0 means 90
        width: Ray thickness in scene units; None or 0 means RAY_MIN_WIDTH
        walled: Per-template wall-constraint override; None defers to the
            world default

    Raises:
        ValidationError: If kind is not a known shape
    """

    x: float
    y: float
    kind: ShapeKind
    distance: float
    direction: float = 0.0
    angle: float | None = None
    width: float | None = None
    walled: bool | None = None

    def __post_init__(self) -> None:
        """Coerce `kind` given as its tag string."""
        if not isinstance(self.kind, ShapeKind):
            try:
                kind = ShapeKind(self.kind)
            except ValueError as e:
                raise ValidationError(
                    f"kind must be one of {[k.value for k in ShapeKind]}, got {self.kind!r}"
                ) from e
            object.__setattr__(self, "kind", kind)

    @classmethod
    def from_rectangle(
        cls,
        x: float,
        y: float,
        width: float,
        height: float,
        walled: bool | None = None
    ) -> Template:
        """Rectangle template whose defining corner is (x, y)."""
        return cls(
            x=x,
            y=y,
            kind=ShapeKind.RECTANGLE,
            distance=math.hypot(width, height),
            direction=math.atan2(height, width),
            walled=walled,
        )

    @property
    def origin(self) -> tuple[float, float]:
        """Origin as an (x, y) tuple."""
        return (self.x, self.y)

    @property
    def cone_angle(self) -> float:
        """Effective cone width in degrees."""
        return self.angle or DEFAULT_CONE_ANGLE

    @property
    def ray_width(self) -> float:
        """Effective ray thickness in scene units."""
        return self.width or RAY_MIN_WIDTH

    def validate(self) -> None:
        """Check the geometric parameters.

        Raises:
            InvalidParameterError: If a coordinate or parameter is not
                finite, the distance or ray width is negative, or the cone
                angle falls outside [0, 360]
        """
        for name in ("x", "y", "distance", "direction"):
            value = getattr(self, name)
            if not _is_finite_number(value):
                raise InvalidParameterError(f"{name} must be a finite number, got {value!r}")

        if self.distance < 0:
            raise InvalidParameterError(f"distance must be non-negative, got {self.distance}")

        if self.angle is not None:
            if not _is_finite_number(self.angle):
                raise InvalidParameterError(f"angle must be a finite number, got {self.angle!r}")
            if self.angle < 0 or self.angle > 360:
                raise InvalidParameterError(f"angle must be in [0, 360], got {self.angle}")

        if self.width is not None:
            if not _is_finite_number(self.width):
                raise InvalidParameterError(f"width must be a finite number, got {self.width!r}")
            if self.width < 0:
                raise InvalidParameterError(f"width must be non-negative, got {self.width}")


def _is_finite_number(value: object) -> bool:
    if isinstance(value, bool):
        return False
    try:
        return math.isfinite(value)  # type: ignore[arg-type]
    except TypeError:
        return False
