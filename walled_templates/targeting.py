"""
Auto-targeting: which tokens a template footprint covers.

Two methods, matching the world's autotarget settings:
- center: a token is targeted when its center lies inside the footprint
- overlap: a token is targeted when the footprint covers more than nothing
  and at least `area_threshold` of the token's area

Selection state (who targets what) belongs to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Optional

import numpy as np
from numpy.typing import NDArray

from walled_templates.clipping import (
    clip_polygon_to_convex,
    compute_bounding_box,
    is_valid_polygon,
    point_in_polygon,
    polygon_area,
)
from walled_templates.geometry import rectangle_corners, shift_to_world
from walled_templates.settings import SceneSettings, TARGET_METHODS
from walled_templates.templates import Template, ValidationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenShape:
    """Axis-aligned footprint of a token in world coordinates.

    Attributes:
        id: Token identifier
        x: Left edge
        y: Top edge
        width: Horizontal size, must be positive
        height: Vertical size, must be positive

    Raises:
        ValidationError: If width or height is not positive
    """

    id: str | int
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValidationError(
                f"Token {self.id!r} must have positive size, got {self.width}x{self.height}"
            )

    @property
    def center(self) -> tuple[float, float]:
        """Center point of the token."""
        return (self.x + self.width / 2, self.y + self.height / 2)

    @property
    def area(self) -> float:
        """Area of the token rectangle."""
        return self.width * self.height

    @property
    def polygon(self) -> NDArray[np.float64]:
        """Token corners as a clockwise (4, 2) polygon in screen coordinates."""
        corners = rectangle_corners(self.x, self.y, self.width, self.height)
        return np.array([
            corners['top_left'],
            corners['top_right'],
            corners['bottom_right'],
            corners['bottom_left'],
        ], dtype=np.float64)


def overlap_fraction(footprint: NDArray[np.float64], token: TokenShape) -> float:
    """Fraction of the token's area covered by a world-space footprint."""
    overlap = clip_polygon_to_convex(footprint, token.polygon)
    if not is_valid_polygon(overlap):
        return 0.0
    return min(1.0, polygon_area(overlap) / token.area)


def find_targets(
    template: Template,
    shape: NDArray[np.float64],
    tokens: Iterable[TokenShape],
    method: Optional[str] = None,
    area_threshold: Optional[float] = None,
    settings: Optional[SceneSettings] = None
) -> List[str | int]:
    """
    Ids of the tokens covered by a template footprint.

    Parameters:
        template: Template the footprint belongs to (supplies the origin)
        shape: Footprint in template-local coordinates, as returned by
               compute_shape()
        tokens: Candidate tokens
        method: "center" or "overlap"; defaults to the settings' method
        area_threshold: Minimum covered fraction for "overlap"; defaults to
                        the settings' value
        settings: World settings; defaults to SceneSettings()

    Returns:
        Ids of targeted tokens, in input order

    Raises:
        ValidationError: If method is unknown or area_threshold is outside [0, 1]
    """
    settings = settings or SceneSettings()
    method = method or settings.autotarget_method
    if area_threshold is None:
        area_threshold = settings.autotarget_area

    if method not in TARGET_METHODS:
        raise ValidationError(f"method must be one of {TARGET_METHODS}, got {method!r}")
    if not 0.0 <= area_threshold <= 1.0:
        raise ValidationError(f"area_threshold must be in [0, 1], got {area_threshold}")

    if not is_valid_polygon(shape):
        return []

    footprint = shift_to_world(shape, template.origin)
    min_point, max_point = compute_bounding_box(footprint)

    targets: List[str | int] = []
    for token in tokens:
        if (
            token.x > max_point[0]
            or token.x + token.width < min_point[0]
            or token.y > max_point[1]
            or token.y + token.height < min_point[1]
        ):
            continue

        if method == "center":
            hit = point_in_polygon(token.center, footprint)
        else:
            fraction = overlap_fraction(footprint, token)
            hit = fraction > 0.0 and fraction >= area_threshold

        if hit:
            targets.append(token.id)

    logger.debug("find_targets %s method %s -> %s", template.kind.value, method, targets)
    return targets
