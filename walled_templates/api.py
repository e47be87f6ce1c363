"""
Public entry point: the footprint of a template in template-local space.
"""

import logging
from typing import Callable, Dict, Optional

import numpy as np
from numpy.typing import NDArray

from walled_templates.clipping import is_valid_polygon
from walled_templates.geometry import shift_to_local
from walled_templates.settings import SceneSettings, is_wall_constrained
from walled_templates.shapes import (
    ShapePlan,
    build_circle_plan,
    build_cone_plan,
    build_ray_plan,
    build_rectangle_plan,
)
from walled_templates.templates import InvalidParameterError, ShapeKind, Template
from walled_templates.walls import WallIndex, WallIndexUnavailable

logger = logging.getLogger(__name__)

PlanBuilder = Callable[[Template, SceneSettings], ShapePlan]

SHAPE_BUILDERS: Dict[ShapeKind, PlanBuilder] = {
    ShapeKind.CIRCLE: build_circle_plan,
    ShapeKind.CONE: build_cone_plan,
    ShapeKind.RECTANGLE: build_rectangle_plan,
    ShapeKind.RAY: build_ray_plan,
}


def _empty_polygon() -> NDArray[np.float64]:
    return np.empty((0, 2), dtype=np.float64)


def build_shape_plan(template: Template, settings: Optional[SceneSettings] = None) -> ShapePlan:
    """Sweep configuration and nominal polygon for `template`."""
    settings = settings or SceneSettings()
    return SHAPE_BUILDERS[template.kind](template, settings)


def compute_shape(
    template: Template,
    wall_index: Optional[WallIndex] = None,
    settings: Optional[SceneSettings] = None
) -> NDArray[np.float64]:
    """
    Compute the footprint of a template, clipped by walls when enabled.

    Steps:
    1. Validate the template; invalid parameters give an empty polygon.
    2. Without wall constraint (template flag, world default, or no usable
       wall index), return the nominal shape.
    3. Otherwise sweep from the origin with the shape's configuration and
       shift the world-space result to template-local coordinates.

    Parameters:
        template: The template to resolve; never modified
        wall_index: Snapshot of the scene's walls. None means walls are not
                    available yet and the nominal shape is returned.
        settings: World settings; defaults to SceneSettings()

    Returns:
        Polygon of shape (N, 2) relative to the template origin, in
        ascending angle order. Empty (shape (0, 2)) for invalid templates
        and zero distance.

    Example:
        >>> walls = SegmentIndex.from_coordinates([(5, -10, 5, 10)])
        >>> template = Template(x=0, y=0, kind=ShapeKind.CIRCLE, distance=10)
        >>> shape = compute_shape(template, walls)
        >>> bool(shape[:, 0].max() <= 5.0 + 1e-6)
        True
    """
    settings = settings or SceneSettings()

    logger.debug(
        "compute_shape %s origin (%s, %s) distance %s angle %s direction %s",
        template.kind.value, template.x, template.y, template.distance,
        template.angle, template.direction
    )

    try:
        template.validate()
    except InvalidParameterError as e:
        logger.warning("Ignoring template with invalid parameters: %s", e)
        return _empty_polygon()

    if template.distance == 0:
        return _empty_polygon()

    plan = build_shape_plan(template, settings)

    if not is_wall_constrained(template, settings):
        return _checked(plan.nominal)

    if wall_index is None:
        logger.debug("No wall index available; using the unconstrained %s", template.kind.value)
        return _checked(plan.nominal)

    try:
        polygon = plan.footprint(template.origin, wall_index)
    except WallIndexUnavailable as e:
        logger.info("Wall index unavailable (%s); using the unconstrained %s", e, template.kind.value)
        return _checked(plan.nominal)

    return _checked(shift_to_local(polygon, template.origin))


def _checked(polygon: NDArray[np.float64]) -> NDArray[np.float64]:
    if not is_valid_polygon(polygon) or not np.all(np.isfinite(polygon)):
        return _empty_polygon()
    return polygon
