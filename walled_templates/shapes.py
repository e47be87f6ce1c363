"""
Per-shape translation of template parameters into sweep configurations.

Each builder returns a ShapePlan holding the SweepConfiguration for the
wall-constrained path and the nominal polygon for the unconstrained one.
Round shapes are what the sweep produces natively; cones with a flat far
edge, rectangles and rays add synthetic segments so that the sweep stops
exactly on the shape's edge. Rectangles and rays have their origin on their
own boundary, where the edges touching it do not stop rays, so their sweep
is clipped to the nominal outline as well.
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

from walled_templates.clipping import clip_polygon_to_convex, is_valid_polygon
from walled_templates.geometry import (
    normalize_rectangle,
    ray_from_angle,
    rectangle_corners,
    shift_to_world,
    simplify_polygon,
    to_degrees,
    to_radians,
)
from walled_templates.settings import SceneSettings
from walled_templates.sweep import (
    FULL_CIRCLE_DEG,
    ROTATION_ZERO_OFFSET_DEG,
    SweepConfiguration,
    compute_sweep_polygon,
    sector_sample_offsets,
)
from walled_templates.templates import Template
from walled_templates.walls import BoundarySegment, WallIndex, WallSense, closed_loop

Point = Tuple[float, float]

# A flat far edge only exists for cones narrower than a half circle
MAX_FLAT_CONE_ANGLE = 180.0


@dataclass(frozen=True)
class ShapePlan:
    """
    How to compute one template's footprint.

    Attributes:
        config: Sweep configuration for the wall-constrained footprint
        nominal: Unconstrained footprint in template-local coordinates
        bounded: Clip the sweep to the nominal footprint, which must then
            be convex
    """
    config: SweepConfiguration
    nominal: NDArray[np.float64]
    bounded: bool = False

    def footprint(
        self,
        origin: Point,
        wall_index: Optional[WallIndex] = None
    ) -> NDArray[np.float64]:
        """
        World-space wall-constrained footprint swept from `origin`.

        Raises:
            WallIndexUnavailable: If the wall index cannot be queried yet
        """
        polygon = compute_sweep_polygon(origin, self.config, wall_index)
        if not self.bounded:
            return polygon

        clipped = clip_polygon_to_convex(polygon, shift_to_world(self.nominal, origin))
        clipped = simplify_polygon(clipped)
        if not is_valid_polygon(clipped):
            return np.empty((0, 2), dtype=np.float64)
        return clipped


def arc_polygon(
    config: SweepConfiguration,
) -> NDArray[np.float64]:
    """
    Local-space polygon the sweep produces for `config` with no walls at all.

    Samples exactly the grid angles the sweep engine samples, so a sweep in
    an empty scene reproduces it to floating-point precision.
    """
    start = config.sector_start
    offsets = sector_sample_offsets(start, config.sector_width, config.density)
    points: List[Point] = [(0.0, 0.0)] if config.has_angle_restriction else []
    points.extend(ray_from_angle(0.0, 0.0, start + offset, config.radius) for offset in offsets)
    return simplify_polygon(np.array(points, dtype=np.float64))


def _world(points: List[Point], origin: Point) -> List[Point]:
    ox, oy = origin
    return [(ox + x, oy + y) for x, y in points]


def build_circle_plan(template: Template, settings: SceneSettings) -> ShapePlan:
    """Full 360° sweep of radius `distance`; no synthetic segments."""
    config = SweepConfiguration(
        angle=FULL_CIRCLE_DEG,
        radius=template.distance,
        density=settings.density,
        debug=settings.debug,
    )
    return ShapePlan(config=config, nominal=arc_polygon(config))


def build_cone_plan(template: Template, settings: SceneSettings) -> ShapePlan:
    """
    Sector sweep centred on the template direction.

    The sweep's rotation counts from due south while template directions
    count from due east, hence the 90° offset. With the "flat" cone style
    the radius is stretched to distance / cos(angle / 2) so that the chord
    joining the two flanks passes through the nominal distance, and that
    chord is added as a synthetic segment slightly beyond the flank ends.
    """
    angle = template.cone_angle
    rotation = to_degrees(template.direction) - ROTATION_ZERO_OFFSET_DEG
    flat = settings.cone_rendering_style() != "round" and angle < MAX_FLAT_CONE_ANGLE

    if not flat:
        config = SweepConfiguration(
            angle=angle,
            radius=template.distance,
            rotation=rotation,
            density=settings.density,
            debug=settings.debug,
        )
        return ShapePlan(config=config, nominal=arc_polygon(config))

    half_width = to_radians(angle / 2)
    distance = template.distance / math.cos(half_width)
    margin = settings.boundary_margin

    left = template.direction - half_width
    right = template.direction + half_width
    chord = BoundarySegment(
        ray_from_angle(template.x, template.y, left, distance + margin),
        ray_from_angle(template.x, template.y, right, distance + margin),
        sense=WallSense.NORMAL,
    )
    config = SweepConfiguration(
        angle=angle,
        radius=distance + 2 * margin,
        rotation=rotation,
        density=settings.density,
        tmp_walls=(chord,),
        debug=settings.debug,
    )

    nominal = np.array([
        (0.0, 0.0),
        ray_from_angle(0.0, 0.0, left, distance),
        ray_from_angle(0.0, 0.0, right, distance),
    ], dtype=np.float64)
    return ShapePlan(config=config, nominal=simplify_polygon(nominal))


def build_rectangle_plan(template: Template, settings: SceneSettings) -> ShapePlan:
    """
    Rectangle spanned by the diagonal from the origin corner.

    The four edges become synthetic segments; the sweep radius is the
    diagonal, enough to reach the opposite corner.
    """
    dx, dy = ray_from_angle(0.0, 0.0, template.direction, template.distance)
    x, y, width, height = normalize_rectangle(0.0, 0.0, dx, dy)
    corners = rectangle_corners(x, y, width, height)
    local = [corners['top_left'], corners['top_right'], corners['bottom_right'], corners['bottom_left']]

    config = SweepConfiguration(
        angle=FULL_CIRCLE_DEG,
        radius=math.hypot(width, height) + settings.boundary_margin,
        density=settings.density,
        tmp_walls=tuple(closed_loop(_world(local, template.origin))),
        debug=settings.debug,
    )
    return ShapePlan(
        config=config,
        nominal=simplify_polygon(np.array(local, dtype=np.float64)),
        bounded=True,
    )


def build_ray_plan(template: Template, settings: SceneSettings) -> ShapePlan:
    """
    Thin rectangle of the ray's width laid along its direction.

    The origin sits in the middle of the near edge.
    """
    half_width = template.ray_width / 2
    up = ray_from_angle(0.0, 0.0, template.direction - math.pi / 2, half_width)
    down = ray_from_angle(0.0, 0.0, template.direction + math.pi / 2, half_width)
    far_up = ray_from_angle(up[0], up[1], template.direction, template.distance)
    far_down = ray_from_angle(down[0], down[1], template.direction, template.distance)
    local = [up, far_up, far_down, down]

    config = SweepConfiguration(
        angle=FULL_CIRCLE_DEG,
        radius=math.hypot(template.distance, half_width) + settings.boundary_margin,
        density=settings.density,
        tmp_walls=tuple(closed_loop(_world(local, template.origin))),
        debug=settings.debug,
    )
    return ShapePlan(
        config=config,
        nominal=simplify_polygon(np.array(local, dtype=np.float64)),
        bounded=True,
    )
