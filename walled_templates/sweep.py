"""
Radial sweep producing the region visible from an origin.

Rays are cast from the origin at a set of sample angles (an even grid for
the curved part, plus every angle where the answer can change: wall
endpoints, sector bounds and places where walls cross the sweep circle).
Each ray stops at the nearest blocking segment or at the sweep radius, and
the hit points, ordered by angle, form the polygon.
Segments touching the origin never block: a ray that starts on a segment
does not cross it.
"""

import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np
from numpy.typing import NDArray

from walled_templates.clipping import is_valid_polygon
from walled_templates.debug import log_sweep_config, log_sweep_result
from walled_templates.geometry import (
    intersect_ray_segments,
    normalize_angle,
    segment_circle_angles,
    segment_intersections,
    simplify_polygon,
    to_radians,
)
from walled_templates.walls import (
    BoundarySegment,
    Bounds,
    WallIndex,
    WallSense,
    segments_to_arrays,
)

DEFAULT_DENSITY = 60
FULL_CIRCLE_DEG = 360.0

# Offset either side of a wall endpoint so rays graze past corners
ENDPOINT_ANGLE_EPSILON = 1e-5
ANGLE_EPSILON = 1e-12
ORIGIN_EPSILON = 1e-9

# Rotation is expressed like a light's: 0 points due south, while sweep
# angles use 0 = due east.
ROTATION_ZERO_OFFSET_DEG = 90.0


@dataclass(frozen=True)
class SweepConfiguration:
    """
    Input contract of the sweep engine.

    Attributes:
        angle: Total width of the swept sector in degrees; 360 means no
               angle restriction, 0 sweeps nothing
        radius: Maximum ray length
        rotation: Sector orientation in degrees, 0 = due south. The sector
                  is centred on `rotation + 90` in east-zero angles.
        density: Number of evenly spaced samples around a full circle
        tmp_walls: Synthetic segments added to the scene's walls for this
                   sweep only
        debug: Emit per-sweep DEBUG log records
    """
    angle: float = FULL_CIRCLE_DEG
    radius: float = 0.0
    rotation: float = 0.0
    density: int = DEFAULT_DENSITY
    tmp_walls: Tuple[BoundarySegment, ...] = field(default_factory=tuple)
    debug: bool = False

    def __post_init__(self):
        if not math.isfinite(self.radius) or self.radius < 0:
            raise ValueError(f"radius must be a non-negative finite number, got {self.radius}")
        if not math.isfinite(self.angle) or self.angle < 0 or self.angle > FULL_CIRCLE_DEG:
            raise ValueError(f"angle must be in [0, 360], got {self.angle}")
        if not math.isfinite(self.rotation):
            raise ValueError(f"rotation must be finite, got {self.rotation}")
        if int(self.density) != self.density or self.density < 3:
            raise ValueError(f"density must be an integer >= 3, got {self.density}")
        object.__setattr__(self, "tmp_walls", tuple(self.tmp_walls))

    @property
    def has_angle_restriction(self) -> bool:
        """True when the sweep covers less than a full circle."""
        return self.angle < FULL_CIRCLE_DEG

    @property
    def center_angle(self) -> float:
        """Centre of the sector in radians, 0 = due east."""
        return to_radians(self.rotation + ROTATION_ZERO_OFFSET_DEG)

    @property
    def sector_start(self) -> float:
        """First bounding angle of the sector in [0, 2π)."""
        if not self.has_angle_restriction:
            return 0.0
        return normalize_angle(self.center_angle - to_radians(self.angle) / 2.0)

    @property
    def sector_width(self) -> float:
        """Sector width in radians."""
        return to_radians(self.angle)


def sector_sample_offsets(start: float, width: float, density: int) -> List[float]:
    """
    Grid sample angles inside a sector, as offsets from its start.

    The grid is anchored at angle 0 (due east), so the same absolute angles
    are sampled whatever the sector's orientation. For a restricted sector
    both bounds are included.

    Parameters:
        start: Sector start angle in [0, 2π)
        width: Sector width in radians, (0, 2π]
        density: Grid samples per full circle

    Returns:
        Sorted offsets in [0, width]
    """
    step = 2 * math.pi / density
    full_circle = width >= 2 * math.pi - ANGLE_EPSILON

    offsets = []
    for k in range(density):
        offset = normalize_angle(k * step - start)
        if full_circle or offset <= width:
            offsets.append(offset)

    if not full_circle:
        offsets.extend([0.0, width])

    return sorted(set(offsets))


def compute_sweep_polygon(
    origin: Tuple[float, float],
    config: SweepConfiguration,
    wall_index: Optional[WallIndex] = None
) -> NDArray[np.float64]:
    """
    Compute the polygon visible from `origin` under `config`.

    Parameters:
        origin: Sweep origin in world coordinates
        config: Sector, radius, density and synthetic segments
        wall_index: Scene walls; None sweeps against synthetic segments only

    Returns:
        World-space polygon (N, 2), vertices in ascending angle order from
        the sector start. Restricted sectors start at the origin. Empty
        (shape (0, 2)) when the radius or the sector width is zero.

    Raises:
        WallIndexUnavailable: If the wall index cannot be queried yet
    """
    if config.radius == 0 or config.angle == 0:
        return np.empty((0, 2), dtype=np.float64)

    ox, oy = float(origin[0]), float(origin[1])
    if config.debug:
        log_sweep_config((ox, oy), config)

    segments = list(config.tmp_walls)
    if wall_index is not None:
        segments.extend(wall_index.query_near(Bounds.around((ox, oy), config.radius)))
    segments = [s for s in segments if s.blocks and not s.is_degenerate]

    start = config.sector_start
    width = config.sector_width
    restricted = config.has_angle_restriction

    offsets = set(sector_sample_offsets(start, width, config.density))
    for angle in _critical_angles((ox, oy), config.radius, segments):
        offset = normalize_angle(angle - start)
        if not restricted or offset <= width:
            offsets.add(offset)

    starts, ends = segments_to_arrays(segments)
    limited = np.array([s.sense == WallSense.LIMITED for s in segments], dtype=bool)

    points = [(ox, oy)] if restricted else []
    for offset in sorted(offsets):
        angle = start + offset
        distance = _cast_ray((ox, oy), angle, config.radius, starts, ends, limited)
        points.append((ox + math.cos(angle) * distance, oy + math.sin(angle) * distance))

    polygon = simplify_polygon(np.array(points, dtype=np.float64))
    if not is_valid_polygon(polygon):
        polygon = np.empty((0, 2), dtype=np.float64)

    if config.debug:
        log_sweep_result(polygon, len(segments), len(offsets))
    return polygon


def _critical_angles(
    origin: Tuple[float, float],
    radius: float,
    segments: Sequence[BoundarySegment]
) -> List[float]:
    """Angles where the visible boundary can change direction."""
    ox, oy = origin
    corners = [point for segment in segments for point in (segment.a, segment.b)]
    starts, ends = segments_to_arrays(segments)
    corners.extend(tuple(point) for point in segment_intersections(starts, ends))

    angles: List[float] = []
    for x, y in corners:
        dx = x - ox
        dy = y - oy
        if math.hypot(dx, dy) > radius:
            continue
        if abs(dx) <= ORIGIN_EPSILON and abs(dy) <= ORIGIN_EPSILON:
            continue
        angle = math.atan2(dy, dx)
        angles.extend([
            normalize_angle(angle - ENDPOINT_ANGLE_EPSILON),
            normalize_angle(angle),
            normalize_angle(angle + ENDPOINT_ANGLE_EPSILON),
        ])

    for segment in segments:
        angles.extend(segment_circle_angles(origin, radius, segment.a, segment.b))
    return angles


def _cast_ray(
    origin: Tuple[float, float],
    angle: float,
    radius: float,
    starts: NDArray[np.float64],
    ends: NDArray[np.float64],
    limited: NDArray[np.bool_]
) -> float:
    """
    Length of a ray before it is blocked, capped at `radius`.

    Normal segments stop the ray at once; the first limited segment is seen
    through and the second one stops the ray. Coincident hits resolve to
    the nearer distance.
    """
    distances = intersect_ray_segments(origin, angle, starts, ends)
    if distances.size == 0:
        return radius

    order = np.argsort(distances, kind="stable")
    limited_seen = 0
    for i in order:
        distance = float(distances[i])
        if distance > radius:
            break
        if limited[i]:
            limited_seen += 1
            if limited_seen < 2:
                continue
        return distance
    return radius
