"""
Geometry utilities for coordinate shifting, angle conversion, rectangles and
ray intersection.
"""

import math
from typing import Dict, Tuple

import numpy as np
from numpy.typing import NDArray

Point = Tuple[float, float]

# Tolerances used when a ray passes exactly through a segment endpoint or
# starts on a segment. A ray starting on a segment does not cross it.
RAY_PARAM_EPSILON = 1e-9
SEGMENT_PARAM_EPSILON = 1e-9
PARALLEL_EPSILON = 1e-12

DUPLICATE_EPSILON = 1e-9
COLLINEAR_EPSILON = 1e-9


def to_radians(degrees: float) -> float:
    """Convert degrees to radians."""
    return math.radians(degrees)


def to_degrees(radians: float) -> float:
    """Convert radians to degrees."""
    return math.degrees(radians)


def normalize_angle(angle: float) -> float:
    """
    Wrap angle to [0, 2π) range.

    Parameters:
        angle: Angle in radians

    Returns:
        Normalized angle in [0, 2π)
    """
    wrapped = math.fmod(angle, 2 * math.pi)
    if wrapped < 0:
        wrapped += 2 * math.pi
    # fmod of a tiny negative value can round up to exactly 2π
    if wrapped >= 2 * math.pi:
        wrapped = 0.0
    return wrapped


def ray_from_angle(x: float, y: float, angle: float, distance: float) -> Point:
    """
    Endpoint of a ray starting at (x, y) heading `angle` radians for `distance`.

    Angle 0 points due east; with screen coordinates (y down) positive
    angles turn clockwise.
    """
    return (x + math.cos(angle) * distance, y + math.sin(angle) * distance)


def as_polygon(points) -> NDArray[np.float64]:
    """Coerce a vertex sequence into an (N, 2) float64 array."""
    polygon = np.asarray(points, dtype=np.float64)
    if polygon.size == 0:
        return np.empty((0, 2), dtype=np.float64)
    if polygon.ndim != 2 or polygon.shape[1] != 2:
        raise ValueError(f"polygon must have shape (N, 2), got {polygon.shape}")
    return polygon


def shift_to_local(
    polygon: NDArray[np.float64],
    origin: Point
) -> NDArray[np.float64]:
    """
    Translate a world-space polygon so that `origin` becomes (0, 0).

    Parameters:
        polygon: Array of shape (N, 2) containing (x, y) vertices
        origin: Point to become the new origin

    Returns:
        New array of the same shape; the input is not modified
    """
    polygon = as_polygon(polygon)
    return polygon - np.asarray(origin, dtype=np.float64)


def shift_to_world(
    polygon: NDArray[np.float64],
    origin: Point
) -> NDArray[np.float64]:
    """Inverse of shift_to_local."""
    polygon = as_polygon(polygon)
    return polygon + np.asarray(origin, dtype=np.float64)


def rectangle_corners(
    x: float,
    y: float,
    width: float,
    height: float
) -> Dict[str, Point]:
    """
    Corner points of an axis-aligned rectangle.

    The labels are derived from x, y, width and height exactly as given. A
    rectangle with negative width or height is not normalized here; call
    normalize_rectangle() first when canonical labels matter.

    Returns:
        Dict with keys top_left, top_right, bottom_right, bottom_left
    """
    x_right = x + width
    y_bottom = y + height
    return {
        'top_left': (x, y),
        'top_right': (x_right, y),
        'bottom_right': (x_right, y_bottom),
        'bottom_left': (x, y_bottom),
    }


def normalize_rectangle(
    x: float,
    y: float,
    width: float,
    height: float
) -> Tuple[float, float, float, float]:
    """Return (x, y, width, height) with non-negative width and height."""
    if width < 0:
        x, width = x + width, -width
    if height < 0:
        y, height = y + height, -height
    return x, y, width, height


def intersect_ray_segments(
    origin: Point,
    ray_angle: float,
    segment_starts: NDArray[np.float64],
    segment_ends: NDArray[np.float64]
) -> NDArray[np.float64]:
    """
    Distances along a ray to each of a batch of segments.

    Parameters:
        origin: Ray start point
        ray_angle: Angle of ray in radians
        segment_starts: Segment start points, shape (M, 2)
        segment_ends: Segment end points, shape (M, 2)

    Returns:
        Array of shape (M,) with the distance t > 0 to each segment, or
        inf where the ray misses the segment, runs parallel to it, or
        starts on it (the segment touches or passes through the origin).
    """
    if len(segment_starts) == 0:
        return np.empty(0, dtype=np.float64)

    ox, oy = origin
    rdx = math.cos(ray_angle)
    rdy = math.sin(ray_angle)

    ax = segment_starts[:, 0] - ox
    ay = segment_starts[:, 1] - oy
    sdx = segment_ends[:, 0] - segment_starts[:, 0]
    sdy = segment_ends[:, 1] - segment_starts[:, 1]

    denom = rdx * sdy - rdy * sdx
    parallel = np.abs(denom) < PARALLEL_EPSILON
    safe_denom = np.where(parallel, 1.0, denom)

    t = (ax * sdy - ay * sdx) / safe_denom
    u = (ax * rdy - ay * rdx) / safe_denom

    hit = (
        ~parallel
        & (t > RAY_PARAM_EPSILON)
        & (u >= -SEGMENT_PARAM_EPSILON)
        & (u <= 1.0 + SEGMENT_PARAM_EPSILON)
    )
    return np.where(hit, t, np.inf)


def segment_intersections(
    segment_starts: NDArray[np.float64],
    segment_ends: NDArray[np.float64]
) -> NDArray[np.float64]:
    """
    Points where pairs of segments cross each other.

    Parameters:
        segment_starts: Segment start points, shape (M, 2)
        segment_ends: Segment end points, shape (M, 2)

    Returns:
        Crossing points (K, 2); parallel and collinear pairs are skipped
    """
    m = len(segment_starts)
    if m < 2:
        return np.empty((0, 2), dtype=np.float64)

    i, j = np.triu_indices(m, k=1)
    p = segment_starts[i]
    r = segment_ends[i] - p
    q = segment_starts[j]
    s = segment_ends[j] - q

    denom = r[:, 0] * s[:, 1] - r[:, 1] * s[:, 0]
    parallel = np.abs(denom) < PARALLEL_EPSILON
    safe_denom = np.where(parallel, 1.0, denom)

    qp = q - p
    t = (qp[:, 0] * s[:, 1] - qp[:, 1] * s[:, 0]) / safe_denom
    u = (qp[:, 0] * r[:, 1] - qp[:, 1] * r[:, 0]) / safe_denom

    lo = -SEGMENT_PARAM_EPSILON
    hi = 1.0 + SEGMENT_PARAM_EPSILON
    crossing = ~parallel & (t >= lo) & (t <= hi) & (u >= lo) & (u <= hi)

    return p[crossing] + t[crossing, None] * r[crossing]


def segment_circle_angles(
    center: Point,
    radius: float,
    start: Point,
    end: Point
) -> list:
    """
    Angles (seen from `center`) at which a segment crosses a circle.

    Uses parametric line equation: P(t) = start + t*(end-start), t in [0,1]
    substituted into |P(t) - center|^2 = r^2.
    """
    p1 = np.asarray(start, dtype=np.float64) - np.asarray(center, dtype=np.float64)
    d = np.asarray(end, dtype=np.float64) - np.asarray(start, dtype=np.float64)

    a = float(np.dot(d, d))
    b = 2.0 * float(np.dot(p1, d))
    c = float(np.dot(p1, p1)) - radius * radius

    discriminant = b * b - 4.0 * a * c
    if discriminant < 0 or a < 1e-12:
        return []

    sqrt_disc = math.sqrt(discriminant)
    angles = []
    for t in ((-b - sqrt_disc) / (2.0 * a), (-b + sqrt_disc) / (2.0 * a)):
        if 0.0 <= t <= 1.0:
            px, py = p1 + t * d
            angles.append(normalize_angle(math.atan2(py, px)))
    return angles


def simplify_polygon(
    polygon: NDArray[np.float64],
    tolerance: float = DUPLICATE_EPSILON
) -> NDArray[np.float64]:
    """
    Drop repeated vertices and vertices collinear with their neighbours.

    The polygon is treated as closed, so the first and last vertices are
    neighbours. Removing a collinear vertex never changes the enclosed area.

    Parameters:
        polygon: Polygon vertices (N, 2)
        tolerance: Distance below which two vertices count as the same point

    Returns:
        Simplified polygon vertices (M, 2), M <= N
    """
    polygon = as_polygon(polygon)

    vertices = []
    for point in polygon:
        if vertices and np.all(np.abs(point - vertices[-1]) <= tolerance):
            continue
        vertices.append(point)
    while len(vertices) > 1 and np.all(np.abs(vertices[0] - vertices[-1]) <= tolerance):
        vertices.pop()

    changed = True
    while changed and len(vertices) >= 3:
        changed = False
        n = len(vertices)
        for i in range(n):
            prev_vertex = vertices[i - 1]
            current = vertices[i]
            next_vertex = vertices[(i + 1) % n]

            a = current - prev_vertex
            b = next_vertex - current
            cross = float(a[0] * b[1] - a[1] * b[0])
            scale = float(np.hypot(*a) * np.hypot(*b))

            if abs(cross) <= COLLINEAR_EPSILON * scale:
                del vertices[i]
                changed = True
                break

    if not vertices:
        return np.empty((0, 2), dtype=np.float64)
    return np.array(vertices, dtype=np.float64)
