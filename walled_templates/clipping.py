"""
Polygon operations used on footprints: validity, bounds, area, containment
and clipping against convex regions.
"""

from typing import List, Tuple

import numpy as np
from numpy.typing import NDArray

HALFPLANE_EPSILON = 1e-9


def is_valid_polygon(polygon: NDArray[np.float64]) -> bool:
    """
    Check if polygon has sufficient vertices to be valid.

    Parameters:
        polygon: Polygon vertices (N, 2)

    Returns:
        True if polygon has at least 3 vertices
    """
    return polygon.shape[0] >= 3


def compute_bounding_box(
    polygon: NDArray[np.float64]
) -> Tuple[NDArray[np.float64], NDArray[np.float64]]:
    """
    Compute axis-aligned bounding box for polygon.

    Parameters:
        polygon: Polygon vertices (N, 2)

    Returns:
        Tuple of (min_point, max_point), each shape (2,)
    """
    if polygon.shape[0] == 0:
        raise ValueError("polygon must contain at least one vertex")
    min_point = np.min(polygon, axis=0).astype(np.float64)
    max_point = np.max(polygon, axis=0).astype(np.float64)
    return min_point, max_point


def signed_area(polygon: NDArray[np.float64]) -> float:
    """
    Shoelace area of a polygon.

    Positive for counter-clockwise winding in a y-up frame (which is
    clockwise on screen, where y grows downward).
    """
    if polygon.shape[0] < 3:
        return 0.0
    x = polygon[:, 0]
    y = polygon[:, 1]
    return 0.5 * float(np.dot(x, np.roll(y, -1)) - np.dot(np.roll(x, -1), y))


def polygon_area(polygon: NDArray[np.float64]) -> float:
    """Unsigned area of a polygon."""
    return abs(signed_area(polygon))


def point_in_polygon(point: Tuple[float, float], polygon: NDArray[np.float64]) -> bool:
    """Ray-casting point-in-polygon test. Points on an edge may go either way."""
    if not is_valid_polygon(polygon):
        return False
    x, y = point
    inside = False
    n = polygon.shape[0]
    j = n - 1
    for i in range(n):
        xi, yi = polygon[i]
        xj, yj = polygon[j]
        if ((yi > y) != (yj > y)) and (x < (xj - xi) * (y - yi) / (yj - yi) + xi):
            inside = not inside
        j = i
    return inside


def clip_polygon_halfplane(
    polygon: NDArray[np.float64],
    line_point: NDArray[np.float64],
    line_direction: NDArray[np.float64],
    keep_left: bool = True
) -> NDArray[np.float64]:
    """
    Clip polygon against a half-plane bounded by a line.

    Implements Sutherland-Hodgman algorithm for a single half-plane.

    Parameters:
        polygon: Polygon vertices (N, 2)
        line_point: Any point on the boundary line
        line_direction: Direction vector of the boundary line
        keep_left: If True, keep points to the left of the line direction
                   (counter-clockwise side in a y-up frame)

    Returns:
        Clipped polygon vertices (M, 2), may be empty array
    """
    if polygon.shape[0] == 0:
        return polygon.copy()

    # Left normal of (dx, dy) is (-dy, dx)
    normal = np.array([-line_direction[1], line_direction[0]], dtype=np.float64)
    if not keep_left:
        normal = -normal

    def signed_distance(point: NDArray[np.float64]) -> float:
        return float(np.dot(point - line_point, normal))

    def compute_intersection(p1: NDArray[np.float64], p2: NDArray[np.float64]) -> NDArray[np.float64]:
        d1 = signed_distance(p1)
        d2 = signed_distance(p2)
        t = d1 / (d1 - d2)
        return p1 + t * (p2 - p1)

    output_vertices: List[NDArray[np.float64]] = []
    n = polygon.shape[0]

    for i in range(n):
        current = polygon[i]
        next_vertex = polygon[(i + 1) % n]

        current_inside = signed_distance(current) >= -HALFPLANE_EPSILON
        next_inside = signed_distance(next_vertex) >= -HALFPLANE_EPSILON

        if current_inside:
            output_vertices.append(current.copy())
            if not next_inside:
                output_vertices.append(compute_intersection(current, next_vertex))
        elif next_inside:
            output_vertices.append(compute_intersection(current, next_vertex))

    if len(output_vertices) == 0:
        return np.empty((0, 2), dtype=np.float64)

    return np.array(output_vertices, dtype=np.float64)


def clip_polygon_to_convex(
    polygon: NDArray[np.float64],
    clip_polygon: NDArray[np.float64]
) -> NDArray[np.float64]:
    """
    Clip an arbitrary polygon against a convex polygon.

    The subject may be concave (wall-constrained footprints usually are);
    the result then can contain zero-width bridges, which do not affect
    its area.

    Parameters:
        polygon: Subject polygon vertices (N, 2)
        clip_polygon: Convex clip polygon vertices (K, 2), any winding

    Returns:
        Clipped polygon vertices (M, 2), empty when there is no overlap
    """
    if not is_valid_polygon(polygon) or not is_valid_polygon(clip_polygon):
        return np.empty((0, 2), dtype=np.float64)

    if signed_area(clip_polygon) < 0:
        clip_polygon = clip_polygon[::-1]

    result = polygon
    n = clip_polygon.shape[0]
    for i in range(n):
        start = clip_polygon[i]
        end = clip_polygon[(i + 1) % n]
        result = clip_polygon_halfplane(result, start, end - start, keep_left=True)
        if result.shape[0] < 3:
            return np.empty((0, 2), dtype=np.float64)

    return result
