"""
Debug logging helpers for sweep and shape computations.

All records go through the standard logging module under the
"walled_templates" logger hierarchy. Nothing is printed unless the host
configures logging or calls setup_debug_logging().
"""

import logging
import math
from typing import TYPE_CHECKING, Optional, Tuple

import numpy as np
from numpy.typing import NDArray

if TYPE_CHECKING:
    from walled_templates.sweep import SweepConfiguration

PACKAGE_LOGGER = "walled_templates"
MAX_LOGGED_VERTICES = 8

logger = logging.getLogger(__name__)

_debug_handler: Optional[logging.Handler] = None


def format_angle(angle_rad: float) -> str:
    """Format an angle given in radians as degrees."""
    return f"{math.degrees(angle_rad):.2f}°"


def format_point(point) -> str:
    """Format an (x, y) point with two decimals."""
    return f"({float(point[0]):.2f}, {float(point[1]):.2f})"


def format_polygon(polygon: NDArray[np.float64], max_vertices: int = MAX_LOGGED_VERTICES) -> str:
    """Format polygon vertices, eliding the middle of long polygons."""
    n = len(polygon)
    if n == 0:
        return "[]"
    if n <= max_vertices:
        return "[" + ", ".join(format_point(p) for p in polygon) + "]"
    head = max_vertices // 2
    tail = max_vertices - head
    shown = [format_point(p) for p in polygon[:head]]
    shown.append(f"... {n - max_vertices} more ...")
    shown.extend(format_point(p) for p in polygon[-tail:])
    return "[" + ", ".join(shown) + "]"


def log_sweep_config(origin: Tuple[float, float], config: "SweepConfiguration") -> None:
    """Log the inputs of one sweep."""
    logger.debug(
        "sweep origin %s radius %.4f angle %.2f rotation %.2f density %d tmp_walls %d",
        format_point(origin), config.radius, config.angle, config.rotation,
        config.density, len(config.tmp_walls)
    )
    for segment in config.tmp_walls:
        logger.debug("  tmp wall A: %s B: %s", format_point(segment.a), format_point(segment.b))


def log_sweep_result(polygon: NDArray[np.float64], n_segments: int, n_rays: int) -> None:
    """Log the outcome of one sweep."""
    logger.debug(
        "sweep cast %d rays against %d segments -> %d vertices %s",
        n_rays, n_segments, len(polygon), format_polygon(polygon)
    )


def setup_debug_logging(level: int = logging.DEBUG) -> logging.Handler:
    """
    Attach a stream handler to the package logger.

    Calling it again replaces the previous handler instead of stacking one.

    Returns:
        The installed handler
    """
    global _debug_handler
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if _debug_handler is not None:
        package_logger.removeHandler(_debug_handler)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s"))
    handler.setLevel(level)
    package_logger.addHandler(handler)
    package_logger.setLevel(level)
    _debug_handler = handler
    return handler


def disable_debug_logging() -> None:
    """Remove the handler installed by setup_debug_logging()."""
    global _debug_handler
    package_logger = logging.getLogger(PACKAGE_LOGGER)
    if _debug_handler is not None:
        package_logger.removeHandler(_debug_handler)
        _debug_handler = None
    package_logger.setLevel(logging.NOTSET)
