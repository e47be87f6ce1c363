"""
Walled Templates
================

Wall-constrained footprints for area-of-effect templates (circle, cone,
rectangle, ray) in a 2D scene of opaque wall segments.
"""

from walled_templates.api import compute_shape, build_shape_plan
from walled_templates.templates import (
    Template,
    ShapeKind,
    ValidationError,
    InvalidParameterError,
)
from walled_templates.settings import SceneSettings, is_wall_constrained
from walled_templates.walls import (
    BoundarySegment,
    Bounds,
    SegmentIndex,
    WallIndex,
    WallIndexUnavailable,
    WallSense,
)
from walled_templates.sweep import SweepConfiguration, compute_sweep_polygon
from walled_templates.geometry import shift_to_local, shift_to_world, rectangle_corners
from walled_templates.targeting import TokenShape, find_targets
from walled_templates.debug import (
    format_angle,
    format_point,
    format_polygon,
    setup_debug_logging,
    disable_debug_logging,
)

__all__ = [
    # Main API
    'compute_shape',
    'build_shape_plan',
    'Template',
    'ShapeKind',
    'SceneSettings',
    'is_wall_constrained',
    'ValidationError',
    'InvalidParameterError',
    # Walls
    'BoundarySegment',
    'Bounds',
    'SegmentIndex',
    'WallIndex',
    'WallIndexUnavailable',
    'WallSense',
    # Sweep engine
    'SweepConfiguration',
    'compute_sweep_polygon',
    # Geometry
    'shift_to_local',
    'shift_to_world',
    'rectangle_corners',
    # Targeting
    'TokenShape',
    'find_targets',
    # Debug utilities
    'format_angle',
    'format_point',
    'format_polygon',
    'setup_debug_logging',
    'disable_debug_logging',
]
__version__ = '0.1.0'
