"""
Tests for the radial sweep engine.

- SweepConfiguration validation and sector geometry
- sector_sample_offsets()
- compute_sweep_polygon(): empty scenes, blocking, limited walls,
  synthetic segments and failure propagation
"""

import logging
import math

import numpy as np
import pytest
from numpy.testing import assert_allclose

from walled_templates.clipping import polygon_area
from walled_templates.geometry import intersect_ray_segments
from walled_templates.sweep import (
    SweepConfiguration,
    compute_sweep_polygon,
    sector_sample_offsets,
)
from walled_templates.walls import (
    BoundarySegment,
    SegmentIndex,
    WallIndexUnavailable,
    WallSense,
)


def radii(polygon: np.ndarray, origin=(0.0, 0.0)) -> np.ndarray:
    """Distance of each vertex from origin."""
    return np.hypot(polygon[:, 0] - origin[0], polygon[:, 1] - origin[1])


def reach(polygon: np.ndarray, angle: float, origin=(0.0, 0.0)) -> float:
    """Distance from origin to the polygon boundary along `angle`."""
    distances = intersect_ray_segments(origin, angle, polygon, np.roll(polygon, -1, axis=0))
    return float(distances.min())


class UnavailableIndex:
    """Wall index of a scene that is not ready."""

    def query_near(self, bounds):
        raise WallIndexUnavailable("walls not loaded")


# =============================================================================
# Configuration
# =============================================================================

class TestSweepConfiguration:
    """Tests for SweepConfiguration validation and derived angles."""

    def test_negative_radius_raises(self):
        with pytest.raises(ValueError):
            SweepConfiguration(radius=-1.0)

    def test_angle_out_of_range_raises(self):
        with pytest.raises(ValueError):
            SweepConfiguration(angle=400.0, radius=1.0)

    def test_density_too_small_raises(self):
        with pytest.raises(ValueError):
            SweepConfiguration(radius=1.0, density=2)

    def test_tmp_walls_stored_as_tuple(self):
        config = SweepConfiguration(radius=1.0, tmp_walls=[BoundarySegment((0, 0), (1, 0))])
        assert isinstance(config.tmp_walls, tuple)

    def test_full_circle_has_no_restriction(self):
        config = SweepConfiguration(radius=1.0)
        assert not config.has_angle_restriction
        assert config.sector_start == 0.0

    def test_rotation_zero_points_south(self):
        config = SweepConfiguration(angle=90.0, radius=1.0, rotation=0.0)
        assert config.center_angle == pytest.approx(math.pi / 2)

    def test_rotation_minus_ninety_points_east(self):
        config = SweepConfiguration(angle=90.0, radius=1.0, rotation=-90.0)
        assert config.center_angle == pytest.approx(0.0)
        assert config.sector_start == pytest.approx(7 * math.pi / 4)
        assert config.sector_width == pytest.approx(math.pi / 2)


class TestSectorSampleOffsets:
    """Tests for sector_sample_offsets()."""

    def test_full_circle_grid(self):
        offsets = sector_sample_offsets(0.0, 2 * math.pi, 4)
        assert offsets == pytest.approx([0.0, math.pi / 2, math.pi, 3 * math.pi / 2])

    def test_sector_includes_bounds_and_inner_grid(self):
        offsets = sector_sample_offsets(7 * math.pi / 4, math.pi / 2, 4)
        assert offsets == pytest.approx([0.0, math.pi / 4, math.pi / 2])

    def test_offsets_sorted_within_width(self):
        offsets = sector_sample_offsets(1.0, 1.5, 60)
        assert offsets == sorted(offsets)
        assert offsets[0] == 0.0
        assert offsets[-1] == pytest.approx(1.5)


# =============================================================================
# Sweep
# =============================================================================

class TestComputeSweepEmpty:
    """Sweeps without blocking segments."""

    def test_zero_radius_is_empty(self):
        result = compute_sweep_polygon((0.0, 0.0), SweepConfiguration(radius=0.0))
        assert result.shape == (0, 2)

    def test_zero_angle_is_empty(self):
        result = compute_sweep_polygon((0.0, 0.0), SweepConfiguration(angle=0.0, radius=5.0))
        assert result.shape == (0, 2)

    def test_full_circle_no_walls(self):
        result = compute_sweep_polygon((0.0, 0.0), SweepConfiguration(radius=10.0, density=60))
        assert result.shape == (60, 2)
        assert_allclose(radii(result), 10.0)

    def test_full_circle_offset_origin(self):
        origin = (100.0, -50.0)
        result = compute_sweep_polygon(origin, SweepConfiguration(radius=10.0))
        assert_allclose(radii(result, origin), 10.0)

    def test_vertices_in_ascending_angle_order(self):
        result = compute_sweep_polygon((0.0, 0.0), SweepConfiguration(radius=10.0))
        angles = np.mod(np.arctan2(result[:, 1], result[:, 0]), 2 * np.pi)
        assert np.all(np.diff(angles) > 0)

    def test_sector_starts_at_origin(self):
        config = SweepConfiguration(angle=90.0, radius=10.0, rotation=-90.0, density=60)
        result = compute_sweep_polygon((0.0, 0.0), config)
        assert_allclose(result[0], [0.0, 0.0])
        # 15 grid samples inside ±45° plus both bounds
        assert result.shape == (18, 2)
        assert_allclose(radii(result[1:]), 10.0)
        angles = np.arctan2(result[1:, 1], result[1:, 0])
        assert np.all(np.abs(angles) <= math.pi / 4 + 1e-9)
        assert angles[0] == pytest.approx(-math.pi / 4)
        assert angles[-1] == pytest.approx(math.pi / 4)

    def test_empty_index_same_as_no_index(self):
        config = SweepConfiguration(radius=7.0)
        assert_allclose(
            compute_sweep_polygon((1.0, 2.0), config, SegmentIndex()),
            compute_sweep_polygon((1.0, 2.0), config),
        )


class TestComputeSweepWalls:
    """Sweeps against real and synthetic segments."""

    def test_wall_blocks_circle(self):
        walls = SegmentIndex.from_coordinates([(5, -20, 5, 20)])
        result = compute_sweep_polygon((0.0, 0.0), SweepConfiguration(radius=10.0), walls)
        assert np.all(result[:, 0] <= 5.0 + 1e-9)
        assert np.all(radii(result) <= 10.0 + 1e-9)
        assert reach(result, 0.0) == pytest.approx(5.0)

    def test_arc_meets_wall_exactly(self):
        """The sweep samples where the wall crosses the circle."""
        walls = SegmentIndex.from_coordinates([(5, -20, 5, 20)])
        result = compute_sweep_polygon((0.0, 0.0), SweepConfiguration(radius=10.0), walls)
        corner = [5.0, 10.0 * math.sin(math.pi / 3)]
        assert np.any(np.all(np.abs(result - corner) < 1e-6, axis=1))

    def test_nearer_wall_wins(self):
        walls = SegmentIndex.from_coordinates([(7, -1, 7, 1), (4, -1, 4, 1)])
        result = compute_sweep_polygon((0.0, 0.0), SweepConfiguration(radius=10.0), walls)
        assert reach(result, 0.0) == pytest.approx(4.0)

    def test_wall_beyond_radius_ignored(self):
        walls = SegmentIndex.from_coordinates([(50, -1, 50, 1)])
        result = compute_sweep_polygon((0.0, 0.0), SweepConfiguration(radius=10.0), walls)
        assert_allclose(radii(result), 10.0)

    def test_none_sense_wall_ignored(self):
        walls = SegmentIndex.from_coordinates([(5, -20, 5, 20)], sense=WallSense.NONE)
        result = compute_sweep_polygon((0.0, 0.0), SweepConfiguration(radius=10.0), walls)
        assert_allclose(radii(result), 10.0)

    def test_single_limited_wall_seen_through(self):
        walls = SegmentIndex.from_coordinates([(3, -20, 3, 20)], sense=WallSense.LIMITED)
        result = compute_sweep_polygon((0.0, 0.0), SweepConfiguration(radius=10.0), walls)
        assert reach(result, 0.0) == pytest.approx(10.0)

    def test_second_limited_wall_blocks(self):
        walls = SegmentIndex.from_coordinates(
            [(3, -20, 3, 20), (6, -20, 6, 20)], sense=WallSense.LIMITED
        )
        result = compute_sweep_polygon((0.0, 0.0), SweepConfiguration(radius=10.0), walls)
        assert reach(result, 0.0) == pytest.approx(6.0)

    def test_synthetic_segment_blocks(self):
        chord = BoundarySegment((4, -20), (4, 20))
        config = SweepConfiguration(radius=10.0, tmp_walls=(chord,))
        result = compute_sweep_polygon((0.0, 0.0), config)
        assert np.all(result[:, 0] <= 4.0 + 1e-9)

    def test_wall_starting_at_origin_does_not_block(self):
        config = SweepConfiguration(radius=10.0)
        walls = SegmentIndex.from_coordinates([(0, 0, 10, 0)])
        result = compute_sweep_polygon((0.0, 0.0), config, walls)
        empty = compute_sweep_polygon((0.0, 0.0), config)
        assert_allclose(radii(result), 10.0)
        assert polygon_area(result) == pytest.approx(polygon_area(empty))

    def test_wall_through_origin_does_not_block(self):
        walls = SegmentIndex.from_coordinates([(-20, 0, 20, 0)])
        result = compute_sweep_polygon((0.0, 0.0), SweepConfiguration(radius=10.0), walls)
        assert_allclose(radii(result), 10.0)

    def test_room_corner(self):
        walls = SegmentIndex.from_coordinates([(0, 0, 20, 0), (0, 0, 0, 20)])
        result = compute_sweep_polygon((0.0, 0.0), SweepConfiguration(radius=10.0), walls)
        assert reach(result, math.pi / 4) == pytest.approx(10.0, rel=1e-2)
        assert reach(result, 5 * math.pi / 4) == pytest.approx(10.0, rel=1e-2)

    def test_sector_facing_away_from_wall(self):
        config = SweepConfiguration(angle=90.0, radius=10.0, rotation=90.0)
        walls = SegmentIndex.from_coordinates([(0, 0, 10, 0)])
        assert_allclose(
            compute_sweep_polygon((0.0, 0.0), config, walls),
            compute_sweep_polygon((0.0, 0.0), config),
        )

    def test_unavailable_index_propagates(self):
        with pytest.raises(WallIndexUnavailable):
            compute_sweep_polygon((0.0, 0.0), SweepConfiguration(radius=10.0), UnavailableIndex())

    def test_debug_logs_sweep(self, caplog):
        config = SweepConfiguration(radius=10.0, debug=True)
        with caplog.at_level(logging.DEBUG, logger="walled_templates"):
            compute_sweep_polygon((0.0, 0.0), config)
        messages = [r.getMessage() for r in caplog.records]
        assert any(m.startswith("sweep origin") for m in messages)
        assert any("vertices" in m for m in messages)
