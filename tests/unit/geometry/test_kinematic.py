"""
Unit tests for stagbc/geometry/kinematic.py

Tests pose interpolation along the path, the world-space polygon and the
velocity of points carried by the block.
"""

import pytest

import numpy as np

from stagbc.geometry.kinematic import KinematicBlock
from stagbc.geometry.primitives import Pose

SQUARE = [(-1.0, -1.0), (1.0, -1.0), (1.0, 1.0), (-1.0, 1.0)]


@pytest.fixture
def sliding_block():
    """Unit-speed translation along x over t in [0, 10]."""
    return KinematicBlock(
        times=[0.0, 10.0],
        path=[(0.0, 0.0), (10.0, 0.0)],
        theta=[0.0, 0.0],
        polygon=SQUARE,
        bot=-1.0,
        top=1.0,
    )


@pytest.fixture
def spinning_block():
    """Quarter turn about the origin over t in [0, 1]."""
    return KinematicBlock(
        times=[0.0, 1.0],
        path=[(0.0, 0.0), (0.0, 0.0)],
        theta=[0.0, np.pi / 2],
        polygon=SQUARE,
        bot=-1.0,
        top=1.0,
    )


class TestPose:
    """Test path interpolation."""

    def test_interpolated(self, sliding_block):
        assert sliding_block.pose(5.0) == Pose(5.0, 0.0, 0.0)

    def test_end_points(self, sliding_block):
        assert sliding_block.pose(0.0) == Pose(0.0, 0.0, 0.0)
        assert sliding_block.pose(10.0) == Pose(10.0, 0.0, 0.0)

    def test_outside_time_interval(self, sliding_block):
        assert sliding_block.pose(-0.1) is None
        assert sliding_block.pose(10.1) is None

    def test_multi_segment(self):
        block = KinematicBlock(
            times=[0.0, 1.0, 3.0],
            path=[(0.0, 0.0), (1.0, 0.0), (1.0, 4.0)],
            theta=[0.0, 0.0, 0.0],
            polygon=SQUARE,
            bot=0.0,
            top=1.0,
        )
        pose = block.pose(2.0)
        assert pose.x == pytest.approx(1.0)
        assert pose.y == pytest.approx(2.0)

    def test_polygon_at(self, sliding_block):
        polygon = sliding_block.polygon_at(Pose(5.0, 0.0, 0.0))
        np.testing.assert_allclose(polygon, np.array(SQUARE) + [5.0, 0.0])


class TestVelocity:
    """Test point velocities over one step."""

    def test_translation(self, sliding_block):
        inside, vx, vy = sliding_block.velocity(np.array([0.0, 5.0]), 0.0, 0.0, t=0.0, dt=1.0)

        np.testing.assert_array_equal(inside, [True, False])
        np.testing.assert_allclose(vx, [1.0, 1.0])
        np.testing.assert_allclose(vy, [0.0, 0.0], atol=1e-14)

    def test_vertical_extent(self, sliding_block):
        inside, _, _ = sliding_block.velocity(0.0, 0.0, np.array([-1.0, 0.0, 1.5]), t=0.0, dt=1.0)
        np.testing.assert_array_equal(inside, [True, True, False])

    def test_rotation(self, spinning_block):
        """A quarter turn over a unit step moves (1, 0) to (0, 1)."""
        _, vx, vy = spinning_block.velocity(1.0, 0.0, 0.0, t=0.0, dt=1.0)

        assert float(vx) == pytest.approx(-1.0)
        assert float(vy) == pytest.approx(1.0)

    def test_step_leaves_path(self, sliding_block):
        """No velocity when the step end lies beyond the last path time."""
        assert sliding_block.velocity(0.0, 0.0, 0.0, t=9.5, dt=1.0) is None


class TestValidation:
    def test_single_point(self):
        with pytest.raises(ValueError, match="at least two"):
            KinematicBlock([0.0], [(0.0, 0.0)], [0.0], SQUARE, 0.0, 1.0)

    def test_descending_times(self):
        with pytest.raises(ValueError, match="strictly ascending"):
            KinematicBlock([1.0, 0.0], [(0.0, 0.0), (1.0, 0.0)], [0.0, 0.0], SQUARE, 0.0, 1.0)

    def test_length_mismatch(self):
        with pytest.raises(ValueError, match="matching lengths"):
            KinematicBlock([0.0, 1.0], [(0.0, 0.0)], [0.0, 0.0], SQUARE, 0.0, 1.0)
