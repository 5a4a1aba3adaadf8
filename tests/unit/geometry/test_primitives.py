"""
Unit tests for stagbc/geometry/primitives.py

Tests the vectorized region tests:
- polygon bounding box and point-in-polygon with boundary tolerance
- inclusive box test
- finite cylinder with uniform and parabolic profile
- planar rigid transform
"""

import pytest

import numpy as np

from stagbc.geometry.primitives import (
    Pose,
    cylinder_profile,
    in_box,
    in_polygon,
    polygon_box,
    rotate_displace_2d,
)

SQUARE = [(0.0, 0.0), (1.0, 0.0), (1.0, 1.0), (0.0, 1.0)]


# =============================================================================
# Polygon
# =============================================================================


@pytest.mark.unit
def test_polygon_box_tolerance():
    """The absolute tolerance scales with the largest box extent."""
    box, atol = polygon_box([(0, 0), (2, 0), (2, 1), (0, 1)], rtol=1e-6)

    np.testing.assert_allclose(box, [0.0, 2.0, 0.0, 1.0])
    assert atol == pytest.approx(2e-6)


@pytest.mark.unit
def test_in_polygon_inside_outside_edge():
    """Interior and edge points are inside, exterior points are not."""
    x = np.array([0.5, 1.5, 1.0, 0.0])
    y = np.array([0.5, 0.5, 0.5, 0.0])

    np.testing.assert_array_equal(in_polygon(x, y, SQUARE), [True, False, True, True])


@pytest.mark.unit
def test_in_polygon_orientation_independent():
    """Clockwise and counter-clockwise vertex order give the same result."""
    x, y = np.meshgrid(np.linspace(-0.5, 1.5, 9), np.linspace(-0.5, 1.5, 9))

    np.testing.assert_array_equal(in_polygon(x, y, SQUARE), in_polygon(x, y, SQUARE[::-1]))


@pytest.mark.unit
def test_in_polygon_concave():
    """Points in the notch of an L-shaped polygon are outside."""
    ell = [(0, 0), (2, 0), (2, 1), (1, 1), (1, 2), (0, 2)]

    result = in_polygon(np.array([0.5, 1.5, 1.5]), np.array([1.5, 0.5, 1.5]), ell)
    np.testing.assert_array_equal(result, [True, True, False])


@pytest.mark.unit
def test_in_polygon_broadcasts():
    """Coordinate arrays broadcast against each other."""
    x = np.array([0.25, 0.75, 1.25]).reshape(1, 3)
    y = np.array([0.5, 2.0]).reshape(2, 1)

    result = in_polygon(x, y, SQUARE)
    assert result.shape == (2, 3)
    np.testing.assert_array_equal(result, [[True, True, False], [False, False, False]])



@pytest.mark.unit
def test_in_polygon_nearly_flat_edge():
    """An edge rising by 1e-15 is classified without dividing by zero."""
    quad = [(0.0, 0.0), (2.0, 1e-15), (2.0, 1.0), (0.0, 1.0)]
    x = np.array([1.0, 3.0, 1.0, 1.0])
    y = np.array([0.5, 0.5, -0.5, 1.5])

    with np.errstate(divide="raise", invalid="raise"):
        result = in_polygon(x, y, quad)
    np.testing.assert_array_equal(result, [True, False, False, False])


# =============================================================================
# Box and cylinder
# =============================================================================


@pytest.mark.unit
def test_in_box_inclusive():
    """Box bounds are inclusive on both sides."""
    inside = in_box((np.array([0.0, 1.0, 2.0]), 0.5, 0.5), (0.0, 0.0, 0.0), (1.0, 1.0, 1.0))
    np.testing.assert_array_equal(inside, [True, True, False])


class TestCylinderProfile:
    """Test finite cylinder containment and the radial profile factor."""

    base = (0.0, 0.0, 0.0)
    cap = (0.0, 0.0, 10.0)

    def test_axis_point(self):
        inside, factor = cylinder_profile(0.0, 0.0, 5.0, self.base, self.cap, 2.0)
        assert bool(inside)
        assert float(factor) == 1.0

    def test_parabolic_factor(self):
        """Half way to the mantle the parabolic factor is 1 - 0.5**2."""
        inside, factor = cylinder_profile(1.0, 0.0, 5.0, self.base, self.cap, 2.0, parabolic=True)
        assert bool(inside)
        assert float(factor) == pytest.approx(0.75)

    def test_uniform_factor_off_axis(self):
        _, factor = cylinder_profile(1.0, 0.0, 5.0, self.base, self.cap, 2.0)
        assert float(factor) == 1.0

    def test_outside_axially(self):
        """Points beyond either end cap are outside."""
        inside, _ = cylinder_profile(0.0, 0.0, np.array([-0.1, 10.1]), self.base, self.cap, 2.0)
        assert not inside.any()

    def test_outside_radially(self):
        inside, _ = cylinder_profile(np.array([2.0, 3.0]), 0.0, 5.0, self.base, self.cap, 2.0)
        np.testing.assert_array_equal(inside, [True, False])

    def test_oblique_axis(self):
        """Containment works for an axis not aligned with the grid."""
        inside, _ = cylinder_profile(
            np.array([1.0, 1.0]), np.array([1.0, -1.0]), 0.0, (0.0, 0.0, 0.0), (2.0, 2.0, 0.0), 0.5
        )
        np.testing.assert_array_equal(inside, [True, False])


# =============================================================================
# Rigid transform
# =============================================================================


@pytest.mark.unit
def test_rotate_displace_translation():
    x, y = rotate_displace_2d(np.array([0.0, 1.0]), np.array([0.0, 2.0]), Pose(0, 0, 0), Pose(3, -1, 0))

    np.testing.assert_allclose(x, [3.0, 4.0])
    np.testing.assert_allclose(y, [-1.0, 1.0])


@pytest.mark.unit
def test_rotate_displace_rotation_about_start_origin():
    """Rotation is about the start pose origin, followed by the translation."""
    x, y = rotate_displace_2d(2.0, 1.0, Pose(1, 1, 0), Pose(2, 1, np.pi / 2))

    assert float(x) == pytest.approx(2.0)
    assert float(y) == pytest.approx(2.0)
