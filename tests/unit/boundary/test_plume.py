"""
Unit tests for stagbc/boundary/rules/plume.py

Tests the bottom inflow profiles and the zero-net-flux outflow velocity.
"""

import pytest

import numpy as np

from stagbc.boundary.fields import ConstraintFields
from stagbc.boundary.rules import PlumeInflow, PlumeInflowRule
from stagbc.config import BCConfig
from stagbc.grid import StaggeredGrid
from stagbc.grid.staggered import DOFKind

# =============================================================================
# Profiles
# =============================================================================


class TestPoiseuille:
    plume = PlumeInflow(profile="Poiseuille", dimension="2D", center=(2.0,), radius=1.0, velocity=1.0)

    def test_outflow_velocity_2d(self, serial_grid):
        # Mean inflow 2/3 over a width of 2, balanced over the remaining width of 2
        assert self.plume.outflow_velocity(serial_grid) == pytest.approx(-2.0 / 3.0)

    def test_outflow_velocity_3d(self, serial_grid):
        plume = PlumeInflow("Poiseuille", "3D", (2.0, 1.0), radius=0.5, velocity=2.0)
        area_in = np.pi * 0.25
        expected = -1.0 * area_in / (8.0 - area_in)

        assert plume.outflow_velocity(serial_grid) == pytest.approx(expected)

    def test_area_fraction_scales_outflow(self, serial_grid):
        plume = PlumeInflow("Poiseuille", "2D", (2.0,), radius=1.0, velocity=1.0, area_fraction=0.5)
        assert plume.outflow_velocity(serial_grid) == pytest.approx(-1.0 / 3.0)

    def test_velocities(self):
        x = np.array([0.5, 1.5, 2.5, 3.5])
        v = self.plume.velocities(x, np.zeros_like(x), -2.0 / 3.0)

        np.testing.assert_allclose(v, [-2.0 / 3.0, 0.75, 0.75, -2.0 / 3.0])


class TestGaussian:
    def test_zero_net_flux_2d(self, serial_grid):
        plume = PlumeInflow("Gaussian", "2D", (1.5,), radius=0.4, velocity=1.0)
        v_out = plume.outflow_velocity(serial_grid)

        n = 4000
        x = (np.arange(n) + 0.5) * 4.0 / n
        v = plume.velocities(x, np.zeros_like(x), v_out)

        assert v_out < 0.0
        assert v.mean() == pytest.approx(0.0, abs=1e-6)

    def test_zero_net_flux_3d(self, serial_grid):
        plume = PlumeInflow("Gaussian", "3D", (2.0, 1.0), radius=0.3, velocity=1.0)
        v_out = plume.outflow_velocity(serial_grid)

        x = (np.arange(800) + 0.5) * 4.0 / 800
        y = (np.arange(400) + 0.5) * 2.0 / 400
        v = plume.velocities(x[None, :], y[:, None], v_out)

        assert v.shape == (400, 800)
        assert v.mean() == pytest.approx(0.0, abs=1e-6)

    def test_peak_at_axis(self):
        plume = PlumeInflow("Gaussian", "3D", (2.0, 1.0), radius=0.3, velocity=1.0)
        assert plume.velocities(np.array(2.0), np.array(1.0), -0.1) == pytest.approx(1.0)


# =============================================================================
# Rule
# =============================================================================


def _plume_config(**overrides):
    plume = {
        "type": "Inflow_Type",
        "velocity_profile": "Poiseuille",
        "inflow_velocity": 1.0,
        "dimension": "2D",
        "center": [2.0],
        "phase": 5,
        "temperature": 1600.0,
        "radius": 1.0,
        "mantle_phase": 4,
    }
    plume.update(overrides)
    return BCConfig(plume=plume, temperature={"bottom": 1300.0})


class TestPlumeInflowRule:
    def test_bottom_face_only(self, serial_sub, step):
        rule = PlumeInflowRule.from_config(_plume_config())
        patch = rule(serial_sub, ConstraintFields(serial_sub).snapshot(), step)

        mask = patch.mask(DOFKind.VZ)
        assert patch.count() == 8
        assert mask[1, 1:-1, 1:-1].all()
        assert not mask[2:].any()
        np.testing.assert_allclose(patch.values(DOFKind.VZ)[1, 1, 1:-1], [-2.0 / 3.0, 0.75, 0.75, -2.0 / 3.0])

    def test_bottom_face_not_owned(self, step):
        grid = StaggeredGrid.uniform([(0.0, 4.0), (0.0, 2.0), (-3.0, 0.0)], (4, 2, 4), (1, 1, 2))
        sub = grid.subgrid(1)
        rule = PlumeInflowRule.from_config(_plume_config())

        assert rule(sub, ConstraintFields(sub).snapshot(), step).count() == 0

    def test_permeable_plume_has_no_rule(self):
        config = _plume_config(type="Permeable_Type", velocity_profile=None, inflow_velocity=None)
        assert PlumeInflowRule.from_config(config) is None

    def test_from_config(self):
        plume = PlumeInflowRule.from_config(_plume_config(area_fraction=0.5)).plume

        assert plume.profile == "Poiseuille"
        assert plume.center == (2.0,)
        assert plume.area_fraction == 0.5
