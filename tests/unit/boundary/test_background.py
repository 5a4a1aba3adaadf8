"""
Unit tests for stagbc/boundary/rules/background.py

Tests the background strain rates, the default face velocities, the shear
ghost values, open-boundary handling and grid stretching.
"""

import pytest

import numpy as np

from stagbc.boundary.fields import ConstraintFields
from stagbc.boundary.rules import BackgroundStrain, BackgroundVelocityRule, StepContext, stretch_grid
from stagbc.boundary.schedule import Schedule
from stagbc.config import BCConfig
from stagbc.grid.staggered import DOFKind

CTX = StepContext(time=0.0, dt=1.0)


def _extension(rate=1e-2, **kwargs):
    return BackgroundVelocityRule(BackgroundStrain(exx=Schedule.constant(rate)), **kwargs)


class TestBackgroundStrain:
    def test_incompressible_rates(self):
        rates = BackgroundStrain(exx=Schedule.constant(2.0), eyy=Schedule.constant(1.0)).rates(0.0)
        assert rates.ezz == -3.0

    def test_shear_doubled(self):
        strain = BackgroundStrain(
            exy=Schedule.constant(1.0), exz=Schedule.constant(2.0), eyz=Schedule.constant(3.0)
        )
        rates = strain.rates(0.0)

        assert (rates.exy, rates.exz, rates.eyz) == (2.0, 4.0, 6.0)

    def test_scheduled(self):
        strain = BackgroundStrain(exx=Schedule((1.0, -1.0), (5.0,)))

        assert strain.rates(0.0).exx == 1.0
        assert strain.rates(6.0).exx == -1.0

    def test_missing_rates_are_zero(self):
        assert BackgroundStrain().rates(0.0) == (0.0, 0.0, 0.0, 0.0, 0.0, 0.0)


class TestFaceVelocities:
    def test_relative_to_reference_point(self, serial_grid):
        rule = BackgroundVelocityRule(
            BackgroundStrain(exx=Schedule.constant(1.0), ref_point=(1.0, 0.0, 0.0))
        )
        vel = rule.face_velocities(serial_grid, rule.strain.rates(0.0))

        assert vel["vbx"] == -1.0
        assert vel["vex"] == 3.0
        assert vel["vbz"] == 3.0
        assert vel["vez"] == 0.0

    def test_open_top_wins_over_open_bottom(self, serial_grid):
        rule = _extension(1.0, open_top=True, open_bot=True)
        vel = rule.face_velocities(serial_grid, rule.strain.rates(0.0))

        assert vel["vez"] == 0.0
        assert vel["vbz"] == 3.0


class TestBackgroundVelocityRule:
    def test_normal_velocities(self, serial_sub):
        patch = _extension()(serial_sub, ConstraintFields(serial_sub).snapshot(), CTX)
        vx = patch.values(DOFKind.VX)
        vz = patch.values(DOFKind.VZ)

        np.testing.assert_allclose(vx[1:-1, 1:-1, 1], 0.0)
        np.testing.assert_allclose(vx[1:-1, 1:-1, -2], 0.04)
        np.testing.assert_allclose(vz[1, 1:-1, 1:-1], 0.03)
        np.testing.assert_allclose(vz[-2, 1:-1, 1:-1], 0.0)
        assert np.isnan(vx[1:-1, 1:-1, 2:-2]).all()

    def test_y_faces(self, serial_sub):
        rule = BackgroundVelocityRule(BackgroundStrain(eyy=Schedule.constant(1.0)))
        vy = rule(serial_sub, ConstraintFields(serial_sub).snapshot(), CTX).values(DOFKind.VY)

        np.testing.assert_allclose(vy[1:-1, 1, 1:-1], 0.0)
        np.testing.assert_allclose(vy[1:-1, -2, 1:-1], 2.0)

    def test_open_bottom(self, serial_sub):
        patch = _extension(open_bot=True)(serial_sub, ConstraintFields(serial_sub).snapshot(), CTX)
        vz = patch.values(DOFKind.VZ)

        assert np.isnan(vz[1]).all()
        np.testing.assert_allclose(vz[-2, 1:-1, 1:-1], 0.0)

    def test_open_top(self, serial_sub):
        patch = _extension(open_top=True)(serial_sub, ConstraintFields(serial_sub).snapshot(), CTX)
        assert np.isnan(patch.values(DOFKind.VZ)[-2]).all()

    def test_skipped_behind_constrained_pressure(self, serial_sub):
        """No normal velocity where the pressure ghost across the face is fixed."""
        fields = ConstraintFields(serial_sub)
        fields[DOFKind.P].values[:, :, 0] = 0.0
        fields[DOFKind.P].values[-1] = 0.0

        patch = _extension()(serial_sub, fields.snapshot(), CTX)

        assert np.isnan(patch.values(DOFKind.VX)[:, :, 1]).all()
        np.testing.assert_allclose(patch.values(DOFKind.VX)[1:-1, 1:-1, -2], 0.04)
        assert np.isnan(patch.values(DOFKind.VZ)[-2]).all()

    def test_xz_shear_ghosts(self, serial_sub):
        """Ghost values below the bottom extrapolate the shear profile."""
        rule = BackgroundVelocityRule(BackgroundStrain(exz=Schedule.constant(0.5)))
        patch = rule(serial_sub, ConstraintFields(serial_sub).snapshot(), CTX)
        vx = patch.values(DOFKind.VX)

        # Bottom row center z = -2.5, ghost center z = -3.5, doubled rate 1.0
        np.testing.assert_allclose(vx[0, 1:-1, 1:-1], -3.0)
        # Top row center z = -0.5, ghost center z = 0.5
        np.testing.assert_allclose(vx[-1, 1:-1, 1:-1], 0.0)
        # Face values carry the shear term
        np.testing.assert_allclose(vx[1:-1, 1, 1], [-2.5, -1.5, -0.5])
        # Vertical velocity vanishes on the first and last cell columns
        vz = patch.values(DOFKind.VZ)
        np.testing.assert_allclose(vz[1:-1, 1:-1, 1], 0.0)
        np.testing.assert_allclose(vz[1:-1, 1:-1, -2], 0.0)

    def test_xy_shear_ghosts(self, serial_sub):
        rule = BackgroundVelocityRule(BackgroundStrain(exy=Schedule.constant(0.5)))
        patch = rule(serial_sub, ConstraintFields(serial_sub).snapshot(), CTX)
        vx = patch.values(DOFKind.VX)

        # Front row center y = 0.5, ghost y = -0.5
        np.testing.assert_allclose(vx[1:-1, 0, 1:-1], 0.0)
        # Back row center y = 1.5, ghost y = 2.5
        np.testing.assert_allclose(vx[1:-1, -1, 1:-1], 2.0)
        vy = patch.values(DOFKind.VY)
        np.testing.assert_allclose(vy[1:-1, 1:-1, 1], 0.0)

    def test_from_config(self):
        config = BCConfig(background={"exx": 1e-15, "ref_point": [1.0, 2.0, 3.0]}, open_top=True)
        rule = BackgroundVelocityRule.from_config(config)

        assert rule.strain.exx.value(0.0) == 1e-15
        assert rule.strain.eyy is None
        assert rule.strain.ref_point == (1.0, 2.0, 3.0)
        assert rule.open_top


class TestStretchGrid:
    def test_stretch_about_reference(self, serial_grid):
        strain = BackgroundStrain(exx=Schedule.constant(0.1), ref_point=(2.0, 0.0, 0.0))
        grid = stretch_grid(serial_grid, strain, t=0.0, dt=1.0)

        np.testing.assert_allclose(grid.x.nodes, [-0.2, 0.9, 2.0, 3.1, 4.2])
        np.testing.assert_allclose(grid.z.nodes, serial_grid.z.nodes - 0.1 * serial_grid.z.nodes)
        np.testing.assert_allclose(grid.y.nodes, serial_grid.y.nodes)

    def test_no_strain(self, serial_grid):
        assert stretch_grid(serial_grid, BackgroundStrain(), t=0.0, dt=1.0) is serial_grid


@pytest.mark.unit
def test_shear_only_changes_no_normal_face(serial_sub):
    """Pure shear leaves the z-face normal velocity at zero."""
    rule = BackgroundVelocityRule(BackgroundStrain(eyz=Schedule.constant(1.0)))
    vz = rule(serial_sub, ConstraintFields(serial_sub).snapshot(), CTX).values(DOFKind.VZ)

    np.testing.assert_allclose(vz[1, 1:-1, 1:-1], 0.0)
