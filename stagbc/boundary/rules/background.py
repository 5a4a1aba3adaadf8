"""
Background deformation.

Scheduled strain rates about a fixed reference point define the default
velocity on every domain face. Normal rates obey incompressibility
(``ezz = -(exx + eyy)``); shear rates are doubled on evaluation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, NamedTuple

import numpy as np

from stagbc.boundary.fields import ConstraintPatch, is_free
from stagbc.grid.staggered import DOFKind

if TYPE_CHECKING:
    from collections.abc import Mapping

    from numpy.typing import NDArray

    from stagbc.boundary.schedule import Schedule
    from stagbc.config.core import BCConfig
    from stagbc.grid.staggered import StaggeredGrid, SubGrid

    from .base import StepContext


class StrainRates(NamedTuple):
    """Strain rates at one instant; shear components already doubled."""

    exx: float
    eyy: float
    ezz: float
    exy: float
    exz: float
    eyz: float


@dataclass(frozen=True)
class BackgroundStrain:
    """Scheduled background strain rates and their reference point (x, y, z)."""

    exx: Schedule | None = None
    eyy: Schedule | None = None
    exy: Schedule | None = None
    exz: Schedule | None = None
    eyz: Schedule | None = None
    ref_point: tuple[float, float, float] = (0.0, 0.0, 0.0)

    def rates(self, t: float) -> StrainRates:
        def value(schedule: Schedule | None) -> float:
            return schedule.value(t) if schedule is not None else 0.0

        exx, eyy = value(self.exx), value(self.eyy)
        return StrainRates(
            exx=exx,
            eyy=eyy,
            ezz=-(exx + eyy),
            exy=2.0 * value(self.exy),
            exz=2.0 * value(self.exz),
            eyz=2.0 * value(self.eyz),
        )


def stretch_grid(grid: StaggeredGrid, strain: BackgroundStrain, t: float, dt: float) -> StaggeredGrid:
    """
    Stretch the grid by the background normal strain over one step.

    Every node moves to ``x + E * dt * (x - x_ref)`` along each axis with a
    non-zero normal rate.
    """
    rates = strain.rates(t)
    eps = (rates.exx * dt, rates.eyy * dt, rates.ezz * dt)
    if not any(eps):
        return grid
    return grid.stretched(eps, strain.ref_point)


@dataclass(frozen=True)
class BackgroundVelocityRule:
    """
    Default face velocities from the background deformation.

    A normal-velocity default is skipped where the pressure ghost slot
    across that face is constrained. An open top removes the top normal
    velocity; otherwise an open bottom removes the bottom one.
    """

    strain: BackgroundStrain
    open_top: bool = False
    open_bot: bool = False
    name: str = "background"

    @classmethod
    def from_config(cls, config: BCConfig) -> BackgroundVelocityRule:
        bg = config.background
        if bg is None:
            strain = BackgroundStrain()
        else:
            strain = BackgroundStrain(
                *(
                    getattr(bg, name).to_schedule() if getattr(bg, name) is not None else None
                    for name in ("exx", "eyy", "exy", "exz", "eyz")
                ),
                ref_point=tuple(bg.ref_point),
            )
        return cls(strain=strain, open_top=config.open_top, open_bot=config.bottom_open)

    def face_velocities(self, grid: StaggeredGrid, rates: StrainRates) -> dict[str, float]:
        (bx, ex), (by, ey), (bz, ez) = grid.bounds
        rx, ry, rz = self.strain.ref_point
        vel = {
            "vbx": (bx - rx) * rates.exx,
            "vex": (ex - rx) * rates.exx,
            "vby": (by - ry) * rates.eyy,
            "vey": (ey - ry) * rates.eyy,
            "vbz": (bz - rz) * rates.ezz,
            "vez": (ez - rz) * rates.ezz,
        }
        if self.open_top:
            vel["vez"] = 0.0
        elif self.open_bot:
            vel["vbz"] = 0.0
        return vel

    def __call__(self, subgrid: SubGrid, fields: Mapping[DOFKind, NDArray], ctx: StepContext) -> ConstraintPatch:
        patch = ConstraintPatch(subgrid)
        grid = subgrid.grid
        rates = self.strain.rates(ctx.time)
        vel = self.face_velocities(grid, rates)
        rx, ry, rz = self.strain.ref_point
        mnx, mny, mnz = grid.num_cells
        pfree = is_free(fields[DOFKind.P])

        # X points
        kind = DOFKind.VX
        owned = subgrid.owned_mask(kind)
        kg, jg, ig = subgrid.global_index(kind)
        z, y, _ = subgrid.coords(kind)
        z_bot, z_top = np.roll(z, 1, axis=0), np.roll(z, -1, axis=0)
        y_frt, y_bck = np.roll(y, 1, axis=1), np.roll(y, -1, axis=1)
        shear = (z - rz) * rates.exz + (y - ry) * rates.exy

        patch.set(kind, owned & (ig == 0) & pfree[:, :, :1], vel["vbx"] + shear)
        patch.set(kind, owned & (ig == mnx) & pfree[:, :, -1:], vel["vex"] + shear)
        if rates.exz != 0.0:
            # Ghost slot below the bottom / above the top row
            src = owned & (kg == 0)
            ghost = _shift((z - rz) * rates.exz + (z_bot - z) * rates.exz / 2.0, src, -1, 0)
            patch.set(kind, np.roll(src, -1, axis=0), ghost)
            src = owned & (kg == mnz - 1)
            ghost = _shift((z - rz) * rates.exz + (z_top - z) * rates.exz / 2.0, src, 1, 0)
            patch.set(kind, np.roll(src, 1, axis=0), ghost)
        if rates.exy != 0.0:
            src = owned & (jg == 0)
            ghost = _shift((y - ry) * rates.exy + (y_frt - y) * rates.exy / 2.0, src, -1, 1)
            patch.set(kind, np.roll(src, -1, axis=1), ghost)
            src = owned & (jg == mny - 1)
            ghost = _shift((y - ry) * rates.exy + (y_bck - y) * rates.exy / 2.0, src, 1, 1)
            patch.set(kind, np.roll(src, 1, axis=1), ghost)

        # Y points
        kind = DOFKind.VY
        owned = subgrid.owned_mask(kind)
        kg, jg, ig = subgrid.global_index(kind)
        z, _, _ = subgrid.coords(kind)
        z_bot, z_top = np.roll(z, 1, axis=0), np.roll(z, -1, axis=0)
        shear = (z - rz) * rates.eyz

        patch.set(kind, owned & (jg == 0) & pfree[:, :1, :], vel["vby"] + shear)
        patch.set(kind, owned & (jg == mny) & pfree[:, -1:, :], vel["vey"] + shear)
        if rates.exy != 0.0:
            patch.set(kind, owned & ((ig == 0) | (ig == mnx - 1)), 0.0)
        if rates.eyz != 0.0:
            src = owned & (kg == 0)
            ghost = _shift((z - rz) * rates.eyz + (z_bot - z) * rates.eyz / 2.0, src, -1, 0)
            patch.set(kind, np.roll(src, -1, axis=0), ghost)
            src = owned & (kg == mnz - 1)
            ghost = _shift((z - rz) * rates.eyz + (z_top - z) * rates.eyz / 2.0, src, 1, 0)
            patch.set(kind, np.roll(src, 1, axis=0), ghost)

        # Z points
        kind = DOFKind.VZ
        owned = subgrid.owned_mask(kind)
        kg, jg, ig = subgrid.global_index(kind)

        if rates.exz != 0.0:
            patch.set(kind, owned & ((ig == 0) | (ig == mnx - 1)), 0.0)
        if rates.eyz != 0.0:
            patch.set(kind, owned & ((jg == 0) | (jg == mny - 1)), 0.0)
        if not self.open_bot:
            patch.set(kind, owned & (kg == 0) & pfree[:1, :, :], vel["vbz"])
        if not self.open_top:
            patch.set(kind, owned & (kg == mnz) & pfree[-1:, :, :], vel["vez"])

        return patch


def _shift(values: NDArray, src: NDArray[np.bool_], step: int, axis: int) -> NDArray:
    """Move the values computed at ``src`` slots one slot along ``axis`` (``step`` = -1 or +1)."""
    values = np.broadcast_to(values, src.shape)
    return np.roll(np.where(src, values, 0.0), step, axis=axis)
