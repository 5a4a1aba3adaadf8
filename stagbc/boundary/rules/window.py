"""
Boundary inflow/outflow window.

Material enters through a vertical window ``[bot, top]`` on one lateral face
and leaves below it. Without an explicit outflow velocity, the outflow
balances the inflow over the face:

    v_out = -v_in * (top - bot) / (bot - z_bottom)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from stagbc.boundary.fields import ConstraintPatch
from stagbc.grid.staggered import DOFKind

if TYPE_CHECKING:
    from collections.abc import Mapping

    from numpy.typing import NDArray

    from stagbc.boundary.schedule import Schedule
    from stagbc.config.core import BCConfig
    from stagbc.grid.staggered import SubGrid

    from .base import StepContext

# Face selectors
LEFT, RIGHT, FRONT, BACK, COMPENSATING = "Left", "Right", "Front", "Back", "CompensatingInflow"


def mass_balance_outflow(velin: float, bot: float, top: float, z_bottom: float) -> float:
    """
    Outflow velocity below the window that cancels the window inflow.

    Example:
        >>> round(mass_balance_outflow(1.0, bot=-10.0, top=0.0, z_bottom=-100.0), 4)
        -0.1111
    """
    return -velin * (top - bot) / (bot - z_bottom)


@dataclass(frozen=True)
class BoundaryWindow:
    """
    Window geometry and velocities.

    Attributes:
        face: Inflow face
        face_out: 0 (inflow face only), 1 (outflow on the opposite face) or
            -1 (both faces, mirrored)
        bot, top: Vertical window
        velin: Inflow velocity schedule
        velout: Explicit outflow velocity (mass balance if None)
        relax_dist: Ramp length above and below the window
        velbot, veltop: Bottom/top normal velocity of the compensating face
    """

    face: str
    bot: float
    top: float
    velin: Schedule
    face_out: int = 0
    velout: float | None = None
    relax_dist: float = 0.0
    velbot: float | None = None
    veltop: float | None = None

    def velocities(self, t: float, z_bottom: float) -> tuple[float, float]:
        """Inflow and outflow velocity at ``t``; a scheduled inflow always uses the balanced outflow."""
        velin = self.velin.value(t)
        if self.velout is None or self.velin.num_periods > 1:
            return velin, mass_balance_outflow(velin, self.bot, self.top, z_bottom)
        return velin, self.velout

    def profile(self, z: NDArray, velin: float, velout: float) -> NDArray:
        """Velocity along the face as a function of depth."""
        z = np.asarray(z, dtype=float)
        vel = np.zeros(z.shape)
        bot, top, relax = self.bot, self.top, self.relax_dist

        if self.face_out:
            vel = np.where((z <= top) & (z >= bot), velin, vel)
            if relax > 0.0:
                vel = np.where((z >= top) & (z <= top + relax), velin - velin / relax * (z - top), vel)
                vel = np.where((z <= bot) & (z >= bot - relax), velin + velin / relax * (z - bot), vel)
            if self.face_out != 1:
                vel = np.where(z < bot - relax, velout, vel)
        else:
            vel = np.where((z <= top) & (z >= bot), velin, vel)
            vel = np.where(z < bot, velout, vel)
        return vel


@dataclass(frozen=True)
class BoundaryWindowRule:
    """Prescribed normal velocity on the window face(s)."""

    window: BoundaryWindow
    open_top: bool = False
    open_bot: bool = False
    name: str = "boundary_window"

    @classmethod
    def from_config(cls, config: BCConfig) -> BoundaryWindowRule | None:
        w = config.window
        if w is None:
            return None
        window = BoundaryWindow(
            face=w.face,
            bot=w.bot,
            top=w.top,
            velin=w.velin.to_schedule(),
            face_out=w.face_out,
            velout=w.velout,
            relax_dist=w.relax_dist,
            velbot=w.velbot,
            veltop=w.veltop,
        )
        return cls(window=window, open_top=config.open_top, open_bot=config.bottom_open)

    def __call__(self, subgrid: SubGrid, fields: Mapping[DOFKind, NDArray], ctx: StepContext) -> ConstraintPatch:
        patch = ConstraintPatch(subgrid)
        grid = subgrid.grid
        w = self.window
        velin, velout = w.velocities(ctx.time, grid.z.start)

        if w.face in (LEFT, RIGHT):
            self._normal_faces(patch, subgrid, DOFKind.VX, axis=2, velin=velin, velout=velout)
        elif w.face in (FRONT, BACK):
            self._normal_faces(patch, subgrid, DOFKind.VY, axis=1, velin=velin, velout=velout)
        elif w.face == COMPENSATING:
            self._compensating(patch, subgrid, velin)
        return patch

    def _normal_faces(
        self,
        patch: ConstraintPatch,
        subgrid: SubGrid,
        kind: DOFKind,
        axis: int,
        velin: float,
        velout: float,
    ):
        w = self.window
        owned = subgrid.owned_mask(kind)
        index = subgrid.global_index(kind)[axis]
        z = subgrid.coords(kind)[0]
        last = subgrid.grid.axes[axis].ncels
        vel = w.profile(z, velin, velout)

        near = owned & (index == 0)
        far = owned & (index == last)
        inflow_near = w.face in (LEFT, FRONT)

        if w.face_out == 0:
            patch.set(kind, near if inflow_near else far, vel)
        elif w.face_out == 1:
            sign = 1.0 if inflow_near else -1.0
            patch.set(kind, near | far, sign * vel)
        else:
            patch.set(kind, near, vel)
            patch.set(kind, far, -vel)

    def _compensating(self, patch: ConstraintPatch, subgrid: SubGrid, velin: float):
        w = self.window
        grid = subgrid.grid

        kind = DOFKind.VX
        owned = subgrid.owned_mask(kind)
        _, _, ig = subgrid.global_index(kind)
        z = subgrid.coords(kind)[0]
        vel = np.where((z <= w.top) & (z >= w.bot), velin, 0.0)
        patch.set(kind, owned & (ig == 0), vel)
        patch.set(kind, owned & (ig == grid.x.ncels), -vel)

        kind = DOFKind.VZ
        owned = subgrid.owned_mask(kind)
        kg, _, _ = subgrid.global_index(kind)
        if w.velbot is not None and not self.open_bot:
            patch.set(kind, owned & (kg == 0), w.velbot)
        if w.veltop is not None and not self.open_top:
            patch.set(kind, owned & (kg == grid.z.ncels), w.veltop)
