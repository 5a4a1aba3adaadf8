"""
Plume inflow through the bottom face.

The vertical velocity on the bottom face follows a Poiseuille or Gaussian
profile around the plume axis. The velocity away from the plume is chosen so
that the net flux through the bottom face vanishes (scaled by the area
fraction).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np
from scipy.special import erf

from stagbc.boundary.fields import ConstraintPatch
from stagbc.grid.staggered import DOFKind

if TYPE_CHECKING:
    from collections.abc import Mapping

    from numpy.typing import NDArray

    from stagbc.config.core import BCConfig
    from stagbc.grid.staggered import StaggeredGrid, SubGrid

    from .base import StepContext


@dataclass(frozen=True)
class PlumeInflow:
    """
    Bottom inflow profile of a plume.

    Attributes:
        profile: "Poiseuille" or "Gaussian"
        dimension: "2D" (band along y) or "3D" (disk)
        center: x (2D) or (x, y) (3D) of the plume axis
        radius: Plume radius
        velocity: Peak inflow velocity
        area_fraction: Fraction of the inflow flux balanced by the outflow
    """

    profile: str
    dimension: str
    center: tuple[float, ...]
    radius: float
    velocity: float
    area_fraction: float = 1.0

    def outflow_velocity(self, grid: StaggeredGrid) -> float:
        """Velocity away from the plume that cancels the net bottom flux."""
        (xmin, xmax), (ymin, ymax), _ = grid.bounds
        r0 = self.radius
        v_in = self.velocity

        if self.dimension == "2D":
            area_face = xmax - xmin
            area_in = 2.0 * r0
        else:
            area_face = (xmax - xmin) * (ymax - ymin)
            area_in = np.pi * r0**2

        if self.profile == "Poiseuille":
            # Plane (2D) or pipe (3D) Poiseuille flow
            v_avg = v_in * 2.0 / 3.0 if self.dimension == "2D" else v_in / 2.0
            return -v_avg * area_in * self.area_fraction / (area_face - area_in)

        xc = self.center[0]
        span_x = erf((xmax - xc) / r0) - erf((xmin - xc) / r0)
        if self.dimension == "2D":
            frac = np.sqrt(np.pi) * r0 * span_x / 2.0 / area_face
        else:
            yc = self.center[1]
            span_y = erf((ymax - yc) / r0) - erf((ymin - yc) / r0)
            frac = np.pi * r0**2 / 4.0 * span_x * span_y / area_face
        return float(-v_in * frac / (1.0 - frac) * self.area_fraction)

    def squared_distance(self, x: NDArray, y: NDArray) -> NDArray:
        r2 = (x - self.center[0]) ** 2
        if self.dimension == "3D":
            r2 = r2 + (y - self.center[1]) ** 2
        return r2

    def velocities(self, x: NDArray, y: NDArray, v_out: float) -> NDArray:
        """Vertical velocity at bottom-face points ``(x, y)``."""
        r2 = self.squared_distance(*np.broadcast_arrays(x, y))
        radius2 = self.radius**2
        if self.profile == "Poiseuille":
            return np.where(r2 <= radius2, self.velocity * (1.0 - r2 / radius2), v_out)
        return v_out + (self.velocity - v_out) * np.exp(-r2 / radius2)


@dataclass(frozen=True)
class PlumeInflowRule:
    """Prescribed bottom-face VZ of an inflow-type plume."""

    plume: PlumeInflow
    name: str = "plume_inflow"

    @classmethod
    def from_config(cls, config: BCConfig) -> PlumeInflowRule | None:
        p = config.plume
        if p is None or not p.is_inflow:
            return None
        return cls(
            plume=PlumeInflow(
                profile=p.velocity_profile,
                dimension=p.dimension,
                center=tuple(p.center),
                radius=p.radius,
                velocity=p.inflow_velocity,
                area_fraction=p.area_fraction,
            )
        )

    def __call__(self, subgrid: SubGrid, fields: Mapping[DOFKind, NDArray], ctx: StepContext) -> ConstraintPatch:
        patch = ConstraintPatch(subgrid)
        kind = DOFKind.VZ
        kg, _, _ = subgrid.global_index(kind)
        _, y, x = subgrid.coords(kind)

        v_out = self.plume.outflow_velocity(subgrid.grid)
        patch.set(kind, subgrid.owned_mask(kind) & (kg == 0), self.plume.velocities(x, y, v_out))
        return patch
