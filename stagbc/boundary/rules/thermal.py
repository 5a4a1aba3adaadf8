"""
Temperature and pressure defaults.

Both rules write the ghost cell planes just below the bottom and just above
the top of the domain, over the owned columns plus the columns shared with
neighbor ranks.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from stagbc.boundary.fields import ConstraintPatch
from stagbc.grid.staggered import DOFKind

from .base import column_mask

if TYPE_CHECKING:
    from collections.abc import Mapping

    from numpy.typing import NDArray

    from stagbc.boundary.schedule import Schedule
    from stagbc.config.core import BCConfig
    from stagbc.grid.staggered import SubGrid

    from .base import StepContext


@dataclass(frozen=True)
class PlumeThermal:
    """Thermal footprint of a bottom plume: a band (2D) or a disk (3D)."""

    dimension: str
    center: tuple[float, ...]
    radius: float
    temperature: float

    def apply(self, x: NDArray, y: NDArray, tbot: float) -> tuple[NDArray[np.bool_], NDArray]:
        """Footprint mask and perturbed bottom temperature."""
        x, y = np.broadcast_arrays(x, y)
        if self.dimension == "2D":
            dx = x - self.center[0]
            inside = np.abs(dx) <= self.radius
            values = tbot + (self.temperature - tbot) * np.exp(-(dx**2) / self.radius**2)
        else:
            r2 = (x - self.center[0]) ** 2 + (y - self.center[1]) ** 2
            inside = r2 <= self.radius**2
            values = np.full(x.shape, self.temperature)
        return inside, values


@dataclass(frozen=True)
class TemperatureRule:
    """Top temperature and (scheduled) bottom temperature, with optional plume perturbation."""

    top: float | None = None
    bottom: Schedule | None = None
    plume: PlumeThermal | None = None
    name: str = "temperature"

    @classmethod
    def from_config(cls, config: BCConfig) -> TemperatureRule:
        temperature = config.temperature
        plume = None
        if config.plume is not None:
            p = config.plume
            plume = PlumeThermal(p.dimension, tuple(p.center), p.radius, p.temperature)
        return cls(
            top=temperature.top,
            bottom=temperature.bottom.to_schedule() if temperature.bottom is not None else None,
            plume=plume,
        )

    def __call__(self, subgrid: SubGrid, fields: Mapping[DOFKind, NDArray], ctx: StepContext) -> ConstraintPatch:
        patch = ConstraintPatch(subgrid)
        kind = DOFKind.T
        kg, _, _ = subgrid.global_index(kind)
        _, y, x = subgrid.coords(kind)
        columns = column_mask(subgrid, kind, axis=0)

        if self.bottom is not None:
            tbot = self.bottom.value(ctx.time)
            plane = columns & (kg == -1)
            patch.set(kind, plane, tbot)
            if self.plume is not None:
                inside, values = self.plume.apply(x, y, tbot)
                patch.set(kind, plane & inside, values)

        if self.top is not None:
            patch.set(kind, columns & (kg == subgrid.grid.z.ncels), self.top)

        return patch


@dataclass(frozen=True)
class PressureRule:
    """Top and bottom pressure."""

    top: float | None = None
    bottom: float | None = None
    name: str = "pressure"

    @classmethod
    def from_config(cls, config: BCConfig) -> PressureRule:
        return cls(top=config.pressure.top, bottom=config.pressure.bottom)

    def __call__(self, subgrid: SubGrid, fields: Mapping[DOFKind, NDArray], ctx: StepContext) -> ConstraintPatch:
        patch = ConstraintPatch(subgrid)
        kind = DOFKind.P
        kg, _, _ = subgrid.global_index(kind)
        columns = column_mask(subgrid, kind, axis=0)

        if self.bottom is not None:
            patch.set(kind, columns & (kg == -1), self.bottom)
        if self.top is not None:
            patch.set(kind, columns & (kg == subgrid.grid.z.ncels), self.top)

        return patch
