"""
Velocity boxes and cylinders.

Both region kinds prescribe only the velocity components they declare and
can travel with their own velocity (``advect``). They are skipped while the
solver computes its initial guess.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from stagbc.boundary.fields import ConstraintPatch
from stagbc.geometry.primitives import cylinder_profile, in_box
from stagbc.grid.staggered import VELOCITY_KINDS

if TYPE_CHECKING:
    from collections.abc import Mapping

    from numpy.typing import NDArray

    from stagbc.config.core import BCConfig
    from stagbc.grid.staggered import DOFKind, SubGrid

    from .base import StepContext

Vector = tuple[float | None, float | None, float | None]


def _advected(point: tuple[float, float, float], velocity: Vector, t: float) -> tuple[float, float, float]:
    return tuple(p + v * t if v is not None else p for p, v in zip(point, velocity, strict=True))


@dataclass(frozen=True)
class VelocityBox:
    """Axis-aligned box (x, y, z order) with prescribed velocity components."""

    center: tuple[float, float, float]
    width: tuple[float, float, float]
    velocity: Vector
    advect: bool = False

    def bounds(self, t: float) -> tuple[tuple[float, ...], tuple[float, ...]]:
        center = _advected(self.center, self.velocity, t) if self.advect else self.center
        lower = tuple(c - w / 2.0 for c, w in zip(center, self.width, strict=True))
        upper = tuple(c + w / 2.0 for c, w in zip(center, self.width, strict=True))
        return lower, upper


@dataclass(frozen=True)
class VelocityCylinder:
    """Finite cylinder with prescribed velocity components and radial profile."""

    base: tuple[float, float, float]
    cap: tuple[float, float, float]
    radius: float
    velocity: Vector
    parabolic: bool = False
    advect: bool = False

    def axis(self, t: float) -> tuple[tuple[float, float, float], tuple[float, float, float]]:
        if not self.advect:
            return self.base, self.cap
        return _advected(self.base, self.velocity, t), _advected(self.cap, self.velocity, t)


def _xyz(subgrid: SubGrid, kind: DOFKind) -> tuple[NDArray, NDArray, NDArray]:
    z, y, x = subgrid.coords(kind)
    return x, y, z


@dataclass(frozen=True)
class VelocityBoxRule:
    boxes: tuple[VelocityBox, ...]
    name: str = "velocity_boxes"

    @classmethod
    def from_config(cls, config: BCConfig) -> VelocityBoxRule:
        return cls(
            boxes=tuple(
                VelocityBox(tuple(b.center), tuple(b.width), (b.vx, b.vy, b.vz), b.advect) for b in config.boxes
            )
        )

    def __call__(self, subgrid: SubGrid, fields: Mapping[DOFKind, NDArray], ctx: StepContext) -> ConstraintPatch:
        patch = ConstraintPatch(subgrid)
        if ctx.initial_guess:
            return patch

        for box in self.boxes:
            lower, upper = box.bounds(ctx.time)
            for kind, v in zip(VELOCITY_KINDS, box.velocity, strict=True):
                if v is None:
                    continue
                inside = in_box(_xyz(subgrid, kind), lower, upper)
                patch.set(kind, inside & subgrid.owned_mask(kind), v)
        return patch


@dataclass(frozen=True)
class VelocityCylinderRule:
    cylinders: tuple[VelocityCylinder, ...]
    name: str = "velocity_cylinders"

    @classmethod
    def from_config(cls, config: BCConfig) -> VelocityCylinderRule:
        return cls(
            cylinders=tuple(
                VelocityCylinder(
                    tuple(c.base),
                    tuple(c.cap),
                    c.radius,
                    c.velocity(),
                    parabolic=c.profile == "parabolic",
                    advect=c.advect,
                )
                for c in config.cylinders
            )
        )

    def __call__(self, subgrid: SubGrid, fields: Mapping[DOFKind, NDArray], ctx: StepContext) -> ConstraintPatch:
        patch = ConstraintPatch(subgrid)
        if ctx.initial_guess:
            return patch

        for cyl in self.cylinders:
            base, cap = cyl.axis(ctx.time)
            for kind, v in zip(VELOCITY_KINDS, cyl.velocity, strict=True):
                if v is None:
                    continue
                inside, factor = cylinder_profile(*_xyz(subgrid, kind), base, cap, cyl.radius, cyl.parabolic)
                patch.set(kind, inside & subgrid.owned_mask(kind), v * np.broadcast_to(factor, inside.shape))
        return patch
