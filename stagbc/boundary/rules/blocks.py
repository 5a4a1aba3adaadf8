"""Kinematic block velocities."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from stagbc.boundary.fields import ConstraintPatch
from stagbc.geometry.kinematic import KinematicBlock
from stagbc.grid.staggered import DOFKind

if TYPE_CHECKING:
    from collections.abc import Mapping

    from numpy.typing import NDArray

    from stagbc.config.core import BCConfig, KinematicBlockConfig
    from stagbc.grid.staggered import SubGrid

    from .base import StepContext


def block_from_config(config: KinematicBlockConfig) -> KinematicBlock:
    """Build a kinematic block; angles are given in degrees."""
    theta = config.theta if config.theta is not None else [0.0] * len(config.times)
    return KinematicBlock(
        times=config.times,
        path=config.path,
        theta=np.deg2rad(theta),
        polygon=config.polygon,
        bot=config.bot,
        top=config.top,
    )


@dataclass(frozen=True)
class KinematicBlockRule:
    """
    Horizontal velocities of the owned points carried by kinematic blocks.

    A block contributes only when its pose is defined at both ends of the
    step. Points are tested against the polygon at the start of the step.
    """

    blocks: tuple[KinematicBlock, ...]
    name: str = "kinematic_blocks"

    @classmethod
    def from_config(cls, config: BCConfig) -> KinematicBlockRule:
        return cls(blocks=tuple(block_from_config(b) for b in config.blocks))

    def __call__(self, subgrid: SubGrid, fields: Mapping[DOFKind, NDArray], ctx: StepContext) -> ConstraintPatch:
        patch = ConstraintPatch(subgrid)
        if ctx.dt <= 0.0:
            return patch

        for block in self.blocks:
            for kind, component in ((DOFKind.VX, 1), (DOFKind.VY, 2)):
                z, y, x = subgrid.coords(kind)
                result = block.velocity(x, y, z, ctx.time, ctx.dt)
                if result is None:
                    break
                inside = result[0] & subgrid.owned_mask(kind)
                patch.set(kind, inside, result[component])

        return patch
