"""
Phase and cell locks.

A locked cell gets zero velocity on all six of its faces. Faces shared with
a neighbor rank land in ghost slots and are overwritten by the owner's value
at the halo exchange.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING

import numpy as np

from stagbc.boundary.checkpoint import read_fixed_cells
from stagbc.boundary.fields import ConstraintPatch
from stagbc.grid.staggered import DOFKind
from stagbc.utils.exceptions import DimensionMismatchError, validate_array_dimensions

from .base import locked_faces

if TYPE_CHECKING:
    from collections.abc import Mapping

    from numpy.typing import NDArray

    from stagbc.config.core import BCConfig
    from stagbc.grid.staggered import SubGrid

    from .base import StepContext


def _lock_patch(subgrid: SubGrid, cells: NDArray[np.bool_]) -> ConstraintPatch:
    patch = ConstraintPatch(subgrid)
    if not cells.any():
        return patch
    for kind, mask in locked_faces(subgrid, cells).items():
        patch.set(kind, mask, 0.0)
    return patch


@dataclass(frozen=True)
class PhaseLockRule:
    """Lock every owned cell fully occupied by ``phase``."""

    phase: int
    name: str = "phase_lock"

    @classmethod
    def from_config(cls, config: BCConfig) -> PhaseLockRule | None:
        if config.fix_phase is None:
            return None
        return cls(phase=config.fix_phase)

    def __call__(self, subgrid: SubGrid, fields: Mapping[DOFKind, NDArray], ctx: StepContext) -> ConstraintPatch:
        if ctx.phase_ratios is None:
            raise ValueError("Phase lock needs the phase ratios of the owned cells")

        ratios = np.asarray(ctx.phase_ratios)
        shape = subgrid.owned_shape(DOFKind.P)
        if ratios.ndim != 4 or ratios.shape[:3] != shape:
            raise DimensionMismatchError("phase_ratios", ratios.shape, (*shape, "nphases"), component="PhaseLockRule")
        if not 0 <= self.phase < ratios.shape[-1]:
            raise ValueError(f"Locked phase {self.phase} outside [0, {ratios.shape[-1]})")

        return _lock_patch(subgrid, ratios[..., self.phase] == 1.0)


@dataclass(frozen=True, eq=False)
class CellLockRule:
    """
    Lock every owned cell flagged in the fixed-cell file of the rank.

    The flags are loaded once by ``load``; ``ctx.fixed_cells`` overrides them
    for a single step.
    """

    base: str | None = None
    flags: NDArray | None = None
    name: str = "cell_lock"

    @classmethod
    def from_config(cls, config: BCConfig) -> CellLockRule | None:
        return cls(base=config.fix_cell_file) if config.fix_cell else None

    def load(self, subgrid: SubGrid) -> CellLockRule:
        """Copy of the rule holding the flags of ``subgrid.rank`` read from ``base``."""
        if self.base is None:
            raise ValueError("Cell lock has no fixed-cell file to load")
        flags = read_fixed_cells(self.base, subgrid.rank, subgrid.owned_shape(DOFKind.P))
        return replace(self, flags=flags)

    def __call__(self, subgrid: SubGrid, fields: Mapping[DOFKind, NDArray], ctx: StepContext) -> ConstraintPatch:
        flags = ctx.fixed_cells if ctx.fixed_cells is not None else self.flags
        if flags is None:
            raise ValueError("Cell lock needs the fixed-cell flags of the owned cells")

        flags = np.asarray(flags)
        validate_array_dimensions(flags, subgrid.owned_shape(DOFKind.P), "fixed_cells", component="CellLockRule")
        return _lock_patch(subgrid, flags != 0)
