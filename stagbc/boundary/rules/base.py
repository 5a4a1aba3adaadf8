"""
Common interface of the constraint rules.

A rule is a pure callable: given a rank's sub-grid, a read-only snapshot of
the constraint fields and the step context, it returns the constraint
updates it governs. The assembler applies the returned patches in a fixed
order.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import numpy as np

from stagbc.grid.staggered import DOFKind

if TYPE_CHECKING:
    from collections.abc import Mapping

    from numpy.typing import NDArray

    from stagbc.boundary.fields import ConstraintPatch
    from stagbc.grid.staggered import SubGrid


@dataclass(frozen=True)
class StepContext:
    """
    Per-step inputs of the rule chain.

    Attributes:
        time: Current time
        dt: Time step length
        initial_guess: The solver is computing its initial guess (velocity
            boxes and cylinders are skipped)
        phase_ratios: Phase volume fractions of the owned cells,
            shape ``(nz, ny, nx, nphases)``
        fixed_cells: Lock flags of the owned cells, shape ``(nz, ny, nx)``; overrides the flags loaded from the fixed-cell file
    """

    time: float
    dt: float
    initial_guess: bool = False
    phase_ratios: NDArray | None = None
    fixed_cells: NDArray | None = None


@runtime_checkable
class Rule(Protocol):
    """Constraint rule: ``rule(subgrid, fields, ctx) -> ConstraintPatch``."""

    name: str

    def __call__(
        self,
        subgrid: SubGrid,
        fields: Mapping[DOFKind, NDArray],
        ctx: StepContext,
    ) -> ConstraintPatch: ...


def column_mask(subgrid: SubGrid, kind: DOFKind, axis: int) -> NDArray[np.bool_]:
    """Owned and internal-ghost slots along every axis except ``axis``, which is left whole."""
    mask = np.zeros(subgrid.local_shape(kind), dtype=bool)
    window = list(subgrid.ghost_int(kind))
    window[axis] = slice(None)
    mask[tuple(window)] = True
    return mask


def locked_faces(subgrid: SubGrid, cells: NDArray[np.bool_]) -> dict[DOFKind, NDArray[np.bool_]]:
    """
    Velocity slots on the six faces of the given owned cells.

    Args:
        subgrid: Rank sub-grid
        cells: Owned-cell selection, shape ``owned_shape(P)``

    Returns:
        Per velocity kind, a mask over the local (ghosted) array
    """
    nz, ny, nx = cells.shape
    faces = {}
    for axis, kind in ((2, DOFKind.VX), (1, DOFKind.VY), (0, DOFKind.VZ)):
        mask = np.zeros(subgrid.local_shape(kind), dtype=bool)
        # Cell c has its faces at node slots c and c + 1
        lo = [slice(1, 1 + nz), slice(1, 1 + ny), slice(1, 1 + nx)]
        hi = list(lo)
        hi[axis] = slice(lo[axis].start + 1, lo[axis].stop + 1)
        mask[tuple(lo)] |= cells
        mask[tuple(hi)] |= cells
        faces[kind] = mask
    return faces
