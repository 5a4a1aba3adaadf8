"""
Single-point constraint (SPC) lists.

An SPC list is the compact form of a constraint field handed to the solver:
the indices of the constrained DOFs and their values. Lists are extracted in
local numbering (owned VX, VY, VZ slots in C order, then pressure) and
shifted to global numbering before the solve.

Index protocol:
    extract_spc           -> LOCAL
    shift(LOCAL_TO_GLOBAL) -> GLOBAL
    shift(GLOBAL_TO_LOCAL) -> LOCAL
Shifting a list into the addressing it already has is an error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

from stagbc.boundary.fields import is_free
from stagbc.grid.staggered import VELOCITY_KINDS
from stagbc.utils.exceptions import IndexShiftError

if TYPE_CHECKING:
    from numpy.typing import NDArray

    from stagbc.boundary.fields import ConstraintFields
    from stagbc.grid.staggered import DOFIndex


class Addressing(Enum):
    LOCAL = "local"
    GLOBAL = "global"


class ShiftDirection(Enum):
    LOCAL_TO_GLOBAL = "local_to_global"
    GLOBAL_TO_LOCAL = "global_to_local"

    @property
    def target(self) -> Addressing:
        return Addressing.GLOBAL if self is ShiftDirection.LOCAL_TO_GLOBAL else Addressing.LOCAL


class IndexMode(Enum):
    """Global DOF numbering: velocity and pressure interleaved per rank, or in separate blocks."""

    COUPLED = "coupled"
    UNCOUPLED = "uncoupled"


def _empty_indices() -> NDArray:
    return np.zeros(0, dtype=np.int64)


def _empty_values() -> NDArray:
    return np.zeros(0)


@dataclass(frozen=True, eq=False)
class SPCList:
    """Constrained DOF indices and values, tagged with their addressing."""

    indices: NDArray = field(default_factory=_empty_indices)
    values: NDArray = field(default_factory=_empty_values)
    addressing: Addressing = Addressing.LOCAL

    def __post_init__(self):
        indices = np.asarray(self.indices, dtype=np.int64)
        values = np.asarray(self.values, dtype=float)
        if indices.shape != values.shape or indices.ndim != 1:
            raise ValueError(f"SPC indices {indices.shape} and values {values.shape} must be matching 1D arrays")
        object.__setattr__(self, "indices", indices)
        object.__setattr__(self, "values", values)

    @property
    def count(self) -> int:
        return int(self.indices.size)

    def __len__(self) -> int:
        return self.count


def translate_indices(spc: SPCList, direction: ShiftDirection, shift: int) -> SPCList:
    """Translate ``spc`` by ``shift`` in ``direction``."""
    if spc.addressing is direction.target:
        raise IndexShiftError(direction.value, spc.addressing.value)
    offset = shift if direction is ShiftDirection.LOCAL_TO_GLOBAL else -shift
    return SPCList(spc.indices + offset, spc.values.copy(), direction.target)


def index_shifts(dof: DOFIndex, mode: IndexMode) -> tuple[int, int]:
    """Velocity and pressure local-to-global shifts of one rank."""
    if mode is IndexMode.COUPLED:
        return dof.st, dof.st
    return dof.stv, dof.stp - dof.lnv


@dataclass(frozen=True)
class ConstraintSet:
    """
    SPC lists of one rank and step.

    Pressure and temperature lists are carried for the solver interface but
    are never populated by the rule chain.
    """

    velocity: SPCList = field(default_factory=SPCList)
    pressure: SPCList = field(default_factory=SPCList)
    temperature: SPCList = field(default_factory=SPCList)

    @property
    def num_spc(self) -> int:
        return self.velocity.count + self.pressure.count

    @property
    def addressing(self) -> Addressing:
        return self.velocity.addressing

    def shift(self, direction: ShiftDirection, dof: DOFIndex, mode: IndexMode = IndexMode.COUPLED) -> ConstraintSet:
        return shift_spc(self, direction, dof, mode)


def shift_spc(
    constraints: ConstraintSet,
    direction: ShiftDirection,
    dof: DOFIndex,
    mode: IndexMode = IndexMode.COUPLED,
) -> ConstraintSet:
    """
    Shift the velocity and pressure lists between local and global numbering.

    Args:
        constraints: Lists to shift
        direction: LOCAL_TO_GLOBAL or GLOBAL_TO_LOCAL
        dof: DOF counts and global starts of the owning rank
        mode: Global numbering scheme

    Returns:
        New constraint set in the target addressing

    Raises:
        IndexShiftError: The lists are already in the target addressing
    """
    v_shift, p_shift = index_shifts(dof, mode)
    return ConstraintSet(
        velocity=translate_indices(constraints.velocity, direction, v_shift),
        pressure=translate_indices(constraints.pressure, direction, p_shift),
        temperature=SPCList(constraints.temperature.indices, constraints.temperature.values, direction.target),
    )


def extract_spc(fields: ConstraintFields) -> ConstraintSet:
    """
    Collect the constrained owned velocity slots into a local SPC list.

    Owned slots are scanned VX, VY, VZ, each in C order; the local index of a
    slot is its running position in that scan.
    """
    subgrid = fields.subgrid
    indices, values = [], []
    offset = 0
    for kind in VELOCITY_KINDS:
        owned = fields[kind].owned_values.ravel()
        fixed = np.flatnonzero(~is_free(owned))
        indices.append(fixed + offset)
        values.append(owned[fixed])
        offset += subgrid.num_owned(kind)

    return ConstraintSet(velocity=SPCList(np.concatenate(indices), np.concatenate(values)))


def apply_spc(solution: NDArray, constraints: ConstraintSet) -> NDArray:
    """
    Write the constrained values into a global solution vector in place.

    Raises:
        ValueError: The lists are in local addressing
    """
    if constraints.addressing is not Addressing.GLOBAL:
        raise ValueError("apply_spc needs globally addressed constraint lists; shift them first")
    for spc in (constraints.velocity, constraints.pressure):
        solution[spc.indices] = spc.values
    return solution

