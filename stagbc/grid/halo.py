"""
Ghost-layer synchronization.

After every rank has written its constraint fields, ghost slots that lie
inside the global domain are overwritten with the value held by the owning
rank. Ghost slots beyond the physical domain keep their local value; they
carry boundary (two-point) constraints.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Sequence

    from numpy.typing import NDArray

    from .staggered import DOFKind, StaggeredGrid


@runtime_checkable
class HaloExchange(Protocol):
    """
    Collective ghost-layer synchronization.

    ``arrays`` holds the local (ghosted) arrays of every rank hosted by the
    caller, indexed by rank. Implementations block until all ghost slots
    hold the owner's value.
    """

    def exchange(self, kind: DOFKind, arrays: Sequence[NDArray]) -> None: ...


class InProcessHalo:
    """
    Halo exchange between ranks living in the same process.

    Owned blocks of all ranks are gathered into one global array which then
    refills every ghost slot that lies inside the domain. With a single rank
    this leaves the array unchanged.

    Example:
        >>> grid = StaggeredGrid.uniform([(0, 1)] * 3, (4, 4, 4), (2, 1, 1))
        >>> halo = InProcessHalo(grid)
        >>> halo.exchange(DOFKind.VX, [left_array, right_array])
    """

    def __init__(self, grid: StaggeredGrid):
        self.grid = grid

    def exchange(self, kind: DOFKind, arrays: Sequence[NDArray]) -> None:
        subgrids = self.grid.subgrids()
        if len(arrays) != len(subgrids):
            raise ValueError(f"Halo exchange needs {len(subgrids)} local arrays, got {len(arrays)}")

        glob = np.full(self.grid.global_shape(kind), np.nan)
        for sub, arr in zip(subgrids, arrays, strict=True):
            glob[sub.owned_global(kind)] = arr[sub.owned(kind)]

        for sub, arr in zip(subgrids, arrays, strict=True):
            local, window = sub.domain_window(kind)
            arr[local] = glob[window]
