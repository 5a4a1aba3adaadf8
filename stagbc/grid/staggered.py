"""
Distributed staggered grid.

The global mesh is a tensor product of three 1D node distributions. Each
axis is split into contiguous cell ranges over a static processor layout.
A rank owns its cells and the nodes at the start of each owned cell; the last
rank along an axis also owns the final node. Local arrays carry one ghost
layer on both sides of every axis and are indexed ``[k, j, i]`` (z, y, x).

Staggering of the degrees of freedom:

    VX: x-nodes, y-cells, z-cells
    VY: x-cells, y-nodes, z-cells
    VZ: x-cells, y-cells, z-nodes
    P, T: cell centers
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Sequence

    from numpy.typing import NDArray


class DOFKind(Enum):
    """Kinds of degrees of freedom on the staggered grid."""

    VX = "vx"
    VY = "vy"
    VZ = "vz"
    P = "p"
    T = "T"

    @property
    def node_axes(self) -> tuple[bool, bool, bool]:
        """Per array axis (z, y, x): True where the DOF sits on nodes."""
        return _NODE_AXES[self]

    @property
    def is_velocity(self) -> bool:
        return self in VELOCITY_KINDS


_NODE_AXES = {
    DOFKind.VX: (False, False, True),
    DOFKind.VY: (False, True, False),
    DOFKind.VZ: (True, False, False),
    DOFKind.P: (False, False, False),
    DOFKind.T: (False, False, False),
}

VELOCITY_KINDS = (DOFKind.VX, DOFKind.VY, DOFKind.VZ)


@dataclass(frozen=True, eq=False)
class Discret1D:
    """
    One axis of the grid: global node coordinates and the cell partition.

    Attributes:
        nodes: Global node coordinates, strictly ascending (ncels + 1 entries)
        bounds: Cell partition boundaries, ``bounds[r]:bounds[r+1]`` are the
            cells of processor ``r`` along this axis
    """

    nodes: NDArray
    bounds: tuple[int, ...]

    def __post_init__(self):
        nodes = np.asarray(self.nodes, dtype=float)
        object.__setattr__(self, "nodes", nodes)
        object.__setattr__(self, "bounds", tuple(int(b) for b in self.bounds))
        if nodes.ndim != 1 or nodes.size < 2:
            raise ValueError("Discret1D needs at least two nodes")
        if np.any(np.diff(nodes) <= 0):
            raise ValueError("Node coordinates must be strictly ascending")
        if self.bounds[0] != 0 or self.bounds[-1] != self.ncels:
            raise ValueError(f"Partition {self.bounds} does not cover {self.ncels} cells")
        if any(b <= a for a, b in zip(self.bounds[:-1], self.bounds[1:], strict=False)):
            raise ValueError(f"Every processor needs at least one cell: {self.bounds}")

    @classmethod
    def uniform(cls, start: float, end: float, ncels: int, nproc: int = 1) -> Discret1D:
        """Uniform spacing, cells split as evenly as possible (extra cells go to the first processors)."""
        if nproc > ncels:
            raise ValueError(f"Cannot split {ncels} cells over {nproc} processors")
        counts = [ncels // nproc + (1 if r < ncels % nproc else 0) for r in range(nproc)]
        return cls(np.linspace(start, end, ncels + 1), tuple(np.concatenate([[0], np.cumsum(counts)])))

    @property
    def ncels(self) -> int:
        return self.nodes.size - 1

    @property
    def nnodes(self) -> int:
        return self.nodes.size

    @property
    def nproc(self) -> int:
        return len(self.bounds) - 1

    @property
    def start(self) -> float:
        return float(self.nodes[0])

    @property
    def end(self) -> float:
        return float(self.nodes[-1])

    def owned_range(self, proc: int, node: bool) -> tuple[int, int]:
        """Half-open global index range owned by ``proc``."""
        start, stop = self.bounds[proc], self.bounds[proc + 1]
        if node and proc == self.nproc - 1:
            stop += 1
        return start, stop

    def global_size(self, node: bool) -> int:
        return self.nnodes if node else self.ncels

    def ghost_coords(self, node: bool) -> NDArray:
        """Coordinates of global indices -1 .. n, mirrored across the domain ends."""
        x = self.nodes
        ext = np.concatenate([[2.0 * x[0] - x[1]], x, [2.0 * x[-1] - x[-2]]])
        if node:
            return ext
        return 0.5 * (ext[:-1] + ext[1:])

    def stretched(self, eps: float, ref: float) -> Discret1D:
        """Copy with every node moved to ``x + eps * (x - ref)``."""
        return Discret1D(self.nodes + eps * (self.nodes - ref), self.bounds)


@dataclass(frozen=True)
class DOFIndex:
    """
    Local DOF counts and global starting offsets of one rank.

    Local numbering is VX, VY, VZ owned slots in C order, then pressure.

    Attributes:
        lnv: Owned velocity DOFs
        lnp: Owned pressure DOFs
        st: First global index in coupled (velocity-pressure) numbering
        stv: First global velocity index in uncoupled numbering
        stp: First global pressure index in uncoupled numbering
    """

    lnv: int
    lnp: int
    st: int
    stv: int
    stp: int

    @property
    def ln(self) -> int:
        return self.lnv + self.lnp


@dataclass(frozen=True, eq=False)
class StaggeredGrid:
    """
    Global staggered grid with a static processor layout.

    Ranks are numbered x-fastest: ``rank = px + Px * (py + Py * pz)``.
    """

    x: Discret1D
    y: Discret1D
    z: Discret1D
    _subgrids: dict = field(default_factory=dict, init=False, repr=False, compare=False)

    @classmethod
    def uniform(
        cls,
        bounds: Sequence[tuple[float, float]],
        num_cells: Sequence[int],
        proc_layout: Sequence[int] = (1, 1, 1),
    ) -> StaggeredGrid:
        """
        Uniform grid.

        Args:
            bounds: ``[(xmin, xmax), (ymin, ymax), (zmin, zmax)]``
            num_cells: Cells per axis ``(nx, ny, nz)``
            proc_layout: Processors per axis ``(Px, Py, Pz)``
        """
        axes = [
            Discret1D.uniform(lo, hi, n, p)
            for (lo, hi), n, p in zip(bounds, num_cells, proc_layout, strict=True)
        ]
        return cls(*axes)

    @property
    def axes(self) -> tuple[Discret1D, Discret1D, Discret1D]:
        """Axes in array order (z, y, x)."""
        return (self.z, self.y, self.x)

    @property
    def proc_layout(self) -> tuple[int, int, int]:
        return (self.x.nproc, self.y.nproc, self.z.nproc)

    @property
    def num_ranks(self) -> int:
        return self.x.nproc * self.y.nproc * self.z.nproc

    @property
    def bounds(self) -> tuple[tuple[float, float], tuple[float, float], tuple[float, float]]:
        return ((self.x.start, self.x.end), (self.y.start, self.y.end), (self.z.start, self.z.end))

    @property
    def num_cells(self) -> tuple[int, int, int]:
        return (self.x.ncels, self.y.ncels, self.z.ncels)

    def rank_coords(self, rank: int) -> tuple[int, int, int]:
        """Processor coordinates ``(px, py, pz)`` of ``rank``."""
        if not 0 <= rank < self.num_ranks:
            raise ValueError(f"Rank {rank} outside [0, {self.num_ranks})")
        px_n, py_n, _ = self.proc_layout
        return rank % px_n, (rank // px_n) % py_n, rank // (px_n * py_n)

    def global_shape(self, kind: DOFKind) -> tuple[int, int, int]:
        return tuple(ax.global_size(node) for ax, node in zip(self.axes, kind.node_axes, strict=True))

    def subgrid(self, rank: int = 0) -> SubGrid:
        if rank not in self._subgrids:
            self._subgrids[rank] = SubGrid(self, rank)
        return self._subgrids[rank]

    def subgrids(self) -> list[SubGrid]:
        return [self.subgrid(rank) for rank in range(self.num_ranks)]

    def dof_index(self, rank: int) -> DOFIndex:
        """Local counts and global starts of ``rank`` for both numbering schemes."""
        lnv = [sum(self.subgrid(r).num_owned(kind) for kind in VELOCITY_KINDS) for r in range(self.num_ranks)]
        lnp = [self.subgrid(r).num_owned(DOFKind.P) for r in range(self.num_ranks)]
        return DOFIndex(
            lnv=lnv[rank],
            lnp=lnp[rank],
            st=sum(lnv[:rank]) + sum(lnp[:rank]),
            stv=sum(lnv[:rank]),
            stp=sum(lnv) + sum(lnp[:rank]),
        )

    def stretched(self, eps: tuple[float, float, float], ref_point: tuple[float, float, float]) -> StaggeredGrid:
        """Grid stretched about ``ref_point`` by the per-axis factors ``eps`` (x, y, z)."""
        x, y, z = (
            ax.stretched(e, r) if e != 0.0 else ax
            for ax, e, r in zip((self.x, self.y, self.z), eps, ref_point, strict=True)
        )
        return StaggeredGrid(x, y, z)


class SubGrid:
    """
    Owned sub-block of one rank plus its one-layer ghost halo.

    All per-kind helpers return values in array order (z, y, x).
    """

    def __init__(self, grid: StaggeredGrid, rank: int):
        self.grid = grid
        self.rank = rank
        px, py, pz = grid.rank_coords(rank)
        self.proc = (pz, py, px)

    def owned_range(self, kind: DOFKind) -> tuple[tuple[int, int], ...]:
        return tuple(
            ax.owned_range(p, node) for ax, p, node in zip(self.grid.axes, self.proc, kind.node_axes, strict=True)
        )

    def owned_shape(self, kind: DOFKind) -> tuple[int, int, int]:
        return tuple(stop - start for start, stop in self.owned_range(kind))

    def local_shape(self, kind: DOFKind) -> tuple[int, int, int]:
        return tuple(n + 2 for n in self.owned_shape(kind))

    def num_owned(self, kind: DOFKind) -> int:
        return int(np.prod(self.owned_shape(kind)))

    def owned(self, kind: DOFKind) -> tuple[slice, slice, slice]:
        """Slices of the owned slots inside a local (ghosted) array."""
        return tuple(slice(1, 1 + n) for n in self.owned_shape(kind))

    def owned_global(self, kind: DOFKind) -> tuple[slice, slice, slice]:
        """Slices of the owned slots inside a global array."""
        return tuple(slice(start, stop) for start, stop in self.owned_range(kind))

    def owned_mask(self, kind: DOFKind) -> NDArray:
        mask = np.zeros(self.local_shape(kind), dtype=bool)
        mask[self.owned(kind)] = True
        return mask

    def global_index(self, kind: DOFKind) -> tuple[NDArray, NDArray, NDArray]:
        """Global indices (ghosts included) along each axis, shaped to broadcast."""
        out = []
        for axis, (start, stop) in enumerate(self.owned_range(kind)):
            shape = [1, 1, 1]
            shape[axis] = stop - start + 2
            out.append(np.arange(start - 1, stop + 1).reshape(shape))
        return tuple(out)

    def coords(self, kind: DOFKind) -> tuple[NDArray, NDArray, NDArray]:
        """Coordinates (ghosts included) along each axis, shaped to broadcast."""
        out = []
        for axis, ((start, stop), ax, node) in enumerate(
            zip(self.owned_range(kind), self.grid.axes, kind.node_axes, strict=True)
        ):
            shape = [1, 1, 1]
            shape[axis] = stop - start + 2
            out.append(ax.ghost_coords(node)[start : stop + 2].reshape(shape))
        return tuple(out)

    def has_neighbor(self, axis: int, side: int) -> bool:
        """Whether another rank lies on ``side`` (-1 or +1) along array ``axis``."""
        p = self.proc[axis] + side
        return 0 <= p < self.grid.axes[axis].nproc

    def ghost_int(self, kind: DOFKind) -> tuple[slice, slice, slice]:
        """Owned slots plus ghost slots shared with neighbor ranks (physical ghosts excluded)."""
        out = []
        for axis, n in enumerate(self.owned_shape(kind)):
            lo = 0 if self.has_neighbor(axis, -1) else 1
            hi = n + 2 if self.has_neighbor(axis, +1) else n + 1
            out.append(slice(lo, hi))
        return tuple(out)

    def ghost_int_mask(self, kind: DOFKind) -> NDArray:
        mask = np.zeros(self.local_shape(kind), dtype=bool)
        mask[self.ghost_int(kind)] = True
        return mask

    def domain_window(self, kind: DOFKind) -> tuple[tuple[slice, ...], tuple[slice, ...]]:
        """Local and global slices of the ghosted block clipped to the global domain."""
        local, glob = [], []
        for (start, stop), size in zip(self.owned_range(kind), self.grid.global_shape(kind), strict=True):
            lo, hi = max(start - 1, 0), min(stop, size - 1)
            local.append(slice(lo - start + 1, hi - start + 2))
            glob.append(slice(lo, hi + 1))
        return tuple(local), tuple(glob)

    @property
    def dof(self) -> DOFIndex:
        return self.grid.dof_index(self.rank)
