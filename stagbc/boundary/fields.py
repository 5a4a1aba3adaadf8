"""
Constraint field store.

One float array per DOF kind spans the owned and ghost slots of a rank.
A slot holds either the unconstrained sentinel (NaN) or the prescribed value.
Every finite value, zero included, is a constraint; writing a non-finite
value is rejected.

Rules never write the fields directly. They return a ``ConstraintPatch``,
which the assembler applies in rule order so that the last writer wins.
Two-point (no-slip) constraints are kept in a separate ghost-only patch and
merged after the halo exchange.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np

from stagbc.grid.staggered import VELOCITY_KINDS, DOFKind

if TYPE_CHECKING:
    from collections.abc import Iterator

    from numpy.typing import ArrayLike, NDArray

    from stagbc.grid.staggered import SubGrid

UNCONSTRAINED = np.nan


def is_free(values: ArrayLike) -> NDArray[np.bool_]:
    """True where a slot carries no constraint."""
    return np.isnan(values)


class ConstraintField:
    """Constraint values of one DOF kind over the owned and ghost slots of a rank."""

    def __init__(self, kind: DOFKind, subgrid: SubGrid):
        self.kind = kind
        self.subgrid = subgrid
        self.values = np.full(subgrid.local_shape(kind), UNCONSTRAINED)

    def reset(self):
        self.values.fill(UNCONSTRAINED)

    def is_free(self) -> NDArray[np.bool_]:
        return is_free(self.values)

    def is_fixed(self) -> NDArray[np.bool_]:
        return ~is_free(self.values)

    @property
    def owned_values(self) -> NDArray:
        return self.values[self.subgrid.owned(self.kind)]

    def num_fixed(self, owned_only: bool = True) -> int:
        values = self.owned_values if owned_only else self.values
        return int(np.count_nonzero(~is_free(values)))

    def write(self, mask: NDArray[np.bool_], values: NDArray):
        """Overwrite the masked slots with ``values``."""
        self.values[mask] = values[mask]


class ConstraintPatch:
    """
    Constraint updates produced by one rule.

    Per DOF kind, a mask of the slots the rule governs and their values.
    Within a patch later ``set`` calls override earlier ones.
    """

    def __init__(self, subgrid: SubGrid):
        self.subgrid = subgrid
        self._entries: dict[DOFKind, tuple[NDArray[np.bool_], NDArray]] = {}

    def set(self, kind: DOFKind, mask: ArrayLike, values: ArrayLike):
        """
        Constrain the masked slots of ``kind``.

        Args:
            kind: DOF kind
            mask: Boolean selection, broadcastable to the local shape
            values: Prescribed values, broadcastable to the local shape
        """
        shape = self.subgrid.local_shape(kind)
        mask = np.broadcast_to(np.asarray(mask, dtype=bool), shape)
        values = np.broadcast_to(np.asarray(values, dtype=float), shape)
        if not np.all(np.isfinite(values[mask])):
            raise ValueError(f"Constraint values for {kind.value} must be finite")
        self._check(kind, mask)

        if kind in self._entries:
            old_mask, old_values = self._entries[kind]
            self._entries[kind] = (old_mask | mask, np.where(mask, values, old_values))
        else:
            self._entries[kind] = (mask.copy(), np.where(mask, values, UNCONSTRAINED))

    def _check(self, kind: DOFKind, mask: NDArray[np.bool_]):
        pass

    def __iter__(self) -> Iterator[tuple[DOFKind, NDArray[np.bool_], NDArray]]:
        for kind, (mask, values) in self._entries.items():
            yield kind, mask, values

    def __contains__(self, kind: DOFKind) -> bool:
        return kind in self._entries

    def mask(self, kind: DOFKind) -> NDArray[np.bool_]:
        if kind not in self._entries:
            return np.zeros(self.subgrid.local_shape(kind), dtype=bool)
        return self._entries[kind][0]

    def values(self, kind: DOFKind) -> NDArray:
        if kind not in self._entries:
            return np.full(self.subgrid.local_shape(kind), UNCONSTRAINED)
        return self._entries[kind][1]

    def count(self, kind: DOFKind | None = None) -> int:
        if kind is None:
            return sum(int(np.count_nonzero(mask)) for mask, _ in self._entries.values())
        return int(np.count_nonzero(self.mask(kind)))


class TwoPointPatch(ConstraintPatch):
    """Ghost-only constraints realizing no-slip mirrors at physical boundaries."""

    def _check(self, kind: DOFKind, mask: NDArray[np.bool_]):
        if not kind.is_velocity:
            raise ValueError(f"Two-point constraints apply to velocity components only, got {kind.value}")
        if np.any(mask & self.subgrid.owned_mask(kind)):
            raise ValueError(f"Two-point constraints for {kind.value} must not touch owned slots")


class ConstraintFields:
    """The five constraint fields of one rank."""

    def __init__(self, subgrid: SubGrid):
        self.subgrid = subgrid
        self._fields = {kind: ConstraintField(kind, subgrid) for kind in DOFKind}

    def __getitem__(self, kind: DOFKind) -> ConstraintField:
        return self._fields[kind]

    def __iter__(self) -> Iterator[ConstraintField]:
        return iter(self._fields.values())

    def reset(self):
        for field in self._fields.values():
            field.reset()

    def apply(self, patch: ConstraintPatch):
        for kind, mask, values in patch:
            self._fields[kind].write(mask, values)

    def snapshot(self) -> dict[DOFKind, NDArray]:
        """Read-only views of the current values."""
        views = {}
        for kind, field in self._fields.items():
            view = field.values.view()
            view.flags.writeable = False
            views[kind] = view
        return views

    def velocity_arrays(self) -> list[NDArray]:
        return [self._fields[kind].values for kind in VELOCITY_KINDS]
