"""
No-slip faces as two-point constraints.

Zero tangential velocity on a face is realized by zeroing the ghost slot
beyond the face, so the solver mirrors the first interior value. These
constraints touch physical ghost slots only and are merged after the halo
exchange.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from stagbc.boundary.fields import TwoPointPatch
from stagbc.grid.staggered import DOFKind

if TYPE_CHECKING:
    from collections.abc import Mapping

    from numpy.typing import NDArray

    from stagbc.config.core import BCConfig
    from stagbc.grid.staggered import SubGrid

    from .base import StepContext

# Faces in no-slip mask order: (array axis, side)
FACES = {
    "left": (2, -1),
    "right": (2, +1),
    "front": (1, -1),
    "back": (1, +1),
    "bottom": (0, -1),
    "top": (0, +1),
}

# Faces tangential to each velocity component
TANGENTIAL = {
    DOFKind.VX: ("front", "back", "bottom", "top"),
    DOFKind.VY: ("left", "right", "bottom", "top"),
    DOFKind.VZ: ("left", "right", "front", "back"),
}


@dataclass(frozen=True)
class NoSlipRule:
    """Zero tangential ghost velocities beyond the no-slip faces."""

    noslip: tuple[bool, bool, bool, bool, bool, bool]
    name: str = "noslip"

    @classmethod
    def from_config(cls, config: BCConfig) -> NoSlipRule:
        return cls(noslip=tuple(config.noslip))

    @property
    def active(self) -> tuple[str, ...]:
        return tuple(face for face, flag in zip(FACES, self.noslip, strict=True) if flag)

    def __call__(self, subgrid: SubGrid, fields: Mapping[DOFKind, NDArray], ctx: StepContext) -> TwoPointPatch:
        patch = TwoPointPatch(subgrid)
        active = self.active
        if not active:
            return patch

        for kind, faces in TANGENTIAL.items():
            index = subgrid.global_index(kind)
            shape = subgrid.grid.global_shape(kind)
            for face in faces:
                if face not in active:
                    continue
                axis, side = FACES[face]
                ghost = -1 if side < 0 else shape[axis]
                if ghost not in index[axis]:
                    continue
                # Ghost plane beyond the face, over the internal-ghost window of the other axes
                window = list(subgrid.ghost_int(kind))
                window[axis] = slice(0, 1) if side < 0 else slice(-1, None)
                mask = np.zeros(subgrid.local_shape(kind), dtype=bool)
                mask[tuple(window)] = True
                patch.set(kind, mask, 0.0)
        return patch
