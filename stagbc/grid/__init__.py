"""
Staggered grid package.

- StaggeredGrid: global tensor-product grid with a static processor layout
- SubGrid: owned block of one rank plus its ghost halo
- DOFIndex: per-rank DOF counts and global offsets
- HaloExchange / InProcessHalo: ghost-layer synchronization
"""

from .halo import HaloExchange, InProcessHalo
from .staggered import VELOCITY_KINDS, Discret1D, DOFIndex, DOFKind, StaggeredGrid, SubGrid

__all__ = [
    "VELOCITY_KINDS",
    "DOFIndex",
    "DOFKind",
    "Discret1D",
    "HaloExchange",
    "InProcessHalo",
    "StaggeredGrid",
    "SubGrid",
]
