"""
Fixed-cell flag files.

Each rank stores the lock flags of its owned cells as raw bytes, one byte per
cell in C order (z, y, x), in ``"{base}.{rank:08d}.dat"``. The same bytes are
streamed through restart files when cell locking is active.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, BinaryIO

import numpy as np

from stagbc.utils.bc_logging import get_logger
from stagbc.utils.exceptions import CheckpointError

if TYPE_CHECKING:
    from numpy.typing import NDArray

logger = get_logger(__name__)


def fixed_cell_path(base: str | Path, rank: int) -> Path:
    """Flag file of ``rank``."""
    return Path(f"{base}.{rank:08d}.dat")


def read_fixed_cells(base: str | Path, rank: int, shape: tuple[int, int, int]) -> NDArray[np.uint8]:
    """
    Load the lock flags of the owned cells of ``rank``.

    Args:
        base: File base name (e.g. ``./bc/cdb``)
        rank: Rank number
        shape: Owned cell shape ``(nz, ny, nx)``

    Returns:
        Flags of shape ``shape``

    Raises:
        CheckpointError: Missing file or wrong byte count
    """
    path = fixed_cell_path(base, rank)
    expected = int(np.prod(shape))

    if not path.is_file():
        raise CheckpointError(str(path), "file not found")

    actual = path.stat().st_size
    if actual != expected:
        raise CheckpointError(str(path), "wrong file size", expected_size=expected, actual_size=actual)

    logger.info(f"Loading fixed cell flags from {path}")
    return np.fromfile(path, dtype=np.uint8).reshape(shape)


def write_fixed_cells(base: str | Path, rank: int, flags: NDArray) -> Path:
    """Store the lock flags of the owned cells of ``rank``; parent directories are created."""
    path = fixed_cell_path(base, rank)
    path.parent.mkdir(parents=True, exist_ok=True)
    np.ascontiguousarray(flags, dtype=np.uint8).tofile(path)
    return path


def write_restart(fp: BinaryIO, flags: NDArray | None):
    """Append the lock flags to an open restart file (nothing when locking is off)."""
    if flags is None:
        return
    fp.write(np.ascontiguousarray(flags, dtype=np.uint8).tobytes())


def read_restart(fp: BinaryIO, shape: tuple[int, int, int], fix_cell: bool = True) -> NDArray[np.uint8] | None:
    """
    Read the lock flags back from an open restart file.

    Raises:
        CheckpointError: The file ends before all flags are read
    """
    if not fix_cell:
        return None
    expected = int(np.prod(shape))
    data = fp.read(expected)
    if len(data) != expected:
        name = getattr(fp, "name", "<restart stream>")
        raise CheckpointError(str(name), "truncated restart data", expected_size=expected, actual_size=len(data))
    return np.frombuffer(data, dtype=np.uint8).reshape(shape).copy()
