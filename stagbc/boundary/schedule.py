"""
Piecewise-constant time schedules.

A schedule holds N period values separated by N-1 ascending time delimiters.
It drives the background strain rates, the boundary-window inflow velocity
and the bottom temperature.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np


@dataclass(frozen=True)
class Schedule:
    """
    Piecewise-constant parameter of time.

    Attributes:
        values: Period values (at least one)
        delims: Ascending period boundaries, one fewer than ``values``

    Example:
        >>> s = Schedule((0.1, 0.2, 0.3), (1.0, 2.0))
        >>> s.value(0.5), s.value(1.5), s.value(5.0)
        (0.1, 0.2, 0.3)
    """

    values: tuple[float, ...]
    delims: tuple[float, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "values", tuple(float(v) for v in self.values))
        object.__setattr__(self, "delims", tuple(float(d) for d in self.delims))
        if not self.values:
            raise ValueError("Schedule needs at least one period value")
        if len(self.delims) != len(self.values) - 1:
            raise ValueError(
                f"Schedule with {len(self.values)} periods needs {len(self.values) - 1} delimiters, "
                f"got {len(self.delims)}"
            )
        if any(b <= a for a, b in zip(self.delims[:-1], self.delims[1:], strict=False)):
            raise ValueError(f"Schedule delimiters must be strictly ascending: {self.delims}")

    @classmethod
    def constant(cls, value: float) -> Schedule:
        return cls((value,))

    @property
    def num_periods(self) -> int:
        return len(self.values)

    def period_index(self, t: float) -> int:
        """Index of the period containing ``t`` (clamped to the first and last period)."""
        # A time equal to a delimiter belongs to the following period
        return int(np.searchsorted(self.delims, t, side="right"))

    def value(self, t: float) -> float:
        """Value of the period containing ``t``."""
        return self.values[self.period_index(t)]
