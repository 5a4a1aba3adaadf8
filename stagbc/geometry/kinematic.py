"""
Kinematic (moving polygon) blocks.

A block is a polygon with a vertical extent that follows a path of timed
poses. Between path points the pose is interpolated linearly in position and
angle. The velocity of a point inside the block is the finite difference of
its rigidly transported position over one time step.

Curved (Bezier) paths between the path points are not implemented; the
segments are straight.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

import numpy as np

from .primitives import Pose, in_polygon, rotate_displace_2d

if TYPE_CHECKING:
    from numpy.typing import ArrayLike, NDArray


@dataclass(frozen=True, eq=False)
class KinematicBlock:
    """
    Polygonal block moving along a timed path.

    Attributes:
        times: Ascending path times, shape (n,)
        path: Path positions, shape (n, 2)
        theta: Path rotation angles in radians, shape (n,)
        polygon: Polygon vertices at the first path pose, shape (m, 2)
        bot, top: Vertical extent
    """

    times: NDArray
    path: NDArray
    theta: NDArray
    polygon: NDArray
    bot: float
    top: float

    def __post_init__(self):
        for name in ("times", "path", "theta", "polygon"):
            object.__setattr__(self, name, np.asarray(getattr(self, name), dtype=float))
        if self.times.size < 2:
            raise ValueError("Kinematic block needs at least two path points")
        if self.path.shape != (self.times.size, 2) or self.theta.shape != self.times.shape:
            raise ValueError("Kinematic block path, angles and times must have matching lengths")
        if np.any(np.diff(self.times) <= 0):
            raise ValueError("Kinematic block path times must be strictly ascending")

    @property
    def reference_pose(self) -> Pose:
        return Pose(self.path[0, 0], self.path[0, 1], self.theta[0])

    def pose(self, t: float) -> Pose | None:
        """Interpolated pose at ``t``, or None outside the path's time interval."""
        if t < self.times[0] or t > self.times[-1]:
            return None

        i = int(np.searchsorted(self.times, t, side="right")) - 1
        i = min(max(i, 0), self.times.size - 2)
        r = (t - self.times[i]) / (self.times[i + 1] - self.times[i])

        x, y = self.path[i] + r * (self.path[i + 1] - self.path[i])
        theta = self.theta[i] + r * (self.theta[i + 1] - self.theta[i])
        return Pose(float(x), float(y), float(theta))

    def polygon_at(self, pose: Pose) -> NDArray:
        """Polygon vertices in world space at ``pose``."""
        x, y = rotate_displace_2d(self.polygon[:, 0], self.polygon[:, 1], self.reference_pose, pose)
        return np.column_stack([x, y])

    def velocity(
        self,
        x: ArrayLike,
        y: ArrayLike,
        z: ArrayLike,
        t: float,
        dt: float,
    ) -> tuple[NDArray[np.bool_], NDArray, NDArray] | None:
        """
        Velocity of points carried by the block over ``[t, t + dt]``.

        Returns:
            ``(inside, vx, vy)`` broadcast to the point shape, or None when the
            block is not active over the whole step
        """
        start = self.pose(t)
        end = self.pose(t + dt)
        if start is None or end is None:
            return None

        x, y, z = np.broadcast_arrays(*(np.asarray(c, dtype=float) for c in (x, y, z)))
        inside = (z >= self.bot) & (z <= self.top) & in_polygon(x, y, self.polygon_at(start))

        xe, ye = rotate_displace_2d(x, y, start, end)
        return inside, (xe - x) / dt, (ye - y) / dt
