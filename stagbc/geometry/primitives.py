"""
Geometry primitives for constraint regions.

All tests are vectorized: coordinate arguments are numpy arrays that
broadcast against each other, and results have the broadcast shape.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, NamedTuple

import numpy as np

if TYPE_CHECKING:
    from collections.abc import Sequence

    from numpy.typing import ArrayLike, NDArray


class Pose(NamedTuple):
    """Planar rigid-body pose: position and rotation angle (radians)."""

    x: float
    y: float
    theta: float


# =============================================================================
# Polygon
# =============================================================================


def polygon_box(vertices: ArrayLike, rtol: float = 1e-12) -> tuple[NDArray, float]:
    """
    Bounding box of a polygon and the absolute tolerance derived from it.

    Args:
        vertices: Polygon vertices, shape (n, 2)
        rtol: Tolerance relative to the largest box extent

    Returns:
        ``(box, atol)`` with ``box = [xmin, xmax, ymin, ymax]``
    """
    vertices = np.asarray(vertices, dtype=float)
    box = np.array(
        [vertices[:, 0].min(), vertices[:, 0].max(), vertices[:, 1].min(), vertices[:, 1].max()]
    )
    atol = rtol * max(box[1] - box[0], box[3] - box[2])
    return box, atol


def in_polygon(x: ArrayLike, y: ArrayLike, vertices: ArrayLike, rtol: float = 1e-12) -> NDArray[np.bool_]:
    """
    Point-in-polygon test with boundary tolerance.

    Points outside the bounding box (expanded by the tolerance) are rejected
    first. The rest are classified by ray casting; points closer than the
    tolerance to an edge count as inside.

    Args:
        x, y: Point coordinates (broadcastable)
        vertices: Polygon vertices, shape (n, 2), either orientation
        rtol: Tolerance relative to the polygon size

    Returns:
        Boolean array, True for points inside or on the boundary

    Example:
        >>> square = [(0, 0), (1, 0), (1, 1), (0, 1)]
        >>> in_polygon(np.array([0.5, 1.5, 1.0]), np.array([0.5, 0.5, 0.5]), square)
        array([ True, False,  True])
    """
    vertices = np.asarray(vertices, dtype=float)
    px, py = np.broadcast_arrays(np.asarray(x, dtype=float), np.asarray(y, dtype=float))
    box, atol = polygon_box(vertices, rtol)

    candidate = (px >= box[0] - atol) & (px <= box[1] + atol) & (py >= box[2] - atol) & (py <= box[3] + atol)

    inside = np.zeros(px.shape, dtype=bool)
    on_edge = np.zeros(px.shape, dtype=bool)

    n = len(vertices)
    j = n - 1
    for i in range(n):
        xi, yi = vertices[i]
        xj, yj = vertices[j]

        # Ray casting; horizontal edges never cross the ray
        if yj != yi:
            cond1 = (yi > py) != (yj > py)
            slope = (xj - xi) / (yj - yi)
            cond2 = px < (slope * (py - yi) + xi)
            inside ^= cond1 & cond2

        # Distance to the edge segment
        dx, dy = xj - xi, yj - yi
        length2 = dx * dx + dy * dy
        if length2 > 0.0:
            t = np.clip(((px - xi) * dx + (py - yi) * dy) / length2, 0.0, 1.0)
            dist = np.hypot(px - (xi + t * dx), py - (yi + t * dy))
        else:
            dist = np.hypot(px - xi, py - yi)
        on_edge |= dist <= atol

        j = i

    return candidate & (inside | on_edge)


# =============================================================================
# Box and cylinder
# =============================================================================


def in_box(
    coords: Sequence[ArrayLike],
    lower: Sequence[float],
    upper: Sequence[float],
) -> NDArray[np.bool_]:
    """Inclusive axis-aligned box test; ``coords``, ``lower`` and ``upper`` share the axis order."""
    result = np.bool_(True)
    for c, lo, hi in zip(coords, lower, upper, strict=True):
        c = np.asarray(c)
        result = result & (c >= lo) & (c <= hi)
    return np.asarray(result)


def cylinder_profile(
    x: ArrayLike,
    y: ArrayLike,
    z: ArrayLike,
    base: Sequence[float],
    cap: Sequence[float],
    radius: float,
    parabolic: bool = False,
) -> tuple[NDArray[np.bool_], NDArray]:
    """
    Finite-cylinder containment with radial profile factor.

    The point is projected onto the base-to-cap axis; ``u`` is the
    normalized axial coordinate and ``r`` the distance to the axis divided by
    the radius. A point is inside when ``0 <= u <= 1`` and ``r <= 1``.

    Args:
        x, y, z: Point coordinates (broadcastable)
        base, cap: Axis end points
        radius: Cylinder radius
        parabolic: Use the ``1 - r**2`` falloff instead of a uniform profile

    Returns:
        ``(inside, factor)`` where the prescribed velocity is ``v * factor``

    Example:
        >>> inside, factor = cylinder_profile(0.0, 0.0, 5.0, (0, 0, 0), (0, 0, 10), 2.0)
        >>> bool(inside), float(factor)
        (True, 1.0)
    """
    ax, ay, az = np.subtract(cap, base, dtype=float)
    px = np.asarray(x, dtype=float) - base[0]
    py = np.asarray(y, dtype=float) - base[1]
    pz = np.asarray(z, dtype=float) - base[2]

    u = (ax * px + ay * py + az * pz) / (ax * ax + ay * ay + az * az)
    dist = np.sqrt((px - u * ax) ** 2 + (py - u * ay) ** 2 + (pz - u * az) ** 2)
    r = dist / radius

    inside = (u >= 0.0) & (u <= 1.0) & (r <= 1.0)
    factor = 1.0 - r**2 * (1.0 if parabolic else 0.0)
    return inside, factor


# =============================================================================
# Rigid transform
# =============================================================================


def rotate_displace_2d(x: ArrayLike, y: ArrayLike, start: Pose, end: Pose) -> tuple[NDArray, NDArray]:
    """
    Move points rigidly from ``start`` to ``end`` pose.

    Points are rotated by ``end.theta - start.theta`` about the start-pose
    origin, then translated by the displacement of that origin.
    """
    dtheta = end.theta - start.theta
    c, s = np.cos(dtheta), np.sin(dtheta)
    rx = np.asarray(x, dtype=float) - start.x
    ry = np.asarray(y, dtype=float) - start.y
    return c * rx - s * ry + end.x, s * rx + c * ry + end.y
