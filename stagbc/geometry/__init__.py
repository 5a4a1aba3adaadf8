"""Geometry primitives and kinematic blocks."""

from .kinematic import KinematicBlock
from .primitives import Pose, cylinder_profile, in_box, in_polygon, polygon_box, rotate_displace_2d

__all__ = [
    "KinematicBlock",
    "Pose",
    "cylinder_profile",
    "in_box",
    "in_polygon",
    "polygon_box",
    "rotate_displace_2d",
]
