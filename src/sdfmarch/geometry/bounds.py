"""Axis-aligned world bounds that limit how far rays are marched.

A ray that leaves the bounds is a miss. Together with the surface epsilon
this is what guarantees every marching loop terminates: each step either
lands within the epsilon of a surface or moves the ray forward by at least
the epsilon, and the bounds are finite.
"""

import math
from dataclasses import dataclass

import taichi as ti

from sdfmarch.core.ray import Vec3Tuple, as_vec3_tuple, vec3


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned region given by two opposite corners.

    The corners may be given in any order; ``lower`` and ``upper`` sort
    them per axis.

    Attributes:
        corner_a: One corner (x, y, z).
        corner_b: The opposite corner (x, y, z).
    """

    corner_a: Vec3Tuple
    corner_b: Vec3Tuple

    def __post_init__(self) -> None:
        object.__setattr__(self, "corner_a", as_vec3_tuple(self.corner_a, "Bounds corner"))
        object.__setattr__(self, "corner_b", as_vec3_tuple(self.corner_b, "Bounds corner"))

    @property
    def lower(self) -> Vec3Tuple:
        """Per-axis minimum corner."""
        a, b = self.corner_a, self.corner_b
        return (min(a[0], b[0]), min(a[1], b[1]), min(a[2], b[2]))

    @property
    def upper(self) -> Vec3Tuple:
        """Per-axis maximum corner."""
        a, b = self.corner_a, self.corner_b
        return (max(a[0], b[0]), max(a[1], b[1]), max(a[2], b[2]))

    @property
    def diagonal(self) -> float:
        """Length of the box diagonal."""
        return math.dist(self.corner_a, self.corner_b)

    def contains(self, point: Vec3Tuple) -> bool:
        """Check whether a point lies inside the bounds (faces included)."""
        p = as_vec3_tuple(point, "point")
        lower, upper = self.lower, self.upper
        return all(lower[i] <= p[i] <= upper[i] for i in range(3))


# The world used when a scene does not specify its own bounds
DEFAULT_WORLD_BOUNDS = Bounds((-2.0, 24.0, 24.0), (24.0, -24.0, -24.0))


@ti.func
def inside_aabb(lower: vec3, upper: vec3, p: vec3) -> ti.i32:
    """Check whether p lies inside an axis-aligned box (faces included).

    Args:
        lower: Per-axis minimum corner.
        upper: Per-axis maximum corner.
        p: The query point.

    Returns:
        1 if p is inside, 0 otherwise.
    """
    result = 1
    for i in ti.static(range(3)):
        if not (lower[i] <= p[i] and p[i] <= upper[i]):
            result = 0
    return result
