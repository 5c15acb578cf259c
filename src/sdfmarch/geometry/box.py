"""Axis-aligned box primitive as a signed distance field.

The box is given by its centre and its full extent along each axis. With
q = |p - center| - sizes / 2 (per axis), the distance field is

    outside:  |max(q, 0)|          (Euclidean distance to the box)
    inside:   max(q.x, q.y, q.z)   (minus the distance to the nearest face)

Both branches are exact, so the field never overestimates the distance to
the surface and is safe to sphere-march. The inside test is a plain
per-axis bound check and is used to pick the branch.

Example:
    >>> from sdfmarch.geometry.box import Box
    >>> Box(center=(4.0, 5.0, 6.0), sizes=3.0).sizes
    (3.0, 3.0, 3.0)
"""

from collections.abc import Sequence
from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from sdfmarch.core.ray import Vec3Tuple, as_vec3_tuple, vec3


@dataclass(frozen=True)
class Box:
    """An axis-aligned box.

    Attributes:
        center: The centre of the box (x, y, z).
        sizes: Full extent along x, y and z. A single number gives a cube.
            Not validated; zero extents degenerate to a rectangle, segment
            or point.
    """

    center: Vec3Tuple = (0.0, 0.0, 0.0)
    sizes: Vec3Tuple | float = (1.0, 1.0, 1.0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", as_vec3_tuple(self.center, "Box center"))
        sizes = self.sizes
        if not isinstance(sizes, Sequence):
            sizes = (sizes, sizes, sizes)
        object.__setattr__(self, "sizes", as_vec3_tuple(sizes, "Box sizes"))

    def shape_parameters(self) -> Vec3Tuple:
        """Pack the shape parameters into the per-solid parameter slot."""
        return self.sizes  # type: ignore[return-value]


@ti.func
def inside_box(center: vec3, sizes: vec3, p: vec3) -> ti.i32:
    """Check whether p lies inside the box (faces included).

    Args:
        center: The centre of the box.
        sizes: Full extent along each axis.
        p: The query point.

    Returns:
        1 if p is inside or on the boundary, 0 otherwise.
    """
    half = 0.5 * sizes
    result = 1
    for i in ti.static(range(3)):
        if p[i] < center[i] - half[i] or p[i] > center[i] + half[i]:
            result = 0
    return result


@ti.func
def sdf_box(center: vec3, sizes: vec3, p: vec3) -> ti.f64:
    """Signed distance from p to the surface of an axis-aligned box.

    Args:
        center: The centre of the box.
        sizes: Full extent along each axis.
        p: The query point.

    Returns:
        The signed distance: negative inside (magnitude is the distance to
        the nearest face), positive outside.
    """
    q = ti.abs(p - center) - 0.5 * sizes
    d = 0.0
    if inside_box(center, sizes, p):
        d = ti.max(q.x, ti.max(q.y, q.z))
    else:
        d = tm.length(ti.max(q, 0.0))
    return d
