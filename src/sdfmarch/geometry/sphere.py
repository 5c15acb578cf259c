"""Sphere primitive as a signed distance field.

The sphere SDF is exact: the distance from a point to the sphere surface
is the distance to the centre minus the radius. Points inside the sphere
get a negative distance.

Example:
    >>> from sdfmarch.geometry.sphere import Sphere
    >>> sphere = Sphere(center=(3.0, 0.0, 0.0), radius=1.5)
    >>> sphere.shape_parameters()
    (1.5, 0.0, 0.0)
    >>> # Use sdf_sphere within a Taichi kernel
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from sdfmarch.core.ray import Vec3Tuple, as_vec3_tuple, vec3


@dataclass(frozen=True)
class Sphere:
    """A sphere defined by centre point and radius.

    Attributes:
        center: The centre of the sphere (x, y, z).
        radius: The radius of the sphere. Not validated; a zero radius
            degenerates to the distance field of a point.
    """

    center: Vec3Tuple = (0.0, 0.0, 0.0)
    radius: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "center", as_vec3_tuple(self.center, "Sphere center"))
        object.__setattr__(self, "radius", float(self.radius))

    def shape_parameters(self) -> Vec3Tuple:
        """Pack the shape parameters into the per-solid parameter slot."""
        return (self.radius, 0.0, 0.0)


@ti.func
def sdf_sphere(center: vec3, radius: ti.f64, p: vec3) -> ti.f64:
    """Signed distance from p to the surface of a sphere.

    Args:
        center: The centre of the sphere.
        radius: The radius of the sphere.
        p: The query point.

    Returns:
        |p - center| - radius. Negative inside, zero on the surface.
    """
    return tm.length(p - center) - radius
