"""Geometry module for distance-field primitives and world bounds.

This module provides the shapes a scene is built from:

Components:
    sphere: Sphere primitive with an exact signed distance field
    box: Axis-aligned box primitive with an exact signed distance field
    primitive: Primitive kind tags and the SDF dispatch over them
    bounds: World bounds that terminate marching

Every primitive exposes a signed distance function that is negative
inside, zero on the surface and positive outside, and never overestimates
the true distance to the surface. The SDFs are Taichi functions
(@ti.func) so the marching kernels can inline them.

Distance queries follow the pattern:
    d = primitive_sdf(kind, center, params, point)
"""

from .bounds import DEFAULT_WORLD_BOUNDS, Bounds, inside_aabb
from .box import Box, inside_box, sdf_box
from .primitive import Primitive, PrimitiveType, get_primitive_type, primitive_sdf
from .sphere import Sphere, sdf_sphere

__all__ = [
    "Bounds",
    "DEFAULT_WORLD_BOUNDS",
    "inside_aabb",
    "Sphere",
    "sdf_sphere",
    "Box",
    "sdf_box",
    "inside_box",
    "Primitive",
    "PrimitiveType",
    "get_primitive_type",
    "primitive_sdf",
]
