"""Core rendering module.

Components:
    ray: Ray data structure and vector utilities
    marcher: Primary ray marching, shadow rays and shading
    sampler: Per-pixel image sampling into a NumPy buffer

All compute-intensive operations use Taichi kernels and run in float64.
"""

from .ray import (
    Ray,
    Vec3Tuple,
    advance,
    as_vec3_tuple,
    direction,
    distance,
    dot,
    length,
    make_ray,
    normalize,
    ray_at,
    vec3,
)

# Note: marcher and sampler are NOT imported here because they pull in
# modules that declare Taichi fields. Import them directly when needed:
#   from sdfmarch.core.sampler import render

__all__ = [
    "Ray",
    "Vec3Tuple",
    "advance",
    "as_vec3_tuple",
    "direction",
    "distance",
    "dot",
    "length",
    "make_ray",
    "normalize",
    "ray_at",
    "vec3",
]
