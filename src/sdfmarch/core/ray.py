"""Ray data structure and vector utilities for sphere marching.

This module provides the Ray dataclass and the vector helpers the marcher
uses. All device-side operations are Taichi functions so they can be
inlined into the marching kernels; a couple of host-side helpers convert
user input into plain float tuples.

The marching loops never mutate a ray in place. Each step builds the next
position from the previous one (see ``advance``), which keeps a ray owned
by exactly one loop iteration chain.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> origin = vec3(0.0, 0.0, 0.0)
    >>> ray = Ray(position=origin, direction=vec3(1.0, 0.0, 0.0))
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import math
from collections.abc import Sequence

import taichi as ti
import taichi.math as tm

# 3D vectors are always float64; normal estimation needs the precision
vec3 = ti.types.vector(3, ti.f64)

# Host-side representation of a point, direction or colour
Vec3Tuple = tuple[float, float, float]


@ti.dataclass
class Ray:
    """A ray with a current position and a unit direction.

    Attributes:
        position: Where the ray currently is (vec3). Starts at the ray
            origin and moves forward as the ray is marched.
        direction: The direction of travel (vec3). Expected to be unit
            length; a step of size d moves the ray exactly d units.
    """

    position: vec3
    direction: vec3


@ti.func
def make_ray(position: vec3, direction: vec3) -> Ray:
    """Create a ray from a starting position and direction."""
    return Ray(position=position, direction=direction)


@ti.func
def ray_at(ray: Ray, t: ti.f64) -> vec3:
    """Compute the point at distance t along the ray.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the ray.

    Returns:
        The point ray.position + t * ray.direction.
    """
    return ray.position + t * ray.direction


@ti.func
def advance(ray: Ray, step: ti.f64) -> Ray:
    """Return the ray moved forward by one marching step.

    Args:
        ray: The ray to move.
        step: Distance to travel along the ray direction.

    Returns:
        A new Ray at ray_at(ray, step) with the same direction.
    """
    return Ray(position=ray_at(ray, step), direction=ray.direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f64:
    """Compute the Euclidean length of a vector."""
    return tm.length(v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    A zero vector is not guarded against; the result is undefined (NaN).
    """
    return tm.normalize(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f64:
    """Compute the dot product a . b."""
    return tm.dot(a, b)


@ti.func
def distance(a: vec3, b: vec3) -> ti.f64:
    """Compute the Euclidean distance between two points."""
    return tm.length(b - a)


@ti.func
def direction(a: vec3, b: vec3) -> vec3:
    """Compute the unit vector pointing from a toward b.

    Args:
        a: The start point.
        b: The target point. Must differ from a.

    Returns:
        normalize(b - a).
    """
    return tm.normalize(b - a)


# =============================================================================
# Host-side helpers
# =============================================================================


def as_vec3_tuple(value: Sequence[float], name: str = "vector") -> Vec3Tuple:
    """Coerce a 3-sequence of numbers into a tuple of floats.

    Args:
        value: Any sequence of three real numbers.
        name: Name used in the error message.

    Returns:
        The value as (x, y, z) floats.

    Raises:
        ValueError: If value does not hold exactly three finite numbers.
    """
    try:
        items = tuple(float(component) for component in value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"{name} must be a sequence of three numbers, got {value!r}") from exc
    if len(items) != 3:
        raise ValueError(f"{name} must have exactly three components, got {len(items)}")
    if not all(math.isfinite(component) for component in items):
        raise ValueError(f"{name} components must be finite, got {items!r}")
    return items  # type: ignore[return-value]
