"""Closed set of distance-field primitive kinds and their SDF dispatch.

Primitives are stored on the device as a tag plus a centre and a packed
parameter vector (see Sphere.shape_parameters and Box.shape_parameters).
``primitive_sdf`` is the single place that switches on the tag, so a new
primitive kind needs a new PrimitiveType member, an entry in
``_PRIMITIVE_TYPES`` and one branch below; scene composition never looks
at the tag.
"""

from enum import IntEnum

import taichi as ti

from sdfmarch.core.ray import vec3
from sdfmarch.geometry.box import Box, sdf_box
from sdfmarch.geometry.sphere import Sphere, sdf_sphere

# Any host-side primitive description
Primitive = Sphere | Box


class PrimitiveType(IntEnum):
    """Enumeration of supported primitive kinds.

    Used as the per-solid tag for SDF dispatch inside the marching kernels.
    """

    SPHERE = 0
    BOX = 1


_PRIMITIVE_TYPES: dict[type, PrimitiveType] = {
    Sphere: PrimitiveType.SPHERE,
    Box: PrimitiveType.BOX,
}


def get_primitive_type(primitive: Primitive) -> PrimitiveType:
    """Get the tag for a host-side primitive.

    Args:
        primitive: A Sphere or Box.

    Returns:
        The PrimitiveType used to store it.

    Raises:
        TypeError: If the object is not a supported primitive.
    """
    try:
        return _PRIMITIVE_TYPES[type(primitive)]
    except KeyError:
        raise TypeError(f"Unsupported primitive type: {type(primitive).__name__}") from None


@ti.func
def primitive_sdf(kind: ti.i32, center: vec3, params: vec3, p: vec3) -> ti.f64:
    """Evaluate the signed distance field of a tagged primitive.

    Args:
        kind: The PrimitiveType tag.
        center: The primitive centre.
        params: The packed shape parameters.
        p: The query point.

    Returns:
        The signed distance from p to the primitive surface.
    """
    d = 0.0
    if kind == int(PrimitiveType.SPHERE):
        d = sdf_sphere(center, params[0], p)
    elif kind == int(PrimitiveType.BOX):
        d = sdf_box(center, params, p)
    return d
