"""Materials module for surface reflectance.

This module describes how a solid reflects light:

Components:
    material: Validated ambient / diffuse / specular reflectance values

Materials are plain immutable values. They are checked once when created
(every channel in [0, 1], shininess non-negative) and are only read at the
shading step, never while marching.
"""

from .material import (
    DEFAULT_AMBIENT_MATERIAL,
    DEFAULT_DIFFUSE_MATERIAL,
    DEFAULT_MATERIAL,
    DEFAULT_SHININESS,
    DEFAULT_SPECULAR_MATERIAL,
    Material,
    as_color,
)

__all__ = [
    "Material",
    "DEFAULT_MATERIAL",
    "DEFAULT_AMBIENT_MATERIAL",
    "DEFAULT_DIFFUSE_MATERIAL",
    "DEFAULT_SPECULAR_MATERIAL",
    "DEFAULT_SHININESS",
    "as_color",
]
