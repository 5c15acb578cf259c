"""Surface material with validated reflectance coefficients.

A material carries ambient, diffuse and specular reflectance colours and a
shininess exponent. The marcher's shading model is diffuse only: incoming
light from the point lights is modulated by ``diffuse`` and the scene's
ambient light by ``ambient``. ``specular`` and ``shininess`` are validated
and kept on the host side only; the shading kernels do not read them.

Materials are validated once at construction and never change afterwards.

Example:
    >>> from sdfmarch.materials import Material
    >>> red = Material(diffuse=(0.9, 0.1, 0.1))
    >>> Material(diffuse=(1.5, 0.0, 0.0))
    Traceback (most recent call last):
        ...
    ValueError: Material diffuse red channel = 1.5 is outside [0, 1]
"""

import math
import numbers
from collections.abc import Sequence
from dataclasses import dataclass

from sdfmarch.core.ray import Vec3Tuple, as_vec3_tuple

# Default reflectance: every channel reflects everything
DEFAULT_AMBIENT_MATERIAL: Vec3Tuple = (1.0, 1.0, 1.0)
DEFAULT_DIFFUSE_MATERIAL: Vec3Tuple = (1.0, 1.0, 1.0)
DEFAULT_SPECULAR_MATERIAL: Vec3Tuple = (1.0, 1.0, 1.0)
DEFAULT_SHININESS = 1.0

_CHANNELS = ("red", "green", "blue")


def as_color(value: Sequence[float] | float, name: str = "color") -> Vec3Tuple:
    """Coerce a grey level or an RGB sequence into an RGB tuple.

    Args:
        value: A single number (grey) or three channel values.
        name: Name used in error messages.

    Returns:
        The colour as (r, g, b) floats. No clamping is applied.

    Raises:
        ValueError: If the value is neither a finite number nor three
            finite numbers.
    """
    if isinstance(value, numbers.Real) and not isinstance(value, bool):
        grey = float(value)
        if not math.isfinite(grey):
            raise ValueError(f"{name} must be finite, got {value!r}")
        return (grey, grey, grey)
    return as_vec3_tuple(value, name)


@dataclass(frozen=True)
class Material:
    """Reflectance coefficients of a solid.

    Attributes:
        ambient: Fraction of the scene ambient light reflected, per channel.
        diffuse: Fraction of incoming point-light radiance reflected
            (Lambertian), per channel.
        specular: Specular reflectance, per channel.
        shininess: Specular exponent. Must be non-negative.

    Raises:
        ValueError: If any channel is outside [0, 1] or shininess is negative.
    """

    ambient: Vec3Tuple | float = DEFAULT_AMBIENT_MATERIAL
    diffuse: Vec3Tuple | float = DEFAULT_DIFFUSE_MATERIAL
    specular: Vec3Tuple | float = DEFAULT_SPECULAR_MATERIAL
    shininess: float = DEFAULT_SHININESS

    def __post_init__(self) -> None:
        for attribute in ("ambient", "diffuse", "specular"):
            color = as_color(getattr(self, attribute), f"Material {attribute}")
            for channel, component in zip(_CHANNELS, color):
                if component < 0.0 or component > 1.0:
                    raise ValueError(
                        f"Material {attribute} {channel} channel = {component} "
                        "is outside [0, 1]"
                    )
            object.__setattr__(self, attribute, color)

        if isinstance(self.shininess, bool) or not isinstance(self.shininess, numbers.Real):
            raise ValueError(f"Material shininess must be a number, got {self.shininess!r}")
        shininess = float(self.shininess)
        if not (math.isfinite(shininess) and shininess >= 0.0):
            raise ValueError(f"Material shininess = {shininess} must be finite and non-negative")
        object.__setattr__(self, "shininess", shininess)


DEFAULT_MATERIAL = Material()
