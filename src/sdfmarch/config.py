"""Render configuration and Taichi runtime setup.

This module holds the tunable parameters of the sphere marcher and the
helper that initialises Taichi with the precision the marcher relies on.
It imports no module that declares Taichi fields, so it is
safe to import before ``ti.init()``.

The marcher works in float64 throughout. The central-difference normal
estimator uses a step of 1e-6 by default, which is below the resolution of
float32 at typical scene coordinates, so ``init_taichi`` always sets
``default_fp=ti.f64``.

Example:
    >>> from sdfmarch.config import RenderSettings, init_taichi
    >>> init_taichi("cpu")
    >>> settings = RenderSettings(resolution=(320, 180), distance_limit=0.005)
    >>> settings.to_dict()["distance_limit"]
    0.005
"""

import math
from dataclasses import asdict, dataclass, fields
from enum import IntEnum
from typing import Any

import taichi as ti

# =============================================================================
# Defaults
# =============================================================================

# Surface-hit epsilon for primary rays
DEFAULT_DISTANCE_LIMIT = 0.01

# Remaining bounce budget; reflection is not traced, see core.marcher
DEFAULT_REFLECTION_LIMIT = 1

# Central-difference step for normal estimation
DEFAULT_EPS = 1e-6

# (width, height) in pixels
DEFAULT_RESOLUTION = (640, 480)

# Shadow rays start this many distance limits off the surface
SHADOW_OFFSET_FACTOR = 5.0

# Shadow rays stop at distance_limit / SHADOW_LIMIT_DIVISOR
SHADOW_LIMIT_DIVISOR = 5.0


class AttenuationModel(IntEnum):
    """Distance falloff applied to light reaching a shaded point.

    CONSTANT leaves the light intensity untouched regardless of distance.
    INVERSE_SQUARE scales it by 1 / d^2, with d clamped below at the
    distance limit so points next to a light do not blow up.
    """

    CONSTANT = 0
    INVERSE_SQUARE = 1


@dataclass(frozen=True)
class RenderSettings:
    """Parameters accepted by the render entry points.

    Attributes:
        resolution: Output size as (width, height) in pixels.
        distance_limit: Primary-ray surface epsilon. Must be positive and finite.
        reflection_limit: Remaining reflection budget. A negative value makes
            every primary ray return the background colour.
        normal_eps: Central-difference step used for normal estimation.
        attenuation: Light distance falloff policy.
    """

    resolution: tuple[int, int] = DEFAULT_RESOLUTION
    distance_limit: float = DEFAULT_DISTANCE_LIMIT
    reflection_limit: int = DEFAULT_REFLECTION_LIMIT
    normal_eps: float = DEFAULT_EPS
    attenuation: AttenuationModel = AttenuationModel.CONSTANT

    def __post_init__(self) -> None:
        if len(self.resolution) != 2:
            raise ValueError(
                f"Resolution must be a (width, height) pair, got {self.resolution!r}"
            )
        width, height = self.resolution
        for name, value in (("width", width), ("height", height)):
            if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
                raise ValueError(f"Resolution {name} must be a positive integer, got {value!r}")
        object.__setattr__(self, "resolution", (width, height))

        for name in ("distance_limit", "normal_eps"):
            value = getattr(self, name)
            if not (math.isfinite(value) and value > 0.0):
                raise ValueError(f"{name} must be positive and finite, got {value!r}")
        if isinstance(self.reflection_limit, bool) or not isinstance(self.reflection_limit, int):
            raise ValueError(
                f"reflection_limit must be an integer, got {self.reflection_limit!r}"
            )
        object.__setattr__(self, "attenuation", AttenuationModel(self.attenuation))

    @property
    def width(self) -> int:
        """Image width in pixels."""
        return self.resolution[0]

    @property
    def height(self) -> int:
        """Image height in pixels."""
        return self.resolution[1]

    def replace(self, **changes: Any) -> "RenderSettings":
        """Return a copy with some fields changed (validated again)."""
        values = asdict(self)
        values.update(changes)
        return RenderSettings(**values)

    def to_dict(self) -> dict[str, Any]:
        """Export the settings to a plain dictionary.

        Returns:
            A dictionary suitable for JSON serialization. The attenuation
            model is stored by lower-case name.
        """
        return {
            "resolution": list(self.resolution),
            "distance_limit": self.distance_limit,
            "reflection_limit": self.reflection_limit,
            "normal_eps": self.normal_eps,
            "attenuation": self.attenuation.name.lower(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RenderSettings":
        """Load settings from a dictionary.

        Missing keys fall back to the defaults.

        Args:
            data: Dictionary with any of the RenderSettings field names.

        Returns:
            The validated settings.

        Raises:
            ValueError: If a key is unknown or a value is invalid.
        """
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ValueError(f"Unknown render setting(s): {', '.join(unknown)}")

        values = dict(data)
        if "resolution" in values:
            values["resolution"] = tuple(values["resolution"])
        if "attenuation" in values and isinstance(values["attenuation"], str):
            name = values["attenuation"].upper()
            if name not in AttenuationModel.__members__:
                raise ValueError(f"Unknown attenuation model: {values['attenuation']}")
            values["attenuation"] = AttenuationModel[name]
        return cls(**values)


# =============================================================================
# Taichi runtime
# =============================================================================


def init_taichi(arch: str = "cpu", **kwargs: Any) -> None:
    """Initialise Taichi for the marcher.

    Must be called before importing any module that declares Taichi fields
    (everything under sdfmarch.scene, sdfmarch.camera and sdfmarch.core
    except core.ray).

    Args:
        arch: Taichi backend name, e.g. "cpu", "gpu", "cuda" or "vulkan".
            The backend must support float64.
        **kwargs: Extra keyword arguments forwarded to ``ti.init``.

    Raises:
        ValueError: If ``arch`` does not name a Taichi backend.
    """
    backend = getattr(ti, arch, None)
    # ti.gpu is a list of candidate backends, the others are single archs
    if backend is None or not isinstance(backend, (type(ti.cpu), list)):
        raise ValueError(f"Unknown Taichi arch: {arch!r}")
    kwargs.setdefault("default_fp", ti.f64)
    ti.init(arch=backend, **kwargs)
