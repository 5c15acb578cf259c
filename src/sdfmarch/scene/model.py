"""Immutable scene description: solids, point lights, camera and world.

These are the host-side values a scene is built from. They hold no Taichi
state and can be created before ``ti.init()``; SceneManager.load uploads
them to the device for marching.

Example:
    >>> from sdfmarch.geometry import Sphere
    >>> from sdfmarch.scene.model import LightSource, Scene, Solid
    >>> scene = Scene(
    ...     lights=[LightSource((2, 3, 0), 2.0)],
    ...     solids=[Solid(Sphere((3, 0, 0), 1.5))],
    ... )
    >>> scene.lights[0].intensity
    (2.0, 2.0, 2.0)
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

from sdfmarch.camera.image_plane import Camera
from sdfmarch.core.ray import Vec3Tuple, as_vec3_tuple
from sdfmarch.geometry.bounds import DEFAULT_WORLD_BOUNDS, Bounds
from sdfmarch.geometry.primitive import Primitive, get_primitive_type
from sdfmarch.materials.material import DEFAULT_MATERIAL, Material, as_color

# Light reaching every surface regardless of the point lights
DEFAULT_AMBIENT_LIGHT: Vec3Tuple = (0.05, 0.05, 0.05)

# Background colour for rays that hit nothing
BLACK: Vec3Tuple = (0.0, 0.0, 0.0)


@dataclass(frozen=True)
class Solid:
    """A primitive paired with the material it is shaded with.

    Attributes:
        primitive: The shape (Sphere or Box). Its SDF is the solid's SDF.
        material: Reflectance used at the shading step only.
    """

    primitive: Primitive
    material: Material = DEFAULT_MATERIAL

    def __post_init__(self) -> None:
        # Rejects unsupported primitive objects early
        get_primitive_type(self.primitive)
        if not isinstance(self.material, Material):
            raise TypeError(
                f"Solid material must be a Material, got {type(self.material).__name__}"
            )


@dataclass(frozen=True)
class LightSource:
    """A point light.

    Its distance field is the distance to ``position``, so shadow rays can
    march toward it in the same field as the solids.

    Attributes:
        position: Light position in world space.
        intensity: Emitted colour. A single number gives a grey light.
    """

    position: Vec3Tuple = (0.0, 0.0, 0.0)
    intensity: Vec3Tuple | float = (1.0, 1.0, 1.0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", as_vec3_tuple(self.position, "Light position"))
        object.__setattr__(self, "intensity", as_color(self.intensity, "Light intensity"))


@dataclass(frozen=True)
class Scene:
    """Everything the marcher needs for one render.

    Attributes:
        camera: Eye and image plane.
        bounds: World region outside of which rays are misses.
        lights: Point lights, iterated in this order.
        solids: Solids, iterated in this order (ties in closest-element
            queries go to the earliest).
        ambient: Ambient light colour.
    """

    camera: Camera = field(default_factory=Camera)
    bounds: Bounds = DEFAULT_WORLD_BOUNDS
    lights: Sequence[LightSource] = ()
    solids: Sequence[Solid] = ()
    ambient: Vec3Tuple | float = DEFAULT_AMBIENT_LIGHT

    def __post_init__(self) -> None:
        object.__setattr__(self, "lights", tuple(self.lights))
        object.__setattr__(self, "solids", tuple(self.solids))
        object.__setattr__(self, "ambient", as_color(self.ambient, "Scene ambient"))
