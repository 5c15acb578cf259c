"""Scene-level distance-field composition.

This module stores the scene on the device and composes the distance
fields of its elements:

    scene_sdf(p)        = min over solids of solid_sdf(i, p)
    light_aware_sdf(p)  = min(scene_sdf(p), min over lights of |p - light|)

and answers the nearest-element and surface-normal queries built on them.

Solids and lights live in Taichi fields (Structure of Arrays). Each solid
is a primitive tag, a centre, a packed parameter vector and its material
colours; each light a position and an intensity. The world bounds and
ambient light complete the scene.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from sdfmarch.scene.composition import add_solid, clear_scene, scene_sdf
    >>> clear_scene()
    >>> add_solid(0, (3.0, 0.0, 0.0), (1.5, 0.0, 0.0), (1, 1, 1), (1, 1, 1))
    >>> # Use scene_sdf within a Taichi kernel
"""

from enum import IntEnum

import taichi as ti
import taichi.math as tm

from sdfmarch.core.ray import Vec3Tuple, vec3
from sdfmarch.geometry.bounds import inside_aabb
from sdfmarch.geometry.primitive import primitive_sdf


class ElementKind(IntEnum):
    """What a distance or normal query is evaluated against."""

    SCENE = 0
    SOLID = 1
    LIGHT = 2


# Maximum number of elements supported in the scene
MAX_SOLIDS = 256
MAX_LIGHTS = 64

# Distance reported by an empty scene; one step takes any ray out of bounds
FAR_DISTANCE = 1e30

# Solid storage: Structure of Arrays layout
solid_types = ti.field(dtype=ti.i32, shape=MAX_SOLIDS)
solid_centers = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SOLIDS)
# Packed shape parameters, see Sphere.shape_parameters / Box.shape_parameters
solid_params = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SOLIDS)
solid_ambient = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SOLIDS)
solid_diffuse = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SOLIDS)
num_solids = ti.field(dtype=ti.i32, shape=())

# Point light storage
light_positions = ti.Vector.field(3, dtype=ti.f64, shape=MAX_LIGHTS)
light_intensities = ti.Vector.field(3, dtype=ti.f64, shape=MAX_LIGHTS)
num_lights = ti.field(dtype=ti.i32, shape=())

# World bounds and ambient light
world_lower = ti.Vector.field(3, dtype=ti.f64, shape=())
world_upper = ti.Vector.field(3, dtype=ti.f64, shape=())
ambient_light = ti.Vector.field(3, dtype=ti.f64, shape=())

# Host-side record of the Scene whose data the fields hold, None when the
# fields were cleared or written element by element
_loaded_scene = None


def clear_scene() -> None:
    """Remove all solids and lights.

    Resets the element counts to zero and forgets the loaded scene. The
    field data is overwritten when new elements are added.
    """
    global _loaded_scene
    _loaded_scene = None
    num_solids[None] = 0
    num_lights[None] = 0


def add_solid(
    kind: int,
    center: Vec3Tuple,
    params: Vec3Tuple,
    ambient: Vec3Tuple,
    diffuse: Vec3Tuple,
) -> int:
    """Add a solid to the scene.

    Args:
        kind: The PrimitiveType tag.
        center: The primitive centre.
        params: The packed shape parameters.
        ambient: Material ambient reflectance.
        diffuse: Material diffuse reflectance.

    Returns:
        The index of the added solid.

    Raises:
        RuntimeError: If the maximum number of solids is exceeded.
    """
    global _loaded_scene
    idx = num_solids[None]
    if idx >= MAX_SOLIDS:
        raise RuntimeError(f"Maximum number of solids ({MAX_SOLIDS}) exceeded")
    _loaded_scene = None
    solid_types[idx] = int(kind)
    solid_centers[idx] = list(center)
    solid_params[idx] = list(params)
    solid_ambient[idx] = list(ambient)
    solid_diffuse[idx] = list(diffuse)
    num_solids[None] = idx + 1
    return idx


def add_light(position: Vec3Tuple, intensity: Vec3Tuple) -> int:
    """Add a point light to the scene.

    Args:
        position: The light position.
        intensity: The light colour.

    Returns:
        The index of the added light.

    Raises:
        RuntimeError: If the maximum number of lights is exceeded.
    """
    global _loaded_scene
    idx = num_lights[None]
    if idx >= MAX_LIGHTS:
        raise RuntimeError(f"Maximum number of lights ({MAX_LIGHTS}) exceeded")
    _loaded_scene = None
    light_positions[idx] = list(position)
    light_intensities[idx] = list(intensity)
    num_lights[None] = idx + 1
    return idx


def set_world(lower: Vec3Tuple, upper: Vec3Tuple, ambient: Vec3Tuple) -> None:
    """Set the world bounds and the ambient light.

    Args:
        lower: Per-axis minimum corner of the world.
        upper: Per-axis maximum corner of the world.
        ambient: Ambient light colour.
    """
    global _loaded_scene
    _loaded_scene = None
    world_lower[None] = list(lower)
    world_upper[None] = list(upper)
    ambient_light[None] = list(ambient)


def mark_loaded(scene) -> None:
    """Record the Scene whose solids, lights and world were just written."""
    global _loaded_scene
    _loaded_scene = scene


def get_loaded_scene():
    """Get the Scene currently held by the fields, or None."""
    return _loaded_scene


def get_solid_count() -> int:
    """Get the number of solids in the scene."""
    return int(num_solids[None])


def get_light_count() -> int:
    """Get the number of lights in the scene."""
    return int(num_lights[None])


# =============================================================================
# Element distance fields
# =============================================================================


@ti.func
def solid_sdf(i: ti.i32, p: vec3) -> ti.f64:
    """Signed distance from p to solid i."""
    return primitive_sdf(solid_types[i], solid_centers[i], solid_params[i], p)


@ti.func
def light_source_sdf(j: ti.i32, p: vec3) -> ti.f64:
    """Distance from p to light j (a point, so never negative)."""
    return tm.length(p - light_positions[j])


@ti.func
def scene_sdf(p: vec3) -> ti.f64:
    """Distance field of the scene: the minimum over all solids.

    Returns FAR_DISTANCE for a scene without solids.
    """
    d = FAR_DISTANCE
    for i in range(num_solids[None]):
        d = ti.min(d, solid_sdf(i, p))
    return d


@ti.func
def lights_sdf(p: vec3) -> ti.f64:
    """Distance to the nearest light, FAR_DISTANCE without lights."""
    d = FAR_DISTANCE
    for j in range(num_lights[None]):
        d = ti.min(d, light_source_sdf(j, p))
    return d


@ti.func
def light_aware_sdf(p: vec3) -> ti.f64:
    """Distance field of the solids and the lights together."""
    return ti.min(scene_sdf(p), lights_sdf(p))


# =============================================================================
# Nearest-element queries
# =============================================================================


@ti.func
def closest_solid(p: vec3) -> ti.i32:
    """Index of the solid with the smallest SDF at p.

    Ties go to the lowest index. Returns -1 for a scene without solids.
    """
    best = -1
    best_d = FAR_DISTANCE
    for i in range(num_solids[None]):
        d = solid_sdf(i, p)
        if best == -1 or d < best_d:
            best = i
            best_d = d
    return best


@ti.func
def closest_light(p: vec3) -> ti.i32:
    """Index of the nearest light, ties to the lowest index, -1 if none."""
    best = -1
    best_d = FAR_DISTANCE
    for j in range(num_lights[None]):
        d = light_source_sdf(j, p)
        if best == -1 or d < best_d:
            best = j
            best_d = d
    return best


@ti.func
def light_closest_element(p: vec3):
    """Find whether the nearest light or the nearest solid is closer to p.

    The light wins only when it is strictly closer.

    Args:
        p: The query point.

    Returns:
        A tuple (kind, index) where kind is ElementKind.LIGHT or
        ElementKind.SOLID. index is -1 when the scene has neither.
    """
    cs = closest_solid(p)
    cl = closest_light(p)
    kind = int(ElementKind.SOLID)
    index = cs
    if cl >= 0:
        if cs < 0:
            kind = int(ElementKind.LIGHT)
            index = cl
        elif light_source_sdf(cl, p) < solid_sdf(cs, p):
            kind = int(ElementKind.LIGHT)
            index = cl
    return kind, index


# =============================================================================
# Normal estimation
# =============================================================================


@ti.func
def element_sdf(kind: ti.i32, index: ti.i32, p: vec3) -> ti.f64:
    """Evaluate the distance field of the scene, one solid or one light.

    Args:
        kind: An ElementKind value.
        index: Solid or light index (ignored for ElementKind.SCENE).
        p: The query point.
    """
    d = 0.0
    if kind == int(ElementKind.SCENE):
        d = scene_sdf(p)
    elif kind == int(ElementKind.SOLID):
        d = solid_sdf(index, p)
    else:
        d = light_source_sdf(index, p)
    return d


@ti.func
def estimate_normal(kind: ti.i32, index: ti.i32, p: vec3, eps: ti.f64) -> vec3:
    """Estimate the surface normal at p from the SDF gradient.

    Uses central differences along each axis and normalizes the result.
    Smaller eps raises numerical noise, larger eps blurs sharp edges. A
    vanishing gradient (e.g. at the centre of a sphere) is not guarded.

    Args:
        kind: An ElementKind value selecting the field.
        index: Solid or light index (ignored for ElementKind.SCENE).
        p: The point to estimate the normal at.
        eps: Half-width of the central difference.

    Returns:
        The unit normal.
    """
    ex = vec3(eps, 0.0, 0.0)
    ey = vec3(0.0, eps, 0.0)
    ez = vec3(0.0, 0.0, eps)
    gradient = vec3(
        element_sdf(kind, index, p + ex) - element_sdf(kind, index, p - ex),
        element_sdf(kind, index, p + ey) - element_sdf(kind, index, p - ey),
        element_sdf(kind, index, p + ez) - element_sdf(kind, index, p - ez),
    )
    return tm.normalize(gradient)


# =============================================================================
# World and material accessors
# =============================================================================


@ti.func
def inside_world(p: vec3) -> ti.i32:
    """Check whether p lies inside the world bounds."""
    return inside_aabb(world_lower[None], world_upper[None], p)


@ti.func
def get_ambient_light() -> vec3:
    """Get the scene ambient light colour."""
    return ambient_light[None]


@ti.func
def get_solid_ambient(i: ti.i32) -> vec3:
    """Get the ambient reflectance of solid i."""
    return solid_ambient[i]


@ti.func
def get_solid_diffuse(i: ti.i32) -> vec3:
    """Get the diffuse reflectance of solid i."""
    return solid_diffuse[i]


@ti.func
def get_light_position(j: ti.i32) -> vec3:
    """Get the position of light j."""
    return light_positions[j]


@ti.func
def get_light_intensity(j: ti.i32) -> vec3:
    """Get the intensity of light j."""
    return light_intensities[j]
