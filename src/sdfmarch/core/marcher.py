"""Sphere marching of primary rays and direct lighting with shadow rays.

This module implements the part of the renderer that walks rays through
the scene distance field and shades the surfaces they reach.

Primary rays march the scene SDF. At each step the ray either accepts its
position as a surface hit (d < distance_limit) or moves forward by exactly
d, which cannot overshoot a surface because the SDF never overestimates.
Leaving the world bounds is a miss and yields black.

At a hit, one shadow ray per light is cast toward the light. A shadow ray
starts a few distance limits off the surface and marches on
min(scene_sdf, light distance) with a tighter stop threshold. At the stop,
the light is visible only if its own distance is strictly smaller than
the scene's; otherwise an occluder was reached first.

Shading is diffuse only:

    color = diffuse * sum(shadow contributions) + ambient * scene_ambient

The reflected contribution is always black. reflection_limit is accepted
and a negative value makes march_ray return black immediately, but no
reflected ray is ever traced.

Key features:
    - Bounded marching loops (world bounds + distance limit)
    - Robust light visibility test by distance comparison
    - Lambertian cosine term clamped at zero
    - Constant or inverse-square light attenuation

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from sdfmarch.core.marcher import march
    >>> from sdfmarch.scene.manager import SceneManager
    >>> SceneManager().load(scene)
    >>> color = march((-1.0, 0.0, 0.0), (1.0, 0.0, 0.0))
"""

import numpy as np
import taichi as ti

from sdfmarch.config import (
    SHADOW_LIMIT_DIVISOR,
    SHADOW_OFFSET_FACTOR,
    AttenuationModel,
    RenderSettings,
)
from sdfmarch.core.ray import (
    Vec3Tuple,
    advance,
    as_vec3_tuple,
    direction,
    distance,
    dot,
    make_ray,
    vec3,
)
from sdfmarch.scene.composition import (
    ElementKind,
    closest_solid,
    estimate_normal,
    get_ambient_light,
    get_light_count,
    get_light_intensity,
    get_light_position,
    get_solid_ambient,
    get_solid_count,
    get_solid_diffuse,
    inside_world,
    light_source_sdf,
    num_lights,
    scene_sdf,
)

# =============================================================================
# Lighting
# =============================================================================


@ti.func
def attenuation(model: ti.i32, d: ti.f64, distance_limit: ti.f64) -> ti.f64:
    """Distance falloff factor for light travelling d units.

    Args:
        model: An AttenuationModel value.
        d: Distance between the light and the shaded point.
        distance_limit: Lower clamp for d under inverse-square falloff.

    Returns:
        1.0 for CONSTANT, 1 / max(d, distance_limit)^2 for INVERSE_SQUARE.
    """
    factor = 1.0
    if model == int(AttenuationModel.INVERSE_SQUARE):
        clamped = ti.max(d, distance_limit)
        factor = 1.0 / (clamped * clamped)
    return factor


@ti.func
def shadow_ray(
    p: vec3,
    n: vec3,
    light_index: ti.i32,
    distance_limit: ti.f64,
    model: ti.i32,
) -> vec3:
    """Compute the direct contribution of one light at a surface point.

    Args:
        p: The shaded surface point.
        n: The unit surface normal at p.
        light_index: Index of the light to test.
        distance_limit: Primary-ray surface epsilon. The shadow ray starts
            SHADOW_OFFSET_FACTOR times this far from p and stops at
            distance_limit / SHADOW_LIMIT_DIVISOR.
        model: An AttenuationModel value.

    Returns:
        intensity * max(0, dir . n) * attenuation when the ray reaches the
        light, black when a solid is reached first or the ray leaves the
        world.
    """
    light_position = get_light_position(light_index)
    to_light = direction(p, light_position)
    ray = make_ray(p + SHADOW_OFFSET_FACTOR * distance_limit * to_light, to_light)
    stop_limit = distance_limit / SHADOW_LIMIT_DIVISOR

    contribution = vec3(0.0, 0.0, 0.0)

    # Active flag instead of break: the loop ends on a stop or a world exit
    active = 1
    while active == 1:
        if inside_world(ray.position) == 0:
            active = 0
        else:
            d_scene = scene_sdf(ray.position)
            d_light = light_source_sdf(light_index, ray.position)
            d = ti.min(d_scene, d_light)
            if d < stop_limit:
                if d_light < d_scene:
                    cosine = ti.max(0.0, dot(ray.direction, n))
                    falloff = attenuation(model, distance(p, light_position), distance_limit)
                    contribution = get_light_intensity(light_index) * cosine * falloff
                active = 0
            else:
                ray = advance(ray, d)

    return contribution


@ti.func
def shade_hit(p: vec3, distance_limit: ti.f64, eps: ti.f64, model: ti.i32) -> vec3:
    """Shade a surface point reached by a primary ray.

    The normal comes from the scene distance field and the material from
    the solid closest to p.

    Args:
        p: The hit position.
        distance_limit: Primary-ray surface epsilon.
        eps: Central-difference step for the normal.
        model: An AttenuationModel value.

    Returns:
        The diffuse and ambient radiance leaving p.
    """
    n = estimate_normal(int(ElementKind.SCENE), -1, p, eps)
    solid = closest_solid(p)

    incoming = vec3(0.0, 0.0, 0.0)
    for j in range(num_lights[None]):
        incoming += shadow_ray(p, n, j, distance_limit, model)

    return get_solid_diffuse(solid) * incoming + get_solid_ambient(solid) * get_ambient_light()


# =============================================================================
# Primary rays
# =============================================================================


@ti.func
def march_ray(
    origin: vec3,
    ray_direction: vec3,
    reflection_limit: ti.i32,
    distance_limit: ti.f64,
    eps: ti.f64,
    model: ti.i32,
) -> vec3:
    """March a primary ray and shade the surface it reaches.

    Args:
        origin: Ray start position.
        ray_direction: Unit direction of travel.
        reflection_limit: Remaining reflection budget. Negative returns
            black without marching.
        distance_limit: Surface epsilon; positions with a smaller scene
            SDF are hits.
        eps: Central-difference step for the normal.
        model: An AttenuationModel value.

    Returns:
        The shaded colour at the hit, or black on a miss.
    """
    color = vec3(0.0, 0.0, 0.0)

    if reflection_limit >= 0:
        ray = make_ray(origin, ray_direction)
        active = 1
        while active == 1:
            if inside_world(ray.position) == 0:
                active = 0
            else:
                d = scene_sdf(ray.position)
                if d < distance_limit:
                    color = shade_hit(ray.position, distance_limit, eps, model)
                    active = 0
                else:
                    ray = advance(ray, d)

    return color


# =============================================================================
# Kernels
# =============================================================================


@ti.kernel
def _march_kernel(
    origin: vec3,
    ray_direction: vec3,
    reflection_limit: ti.i32,
    distance_limit: ti.f64,
    eps: ti.f64,
    model: ti.i32,
) -> vec3:
    return march_ray(origin, ray_direction, reflection_limit, distance_limit, eps, model)


@ti.kernel
def _shadow_kernel(
    p: vec3, n: vec3, light_index: ti.i32, distance_limit: ti.f64, model: ti.i32
) -> vec3:
    return shadow_ray(p, n, light_index, distance_limit, model)


@ti.kernel
def _shade_kernel(p: vec3, distance_limit: ti.f64, eps: ti.f64, model: ti.i32) -> vec3:
    return shade_hit(p, distance_limit, eps, model)


# =============================================================================
# Public API (Python-callable)
# =============================================================================


def _to_color(value) -> Vec3Tuple:
    return (float(value[0]), float(value[1]), float(value[2]))


def _unit(value: Vec3Tuple, name: str) -> Vec3Tuple:
    vector = np.array(as_vec3_tuple(value, name), dtype=np.float64)
    norm = np.linalg.norm(vector)
    if norm == 0.0:
        raise ValueError(f"{name} must not be the zero vector")
    return tuple((vector / norm).tolist())  # type: ignore[return-value]


def march(
    origin: Vec3Tuple,
    ray_direction: Vec3Tuple,
    settings: RenderSettings | None = None,
) -> Vec3Tuple:
    """March one ray through the loaded scene.

    Args:
        origin: Ray start position.
        ray_direction: Direction of travel; normalized before marching.
        settings: Limits and attenuation policy. Defaults to RenderSettings().

    Returns:
        The (R, G, B) colour seen along the ray, black on a miss.

    Raises:
        ValueError: If the origin is invalid or the direction is zero.
    """
    settings = settings or RenderSettings()
    color = _march_kernel(
        vec3(*as_vec3_tuple(origin, "Ray origin")),
        vec3(*_unit(ray_direction, "Ray direction")),
        settings.reflection_limit,
        settings.distance_limit,
        settings.normal_eps,
        int(settings.attenuation),
    )
    return _to_color(color)


def trace_shadow(
    point: Vec3Tuple,
    normal: Vec3Tuple,
    light_index: int,
    settings: RenderSettings | None = None,
) -> Vec3Tuple:
    """Cast one shadow ray from a surface point toward a light.

    Args:
        point: The shaded surface point.
        normal: Surface normal at the point; normalized before use.
        light_index: Index of the light in the loaded scene.
        settings: Limits and attenuation policy. Defaults to RenderSettings().

    Returns:
        The (R, G, B) light contribution, black when occluded.

    Raises:
        ValueError: If light_index does not name a loaded light.
    """
    if not 0 <= light_index < get_light_count():
        raise ValueError(f"Invalid light index: {light_index}")
    settings = settings or RenderSettings()
    color = _shadow_kernel(
        vec3(*as_vec3_tuple(point, "Shadow ray point")),
        vec3(*_unit(normal, "Surface normal")),
        light_index,
        settings.distance_limit,
        int(settings.attenuation),
    )
    return _to_color(color)


def shade(point: Vec3Tuple, settings: RenderSettings | None = None) -> Vec3Tuple:
    """Shade a point as if a primary ray had hit the surface there.

    Args:
        point: A point on (or within the distance limit of) a surface.
        settings: Limits and attenuation policy. Defaults to RenderSettings().

    Returns:
        The (R, G, B) radiance leaving the point.

    Raises:
        RuntimeError: If the loaded scene has no solids.
    """
    if get_solid_count() == 0:
        raise RuntimeError("Cannot shade a point in a scene without solids")
    settings = settings or RenderSettings()
    color = _shade_kernel(
        vec3(*as_vec3_tuple(point, "Shading point")),
        settings.distance_limit,
        settings.normal_eps,
        int(settings.attenuation),
    )
    return _to_color(color)
