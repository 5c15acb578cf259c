"""Image sampling: one primary ray per pixel into a NumPy framebuffer.

The render kernel's outermost loop runs over image rows and is
parallelised by Taichi; each row walks its columns serially. Every pixel
is an independent march_ray call writing a disjoint cell of the output
buffer, and nothing random is involved, so re-rendering an unchanged
scene yields a bit-identical image.

Orientation:
    The output has shape (height, width, 3) and dtype float64. Row 0 is
    the top of the image plane and column 0 its left edge (see
    camera.image_plane). Colours are linear and not clamped.

Example:
    >>> from sdfmarch.config import init_taichi
    >>> init_taichi("cpu")
    >>> from sdfmarch.core.sampler import render
    >>> image = render(scene, resolution=(20, 10))
    >>> image.shape
    (10, 20, 3)
"""

import logging
import time
from typing import Any

import numpy as np
import numpy.typing as npt
import taichi as ti

from sdfmarch.camera.rays import get_pixel_ray
from sdfmarch.config import RenderSettings
from sdfmarch.core.marcher import march_ray
from sdfmarch.core.ray import Vec3Tuple, vec3
from sdfmarch.scene.manager import SceneManager
from sdfmarch.scene.model import Scene

logger = logging.getLogger(__name__)


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_kernel(
    image: ti.types.ndarray(dtype=ti.f64, ndim=3),
    width: ti.i32,
    height: ti.i32,
    reflection_limit: ti.i32,
    distance_limit: ti.f64,
    eps: ti.f64,
    model: ti.i32,
):
    """Fill image[row, col, channel] for every pixel.

    Args:
        image: Output buffer of shape (height, width, 3).
        width: Image width in pixels.
        height: Image height in pixels.
        reflection_limit: Remaining reflection budget.
        distance_limit: Surface epsilon.
        eps: Central-difference step for normals.
        model: An AttenuationModel value.
    """
    for row in range(height):
        for col in range(width):
            ray = get_pixel_ray(row, col, width, height)
            color = march_ray(
                ray.position, ray.direction, reflection_limit, distance_limit, eps, model
            )
            for c in ti.static(range(3)):
                image[row, col, c] = color[c]


@ti.kernel
def _render_pixel_kernel(
    row: ti.i32,
    col: ti.i32,
    width: ti.i32,
    height: ti.i32,
    reflection_limit: ti.i32,
    distance_limit: ti.f64,
    eps: ti.f64,
    model: ti.i32,
) -> vec3:
    ray = get_pixel_ray(row, col, width, height)
    return march_ray(ray.position, ray.direction, reflection_limit, distance_limit, eps, model)


# =============================================================================
# Public Rendering API
# =============================================================================


def _resolve_settings(settings: RenderSettings | None, overrides: dict[str, Any]) -> RenderSettings:
    settings = settings or RenderSettings()
    if overrides:
        settings = settings.replace(**overrides)
    return settings


def render(
    scene: Scene,
    settings: RenderSettings | None = None,
    **overrides: Any,
) -> npt.NDArray[np.float64]:
    """Render a scene into a fresh image buffer.

    Loads the scene (replacing whatever was on the device), allocates the
    buffer and marches one ray per pixel.

    Args:
        scene: The scene to render.
        settings: Render parameters. Defaults to RenderSettings().
        **overrides: Individual RenderSettings fields overriding settings,
            e.g. ``resolution=(20, 10)``.

    Returns:
        Float64 array of shape (height, width, 3), row 0 at the top.

    Raises:
        ValueError: If an override is invalid or the camera is degenerate.
        RuntimeError: If the scene exceeds the device storage.
    """
    settings = _resolve_settings(settings, overrides)

    manager = SceneManager()
    manager.load(scene)

    image = np.zeros((settings.height, settings.width, 3), dtype=np.float64)
    start = time.perf_counter()
    _render_kernel(
        image,
        settings.width,
        settings.height,
        settings.reflection_limit,
        settings.distance_limit,
        settings.normal_eps,
        int(settings.attenuation),
    )
    ti.sync()
    elapsed = time.perf_counter() - start

    logger.info(
        "Rendered %dx%d image (%d solid(s), %d light(s)) in %.3fs",
        settings.width,
        settings.height,
        len(scene.solids),
        len(scene.lights),
        elapsed,
    )
    return image


def render_pixel(
    row: int,
    col: int,
    width: int,
    height: int,
    settings: RenderSettings | None = None,
) -> Vec3Tuple:
    """Render a single pixel of the currently loaded scene.

    This is a Python-callable function for testing and debugging. For
    whole images, use render() which processes all pixels in parallel.

    Args:
        row: Pixel row (0 = top).
        col: Pixel column (0 = left).
        width: Image width in pixels.
        height: Image height in pixels.
        settings: Limits and attenuation policy (its resolution is ignored).

    Returns:
        Tuple of (R, G, B) color values.

    Raises:
        ValueError: If the pixel lies outside a width x height image.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image size must be positive, got {width}x{height}")
    if not (0 <= row < height and 0 <= col < width):
        raise ValueError(f"Pixel ({row}, {col}) is outside a {width}x{height} image")
    settings = settings or RenderSettings()
    color = _render_pixel_kernel(
        row,
        col,
        width,
        height,
        settings.reflection_limit,
        settings.distance_limit,
        settings.normal_eps,
        int(settings.attenuation),
    )
    return (float(color[0]), float(color[1]), float(color[2]))
