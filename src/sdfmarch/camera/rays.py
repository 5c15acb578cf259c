"""Device-side camera state and primary ray generation.

setup_camera uploads a Camera's image plane to Taichi fields; get_ray and
get_pixel_ray turn image coordinates into unit-direction rays from the
camera position inside kernels. See camera.image_plane for the pixel
mapping and orientation.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from sdfmarch.camera.image_plane import Camera
    >>> from sdfmarch.camera.rays import setup_camera, get_pixel_ray
    >>> setup_camera(Camera())
    >>> @ti.kernel
    ... def render():
    ...     ray = get_pixel_ray(0, 0, 20, 10)  # Ray through the top-left corner
"""

import numpy as np
import taichi as ti
import taichi.math as tm

from sdfmarch.camera.image_plane import Camera
from sdfmarch.core.ray import Ray, make_ray

# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

# Camera origin (eye position)
_camera_origin = ti.Vector.field(3, dtype=ti.f64, shape=())

# Top-left corner of the image plane
_plane_top_left = ti.Vector.field(3, dtype=ti.f64, shape=())

# Full-width (rightward) and full-height (upward) plane edge vectors
_plane_horizontal = ti.Vector.field(3, dtype=ti.f64, shape=())
_plane_vertical = ti.Vector.field(3, dtype=ti.f64, shape=())


# =============================================================================
# Camera Setup (Python-side, called once per scene load)
# =============================================================================


def setup_camera(camera: Camera) -> None:
    """Upload the camera's image-plane geometry to the device.

    Args:
        camera: Camera configuration.

    Raises:
        ValueError: If the camera geometry is degenerate (see Camera.basis).

    Note:
        This function writes to Taichi fields and should be called from
        Python (not from within a Taichi kernel).
    """
    _, right, up = camera.basis()

    center = np.array(camera.plane_center, dtype=np.float64)
    horizontal = camera.plane_width * right
    vertical = camera.plane_height * up
    top_left = center - horizontal / 2.0 + vertical / 2.0

    _camera_origin[None] = list(camera.position)
    _plane_top_left[None] = top_left.tolist()
    _plane_horizontal[None] = horizontal.tolist()
    _plane_vertical[None] = vertical.tolist()


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray(u: ti.f64, v: ti.f64) -> Ray:
    """Generate a ray through normalized image-plane coordinates.

    Args:
        u: Horizontal coordinate in [0, 1] (left to right).
        v: Vertical coordinate in [0, 1] (top to bottom).

    Returns:
        A Ray starting at the camera position with a unit direction toward
        the plane point.
    """
    point_on_plane = (
        _plane_top_left[None] + u * _plane_horizontal[None] - v * _plane_vertical[None]
    )
    origin = _camera_origin[None]
    return make_ray(origin, tm.normalize(point_on_plane - origin))


@ti.func
def _pixel_fraction(index: ti.i32, count: ti.i32) -> ti.f64:
    """Map a pixel index onto [0, 1] with both end pixels on the edges."""
    fraction = 0.5
    if count > 1:
        fraction = ti.cast(index, ti.f64) / ti.cast(count - 1, ti.f64)
    return fraction


@ti.func
def get_pixel_ray(row: ti.i32, col: ti.i32, width: ti.i32, height: ti.i32) -> Ray:
    """Generate the primary ray for a pixel.

    Args:
        row: Pixel row (0 = top).
        col: Pixel column (0 = left).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        The primary Ray for this pixel.
    """
    return get_ray(_pixel_fraction(col, width), _pixel_fraction(row, height))


# =============================================================================
# Utility Functions
# =============================================================================


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get current camera state for debugging.

    Returns:
        Dictionary with origin, top_left, horizontal and vertical vectors.
    """
    info = {}
    for name, field in (
        ("origin", _camera_origin),
        ("top_left", _plane_top_left),
        ("horizontal", _plane_horizontal),
        ("vertical", _plane_vertical),
    ):
        value = field[None]
        info[name] = (float(value[0]), float(value[1]), float(value[2]))
    return info
