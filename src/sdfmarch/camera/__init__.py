"""Camera module for primary ray generation.

This module maps image pixels to world-space rays:

Components:
    image_plane: Camera description (eye point plus rectangular image plane)
    rays: Device-side camera state and per-pixel ray generation

Camera responsibilities:
    - Hold the eye position and image-plane geometry
    - Upload that geometry to Taichi fields before a render
    - Turn a pixel (row, col) into a unit-direction ray from the eye

Pixel coordinates:
    row 0 is the top of the image, column 0 its left edge; the outermost
    rows and columns sample the image-plane edges exactly.
"""

from .image_plane import Camera

# Note: rays is NOT imported here because it declares Taichi fields, which
# must not be created before ti.init(). Import it directly when needed:
#   from sdfmarch.camera.rays import setup_camera, get_pixel_ray

__all__ = [
    "Camera",
]
