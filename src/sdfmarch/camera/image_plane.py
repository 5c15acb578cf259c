"""Image-plane camera model for primary ray generation.

The camera is a point (the eye) and a rectangular image plane in front of
it. The plane is centred on ``plane_center``, is perpendicular to the line
from the eye to that centre, and has its vertical edge aligned with the
projection of ``up`` onto it. Pixel (row, col) maps bilinearly onto the
plane with the corners included:

    u = col / (width - 1)    0 = left edge,  1 = right edge
    v = row / (height - 1)   0 = top edge,   1 = bottom edge

so row 0 of the output buffer is the top of the image. A single row or
column samples the centre of the plane. Every primary ray starts at the
camera position and points at its sample on the plane.

The default camera sits at (-1, 0, 0) and looks down +x at a 3.2 x 1.8
plane through the origin, with +z up (so +y is the left of the image).

This module only describes the camera; camera.rays uploads it to the
device and generates the rays.

Example:
    >>> from sdfmarch.camera.image_plane import Camera
    >>> Camera().image_plane_corners()
    ((0.0, 1.6, -0.9), (0.0, -1.6, 0.9))
"""

from dataclasses import dataclass

import numpy as np

from sdfmarch.core.ray import Vec3Tuple, as_vec3_tuple


@dataclass(frozen=True)
class Camera:
    """Configuration for an image-plane camera.

    Attributes:
        position: Eye position in world space (x, y, z). All primary rays
            start here.
        plane_center: Centre of the image plane in world space.
        plane_width: Width of the image plane in world units.
        plane_height: Height of the image plane in world units.
        up: Approximate up direction; only its component in the image
            plane matters. Must not be parallel to the view direction.
    """

    position: Vec3Tuple = (-1.0, 0.0, 0.0)
    plane_center: Vec3Tuple = (0.0, 0.0, 0.0)
    plane_width: float = 3.2
    plane_height: float = 1.8
    up: Vec3Tuple = (0.0, 0.0, 1.0)

    def __post_init__(self) -> None:
        object.__setattr__(self, "position", as_vec3_tuple(self.position, "Camera position"))
        object.__setattr__(
            self, "plane_center", as_vec3_tuple(self.plane_center, "Camera plane_center")
        )
        object.__setattr__(self, "up", as_vec3_tuple(self.up, "Camera up"))
        object.__setattr__(self, "plane_width", float(self.plane_width))
        object.__setattr__(self, "plane_height", float(self.plane_height))

    def basis(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Compute the camera's orthonormal basis.

        Returns:
            A tuple (forward, right, up) of unit float64 arrays: forward
            points from the eye to the plane centre, right and up span the
            image plane.

        Raises:
            ValueError: If the eye lies on the plane centre or ``up`` is
                parallel to the view direction.
        """
        position = np.array(self.position, dtype=np.float64)
        center = np.array(self.plane_center, dtype=np.float64)
        up_hint = np.array(self.up, dtype=np.float64)

        forward = center - position
        forward_length = np.linalg.norm(forward)
        if forward_length < 1e-12:
            raise ValueError("Camera position must differ from the image plane centre")
        forward = forward / forward_length

        right = np.cross(forward, up_hint)
        right_length = np.linalg.norm(right)
        if right_length < 1e-12:
            raise ValueError("Camera up vector must not be parallel to the view direction")
        right = right / right_length

        up = np.cross(right, forward)
        return forward, right, up

    def image_plane_corners(self) -> tuple[Vec3Tuple, Vec3Tuple]:
        """Get the bottom-left and top-right corners of the image plane.

        Returns:
            A tuple (down_left, top_right) of world-space points.
        """
        _, right, up = self.basis()
        center = np.array(self.plane_center, dtype=np.float64)
        half_h = 0.5 * self.plane_width * right
        half_v = 0.5 * self.plane_height * up
        down_left = center - half_h - half_v
        top_right = center + half_h + half_v
        return tuple(down_left.tolist()), tuple(top_right.tolist())  # type: ignore[return-value]

