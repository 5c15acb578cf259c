"""Scene manager: uploads a Scene to the device and answers queries on it.

The SceneManager is the host-side entry point to the distance-field scene.
``load`` copies an immutable Scene into the Taichi storage of
scene.composition and configures the camera. The query methods run small
kernels over that storage so the distance field can be inspected from
Python exactly as the marcher sees it.

Storage is global: loading a scene through any manager (or rendering one)
replaces whatever was loaded before. A manager whose scene has been
replaced refuses further queries instead of answering from another
scene's data.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from sdfmarch.geometry import Sphere
    >>> from sdfmarch.scene.manager import SceneManager
    >>> from sdfmarch.scene.model import Scene, Solid
    >>> manager = SceneManager()
    >>> manager.load(Scene(solids=[Solid(Sphere((3, 0, 0), 1.5))]))
    >>> manager.sdf((0, 0, 0))
    1.5
"""

import logging

import taichi as ti

from sdfmarch.camera.rays import setup_camera
from sdfmarch.config import DEFAULT_EPS
from sdfmarch.core.ray import Vec3Tuple, as_vec3_tuple, vec3
from sdfmarch.geometry.primitive import get_primitive_type
from sdfmarch.scene import composition
from sdfmarch.scene.composition import (
    MAX_LIGHTS,
    MAX_SOLIDS,
    ElementKind,
    add_light,
    add_solid,
    clear_scene,
    get_loaded_scene,
    mark_loaded,
    set_world,
)
from sdfmarch.scene.model import LightSource, Scene, Solid

logger = logging.getLogger(__name__)

# (kind, index) pair returned by the nearest-element kernel
_element = ti.types.vector(2, ti.i32)


# =============================================================================
# Query kernels
# =============================================================================


@ti.kernel
def _scene_sdf_kernel(p: vec3) -> ti.f64:
    return composition.scene_sdf(p)


@ti.kernel
def _light_aware_sdf_kernel(p: vec3) -> ti.f64:
    return composition.light_aware_sdf(p)


@ti.kernel
def _solid_sdf_kernel(i: ti.i32, p: vec3) -> ti.f64:
    return composition.solid_sdf(i, p)


@ti.kernel
def _closest_solid_kernel(p: vec3) -> ti.i32:
    return composition.closest_solid(p)


@ti.kernel
def _closest_light_kernel(p: vec3) -> ti.i32:
    return composition.closest_light(p)


@ti.kernel
def _light_closest_element_kernel(p: vec3) -> _element:
    kind, index = composition.light_closest_element(p)
    return _element(kind, index)


@ti.kernel
def _normal_kernel(kind: ti.i32, index: ti.i32, p: vec3, eps: ti.f64) -> vec3:
    return composition.estimate_normal(kind, index, p, eps)


def _point(value: Vec3Tuple) -> vec3:
    return vec3(*as_vec3_tuple(value, "Query point"))


class SceneManager:
    """Loads a Scene into device storage and exposes its distance field.

    Attributes:
        scene: The loaded Scene, or None before ``load``.

    Example:
        >>> manager = SceneManager()
        >>> manager.load(scene)
        >>> manager.closest_solid((3.0, 0.0, 0.0))
        Solid(primitive=Sphere(center=(3.0, 0.0, 0.0), radius=1.5), ...)
    """

    def __init__(self) -> None:
        """Initialize a manager with nothing loaded.

        The device storage is left untouched.
        """
        self.scene: Scene | None = None

    def load(self, scene: Scene) -> None:
        """Upload a scene, replacing any previously loaded one.

        Args:
            scene: The scene to render.

        Raises:
            RuntimeError: If the scene has more solids or lights than the
                device storage holds.
            ValueError: If the camera geometry is degenerate.
        """
        if len(scene.solids) > MAX_SOLIDS:
            raise RuntimeError(
                f"Maximum number of solids ({MAX_SOLIDS}) exceeded: {len(scene.solids)}"
            )
        if len(scene.lights) > MAX_LIGHTS:
            raise RuntimeError(
                f"Maximum number of lights ({MAX_LIGHTS}) exceeded: {len(scene.lights)}"
            )

        setup_camera(scene.camera)
        clear_scene()
        self.scene = None

        for solid in scene.solids:
            primitive = solid.primitive
            add_solid(
                get_primitive_type(primitive),
                primitive.center,
                primitive.shape_parameters(),
                solid.material.ambient,
                solid.material.diffuse,
            )
        for light in scene.lights:
            add_light(light.position, light.intensity)
        set_world(scene.bounds.lower, scene.bounds.upper, scene.ambient)
        mark_loaded(scene)

        self.scene = scene
        logger.debug(
            "Loaded scene with %d solid(s) and %d light(s)",
            len(scene.solids),
            len(scene.lights),
        )
        if not scene.bounds.contains(scene.camera.position):
            logger.warning(
                "Camera position %s lies outside the world bounds; every primary ray will miss",
                scene.camera.position,
            )

    def clear(self) -> None:
        """Forget the scene, removing it from the device if it is still there.

        A scene loaded since by another manager is left in place.
        """
        if self.is_loaded():
            clear_scene()
        self.scene = None

    def is_loaded(self) -> bool:
        """Check whether this manager's scene is the one on the device."""
        return self.scene is not None and get_loaded_scene() is self.scene

    def _require_scene(self) -> Scene:
        if self.scene is None:
            raise RuntimeError("No scene loaded; call SceneManager.load() first")
        if get_loaded_scene() is not self.scene:
            raise RuntimeError(
                "The scene of this manager was replaced on the device; "
                "call SceneManager.load() again"
            )
        return self.scene

    # =========================================================================
    # Counts
    # =========================================================================

    def get_solid_count(self) -> int:
        """Get the number of solids on the device."""
        return composition.get_solid_count()

    def get_light_count(self) -> int:
        """Get the number of lights on the device."""
        return composition.get_light_count()

    # =========================================================================
    # Distance queries
    # =========================================================================

    def sdf(self, point: Vec3Tuple) -> float:
        """Evaluate the scene distance field (minimum over the solids).

        Raises:
            RuntimeError: If no scene is loaded.
        """
        self._require_scene()
        return float(_scene_sdf_kernel(_point(point)))

    def light_sdf(self, point: Vec3Tuple) -> float:
        """Evaluate the distance field of the solids and the lights together.

        Raises:
            RuntimeError: If no scene is loaded.
        """
        self._require_scene()
        return float(_light_aware_sdf_kernel(_point(point)))

    def solid_sdf(self, index: int, point: Vec3Tuple) -> float:
        """Evaluate the distance field of a single solid.

        Args:
            index: Position of the solid in Scene.solids.
            point: The query point.

        Raises:
            RuntimeError: If no scene is loaded.
            ValueError: If index does not name a solid.
        """
        scene = self._require_scene()
        if not 0 <= index < len(scene.solids):
            raise ValueError(f"Invalid solid index: {index}")
        return float(_solid_sdf_kernel(index, _point(point)))

    # =========================================================================
    # Nearest-element queries
    # =========================================================================

    def closest_solid(self, point: Vec3Tuple) -> Solid | None:
        """Find the solid nearest to a point (first one on ties).

        Returns:
            The Solid, or None if the scene has no solids.

        Raises:
            RuntimeError: If no scene is loaded.
        """
        scene = self._require_scene()
        index = int(_closest_solid_kernel(_point(point)))
        return scene.solids[index] if index >= 0 else None

    def closest_light(self, point: Vec3Tuple) -> LightSource | None:
        """Find the light nearest to a point (first one on ties).

        Returns:
            The LightSource, or None if the scene has no lights.

        Raises:
            RuntimeError: If no scene is loaded.
        """
        scene = self._require_scene()
        index = int(_closest_light_kernel(_point(point)))
        return scene.lights[index] if index >= 0 else None

    def light_closest_element(self, point: Vec3Tuple) -> Solid | LightSource | None:
        """Find whichever of the nearest light and nearest solid is closer.

        The light is returned only when it is strictly closer.

        Returns:
            The winning Solid or LightSource, or None for an empty scene.

        Raises:
            RuntimeError: If no scene is loaded.
        """
        scene = self._require_scene()
        result = _light_closest_element_kernel(_point(point))
        kind, index = int(result[0]), int(result[1])
        if index < 0:
            return None
        if kind == ElementKind.LIGHT:
            return scene.lights[index]
        return scene.solids[index]

    # =========================================================================
    # Normals
    # =========================================================================

    def normal(
        self,
        point: Vec3Tuple,
        eps: float = DEFAULT_EPS,
        element: Solid | LightSource | None = None,
    ) -> Vec3Tuple:
        """Estimate the unit surface normal at a point.

        Args:
            point: The point to estimate the normal at.
            eps: Central-difference step.
            element: A Solid or LightSource of the loaded scene to take the
                gradient of. None uses the whole scene field.

        Returns:
            The normal as (x, y, z).

        Raises:
            RuntimeError: If no scene is loaded.
            ValueError: If eps is not positive or element is not part of
                the loaded scene.
        """
        scene = self._require_scene()
        if not eps > 0.0:
            raise ValueError(f"eps must be positive, got {eps!r}")

        kind, index = ElementKind.SCENE, -1
        if isinstance(element, Solid) and element in scene.solids:
            kind, index = ElementKind.SOLID, scene.solids.index(element)
        elif isinstance(element, LightSource) and element in scene.lights:
            kind, index = ElementKind.LIGHT, scene.lights.index(element)
        elif element is not None:
            raise ValueError(f"Element is not part of the loaded scene: {element!r}")

        n = _normal_kernel(int(kind), index, _point(point), eps)
        return (float(n[0]), float(n[1]), float(n[2]))

    def __repr__(self) -> str:
        return (
            f"SceneManager(solids={self.get_solid_count()}, "
            f"lights={self.get_light_count()}, loaded={self.is_loaded()})"
        )
