"""Scene module for scene description and distance-field queries.

Components:
    model: Immutable Solid, LightSource and Scene values
    composition: Device storage and the composed distance fields
    manager: SceneManager uploading a Scene and answering host queries

Scene data is organized for efficient device access:
    - Structure-of-Arrays layout for solids and lights
    - Primitive kinds dispatched by an integer tag
"""

from .model import BLACK, DEFAULT_AMBIENT_LIGHT, LightSource, Scene, Solid

# Note: composition and manager are NOT imported here because they declare
# Taichi fields. Import them directly when needed:
#   from sdfmarch.scene.manager import SceneManager

__all__ = [
    "BLACK",
    "DEFAULT_AMBIENT_LIGHT",
    "LightSource",
    "Scene",
    "Solid",
]
