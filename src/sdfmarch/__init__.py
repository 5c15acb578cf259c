"""Sphere marching renderer for signed distance field scenes, on Taichi.

This package renders scenes made of implicit solids and point lights by
marching rays through their signed distance fields, with:
- Sphere and axis-aligned box primitives composed by minimum
- Gradient-estimated surface normals
- Shadow rays toward every point light (diffuse plus ambient shading)
- A parallel per-pixel sampler writing into a NumPy buffer

Subpackages:
    core: Ray type and vector helpers, the marcher and the image sampler
    geometry: Distance-field primitives and world bounds
    materials: Validated surface reflectance
    scene: Scene description, device storage and distance-field queries
    camera: Image-plane camera and primary ray generation

Taichi must be initialised with float64 (see config.init_taichi) before
importing any module that declares Taichi fields.
"""

__version__ = "0.1.0"
