"""Unit tests for the ray marcher and direct lighting.

Tests cover:
- Primary ray hits, misses and the negative reflection budget
- Termination for rays starting anywhere inside the world
- Shadow rays: lit, occluded, back-facing and unreachable lights
- Attenuation models
- Shading with material and ambient colours
"""

import numpy as np
import pytest
import taichi as ti

from sdfmarch.config import AttenuationModel, RenderSettings
from sdfmarch.geometry import Box, Sphere
from sdfmarch.materials import Material
from sdfmarch.scene.model import LightSource, Scene, Solid

AMBIENT = (0.05, 0.05, 0.05)


@pytest.fixture
def ground_scene():
    """Unit sphere at the origin lit from straight above."""
    return Scene(
        lights=[LightSource(position=(0.0, 0.0, 10.0), intensity=1.0)],
        solids=[Solid(Sphere((0.0, 0.0, 0.0), 1.0))],
    )


class TestPrimaryRays:
    """Tests for march_ray through the host wrapper."""

    def test_hit_on_unlit_side_is_ambient(self, manager, sphere_scene):
        """Test a hit facing away from the light gets only ambient light."""
        from sdfmarch.core.marcher import march

        manager.load(sphere_scene)
        color = march((-1.0, 0.0, 0.0), (1.0, 0.0, 0.0))
        assert color == pytest.approx(AMBIENT, abs=1e-12)

    def test_hit_box_face_lit_head_on(self, manager):
        """Test a box face lit along its normal gets the full intensity."""
        from sdfmarch.core.marcher import march

        manager.load(
            Scene(
                lights=[LightSource(position=(0.0, 0.0, 0.0))],
                solids=[Solid(Box((3.0, 0.0, 0.0), 1.0))],
            )
        )
        color = march((-1.0, 0.0, 0.0), (1.0, 0.0, 0.0))
        assert color == pytest.approx((1.05, 1.05, 1.05), rel=1e-6)

    def test_miss_is_black(self, manager, sphere_scene):
        """Test rays leaving the world without hitting anything are black."""
        from sdfmarch.core.marcher import march

        manager.load(sphere_scene)
        assert march((-1.0, 0.0, 0.0), (-1.0, 0.0, 0.0)) == (0.0, 0.0, 0.0)
        assert march((-1.0, 0.0, 0.0), (0.0, 0.0, 1.0)) == (0.0, 0.0, 0.0)
        assert march((-1.0, 0.0, 0.0), (1.0, 1.0, 0.0)) == (0.0, 0.0, 0.0)

    def test_direction_is_normalized(self, manager, sphere_scene):
        """Test a non-unit direction marches like its unit version."""
        from sdfmarch.core.marcher import march

        manager.load(sphere_scene)
        assert march((-1.0, 0.0, 0.0), (7.0, 0.0, 0.0)) == march((-1.0, 0.0, 0.0), (1.0, 0.0, 0.0))

    def test_zero_direction_raises(self, manager, sphere_scene):
        """Test a zero direction is rejected."""
        from sdfmarch.core.marcher import march

        manager.load(sphere_scene)
        with pytest.raises(ValueError, match="zero"):
            march((-1.0, 0.0, 0.0), (0.0, 0.0, 0.0))

    def test_negative_reflection_limit_is_black(self, manager, sphere_scene):
        """Test a negative reflection budget returns black without marching."""
        from sdfmarch.core.marcher import march

        manager.load(sphere_scene)
        settings = RenderSettings(reflection_limit=-1)
        assert march((-1.0, 0.0, 0.0), (1.0, 0.0, 0.0), settings) == (0.0, 0.0, 0.0)

    def test_reflection_limit_zero_still_shades(self, manager, sphere_scene):
        """Test a zero reflection budget still shades the primary hit."""
        from sdfmarch.core.marcher import march

        manager.load(sphere_scene)
        settings = RenderSettings(reflection_limit=0)
        assert march((-1.0, 0.0, 0.0), (1.0, 0.0, 0.0), settings) == pytest.approx(AMBIENT)

    def test_empty_scene_is_black(self, manager):
        """Test a scene without solids terminates with black."""
        from sdfmarch.core.marcher import march

        manager.load(Scene(lights=[LightSource((2.0, 3.0, 0.0))]))
        assert march((-1.0, 0.0, 0.0), (1.0, 0.0, 0.0)) == (0.0, 0.0, 0.0)

    def test_outside_world_is_black(self, manager, sphere_scene):
        """Test a ray starting outside the world is a miss even facing a solid."""
        from sdfmarch.core.marcher import march

        manager.load(sphere_scene)
        assert march((-5.0, 0.0, 0.0), (1.0, 0.0, 0.0)) == (0.0, 0.0, 0.0)

    def test_terminates_from_anywhere_in_world(self, manager):
        """Test random rays inside the world all finish with a finite colour."""
        from sdfmarch.core.marcher import march

        manager.load(
            Scene(
                lights=[LightSource((2.0, 3.0, 0.0), 2.0)],
                solids=[
                    Solid(Sphere((3.0, 0.0, 0.0), 1.5)),
                    Solid(Box((6.0, -3.0, 1.0), (2.0, 1.0, 4.0))),
                ],
            )
        )
        rng = np.random.default_rng(23)
        origins = rng.uniform((-2.0, -24.0, -24.0), (24.0, 24.0, 24.0), size=(25, 3))
        directions = rng.normal(size=(25, 3))
        for origin, direction in zip(origins, directions):
            color = march(tuple(origin), tuple(direction))
            assert all(np.isfinite(color))
            assert min(color) >= 0.0


class TestShadowRays:
    """Tests for the per-light visibility test."""

    def test_lit_point_gets_intensity(self, manager, ground_scene):
        """Test a point facing an unoccluded light gets the light's intensity."""
        from sdfmarch.core.marcher import trace_shadow

        manager.load(ground_scene)
        color = trace_shadow((0.0, 0.0, 1.0), (0.0, 0.0, 1.0), 0)
        assert color == pytest.approx((1.0, 1.0, 1.0), rel=1e-9)

    def test_lambertian_cosine(self, manager, ground_scene):
        """Test the contribution scales with the cosine to the normal."""
        from sdfmarch.core.marcher import trace_shadow

        manager.load(ground_scene)
        normal = (0.0, 0.6, 0.8)
        color = trace_shadow((0.0, 0.6, 0.8), normal, 0)
        to_light = np.array([0.0, -0.6, 9.2])
        expected = float(np.dot(to_light / np.linalg.norm(to_light), normal))
        assert color == pytest.approx((expected,) * 3, rel=1e-7)
        assert 0.0 < color[0] <= 1.0

    def test_occluded_light_is_black(self, manager):
        """Test a solid between the point and the light blocks it."""
        from sdfmarch.core.marcher import trace_shadow

        manager.load(
            Scene(
                lights=[LightSource((0.0, 0.0, 10.0))],
                solids=[Solid(Sphere((0.0, 0.0, 0.0), 1.0)), Solid(Sphere((0.0, 0.0, 5.0), 1.0))],
            )
        )
        assert trace_shadow((0.0, 0.0, 1.0), (0.0, 0.0, 1.0), 0) == (0.0, 0.0, 0.0)

    def test_back_facing_point_is_black(self, manager, ground_scene):
        """Test the far side of the sphere receives nothing."""
        from sdfmarch.core.marcher import trace_shadow

        manager.load(ground_scene)
        assert trace_shadow((0.0, 0.0, -1.0), (0.0, 0.0, -1.0), 0) == (0.0, 0.0, 0.0)

    def test_grazing_normal_is_black(self, manager):
        """Test a light perpendicular to the normal contributes nothing."""
        from sdfmarch.core.marcher import trace_shadow

        manager.load(
            Scene(lights=[LightSource((0.0, 5.0, 0.0))], solids=[Solid(Box((0.0, 0.0, -1.0), 2.0))])
        )
        color = trace_shadow((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), 0)
        assert color == pytest.approx((0.0, 0.0, 0.0), abs=1e-12)

    def test_light_outside_world_is_black(self, manager):
        """Test a light the shadow ray cannot reach inside the world is ignored."""
        from sdfmarch.core.marcher import trace_shadow

        manager.load(
            Scene(
                lights=[LightSource((0.0, 0.0, 30.0))],
                solids=[Solid(Sphere((0.0, 0.0, 0.0), 1.0))],
            )
        )
        assert trace_shadow((0.0, 0.0, 1.0), (0.0, 0.0, 1.0), 0) == (0.0, 0.0, 0.0)

    def test_light_at_shaded_point_terminates(self, manager, ground_scene):
        """Test a light sitting on the shaded point contributes nothing."""
        from sdfmarch.core.marcher import trace_shadow

        manager.load(ground_scene)
        color = trace_shadow((0.0, 0.0, 10.0), (0.0, 0.0, 1.0), 0)
        assert color == (0.0, 0.0, 0.0)

    def test_inverse_square_attenuation(self, manager, ground_scene):
        """Test inverse-square falloff over the light distance."""
        from sdfmarch.core.marcher import trace_shadow

        manager.load(ground_scene)
        settings = RenderSettings(attenuation=AttenuationModel.INVERSE_SQUARE)
        color = trace_shadow((0.0, 0.0, 1.0), (0.0, 0.0, 1.0), 0, settings)
        assert color == pytest.approx((1.0 / 81.0,) * 3, rel=1e-9)

    def test_invalid_light_index_raises(self, manager, ground_scene):
        """Test an index past the loaded lights is rejected."""
        from sdfmarch.core.marcher import trace_shadow

        manager.load(ground_scene)
        with pytest.raises(ValueError, match="Invalid light index"):
            trace_shadow((0.0, 0.0, 1.0), (0.0, 0.0, 1.0), 1)


class TestAttenuation:
    """Tests for the attenuation policy function."""

    def test_models(self):
        """Test constant and clamped inverse-square factors."""
        from sdfmarch.core.marcher import attenuation

        result = ti.field(dtype=ti.f64, shape=4)

        @ti.kernel
        def test_kernel():
            result[0] = attenuation(int(AttenuationModel.CONSTANT), 7.0, 0.01)
            result[1] = attenuation(int(AttenuationModel.INVERSE_SQUARE), 2.0, 0.01)
            result[2] = attenuation(int(AttenuationModel.INVERSE_SQUARE), 0.0, 0.5)
            result[3] = attenuation(int(AttenuationModel.CONSTANT), 0.0, 0.5)

        test_kernel()
        assert result[0] == 1.0
        assert result[1] == pytest.approx(0.25)
        assert result[2] == pytest.approx(4.0)
        assert result[3] == 1.0


class TestShading:
    """Tests for shading a surface point."""

    def test_material_and_ambient(self, manager):
        """Test diffuse scales the lights and ambient scales the scene ambient."""
        from sdfmarch.core.marcher import shade

        material = Material(ambient=(1.0, 0.0, 0.0), diffuse=(0.5, 0.25, 1.0))
        manager.load(
            Scene(
                lights=[LightSource((0.0, 0.0, 10.0))],
                solids=[Solid(Sphere((0.0, 0.0, 0.0), 1.0), material)],
                ambient=0.1,
            )
        )
        assert shade((0.0, 0.0, 1.0)) == pytest.approx((0.6, 0.25, 1.0), rel=1e-6)

    def test_lights_add_up(self, manager):
        """Test contributions from several lights are summed."""
        from sdfmarch.core.marcher import shade

        manager.load(
            Scene(
                lights=[LightSource((0.0, 0.0, 10.0), 0.5), LightSource((0.0, 0.0, 20.0), 0.25)],
                solids=[Solid(Sphere((0.0, 0.0, 0.0), 1.0))],
                ambient=0.0,
            )
        )
        assert shade((0.0, 0.0, 1.0)) == pytest.approx((0.75, 0.75, 0.75), rel=1e-6)

    def test_uses_closest_solid_material(self, manager):
        """Test the material comes from the solid that was hit."""
        from sdfmarch.core.marcher import shade

        manager.load(
            Scene(
                solids=[
                    Solid(Sphere((0.0, 0.0, 0.0), 1.0), Material(ambient=(0.0, 1.0, 0.0))),
                    Solid(Sphere((5.0, 0.0, 0.0), 1.0), Material(ambient=(0.0, 0.0, 1.0))),
                ],
                ambient=1.0,
            )
        )
        assert shade((4.0, 0.0, 0.0)) == pytest.approx((0.0, 0.0, 1.0))
        assert shade((0.0, 1.0, 0.0)) == pytest.approx((0.0, 1.0, 0.0))

    def test_empty_scene_raises(self, manager):
        """Test shading needs at least one solid."""
        from sdfmarch.core.marcher import shade

        manager.load(Scene())
        with pytest.raises(RuntimeError, match="without solids"):
            shade((0.0, 0.0, 0.0))
