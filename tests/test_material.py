"""Unit tests for materials.

Tests cover:
- Defaults and grey-level shorthand
- Range validation of every channel and of shininess
- Rejection of non-finite values, acceptance of NumPy scalars
"""

import math

import numpy as np
import pytest

from sdfmarch.materials import DEFAULT_MATERIAL, Material, as_color


class TestMaterial:
    """Tests for Material construction."""

    def test_defaults_reflect_everything(self):
        """Test the default material is white in every term."""
        assert DEFAULT_MATERIAL.ambient == (1.0, 1.0, 1.0)
        assert DEFAULT_MATERIAL.diffuse == (1.0, 1.0, 1.0)
        assert DEFAULT_MATERIAL.specular == (1.0, 1.0, 1.0)
        assert DEFAULT_MATERIAL.shininess == 1.0

    def test_grey_shorthand(self):
        """Test a single number sets all three channels."""
        material = Material(ambient=0.2, diffuse=[0.9, 0.1, 0.1])
        assert material.ambient == (0.2, 0.2, 0.2)
        assert material.diffuse == (0.9, 0.1, 0.1)

    def test_bounds_are_inclusive(self):
        """Test 0 and 1 are accepted."""
        material = Material(ambient=0.0, diffuse=1.0, specular=(0.0, 1.0, 0.5), shininess=0.0)
        assert material.shininess == 0.0

    @pytest.mark.parametrize("attribute", ["ambient", "diffuse", "specular"])
    def test_channel_above_one_raises(self, attribute):
        """Test a channel above 1 is rejected and named in the error."""
        with pytest.raises(ValueError, match=f"{attribute} green channel"):
            Material(**{attribute: (0.5, 1.5, 0.5)})

    @pytest.mark.parametrize("attribute", ["ambient", "diffuse", "specular"])
    def test_negative_channel_raises(self, attribute):
        """Test a negative channel is rejected."""
        with pytest.raises(ValueError, match="outside"):
            Material(**{attribute: -0.1})

    def test_negative_shininess_raises(self):
        """Test shininess must be non-negative."""
        with pytest.raises(ValueError, match="shininess"):
            Material(shininess=-1.0)

    @pytest.mark.parametrize("attribute", ["ambient", "diffuse", "specular"])
    def test_nan_channel_raises(self, attribute):
        """Test a NaN grey level or channel is rejected."""
        with pytest.raises(ValueError, match="finite"):
            Material(**{attribute: math.nan})
        with pytest.raises(ValueError, match="finite"):
            Material(**{attribute: (0.5, math.nan, 0.5)})

    @pytest.mark.parametrize("shininess", [math.nan, math.inf, "10"])
    def test_invalid_shininess_raises(self, shininess):
        """Test shininess must be a finite number."""
        with pytest.raises(ValueError, match="shininess"):
            Material(shininess=shininess)

    def test_numpy_scalars_accepted(self):
        """Test NumPy scalars work as grey levels and shininess."""
        material = Material(ambient=np.float32(0.5), diffuse=np.int64(1), shininess=np.float64(8))
        assert material.ambient == (0.5, 0.5, 0.5)
        assert material.diffuse == (1.0, 1.0, 1.0)
        assert material.shininess == 8.0
        assert type(material.shininess) is float

    def test_immutable(self):
        """Test materials cannot be changed after construction."""
        material = Material()
        with pytest.raises(AttributeError):
            material.diffuse = (0.0, 0.0, 0.0)


class TestAsColor:
    """Tests for colour coercion."""

    def test_scalar_and_sequence(self):
        """Test grey levels and RGB triples are both accepted."""
        assert as_color(2) == (2.0, 2.0, 2.0)
        assert as_color((0.1, 0.2, 0.3)) == (0.1, 0.2, 0.3)

    def test_rejects_bool_and_pairs(self):
        """Test booleans and two-channel values are not colours."""
        with pytest.raises(ValueError):
            as_color(True)
        with pytest.raises(ValueError):
            as_color((0.1, 0.2))

    def test_rejects_non_finite_grey(self):
        """Test infinite and NaN grey levels are rejected."""
        with pytest.raises(ValueError, match="finite"):
            as_color(math.inf, "Light intensity")
        with pytest.raises(ValueError, match="finite"):
            as_color(np.float64("nan"))
