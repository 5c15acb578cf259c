"""Pytest configuration for sphere marcher tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts. The marcher needs
    float64 as its default precision.
    """
    ti.init(arch=ti.cpu, default_fp=ti.f64, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear scene data before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here so Taichi is initialized before any field is declared
    from sdfmarch.scene.composition import clear_scene

    clear_scene()
    yield
    clear_scene()


@pytest.fixture
def sphere_scene():
    """The reference scene: one sphere lit from the +y side."""
    from sdfmarch.geometry import Sphere
    from sdfmarch.scene.model import LightSource, Scene, Solid

    return Scene(
        lights=[LightSource(position=(2.0, 3.0, 0.0), intensity=2.0)],
        solids=[Solid(Sphere(center=(3.0, 0.0, 0.0), radius=1.5))],
    )


@pytest.fixture
def manager():
    """A fresh SceneManager, cleared after the test."""
    from sdfmarch.scene.manager import SceneManager

    scene_manager = SceneManager()
    yield scene_manager
    scene_manager.clear()
