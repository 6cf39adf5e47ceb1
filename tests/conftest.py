"""Pytest configuration and shared fixtures for the ray tracer tests."""

import pytest

from core.math import Vec3, Colour
from core.light import Light
from core.scene import World, default_world


@pytest.fixture
def world():
    """The two concentric spheres lit from the upper left."""
    return default_world()


@pytest.fixture
def empty_world():
    return World()


@pytest.fixture
def white_light():
    def make(x, y, z):
        return Light.point(Colour.WHITE, Vec3(x, y, z))
    return make
