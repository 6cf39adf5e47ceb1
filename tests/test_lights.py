"""Tests for point and area lights."""

import pytest

from core.math import Vec3, Colour
from core.light import Light


class TestPointLight:
    def test_single_sample_at_position(self):
        light = Light.point(Colour.WHITE, Vec3(0, 0, 0))
        assert len(light.samples) == 1
        assert light.samples[0].position == Vec3(0, 0, 0)
        assert light.samples[0].colour == Colour.WHITE
        assert not light.is_area


class TestAreaLight:
    def test_one_sample_per_cell(self):
        light = Light.area(Colour.WHITE, Vec3(0, 0, 0), Vec3(2, 0, 0), Vec3(0, 0, 3), 2, 3)
        assert len(light.samples) == 6
        assert light.is_area

    def test_samples_are_jittered_inside_their_cells(self):
        corner = Vec3(-1, 5, -1)
        light = Light.area(Colour.WHITE, corner, Vec3(2, 0, 0), Vec3(0, 0, 3), 2, 3, seed=42)
        for index, sample in enumerate(light.samples):
            i, j = divmod(index, 3)
            offset = sample.position - corner
            assert i <= offset.x <= i + 1
            assert j <= offset.z <= j + 1
            assert offset.y == 0

    def test_samples_carry_light_colour(self):
        light = Light.area(Colour.RED, Vec3(0, 0, 0), Vec3(1, 0, 0), Vec3(0, 1, 0), 2, 2)
        assert all(sample.colour == Colour.RED for sample in light.samples)

    def test_same_seed_same_positions(self):
        a = Light.area(Colour.WHITE, Vec3(0, 0, 0), Vec3(1, 0, 0), Vec3(0, 1, 0), 4, 4, seed=7)
        b = Light.area(Colour.WHITE, Vec3(0, 0, 0), Vec3(1, 0, 0), Vec3(0, 1, 0), 4, 4, seed=7)
        assert [s.position for s in a.samples] == [s.position for s in b.samples]

    def test_different_seeds_differ(self):
        a = Light.area(Colour.WHITE, Vec3(0, 0, 0), Vec3(1, 0, 0), Vec3(0, 1, 0), 4, 4, seed=1)
        b = Light.area(Colour.WHITE, Vec3(0, 0, 0), Vec3(1, 0, 0), Vec3(0, 1, 0), 4, 4, seed=2)
        assert [s.position for s in a.samples] != [s.position for s in b.samples]

    @pytest.mark.parametrize("u_steps, v_steps", [(0, 2), (2, 0)])
    def test_needs_at_least_one_cell(self, u_steps, v_steps):
        with pytest.raises(ValueError):
            Light.area(Colour.WHITE, Vec3(0, 0, 0), Vec3(1, 0, 0), Vec3(0, 1, 0), u_steps, v_steps)
