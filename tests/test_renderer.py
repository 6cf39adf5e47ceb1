"""Tests for sampling, the canvas and the CPU renderer."""

import math

import numpy as np
import pytest
from PIL import Image

from core.math import Vec3, Colour, Transform
from core.scene import RenderSettings, default_world
from core.camera import Camera
from renderers.base_renderer import BaseRenderer, RendererFactory, Samples
from renderers.canvas import Canvas, MAX_WIDTH, MAX_HEIGHT
from renderers.cpu_renderer import PixelSampler, CPURenderer


class OffsetCamera:
    """ray_at 가 레이 대신 픽셀 안 오프셋을 돌려줌"""

    def ray_at(self, x, y, x_offset=0.5, y_offset=0.5):
        return x_offset, y_offset


class SplitWorld:
    """픽셀 왼쪽 가장자리만 흰색"""

    def __init__(self):
        self.calls = 0

    def colour_at(self, offset):
        self.calls += 1
        return Colour.WHITE if offset[0] < 0.3 else Colour.BLACK


class FlatWorld:
    def __init__(self, colour):
        self.colour = colour
        self.calls = 0

    def colour_at(self, offset):
        self.calls += 1
        return self.colour


class PositionSampler:
    def colour_at(self, x, y):
        return Colour(x / 10, y / 10, 0.5)


class PositionRenderer(BaseRenderer):
    label = "위치"

    def __init__(self):
        super().__init__("position")
        self.samples = None

    def pixel_sampler(self, world, camera, samples):
        self.samples = samples
        return PositionSampler()

    def get_capabilities(self):
        return ["position"]


def small_scene(width=6, height=4):
    view = Transform.view_transform(Vec3(0, 0, -5), Vec3(0, 0, 0), Vec3(0, 1, 0))
    return default_world(), Camera(width, height, math.pi / 3, view)


class TestSamples:
    def test_single(self):
        samples = Samples.single()
        assert samples.corners == [(0.5, 0.5)]
        assert samples.inner == []
        assert len(samples) == 1

    def test_grid_of_one_is_single(self):
        assert Samples.grid(1).corners == [(0.5, 0.5)]

    def test_grid_of_two_has_only_corners(self):
        samples = Samples.grid(2)
        assert samples.corners == [(0.25, 0.25), (0.75, 0.25), (0.25, 0.75), (0.75, 0.75)]
        assert samples.inner == []

    def test_grid_of_three(self):
        def flat(offsets):
            return [c for offset in offsets for c in offset]

        samples = Samples.grid(3)
        assert flat(samples.corners) == pytest.approx(flat([(1 / 6, 1 / 6), (5 / 6, 1 / 6),
                                                            (1 / 6, 5 / 6), (5 / 6, 5 / 6)]))
        assert flat(samples.inner) == pytest.approx(flat([(0.5, 1 / 6), (1 / 6, 0.5), (0.5, 0.5),
                                                          (5 / 6, 0.5), (0.5, 5 / 6)]))
        assert len(samples) == 9
        assert repr(samples) == "X9"

    def test_grid_must_not_be_empty(self):
        with pytest.raises(ValueError):
            Samples.grid(0)


class TestPixelSampler:
    def test_uniform_pixel_uses_corners_only(self):
        world = FlatWorld(Colour(0.2, 0.4, 0.6))
        colour = PixelSampler(world, OffsetCamera(), Samples.grid(3)).colour_at(0, 0)
        assert colour == Colour(0.2, 0.4, 0.6)
        assert world.calls == 4

    def test_edge_pixel_takes_every_sample(self):
        world = SplitWorld()
        colour = PixelSampler(world, OffsetCamera(), Samples.grid(3)).colour_at(0, 0)
        assert world.calls == 9
        assert tuple(colour) == pytest.approx((1 / 3, 1 / 3, 1 / 3))

    def test_single_sample(self):
        world = SplitWorld()
        colour = PixelSampler(world, OffsetCamera(), Samples.single()).colour_at(0, 0)
        assert world.calls == 1
        assert colour == Colour.BLACK

    def test_grid_without_inner_samples_returns_first(self):
        world = SplitWorld()
        colour = PixelSampler(world, OffsetCamera(), Samples.grid(2)).colour_at(0, 0)
        assert world.calls == 4
        assert colour == Colour.WHITE


class TestCanvas:
    @pytest.mark.parametrize("width, height", [
        (0, 10), (10, 0), (MAX_WIDTH + 1, 10), (10, MAX_HEIGHT + 1),
    ])
    def test_invalid_size(self, width, height):
        with pytest.raises(ValueError):
            Canvas(width, height)

    def test_starts_black(self):
        canvas = Canvas(10, 20)
        assert canvas.get(9, 19) == Colour.BLACK

    def test_set_and_get(self):
        canvas = Canvas(10, 20)
        canvas.set(2, 3, Colour(1, 0, 0))
        assert canvas.get(2, 3) == Colour(1, 0, 0)

    def test_to_image_clamps_and_scales(self):
        canvas = Canvas(2, 1)
        canvas.set(0, 0, Colour(1.5, 0.5, -0.5))
        image = canvas.to_image()
        assert image.size == (2, 1)
        assert image.getpixel((0, 0)) == (255, 127, 0)
        assert image.getpixel((1, 0)) == (0, 0, 0)

    @pytest.mark.parametrize("name", ["image.png", "image.ppm"])
    def test_save(self, tmp_path, name):
        canvas = Canvas(3, 2)
        canvas.set(1, 1, Colour(0, 1, 0))
        path = tmp_path / name
        canvas.save(str(path))
        with Image.open(path) as image:
            assert image.size == (3, 2)
            assert image.convert("RGB").getpixel((1, 1)) == (0, 255, 0)

    def test_serial_draw(self, capsys):
        canvas = Canvas(3, 2).draw(PositionSampler(), workers=1, show_progress=True)
        assert tuple(canvas.get(2, 1)) == pytest.approx((0.2, 0.1, 0.5))
        assert tuple(canvas.get(0, 0)) == pytest.approx((0.0, 0.0, 0.5))
        assert "100%" in capsys.readouterr().out

    def test_quiet_draw(self, capsys):
        Canvas(3, 2).draw(PositionSampler(), workers=1)
        assert capsys.readouterr().out == ""

    def test_parallel_draw_matches_serial(self):
        world, camera = small_scene()
        sampler = PixelSampler(world, camera, Samples.grid(2))
        serial = Canvas(camera.width(), camera.height()).draw(sampler, workers=1)
        parallel = Canvas(camera.width(), camera.height()).draw(sampler, workers=2)
        np.testing.assert_allclose(parallel.pixels, serial.pixels)


class TestBaseRenderer:
    def test_canvas_takes_camera_size(self):
        camera = Camera(3, 2, math.pi / 2)
        renderer = PositionRenderer()
        canvas = renderer.render_canvas(None, camera, RenderSettings(samples=3, workers=1, show_progress=False))
        assert (canvas.width, canvas.height) == (3, 2)
        assert tuple(canvas.get(2, 1)) == pytest.approx((0.2, 0.1, 0.5))
        assert len(renderer.samples) == 9

    def test_render_returns_image(self):
        image = PositionRenderer().render(None, Camera(3, 2, math.pi / 2),
                                          RenderSettings(samples=1, workers=1, show_progress=False))
        assert image.size == (3, 2)
        assert image.getpixel((1, 1)) == (25, 25, 127)

    def test_progress_uses_label(self, capsys):
        PositionRenderer().render(None, Camera(3, 2, math.pi / 2),
                                  RenderSettings(samples=1, workers=1, show_progress=True))
        out = capsys.readouterr().out
        assert "위치 렌더링 시작: 3x2, X1 samples" in out
        assert "위치 렌더링 완료" in out

    def test_supports(self):
        renderer = PositionRenderer()
        assert renderer.get_name() == "position"
        assert renderer.supports("position")
        assert not renderer.supports("csg")


class TestCPURenderer:
    def test_registered(self):
        assert "cpu_raytracer" in RendererFactory.list_available()
        assert isinstance(RendererFactory.create("cpu_raytracer"), CPURenderer)

    def test_unknown_renderer(self):
        with pytest.raises(ValueError):
            RendererFactory.create("no_such_renderer")

    def test_capabilities(self):
        renderer = CPURenderer()
        assert renderer.get_name() == "cpu_raytracer"
        assert renderer.supports("csg")
        assert renderer.supports("area_lights")
        assert not renderer.supports("path_tracing")

    def test_render_returns_image_of_camera_size(self):
        world, camera = small_scene(6, 4)
        image = CPURenderer().render(world, camera, RenderSettings(samples=1, workers=1, show_progress=False))
        assert image.size == (6, 4)

    def test_centre_pixel_sees_the_sphere(self):
        world, camera = small_scene(5, 5)
        canvas = CPURenderer().render_canvas(world, camera, RenderSettings(samples=1, workers=1, show_progress=False))
        expected = world.colour_at(camera.ray_at(2, 2))
        assert tuple(canvas.get(2, 2)) == pytest.approx(tuple(expected))
        assert canvas.get(0, 0) == Colour.BLACK

    def test_progress_messages(self, capsys):
        world, camera = small_scene(4, 2)
        CPURenderer().render(world, camera, RenderSettings(samples=2, workers=1, show_progress=True))
        out = capsys.readouterr().out
        assert "CPU 렌더링 시작: 4x2, X4 samples" in out
        assert "CPU 렌더링 완료" in out
