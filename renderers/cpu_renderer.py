from typing import List

from core.math import Colour
from core.scene import World
from core.camera import Camera
from renderers.base_renderer import BaseRenderer, RendererFactory, Samples


class PixelSampler:
    """
    한 픽셀의 색을 계산 (적응형 안티앨리어싱). 워커 프로세스로 pickle 되어 전달됨.
    """

    def __init__(self, world: World, camera: Camera, samples: Samples):
        self.world = world
        self.camera = camera
        self.samples = samples

    def _sample(self, x, y, offset):
        x_offset, y_offset = offset
        return self.world.colour_at(self.camera.ray_at(x, y, x_offset, y_offset))

    def colour_at(self, x: int, y: int) -> Colour:
        corners = self.samples.corners
        first = self._sample(x, y, corners[0])

        total = first
        for offset in corners[1:]:
            total = total + self._sample(x, y, offset)
        corner_average = total / len(corners)

        # 모서리끼리 구분이 안 되면 첫 샘플로 충분
        if not self.samples.inner or corner_average.is_similar_to(first):
            return first

        for offset in self.samples.inner:
            total = total + self._sample(x, y, offset)
        return total / len(self.samples)


class CPURenderer(BaseRenderer):
    """CPU 기반 레이트레이싱 렌더러 (멀티프로세싱)"""

    label = "CPU"

    def __init__(self):
        super().__init__("cpu_raytracer")

    def get_capabilities(self) -> List[str]:
        return [
            "ray_tracing",
            "shadows",
            "reflection",
            "refraction",
            "fresnel",
            "area_lights",
            "csg",
            "adaptive_anti_aliasing",
            "bvh_acceleration",
            "multiprocessing"
        ]

    def pixel_sampler(self, world: World, camera: Camera, samples: Samples) -> PixelSampler:
        return PixelSampler(world, camera, samples)


# 렌더러 등록
RendererFactory.register("cpu_raytracer", CPURenderer)
