import time
from abc import ABC, abstractmethod
from typing import List
from PIL import Image

from core.scene import World, RenderSettings
from core.camera import Camera
from renderers.canvas import Canvas


class Samples:
    """
    픽셀 안의 샘플 오프셋. 네 모서리(corners)를 먼저 쏘고,
    모서리 색이 서로 비슷하지 않을 때만 안쪽(inner) 샘플을 추가로 쏜다.
    """

    def __init__(self, corners, inner):
        self.corners = corners
        self.inner = inner

    @staticmethod
    def single():
        return Samples([(0.5, 0.5)], [])

    @staticmethod
    def grid(size: int):
        if size < 1:
            raise ValueError(f"Sample grid size must be at least 1: {size}")
        if size == 1:
            return Samples.single()

        initial = 1.0 / (size * 2)
        increment = 1.0 / size
        last = initial + increment * (size - 1)
        corners = [(initial, initial), (last, initial), (initial, last), (last, last)]

        edges = (0, size - 1)
        inner = [(initial + x * increment, initial + y * increment)
                 for y in range(size)
                 for x in range(size)
                 if x not in edges or y not in edges]
        return Samples(corners, inner)

    def __len__(self):
        return len(self.corners) + len(self.inner)

    def __repr__(self):
        return f"X{len(self)}"


class BaseRenderer(ABC):
    """
    카메라 크기의 캔버스를 만들고 pixel_sampler 가 돌려준 샘플러로 모든 픽셀을 채운다.
    하위 클래스는 픽셀 하나의 색을 정하는 방법과 지원 기능만 구현하면 됨
    """

    # 진행 메시지에 찍히는 이름
    label = "기본"

    def __init__(self, name: str):
        self.name = name

    @abstractmethod
    def pixel_sampler(self, world: World, camera: Camera, samples: Samples):
        """colour_at(x, y) 를 가진 pickle 가능한 샘플러 반환"""
        pass

    @abstractmethod
    def get_capabilities(self) -> List[str]:
        pass

    def get_name(self) -> str:
        return self.name

    def supports(self, feature: str) -> bool:
        return feature in self.get_capabilities()

    def render_canvas(self, world: World, camera: Camera, settings: RenderSettings) -> Canvas:
        start_time = time.time()
        samples = Samples.grid(settings.samples)

        if settings.show_progress:
            print(f"{self.label} 렌더링 시작: {camera.width()}x{camera.height()}, {samples!r} samples")

        canvas = Canvas(camera.width(), camera.height())
        canvas.draw(self.pixel_sampler(world, camera, samples), settings.workers, settings.show_progress)

        if settings.show_progress:
            elapsed = time.time() - start_time
            minutes = int(elapsed // 60)
            seconds = elapsed % 60
            print(f"{self.label} 렌더링 완료: {minutes}분 {seconds:.2f}초")

        return canvas

    def render(self, world: World, camera: Camera, settings: RenderSettings) -> Image.Image:
        """장면을 렌더링하여 PIL Image를 반환"""
        return self.render_canvas(world, camera, settings).to_image()


class RendererFactory:
    """이름으로 렌더러를 등록하고 만든다"""

    _renderers = {}

    @classmethod
    def register(cls, name: str, renderer_class):
        cls._renderers[name] = renderer_class

    @classmethod
    def create(cls, name: str, **kwargs) -> BaseRenderer:
        if name not in cls._renderers:
            raise ValueError(f"Unknown renderer: {name}")
        return cls._renderers[name](**kwargs)

    @classmethod
    def list_available(cls) -> List[str]:
        return list(cls._renderers.keys())
