from dataclasses import dataclass, replace
from typing import Any

import numpy as np
from PIL import Image
from core.math import Colour


class Texture:
    def __init__(self, path: str = None, pixels: np.ndarray = None):
        self.path = path  # 텍스처 파일 경로 저장
        if pixels is None:
            img = Image.open(path).convert("RGB")
            pixels = np.array(img)  # (height, width, 3)
        self.pixels = pixels
        self.height, self.width = pixels.shape[:2]

    @staticmethod
    def from_array(pixels: np.ndarray):
        return Texture(pixels=np.asarray(pixels, dtype=np.uint8))

    def sample(self, u: float, v: float) -> Colour:
        """
        u, v 는 [0,1) 로 감아서 사용, v = 1 이 이미지의 맨 윗줄.
        PIL 이미지 v축은 위→아래 방향이라 (1-v)로 뒤집어서 인덱싱.
        """
        iu = int(round((u % 1.0) * (self.width - 1)))
        iv = int(round(((1.0 - v) % 1.0) * (self.height - 1)))
        r, g, b = self.pixels[iv, iu][:3]
        return Colour(r / 255.0, g / 255.0, b / 255.0)


@dataclass(frozen=True)
class Material:
    """
    colour: 패턴이 없을 때 사용될 고정 색
    pattern: 3D 패턴(Pattern) 또는 UV 패턴(UvPattern)
    ambient / diffuse / specular / shininess: Phong 계수
    reflective: 반사 강도 (0~1)
    transparency: 투명도 (0~1)
    refractive: 굴절률(Index of Refraction)
    casts_shadow: False 면 그림자 광선이 무시 (CSG 차집합의 빼는 쪽 등)
    """
    colour: Colour = Colour.WHITE
    pattern: Any = None
    ambient: float = 0.1
    diffuse: float = 0.9
    specular: float = 0.9
    shininess: float = 200.0
    reflective: float = 0.0
    transparency: float = 0.0
    refractive: float = 1.0
    casts_shadow: bool = True

    def but(self, **changes):
        return replace(self, **changes)
