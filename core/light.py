import numpy as np
from core.math import Vec3, Colour


class LightSample:
    __slots__ = ("position", "colour")

    def __init__(self, position: Vec3, colour: Colour):
        self.position = position
        self.colour = colour

    def __repr__(self):
        return f"LightSample({self.position!r}, {self.colour!r})"


class Light:
    """
    점 광원 또는 사각형 면 광원.
    면 광원은 u_steps x v_steps 셀로 나누고 셀마다 지터된 샘플 하나를 생성한다.
    """

    def __init__(self, colour: Colour, samples):
        self.colour = colour
        self.samples = samples

    @staticmethod
    def point(colour: Colour, position: Vec3):
        return Light(colour, [LightSample(position, colour)])

    @staticmethod
    def area(colour: Colour, corner: Vec3, u_vec: Vec3, v_vec: Vec3,
             u_steps: int, v_steps: int, seed: int = 0):
        if u_steps < 1 or v_steps < 1:
            raise ValueError(f"Area light needs at least one cell per axis: {u_steps}x{v_steps}")

        cell_u = u_vec / u_steps
        cell_v = v_vec / v_steps
        # 같은 시드면 같은 샘플 위치 (재현 가능한 렌더링)
        rng = np.random.default_rng(seed)

        samples = []
        for i in range(u_steps):
            for j in range(v_steps):
                jitter_u, jitter_v = rng.random(2)
                position = corner + cell_u * (i + float(jitter_u)) + cell_v * (j + float(jitter_v))
                samples.append(LightSample(position, colour))
        return Light(colour, samples)

    @property
    def is_area(self):
        return len(self.samples) > 1

    def __repr__(self):
        return f"Light({self.colour!r}, samples={len(self.samples)})"
