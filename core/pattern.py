import math
from core.math import Colour, Transform, Vec3, EPSILON, MACHINE_EPSILON, is_roughly_zero


def nudge(value):
    # 정수 바로 아래의 값(-ε 등)이 floor 에서 한 칸 아래로 떨어지지 않도록 보정
    delta = math.ceil(value) - value
    if delta != 0 and is_roughly_zero(delta):
        return value + EPSILON
    return value


def _fract(value):
    return value - math.trunc(value)


class Pattern:
    """
    오브젝트 공간 좌표로 색을 정하는 3D 패턴.
    """

    STRIPED = "striped"
    GRADIENT = "gradient"
    RING = "ring"
    CHECKERS = "checkers"

    def __init__(self, kind, primary: Colour, secondary: Colour, transform: Transform = None):
        self.kind = kind
        self.primary = primary
        self.secondary = secondary
        self.transform = transform or Transform.identity()

    @staticmethod
    def striped(primary, secondary):
        return Pattern(Pattern.STRIPED, primary, secondary)

    @staticmethod
    def gradient(start, end):
        return Pattern(Pattern.GRADIENT, start, end)

    @staticmethod
    def ring(primary, secondary):
        return Pattern(Pattern.RING, primary, secondary)

    @staticmethod
    def checkers(primary, secondary):
        return Pattern(Pattern.CHECKERS, primary, secondary)

    def with_transform(self, transform: Transform):
        return Pattern(self.kind, self.primary, self.secondary, transform)

    def colour_at(self, object_point: Vec3) -> Colour:
        p = self.transform.inverse().apply_point(object_point)
        x, y, z = nudge(p.x), nudge(p.y), nudge(p.z)

        if self.kind == Pattern.STRIPED:
            even = math.floor(x) % 2 == 0
        elif self.kind == Pattern.GRADIENT:
            delta = self.secondary - self.primary
            return self.primary + delta * _fract(p.x)
        elif self.kind == Pattern.RING:
            even = math.floor(math.sqrt(x * x + z * z)) % 2 == 0
        else:
            even = (math.floor(x) + math.floor(y) + math.floor(z)) % 2 == 0
        return self.primary if even else self.secondary


class UvPattern:
    """
    도형의 (u, v) 표면 좌표로 색을 정하는 2D 패턴.
    """

    CHECKERS = "checkers"
    ALIGNMENT_CHECK = "alignment_check"
    IMAGE = "image"
    MULTI_FACE = "multi_face"

    def __init__(self, kind, params, transform: Transform = None):
        self.kind = kind
        self.params = params
        self.transform = transform or Transform.identity()

    @staticmethod
    def checkers(primary, secondary, width, height):
        if width < 1 or height < 1:
            raise ValueError(f"Checker counts must be positive: {width}x{height}")
        return UvPattern(UvPattern.CHECKERS, (primary, secondary, width, height))

    @staticmethod
    def alignment_check(main, top_left, top_right, bottom_left, bottom_right):
        # 정육면체 UV 매핑 점검용: 한 꼭짓점을 공유하는 면들은 같은 색이어야 함
        return UvPattern(UvPattern.ALIGNMENT_CHECK, (main, top_left, top_right, bottom_left, bottom_right))

    @staticmethod
    def image(texture):
        return UvPattern(UvPattern.IMAGE, texture)

    @staticmethod
    def cubic(front, back, left, right, top, bottom):
        return UvPattern(UvPattern.MULTI_FACE, [
            ((1.0, 2.0), (0.0, 1.0), top),
            ((1.0, 2.0), (1.0, 2.0), right),
            ((0.0, 1.0), (2.0, 3.0), front),
            ((1.0, 2.0), (2.0, 3.0), bottom),
            ((2.0, 3.0), (2.0, 3.0), back),
            ((1.0, 2.0), (3.0, 4.0), left),
        ])

    @staticmethod
    def capped_cylinder(sides, top, bottom):
        return UvPattern(UvPattern.MULTI_FACE, [
            ((0.0, 1.0), (0.0, 1.0), sides),
            ((1.0, 2.0), (0.0, 1.0), top),
            ((2.0, 3.0), (0.0, 1.0), bottom),
        ])

    def with_transform(self, transform: Transform):
        return UvPattern(self.kind, self.params, transform)

    def colour_at(self, uv) -> Colour:
        u, v = uv

        if self.kind == UvPattern.CHECKERS:
            primary, secondary, width, height = self.params
            su = nudge(u) * width
            sv = nudge(v) * height
            if (math.floor(su) + math.floor(sv)) % 2 <= MACHINE_EPSILON:
                return primary
            return secondary

        if self.kind == UvPattern.ALIGNMENT_CHECK:
            main, top_left, top_right, bottom_left, bottom_right = self.params
            fu, fv = _fract(u), _fract(v)
            left = fu - 0.2 <= MACHINE_EPSILON
            right = fu + 0.2 >= 1.0
            top = fv + 0.2 >= 1.0
            bottom = fv - 0.2 <= MACHINE_EPSILON
            if left and top:
                return top_left
            if right and top:
                return top_right
            if left and bottom:
                return bottom_left
            if right and bottom:
                return bottom_right
            return main

        if self.kind == UvPattern.IMAGE:
            return self.params.sample(u, v)

        for (u_lo, u_hi), (v_lo, v_hi), face in self.params:
            if u_lo <= u <= u_hi and v_lo <= v <= v_hi:
                return face.colour_at((u, v))
        raise ValueError(f"UV coordinates out of bounds: {(u, v)}")
