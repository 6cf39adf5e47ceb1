import math
from core.math import Vec3, Ray, Transform, ORIGIN


class Camera:
    def __init__(self,
                 width: int,
                 height: int,
                 fov: float,                   # 시야각 (라디안)
                 transform: Transform = None):  # 뷰 변환 (Transform.view_transform)
        if width < 1 or height < 1:
            raise ValueError(f"Camera size must be positive: {width}x{height}")
        self._width = width
        self._height = height
        self.transform = transform or Transform.identity()

        half_view = math.tan(fov / 2)
        aspect = width / height
        if aspect >= 1:
            self.half_width = half_view
            self.half_height = half_view / aspect
        else:
            self.half_width = half_view * aspect
            self.half_height = half_view
        self.pixel_size = (self.half_width * 2) / width

        inverse = self.transform.inverse()
        self._inverse = inverse
        self.origin = inverse.apply_point(ORIGIN)

    def width(self) -> int:
        return self._width

    def height(self) -> int:
        return self._height

    def ray_at(self, x: int, y: int, x_offset: float = 0.5, y_offset: float = 0.5) -> Ray:
        """
        픽셀 (x, y) 안의 오프셋 위치를 지나는 레이. 캔버스는 z = -1 평면.
        """
        world_x = self.half_width - (x + x_offset) * self.pixel_size
        world_y = self.half_height - (y + y_offset) * self.pixel_size

        pixel = self._inverse.apply_point(Vec3(world_x, world_y, -1))
        direction = (pixel - self.origin).normalize()
        return Ray(self.origin, direction)
