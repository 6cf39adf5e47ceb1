import math
from abc import ABC, abstractmethod
from core.math import (Vec3, Ray, EPSILON, MACHINE_EPSILON, quadratic,
                       roughly_equals, roughly_gte, roughly_lte)
from core.acceleration import BoundingBox
from core.intersection import Intersection

POSITIVE_Y = Vec3(0, 1, 0)
NEGATIVE_Y = Vec3(0, -1, 0)


class Shape(ABC):
    """
    오브젝트 공간(로컬 좌표)의 기본 도형.
    레이는 이미 오브젝트의 역변환이 적용된 상태로 들어온다.
    """

    @abstractmethod
    def intersect(self, parent, ray: Ray) -> list:
        pass

    @abstractmethod
    def normal_at(self, point: Vec3, uv=None) -> Vec3:
        pass

    @abstractmethod
    def bounds(self) -> BoundingBox:
        pass

    @abstractmethod
    def uv_at(self, point: Vec3):
        pass


def _azimuth_u(point: Vec3):
    # 방위각 기반 u: atan2 방향이 반대라 뒤집어서 사용
    theta = math.atan2(point.x, point.z)
    raw_u = theta / (2 * math.pi)
    return 1 - (raw_u + 0.5)


class Sphere(Shape):
    """원점 중심, 반지름 1"""

    def intersect(self, parent, ray: Ray) -> list:
        a = ray.direction.dot(ray.direction)
        b = 2 * ray.direction.dot(ray.origin)
        c = ray.origin.dot(ray.origin) - 1
        roots = quadratic(a, b, c)
        if roots is None:
            return []
        first, second = roots
        return [Intersection(first, parent), Intersection(second, parent)]

    def normal_at(self, point: Vec3, uv=None) -> Vec3:
        return Vec3(point.x, point.y, point.z)

    def bounds(self) -> BoundingBox:
        return BoundingBox(Vec3(-1, -1, -1), Vec3(1, 1, 1))

    def uv_at(self, point: Vec3):
        r = point.length()
        if r == 0:
            return 0.5, 0.5
        phi = math.acos(max(-1.0, min(1.0, point.y / r)))
        # v 는 1 이 북극
        return _azimuth_u(point), 1 - phi / math.pi


class Plane(Shape):
    """원점을 지나는 무한한 XZ 평면, 법선 +Y"""

    def intersect(self, parent, ray: Ray) -> list:
        if abs(ray.direction.y) <= EPSILON:
            return []  # 광선과 평면이 평행
        t = -ray.origin.y / ray.direction.y
        return [Intersection(t, parent)]

    def normal_at(self, point: Vec3, uv=None) -> Vec3:
        return POSITIVE_Y

    def bounds(self) -> BoundingBox:
        inf = float("inf")
        return BoundingBox.clamped(Vec3(-inf, 0, -inf), Vec3(inf, 0, inf))

    def uv_at(self, point: Vec3):
        return point.x % 1.0, point.z % 1.0


class Cube(Shape):
    """모서리가 ±1 인 축 정렬 정육면체"""

    @staticmethod
    def _check_axis(origin, direction):
        t_min_numerator = -1 - origin
        t_max_numerator = 1 - origin
        if abs(direction) >= MACHINE_EPSILON:
            t_min = t_min_numerator / direction
            t_max = t_max_numerator / direction
        else:
            t_min = math.copysign(math.inf, t_min_numerator)
            t_max = math.copysign(math.inf, t_max_numerator)
        if t_min > t_max:
            return t_max, t_min
        return t_min, t_max

    def intersect(self, parent, ray: Ray) -> list:
        x_min, x_max = self._check_axis(ray.origin.x, ray.direction.x)
        y_min, y_max = self._check_axis(ray.origin.y, ray.direction.y)
        z_min, z_max = self._check_axis(ray.origin.z, ray.direction.z)

        t_min = max(x_min, y_min, z_min)
        t_max = min(x_max, y_max, z_max)
        if t_min > t_max:
            return []
        return [Intersection(t_min, parent), Intersection(t_max, parent)]

    def normal_at(self, point: Vec3, uv=None) -> Vec3:
        ax, ay, az = abs(point.x), abs(point.y), abs(point.z)
        largest = max(ax, ay, az)
        if largest == ax:
            return Vec3(point.x, 0, 0)
        if largest == ay:
            return Vec3(0, point.y, 0)
        return Vec3(0, 0, point.z)

    def bounds(self) -> BoundingBox:
        return BoundingBox(Vec3(-1, -1, -1), Vec3(1, 1, 1))

    def uv_at(self, point: Vec3):
        """
        십자 전개도: u ∈ [0,3], v ∈ [0,4]
          u 1..2, v 0..1 윗면 / u 1..2, v 1..2 오른쪽 / u 0..1, v 2..3 앞면
          u 1..2, v 2..3 아랫면 / u 2..3, v 2..3 뒷면 / u 1..2, v 3..4 왼쪽
        """
        x, y, z = point.x, point.y, point.z
        largest = max(abs(x), abs(y), abs(z))

        if largest == x:
            return ((1 - z) % 2.0) / 2 + 1, ((1 + y) % 2.0) / 2 + 1
        if largest == -x:
            return ((1 + z) % 2.0) / 2 + 1, ((1 + y) % 2.0) / 2 + 3
        if largest == y:
            return ((1 + x) % 2.0) / 2 + 1, ((1 - z) % 2.0) / 2
        if largest == -y:
            return ((1 + x) % 2.0) / 2 + 1, ((1 + z) % 2.0) / 2 + 2
        if largest == z:
            return ((1 + x) % 2.0) / 2, ((1 + y) % 2.0) / 2 + 2
        return ((1 - x) % 2.0) / 2 + 2, ((1 + y) % 2.0) / 2 + 2


class Cylinder(Shape):
    """
    Y 축을 감싸는 반지름 1 의 원통. min_y/max_y 로 자를 수 있고 capped 면 뚜껑이 있다.
    """

    def __init__(self, min_y=-math.inf, max_y=math.inf, capped=False):
        self.min_y = min_y
        self.max_y = max_y
        self.capped = capped

    def _cap_radius_squared(self, y):
        return 1.0

    def _caps(self, parent, ray: Ray) -> list:
        if not self.capped or ray.direction.y == 0:
            return []
        hits = []
        for cap_y in (self.min_y, self.max_y):
            t = (cap_y - ray.origin.y) / ray.direction.y
            x = ray.origin.x + t * ray.direction.x
            z = ray.origin.z + t * ray.direction.z
            if roughly_lte(x * x + z * z, self._cap_radius_squared(cap_y)):
                hits.append(Intersection(t, parent))
        return hits

    def _clipped(self, parent, ray: Ray, ts) -> list:
        hits = []
        for t in ts:
            y = ray.origin.y + ray.direction.y * t
            if self.min_y < y < self.max_y:
                hits.append(Intersection(t, parent))
        return hits

    def intersect(self, parent, ray: Ray) -> list:
        caps = self._caps(parent, ray)

        o, d = ray.origin, ray.direction
        a = d.x * d.x + d.z * d.z
        if abs(a) <= MACHINE_EPSILON:
            return caps  # Y 축과 평행

        b = 2 * o.x * d.x + 2 * o.z * d.z
        c = o.x * o.x + o.z * o.z - 1
        roots = quadratic(a, b, c)
        if roots is None:
            return caps
        return self._clipped(parent, ray, roots) + caps

    def normal_at(self, point: Vec3, uv=None) -> Vec3:
        if self.capped and roughly_gte(point.y, self.max_y):
            return POSITIVE_Y
        if self.capped and roughly_lte(point.y, self.min_y):
            return NEGATIVE_Y
        return Vec3(point.x, 0, point.z).normalize()

    def bounds(self) -> BoundingBox:
        return BoundingBox.clamped(Vec3(-1, self.min_y, -1), Vec3(1, self.max_y, 1))

    def uv_at(self, point: Vec3):
        """
        u 0..1 옆면 / u 1..2 윗뚜껑 / u 2..3 아랫뚜껑, v 0..1
        """
        if self.capped and roughly_equals(self.max_y, point.y):
            return (point.x + 1) / 2 + 1, (1 - point.z) / 2
        if self.capped and roughly_equals(self.min_y, point.y):
            return (point.x + 1) / 2 + 2, (point.z + 1) / 2
        return _azimuth_u(point), point.y % 1.0


class Cone(Cylinder):
    """
    이중 원뿔 x² + z² = y². 뚜껑은 x² + z² <= |y| 인 점을 맞춘다.
    """

    def _cap_radius_squared(self, y):
        return abs(y)

    def intersect(self, parent, ray: Ray) -> list:
        caps = self._caps(parent, ray)

        o, d = ray.origin, ray.direction
        a = d.x * d.x - d.y * d.y + d.z * d.z
        b = 2 * o.x * d.x - 2 * o.y * d.y + 2 * o.z * d.z
        c = o.x * o.x - o.y * o.y + o.z * o.z

        if abs(a) <= MACHINE_EPSILON and abs(b) <= MACHINE_EPSILON:
            return caps
        if abs(a) <= MACHINE_EPSILON:
            # 한쪽 원뿔면과 평행: 근이 하나
            return self._clipped(parent, ray, [-c / (2 * b)]) + caps

        roots = quadratic(a, b, c)
        if roots is None:
            return caps
        return self._clipped(parent, ray, roots) + caps

    def normal_at(self, point: Vec3, uv=None) -> Vec3:
        if self.capped and roughly_gte(point.y, self.max_y):
            return POSITIVE_Y
        if self.capped and roughly_lte(point.y, self.min_y):
            return NEGATIVE_Y
        y = math.sqrt(point.x * point.x + point.z * point.z)
        if point.y > 0:
            y = -y
        # 꼭짓점에서는 0 벡터가 그대로 나옴
        return Vec3(point.x, y, point.z).normalize()

    def bounds(self) -> BoundingBox:
        limit = max(abs(self.min_y), abs(self.max_y))
        return BoundingBox.clamped(Vec3(-limit, self.min_y, -limit), Vec3(limit, self.max_y, limit))

    def uv_at(self, point: Vec3):
        for cap_y, offset in ((self.max_y, 1), (self.min_y, 2)):
            if not (self.capped and roughly_equals(cap_y, point.y)):
                continue
            r = abs(cap_y)
            if r == 0:
                return offset + 0.5, 0.5
            u = (point.x + r) / (2 * r) + offset
            if offset == 1:
                return u, (r - point.z) / (2 * r)
            return u, (point.z + r) / (2 * r)
        return _azimuth_u(point), point.y % 1.0


class Triangle(Shape):
    """
    세 점으로 이루어진 삼각형. normals 가 주어지면 부드러운(smooth) 삼각형으로
    무게중심 좌표로 정점 법선을 보간한다.
    """

    def __init__(self, p1: Vec3, p2: Vec3, p3: Vec3, normals=None):
        self.p1 = p1
        self.p2 = p2
        self.p3 = p3
        self.edge1 = p2 - p1
        self.edge2 = p3 - p1
        self.normal = self.edge2.cross(self.edge1).normalize()
        self.normals = normals

        e11 = self.edge1.dot(self.edge1)
        e22 = self.edge2.dot(self.edge2)
        e12 = self.edge1.dot(self.edge2)
        det = e11 * e22 - e12 * e12
        self.denominator = 1.0 / det if det != 0 else 0.0

    @staticmethod
    def smooth(p1, p2, p3, n1, n2, n3):
        return Triangle(p1, p2, p3, normals=(n1, n2, n3))

    @property
    def is_smooth(self):
        return self.normals is not None

    def intersect(self, parent, ray: Ray) -> list:
        # Möller–Trumbore
        dir_cross_e2 = ray.direction.cross(self.edge2)
        det = self.edge1.dot(dir_cross_e2)
        if abs(det) < MACHINE_EPSILON:
            return []

        f = 1.0 / det
        p1_to_origin = ray.origin - self.p1
        u = f * p1_to_origin.dot(dir_cross_e2)
        if u < 0 or u > 1:
            return []

        origin_cross_e1 = p1_to_origin.cross(self.edge1)
        v = f * ray.direction.dot(origin_cross_e1)
        if v < 0 or u + v > 1:
            return []

        t = f * self.edge2.dot(origin_cross_e1)
        return [Intersection(t, parent, u, v)]

    def normal_at(self, point: Vec3, uv=None) -> Vec3:
        if not self.is_smooth:
            return self.normal
        n1, n2, n3 = self.normals
        u, v = uv if uv is not None else self.uv_at(point)
        return (n2 * u + n3 * v + n1 * (1 - u - v)).normalize()

    def bounds(self) -> BoundingBox:
        points = (self.p1, self.p2, self.p3)
        return BoundingBox(Vec3(min(p.x for p in points), min(p.y for p in points), min(p.z for p in points)),
                           Vec3(max(p.x for p in points), max(p.y for p in points), max(p.z for p in points)))

    def uv_at(self, point: Vec3):
        # 무게중심 좌표: Möller–Trumbore 의 (u, v) 와 같은 값
        to_point = point - self.p1
        e11 = self.edge1.dot(self.edge1)
        e12 = self.edge1.dot(self.edge2)
        e22 = self.edge2.dot(self.edge2)
        d1 = to_point.dot(self.edge1)
        d2 = to_point.dot(self.edge2)
        u = (e22 * d1 - e12 * d2) * self.denominator
        v = (e11 * d2 - e12 * d1) * self.denominator
        return u, v


class CylinderBuilder:
    shape_type = Cylinder

    def __init__(self):
        self._min_y = -math.inf
        self._max_y = math.inf
        self._capped = False

    def min_y(self, value):
        self._min_y = value
        return self

    def max_y(self, value):
        self._max_y = value
        return self

    def capped(self):
        self._capped = True
        return self

    def build(self):
        from core.objects import Object
        return Object.from_shape(self.shape_type(self._min_y, self._max_y, self._capped))


class ConeBuilder(CylinderBuilder):
    shape_type = Cone
