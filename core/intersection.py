import math
from core.math import Vec3, Ray, EPSILON


class Intersection:
    """
    레이 위의 교차 지점 t 와 맞은 (리프) 오브젝트.
    삼각형이면 무게중심 좌표 (u, v) 도 함께 기록.
    """
    __slots__ = ("t", "object", "u", "v")

    def __init__(self, t: float, obj, u=None, v=None):
        self.t = t
        self.object = obj
        self.u = u
        self.v = v

    @property
    def uv(self):
        if self.u is None:
            return None
        return self.u, self.v

    def is_same(self, other):
        return self.t == other.t and self.object.id == other.object.id

    def __repr__(self):
        return f"Intersection(t={self.t}, object={self.object.id})"


class Intersections:
    """
    항상 t 오름차순으로 정렬된 교차 목록 (음수 t 포함).
    """

    def __init__(self, items=None):
        self._items = sorted(items, key=lambda i: i.t) if items else []

    @staticmethod
    def empty():
        return Intersections()

    @staticmethod
    def of(*items):
        return Intersections(list(items))

    def push(self, intersection: Intersection):
        # 정렬 유지하며 삽입 (같은 t 는 뒤에)
        items = self._items
        index = len(items)
        while index > 0 and items[index - 1].t > intersection.t:
            index -= 1
        items.insert(index, intersection)

    def join(self, other):
        if not other._items:
            return self
        if not self._items:
            return other
        return Intersections(self._items + other._items)

    def hit(self, last_hit_id=None):
        """
        가장 가까운 t >= 0 의 교차. 직전에 맞은 오브젝트의 t≈0 교차는 자기 교차로 보고 건너뜀.
        """
        for intersection in self._items:
            if intersection.t < 0:
                continue
            if intersection.object.id == last_hit_id and abs(intersection.t) <= EPSILON:
                continue
            return intersection
        return None

    def __iter__(self):
        return iter(self._items)

    def __len__(self):
        return len(self._items)

    def __getitem__(self, index):
        return self._items[index]

    def __bool__(self):
        return bool(self._items)

    def __repr__(self):
        return f"Intersections({self._items!r})"


class ReflectionData:
    """
    굴절/반사 계산에 필요한 값들 (스넬 법칙, Schlick 근사)
    """
    __slots__ = ("cos_i", "ratio", "sin2_t")

    def __init__(self, eye: Vec3, normal: Vec3, n1: float, n2: float):
        self.ratio = n1 / n2
        self.cos_i = eye.dot(normal)
        self.sin2_t = self.ratio * self.ratio * (1 - self.cos_i * self.cos_i)

    def is_total(self):
        # 전반사
        return self.sin2_t > 1

    def cos_t(self):
        return math.sqrt(1 - self.sin2_t)

    def refraction_vector(self, eye: Vec3, normal: Vec3) -> Vec3:
        return normal * (self.ratio * self.cos_i - self.cos_t()) - eye * self.ratio

    def reflectance(self, n1: float, n2: float) -> float:
        if self.is_total():
            return 1.0
        # n1 > n2 이면 굴절각의 코사인을 사용
        cos = self.cos_t() if n1 > n2 else self.cos_i
        r0 = ((n1 - n2) / (n1 + n2)) ** 2
        return r0 + (1 - r0) * (1 - cos) ** 5


class HitData:
    """
    교차 지점에서의 셰이딩 정보: 위치, 시선, 법선, 안쪽 여부, 굴절률.
    """

    def __init__(self, obj, point, eye, normal, inside, entered_refractive, exited_refractive):
        self.object = obj
        self.point = point
        self.eye = eye
        self.normal = normal
        self.inside = inside
        self.entered_refractive = entered_refractive
        self.exited_refractive = exited_refractive

    @staticmethod
    def from_intersection(ray: Ray, hit: Intersection, intersections: Intersections):
        obj = hit.object
        point = ray.point_at_parameter(hit.t)
        eye = (-ray.direction).normalize()
        normal = obj.normal_at(point, hit.uv)

        inside = normal.dot(eye) < 0
        if inside:
            normal = -normal

        entered, exited = HitData._refractive_indices(hit, intersections)
        return HitData(obj, point, eye, normal, inside, entered, exited)

    @staticmethod
    def _refractive_indices(hit: Intersection, intersections: Intersections):
        # 레이가 현재 안에 있는 오브젝트들의 스택 (겹친 유리 등)
        containers = []
        entered = 1.0
        exited = 1.0
        for intersection in intersections:
            is_hit = intersection.is_same(hit)
            if is_hit and containers:
                entered = containers[-1].material.refractive

            if intersection.object in containers:
                containers.remove(intersection.object)
            else:
                containers.append(intersection.object)

            if is_hit:
                exited = containers[-1].material.refractive if containers else 1.0
                break
        return entered, exited

    def reflection_data(self):
        return ReflectionData(self.eye, self.normal, self.entered_refractive, self.exited_refractive)

    def reflectance(self):
        return self.reflection_data().reflectance(self.entered_refractive, self.exited_refractive)

