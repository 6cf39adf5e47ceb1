from core.math import Vec3, Ray


class BoundingBox:
    """
    축 정렬 경계 상자(AABB). 오브젝트 트리의 빠른 교차 배제와 그룹 재분할에 사용.
    """

    # 무한 상자도 분할/변환이 가능하도록 유한한 큰 값 사용
    LIMIT = 1e100

    def __init__(self, min_pt: Vec3, max_pt: Vec3):
        if min_pt.x > max_pt.x or min_pt.y > max_pt.y or min_pt.z > max_pt.z:
            raise ValueError(f"Bounding box not correctly aligned: min={min_pt}, max={max_pt}")
        self.min = min_pt
        self.max = max_pt

    @staticmethod
    def infinite():
        limit = BoundingBox.LIMIT
        return BoundingBox(Vec3(-limit, -limit, -limit), Vec3(limit, limit, limit))

    @staticmethod
    def clamped(min_pt: Vec3, max_pt: Vec3):
        # 무한대 좌표를 LIMIT 으로 잘라냄 (끝이 열린 실린더/원뿔 등)
        limit = BoundingBox.LIMIT

        def clamp(v):
            return Vec3(*(max(-limit, min(limit, c)) for c in v))

        return BoundingBox(clamp(min_pt), clamp(max_pt))

    def expand_to_fit(self, other):
        small = Vec3(
            min(self.min.x, other.min.x),
            min(self.min.y, other.min.y),
            min(self.min.z, other.min.z)
        )
        big = Vec3(
            max(self.max.x, other.max.x),
            max(self.max.y, other.max.y),
            max(self.max.z, other.max.z)
        )
        return BoundingBox(small, big)

    def contains(self, point: Vec3) -> bool:
        return (self.min.x <= point.x <= self.max.x and
                self.min.y <= point.y <= self.max.y and
                self.min.z <= point.z <= self.max.z)

    def excludes(self, point: Vec3) -> bool:
        return not self.contains(point)

    def fully_contains(self, other) -> bool:
        return self.contains(other.min) and self.contains(other.max)

    def partially_excludes(self, other) -> bool:
        return not self.fully_contains(other)

    def intersected_by(self, ray: Ray) -> bool:
        # 슬랩 테스트: 음수 t 구간도 교차로 인정 (레이 원점이 상자 안에 있는 경우)
        t_min = -float("inf")
        t_max = float("inf")
        for origin, direction, lo, hi in zip(ray.origin, ray.direction, self.min, self.max):
            if direction == 0.0:
                # 평행한 축: 원점이 두 평면 사이에 있어야만 통과
                if origin < lo or origin > hi:
                    return False
                continue
            t0 = (lo - origin) / direction
            t1 = (hi - origin) / direction
            if t0 > t1:
                t0, t1 = t1, t0
            t_min = t0 if t0 > t_min else t_min
            t_max = t1 if t1 < t_max else t_max
            if t_max < t_min:
                return False
        return True

    def split(self):
        """
        가장 긴 축을 반으로 나눈 두 상자를 반환. 길이가 같으면 x, y 순으로 우선.
        """
        dx = self.max.x - self.min.x
        dy = self.max.y - self.min.y
        dz = self.max.z - self.min.z

        if dx >= dy and dx >= dz:
            mid = self.min.x + dx / 2
            left_max = Vec3(mid, self.max.y, self.max.z)
            right_min = Vec3(mid, self.min.y, self.min.z)
        elif dy >= dz:
            mid = self.min.y + dy / 2
            left_max = Vec3(self.max.x, mid, self.max.z)
            right_min = Vec3(self.min.x, mid, self.min.z)
        else:
            mid = self.min.z + dz / 2
            left_max = Vec3(self.max.x, self.max.y, mid)
            right_min = Vec3(self.min.x, self.min.y, mid)

        return BoundingBox(self.min, left_max), BoundingBox(right_min, self.max)

    def corners(self):
        lo, hi = self.min, self.max
        return [Vec3(x, y, z)
                for x in (lo.x, hi.x)
                for y in (lo.y, hi.y)
                for z in (lo.z, hi.z)]

    def transformed(self, transform):
        points = [transform.apply_point(p) for p in self.corners()]
        small = Vec3(min(p.x for p in points), min(p.y for p in points), min(p.z for p in points))
        big = Vec3(max(p.x for p in points), max(p.y for p in points), max(p.z for p in points))
        return BoundingBox.clamped(small, big)

    def __eq__(self, other):
        if not isinstance(other, BoundingBox):
            return NotImplemented
        return self.min == other.min and self.max == other.max

    __hash__ = None

    def __repr__(self):
        return f"BoundingBox({self.min!r}, {self.max!r})"
