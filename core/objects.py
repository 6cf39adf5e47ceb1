import itertools
import threading
from enum import Enum
from core.math import Vec3, Ray, Colour, Transform
from core.acceleration import BoundingBox
from core.geometry import Sphere, Plane, Cube, Triangle, CylinderBuilder, ConeBuilder
from core.intersection import Intersections
from core.material import Material
from core.pattern import UvPattern


class IdGenerator:
    """
    프로세스 안에서 겹치지 않는 오브젝트 id 발급기 (스레드 안전, 재사용 없음)
    """

    def __init__(self, start=0):
        self._counter = itertools.count(start)
        self._lock = threading.Lock()

    def next_id(self) -> int:
        with self._lock:
            return next(self._counter)


class CsgOperator(Enum):
    UNION = "union"
    INTERSECTION = "intersection"
    SUBTRACT = "subtract"

    def keeps(self, hit_left: bool, in_left: bool, in_right: bool) -> bool:
        if self is CsgOperator.UNION:
            return (hit_left and not in_right) or (not hit_left and not in_left)
        if self is CsgOperator.INTERSECTION:
            return (hit_left and in_right) or (not hit_left and in_left)
        return (hit_left and not in_right) or (not hit_left and in_left)


class Object:
    """
    씬 트리의 노드: 도형(Shape) 리프, 그룹(Group), CSG 중 하나.
    transform 은 로컬→월드 변환으로, 부모 그룹의 변환이 이미 합성되어 있다.
    bounds 는 월드 공간 경계 상자.
    """

    SHAPE = "shape"
    GROUP = "group"
    CSG = "csg"

    ids = IdGenerator()

    def __init__(self, kind, shape=None, children=None, left=None, right=None, operator=None):
        self.kind = kind
        self.shape = shape
        self._children = children
        self.left = left
        self.right = right
        self.operator = operator
        self.material = Material()
        self._transform = Transform.identity()
        self._normal_transform = None
        self.id = Object.ids.next_id()
        self.bounds = self._calculate_bounds()

    # ---------- 생성 ----------

    @staticmethod
    def from_shape(shape):
        return Object(Object.SHAPE, shape=shape)

    @staticmethod
    def sphere():
        return Object.from_shape(Sphere())

    @staticmethod
    def plane():
        return Object.from_shape(Plane())

    @staticmethod
    def cube():
        return Object.from_shape(Cube())

    @staticmethod
    def cylinder():
        return CylinderBuilder()

    @staticmethod
    def cone():
        return ConeBuilder()

    @staticmethod
    def triangle(p1: Vec3, p2: Vec3, p3: Vec3):
        return Object.from_shape(Triangle(p1, p2, p3))

    @staticmethod
    def smooth_triangle(p1: Vec3, p2: Vec3, p3: Vec3, n1: Vec3, n2: Vec3, n3: Vec3):
        return Object.from_shape(Triangle.smooth(p1, p2, p3, n1, n2, n3))

    @staticmethod
    def group(children):
        return Object(Object.GROUP, children=list(children))

    @staticmethod
    def csg_union(left, right):
        return Object(Object.CSG, left=left, right=right, operator=CsgOperator.UNION)

    @staticmethod
    def csg_intersection(left, right):
        return Object(Object.CSG, left=left, right=right, operator=CsgOperator.INTERSECTION)

    @staticmethod
    def csg_difference(left, right):
        # 빼는 쪽은 보이지 않으므로 그림자도 드리우지 않음
        right._disable_shadows()
        return Object(Object.CSG, left=left, right=right, operator=CsgOperator.SUBTRACT)

    # ---------- 접근자 ----------

    @property
    def is_shape(self):
        return self.kind == Object.SHAPE

    @property
    def is_group(self):
        return self.kind == Object.GROUP

    @property
    def is_csg(self):
        return self.kind == Object.CSG

    @property
    def children(self):
        if not self.is_group:
            raise TypeError("Object is not a group and has no children")
        return self._children

    @property
    def csg_children(self):
        if not self.is_csg:
            raise TypeError("Object is not a CSG")
        return self.left, self.right

    @property
    def transform(self) -> Transform:
        return self._transform

    @transform.setter
    def transform(self, transform: Transform):
        self._transform = transform
        self._normal_transform = None

    @property
    def inverse(self) -> Transform:
        return self._transform.inverse()

    @property
    def normal_transform(self) -> Transform:
        # 법선은 역변환의 전치 행렬로 변환
        if self._normal_transform is None:
            self._normal_transform = self._transform.inverse().transpose()
        return self._normal_transform

    def _sub_objects(self):
        if self.is_group:
            return self._children
        if self.is_csg:
            return [self.left, self.right]
        return []

    def leaves(self):
        if self.is_shape:
            yield self
            return
        for child in self._sub_objects():
            yield from child.leaves()

    def _calculate_bounds(self) -> BoundingBox:
        if self.is_shape:
            return self.shape.bounds().transformed(self._transform)
        children = self._sub_objects()
        if not children:
            return BoundingBox.infinite()
        bounds = children[0].bounds
        for child in children[1:]:
            bounds = bounds.expand_to_fit(child.bounds)
        return bounds

    # ---------- 변경 (제자리 수정 후 self 반환) ----------

    def with_material(self, material: Material):
        if self.is_group:
            for child in self._children:
                child.with_material(material)
        elif self.is_csg:
            self.left.with_material(material)
            self.right.with_material(material)
            if self.operator is CsgOperator.SUBTRACT:
                self.right._disable_shadows()
        self.material = material
        return self

    def _disable_shadows(self):
        for obj in [self, *self.leaves()]:
            obj.material = obj.material.but(casts_shadow=False)

    def transformed(self, transform: Transform):
        """
        기존 변환을 먼저 적용한 뒤 주어진 변환을 적용 (교체가 아니라 합성).
        """
        for child in self._sub_objects():
            child.transformed(transform)
        self.transform = transform * self._transform
        self.bounds = self._calculate_bounds()
        return self

    def optimised(self, threshold: int):
        """
        그룹을 경계 상자 기준으로 재분할 (BVH).
        분할된 반쪽 상자에 완전히 들어가는 자식들은 새 하위 그룹으로 묶고,
        어느 쪽에도 들어가지 않는 자식은 현재 그룹에 남긴다.
        따라서 그룹 크기가 threshold 를 넘을 수 있다.
        """
        if self.is_csg:
            self.left = self.left.optimised(threshold)
            self.right = self.right.optimised(threshold)
            return self
        if not self.is_group:
            return self

        children = self._children
        if len(children) >= threshold and len(children) > 1:
            left_box, right_box = self.bounds.split()
            left_fits, right_fits, neither_fits = [], [], []
            for child in children:
                if left_box.fully_contains(child.bounds):
                    left_fits.append(child)
                elif right_box.fully_contains(child.bounds):
                    right_fits.append(child)
                else:
                    neither_fits.append(child)

            for partition in (left_fits, right_fits):
                if not partition:
                    continue
                # 이미 하나의 그룹이거나 전부가 한쪽이면 다시 감싸지 않음
                if len(partition) == len(children) or (len(partition) == 1 and partition[0].is_group):
                    neither_fits.extend(partition)
                else:
                    neither_fits.append(Object.group(partition))
            children = neither_fits

        self._children = [child.optimised(threshold) for child in children]
        return self

    # ---------- 교차 ----------

    def contains(self, object_id: int) -> bool:
        if self.is_shape:
            return self.id == object_id
        return any(child.contains(object_id) for child in self._sub_objects())

    def intersect(self, ray: Ray) -> Intersections:
        if not self.bounds.intersected_by(ray):
            return Intersections.empty()

        if self.is_shape:
            local_ray = ray.transformed(self._transform.inverse())
            return Intersections(self.shape.intersect(self, local_ray))

        if self.is_group:
            hits = []
            for child in self._children:
                hits.extend(child.intersect(ray))
            return Intersections(hits)

        joined = self.left.intersect(ray).join(self.right.intersect(ray))
        kept = []
        in_left = False
        in_right = False
        for intersection in joined:
            hit_left = self.left.contains(intersection.object.id)
            if self.operator.keeps(hit_left, in_left, in_right):
                kept.append(intersection)
            if hit_left:
                in_left = not in_left
            else:
                in_right = not in_right
        return Intersections(kept)

    def _require_shape(self, action):
        if not self.is_shape:
            raise TypeError(f"Cannot {action} a {self.kind} object; rays only hit shapes")

    def normal_at(self, point: Vec3, uv=None) -> Vec3:
        self._require_shape("calculate the normal of")
        local_point = self._transform.inverse().apply_point(point)
        local_normal = self.shape.normal_at(local_point, uv)
        return self.normal_transform.apply_vector(local_normal).normalize()

    # ---------- 색 ----------

    def raw_colour_at(self, point: Vec3) -> Colour:
        """
        조명/시선과 무관한 표면 고유의 색 (투명 그림자 계산용)
        """
        material = self.material
        if material.pattern is None:
            return material.colour

        object_point = self._transform.inverse().apply_point(point)
        if isinstance(material.pattern, UvPattern):
            self._require_shape("UV map")
            pattern_point = material.pattern.transform.inverse().apply_point(object_point)
            return material.pattern.colour_at(self.shape.uv_at(pattern_point))
        return material.pattern.colour_at(object_point)

    def colour_at(self, point: Vec3, direct_light: Colour, eye: Vec3, normal: Vec3, light_sample) -> Colour:
        # Phong 반사 모델
        material = self.material
        material_colour = self.raw_colour_at(point)
        ambient = material_colour * light_sample.colour * material.ambient

        # 그림자 안
        if direct_light == Colour.BLACK:
            return ambient

        light_vector = (light_sample.position - point).normalize()
        light_dot_normal = light_vector.dot(normal)
        # 광원이 표면 뒤에 있음
        if light_dot_normal < 0:
            return ambient

        diffuse = material_colour * direct_light * material.diffuse * light_dot_normal

        reflected = (-light_vector).reflect(normal)
        reflect_dot_eye = reflected.dot(eye)
        if reflect_dot_eye < 0:
            return ambient + diffuse

        specular = direct_light * material.specular * (reflect_dot_eye ** material.shininess)
        return ambient + diffuse + specular

    def __repr__(self):
        return f"Object({self.kind}, id={self.id})"
