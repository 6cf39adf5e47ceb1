import math
import sys
import numpy as np

# f32 머신 엡실론: 자기 교차(acne) 방지용 허용 오차
EPSILON = 1.1920929e-07
# f64 머신 엡실론: 행렬식/판별식의 퇴화 판정용
MACHINE_EPSILON = sys.float_info.epsilon


def is_roughly_zero(value):
    return abs(value) <= EPSILON


def roughly_equals(a, b):
    return is_roughly_zero(a - b)


def roughly_gte(a, b):
    return a > b or roughly_equals(a, b)


def roughly_lte(a, b):
    return a < b or roughly_equals(a, b)


def quadratic(a, b, c):
    """
    a·t² + b·t + c = 0 의 두 실근을 (작은 근, 큰 근) 순서로 반환.
    실근이 없으면 None.
    """
    discriminant = b * b - 4.0 * a * c
    if discriminant < 0:
        return None
    root = math.sqrt(discriminant)
    first = (-b - root) / (2.0 * a)
    second = (-b + root) / (2.0 * a)
    if first > second:
        first, second = second, first
    return first, second


class Vec3:
    __slots__ = ("x", "y", "z")

    def __init__(self, x=0.0, y=0.0, z=0.0):
        self.x = float(x)
        self.y = float(y)
        self.z = float(z)

    def __add__(self, other):
        return type(self)(self.x + other.x,
                          self.y + other.y,
                          self.z + other.z)

    def __sub__(self, other):
        return type(self)(self.x - other.x,
                          self.y - other.y,
                          self.z - other.z)

    def __mul__(self, t):
        # 스칼라 곱 또는 원소별 곱(Hadamard)
        if isinstance(t, Vec3):
            return type(self)(self.x * t.x,
                              self.y * t.y,
                              self.z * t.z)
        return type(self)(self.x * t, self.y * t, self.z * t)

    __rmul__ = __mul__

    def __truediv__(self, t):
        return type(self)(self.x / t, self.y / t, self.z / t)

    def __neg__(self):
        return type(self)(-self.x, -self.y, -self.z)

    def __eq__(self, other):
        if not isinstance(other, Vec3):
            return NotImplemented
        return self.x == other.x and self.y == other.y and self.z == other.z

    def __hash__(self):
        return hash((self.x, self.y, self.z))

    def __iter__(self):
        yield self.x
        yield self.y
        yield self.z

    def __getstate__(self):
        return (self.x, self.y, self.z)

    def __setstate__(self, state):
        self.x, self.y, self.z = state

    def almost_equals(self, other, tolerance=EPSILON):
        return (abs(self.x - other.x) <= tolerance and
                abs(self.y - other.y) <= tolerance and
                abs(self.z - other.z) <= tolerance)

    def dot(self, other):
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other):
        return Vec3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x
        )

    def length(self):
        return math.sqrt(self.x * self.x + self.y * self.y + self.z * self.z)

    magnitude = length

    def normalize(self):
        l = self.length()
        # 길이 0(또는 f64 엡실론 이하) 벡터는 0 벡터 그대로
        if l <= MACHINE_EPSILON:
            return type(self)(0, 0, 0)
        return self / l

    def reflect(self, normal):
        # 반사 벡터: r = v - 2 * dot(v, n) * n
        return self - normal * (2 * self.dot(normal))

    def to_np(self):
        return np.array([self.x, self.y, self.z], dtype=np.float64)

    def __repr__(self):
        return f"Vec3({self.x:.3f}, {self.y:.3f}, {self.z:.3f})"


ORIGIN = Vec3(0, 0, 0)


class Colour(Vec3):
    """
    RGB 색. 0~1 범위 밖의 값도 허용 (이미지로 내보낼 때 잘라냄).
    """
    __slots__ = ()

    @property
    def red(self):
        return self.x

    @property
    def green(self):
        return self.y

    @property
    def blue(self):
        return self.z

    @staticmethod
    def greyscale(value):
        return Colour(value, value, value)

    def intensity(self):
        return self.x + self.y + self.z

    def normalised(self):
        # 각 채널이 전체 세기에서 차지하는 비율
        total = self.intensity()
        if total == 0:
            return Colour(0, 0, 0)
        return Colour(self.x / total, self.y / total, self.z / total)

    def to_rgb8(self):
        return tuple(int(max(0.0, min(1.0, c)) * 255) for c in self)

    def is_similar_to(self, other):
        # 8비트로 양자화했을 때 같은 색이면 구분 불가
        return self.to_rgb8() == other.to_rgb8()

    def __repr__(self):
        return f"Colour({self.x:.5f}, {self.y:.5f}, {self.z:.5f})"


Colour.BLACK = Colour(0, 0, 0)
Colour.WHITE = Colour(1, 1, 1)
Colour.RED = Colour(1, 0, 0)
Colour.GREEN = Colour(0, 1, 0)
Colour.BLUE = Colour(0, 0, 1)


class Ray:
    __slots__ = ("origin", "direction")

    def __init__(self, origin: Vec3, direction: Vec3):
        # 방향은 정규화하지 않음: 오브젝트 공간에서도 t 값이 월드 공간과 같아야 함
        self.origin = origin
        self.direction = direction

    def point_at_parameter(self, t):
        return self.origin + self.direction * t

    position = point_at_parameter

    def transformed(self, transform):
        return Ray(transform.apply_point(self.origin),
                   transform.apply_vector(self.direction))

    def __repr__(self):
        return f"Ray({self.origin!r} -> {self.direction!r})"


class Transform:
    """
    4x4 아핀 변환 행렬 (numpy).
    translate_x(...).scale_all(...) 처럼 이어서 쓰면 호출 순서대로 적용된다.
    """

    def __init__(self, matrix=None):
        self.matrix = np.identity(4) if matrix is None else np.asarray(matrix, dtype=np.float64)
        self._inverse = None
        self._rows = None

    @staticmethod
    def identity():
        return Transform()

    def then(self, other):
        # self 를 먼저, other 를 나중에 적용
        return Transform(other.matrix @ self.matrix)

    def __mul__(self, other):
        return Transform(self.matrix @ other.matrix)

    def __eq__(self, other):
        if not isinstance(other, Transform):
            return NotImplemented
        return bool(np.allclose(self.matrix, other.matrix, atol=EPSILON))

    __hash__ = None

    def _then_matrix(self, m):
        return Transform(np.asarray(m, dtype=np.float64) @ self.matrix)

    def translate_x(self, d):
        return self.translate(d, 0, 0)

    def translate_y(self, d):
        return self.translate(0, d, 0)

    def translate_z(self, d):
        return self.translate(0, 0, d)

    def translate(self, x, y, z):
        m = np.identity(4)
        m[0, 3], m[1, 3], m[2, 3] = x, y, z
        return self._then_matrix(m)

    def scale_x(self, s):
        return self.scale(s, 1, 1)

    def scale_y(self, s):
        return self.scale(1, s, 1)

    def scale_z(self, s):
        return self.scale(1, 1, s)

    def scale_all(self, s):
        return self.scale(s, s, s)

    def scale(self, x, y, z):
        return self._then_matrix(np.diag([x, y, z, 1.0]))

    def rotate_x(self, radians):
        c, s = math.cos(radians), math.sin(radians)
        return self._then_matrix([[1, 0, 0, 0],
                                  [0, c, -s, 0],
                                  [0, s, c, 0],
                                  [0, 0, 0, 1]])

    def rotate_y(self, radians):
        c, s = math.cos(radians), math.sin(radians)
        return self._then_matrix([[c, 0, s, 0],
                                  [0, 1, 0, 0],
                                  [-s, 0, c, 0],
                                  [0, 0, 0, 1]])

    def rotate_z(self, radians):
        c, s = math.cos(radians), math.sin(radians)
        return self._then_matrix([[c, -s, 0, 0],
                                  [s, c, 0, 0],
                                  [0, 0, 1, 0],
                                  [0, 0, 0, 1]])

    def shear(self, xy, xz, yx, yz, zx, zy):
        return self._then_matrix([[1, xy, xz, 0],
                                  [yx, 1, yz, 0],
                                  [zx, zy, 1, 0],
                                  [0, 0, 0, 1]])

    @staticmethod
    def view_transform(from_point: Vec3, to: Vec3, up: Vec3):
        forward = (to - from_point).normalize()
        left = forward.cross(up.normalize())
        true_up = left.cross(forward)
        orientation = np.array([[left.x, left.y, left.z, 0],
                                [true_up.x, true_up.y, true_up.z, 0],
                                [-forward.x, -forward.y, -forward.z, 0],
                                [0, 0, 0, 1]], dtype=np.float64)
        # 먼저 카메라 위치를 원점으로 옮긴 뒤 방향을 맞춤
        return Transform().translate(-from_point.x, -from_point.y, -from_point.z)._then_matrix(orientation)

    def inverse(self):
        if self._inverse is None:
            inv = Transform(np.linalg.inv(self.matrix))
            inv._inverse = self
            self._inverse = inv
        return self._inverse

    def transpose(self):
        return Transform(self.matrix.T)

    def _row_list(self):
        # numpy 스칼라 연산보다 파이썬 float 연산이 훨씬 빠름
        if self._rows is None:
            self._rows = self.matrix.tolist()
        return self._rows

    def apply_point(self, p: Vec3):
        (a, b, c, d), (e, f, g, h), (i, j, k, l), _ = self._row_list()
        return type(p)(a * p.x + b * p.y + c * p.z + d,
                       e * p.x + f * p.y + g * p.z + h,
                       i * p.x + j * p.y + k * p.z + l)

    def apply_vector(self, v: Vec3):
        (a, b, c, _), (e, f, g, _), (i, j, k, _), _ = self._row_list()
        return type(v)(a * v.x + b * v.y + c * v.z,
                       e * v.x + f * v.y + g * v.z,
                       i * v.x + j * v.y + k * v.z)

    def __getstate__(self):
        return self.matrix

    def __setstate__(self, state):
        self.matrix = state
        self._inverse = None
        self._rows = None

    def __repr__(self):
        return f"Transform({self.matrix.tolist()!r})"
