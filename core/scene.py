from typing import List, Optional
from dataclasses import dataclass, field
from core.math import Vec3, Ray, Colour, Transform, is_roughly_zero
from core.material import Material
from core.intersection import Intersections, HitData
from core.light import Light, LightSample
from core.objects import Object


@dataclass
class WorldSettings:
    # 반사/굴절 재귀 최대 깊이
    recursion_depth: int = 5
    # 아무것도 맞지 않았을 때의 색
    sky_colour: Colour = field(default_factory=lambda: Colour.BLACK)
    # 투명한 물체가 통과하는 빛을 자기 색으로 물들이는 정도 (작은 값 권장)
    transparent_colour_tint: float = 0.1
    # BVH 재분할 시 그룹 크기 기준
    group_size_threshold: int = 4


@dataclass
class RenderSettings:
    width: int = 800
    height: int = 600
    # 안티앨리어싱 격자 크기 (samples x samples)
    samples: int = 3
    # None 이면 CPU 코어 수
    workers: Optional[int] = None
    show_progress: bool = True


class World:
    def __init__(self, settings: WorldSettings = None):
        self.objects: List[Object] = []
        self.lights: List[Light] = []
        self.settings = settings or WorldSettings()

    def add(self, obj: Object):
        self.objects.append(obj.optimised(self.settings.group_size_threshold))

    def add_light(self, light: Light):
        self.lights.append(light)

    def intersect(self, ray: Ray) -> Intersections:
        hits = []
        for obj in self.objects:
            hits.extend(obj.intersect(ray))
        return Intersections(hits)

    def colour_at(self, ray: Ray) -> Colour:
        return self._colour_at(ray, None, self.settings.recursion_depth)

    def _colour_at(self, ray: Ray, last_hit_id, limit: int) -> Colour:
        if limit == 0:
            return Colour.BLACK

        intersections = self.intersect(ray)
        hit = intersections.hit(last_hit_id)
        if hit is None:
            return self.settings.sky_colour

        hit_data = HitData.from_intersection(ray, hit, intersections)
        material = hit_data.object.material
        surface = self.shade_hit(hit_data)

        if material.reflective == 0:
            reflected = Colour.BLACK
        else:
            reflection_vector = ray.direction.normalize().reflect(hit_data.normal)
            reflection = Ray(hit_data.point, reflection_vector)
            reflected = self._colour_at(reflection, hit_data.object.id, limit - 1) * material.reflective

        if material.transparency == 0:
            return surface + reflected

        reflection_data = hit_data.reflection_data()
        # 전반사면 굴절광 없음
        if reflection_data.is_total():
            refracted = Colour.BLACK
        else:
            refracted_direction = reflection_data.refraction_vector(hit_data.eye, hit_data.normal)
            refracted_ray = Ray(hit_data.point, refracted_direction.normalize())
            refracted = self._colour_at(refracted_ray, hit_data.object.id, limit - 1) * material.transparency

        if material.reflective > 0:
            # Fresnel (Schlick)
            reflectance = reflection_data.reflectance(hit_data.entered_refractive, hit_data.exited_refractive)
            return surface + reflected * reflectance + refracted * (1 - reflectance)
        return surface + reflected + refracted

    def shade_hit(self, hit_data: HitData) -> Colour:
        """광원별로 샘플 평균을 낸 Phong 색을 모두 더함"""
        total = Colour.BLACK
        obj = hit_data.object
        for light in self.lights:
            light_sum = Colour.BLACK
            for sample in light.samples:
                direct = self.direct_light(hit_data.point, sample, obj.id)
                light_sum = light_sum + obj.colour_at(hit_data.point, direct, hit_data.eye, hit_data.normal, sample)
            total = total + light_sum / len(light.samples)
        return total

    def direct_light(self, point: Vec3, sample: LightSample, target_id: int) -> Colour:
        """
        그림자 광선을 따라 광원에서 point 까지 도달하는 빛.
        불투명한 물체는 완전히 가리고, 투명한 물체는 투명도만큼 약하게 하면서 자기 색으로 물들인다.
        """
        light_vector = sample.position - point
        distance = light_vector.length()

        # 광원이 교차점 위에 있으면 그대로
        if is_roughly_zero(distance):
            return sample.colour

        shadow_ray = Ray(point, light_vector.normalize())
        tint = self.settings.transparent_colour_tint

        light = sample.colour
        for hit in self.intersect(shadow_ray):
            if hit.object.id == target_id and is_roughly_zero(hit.t):
                continue
            # t == 0 인 다른 물체는 point 에 맞닿아 있으므로 빛을 가린다
            if not (0 <= hit.t < distance):
                continue
            if light == Colour.BLACK:
                break

            occluder = hit.object.material
            if not occluder.casts_shadow:
                continue
            if occluder.transparency == 0:
                return Colour.BLACK

            hit_colour = hit.object.raw_colour_at(shadow_ray.point_at_parameter(hit.t))
            # 색 없는 유리는 빛의 색을 바꾸지 않음
            if hit_colour == Colour.BLACK:
                light = light * occluder.transparency
                continue

            transmitted = (hit_colour.normalised() * light.intensity()).normalised()
            light = (transmitted * tint + light * (1 - tint)) * occluder.transparency

        return light


def default_world() -> World:
    """두 개의 동심 구와 점 광원 하나로 이루어진 기본 장면 (테스트용)"""
    world = World()
    world.objects = [
        Object.sphere().with_material(Material(colour=Colour(0.8, 1.0, 0.6), ambient=0.1, diffuse=0.7, specular=0.2)),
        Object.sphere().transformed(Transform.identity().scale_all(0.5)),
    ]
    world.lights = [Light.point(Colour.WHITE, Vec3(-10, 10, -10))]
    return world
