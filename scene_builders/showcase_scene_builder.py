import math
import numpy as np
from core.math import Vec3, Colour, Transform
from core.material import Material, Texture
from core.pattern import Pattern, UvPattern
from core.objects import Object
from core.light import Light
from core.scene import World, WorldSettings
from core.camera import Camera


class ShowcaseSceneBuilder:
    """CSG, 그룹, 유리 굴절, 면 광원을 한 장면에 모은 데모 빌더"""

    def __init__(self, settings: WorldSettings = None):
        self.settings = settings or WorldSettings()

        # 면 광원
        self.light_corner = Vec3(-6.0, 8.0, -6.0)
        self.light_size = 2.0
        self.light_steps = 4
        self.light_seed = 0

    def build_scene(self) -> World:
        """완전한 데모 씬을 생성"""
        world = World(self.settings)

        # 재질 생성
        materials = self._create_materials()

        # 바닥과 벽
        self._create_room(world, materials)

        # CSG: 구멍 뚫린 주사위
        self._create_csg(world, materials)

        # 유리 구와 안쪽 공기 방울
        self._create_glass(world, materials)

        # 원뿔/원기둥 그룹, 삼각형 부채꼴
        self._create_group(world, materials)
        self._create_fan(world, materials)

        # 조명
        self._create_lighting(world)

        return world

    def create_camera(self, width: int, height: int) -> Camera:
        view = Transform.view_transform(Vec3(0, 2.5, -7.5), Vec3(0, 0.8, 0), Vec3(0, 1, 0))
        return Camera(width, height, math.pi / 3, view)

    def _create_materials(self) -> dict:
        """모든 재질들을 생성"""
        # 체커 텍스처 이미지 (8x8 픽셀)
        checks = np.indices((8, 8)).sum(axis=0) % 2
        pixels = np.where(checks[..., None] == 0, [230, 200, 60], [40, 60, 160]).astype(np.uint8)
        image = Texture.from_array(pixels)

        return {
            'floor': Material(
                pattern=Pattern.checkers(Colour(0.9, 0.9, 0.9), Colour(0.2, 0.2, 0.25))
                .with_transform(Transform.identity().scale_all(0.75)),
                specular=0.0,
                reflective=0.15,
            ),
            'wall': Material(
                pattern=Pattern.striped(Colour(0.85, 0.8, 0.7), Colour(0.75, 0.7, 0.6))
                .with_transform(Transform.identity().rotate_y(math.pi / 2).scale_all(0.25)),
                specular=0.0,
            ),
            'dice': Material(colour=Colour(0.9, 0.15, 0.1), diffuse=0.8, specular=0.4, shininess=50),
            'glass': Material(colour=Colour.BLACK, ambient=0.0, diffuse=0.05, specular=1.0, shininess=300,
                              reflective=0.9, transparency=0.9, refractive=1.5),
            'air': Material(colour=Colour.BLACK, ambient=0.0, diffuse=0.0, specular=0.0,
                            reflective=0.9, transparency=1.0, refractive=1.0),
            'ring': Material(pattern=Pattern.ring(Colour(0.1, 0.6, 0.3), Colour(0.9, 0.9, 0.4))
                             .with_transform(Transform.identity().scale_all(0.1))),
            'can': Material(pattern=UvPattern.capped_cylinder(
                UvPattern.checkers(Colour(0.2, 0.3, 0.8), Colour.WHITE, 16, 4),
                UvPattern.image(image),
                UvPattern.image(image),
            )),
            'fan': Material(colour=Colour(0.95, 0.6, 0.2), specular=0.3),
            'tinted': Material(colour=Colour(0.2, 0.9, 0.3), transparency=0.6, reflective=0.1, refractive=1.2),
        }

    def _create_room(self, world: World, materials: dict):
        floor = Object.plane().with_material(materials['floor'])
        back_wall = (Object.plane()
                     .with_material(materials['wall'])
                     .transformed(Transform.identity().rotate_x(math.pi / 2).translate_z(8)))
        world.add(floor)
        world.add(back_wall)

    def _create_csg(self, world: World, materials: dict):
        cube = Object.cube()
        sphere = Object.sphere().transformed(Transform.identity().scale_all(1.35))
        dice = (Object.csg_difference(Object.csg_intersection(cube, sphere),
                                      Object.cylinder().min_y(-2).max_y(2).build()
                                      .transformed(Transform.identity().scale(0.5, 1, 0.5)))
                .with_material(materials['dice'])
                .transformed(Transform.identity().scale_all(0.6).rotate_y(math.pi / 5).translate(-2.2, 0.6, 1.0)))
        world.add(dice)

    def _create_glass(self, world: World, materials: dict):
        glass = (Object.sphere()
                 .with_material(materials['glass'])
                 .transformed(Transform.identity().translate(0.2, 1.0, -0.5)))
        bubble = (Object.sphere()
                  .with_material(materials['air'])
                  .transformed(Transform.identity().scale_all(0.5).translate(0.2, 1.0, -0.5)))
        world.add(glass)
        world.add(bubble)

        pane = (Object.cube()
                .with_material(materials['tinted'])
                .transformed(Transform.identity().scale(0.6, 0.8, 0.05).translate(1.3, 0.8, -2.2)))
        world.add(pane)

    def _create_group(self, world: World, materials: dict):
        cone = (Object.cone().min_y(-1).max_y(0).capped().build()
                .with_material(materials['ring'])
                .transformed(Transform.identity().scale(0.5, 1.2, 0.5).translate_y(1.2)))
        can = (Object.cylinder().min_y(0).max_y(1).capped().build()
               .with_material(materials['can'])
               .transformed(Transform.identity().scale(0.4, 0.8, 0.4)))
        stand = Object.group([cone, can]).transformed(Transform.identity().translate(2.4, 0, 1.5))
        world.add(stand)

    def _create_fan(self, world: World, materials: dict):
        # 부드러운 삼각형 부채꼴 (정점 법선 보간)
        blades = []
        count = 6
        centre = Vec3(0, 0.4, 0)
        for i in range(count):
            a0 = math.pi * i / count
            a1 = math.pi * (i + 1) / count
            p1 = Vec3(math.cos(a0), 0, math.sin(a0))
            p2 = Vec3(math.cos(a1), 0, math.sin(a1))
            n1 = (p1 + Vec3(0, 1.5, 0)).normalize()
            n2 = (p2 + Vec3(0, 1.5, 0)).normalize()
            blades.append(Object.smooth_triangle(centre, p1, p2, Vec3(0, 1, 0), n1, n2))
        fan = (Object.group(blades)
               .with_material(materials['fan'])
               .transformed(Transform.identity().scale_all(0.9).translate(-0.6, 0.01, 2.6)))
        world.add(fan)

    def _create_lighting(self, world: World):
        """면 광원 (light_steps x light_steps 샘플)"""
        size = self.light_size
        world.add_light(Light.area(Colour(1.0, 1.0, 0.95), self.light_corner,
                                   Vec3(size, 0, 0), Vec3(0, 0, size),
                                   self.light_steps, self.light_steps, self.light_seed))
