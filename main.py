import time
import argparse
from core.scene import RenderSettings, WorldSettings
from scene_builders.showcase_scene_builder import ShowcaseSceneBuilder
from renderers.base_renderer import RendererFactory

# 렌더러 모듈들 import (등록을 위해)
import renderers.cpu_renderer  # noqa: F401


def build_parser():
    parser = argparse.ArgumentParser(description='Whitted Ray Tracer with CSG and Area Lights')
    parser.add_argument('--renderer', '-r',
                        choices=RendererFactory.list_available(),
                        default='cpu_raytracer',
                        help='렌더러 선택')
    parser.add_argument('--width', '-w', type=int, default=640,
                        help='이미지 가로 크기')
    parser.add_argument('--height', type=int, default=480,
                        help='이미지 세로 크기')
    parser.add_argument('--samples', '-s', type=int, default=3,
                        help='안티앨리어싱 격자 크기 (s x s)')
    parser.add_argument('--depth', '-d', type=int, default=5,
                        help='최대 재귀 깊이')
    parser.add_argument('--workers', type=int, default=None,
                        help='워커 프로세스 수 (기본값: CPU 코어 수)')
    parser.add_argument('--output', '-o', default='output.png',
                        help='출력 파일명 (.png / .ppm)')
    parser.add_argument('--quiet', '-q', action='store_true',
                        help='진행 상황 출력 끄기')
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    # 렌더링 설정
    settings = RenderSettings(
        width=args.width,
        height=args.height,
        samples=args.samples,
        workers=args.workers,
        show_progress=not args.quiet
    )

    # 씬 생성
    print("장면 생성 중: showcase")
    scene_builder = ShowcaseSceneBuilder(WorldSettings(recursion_depth=args.depth))
    world = scene_builder.build_scene()
    camera = scene_builder.create_camera(settings.width, settings.height)

    # 렌더러 생성
    print(f"렌더러 생성: {args.renderer}")
    renderer = RendererFactory.create(args.renderer)

    print(f"지원 기능: {', '.join(renderer.get_capabilities())}")

    # 렌더링 실행
    start_time = time.time()
    image = renderer.render(world, camera, settings)
    end_time = time.time()

    # 결과 저장
    image.save(args.output)
    print(f"이미지 저장: {args.output}")

    # 실행 시간 출력
    elapsed = end_time - start_time
    minutes = int(elapsed // 60)
    seconds = elapsed % 60
    print(f"총 실행 시간: {minutes}분 {seconds:.2f}초")
    return image


if __name__ == "__main__":
    main()
