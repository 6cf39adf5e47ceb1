import multiprocessing as mp
import numpy as np
from PIL import Image

from core.math import Colour

# 약 16K 해상도까지만 허용 (메모리 보호)
MAX_WIDTH = 1920 * 4
MAX_HEIGHT = 1080 * 4

# 워커 프로세스마다 한 번만 전달받는 픽셀 샘플러
_worker_sampler = None


def _init_worker(sampler):
    global _worker_sampler
    _worker_sampler = sampler


def _render_row(args):
    """멀티프로세싱 풀에서 호출되는 워커 함수: 한 줄을 렌더링"""
    y, width = args
    return y, [tuple(_worker_sampler.colour_at(x, y)) for x in range(width)]


class Canvas:
    def __init__(self, width: int, height: int):
        if width < 1 or height < 1:
            raise ValueError(f"Canvas must not be empty: {width}x{height}")
        if width > MAX_WIDTH or height > MAX_HEIGHT:
            raise ValueError(f"Canvas too large: {width}x{height} (max {MAX_WIDTH}x{MAX_HEIGHT})")
        self.width = width
        self.height = height
        self.pixels = np.zeros((height, width, 3), dtype=np.float64)

    def get(self, x: int, y: int) -> Colour:
        r, g, b = self.pixels[y, x]
        return Colour(r, g, b)

    def set(self, x: int, y: int, colour: Colour):
        self.pixels[y, x] = (colour.red, colour.green, colour.blue)

    def draw(self, sampler, workers=None, show_progress=False):
        """
        sampler.colour_at(x, y) 로 모든 픽셀을 채움.
        workers == 1 이면 현재 프로세스에서 순서대로, 아니면 줄 단위로 프로세스 풀에 분배.
        sampler 는 pickle 가능해야 함.
        """
        if workers is None:
            workers = mp.cpu_count()

        tasks = [(y, self.width) for y in range(self.height)]
        report_every = max(1, self.height // 10)

        if workers == 1:
            _init_worker(sampler)
            rows = map(_render_row, tasks)
            self._collect(rows, report_every, show_progress)
            return self

        with mp.Pool(workers, initializer=_init_worker, initargs=(sampler,)) as pool:
            rows = pool.imap_unordered(_render_row, tasks, chunksize=max(1, self.height // (workers * 4)))
            self._collect(rows, report_every, show_progress)
        return self

    def _collect(self, rows, report_every, show_progress):
        for done, (y, row) in enumerate(rows, start=1):
            self.pixels[y] = row
            if show_progress and done % report_every == 0:
                print(f"렌더링 중...: {done * 100 // self.height}%")

    def to_image(self) -> Image.Image:
        data = (np.clip(self.pixels, 0.0, 1.0) * 255).astype(np.uint8)
        return Image.fromarray(data)

    def save(self, path: str):
        # 확장자(.png / .ppm 등)로 포맷 결정
        self.to_image().save(path)
