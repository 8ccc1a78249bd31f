"""Curve smoothing operators for refined paths."""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from .paths import PathSet, Point, VectorPath

MIN_SMOOTHING_POINTS = 3


def moving_average(points: Sequence[Point], window: int) -> List[Point]:
    """Moving-average resample that keeps both endpoints exactly.

    The output starts with the first input point, continues with one averaged
    point per input index, and ends with the last input point unless the
    final average already equals it.
    """
    if len(points) < MIN_SMOOTHING_POINTS:
        return list(points)
    half = max(1, int(window)) // 2
    last = len(points) - 1
    result: List[Point] = [points[0]]
    for i in range(len(points)):
        start = max(0, i - half)
        end = min(last, i + half)
        count = end - start + 1
        sum_x = 0.0
        sum_y = 0.0
        for j in range(start, end + 1):
            sum_x += points[j][0]
            sum_y += points[j][1]
        result.append((sum_x / count, sum_y / count))
    if result[-1] != tuple(points[-1]):
        result.append(points[-1])
    return result


def chaikin(points: Sequence[Point], iterations: int = 1) -> List[Point]:
    """Corner-cutting subdivision; endpoints stay fixed."""
    result = list(points)
    if len(result) < 2:
        return result
    for _ in range(max(0, int(iterations))):
        refined: List[Point] = [result[0]]
        for p0, p1 in zip(result, result[1:]):
            dx = p1[0] - p0[0]
            dy = p1[1] - p0[1]
            refined.append((p0[0] + 0.25 * dx, p0[1] + 0.25 * dy))
            refined.append((p0[0] + 0.75 * dx, p0[1] + 0.75 * dy))
        refined.append(result[-1])
        result = refined
    return result


class CurveSmoother:
    def __init__(
        self,
        window: int = 3,
        iterations: int = 1,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.window = window
        self.iterations = iterations
        self.logger = logger or logging.getLogger(__name__)

    def set_window(self, window: float) -> None:
        self.window = max(1, int(round(window)))

    def set_iterations(self, iterations: int) -> None:
        self.iterations = max(0, int(iterations))

    def smooth_path(self, path: VectorPath) -> VectorPath:
        path.points = moving_average(path.points, self.window)
        return path

    def smooth_all(self, path_set: PathSet) -> PathSet:
        for path in path_set:
            self.smooth_path(path)
        self.logger.info("Smoothed %d paths with window %d", len(path_set), self.window)
        return path_set

    def subdivide_path(self, path: VectorPath) -> VectorPath:
        path.points = chaikin(path.points, self.iterations)
        return path

    def subdivide_all(self, path_set: PathSet) -> PathSet:
        for path in path_set:
            self.subdivide_path(path)
        self.logger.info("Subdivided %d paths with %d iterations", len(path_set), self.iterations)
        return path_set
