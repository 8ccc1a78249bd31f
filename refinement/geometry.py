from __future__ import annotations

import math
from typing import Iterable, Tuple

Point = Tuple[float, float]


def distance(a: Point, b: Point) -> float:
    return math.hypot(b[0] - a[0], b[1] - a[1])


def distance_to_segment(point: Point, start: Point, end: Point) -> float:
    """Distance from ``point`` to the segment start-end.

    The point is projected onto the infinite line through the segment and the
    projection parameter is clamped to [0, 1].
    """
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    length_sq = dx * dx + dy * dy
    if length_sq == 0:
        return distance(point, start)
    t = ((point[0] - start[0]) * dx + (point[1] - start[1]) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    projection = (start[0] + t * dx, start[1] + t * dy)
    return distance(point, projection)


def within_radius(point: Point, segments: Iterable[Tuple[Point, Point]], radius: float) -> bool:
    for start, end in segments:
        if distance_to_segment(point, start, end) < radius:
            return True
    return False
