"""Freehand draw/erase tool for refining a traced contour."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from .geometry import within_radius
from .paths import (
    DEFAULT_CONTOUR_COLOR,
    DEFAULT_CONTOUR_WIDTH,
    PathOrigin,
    PathSet,
    Point,
    VectorPath,
)

# Semi-transparent red.
ERASE_INDICATOR_COLOR = "#FF000080"


class BrushMode(str, Enum):
    DRAW = "draw"
    ERASE = "erase"


@dataclass
class BrushSettings:
    width: float = 5.0
    color: str = "#00FF00"
    mode: BrushMode = BrushMode.DRAW


class StrokeEditor:
    """Owns the PathSet for one image and applies pointer strokes to it.

    In draw mode a stroke becomes a new path once it ends. In erase mode each
    pointer sample removes the topmost path passing within half the brush
    width; the gesture itself is only mirrored by a transient indicator path.
    """

    def __init__(
        self,
        canvas_size: Tuple[int, int],
        path_set: Optional[PathSet] = None,
        settings: Optional[BrushSettings] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.canvas_width, self.canvas_height = canvas_size
        self.path_set = path_set if path_set is not None else PathSet()
        self.settings = settings or BrushSettings()
        self.logger = logger or logging.getLogger(__name__)
        self._active: Optional[VectorPath] = None
        self._indicator: Optional[VectorPath] = None

    @property
    def mode(self) -> BrushMode:
        return self.settings.mode

    @property
    def active_path(self) -> Optional[VectorPath]:
        return self._active

    @property
    def indicator(self) -> Optional[VectorPath]:
        return self._indicator

    @property
    def is_stroking(self) -> bool:
        return self._active is not None or self._indicator is not None

    def set_mode(self, mode: BrushMode | str) -> None:
        mode = BrushMode(mode)
        if mode != self.settings.mode and self.is_stroking:
            self.end_stroke()
        self.settings.mode = mode

    def set_width(self, width: float) -> None:
        if width <= 0:
            raise ValueError("Brush width must be positive.")
        self.settings.width = float(width)

    def set_color(self, color: str) -> None:
        self.settings.color = color

    def in_bounds(self, point: Point) -> bool:
        x, y = point
        return 0.0 <= x < self.canvas_width and 0.0 <= y < self.canvas_height

    def visible_paths(self) -> List[VectorPath]:
        """Committed paths in z-order followed by the stroke in progress, if any."""
        visible = list(self.path_set)
        if self._active is not None:
            visible.append(self._active)
        if self._indicator is not None:
            visible.append(self._indicator)
        return visible

    def seed_from_contour(
        self,
        points: Iterable[Tuple[int, int]],
        width: float = DEFAULT_CONTOUR_WIDTH,
        color: str = DEFAULT_CONTOUR_COLOR,
    ) -> VectorPath:
        path = VectorPath.from_contour_points(points, width=width, color=color)
        self.path_set.add(path)
        self.logger.debug("Seeded contour path with %d points", len(path))
        return path

    def begin_stroke(self, point: Point) -> bool:
        if self.is_stroking:
            self.end_stroke()
        if not self.in_bounds(point):
            return False
        start = (float(point[0]), float(point[1]))
        if self.settings.mode == BrushMode.DRAW:
            self._active = VectorPath(
                points=[start],
                width=self.settings.width,
                color=self.settings.color,
                origin=PathOrigin.DRAWN,
            )
        else:
            self._indicator = VectorPath(
                points=[start],
                width=self.settings.width,
                color=ERASE_INDICATOR_COLOR,
            )
            self.erase_at(start)
        return True

    def extend_stroke(self, point: Point) -> None:
        if not self.is_stroking or not self.in_bounds(point):
            return
        if self._active is not None:
            self._active.append(point)
            return
        self._indicator.append(point)
        self.erase_at(point)

    def end_stroke(self) -> Optional[VectorPath]:
        finished = self._active
        self._active = None
        self._indicator = None
        if finished is not None:
            self.path_set.add(finished)
            self.logger.debug("Finalized path with %d points", len(finished))
        return finished

    def erase_at(self, point: Point) -> Optional[VectorPath]:
        """Remove the topmost path within half the brush width of ``point``."""
        if not self.in_bounds(point):
            return None
        radius = self.settings.width / 2.0
        for path in self.path_set.topmost_first():
            if within_radius(point, path.segments(), radius):
                self.path_set.remove(path)
                self.logger.debug("Erased %s path with %d points", path.origin.value, len(path))
                return path
        return None
