"""Boundary extraction: grayscale, dilate, Canny, close, trace, pick the largest."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence, Tuple

import cv2
import numpy as np

from .engine import ProcessingEngine
from .errors import ExtractionError, RasterError
from .raster import BinaryEdgeMap, GrayscaleBuffer, PixelBuffer

SAFE_RANGES: Dict[str, Tuple[float, float]] = {
    "low_threshold": (10, 200),
    "high_threshold": (100, 300),
    "dilation_size": (1, 5),
    "closing_iterations": (1, 5),
}

# Synthetic foot-like ring used when detection finds nothing.
PLACEHOLDER_RING: Tuple[Tuple[int, int], ...] = (
    (100, 200),
    (150, 150),
    (200, 180),
    (250, 150),
    (300, 200),
    (350, 150),
    (400, 200),
    (450, 250),
    (500, 300),
    (450, 350),
    (400, 380),
    (350, 400),
    (300, 380),
    (250, 350),
    (200, 320),
    (150, 280),
    (100, 200),
)


@dataclass(frozen=True)
class EdgeParams:
    low_threshold: float = 50
    high_threshold: float = 165
    dilation_size: int = 2
    closing_iterations: int = 2

    def range_warnings(self) -> List[str]:
        warnings: List[str] = []
        for name, (low, high) in SAFE_RANGES.items():
            value = getattr(self, name)
            if not low <= value <= high:
                warnings.append(f"{name}={value} outside safe range [{low}, {high}]")
        return warnings

    def to_dict(self) -> Dict[str, Any]:
        return {
            "low_threshold": self.low_threshold,
            "high_threshold": self.high_threshold,
            "dilation_size": self.dilation_size,
            "closing_iterations": self.closing_iterations,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "EdgeParams":
        data = data or {}
        defaults = cls()
        return cls(
            low_threshold=float(data.get("low_threshold", defaults.low_threshold)),
            high_threshold=float(data.get("high_threshold", defaults.high_threshold)),
            dilation_size=int(data.get("dilation_size", defaults.dilation_size)),
            closing_iterations=int(data.get("closing_iterations", defaults.closing_iterations)),
        )


def polygon_area(points: Sequence[Tuple[float, float]]) -> float:
    """Shoelace area magnitude of the polygon through ``points``."""
    if len(points) < 3:
        return 0.0
    pts = np.asarray(points, dtype=np.float64)
    x = pts[:, 0]
    y = pts[:, 1]
    return float(abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))) / 2.0)


@dataclass(frozen=True)
class Contour:
    points: Tuple[Tuple[int, int], ...]
    area: float
    closed: bool = True
    placeholder: bool = False

    def __len__(self) -> int:
        return len(self.points)

    def as_array(self) -> np.ndarray:
        return np.array(self.points, dtype=np.int32).reshape(-1, 1, 2)


def placeholder_contour() -> Contour:
    return Contour(points=PLACEHOLDER_RING, area=polygon_area(PLACEHOLDER_RING), placeholder=True)


@dataclass
class ExtractionResult:
    contours: List[Contour]
    primary_index: Optional[int]
    params: EdgeParams
    image_size: Tuple[int, int]
    edge_map: BinaryEdgeMap = field(repr=False)

    @property
    def primary(self) -> Optional[Contour]:
        if self.primary_index is None:
            return None
        return self.contours[self.primary_index]

    def primary_or_placeholder(self) -> Contour:
        primary = self.primary
        return primary if primary is not None else placeholder_contour()


class EdgeExtractor:
    """Runs the detection pipeline over a PixelBuffer without mutating it."""

    def __init__(
        self,
        engine: Optional[ProcessingEngine] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self.engine = engine or ProcessingEngine(logger=self.logger)

    def extract(self, buffer: PixelBuffer, params: EdgeParams) -> ExtractionResult:
        self.engine.ensure_ready()
        _check_buffer(buffer)
        try:
            gray = self.to_grayscale(buffer)
            dilated = self.dilate(gray, params.dilation_size)
            edges = self.detect_edges(dilated, params.low_threshold, params.high_threshold)
            closed = self.close_gaps(edges, params.closing_iterations)
            contours = self.trace_contours(closed)
        except cv2.error as exc:
            raise ExtractionError(f"Edge extraction failed: {exc}") from exc
        primary_index = self.select_primary(contours)
        if primary_index is None:
            self.logger.info("No contour found (%d traced), placeholder required", len(contours))
        else:
            self.logger.info(
                "Traced %d contours, primary #%d with area %.1f",
                len(contours),
                primary_index,
                contours[primary_index].area,
            )
        return ExtractionResult(
            contours=contours,
            primary_index=primary_index,
            params=params,
            image_size=buffer.size,
            edge_map=closed,
        )

    def to_grayscale(self, buffer: PixelBuffer) -> GrayscaleBuffer:
        cv = self.engine.cv
        gray = cv.cvtColor(buffer.data, cv.COLOR_RGBA2GRAY)
        return GrayscaleBuffer(width=buffer.width, height=buffer.height, data=gray)

    def dilate(self, gray: GrayscaleBuffer, size: int) -> GrayscaleBuffer:
        # Pre-closes faint gaps before detection at the cost of fine detail.
        size = max(1, int(size))
        kernel = np.ones((size, size), dtype=np.uint8)
        dilated = self.engine.cv.dilate(gray.data, kernel, iterations=1)
        return GrayscaleBuffer(width=gray.width, height=gray.height, data=dilated)

    def detect_edges(self, gray: GrayscaleBuffer, low: float, high: float) -> BinaryEdgeMap:
        edges = self.engine.cv.Canny(gray.data, float(low), float(high))
        return BinaryEdgeMap(width=gray.width, height=gray.height, data=edges)

    def close_gaps(self, edges: BinaryEdgeMap, iterations: int) -> BinaryEdgeMap:
        if iterations <= 0:
            return edges
        cv = self.engine.cv
        kernel = np.ones((3, 3), dtype=np.uint8)
        closed = cv.morphologyEx(edges.data, cv.MORPH_CLOSE, kernel, iterations=int(iterations))
        return BinaryEdgeMap(width=edges.width, height=edges.height, data=closed)

    def trace_contours(self, edges: BinaryEdgeMap) -> List[Contour]:
        cv = self.engine.cv
        raw, _ = cv.findContours(edges.data.copy(), cv.RETR_EXTERNAL, cv.CHAIN_APPROX_SIMPLE)
        contours: List[Contour] = []
        for contour in raw:
            points = tuple((int(pt[0][0]), int(pt[0][1])) for pt in contour)
            if not points:
                continue
            contours.append(Contour(points=points, area=abs(float(cv.contourArea(contour)))))
        return contours

    @staticmethod
    def select_primary(contours: Sequence[Contour]) -> Optional[int]:
        best_index: Optional[int] = None
        best_area = 0.0
        for index, contour in enumerate(contours):
            if contour.area > best_area:
                best_area = contour.area
                best_index = index
        return best_index


def _check_buffer(buffer: PixelBuffer) -> None:
    if not isinstance(buffer, PixelBuffer):
        raise RasterError(f"Expected a PixelBuffer, got {type(buffer).__name__}")
    if buffer.width <= 0 or buffer.height <= 0:
        raise RasterError("Pixel buffer is empty.")
    if buffer.data.shape != (buffer.height, buffer.width, 4):
        raise RasterError(
            f"Pixel data shape {buffer.data.shape} does not match {buffer.width}x{buffer.height} RGBA"
        )
    if buffer.data.dtype != np.uint8:
        raise RasterError(f"Pixel data must be uint8, got {buffer.data.dtype}")
