"""Interactive contour refinement: strokes, smoothing and the per-image handoff."""

from .paths import PathOrigin, PathSet, VectorPath
from .session import RefinementSession
from .smoothing import CurveSmoother, chaikin, moving_average
from .store import ContourRecord, ContourStore
from .stroke_editor import BrushMode, BrushSettings, StrokeEditor

__all__ = [
    "BrushMode",
    "BrushSettings",
    "ContourRecord",
    "ContourStore",
    "CurveSmoother",
    "PathOrigin",
    "PathSet",
    "RefinementSession",
    "StrokeEditor",
    "VectorPath",
    "chaikin",
    "moving_average",
]
