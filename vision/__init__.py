"""Raster sampling and edge extraction for X-ray images."""

from .edge_extractor import Contour, EdgeExtractor, EdgeParams, ExtractionResult, placeholder_contour
from .engine import ProcessingEngine
from .errors import EngineNotReadyError, ExtractionError, RasterError
from .raster import BinaryEdgeMap, GrayscaleBuffer, PixelBuffer, sample_image

__all__ = [
    "BinaryEdgeMap",
    "Contour",
    "EdgeExtractor",
    "EdgeParams",
    "EngineNotReadyError",
    "ExtractionError",
    "ExtractionResult",
    "GrayscaleBuffer",
    "PixelBuffer",
    "ProcessingEngine",
    "RasterError",
    "placeholder_contour",
    "sample_image",
]
