from __future__ import annotations


class ExtractionError(RuntimeError):
    """Base error for edge extraction failures."""


class RasterError(ExtractionError):
    """Raised when the pixel input is empty or malformed."""


class EngineNotReadyError(ExtractionError):
    """Raised when the processing engine cannot run the pipeline."""
