"""Explicit handle around the OpenCV backend used by the extractor."""
from __future__ import annotations

import logging
from typing import Any, List, Optional, Sequence

import cv2

from .errors import EngineNotReadyError

REQUIRED_OPERATIONS: Sequence[str] = (
    "cvtColor",
    "dilate",
    "Canny",
    "morphologyEx",
    "findContours",
    "contourArea",
)


class ProcessingEngine:
    """Image-processing backend passed by reference to pipeline stages.

    The handle reports whether the backend can run every stage instead of
    callers polling a loaded flag on shared state.
    """

    def __init__(self, backend: Any = None, logger: Optional[logging.Logger] = None) -> None:
        self.cv = backend if backend is not None else cv2
        self.logger = logger or logging.getLogger(__name__)

    @property
    def version(self) -> str:
        return str(getattr(self.cv, "__version__", "unknown"))

    def missing_operations(self) -> List[str]:
        return [name for name in REQUIRED_OPERATIONS if not callable(getattr(self.cv, name, None))]

    @property
    def ready(self) -> bool:
        return not self.missing_operations()

    def ensure_ready(self) -> None:
        missing = self.missing_operations()
        if missing:
            raise EngineNotReadyError(f"Processing engine is missing: {', '.join(missing)}")
        self.logger.debug("Processing engine ready (OpenCV %s)", self.version)
