"""Refinement session: one image, one contour, one path set."""
from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, wait
from typing import Any, Dict, Optional, Tuple

from vision.edge_extractor import EdgeExtractor, EdgeParams, ExtractionResult
from vision.errors import ExtractionError
from vision.raster import PixelBuffer

from .smoothing import CurveSmoother
from .store import ContourStore
from .stroke_editor import BrushSettings, StrokeEditor


class RefinementSession:
    """Couples extraction runs to the stroke editor for a single image.

    Everything here is meant to be driven from one owner thread. Background
    extraction only happens through ``request_extraction``; results are
    applied by ``poll`` and only when they belong to the latest request.
    """

    def __init__(
        self,
        image_id: str,
        store: Optional[ContourStore] = None,
        extractor: Optional[EdgeExtractor] = None,
        executor: Optional[Executor] = None,
        smoother: Optional[CurveSmoother] = None,
        brush: Optional[BrushSettings] = None,
        canvas_size: Optional[Tuple[int, int]] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.image_id = image_id
        self.logger = logger or logging.getLogger(__name__)
        self.store = store or ContourStore(logger=self.logger)
        self.extractor = extractor or EdgeExtractor(logger=self.logger)
        self.executor = executor
        self.smoother = smoother or CurveSmoother(logger=self.logger)
        self.brush = brush or BrushSettings()
        self.canvas_size = canvas_size
        self.last_result: Optional[ExtractionResult] = None
        self.last_error: Optional[ExtractionError] = None
        self._sequence = 0
        self._in_flight: Optional[Tuple[int, Future]] = None
        self._pending: Optional[Tuple[int, PixelBuffer, EdgeParams]] = None
        self._editor: Optional[StrokeEditor] = None

    @property
    def latest_sequence(self) -> int:
        return self._sequence

    @property
    def busy(self) -> bool:
        return self._in_flight is not None or self._pending is not None

    def run_extraction(self, buffer: PixelBuffer, params: EdgeParams) -> Optional[ExtractionResult]:
        """Run the pipeline synchronously; failures leave the session without a new contour."""
        sequence = self._next_sequence()
        try:
            result = self.extractor.extract(buffer, params)
        except ExtractionError as exc:
            self._record_failure(sequence, exc)
            return None
        self._apply(sequence, result)
        return result

    def request_extraction(self, buffer: PixelBuffer, params: EdgeParams) -> int:
        if self.executor is None:
            self.run_extraction(buffer, params)
            return self._sequence
        sequence = self._next_sequence()
        if self._in_flight is not None:
            if self._pending is not None:
                self.logger.debug("Run %d superseded before launch", self._pending[0])
            self._pending = (sequence, buffer, params)
            return sequence
        self._launch(sequence, buffer, params)
        return sequence

    def poll(self) -> Optional[ExtractionResult]:
        """Apply a finished run if it is still the latest request and launch any pending one."""
        if self._in_flight is None:
            return None
        sequence, future = self._in_flight
        if not future.done():
            return None
        self._in_flight = None
        applied: Optional[ExtractionResult] = None
        try:
            if sequence != self._sequence:
                self.logger.debug("Discarding stale extraction run %d (latest %d)", sequence, self._sequence)
            else:
                try:
                    applied = future.result()
                except ExtractionError as exc:
                    self._record_failure(sequence, exc)
                else:
                    self._apply(sequence, applied)
        finally:
            if self._pending is not None:
                pending_sequence, buffer, params = self._pending
                self._pending = None
                self._launch(pending_sequence, buffer, params)
        return applied

    def wait(self, timeout: Optional[float] = None) -> Optional[ExtractionResult]:
        """Block until no run is in flight or pending; returns the last applied result."""
        while self._in_flight is not None:
            _, future = self._in_flight
            done, _ = wait([future], timeout=timeout)
            if not done:
                break
            self.poll()
        return self.last_result

    def editor(self) -> StrokeEditor:
        if self._editor is None:
            self._editor = self._build_editor()
        return self._editor

    def apply_smoothing(self, window: Optional[int] = None) -> None:
        if window is not None:
            self.smoother.set_window(window)
        self.smoother.smooth_all(self.editor().path_set)

    def apply_subdivision(self, iterations: Optional[int] = None) -> None:
        if iterations is not None:
            self.smoother.set_iterations(iterations)
        self.smoother.subdivide_all(self.editor().path_set)

    def finish(self) -> Dict[str, Any]:
        editor = self.editor()
        editor.end_stroke()
        payload = self.store.put_refinement(self.image_id, editor.path_set)
        self.logger.info(
            "Refinement for %s finished with %d paths (%d points)",
            self.image_id,
            len(editor.path_set),
            editor.path_set.point_count(),
        )
        return payload

    def _next_sequence(self) -> int:
        self._sequence += 1
        return self._sequence

    def _launch(self, sequence: int, buffer: PixelBuffer, params: EdgeParams) -> None:
        self.logger.debug("Launching extraction run %d for %s", sequence, self.image_id)
        future = self.executor.submit(self.extractor.extract, buffer, params)
        self._in_flight = (sequence, future)

    def _apply(self, sequence: int, result: ExtractionResult) -> None:
        contour = result.primary_or_placeholder()
        self.store.put_contour(self.image_id, contour, result.params, sequence=sequence)
        self.last_result = result
        self.last_error = None
        self.canvas_size = result.image_size
        if self._editor is not None:
            # Refinements are relative to one detection run.
            self.logger.info(
                "Discarding %d refined paths after new extraction run %d",
                len(self._editor.path_set),
                sequence,
            )
            self._editor = self._build_editor(self._editor.settings)

    def _record_failure(self, sequence: int, exc: ExtractionError) -> None:
        if sequence != self._sequence:
            self.logger.debug("Ignoring failure of stale run %d: %s", sequence, exc)
            return
        self.last_error = exc
        self.logger.warning("Extraction failed for %s: %s", self.image_id, exc)

    def _build_editor(self, settings: Optional[BrushSettings] = None) -> StrokeEditor:
        settings = settings or BrushSettings(width=self.brush.width, color=self.brush.color, mode=self.brush.mode)
        contour = self.store.seed_contour(self.image_id)
        canvas_size = self.canvas_size
        if canvas_size is None:
            canvas_size = (
                max(x for x, _ in contour.points) + 1,
                max(y for _, y in contour.points) + 1,
            )
        editor = StrokeEditor(
            canvas_size,
            settings=settings,
            logger=self.logger,
        )
        editor.seed_from_contour(contour.points)
        return editor
