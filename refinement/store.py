"""Session-scoped handoff of contours and refined paths, keyed by image id."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from vision.edge_extractor import Contour, EdgeParams, placeholder_contour

from .paths import PathSet


@dataclass
class ContourRecord:
    image_id: str
    contour: Contour
    params: EdgeParams
    sequence: int = 0
    stored_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())


class ContourStore:
    """One store per refinement session; a lookup never crosses image ids."""

    def __init__(self, logger: Optional[logging.Logger] = None) -> None:
        self.logger = logger or logging.getLogger(__name__)
        self._contours: Dict[str, ContourRecord] = {}
        self._refinements: Dict[str, Dict[str, Any]] = {}

    def __contains__(self, image_id: object) -> bool:
        return image_id in self._contours

    def __len__(self) -> int:
        return len(self._contours)

    def put_contour(
        self,
        image_id: str,
        contour: Contour,
        params: EdgeParams,
        sequence: int = 0,
    ) -> ContourRecord:
        record = ContourRecord(image_id=image_id, contour=contour, params=params, sequence=sequence)
        self._contours[image_id] = record
        self.logger.debug("Stored contour for %s (%d points, run %d)", image_id, len(contour), sequence)
        return record

    def get_contour(self, image_id: str) -> Optional[ContourRecord]:
        return self._contours.get(image_id)

    def seed_contour(self, image_id: str) -> Contour:
        record = self._contours.get(image_id)
        if record is None or not record.contour.points:
            self.logger.info("No contour stored for %s, using placeholder", image_id)
            return placeholder_contour()
        return record.contour

    def put_refinement(self, image_id: str, path_set: PathSet) -> Dict[str, Any]:
        payload = path_set.to_payload(image_id=image_id)
        self._refinements[image_id] = payload
        self.logger.debug("Stored %d refined paths for %s", len(path_set), image_id)
        return payload

    def get_refinement(self, image_id: str) -> Optional[PathSet]:
        payload = self._refinements.get(image_id)
        if payload is None:
            return None
        return PathSet.from_payload(payload)

    def discard(self, image_id: str) -> None:
        self._contours.pop(image_id, None)
        self._refinements.pop(image_id, None)

    def clear(self) -> None:
        self._contours.clear()
        self._refinements.clear()
