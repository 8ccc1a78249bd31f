"""Vector paths overlaid on one image and their owning collection."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

Point = Tuple[float, float]

DEFAULT_CONTOUR_COLOR = "#00FF00"
DEFAULT_CONTOUR_WIDTH = 3.0


class PathOrigin(str, Enum):
    DRAWN = "drawn"
    DERIVED = "derived"


@dataclass(eq=False)
class VectorPath:
    points: List[Point]
    width: float
    color: str
    origin: PathOrigin = PathOrigin.DRAWN

    def __len__(self) -> int:
        return len(self.points)

    def append(self, point: Point) -> None:
        self.points.append((float(point[0]), float(point[1])))

    def segments(self) -> Iterator[Tuple[Point, Point]]:
        if len(self.points) == 1:
            yield self.points[0], self.points[0]
            return
        for start, end in zip(self.points, self.points[1:]):
            yield start, end

    def to_dict(self) -> Dict[str, Any]:
        return {
            "points": [[x, y] for x, y in self.points],
            "width": self.width,
            "color": self.color,
            "origin": self.origin.value,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "VectorPath":
        points = data.get("points")
        if points is None:
            raise ValueError("Path dict missing 'points'.")
        return cls(
            points=[(float(x), float(y)) for x, y in points],
            width=float(data.get("width", DEFAULT_CONTOUR_WIDTH)),
            color=str(data.get("color", DEFAULT_CONTOUR_COLOR)),
            origin=PathOrigin(data.get("origin", PathOrigin.DRAWN.value)),
        )

    @classmethod
    def from_contour_points(
        cls,
        points: Iterable[Tuple[int, int]],
        width: float = DEFAULT_CONTOUR_WIDTH,
        color: str = DEFAULT_CONTOUR_COLOR,
    ) -> "VectorPath":
        return cls(
            points=[(float(x), float(y)) for x, y in points],
            width=width,
            color=color,
            origin=PathOrigin.DERIVED,
        )


@dataclass
class PathSet:
    """Paths in display order; the last path is drawn on top."""

    paths: List[VectorPath] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.paths)

    def __iter__(self) -> Iterator[VectorPath]:
        return iter(self.paths)

    def __contains__(self, path: object) -> bool:
        return any(existing is path for existing in self.paths)

    def add(self, path: VectorPath) -> None:
        self.paths.append(path)

    def remove(self, path: VectorPath) -> bool:
        for index, existing in enumerate(self.paths):
            if existing is path:
                del self.paths[index]
                return True
        return False

    def clear(self) -> None:
        self.paths.clear()

    def topmost_first(self) -> Iterator[VectorPath]:
        return reversed(self.paths)

    def point_count(self) -> int:
        return sum(len(path) for path in self.paths)

    def flattened_points(self) -> List[Point]:
        points: List[Point] = []
        for path in self.paths:
            points.extend(path.points)
        return points

    def to_payload(self, image_id: Optional[str] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"paths": [path.to_dict() for path in self.paths]}
        if image_id is not None:
            payload["image_id"] = image_id
        return payload

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "PathSet":
        return cls(paths=[VectorPath.from_dict(entry) for entry in payload.get("paths") or []])
