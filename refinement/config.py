from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict

from vision.edge_extractor import EdgeParams

from .stroke_editor import BrushMode, BrushSettings


@dataclass
class RefinementConfig:
    edge: EdgeParams = field(default_factory=EdgeParams)
    brush_width: float = 5.0
    brush_color: str = "#00FF00"
    brush_mode: BrushMode = BrushMode.DRAW
    smoothing_enabled: bool = False
    smoothing_window: int = 3
    chaikin_iterations: int = 0

    def brush_settings(self) -> BrushSettings:
        return BrushSettings(width=self.brush_width, color=self.brush_color, mode=self.brush_mode)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "edge": self.edge.to_dict(),
            "brush": {
                "width": self.brush_width,
                "color": self.brush_color,
                "mode": self.brush_mode.value,
            },
            "smoothing": {
                "enabled": self.smoothing_enabled,
                "window": self.smoothing_window,
                "chaikin_iterations": self.chaikin_iterations,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RefinementConfig":
        defaults = cls()
        brush = data.get("brush") or {}
        smoothing = data.get("smoothing") or {}
        return cls(
            edge=EdgeParams.from_dict(data.get("edge")),
            brush_width=float(brush.get("width", defaults.brush_width)),
            brush_color=str(brush.get("color", defaults.brush_color)),
            brush_mode=BrushMode(brush.get("mode", defaults.brush_mode.value)),
            # A window given without an explicit switch turns smoothing on.
            smoothing_enabled=bool(smoothing.get("enabled", "window" in smoothing)),
            smoothing_window=int(smoothing.get("window", defaults.smoothing_window)),
            chaikin_iterations=int(smoothing.get("chaikin_iterations", defaults.chaikin_iterations)),
        )

    @classmethod
    def load(cls, path: Path) -> "RefinementConfig":
        if not path.exists():
            return cls()
        raw = json.loads(path.read_text(encoding="utf-8"))
        return cls.from_dict(raw)

    def save(self, path: Path) -> None:
        payload = self.to_dict()
        path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
