"""Review overlays for extraction results and refined paths."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Tuple, Union

import cv2
import numpy as np

from .edge_extractor import ExtractionResult
from .raster import PixelBuffer

WHITE = (255, 255, 255, 255)
GREEN = (0, 255, 0, 255)


def hex_to_rgba(color: str, alpha: int = 255) -> Tuple[int, int, int, int]:
    """Parse ``#RGB``, ``#RRGGBB`` or ``#RRGGBBAA``; an encoded alpha wins over ``alpha``."""
    value = color.strip().lstrip("#")
    if len(value) == 3:
        value = "".join(ch * 2 for ch in value)
    if len(value) == 8:
        alpha = int(value[6:8], 16)
        value = value[:6]
    if len(value) != 6:
        raise ValueError(f"Unsupported color: {color}")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16), alpha


def render_overlay(result: ExtractionResult) -> np.ndarray:
    """Edge map in white, all contours 1px white, the primary contour 2px green."""
    output = cv2.cvtColor(result.edge_map.data, cv2.COLOR_GRAY2RGBA)
    if result.primary is None:
        return output
    arrays = [contour.as_array() for contour in result.contours]
    cv2.drawContours(output, arrays, -1, WHITE, 1, cv2.LINE_8)
    cv2.drawContours(output, arrays, result.primary_index, GREEN, 2, cv2.LINE_8)
    return output


def render_paths(buffer: PixelBuffer, paths: Iterable, background_opacity: float = 0.7) -> np.ndarray:
    """Draw vector paths (anything with points/width/color) over a faded copy of the image."""
    base = buffer.data.astype(np.float32) * background_opacity
    output = np.clip(base, 0, 255).astype(np.uint8)
    output[:, :, 3] = 255
    for path in paths:
        if not path.points:
            continue
        pts = np.round(np.array(path.points, dtype=np.float64)).astype(np.int32).reshape(-1, 1, 2)
        thickness = max(1, int(round(path.width)))
        red, green, blue, alpha = hex_to_rgba(path.color)
        color = (red, green, blue, 255)
        # Translucent paths are drawn on a copy and blended back.
        layer = output if alpha >= 255 else output.copy()
        if len(pts) == 1:
            cv2.circle(layer, tuple(int(v) for v in pts[0][0]), max(1, thickness // 2), color, -1)
        else:
            cv2.polylines(layer, [pts], isClosed=False, color=color, thickness=thickness, lineType=cv2.LINE_AA)
        if layer is not output:
            weight = alpha / 255.0
            output = cv2.addWeighted(layer, weight, output, 1.0 - weight, 0)
    return output


def save_overlay(path: Union[str, Path], image: np.ndarray) -> Path:
    target = Path(path)
    bgra = cv2.cvtColor(image, cv2.COLOR_RGBA2BGRA)
    try:
        written = cv2.imwrite(str(target), bgra)
    except cv2.error as exc:
        raise OSError(f"Could not write overlay: {target}") from exc
    if not written:
        raise OSError(f"Could not write overlay: {target}")
    return target
