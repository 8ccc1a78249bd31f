"""Pixel buffers sampled from decoded raster images."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Tuple, Union

import numpy as np
from PIL import Image, UnidentifiedImageError

from .errors import RasterError

ImageSource = Union[str, Path, Image.Image, np.ndarray]


def _freeze(array: np.ndarray) -> np.ndarray:
    frozen = np.ascontiguousarray(array, dtype=np.uint8)
    if frozen is array:
        frozen = array.copy()
    frozen.flags.writeable = False
    return frozen


@dataclass(frozen=True)
class PixelBuffer:
    """Row-major RGBA samples captured from one image load."""

    width: int
    height: int
    data: np.ndarray

    @classmethod
    def from_array(cls, array: np.ndarray) -> "PixelBuffer":
        if array.ndim == 2:
            array = np.dstack([array, array, array, np.full_like(array, 255)])
        elif array.ndim == 3 and array.shape[2] == 3:
            alpha = np.full(array.shape[:2] + (1,), 255, dtype=array.dtype)
            array = np.concatenate([array, alpha], axis=2)
        if array.ndim != 3 or array.shape[2] != 4:
            raise RasterError(f"Expected an RGBA array, got shape {array.shape}")
        height, width = array.shape[:2]
        if width == 0 or height == 0:
            raise RasterError("Pixel buffer is empty.")
        return cls(width=int(width), height=int(height), data=_freeze(array))

    @classmethod
    def from_rgba_bytes(cls, width: int, height: int, data: bytes) -> "PixelBuffer":
        if width <= 0 or height <= 0:
            raise RasterError(f"Invalid buffer size {width}x{height}")
        expected = width * height * 4
        if len(data) != expected:
            raise RasterError(f"Expected {expected} RGBA bytes for {width}x{height}, got {len(data)}")
        array = np.frombuffer(data, dtype=np.uint8).reshape(height, width, 4)
        return cls.from_array(array)

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height


@dataclass(frozen=True)
class GrayscaleBuffer:
    width: int
    height: int
    data: np.ndarray


@dataclass(frozen=True)
class BinaryEdgeMap:
    """Single-channel map where 255 marks an edge sample and 0 anything else."""

    width: int
    height: int
    data: np.ndarray

    @property
    def edge_count(self) -> int:
        return int(np.count_nonzero(self.data))


def load_image(path: Union[str, Path]) -> Image.Image:
    image_path = Path(path)
    if not image_path.exists():
        raise FileNotFoundError(f"Image not found: {image_path}")
    try:
        with Image.open(image_path) as img:
            img.load()
            return img.copy()
    except (UnidentifiedImageError, OSError) as exc:
        raise RasterError(f"Could not decode image: {image_path}") from exc


def sample_image(source: ImageSource) -> PixelBuffer:
    """Read a path, Pillow image or numpy array into an RGBA PixelBuffer."""
    if isinstance(source, (str, Path)):
        source = load_image(source)
    if isinstance(source, Image.Image):
        if source.width == 0 or source.height == 0:
            raise RasterError("Image has no pixels.")
        return PixelBuffer.from_array(np.asarray(source.convert("RGBA")))
    if isinstance(source, np.ndarray):
        if source.dtype != np.uint8:
            raise RasterError(f"Expected uint8 samples, got {source.dtype}")
        return PixelBuffer.from_array(source)
    raise RasterError(f"Unsupported image source: {type(source).__name__}")
