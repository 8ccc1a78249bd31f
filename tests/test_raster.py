import sys
from pathlib import Path

import numpy as np
import pytest
from PIL import Image

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from vision.errors import ExtractionError, RasterError
from vision.raster import PixelBuffer, sample_image


def test_sample_rgb_image_adds_opaque_alpha():
    img = Image.new("RGB", (8, 5), color=(10, 20, 30))
    buffer = sample_image(img)
    assert buffer.size == (8, 5)
    assert buffer.data.shape == (5, 8, 4)
    assert tuple(buffer.data[0, 0]) == (10, 20, 30, 255)


def test_sample_image_from_file(tmp_path):
    path = tmp_path / "xray.png"
    Image.new("L", (12, 7), color=128).save(path)
    buffer = sample_image(path)
    assert (buffer.width, buffer.height) == (12, 7)
    assert tuple(buffer.data[3, 3]) == (128, 128, 128, 255)


def test_sample_missing_file_raises():
    with pytest.raises(FileNotFoundError):
        sample_image(Path("does/not/exist.png"))


def test_sample_undecodable_file_raises(tmp_path):
    path = tmp_path / "broken.png"
    path.write_bytes(b"not an image")
    with pytest.raises(RasterError):
        sample_image(path)


def test_sample_grayscale_array():
    gray = np.full((4, 6), 200, dtype=np.uint8)
    buffer = sample_image(gray)
    assert buffer.data.shape == (4, 6, 4)
    assert tuple(buffer.data[1, 1]) == (200, 200, 200, 255)


def test_buffer_is_read_only():
    source = np.zeros((3, 3, 4), dtype=np.uint8)
    buffer = PixelBuffer.from_array(source)
    assert not buffer.data.flags.writeable
    source[0, 0, 0] = 99
    assert buffer.data[0, 0, 0] == 0
    with pytest.raises(ValueError):
        buffer.data[0, 0, 0] = 1


def test_from_rgba_bytes_checks_length():
    buffer = PixelBuffer.from_rgba_bytes(2, 2, bytes(range(16)))
    assert tuple(buffer.data[1, 1]) == (12, 13, 14, 15)
    with pytest.raises(RasterError):
        PixelBuffer.from_rgba_bytes(2, 2, bytes(15))


@pytest.mark.parametrize(
    "array",
    [
        np.zeros((0, 5, 4), dtype=np.uint8),
        np.zeros((5, 5, 2), dtype=np.uint8),
        np.zeros((5, 5, 4), dtype=np.float32),
    ],
)
def test_malformed_arrays_raise_extraction_errors(array):
    with pytest.raises(ExtractionError):
        sample_image(array)


def test_unsupported_source_type():
    with pytest.raises(RasterError):
        sample_image(42)
