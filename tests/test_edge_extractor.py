import sys
from pathlib import Path
from types import SimpleNamespace

import cv2
import numpy as np
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from refinement.stroke_editor import BrushMode, BrushSettings, StrokeEditor
from vision.edge_extractor import (
    PLACEHOLDER_RING,
    Contour,
    EdgeExtractor,
    EdgeParams,
    placeholder_contour,
    polygon_area,
)
from vision.engine import ProcessingEngine
from vision.errors import EngineNotReadyError, RasterError
from vision.overlay import hex_to_rgba, render_overlay, render_paths, save_overlay
from vision.raster import PixelBuffer


def _uniform(width, height, value):
    return PixelBuffer.from_array(np.full((height, width, 4), value, dtype=np.uint8))


def _foot_like(width=400, height=300):
    canvas = np.zeros((height, width), dtype=np.uint8)
    cv2.rectangle(canvas, (100, 80), (300, 220), 255, thickness=-1)
    return PixelBuffer.from_array(canvas)


def test_uniform_gray_falls_back_to_placeholder():
    result = EdgeExtractor().extract(_uniform(400, 300, 128), EdgeParams())
    assert result.contours == []
    assert result.primary is None
    seed = result.primary_or_placeholder()
    assert seed.placeholder
    assert len(seed) == 17
    assert seed.points == PLACEHOLDER_RING


@pytest.mark.parametrize("value", [0, 255])
def test_black_and_white_images_have_no_contours(value):
    result = EdgeExtractor().extract(_uniform(64, 48, value), EdgeParams())
    assert result.primary is None
    assert len(result.primary_or_placeholder()) == 17


def test_rectangle_yields_primary_contour():
    result = EdgeExtractor().extract(_foot_like(), EdgeParams())
    primary = result.primary
    assert primary is not None
    assert not primary.placeholder
    assert primary.area > 20000
    xs = [x for x, _ in primary.points]
    ys = [y for _, y in primary.points]
    assert 95 <= min(xs) <= 105
    assert 295 <= max(xs) <= 305
    assert 75 <= min(ys) <= 85
    assert 215 <= max(ys) <= 225
    assert result.image_size == (400, 300)
    assert all(contour.area >= 0 for contour in result.contours)


def test_extraction_is_deterministic_and_leaves_buffer_untouched():
    buffer = _foot_like()
    before = buffer.data.copy()
    extractor = EdgeExtractor()
    params = EdgeParams(low_threshold=40, high_threshold=150, dilation_size=3, closing_iterations=3)
    first = extractor.extract(buffer, params)
    second = extractor.extract(buffer, params)
    assert first.primary.points == second.primary.points
    assert np.array_equal(buffer.data, before)


def test_select_primary_prefers_first_of_equal_areas():
    contours = [
        Contour(points=((0, 0),), area=0.0),
        Contour(points=((0, 0), (4, 0), (4, 4)), area=8.0),
        Contour(points=((1, 1), (5, 1), (5, 5)), area=8.0),
        Contour(points=((0, 0), (2, 0), (2, 2)), area=2.0),
    ]
    assert EdgeExtractor.select_primary(contours) == 1


def test_select_primary_ignores_zero_area():
    contours = [Contour(points=((0, 0), (5, 0)), area=0.0)]
    assert EdgeExtractor.select_primary(contours) is None
    assert EdgeExtractor.select_primary([]) is None


def test_placeholder_ring_is_closed_with_positive_area():
    ring = placeholder_contour()
    assert ring.points[0] == ring.points[-1]
    assert ring.area == pytest.approx(polygon_area(PLACEHOLDER_RING))
    assert ring.area > 0


def test_polygon_area_square():
    assert polygon_area([(0, 0), (10, 0), (10, 10), (0, 10)]) == pytest.approx(100.0)
    assert polygon_area([(0, 0), (0, 10), (10, 10), (10, 0)]) == pytest.approx(100.0)
    assert polygon_area([(0, 0), (1, 1)]) == 0.0


def test_stage_outputs_keep_image_size():
    extractor = EdgeExtractor()
    buffer = _foot_like(120, 90)
    gray = extractor.to_grayscale(buffer)
    dilated = extractor.dilate(gray, 0)
    edges = extractor.detect_edges(dilated, 50, 165)
    closed = extractor.close_gaps(edges, 2)
    for stage in (gray, dilated, edges, closed):
        assert (stage.width, stage.height) == (120, 90)
        assert stage.data.shape == (90, 120)
    assert set(np.unique(closed.data)) <= {0, 255}
    assert closed.edge_count > 0


def test_engine_missing_operations_is_not_ready():
    backend = SimpleNamespace(cvtColor=cv2.cvtColor, dilate=cv2.dilate)
    engine = ProcessingEngine(backend=backend)
    assert not engine.ready
    assert "Canny" in engine.missing_operations()
    with pytest.raises(EngineNotReadyError):
        EdgeExtractor(engine=engine).extract(_uniform(10, 10, 0), EdgeParams())


def test_default_engine_is_ready():
    engine = ProcessingEngine()
    assert engine.ready
    engine.ensure_ready()


def test_mismatched_buffer_shape_is_rejected():
    buffer = PixelBuffer(width=10, height=10, data=np.zeros((5, 5, 4), dtype=np.uint8))
    with pytest.raises(RasterError):
        EdgeExtractor().extract(buffer, EdgeParams())


@pytest.mark.parametrize("dtype", [np.float64, np.uint16, np.int32])
def test_non_uint8_buffer_is_rejected(dtype):
    buffer = PixelBuffer(width=4, height=4, data=np.zeros((4, 4, 4), dtype=dtype))
    with pytest.raises(RasterError):
        EdgeExtractor().extract(buffer, EdgeParams())


def test_params_round_trip_and_range_warnings():
    params = EdgeParams.from_dict({"low_threshold": 5, "dilation_size": 3})
    assert params.low_threshold == 5
    assert params.high_threshold == 165
    assert params.dilation_size == 3
    assert EdgeParams.from_dict(params.to_dict()) == params
    warnings = params.range_warnings()
    assert len(warnings) == 1
    assert warnings[0].startswith("low_threshold")
    assert EdgeParams().range_warnings() == []


def test_render_overlay_marks_primary_in_green():
    result = EdgeExtractor().extract(_foot_like(), EdgeParams())
    overlay = render_overlay(result)
    assert overlay.shape == (300, 400, 4)
    green = np.all(overlay == np.array([0, 255, 0, 255], dtype=np.uint8), axis=2)
    assert green.any()


def test_render_overlay_without_contours_is_edge_map():
    result = EdgeExtractor().extract(_uniform(32, 32, 90), EdgeParams())
    overlay = render_overlay(result)
    assert overlay.shape == (32, 32, 4)
    assert not overlay[:, :, :3].any()


def test_render_paths_draws_in_path_color(tmp_path):
    buffer = _uniform(64, 64, 0)
    path = SimpleNamespace(points=[(10.0, 10.0), (50.0, 10.0)], width=3.0, color="#FF0000")
    image = render_paths(buffer, [path])
    assert image[10, 30, 0] > 200
    assert image[10, 30, 1] < 50
    assert image[40, 40, 0] == 0
    target = save_overlay(tmp_path / "paths.png", image)
    assert target.exists()


def test_render_paths_blends_translucent_indicator():
    editor = StrokeEditor((64, 64), settings=BrushSettings(width=5, mode=BrushMode.ERASE))
    editor.begin_stroke((10, 30))
    editor.extend_stroke((50, 30))
    image = render_paths(_uniform(64, 64, 0), editor.visible_paths())
    assert 100 < image[30, 30, 0] < 160
    assert image[30, 30, 1] == 0
    assert image[30, 30, 3] == 255
    assert image[5, 5, 0] == 0


def test_hex_to_rgba():
    assert hex_to_rgba("#00FF00") == (0, 255, 0, 255)
    assert hex_to_rgba("fff", alpha=10) == (255, 255, 255, 10)
    assert hex_to_rgba("#FF000080") == (255, 0, 0, 128)
    with pytest.raises(ValueError):
        hex_to_rgba("#12345")
