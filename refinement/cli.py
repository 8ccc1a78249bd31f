from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Optional, Sequence

from vision.errors import ExtractionError
from vision.overlay import render_overlay, render_paths, save_overlay
from vision.raster import sample_image

from .config import RefinementConfig
from .session import RefinementSession
from .smoothing import CurveSmoother


def _parse_args(args: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Extract and smooth the foot contour of an X-ray image")
    parser.add_argument("--image", required=True, help="Path to the X-ray image")
    parser.add_argument("--image-id", help="Stable image identifier (defaults to the file stem)")
    parser.add_argument("--config", help="Path to a refinement config JSON")
    parser.add_argument("--low", type=float, help="Canny low threshold (10..200)")
    parser.add_argument("--high", type=float, help="Canny high threshold (100..300)")
    parser.add_argument("--dilation", type=int, help="Dilation kernel size (1..5)")
    parser.add_argument("--closing", type=int, help="Closing iterations (1..5)")
    parser.add_argument("--smooth", type=int, help="Moving-average window applied to every path")
    parser.add_argument("--chaikin", type=int, help="Corner-cutting iterations applied to every path")
    parser.add_argument("--output", help="Output path for the refined paths JSON")
    parser.add_argument("--overlay", help="Write a PNG overlay of the detected edges")
    parser.add_argument("--paths-overlay", help="Write a PNG of the refined paths over the image")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    return parser.parse_args(args=args)


def _resolve_config(parsed: argparse.Namespace) -> RefinementConfig:
    config = RefinementConfig.load(Path(parsed.config)) if parsed.config else RefinementConfig()
    edge = config.edge.to_dict()
    for key, value in (
        ("low_threshold", parsed.low),
        ("high_threshold", parsed.high),
        ("dilation_size", parsed.dilation),
        ("closing_iterations", parsed.closing),
    ):
        if value is not None:
            edge[key] = value
    data = config.to_dict()
    data["edge"] = edge
    if parsed.smooth is not None:
        data["smoothing"]["window"] = parsed.smooth
        data["smoothing"]["enabled"] = True
    if parsed.chaikin is not None:
        data["smoothing"]["chaikin_iterations"] = parsed.chaikin
    return RefinementConfig.from_dict(data)


def main(args: Optional[Sequence[str]] = None) -> int:
    parsed = _parse_args(args)
    logging.basicConfig(
        level=getattr(logging, parsed.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(message)s",
    )
    logger = logging.getLogger("refinement.cli")

    image_path = Path(parsed.image)
    image_id = parsed.image_id or image_path.stem
    try:
        config = _resolve_config(parsed)
        for warning in config.edge.range_warnings():
            logger.warning("Parameter %s", warning)
        buffer = sample_image(image_path)
    except FileNotFoundError as exc:
        logger.error("Missing input: %s", exc)
        return 2
    except (ExtractionError, ValueError) as exc:
        logger.error("Error: %s", exc)
        return 1

    smoother = CurveSmoother(
        window=config.smoothing_window,
        iterations=config.chaikin_iterations,
        logger=logger,
    )
    session = RefinementSession(image_id, smoother=smoother, brush=config.brush_settings(), logger=logger)
    result = session.run_extraction(buffer, config.edge)
    if result is None:
        logger.error("No contour available for %s: %s", image_id, session.last_error)
        return 1
    if result.primary is None:
        logger.warning("No contour detected in %s, seeding with placeholder", image_path)

    session.editor()
    if config.smoothing_enabled:
        session.apply_smoothing()
    if config.chaikin_iterations > 0:
        session.apply_subdivision()
    payload = dict(session.finish())

    try:
        if parsed.overlay:
            save_overlay(parsed.overlay, render_overlay(result))
            logger.info("Edge overlay written to %s", parsed.overlay)
        if parsed.paths_overlay:
            save_overlay(parsed.paths_overlay, render_paths(buffer, session.editor().path_set))
            logger.info("Paths overlay written to %s", parsed.paths_overlay)
        output_path = Path(parsed.output) if parsed.output else image_path.with_name(f"{image_id}_refined.json")
        payload["params"] = config.edge.to_dict()
        output_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8")
    except OSError as exc:
        logger.error("Error: %s", exc)
        return 1
    logger.info("Refined paths written to %s", output_path)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
