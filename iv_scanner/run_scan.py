"""run_scan.py: command-line front end of the IV scanner.

Analyses one stat-screen screenshot and prints the Attack / Defense / HP IVs,
optionally the level and a debug overlay.

Usage::

    iv-scan --image shot.png
    iv-scan --image shot.png --attack-y 1420 --defense-y 1530 --hp-y 1640
    iv-scan --image shot.png --on-missing-anchors fallback --overlay debug.png
    iv-scan --image shot.png --ocr-anchors --level --json
    iv-scan --image shot.png --cp 1520 --base-atk 198 --base-def 189 --base-sta 190

Environment variables (see ``config.yaml``)
-------------------------------------------
``IVSCAN_VISION_ENABLED``             Disable the analysis (``0``).
``IVSCAN_VISION_DEBUG``               Log pipeline trace events.
``IVSCAN_VISION_ON_MISSING_ANCHORS``  ``abort`` or ``fallback``.
``IVSCAN_VISION_BACKEND``             ``opencv`` or ``pillow``.
``IVSCAN_NO_COLOR``                   Plain output.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import Any

import cv2

from .core.level_calc import StatTriple, calculate_level
from .tools.bar_regions import calculate_bar_regions
from .tools.level_vision import detect_level_from_image
from .tools.pixel_backends import ArrayPixelBackend, make_backend
from .tools.pixel_sampler import PixelSampler
from .tools.vision_constants import load_calibration
from .tools.vision_models import BAR_NAMES, BarPositions, ImageDimensions, IVResult, LevelReading
from .tools.visual_overlay import render_debug_overlay
from .utils.config import MISSING_ANCHOR_POLICIES, VisionRuntimeConfig
from .utils.logger import ScanLogger
from .workflows.iv_bar_workflow import IVBarWorkflow

log = ScanLogger("Scanner")


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="iv-scan", description="Estimate IVs from a stat-screen screenshot")
    parser.add_argument("--image", required=True, help="Screenshot path")
    parser.add_argument("--attack-y", type=float, default=None, dest="attack_y", help="Attack bar anchor Y")
    parser.add_argument("--defense-y", type=float, default=None, dest="defense_y", help="Defense bar anchor Y")
    parser.add_argument("--hp-y", type=float, default=None, dest="hp_y", help="HP bar anchor Y")
    parser.add_argument(
        "--on-missing-anchors",
        choices=MISSING_ANCHOR_POLICIES,
        default=None,
        dest="on_missing_anchors",
        help="What to do when a bar anchor is missing (default from config)",
    )
    parser.add_argument("--backend", choices=("opencv", "pillow"), default=None, help="Image decoder")
    parser.add_argument("--overlay", default=None, help="Write a debug overlay PNG to this path")
    parser.add_argument("--level", action="store_true", help="Read the level from the level arc")
    parser.add_argument("--cp", type=int, default=None, help="Observed CP for level calculation")
    parser.add_argument("--base-atk", type=int, default=None, dest="base_atk", help="Species base attack")
    parser.add_argument("--base-def", type=int, default=None, dest="base_def", help="Species base defense")
    parser.add_argument("--base-sta", type=int, default=None, dest="base_sta", help="Species base stamina")
    parser.add_argument("--ocr-anchors", action="store_true", dest="ocr_anchors",
                        help="Locate bar anchors from the Attack/Defense/HP labels")
    parser.add_argument("--json", action="store_true", help="Output as JSON")
    return parser.parse_args(argv)


def _build_config(args: argparse.Namespace) -> VisionRuntimeConfig:
    overrides: dict[str, Any] = {}
    if args.on_missing_anchors:
        overrides["on_missing_anchors"] = args.on_missing_anchors
    if args.backend:
        overrides["backend"] = args.backend
    return VisionRuntimeConfig(**overrides)


def _ocr_anchors(frame: Any) -> BarPositions:
    from .agent.stat_ocr import StatScreenOCR

    ocr_log = ScanLogger("OCR")
    reader = StatScreenOCR()
    if not reader.available:
        ocr_log.warn("tesseract unavailable; no OCR anchors")
        return BarPositions()
    positions = reader.locate_bar_anchors(frame)
    if positions.missing():
        ocr_log.warn(f"labels not found: {', '.join(positions.missing())}")
    return positions


def _merge_positions(manual: BarPositions, detected: BarPositions) -> BarPositions:
    """Manual anchors win; detected ones fill the gaps."""
    return BarPositions(
        attack=manual.attack or detected.attack,
        defense=manual.defense or detected.defense,
        hp=manual.hp or detected.hp,
    )


def _base_stats(args: argparse.Namespace) -> StatTriple | None:
    if args.base_atk is None or args.base_def is None or args.base_sta is None:
        return None
    return StatTriple(atk=args.base_atk, def_=args.base_def, sta=args.base_sta)


async def scan(args: argparse.Namespace) -> dict[str, Any] | None:
    """Run the analysis described by *args*; ``None`` when the image is unreadable."""
    config = _build_config(args)
    calibration = load_calibration()

    frame = make_backend(config.backend).load(args.image)
    if frame is None:
        log.error(f"cannot read image {args.image}")
        return None
    height, width = frame.shape[:2]
    dimensions = ImageDimensions(width=width, height=height)

    sampler = PixelSampler(ArrayPixelBackend(), enabled=config.enabled, calibration=calibration)

    positions = BarPositions(attack=args.attack_y, defense=args.defense_y, hp=args.hp_y)
    if args.ocr_anchors and not positions.is_complete():
        positions = _merge_positions(positions, _ocr_anchors(frame))

    workflow = IVBarWorkflow(sampler=sampler, config=config, calibration=calibration)
    result = await workflow.run(frame, dimensions, positions)

    level: LevelReading | None = None
    if args.level:
        level = await detect_level_from_image(sampler, frame, dimensions)

    calculated_level: float | None = None
    base = _base_stats(args)
    if args.cp is not None and result is not None:
        if base is None:
            log.warn("--cp needs --base-atk, --base-def and --base-sta")
        else:
            ivs = StatTriple(atk=result.atk, def_=result.def_, sta=result.sta)
            calculated_level = calculate_level(args.cp, base, ivs)

    if args.overlay:
        bgr = cv2.cvtColor(frame, cv2.COLOR_RGB2BGR)
        anchors = {name: positions.get(name) for name in BAR_NAMES if positions.get(name)}
        annotated = render_debug_overlay(bgr, calculate_bar_regions(dimensions), result, anchors, level)
        if cv2.imwrite(args.overlay, annotated):
            ScanLogger("Overlay").success(f"overlay written to {args.overlay}")
        else:
            ScanLogger("Overlay").error(f"cannot write overlay {args.overlay}")

    return {
        "image": args.image,
        "width": width,
        "height": height,
        "ivs": result.as_dict() if result is not None else None,
        "total": result.total if result is not None else None,
        "percent": result.percent if result is not None else None,
        "level": level.level if level is not None else None,
        "level_confidence": level.confidence if level is not None else None,
        "calculated_level": calculated_level,
        "calibration": calibration.version,
    }


def _print_report(report: dict[str, Any]) -> None:
    log.status(f"{report['image']} ({report['width']}x{report['height']}, calibration {report['calibration']})")
    ivs = report["ivs"]
    if ivs is None:
        log.warn("IV analysis not attempted")
    else:
        log.info(f"Attack  {ivs['atk']:>2}/15")
        log.info(f"Defense {ivs['def']:>2}/15")
        log.info(f"HP      {ivs['sta']:>2}/15")
        log.highlight(f"{report['total']}/45 ({report['percent']}%)")
    if report["level_confidence"] is not None:
        level_log = ScanLogger("Level")
        if report["level"] is None:
            level_log.warn("level dot not found")
        else:
            level_log.info(f"arc level {report['level']:g} ({report['level_confidence']})")
    if report["calculated_level"] is not None:
        ScanLogger("Level").info(f"CP level {report['calculated_level']:g}")


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    logging.basicConfig(level=logging.WARNING, format="%(levelname)s %(name)s: %(message)s")
    try:
        if VisionRuntimeConfig().debug:
            logging.getLogger("iv_scanner").setLevel(logging.DEBUG)
        report = asyncio.run(scan(args))
    except ValueError as exc:
        log.error(str(exc))
        return 1
    if report is None:
        return 1

    if args.json:
        print(json.dumps(report, indent=2))
    else:
        _print_report(report)
    return 0 if report["ivs"] is not None else 1


if __name__ == "__main__":
    sys.exit(main())
