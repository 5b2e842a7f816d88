"""IV Scanner: Visual Overlay

Renders the fixed-layout bar regions, scan lines and IV results over a
screenshot for visual QA of the pipeline.

Modes:
  - draw_bar_regions: translucent rectangle per bar + yellow scan lines
  - draw_anchor_lines: scan lines at the anchors actually sampled
  - draw_iv_panel: side panel with the IV (and level) results

Frames are OpenCV BGR arrays; colours below are BGR.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

import cv2
import numpy as np

from .bar_regions import get_scan_line_y
from .vision_models import BarLayoutRegions, IVResult, LevelReading


# ── Data Structures ────────────────────────────────────────────────

@dataclass(slots=True)
class OverlayConfig:
    """Visual overlay configuration."""
    font_scale: float = 0.5
    line_thickness: int = 2
    alpha: float = 0.2
    show_scan_lines: bool = True
    panel_width: int = 260
    panel_bg_color: tuple = (30, 30, 30)


# ── Color Palette ──────────────────────────────────────────────────

BAR_COLORS: dict[str, tuple[int, int, int]] = {
    "attack":  (0, 0, 255),      # red
    "defense": (255, 0, 0),      # blue
    "hp":      (0, 160, 0),      # green
    "panel":   (200, 200, 200),  # light gray
}

SCAN_LINE_COLOR: tuple[int, int, int] = (0, 255, 255)  # yellow
ANCHOR_LINE_COLOR: tuple[int, int, int] = (255, 0, 255)  # magenta


# ── Overlay Drawing Functions ──────────────────────────────────────

def draw_bar_regions(
    frame: np.ndarray,
    regions: BarLayoutRegions,
    config: OverlayConfig | None = None,
) -> np.ndarray:
    """Draw the bar rectangles and their scan lines on a frame copy."""
    if config is None:
        config = OverlayConfig()

    overlay = frame.copy()

    for name, bar in regions.bars().items():
        color = BAR_COLORS[name]
        x1, y1 = int(bar.x), int(bar.y)
        x2, y2 = int(bar.x + bar.width), int(bar.y + bar.height)

        sub_overlay = overlay.copy()
        cv2.rectangle(sub_overlay, (x1, y1), (x2, y2), color, -1)
        cv2.addWeighted(sub_overlay, config.alpha, overlay, 1 - config.alpha, 0, overlay)

        if config.show_scan_lines:
            scan_y = int(round(get_scan_line_y(bar)))
            cv2.line(overlay, (x1, scan_y), (x2, scan_y), SCAN_LINE_COLOR, config.line_thickness)

    return overlay


def draw_anchor_lines(
    frame: np.ndarray,
    anchors: Mapping[str, float],
    config: OverlayConfig | None = None,
) -> np.ndarray:
    """Draw a full-width line at each sampled anchor Y, labelled with the bar name."""
    if config is None:
        config = OverlayConfig()

    overlay = frame.copy()
    width = overlay.shape[1]
    for name, anchor_y in anchors.items():
        y = int(round(anchor_y))
        cv2.line(overlay, (0, y), (width - 1, y), ANCHOR_LINE_COLOR, 1)
        cv2.putText(overlay, name, (5, max(12, y - 4)), cv2.FONT_HERSHEY_SIMPLEX,
                    config.font_scale, ANCHOR_LINE_COLOR, 1, cv2.LINE_AA)
    return overlay


def draw_iv_panel(
    frame: np.ndarray,
    result: IVResult | None,
    level: LevelReading | None = None,
    config: OverlayConfig | None = None,
) -> np.ndarray:
    """Append a results panel on the right side of the frame."""
    if config is None:
        config = OverlayConfig()

    h, w = frame.shape[:2]
    panel_w = config.panel_width

    canvas = np.zeros((h, w + panel_w, 3), dtype=np.uint8)
    canvas[:, :w] = frame
    canvas[:, w:] = config.panel_bg_color

    y = 30
    line_h = 22
    font = cv2.FONT_HERSHEY_SIMPLEX
    fs = 0.45
    white = (255, 255, 255)
    green = (0, 255, 0)
    yellow = (0, 220, 255)
    red = (0, 80, 255)
    gray = (160, 160, 160)

    def put(text: str, color: tuple[int, int, int] = white, bold: bool = False) -> None:
        nonlocal y
        thickness = 2 if bold else 1
        cv2.putText(canvas, text, (w + 10, y), font, fs, color, thickness, cv2.LINE_AA)
        y += line_h

    cv2.putText(canvas, "IV SCAN", (w + 10, y), font, 0.6, green, 2, cv2.LINE_AA)
    y += line_h + 5
    cv2.line(canvas, (w + 5, y), (w + panel_w - 5, y), gray, 1)
    y += 15

    if result is None:
        put("Analysis not attempted", color=red)
    else:
        put(f"Attack:  {result.atk}/15")
        put(f"Defense: {result.def_}/15")
        put(f"HP:      {result.sta}/15")
        y += 5
        total_color = green if result.percent >= 80 else (yellow if result.percent >= 50 else red)
        put(f"Total: {result.total}/45 ({result.percent}%)", color=total_color, bold=True)

    if level is not None:
        y += 10
        cv2.line(canvas, (w + 5, y), (w + panel_w - 5, y), gray, 1)
        y += 15
        if level.level is None:
            put("Level: ---", color=gray)
        else:
            put(f"Level: {level.level:g} ({level.confidence})", color=yellow)

    return canvas


def render_debug_overlay(
    frame: np.ndarray,
    regions: BarLayoutRegions,
    result: IVResult | None,
    anchors: Mapping[str, float] | None = None,
    level: LevelReading | None = None,
    config: OverlayConfig | None = None,
) -> Any:
    """Full debug view: layout regions, sampled anchors and results panel."""
    annotated = draw_bar_regions(frame, regions, config)
    if anchors:
        annotated = draw_anchor_lines(annotated, anchors, config)
    return draw_iv_panel(annotated, result, level, config)
