"""Bar track bounds detection.

The bar track has a near-uniform colour that differs from the surrounding
panel chrome.  Its two boundaries show up as the strongest colour
transitions along the scan line; anti-aliasing spreads each one over a few
pixels, so neighbouring transitions are grouped and collapsed to a single
index.
"""

from __future__ import annotations

import logging
from typing import Sequence

from .vision_constants import DEFAULT_CALIBRATION, CalibrationProfile
from .vision_models import BarBounds, RGBPixel

logger = logging.getLogger(__name__)


def edge_deltas(pixels: Sequence[RGBPixel]) -> list[int]:
    """``|ΔR| + |ΔG| + |ΔB|`` between each pixel and the next one."""
    deltas: list[int] = []
    for (r1, g1, b1), (r2, g2, b2) in zip(pixels, pixels[1:]):
        deltas.append(abs(r2 - r1) + abs(g2 - g1) + abs(b2 - b1))
    return deltas


def group_edges(edges: Sequence[int], gap: int) -> list[int]:
    """Collapse runs of edges at most *gap* apart to their floored mean."""
    if not edges:
        return []

    grouped: list[int] = []
    current = [edges[0]]
    for edge in edges[1:]:
        if edge - current[-1] <= gap:
            current.append(edge)
        else:
            grouped.append(sum(current) // len(current))
            current = [edge]
    grouped.append(sum(current) // len(current))
    return grouped


def detect_bar_bounds(
    pixels: Sequence[RGBPixel],
    calibration: CalibrationProfile = DEFAULT_CALIBRATION,
) -> BarBounds | None:
    """Find the left and right edge of the bar track in *pixels*.

    Returns ``None`` when there is not enough data, fewer than two distinct
    transitions, or the detected span is narrower than
    ``calibration.min_track_width`` (text glyphs, icons).
    """
    if len(pixels) < calibration.min_bounds_samples:
        return None

    deltas = edge_deltas(pixels)
    edges = [i for i, delta in enumerate(deltas) if delta > calibration.edge_delta_threshold]
    if len(edges) < 2:
        logger.debug("Bar bounds: only %d edge(s) found", len(edges))
        return None

    groups = group_edges(edges, calibration.edge_group_gap)
    logger.debug("Bar bounds: %d edges in %d groups %s", len(edges), len(groups), groups[:10])
    if len(groups) < 2:
        return None

    bounds = BarBounds(start_x=groups[0], end_x=groups[-1])
    if bounds.width < calibration.min_track_width:
        return None
    return bounds
