"""Fixed-layout region calculator for the IV panel.

Scales the percent-based :class:`PanelLayout` to an image's pixel size.
Used for overlays and as the fallback when no text-recognition anchors are
available; supplied anchors always win for sampling.
"""

from __future__ import annotations

from .vision_constants import DEFAULT_LAYOUT, PanelLayout
from .vision_models import BarLayoutRegions, BarRegion, ImageDimensions


def calculate_bar_regions(
    dimensions: ImageDimensions,
    layout: PanelLayout = DEFAULT_LAYOUT,
) -> BarLayoutRegions:
    """Calculate absolute bar regions from image dimensions."""
    width, height = dimensions.width, dimensions.height

    panel_x = width * layout.panel_left
    panel_y = height * layout.panel_top
    panel_width = width * layout.panel_width
    panel_height = height * layout.panel_height
    bar_height = panel_height * layout.bar_relative_height

    def _bar(relative_top: float) -> BarRegion:
        return BarRegion(
            x=panel_x,
            y=panel_y + panel_height * relative_top,
            width=panel_width,
            height=bar_height,
        )

    return BarLayoutRegions(
        attack=_bar(layout.attack_relative_top),
        defense=_bar(layout.defense_relative_top),
        hp=_bar(layout.hp_relative_top),
        panel=BarRegion(x=panel_x, y=panel_y, width=panel_width, height=panel_height),
    )


def get_scan_line_y(bar: BarRegion, position: float = DEFAULT_LAYOUT.scan_line_position) -> float:
    """Y coordinate of the scan line through *bar* (its vertical midpoint by default)."""
    return bar.y + bar.height * position


def scan_line_ys(regions: BarLayoutRegions) -> dict[str, float]:
    """Scan line Y for each bar, keyed by bar name."""
    return {name: get_scan_line_y(bar) for name, bar in regions.bars().items()}
