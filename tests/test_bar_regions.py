"""Unit tests for the fixed-layout region calculator."""

from __future__ import annotations

import pytest

from iv_scanner.tools.bar_regions import calculate_bar_regions, get_scan_line_y, scan_line_ys
from iv_scanner.tools.vision_constants import PanelLayout
from iv_scanner.tools.vision_models import BarRegion, ImageDimensions


class TestCalculateBarRegions:
    def test_panel_scales_with_image(self) -> None:
        regions = calculate_bar_regions(ImageDimensions(width=1000, height=2000))

        assert regions.panel.x == pytest.approx(100.0)
        assert regions.panel.y == pytest.approx(1100.0)
        assert regions.panel.width == pytest.approx(800.0)
        assert regions.panel.height == pytest.approx(440.0)

    def test_bars_stack_inside_panel(self) -> None:
        regions = calculate_bar_regions(ImageDimensions(width=1000, height=2000))

        assert regions.attack.y == pytest.approx(1100.0)
        assert regions.defense.y == pytest.approx(1100.0 + 440.0 * 0.36)
        assert regions.hp.y == pytest.approx(1100.0 + 440.0 * 0.72)
        for bar in regions.bars().values():
            assert bar.x == pytest.approx(100.0)
            assert bar.width == pytest.approx(800.0)
            assert bar.height == pytest.approx(440.0 * 0.28)

    def test_scaling_is_linear(self) -> None:
        small = calculate_bar_regions(ImageDimensions(width=100, height=100))
        large = calculate_bar_regions(ImageDimensions(width=1000, height=1000))

        for name, bar in small.bars().items():
            other = large.bars()[name]
            assert other.x == pytest.approx(bar.x * 10)
            assert other.y == pytest.approx(bar.y * 10)
            assert other.width == pytest.approx(bar.width * 10)
            assert other.height == pytest.approx(bar.height * 10)

    def test_custom_layout(self) -> None:
        layout = PanelLayout(panel_top=0.5, panel_height=0.2, panel_left=0.0, panel_width=1.0)
        regions = calculate_bar_regions(ImageDimensions(width=200, height=400), layout)

        assert regions.panel.x == pytest.approx(0.0)
        assert regions.panel.width == pytest.approx(200.0)
        assert regions.attack.y == pytest.approx(200.0)


class TestScanLine:
    def test_scan_line_is_vertical_midpoint(self) -> None:
        bar = BarRegion(x=0.0, y=100.0, width=50.0, height=40.0)

        assert get_scan_line_y(bar) == pytest.approx(120.0)
        assert get_scan_line_y(bar, position=0.25) == pytest.approx(110.0)

    def test_scan_line_ys_keyed_by_bar(self) -> None:
        regions = calculate_bar_regions(ImageDimensions(width=400, height=800))
        ys = scan_line_ys(regions)

        assert list(ys) == ["attack", "defense", "hp"]
        assert ys["attack"] < ys["defense"] < ys["hp"]
        assert ys["attack"] == pytest.approx(440.0 + 176.0 * 0.28 / 2)


class TestImageDimensions:
    @pytest.mark.parametrize("width,height", [(0, 10), (10, 0), (-5, 10)])
    def test_rejects_non_positive(self, width: int, height: int) -> None:
        with pytest.raises(ValueError):
            ImageDimensions(width=width, height=height)
