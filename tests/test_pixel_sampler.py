"""Unit tests for PixelSampler and the pixel backends."""

from __future__ import annotations

import asyncio
from typing import Any

import numpy as np
import pytest

from iv_scanner.tools.pixel_backends import (
    ArrayPixelBackend,
    OpenCVPixelBackend,
    PillowPixelBackend,
    crop_region,
    make_backend,
)
from iv_scanner.tools.pixel_sampler import PixelSampler


def _gradient(width: int = 100, height: int = 10) -> np.ndarray:
    """Red channel = x, green channel = y."""
    frame = np.zeros((height, width, 3), dtype=np.uint8)
    frame[:, :, 0] = np.arange(width, dtype=np.uint8)[None, :]
    frame[:, :, 1] = np.arange(height, dtype=np.uint8)[:, None]
    return frame


class _DecliningBackend:
    def read_region(self, image: Any, x: int, y: int, width: int, height: int) -> None:
        return None


class _FailingBackend:
    def read_region(self, image: Any, x: int, y: int, width: int, height: int) -> np.ndarray:
        raise RuntimeError("decoder exploded")


# ── Backends ────────────────────────────────────────────────────────


class TestBackends:
    def test_crop_clamps_to_image(self) -> None:
        crop = crop_region(_gradient(), 90, 5, 50, 10)
        assert crop is not None
        assert crop.shape == (5, 10, 3)

    def test_crop_outside_is_none(self) -> None:
        assert crop_region(_gradient(), 0, 10, 100, 1) is None
        assert crop_region(_gradient(), 100, 0, 10, 1) is None

    def test_grayscale_becomes_rgb(self) -> None:
        gray = np.full((4, 4), 77, dtype=np.uint8)
        crop = crop_region(gray, 0, 0, 4, 4)
        assert crop is not None
        assert crop.shape == (4, 4, 3)
        assert int(crop[0, 0, 2]) == 77

    def test_array_backend_rejects_non_arrays(self) -> None:
        assert ArrayPixelBackend().read_region("not-an-array", 0, 0, 1, 1) is None

    def test_opencv_backend_reads_file(self, tmp_path: Any) -> None:
        import cv2

        rgb = np.zeros((20, 30, 3), dtype=np.uint8)
        rgb[:, :] = (230, 110, 40)
        path = tmp_path / "frame.png"
        assert cv2.imwrite(str(path), cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR))

        crop = OpenCVPixelBackend().read_region(str(path), 0, 5, 30, 1)

        assert crop is not None
        assert tuple(int(v) for v in crop[0, 0]) == (230, 110, 40)

    def test_opencv_backend_undecodable(self) -> None:
        assert OpenCVPixelBackend().read_region(b"not an image", 0, 0, 1, 1) is None

    def test_pillow_backend_reads_image(self) -> None:
        from PIL import Image

        image = Image.new("RGB", (30, 20), (10, 20, 30))
        crop = PillowPixelBackend().read_region(image, 5, 5, 10, 1)

        assert crop is not None
        assert crop.shape == (1, 10, 3)
        assert tuple(int(v) for v in crop[0, 0]) == (10, 20, 30)

    def test_pillow_backend_missing_file(self, tmp_path: Any) -> None:
        assert PillowPixelBackend().load(str(tmp_path / "missing.png")) is None

    def test_make_backend(self) -> None:
        assert isinstance(make_backend("opencv"), OpenCVPixelBackend)
        assert isinstance(make_backend(" Pillow "), PillowPixelBackend)
        with pytest.raises(ValueError):
            make_backend("webgl")


# ── Scan lines ──────────────────────────────────────────────────────


class TestSampleScanLine:
    def test_even_stride(self) -> None:
        sampler = PixelSampler(ArrayPixelBackend())

        line = asyncio.run(sampler.sample_scan_line(_gradient(), 3, 0, 100, 50))

        assert len(line) == 50
        assert [pixel[0] for pixel in line[:4]] == [0, 2, 4, 6]
        assert all(pixel[1] == 3 for pixel in line)

    def test_pixels_are_plain_ints(self) -> None:
        sampler = PixelSampler(ArrayPixelBackend())
        line = asyncio.run(sampler.sample_scan_line(_gradient(), 0, 0, 10, 10))
        assert all(type(channel) is int for pixel in line for channel in pixel)

    def test_reversed_range(self) -> None:
        sampler = PixelSampler(ArrayPixelBackend())

        line = asyncio.run(sampler.sample_scan_line(_gradient(), 0, 60, 20, 40))

        assert line[0][0] == 20
        assert len(line) == 40

    def test_stride_never_below_one(self) -> None:
        sampler = PixelSampler(ArrayPixelBackend())

        line = asyncio.run(sampler.sample_scan_line(_gradient(), 0, 0, 10, 50))

        assert [pixel[0] for pixel in line] == list(range(10))

    def test_stops_at_image_edge(self) -> None:
        sampler = PixelSampler(ArrayPixelBackend())

        line = asyncio.run(sampler.sample_scan_line(_gradient(), 0, 80, 120, 40))

        assert len(line) == 20
        assert line[-1][0] == 99

    def test_y_rounded_half_up(self) -> None:
        sampler = PixelSampler(ArrayPixelBackend())

        line = asyncio.run(sampler.sample_scan_line(_gradient(), 2.5, 0, 10, 10))

        assert line[0][1] == 3

    def test_line_below_image_is_empty(self) -> None:
        sampler = PixelSampler(ArrayPixelBackend())
        assert asyncio.run(sampler.sample_scan_line(_gradient(), 10, 0, 100)) == []

    def test_declining_backend(self) -> None:
        sampler = PixelSampler(_DecliningBackend())
        assert asyncio.run(sampler.sample_scan_line(_gradient(), 0, 0, 100)) == []

    def test_failing_backend_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        sampler = PixelSampler(_FailingBackend())

        with caplog.at_level("WARNING"):
            line = asyncio.run(sampler.sample_scan_line(_gradient(), 0, 0, 100))

        assert line == []
        assert "decoder exploded" in caplog.text

    def test_disabled_sampler(self) -> None:
        sampler = PixelSampler(ArrayPixelBackend(), enabled=False)
        assert asyncio.run(sampler.sample_scan_line(_gradient(), 0, 0, 100)) == []
        assert asyncio.run(sampler.sample_scan_band(_gradient(), 5, 0, 100, 10)) == []

    def test_zero_width(self) -> None:
        sampler = PixelSampler(ArrayPixelBackend())
        assert asyncio.run(sampler.sample_scan_line(_gradient(), 0, 50, 50)) == []


# ── Bands ───────────────────────────────────────────────────────────


class TestSampleScanBand:
    def test_median_across_rows(self) -> None:
        frame = np.zeros((3, 4, 3), dtype=np.uint8)
        frame[0, :] = (10, 200, 30)
        frame[1, :] = (20, 100, 90)
        frame[2, :] = (30, 0, 60)
        sampler = PixelSampler(ArrayPixelBackend())

        # image_height 200 -> half band of 1 row
        line = asyncio.run(sampler.sample_scan_band(frame, 1, 0, 4, 200, 4))

        assert line == [(20, 100, 60)] * 4

    def test_single_surviving_row(self) -> None:
        frame = np.zeros((1, 8, 3), dtype=np.uint8)
        frame[0, :] = (230, 110, 40)
        sampler = PixelSampler(ArrayPixelBackend())

        # half band of 2 rows: rows 2 and 4 fall outside the image.
        line = asyncio.run(sampler.sample_scan_band(frame, 2, 0, 8, 400, 8))

        assert line == [(230, 110, 40)] * 8

    def test_no_rows(self) -> None:
        sampler = PixelSampler(ArrayPixelBackend())
        assert asyncio.run(sampler.sample_scan_band(_gradient(), 50, 0, 100, 10)) == []

    def test_band_removes_noisy_row(self) -> None:
        frame = np.zeros((9, 10, 3), dtype=np.uint8)
        frame[:, :] = (230, 110, 40)
        frame[4, :] = (255, 255, 255)
        sampler = PixelSampler(ArrayPixelBackend())

        line = asyncio.run(sampler.sample_scan_band(frame, 4, 0, 10, 400, 10))

        assert line == [(230, 110, 40)] * 10
