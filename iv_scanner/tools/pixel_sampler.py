"""Scan-line sampling on top of a :class:`PixelBackend`.

The sampler is the only I/O boundary of the pipeline: reading pixels may
decode an image file, so backend calls run in a worker thread and the
public methods are coroutines.

Failures never escape: a disabled sampler, a backend that declines, a line
outside the image or a backend exception all yield an empty line, which the
later stages treat as "no data".
"""

from __future__ import annotations

import asyncio
import logging
import math
from typing import Any

from .band_consensus import reduce_lines
from .pixel_backends import PixelBackend
from .vision_constants import DEFAULT_CALIBRATION, CalibrationProfile, round_half_up
from .vision_models import PixelLine

logger = logging.getLogger(__name__)


class PixelSampler:
    """Samples evenly spaced RGB points along horizontal lines.

    Args:
        backend:     Pixel backend used for every read.
        enabled:     ``False`` turns every sampling call into ``[]``.
        calibration: Source of the default sample count and band height.
    """

    def __init__(
        self,
        backend: PixelBackend,
        *,
        enabled: bool = True,
        calibration: CalibrationProfile = DEFAULT_CALIBRATION,
    ) -> None:
        self.backend = backend
        self.enabled = bool(enabled)
        self.calibration = calibration

    async def _read_line(self, image: Any, y: int, x: int, width: int) -> Any:
        try:
            return await asyncio.to_thread(self.backend.read_region, image, x, y, width, 1)
        except Exception as exc:
            logger.warning("Pixel sampling failed at y=%d: %s", y, exc)
            return None

    async def sample_scan_line(
        self,
        image: Any,
        y: float,
        start_x: float,
        end_x: float,
        sample_count: int | None = None,
    ) -> PixelLine:
        """Sample *sample_count* points on row *y* between *start_x* and *end_x*."""
        if not self.enabled:
            return []
        count = sample_count or self.calibration.line_sample_count
        if count <= 0:
            return []

        x = round_half_up(min(start_x, end_x))
        width = round_half_up(abs(end_x - start_x))
        if width <= 0:
            return []

        region = await self._read_line(image, round_half_up(y), x, width)
        if region is None or region.size == 0:
            return []

        row = region[0]
        available = row.shape[0]
        stride = max(1.0, width / count)
        line: PixelLine = []
        for i in range(count):
            local_x = math.floor(i * stride)
            if local_x >= available:
                break
            r, g, b = (int(v) for v in row[local_x][:3])
            line.append((r, g, b))
        return line

    async def sample_scan_band(
        self,
        image: Any,
        center_y: float,
        start_x: float,
        end_x: float,
        image_height: int,
        sample_count: int | None = None,
    ) -> PixelLine:
        """Sample three rows around *center_y* and reduce them to one line.

        Rows sit half a band apart, the band being
        ``calibration.band_height_ratio`` of the image height.  One surviving
        row is returned unreduced; none gives ``[]``.
        """
        if not self.enabled:
            return []

        half_band = max(1, round_half_up(image_height * self.calibration.band_height_ratio / 2))
        lines: list[PixelLine] = []
        for offset in (-half_band, 0, half_band):
            pixels = await self.sample_scan_line(image, center_y + offset, start_x, end_x, sample_count)
            if pixels:
                lines.append(pixels)

        if not lines:
            return []
        if len(lines) == 1:
            return lines[0]
        return reduce_lines(lines)
