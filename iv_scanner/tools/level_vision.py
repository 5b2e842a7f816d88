"""Level reading from the semi-circular level arc.

The appraisal screen shows the creature's level as a white dot riding on an
arc across the top of the screen.  The dot's horizontal position between
the two ends of the arc maps linearly to levels 1–50.

Strategy
--------
1. Scan rows between 10 % and 45 % of the height (status bar and 3D model
   excluded) every few pixels and collect runs of near-white pixels.
2. Merge runs on neighbouring rows that overlap horizontally into blobs.
3. Keep square-ish, dot-sized blobs away from the screen edges and score
   them by brightness and squareness.
4. Assume the arc is centred and spans a fixed share of the width, and
   convert the best dot's centre to a level (half-level precision).
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any

from .pixel_sampler import PixelSampler
from .vision_constants import round_half_up
from .vision_models import ImageDimensions, LevelReading, PixelLine

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LevelArcProfile:
    """Tuned constants of the level-arc reader."""

    search_top: float = 0.10
    search_bottom: float = 0.45
    row_step: int = 5

    white_luminance: float = 210.0
    max_saturation: int = 25
    min_run_width: int = 3
    x_overlap_slack: int = 2

    min_dot_size: int = 10
    max_dot_size: int = 45
    min_aspect: float = 0.6
    max_aspect: float = 1.6
    edge_margin: float = 0.05

    brightness_weight: float = 200.0
    aspect_weight: float = 500.0

    arc_width_ratio: float = 0.85
    min_level: float = 1.0
    max_level: float = 50.0


DEFAULT_ARC_PROFILE = LevelArcProfile()


@dataclass(slots=True)
class WhiteSegment:
    """Horizontal run of white pixels on one row (``x_end`` exclusive)."""

    y: int
    x_start: int
    x_end: int
    score: float
    used: bool = False


@dataclass(slots=True)
class Blob:
    segments: list[WhiteSegment] = field(default_factory=list)
    min_x: int = 0
    max_x: int = 0
    min_y: int = 0
    max_y: int = 0
    total_score: float = 0.0

    @property
    def width(self) -> int:
        return self.max_x - self.min_x

    @property
    def height(self) -> int:
        return self.max_y - self.min_y

    @property
    def center_x(self) -> int:
        return (self.min_x + self.max_x) // 2

    @property
    def center_y(self) -> int:
        return (self.min_y + self.max_y) // 2

    @property
    def brightness(self) -> float:
        return self.total_score / (len(self.segments) or 1)


def find_white_segments(
    pixels: PixelLine,
    y: int,
    profile: LevelArcProfile = DEFAULT_ARC_PROFILE,
) -> list[WhiteSegment]:
    """Runs of bright, unsaturated pixels in one row."""
    segments: list[WhiteSegment] = []
    run_start = -1
    run_sum = 0.0

    def _close(end: int) -> None:
        width = end - run_start
        if width >= profile.min_run_width:
            segments.append(WhiteSegment(y=y, x_start=run_start, x_end=end, score=run_sum / width))

    for i, (r, g, b) in enumerate(pixels):
        lum = 0.299 * r + 0.587 * g + 0.114 * b
        sat = max(r, g, b) - min(r, g, b)
        if lum > profile.white_luminance and sat < profile.max_saturation:
            if run_start == -1:
                run_start = i
            run_sum += lum
        elif run_start != -1:
            _close(i)
            run_start = -1
            run_sum = 0.0

    if run_start != -1:
        _close(len(pixels))
    return segments


def cluster_segments(
    segments: list[WhiteSegment],
    profile: LevelArcProfile = DEFAULT_ARC_PROFILE,
) -> list[Blob]:
    """Group segments of neighbouring rows that overlap horizontally."""
    step = profile.row_step
    max_gap = step * 1.5
    slack = profile.x_overlap_slack
    ordered = sorted(segments, key=lambda seg: (seg.y, seg.x_start))
    blobs: list[Blob] = []

    for seed in ordered:
        if seed.used:
            continue
        seed.used = True
        blob = Blob(
            segments=[seed],
            min_x=seed.x_start,
            max_x=seed.x_end,
            min_y=seed.y,
            max_y=seed.y + step,
            total_score=seed.score,
        )
        queue = [seed]
        while queue:
            current = queue.pop(0)
            for other in ordered:
                if other.used:
                    continue
                y_diff = abs(other.y - current.y)
                if not 0 < y_diff <= max_gap:
                    continue
                if other.x_end < current.x_start - slack or other.x_start > current.x_end + slack:
                    continue
                other.used = True
                queue.append(other)
                blob.segments.append(other)
                blob.min_x = min(blob.min_x, other.x_start)
                blob.max_x = max(blob.max_x, other.x_end)
                blob.min_y = min(blob.min_y, other.y)
                blob.max_y = max(blob.max_y, other.y + step)
                blob.total_score += other.score
        blobs.append(blob)

    return blobs


def select_level_dot(
    blobs: list[Blob],
    image_width: int,
    profile: LevelArcProfile = DEFAULT_ARC_PROFILE,
) -> Blob | None:
    """Best dot-shaped blob, or ``None`` when nothing qualifies."""
    margin = image_width * profile.edge_margin
    best: Blob | None = None
    best_score = -math.inf

    for blob in blobs:
        w, h = blob.width, blob.height
        if not (profile.min_dot_size <= w <= profile.max_dot_size):
            continue
        if not (profile.min_dot_size <= h <= profile.max_dot_size):
            continue
        aspect = w / h
        if aspect < profile.min_aspect or aspect > profile.max_aspect:
            continue
        if blob.min_x < margin or blob.max_x > image_width - margin:
            continue

        aspect_score = 1 - abs(1 - aspect)
        score = blob.brightness * profile.brightness_weight + aspect_score * profile.aspect_weight
        if score > best_score:
            best_score = score
            best = blob

    return best


def level_from_position(
    dot_x: float,
    image_width: int,
    profile: LevelArcProfile = DEFAULT_ARC_PROFILE,
) -> float:
    """Level for a dot at *dot_x* on a centred arc, rounded to half levels."""
    center = image_width // 2
    half = image_width * profile.arc_width_ratio / 2
    left = math.floor(center - half)
    right = math.floor(center + half)
    ratio = (dot_x - left) / (right - left)
    clamped = max(0.0, min(1.0, ratio))
    raw = profile.min_level + clamped * (profile.max_level - profile.min_level)
    return round_half_up(raw * 2) / 2


async def detect_level_from_image(
    sampler: PixelSampler,
    image: Any,
    dimensions: ImageDimensions,
    profile: LevelArcProfile = DEFAULT_ARC_PROFILE,
) -> LevelReading:
    """Read the level from the arc dot of *image*."""
    width, height = dimensions.width, dimensions.height
    start_y = math.floor(height * profile.search_top)
    end_y = math.floor(height * profile.search_bottom)

    segments: list[WhiteSegment] = []
    for y in range(start_y, end_y, profile.row_step):
        row = await sampler.sample_scan_line(image, y, 0, width, width)
        segments.extend(find_white_segments(row, y, profile))

    blobs = cluster_segments(segments, profile)
    dot = select_level_dot(blobs, width, profile)
    logger.debug("Level arc: %d segments, %d blobs, dot=%s", len(segments), len(blobs),
                 None if dot is None else (dot.center_x, dot.center_y))
    if dot is None:
        return LevelReading(level=None, confidence="low")

    return LevelReading(level=level_from_position(dot.center_x, width, profile), confidence="high")
