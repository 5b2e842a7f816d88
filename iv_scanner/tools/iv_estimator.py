"""Fill estimation: bar pixels → IV in ``[0, 15]``.

The input is the scan line already restricted to the bar track.  The bar is
read by finding the right-most "filled" (orange, red-dominant) pixel, which
copes with the gaps between bar segments.

Steps
-----
1. **Adaptive left trim**: every bar starts with an icon and padding.  On
   phones (short bars, ≤400 samples) it takes about 12.5 % of the track,
   on tablets (>600 samples) about 7 %; linear in between.
2. **Adaptive threshold**: the colour-dominance threshold grows with the
   standard deviation of the per-pixel channel spread, so noisy or high
   contrast backgrounds do not read as filled.
3. **Right-to-left scan** for the first pixel that is both saturated and
   red-dominant.
4. **Edge buffer**: a small share of the track is discounted for the
   anti-aliased glow past the true bar end.
5. **Adaptive bias rounding** of ``ratio * 15``: a small bias for low bars
   (background noise inflates them), a larger one for mid/high bars (the
   edge buffer shaves real filled pixels), plus forced floor and ceiling.
"""

from __future__ import annotations

import math
from typing import Sequence

from .vision_constants import DEFAULT_CALIBRATION, CalibrationProfile, round_half_up
from .vision_models import IV_MAX, IV_MIN, FillAnalysis, RGBPixel


def _max_channel_diff(pixel: RGBPixel) -> int:
    r, g, b = pixel
    return max(abs(r - g), abs(g - b), abs(r - b))


def adaptive_trim_ratio(length: int, calibration: CalibrationProfile = DEFAULT_CALIBRATION) -> float:
    """Share of the bar taken by the leading icon, by bar length."""
    small, large = calibration.trim_small_length, calibration.trim_large_length
    if length > large:
        return calibration.trim_ratio_large
    if length > small:
        t = (length - small) / (large - small)
        return calibration.trim_ratio_small - t * (calibration.trim_ratio_small - calibration.trim_ratio_large)
    return calibration.trim_ratio_small


def adaptive_threshold(
    pixels: Sequence[RGBPixel],
    calibration: CalibrationProfile = DEFAULT_CALIBRATION,
) -> float:
    """Colour-dominance threshold: base + std-dev of channel spread, clamped."""
    base = calibration.base_threshold
    if not pixels:
        return base
    diffs = [_max_channel_diff(pixel) for pixel in pixels]
    mean = sum(diffs) / len(diffs)
    variance = sum((diff - mean) ** 2 for diff in diffs) / len(diffs)
    std_dev = math.sqrt(variance)
    return max(base, min(calibration.max_threshold, base + std_dev * calibration.threshold_std_factor))


def ratio_to_iv(ratio: float, calibration: CalibrationProfile = DEFAULT_CALIBRATION) -> int:
    """Map a fill ratio to an IV with the two-tier rounding bias."""
    if ratio < calibration.floor_ratio:
        iv = IV_MIN
    elif ratio > calibration.ceiling_ratio:
        iv = IV_MAX
    else:
        bias = calibration.low_bias if ratio < calibration.bias_split_ratio else calibration.high_bias
        iv = math.floor(ratio * IV_MAX + bias)
    return max(IV_MIN, min(IV_MAX, iv))


def analyze_fill(
    pixels: Sequence[RGBPixel],
    calibration: CalibrationProfile = DEFAULT_CALIBRATION,
) -> FillAnalysis:
    """Run the fill estimation and keep every intermediate value."""
    length = len(pixels)
    if length < calibration.min_fill_samples:
        return FillAnalysis(
            length=length,
            left_trim=0,
            threshold=calibration.base_threshold,
            last_filled_index=0,
            edge_buffer=0,
            fill_ratio=0.0,
            iv=IV_MIN,
        )

    left_trim = round_half_up(length * adaptive_trim_ratio(length, calibration))
    threshold = adaptive_threshold(pixels, calibration)

    last_filled_index = 0
    for i in range(length - 1, -1, -1):
        r, _, b = pixels[i]
        if _max_channel_diff(pixels[i]) > threshold and r > b + calibration.red_dominance_margin:
            last_filled_index = i
            break

    effective_total = max(1, length - left_trim)
    edge_buffer = max(1, math.floor(effective_total * calibration.edge_buffer_ratio))
    effective_filled = max(0, last_filled_index - left_trim - edge_buffer)
    fill_ratio = effective_filled / effective_total

    return FillAnalysis(
        length=length,
        left_trim=left_trim,
        threshold=threshold,
        last_filled_index=last_filled_index,
        edge_buffer=edge_buffer,
        fill_ratio=fill_ratio,
        iv=ratio_to_iv(fill_ratio, calibration),
    )


def estimate_iv(
    pixels: Sequence[RGBPixel],
    calibration: CalibrationProfile = DEFAULT_CALIBRATION,
) -> int:
    """IV in ``[0, 15]`` for the bar track *pixels*; ``0`` when it cannot tell."""
    return analyze_fill(pixels, calibration).iv
