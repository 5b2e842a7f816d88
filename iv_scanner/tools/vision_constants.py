"""Shared constants for the IV bar vision pipeline.

This module centralises the screen layout of the appraisal panel and every
empirically tuned calibration value used by the bar detector and the fill
estimator.

Maintainer notes
-----------------
* Calibration values are grouped in :class:`CalibrationProfile`.  Bump
  ``version`` whenever a value changes so that recorded scans can be
  traced back to the constants that produced them.
* ``config.yaml`` may override any field under its ``calibration:``
  section; see :func:`load_calibration`.
* Rounding uses :func:`round_half_up`.  Python's built-in ``round`` is
  banker's rounding and would move ``37.5`` trims to ``38`` but ``36.5``
  trims to ``36``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping

from ..utils.scanner_config import cfg

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ``.5`` going up."""
    return int(math.floor(value + 0.5))


# ---------------------------------------------------------------------------
# Panel layout (fractions of the image / panel size)
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class PanelLayout:
    """Percent-based position of the IV panel and its three bars."""

    panel_top: float = 0.55
    panel_height: float = 0.22
    panel_left: float = 0.10
    panel_width: float = 0.80

    attack_relative_top: float = 0.00
    defense_relative_top: float = 0.36
    hp_relative_top: float = 0.72
    bar_relative_height: float = 0.28

    scan_line_position: float = 0.5
    """Vertical position of the scan line inside a bar (0 = top, 1 = bottom)."""


DEFAULT_LAYOUT = PanelLayout()


# ---------------------------------------------------------------------------
# Calibration
# ---------------------------------------------------------------------------

@dataclass(frozen=True, slots=True)
class CalibrationProfile:
    """Versioned set of tuned detection constants."""

    version: str = "8a.2"

    # Sampling
    band_height_ratio: float = 0.01
    line_sample_count: int = 200

    # Bar bounds
    min_bounds_samples: int = 50
    edge_delta_threshold: int = 30
    edge_group_gap: int = 5
    min_track_width: int = 80

    # Fill estimation
    min_fill_samples: int = 30
    trim_ratio_small: float = 0.125
    trim_ratio_large: float = 0.07
    trim_small_length: int = 400
    trim_large_length: int = 600
    base_threshold: float = 25.0
    threshold_std_factor: float = 1.5
    max_threshold: float = 80.0
    red_dominance_margin: int = 30
    edge_buffer_ratio: float = 0.015

    # Ratio → IV rounding
    floor_ratio: float = 0.03
    ceiling_ratio: float = 0.97
    bias_split_ratio: float = 0.40
    low_bias: float = 0.05
    high_bias: float = 0.35

    @classmethod
    def from_mapping(cls, overrides: Mapping[str, Any], base: CalibrationProfile | None = None) -> CalibrationProfile:
        """Return *base* with the known keys of *overrides* applied.

        Unknown keys are ignored and values that cannot be converted to the
        field's type keep the base value.
        """
        profile = base or cls()
        changes: dict[str, Any] = {}
        for item in fields(cls):
            if item.name not in overrides:
                continue
            current = getattr(profile, item.name)
            try:
                changes[item.name] = type(current)(overrides[item.name])
            except (TypeError, ValueError):
                logger.warning("Ignoring calibration override %s=%r", item.name, overrides[item.name])
        return replace(profile, **changes) if changes else profile


DEFAULT_CALIBRATION = CalibrationProfile()


def load_calibration() -> CalibrationProfile:
    """Default calibration with ``config.yaml`` / environment overrides applied.

    ``calibration.edge_delta_threshold`` in YAML and
    ``IVSCAN_CALIBRATION_EDGE_DELTA_THRESHOLD`` in the environment both
    override :attr:`CalibrationProfile.edge_delta_threshold`.
    """
    overrides: dict[str, str] = {}
    for item in fields(CalibrationProfile):
        raw = cfg.get_str(f"calibration.{item.name}", "").strip()
        if raw:
            overrides[item.name] = raw
    if not overrides:
        return DEFAULT_CALIBRATION
    return CalibrationProfile.from_mapping(overrides)
