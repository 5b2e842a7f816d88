"""IV Scanner: stat-bar vision pipeline for creature appraisal screenshots.

Public entry points are re-exported here so callers can write::

    from iv_scanner import PixelSampler, ArrayPixelBackend, sample_iv_bars
"""

from __future__ import annotations

from .tools.bar_bounds import detect_bar_bounds
from .tools.bar_regions import calculate_bar_regions, get_scan_line_y
from .tools.band_consensus import reduce_lines
from .tools.iv_estimator import analyze_fill, estimate_iv
from .tools.pixel_backends import (
    ArrayPixelBackend,
    OpenCVPixelBackend,
    PillowPixelBackend,
    make_backend,
)
from .tools.pixel_sampler import PixelSampler
from .tools.vision_models import (
    BarBounds,
    BarPositions,
    BarRegion,
    ImageDimensions,
    IVResult,
)
from .workflows.iv_bar_workflow import IVBarWorkflow, sample_iv_bars

__version__ = "0.4.0"

__all__ = [
    "ArrayPixelBackend",
    "BarBounds",
    "BarPositions",
    "BarRegion",
    "IVBarWorkflow",
    "IVResult",
    "ImageDimensions",
    "OpenCVPixelBackend",
    "PillowPixelBackend",
    "PixelSampler",
    "analyze_fill",
    "calculate_bar_regions",
    "detect_bar_bounds",
    "estimate_iv",
    "get_scan_line_y",
    "make_backend",
    "reduce_lines",
    "sample_iv_bars",
]
