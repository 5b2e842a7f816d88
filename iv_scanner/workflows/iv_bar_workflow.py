"""IV bar workflow: the analysis orchestrator.

Receives an image reference, its dimensions and (optionally) the anchor Y of
each stat bar, and drives the pipeline for Attack, Defense and HP:

1. Resolve anchors (supplied, or the fixed layout when the policy allows).
2. Sample a consensus band across the full image width.
3. Detect the bar track bounds and slice the line to them.
4. Estimate the fill and map it to an IV.

Result semantics
----------------
* ``None``     : analysis not attempted (disabled, or anchors missing under
  the ``"abort"`` policy).
* ``IVResult`` : analysis attempted; a bar that could not be read is ``0``.

The workflow never raises for bad image data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from ..tools.bar_bounds import detect_bar_bounds
from ..tools.bar_regions import calculate_bar_regions, scan_line_ys
from ..tools.iv_estimator import analyze_fill
from ..tools.pixel_sampler import PixelSampler
from ..tools.vision_constants import CalibrationProfile, load_calibration
from ..tools.vision_models import BAR_NAMES, BarPositions, ImageDimensions, IVResult
from ..utils.config import VisionRuntimeConfig
from ..utils.trace import LoggingTrace, NullTrace, TraceSink

logger = logging.getLogger(__name__)

_PIXEL_SAMPLE_SIZE = 10


def _resolve_anchors(
    dimensions: ImageDimensions,
    bar_positions: BarPositions | None,
    config: VisionRuntimeConfig,
) -> dict[str, float] | None:
    """Anchor Y per bar, or ``None`` when the analysis must be skipped."""
    positions = bar_positions or BarPositions()
    missing = positions.missing()
    if not missing:
        return {name: float(positions.get(name)) for name in BAR_NAMES}  # type: ignore[arg-type]

    if config.on_missing_anchors == "abort":
        logger.warning("Missing bar anchors %s; skipping IV analysis", missing)
        return None

    layout_ys = scan_line_ys(calculate_bar_regions(dimensions))
    anchors: dict[str, float] = {}
    for name in BAR_NAMES:
        supplied = positions.get(name)
        anchors[name] = float(supplied) if supplied is not None else layout_ys[name]
    logger.info("Missing bar anchors %s; using fixed layout for them", missing)
    return anchors


async def sample_iv_bars(
    image: Any,
    dimensions: ImageDimensions,
    bar_positions: BarPositions | None = None,
    *,
    sampler: PixelSampler,
    config: VisionRuntimeConfig | None = None,
    calibration: CalibrationProfile | None = None,
    trace: TraceSink | None = None,
) -> IVResult | None:
    """Sample all three IV bars of *image* and return their values."""
    config = config or VisionRuntimeConfig()
    if not config.enabled:
        return None

    calibration = calibration or load_calibration()
    if trace is None:
        trace = LoggingTrace() if config.debug else NullTrace()

    anchors = _resolve_anchors(dimensions, bar_positions, config)
    if anchors is None:
        trace.emit("anchors", status="missing", policy=config.on_missing_anchors)
        return None
    trace.emit("anchors", status="resolved", calibration=calibration.version, **anchors)

    values: dict[str, int] = {}
    for name in BAR_NAMES:
        line = await sampler.sample_scan_band(
            image,
            anchors[name],
            0,
            dimensions.width,
            dimensions.height,
            config.band_sample_count,
        )
        bounds = detect_bar_bounds(line, calibration)
        if bounds is None:
            trace.emit("bar_bounds", bar=name, detected=False, samples=len(line))
            bar_pixels = []
        else:
            trace.emit(
                "bar_bounds",
                bar=name,
                detected=True,
                start_x=bounds.start_x,
                end_x=bounds.end_x,
                width=bounds.width,
            )
            bar_pixels = line[bounds.start_x:bounds.end_x]

        if bar_pixels:
            trace.emit("pixel_sample", bar=name, pixels=bar_pixels[:_PIXEL_SAMPLE_SIZE])

        analysis = analyze_fill(bar_pixels, calibration)
        trace.emit(
            "fill_analysis",
            bar=name,
            length=analysis.length,
            left_trim=analysis.left_trim,
            threshold=round(analysis.threshold, 2),
            last_filled_index=analysis.last_filled_index,
            fill_ratio=round(analysis.fill_ratio, 4),
            iv=analysis.iv,
        )
        values[name] = analysis.iv

    result = IVResult(atk=values["attack"], def_=values["defense"], sta=values["hp"])
    trace.emit("iv_result", total=result.total, percent=result.percent, **result.as_dict())
    return result


@dataclass(slots=True)
class IVBarWorkflow:
    """Bundles the collaborators of :func:`sample_iv_bars`.

    Attributes:
        sampler:     Pixel sampler bound to a backend.
        config:      Runtime switches (enabled, anchor policy, sample count).
        calibration: Detection constants; ``None`` loads them from config.
        trace:       Diagnostic sink; ``None`` follows ``config.debug``.
    """

    sampler: PixelSampler
    config: VisionRuntimeConfig = field(default_factory=VisionRuntimeConfig)
    calibration: CalibrationProfile | None = None
    trace: TraceSink | None = None

    async def run(
        self,
        image: Any,
        dimensions: ImageDimensions,
        bar_positions: BarPositions | None = None,
    ) -> IVResult | None:
        return await sample_iv_bars(
            image,
            dimensions,
            bar_positions,
            sampler=self.sampler,
            config=self.config,
            calibration=self.calibration,
            trace=self.trace,
        )
