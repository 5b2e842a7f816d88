"""Runtime configuration dataclass for the vision pipeline.

Every field reads its default through :data:`utils.scanner_config.cfg`
(environment first, then ``config.yaml``) at construction time.  Override
individual fields when constructing from code (e.g. in tests).
"""

from __future__ import annotations

from dataclasses import dataclass, field

from .scanner_config import cfg

MISSING_ANCHOR_POLICIES = ("abort", "fallback")
PIXEL_BACKENDS = ("array", "opencv", "pillow")


@dataclass(slots=True)
class VisionRuntimeConfig:
    """IV bar analysis configuration.

    NOTE: All fields use ``default_factory`` so that environment variables
    are read at **instantiation** time, not at import time.  This keeps
    ``monkeypatch.setenv`` in tests effective.

    Attributes:
        enabled:            ``False`` makes the orchestrator return ``None``
                            without sampling ("analysis not attempted").
        debug:              Route pipeline trace events to the log.
        on_missing_anchors: ``"abort"`` returns ``None`` when any bar anchor
                            is missing; ``"fallback"`` uses the fixed
                            percentage layout for the missing ones.
        band_sample_count:  Samples per scan line of the consensus band.
        backend:            Pixel backend name used by front ends.
    """

    enabled: bool = field(default_factory=lambda: cfg.get_bool("vision.enabled", True))
    debug: bool = field(default_factory=lambda: cfg.get_bool("vision.debug", False))
    on_missing_anchors: str = field(
        default_factory=lambda: cfg.get_str("vision.on_missing_anchors", "abort").strip().lower()
    )
    band_sample_count: int = field(default_factory=lambda: cfg.get_int("vision.band_sample_count", 400))
    backend: str = field(default_factory=lambda: cfg.get_str("vision.backend", "opencv").strip().lower())

    def __post_init__(self) -> None:
        if self.on_missing_anchors not in MISSING_ANCHOR_POLICIES:
            raise ValueError(
                f"on_missing_anchors must be one of {MISSING_ANCHOR_POLICIES}, "
                f"got {self.on_missing_anchors!r}"
            )
        if self.backend not in PIXEL_BACKENDS:
            raise ValueError(f"backend must be one of {PIXEL_BACKENDS}, got {self.backend!r}")
        if self.band_sample_count <= 0:
            self.band_sample_count = 400
