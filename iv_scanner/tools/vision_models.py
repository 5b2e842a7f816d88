"""Data models for the IV bar vision pipeline.

Contains the value objects exchanged between the pipeline stages:

* :class:`ImageDimensions`: decoded pixel size of the source screenshot.
* :class:`BarRegion`: rectangle in image space where one stat bar lives.
* :class:`BarLayoutRegions`: the three bar rectangles plus the panel.
* :class:`BarPositions`: externally supplied anchor Y per bar.
* :class:`BarBounds`: detected track extent inside a sampled line.
* :class:`FillAnalysis`: diagnostics of one fill estimation.
* :class:`IVResult`: final Attack / Defense / Stamina values.
* :class:`LevelReading`: level read from the level arc.

Everything is created per request and never mutated afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

RGBPixel = tuple[int, int, int]
PixelLine = list[RGBPixel]

BAR_NAMES: tuple[str, str, str] = ("attack", "defense", "hp")
"""Bar keys in screen order (top to bottom)."""

IV_MIN = 0
IV_MAX = 15


@dataclass(frozen=True, slots=True)
class ImageDimensions:
    width: int
    height: int

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image dimensions must be positive, got {self.width}x{self.height}")


@dataclass(frozen=True, slots=True)
class BarRegion:
    """Axis-aligned rectangle in image pixel space."""

    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True, slots=True)
class BarLayoutRegions:
    attack: BarRegion
    defense: BarRegion
    hp: BarRegion
    panel: BarRegion

    def bars(self) -> dict[str, BarRegion]:
        """Return the three bar regions keyed by bar name."""
        return {"attack": self.attack, "defense": self.defense, "hp": self.hp}


@dataclass(frozen=True, slots=True)
class BarPositions:
    """Anchor Y coordinate of each bar, usually found by text recognition.

    A value of ``None`` or ``0`` counts as missing.
    """

    attack: float | None = None
    defense: float | None = None
    hp: float | None = None

    def get(self, name: str) -> float | None:
        value = getattr(self, name)
        return value if value else None

    def missing(self) -> list[str]:
        """Names of the bars without a usable anchor."""
        return [name for name in BAR_NAMES if self.get(name) is None]

    def is_complete(self) -> bool:
        return not self.missing()


@dataclass(frozen=True, slots=True)
class BarBounds:
    """Left/right index of the bar track within a sampled pixel line."""

    start_x: int
    end_x: int

    @property
    def width(self) -> int:
        return self.end_x - self.start_x


@dataclass(frozen=True, slots=True)
class FillAnalysis:
    """Intermediate values of one fill estimation.

    Attributes:
        length:            Number of pixels analysed.
        left_trim:         Leading pixels treated as icon / padding.
        threshold:         Adaptive colour-dominance threshold.
        last_filled_index: Right-most filled pixel (``0`` when none).
        edge_buffer:       Pixels discounted for anti-aliased glow.
        fill_ratio:        Filled fraction of the effective track.
        iv:                Resulting value in ``[0, 15]``.
    """

    length: int
    left_trim: int
    threshold: float
    last_filled_index: int
    edge_buffer: int
    fill_ratio: float
    iv: int


@dataclass(frozen=True, slots=True)
class IVResult:
    """Final per-stat values, each independent of the others."""

    atk: int
    def_: int
    sta: int

    @property
    def total(self) -> int:
        return self.atk + self.def_ + self.sta

    @property
    def percent(self) -> int:
        """Total as a rounded percentage of the 45-point maximum."""
        return int(self.total / 45 * 100 + 0.5)

    def as_dict(self) -> dict[str, int]:
        return {"atk": self.atk, "def": self.def_, "sta": self.sta}


@dataclass(frozen=True, slots=True)
class LevelReading:
    level: float | None
    confidence: Literal["high", "low"] = "low"
