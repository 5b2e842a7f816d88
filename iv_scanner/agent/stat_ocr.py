"""Stat-screen OCR: name / CP / HP and bar label anchors.

Two independent jobs on a stat-screen screenshot:

1. Read the free text and pull out the creature name, its CP and its HP.
2. Find the "Attack", "Defense" and "HP" labels of the IV bars and turn
   their word boxes into anchor Ys for the bar sampler.

Tesseract (``pytesseract``) and OpenCV are loaded lazily; without Tesseract
every call degrades to an empty result instead of raising.
"""

from __future__ import annotations

import logging
import re
import shutil
from dataclasses import dataclass
from typing import Any

from ..tools.vision_models import BarPositions

logger = logging.getLogger(__name__)

MAX_CP = 9999
MAX_HP = 999
MAX_NAME_LENGTH = 50

_CP_RE = re.compile(r"CP\s*(\d+)", re.IGNORECASE)
_HP_RE = re.compile(r"HP\s*(\d+)(?:\s*/\s*\d+)?", re.IGNORECASE)
_HP_FRACTION_RE = re.compile(r"(\d+)\s*/\s*\d+")
_STAT_LINE_RE = re.compile(r"CP|HP|\d+", re.IGNORECASE)
_NAME_RE = re.compile(r"^([A-Z][a-z]+(?:\s+[A-Z][a-z]+)*)$")

# Label text as tesseract reports it -> bar name.
BAR_LABELS: dict[str, str] = {
    "attack": "attack",
    "defense": "defense",
    "hp": "hp",
}


@dataclass(slots=True)
class OCRResult:
    name: str | None = None
    cp: int | None = None
    hp: int | None = None


def parse_pokemon_text(text: str) -> OCRResult:
    """Extract name, CP and HP from raw OCR text.

    * CP: ``CP 1234`` / ``cp1234``, kept when in ``1..9999``.
    * HP: ``HP 123`` or ``123 / 140`` (first number), kept when in ``1..999``.
    * Name: first line without CP/HP/digits made only of capitalised words,
      3–50 characters long.
    """
    result = OCRResult()
    clean = " ".join(text.split())

    cp_match = _CP_RE.search(clean)
    if cp_match:
        cp = int(cp_match.group(1))
        if 0 < cp <= MAX_CP:
            result.cp = cp

    hp_match = _HP_RE.search(clean) or _HP_FRACTION_RE.search(clean)
    if hp_match:
        hp = int(hp_match.group(1))
        if 0 < hp <= MAX_HP:
            result.hp = hp

    for line in (raw.strip() for raw in text.split("\n")):
        if not line or _STAT_LINE_RE.search(line):
            continue
        name_match = _NAME_RE.match(line)
        if name_match and 3 <= len(name_match.group(1)) <= MAX_NAME_LENGTH:
            result.name = name_match.group(1).strip()
            break

    return result


def validate_ocr_result(result: OCRResult) -> dict[str, str]:
    """Field -> error message; empty when the result is usable."""
    errors: dict[str, str] = {}

    if not result.name or not result.name.strip():
        errors["name"] = "Name is required"
    elif len(result.name) > MAX_NAME_LENGTH:
        errors["name"] = "Name is too long"

    if result.cp is None or result.cp <= 0:
        errors["cp"] = "CP must be greater than 0"
    elif result.cp > MAX_CP:
        errors["cp"] = "CP is too high"

    if result.hp is None or result.hp <= 0:
        errors["hp"] = "HP must be greater than 0"
    elif result.hp > MAX_HP:
        errors["hp"] = "HP is too high"

    return errors


class StatScreenOCR:
    """Tesseract-backed reader for the stat screen."""

    def __init__(
        self,
        *,
        tesseract_cmd: str | None = None,
        anchor_offset_ratio: float = 0.9,
        min_confidence: float = 30.0,
    ) -> None:
        self.anchor_offset_ratio = float(anchor_offset_ratio)
        self.min_confidence = float(min_confidence)

        self._cv2: Any | None = None
        self._pytesseract: Any | None = None

        self._load_backends(tesseract_cmd=tesseract_cmd)

    @property
    def available(self) -> bool:
        return self._pytesseract is not None

    def _load_backends(self, tesseract_cmd: str | None = None) -> None:
        try:
            import cv2  # type: ignore[import-untyped]
            self._cv2 = cv2
        except ImportError:
            self._cv2 = None

        try:
            import pytesseract  # type: ignore[import-untyped]
        except ImportError:
            logger.warning("pytesseract not installed; OCR disabled")
            self._pytesseract = None
            return

        cmd = tesseract_cmd or shutil.which("tesseract")
        if cmd:
            pytesseract.pytesseract.tesseract_cmd = cmd
        self._pytesseract = pytesseract

    def _prepare(self, image: Any) -> Any:
        """Grayscale + 2x upscale; images cv2 cannot handle pass through."""
        if self._cv2 is None or getattr(image, "ndim", None) not in (2, 3):
            return image
        cv2 = self._cv2
        gray = cv2.cvtColor(image, cv2.COLOR_RGB2GRAY) if image.ndim == 3 else image
        h, w = gray.shape[:2]
        if h <= 0 or w <= 0:
            return image
        return cv2.resize(gray, (w * 2, h * 2), interpolation=cv2.INTER_CUBIC)

    def read_text(self, image: Any) -> str:
        """Full-page text of *image* (``""`` when OCR is unavailable or fails)."""
        if self._pytesseract is None or image is None:
            return ""
        try:
            return str(self._pytesseract.image_to_string(self._prepare(image)))
        except Exception as exc:
            logger.warning("OCR text read failed: %s", exc)
            return ""

    def extract(self, image: Any) -> OCRResult:
        return parse_pokemon_text(self.read_text(image))

    def read_words(self, image: Any) -> dict[str, list[Any]]:
        """Tesseract word boxes in original image coordinates."""
        if self._pytesseract is None or image is None:
            return {}
        prepared = self._prepare(image)
        scale = 2.0 if prepared is not image else 1.0
        try:
            data = self._pytesseract.image_to_data(
                prepared, output_type=self._pytesseract.Output.DICT
            )
        except Exception as exc:
            logger.warning("OCR word boxes failed: %s", exc)
            return {}
        if scale != 1.0:
            for key in ("left", "top", "width", "height"):
                data[key] = [value / scale for value in data.get(key, [])]
        return data

    def locate_bar_anchors(self, image: Any) -> BarPositions:
        """Anchor Ys just below the "Attack", "Defense" and "HP" labels.

        Each bar sits under its label, so the anchor is the label's bottom
        edge plus ``anchor_offset_ratio`` label heights.  Labels that are not
        found leave their anchor as ``None``.
        """
        words = self.read_words(image)
        found: dict[str, float] = {}
        texts = words.get("text", [])

        for i, raw in enumerate(texts):
            label = BAR_LABELS.get(str(raw).strip().strip(":").lower())
            if label is None or label in found:
                continue
            try:
                conf = float(words["conf"][i])
            except (KeyError, IndexError, TypeError, ValueError):
                conf = -1.0
            if conf < self.min_confidence:
                continue
            top = float(words["top"][i])
            height = float(words["height"][i])
            found[label] = top + height + height * self.anchor_offset_ratio

        logger.debug("OCR bar anchors: %s", found)
        return BarPositions(
            attack=found.get("attack"),
            defense=found.get("defense"),
            hp=found.get("hp"),
        )
