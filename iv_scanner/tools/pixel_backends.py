"""Pixel-reading backends.

A backend answers exactly one question: *give me the RGB pixels of this
rectangle*.  Everything above it (scan lines, bands, consensus) is backend
agnostic.

Backends
--------
* :class:`ArrayPixelBackend`: already decoded ``numpy`` arrays (RGB).
* :class:`OpenCVPixelBackend`: file paths or encoded bytes, decoded with
  ``cv2`` (BGR converted to RGB).
* :class:`PillowPixelBackend`: file paths or ``PIL.Image`` objects.

The requested rectangle is clamped to the image.  ``None`` means "no data"
(undecodable image, rectangle fully outside); the sampler turns that into an
empty line.
"""

from __future__ import annotations

import os
from typing import Any, Protocol

import cv2
import numpy as np
from PIL import Image


class PixelBackend(Protocol):
    """Structural subtype for anything that can read an RGB rectangle."""

    def load(self, image: Any) -> np.ndarray | None:
        """Return the whole image as an RGB array, or ``None`` when undecodable."""
        ...

    def read_region(self, image: Any, x: int, y: int, width: int, height: int) -> np.ndarray | None:
        """Return an ``(h, w, 3)`` uint8 RGB array, or ``None`` for no data."""
        ...


def _as_rgb(array: np.ndarray) -> np.ndarray:
    """Normalise grayscale / RGBA arrays to three channels."""
    if array.ndim == 2:
        return np.stack([array] * 3, axis=-1)
    if array.ndim == 3 and array.shape[2] >= 3:
        return array[:, :, :3]
    raise ValueError(f"Unsupported pixel array shape {array.shape}")


def crop_region(array: np.ndarray, x: int, y: int, width: int, height: int) -> np.ndarray | None:
    """Clamp the rectangle to *array* and return the RGB crop."""
    img_h, img_w = array.shape[:2]
    sx = max(0, x)
    sy = max(0, y)
    sw = min(width, img_w - sx)
    sh = min(height, img_h - sy)
    if sw <= 0 or sh <= 0:
        return None
    return _as_rgb(array[sy:sy + sh, sx:sx + sw])


class ArrayPixelBackend:
    """Reads from in-memory RGB arrays."""

    def load(self, image: Any) -> np.ndarray | None:
        return image if isinstance(image, np.ndarray) else None

    def read_region(self, image: Any, x: int, y: int, width: int, height: int) -> np.ndarray | None:
        rgb = self.load(image)
        if rgb is None:
            return None
        return crop_region(rgb, x, y, width, height)


class OpenCVPixelBackend:
    """Decodes images with OpenCV.

    Accepts a filesystem path, encoded image bytes or an already decoded
    RGB array.
    """

    def load(self, image: Any) -> np.ndarray | None:
        """Decode *image* to a full RGB array (``None`` when undecodable)."""
        if isinstance(image, np.ndarray):
            return image
        if isinstance(image, (bytes, bytearray, memoryview)):
            buffer = np.frombuffer(image, dtype=np.uint8)
            bgr = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
        elif isinstance(image, (str, os.PathLike)):
            bgr = cv2.imread(os.fspath(image), cv2.IMREAD_COLOR)
        else:
            return None
        if bgr is None:
            return None
        return cv2.cvtColor(bgr, cv2.COLOR_BGR2RGB)

    def read_region(self, image: Any, x: int, y: int, width: int, height: int) -> np.ndarray | None:
        rgb = self.load(image)
        if rgb is None:
            return None
        return crop_region(rgb, x, y, width, height)


class PillowPixelBackend:
    """Decodes images with Pillow.

    Accepts a filesystem path or an open ``PIL.Image.Image``.
    """

    def load(self, image: Any) -> np.ndarray | None:
        if isinstance(image, np.ndarray):
            return image
        if isinstance(image, Image.Image):
            return np.asarray(image.convert("RGB"))
        if isinstance(image, (str, os.PathLike)):
            try:
                with Image.open(os.fspath(image)) as opened:
                    return np.asarray(opened.convert("RGB"))
            except (OSError, Image.DecompressionBombError):
                return None
        return None

    def read_region(self, image: Any, x: int, y: int, width: int, height: int) -> np.ndarray | None:
        rgb = self.load(image)
        if rgb is None:
            return None
        return crop_region(rgb, x, y, width, height)


_BACKENDS: dict[str, type] = {
    "array": ArrayPixelBackend,
    "opencv": OpenCVPixelBackend,
    "pillow": PillowPixelBackend,
}


def make_backend(name: str) -> PixelBackend:
    """Instantiate a backend by name (``array``, ``opencv`` or ``pillow``)."""
    key = (name or "").strip().lower()
    if key not in _BACKENDS:
        raise ValueError(f"Unknown pixel backend {name!r}; expected one of {sorted(_BACKENDS)}")
    return _BACKENDS[key]()
