"""Per-position median of parallel scan lines.

Sampling three neighbouring rows and taking the median of each channel
removes single-row noise (text anti-aliasing, compression blocks).

Known approximation: channels are reduced independently, so the output
triple may combine the red of one row with the green of another and not
match any pixel that was actually sampled.
"""

from __future__ import annotations

from typing import Sequence

from .vision_models import PixelLine, RGBPixel

_MISSING: RGBPixel = (0, 0, 0)


def reduce_lines(lines: Sequence[PixelLine]) -> PixelLine:
    """Combine *lines* into one consensus line.

    The output has the length of the first line.  Shorter lines contribute
    ``(0, 0, 0)`` where they have no sample.  With an even number of lines
    the upper median is taken.
    """
    if not lines:
        return []

    length = len(lines[0])
    mid = len(lines) // 2
    consensus: PixelLine = []

    for i in range(length):
        column = [line[i] if i < len(line) else _MISSING for line in lines]
        red = sorted(pixel[0] for pixel in column)
        green = sorted(pixel[1] for pixel in column)
        blue = sorted(pixel[2] for pixel in column)
        consensus.append((red[mid], green[mid], blue[mid]))

    return consensus
