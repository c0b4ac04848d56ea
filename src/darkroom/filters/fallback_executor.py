"""Reference filter chain executor written in plain Python.

It decodes every pixel into a :class:`PixelColor`, folds the chain through
the :data:`~darkroom.filters.transforms.TRANSFORMS` table and writes the
result back.  It is much slower than the JIT path but shares the same
algorithms, so both executors produce identical bytes.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from ..color import PixelColor
from ..models import Filter
from .transforms import PixelContext, apply_chain
from .utils import BYTES_PER_PIXEL, OFFSET_A, OFFSET_B, OFFSET_G, OFFSET_R


def wash_band_python(
    buffer: np.ndarray,
    width: int,
    height: int,
    bytes_per_line: int,
    row_start: int,
    row_stop: int,
    filters: Sequence[Filter],
) -> None:
    """Apply *filters* to rows ``[row_start, row_stop)`` of *buffer* in-place."""

    if width <= 0 or not filters:
        return

    for y in range(row_start, row_stop):
        row_offset = y * bytes_per_line
        for x in range(width):
            pixel_offset = row_offset + x * BYTES_PER_PIXEL
            pixel = PixelColor(
                int(buffer[pixel_offset + OFFSET_R]),
                int(buffer[pixel_offset + OFFSET_G]),
                int(buffer[pixel_offset + OFFSET_B]),
                int(buffer[pixel_offset + OFFSET_A]),
            )
            pixel = apply_chain(pixel, filters, PixelContext(x, y, width, height))
            buffer[pixel_offset + OFFSET_B] = pixel.b
            buffer[pixel_offset + OFFSET_G] = pixel.g
            buffer[pixel_offset + OFFSET_R] = pixel.r
            buffer[pixel_offset + OFFSET_A] = pixel.a
