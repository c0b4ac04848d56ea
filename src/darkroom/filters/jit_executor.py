"""JIT-accelerated filter chain executor using Numba.

The filter snapshot is packed into flat arrays once per Wash and a compiled
kernel walks a band of rows directly in the ``Format_ARGB32`` buffer.  The
kernel releases the GIL so several bands can run in parallel threads.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import numpy as np
from numba import jit

from ..models import BlackAndWhiteMode, Filter, FilterKind, TintValue
from .algorithms import (
    _black_and_white,
    _brightness,
    _hue,
    _invert,
    _lookup,
    _noise,
    _saturation,
    _sepia,
    _tint,
    _vibrance,
)
from .utils import BYTES_PER_PIXEL, OFFSET_B, OFFSET_G, OFFSET_R

_BLACK_AND_WHITE = int(FilterKind.BLACK_AND_WHITE)
_INVERT = int(FilterKind.INVERT)
_CONTRAST = int(FilterKind.CONTRAST)
_BRIGHTNESS = int(FilterKind.BRIGHTNESS)
_SATURATION = int(FilterKind.SATURATION)
_VIBRANCE = int(FilterKind.VIBRANCE)
_GAMMA = int(FilterKind.GAMMA)
_NOISE = int(FilterKind.NOISE)
_SEPIA = int(FilterKind.SEPIA)
_HUE = int(FilterKind.HUE)
_TINT = int(FilterKind.TINT)

_TABLE_KINDS = (FilterKind.CONTRAST, FilterKind.GAMMA, FilterKind.SATURATION)
_SCALAR_KINDS = (
    FilterKind.BRIGHTNESS,
    FilterKind.VIBRANCE,
    FilterKind.NOISE,
    FilterKind.SEPIA,
    FilterKind.HUE,
)


@dataclass(frozen=True)
class PackedChain:
    """Array form of a filter snapshot consumed by the kernel.

    Row ``i`` of every array describes filter ``i``: ``kinds`` holds the
    dispatch code, ``scalars`` the scalar parameter (mode, offset, strength
    or degrees), ``tables`` the 256-entry lookup and ``colors`` the tint
    target.  Unused slots are zero.
    """

    kinds: np.ndarray
    scalars: np.ndarray
    tables: np.ndarray
    colors: np.ndarray

    def __len__(self) -> int:
        return int(self.kinds.shape[0])


def pack_filters(filters: Sequence[Filter]) -> PackedChain:
    """Flatten *filters* into a :class:`PackedChain`.

    Filters whose kind is not a known :class:`FilterKind` keep their code in
    ``kinds``; the kernel skips any code it does not recognise.
    """

    count = len(filters)
    kinds = np.zeros(count, dtype=np.int64)
    scalars = np.zeros(count, dtype=np.float64)
    tables = np.zeros((count, 256), dtype=np.float64)
    colors = np.zeros((count, 3), dtype=np.float64)

    for index, item in enumerate(filters):
        kinds[index] = int(item.kind)
        if item.kind == FilterKind.BLACK_AND_WHITE:
            mode = item.value if item.value is not None else BlackAndWhiteMode.REGULAR
            scalars[index] = int(mode)
        elif item.kind in _TABLE_KINDS:
            tables[index, :] = np.asarray(item.value, dtype=np.float64)
        elif item.kind in _SCALAR_KINDS:
            scalars[index] = float(item.value)
        elif item.kind == FilterKind.TINT:
            tint: TintValue = item.value
            colors[index, :] = (tint.color.r, tint.color.g, tint.color.b)
            scalars[index] = tint.strength

    return PackedChain(kinds=kinds, scalars=scalars, tables=tables, colors=colors)


def wash_band_jit(
    buffer: np.ndarray,
    width: int,
    height: int,
    bytes_per_line: int,
    row_start: int,
    row_stop: int,
    chain: PackedChain,
) -> None:
    """Apply *chain* to rows ``[row_start, row_stop)`` of *buffer* in-place."""

    _wash_band(
        buffer,
        width,
        height,
        bytes_per_line,
        row_start,
        row_stop,
        chain.kinds,
        chain.scalars,
        chain.tables,
        chain.colors,
    )


@jit(nopython=True, nogil=True, cache=True)
def _wash_band(
    buffer: np.ndarray,
    width: int,
    height: int,
    bytes_per_line: int,
    row_start: int,
    row_stop: int,
    kinds: np.ndarray,
    scalars: np.ndarray,
    tables: np.ndarray,
    colors: np.ndarray,
) -> None:
    """JIT-compiled band kernel."""
    count = kinds.shape[0]
    if width <= 0 or count == 0:
        return

    for y in range(row_start, row_stop):
        row_offset = y * bytes_per_line
        for x in range(width):
            pixel_offset = row_offset + x * BYTES_PER_PIXEL

            b = int(buffer[pixel_offset + OFFSET_B])
            g = int(buffer[pixel_offset + OFFSET_G])
            r = int(buffer[pixel_offset + OFFSET_R])

            for i in range(count):
                kind = kinds[i]
                if kind == _BLACK_AND_WHITE:
                    r, g, b = _black_and_white(r, g, b, int(scalars[i]))
                elif kind == _INVERT:
                    r, g, b = _invert(r, g, b)
                elif kind == _CONTRAST or kind == _GAMMA:
                    r, g, b = _lookup(r, g, b, tables[i])
                elif kind == _BRIGHTNESS:
                    r, g, b = _brightness(r, g, b, scalars[i])
                elif kind == _SATURATION:
                    r, g, b = _saturation(r, g, b, tables[i])
                elif kind == _VIBRANCE:
                    r, g, b = _vibrance(r, g, b, scalars[i])
                elif kind == _NOISE:
                    r, g, b = _noise(r, g, b, scalars[i], x, y, width, height)
                elif kind == _SEPIA:
                    r, g, b = _sepia(r, g, b, scalars[i])
                elif kind == _HUE:
                    r, g, b = _hue(r, g, b, scalars[i])
                elif kind == _TINT:
                    r, g, b = _tint(
                        r, g, b, colors[i, 0], colors[i, 1], colors[i, 2], scalars[i]
                    )

            buffer[pixel_offset + OFFSET_B] = b
            buffer[pixel_offset + OFFSET_G] = g
            buffer[pixel_offset + OFFSET_R] = r
