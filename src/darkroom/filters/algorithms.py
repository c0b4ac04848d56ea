"""Pure per-pixel colour algorithms independent of platform and buffer layout.

Every function takes the three colour channels as integers in ``[0, 255]``
plus the filter's canonical parameter and returns a new ``(r, g, b)`` tuple
of integers in the same range.  Alpha never reaches this module.

The functions are compiled with Numba so the buffer kernel can call them
directly; they remain callable from regular Python, which is how the
reference executor and :mod:`darkroom.filters.transforms` use them.
"""

from __future__ import annotations

import math

from numba import jit

from ..models import BlackAndWhiteMode

LUMA_R = 0.299
LUMA_G = 0.587
LUMA_B = 0.114
"""Rec. 601 luma weights."""

SEPIA_MATRIX = (
    (0.393, 0.769, 0.189),
    (0.349, 0.686, 0.168),
    (0.272, 0.534, 0.131),
)
"""Classic sepia tone matrix applied at full strength."""

_MODE_AVERAGE = int(BlackAndWhiteMode.AVERAGE)
_MODE_DESATURATE = int(BlackAndWhiteMode.DESATURATE)


@jit(nopython=True, cache=True)
def _to_byte(value: float) -> int:
    """Round *value* half-up and clamp it into ``[0, 255]``."""

    scaled = math.floor(value + 0.5)
    if scaled < 0.0:
        return 0
    if scaled > 255.0:
        return 255
    return int(scaled)


@jit(nopython=True, cache=True)
def _clamp(value: float, min_val: float, max_val: float) -> float:
    """Clamp *value* to the inclusive range [min_val, max_val]."""
    if value < min_val:
        return min_val
    if value > max_val:
        return max_val
    return value


@jit(nopython=True, cache=True)
def _luma(r: int, g: int, b: int) -> float:
    return LUMA_R * r + LUMA_G * g + LUMA_B * b


@jit(nopython=True, cache=True)
def _black_and_white(r: int, g: int, b: int, mode: int) -> tuple[int, int, int]:
    """Collapse the pixel to grey using the requested :class:`BlackAndWhiteMode`."""

    if mode == _MODE_AVERAGE:
        gray = (r + g + b) / 3.0
    elif mode == _MODE_DESATURATE:
        gray = (max(r, g, b) + min(r, g, b)) / 2.0
    else:
        gray = _luma(r, g, b)
    value = _to_byte(gray)
    return value, value, value


@jit(nopython=True, cache=True)
def _invert(r: int, g: int, b: int) -> tuple[int, int, int]:
    return 255 - r, 255 - g, 255 - b


@jit(nopython=True, cache=True)
def _brightness(r: int, g: int, b: int, offset: float) -> tuple[int, int, int]:
    return _to_byte(r + offset), _to_byte(g + offset), _to_byte(b + offset)


@jit(nopython=True, cache=True)
def _lookup(r: int, g: int, b: int, table) -> tuple[int, int, int]:
    """Map each channel through a 256-entry lookup table."""

    return _to_byte(table[r]), _to_byte(table[g]), _to_byte(table[b])


@jit(nopython=True, cache=True)
def _saturation(r: int, g: int, b: int, table) -> tuple[int, int, int]:
    """Blend every channel against the pixel's luma.

    ``table[i]`` holds ``i * k`` so ``table[1]`` recovers the blend factor.
    """

    gray = _luma(r, g, b) * (1.0 - table[1])
    return _to_byte(gray + table[r]), _to_byte(gray + table[g]), _to_byte(gray + table[b])


@jit(nopython=True, cache=True)
def _vibrance(r: int, g: int, b: int, amount: float) -> tuple[int, int, int]:
    """Boost (or mute) the weaker channels in proportion to the pixel's chroma."""

    peak = max(r, g, b)
    average = (r + g + b) / 3.0
    shift = abs(peak - average) * 2.0 / 255.0 * -amount
    out_r = r + (peak - r) * shift if r != peak else float(r)
    out_g = g + (peak - g) * shift if g != peak else float(g)
    out_b = b + (peak - b) * shift if b != peak else float(b)
    return _to_byte(out_r), _to_byte(out_g), _to_byte(out_b)


@jit(nopython=True, cache=True)
def _grain_noise(x: int, y: int, width: int, height: int) -> float:
    """Return a deterministic pseudo random value in ``[0.0, 1.0)`` for pixel ``(x, y)``."""

    if width <= 0 or height <= 0:
        return 0.5
    u = float(x) / float(max(width - 1, 1))
    v = float(y) / float(max(height - 1, 1))
    # Sine hash: stateless, so every row band reproduces the same field.
    seed = u * 12.9898 + v * 78.233
    noise = math.sin(seed) * 43758.5453
    fraction = noise - math.floor(noise)
    return _clamp(fraction, 0.0, 1.0)


@jit(nopython=True, cache=True)
def _noise(
    r: int,
    g: int,
    b: int,
    amplitude: float,
    x: int,
    y: int,
    width: int,
    height: int,
) -> tuple[int, int, int]:
    """Offset all channels by the same positional noise sample."""

    if amplitude <= 0.0:
        return r, g, b
    delta = (_grain_noise(x, y, width, height) * 2.0 - 1.0) * amplitude
    return _to_byte(r + delta), _to_byte(g + delta), _to_byte(b + delta)


@jit(nopython=True, cache=True)
def _sepia(r: int, g: int, b: int, strength: float) -> tuple[int, int, int]:
    """Blend the pixel toward its sepia-toned version by *strength* in ``[0, 1]``."""

    keep = 1.0 - strength
    sepia_r = SEPIA_MATRIX[0][0] * r + SEPIA_MATRIX[0][1] * g + SEPIA_MATRIX[0][2] * b
    sepia_g = SEPIA_MATRIX[1][0] * r + SEPIA_MATRIX[1][1] * g + SEPIA_MATRIX[1][2] * b
    sepia_b = SEPIA_MATRIX[2][0] * r + SEPIA_MATRIX[2][1] * g + SEPIA_MATRIX[2][2] * b
    return (
        _to_byte(r * keep + sepia_r * strength),
        _to_byte(g * keep + sepia_g * strength),
        _to_byte(b * keep + sepia_b * strength),
    )


@jit(nopython=True, cache=True)
def _hue(r: int, g: int, b: int, degrees: float) -> tuple[int, int, int]:
    """Rotate the pixel's hue by *degrees* in HSV space."""

    red = r / 255.0
    green = g / 255.0
    blue = b / 255.0
    peak = max(red, green, blue)
    low = min(red, green, blue)
    chroma = peak - low
    if chroma <= 0.0:
        return r, g, b

    if peak == red:
        hue = 60.0 * (((green - blue) / chroma) % 6.0)
    elif peak == green:
        hue = 60.0 * ((blue - red) / chroma + 2.0)
    else:
        hue = 60.0 * ((red - green) / chroma + 4.0)
    hue = (hue + degrees) % 360.0
    saturation = chroma / peak
    value = peak

    sector = hue / 60.0
    index = int(math.floor(sector)) % 6
    fraction = sector - math.floor(sector)
    p = value * (1.0 - saturation)
    q = value * (1.0 - saturation * fraction)
    t = value * (1.0 - saturation * (1.0 - fraction))
    if index == 0:
        out_r, out_g, out_b = value, t, p
    elif index == 1:
        out_r, out_g, out_b = q, value, p
    elif index == 2:
        out_r, out_g, out_b = p, value, t
    elif index == 3:
        out_r, out_g, out_b = p, q, value
    elif index == 4:
        out_r, out_g, out_b = t, p, value
    else:
        out_r, out_g, out_b = value, p, q
    return _to_byte(out_r * 255.0), _to_byte(out_g * 255.0), _to_byte(out_b * 255.0)


@jit(nopython=True, cache=True)
def _tint(
    r: int,
    g: int,
    b: int,
    target_r: float,
    target_g: float,
    target_b: float,
    strength: float,
) -> tuple[int, int, int]:
    """Linear blend ``c + (target - c) * strength`` for each channel."""

    return (
        _to_byte(r + (target_r - r) * strength),
        _to_byte(g + (target_g - g) * strength),
        _to_byte(b + (target_b - b) * strength),
    )
