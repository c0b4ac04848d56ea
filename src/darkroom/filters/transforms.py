"""PixelColor level transforms and the static dispatch table.

Each transform is a pure function ``(PixelColor, canonical value, where) ->
PixelColor``.  ``where`` locates the pixel inside its image and only matters
for position dependent filters such as noise.  Alpha is always passed
through untouched.
"""

from __future__ import annotations

from typing import Any, Callable, Iterable, Mapping, NamedTuple

from ..color import PixelColor
from ..models import Filter, FilterKind, TintValue
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


class PixelContext(NamedTuple):
    """Position of a pixel and the size of the image it belongs to."""

    x: int = 0
    y: int = 0
    width: int = 1
    height: int = 1


ORIGIN = PixelContext()

Transform = Callable[[PixelColor, Any, PixelContext], PixelColor]


def black_and_white(pixel: PixelColor, mode: int, where: PixelContext = ORIGIN) -> PixelColor:
    return PixelColor(*_black_and_white(pixel.r, pixel.g, pixel.b, int(mode)), pixel.a)


def invert(pixel: PixelColor, value: Any = None, where: PixelContext = ORIGIN) -> PixelColor:
    return PixelColor(*_invert(pixel.r, pixel.g, pixel.b), pixel.a)


def brightness(pixel: PixelColor, offset: float, where: PixelContext = ORIGIN) -> PixelColor:
    return PixelColor(*_brightness(pixel.r, pixel.g, pixel.b, float(offset)), pixel.a)


def contrast(pixel: PixelColor, table: Any, where: PixelContext = ORIGIN) -> PixelColor:
    return PixelColor(*_lookup(pixel.r, pixel.g, pixel.b, table), pixel.a)


def gamma(pixel: PixelColor, table: Any, where: PixelContext = ORIGIN) -> PixelColor:
    return PixelColor(*_lookup(pixel.r, pixel.g, pixel.b, table), pixel.a)


def saturation(pixel: PixelColor, table: Any, where: PixelContext = ORIGIN) -> PixelColor:
    return PixelColor(*_saturation(pixel.r, pixel.g, pixel.b, table), pixel.a)


def vibrance(pixel: PixelColor, amount: float, where: PixelContext = ORIGIN) -> PixelColor:
    return PixelColor(*_vibrance(pixel.r, pixel.g, pixel.b, float(amount)), pixel.a)


def noise(pixel: PixelColor, amplitude: float, where: PixelContext = ORIGIN) -> PixelColor:
    channels = _noise(
        pixel.r,
        pixel.g,
        pixel.b,
        float(amplitude),
        where.x,
        where.y,
        where.width,
        where.height,
    )
    return PixelColor(*channels, pixel.a)


def sepia(pixel: PixelColor, strength: float, where: PixelContext = ORIGIN) -> PixelColor:
    return PixelColor(*_sepia(pixel.r, pixel.g, pixel.b, float(strength)), pixel.a)


def hue(pixel: PixelColor, degrees: float, where: PixelContext = ORIGIN) -> PixelColor:
    return PixelColor(*_hue(pixel.r, pixel.g, pixel.b, float(degrees)), pixel.a)


def tint(pixel: PixelColor, value: TintValue, where: PixelContext = ORIGIN) -> PixelColor:
    target = value.color
    channels = _tint(
        pixel.r,
        pixel.g,
        pixel.b,
        float(target.r),
        float(target.g),
        float(target.b),
        float(value.strength),
    )
    return PixelColor(*channels, pixel.a)


TRANSFORMS: Mapping[int, Transform] = {
    FilterKind.BLACK_AND_WHITE: black_and_white,
    FilterKind.INVERT: invert,
    FilterKind.CONTRAST: contrast,
    FilterKind.BRIGHTNESS: brightness,
    FilterKind.SATURATION: saturation,
    FilterKind.VIBRANCE: vibrance,
    FilterKind.GAMMA: gamma,
    FilterKind.NOISE: noise,
    FilterKind.SEPIA: sepia,
    FilterKind.HUE: hue,
    FilterKind.TINT: tint,
}
"""Closed mapping from filter kind to transform; unknown kinds are skipped."""


def apply_filter(pixel: PixelColor, item: Filter, where: PixelContext = ORIGIN) -> PixelColor:
    """Apply a single filter; kinds missing from :data:`TRANSFORMS` pass through."""

    transform = TRANSFORMS.get(item.kind)
    if transform is None:
        return pixel
    return transform(pixel, item.value, where)


def apply_chain(
    pixel: PixelColor,
    filters: Iterable[Filter],
    where: PixelContext = ORIGIN,
) -> PixelColor:
    """Fold *filters* into *pixel* strictly in order."""

    for item in filters:
        pixel = apply_filter(pixel, item, where)
    return pixel


__all__ = [
    "ORIGIN",
    "PixelContext",
    "TRANSFORMS",
    "apply_chain",
    "apply_filter",
    "black_and_white",
    "brightness",
    "contrast",
    "gamma",
    "hue",
    "invert",
    "noise",
    "saturation",
    "sepia",
    "tint",
    "vibrance",
]
