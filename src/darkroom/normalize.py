"""Turn raw user values into the canonical parameters the transforms consume.

Normalisation happens once, when a filter is appended, never per pixel.
Scalar filters are clamped (or, for hue, wrapped) into a documented domain
and stored as a single number.  Contrast, gamma and saturation precompute a
256-entry table indexed by the input channel value.

Out-of-domain numbers clamp to the boundaries listed below.  Values that
cannot be interpreted at all (non-numeric, NaN, infinities, a non-positive
gamma, an unknown mode or a malformed colour) raise
:class:`~darkroom.errors.ValidationError`.
"""

from __future__ import annotations

import math
from numbers import Real
from typing import Any, Callable, Mapping

import numpy as np

from .color import HexColor
from .config import DEFAULT_TINT_STRENGTH
from .errors import ValidationError
from .models import BlackAndWhiteMode, FilterKind, TintValue

BRIGHTNESS_RANGE = (-100.0, 100.0)
CONTRAST_RANGE = (-100.0, 100.0)
SATURATION_RANGE = (-100.0, 100.0)
VIBRANCE_RANGE = (-100.0, 100.0)
NOISE_RANGE = (0.0, 100.0)
SEPIA_RANGE = (0.0, 100.0)
GAMMA_RANGE = (0.1, 10.0)
TINT_STRENGTH_RANGE = (0.0, 1.0)

FULL_SCALE = 255.0
"""Channel units corresponding to 100 percent."""

LUT_SIZE = 256


def _as_number(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, Real):
        raise ValidationError(f"{name} must be a number, got {value!r}")
    number = float(value)
    if not math.isfinite(number):
        raise ValidationError(f"{name} must be finite, got {value!r}")
    return number


def _clamp(value: float, bounds: tuple[float, float]) -> float:
    minimum, maximum = bounds
    return max(minimum, min(maximum, value))


def _round_to_bytes(values: np.ndarray) -> np.ndarray:
    """Round half-up and clamp *values* into ``uint8``."""

    rounded = np.floor(values + 0.5)
    return np.clip(rounded, 0, 255).astype(np.uint8)


def _freeze(table: np.ndarray) -> np.ndarray:
    table.setflags(write=False)
    return table


def normalize_brightness(value: Any) -> float:
    """Return the additive channel offset for a brightness of *value* percent."""

    return _clamp(_as_number("brightness", value), BRIGHTNESS_RANGE) * FULL_SCALE / 100.0


def normalize_contrast(value: Any) -> np.ndarray:
    """Return the contrast lookup table.

    The curve pivots around mid grey with a factor of ``((100 + v) / 100) ** 2``,
    so ``-100`` flattens the image to grey and ``100`` quadruples the slope.
    """

    amount = _clamp(_as_number("contrast", value), CONTRAST_RANGE)
    factor = ((100.0 + amount) / 100.0) ** 2
    channel = np.arange(LUT_SIZE, dtype=np.float64) / 255.0
    return _freeze(_round_to_bytes(((channel - 0.5) * factor + 0.5) * 255.0))


def normalize_saturation(value: Any) -> np.ndarray:
    """Return ``i * k`` for every channel value ``i`` where ``k = 1 + v / 100``.

    The saturation transform blends each channel against the pixel's luma:
    ``luma * (1 - k) + table[c]``.  ``k`` itself is recoverable as ``table[1]``.
    """

    amount = _clamp(_as_number("saturation", value), SATURATION_RANGE)
    factor = 1.0 + amount / 100.0
    return _freeze(np.arange(LUT_SIZE, dtype=np.float64) * factor)


def normalize_vibrance(value: Any) -> float:
    return _clamp(_as_number("vibrance", value), VIBRANCE_RANGE) / 100.0


def normalize_gamma(value: Any) -> np.ndarray:
    """Return the gamma lookup table ``255 * (i / 255) ** (1 / gamma)``.

    Gamma must be positive; positive values are clamped to ``[0.1, 10]``.
    """

    gamma = _as_number("gamma", value)
    if gamma <= 0.0:
        raise ValidationError(f"gamma must be positive, got {value!r}")
    gamma = _clamp(gamma, GAMMA_RANGE)
    channel = np.arange(LUT_SIZE, dtype=np.float64) / 255.0
    return _freeze(_round_to_bytes(np.power(channel, 1.0 / gamma) * 255.0))


def normalize_noise(value: Any) -> float:
    """Return the maximum per-pixel offset, in channel units."""

    return _clamp(_as_number("noise", value), NOISE_RANGE) * FULL_SCALE / 100.0


def normalize_sepia(value: Any) -> float:
    return _clamp(_as_number("sepia", value), SEPIA_RANGE) / 100.0


def normalize_hue(value: Any) -> float:
    """Wrap *value* degrees into ``[0, 360)``."""

    degrees = _as_number("hue", value) % 360.0
    # ``-1e-20 % 360`` rounds to exactly 360.0
    return 0.0 if degrees >= 360.0 else degrees


def normalize_black_and_white(value: Any) -> BlackAndWhiteMode:
    if value is None:
        return BlackAndWhiteMode.REGULAR
    if isinstance(value, BlackAndWhiteMode):
        return value
    if isinstance(value, str):
        try:
            return BlackAndWhiteMode[value.strip().upper()]
        except KeyError:
            raise ValidationError(f"Unknown black and white mode {value!r}") from None
    if isinstance(value, int) and not isinstance(value, bool):
        try:
            return BlackAndWhiteMode(value)
        except ValueError:
            raise ValidationError(f"Unknown black and white mode {value!r}") from None
    raise ValidationError(f"Unknown black and white mode {value!r}")


def normalize_tint(value: Any) -> TintValue:
    """Return the canonical tint.

    *value* is a colour specifier accepted by :meth:`HexColor.coerce`, a
    mapping with ``color`` and optional ``strength`` keys, or a
    :class:`TintValue`.
    """

    if isinstance(value, TintValue):
        color, strength = value.color, value.strength
    elif isinstance(value, Mapping):
        if "color" not in value:
            raise ValidationError("tint mapping requires a 'color' entry")
        color = value["color"]
        strength = value.get("strength", DEFAULT_TINT_STRENGTH)
    else:
        color, strength = value, DEFAULT_TINT_STRENGTH
    return TintValue(
        color=HexColor.coerce(color),
        strength=_clamp(_as_number("tint strength", strength), TINT_STRENGTH_RANGE),
    )


def normalize_invert(value: Any) -> None:
    return None


NORMALIZERS: Mapping[FilterKind, Callable[[Any], Any]] = {
    FilterKind.BLACK_AND_WHITE: normalize_black_and_white,
    FilterKind.INVERT: normalize_invert,
    FilterKind.CONTRAST: normalize_contrast,
    FilterKind.BRIGHTNESS: normalize_brightness,
    FilterKind.SATURATION: normalize_saturation,
    FilterKind.VIBRANCE: normalize_vibrance,
    FilterKind.GAMMA: normalize_gamma,
    FilterKind.NOISE: normalize_noise,
    FilterKind.SEPIA: normalize_sepia,
    FilterKind.HUE: normalize_hue,
    FilterKind.TINT: normalize_tint,
}


def normalize(kind: FilterKind, value: Any) -> Any:
    """Return the canonical parameter of *kind* for the raw *value*."""

    return NORMALIZERS[kind](value)


def _require_scalar(kind: FilterKind, value: Any, bounds: tuple[float, float]) -> None:
    if isinstance(value, bool) or not isinstance(value, Real) or not math.isfinite(value):
        raise ValidationError(f"{kind.name} expects a normalised number, got {value!r}")
    minimum, maximum = bounds
    if not minimum <= value <= maximum:
        raise ValidationError(f"{kind.name} value {value!r} outside [{minimum}, {maximum}]")


def _require_table(kind: FilterKind, value: Any, dtype: type) -> None:
    if not isinstance(value, np.ndarray) or value.shape != (LUT_SIZE,) or value.dtype != dtype:
        raise ValidationError(
            f"{kind.name} expects a {LUT_SIZE}-entry {np.dtype(dtype).name} table, got {value!r}"
        )


def check_canonical(kind: FilterKind, value: Any) -> None:
    """Raise :class:`ValidationError` unless *value* is a canonical *kind* parameter.

    Used for filter records built by hand rather than through
    :meth:`Filter.create`, so a malformed record is refused before it can
    reach the pixel engine.
    """

    if kind in (FilterKind.CONTRAST, FilterKind.GAMMA):
        _require_table(kind, value, np.uint8)
    elif kind == FilterKind.SATURATION:
        _require_table(kind, value, np.float64)
    elif kind == FilterKind.BRIGHTNESS:
        _require_scalar(kind, value, (-FULL_SCALE, FULL_SCALE))
    elif kind == FilterKind.NOISE:
        _require_scalar(kind, value, (0.0, FULL_SCALE))
    elif kind == FilterKind.VIBRANCE:
        _require_scalar(kind, value, (-1.0, 1.0))
    elif kind == FilterKind.SEPIA:
        _require_scalar(kind, value, (0.0, 1.0))
    elif kind == FilterKind.HUE:
        _require_scalar(kind, value, (0.0, 360.0))
        if value == 360.0:
            raise ValidationError("HUE value must be below 360")
    elif kind == FilterKind.BLACK_AND_WHITE:
        if not isinstance(value, BlackAndWhiteMode):
            raise ValidationError(f"BLACK_AND_WHITE expects a BlackAndWhiteMode, got {value!r}")
    elif kind == FilterKind.TINT:
        if not isinstance(value, TintValue) or not isinstance(value.color, HexColor):
            raise ValidationError(f"TINT expects a TintValue, got {value!r}")
        _require_scalar(kind, value.strength, TINT_STRENGTH_RANGE)


__all__ = [
    "NORMALIZERS",
    "check_canonical",
    "normalize",
    "normalize_black_and_white",
    "normalize_brightness",
    "normalize_contrast",
    "normalize_gamma",
    "normalize_hue",
    "normalize_invert",
    "normalize_noise",
    "normalize_saturation",
    "normalize_sepia",
    "normalize_tint",
    "normalize_vibrance",
]
