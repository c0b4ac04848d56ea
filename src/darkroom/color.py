"""Colour value types shared by the filter pipeline.

``PixelColor`` is the transient per-pixel value the transforms operate on,
while ``HexColor`` is the canonical RGB form every tint specifier converges
on before it is stored in a filter record.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import NamedTuple

from PySide6.QtGui import QColor

from .errors import ValidationError

_HEX_PATTERN = re.compile(r"^#([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$")


class PixelColor(NamedTuple):
    """An 8-bit RGBA colour in canonical channel order."""

    r: int
    g: int
    b: int
    a: int = 255


def _require_byte(name: str, value: object) -> int:
    """Return *value* as an ``int`` in ``[0, 255]`` or raise :class:`ValidationError`."""

    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError(f"{name} must be an integer in 0..255, got {value!r}")
    if not 0 <= value <= 255:
        raise ValidationError(f"{name} must be in 0..255, got {value}")
    return value


@dataclass(frozen=True)
class HexColor:
    """Canonical RGB triple parsed from, and printable as, ``#RRGGBB``."""

    r: int
    g: int
    b: int

    def __post_init__(self) -> None:
        _require_byte("red", self.r)
        _require_byte("green", self.g)
        _require_byte("blue", self.b)

    @classmethod
    def parse(cls, text: str) -> HexColor:
        """Parse a ``#RRGGBB`` string; hex digits are case-insensitive."""

        if not isinstance(text, str):
            raise ValidationError(f"Hex colour must be a string, got {type(text).__name__}")
        match = _HEX_PATTERN.match(text.strip())
        if match is None:
            raise ValidationError(f"Malformed hex colour {text!r}; expected '#RRGGBB'")
        red, green, blue = (int(part, 16) for part in match.groups())
        return cls(red, green, blue)

    @classmethod
    def from_rgb(cls, red: int, green: int, blue: int) -> HexColor:
        return cls.parse(
            "#{:02X}{:02X}{:02X}".format(
                _require_byte("red", red),
                _require_byte("green", green),
                _require_byte("blue", blue),
            )
        )

    @classmethod
    def from_qcolor(cls, color: QColor) -> HexColor:
        if not color.isValid():
            raise ValidationError("QColor is not valid")
        return cls.from_rgb(color.red(), color.green(), color.blue())

    @classmethod
    def coerce(cls, value: object) -> HexColor:
        """Return *value* as :class:`HexColor`.

        Accepts an existing :class:`HexColor`, a ``#RRGGBB`` string, an
        ``(r, g, b)`` byte triple or a :class:`QColor`.
        """

        if isinstance(value, HexColor):
            return value
        if isinstance(value, str):
            return cls.parse(value)
        if isinstance(value, QColor):
            return cls.from_qcolor(value)
        if isinstance(value, (tuple, list)) and len(value) == 3:
            return cls.from_rgb(*value)
        raise ValidationError(f"Unsupported colour specifier {value!r}")

    def to_hex(self) -> str:
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"

    def to_qcolor(self) -> QColor:
        return QColor(self.r, self.g, self.b)

    def __str__(self) -> str:
        return self.to_hex()


__all__ = ["HexColor", "PixelColor"]
