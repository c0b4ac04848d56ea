"""Filter records queued on a :class:`~darkroom.session.Darkroom` session."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Any

from .color import HexColor
from .errors import ValidationError


class FilterKind(IntEnum):
    """Closed set of filters understood by the pixel engine.

    The integer codes are what the JIT kernel dispatches on, so existing
    values must never be renumbered.
    """

    BLACK_AND_WHITE = 0
    INVERT = 1
    CONTRAST = 2
    BRIGHTNESS = 3
    SATURATION = 4
    VIBRANCE = 5
    GAMMA = 6
    NOISE = 7
    SEPIA = 8
    HUE = 9
    TINT = 10


class BlackAndWhiteMode(IntEnum):
    """Grey conversion used by the black-and-white filter."""

    REGULAR = 0
    """Rec. 601 luma: ``0.299 R + 0.587 G + 0.114 B``."""

    AVERAGE = 1
    """Arithmetic mean of the three channels."""

    DESATURATE = 2
    """Midpoint of the brightest and darkest channel."""


@dataclass(frozen=True)
class TintValue:
    """Canonical tint parameter: target colour and blend strength in ``[0, 1]``."""

    color: HexColor
    strength: float


@dataclass(frozen=True, eq=False)
class Filter:
    """Immutable filter request.

    ``value`` holds the canonical, precomputed parameter consumed by the
    transforms (a scalar, a 256-entry table, a mode or a :class:`TintValue`).
    ``raw`` keeps the user supplied value so recipes can be written back out.
    """

    kind: int
    value: Any = None
    raw: Any = None

    @classmethod
    def create(cls, kind: FilterKind | str | int, raw: Any = None) -> Filter:
        """Validate *raw* for *kind* and return the resulting record."""

        from .normalize import normalize

        resolved = resolve_kind(kind)
        return cls(kind=resolved, value=normalize(resolved, raw), raw=raw)

    @property
    def name(self) -> str:
        try:
            return FilterKind(self.kind).name
        except ValueError:
            return f"UNKNOWN({self.kind})"

    def __repr__(self) -> str:
        return f"Filter({self.name}, raw={self.raw!r})"


def resolve_kind(kind: FilterKind | str | int) -> FilterKind:
    """Return *kind* as a :class:`FilterKind`, accepting names and codes."""

    if isinstance(kind, FilterKind):
        return kind
    if isinstance(kind, str):
        try:
            return FilterKind[kind.strip().upper()]
        except KeyError:
            raise ValidationError(f"Unknown filter kind {kind!r}") from None
    try:
        return FilterKind(kind)
    except ValueError:
        raise ValidationError(f"Unknown filter kind {kind!r}") from None


__all__ = ["BlackAndWhiteMode", "Filter", "FilterKind", "TintValue", "resolve_kind"]
