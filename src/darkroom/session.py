"""The Darkroom session: a fluent filter builder bound to one image."""

from __future__ import annotations

import asyncio
import logging
import threading
import uuid
from functools import partial
from typing import Any, Iterable

from .config import DEFAULT_TINT_STRENGTH, WashOptions
from .errors import UseAfterDisposeError, ValidationError
from .filters import apply_filters
from .models import BlackAndWhiteMode, Filter, FilterKind
from .negative import Negative
from .normalize import check_canonical, normalize_tint

_LOGGER = logging.getLogger(__name__)


class Darkroom:
    """Queue colour filters against an image and develop them with :meth:`wash`.

    The session owns the original :class:`Negative`, which it never writes
    to, and a working clone that only :meth:`wash` mutates.  Every builder
    method validates its value immediately, appends one immutable
    :class:`Filter` and returns the session so calls can be chained::

        result = Darkroom(negative).contrast(20).tint("#FF8800").wash()

    Builder calls never touch pixels.  After :meth:`dispose` every method
    raises :class:`UseAfterDisposeError`.
    """

    def __init__(self, image: Negative, *, options: WashOptions | None = None) -> None:
        if image.is_disposed:
            raise UseAfterDisposeError("Cannot open a Darkroom on a disposed Negative")
        self.uuid = uuid.uuid4()
        self._options = options or WashOptions()
        self._original = image
        self._working: Negative | None = None
        self._filters: list[Filter] = []
        self._lock = threading.RLock()
        self._disposed = False
        self.reset()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------
    @property
    def original(self) -> Negative:
        self._ensure_alive()
        return self._original

    @property
    def working(self) -> Negative:
        """The image the next :meth:`wash` will develop."""

        self._ensure_alive()
        return self._working

    @property
    def filters(self) -> tuple[Filter, ...]:
        """Snapshot of the queued filters, in application order."""

        self._ensure_alive()
        with self._lock:
            return tuple(self._filters)

    @property
    def options(self) -> WashOptions:
        return self._options

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    # ------------------------------------------------------------------
    # Builder
    # ------------------------------------------------------------------
    def black_and_white(self, mode: BlackAndWhiteMode | str | int = BlackAndWhiteMode.REGULAR) -> Darkroom:
        return self._append(FilterKind.BLACK_AND_WHITE, mode)

    def invert(self) -> Darkroom:
        return self._append(FilterKind.INVERT, None)

    def contrast(self, value: float) -> Darkroom:
        """Steepen (positive) or flatten (negative) tones; ``value`` in ``[-100, 100]``."""

        return self._append(FilterKind.CONTRAST, value)

    def brightness(self, value: float) -> Darkroom:
        """Shift every channel by ``value`` percent of full scale, ``[-100, 100]``."""

        return self._append(FilterKind.BRIGHTNESS, value)

    def saturation(self, value: float) -> Darkroom:
        """Scale chroma; ``-100`` is greyscale, ``100`` doubles it."""

        return self._append(FilterKind.SATURATION, value)

    def vibrance(self, value: float) -> Darkroom:
        return self._append(FilterKind.VIBRANCE, value)

    def gamma(self, value: float) -> Darkroom:
        """Apply ``out = in ** (1 / value)``; ``value`` must be positive."""

        return self._append(FilterKind.GAMMA, value)

    def noise(self, value: float) -> Darkroom:
        return self._append(FilterKind.NOISE, value)

    def sepia(self, value: float = 100) -> Darkroom:
        return self._append(FilterKind.SEPIA, value)

    def hue(self, value: float) -> Darkroom:
        """Rotate hue by ``value`` degrees (wrapped modulo 360)."""

        return self._append(FilterKind.HUE, value)

    def tint(self, color: Any, strength: float = DEFAULT_TINT_STRENGTH) -> Darkroom:
        """Blend toward *color* by *strength* in ``[0, 1]``.

        *color* may be a ``#RRGGBB`` string, an ``(r, g, b)`` byte triple, a
        ``QColor`` or a :class:`~darkroom.color.HexColor`.
        """

        self._ensure_alive()
        tint = normalize_tint({"color": color, "strength": strength})
        raw = {"color": tint.color.to_hex(), "strength": tint.strength}
        return self._push(Filter(kind=FilterKind.TINT, value=tint, raw=raw))

    def batch(self, filters: Iterable[Filter]) -> Darkroom:
        """Append pre-built *filters* in order.

        The whole batch is rejected, and nothing appended, if any item is not
        a :class:`Filter` or a known kind carries a value that is not in the
        form :meth:`Filter.create` produces.  Unknown kinds are accepted and
        skipped by :meth:`wash`.
        """

        self._ensure_alive()
        items = list(filters)
        for position, item in enumerate(items):
            if not isinstance(item, Filter):
                raise ValidationError(
                    f"batch item {position} is {type(item).__name__}, expected Filter"
                )
            try:
                kind = FilterKind(item.kind)
            except ValueError:
                continue
            try:
                check_canonical(kind, item.value)
            except ValidationError as exc:
                raise ValidationError(f"batch item {position}: {exc}") from exc
        with self._lock:
            self._filters.extend(items)
        return self

    def reset(self) -> Darkroom:
        """Drop queued filters and rebuild the working image from the original."""

        self._ensure_alive()
        with self._lock:
            self._working = self._original.clone()
            self._filters.clear()
        _LOGGER.debug("Darkroom %s reset", self.uuid)
        return self

    # ------------------------------------------------------------------
    # Development
    # ------------------------------------------------------------------
    def wash(self, reset_image: bool = True) -> Negative:
        """Apply every queued filter to every pixel of the working image.

        Returns the developed image.  With ``reset_image`` (the default) the
        session is reset afterwards, even on failure, so the returned image
        is detached from the session and the filter queue is empty.  With
        ``reset_image=False`` the developed image becomes the baseline for
        the next Wash and the queue is kept.
        """

        self._ensure_alive()
        with self._lock:
            snapshot = tuple(self._filters)
            target = self._working
        if target is None:
            raise UseAfterDisposeError(f"Darkroom {self.uuid} has been disposed")
        try:
            _LOGGER.debug("Darkroom %s washing %d filters", self.uuid, len(snapshot))
            apply_filters(target, snapshot, self._options)
            return target
        finally:
            if reset_image and not self._disposed:
                self.reset()

    async def wash_async(self, reset_image: bool = True) -> Negative:
        """Run :meth:`wash` on the event loop's default executor."""

        self._ensure_alive()
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, partial(self.wash, reset_image))

    def dispose(self) -> None:
        """Release the working image and the filter queue for good."""

        if self._disposed:
            return
        with self._lock:
            working, self._working = self._working, None
            self._filters.clear()
            self._disposed = True
        # An in-flight Wash still holds the buffer lock; leave that image to
        # the garbage collector.
        if working is not None and not working.is_locked:
            working.dispose()
        _LOGGER.debug("Darkroom %s disposed", self.uuid)

    def __enter__(self) -> Darkroom:
        self._ensure_alive()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.dispose()

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _append(self, kind: FilterKind, raw: Any) -> Darkroom:
        self._ensure_alive()
        return self._push(Filter.create(kind, raw))

    def _push(self, item: Filter) -> Darkroom:
        self._ensure_alive()
        with self._lock:
            self._filters.append(item)
        return self

    def _ensure_alive(self) -> None:
        if self._disposed:
            raise UseAfterDisposeError(f"Darkroom {self.uuid} has been disposed")

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else f"{len(self._filters)} filters"
        return f"Darkroom({self.uuid}, {state})"


__all__ = ["Darkroom"]
