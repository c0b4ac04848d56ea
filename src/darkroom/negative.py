"""Image container wrapping a 32-bit ARGB ``QImage``."""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Iterator, Sequence

import numpy as np
from PySide6.QtGui import QImage

from .color import PixelColor
from .errors import ResourceError, UseAfterDisposeError, ValidationError
from .filters.utils import (
    BYTES_PER_PIXEL,
    OFFSET_A,
    OFFSET_B,
    OFFSET_G,
    OFFSET_R,
    _resolve_pixel_buffer,
)

PIXEL_FORMAT = QImage.Format.Format_ARGB32


class Negative:
    """Own a pixel buffer together with its dimensions.

    The buffer is always ``Format_ARGB32`` (non-premultiplied, 4 bytes per
    pixel stored B, G, R, A) with a ``bytes_per_line`` stride that may include
    padding.  Dimensions are fixed at construction.  Raw access goes through
    :meth:`lock_bits`, which grants one holder at a time.
    """

    def __init__(self, image: QImage) -> None:
        if image.isNull():
            raise ValidationError("Cannot create a Negative from a null QImage")
        if image.format() != PIXEL_FORMAT:
            image = image.convertToFormat(PIXEL_FORMAT)
        else:
            image = image.copy()
        self._image: QImage | None = image
        self._width = image.width()
        self._height = image.height()
        self._lock = threading.Lock()

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------
    @classmethod
    def blank(cls, width: int, height: int) -> Negative:
        """Return a fully transparent black image of ``width`` x ``height``."""

        if width <= 0 or height <= 0:
            raise ValidationError(f"Invalid image size {width}x{height}")
        image = QImage(width, height, PIXEL_FORMAT)
        image.fill(0)
        return cls(image)

    @classmethod
    def solid(cls, width: int, height: int, color: Sequence[int]) -> Negative:
        """Return an image filled with the RGBA (or RGB, opaque) *color*."""

        channels = tuple(int(value) for value in color)
        if len(channels) == 3:
            channels = channels + (255,)
        if len(channels) != 4:
            raise ValidationError(f"Expected an RGB or RGBA colour, got {color!r}")
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[...] = np.asarray(channels, dtype=np.uint8)
        return cls.from_rgba(pixels)

    @classmethod
    def from_rgba(cls, pixels: np.ndarray) -> Negative:
        """Return a new image from an ``(height, width, 4)`` RGBA ``uint8`` array."""

        array = np.asarray(pixels)
        if array.ndim != 3 or array.shape[2] != 4:
            raise ValidationError(f"Expected an (height, width, 4) array, got {array.shape}")
        if array.dtype != np.uint8:
            raise ValidationError(f"Expected uint8 pixels, got {array.dtype}")
        height, width = array.shape[:2]
        negative = cls.blank(width, height)
        with negative.lock_bits() as buffer:
            region = negative._pixel_region(buffer)
            region[..., OFFSET_R] = array[..., 0]
            region[..., OFFSET_G] = array[..., 1]
            region[..., OFFSET_B] = array[..., 2]
            region[..., OFFSET_A] = array[..., 3]
        return negative

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------
    @property
    def width(self) -> int:
        self._require_image()
        return self._width

    @property
    def height(self) -> int:
        self._require_image()
        return self._height

    @property
    def bytes_per_line(self) -> int:
        return self._require_image().bytesPerLine()

    @property
    def is_disposed(self) -> bool:
        return self._image is None

    @property
    def is_locked(self) -> bool:
        return self._lock.locked()

    def to_qimage(self) -> QImage:
        """Return an independent ``QImage`` copy of the pixels."""

        return self._require_image().copy()

    def to_rgba(self) -> np.ndarray:
        """Return a ``(height, width, 4)`` RGBA copy of the pixels."""

        with self.lock_bits() as buffer:
            region = self._pixel_region(buffer)
            return region[..., [OFFSET_R, OFFSET_G, OFFSET_B, OFFSET_A]].copy()

    def pixel(self, x: int, y: int) -> PixelColor:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height}")
        with self.lock_bits() as buffer:
            offset = y * self.bytes_per_line + x * BYTES_PER_PIXEL
            return PixelColor(
                int(buffer[offset + OFFSET_R]),
                int(buffer[offset + OFFSET_G]),
                int(buffer[offset + OFFSET_B]),
                int(buffer[offset + OFFSET_A]),
            )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def clone(self) -> Negative:
        """Return an independent deep copy."""

        return Negative(self._require_image())

    def dispose(self) -> None:
        """Release the pixel buffer.  Disposing twice is harmless."""

        if self._image is None:
            return
        if not self._lock.acquire(blocking=False):
            raise ResourceError("Cannot dispose a Negative while its buffer is locked")
        try:
            self._image = None
        finally:
            self._lock.release()

    @contextmanager
    def lock_bits(self) -> Iterator[np.ndarray]:
        """Yield exclusive, writable access to the raw buffer.

        The yielded array is a flat ``uint8`` view of ``bytes_per_line *
        height`` bytes sharing memory with the image.  It must not be used
        once the ``with`` block exits.  The lock is released on every exit
        path; a second concurrent holder gets :class:`ResourceError`.
        """

        image = self._require_image()
        if not self._lock.acquire(blocking=False):
            raise ResourceError("Pixel buffer is already locked")
        try:
            try:
                # ``owner`` backs ``view`` and stays alive in this frame.
                view, owner = _resolve_pixel_buffer(image)
            except (BufferError, TypeError) as exc:
                raise ResourceError(f"Unable to access pixel buffer: {exc}") from exc
            yield np.frombuffer(view, dtype=np.uint8)
        finally:
            self._lock.release()

    def _pixel_region(self, buffer: np.ndarray) -> np.ndarray:
        """Return the ``(height, width, 4)`` view of *buffer* without stride padding."""

        surface = buffer.reshape((self._height, self.bytes_per_line))
        return surface[:, : self._width * BYTES_PER_PIXEL].reshape(
            (self._height, self._width, BYTES_PER_PIXEL)
        )

    def _require_image(self) -> QImage:
        if self._image is None:
            raise UseAfterDisposeError("Negative has been disposed")
        return self._image

    def __repr__(self) -> str:
        if self._image is None:
            return "Negative(disposed)"
        return f"Negative({self._width}x{self._height})"


__all__ = ["Negative", "PIXEL_FORMAT"]
