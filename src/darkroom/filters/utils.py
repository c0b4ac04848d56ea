"""Raw access to the pixels of a 32-bit ``QImage``."""

from __future__ import annotations

from PySide6.QtGui import QImage

BYTES_PER_PIXEL = 4

# Physical byte order of ``QImage.Format_ARGB32`` on little-endian hosts.
OFFSET_B = 0
OFFSET_G = 1
OFFSET_R = 2
OFFSET_A = 3


def _resolve_pixel_buffer(image: QImage) -> tuple[memoryview, object]:
    """Return a writable byte view over *image* and the object owning it.

    The owner must stay referenced while the view is in use.  Releasing it
    lets Qt detach or free the pixel data under the view.
    """

    expected_size = image.bytesPerLine() * image.height()
    owner = image.bits()
    view = memoryview(owner)
    if view.readonly:
        raise BufferError("QImage returned a read-only pixel buffer")
    if view.format != "B" or view.ndim != 1:
        view = view.cast("B")
    if view.nbytes < expected_size:
        raise BufferError(
            f"QImage pixel buffer holds {view.nbytes} bytes, expected {expected_size}"
        )
    return view[:expected_size], owner


__all__ = [
    "BYTES_PER_PIXEL",
    "OFFSET_A",
    "OFFSET_B",
    "OFFSET_G",
    "OFFSET_R",
    "_resolve_pixel_buffer",
]
