"""Tests for the Negative image container."""

import numpy as np
import pytest
from PySide6.QtGui import QColor, QImage

from darkroom import Negative, PixelColor, ResourceError, UseAfterDisposeError, ValidationError


def test_rgba_round_trip(noisy_image):
    pixels = noisy_image.to_rgba()
    assert pixels.shape == (37, 29, 4)
    assert np.array_equal(Negative.from_rgba(pixels).to_rgba(), pixels)


def test_buffer_uses_bgra_byte_order():
    image = Negative.solid(1, 1, (10, 20, 30, 40))
    with image.lock_bits() as buffer:
        assert list(buffer[:4]) == [30, 20, 10, 40]
    assert image.pixel(0, 0) == PixelColor(10, 20, 30, 40)


def test_foreign_formats_are_converted():
    source = QImage(3, 2, QImage.Format.Format_RGB888)
    source.fill(QColor(1, 2, 3))
    image = Negative(source)
    assert (image.width, image.height) == (3, 2)
    assert image.pixel(2, 1) == PixelColor(1, 2, 3, 255)


def test_null_image_is_rejected():
    with pytest.raises(ValidationError):
        Negative(QImage())


def test_clone_is_independent():
    image = Negative.solid(2, 2, (5, 5, 5))
    copy = image.clone()
    with copy.lock_bits() as buffer:
        buffer[:] = 0
    assert image.pixel(0, 0) == PixelColor(5, 5, 5, 255)
    assert copy.pixel(0, 0) == PixelColor(0, 0, 0, 0)


def test_constructor_does_not_alias_caller_image():
    source = QImage(1, 1, QImage.Format.Format_ARGB32)
    source.fill(QColor(9, 9, 9))
    image = Negative(source)
    with image.lock_bits() as buffer:
        buffer[:] = 255
    assert source.pixelColor(0, 0).red() == 9


def test_lock_is_exclusive_and_released():
    image = Negative.solid(2, 2, (1, 2, 3))
    with image.lock_bits():
        assert image.is_locked
        with pytest.raises(ResourceError):
            with image.lock_bits():
                pass
    assert not image.is_locked


def test_lock_is_released_when_body_raises():
    image = Negative.solid(2, 2, (1, 2, 3))
    with pytest.raises(RuntimeError):
        with image.lock_bits():
            raise RuntimeError("boom")
    assert not image.is_locked


def test_dispose_makes_image_unusable():
    image = Negative.solid(2, 2, (1, 2, 3))
    image.dispose()
    image.dispose()
    assert image.is_disposed
    with pytest.raises(UseAfterDisposeError):
        image.clone()
    with pytest.raises(UseAfterDisposeError):
        _ = image.width
    with pytest.raises(UseAfterDisposeError):
        with image.lock_bits():
            pass


def test_dispose_refused_while_locked():
    image = Negative.solid(2, 2, (1, 2, 3))
    with image.lock_bits():
        with pytest.raises(ResourceError):
            image.dispose()
    assert not image.is_disposed


def test_pixel_bounds():
    image = Negative.blank(2, 2)
    with pytest.raises(IndexError):
        image.pixel(2, 0)


@pytest.mark.parametrize("shape", [(2, 2), (2, 2, 3)])
def test_from_rgba_validates_shape(shape):
    with pytest.raises(ValidationError):
        Negative.from_rgba(np.zeros(shape, dtype=np.uint8))
