import os
import sys
from pathlib import Path

import numpy as np
import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

# Ensure the project sources are importable without an editable install.
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

# QImage and QColor work without a display, but keep Qt headless regardless.
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from darkroom import Negative  # noqa: E402


@pytest.fixture
def solid():
    """Factory building a solid ``width`` x ``height`` image."""

    def _make(color, width=2, height=2):
        return Negative.solid(width, height, color)

    return _make


@pytest.fixture
def noisy_image():
    """A deterministic random RGBA image with uneven dimensions."""

    rng = np.random.default_rng(1234)
    pixels = rng.integers(0, 256, size=(37, 29, 4), dtype=np.uint8)
    return Negative.from_rgba(pixels)
