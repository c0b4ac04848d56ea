"""Pixel processing engine for the Darkroom filter chain.

- algorithms: Numba compiled per-channel colour maths
- transforms: PixelColor level functions and the kind -> transform table
- executors: JIT band kernel and a plain Python reference implementation
- facade: band planning, thread pool and all-or-nothing commit
"""

from __future__ import annotations

from .facade import apply_filters, plan_bands
from .transforms import TRANSFORMS, apply_chain

__all__ = ["TRANSFORMS", "apply_chain", "apply_filters", "plan_bands"]
