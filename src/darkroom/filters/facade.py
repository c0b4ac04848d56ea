"""Run a filter chain over every pixel of a :class:`Negative`.

This is the entry point used by :class:`~darkroom.session.Darkroom`.  It
selects the executor, splits the image into row bands and drives the bands
through a thread pool.  Results are produced in a scratch copy of the
buffer and only committed once every band succeeded, so a failing Wash
leaves the image untouched.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from functools import partial
from typing import TYPE_CHECKING, Callable, Iterable

import numpy as np

from ..config import WashOptions
from ..models import Filter
from .fallback_executor import wash_band_python
from .jit_executor import pack_filters, wash_band_jit
from .transforms import TRANSFORMS

if TYPE_CHECKING:  # pragma: no cover - import for typing only
    from ..negative import Negative

_LOGGER = logging.getLogger(__name__)

BandRunner = Callable[[np.ndarray, int, int, int, int, int], None]


def plan_bands(height: int, max_workers: int, min_rows_per_band: int) -> list[tuple[int, int]]:
    """Split ``height`` rows into at most ``max_workers`` contiguous bands.

    Bands are never thinner than ``min_rows_per_band`` unless the image
    itself is smaller, in which case it forms a single band.  Band heights
    differ by at most one row and the result covers every row exactly once.
    """

    if height <= 0:
        return []
    band_count = max(1, min(max_workers, height // min_rows_per_band))
    base, extra = divmod(height, band_count)
    bands = []
    start = 0
    for index in range(band_count):
        stop = start + base + (1 if index < extra else 0)
        bands.append((start, stop))
        start = stop
    return bands


def _run_bands(
    runner: BandRunner,
    buffer: np.ndarray,
    width: int,
    height: int,
    bytes_per_line: int,
    bands: list[tuple[int, int]],
) -> None:
    if len(bands) <= 1:
        for start, stop in bands:
            runner(buffer, width, height, bytes_per_line, start, stop)
        return

    with ThreadPoolExecutor(max_workers=len(bands), thread_name_prefix="darkroom-wash") as pool:
        futures = [
            pool.submit(runner, buffer, width, height, bytes_per_line, start, stop)
            for start, stop in bands
        ]
        # ``result`` re-raises the first band failure; the pool still joins
        # the remaining bands before the exception leaves this block.
        for future in futures:
            future.result()


def apply_filters(
    negative: Negative,
    filters: Iterable[Filter],
    options: WashOptions | None = None,
) -> Negative:
    """Apply *filters* in order to every pixel of *negative* in-place.

    Returns *negative* for convenience.  Filter kinds without a transform are
    skipped.  Raises :class:`~darkroom.errors.ResourceError` when the buffer
    cannot be locked; any failure leaves the pixels unchanged.
    """

    options = options or WashOptions()
    snapshot = tuple(filters)
    width = negative.width
    height = negative.height
    bytes_per_line = negative.bytes_per_line

    unknown = [item.kind for item in snapshot if item.kind not in TRANSFORMS]
    if unknown:
        _LOGGER.debug("Skipping filters with unknown kinds %s", unknown)
    if len(unknown) == len(snapshot):
        return negative

    runner: BandRunner
    if options.executor == "jit":
        runner = partial(wash_band_jit, chain=pack_filters(snapshot))
    else:
        runner = partial(wash_band_python, filters=snapshot)

    bands = plan_bands(height, options.max_workers, options.min_rows_per_band)
    started = time.perf_counter()
    with negative.lock_bits() as buffer:
        scratch = buffer.copy()
        _run_bands(runner, scratch, width, height, bytes_per_line, bands)
        buffer[:] = scratch
    elapsed_ms = (time.perf_counter() - started) * 1000.0
    _LOGGER.debug(
        "Applied %d filters to %dx%d image in %d bands (%s) in %.2fms",
        len(snapshot),
        width,
        height,
        len(bands),
        options.executor,
        elapsed_ms,
    )
    return negative


__all__ = ["apply_filters", "plan_bands"]
