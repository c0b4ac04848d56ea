"""Tests for band planning and the Wash executors."""

import logging

import numpy as np
import pytest

from darkroom import Filter, WashOptions, get_logger
from darkroom.filters import apply_filters, plan_bands
from darkroom.filters.jit_executor import pack_filters


def _full_chain(with_noise=True):
    chain = [
        Filter.create("contrast", 35),
        Filter.create("brightness", -12),
        Filter.create("saturation", 40),
        Filter.create("vibrance", 60),
        Filter.create("gamma", 1.8),
        Filter.create("sepia", 30),
        Filter.create("hue", 75),
        Filter.create("tint", {"color": "#3366CC", "strength": 0.3}),
        Filter.create("black_and_white", "desaturate"),
        Filter.create("invert"),
    ]
    if with_noise:
        chain.insert(3, Filter.create("noise", 25))
    return chain


def _wash(image, chain, **options):
    copy = image.clone()
    apply_filters(copy, chain, WashOptions(**options))
    return copy.to_rgba()


@pytest.mark.parametrize(
    "height, workers, min_rows",
    [(1, 8, 16), (10, 4, 1), (100, 8, 16), (37, 3, 5), (64, 64, 1)],
)
def test_bands_cover_every_row_once(height, workers, min_rows):
    bands = plan_bands(height, workers, min_rows)
    assert 1 <= len(bands) <= workers
    assert bands[0][0] == 0
    assert bands[-1][1] == height
    for (_, stop), (start, _) in zip(bands, bands[1:]):
        assert stop == start
    if height >= min_rows:
        assert all(stop - start >= min_rows for start, stop in bands)


def test_band_sizes():
    assert plan_bands(0, 4, 1) == []
    assert plan_bands(5, 8, 16) == [(0, 5)]
    assert plan_bands(10, 4, 1) == [(0, 3), (3, 6), (6, 8), (8, 10)]
    assert [stop - start for start, stop in plan_bands(100, 8, 16)] == [17, 17, 17, 17, 16, 16]


def test_pack_filters_layout():
    chain = [Filter.create("gamma", 2.0), Filter.create("tint", "#102030"), Filter(kind=42)]
    packed = pack_filters(chain)
    assert len(packed) == 3
    assert list(packed.kinds) == [6, 10, 42]
    assert packed.tables[0, 64] == 128.0
    assert list(packed.colors[1]) == [16.0, 32.0, 48.0]
    assert packed.scalars[1] == 0.5


def test_result_is_independent_of_partitioning(noisy_image):
    chain = _full_chain()
    single = _wash(noisy_image, chain, max_workers=1)
    parallel = _wash(noisy_image, chain, max_workers=6, min_rows_per_band=1)
    assert np.array_equal(single, parallel)


def test_python_executor_partitioning(noisy_image):
    chain = _full_chain()
    single = _wash(noisy_image, chain, max_workers=1, executor="python")
    parallel = _wash(noisy_image, chain, max_workers=4, min_rows_per_band=2, executor="python")
    assert np.array_equal(single, parallel)


def test_jit_and_python_executors_agree(noisy_image):
    chain = _full_chain(with_noise=False)
    jit = _wash(noisy_image, chain, executor="jit")
    python = _wash(noisy_image, chain, executor="python")
    assert np.array_equal(jit, python)


def test_alpha_survives_the_whole_chain(noisy_image):
    result = _wash(noisy_image, _full_chain())
    assert np.array_equal(result[..., 3], noisy_image.to_rgba()[..., 3])


def test_empty_chain_leaves_pixels(noisy_image):
    assert np.array_equal(_wash(noisy_image, []), noisy_image.to_rgba())


def test_failed_band_leaves_image_untouched(noisy_image, monkeypatch):
    from darkroom.filters import facade

    def broken(buffer, width, height, bytes_per_line, row_start, row_stop, chain):
        buffer[row_start * bytes_per_line : row_stop * bytes_per_line] = 7
        if row_start > 0:
            raise RuntimeError("band failed")

    monkeypatch.setattr(facade, "wash_band_jit", broken)
    target = noisy_image.clone()
    with pytest.raises(RuntimeError):
        apply_filters(target, [Filter.create("invert")], WashOptions(max_workers=4, min_rows_per_band=1))
    assert not target.is_locked
    assert np.array_equal(target.to_rgba(), noisy_image.to_rgba())


def test_invalid_executor_is_rejected():
    with pytest.raises(ValueError):
        WashOptions(executor="gpu")
    with pytest.raises(ValueError):
        WashOptions(max_workers=0)


def test_options_from_env(monkeypatch):
    monkeypatch.setenv("DARKROOM_MAX_WORKERS", "3")
    monkeypatch.setenv("DARKROOM_EXECUTOR", "python")
    options = WashOptions.from_env()
    assert options.max_workers == 3
    assert options.executor == "python"


def test_unknown_kinds_are_logged_and_skipped(noisy_image, caplog):
    caplog.set_level(logging.DEBUG, logger="darkroom")
    target = noisy_image.clone()
    apply_filters(target, [Filter(kind=77)])
    assert np.array_equal(target.to_rgba(), noisy_image.to_rgba())
    assert any("unknown kinds" in record.getMessage() for record in caplog.records)


def test_package_logger_is_shared():
    logger = get_logger()
    assert logger is get_logger()
    assert logger.name == "darkroom"
    assert get_logger("filters").name == "darkroom.filters"
