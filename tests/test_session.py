"""Tests for the Darkroom session: builder, Wash, Reset and Dispose."""

import asyncio

import numpy as np
import pytest
from PySide6.QtGui import QColor

from darkroom import (
    BlackAndWhiteMode,
    Darkroom,
    Filter,
    FilterKind,
    Negative,
    PixelColor,
    ResourceError,
    UseAfterDisposeError,
    ValidationError,
    WashOptions,
)


def test_white_image_inverts_to_black(solid):
    room = Darkroom(solid((255, 255, 255, 255)))
    result = room.invert().wash()
    assert np.all(result.to_rgba() == [0, 0, 0, 255])


def test_tint_red_on_green(solid):
    result = Darkroom(solid((0, 255, 0, 255), 1, 1)).tint("#FF0000").wash()
    assert result.pixel(0, 0) == PixelColor(128, 128, 0, 255)


def test_reset_without_wash_restores_everything(noisy_image):
    room = Darkroom(noisy_image)
    room.contrast(10).sepia().hue(45)
    assert len(room.filters) == 3
    room.reset()
    assert room.filters == ()
    assert np.array_equal(room.working.to_rgba(), noisy_image.to_rgba())


def test_double_invert_is_identity(noisy_image):
    result = Darkroom(noisy_image).invert().invert().wash()
    assert np.array_equal(result.to_rgba(), noisy_image.to_rgba())


def test_order_matters(solid):
    image = solid((0, 255, 0, 255), 1, 1)
    tint_first = Darkroom(image).tint("#FF0000").invert().wash()
    invert_first = Darkroom(image).invert().tint("#FF0000").wash()
    assert tint_first.pixel(0, 0) == PixelColor(127, 127, 255, 255)
    assert invert_first.pixel(0, 0) == PixelColor(255, 0, 128, 255)


def test_black_and_white_regular_boundary(solid):
    result = Darkroom(solid((10, 20, 30, 255), 1, 1)).black_and_white().wash()
    assert result.pixel(0, 0) == PixelColor(18, 18, 18, 255)


def test_wash_never_alters_original(noisy_image):
    before = noisy_image.to_rgba()
    room = Darkroom(noisy_image)
    room.gamma(2.2).noise(50).saturation(-40).wash()
    assert np.array_equal(noisy_image.to_rgba(), before)
    room.brightness(30).wash(reset_image=False)
    room.reset()
    assert np.array_equal(room.working.to_rgba(), before)


def test_wash_resets_by_default(noisy_image):
    room = Darkroom(noisy_image)
    washed = room.invert().wash()
    assert room.filters == ()
    assert room.working is not washed
    assert np.array_equal(room.working.to_rgba(), noisy_image.to_rgba())


def test_wash_without_reset_keeps_baseline_and_queue(solid):
    room = Darkroom(solid((255, 255, 255, 255)))
    room.invert()
    first = room.wash(reset_image=False)
    assert first.pixel(0, 0) == PixelColor(0, 0, 0, 255)
    assert len(room.filters) == 1
    second = room.wash(reset_image=False)
    assert second is first
    assert second.pixel(0, 0) == PixelColor(255, 255, 255, 255)


def test_sync_and_parallel_sessions_match(noisy_image):
    def develop(options):
        room = Darkroom(noisy_image, options=options)
        room.contrast(20).noise(30).hue(200).vibrance(-50)
        return room.wash().to_rgba()

    single = develop(WashOptions(max_workers=1))
    parallel = develop(WashOptions(max_workers=8, min_rows_per_band=1))
    assert np.array_equal(single, parallel)


def test_async_wash_matches_sync(noisy_image):
    sync = Darkroom(noisy_image).sepia(60).gamma(0.7).wash().to_rgba()

    async def develop():
        return await Darkroom(noisy_image).sepia(60).gamma(0.7).wash_async()

    result = asyncio.run(develop())
    assert np.array_equal(result.to_rgba(), sync)


def test_tint_inputs_converge():
    image_room = Darkroom(Negative.blank(1, 1))
    image_room.tint("#ff8000").tint((255, 128, 0)).tint(QColor(255, 128, 0))
    values = [item.value for item in image_room.filters]
    assert values[0] == values[1] == values[2]
    assert all(item.kind is FilterKind.TINT for item in image_room.filters)


@pytest.mark.parametrize(
    "call",
    [
        lambda room: room.tint("#12345"),
        lambda room: room.tint((256, 0, 0)),
        lambda room: room.gamma(0),
        lambda room: room.contrast("high"),
        lambda room: room.black_and_white("neon"),
    ],
)
def test_invalid_values_fail_at_append_time(solid, call):
    room = Darkroom(solid((1, 2, 3)))
    room.invert()
    with pytest.raises(ValidationError):
        call(room)
    assert [item.kind for item in room.filters] == [FilterKind.INVERT]


def test_batch_appends_in_order(solid):
    room = Darkroom(solid((0, 255, 0, 255), 1, 1))
    room.batch([Filter.create("tint", "#FF0000"), Filter.create("invert")])
    assert [item.kind for item in room.filters] == [FilterKind.TINT, FilterKind.INVERT]
    assert room.wash().pixel(0, 0) == PixelColor(127, 127, 255, 255)


def test_batch_rejects_foreign_items_atomically(solid):
    room = Darkroom(solid((0, 0, 0)))
    with pytest.raises(ValidationError):
        room.batch([Filter.create("invert"), "invert"])
    assert room.filters == ()


def test_unknown_filter_kind_is_a_no_op(noisy_image):
    room = Darkroom(noisy_image)
    room.batch([Filter(kind=99), Filter.create("invert"), Filter(kind=-3)])
    result = room.wash()
    expected = noisy_image.to_rgba()
    expected[..., :3] = 255 - expected[..., :3]
    assert np.array_equal(result.to_rgba(), expected)


def test_only_unknown_kinds_leave_image_untouched(noisy_image):
    result = Darkroom(noisy_image).batch([Filter(kind=99)]).wash()
    assert np.array_equal(result.to_rgba(), noisy_image.to_rgba())


def test_builder_methods_chain(solid):
    room = Darkroom(solid((1, 2, 3)))
    returned = (
        room.black_and_white(BlackAndWhiteMode.AVERAGE)
        .invert()
        .contrast(1)
        .brightness(1)
        .saturation(1)
        .vibrance(1)
        .gamma(1)
        .noise(1)
        .sepia(1)
        .hue(1)
        .tint("#000000")
    )
    assert returned is room
    assert [item.kind for item in room.filters] == list(FilterKind)


def test_filters_snapshot_is_immutable(solid):
    room = Darkroom(solid((1, 2, 3)))
    snapshot = room.invert().filters
    room.sepia()
    assert len(snapshot) == 1
    with pytest.raises(AttributeError):
        snapshot[0].kind = FilterKind.HUE


def test_wash_on_locked_buffer_raises_and_resets(solid):
    room = Darkroom(solid((9, 9, 9)))
    room.invert()
    working = room.working
    with working.lock_bits():
        with pytest.raises(ResourceError):
            room.wash()
    assert not working.is_locked
    assert room.filters == ()
    assert room.working.pixel(0, 0) == PixelColor(9, 9, 9, 255)


def test_failed_wash_discards_partial_rows(noisy_image, monkeypatch):
    from darkroom.filters import facade

    def broken(buffer, width, height, bytes_per_line, row_start, row_stop, chain):
        buffer[row_start * bytes_per_line : row_stop * bytes_per_line] = 0
        raise RuntimeError("worker crashed")

    monkeypatch.setattr(facade, "wash_band_jit", broken)
    room = Darkroom(noisy_image, options=WashOptions(executor="jit"))
    room.invert()
    working = room.working
    with pytest.raises(RuntimeError):
        room.wash(reset_image=False)
    assert np.array_equal(working.to_rgba(), noisy_image.to_rgba())
    assert len(room.filters) == 1


def test_dispose_makes_session_unusable(solid):
    room = Darkroom(solid((1, 2, 3)))
    working = room.working
    room.invert()
    room.dispose()
    room.dispose()
    assert room.is_disposed
    assert working.is_disposed
    for call in (
        lambda: room.invert(),
        lambda: room.tint("#FFFFFF"),
        lambda: room.batch([]),
        lambda: room.reset(),
        lambda: room.wash(),
        lambda: room.filters,
        lambda: asyncio.run(room.wash_async()),
    ):
        with pytest.raises(UseAfterDisposeError):
            call()


def test_context_manager_disposes(solid):
    image = solid((1, 2, 3))
    with Darkroom(image) as room:
        room.invert()
    assert room.is_disposed
    assert not image.is_disposed


def test_disposed_image_cannot_open_session(solid):
    image = solid((1, 2, 3))
    image.dispose()
    with pytest.raises(UseAfterDisposeError):
        Darkroom(image)


@pytest.mark.parametrize(
    "item",
    [
        Filter(kind=FilterKind.CONTRAST, value=20),
        Filter(kind=FilterKind.SATURATION, value=np.zeros(256, dtype=np.uint8)),
        Filter(kind=FilterKind.BRIGHTNESS, value="10"),
        Filter(kind=FilterKind.HUE, value=400.0),
        Filter(kind=FilterKind.BLACK_AND_WHITE, value=None),
        Filter(kind=FilterKind.TINT, value="#FF0000"),
    ],
)
def test_batch_rejects_filters_with_raw_values(solid, item):
    room = Darkroom(solid((10, 100, 200)))
    room.invert()
    with pytest.raises(ValidationError):
        room.batch([Filter.create("sepia", 50), item])
    assert [entry.kind for entry in room.filters] == [FilterKind.INVERT]


def test_batch_accepts_hand_built_canonical_filters(solid):
    room = Darkroom(solid((10, 100, 200), 1, 1))
    created = Filter.create("contrast", 20)
    room.batch([Filter(kind=FilterKind.CONTRAST, value=created.value, raw=20)])
    expected = Darkroom(solid((10, 100, 200), 1, 1)).contrast(20).wash()
    assert room.wash().pixel(0, 0) == expected.pixel(0, 0)


def test_filters_added_during_wash_wait_for_the_next_one(noisy_image, monkeypatch):
    from darkroom.filters import facade

    room = Darkroom(noisy_image, options=WashOptions(max_workers=1, executor="jit"))
    run_band = facade.wash_band_jit

    def appending_band(buffer, width, height, bytes_per_line, row_start, row_stop, chain):
        room.invert()
        run_band(buffer, width, height, bytes_per_line, row_start, row_stop, chain)

    monkeypatch.setattr(facade, "wash_band_jit", appending_band)
    room.invert()
    result = room.wash(reset_image=False)

    expected = noisy_image.to_rgba()
    expected[..., :3] = 255 - expected[..., :3]
    assert np.array_equal(result.to_rgba(), expected)
    assert [entry.kind for entry in room.filters] == [FilterKind.INVERT, FilterKind.INVERT]


def test_disposed_session_rejects_tint_before_parsing(solid):
    room = Darkroom(solid((1, 2, 3)))
    room.dispose()
    with pytest.raises(UseAfterDisposeError):
        room.tint("#zz")
