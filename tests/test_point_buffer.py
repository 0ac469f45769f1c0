from __future__ import annotations

import numpy as np

from conftest import RecordingSurface
from osc_display.core.point_buffer import PointBuffer


def test_clear_then_tick_draws_nothing() -> None:
    buffer = PointBuffer(16, 8)
    buffer.accumulate([(3, 3)], normalized=False)
    surface = RecordingSurface(16, 8)

    buffer.clear()
    drawn = buffer.render_tick(surface)

    assert drawn == 0
    assert surface.calls == []
    assert not buffer.grid.any()


def test_point_fades_after_persistence_ticks() -> None:
    buffer = PointBuffer(16, 8)
    buffer.set_persistence(3)
    buffer.accumulate([(4, 5)], normalized=False)
    surface = RecordingSurface(16, 8)

    for _ in range(4):
        buffer.render_tick(surface)

    assert surface.pixels() == [(4, 5)] * 3
    assert buffer.live_cells == 0


def test_normalized_points_map_to_surface_edges() -> None:
    buffer = PointBuffer(128, 64)

    assert buffer.to_pixel(0.0, 0.0, normalized=True) == (0, 0)
    assert buffer.to_pixel(1.0, 1.0, normalized=True) == (127, 63)
    assert buffer.to_pixel(0.5, 0.5, normalized=True) == (64, 32)


def test_brush_stamps_square_and_clips_at_edges() -> None:
    buffer = PointBuffer(16, 8)
    buffer.set_brush_size(3)
    buffer.set_persistence(2)

    buffer.accumulate([(5, 4)], normalized=False)
    assert buffer.live_cells == 9
    assert buffer.grid[3:6, 4:7].tolist() == [[2, 2, 2]] * 3

    buffer.clear()
    buffer.accumulate([(0, 0)], normalized=False)
    assert buffer.live_cells == 4


def test_out_of_range_points_are_skipped_not_fatal() -> None:
    buffer = PointBuffer(16, 8)

    stamped = buffer.accumulate([(2.0, 0.5), (0.5, 0.5), (-0.1, 0.0)], normalized=True)

    assert stamped == 1
    assert buffer.live_cells == 1


def test_non_finite_points_are_skipped() -> None:
    buffer = PointBuffer(16, 8)

    stamped = buffer.accumulate([(float("nan"), 1), (1, 1)], normalized=False)

    assert stamped == 1


def test_parameters_clamp_to_one() -> None:
    buffer = PointBuffer(16, 8)

    assert buffer.set_persistence(0) == 1
    assert buffer.set_persistence(-5) == 1
    assert buffer.set_brush_size(0.4) == 1
    assert buffer.set_persistence(4.7) == 4


def test_restamping_resets_counter_to_persistence() -> None:
    buffer = PointBuffer(4, 4)
    buffer.set_persistence(5)
    buffer.accumulate([(1, 1)], normalized=False)
    buffer.render_tick(RecordingSurface(4, 4))

    buffer.set_persistence(2)
    buffer.accumulate([(1, 1)], normalized=False)

    assert buffer.grid[1, 1] == 2
    assert buffer.grid.dtype == np.uint16


def test_negative_half_pixel_rounds_off_surface() -> None:
    buffer = PointBuffer(3, 3)

    assert buffer.to_pixel(-0.25, 0.25, normalized=True) == (-1, 1)
    assert buffer.to_pixel(-0.2, 0.0, normalized=True) == (0, 0)
    assert buffer.accumulate([(-0.25, 0.5)], normalized=True) == 0
    assert buffer.live_cells == 0
