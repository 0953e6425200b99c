import pytest

from gamefilm.timeline.format import format_time_ms, parse_time_to_ms, pixels_to_time, snap_to_grid, time_to_pixels


def test_format_time_ms() -> None:
    assert format_time_ms(0) == "0:00"
    assert format_time_ms(65_400) == "1:05"
    assert format_time_ms(3_725_000) == "1:02:05"
    assert format_time_ms(-500) == "0:00"


def test_parse_time_to_ms() -> None:
    assert parse_time_to_ms("1:05") == 65_000
    assert parse_time_to_ms("1:02:05") == 3_725_000
    assert parse_time_to_ms("abc") == 0
    assert parse_time_to_ms("42") == 0


def test_snap_to_grid_rounds_half_up() -> None:
    assert snap_to_grid(1_499) == 1_000
    assert snap_to_grid(1_500) == 2_000
    assert snap_to_grid(12_340, grid_ms=5_000) == 10_000
    with pytest.raises(ValueError):
        snap_to_grid(1_000, grid_ms=0)


def test_pixel_conversion_uses_zoom() -> None:
    assert time_to_pixels(60_000, 1) == 15.0
    assert time_to_pixels(60_000, 4) == 60.0
    assert pixels_to_time(60.0, 4) == 60_000
    with pytest.raises(ValueError):
        pixels_to_time(10.0, 0)
