"""Game clock formatting and ruler math."""

from __future__ import annotations

SNAP_GRID_MS = 1000
PIXELS_PER_SECOND_BASE = 0.25


def format_time_ms(ms: float) -> str:
    total_seconds = int(max(ms, 0.0) // 1000)
    hours = total_seconds // 3600
    minutes = (total_seconds % 3600) // 60
    seconds = total_seconds % 60
    if hours > 0:
        return f"{hours}:{minutes:02d}:{seconds:02d}"
    return f"{minutes}:{seconds:02d}"


def parse_time_to_ms(value: str) -> int:
    """Parse ``m:ss`` or ``h:mm:ss``. Anything else parses to 0."""
    parts = value.strip().split(":")
    try:
        numbers = [int(part) for part in parts]
    except ValueError:
        return 0
    if len(numbers) == 3:
        return (numbers[0] * 3600 + numbers[1] * 60 + numbers[2]) * 1000
    if len(numbers) == 2:
        return (numbers[0] * 60 + numbers[1]) * 1000
    return 0


def snap_to_grid(time_ms: float, grid_ms: int = SNAP_GRID_MS) -> int:
    if grid_ms <= 0:
        raise ValueError("grid_ms must be positive")
    # half-up, so 1500 snaps to 2000 on a 1000 grid
    return int((time_ms + grid_ms / 2) // grid_ms) * grid_ms


def time_to_pixels(time_ms: float, zoom_level: float) -> float:
    return (time_ms / 1000) * PIXELS_PER_SECOND_BASE * zoom_level


def pixels_to_time(pixels: float, zoom_level: float) -> float:
    if zoom_level <= 0:
        raise ValueError("zoom_level must be positive")
    return (pixels / (PIXELS_PER_SECOND_BASE * zoom_level)) * 1000
