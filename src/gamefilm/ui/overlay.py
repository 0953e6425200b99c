"""Text and geometry for the player overlays and the timeline ruler."""

from __future__ import annotations

from dataclasses import dataclass

from gamefilm.playback.status import CoverageKind, CoverageStatus, GapReason, TransportStatus
from gamefilm.timeline.format import format_time_ms, time_to_pixels
from gamefilm.timeline.models import CameraLane

SWITCHING_MESSAGE = "Switching camera..."
NO_ASSET_MESSAGE = "Select a video to begin"


@dataclass(slots=True, frozen=True)
class OverlayView:
    title: str
    detail: str = ""
    dismissible: bool = False
    retryable: bool = False


def overlay_for(coverage: CoverageStatus, transport: TransportStatus) -> OverlayView | None:
    """Return the overlay to draw over the player, or None when footage is showing."""
    if transport.load_error is not None:
        return OverlayView(title=transport.load_error, retryable=transport.retryable)
    if coverage.kind is CoverageKind.SWITCHING:
        return OverlayView(title=SWITCHING_MESSAGE)
    if coverage.kind is CoverageKind.COVERED:
        return None
    if coverage.reason is GapReason.NO_ASSET:
        return OverlayView(title=NO_ASSET_MESSAGE)
    return OverlayView(title=_gap_title(coverage), detail=_gap_detail(coverage), dismissible=True)


def _gap_title(coverage: CoverageStatus) -> str:
    at = format_time_ms(coverage.game_time_ms)
    if coverage.reason is GapReason.BEFORE_FOOTAGE:
        return f"This camera has no footage yet at {at}"
    if coverage.reason is GapReason.AFTER_FOOTAGE:
        return f"This camera's footage has ended at {at}"
    return f"No camera footage at {at}"


def _gap_detail(coverage: CoverageStatus) -> str:
    if coverage.reason is GapReason.BEFORE_FOOTAGE and coverage.window_start_ms is not None:
        return f"Footage starts at {format_time_ms(coverage.window_start_ms)}"
    if coverage.reason is GapReason.AFTER_FOOTAGE and coverage.window_end_ms is not None:
        return f"Footage ended at {format_time_ms(coverage.window_end_ms)}"
    if coverage.next_clip_start_ms is not None:
        return f"Next footage at {format_time_ms(coverage.next_clip_start_ms)}"
    return ""


def playhead_ratio(game_time_ms: float, duration_ms: float) -> float:
    if duration_ms <= 0:
        return 0.0
    return min(max(game_time_ms / duration_ms, 0.0), 1.0)


@dataclass(slots=True, frozen=True)
class ClipBlock:
    lane: int
    asset_id: str
    left_px: float
    width_px: float
    active: bool


def clip_blocks(lanes: tuple[CameraLane, ...], zoom_level: float, bound_asset_id: str | None = None) -> list[ClipBlock]:
    blocks: list[ClipBlock] = []
    for lane in lanes:
        for clip in lane.clips:
            blocks.append(
                ClipBlock(
                    lane=lane.lane,
                    asset_id=clip.asset_id,
                    left_px=time_to_pixels(clip.lane_position_ms, zoom_level),
                    width_px=time_to_pixels(clip.duration_ms, zoom_level),
                    active=clip.asset_id == bound_asset_id,
                )
            )
    return blocks


def ruler_ticks(duration_ms: float, interval_ms: int = 60_000) -> list[tuple[int, str]]:
    if interval_ms <= 0:
        raise ValueError("interval_ms must be positive")
    ticks: list[tuple[int, str]] = []
    position = 0
    while position <= duration_ms:
        ticks.append((position, format_time_ms(position)))
        position += interval_ms
    return ticks
