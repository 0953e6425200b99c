"""Active-clip resolution: which clip covers a game-time on a lane."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from gamefilm.timeline.models import CameraLane, Clip


@dataclass(slots=True, frozen=True)
class ActiveClipInfo:
    clip: Clip | None
    clip_time_ms: float
    is_in_gap: bool
    next_clip_start_ms: float | None


def find_lane(lanes: Sequence[CameraLane], lane_number: int) -> CameraLane | None:
    for lane in lanes:
        if lane.lane == lane_number:
            return lane
    return None


def resolve_active_clip(lanes: Sequence[CameraLane], lane_number: int, time_ms: float) -> ActiveClipInfo:
    lane = find_lane(lanes, lane_number)
    if lane is None or not lane.clips:
        return ActiveClipInfo(clip=None, clip_time_ms=0.0, is_in_gap=True, next_clip_start_ms=None)

    for clip in lane.clips:
        if clip.contains(time_ms):
            return ActiveClipInfo(
                clip=clip,
                clip_time_ms=time_ms - clip.lane_position_ms,
                is_in_gap=False,
                next_clip_start_ms=None,
            )

    upcoming = [clip.lane_position_ms for clip in lane.clips if clip.lane_position_ms > time_ms]
    return ActiveClipInfo(
        clip=None,
        clip_time_ms=0.0,
        is_in_gap=True,
        next_clip_start_ms=min(upcoming) if upcoming else None,
    )


def find_lane_for_asset(lanes: Sequence[CameraLane], asset_id: str) -> CameraLane | None:
    for lane in lanes:
        if lane.has_asset(asset_id):
            return lane
    return None


def find_clip_for_asset(lanes: Sequence[CameraLane], asset_id: str) -> tuple[CameraLane, Clip] | None:
    for lane in lanes:
        clip = lane.clip_for_asset(asset_id)
        if clip is not None:
            return lane, clip
    return None


def closest_clip(lane: CameraLane, time_ms: float) -> Clip | None:
    """Covering clip if any, else the clip nearest to ``time_ms`` (first wins on ties)."""
    best: Clip | None = None
    best_distance = float("inf")
    for clip in lane.clips:
        distance = clip.distance_to(time_ms)
        if distance == 0.0:
            return clip
        if distance < best_distance:
            best = clip
            best_distance = distance
    return best


def timeline_duration_ms(lanes: Sequence[CameraLane]) -> float:
    return max((lane.end_ms for lane in lanes), default=0.0)
