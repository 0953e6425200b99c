"""Timeline domain exports."""

from gamefilm.timeline.format import format_time_ms, parse_time_to_ms, snap_to_grid
from gamefilm.timeline.models import DEFAULT_LANE_LABELS, MAX_LANES, CameraLane, Clip, build_lanes
from gamefilm.timeline.resolver import (
    ActiveClipInfo,
    closest_clip,
    find_clip_for_asset,
    find_lane,
    find_lane_for_asset,
    resolve_active_clip,
    timeline_duration_ms,
)

__all__ = [
    "ActiveClipInfo",
    "CameraLane",
    "Clip",
    "DEFAULT_LANE_LABELS",
    "MAX_LANES",
    "build_lanes",
    "closest_clip",
    "find_clip_for_asset",
    "find_lane",
    "find_lane_for_asset",
    "format_time_ms",
    "parse_time_to_ms",
    "resolve_active_clip",
    "snap_to_grid",
    "timeline_duration_ms",
]
