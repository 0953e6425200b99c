"""Read-only projections of the playback state for overlays and transport UI."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from gamefilm.playback.models import PlaybackState
from gamefilm.playback.settle import coverage_window
from gamefilm.timeline.resolver import find_lane, resolve_active_clip


class CoverageKind(str, Enum):
    COVERED = "covered"
    SWITCHING = "switching"
    NO_COVERAGE = "no_coverage"


class GapReason(str, Enum):
    BEFORE_FOOTAGE = "before_footage"
    AFTER_FOOTAGE = "after_footage"
    GAP = "gap"
    NO_ASSET = "no_asset"


@dataclass(slots=True, frozen=True)
class CoverageStatus:
    kind: CoverageKind
    game_time_ms: float
    reason: GapReason | None = None
    window_start_ms: float | None = None
    window_end_ms: float | None = None
    next_clip_start_ms: float | None = None


@dataclass(slots=True, frozen=True)
class TransportStatus:
    asset_id: str | None
    playing: bool
    virtual: bool
    local_time_s: float
    duration_s: float
    load_error: str | None
    retryable: bool


def coverage_status(state: PlaybackState) -> CoverageStatus:
    if state.switching or state.pending is not None:
        target = state.pending.target_game_ms if state.pending is not None else state.position_ms
        return CoverageStatus(kind=CoverageKind.SWITCHING, game_time_ms=target)

    if state.target_game_ms is not None:
        target = state.target_game_ms
        window = coverage_window(state)
        reason = GapReason.NO_ASSET
        if window is not None:
            reason = GapReason.BEFORE_FOOTAGE if target < window[0] else GapReason.AFTER_FOOTAGE
        return CoverageStatus(
            kind=CoverageKind.NO_COVERAGE,
            game_time_ms=target,
            reason=reason,
            window_start_ms=window[0] if window is not None else None,
            window_end_ms=window[1] if window is not None else None,
            next_clip_start_ms=_next_clip_start(state, target),
        )

    position = state.position_ms
    if state.virtual is not None:
        return CoverageStatus(
            kind=CoverageKind.NO_COVERAGE,
            game_time_ms=position,
            reason=GapReason.GAP,
            window_start_ms=state.virtual.start_game_ms,
            window_end_ms=state.virtual.target_game_ms,
            next_clip_start_ms=_next_clip_start(state, position),
        )

    if state.lanes:
        info = resolve_active_clip(state.lanes, state.active_lane, position)
        if info.is_in_gap:
            return CoverageStatus(
                kind=CoverageKind.NO_COVERAGE,
                game_time_ms=position,
                reason=GapReason.GAP,
                window_start_ms=_previous_clip_end(state, position),
                window_end_ms=info.next_clip_start_ms,
                next_clip_start_ms=info.next_clip_start_ms,
            )

    if state.session is None:
        return CoverageStatus(kind=CoverageKind.NO_COVERAGE, game_time_ms=position, reason=GapReason.NO_ASSET)
    return CoverageStatus(kind=CoverageKind.COVERED, game_time_ms=position)


def transport_status(state: PlaybackState) -> TransportStatus:
    session = state.session
    if session is None:
        return TransportStatus(
            asset_id=None,
            playing=state.is_playing,
            virtual=state.virtual is not None,
            local_time_s=0.0,
            duration_s=0.0,
            load_error=None,
            retryable=False,
        )
    return TransportStatus(
        asset_id=session.asset_id,
        playing=state.is_playing,
        virtual=state.virtual is not None,
        local_time_s=session.local_time_s,
        duration_s=session.loaded_duration_s,
        load_error=session.load_error,
        retryable=session.load_error is not None,
    )


def _next_clip_start(state: PlaybackState, time_ms: float) -> float | None:
    return resolve_active_clip(state.lanes, state.active_lane, time_ms).next_clip_start_ms


def _previous_clip_end(state: PlaybackState, time_ms: float) -> float:
    lane = find_lane(state.lanes, state.active_lane)
    if lane is None:
        return 0.0
    return max((clip.end_ms for clip in lane.clips if clip.end_ms <= time_ms), default=0.0)
