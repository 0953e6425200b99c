"""Single event fold for the playback engine.

``reduce`` is the only place the playback state changes. Each handler receives
the current state and returns a ``Transition`` carrying the next state and the
effects the session layer must execute against the player, catalog and ticker.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable

from gamefilm.config import PlaybackSettings
from gamefilm.playback.catalog import build_catalog, find_asset
from gamefilm.playback.models import (
    CanPlay,
    CatalogRefreshFailed,
    CatalogUpdated,
    Dragged,
    Ended,
    LaneSelected,
    LanesReplaced,
    LoadFailed,
    LookupOffset,
    MediaErrorCode,
    MetadataLoaded,
    OffsetReported,
    OverlayDismissed,
    Pause,
    PauseRequested,
    Paused,
    Play,
    PlaybackEvent,
    PlaybackState,
    PlayRequested,
    Played,
    ReloadAsset,
    RetryRequested,
    SeekTo,
    SwitchRequested,
    Tick,
    TimeUpdated,
    Transition,
)
from gamefilm.playback.settle import on_metadata_loaded, on_offset_reported
from gamefilm.playback.switching import request_switch
from gamefilm.playback.virtual import advance_virtual, start_virtual, stop_virtual
from gamefilm.timeline.models import build_lanes
from gamefilm.timeline.resolver import find_clip_for_asset, find_lane_for_asset, resolve_active_clip

logger = logging.getLogger(__name__)

REFRESHABLE_ERROR_CODES: frozenset[MediaErrorCode] = frozenset(
    {MediaErrorCode.NETWORK, MediaErrorCode.SRC_NOT_SUPPORTED}
)

LOAD_ERROR_MESSAGE = "Failed to load video. The file may be missing or corrupted."
LOAD_ERROR_AFTER_REFRESH_MESSAGE = "Failed to load video after refresh. The file may be missing or corrupted."

_Handler = Callable[[PlaybackState, PlaybackEvent, float, PlaybackSettings], Transition]


def reduce(state: PlaybackState, event: PlaybackEvent, now_ms: float, settings: PlaybackSettings) -> Transition:
    handler = _HANDLERS.get(type(event))
    if handler is None:
        raise TypeError(f"Unsupported playback event {type(event).__name__}")
    return handler(state, event, now_ms, settings)


def _is_stale(state: PlaybackState, asset_id: str | None) -> bool:
    return state.session is None or (asset_id is not None and asset_id != state.session.asset_id)


def _on_switch_requested(
    state: PlaybackState, event: SwitchRequested, now_ms: float, settings: PlaybackSettings
) -> Transition:
    return request_switch(state, event.asset_id, event.target_ms, event.source, now_ms, settings)


def _on_time_updated(state: PlaybackState, event: TimeUpdated, now_ms: float, settings: PlaybackSettings) -> Transition:
    if _is_stale(state, event.asset_id):
        return Transition(state)
    session = replace(state.session, local_time_s=event.local_time_s)
    updated = state.evolve(session=session)

    # Only the local clock moves while any guard is up.
    if updated.switching or updated.queued_seek_s is not None:
        return Transition(updated)
    if updated.suppress_until_ms is not None and now_ms < updated.suppress_until_ms:
        return Transition(updated)
    if updated.virtual is not None:
        return Transition(updated)
    if session.loaded_duration_s > 0 and event.local_time_s >= session.loaded_duration_s - settings.boundary_window_s:
        return Transition(updated)

    offset = updated.bound_offset
    base_ms = offset.lane_position_ms if offset is not None and offset.lane_position_ms is not None else 0.0
    return Transition(updated.evolve(position_ms=base_ms + event.local_time_s * 1000))


def _on_metadata_loaded(
    state: PlaybackState, event: MetadataLoaded, now_ms: float, settings: PlaybackSettings
) -> Transition:
    return on_metadata_loaded(state, event, now_ms, settings)


def _on_offset_reported(
    state: PlaybackState, event: OffsetReported, now_ms: float, settings: PlaybackSettings
) -> Transition:
    return on_offset_reported(state, event)


def _on_ended(state: PlaybackState, event: Ended, now_ms: float, settings: PlaybackSettings) -> Transition:
    if _is_stale(state, event.asset_id):
        return Transition(state)
    if state.virtual is not None:
        return Transition(state)

    session = state.session
    ended = state.evolve(
        is_playing=False,
        session=replace(session, local_time_s=max(session.local_time_s, session.loaded_duration_s)),
    )
    found = find_clip_for_asset(ended.lanes, session.asset_id)
    if found is None:
        return Transition(ended)

    lane, clip = found
    clip_end = clip.end_ms
    threshold = clip_end - settings.continuation_tolerance_ms
    candidates = [
        other for other in lane.clips if other.asset_id != session.asset_id and other.lane_position_ms >= threshold
    ]
    ended = ended.evolve(position_ms=clip_end, active_lane=lane.lane)
    if not candidates:
        logger.info("No further clips on lane %d after %.0fms", lane.lane, clip_end)
        return Transition(ended)

    following = min(candidates, key=lambda other: other.lane_position_ms)
    if following.lane_position_ms > clip_end + settings.continuation_tolerance_ms:
        logger.info("Bridging gap after %s until %.0fms", session.asset_id, following.lane_position_ms)
        playing = ended.evolve(is_playing=True)
        return start_virtual(playing, clip_end, following.lane_position_ms, now_ms, settings)
    logger.info("Continuing from %s to %s at %.0fms", session.asset_id, following.asset_id, clip_end)
    return request_switch(ended, following.asset_id, clip_end, "continuation", now_ms, settings)


def _on_dragged(state: PlaybackState, event: Dragged, now_ms: float, settings: PlaybackSettings) -> Transition:
    stopped = stop_virtual(state)
    game_ms = event.game_time_ms
    dragged = stopped.state.evolve(position_ms=game_ms)

    target = dragged.target_game_ms
    if target is not None and abs(game_ms - target) > settings.stale_target_threshold_ms:
        dragged = dragged.evolve(
            target_game_ms=None,
            pending=None,
            switching=False,
            queued_seek_s=None,
            resume_after_switch=False,
        )
    result = Transition(dragged, stopped.effects)

    session = dragged.session
    if dragged.lanes and session is not None:
        info = resolve_active_clip(dragged.lanes, dragged.active_lane, game_ms)
        if info.clip is not None and info.clip.asset_id != session.asset_id:
            return result.then(request_switch(dragged, info.clip.asset_id, game_ms, "drag", now_ms, settings))
        if info.is_in_gap:
            destination = event.destination_ms if event.destination_ms is not None else info.next_clip_start_ms
            if dragged.is_playing and destination is not None:
                return result.then(start_virtual(dragged, game_ms, destination, now_ms, settings))
            return result

    if session is None:
        return result
    offset = dragged.bound_offset
    base_ms = offset.lane_position_ms if offset is not None and offset.lane_position_ms is not None else 0.0
    local_s = (game_ms - base_ms) / 1000
    if local_s < 0:
        return result
    if session.loaded_duration_s > 0:
        local_s = min(local_s, session.loaded_duration_s)
    seeked = dragged.evolve(session=replace(session, local_time_s=local_s))
    return result.then(Transition(seeked, (SeekTo(local_s),)))


def _on_tick(state: PlaybackState, event: Tick, now_ms: float, settings: PlaybackSettings) -> Transition:
    advanced, clip = advance_virtual(state, now_ms)
    if clip is None:
        return advanced
    handoff = request_switch(
        advanced.state, clip.asset_id, advanced.state.position_ms, "virtual", now_ms, settings
    )
    return advanced.then(handoff)


def _on_play_requested(
    state: PlaybackState, event: PlayRequested, now_ms: float, settings: PlaybackSettings
) -> Transition:
    if state.lanes:
        info = resolve_active_clip(state.lanes, state.active_lane, state.position_ms)
        if info.clip is not None and info.clip.asset_id != state.bound_asset_id:
            playing = state.evolve(is_playing=True)
            return request_switch(playing, info.clip.asset_id, state.position_ms, "user", now_ms, settings)
        if info.is_in_gap:
            if info.next_clip_start_ms is None:
                logger.info("Play requested at %.0fms with no footage ahead", state.position_ms)
                return Transition(state)
            playing = state.evolve(is_playing=True)
            return start_virtual(playing, state.position_ms, info.next_clip_start_ms, now_ms, settings)
    if state.session is None:
        return Transition(state)
    return Transition(state.evolve(is_playing=True), (Play(),))


def _on_pause_requested(
    state: PlaybackState, event: PauseRequested, now_ms: float, settings: PlaybackSettings
) -> Transition:
    stopped = stop_virtual(state)
    return stopped.then(Transition(stopped.state.evolve(is_playing=False, resume_after_switch=False), (Pause(),)))


def _on_played(state: PlaybackState, event: Played, now_ms: float, settings: PlaybackSettings) -> Transition:
    if _is_stale(state, event.asset_id):
        return Transition(state)
    return Transition(state.evolve(is_playing=True))


def _on_paused(state: PlaybackState, event: Paused, now_ms: float, settings: PlaybackSettings) -> Transition:
    if _is_stale(state, event.asset_id) or state.virtual is not None:
        return Transition(state)
    return Transition(state.evolve(is_playing=False))


def _on_can_play(state: PlaybackState, event: CanPlay, now_ms: float, settings: PlaybackSettings) -> Transition:
    if _is_stale(state, event.asset_id):
        return Transition(state)
    if state.queued_seek_s is None and state.pending is None and state.switching:
        return Transition(state.evolve(switching=False))
    return Transition(state)


def _on_load_failed(state: PlaybackState, event: LoadFailed, now_ms: float, settings: PlaybackSettings) -> Transition:
    if _is_stale(state, event.asset_id):
        return Transition(state)
    session = state.session
    refreshable = event.code is None or event.code in REFRESHABLE_ERROR_CODES
    if refreshable and not session.url_refresh_attempted:
        logger.warning("Asset %s failed to load (%s); refreshing URL once", session.asset_id, event.message or event.code)
        refreshed = state.evolve(session=replace(session, url_refresh_attempted=True))
        return Transition(refreshed, (ReloadAsset(session.asset_id),))

    message = LOAD_ERROR_AFTER_REFRESH_MESSAGE if session.url_refresh_attempted else LOAD_ERROR_MESSAGE
    logger.error("Asset %s failed to load: %s", session.asset_id, event.message or message)
    failed = state.evolve(session=replace(session, load_error=message), switching=False, is_playing=False)
    return Transition(failed)


def _on_retry_requested(
    state: PlaybackState, event: RetryRequested, now_ms: float, settings: PlaybackSettings
) -> Transition:
    session = state.session
    if session is None:
        return Transition(state)
    retried = state.evolve(session=replace(session, load_error=None))
    return Transition(retried, (ReloadAsset(session.asset_id),))


def _on_overlay_dismissed(
    state: PlaybackState, event: OverlayDismissed, now_ms: float, settings: PlaybackSettings
) -> Transition:
    return Transition(state.evolve(target_game_ms=None))


def _on_lane_selected(
    state: PlaybackState, event: LaneSelected, now_ms: float, settings: PlaybackSettings
) -> Transition:
    if event.lane == state.active_lane:
        return Transition(state)
    info = resolve_active_clip(state.lanes, event.lane, state.position_ms)
    selected = state.evolve(active_lane=event.lane)
    if info.clip is None:
        return Transition(selected)
    return request_switch(selected, info.clip.asset_id, state.position_ms, "lane", now_ms, settings)


def _on_lanes_replaced(
    state: PlaybackState, event: LanesReplaced, now_ms: float, settings: PlaybackSettings
) -> Transition:
    lanes = build_lanes(event.lanes)
    replaced = state.evolve(lanes=lanes)
    bound = state.bound_asset_id
    if bound is None:
        return Transition(replaced)
    lane = find_lane_for_asset(lanes, bound)
    if lane is not None and lane.lane != state.active_lane:
        replaced = replaced.evolve(active_lane=lane.lane)
    return Transition(replaced, (LookupOffset(bound, state.epoch),))


def _on_catalog_updated(
    state: PlaybackState, event: CatalogUpdated, now_ms: float, settings: PlaybackSettings
) -> Transition:
    updated = state.evolve(catalog=build_catalog(event.assets), catalog_error=None)
    deferred = updated.deferred
    if deferred is None or find_asset(updated.catalog, deferred.asset_id) is None:
        return Transition(updated)
    logger.info("Processing deferred switch to %s", deferred.asset_id)
    return request_switch(
        updated.evolve(deferred=None), deferred.asset_id, deferred.explicit_time_ms, "deferred", now_ms, settings
    )


def _on_catalog_refresh_failed(
    state: PlaybackState, event: CatalogRefreshFailed, now_ms: float, settings: PlaybackSettings
) -> Transition:
    logger.error("Asset catalog refresh failed: %s", event.reason)
    return Transition(state.evolve(catalog_error=event.reason))


_HANDLERS: dict[type, _Handler] = {
    SwitchRequested: _on_switch_requested,
    TimeUpdated: _on_time_updated,
    MetadataLoaded: _on_metadata_loaded,
    OffsetReported: _on_offset_reported,
    Ended: _on_ended,
    Dragged: _on_dragged,
    Tick: _on_tick,
    PlayRequested: _on_play_requested,
    PauseRequested: _on_pause_requested,
    Played: _on_played,
    Paused: _on_paused,
    CanPlay: _on_can_play,
    LoadFailed: _on_load_failed,
    RetryRequested: _on_retry_requested,
    OverlayDismissed: _on_overlay_dismissed,
    LaneSelected: _on_lane_selected,
    LanesReplaced: _on_lanes_replaced,
    CatalogUpdated: _on_catalog_updated,
    CatalogRefreshFailed: _on_catalog_refresh_failed,
}
