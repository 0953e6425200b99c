"""Camera switching: resolve a view request into an asset and a queued local seek."""

from __future__ import annotations

import logging

from gamefilm.config import PlaybackSettings
from gamefilm.playback.catalog import find_asset
from gamefilm.playback.models import (
    DEBOUNCED_SOURCES,
    BindAsset,
    DeferredSwitch,
    LookupOffset,
    PlaybackSession,
    PlaybackState,
    RefreshCatalog,
    SwitchRequest,
    SwitchSource,
    Transition,
)
from gamefilm.playback.virtual import stop_virtual
from gamefilm.timeline.models import CameraLane, Clip
from gamefilm.timeline.resolver import closest_clip, find_lane_for_asset

logger = logging.getLogger(__name__)


def game_time_to_view(state: PlaybackState, explicit_time_ms: float | None) -> float:
    if explicit_time_ms is not None:
        return explicit_time_ms
    if state.target_game_ms is not None:
        return state.target_game_ms
    if state.position_ms > 0:
        return state.position_ms
    session = state.session
    if session is not None:
        offset = state.bound_offset
        base_ms = offset.lane_position_ms if offset is not None and offset.lane_position_ms is not None else 0.0
        return base_ms + session.local_time_s * 1000
    return 0.0


def request_switch(
    state: PlaybackState,
    asset_id: str,
    explicit_time_ms: float | None,
    source: SwitchSource,
    now_ms: float,
    settings: PlaybackSettings,
) -> Transition:
    result = stop_virtual(state)
    state = result.state

    game_time = game_time_to_view(state, explicit_time_ms)
    lead_in_ms = settings.continuation_tolerance_ms if source == "continuation" else 0.0

    lane: CameraLane | None = None
    clip: Clip | None = None
    if state.lanes:
        lane = find_lane_for_asset(state.lanes, asset_id)
        if lane is None:
            logger.warning("No camera lane contains asset %s; ignoring switch", asset_id)
            return result
        clip = _pick_clip(lane, asset_id, game_time, lead_in_ms)
    resolved_id = clip.asset_id if clip is not None else asset_id
    if resolved_id != asset_id:
        logger.info("Asset %s does not cover %.0fms; using %s on lane %d", asset_id, game_time, resolved_id, lane.lane)

    if (
        source in DEBOUNCED_SOURCES
        and state.last_switch_ms is not None
        and now_ms - state.last_switch_ms < settings.switch_debounce_ms
    ):
        logger.debug("Ignoring switch to %s within debounce window", resolved_id)
        return _drop_deferred(result)

    target_asset = find_asset(state.catalog, resolved_id)
    if target_asset is None:
        logger.info("Asset %s not in local catalog; deferring switch and refreshing", resolved_id)
        deferred = DeferredSwitch(asset_id=resolved_id, explicit_time_ms=explicit_time_ms, source=source)
        return result.then(Transition(state.evolve(deferred=deferred), (RefreshCatalog(),)))

    session = state.session
    if session is not None and session.asset_id == resolved_id:
        if state.target_game_ms is None or state.pending is not None:
            return _drop_deferred(result)
        logger.info("Same camera selected while no-coverage overlay shows; dismissing overlay")
        dismissed = state.evolve(target_game_ms=None, pending=None, switching=False, deferred=None)
        return result.then(Transition(dismissed))

    if state.pending is not None:
        logger.info("Superseding pending switch to %s", state.pending.asset_id)

    if clip is not None:
        seek_s = max(0.0, (game_time - clip.lane_position_ms) / 1000)
    else:
        current_game_s = game_time / 1000
        if session is not None:
            current_asset = find_asset(state.catalog, session.asset_id)
            current_offset = current_asset.sync_offset_seconds if current_asset is not None else 0.0
            current_game_s = session.local_time_s + current_offset
        seek_s = max(0.0, current_game_s - target_asset.sync_offset_seconds)

    overlay_showing = state.target_game_ms is not None and state.pending is None
    resume = (
        state.is_playing
        or state.resume_after_switch
        or overlay_showing
        or source == "continuation"
        or _at_boundary(session, settings)
    )
    epoch = state.epoch + 1
    logger.info(
        "Switching to %s at game time %.0fms (seek %.3fs, epoch %d, source %s)",
        resolved_id,
        game_time,
        seek_s,
        epoch,
        source,
    )
    switched = state.evolve(
        active_lane=lane.lane if lane is not None else state.active_lane,
        is_playing=False,
        session=PlaybackSession(asset_id=resolved_id),
        offset=None,
        pending=SwitchRequest(asset_id=resolved_id, target_game_ms=game_time, epoch=epoch, lead_in_ms=lead_in_ms),
        target_game_ms=game_time,
        switching=True,
        queued_seek_s=seek_s,
        resume_after_switch=resume,
        suppress_until_ms=None,
        epoch=epoch,
        last_switch_ms=now_ms,
        deferred=None,
    )
    return result.then(Transition(switched, (BindAsset(resolved_id, epoch), LookupOffset(resolved_id, epoch))))


def _pick_clip(lane: CameraLane, asset_id: str, game_time: float, lead_in_ms: float) -> Clip | None:
    if lead_in_ms > 0:
        own = lane.clip_for_asset(asset_id)
        if own is not None and own.lane_position_ms - lead_in_ms <= game_time < own.end_ms:
            return own
    return closest_clip(lane, game_time)


def _at_boundary(session: PlaybackSession | None, settings: PlaybackSettings) -> bool:
    if session is None or session.loaded_duration_s <= 0:
        return False
    window = settings.boundary_window_s
    return session.local_time_s <= window or session.local_time_s >= session.loaded_duration_s - window


def _drop_deferred(result: Transition) -> Transition:
    if result.state.deferred is None:
        return result
    logger.info("Dropping deferred switch to %s", result.state.deferred.asset_id)
    return Transition(result.state.evolve(deferred=None), result.effects)
