"""Settling a camera switch once the newly bound asset reports metadata.

Two asynchronous completions feed this module: the native player's
duration/metadata signal and the offset lookup for the bound asset. They may
arrive in either order. The queued local seek is applied as soon as metadata is
usable; coverage of the requested game time is decided once both have arrived
for the *pending* request (matching asset id and epoch). Anything older is
discarded.

The authoritative playhead is taken from the request's target game time rather
than recomputed from the clamped local seek, so a seek past the end of a short
asset never drags the game clock with it.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from gamefilm.config import PlaybackSettings
from gamefilm.playback.catalog import find_asset
from gamefilm.playback.models import (
    HAVE_METADATA,
    ClipOffset,
    MetadataLoaded,
    OffsetReported,
    Pause,
    Play,
    PlaybackState,
    SeekTo,
    Transition,
)

logger = logging.getLogger(__name__)


def on_metadata_loaded(
    state: PlaybackState,
    event: MetadataLoaded,
    now_ms: float,
    settings: PlaybackSettings,
) -> Transition:
    session = state.session
    if session is None or (event.asset_id is not None and event.asset_id != session.asset_id):
        logger.debug("Discarding metadata for %s; bound asset is %s", event.asset_id, state.bound_asset_id)
        return Transition(state)

    updated = state.evolve(
        session=replace(
            session,
            loaded_duration_s=max(event.duration_s, 0.0),
            ready_state=event.ready_state,
            load_error=None,
        )
    )
    seeked = apply_queued_seek(updated, now_ms, settings)
    return seeked.then(settle_coverage(seeked.state))


def on_offset_reported(state: PlaybackState, event: OffsetReported) -> Transition:
    if event.asset_id != state.bound_asset_id or event.epoch != state.epoch:
        logger.debug("Discarding stale offset data for %s (epoch %d)", event.asset_id, event.epoch)
        return Transition(state)
    offset = ClipOffset(
        asset_id=event.asset_id,
        epoch=event.epoch,
        lane_position_ms=event.lane_position_ms,
        duration_ms=event.duration_ms,
    )
    return settle_coverage(state.evolve(offset=offset))


def apply_queued_seek(state: PlaybackState, now_ms: float, settings: PlaybackSettings) -> Transition:
    session = state.session
    if state.queued_seek_s is None or session is None:
        return Transition(state)
    if session.loaded_duration_s <= 0:
        return Transition(state)
    if session.ready_state < HAVE_METADATA:
        logger.info("Asset %s not ready for seeking (ready state %d); waiting", session.asset_id, session.ready_state)
        return Transition(state)

    seek_s = min(max(state.queued_seek_s, 0.0), session.loaded_duration_s)
    if state.target_game_ms is not None:
        position = state.target_game_ms
    else:
        offset = state.bound_offset
        base_ms = offset.lane_position_ms if offset is not None and offset.lane_position_ms is not None else 0.0
        position = base_ms + seek_s * 1000
    logger.debug("Applying queued seek %.3fs on %s; playhead %.0fms", seek_s, session.asset_id, position)

    seeked = state.evolve(
        session=replace(session, local_time_s=seek_s),
        position_ms=position,
        queued_seek_s=None,
        suppress_until_ms=now_ms + settings.seek_suppress_ms,
    )
    if seeked.resume_after_switch and seeked.pending is None:
        return Transition(seeked.evolve(resume_after_switch=False, is_playing=True), (SeekTo(seek_s), Play()))
    return Transition(seeked, (SeekTo(seek_s),))


def coverage_window(state: PlaybackState) -> tuple[float, float] | None:
    """Game-time range ``[start, end)`` the bound asset can actually show."""
    session = state.session
    if session is None:
        return None
    offset = state.bound_offset
    asset = find_asset(state.catalog, session.asset_id)

    if offset is not None and offset.lane_position_ms is not None:
        start_ms = offset.lane_position_ms
    elif asset is not None:
        start_ms = asset.sync_offset_ms
    else:
        start_ms = 0.0

    catalog_ms: float | None = None
    if offset is not None and offset.duration_ms:
        catalog_ms = offset.duration_ms
    elif asset is not None and asset.duration_seconds:
        catalog_ms = asset.duration_seconds * 1000
    loaded_ms = session.loaded_duration_s * 1000 if session.loaded_duration_s > 0 else None

    if catalog_ms is not None and loaded_ms is not None:
        effective_ms = min(catalog_ms, loaded_ms)
    elif catalog_ms is not None:
        effective_ms = catalog_ms
    elif loaded_ms is not None:
        effective_ms = loaded_ms
    else:
        return None
    return start_ms, start_ms + effective_ms


def settle_coverage(state: PlaybackState) -> Transition:
    pending = state.pending
    target = state.target_game_ms
    if pending is None or target is None:
        return Transition(state)
    session = state.session
    if session is None or session.asset_id != pending.asset_id:
        return Transition(state)
    offset = state.offset
    if offset is None or offset.asset_id != pending.asset_id or offset.epoch != pending.epoch:
        logger.debug("Waiting for offset data for %s (epoch %d)", pending.asset_id, pending.epoch)
        return Transition(state)
    if state.queued_seek_s is not None or session.loaded_duration_s <= 0:
        return Transition(state)

    window = coverage_window(state)
    if window is None:
        return Transition(state)
    start_ms, end_ms = window

    if start_ms - pending.lead_in_ms <= target < end_ms:
        logger.info("Game time %.0fms covered by %s [%.0f, %.0f)", target, pending.asset_id, start_ms, end_ms)
        covered = state.evolve(target_game_ms=None, pending=None, switching=False, resume_after_switch=False)
        if state.resume_after_switch and not state.is_playing:
            return Transition(covered.evolve(is_playing=True), (Play(),))
        return Transition(covered)

    logger.info("Game time %.0fms outside %s [%.0f, %.0f); showing gap", target, pending.asset_id, start_ms, end_ms)
    denied = state.evolve(pending=None, switching=False, resume_after_switch=False, is_playing=False)
    return Transition(denied, (Pause(),))
