"""Virtual playback: advance the game clock by wall time through coverage gaps."""

from __future__ import annotations

import logging

from gamefilm.config import PlaybackSettings
from gamefilm.playback.models import PlaybackState, StartTicker, StopTicker, Transition, VirtualPlaybackTimer
from gamefilm.timeline.models import Clip
from gamefilm.timeline.resolver import resolve_active_clip

logger = logging.getLogger(__name__)


def stop_virtual(state: PlaybackState) -> Transition:
    if state.virtual is None:
        return Transition(state)
    return Transition(state.evolve(virtual=None), (StopTicker(),))


def start_virtual(
    state: PlaybackState,
    start_ms: float,
    target_ms: float | None,
    now_ms: float,
    settings: PlaybackSettings,
) -> Transition:
    """Replace any running timer. Without a destination nothing is started."""
    stopped = stop_virtual(state)
    if target_ms is None:
        return stopped
    logger.info("Virtual playback from %.0fms towards %.0fms", start_ms, target_ms)
    timer = VirtualPlaybackTimer(start_wall_ms=now_ms, start_game_ms=start_ms, target_game_ms=target_ms)
    started = stopped.state.evolve(virtual=timer, position_ms=start_ms)
    return stopped.then(Transition(started, (StartTicker(settings.virtual_tick_ms),)))


def advance_virtual(state: PlaybackState, now_ms: float) -> tuple[Transition, Clip | None]:
    """Publish the synthetic game time; return the clip to hand off to, if one now covers it."""
    timer = state.virtual
    if timer is None:
        return Transition(state), None

    position = timer.game_time_at(now_ms)
    advanced = state.evolve(position_ms=position)
    info = resolve_active_clip(advanced.lanes, advanced.active_lane, position)
    if info.clip is not None:
        logger.info("Virtual playback reached clip %s at %.0fms", info.clip.asset_id, position)
        return stop_virtual(advanced), info.clip
    if timer.target_game_ms is not None and position >= timer.target_game_ms:
        logger.info("Virtual playback reached %.0fms with no clip", position)
        return stop_virtual(advanced), None
    return Transition(advanced), None
