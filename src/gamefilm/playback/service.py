"""Playback engine: folds events through the reducer and runs the effects."""

from __future__ import annotations

import logging
import time
from collections import deque
from typing import Callable, Iterable

from gamefilm.config import PlaybackSettings
from gamefilm.errors import CatalogRefreshError, UrlResolutionError
from gamefilm.playback.catalog import CatalogAsset, CatalogProvider, UrlResolver, build_catalog
from gamefilm.playback.models import (
    HAVE_METADATA,
    BindAsset,
    CanPlay,
    CatalogRefreshFailed,
    CatalogUpdated,
    Dragged,
    Effect,
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
    RefreshCatalog,
    ReloadAsset,
    RetryRequested,
    SeekTo,
    StartTicker,
    StopTicker,
    SwitchRequested,
    SwitchSource,
    Tick,
    TimeUpdated,
)
from gamefilm.playback.reducer import reduce
from gamefilm.playback.session import AsyncioTicker, Player, Ticker
from gamefilm.playback.status import CoverageStatus, TransportStatus, coverage_status, transport_status
from gamefilm.timeline.models import CameraLane, build_lanes
from gamefilm.timeline.resolver import find_clip_for_asset

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class PlaybackEngine:
    """Owns the playback state. The default ``AsyncioTicker`` needs a running event loop."""

    def __init__(
        self,
        player: Player,
        catalog_provider: CatalogProvider | None = None,
        url_resolver: UrlResolver | None = None,
        clock: Clock | None = None,
        ticker: Ticker | None = None,
        settings: PlaybackSettings | None = None,
        lanes: Iterable[CameraLane] = (),
        catalog: Iterable[CatalogAsset] = (),
    ) -> None:
        self._player = player
        self._catalog_provider = catalog_provider
        self._url_resolver = url_resolver or (lambda asset_id: f"asset://{asset_id}")
        self._clock = clock or _monotonic_ms
        self._ticker = ticker or AsyncioTicker()
        self._settings = settings or PlaybackSettings.from_env()
        self._state = PlaybackState(lanes=build_lanes(lanes), catalog=build_catalog(catalog))
        self._queue: deque[PlaybackEvent] = deque()
        self._draining = False

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def settings(self) -> PlaybackSettings:
        return self._settings

    def dispatch(self, event: PlaybackEvent) -> PlaybackState:
        """Queue ``event`` and fold every queued event in arrival order.

        Effects may enqueue follow-up events; those are folded in the same
        drain, after the event that produced them.
        """
        self._queue.append(event)
        if self._draining:
            return self._state
        self._draining = True
        try:
            while self._queue:
                current = self._queue.popleft()
                transition = reduce(self._state, current, self._clock(), self._settings)
                self._state = transition.state
                for effect in transition.effects:
                    self._execute(effect)
        except Exception:
            self._queue.clear()
            raise
        finally:
            self._draining = False
        return self._state

    # Exposed operations

    def request_switch(self, asset_id: str, target_ms: float | None = None, source: SwitchSource = "user") -> None:
        self.dispatch(SwitchRequested(asset_id=asset_id, target_ms=target_ms, source=source))

    def drag(self, game_time_ms: float, destination_ms: float | None = None) -> None:
        self.dispatch(Dragged(game_time_ms=game_time_ms, destination_ms=destination_ms))

    def play(self) -> None:
        self.dispatch(PlayRequested())

    def pause(self) -> None:
        self.dispatch(PauseRequested())

    def select_lane(self, lane: int) -> None:
        self.dispatch(LaneSelected(lane=lane))

    def dismiss_overlay(self) -> None:
        self.dispatch(OverlayDismissed())

    def retry(self) -> None:
        self.dispatch(RetryRequested())

    def tick(self) -> None:
        self.dispatch(Tick())

    def replace_lanes(self, lanes: Iterable[CameraLane]) -> None:
        self.dispatch(LanesReplaced(lanes=tuple(lanes)))

    def update_catalog(self, assets: Iterable[CatalogAsset]) -> None:
        self.dispatch(CatalogUpdated(assets=tuple(assets)))

    def refresh_catalog(self) -> None:
        self._execute(RefreshCatalog())

    def close(self) -> None:
        self._ticker.stop()

    # Native player events

    def on_time_update(self, local_time_s: float, asset_id: str | None = None) -> None:
        self.dispatch(TimeUpdated(local_time_s=local_time_s, asset_id=asset_id))

    def on_metadata_loaded(
        self, duration_s: float, ready_state: int = HAVE_METADATA, asset_id: str | None = None
    ) -> None:
        self.dispatch(MetadataLoaded(duration_s=duration_s, ready_state=ready_state, asset_id=asset_id))

    def on_ended(self, asset_id: str | None = None) -> None:
        self.dispatch(Ended(asset_id=asset_id))

    def on_error(self, code: MediaErrorCode | None = None, message: str = "", asset_id: str | None = None) -> None:
        self.dispatch(LoadFailed(code=code, message=message, asset_id=asset_id))

    def on_can_play(self, asset_id: str | None = None) -> None:
        self.dispatch(CanPlay(asset_id=asset_id))

    def on_played(self, asset_id: str | None = None) -> None:
        self.dispatch(Played(asset_id=asset_id))

    def on_paused(self, asset_id: str | None = None) -> None:
        self.dispatch(Paused(asset_id=asset_id))

    # Projections

    def game_time_ms(self) -> float:
        return self._state.position_ms

    def duration_ms(self) -> float:
        return self._state.timeline_duration_ms

    def coverage(self) -> CoverageStatus:
        return coverage_status(self._state)

    def transport(self) -> TransportStatus:
        return transport_status(self._state)

    # Effects

    def _execute(self, effect: Effect) -> None:
        if isinstance(effect, (BindAsset, ReloadAsset)):
            self._load(effect.asset_id)
        elif isinstance(effect, LookupOffset):
            self._lookup_offset(effect)
        elif isinstance(effect, SeekTo):
            self._player.seek(effect.seconds)
        elif isinstance(effect, Play):
            self._player.play()
        elif isinstance(effect, Pause):
            self._player.pause()
        elif isinstance(effect, RefreshCatalog):
            self._refresh_catalog()
        elif isinstance(effect, StartTicker):
            self._ticker.start(effect.interval_ms, self.tick)
        elif isinstance(effect, StopTicker):
            self._ticker.stop()
        else:
            raise TypeError(f"Unsupported playback effect {type(effect).__name__}")

    def _load(self, asset_id: str) -> None:
        try:
            url = self._url_resolver(asset_id)
        except Exception as exc:
            logger.warning("URL resolution failed for %s: %s", asset_id, exc)
            reason = str(exc) if isinstance(exc, UrlResolutionError) else f"URL resolution failed: {exc}"
            self.dispatch(LoadFailed(code=MediaErrorCode.NETWORK, message=reason, asset_id=asset_id))
            return
        self._player.load(asset_id, url)

    def _lookup_offset(self, effect: LookupOffset) -> None:
        found = find_clip_for_asset(self._state.lanes, effect.asset_id)
        if found is None:
            self.dispatch(OffsetReported(asset_id=effect.asset_id, epoch=effect.epoch, lane_position_ms=None, duration_ms=None))
            return
        _, clip = found
        self.dispatch(
            OffsetReported(
                asset_id=effect.asset_id,
                epoch=effect.epoch,
                lane_position_ms=clip.lane_position_ms,
                duration_ms=clip.duration_ms,
            )
        )

    def _refresh_catalog(self) -> None:
        if self._catalog_provider is None:
            self.dispatch(CatalogRefreshFailed(reason="no asset catalog provider configured"))
            return
        try:
            assets = tuple(self._catalog_provider())
        except Exception as exc:
            reason = str(exc) if isinstance(exc, CatalogRefreshError) else f"catalog refresh failed: {exc}"
            self.dispatch(CatalogRefreshFailed(reason=reason))
            return
        self.dispatch(CatalogUpdated(assets=assets))
