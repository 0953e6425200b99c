"""Public playback facade used by the timeline viewer."""

from __future__ import annotations

from typing import Iterable

from gamefilm.playback.catalog import CatalogAsset
from gamefilm.playback.models import MediaErrorCode, SwitchSource
from gamefilm.playback.service import PlaybackEngine
from gamefilm.playback.status import CoverageStatus, TransportStatus
from gamefilm.timeline.models import CameraLane


class Playback:
    def __init__(self, engine: PlaybackEngine) -> None:
        self._engine = engine

    @property
    def game_time_ms(self) -> float:
        return self._engine.game_time_ms()

    @property
    def duration_ms(self) -> float:
        return self._engine.duration_ms()

    @property
    def active_lane(self) -> int:
        return self._engine.state.active_lane

    @property
    def current_asset_id(self) -> str | None:
        return self._engine.state.bound_asset_id

    @property
    def catalog_error(self) -> str | None:
        return self._engine.state.catalog_error

    def switch_to(self, asset_id: str, target_ms: float | None = None, source: SwitchSource = "user") -> None:
        self._engine.request_switch(asset_id=asset_id, target_ms=target_ms, source=source)

    def seek(self, game_time_ms: float, destination_ms: float | None = None) -> None:
        self._engine.drag(game_time_ms=game_time_ms, destination_ms=destination_ms)

    def play(self) -> None:
        self._engine.play()

    def pause(self) -> None:
        self._engine.pause()

    def toggle(self) -> None:
        if self._engine.state.is_playing:
            self._engine.pause()
        else:
            self._engine.play()

    def select_lane(self, lane: int) -> None:
        self._engine.select_lane(lane)

    def dismiss_overlay(self) -> None:
        self._engine.dismiss_overlay()

    def retry(self) -> None:
        self._engine.retry()

    def set_lanes(self, lanes: Iterable[CameraLane]) -> None:
        self._engine.replace_lanes(lanes)

    def set_catalog(self, assets: Iterable[CatalogAsset]) -> None:
        self._engine.update_catalog(assets)

    def report_error(self, code: MediaErrorCode | None = None, message: str = "") -> None:
        self._engine.on_error(code=code, message=message)

    def coverage(self) -> CoverageStatus:
        return self._engine.coverage()

    def transport(self) -> TransportStatus:
        return self._engine.transport()
