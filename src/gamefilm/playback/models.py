"""Playback state container, input events and output effects."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Literal, Union

from gamefilm.playback.catalog import CatalogAsset
from gamefilm.timeline.models import CameraLane
from gamefilm.timeline.resolver import timeline_duration_ms

HAVE_NOTHING = 0
HAVE_METADATA = 1

SwitchSource = Literal["user", "drag", "lane", "virtual", "continuation", "deferred"]

DEBOUNCED_SOURCES: frozenset[str] = frozenset({"user", "drag", "lane"})


class MediaErrorCode(IntEnum):
    ABORTED = 1
    NETWORK = 2
    DECODE = 3
    SRC_NOT_SUPPORTED = 4


@dataclass(slots=True, frozen=True)
class PlaybackSession:
    asset_id: str
    loaded_duration_s: float = 0.0
    local_time_s: float = 0.0
    ready_state: int = HAVE_NOTHING
    url_refresh_attempted: bool = False
    load_error: str | None = None


@dataclass(slots=True, frozen=True)
class SwitchRequest:
    asset_id: str
    target_game_ms: float
    epoch: int
    lead_in_ms: float = 0.0


@dataclass(slots=True, frozen=True)
class DeferredSwitch:
    asset_id: str
    explicit_time_ms: float | None
    source: SwitchSource


@dataclass(slots=True, frozen=True)
class ClipOffset:
    asset_id: str
    epoch: int
    lane_position_ms: float | None
    duration_ms: float | None


@dataclass(slots=True, frozen=True)
class VirtualPlaybackTimer:
    start_wall_ms: float
    start_game_ms: float
    target_game_ms: float | None = None

    def game_time_at(self, now_ms: float) -> float:
        return self.start_game_ms + max(now_ms - self.start_wall_ms, 0.0)


@dataclass(slots=True, frozen=True)
class PlaybackState:
    lanes: tuple[CameraLane, ...] = ()
    catalog: tuple[CatalogAsset, ...] = ()
    position_ms: float = 0.0
    active_lane: int = 1
    is_playing: bool = False
    session: PlaybackSession | None = None
    offset: ClipOffset | None = None
    pending: SwitchRequest | None = None
    target_game_ms: float | None = None
    switching: bool = False
    queued_seek_s: float | None = None
    resume_after_switch: bool = False
    suppress_until_ms: float | None = None
    epoch: int = 0
    last_switch_ms: float | None = None
    deferred: DeferredSwitch | None = None
    virtual: VirtualPlaybackTimer | None = None
    catalog_error: str | None = None

    @property
    def bound_asset_id(self) -> str | None:
        return self.session.asset_id if self.session is not None else None

    @property
    def timeline_duration_ms(self) -> float:
        lanes_end = timeline_duration_ms(self.lanes)
        if lanes_end > 0:
            return lanes_end
        if self.session is not None:
            return self.session.loaded_duration_s * 1000
        return 0.0

    @property
    def bound_offset(self) -> ClipOffset | None:
        if self.offset is None or self.offset.asset_id != self.bound_asset_id:
            return None
        return self.offset

    def evolve(self, **changes: object) -> PlaybackState:
        return replace(self, **changes)


# Events


@dataclass(slots=True, frozen=True)
class SwitchRequested:
    asset_id: str
    target_ms: float | None = None
    source: SwitchSource = "user"


@dataclass(slots=True, frozen=True)
class TimeUpdated:
    local_time_s: float
    asset_id: str | None = None


@dataclass(slots=True, frozen=True)
class MetadataLoaded:
    duration_s: float
    ready_state: int = HAVE_METADATA
    asset_id: str | None = None


@dataclass(slots=True, frozen=True)
class Ended:
    asset_id: str | None = None


@dataclass(slots=True, frozen=True)
class Dragged:
    game_time_ms: float
    destination_ms: float | None = None


@dataclass(slots=True, frozen=True)
class Tick:
    pass


@dataclass(slots=True, frozen=True)
class PlayRequested:
    pass


@dataclass(slots=True, frozen=True)
class PauseRequested:
    pass


@dataclass(slots=True, frozen=True)
class Played:
    asset_id: str | None = None


@dataclass(slots=True, frozen=True)
class Paused:
    asset_id: str | None = None


@dataclass(slots=True, frozen=True)
class CanPlay:
    asset_id: str | None = None


@dataclass(slots=True, frozen=True)
class LoadFailed:
    code: MediaErrorCode | None = None
    message: str = ""
    asset_id: str | None = None


@dataclass(slots=True, frozen=True)
class RetryRequested:
    pass


@dataclass(slots=True, frozen=True)
class OverlayDismissed:
    pass


@dataclass(slots=True, frozen=True)
class LaneSelected:
    lane: int


@dataclass(slots=True, frozen=True)
class LanesReplaced:
    lanes: tuple[CameraLane, ...]


@dataclass(slots=True, frozen=True)
class CatalogUpdated:
    assets: tuple[CatalogAsset, ...]


@dataclass(slots=True, frozen=True)
class CatalogRefreshFailed:
    reason: str


@dataclass(slots=True, frozen=True)
class OffsetReported:
    asset_id: str
    epoch: int
    lane_position_ms: float | None
    duration_ms: float | None


PlaybackEvent = Union[
    SwitchRequested,
    TimeUpdated,
    MetadataLoaded,
    Ended,
    Dragged,
    Tick,
    PlayRequested,
    PauseRequested,
    Played,
    Paused,
    CanPlay,
    LoadFailed,
    RetryRequested,
    OverlayDismissed,
    LaneSelected,
    LanesReplaced,
    CatalogUpdated,
    CatalogRefreshFailed,
    OffsetReported,
]


# Effects


@dataclass(slots=True, frozen=True)
class BindAsset:
    asset_id: str
    epoch: int


@dataclass(slots=True, frozen=True)
class ReloadAsset:
    asset_id: str


@dataclass(slots=True, frozen=True)
class LookupOffset:
    asset_id: str
    epoch: int


@dataclass(slots=True, frozen=True)
class SeekTo:
    seconds: float


@dataclass(slots=True, frozen=True)
class Play:
    pass


@dataclass(slots=True, frozen=True)
class Pause:
    pass


@dataclass(slots=True, frozen=True)
class RefreshCatalog:
    pass


@dataclass(slots=True, frozen=True)
class StartTicker:
    interval_ms: float


@dataclass(slots=True, frozen=True)
class StopTicker:
    pass


Effect = Union[BindAsset, ReloadAsset, LookupOffset, SeekTo, Play, Pause, RefreshCatalog, StartTicker, StopTicker]


@dataclass(slots=True, frozen=True)
class Transition:
    state: PlaybackState
    effects: tuple[Effect, ...] = field(default_factory=tuple)

    def then(self, other: Transition) -> Transition:
        return Transition(state=other.state, effects=self.effects + other.effects)
