"""FastAPI request/response schemas."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class ClipPayload(BaseModel):
    asset_id: str = Field(min_length=1)
    lane_position_ms: float = Field(ge=0)
    duration_ms: float = Field(gt=0)


class LanePayload(BaseModel):
    lane: int = Field(ge=1, le=5)
    label: str = ""
    clips: list[ClipPayload] = Field(default_factory=list)


class LanesRequest(BaseModel):
    lanes: list[LanePayload] = Field(max_length=5)


class CatalogAssetPayload(BaseModel):
    asset_id: str = Field(min_length=1)
    label: str = ""
    order: int = 0
    sync_offset_seconds: float = 0.0
    duration_seconds: float | None = Field(default=None, ge=0)


class CatalogRequest(BaseModel):
    assets: list[CatalogAssetPayload]


class TimelineResponse(BaseModel):
    lanes: list[LanePayload]
    duration_ms: float
    active_lane: int
    assets: list[CatalogAssetPayload]


class SwitchRequest(BaseModel):
    asset_id: str = Field(min_length=1)
    target_ms: float | None = Field(default=None, ge=0)


class DragRequest(BaseModel):
    game_time_ms: float = Field(ge=0)
    destination_ms: float | None = Field(default=None, ge=0)


class LaneRequest(BaseModel):
    lane: int = Field(ge=1, le=5)


class NativeEventRequest(BaseModel):
    type: Literal["time_update", "metadata_loaded", "ended", "error", "can_play", "played", "paused"]
    asset_id: str | None = None
    current_time: float | None = Field(default=None, ge=0)
    duration: float | None = Field(default=None, ge=0)
    ready_state: int = Field(default=1, ge=0, le=4)
    error_code: int | None = Field(default=None, ge=1, le=4)
    message: str = ""


class CoverageResponse(BaseModel):
    kind: Literal["covered", "switching", "no_coverage"]
    game_time_ms: float
    reason: Literal["before_footage", "after_footage", "gap", "no_asset"] | None = None
    window_start_ms: float | None = None
    window_end_ms: float | None = None
    next_clip_start_ms: float | None = None


class OverlayResponse(BaseModel):
    title: str
    detail: str = ""
    dismissible: bool = False
    retryable: bool = False


class StatusResponse(BaseModel):
    game_time_ms: float
    duration_ms: float
    active_lane: int
    asset_id: str | None = None
    playing: bool
    virtual: bool
    local_time_s: float
    loaded_duration_s: float
    load_error: str | None = None
    retryable: bool
    catalog_error: str | None = None
    coverage: CoverageResponse
    overlay: OverlayResponse | None = None


class PlayerCommandResponse(BaseModel):
    sequence: int
    kind: Literal["load", "seek", "play", "pause"]
    asset_id: str | None = None
    url: str | None = None
    seconds: float | None = None


class CommandsResponse(BaseModel):
    commands: list[PlayerCommandResponse]
