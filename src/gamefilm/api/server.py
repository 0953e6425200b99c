"""HTTP surface for the timeline viewer: lane pushes, transport and native player events."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, HTTPException
from fastapi.responses import Response

from gamefilm.api.schemas import (
    CatalogAssetPayload,
    CatalogRequest,
    ClipPayload,
    CommandsResponse,
    CoverageResponse,
    DragRequest,
    LanePayload,
    LaneRequest,
    LanesRequest,
    NativeEventRequest,
    OverlayResponse,
    PlayerCommandResponse,
    StatusResponse,
    SwitchRequest,
    TimelineResponse,
)
from gamefilm.config import PlaybackSettings, configure_logging
from gamefilm.playback.catalog import CatalogAsset, UrlResolver
from gamefilm.playback.models import MediaErrorCode
from gamefilm.playback.service import Clock, PlaybackEngine
from gamefilm.playback.session import CommandQueuePlayer, Ticker
from gamefilm.timeline.models import CameraLane, Clip, build_lanes
from gamefilm.ui.overlay import overlay_for

logger = logging.getLogger(__name__)


def create_app(
    player: CommandQueuePlayer | None = None,
    settings: PlaybackSettings | None = None,
    clock: Clock | None = None,
    ticker: Ticker | None = None,
    url_resolver: UrlResolver | None = None,
) -> FastAPI:
    settings = settings or PlaybackSettings.from_env()
    command_player = player or CommandQueuePlayer()
    pushed_catalog: list[CatalogAsset] = []
    engine = PlaybackEngine(
        player=command_player,
        catalog_provider=lambda: tuple(pushed_catalog),
        url_resolver=url_resolver,
        clock=clock,
        ticker=ticker,
        settings=settings,
    )

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        configure_logging(settings.log_level)
        logger.info("Playback engine ready (debounce=%.0fms)", settings.switch_debounce_ms)
        yield
        engine.close()

    app = FastAPI(title="gamefilm playback API", version="0.1.0", lifespan=lifespan)
    app.state.engine = engine

    @app.get("/")
    async def root() -> dict[str, str]:
        return {
            "service": "gamefilm playback API",
            "status": "ok",
            "docs": "/docs",
        }

    @app.get("/favicon.ico", include_in_schema=False)
    async def favicon() -> Response:
        return Response(status_code=204)

    @app.put("/v1/timeline/lanes", response_model=TimelineResponse)
    async def put_lanes(payload: LanesRequest) -> TimelineResponse:
        try:
            lanes = build_lanes(
                CameraLane(
                    lane=item.lane,
                    label=item.label,
                    clips=tuple(
                        Clip(
                            asset_id=clip.asset_id,
                            lane_position_ms=clip.lane_position_ms,
                            duration_ms=clip.duration_ms,
                        )
                        for clip in item.clips
                    ),
                )
                for item in payload.lanes
            )
            engine.replace_lanes(lanes)
        except (KeyError, ValueError) as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return _timeline(engine)

    @app.put("/v1/catalog", response_model=TimelineResponse)
    async def put_catalog(payload: CatalogRequest) -> TimelineResponse:
        try:
            assets = [
                CatalogAsset(
                    asset_id=item.asset_id,
                    label=item.label,
                    order=item.order,
                    sync_offset_seconds=item.sync_offset_seconds,
                    duration_seconds=item.duration_seconds,
                )
                for item in payload.assets
            ]
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        pushed_catalog[:] = assets
        engine.update_catalog(assets)
        return _timeline(engine)

    @app.get("/v1/timeline", response_model=TimelineResponse)
    async def get_timeline() -> TimelineResponse:
        return _timeline(engine)

    @app.post("/v1/playback/switch", response_model=StatusResponse)
    async def switch_camera(payload: SwitchRequest) -> StatusResponse:
        engine.request_switch(asset_id=payload.asset_id, target_ms=payload.target_ms)
        return _status(engine)

    @app.post("/v1/playback/drag", response_model=StatusResponse)
    async def drag_playhead(payload: DragRequest) -> StatusResponse:
        engine.drag(game_time_ms=payload.game_time_ms, destination_ms=payload.destination_ms)
        return _status(engine)

    @app.post("/v1/playback/play", response_model=StatusResponse)
    async def play() -> StatusResponse:
        engine.play()
        return _status(engine)

    @app.post("/v1/playback/pause", response_model=StatusResponse)
    async def pause() -> StatusResponse:
        engine.pause()
        return _status(engine)

    @app.post("/v1/playback/lane", response_model=StatusResponse)
    async def select_lane(payload: LaneRequest) -> StatusResponse:
        engine.select_lane(payload.lane)
        return _status(engine)

    @app.post("/v1/playback/dismiss", response_model=StatusResponse)
    async def dismiss_overlay() -> StatusResponse:
        engine.dismiss_overlay()
        return _status(engine)

    @app.post("/v1/playback/retry", response_model=StatusResponse)
    async def retry_load() -> StatusResponse:
        engine.retry()
        return _status(engine)

    @app.post("/v1/playback/events", response_model=StatusResponse)
    async def native_event(payload: NativeEventRequest) -> StatusResponse:
        try:
            _dispatch_native(engine, payload)
        except (KeyError, ValueError) as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc
        return _status(engine)

    @app.get("/v1/playback/status", response_model=StatusResponse)
    async def get_status() -> StatusResponse:
        return _status(engine)

    @app.get("/v1/playback/commands", response_model=CommandsResponse)
    async def drain_commands() -> CommandsResponse:
        return CommandsResponse(
            commands=[
                PlayerCommandResponse(
                    sequence=item.sequence,
                    kind=item.kind,
                    asset_id=item.asset_id,
                    url=item.url,
                    seconds=item.seconds,
                )
                for item in command_player.drain()
            ]
        )

    return app


def _dispatch_native(engine: PlaybackEngine, payload: NativeEventRequest) -> None:
    asset_id = payload.asset_id
    if payload.type == "time_update":
        if payload.current_time is None:
            raise ValueError("time_update requires current_time")
        engine.on_time_update(payload.current_time, asset_id=asset_id)
    elif payload.type == "metadata_loaded":
        if payload.duration is None:
            raise ValueError("metadata_loaded requires duration")
        engine.on_metadata_loaded(payload.duration, ready_state=payload.ready_state, asset_id=asset_id)
    elif payload.type == "ended":
        engine.on_ended(asset_id=asset_id)
    elif payload.type == "error":
        code = MediaErrorCode(payload.error_code) if payload.error_code is not None else None
        engine.on_error(code=code, message=payload.message, asset_id=asset_id)
    elif payload.type == "can_play":
        engine.on_can_play(asset_id=asset_id)
    elif payload.type == "played":
        engine.on_played(asset_id=asset_id)
    else:
        engine.on_paused(asset_id=asset_id)


def _timeline(engine: PlaybackEngine) -> TimelineResponse:
    state = engine.state
    return TimelineResponse(
        lanes=[
            LanePayload(
                lane=lane.lane,
                label=lane.label,
                clips=[
                    ClipPayload(
                        asset_id=clip.asset_id,
                        lane_position_ms=clip.lane_position_ms,
                        duration_ms=clip.duration_ms,
                    )
                    for clip in lane.clips
                ],
            )
            for lane in state.lanes
        ],
        duration_ms=engine.duration_ms(),
        active_lane=state.active_lane,
        assets=[
            CatalogAssetPayload(
                asset_id=asset.asset_id,
                label=asset.label,
                order=asset.order,
                sync_offset_seconds=asset.sync_offset_seconds,
                duration_seconds=asset.duration_seconds,
            )
            for asset in state.catalog
        ],
    )


def _status(engine: PlaybackEngine) -> StatusResponse:
    coverage = engine.coverage()
    transport = engine.transport()
    overlay = overlay_for(coverage, transport)
    return StatusResponse(
        game_time_ms=engine.game_time_ms(),
        duration_ms=engine.duration_ms(),
        active_lane=engine.state.active_lane,
        asset_id=transport.asset_id,
        playing=transport.playing,
        virtual=transport.virtual,
        local_time_s=transport.local_time_s,
        loaded_duration_s=transport.duration_s,
        load_error=transport.load_error,
        retryable=transport.retryable,
        catalog_error=engine.state.catalog_error,
        coverage=CoverageResponse(
            kind=coverage.kind.value,
            game_time_ms=coverage.game_time_ms,
            reason=coverage.reason.value if coverage.reason is not None else None,
            window_start_ms=coverage.window_start_ms,
            window_end_ms=coverage.window_end_ms,
            next_clip_start_ms=coverage.next_clip_start_ms,
        ),
        overlay=(
            OverlayResponse(
                title=overlay.title,
                detail=overlay.detail,
                dismissible=overlay.dismissible,
                retryable=overlay.retryable,
            )
            if overlay is not None
            else None
        ),
    )


app = create_app()
