from gamefilm.playback.catalog import CatalogAsset, build_catalog
from gamefilm.playback.models import ClipOffset, PlaybackSession, PlaybackState, SwitchRequest, VirtualPlaybackTimer
from gamefilm.playback.status import CoverageKind, GapReason, coverage_status, transport_status
from gamefilm.timeline.models import CameraLane, Clip, build_lanes
from gamefilm.ui.overlay import clip_blocks, overlay_for, playhead_ratio, ruler_ticks


def _state(**changes: object) -> PlaybackState:
    state = PlaybackState(
        lanes=build_lanes([CameraLane(lane=1, clips=(Clip("a", 60_000, 60_000), Clip("b", 180_000, 60_000)))]),
        catalog=build_catalog([CatalogAsset("a"), CatalogAsset("b")]),
        session=PlaybackSession(asset_id="a", loaded_duration_s=60.0),
        offset=ClipOffset(asset_id="a", epoch=1, lane_position_ms=60_000, duration_ms=60_000),
        epoch=1,
    )
    return state.evolve(**changes)


def test_covered_when_playhead_is_inside_bound_clip() -> None:
    status = coverage_status(_state(position_ms=90_000))
    assert status.kind is CoverageKind.COVERED
    assert overlay_for(status, transport_status(_state())) is None


def test_switching_reports_pending_target() -> None:
    pending = SwitchRequest(asset_id="b", target_game_ms=200_000, epoch=2)
    status = coverage_status(_state(pending=pending, switching=True, target_game_ms=200_000))

    assert status.kind is CoverageKind.SWITCHING
    assert status.game_time_ms == 200_000
    assert overlay_for(status, transport_status(_state())).title == "Switching camera..."


def test_denied_target_reports_window_and_reason() -> None:
    before = coverage_status(_state(target_game_ms=30_000))
    after = coverage_status(_state(target_game_ms=150_000))

    assert before.kind is CoverageKind.NO_COVERAGE
    assert before.reason is GapReason.BEFORE_FOOTAGE
    assert (before.window_start_ms, before.window_end_ms) == (60_000, 120_000)
    assert after.reason is GapReason.AFTER_FOOTAGE
    assert after.next_clip_start_ms == 180_000

    overlay = overlay_for(before, transport_status(_state()))
    assert overlay.dismissible
    assert overlay.title == "This camera has no footage yet at 0:30"
    assert overlay.detail == "Footage starts at 1:00"


def test_gap_between_clips_reports_surrounding_window() -> None:
    status = coverage_status(_state(position_ms=150_000))

    assert status.reason is GapReason.GAP
    assert (status.window_start_ms, status.window_end_ms) == (120_000, 180_000)
    assert overlay_for(status, transport_status(_state())).detail == "Next footage at 3:00"


def test_virtual_playback_reports_gap() -> None:
    timer = VirtualPlaybackTimer(start_wall_ms=0, start_game_ms=125_000, target_game_ms=180_000)
    status = coverage_status(_state(position_ms=130_000, virtual=timer))

    assert status.reason is GapReason.GAP
    assert status.window_end_ms == 180_000
    assert transport_status(_state(virtual=timer)).virtual


def test_no_asset_bound() -> None:
    state = PlaybackState()
    status = coverage_status(state)

    assert status.reason is GapReason.NO_ASSET
    assert overlay_for(status, transport_status(state)).title == "Select a video to begin"


def test_load_error_takes_precedence_in_overlay() -> None:
    state = _state(session=PlaybackSession(asset_id="a", load_error="Failed to load video."))
    overlay = overlay_for(coverage_status(state), transport_status(state))

    assert overlay.title == "Failed to load video."
    assert overlay.retryable


def test_ruler_helpers() -> None:
    assert playhead_ratio(60_000, 240_000) == 0.25
    assert playhead_ratio(500_000, 240_000) == 1.0
    assert playhead_ratio(10, 0) == 0.0
    assert ruler_ticks(120_000) == [(0, "0:00"), (60_000, "1:00"), (120_000, "2:00")]

    blocks = clip_blocks(_state().lanes, zoom_level=2, bound_asset_id="b")
    assert [(block.asset_id, block.left_px, block.width_px, block.active) for block in blocks] == [
        ("a", 30.0, 30.0, False),
        ("b", 90.0, 30.0, True),
    ]
