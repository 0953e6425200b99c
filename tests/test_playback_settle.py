from gamefilm.config import PlaybackSettings
from gamefilm.playback.catalog import CatalogAsset, build_catalog
from gamefilm.playback.models import (
    BindAsset,
    LookupOffset,
    MetadataLoaded,
    OffsetReported,
    Pause,
    Play,
    PlaybackState,
    SeekTo,
    SwitchRequested,
)
from gamefilm.playback.reducer import reduce
from gamefilm.playback.settle import coverage_window
from gamefilm.timeline.models import CameraLane, Clip, build_lanes

_SETTINGS = PlaybackSettings()


def _state() -> PlaybackState:
    return PlaybackState(
        lanes=build_lanes(
            [
                CameraLane(lane=1, clips=(Clip("broadcast", 0, 1_800_000),)),
                CameraLane(lane=2, clips=(Clip("endzone", 120_000, 60_000),)),
            ]
        ),
        catalog=build_catalog(
            [
                CatalogAsset("broadcast", duration_seconds=1_800.0),
                CatalogAsset("endzone", duration_seconds=60.0),
            ]
        ),
    )


def test_switch_emits_bind_and_offset_lookup_with_fresh_epoch() -> None:
    transition = reduce(_state(), SwitchRequested("endzone", target_ms=150_000), 1_000, _SETTINGS)

    assert transition.effects == (BindAsset("endzone", 1), LookupOffset("endzone", 1))
    assert transition.state.switching
    assert transition.state.queued_seek_s == 30.0
    assert transition.state.pending.epoch == 1


def test_metadata_before_offset_still_settles_on_exact_target() -> None:
    state = reduce(_state(), SwitchRequested("endzone", target_ms=150_000), 1_000, _SETTINGS).state

    seeked = reduce(state, MetadataLoaded(60.0, asset_id="endzone"), 1_200, _SETTINGS)
    assert seeked.effects == (SeekTo(30.0),)
    assert seeked.state.pending is not None
    assert seeked.state.suppress_until_ms == 1_700

    settled = reduce(seeked.state, OffsetReported("endzone", 1, 120_000, 60_000), 1_300, _SETTINGS)
    assert settled.effects == ()
    assert settled.state.pending is None
    assert settled.state.target_game_ms is None
    assert not settled.state.switching
    assert settled.state.position_ms == 150_000


def test_metadata_waits_for_usable_ready_state() -> None:
    state = reduce(_state(), SwitchRequested("endzone", target_ms=150_000), 1_000, _SETTINGS).state

    waiting = reduce(state, MetadataLoaded(60.0, ready_state=0, asset_id="endzone"), 1_200, _SETTINGS)

    assert waiting.effects == ()
    assert waiting.state.queued_seek_s == 30.0


def test_stale_offset_from_older_epoch_is_discarded() -> None:
    state = reduce(_state(), SwitchRequested("endzone", target_ms=150_000), 1_000, _SETTINGS).state

    stale = reduce(state, OffsetReported("endzone", 0, 120_000, 60_000), 1_100, _SETTINGS)

    assert stale.state.offset is None


def test_short_asset_caps_coverage_at_loaded_duration() -> None:
    state = reduce(_state(), SwitchRequested("broadcast", target_ms=250_000), 1_000, _SETTINGS).state
    state = reduce(state, OffsetReported("broadcast", 1, 0, 1_800_000), 1_050, _SETTINGS).state

    denied = reduce(state, MetadataLoaded(194.0, asset_id="broadcast"), 1_100, _SETTINGS)

    assert coverage_window(denied.state) == (0, 194_000)
    assert denied.effects == (SeekTo(194.0), Pause())
    assert denied.state.target_game_ms == 250_000
    assert denied.state.pending is None
    assert not denied.state.switching
    assert not denied.state.resume_after_switch
    assert denied.state.position_ms == 250_000


def test_covered_switch_resumes_when_previously_playing() -> None:
    state = _state().evolve(is_playing=True)
    state = reduce(state, SwitchRequested("endzone", target_ms=150_000), 1_000, _SETTINGS).state
    state = reduce(state, OffsetReported("endzone", 1, 120_000, 60_000), 1_050, _SETTINGS).state

    settled = reduce(state, MetadataLoaded(60.0, asset_id="endzone"), 1_100, _SETTINGS)

    assert settled.effects == (SeekTo(30.0), Play())
    assert settled.state.is_playing


def test_coverage_window_falls_back_to_catalog_sync_offset() -> None:
    state = PlaybackState(catalog=build_catalog([CatalogAsset("phone", sync_offset_seconds=90.0)]))
    state = reduce(state, SwitchRequested("phone", target_ms=100_000), 1_000, _SETTINGS).state
    assert state.queued_seek_s == 10.0
    state = reduce(state, OffsetReported("phone", 1, None, None), 1_050, _SETTINGS).state
    state = reduce(state, MetadataLoaded(30.0, asset_id="phone"), 1_100, _SETTINGS).state

    assert coverage_window(state) == (90_000, 120_000)
    assert state.pending is None
