from gamefilm.config import PlaybackSettings
from gamefilm.playback.catalog import CatalogAsset
from gamefilm.playback.service import PlaybackEngine
from gamefilm.playback.session import CommandQueuePlayer
from gamefilm.playback.status import CoverageKind, GapReason
from gamefilm.timeline.models import CameraLane, Clip


class _Clock:
    def __init__(self, now: float = 10_000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms


class _Ticker:
    def __init__(self) -> None:
        self.callback = None
        self.interval_ms: float | None = None

    def start(self, interval_ms: float, callback) -> None:
        self.interval_ms = interval_ms
        self.callback = callback

    def stop(self) -> None:
        self.callback = None


def _playing_engine(lanes: tuple[CameraLane, ...]) -> tuple[PlaybackEngine, CommandQueuePlayer, _Clock, _Ticker]:
    player = CommandQueuePlayer()
    clock = _Clock()
    ticker = _Ticker()
    engine = PlaybackEngine(
        player=player,
        clock=clock,
        ticker=ticker,
        settings=PlaybackSettings(),
        lanes=lanes,
        catalog=(CatalogAsset("a"), CatalogAsset("b")),
    )
    engine.request_switch("a", target_ms=490_000)
    engine.on_metadata_loaded(500.0, asset_id="a")
    engine.play()
    engine.on_played(asset_id="a")
    player.drain()
    clock.advance(600)
    return engine, player, clock, ticker


def _gap_lanes() -> tuple[CameraLane, ...]:
    return (CameraLane(lane=1, clips=(Clip("a", 0, 500_000), Clip("b", 510_000, 90_000))),)


def _run_ticks(engine: PlaybackEngine, clock: _Clock, ticker: _Ticker, limit: int = 500) -> None:
    for _ in range(limit):
        if ticker.callback is None:
            return
        clock.advance(ticker.interval_ms)
        ticker.callback()


def test_virtual_playback_hands_off_to_clip_within_one_tick() -> None:
    engine, player, clock, ticker = _playing_engine(_gap_lanes())

    engine.drag(500_000, destination_ms=520_000)
    assert engine.state.virtual is not None
    assert ticker.interval_ms == 100
    assert engine.coverage().reason is GapReason.GAP

    switched_at: float | None = None
    for _ in range(300):
        clock.advance(100)
        ticker.callback()
        if engine.state.bound_asset_id == "b":
            switched_at = engine.state.pending.target_game_ms
            break

    assert switched_at is not None
    assert 510_000 <= switched_at <= 510_100
    assert engine.state.virtual is None
    assert ticker.callback is None
    assert [command.asset_id for command in player.drain()] == ["b"]

    engine.on_metadata_loaded(90.0, asset_id="b")
    commands = player.drain()
    assert [command.kind for command in commands] == ["seek", "play"]
    assert engine.state.is_playing
    assert engine.coverage().kind is CoverageKind.COVERED


def test_virtual_playback_stops_at_target_without_footage() -> None:
    lanes = (CameraLane(lane=1, clips=(Clip("a", 0, 500_000),)),)
    engine, player, clock, ticker = _playing_engine(lanes)

    engine.drag(550_000, destination_ms=560_000)
    _run_ticks(engine, clock, ticker)

    assert engine.state.virtual is None
    assert engine.game_time_ms() >= 560_000
    assert engine.state.bound_asset_id == "a"
    assert player.drain() == []


def test_native_events_do_not_move_playhead_during_virtual_playback() -> None:
    engine, _, clock, ticker = _playing_engine(_gap_lanes())
    engine.drag(500_000, destination_ms=520_000)

    clock.advance(2_000)
    ticker.callback()
    engine.on_time_update(499.9, asset_id="a")
    engine.on_paused(asset_id="a")

    assert engine.game_time_ms() == 502_000
    assert engine.state.virtual is not None


def test_pause_cancels_virtual_playback() -> None:
    engine, player, _, ticker = _playing_engine(_gap_lanes())
    engine.drag(500_000, destination_ms=520_000)

    engine.pause()

    assert engine.state.virtual is None
    assert ticker.callback is None
    assert not engine.state.is_playing
    assert [command.kind for command in player.drain()] == ["pause"]


def test_play_in_gap_runs_towards_next_clip() -> None:
    engine, player, clock, ticker = _playing_engine(_gap_lanes())
    engine.pause()
    engine.drag(505_000)
    assert engine.state.virtual is None

    engine.play()
    assert engine.state.virtual.target_game_ms == 510_000

    _run_ticks(engine, clock, ticker)

    assert engine.state.bound_asset_id == "b"
    assert engine.state.pending.target_game_ms == 510_000
