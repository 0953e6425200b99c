import asyncio

import pytest

from gamefilm.errors import GameFilmError
from gamefilm.playback.session import AsyncioTicker, CommandQueuePlayer


def test_command_queue_player_drops_commands_of_previous_binding() -> None:
    player = CommandQueuePlayer()
    player.load("a", "asset://a")
    player.seek(12.5)
    player.play()

    player.load("b", "asset://b")
    player.seek(3.0)

    commands = player.drain()
    assert [(command.kind, command.asset_id) for command in commands] == [("load", "b"), ("seek", "b")]
    assert commands[1].seconds == 3.0
    assert commands[0].sequence < commands[1].sequence
    assert player.drain() == []


def test_pending_does_not_consume_queue() -> None:
    player = CommandQueuePlayer()
    player.load("a", "asset://a")
    player.pause()

    assert len(player.pending()) == 2
    assert len(player.drain()) == 2


def test_asyncio_ticker_repeats_until_stopped() -> None:
    async def scenario() -> int:
        ticker = AsyncioTicker()
        fired: list[int] = []
        ticker.start(5, lambda: fired.append(1))
        assert ticker.running
        await asyncio.sleep(0.1)
        ticker.stop()
        count = len(fired)
        await asyncio.sleep(0.03)
        assert len(fired) == count
        assert not ticker.running
        return count

    assert asyncio.run(scenario()) >= 2


def test_asyncio_ticker_needs_a_loop_outside_async_code() -> None:
    with pytest.raises(GameFilmError):
        AsyncioTicker().start(5, lambda: None)

    loop = asyncio.new_event_loop()
    try:
        ticker = AsyncioTicker(loop=loop)
        fired: list[int] = []
        ticker.start(5, lambda: fired.append(1))
        loop.run_until_complete(asyncio.sleep(0.05))
        ticker.stop()
    finally:
        loop.close()

    assert fired
