"""Ports to the physical player and the tick scheduler."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable, Literal, Protocol

from gamefilm.errors import GameFilmError

logger = logging.getLogger(__name__)


class Player(Protocol):
    """Single player slot. Loading an asset replaces whatever was bound."""

    def load(self, asset_id: str, url: str) -> None: ...

    def seek(self, seconds: float) -> None: ...

    def play(self) -> None: ...

    def pause(self) -> None: ...


class Ticker(Protocol):
    def start(self, interval_ms: float, callback: Callable[[], None]) -> None: ...

    def stop(self) -> None: ...


class AsyncioTicker:
    """Repeating callback on an asyncio event loop; ``start`` restarts.

    Without an explicit ``loop`` the ticker schedules on the running loop, so
    synchronous callers must pass a loop here or give the engine another
    ``Ticker``.
    """

    def __init__(self, loop: asyncio.AbstractEventLoop | None = None) -> None:
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None

    @property
    def running(self) -> bool:
        return self._handle is not None

    def start(self, interval_ms: float, callback: Callable[[], None]) -> None:
        self.stop()
        loop = self._loop or _running_loop()
        interval_s = max(interval_ms, 1.0) / 1000

        def _fire() -> None:
            self._handle = loop.call_later(interval_s, _fire)
            callback()

        self._handle = loop.call_later(interval_s, _fire)

    def stop(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None


def _running_loop() -> asyncio.AbstractEventLoop:
    try:
        return asyncio.get_running_loop()
    except RuntimeError as exc:
        raise GameFilmError(
            "AsyncioTicker needs a running event loop; pass loop= or give PlaybackEngine a ticker"
        ) from exc


PlayerCommandKind = Literal["load", "seek", "play", "pause"]


@dataclass(slots=True, frozen=True)
class PlayerCommand:
    sequence: int
    kind: PlayerCommandKind
    asset_id: str | None = None
    url: str | None = None
    seconds: float | None = None


class CommandQueuePlayer:
    """Player that queues commands for a remote (browser) video element to drain."""

    def __init__(self) -> None:
        self._commands: list[PlayerCommand] = []
        self._sequence = 0
        self.asset_id: str | None = None

    def load(self, asset_id: str, url: str) -> None:
        self.asset_id = asset_id
        # commands queued for the previous binding are dropped
        self._commands = []
        self._push("load", asset_id=asset_id, url=url)

    def seek(self, seconds: float) -> None:
        self._push("seek", asset_id=self.asset_id, seconds=seconds)

    def play(self) -> None:
        self._push("play", asset_id=self.asset_id)

    def pause(self) -> None:
        self._push("pause", asset_id=self.asset_id)

    def pending(self) -> list[PlayerCommand]:
        return list(self._commands)

    def drain(self) -> list[PlayerCommand]:
        commands, self._commands = self._commands, []
        return commands

    def _push(self, kind: PlayerCommandKind, **fields: object) -> None:
        self._sequence += 1
        self._commands.append(PlayerCommand(sequence=self._sequence, kind=kind, **fields))  # type: ignore[arg-type]
        logger.debug("Queued player command %s %s", kind, fields)
