"""Playback domain public exports."""

from gamefilm.playback.catalog import CatalogAsset, build_catalog
from gamefilm.playback.facade import Playback
from gamefilm.playback.models import MediaErrorCode, PlaybackState
from gamefilm.playback.reducer import reduce
from gamefilm.playback.service import PlaybackEngine
from gamefilm.playback.session import AsyncioTicker, CommandQueuePlayer, Player, PlayerCommand, Ticker
from gamefilm.playback.status import CoverageKind, CoverageStatus, GapReason, TransportStatus

__all__ = [
    "AsyncioTicker",
    "CatalogAsset",
    "CommandQueuePlayer",
    "CoverageKind",
    "CoverageStatus",
    "GapReason",
    "MediaErrorCode",
    "Playback",
    "PlaybackEngine",
    "PlaybackState",
    "Player",
    "PlayerCommand",
    "Ticker",
    "TransportStatus",
    "build_catalog",
    "reduce",
]
