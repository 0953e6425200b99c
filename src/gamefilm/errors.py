"""Exceptions raised at the engine's collaborator boundaries."""

from __future__ import annotations


class GameFilmError(RuntimeError):
    """Base class for playback engine errors."""


class UrlResolutionError(GameFilmError):
    """Raised when a playable URL cannot be issued for an asset."""


class CatalogRefreshError(GameFilmError):
    """Raised when the asset catalog cannot be refreshed."""
