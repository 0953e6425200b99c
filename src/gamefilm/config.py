"""Environment-driven playback settings and logging setup."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

LOG_LEVELS: dict[str, int] = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


@dataclass(slots=True, frozen=True)
class PlaybackSettings:
    switch_debounce_ms: float = 500.0
    seek_suppress_ms: float = 500.0
    virtual_tick_ms: float = 100.0
    continuation_tolerance_ms: float = 1000.0
    boundary_window_s: float = 0.5
    stale_target_threshold_ms: float = 1000.0
    log_level: str = "info"

    @staticmethod
    def from_env() -> PlaybackSettings:
        log_level = os.getenv("GAMEFILM_LOG_LEVEL", "info").strip().lower()
        if log_level not in LOG_LEVELS:
            log_level = "info"
        return PlaybackSettings(
            switch_debounce_ms=_env_ms("GAMEFILM_SWITCH_DEBOUNCE_MS", 500.0),
            seek_suppress_ms=_env_ms("GAMEFILM_SEEK_SUPPRESS_MS", 500.0),
            virtual_tick_ms=max(_env_ms("GAMEFILM_VIRTUAL_TICK_MS", 100.0), 10.0),
            continuation_tolerance_ms=_env_ms("GAMEFILM_CONTINUATION_TOLERANCE_MS", 1000.0),
            log_level=log_level,
        )


def _env_ms(name: str, default: float) -> float:
    raw = os.getenv(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        return default
    return value if value >= 0 else default


def configure_logging(level_name: str, fmt: str = LOG_FORMAT, datefmt: str = "%H:%M:%S") -> None:
    level = LOG_LEVELS.get(level_name.lower())
    if level is None:
        valid = ", ".join(sorted(LOG_LEVELS))
        raise ValueError(f"Invalid log level '{level_name}'. Choose from: {valid}")

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    root.setLevel(level)

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(fmt=fmt, datefmt=datefmt))
    root.addHandler(handler)
