"""Camera lane and clip model for the game timeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

MAX_LANES = 5

DEFAULT_LANE_LABELS: dict[int, str] = {
    1: "Camera 1",
    2: "Camera 2",
    3: "Camera 3",
    4: "Camera 4",
    5: "Camera 5",
}


@dataclass(slots=True, frozen=True)
class Clip:
    asset_id: str
    lane_position_ms: float
    duration_ms: float

    def __post_init__(self) -> None:
        if not self.asset_id:
            raise ValueError("asset_id must not be empty")
        if self.lane_position_ms < 0:
            raise ValueError("lane_position_ms must be >= 0")
        if self.duration_ms < 0:
            raise ValueError("duration_ms must be >= 0")

    @property
    def end_ms(self) -> float:
        return self.lane_position_ms + self.duration_ms

    def contains(self, time_ms: float) -> bool:
        return self.lane_position_ms <= time_ms < self.end_ms

    def distance_to(self, time_ms: float) -> float:
        if time_ms < self.lane_position_ms:
            return self.lane_position_ms - time_ms
        if time_ms >= self.end_ms:
            return time_ms - self.end_ms
        return 0.0


@dataclass(slots=True, frozen=True)
class CameraLane:
    lane: int
    label: str = ""
    clips: tuple[Clip, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not 1 <= self.lane <= MAX_LANES:
            raise ValueError(f"lane must be in range [1,{MAX_LANES}]")
        ordered = tuple(sorted(self.clips, key=lambda clip: (clip.lane_position_ms, clip.asset_id)))
        for previous, current in zip(ordered, ordered[1:]):
            if current.lane_position_ms < previous.end_ms:
                raise ValueError(
                    f"clips '{previous.asset_id}' and '{current.asset_id}' overlap on lane {self.lane}"
                )
        object.__setattr__(self, "clips", ordered)
        if not self.label:
            object.__setattr__(self, "label", DEFAULT_LANE_LABELS.get(self.lane, f"Camera {self.lane}"))

    @property
    def end_ms(self) -> float:
        return max((clip.end_ms for clip in self.clips), default=0.0)

    def has_asset(self, asset_id: str) -> bool:
        return any(clip.asset_id == asset_id for clip in self.clips)

    def clip_for_asset(self, asset_id: str) -> Clip | None:
        for clip in self.clips:
            if clip.asset_id == asset_id:
                return clip
        return None


def build_lanes(lanes: Iterable[CameraLane]) -> tuple[CameraLane, ...]:
    items = sorted(lanes, key=lambda lane: lane.lane)
    seen: set[int] = set()
    for lane in items:
        if lane.lane in seen:
            raise ValueError(f"duplicate lane number {lane.lane}")
        seen.add(lane.lane)
    return tuple(items)
