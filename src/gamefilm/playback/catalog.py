"""Locally known asset catalog (camera videos and their sync metadata)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Sequence


@dataclass(slots=True, frozen=True)
class CatalogAsset:
    asset_id: str
    label: str = ""
    order: int = 0
    sync_offset_seconds: float = 0.0
    duration_seconds: float | None = None

    def __post_init__(self) -> None:
        if not self.asset_id:
            raise ValueError("asset_id must not be empty")
        if self.duration_seconds is not None and self.duration_seconds < 0:
            raise ValueError("duration_seconds must be >= 0")

    @property
    def sync_offset_ms(self) -> float:
        return self.sync_offset_seconds * 1000


CatalogProvider = Callable[[], Sequence[CatalogAsset]]
UrlResolver = Callable[[str], str]


def build_catalog(assets: Iterable[CatalogAsset]) -> tuple[CatalogAsset, ...]:
    items: dict[str, CatalogAsset] = {}
    for asset in assets:
        items[asset.asset_id] = asset
    return tuple(sorted(items.values(), key=lambda asset: (asset.order, asset.asset_id)))


def find_asset(catalog: Sequence[CatalogAsset], asset_id: str | None) -> CatalogAsset | None:
    if asset_id is None:
        return None
    for asset in catalog:
        if asset.asset_id == asset_id:
            return asset
    return None
