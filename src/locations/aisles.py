"""Koridor düzenleme yardımcıları - numaraları her zaman 1..N sıralı tutar."""

from __future__ import annotations

from dataclasses import replace

from src.models.location import AisleConfig


def renumber_aisles(aisles: list[AisleConfig]) -> list[AisleConfig]:
    return [replace(a, aisle_number=i) for i, a in enumerate(aisles, start=1)]


def add_aisle(aisles: list[AisleConfig]) -> list[AisleConfig]:
    """Sona yeni koridor ekler; şekli son koridordan kopyalanır (yoksa 1x1)."""
    last = aisles[-1] if aisles else None
    new_aisle = AisleConfig(
        aisle_number=len(aisles) + 1,
        shelves_count=last.shelves_count if last else 1,
        bins_per_shelf=last.bins_per_shelf if last else 1,
    )
    return [*aisles, new_aisle]


def duplicate_aisle(aisles: list[AisleConfig], index: int) -> list[AisleConfig]:
    source = aisles[index]
    return [*aisles, replace(source, aisle_number=len(aisles) + 1)]


def remove_aisle(aisles: list[AisleConfig], index: int) -> list[AisleConfig]:
    """Koridoru siler ve kalanları yeniden numaralandırır. Son koridor silinemez."""
    if len(aisles) <= 1:
        return list(aisles)
    return renumber_aisles([a for i, a in enumerate(aisles) if i != index])


def total_bins(aisles: list[AisleConfig]) -> int:
    return sum(a.shelves_count * a.bins_per_shelf for a in aisles)
