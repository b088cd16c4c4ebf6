"""Lokasyon yapılandırma veri modelleri."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union


class LocationType(str, Enum):
    WAREHOUSE = "WAREHOUSE"
    ZONE = "ZONE"
    AISLE = "AISLE"
    SHELF = "SHELF"
    BIN = "BIN"
    OTHER = "OTHER"


# Depo > Zon > Koridor > Raf > Göz > Diğer
LOCATION_HIERARCHY: dict[LocationType, LocationType] = {
    LocationType.WAREHOUSE: LocationType.ZONE,
    LocationType.ZONE: LocationType.AISLE,
    LocationType.AISLE: LocationType.SHELF,
    LocationType.SHELF: LocationType.BIN,
    LocationType.BIN: LocationType.OTHER,
    LocationType.OTHER: LocationType.OTHER,
}


def next_location_type(parent_type: Optional[LocationType] = None) -> LocationType:
    """Üst lokasyon tipine göre çocukların tipini döndürür (üst yoksa WAREHOUSE)."""
    if parent_type is None:
        return LocationType.WAREHOUSE
    return LOCATION_HIERARCHY[LocationType(parent_type)]


class BinLabeling(str, Enum):
    LETTERS = "LETTERS"
    NUMBERS = "NUMBERS"


class BinDirection(str, Enum):
    BOTTOM_UP = "BOTTOM_UP"
    TOP_DOWN = "TOP_DOWN"


class OccupiedBinsPolicy(str, Enum):
    BLOCK = "block"
    FORCE = "force"


@dataclass
class LocationNode:
    name: str
    children: list[LocationNode] = field(default_factory=list)

    @property
    def is_leaf(self) -> bool:
        return not self.children


@dataclass
class AisleConfig:
    aisle_number: int
    shelves_count: int = 1
    bins_per_shelf: int = 1


@dataclass(frozen=True)
class CodePattern:
    separator: str = "-"
    aisle_digits: int = 1
    shelf_digits: int = 2
    bin_labeling: BinLabeling = BinLabeling.LETTERS
    bin_direction: BinDirection = BinDirection.BOTTOM_UP


@dataclass
class ZoneStructure:
    warehouse_code: str
    zone_code: str
    aisles: list[AisleConfig]
    code_pattern: CodePattern = field(default_factory=CodePattern)

    @property
    def total_bins(self) -> int:
        return sum(a.shelves_count * a.bins_per_shelf for a in self.aisles)


@dataclass(frozen=True)
class BinAddress:
    aisle: int
    shelf: int
    position: str
    address: str


@dataclass
class Bin:
    id: str
    address: str
    aisle: int
    shelf: int
    position: str
    capacity: Optional[int] = None
    current_occupancy: int = 0
    is_blocked: bool = False


@dataclass(frozen=True)
class ReconfigurationPlan:
    to_create: tuple[str, ...]
    to_preserve: tuple[str, ...]
    to_block: tuple[str, ...]
    to_remove: tuple[str, ...]
    is_first_configuration: bool
    # Hedef yapının tüm gözleri (codec sırasıyla)
    target: tuple[BinAddress, ...] = ()
    # Bloklanacak adreslerin doluluk miktarları: ((adres, miktar), ...)
    blocked_occupancy: tuple[tuple[str, int], ...] = ()

    @property
    def total_affected_items(self) -> int:
        return sum(quantity for _, quantity in self.blocked_occupancy)

    def occupancy_of(self, address: str) -> int:
        return dict(self.blocked_occupancy).get(address, 0)

    def target_by_address(self) -> dict[str, BinAddress]:
        return {b.address: b for b in self.target}


@dataclass
class CreationFailure:
    name: str
    location_type: LocationType
    error: Union[Exception, str]
    parent_id: Optional[str] = None
    # Üst lokasyon oluşturulamadığı için hiç denenmedi
    skipped: bool = False


@dataclass
class BatchResult:
    # Kardeş indeks yolu -> backend kimliği; aynı isimli kardeşler ayrı anahtar alır
    created: dict[tuple[int, ...], str] = field(default_factory=dict)
    # Kardeş indeks yolu -> isim yolu (gösterim için)
    paths: dict[tuple[int, ...], tuple[str, ...]] = field(default_factory=dict)
    failures: list[CreationFailure] = field(default_factory=list)
    not_attempted: list[str] = field(default_factory=list)
    cancelled: bool = False

    @property
    def succeeded(self) -> int:
        return len(self.created)

    @property
    def failed(self) -> int:
        return len(self.failures)

    @property
    def total(self) -> int:
        return self.succeeded + self.failed + len(self.not_attempted)

    def ids_for(self, *names: str) -> list[str]:
        """İsim yoluna uyan tüm oluşturulmuş kimlikleri oluşturma sırasıyla döndürür."""
        return [self.created[key] for key, path in self.paths.items() if path == names]

    def id_for(self, *names: str) -> Optional[str]:
        ids = self.ids_for(*names)
        return ids[0] if ids else None

    @property
    def failed_names(self) -> list[str]:
        return [f.name for f in self.failures]

    def summary(self) -> dict:
        return {
            "total": self.total,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "not_attempted": len(self.not_attempted),
            "cancelled": self.cancelled,
        }


@dataclass
class ApplyResult:
    zone_id: str
    bins_created: int = 0
    bins_preserved: int = 0
    bins_blocked: int = 0
    bins_removed: int = 0
    policy: Optional[OccupiedBinsPolicy] = None


@dataclass
class BatchConfig:
    batch_size: int = 3
    delay_between_items: float = 0.5
    delay_between_batches: float = 2.0
    max_retries: int = 3
    retry_delay: float = 60.0

    @classmethod
    def from_env(cls) -> BatchConfig:
        """Ortam değişkenlerinden batch ayarlarını okur."""
        defaults = cls()
        return cls(
            batch_size=int(os.environ.get("LOCATION_BATCH_SIZE", defaults.batch_size)),
            delay_between_items=float(
                os.environ.get("LOCATION_BATCH_ITEM_DELAY", defaults.delay_between_items)
            ),
            delay_between_batches=float(
                os.environ.get("LOCATION_BATCH_DELAY", defaults.delay_between_batches)
            ),
            max_retries=int(os.environ.get("LOCATION_BATCH_MAX_RETRIES", defaults.max_retries)),
            retry_delay=float(os.environ.get("LOCATION_BATCH_RETRY_DELAY", defaults.retry_delay)),
        )
