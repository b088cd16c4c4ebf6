"""Adres Kodlayıcı - Zon yapısından göz (bin) adreslerini deterministik olarak üretir.

Adres biçimi: DEPO{sep}ZON{sep}{koridor}{raf}{sep}GÖZ
Örnek: FAB-EST-102-B (koridor 1, raf 02, göz B)

Koridor/raf hane sayıları kullanıcı ayarıdır (CodePattern), adetten türetilmez.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Optional

from src.locations.errors import CapacityExceededError, StructureValidationError
from src.locations.pattern_expander import LETTERS, MAX_LETTERS
from src.models.location import (
    AisleConfig,
    BinAddress,
    BinDirection,
    BinLabeling,
    CodePattern,
    ZoneStructure,
)

logger = logging.getLogger(__name__)

SEPARATORS = ("-", ".", "")
AISLE_DIGITS = (1, 2)
SHELF_DIGITS = (2, 3)

_CODE = re.compile(r"^[A-Z]{2,5}$")
_BIN = re.compile(r"^(?:[A-Z]|\d+)$")
_UNSEPARATED = re.compile(r"^([A-Z]{2,5})([A-Z]{2,5})(\d{2,4})([A-Z]|\d+)$")


@dataclass(frozen=True)
class ParsedAddress:
    warehouse_code: str
    zone_code: str
    aisle: int
    shelf: int
    bin: str
    separator: str


# --- Doğrulama ---

def validate_code_pattern(pattern: CodePattern) -> None:
    if pattern.separator not in SEPARATORS:
        raise StructureValidationError(f"Geçersiz ayraç: {pattern.separator!r}")
    if pattern.aisle_digits not in AISLE_DIGITS:
        raise StructureValidationError(f"Koridor hane sayısı 1 veya 2 olmalı: {pattern.aisle_digits}")
    if pattern.shelf_digits not in SHELF_DIGITS:
        raise StructureValidationError(f"Raf hane sayısı 2 veya 3 olmalı: {pattern.shelf_digits}")
    try:
        BinLabeling(pattern.bin_labeling)
        BinDirection(pattern.bin_direction)
    except ValueError as e:
        raise StructureValidationError(str(e)) from e


def validate_aisles(aisles: list[AisleConfig]) -> None:
    """Koridorların pozitif, benzersiz ve 1..N aralığında sıralı olduğunu doğrular."""
    if not aisles:
        raise StructureValidationError("En az bir koridor tanımlanmalı")

    for aisle in aisles:
        if aisle.aisle_number < 1:
            raise StructureValidationError(f"Koridor numarası pozitif olmalı: {aisle.aisle_number}")
        if aisle.shelves_count < 1 or aisle.bins_per_shelf < 1:
            raise StructureValidationError(
                f"Koridor {aisle.aisle_number}: raf ve göz sayıları pozitif olmalı"
            )

    numbers = [a.aisle_number for a in aisles]
    if len(set(numbers)) != len(numbers):
        raise StructureValidationError(f"Tekrarlanan koridor numarası: {numbers}")
    if sorted(numbers) != list(range(1, len(numbers) + 1)):
        raise StructureValidationError(f"Koridor numaraları 1..{len(numbers)} olmalı: {numbers}")


def check_capacity(structure: ZoneStructure) -> None:
    """Yapının hane genişlikleri ve etiket alfabesi içine sığdığını doğrular."""
    pattern = structure.code_pattern
    max_aisle = 10 ** pattern.aisle_digits - 1
    max_shelf = 10 ** pattern.shelf_digits - 1

    for aisle in structure.aisles:
        if aisle.aisle_number > max_aisle:
            raise CapacityExceededError(
                f"Koridor {aisle.aisle_number}, {pattern.aisle_digits} haneye sığmıyor",
                limit=max_aisle,
                requested=aisle.aisle_number,
            )
        if aisle.shelves_count > max_shelf:
            raise CapacityExceededError(
                f"Koridor {aisle.aisle_number}: {aisle.shelves_count} raf, "
                f"{pattern.shelf_digits} haneye sığmıyor",
                limit=max_shelf,
                requested=aisle.shelves_count,
            )
        if pattern.bin_labeling == BinLabeling.LETTERS and aisle.bins_per_shelf > MAX_LETTERS:
            raise CapacityExceededError(
                f"Koridor {aisle.aisle_number}: raf başına {aisle.bins_per_shelf} göz, "
                f"harf etiketleri en fazla {MAX_LETTERS}",
                limit=MAX_LETTERS,
                requested=aisle.bins_per_shelf,
            )


def validate_structure(structure: ZoneStructure) -> None:
    if not structure.warehouse_code or not structure.zone_code:
        raise StructureValidationError("Depo ve zon kodları boş olamaz")
    validate_code_pattern(structure.code_pattern)
    validate_aisles(structure.aisles)
    check_capacity(structure)


# --- Üretim ---

def bin_label(
    index: int,
    labeling: BinLabeling,
    direction: BinDirection,
    bins_in_shelf: int,
) -> str:
    """Raf içindeki 0 tabanlı indeks için göz etiketini döndürür.

    BOTTOM_UP: indeks 0 en alttaki göz; TOP_DOWN: indeks 0 en üstteki göz.
    """
    if direction == BinDirection.BOTTOM_UP:
        adjusted = index
    else:
        adjusted = bins_in_shelf - 1 - index

    if labeling == BinLabeling.LETTERS:
        if adjusted >= MAX_LETTERS:
            raise CapacityExceededError(
                f"Harf etiketleri en fazla {MAX_LETTERS}", limit=MAX_LETTERS, requested=adjusted + 1
            )
        return LETTERS[adjusted]
    return str(adjusted + 1)


def format_address(
    warehouse_code: str,
    zone_code: str,
    aisle: int,
    shelf: int,
    position: str,
    pattern: CodePattern,
) -> str:
    aisle_shelf = f"{aisle:0{pattern.aisle_digits}d}{shelf:0{pattern.shelf_digits}d}"
    return pattern.separator.join([warehouse_code, zone_code, aisle_shelf, position])


def addresses_for_zone(structure: ZoneStructure) -> list[BinAddress]:
    """Zonun tüm göz adreslerini koridor > raf > göz sırasıyla üretir.

    Raises:
        StructureValidationError: Geçersiz yapı isteği.
        CapacityExceededError: Hane genişlikleri veya harf alfabesi yetmiyor.
    """
    validate_structure(structure)
    pattern = structure.code_pattern

    addresses = []
    for aisle in structure.aisles:
        for shelf in range(1, aisle.shelves_count + 1):
            for index in range(aisle.bins_per_shelf):
                position = bin_label(index, pattern.bin_labeling, pattern.bin_direction, aisle.bins_per_shelf)
                address = format_address(
                    structure.warehouse_code,
                    structure.zone_code,
                    aisle.aisle_number,
                    shelf,
                    position,
                    pattern,
                )
                addresses.append(BinAddress(aisle.aisle_number, shelf, position, address))
    return addresses


def sample_addresses(structure: ZoneStructure) -> list[str]:
    """Önizleme için ilk, ortadaki (birden fazla koridor varsa) ve son adresi döndürür."""
    validate_structure(structure)
    pattern = structure.code_pattern
    aisles = structure.aisles

    def _address(aisle: AisleConfig, shelf: int, index: int) -> str:
        position = bin_label(index, pattern.bin_labeling, pattern.bin_direction, aisle.bins_per_shelf)
        return format_address(
            structure.warehouse_code, structure.zone_code, aisle.aisle_number, shelf, position, pattern
        )

    samples = [_address(aisles[0], 1, 0)]
    if len(aisles) > 1:
        middle = aisles[(len(aisles) - 1) // 2]
        samples.append(_address(middle, (middle.shelves_count + 1) // 2, middle.bins_per_shelf // 2))
    last = aisles[-1]
    samples.append(_address(last, last.shelves_count, last.bins_per_shelf - 1))
    # Tek gözlü yapılarda ilk ve son adres aynıdır
    return list(dict.fromkeys(samples))


# --- Ayrıştırma ---

def _parse_position(position: str) -> Optional[tuple[int, int]]:
    """Koridor+raf bloğunu ayırır: 102 -> (1, 2), 0102 -> (1, 2), 1002 -> (1, 2), 01002 -> (1, 2)."""
    if len(position) < 2 or not position.isdigit():
        return None
    if len(position) == 4 and position[0] == "0":
        split = 2
    elif len(position) == 5:
        split = 2
    else:
        split = 1
    aisle, shelf = int(position[:split]), int(position[split:])
    if aisle <= 0 or shelf <= 0:
        return None
    return aisle, shelf


def _parse_with_separator(address: str, separator: str) -> Optional[ParsedAddress]:
    if separator:
        parts = address.split(separator)
        if len(parts) != 4:
            return None
        warehouse, zone, position, bin_ = parts
        if not _CODE.match(warehouse) or not _CODE.match(zone) or not _BIN.match(bin_):
            return None
    else:
        match = _UNSEPARATED.match(address)
        if not match:
            return None
        warehouse, zone, position, bin_ = match.groups()

    parsed = _parse_position(position)
    if parsed is None:
        return None
    return ParsedAddress(warehouse, zone, parsed[0], parsed[1], bin_, separator)


def parse_address(address: str) -> Optional[ParsedAddress]:
    """Adresi bileşenlerine ayırır; '-', '.' ve ayraçsız biçimleri dener.

    Geçersiz adreslerde None döner.
    """
    if not address or len(address) < 6:
        return None
    for separator in SEPARATORS:
        parsed = _parse_with_separator(address, separator)
        if parsed is not None:
            return parsed
    return None


def address_sort_key(address: str) -> tuple:
    """Adresleri depo, zon, koridor, raf, göz sırasına göre sıralamak için anahtar."""
    parsed = parse_address(address)
    if parsed is None:
        return (1, address)
    bin_key = (0, int(parsed.bin), "") if parsed.bin.isdigit() else (1, 0, parsed.bin)
    return (0, parsed.warehouse_code, parsed.zone_code, parsed.aisle, parsed.shelf, bin_key)
