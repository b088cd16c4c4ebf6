"""Yapı Uzlaştırıcı - Dolu bir zonun mevcut gözlerini yeni yapıyla karşılaştırır.

Adres aynıysa fiziksel anlam da aynıdır; bu gözlere dokunulmaz. Yeni yapıda
olmayan gözler doluysa bloklanır, boşsa silinir. Politika (block/force)
uygulama anında seçilir, burada sadece kümeler hesaplanır.
"""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from src.locations.address_codec import address_sort_key, addresses_for_zone
from src.locations.errors import OccupiedBinConflictError
from src.models.location import Bin, OccupiedBinsPolicy, ReconfigurationPlan, ZoneStructure

logger = logging.getLogger(__name__)


def reconcile(current: Iterable[Bin], target: ZoneStructure) -> ReconfigurationPlan:
    """Mevcut gözler ile hedef yapı arasındaki farkı hesaplar.

    Oluşturulacak ve korunacak adresler adres üretim sırasında, bloklanacak
    ve silinecek adresler adres sıralamasında döner.

    Raises:
        StructureValidationError, CapacityExceededError: Hedef yapı geçersiz.
    """
    target_bins = addresses_for_zone(target)
    target_addresses = {b.address for b in target_bins}
    current_by_address = {b.address: b for b in current}

    to_create = tuple(b.address for b in target_bins if b.address not in current_by_address)
    to_preserve = tuple(b.address for b in target_bins if b.address in current_by_address)

    orphaned = sorted(
        (a for a in current_by_address if a not in target_addresses), key=address_sort_key
    )
    to_block = tuple(a for a in orphaned if current_by_address[a].current_occupancy > 0)
    to_remove = tuple(a for a in orphaned if current_by_address[a].current_occupancy <= 0)

    plan = ReconfigurationPlan(
        to_create=to_create,
        to_preserve=to_preserve,
        to_block=to_block,
        to_remove=to_remove,
        is_first_configuration=not current_by_address,
        target=tuple(target_bins),
        blocked_occupancy=tuple((a, current_by_address[a].current_occupancy) for a in to_block),
    )
    logger.info(
        "Uzlaştırma: %d oluştur, %d koru, %d blokla, %d sil",
        len(to_create),
        len(to_preserve),
        len(to_block),
        len(to_remove),
    )
    return plan


def build_preview(plan: ReconfigurationPlan) -> dict:
    """Planı önizleme ekranı için özetler."""
    return {
        "is_first_configuration": plan.is_first_configuration,
        "total_bins": len(plan.target),
        "bins_to_create": len(plan.to_create),
        "bins_to_preserve": len(plan.to_preserve),
        "bins_to_block": len(plan.to_block),
        "bins_to_remove": len(plan.to_remove),
        "first_address": plan.target[0].address if plan.target else None,
        "last_address": plan.target[-1].address if plan.target else None,
        "bins_with_items": [
            {"address": address, "current_occupancy": plan.occupancy_of(address)}
            for address in plan.to_block
        ],
        "total_affected_items": plan.total_affected_items,
        "is_safe": not plan.to_block,
    }


def ensure_apply_allowed(
    plan: ReconfigurationPlan, policy: Optional[OccupiedBinsPolicy] = None
) -> None:
    """Dolu gözler etkileniyorsa açık bir politika seçildiğini doğrular.

    Raises:
        OccupiedBinConflictError: to_block boş değil ve politika verilmemiş.
    """
    if plan.to_block and policy is None:
        logger.warning(
            "Dolu göz çakışması: %d göz, %d ürün", len(plan.to_block), plan.total_affected_items
        )
        raise OccupiedBinConflictError(plan.to_block, plan.total_affected_items)
