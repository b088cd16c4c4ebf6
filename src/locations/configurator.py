"""Yapı Yapılandırıcı - Desen genişletme, adresleme, uzlaştırma ve toplu oluşturmayı birleştirir."""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

from src.locations.address_codec import sample_addresses
from src.locations.batch_creator import HierarchicalBatchCreator, ProgressFn
from src.locations.pattern_expander import count_nodes, expand, leaf_names
from src.locations.reconciler import build_preview, ensure_apply_allowed, reconcile
from src.locations.storage import LocationStore
from src.models.location import (
    ApplyResult,
    BatchConfig,
    BatchResult,
    LocationType,
    OccupiedBinsPolicy,
    ReconfigurationPlan,
    ZoneStructure,
)

logger = logging.getLogger(__name__)


class StructureConfigurator:
    """Zon yapısı önizleme/uygulama ve desenden toplu lokasyon oluşturma servisi."""

    def __init__(
        self,
        store: LocationStore,
        batch_config: Optional[BatchConfig] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.store = store
        self.batch_config = batch_config or BatchConfig.from_env()
        self._sleep = sleep

    # --- Zon yapısı ---

    def plan(self, zone_id: str, structure: ZoneStructure) -> ReconfigurationPlan:
        current = self.store.list_bins(zone_id)
        return reconcile(current, structure)

    def preview(self, zone_id: str, structure: ZoneStructure) -> dict:
        """Uygulamadan önce değişiklik özetini ve örnek adresleri döndürür."""
        preview = build_preview(self.plan(zone_id, structure))
        preview["sample_addresses"] = sample_addresses(structure)
        return preview

    def apply(
        self,
        zone_id: str,
        structure: ZoneStructure,
        policy: Optional[OccupiedBinsPolicy] = None,
    ) -> ApplyResult:
        """Planı güncel göz listesiyle yeniden hesaplar ve uygular.

        Raises:
            OccupiedBinConflictError: Dolu gözler etkileniyor ve politika seçilmemiş.
        """
        plan = self.plan(zone_id, structure)
        ensure_apply_allowed(plan, policy)
        logger.info("Zon yapısı uygulanıyor: %s (politika: %s)", zone_id, policy)
        return self.store.apply_zone_structure(zone_id, plan, policy)

    # --- Desenden toplu oluşturma ---

    def preview_pattern(self, pattern: str) -> dict:
        nodes = expand(pattern)
        names = leaf_names(nodes)
        return {
            "roots": [node.name for node in nodes],
            "leaf_names": names,
            "leaf_count": len(names),
            "total_locations": count_nodes(nodes),
        }

    def create_from_pattern(
        self,
        pattern: str,
        parent_id: Optional[str] = None,
        parent_type: Optional[LocationType] = None,
        on_progress: Optional[ProgressFn] = None,
    ) -> BatchResult:
        """Deseni genişletir ve ağacı backend'de oluşturur.

        Desen hataları hiçbir oluşturma çağrısı yapılmadan yükseltilir.
        """
        nodes = expand(pattern)
        creator = HierarchicalBatchCreator(
            self.store.create_location,
            config=self.batch_config,
            sleep=self._sleep,
            on_progress=on_progress,
        )
        return creator.create_hierarchy(nodes, parent_id=parent_id, parent_type=parent_type)
