"""
Depo Lokasyon Yapılandırıcı Demo Script'i.

Kullanım:
    python demo.py              # Sadece yerel adımlar (desen, adres, uzlaştırma)
    python demo.py --aws        # + gerçek DynamoDB ile oluşturma/uygulama

    --aws için:
    export AWS_DEFAULT_REGION="us-east-1"
    export AWS_ACCESS_KEY_ID="..."
    export AWS_SECRET_ACCESS_KEY="..."
    python -m data_layer.scripts.setup_aws
"""

import json
import logging
import os
import sys

import env_loader

from src.locations.address_codec import addresses_for_zone, sample_addresses
from src.locations.errors import LocationStructureError, OccupiedBinConflictError
from src.locations.pattern_expander import expand, leaf_names, walk
from src.locations.reconciler import build_preview, reconcile
from src.models.location import (
    AisleConfig,
    Bin,
    BinDirection,
    BinLabeling,
    CodePattern,
    OccupiedBinsPolicy,
    ZoneStructure,
)

REGION = os.environ.get("AWS_DEFAULT_REGION", "us-east-1")


def check_credentials():
    """AWS credential'larının ayarlı olduğunu kontrol eder."""
    required = ["AWS_ACCESS_KEY_ID", "AWS_SECRET_ACCESS_KEY"]
    missing = [k for k in required if not os.environ.get(k)]
    if missing:
        print("❌ Eksik environment variable'lar:", ", ".join(missing))
        sys.exit(1)
    print("✅ AWS credential'ları ayarlı")
    print(f"   Region: {REGION}")


def demo_pattern_expansion():
    """Desen genişletme örnekleri."""
    print("\n--- Desen Genişletme ---")
    for pattern in ["A{3}", "B[2]", "X{2}-[2]", "10(10A, 10B)", "20{2}*(+-[2])"]:
        nodes = expand(pattern)
        print(f"   {pattern:<16} -> {', '.join(leaf_names(nodes))}")

    try:
        expand("A{3")
    except LocationStructureError as e:
        print(f"   ❌ Hatalı desen: {e}")


def demo_addresses():
    """Zon yapısından adres üretimi."""
    print("\n--- Adres Üretimi ---")
    structure = ZoneStructure(
        warehouse_code="FAB",
        zone_code="EST",
        aisles=[AisleConfig(1, shelves_count=3, bins_per_shelf=2), AisleConfig(2, shelves_count=2, bins_per_shelf=4)],
        code_pattern=CodePattern(bin_labeling=BinLabeling.LETTERS, bin_direction=BinDirection.TOP_DOWN),
    )
    addresses = addresses_for_zone(structure)
    print(f"   {len(addresses)} göz: {addresses[0].address} ... {addresses[-1].address}")
    print(f"   Örnek adresler: {sample_addresses(structure)}")


def demo_reconcile():
    """Dolu bir zonu yeniden yapılandırma önizlemesi."""
    print("\n--- Yeniden Yapılandırma Önizlemesi ---")
    current = [
        Bin(id="1", address="FAB-EST-101-A", aisle=1, shelf=1, position="A", current_occupancy=12),
        Bin(id="2", address="FAB-EST-101-B", aisle=1, shelf=1, position="B"),
        Bin(id="3", address="FAB-EST-101-C", aisle=1, shelf=1, position="C", current_occupancy=4),
        Bin(id="4", address="FAB-EST-101-D", aisle=1, shelf=1, position="D"),
    ]
    target = ZoneStructure("FAB", "EST", [AisleConfig(1, shelves_count=1, bins_per_shelf=2)])
    plan = reconcile(current, target)
    print(json.dumps(build_preview(plan), indent=2, ensure_ascii=False))


def demo_dynamodb_flow():
    """Gerçek DynamoDB üzerinde lokasyon ağacı oluşturur ve zon yapısını uygular."""
    print("\n--- DynamoDB Akışı ---")
    from src.locations.configurator import StructureConfigurator
    from src.locations.storage import DynamoDBLocationStore
    from src.models.location import BatchConfig

    configurator = StructureConfigurator(DynamoDBLocationStore(region_name=REGION), BatchConfig.from_env())

    result = configurator.create_from_pattern(
        "Fabrika(Estoque(A{2}*(+-[2])))",
        on_progress=lambda done, total: print(f"   ... {done}/{total}"),
    )
    print(f"✅ Oluşturma sonucu: {result.summary()}")
    for failure in result.failures:
        print(f"   ❌ {failure.name} ({failure.location_type.value}): {failure.error}")

    zone_id = result.id_for("Fabrika", "Estoque")
    if not zone_id:
        print("❌ Zon oluşturulamadı, yapı uygulaması atlanıyor")
        return

    structure = ZoneStructure("FAB", "EST", [AisleConfig(1, 3, 2), AisleConfig(2, 3, 2)])
    print(json.dumps(configurator.preview(zone_id, structure), indent=2, ensure_ascii=False))
    applied = configurator.apply(zone_id, structure)
    print(f"✅ Yapı uygulandı: {applied.bins_created} göz oluşturuldu")

    smaller = ZoneStructure("FAB", "EST", [AisleConfig(1, 2, 2)])
    try:
        configurator.apply(zone_id, smaller)
    except OccupiedBinConflictError as e:
        print(f"   ⚠️  {e}")
        applied = configurator.apply(zone_id, smaller, OccupiedBinsPolicy.BLOCK)
    print(f"✅ Küçültme sonucu: {applied}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    print("🏭 Depo Lokasyon Yapılandırıcı - Demo")
    print("=" * 60)

    demo_pattern_expansion()
    demo_addresses()
    demo_reconcile()

    if "--aws" in sys.argv[1:]:
        check_credentials()
        demo_dynamodb_flow()

    print("\n" + "=" * 60)
    print("🎉 Demo tamamlandı!")
