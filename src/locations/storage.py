"""Lokasyon/göz depolama backend'i - DynamoDB implementasyonu.

Tablolar:
- Locations: lokasyon ağacı (location_id, parent_id üzerinde ParentIndex)
- Bins: zon gözleri (zone_id + address)
- StructureChanges: yapı değişikliği kayıtları (change_id)
"""

from __future__ import annotations

import logging
import os
import unicodedata
import uuid
from abc import ABC, abstractmethod
from datetime import datetime
from decimal import Decimal
from typing import Any, Optional

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import ClientError

from src.models.location import (
    ApplyResult,
    Bin,
    LocationType,
    OccupiedBinsPolicy,
    ReconfigurationPlan,
)

logger = logging.getLogger(__name__)


def location_code(name: str) -> str:
    """Lokasyon adından 3 harflik kod üretir: 'Depósito Sul' -> 'DEP'."""
    normalized = unicodedata.normalize("NFKD", name)
    letters = [c for c in normalized if c.isascii() and c.isalpha()]
    return "".join(letters[:3]).upper() or "LOC"


def _from_dynamo(value: Any) -> Any:
    if isinstance(value, Decimal):
        return int(value) if value == int(value) else float(value)
    return value


def _to_dynamo(value: Any) -> Any:
    """DynamoDB float kabul etmez; float'ları Decimal'e çevirir."""
    if isinstance(value, float):
        return Decimal(str(value))
    if isinstance(value, dict):
        return {k: _to_dynamo(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_to_dynamo(i) for i in value]
    return value


class LocationStore(ABC):
    """Lokasyon ve göz kayıtları için backend arayüzü."""

    @abstractmethod
    def create_location(
        self, name: str, location_type: LocationType, parent_id: Optional[str] = None
    ) -> str:
        """Lokasyonu oluşturur ve backend'in atadığı kimliği döndürür."""
        ...

    @abstractmethod
    def list_bins(self, zone_id: str) -> list[Bin]:
        ...

    @abstractmethod
    def apply_zone_structure(
        self,
        zone_id: str,
        plan: ReconfigurationPlan,
        policy: Optional[OccupiedBinsPolicy] = None,
    ) -> ApplyResult:
        ...


class DynamoDBLocationStore(LocationStore):
    """DynamoDB tabanlı lokasyon deposu."""

    def __init__(
        self,
        dynamodb_resource: Optional[Any] = None,
        region_name: Optional[str] = None,
        locations_table: Optional[str] = None,
        bins_table: Optional[str] = None,
        changes_table: Optional[str] = None,
    ):
        self.region_name = region_name or os.environ.get("AWS_DEFAULT_REGION", "us-east-1")
        # AWS istemcisi - dependency injection destekli
        self.dynamodb = dynamodb_resource or boto3.resource(
            "dynamodb", region_name=self.region_name
        )

        self.locations_table = self.dynamodb.Table(
            locations_table or os.environ.get("LOCATIONS_TABLE", "Locations")
        )
        self.bins_table = self.dynamodb.Table(bins_table or os.environ.get("BINS_TABLE", "Bins"))
        self.changes_table = self.dynamodb.Table(
            changes_table or os.environ.get("STRUCTURE_CHANGES_TABLE", "StructureChanges")
        )

        logger.info("Lokasyon deposu başlatıldı (region: %s)", self.region_name)

    def create_location(
        self, name: str, location_type: LocationType, parent_id: Optional[str] = None
    ) -> str:
        location_id = str(uuid.uuid4())
        item = {
            "location_id": location_id,
            "name": name,
            "code": location_code(name),
            "type": LocationType(location_type).value,
            "is_active": True,
            "created_at": datetime.utcnow().isoformat(),
        }
        if parent_id:
            item["parent_id"] = parent_id

        try:
            self.locations_table.put_item(Item=item)
        except ClientError as e:
            logger.error("Lokasyon oluşturma hatası (%s): %s", name, e)
            raise
        return location_id

    def list_bins(self, zone_id: str) -> list[Bin]:
        """Zonun tüm gözlerini sayfalayarak okur."""
        items: list[dict] = []
        query_kwargs: dict[str, Any] = {"KeyConditionExpression": Key("zone_id").eq(zone_id)}
        try:
            while True:
                response = self.bins_table.query(**query_kwargs)
                items.extend(response.get("Items", []))
                last_key = response.get("LastEvaluatedKey")
                if not last_key:
                    break
                query_kwargs["ExclusiveStartKey"] = last_key
        except ClientError as e:
            logger.error("Göz listeleme hatası (%s): %s", zone_id, e)
            raise

        return [self._to_bin(item) for item in items]

    @staticmethod
    def _to_bin(item: dict) -> Bin:
        capacity = item.get("capacity")
        return Bin(
            id=item.get("bin_id", item["address"]),
            address=item["address"],
            aisle=_from_dynamo(item.get("aisle", 0)),
            shelf=_from_dynamo(item.get("shelf", 0)),
            position=str(item.get("position", "")),
            capacity=_from_dynamo(capacity) if capacity is not None else None,
            current_occupancy=_from_dynamo(item.get("current_occupancy", 0)),
            is_blocked=bool(item.get("is_blocked", False)),
        )

    def apply_zone_structure(
        self,
        zone_id: str,
        plan: ReconfigurationPlan,
        policy: Optional[OccupiedBinsPolicy] = None,
    ) -> ApplyResult:
        """Planı uygular: yeni gözleri yazar, dolu gözleri bloklar veya siler, boşları siler."""
        policy = OccupiedBinsPolicy(policy) if policy is not None else None
        target = plan.target_by_address()
        now = datetime.utcnow().isoformat()
        result = ApplyResult(zone_id=zone_id, bins_preserved=len(plan.to_preserve), policy=policy)

        force_removed = list(plan.to_block) if policy == OccupiedBinsPolicy.FORCE else []
        to_delete = list(plan.to_remove) + force_removed

        try:
            with self.bins_table.batch_writer() as batch:
                for address in plan.to_create:
                    spec = target[address]
                    batch.put_item(
                        Item={
                            "zone_id": zone_id,
                            "address": address,
                            "bin_id": str(uuid.uuid4()),
                            "aisle": spec.aisle,
                            "shelf": spec.shelf,
                            "position": spec.position,
                            "current_occupancy": 0,
                            "is_blocked": False,
                            "created_at": now,
                        }
                    )
                for address in to_delete:
                    batch.delete_item(Key={"zone_id": zone_id, "address": address})
            result.bins_created = len(plan.to_create)
            result.bins_removed = len(to_delete)

            if policy == OccupiedBinsPolicy.BLOCK:
                for address in plan.to_block:
                    self.bins_table.update_item(
                        Key={"zone_id": zone_id, "address": address},
                        UpdateExpression="SET is_blocked = :blocked, blocked_at = :now",
                        ExpressionAttributeValues={":blocked": True, ":now": now},
                    )
                result.bins_blocked = len(plan.to_block)
        except ClientError as e:
            logger.error("Zon yapısı uygulama hatası (%s): %s", zone_id, e)
            raise

        self._record_change(zone_id, plan, result, force_removed, now)
        logger.info(
            "Zon yapısı uygulandı (%s): %d oluşturuldu, %d korundu, %d bloklandı, %d silindi",
            zone_id,
            result.bins_created,
            result.bins_preserved,
            result.bins_blocked,
            result.bins_removed,
        )
        return result

    def _record_change(
        self,
        zone_id: str,
        plan: ReconfigurationPlan,
        result: ApplyResult,
        force_removed: list[str],
        timestamp: str,
    ) -> None:
        item = {
            "change_id": str(uuid.uuid4()),
            "zone_id": zone_id,
            "is_first_configuration": plan.is_first_configuration,
            "policy": result.policy.value if result.policy else None,
            "bins_created": result.bins_created,
            "bins_preserved": result.bins_preserved,
            "bins_blocked": result.bins_blocked,
            "bins_removed": result.bins_removed,
            # Zorla silinen dolu gözlerin son bilinen adresleri ve ürün adetleri
            "force_removed_bins": [
                {"address": a, "current_occupancy": plan.occupancy_of(a)}
                for a in force_removed
            ],
            "timestamp": timestamp,
        }
        try:
            self.changes_table.put_item(Item=_to_dynamo(item))
        except ClientError as e:
            logger.error("Yapı değişikliği kaydı hatası (%s): %s", zone_id, e)
            raise
