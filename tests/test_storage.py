"""DynamoDB lokasyon deposu unit testleri."""

from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import ClientError

from src.locations.reconciler import reconcile
from src.locations.storage import DynamoDBLocationStore, location_code
from src.models.location import AisleConfig, Bin, LocationType, OccupiedBinsPolicy, ZoneStructure


def _create_store():
    """Test için mock'lanmış DynamoDB deposu ve tablolarını döndürür."""
    tables = {"Locations": MagicMock(), "Bins": MagicMock(), "StructureChanges": MagicMock()}
    resource = MagicMock()
    resource.Table.side_effect = lambda name: tables[name]
    store = DynamoDBLocationStore(
        dynamodb_resource=resource,
        locations_table="Locations",
        bins_table="Bins",
        changes_table="StructureChanges",
    )
    return store, tables


def _client_error(code: str = "ValidationException") -> ClientError:
    return ClientError({"Error": {"Code": code, "Message": "hata"}}, "PutItem")


def _bin(address: str, occupancy: int = 0) -> Bin:
    return Bin(id=address, address=address, aisle=0, shelf=0, position="", current_occupancy=occupancy)


class TestLocationCode:
    """Lokasyon kodu üretimi."""

    @pytest.mark.parametrize(
        "name,code",
        [("Depósito Sul", "DEP"), ("Çorum", "COR"), ("ab", "AB"), ("10A", "A"), ("10", "LOC")],
    )
    def test_code(self, name, code):
        assert location_code(name) == code


class TestCreateLocation:
    """Lokasyon kaydı."""

    def test_writes_item(self):
        store, tables = _create_store()
        location_id = store.create_location("Estoque", LocationType.ZONE, "wh-1")
        item = tables["Locations"].put_item.call_args.kwargs["Item"]
        assert item["location_id"] == location_id
        assert item["name"] == "Estoque"
        assert item["code"] == "EST"
        assert item["type"] == "ZONE"
        assert item["parent_id"] == "wh-1"
        assert item["is_active"] is True

    def test_root_has_no_parent(self):
        store, tables = _create_store()
        store.create_location("Fabrika", LocationType.WAREHOUSE)
        assert "parent_id" not in tables["Locations"].put_item.call_args.kwargs["Item"]

    def test_client_error_reraised(self):
        store, tables = _create_store()
        tables["Locations"].put_item.side_effect = _client_error()
        with pytest.raises(ClientError):
            store.create_location("Estoque", LocationType.ZONE)


class TestListBins:
    """Göz listeleme."""

    def test_paginates_and_converts_decimals(self):
        store, tables = _create_store()
        tables["Bins"].query.side_effect = [
            {
                "Items": [{"bin_id": "b1", "address": "FAB-EST-101-A", "aisle": Decimal("1"), "shelf": Decimal("1"),
                           "position": "A", "current_occupancy": Decimal("5")}],
                "LastEvaluatedKey": {"zone_id": "z1", "address": "FAB-EST-101-A"},
            },
            {
                "Items": [{"bin_id": "b2", "address": "FAB-EST-101-B", "aisle": Decimal("1"), "shelf": Decimal("1"),
                           "position": "B", "is_blocked": True}],
            },
        ]
        bins = store.list_bins("z1")
        assert [b.address for b in bins] == ["FAB-EST-101-A", "FAB-EST-101-B"]
        assert bins[0].current_occupancy == 5
        assert isinstance(bins[0].current_occupancy, int)
        assert bins[1].is_blocked
        second_call = tables["Bins"].query.call_args_list[1].kwargs
        assert second_call["ExclusiveStartKey"] == {"zone_id": "z1", "address": "FAB-EST-101-A"}

    def test_client_error_reraised(self):
        store, tables = _create_store()
        tables["Bins"].query.side_effect = _client_error("ResourceNotFoundException")
        with pytest.raises(ClientError):
            store.list_bins("z1")


class TestApplyZoneStructure:
    """Planın DynamoDB'ye uygulanması."""

    def _plan(self):
        current = [_bin("FAB-EST-101-B"), _bin("FAB-EST-102-A", occupancy=5), _bin("FAB-EST-102-B")]
        return reconcile(current, ZoneStructure("FAB", "EST", [AisleConfig(1, 1, 2)]))

    def test_block_policy(self):
        store, tables = _create_store()
        batch = tables["Bins"].batch_writer.return_value.__enter__.return_value

        result = store.apply_zone_structure("z1", self._plan(), OccupiedBinsPolicy.BLOCK)

        put_item = batch.put_item.call_args.kwargs["Item"]
        assert put_item["address"] == "FAB-EST-101-A"
        assert (put_item["aisle"], put_item["shelf"], put_item["position"]) == (1, 1, "A")
        batch.delete_item.assert_called_once_with(Key={"zone_id": "z1", "address": "FAB-EST-102-B"})
        update = tables["Bins"].update_item.call_args.kwargs
        assert update["Key"] == {"zone_id": "z1", "address": "FAB-EST-102-A"}
        assert update["ExpressionAttributeValues"][":blocked"] is True
        assert (result.bins_created, result.bins_preserved, result.bins_blocked, result.bins_removed) == (1, 1, 1, 1)
        assert result.policy == OccupiedBinsPolicy.BLOCK

    def test_force_policy_deletes_occupied(self):
        store, tables = _create_store()
        batch = tables["Bins"].batch_writer.return_value.__enter__.return_value

        result = store.apply_zone_structure("z1", self._plan(), OccupiedBinsPolicy.FORCE)

        deleted = [c.kwargs["Key"]["address"] for c in batch.delete_item.call_args_list]
        assert deleted == ["FAB-EST-102-B", "FAB-EST-102-A"]
        tables["Bins"].update_item.assert_not_called()
        assert result.bins_removed == 2
        assert result.bins_blocked == 0
        change = tables["StructureChanges"].put_item.call_args.kwargs["Item"]
        assert change["policy"] == "force"
        assert change["force_removed_bins"] == [{"address": "FAB-EST-102-A", "current_occupancy": 5}]

    def test_force_change_with_fractional_occupancy_is_serializable(self):
        store, tables = _create_store()
        current = [
            _bin("FAB-EST-101-B"),
            Bin(id="b2", address="FAB-EST-102-A", aisle=1, shelf=2, position="A", current_occupancy=2.5),
        ]
        plan = reconcile(current, ZoneStructure("FAB", "EST", [AisleConfig(1, 1, 2)]))

        store.apply_zone_structure("z1", plan, OccupiedBinsPolicy.FORCE)

        change = tables["StructureChanges"].put_item.call_args.kwargs["Item"]
        assert change["force_removed_bins"][0]["current_occupancy"] == Decimal("2.5")
        TypeSerializer().serialize(change)

    def test_change_recorded(self):
        store, tables = _create_store()
        store.apply_zone_structure("z1", self._plan(), OccupiedBinsPolicy.BLOCK)
        change = tables["StructureChanges"].put_item.call_args.kwargs["Item"]
        assert change["zone_id"] == "z1"
        assert change["bins_created"] == 1
        assert change["is_first_configuration"] is False

    def test_client_error_reraised(self):
        store, tables = _create_store()
        tables["Bins"].update_item.side_effect = _client_error()
        with pytest.raises(ClientError):
            store.apply_zone_structure("z1", self._plan(), OccupiedBinsPolicy.BLOCK)
        tables["StructureChanges"].put_item.assert_not_called()


class TestTableSetup:
    """DynamoDB tablo kurulumu."""

    def test_creates_missing_tables(self):
        from data_layer.infrastructure.dynamodb_setup import TABLE_DEFINITIONS, create_tables

        client = MagicMock()
        client.describe_table.side_effect = _client_error("ResourceNotFoundException")
        created = create_tables(client=client)
        assert created == [t["TableName"] for t in TABLE_DEFINITIONS]
        assert client.create_table.call_count == 3

    def test_skips_existing_tables(self):
        from data_layer.infrastructure.dynamodb_setup import create_tables

        client = MagicMock()
        assert create_tables(client=client) == []
        client.create_table.assert_not_called()

    def test_unexpected_error_reraised(self):
        from data_layer.infrastructure.dynamodb_setup import create_tables

        client = MagicMock()
        client.describe_table.side_effect = _client_error("AccessDeniedException")
        with pytest.raises(ClientError):
            create_tables(client=client)

    def test_bins_table_keyed_by_zone_and_address(self):
        from data_layer.infrastructure.dynamodb_setup import BINS_TABLE, TABLE_DEFINITIONS

        bins = next(t for t in TABLE_DEFINITIONS if t["TableName"] == BINS_TABLE)
        assert [k["AttributeName"] for k in bins["KeySchema"]] == ["zone_id", "address"]
