"""Yapı Yapılandırıcı ve MCP server unit testleri."""

import json
from unittest.mock import MagicMock

import pytest

from src.locations.configurator import StructureConfigurator
from src.locations.errors import OccupiedBinConflictError, PatternSyntaxError
from src.locations.storage import LocationStore
from src.models.location import (
    AisleConfig,
    ApplyResult,
    BatchConfig,
    Bin,
    LocationType,
    OccupiedBinsPolicy,
    ZoneStructure,
)


def _bin(address: str, occupancy: int = 0) -> Bin:
    return Bin(id=address, address=address, aisle=0, shelf=0, position="", current_occupancy=occupancy)


def _create_configurator(bins=None):
    """Test için mock store ile yapılandırıcı oluşturur."""
    store = MagicMock(spec=LocationStore)
    store.list_bins.return_value = list(bins or [])
    store.create_location.side_effect = lambda name, location_type, parent_id: f"{parent_id}/{name}"
    store.apply_zone_structure.side_effect = lambda zone_id, plan, policy: ApplyResult(
        zone_id=zone_id, bins_created=len(plan.to_create), policy=policy
    )
    configurator = StructureConfigurator(store, batch_config=BatchConfig(), sleep=lambda s: None)
    return configurator, store


def _structure(shelves: int = 1, bins: int = 2) -> ZoneStructure:
    return ZoneStructure("FAB", "EST", [AisleConfig(1, shelves, bins)])


class TestZoneStructure:
    """Zon yapısı önizleme ve uygulama."""

    def test_preview_includes_samples(self):
        configurator, store = _create_configurator()
        preview = configurator.preview("z1", _structure())
        store.list_bins.assert_called_once_with("z1")
        assert preview["is_first_configuration"]
        assert preview["bins_to_create"] == 2
        assert preview["sample_addresses"] == ["FAB-EST-101-A", "FAB-EST-101-B"]

    def test_apply_first_configuration(self):
        configurator, store = _create_configurator()
        result = configurator.apply("z1", _structure())
        assert result.bins_created == 2
        store.apply_zone_structure.assert_called_once()

    def test_apply_conflict_without_policy(self):
        configurator, store = _create_configurator([_bin("FAB-EST-102-A", occupancy=3)])
        with pytest.raises(OccupiedBinConflictError):
            configurator.apply("z1", _structure())
        store.apply_zone_structure.assert_not_called()

    def test_apply_with_block_policy(self):
        configurator, store = _create_configurator([_bin("FAB-EST-102-A", occupancy=3)])
        result = configurator.apply("z1", _structure(), OccupiedBinsPolicy.BLOCK)
        plan = store.apply_zone_structure.call_args.args[1]
        assert plan.to_block == ("FAB-EST-102-A",)
        assert result.policy == OccupiedBinsPolicy.BLOCK


class TestPatternCreation:
    """Desenden toplu lokasyon oluşturma."""

    def test_preview_pattern_has_no_side_effects(self):
        configurator, store = _create_configurator()
        preview = configurator.preview_pattern("20{2}*(+-[2])")
        assert preview["roots"] == ["201", "202"]
        assert preview["leaf_count"] == 4
        assert preview["total_locations"] == 6
        store.create_location.assert_not_called()

    def test_create_from_pattern(self):
        configurator, store = _create_configurator()
        result = configurator.create_from_pattern("A{2}*(+-[2])", parent_id="z1", parent_type=LocationType.ZONE)
        assert result.succeeded == 6
        assert result.id_for("A1", "A1-B") == "z1/A1/A1-B"

    def test_invalid_pattern_makes_no_calls(self):
        configurator, store = _create_configurator()
        with pytest.raises(PatternSyntaxError):
            configurator.create_from_pattern("A{2}*(+-[2]")
        store.create_location.assert_not_called()


class TestMCPServer:
    """MCP tool handler'ları."""

    @pytest.fixture
    def server(self, monkeypatch):
        from mcp_servers import location_structure_server

        configurator, store = _create_configurator([_bin("FAB-EST-102-A", occupancy=3)])
        monkeypatch.setattr(location_structure_server, "_configurator", configurator)
        return location_structure_server, store

    def _args(self, **extra):
        return {
            "zone_id": "z1",
            "warehouse_code": "FAB",
            "zone_code": "EST",
            "aisles": [{"shelves_count": 1, "bins_per_shelf": 2}],
            **extra,
        }

    def test_expand_pattern(self, server):
        module, _ = server
        result = module.expand_pattern("B[2]")
        assert result["success"]
        assert result["leaf_names"] == ["BA", "BB"]

    def test_expand_pattern_error(self, server):
        module, _ = server
        result = module.expand_pattern("B[2")
        assert not result["success"]
        assert result["error_type"] == "PatternSyntaxError"

    def test_configure_conflict(self, server):
        module, store = server
        result = module.configure_zone_structure(self._args())
        assert not result["success"]
        assert result["addresses"] == ["FAB-EST-102-A"]
        assert result["total_affected_items"] == 3
        store.apply_zone_structure.assert_not_called()

    def test_configure_with_policy(self, server):
        module, _ = server
        result = module.configure_zone_structure(self._args(occupied_bins_policy="block"))
        assert result["success"]
        assert result["data"]["policy"] == "block"

    def test_preview(self, server):
        module, _ = server
        result = module.preview_zone_structure(self._args(code_pattern={"separator": "."}))
        assert result["data"]["first_address"] == "FAB.EST.101.A"

    def test_create_locations(self, server):
        module, _ = server
        result = module.create_locations("A{2}", parent_id="z1", parent_type="ZONE")
        assert result["success"]
        assert result["succeeded"] == 2

    def test_result_is_json_text(self, server):
        module, _ = server
        content = module._result({"success": True})
        assert json.loads(content[0].text) == {"success": True}
