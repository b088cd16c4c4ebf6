"""
Location Structure MCP Server

Provides tools for expanding location patterns, previewing and applying zone
bin structures, and batch creating location hierarchies in DynamoDB.
"""

import json
import os
import sys
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))
import env_loader

from typing import Dict, List, Optional
from mcp.server import Server
from mcp.types import Tool, TextContent

from src.locations.configurator import StructureConfigurator
from src.locations.errors import LocationStructureError, OccupiedBinConflictError
from src.locations.storage import DynamoDBLocationStore
from src.models.location import (
    AisleConfig,
    BinDirection,
    BinLabeling,
    CodePattern,
    LocationType,
    OccupiedBinsPolicy,
    ZoneStructure,
)

app = Server("location-structure")

_configurator: Optional[StructureConfigurator] = None


def get_configurator() -> StructureConfigurator:
    """Store'u ilk kullanımda ortam değişkenlerinden oluşturur."""
    global _configurator
    if _configurator is None:
        _configurator = StructureConfigurator(DynamoDBLocationStore())
    return _configurator


def _result(data):
    return [TextContent(type="text", text=json.dumps(data, indent=2, ensure_ascii=False, default=str))]


def _error(e: Exception) -> Dict:
    result = {"success": False, "error": str(e), "error_type": type(e).__name__}
    if isinstance(e, OccupiedBinConflictError):
        result["addresses"] = list(e.addresses)
        result["total_affected_items"] = e.total_affected_items
    return result


def _structure_from_args(args: Dict) -> ZoneStructure:
    pattern = args.get("code_pattern") or {}
    return ZoneStructure(
        warehouse_code=args["warehouse_code"],
        zone_code=args["zone_code"],
        aisles=[
            AisleConfig(
                aisle_number=a.get("aisle_number", i),
                shelves_count=a.get("shelves_count", 1),
                bins_per_shelf=a.get("bins_per_shelf", 1),
            )
            for i, a in enumerate(args["aisles"], start=1)
        ],
        code_pattern=CodePattern(
            separator=pattern.get("separator", "-"),
            aisle_digits=pattern.get("aisle_digits", 1),
            shelf_digits=pattern.get("shelf_digits", 2),
            bin_labeling=BinLabeling(pattern.get("bin_labeling", "LETTERS")),
            bin_direction=BinDirection(pattern.get("bin_direction", "BOTTOM_UP")),
        ),
    )


_STRUCTURE_SCHEMA = {
    "zone_id": {"type": "string"},
    "warehouse_code": {"type": "string"},
    "zone_code": {"type": "string"},
    "aisles": {
        "type": "array",
        "items": {
            "type": "object",
            "properties": {
                "aisle_number": {"type": "integer"},
                "shelves_count": {"type": "integer"},
                "bins_per_shelf": {"type": "integer"},
            },
        },
    },
    "code_pattern": {
        "type": "object",
        "properties": {
            "separator": {"type": "string", "enum": ["-", ".", ""]},
            "aisle_digits": {"type": "integer", "enum": [1, 2]},
            "shelf_digits": {"type": "integer", "enum": [2, 3]},
            "bin_labeling": {"type": "string", "enum": ["LETTERS", "NUMBERS"]},
            "bin_direction": {"type": "string", "enum": ["BOTTOM_UP", "TOP_DOWN"]},
        },
    },
}
_STRUCTURE_REQUIRED = ["zone_id", "warehouse_code", "zone_code", "aisles"]


@app.list_tools()
async def list_tools() -> List[Tool]:
    return [
        Tool(name="expand_pattern", description="Expand a location pattern like 'A{3}, 20{2}*(+-[2])' into names without creating anything",
             inputSchema={"type": "object", "properties": {"pattern": {"type": "string"}}, "required": ["pattern"]}),
        Tool(name="preview_zone_structure", description="Preview bins to create, preserve, block and remove for a new zone structure",
             inputSchema={"type": "object", "properties": _STRUCTURE_SCHEMA, "required": _STRUCTURE_REQUIRED}),
        Tool(name="configure_zone_structure", description="Apply a zone bin structure; occupied bins need policy 'block' or 'force'",
             inputSchema={"type": "object", "properties": {
                 **_STRUCTURE_SCHEMA,
                 "occupied_bins_policy": {"type": "string", "enum": ["block", "force"]},
             }, "required": _STRUCTURE_REQUIRED}),
        Tool(name="create_locations", description="Expand a pattern and create the location hierarchy under an optional parent",
             inputSchema={"type": "object", "properties": {
                 "pattern": {"type": "string"},
                 "parent_id": {"type": "string"},
                 "parent_type": {"type": "string", "enum": [t.value for t in LocationType]},
             }, "required": ["pattern"]}),
    ]


@app.call_tool()
async def call_tool(name: str, arguments: dict) -> List[TextContent]:
    handlers = {
        "expand_pattern": lambda a: expand_pattern(a["pattern"]),
        "preview_zone_structure": lambda a: preview_zone_structure(a),
        "configure_zone_structure": lambda a: configure_zone_structure(a),
        "create_locations": lambda a: create_locations(a["pattern"], a.get("parent_id"), a.get("parent_type")),
    }
    handler = handlers.get(name)
    if not handler:
        raise ValueError(f"Unknown tool: {name}")
    return _result(handler(arguments))


# --- Implementation ---

def expand_pattern(pattern: str) -> Dict:
    try:
        return {"success": True, **get_configurator().preview_pattern(pattern)}
    except LocationStructureError as e:
        return _error(e)


def preview_zone_structure(args: Dict) -> Dict:
    try:
        structure = _structure_from_args(args)
        return {"success": True, "data": get_configurator().preview(args["zone_id"], structure)}
    except Exception as e:
        return _error(e)


def configure_zone_structure(args: Dict) -> Dict:
    try:
        structure = _structure_from_args(args)
        raw_policy = args.get("occupied_bins_policy")
        policy = OccupiedBinsPolicy(raw_policy) if raw_policy else None
        result = get_configurator().apply(args["zone_id"], structure, policy)
        return {
            "success": True,
            "data": {
                "zone_id": result.zone_id,
                "bins_created": result.bins_created,
                "bins_preserved": result.bins_preserved,
                "bins_blocked": result.bins_blocked,
                "bins_removed": result.bins_removed,
                "policy": result.policy.value if result.policy else None,
            },
        }
    except Exception as e:
        return _error(e)


def create_locations(pattern: str, parent_id: Optional[str] = None, parent_type: Optional[str] = None) -> Dict:
    try:
        location_type = LocationType(parent_type) if parent_type else None
        result = get_configurator().create_from_pattern(pattern, parent_id, location_type)
        return {
            "success": result.failed == 0 and not result.cancelled,
            **result.summary(),
            "failures": [
                {"name": f.name, "type": f.location_type.value, "error": str(f.error), "skipped": f.skipped}
                for f in result.failures
            ],
        }
    except Exception as e:
        return _error(e)


if __name__ == "__main__":
    import asyncio
    from mcp.server.stdio import stdio_server

    async def run():
        async with stdio_server() as (read, write):
            await app.run(read, write, app.create_initialization_options())

    asyncio.run(run())
