from src.locations.address_codec import addresses_for_zone, parse_address, sample_addresses
from src.locations.batch_creator import HierarchicalBatchCreator, create_hierarchy
from src.locations.configurator import StructureConfigurator
from src.locations.errors import (
    CapacityExceededError,
    LocationStructureError,
    OccupiedBinConflictError,
    PatternSyntaxError,
    StructureValidationError,
    TransientBackendError,
)
from src.locations.pattern_expander import expand, leaf_names
from src.locations.reconciler import build_preview, reconcile
from src.locations.storage import DynamoDBLocationStore, LocationStore

__all__ = [
    "addresses_for_zone",
    "parse_address",
    "sample_addresses",
    "HierarchicalBatchCreator",
    "create_hierarchy",
    "StructureConfigurator",
    "CapacityExceededError",
    "LocationStructureError",
    "OccupiedBinConflictError",
    "PatternSyntaxError",
    "StructureValidationError",
    "TransientBackendError",
    "expand",
    "leaf_names",
    "build_preview",
    "reconcile",
    "DynamoDBLocationStore",
    "LocationStore",
]
