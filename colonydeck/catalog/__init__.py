"""Game catalog - immutable building, card, reward and level definitions."""

from .schema import (
    ANY,
    ActionDescriptor,
    AdjacencyBonus,
    ApplicationType,
    CardCost,
    CardDefinition,
    CardGrant,
    CardType,
    Catalog,
    CatalogError,
    BuildingDefinition,
    CellOverride,
    LevelDefinition,
    MapConfig,
    NewAction,
    RESOURCE_RULES,
    ResourceBonus,
    ResourceEffect,
    ResourceKind,
    RewardDefinition,
    TerrainFeature,
)
from .validation import validate_catalog, CatalogValidationError, ValidationResult

__all__ = [
    "ANY",
    "ActionDescriptor",
    "AdjacencyBonus",
    "ApplicationType",
    "CardCost",
    "CardDefinition",
    "CardGrant",
    "CardType",
    "Catalog",
    "CatalogError",
    "BuildingDefinition",
    "CellOverride",
    "LevelDefinition",
    "MapConfig",
    "NewAction",
    "RESOURCE_RULES",
    "ResourceBonus",
    "ResourceEffect",
    "ResourceKind",
    "RewardDefinition",
    "TerrainFeature",
    "validate_catalog",
    "CatalogValidationError",
    "ValidationResult",
]
