"""
Catalog Validation - Reference and sanity checks for a game catalog.

Validates that:
1. Cards, rewards, levels and maps reference definitions that exist
2. Amounts (costs, production, starting resources) are non-negative
3. Levels have positive turn limits and reputation goals
4. The starting hand and deck composition only name known cards
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Mapping

from .schema import (
    ANY,
    AdjacencyBonus,
    Catalog,
    CardCost,
    CardGrant,
    LevelDefinition,
    NewAction,
    ResourceBonus,
    RewardDefinition,
)


class CatalogValidationError(Exception):
    """Raised when catalog validation fails."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(f"Catalog validation failed with {len(errors)} error(s)")


@dataclass
class ValidationResult:
    """Result of validation, with errors and warnings."""
    valid: bool
    errors: list[str]
    warnings: list[str]


def validate_catalog(catalog: Catalog, raise_on_error: bool = False) -> ValidationResult:
    """
    Validate a complete catalog.

    Returns ValidationResult with errors and warnings.
    Raises CatalogValidationError if raise_on_error=True and errors exist.
    """
    errors: list[str] = []
    warnings: list[str] = []

    for building in catalog.buildings.values():
        errors.extend(_negative_amounts(f"Building '{building.id}' production", building.production))
        errors.extend(_negative_amounts(f"Building '{building.id}' consumption", building.consumption))
        if building.launch_cost is not None:
            errors.extend(_negative_amounts(f"Building '{building.id}' launch cost", building.launch_cost))
        if building.surrounding_building and building.surrounding_building not in catalog.buildings:
            errors.append(
                f"Building '{building.id}' references unknown surrounding building "
                f"'{building.surrounding_building}'"
            )

    for card in catalog.cards.values():
        errors.extend(_negative_amounts(f"Card '{card.id}' cost", card.cost))
        if card.places_building and card.building_id not in catalog.buildings:
            errors.append(f"Card '{card.id}' references unknown building '{card.building_id}'")
        if card.is_event and not card.effects:
            warnings.append(f"Event card '{card.id}' has no effects")

    for reward in catalog.rewards.values():
        errors.extend(_validate_reward(reward, catalog))

    for level in catalog.levels.values():
        errors.extend(_validate_level(level, catalog))

    for card_id in catalog.starting_hand:
        if card_id not in catalog.cards:
            errors.append(f"Starting hand references unknown card '{card_id}'")
    for reward_id in catalog.starting_rewards:
        if reward_id not in catalog.rewards:
            errors.append(f"Starting rewards reference unknown reward '{reward_id}'")
    if catalog.first_level_id and catalog.first_level_id not in catalog.levels:
        errors.append(f"First level '{catalog.first_level_id}' is not defined")

    for card_id, count in catalog.deck_composition.items():
        if card_id not in catalog.cards:
            warnings.append(f"Deck composition names unknown card '{card_id}'")
        elif count < 0:
            errors.append(f"Deck composition count for '{card_id}' is negative")

    # Warnings for incomplete catalogs
    if not catalog.levels:
        warnings.append("No levels defined - only random levels can be played")
    if not catalog.deck_composition:
        warnings.append("No deck composition - the rarity policy will be used")

    result = ValidationResult(
        valid=len(errors) == 0,
        errors=errors,
        warnings=warnings,
    )
    if raise_on_error and errors:
        raise CatalogValidationError(errors)
    return result


def _negative_amounts(label: str, amounts: Mapping) -> list[str]:
    return [
        f"{label}: negative amount {amount} for '{kind.value}'"
        for kind, amount in amounts.items()
        if amount < 0
    ]


def _known_building(building_id: str, catalog: Catalog) -> bool:
    return building_id == ANY or building_id in catalog.buildings


def _validate_reward(reward: RewardDefinition, catalog: Catalog) -> list[str]:
    """Validate effect references of a single reward."""
    errors = []
    prefix = f"Reward '{reward.id}'"

    if reward.reputation_cost < 0:
        errors.append(f"{prefix} has negative reputation cost")
    if not reward.effects:
        errors.append(f"{prefix} has no effects")

    for effect in reward.effects:
        if isinstance(effect, CardGrant):
            if effect.card_id not in catalog.cards:
                errors.append(f"{prefix} grants unknown card '{effect.card_id}'")
            if effect.count < 1:
                errors.append(f"{prefix} grants a non-positive card count")
        elif isinstance(effect, (ResourceBonus, AdjacencyBonus, NewAction, CardCost)):
            if not _known_building(effect.building_id, catalog):
                errors.append(f"{prefix} references unknown building '{effect.building_id}'")
            if isinstance(effect, AdjacencyBonus) and not _known_building(effect.neighbor, catalog):
                errors.append(f"{prefix} references unknown neighbour '{effect.neighbor}'")
        else:
            errors.append(f"{prefix} has unsupported effect {type(effect).__name__}")

    return errors


def _validate_level(level: LevelDefinition, catalog: Catalog) -> list[str]:
    """Validate a single level definition."""
    errors = []
    prefix = f"Level '{level.id}'"

    if level.turn_limit < 1:
        errors.append(f"{prefix} turn limit must be >= 1")
    if level.reputation_goal < 1:
        errors.append(f"{prefix} reputation goal must be >= 1")
    errors.extend(_negative_amounts(f"{prefix} starting resources", level.starting_resources))
    if level.map_config is None and level.map_id and level.map_id not in catalog.maps:
        errors.append(f"{prefix} references unknown map '{level.map_id}'")
    if level.next_level_id and level.next_level_id not in catalog.levels:
        errors.append(f"{prefix} references unknown next level '{level.next_level_id}'")
    for reward_id in level.reward_ids:
        if reward_id not in catalog.rewards:
            errors.append(f"{prefix} offers unknown reward '{reward_id}'")

    return errors
