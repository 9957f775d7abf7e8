"""
Catalog Schema - Immutable definitions the engine runs on.

The catalog is resolved once at startup and passed into every component
that needs it. Nothing in the engine scans definitions per call:
all lookups go through the id maps built by Catalog.build().

Contains:
- Resource vocabulary and the per-resource rule table
- Building, card, reward, map and level definitions
- Reward effect variants
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Iterable, Mapping, Union


ANY = "any"  # Wildcard for building ids and neighbour ids


class CatalogError(Exception):
    """Raised when a catalog cannot be assembled (duplicate ids, bad data)."""


# =============================================================================
# Resources
# =============================================================================

class ResourceKind(str, Enum):
    """Resources tracked by the ledger."""
    IRON = "iron"
    STEEL = "steel"
    CONCRETE = "concrete"
    WATER = "water"
    FUEL = "fuel"
    DRONES = "drones"
    ENERGY = "energy"
    REPUTATION = "reputation"


@dataclass(frozen=True)
class ResourceRule:
    """
    How a resource behaves in production.

    construction_only resources are granted once when a building is
    placed and never by the per-turn scheduler.
    """
    kind: ResourceKind
    construction_only: bool = False


RESOURCE_RULES: Mapping[ResourceKind, ResourceRule] = MappingProxyType({
    kind: ResourceRule(
        kind=kind,
        construction_only=kind in (ResourceKind.ENERGY, ResourceKind.DRONES),
    )
    for kind in ResourceKind
})


def is_construction_only(kind: ResourceKind) -> bool:
    return RESOURCE_RULES[kind].construction_only


def split_production(
    production: Mapping[ResourceKind, int],
) -> tuple[dict[ResourceKind, int], dict[ResourceKind, int]]:
    """Split a production map into (construction-time, recurring) parts."""
    immediate: dict[ResourceKind, int] = {}
    recurring: dict[ResourceKind, int] = {}
    for kind, amount in production.items():
        if is_construction_only(kind):
            immediate[kind] = amount
        else:
            recurring[kind] = amount
    return immediate, recurring


def resource_map(raw: Mapping[Any, int] | None) -> Mapping[ResourceKind, int]:
    """Coerce a str- or enum-keyed mapping into a read-only ResourceKind map."""
    if not raw:
        return MappingProxyType({})
    try:
        return MappingProxyType({ResourceKind(k): int(v) for k, v in raw.items()})
    except ValueError as e:
        raise CatalogError(f"Invalid resource map {dict(raw)!r}: {e}") from e


def _freeze_map(obj: Any, name: str) -> None:
    object.__setattr__(obj, name, resource_map(getattr(obj, name)))


class TerrainFeature(str, Enum):
    """Resource-bearing overlays on a cell."""
    METAL = "metal"
    WATER = "water"
    MOUNTAIN = "mountain"


PLAIN_TERRAIN = "plain"


# =============================================================================
# Actions
# =============================================================================

@dataclass(frozen=True)
class ResourceEffect:
    """Add (or, with a negative amount, subtract) a resource."""
    resource: ResourceKind
    amount: int

    def __post_init__(self):
        object.__setattr__(self, "resource", ResourceKind(self.resource))


@dataclass(frozen=True)
class ActionDescriptor:
    """
    A triggerable, cooldown-gated building action.

    Rocket launches are actions with launches_rocket=True.
    """
    id: str
    name: str
    cost: Mapping[ResourceKind, int] = field(default_factory=dict)
    cooldown: int = 1
    effects: tuple[ResourceEffect, ...] = ()
    launches_rocket: bool = False

    def __post_init__(self):
        _freeze_map(self, "cost")
        object.__setattr__(self, "effects", tuple(self.effects))


# =============================================================================
# Buildings and cards
# =============================================================================

@dataclass(frozen=True)
class BuildingDefinition:
    """
    Immutable building catalog entry.

    Launch-capable buildings carry launch_cost/launch_reward; the catalog
    turns those into a launch action.
    """
    id: str
    name: str
    production: Mapping[ResourceKind, int] = field(default_factory=dict)
    consumption: Mapping[ResourceKind, int] = field(default_factory=dict)
    terrain_requirement: str | None = None
    blocked_features: tuple[str, ...] = (TerrainFeature.MOUNTAIN.value,)
    clearance_required: bool = False
    surrounding_building: str | None = None
    launch_cost: Mapping[ResourceKind, int] | None = None
    launch_reward: int = 0
    launch_cooldown: int | None = None
    actions: tuple[ActionDescriptor, ...] = ()
    description: str = ""

    def __post_init__(self):
        _freeze_map(self, "production")
        _freeze_map(self, "consumption")
        if self.launch_cost is not None:
            _freeze_map(self, "launch_cost")
        object.__setattr__(self, "blocked_features", tuple(self.blocked_features))
        object.__setattr__(self, "actions", tuple(self.actions))

    @property
    def is_consumer(self) -> bool:
        return bool(self.consumption)

    @property
    def is_launch_capable(self) -> bool:
        return self.launch_cost is not None

    def launch_action(self, default_cooldown: int = 1) -> ActionDescriptor | None:
        """The rocket launch action, if this building can launch."""
        if self.launch_cost is None:
            return None
        cooldown = self.launch_cooldown if self.launch_cooldown is not None else default_cooldown
        return ActionDescriptor(
            id="launchRocket",
            name="Launch",
            cost=self.launch_cost,
            cooldown=cooldown,
            effects=(ResourceEffect(ResourceKind.REPUTATION, self.launch_reward),),
            launches_rocket=True,
        )


class CardType(str, Enum):
    BUILDING = "building"
    PREFAB = "prefab"  # Cheaper building card
    EVENT = "event"


@dataclass(frozen=True)
class CardDefinition:
    """A card type. Card instances reference one of these."""
    id: str
    name: str
    card_type: CardType
    cost: Mapping[ResourceKind, int] = field(default_factory=dict)
    building_id: str | None = None
    effects: tuple[ResourceEffect, ...] = ()
    repeat_cooldown: int | None = None  # Repeatable event cards return after N turns
    rarity: str | None = None
    description: str = ""

    def __post_init__(self):
        object.__setattr__(self, "card_type", CardType(self.card_type))
        _freeze_map(self, "cost")
        object.__setattr__(self, "effects", tuple(self.effects))

    @property
    def is_event(self) -> bool:
        return self.card_type == CardType.EVENT

    @property
    def places_building(self) -> bool:
        return self.card_type in (CardType.BUILDING, CardType.PREFAB)

    @property
    def total_cost(self) -> int:
        return sum(self.cost.values())


# =============================================================================
# Rewards
# =============================================================================

class ApplicationType(str, Enum):
    """Where a reward applies."""
    STARTING_HAND = "startingHand"
    DECK_CARDS = "deckCards"
    BUILDING_UPGRADE = "buildingUpgrade"


@dataclass(frozen=True)
class CardGrant:
    """Extra card(s) for the starting hand or deck."""
    card_id: str
    count: int = 1


@dataclass(frozen=True)
class ResourceBonus:
    building_id: str
    bonus: Mapping[ResourceKind, int] = field(default_factory=dict)

    def __post_init__(self):
        _freeze_map(self, "bonus")


@dataclass(frozen=True)
class AdjacencyBonus:
    """
    Bonus when next to a given building type.

    neighbor=ANY counts every adjacent building not in exclusions and
    scales the bonus by that count. bonus_all is added to every resource
    the building already produces.
    """
    building_id: str
    neighbor: str
    bonus: Mapping[ResourceKind, int] = field(default_factory=dict)
    bonus_all: int = 0
    exclusions: frozenset[str] = frozenset()

    def __post_init__(self):
        _freeze_map(self, "bonus")
        object.__setattr__(self, "exclusions", frozenset(self.exclusions))


@dataclass(frozen=True)
class NewAction:
    building_id: str
    action: ActionDescriptor


@dataclass(frozen=True)
class CardCost:
    """Adjustment to the build cost of cards placing building_id."""
    building_id: str
    delta: Mapping[ResourceKind, int] = field(default_factory=dict)

    def __post_init__(self):
        _freeze_map(self, "delta")


RewardEffect = Union[CardGrant, ResourceBonus, AdjacencyBonus, NewAction, CardCost]


@dataclass(frozen=True)
class RewardDefinition:
    id: str
    name: str
    application_type: ApplicationType
    effects: tuple[RewardEffect, ...] = ()
    description: str = ""
    reputation_cost: int = 0

    def __post_init__(self):
        object.__setattr__(self, "application_type", ApplicationType(self.application_type))
        object.__setattr__(self, "effects", tuple(self.effects))


# =============================================================================
# Maps and levels
# =============================================================================

@dataclass(frozen=True)
class CellOverride:
    x: int
    y: int
    feature: str | None = None
    terrain: str | None = None
    building: str | None = None


@dataclass(frozen=True)
class MapConfig:
    map_id: str
    grid_size: int = 8
    cells: tuple[CellOverride, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "cells", tuple(self.cells))


@dataclass(frozen=True)
class LevelDefinition:
    """
    One level of the campaign.

    map_id names a catalog map; map_config overrides it (random levels
    carry their generated map inline). Neither means a random map.
    """
    id: str
    name: str
    turn_limit: int
    reputation_goal: int
    starting_resources: Mapping[ResourceKind, int] = field(default_factory=dict)
    map_id: str | None = None
    map_config: MapConfig | None = None
    reward_ids: tuple[str, ...] = ()
    next_level_id: str | None = None
    is_random: bool = False
    description: str = ""

    def __post_init__(self):
        _freeze_map(self, "starting_resources")
        object.__setattr__(self, "reward_ids", tuple(self.reward_ids))


# =============================================================================
# Catalog
# =============================================================================

def _index(items: Iterable[Any], kind: str) -> Mapping[str, Any]:
    index: dict[str, Any] = {}
    for item in items:
        key = getattr(item, "id", None) or getattr(item, "map_id")
        if key in index:
            raise CatalogError(f"Duplicate {kind} id: {key}")
        index[key] = item
    return MappingProxyType(index)


@dataclass(frozen=True)
class Catalog:
    """
    Immutable, process-wide game configuration.

    Build with Catalog.build(); all lookups are O(1).
    """
    catalog_id: str
    buildings: Mapping[str, BuildingDefinition]
    cards: Mapping[str, CardDefinition]
    rewards: Mapping[str, RewardDefinition]
    levels: Mapping[str, LevelDefinition]
    maps: Mapping[str, MapConfig]
    deck_composition: Mapping[str, int]
    starting_hand: tuple[str, ...]
    starting_rewards: tuple[str, ...]
    first_level_id: str | None
    _card_by_building: Mapping[str, CardDefinition]

    @classmethod
    def build(
        cls,
        catalog_id: str,
        buildings: Iterable[BuildingDefinition],
        cards: Iterable[CardDefinition],
        rewards: Iterable[RewardDefinition] = (),
        levels: Iterable[LevelDefinition] = (),
        maps: Iterable[MapConfig] = (),
        deck_composition: Mapping[str, int] | None = None,
        starting_hand: Iterable[str] = (),
        starting_rewards: Iterable[str] = (),
        first_level_id: str | None = None,
    ) -> Catalog:
        """Index all definitions. Raises CatalogError on duplicate ids."""
        cards = list(cards)
        levels = list(levels)

        # Building cards win over prefabs when several cards place a building
        card_by_building: dict[str, CardDefinition] = {}
        for card in sorted(cards, key=lambda c: c.card_type != CardType.BUILDING):
            if card.building_id and card.building_id not in card_by_building:
                card_by_building[card.building_id] = card

        return cls(
            catalog_id=catalog_id,
            buildings=_index(buildings, "building"),
            cards=_index(cards, "card"),
            rewards=_index(rewards, "reward"),
            levels=_index(levels, "level"),
            maps=_index(maps, "map"),
            deck_composition=MappingProxyType(dict(deck_composition or {})),
            starting_hand=tuple(starting_hand),
            starting_rewards=tuple(starting_rewards),
            first_level_id=first_level_id or (levels[0].id if levels else None),
            _card_by_building=MappingProxyType(card_by_building),
        )

    def building(self, building_id: str) -> BuildingDefinition | None:
        return self.buildings.get(building_id)

    def card(self, card_id: str) -> CardDefinition | None:
        return self.cards.get(card_id)

    def reward(self, reward_id: str) -> RewardDefinition | None:
        return self.rewards.get(reward_id)

    def level(self, level_id: str) -> LevelDefinition | None:
        return self.levels.get(level_id)

    def map(self, map_id: str) -> MapConfig | None:
        return self.maps.get(map_id)

    def card_for_building(self, building_id: str) -> CardDefinition | None:
        return self._card_by_building.get(building_id)

    def building_actions(
        self,
        building_id: str,
        default_cooldown: int = 1,
    ) -> tuple[ActionDescriptor, ...]:
        """Actions every instance of a building has, before rewards."""
        building = self.buildings.get(building_id)
        if building is None:
            return ()
        launch = building.launch_action(default_cooldown)
        return ((launch,) if launch else ()) + building.actions
