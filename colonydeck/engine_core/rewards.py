"""
Reward / Upgrade Engine - Unlocked rewards and the effects they grant.

Rewards are sorted into three append-only lists by application type.
Building upgrades are folded into production in unlock order:
- ResourceBonus adds to the named resources
- AdjacencyBonus applies once when next to a specific neighbour, or
  once per qualifying neighbour for the "any" wildcard
- NewAction and CardCost are exposed through their own queries

Unknown reward or building ids are configuration problems: they are
logged and treated as no-ops.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Mapping
import logging

from ..catalog.schema import (
    ANY,
    ActionDescriptor,
    AdjacencyBonus,
    ApplicationType,
    CardCost,
    CardGrant,
    Catalog,
    NewAction,
    ResourceBonus,
    ResourceKind,
    RewardDefinition,
    RewardEffect,
    is_construction_only,
)
from .grid import Grid

logger = logging.getLogger(__name__)


@dataclass
class UnlockedRewardSet:
    """Unlocked reward ids, one ordered list per application type."""
    starting_hand: list[str] = field(default_factory=list)
    deck_cards: list[str] = field(default_factory=list)
    building_upgrade: list[str] = field(default_factory=list)

    def for_type(self, application_type: ApplicationType) -> list[str]:
        return {
            ApplicationType.STARTING_HAND: self.starting_hand,
            ApplicationType.DECK_CARDS: self.deck_cards,
            ApplicationType.BUILDING_UPGRADE: self.building_upgrade,
        }[application_type]

    def __contains__(self, reward_id: str) -> bool:
        return (
            reward_id in self.starting_hand
            or reward_id in self.deck_cards
            or reward_id in self.building_upgrade
        )

    def to_dict(self) -> dict[str, list[str]]:
        return {
            ApplicationType.STARTING_HAND.value: list(self.starting_hand),
            ApplicationType.DECK_CARDS.value: list(self.deck_cards),
            ApplicationType.BUILDING_UPGRADE.value: list(self.building_upgrade),
        }


def _targets(effect_building_id: str, building_id: str) -> bool:
    return effect_building_id == building_id or effect_building_id == ANY


class RewardEngine:
    """Tracks unlocked rewards and answers upgrade queries."""

    def __init__(self, catalog: Catalog, grid: Grid, unlocked_ids: Iterable[str] = ()):
        self.catalog = catalog
        self.grid = grid
        self.unlocked = UnlockedRewardSet()
        self._order: list[str] = []
        for reward_id in unlocked_ids:
            self.unlock(reward_id)

    def unlock(self, reward_id: str) -> bool:
        """Unlock a reward. False if unknown or already unlocked."""
        reward = self.catalog.reward(reward_id)
        if reward is None:
            logger.warning(f"Unknown reward id '{reward_id}' - not unlocked")
            return False
        if reward_id in self.unlocked:
            return False
        self.unlocked.for_type(reward.application_type).append(reward_id)
        self._order.append(reward_id)
        logger.info(f"Unlocked reward '{reward_id}'")
        return True

    def is_unlocked(self, reward_id: str) -> bool:
        return reward_id in self.unlocked

    @property
    def unlocked_ids(self) -> list[str]:
        """All unlocked ids in unlock order."""
        return list(self._order)

    def _rewards(self, application_type: ApplicationType) -> Iterator[RewardDefinition]:
        for reward_id in self.unlocked.for_type(application_type):
            reward = self.catalog.reward(reward_id)
            if reward is not None:
                yield reward

    def _upgrade_effects(self) -> Iterator[RewardEffect]:
        for reward in self._rewards(ApplicationType.BUILDING_UPGRADE):
            yield from reward.effects

    # =========================================================================
    # Building upgrades
    # =========================================================================

    def apply_building_upgrades(
        self,
        building_id: str,
        base_production: Mapping[ResourceKind, int],
        x: int,
        y: int,
    ) -> dict[ResourceKind, int]:
        """Production of building_id at (x, y) with every unlocked upgrade applied."""
        production = dict(base_production)
        for effect in self._upgrade_effects():
            if isinstance(effect, ResourceBonus) and _targets(effect.building_id, building_id):
                for kind, amount in effect.bonus.items():
                    production[kind] = production.get(kind, 0) + amount
            elif isinstance(effect, AdjacencyBonus) and _targets(effect.building_id, building_id):
                multiplier = self._adjacency_multiplier(effect, x, y)
                if multiplier == 0:
                    continue
                for kind, amount in effect.bonus.items():
                    production[kind] = production.get(kind, 0) + amount * multiplier
                if effect.bonus_all:
                    for kind in base_production:
                        production[kind] = production.get(kind, 0) + effect.bonus_all * multiplier
        return production

    def _adjacency_multiplier(self, effect: AdjacencyBonus, x: int, y: int) -> int:
        if effect.neighbor == ANY:
            return self.grid.count_adjacent_buildings(x, y, effect.exclusions)
        return 1 if self.grid.is_adjacent_to_building_type(x, y, effect.neighbor) else 0

    def neighbor_placement_bonus(
        self,
        placed_building_id: str,
        x: int,
        y: int,
    ) -> dict[ResourceKind, int]:
        """
        Construction-only resources earned by neighbours of a new building.

        Neighbours with a per-adjacent-building bonus (neighbor="any")
        gain that bonus once for the newly placed building, unless it is
        in the bonus's exclusion set.
        """
        gained: Counter = Counter()
        for neighbour in self.grid.adjacent_cells(x, y):
            if neighbour.building is None:
                continue
            for effect in self._upgrade_effects():
                if (
                    not isinstance(effect, AdjacencyBonus)
                    or effect.neighbor != ANY
                    or not _targets(effect.building_id, neighbour.building)
                    or placed_building_id in effect.exclusions
                ):
                    continue
                for kind, amount in effect.bonus.items():
                    if is_construction_only(kind):
                        gained[kind] += amount
        return dict(gained)

    # =========================================================================
    # Actions, costs and cards
    # =========================================================================

    def get_building_actions(
        self,
        building_id: str,
        default_cooldown: int = 1,
    ) -> list[ActionDescriptor]:
        if self.catalog.building(building_id) is None:
            logger.warning(f"Unknown building id '{building_id}' - no actions")
            return []
        actions = list(self.catalog.building_actions(building_id, default_cooldown))
        for effect in self._upgrade_effects():
            if isinstance(effect, NewAction) and _targets(effect.building_id, building_id):
                actions.append(effect.action)
        return actions

    def get_card_cost_adjustments(self, building_id: str) -> dict[ResourceKind, int]:
        adjustments: Counter = Counter()
        for effect in self._upgrade_effects():
            if isinstance(effect, CardCost) and _targets(effect.building_id, building_id):
                adjustments.update(effect.delta)
        return dict(adjustments)

    def get_starting_hand_cards(self) -> list[str]:
        cards = []
        for reward in self._rewards(ApplicationType.STARTING_HAND):
            for effect in reward.effects:
                if isinstance(effect, CardGrant):
                    cards.extend([effect.card_id] * effect.count)
        return cards

    def get_deck_reward_cards(self) -> dict[str, int]:
        cards: Counter = Counter()
        for reward in self._rewards(ApplicationType.DECK_CARDS):
            for effect in reward.effects:
                if isinstance(effect, CardGrant):
                    cards[effect.card_id] += effect.count
        return dict(cards)
