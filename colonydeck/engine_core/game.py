"""
Colony Game - Turn driver for one level.

ColonyGame wires the components together and is the single entry point
for player commands. Every command goes through apply(), which
dispatches to a handler and turns rejections into failed ActionResults
(and a user message on the event bus).

End of turn runs in a fixed order:
1. Leftover card offer is discarded
2. Production scheduler
3. Victory / defeat check
4. Due actions resolve (rockets land)
5. Repeatable cards count down
6. Turn counter advances, offer flags reset
7. Rocket fuel refresh
8. New card offer
"""

from __future__ import annotations
from collections import Counter
from enum import Enum
from random import Random
from typing import Callable, Iterable, Mapping, Protocol
import logging

from ..catalog.schema import (
    CardDefinition,
    Catalog,
    LevelDefinition,
    ResourceKind,
    split_production,
)
from ..config import DEFAULT_CONFIG, EngineConfig
from .action import Action, ActionPayload, ActionResult, ActionType, ErrorCode
from .actions import ActionTracker, RocketLifecycle
from .cards import Card, CardSystem
from .events import EventBus, EventKind
from .grid import Grid
from .production import ProductionReport, ProductionScheduler
from .resources import ResourceLedger
from .rewards import RewardEngine

logger = logging.getLogger(__name__)


class GamePhase(str, Enum):
    PLAYING = "playing"
    VICTORY = "victory"
    DEFEAT = "defeat"


class ProgressionHooks(Protocol):
    """Callbacks into level progression."""

    def on_level_completed(self, level: LevelDefinition, reputation: int) -> None: ...

    def on_level_failed(self, level: LevelDefinition, reputation: int) -> None: ...

    def on_reward_unlocked(self, reward_id: str) -> None: ...


def _title(kind: ResourceKind) -> str:
    return kind.value.capitalize()


def _describe(amounts: Mapping[ResourceKind, int]) -> str:
    return ", ".join(f"{amount} {_title(kind)}" for kind, amount in amounts.items())


class ColonyGame:
    """
    One play-through of a level.

    Collaborators are built here from the catalog and level and exposed
    as attributes (ledger, grid, cards, rewards, tracker, rockets,
    scheduler) for inspection and tests.
    """

    def __init__(
        self,
        catalog: Catalog,
        level: LevelDefinition,
        unlocked_reward_ids: Iterable[str] = (),
        resource_bonuses: Mapping[str, int] | None = None,
        rng: Random | None = None,
        seed: int | None = None,
        config: EngineConfig = DEFAULT_CONFIG,
        events: EventBus | None = None,
        hooks: ProgressionHooks | None = None,
    ):
        self.catalog = catalog
        self.level = level
        self.config = config
        self.events = events or EventBus()
        self.hooks = hooks
        self.rng = rng or Random(seed)

        self.turn = 1
        self.phase = GamePhase.PLAYING
        self.started = False

        starting = Counter({kind.value: amount for kind, amount in level.starting_resources.items()})
        starting.update(resource_bonuses or {})
        self.ledger = ResourceLedger(
            {kind: max(0, amount) for kind, amount in starting.items()},
            goal=level.reputation_goal,
            events=self.events,
            on_goal_reached=self._on_goal_reached,
        )
        self.grid = Grid(config.default_grid_size)
        self.rewards = RewardEngine(catalog, self.grid, unlocked_reward_ids)
        self.cards = CardSystem(catalog, self.rng, config, self.events)
        self.tracker = ActionTracker()
        self.rockets = RocketLifecycle(self.grid, self.ledger, catalog, self.tracker, self.events)
        self.scheduler = ProductionScheduler(self.grid, self.ledger, self.rewards, catalog)
        self.ledger.add_listener(self.rockets.on_resource_changed)
        self.last_production: ProductionReport | None = None

    # =========================================================================
    # Setup
    # =========================================================================

    def start(self) -> None:
        """Load the map, build deck and hand, and open the first offer."""
        if self.started:
            return
        self._load_map()

        self.cards.initialize_deck()
        deck_rewards = self.rewards.get_deck_reward_cards()
        self.cards.add_reward_cards(
            card_id for card_id, count in deck_rewards.items() for _ in range(count)
        )
        self.cards.shuffle()

        self.cards.add_reward_cards(self.catalog.starting_hand, to_hand=True)
        self.cards.add_reward_cards(self.rewards.get_starting_hand_cards(), to_hand=True)

        self.started = True
        self.rockets.refresh()
        self.cards.open_offer()
        logger.info(
            f"Level '{self.level.id}' started: {self.grid.size}x{self.grid.size} grid, "
            f"{len(self.cards.deck)} cards in deck, goal {self.level.reputation_goal} "
            f"in {self.level.turn_limit} turns"
        )

    def _load_map(self) -> None:
        map_config = self.level.map_config
        if map_config is None and self.level.map_id:
            map_config = self.catalog.map(self.level.map_id)
            if map_config is None:
                logger.warning(f"Unknown map '{self.level.map_id}' - generating a random map")
        if map_config is not None:
            self.grid.load_map(map_config)
        else:
            self.grid.reset(self.config.default_grid_size)
            self.grid.generate_random(
                self.rng,
                self.config.metal_percentage,
                self.config.water_percentage,
                self.config.mountain_percentage,
            )

    # =========================================================================
    # Command dispatch
    # =========================================================================

    def apply(self, action: Action) -> ActionResult:
        """
        Apply a player command.

        Returns ActionResult; failures leave the game unchanged.
        """
        if not self.started:
            self.start()
        if self.phase != GamePhase.PLAYING:
            result = ActionResult.failure("The level is over", ErrorCode.GAME_OVER)
        else:
            handler = self._get_handler(action.action_type)
            if handler is None:
                result = ActionResult.failure(
                    f"No handler for action type: {action.action_type}",
                    ErrorCode.UNKNOWN_ACTION,
                )
            else:
                result = handler(action.payload)

        if result.success:
            for message in result.messages:
                self.events.message(message)
        else:
            logger.debug(f"{action.action_type.value} rejected: {result.error_code.value}")
            self.events.message(result.error, level="warning")
        return result

    def _get_handler(self, action_type: ActionType) -> Callable[[ActionPayload], ActionResult] | None:
        handlers = {
            ActionType.CHOOSE_CARD: self._handle_choose_card,
            ActionType.PLACE_CARD: self._handle_place_card,
            ActionType.PLAY_EVENT: self._handle_play_event,
            ActionType.DISCARD_CARD: self._handle_discard_card,
            ActionType.PERFORM_ACTION: self._handle_perform_action,
            ActionType.LAUNCH_ROCKET: self._handle_launch_rocket,
            ActionType.END_TURN: self._handle_end_turn,
        }
        return handlers.get(action_type)

    def choose_card(self, choice_index: int) -> ActionResult:
        return self.apply(Action.choose_card(choice_index))

    def place_card(self, hand_index: int, x: int, y: int) -> ActionResult:
        return self.apply(Action.place_card(hand_index, x, y))

    def play_event(self, hand_index: int) -> ActionResult:
        return self.apply(Action.play_event(hand_index))

    def discard_card(self, hand_index: int) -> ActionResult:
        return self.apply(Action.discard_card(hand_index))

    def perform_action(self, x: int, y: int, action_id: str) -> ActionResult:
        return self.apply(Action.perform_action(x, y, action_id))

    def launch_rocket(self, x: int, y: int) -> ActionResult:
        return self.apply(Action.launch_rocket(x, y))

    def end_turn(self) -> ActionResult:
        return self.apply(Action.end_turn())

    # =========================================================================
    # Handlers
    # =========================================================================

    def _handle_choose_card(self, payload: ActionPayload) -> ActionResult:
        if not self.cards.has_open_offer:
            return ActionResult.failure("No card offer is open", ErrorCode.NO_OFFER)
        card = self.cards.choose(payload.choice_index if payload.choice_index is not None else -1)
        if card is None:
            return ActionResult.failure("No such card in the offer", ErrorCode.INVALID_CARD)

        messages = [f"Added {card.name} to your hand"]
        if self.cards.pending_second_choice:
            messages.append("You can choose one more card")
        return ActionResult.ok(
            messages,
            card=card.to_dict(),
            pending_second_choice=self.cards.pending_second_choice,
        )

    def _hand_card(self, payload: ActionPayload) -> Card | None:
        if payload.hand_index is None:
            return None
        return self.cards.get(payload.hand_index)

    def _payload_cell(self, payload: ActionPayload):
        if payload.x is None or payload.y is None:
            return None
        return self.grid.get_cell(payload.x, payload.y)

    def _handle_place_card(self, payload: ActionPayload) -> ActionResult:
        card = self._hand_card(payload)
        if card is None or not card.definition.places_building:
            return ActionResult.failure("Select a building card to place", ErrorCode.INVALID_CARD)
        building = self.catalog.building(card.building_id)
        if building is None:
            logger.warning(f"Card '{card.card_id}' places unknown building '{card.building_id}'")
            return ActionResult.failure("This card cannot be placed", ErrorCode.INVALID_CARD)

        x, y = payload.x, payload.y
        if x is None or y is None or not self.grid.can_place(x, y, building):
            return ActionResult.failure("Cannot place building here.", ErrorCode.INVALID_PLACEMENT)
        if not self.ledger.consume(self.card_cost(card.definition)):
            return ActionResult.failure(
                "Not enough resources to build this.", ErrorCode.INSUFFICIENT_RESOURCES
            )

        self.grid.place(x, y, building)
        cell = self.grid.get_cell(x, y)
        surroundings = []
        if building.surrounding_building:
            filler = self.catalog.building(building.surrounding_building)
            if filler is None:
                logger.warning(f"Unknown surrounding building '{building.surrounding_building}'")
            else:
                surroundings = [(c.x, c.y) for c in self.grid.place_around(x, y, filler)]
        if building.is_launch_capable:
            self.rockets.create_rocket(cell)

        messages = []
        upgraded = self.rewards.apply_building_upgrades(building.id, building.production, x, y)
        immediate, _ = split_production(upgraded)
        immediate = {kind: amount for kind, amount in immediate.items() if amount > 0}
        if immediate:
            self.ledger.credit(immediate)
            messages.append(f"{building.name} produced {_describe(immediate)}")

        neighbour_bonus = self.rewards.neighbor_placement_bonus(building.id, x, y)
        if neighbour_bonus:
            self.ledger.credit(neighbour_bonus)
            messages.append(f"Adjacent buildings generated {_describe(neighbour_bonus)}")

        self.cards.play(payload.hand_index)
        self.rockets.refresh()
        self.events.publish(
            EventKind.BUILDING_PLACED,
            x=x,
            y=y,
            building=building.id,
            surroundings=surroundings,
        )
        return ActionResult.ok(messages, building=building.id, x=x, y=y, surroundings=surroundings)

    def _handle_play_event(self, payload: ActionPayload) -> ActionResult:
        card = self._hand_card(payload)
        if card is None or not card.is_event:
            return ActionResult.failure("Select an event card to play", ErrorCode.INVALID_CARD)
        if not self.ledger.consume(self.card_cost(card.definition)):
            return ActionResult.failure("Not enough resources", ErrorCode.INSUFFICIENT_RESOURCES)

        added = {}
        for effect in card.definition.effects:
            if self.ledger.modify(effect.resource, effect.amount):
                added[effect.resource] = added.get(effect.resource, 0) + effect.amount
            else:
                logger.warning(f"Effect {effect} of '{card.card_id}' could not be applied")

        self.cards.play(payload.hand_index)
        messages = [f"Added {_describe(added)}"] if added else []
        cooldown = card.definition.repeat_cooldown
        if cooldown:
            messages.append(f"{card.name} will return in {cooldown} turn{'s' if cooldown > 1 else ''}")
        return ActionResult.ok(messages, card=card.to_dict())

    def _handle_discard_card(self, payload: ActionPayload) -> ActionResult:
        card = self.cards.discard(payload.hand_index) if payload.hand_index is not None else None
        if card is None:
            return ActionResult.failure("No such card in hand", ErrorCode.INVALID_CARD)
        return ActionResult.ok([f"Discarded {card.name}"], card=card.to_dict())

    def _handle_perform_action(self, payload: ActionPayload) -> ActionResult:
        action = None
        cell = self._payload_cell(payload)
        if cell is not None and cell.building is not None:
            action = next(
                (a for a in self.building_actions(cell.building) if a.id == payload.building_action_id),
                None,
            )
        if action is None:
            return ActionResult.failure(
                f"No action '{payload.building_action_id}' here", ErrorCode.UNKNOWN_ACTION
            )
        return self.rockets.execute(cell.x, cell.y, action, self.turn)

    def _handle_launch_rocket(self, payload: ActionPayload) -> ActionResult:
        action = None
        cell = self._payload_cell(payload)
        if cell is not None and cell.building is not None:
            building = self.catalog.building(cell.building)
            if building is not None:
                action = building.launch_action(self.config.default_action_cooldown)
        if action is None:
            return ActionResult.failure("Nothing to launch here", ErrorCode.UNKNOWN_ACTION)
        return self.rockets.execute(cell.x, cell.y, action, self.turn)

    def _handle_end_turn(self, payload: ActionPayload) -> ActionResult:
        over = len(self.cards.hand) - self.config.max_hand_size
        if over > 0:
            return ActionResult.failure(
                f"Hand over limit! Discard {over} card(s)", ErrorCode.HAND_OVER_LIMIT
            )

        if self.cards.has_open_offer:
            self.cards.finalize_offer()

        report = self.scheduler.run()
        self.last_production = report
        messages = []

        if self.phase == GamePhase.VICTORY:
            return ActionResult.ok(messages, production=report.to_dict(), phase=self.phase.value)
        if self.turn >= self.level.turn_limit:
            self._on_defeat()
            return ActionResult.ok(messages, production=report.to_dict(), phase=self.phase.value)

        landed = [e for e in self.rockets.resolve_returns(self.turn + 1) if e.launches_rocket]
        if landed:
            count = len(landed)
            messages.append(
                f"{count} rocket{'s' if count > 1 else ''} returned to launch pad{'s' if count > 1 else ''}"
            )

        returned, delayed = self.cards.tick_repeatables()
        messages.extend(f"{card.name} returned to your hand" for card in returned)
        messages.extend(f"{card.name} delayed (hand full)" for card in delayed)

        self.turn += 1
        self.cards.new_turn()
        self.rockets.refresh()
        self.cards.open_offer()

        self.events.publish(EventKind.TURN_ENDED, turn=self.turn, production=report.to_dict())
        return ActionResult.ok(
            messages,
            turn=self.turn,
            production=report.to_dict(),
            phase=self.phase.value,
        )

    # =========================================================================
    # Outcome and rewards
    # =========================================================================

    def _on_goal_reached(self) -> None:
        self.phase = GamePhase.VICTORY
        self.ledger.victory_check_enabled = False
        reputation = self.ledger.get(ResourceKind.REPUTATION)
        logger.info(f"Level '{self.level.id}' won on turn {self.turn} with {reputation} reputation")
        self.events.publish(
            EventKind.LEVEL_COMPLETED,
            level_id=self.level.id,
            reputation=reputation,
            turn=self.turn,
        )
        self.events.message(f"VICTORY! You've reached {reputation} reputation points")
        if self.hooks is not None:
            self.hooks.on_level_completed(self.level, reputation)

    def _on_defeat(self) -> None:
        self.phase = GamePhase.DEFEAT
        reputation = self.ledger.get(ResourceKind.REPUTATION)
        logger.info(f"Level '{self.level.id}' lost with {reputation}/{self.level.reputation_goal} reputation")
        self.events.publish(
            EventKind.LEVEL_FAILED,
            level_id=self.level.id,
            reputation=reputation,
            turn=self.turn,
        )
        if self.hooks is not None:
            self.hooks.on_level_failed(self.level, reputation)

    def unlock_reward(self, reward_id: str) -> bool:
        """Unlock a reward for this game and notify progression."""
        if not self.rewards.unlock(reward_id):
            return False
        self.events.publish(EventKind.REWARD_UNLOCKED, reward_id=reward_id)
        if self.hooks is not None:
            self.hooks.on_reward_unlocked(reward_id)
        return True

    # =========================================================================
    # Queries
    # =========================================================================

    def card_cost(self, definition: CardDefinition) -> dict[ResourceKind, int]:
        """Card cost with reward adjustments, floored at zero."""
        cost = dict(definition.cost)
        if definition.places_building:
            for kind, delta in self.rewards.get_card_cost_adjustments(definition.building_id).items():
                cost[kind] = max(cost.get(kind, 0) + delta, 0)
        return {kind: amount for kind, amount in cost.items() if amount > 0}

    def building_actions(self, building_id: str):
        return self.rewards.get_building_actions(building_id, self.config.default_action_cooldown)

    def cell_actions(self, x: int, y: int) -> list[dict]:
        """Actions available on a cell, with cooldown details."""
        cell = self.grid.get_cell(x, y)
        if cell is None or cell.building is None:
            return []
        return [
            {
                "id": action.id,
                "name": action.name,
                "cost": {kind.value: amount for kind, amount in action.cost.items()},
                "cooldown": action.cooldown,
                "launches_rocket": action.launches_rocket,
                "on_cooldown": self.tracker.is_action_on_cooldown(x, y, action.id),
                "remaining_turns": self.tracker.remaining_turns(x, y, action.id, self.turn),
                "affordable": self.ledger.has_sufficient(action.cost),
            }
            for action in self.building_actions(cell.building)
        ]

    @property
    def hand_over_limit(self) -> bool:
        return len(self.cards.hand) > self.config.max_hand_size

    def to_dict(self) -> dict:
        """Serializable view of the whole game."""
        return {
            "level_id": self.level.id,
            "level_name": self.level.name,
            "turn": self.turn,
            "turn_limit": self.level.turn_limit,
            "reputation_goal": self.level.reputation_goal,
            "phase": self.phase.value,
            "resources": self.ledger.snapshot(),
            "hand": [
                {**card.to_dict(), "cost": {k.value: v for k, v in self.card_cost(card.definition).items()}}
                for card in self.cards.hand
            ],
            "offer": [card.to_dict() for card in self.cards.offer],
            "pending_second_choice": self.cards.pending_second_choice,
            "hand_over_limit": self.hand_over_limit,
            "card_counts": self.cards.card_counts(),
            "grid": {
                "size": self.grid.size,
                "cells": [cell.to_dict() for cell in self.grid],
            },
            "unlocked_rewards": self.rewards.unlocked.to_dict(),
        }
