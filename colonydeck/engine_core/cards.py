"""
Card & Deck System - Card instances moving between deck, hand and piles.

Every card instance is always in exactly one place:
deck, hand, discard_pile, offer, played, or cooling (repeatable event
cards waiting to return to hand). Reward cards are new instances,
never copies of existing ones.

Turn card offer:
- open_offer() reveals offer_size cards; if one of them is an event
  card, one extra card is revealed (at most once per turn)
- choose() appends the chosen card to hand (ignoring the hand cap)
- the first event card chosen in a turn grants one more, final pick
- finalize_offer() discards whatever is left
"""

from __future__ import annotations
from dataclasses import dataclass
from random import Random
from typing import Iterable, Mapping
import logging

from ..catalog.schema import Catalog, CardDefinition, CardType
from ..config import DEFAULT_CONFIG, EngineConfig
from .events import EventBus, EventKind

logger = logging.getLogger(__name__)


class Card:
    """One physical card. Equality and hashing use the instance id."""

    __slots__ = ("instance_id", "definition")

    def __init__(self, instance_id: int, definition: CardDefinition):
        self.instance_id = instance_id
        self.definition = definition

    def __eq__(self, other):
        return isinstance(other, Card) and other.instance_id == self.instance_id

    def __hash__(self):
        return hash(self.instance_id)

    def __repr__(self):
        return f"Card({self.instance_id}, {self.definition.id!r})"

    @property
    def card_id(self) -> str:
        return self.definition.id

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def is_event(self) -> bool:
        return self.definition.is_event

    @property
    def building_id(self) -> str | None:
        return self.definition.building_id

    def to_dict(self) -> dict:
        return {
            "instance_id": self.instance_id,
            "card_id": self.definition.id,
            "name": self.definition.name,
            "card_type": self.definition.card_type.value,
            "building_id": self.definition.building_id,
        }


@dataclass
class CoolingCard:
    """A played repeatable card and the turns left before it returns."""
    card: Card
    turns_left: int


class CardSystem:
    """Deck, hand, piles and the per-turn card offer."""

    def __init__(
        self,
        catalog: Catalog,
        rng: Random | None = None,
        config: EngineConfig = DEFAULT_CONFIG,
        events: EventBus | None = None,
    ):
        self.catalog = catalog
        self.rng = rng or Random()
        self.config = config
        self.events = events

        self.deck: list[Card] = []
        self.hand: list[Card] = []
        self.discard_pile: list[Card] = []
        self.offer: list[Card] = []
        self.played: list[Card] = []
        self.cooling: list[CoolingCard] = []
        self._next_instance_id = 1

        self.extra_card_added_this_turn = False
        self.event_card_selected_this_turn = False
        self.pending_second_choice = False

    # =========================================================================
    # Instances and deck setup
    # =========================================================================

    def create_card(self, card_id: str) -> Card | None:
        definition = self.catalog.card(card_id)
        if definition is None:
            logger.warning(f"Unknown card id '{card_id}' - skipped")
            return None
        card = Card(self._next_instance_id, definition)
        self._next_instance_id += 1
        return card

    def rarity_composition(self) -> dict[str, int]:
        """
        Default deck when none is configured: the most expensive building
        card is unique, other building cards are common, unless a card
        declares its own rarity.
        """
        building_cards = [
            card for card in self.catalog.cards.values()
            if card.card_type == CardType.BUILDING
        ]
        if not building_cards:
            return {}
        highest = max(card.total_cost for card in building_cards)
        composition = {}
        for card in building_cards:
            rarity = card.rarity or ("unique" if card.total_cost == highest else "common")
            composition[card.id] = self.config.copies_by_rarity.get(rarity, 1)
        return composition

    def initialize_deck(self, composition: Mapping[str, int] | None = None) -> int:
        """Fill the deck. Returns the number of cards created."""
        if composition is None:
            composition = self.catalog.deck_composition or self.rarity_composition()

        self.deck = []
        for card_id, count in composition.items():
            for _ in range(count):
                card = self.create_card(card_id)
                if card is not None:
                    self.deck.append(card)

        if not self.deck:
            logger.warning("Deck composition is empty or invalid - using rarity policy")
            for card_id, count in self.rarity_composition().items():
                self.deck.extend(self.create_card(card_id) for _ in range(count))
        return len(self.deck)

    def add_reward_cards(self, card_ids: Iterable[str], to_hand: bool = False) -> list[Card]:
        """Create new instances for reward cards, into the deck or hand."""
        added = [card for card in map(self.create_card, card_ids) if card is not None]
        (self.hand if to_hand else self.deck).extend(added)
        return added

    # =========================================================================
    # Deck operations
    # =========================================================================

    def shuffle(self) -> None:
        """Fisher-Yates shuffle of the deck."""
        for i in range(len(self.deck) - 1, 0, -1):
            j = self.rng.randrange(i + 1)
            self.deck[i], self.deck[j] = self.deck[j], self.deck[i]

    def _take_from_deck(self) -> Card | None:
        if not self.deck:
            if not self.discard_pile:
                return None
            self.deck = self.discard_pile
            self.discard_pile = []
            self.shuffle()
        return self.deck.pop()

    def draw(self, count: int = 1) -> list[Card]:
        """Draw into hand, stopping at max_card_slots or when out of cards."""
        drawn = []
        for _ in range(count):
            if len(self.hand) >= self.config.max_card_slots:
                break
            card = self._take_from_deck()
            if card is None:
                break
            self.hand.append(card)
            drawn.append(card)
        return drawn

    def get(self, index: int) -> Card | None:
        if 0 <= index < len(self.hand):
            return self.hand[index]
        return None

    def discard(self, index: int) -> Card | None:
        if not 0 <= index < len(self.hand):
            return None
        card = self.hand.pop(index)
        self.discard_pile.append(card)
        return card

    def play(self, index: int) -> Card | None:
        """Remove a card from hand as played. Repeatable cards start cooling."""
        if not 0 <= index < len(self.hand):
            return None
        card = self.hand.pop(index)
        cooldown = card.definition.repeat_cooldown
        if cooldown:
            self.cooling.append(CoolingCard(card, cooldown))
        else:
            self.played.append(card)
        return card

    # =========================================================================
    # Card offer
    # =========================================================================

    @property
    def has_open_offer(self) -> bool:
        return bool(self.offer)

    def open_offer(self) -> list[Card]:
        if self.offer:
            self.finalize_offer()

        for _ in range(self.config.offer_size):
            card = self._take_from_deck()
            if card is None:
                break
            self.offer.append(card)

        if (
            any(card.is_event for card in self.offer)
            and not self.extra_card_added_this_turn
            and self.deck
        ):
            self.offer.append(self.deck.pop())
            self.extra_card_added_this_turn = True

        self._publish_offer()
        return list(self.offer)

    def choose(self, index: int) -> Card | None:
        """Take offer[index] into hand. Returns None for a bad index."""
        if not 0 <= index < len(self.offer):
            return None
        card = self.offer.pop(index)
        self.hand.append(card)

        if card.is_event and not self.event_card_selected_this_turn and not self.pending_second_choice:
            self.event_card_selected_this_turn = True
            self.pending_second_choice = True
            if self.offer:
                self._publish_offer()
                return card

        self.finalize_offer()
        return card

    def finalize_offer(self) -> list[Card]:
        """Discard the remaining offer. Returns the discarded cards."""
        remaining = self.offer
        self.offer = []
        self.discard_pile.extend(remaining)
        self.pending_second_choice = False
        self._publish_offer()
        return remaining

    def new_turn(self) -> None:
        self.extra_card_added_this_turn = False
        self.event_card_selected_this_turn = False
        self.pending_second_choice = False

    def _publish_offer(self) -> None:
        if self.events is not None:
            self.events.publish(
                EventKind.CARD_OFFER_UPDATED,
                offer=[card.to_dict() for card in self.offer],
                pending_second_choice=self.pending_second_choice,
            )

    # =========================================================================
    # Repeatable cards
    # =========================================================================

    def tick_repeatables(self) -> tuple[list[Card], list[Card]]:
        """
        Count down cooling cards. Returns (returned, delayed).

        A card whose cooldown is over returns to hand unless the hand is
        at max_card_slots, in which case it tries again next turn.
        """
        returned: list[Card] = []
        delayed: list[Card] = []
        still_cooling: list[CoolingCard] = []
        for entry in self.cooling:
            entry.turns_left -= 1
            if entry.turns_left > 0:
                still_cooling.append(entry)
            elif len(self.hand) < self.config.max_card_slots:
                self.hand.append(entry.card)
                returned.append(entry.card)
            else:
                entry.turns_left = 1
                still_cooling.append(entry)
                delayed.append(entry.card)
        self.cooling = still_cooling
        return returned, delayed

    # =========================================================================
    # Introspection
    # =========================================================================

    def card_counts(self) -> dict[str, int]:
        return {
            "deck": len(self.deck),
            "hand": len(self.hand),
            "discard": len(self.discard_pile),
            "offer": len(self.offer),
            "played": len(self.played),
            "cooling": len(self.cooling),
        }

    def all_cards(self) -> list[Card]:
        return (
            self.deck
            + self.hand
            + self.discard_pile
            + self.offer
            + self.played
            + [entry.card for entry in self.cooling]
        )

    @property
    def created_count(self) -> int:
        return self._next_instance_id - 1
