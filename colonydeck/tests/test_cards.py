"""
Tests for the card and deck system.

Tests:
- Deck setup (explicit composition, rarity policy, reward cards)
- Drawing, discarding and reshuffling
- The turn card offer, including the event-card second pick
- Repeatable event cards
"""

from random import Random

import pytest

from ..config import EngineConfig
from ..engine_core.cards import CardSystem
from ..engine_core.events import EventBus, EventKind


@pytest.fixture
def cards(small_catalog):
    return CardSystem(small_catalog, Random(1))


def stack_deck(cards, *card_ids):
    """Replace the deck; the last id is drawn first."""
    cards.deck = [cards.create_card(card_id) for card_id in card_ids]


class TestDeckSetup:
    """Tests for deck initialisation."""

    def test_uses_catalog_composition(self, cards):
        """The catalog's deck composition is used by default."""
        assert cards.initialize_deck() == 6
        ids = sorted(card.card_id for card in cards.deck)
        assert ids == ["depotCard", "depotCard", "mineCard", "mineCard", "solarCard", "solarCard"]

    def test_unknown_cards_are_skipped(self, cards):
        """Unknown ids in a composition are skipped with a warning."""
        assert cards.initialize_deck({"mineCard": 1, "nope": 3}) == 1

    def test_rarity_policy(self, mars_catalog):
        """Most expensive building card is unique, the rest common."""
        composition = CardSystem(mars_catalog).rarity_composition()

        assert composition["steelworksCard"] == 1
        assert composition["droneDepoCard"] == 3
        assert "ironMinePrefabCard" not in composition
        assert "barterEvent" not in composition

    def test_reward_cards_are_new_instances(self, cards):
        """Reward cards get fresh instance ids."""
        cards.initialize_deck()
        added = cards.add_reward_cards(["boostEvent", "boostEvent"], to_hand=True)

        assert len(cards.hand) == 2
        assert added[0] != added[1]
        assert len({card.instance_id for card in cards.all_cards()}) == 8

    def test_shuffle_is_seeded(self, small_catalog):
        """Same seed, same order."""
        first = CardSystem(small_catalog, Random(5))
        second = CardSystem(small_catalog, Random(5))
        for system in (first, second):
            system.initialize_deck()
            system.shuffle()

        assert [c.card_id for c in first.deck] == [c.card_id for c in second.deck]


class TestDrawAndDiscard:
    """Tests for hand management."""

    def test_draw_stops_at_card_slots(self, small_catalog):
        """Drawing never fills the hand past max_card_slots."""
        cards = CardSystem(small_catalog, Random(1), EngineConfig(max_hand_size=2, max_card_slots=3))
        cards.initialize_deck()

        drawn = cards.draw(5)

        assert len(drawn) == 3
        assert len(cards.hand) == 3
        assert len(cards.deck) == 3

    def test_discard_pile_is_reshuffled(self, cards):
        """An empty deck is refilled from the discard pile."""
        stack_deck(cards, "mineCard")
        cards.draw(1)
        cards.discard(0)

        assert cards.deck == []
        drawn = cards.draw(1)

        assert [c.card_id for c in drawn] == ["mineCard"]
        assert cards.discard_pile == []

    def test_bad_indexes(self, cards):
        """Out-of-range hand indexes return None."""
        assert cards.get(0) is None
        assert cards.discard(3) is None
        assert cards.play(-1) is None

    def test_cards_are_conserved(self, cards):
        """Every created card stays in exactly one place."""
        cards.initialize_deck()
        cards.add_reward_cards(["supplyEvent"], to_hand=True)
        cards.open_offer()
        cards.choose(0)
        cards.play(0)
        cards.discard(0)
        cards.open_offer()

        instances = [card.instance_id for card in cards.all_cards()]
        assert len(instances) == cards.created_count
        assert len(set(instances)) == len(instances)


class TestCardOffer:
    """Tests for the turn card offer."""

    def test_offer_reveals_offer_size_cards(self, cards):
        """Without event cards the offer has offer_size cards."""
        stack_deck(cards, "mineCard", "mineCard", "depotCard", "solarCard")

        offer = cards.open_offer()

        assert [c.card_id for c in offer] == ["solarCard", "depotCard", "mineCard"]
        assert cards.extra_card_added_this_turn is False

    def test_event_adds_one_extra_card(self, cards):
        """An event in the offer reveals one extra card, once per turn."""
        stack_deck(cards, "solarCard", "mineCard", "mineCard", "depotCard", "boostEvent")

        offer = cards.open_offer()

        assert len(offer) == 4
        assert cards.extra_card_added_this_turn is True

    def test_extra_card_only_from_deck(self, cards):
        """The extra card is skipped when the deck is empty; discards stay put."""
        stack_deck(cards, "mineCard", "depotCard", "boostEvent")
        cards.discard_pile = [cards.create_card("solarCard")]

        offer = cards.open_offer()

        assert len(offer) == 3
        assert cards.extra_card_added_this_turn is False
        assert [c.card_id for c in cards.discard_pile] == ["solarCard"]

    def test_regular_pick_closes_offer(self, cards):
        """Picking a non-event card discards the rest."""
        stack_deck(cards, "mineCard", "depotCard", "solarCard")
        cards.open_offer()

        card = cards.choose(1)

        assert card.card_id == "depotCard"
        assert cards.hand == [card]
        assert cards.offer == []
        assert len(cards.discard_pile) == 2

    def test_event_pick_grants_one_more(self, cards):
        """First event pick opens a second pick; a second event does not open a third."""
        stack_deck(cards, "mineCard", "boostEvent", "depotCard", "boostEvent")
        cards.open_offer()
        assert [c.card_id for c in cards.offer] == ["boostEvent", "depotCard", "boostEvent", "mineCard"]

        first = cards.choose(0)

        assert first.is_event
        assert cards.event_card_selected_this_turn is True
        assert cards.pending_second_choice is True
        assert len(cards.offer) == 3

        second = cards.choose(1)

        assert second.is_event
        assert cards.pending_second_choice is False
        assert cards.offer == []
        assert [c.card_id for c in cards.hand] == ["boostEvent", "boostEvent"]

    def test_choose_ignores_hand_cap(self, small_catalog):
        """Picks are appended even past max_card_slots."""
        cards = CardSystem(small_catalog, Random(1), EngineConfig(max_hand_size=1, max_card_slots=1))
        cards.add_reward_cards(["mineCard"], to_hand=True)
        stack_deck(cards, "depotCard", "solarCard", "mineCard")
        cards.open_offer()

        cards.choose(0)

        assert len(cards.hand) == 2

    def test_choose_bad_index(self, cards):
        """A bad index returns None and keeps the offer open."""
        stack_deck(cards, "mineCard", "depotCard", "solarCard")
        cards.open_offer()

        assert cards.choose(5) is None
        assert len(cards.offer) == 3

    def test_offer_events_published(self, small_catalog):
        """Offer changes are published."""
        bus = EventBus()
        events = []
        bus.subscribe(EventKind.CARD_OFFER_UPDATED, events.append)
        cards = CardSystem(small_catalog, Random(1), events=bus)
        stack_deck(cards, "mineCard", "depotCard", "solarCard")

        cards.open_offer()
        cards.choose(0)

        assert len(events[0].data["offer"]) == 3
        assert events[-1].data["offer"] == []


class TestRepeatableCards:
    """Tests for cooling event cards."""

    def test_repeatable_card_returns_after_cooldown(self, cards):
        """supplyEvent (cooldown 2) comes back after two ticks."""
        cards.add_reward_cards(["supplyEvent"], to_hand=True)
        cards.play(0)

        assert cards.hand == []
        assert cards.tick_repeatables() == ([], [])
        returned, delayed = cards.tick_repeatables()

        assert [c.card_id for c in returned] == ["supplyEvent"]
        assert delayed == []
        assert len(cards.hand) == 1

    def test_non_repeatable_card_is_played(self, cards):
        """One-shot cards go to the played pile."""
        cards.add_reward_cards(["boostEvent"], to_hand=True)
        card = cards.play(0)

        assert cards.played == [card]
        assert cards.cooling == []

    def test_full_hand_delays_return(self, small_catalog):
        """A card due back waits while the hand is at max_card_slots."""
        cards = CardSystem(small_catalog, Random(1), EngineConfig(max_hand_size=1, max_card_slots=1))
        cards.add_reward_cards(["supplyEvent"], to_hand=True)
        cards.play(0)
        cards.add_reward_cards(["mineCard"], to_hand=True)

        cards.tick_repeatables()
        returned, delayed = cards.tick_repeatables()

        assert returned == []
        assert [c.card_id for c in delayed] == ["supplyEvent"]

        cards.discard(0)
        returned, _ = cards.tick_repeatables()
        assert [c.card_id for c in returned] == ["supplyEvent"]
