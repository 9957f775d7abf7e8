"""
Pytest fixtures for Colonydeck tests.
"""

from random import Random

import pytest

from ..catalog.schema import (
    ANY,
    ActionDescriptor,
    AdjacencyBonus,
    ApplicationType,
    BuildingDefinition,
    CardCost,
    CardDefinition,
    CardGrant,
    CardType,
    Catalog,
    CellOverride,
    LevelDefinition,
    MapConfig,
    NewAction,
    ResourceBonus,
    ResourceEffect,
    ResourceKind,
    RewardDefinition,
)
from ..content.mars import create_mars_catalog
from ..engine_core.game import ColonyGame
from ..engine_core.grid import Grid

R = ResourceKind


def make_small_catalog() -> Catalog:
    """A compact catalog on a 3x3 map, small enough to reason about by hand."""
    buildings = [
        BuildingDefinition(id="depot", name="Depot", production={R.DRONES: 7}),
        BuildingDefinition(id="mine", name="Mine", production={R.IRON: 3}, terrain_requirement="metal"),
        BuildingDefinition(id="smelter", name="Smelter", production={R.STEEL: 1}, consumption={R.IRON: 2}),
        BuildingDefinition(id="solar", name="Solar", production={R.ENERGY: 3}),
        BuildingDefinition(
            id="pad",
            name="Pad",
            launch_cost={R.FUEL: 10, R.STEEL: 10},
            launch_reward=10,
        ),
        BuildingDefinition(id="beacon", name="Beacon", production={R.REPUTATION: 1}),
    ]
    cards = [
        CardDefinition("depotCard", "Depot", CardType.BUILDING, {R.CONCRETE: 1, R.STEEL: 1}, "depot"),
        CardDefinition("mineCard", "Mine", CardType.BUILDING, {R.CONCRETE: 1}, "mine"),
        CardDefinition("smelterCard", "Smelter", CardType.BUILDING, {R.CONCRETE: 2}, "smelter"),
        CardDefinition("solarCard", "Solar", CardType.BUILDING, {R.CONCRETE: 1}, "solar"),
        CardDefinition("padCard", "Pad", CardType.BUILDING, {}, "pad"),
        CardDefinition("beaconCard", "Beacon", CardType.BUILDING, {}, "beacon"),
        CardDefinition(
            "supplyEvent", "Supply", CardType.EVENT, {},
            effects=(ResourceEffect(R.STEEL, 5),), repeat_cooldown=2,
        ),
        CardDefinition(
            "boostEvent", "Boost", CardType.EVENT, {},
            effects=(ResourceEffect(R.REPUTATION, 1),),
        ),
    ]
    rewards = [
        RewardDefinition(
            "extraSteel", "Extra Steel", ApplicationType.BUILDING_UPGRADE,
            (ResourceBonus("smelter", {R.STEEL: 1}),),
        ),
        RewardDefinition(
            "solarNeighbours", "Solar Neighbours", ApplicationType.BUILDING_UPGRADE,
            (AdjacencyBonus("solar", ANY, {R.ENERGY: 1}, exclusions=frozenset({"beacon"})),),
        ),
        RewardDefinition(
            "cheapDepot", "Cheap Depot", ApplicationType.BUILDING_UPGRADE,
            (CardCost("depot", {R.CONCRETE: -5}),),
        ),
        RewardDefinition(
            "bigLaunch", "Big Launch", ApplicationType.BUILDING_UPGRADE,
            (NewAction("pad", ActionDescriptor(
                "bigLaunch", "Big Launch", {R.FUEL: 15, R.STEEL: 10}, cooldown=2,
                effects=(ResourceEffect(R.REPUTATION, 20),), launches_rocket=True,
            )),),
            reputation_cost=2,
        ),
        RewardDefinition(
            "starterBoost", "Starter Boost", ApplicationType.STARTING_HAND,
            (CardGrant("boostEvent"),),
        ),
        RewardDefinition(
            "moreDepots", "More Depots", ApplicationType.DECK_CARDS,
            (CardGrant("depotCard", count=2),),
        ),
    ]
    maps = [
        MapConfig("tiny", grid_size=3, cells=(CellOverride(0, 0, feature="metal"),)),
        MapConfig("empty", grid_size=3),
    ]
    levels = [
        LevelDefinition(
            id="first",
            name="First",
            turn_limit=5,
            reputation_goal=10,
            starting_resources={R.CONCRETE: 10, R.STEEL: 10, R.FUEL: 10},
            map_id="tiny",
            reward_ids=("extraSteel", "bigLaunch"),
            next_level_id="second",
        ),
        LevelDefinition(
            id="second",
            name="Second",
            turn_limit=5,
            reputation_goal=20,
            starting_resources={R.CONCRETE: 10},
            map_id="empty",
            reward_ids=("solarNeighbours",),
        ),
    ]
    return Catalog.build(
        catalog_id="small",
        buildings=buildings,
        cards=cards,
        rewards=rewards,
        levels=levels,
        maps=maps,
        deck_composition={"depotCard": 2, "mineCard": 2, "solarCard": 2},
        starting_hand=["padCard"],
    )


@pytest.fixture
def small_catalog() -> Catalog:
    return make_small_catalog()


@pytest.fixture(scope="session")
def mars_catalog() -> Catalog:
    """The full Mars catalog."""
    return create_mars_catalog()


@pytest.fixture
def grid() -> Grid:
    return Grid(3)


@pytest.fixture
def rng() -> Random:
    return Random(42)


def make_level(**overrides) -> LevelDefinition:
    """An empty 3x3 level; keyword arguments override fields."""
    fields = dict(
        id="sandbox",
        name="Sandbox",
        turn_limit=10,
        reputation_goal=50,
        starting_resources={R.CONCRETE: 10, R.STEEL: 10},
        map_config=MapConfig("empty", grid_size=3),
    )
    fields.update(overrides)
    return LevelDefinition(**fields)


def give_card(game: ColonyGame, card_id: str) -> int:
    """Put a new card instance into the hand. Returns its hand index."""
    card = game.cards.create_card(card_id)
    game.cards.hand.append(card)
    return len(game.cards.hand) - 1


@pytest.fixture
def sandbox_game(small_catalog) -> ColonyGame:
    """A started game on an empty 3x3 map."""
    game = ColonyGame(small_catalog, make_level(), seed=7)
    game.start()
    return game
