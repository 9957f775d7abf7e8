"""
Mars - The colony-building campaign.

Build a Mars colony from a handful of cards: mine, refine and launch
rockets until the colony's reputation reaches the level goal.

This module contains:
- Building, card and reward definitions
- Hand-made maps and random map generation
- The five campaign levels and random level generation
- create_mars_catalog(), the catalog the engine runs on
"""

from ...catalog.schema import Catalog
from .buildings import MARS_BUILDINGS, SURROUNDING_BUILDING_IDS
from .cards import DECK_COMPOSITION, MARS_CARDS, STARTING_HAND
from .levels import MARS_LEVELS, generate_random_level, is_random_level_id
from .maps import MARS_MAPS, generate_random_map
from .rewards import MARS_REWARDS, STARTING_REWARDS

CATALOG_ID = "mars"


def create_mars_catalog() -> Catalog:
    """Assemble the Mars catalog."""
    return Catalog.build(
        catalog_id=CATALOG_ID,
        buildings=MARS_BUILDINGS,
        cards=MARS_CARDS,
        rewards=MARS_REWARDS,
        levels=MARS_LEVELS,
        maps=MARS_MAPS,
        deck_composition=DECK_COMPOSITION,
        starting_hand=STARTING_HAND,
        starting_rewards=STARTING_REWARDS,
        first_level_id=MARS_LEVELS[0].id,
    )


__all__ = [
    "CATALOG_ID",
    "create_mars_catalog",
    "generate_random_level",
    "generate_random_map",
    "is_random_level_id",
    "SURROUNDING_BUILDING_IDS",
]
