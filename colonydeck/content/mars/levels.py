"""
Mars Levels - The campaign and the endless random levels after it.
"""

from __future__ import annotations
from random import Random
from typing import Sequence

from ...catalog.schema import LevelDefinition
from ...config import DEFAULT_CONFIG, EngineConfig
from .buildings import CONCRETE, DRONES, ENERGY, FUEL, IRON, STEEL, WATER
from .maps import LEVEL_2_MAP, RESOURCE_RICH_MAP, SAMPLE_MAP, generate_random_map
from .rewards import (
    ARTIFICIAL_LIGHTS_DECK_REWARD,
    BARTER_EVENT_STARTING_REWARD,
    CHARITY_EVENT_STARTING_REWARD,
    DRONE_EVENT_STARTING_REWARD,
    FUEL_COMPRESSOR_REWARD,
    HEAVY_LAUNCH_PAD_REWARD,
    IMPROVED_ELECTRIC_GENERATION_REWARD,
    IMPROVED_LAUNCH_PAD_REWARD,
    IRON_MINE_PREFAB_STARTING_REWARD,
    RAW_EXPORT_EVENT_STARTING_REWARD,
    RESOURCE_SUPPLY_EVENT_STARTING_REWARD,
    STEELWORKS_PREFAB_STARTING_REWARD,
    TESLA_COIL_PREFAB_STARTING_REWARD,
)

RANDOM_LEVEL_PREFIX = "random_"


LEVEL_1 = LevelDefinition(
    id="level1",
    name="Tutorial Colony",
    description="Learn the basics of colony building",
    map_id=SAMPLE_MAP.map_id,
    turn_limit=20,
    reputation_goal=10,
    starting_resources={STEEL: 100, CONCRETE: 10, FUEL: 50, DRONES: 5},
    reward_ids=(IRON_MINE_PREFAB_STARTING_REWARD.id, IMPROVED_ELECTRIC_GENERATION_REWARD.id),
    next_level_id="level2",
)

LEVEL_2 = LevelDefinition(
    id="level2",
    name="First Settlement",
    description="Establish your first sustainable colony",
    map_id=SAMPLE_MAP.map_id,
    turn_limit=25,
    reputation_goal=8,
    starting_resources={STEEL: 150, CONCRETE: 15, FUEL: 75, DRONES: 8},
    reward_ids=(ARTIFICIAL_LIGHTS_DECK_REWARD.id, FUEL_COMPRESSOR_REWARD.id),
    next_level_id="level3",
)

LEVEL_3 = LevelDefinition(
    id="level3",
    name="Expanding Horizons",
    description="Grow your colony into a thriving settlement",
    map_id=LEVEL_2_MAP.map_id,
    turn_limit=30,
    reputation_goal=10,
    starting_resources={STEEL: 200, CONCRETE: 20, FUEL: 100, DRONES: 10},
    reward_ids=(IMPROVED_LAUNCH_PAD_REWARD.id, RESOURCE_SUPPLY_EVENT_STARTING_REWARD.id),
    next_level_id="level4",
)

LEVEL_4 = LevelDefinition(
    id="level4",
    name="Advanced Colony",
    description="Develop advanced infrastructure and technology",
    map_id=RESOURCE_RICH_MAP.map_id,
    turn_limit=35,
    reputation_goal=15,
    starting_resources={STEEL: 250, CONCRETE: 30, WATER: 10, FUEL: 120, DRONES: 15, ENERGY: 5},
    reward_ids=(
        STEELWORKS_PREFAB_STARTING_REWARD.id,
        HEAVY_LAUNCH_PAD_REWARD.id,
        BARTER_EVENT_STARTING_REWARD.id,
    ),
    next_level_id="level5",
)

LEVEL_5 = LevelDefinition(
    id="level5",
    name="Metropolis",
    description="Build a massive, self-sustaining Mars metropolis",
    map_id=SAMPLE_MAP.map_id,
    turn_limit=40,
    reputation_goal=20,
    starting_resources={
        IRON: 20, STEEL: 300, CONCRETE: 50, WATER: 30, FUEL: 150, DRONES: 20, ENERGY: 10,
    },
    reward_ids=(
        RAW_EXPORT_EVENT_STARTING_REWARD.id,
        CHARITY_EVENT_STARTING_REWARD.id,
        TESLA_COIL_PREFAB_STARTING_REWARD.id,
        DRONE_EVENT_STARTING_REWARD.id,
    ),
)

MARS_LEVELS = [LEVEL_1, LEVEL_2, LEVEL_3, LEVEL_4, LEVEL_5]


def is_random_level_id(level_id: str) -> bool:
    return level_id.startswith(RANDOM_LEVEL_PREFIX)


def generate_random_level(
    number: int,
    rng: Random,
    reward_pool: Sequence[str] = (),
    config: EngineConfig = DEFAULT_CONFIG,
) -> LevelDefinition:
    """
    Build the number-th random level (1-based).

    Each level raises the reputation goal, shortens the turn limit
    (never below 15), thins starting resources and adds mountains.
    Up to two rewards are offered from reward_pool.
    """
    if number < 1:
        raise ValueError(f"Random level number must be >= 1, got {number}")

    level_id = f"{RANDOM_LEVEL_PREFIX}{number}"
    scale = max(0.4, 1.0 - 0.1 * (number - 1))
    base = LEVEL_5.starting_resources
    starting = {kind: int(amount * scale) for kind, amount in base.items()}

    offered = list(reward_pool)
    rng.shuffle(offered)

    return LevelDefinition(
        id=level_id,
        name=f"Random Colony #{number}",
        description="A randomly generated colony site. How far can you get?",
        turn_limit=max(15, 40 - 2 * number),
        reputation_goal=20 + 5 * number,
        starting_resources=starting,
        map_config=generate_random_map(
            level_id,
            rng,
            config,
            mountain_percentage=min(config.mountain_percentage + number, 20),
        ),
        reward_ids=tuple(offered[:2]),
        is_random=True,
    )
