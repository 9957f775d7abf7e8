"""
Mars Rewards - Persistent unlocks earned by completing levels.

Three kinds:
- Starting hand rewards put extra cards into every new starting hand
- Deck rewards shuffle extra cards into every new deck
- Building upgrades change production, actions or card costs
"""

from ...catalog.schema import (
    ANY,
    ActionDescriptor,
    AdjacencyBonus,
    ApplicationType,
    CardCost,
    CardGrant,
    NewAction,
    ResourceBonus,
    ResourceEffect,
    RewardDefinition,
)
from .buildings import (
    DRONE_DEPO,
    ENERGY,
    FUEL,
    FUEL_REFINERY,
    IRON_MINE,
    LAUNCH_PAD,
    REPUTATION,
    SOLAR_PANELS,
    STEEL,
    STEELWORKS,
    SURROUNDING_BUILDING_IDS,
    WATER_PUMP,
    WIND_TURBINE,
)
from .cards import (
    ARTIFICIAL_LIGHTS_CARD,
    BARTER_EVENT,
    CHARITY_EVENT,
    EXPORT_IRON_EVENT,
    EXPORT_WATER_EVENT,
    IRON_MINE_PREFAB_CARD,
    RESOURCE_SUPPLY_EVENT,
    SCRAP_DRONES_EVENT,
    STEELWORKS_PREFAB_CARD,
    TESLA_COIL_PREFAB_CARD,
)


def _starting_hand(reward_id, name, description, *card_ids):
    return RewardDefinition(
        id=reward_id,
        name=name,
        application_type=ApplicationType.STARTING_HAND,
        effects=tuple(CardGrant(card_id) for card_id in card_ids),
        description=description,
    )


# ============================================================================
# Starting hand rewards
# ============================================================================

IRON_MINE_PREFAB_STARTING_REWARD = _starting_hand(
    "ironMinePrefabStartingReward", "Iron Mine Prefab",
    "Start with an additional Iron Mine Prefab card in your hand",
    IRON_MINE_PREFAB_CARD.id,
)
STEELWORKS_PREFAB_STARTING_REWARD = _starting_hand(
    "steelworksPrefabStartingReward", "Steelworks Prefab",
    "Start with an additional Steelworks Prefab card in your hand",
    STEELWORKS_PREFAB_CARD.id,
)
TESLA_COIL_PREFAB_STARTING_REWARD = _starting_hand(
    "teslaCoilPrefabStartingReward", "Tesla Coil",
    "Start with a Tesla Coil card in your hand, Tesla Coil produces a lot of energy",
    TESLA_COIL_PREFAB_CARD.id,
)
DRONE_EVENT_STARTING_REWARD = _starting_hand(
    "droneEventStartingReward", "Drone Event",
    "Start with a Drone Event card in your hand",
    SCRAP_DRONES_EVENT.id,
)
RESOURCE_SUPPLY_EVENT_STARTING_REWARD = _starting_hand(
    "resourceSupplyEventStartingReward", "Resource Supply Event",
    "Start with a Resource Supply Event card in your hand. Repeat every 3 turns",
    RESOURCE_SUPPLY_EVENT.id,
)
BARTER_EVENT_STARTING_REWARD = _starting_hand(
    "barterEventStartingReward", "Barter Event",
    "Start with a Barter Event card in your hand. Trades can be repeated every 2 turns",
    BARTER_EVENT.id,
)
RAW_EXPORT_EVENT_STARTING_REWARD = _starting_hand(
    "rawExportEventStartingReward", "Raw Export Event",
    "Start with Raw Export Event cards in your hand, trade water/iron for fuel",
    EXPORT_WATER_EVENT.id,
    EXPORT_IRON_EVENT.id,
)
CHARITY_EVENT_STARTING_REWARD = _starting_hand(
    "charityEventStartingReward", "Charity Event",
    "Add a Charity Event card to your starting hand. Help another colony for 5 reputation",
    CHARITY_EVENT.id,
)

# ============================================================================
# Deck rewards
# ============================================================================

ARTIFICIAL_LIGHTS_DECK_REWARD = RewardDefinition(
    id="artificialLightsDeckReward",
    name="Artificial Lights",
    application_type=ApplicationType.DECK_CARDS,
    effects=(CardGrant(ARTIFICIAL_LIGHTS_CARD.id, count=3),),
    description="Add 3 Artificial Lights cards to your deck",
)

# ============================================================================
# Building upgrades
# ============================================================================

DRONE_SUPPORT_REWARD = RewardDefinition(
    id="droneSupportReward",
    name="Drone Support",
    application_type=ApplicationType.BUILDING_UPGRADE,
    effects=(AdjacencyBonus(building_id=ANY, neighbor=DRONE_DEPO.id, bonus_all=1),),
    description="Any building adjacent to a Drone Depo has its production increased by 1",
)

IMPROVED_ELECTRIC_GENERATION_REWARD = RewardDefinition(
    id="improvedElectricGenerationReward",
    name="Improved Electrics",
    application_type=ApplicationType.BUILDING_UPGRADE,
    effects=(
        ResourceBonus(WIND_TURBINE.id, {ENERGY: 2}),
        AdjacencyBonus(
            building_id=SOLAR_PANELS.id,
            neighbor=ANY,
            bonus={ENERGY: 1},
            exclusions=SURROUNDING_BUILDING_IDS,
        ),
    ),
    description=(
        "Wind Turbines produce 2 more energy. "
        "Solar panels produce +1 energy per each adjacent building"
    ),
)

FUEL_COMPRESSOR_REWARD = RewardDefinition(
    id="fuelCompressorReward",
    name="Fuel Compressor",
    application_type=ApplicationType.BUILDING_UPGRADE,
    effects=(
        ResourceBonus(FUEL_REFINERY.id, {FUEL: 1}),
        CardCost(FUEL_REFINERY.id, {ENERGY: 2}),
    ),
    description="Fuel Refineries produce 1 more fuel but require 2 more energy",
)

EFFICIENT_SUPPLY_CHAIN_REWARD = RewardDefinition(
    id="efficientSupplyChainReward",
    name="Efficient Supply Chain",
    application_type=ApplicationType.BUILDING_UPGRADE,
    effects=(
        AdjacencyBonus(building_id=STEELWORKS.id, neighbor=IRON_MINE.id, bonus={STEEL: 1}),
        AdjacencyBonus(building_id=FUEL_REFINERY.id, neighbor=WATER_PUMP.id, bonus={FUEL: 1}),
    ),
    description=(
        "Steelworks produce 1 more steel if adjacent to an Iron Mine. "
        "Fuel Refineries produce 1 more fuel if adjacent to a Water Pump."
    ),
)

IMPROVED_LAUNCH_PAD_REWARD = RewardDefinition(
    id="improvedLaunchPadReward",
    name="Improved Launch Pad",
    application_type=ApplicationType.BUILDING_UPGRADE,
    effects=(
        NewAction(
            LAUNCH_PAD.id,
            ActionDescriptor(
                id="fastLaunch",
                name="Fast Launch",
                cost={FUEL: 15, STEEL: 10},
                cooldown=1,
                effects=(ResourceEffect(REPUTATION, 10),),
                launches_rocket=True,
            ),
        ),
    ),
    description="Launch Pads can launch fast rockets - trip takes only 1 turn but requires +50% fuel",
)

HEAVY_LAUNCH_PAD_REWARD = RewardDefinition(
    id="heavyLaunchPadReward",
    name="Heavy Launch",
    application_type=ApplicationType.BUILDING_UPGRADE,
    effects=(
        NewAction(
            LAUNCH_PAD.id,
            ActionDescriptor(
                id="heavyLaunch",
                name="Heavy Launch",
                cost={FUEL: 20, STEEL: 15},
                cooldown=2,
                effects=(ResourceEffect(REPUTATION, 15),),
                launches_rocket=True,
            ),
        ),
    ),
    description="Launch Pads can launch heavy rockets - +50% more steel but +100% more fuel",
)


MARS_REWARDS = [
    IRON_MINE_PREFAB_STARTING_REWARD,
    STEELWORKS_PREFAB_STARTING_REWARD,
    TESLA_COIL_PREFAB_STARTING_REWARD,
    DRONE_EVENT_STARTING_REWARD,
    RESOURCE_SUPPLY_EVENT_STARTING_REWARD,
    BARTER_EVENT_STARTING_REWARD,
    RAW_EXPORT_EVENT_STARTING_REWARD,
    CHARITY_EVENT_STARTING_REWARD,
    ARTIFICIAL_LIGHTS_DECK_REWARD,
    DRONE_SUPPORT_REWARD,
    IMPROVED_ELECTRIC_GENERATION_REWARD,
    FUEL_COMPRESSOR_REWARD,
    EFFICIENT_SUPPLY_CHAIN_REWARD,
    IMPROVED_LAUNCH_PAD_REWARD,
    HEAVY_LAUNCH_PAD_REWARD,
]

# Unlocked from the beginning
STARTING_REWARDS = [EFFICIENT_SUPPLY_CHAIN_REWARD.id, DRONE_SUPPORT_REWARD.id]
