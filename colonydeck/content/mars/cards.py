"""
Mars Cards - Building, prefab and event cards.

Card structure:
- Building cards place a building and pay the full cost
- Prefab cards place the same building for far less
- Event cards pay a cost for an immediate resource effect; repeatable
  ones come back to hand after their cooldown
"""

from ...catalog.schema import CardDefinition, CardType, ResourceEffect
from .buildings import (
    ARTIFICIAL_LIGHTS,
    CONCRETE_HARVESTER,
    CONCRETE,
    DRONE_DEPO,
    DRONES,
    ENERGY,
    FUEL,
    FUEL_REFINERY,
    IRON,
    IRON_MINE,
    LAUNCH_PAD,
    REPUTATION,
    SOLAR_PANELS,
    STEEL,
    STEELWORKS,
    TESLA_COIL,
    WATER,
    WATER_PUMP,
    WIND_TURBINE,
)


def _building_card(card_id, name, building, cost, description=""):
    return CardDefinition(
        id=card_id,
        name=name,
        card_type=CardType.BUILDING,
        building_id=building.id,
        cost=cost,
        description=description,
    )


def _prefab_card(card_id, name, building, cost):
    return CardDefinition(
        id=card_id,
        name=name,
        card_type=CardType.PREFAB,
        building_id=building.id,
        cost=cost,
        description=(
            f"Build a {building.name.lower()}. Being a prefab this card "
            "requires way less resources to build."
        ),
    )


def _event_card(card_id, name, cost, effects, repeat_cooldown=None, description=""):
    return CardDefinition(
        id=card_id,
        name=name,
        card_type=CardType.EVENT,
        cost=cost,
        effects=tuple(ResourceEffect(kind, amount) for kind, amount in effects),
        repeat_cooldown=repeat_cooldown,
        description=description,
    )


# ============================================================================
# Building cards
# ============================================================================

DRONE_DEPO_CARD = _building_card(
    "droneDepoCard", "Drone Depo", DRONE_DEPO, {CONCRETE: 3},
    "Build a drone depo to produce drones",
)
IRON_MINE_CARD = _building_card(
    "ironMineCard", "Iron Mine", IRON_MINE, {CONCRETE: 2, DRONES: 2, ENERGY: 1},
    "Build an iron mine on a metal deposit",
)
STEELWORKS_CARD = _building_card(
    "steelworksCard", "Steelworks", STEELWORKS, {CONCRETE: 3, STEEL: 2, DRONES: 1, ENERGY: 3},
    "Build a steelworks to convert iron to steel",
)
CONCRETE_HARVESTER_CARD = _building_card(
    "concreteMixerCard", "Concrete", CONCRETE_HARVESTER, {STEEL: 1, DRONES: 3, ENERGY: 1},
    "Build a concrete harvester to produce concrete",
)
WATER_PUMP_CARD = _building_card(
    "waterPumpCard", "Water Pump", WATER_PUMP, {CONCRETE: 3, DRONES: 1, ENERGY: 1},
    "Build a water pump on a water deposit",
)
FUEL_REFINERY_CARD = _building_card(
    "fuelRefineryCard", "Fuel", FUEL_REFINERY, {CONCRETE: 3, STEEL: 1, DRONES: 1, ENERGY: 2},
    "Build a fuel refinery to convert water to fuel",
)
WIND_TURBINE_CARD = _building_card(
    "windTurbineCard", "Wind", WIND_TURBINE, {CONCRETE: 4},
    "Build a wind turbine to generate energy",
)
SOLAR_PANEL_CARD = _building_card(
    "solarPanelCard", "Solar", SOLAR_PANELS, {CONCRETE: 1, STEEL: 1, DRONES: 1},
    "Build solar panels to generate energy",
)
LAUNCH_PAD_CARD = _building_card(
    "launchPadCard", "Launch Pad", LAUNCH_PAD, {CONCRETE: 5, STEEL: 2, DRONES: 1},
    "Build a launch pad to send rocket shipments to orbit, earning reputation",
)
ARTIFICIAL_LIGHTS_CARD = _building_card(
    "artificialLightsCard", "Artificial Lights", ARTIFICIAL_LIGHTS, {CONCRETE: 2, ENERGY: 2, DRONES: 1},
    "Build artificial lights - continuously brings respect to the colony",
)

# ============================================================================
# Prefab cards
# ============================================================================

IRON_MINE_PREFAB_CARD = _prefab_card("ironMinePrefabCard", "*Iron Mine*", IRON_MINE, {ENERGY: 1})
STEELWORKS_PREFAB_CARD = _prefab_card("steelworksPrefabCard", "*Steelworks*", STEELWORKS, {ENERGY: 3})
TESLA_COIL_PREFAB_CARD = _prefab_card("teslaCoilPrefabCard", "*Tesla Coil*", TESLA_COIL, {CONCRETE: 2})

# ============================================================================
# Event cards
# ============================================================================

SCRAP_DRONES_EVENT = _event_card(
    "scrapDronesEvent", "Scrap Drones", {IRON: 1}, [(DRONES, 5)],
    description="Convert scrap metal into 5 drones",
)
RESOURCE_SUPPLY_EVENT = _event_card(
    "resourceSupplyEvent", "Resources", {}, [(STEEL, 5), (CONCRETE, 5)], repeat_cooldown=3,
    description="Increase the supply of steel and concrete by 5 each",
)
BARTER_EVENT = _event_card(
    "barterEvent", "Barter", {CONCRETE: 10}, [(STEEL, 3), (FUEL, 3)], repeat_cooldown=2,
    description="Trade 10 concrete for 3 steel and 3 fuel",
)
EXPORT_WATER_EVENT = _event_card(
    "exportWaterEvent", "Export Water", {WATER: 10}, [(FUEL, 5)], repeat_cooldown=2,
    description="Export 10 water for 5 fuel",
)
EXPORT_IRON_EVENT = _event_card(
    "exportIronEvent", "Export Iron", {IRON: 15}, [(FUEL, 5)], repeat_cooldown=2,
    description="Export 15 iron for 5 fuel",
)
CHARITY_EVENT = _event_card(
    "charityEvent", "Charity",
    {CONCRETE: 5, IRON: 5, WATER: 5, STEEL: 3, FUEL: 3}, [(REPUTATION, 5)], repeat_cooldown=1,
    description="Provide resources to another colony for 5 reputation",
)


MARS_CARDS = [
    DRONE_DEPO_CARD,
    IRON_MINE_CARD,
    STEELWORKS_CARD,
    CONCRETE_HARVESTER_CARD,
    WATER_PUMP_CARD,
    FUEL_REFINERY_CARD,
    WIND_TURBINE_CARD,
    SOLAR_PANEL_CARD,
    LAUNCH_PAD_CARD,
    ARTIFICIAL_LIGHTS_CARD,
    IRON_MINE_PREFAB_CARD,
    STEELWORKS_PREFAB_CARD,
    TESLA_COIL_PREFAB_CARD,
    SCRAP_DRONES_EVENT,
    RESOURCE_SUPPLY_EVENT,
    BARTER_EVENT,
    EXPORT_WATER_EVENT,
    EXPORT_IRON_EVENT,
    CHARITY_EVENT,
]

DECK_COMPOSITION = {
    DRONE_DEPO_CARD.id: 3,
    IRON_MINE_CARD.id: 5,
    STEELWORKS_CARD.id: 3,
    CONCRETE_HARVESTER_CARD.id: 5,
    WATER_PUMP_CARD.id: 5,
    FUEL_REFINERY_CARD.id: 3,
    WIND_TURBINE_CARD.id: 4,
    SOLAR_PANEL_CARD.id: 4,
}

STARTING_HAND = [DRONE_DEPO_CARD.id, WIND_TURBINE_CARD.id, LAUNCH_PAD_CARD.id]
