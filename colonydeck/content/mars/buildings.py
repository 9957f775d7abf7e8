"""
Mars Buildings - Building definitions for the Mars colony.

Production of energy and drones happens once, on construction; every
other resource is produced each turn. Surrounding buildings are filler
structures that block the cells around a launch pad or wind turbine.
"""

from ...catalog.schema import BuildingDefinition, ResourceKind, TerrainFeature

IRON = ResourceKind.IRON
STEEL = ResourceKind.STEEL
CONCRETE = ResourceKind.CONCRETE
WATER = ResourceKind.WATER
FUEL = ResourceKind.FUEL
DRONES = ResourceKind.DRONES
ENERGY = ResourceKind.ENERGY
REPUTATION = ResourceKind.REPUTATION


DRONE_DEPO = BuildingDefinition(
    id="droneDepo",
    name="Drone Depo",
    production={DRONES: 7},
    description="Produces drones immediately when built.",
)

IRON_MINE = BuildingDefinition(
    id="ironMine",
    name="Iron Mine",
    production={IRON: 3},
    terrain_requirement=TerrainFeature.METAL.value,
    description="Extracts iron from metal deposits",
)

STEELWORKS = BuildingDefinition(
    id="steelworks",
    name="Steelworks",
    production={STEEL: 1},
    consumption={IRON: 2},
    description="Converts iron to steel each turn, requires iron",
)

CONCRETE_HARVESTER = BuildingDefinition(
    id="concreteMixer",
    name="Concrete Harvester",
    production={CONCRETE: 3},
    description="Produces concrete from regolith each turn",
)

WATER_PUMP = BuildingDefinition(
    id="waterPump",
    name="Water Pump",
    production={WATER: 3},
    terrain_requirement=TerrainFeature.WATER.value,
    description="Extracts water from deposits each turn",
)

FUEL_REFINERY = BuildingDefinition(
    id="fuelRefinery",
    name="Fuel Refinery",
    production={FUEL: 1},
    consumption={WATER: 2},
    description="Converts water to rocket fuel each turn",
)

WIND_TURBINE_SURROUNDING = BuildingDefinition(
    id="windTurbineSurrounding",
    name="Wind Turbine Surrounding",
    description="Part of the wind turbine area, cannot be built on.",
)

WIND_TURBINE = BuildingDefinition(
    id="windTurbine",
    name="Wind Turbine",
    production={ENERGY: 6},
    surrounding_building=WIND_TURBINE_SURROUNDING.id,
    description="Generates energy immediately when built",
)

SOLAR_PANELS = BuildingDefinition(
    id="solarPanel",
    name="Solar Panels",
    production={ENERGY: 3},
    description="Generates energy immediately when built",
)

LAUNCH_PAD_SURROUNDING = BuildingDefinition(
    id="launchPadSurrounding",
    name="Launch Pad Surrounding",
    description="Part of the launch pad area, cannot be built on.",
)

LAUNCH_PAD = BuildingDefinition(
    id="launchPad",
    name="Launch Pad",
    clearance_required=True,
    surrounding_building=LAUNCH_PAD_SURROUNDING.id,
    launch_cost={FUEL: 10, STEEL: 10},
    launch_reward=10,
    description="Allows manual rocket launches for reputation. Rockets return after 1 turn.",
)

TESLA_COIL = BuildingDefinition(
    id="teslaCoil",
    name="Tesla Coil",
    production={ENERGY: 12},
    terrain_requirement=TerrainFeature.WATER.value,
    description="Generates a lot of energy immediately when built. Must be placed on water deposits.",
)

ARTIFICIAL_LIGHTS = BuildingDefinition(
    id="artificialLights",
    name="Artificial Lights",
    production={REPUTATION: 2},
    description="Generates respect by making the colony look nice.",
)


MARS_BUILDINGS = [
    DRONE_DEPO,
    IRON_MINE,
    STEELWORKS,
    CONCRETE_HARVESTER,
    WATER_PUMP,
    FUEL_REFINERY,
    WIND_TURBINE,
    WIND_TURBINE_SURROUNDING,
    SOLAR_PANELS,
    LAUNCH_PAD,
    LAUNCH_PAD_SURROUNDING,
    TESLA_COIL,
    ARTIFICIAL_LIGHTS,
]

SURROUNDING_BUILDING_IDS = frozenset({LAUNCH_PAD_SURROUNDING.id, WIND_TURBINE_SURROUNDING.id})
