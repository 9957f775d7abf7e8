"""
Mars Maps - Hand-made 8x8 maps and random map generation.

Maps list only the cells that differ from plain ground.
"""

from __future__ import annotations
from random import Random

from ...catalog.schema import CellOverride, MapConfig, TerrainFeature
from ...config import DEFAULT_CONFIG, EngineConfig
from ...engine_core.grid import Grid

METAL = TerrainFeature.METAL.value
WATER = TerrainFeature.WATER.value
MOUNTAIN = TerrainFeature.MOUNTAIN.value


def _map(map_id: str, features: dict[str, list[tuple[int, int]]], grid_size: int = 8) -> MapConfig:
    return MapConfig(
        map_id=map_id,
        grid_size=grid_size,
        cells=tuple(
            CellOverride(x=x, y=y, feature=feature)
            for feature, coordinates in features.items()
            for x, y in coordinates
        ),
    )


SAMPLE_MAP = _map("SAMPLE_MAP", {
    METAL: [(0, 5), (1, 5), (1, 6), (2, 6), (6, 0), (7, 0), (6, 4)],
    WATER: [(0, 0), (5, 7)],
    MOUNTAIN: [(2, 0), (1, 2), (0, 6), (1, 7), (7, 7), (7, 6)],
})

LEVEL_2_MAP = _map("LEVEL_2_MAP", {
    METAL: [(0, 5), (1, 5), (1, 6), (2, 6), (6, 0), (7, 0), (6, 4)],
    WATER: [(0, 0), (5, 7)],
    MOUNTAIN: [
        (2, 0), (3, 1), (4, 1), (1, 2), (5, 2), (4, 4), (0, 6), (1, 7), (7, 7), (7, 6),
    ],
})

LEVEL_3_MAP = _map("LEVEL_3_MAP", {
    METAL: [(2, 1), (2, 0), (7, 0)],
    WATER: [(3, 4), (4, 4)],
    MOUNTAIN: [
        (6, 0), (7, 1), (0, 1), (0, 3), (1, 0), (1, 1), (1, 2), (2, 2),
        (3, 1), (4, 1), (5, 0), (4, 3), (2, 4), (5, 5),
    ],
})

RESOURCE_RICH_MAP = _map("RESOURCE_RICH_MAP", {
    METAL: [(1, 1), (1, 6), (2, 3), (3, 5), (5, 1), (6, 6)],
    WATER: [(3, 2), (4, 5), (2, 6), (6, 2)],
    MOUNTAIN: [(7, 7), (0, 0)],
})

TUTORIAL_MAP = _map("TUTORIAL_MAP", {
    METAL: [(1, 1), (6, 6)],
    WATER: [(3, 2), (4, 5)],
})

MARS_MAPS = [SAMPLE_MAP, LEVEL_2_MAP, LEVEL_3_MAP, RESOURCE_RICH_MAP, TUTORIAL_MAP]


def generate_random_map(
    map_id: str,
    rng: Random,
    config: EngineConfig = DEFAULT_CONFIG,
    mountain_percentage: int | None = None,
) -> MapConfig:
    """Scatter features on an empty grid and freeze the result as a MapConfig."""
    grid = Grid(config.default_grid_size)
    grid.generate_random(
        rng,
        config.metal_percentage,
        config.water_percentage,
        config.mountain_percentage if mountain_percentage is None else mountain_percentage,
    )
    return MapConfig(
        map_id=map_id,
        grid_size=grid.size,
        cells=tuple(
            CellOverride(x=cell.x, y=cell.y, feature=cell.feature)
            for cell in grid
            if cell.feature is not None
        ),
    )
