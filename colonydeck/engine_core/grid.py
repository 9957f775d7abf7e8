"""
Grid Model - Square board of cells with terrain, features and buildings.

Invariants:
- At most one building and at most one feature per cell
- A building only sits on a cell whose feature matches its requirement
  (or it requires none, in which case placement clears the feature)
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from random import Random
from typing import Iterable, Iterator
import logging

from ..catalog.schema import (
    ANY,
    BuildingDefinition,
    MapConfig,
    PLAIN_TERRAIN,
    TerrainFeature,
)

logger = logging.getLogger(__name__)


class RocketState(str, Enum):
    UNFUELED = "unfueled"
    FUELED = "fueled"
    IN_FLIGHT = "in_flight"


@dataclass
class Rocket:
    """Runtime rocket state of a launch-capable cell."""
    state: RocketState = RocketState.UNFUELED
    returns_at_turn: int | None = None
    just_landed: bool = False


@dataclass
class Cell:
    x: int
    y: int
    terrain: str = PLAIN_TERRAIN
    feature: str | None = None
    building: str | None = None
    processed_this_turn: bool = False
    rocket: Rocket | None = None

    @property
    def is_empty(self) -> bool:
        return self.building is None

    def to_dict(self) -> dict:
        data = {
            "x": self.x,
            "y": self.y,
            "terrain": self.terrain,
            "feature": self.feature,
            "building": self.building,
        }
        if self.rocket is not None:
            data["rocket"] = {
                "state": self.rocket.state.value,
                "returns_at_turn": self.rocket.returns_at_turn,
                "just_landed": self.rocket.just_landed,
            }
        return data


class Grid:
    """Square array of cells, indexed as cells[y][x]."""

    def __init__(self, size: int = 8):
        self.size = 0
        self.cells: list[list[Cell]] = []
        self.reset(size)

    def reset(self, size: int) -> None:
        if size < 1:
            raise ValueError(f"Grid size must be >= 1, got {size}")
        self.size = size
        self.cells = [[Cell(x, y) for x in range(size)] for y in range(size)]

    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.size and 0 <= y < self.size

    def get_cell(self, x: int, y: int) -> Cell | None:
        if not self.in_bounds(x, y):
            return None
        return self.cells[y][x]

    def __iter__(self) -> Iterator[Cell]:
        for row in self.cells:
            yield from row

    # =========================================================================
    # Placement
    # =========================================================================

    def can_place(self, x: int, y: int, building: BuildingDefinition) -> bool:
        cell = self.get_cell(x, y)
        if cell is None or cell.building is not None:
            return False
        if building.terrain_requirement is not None:
            if cell.feature != building.terrain_requirement:
                return False
        elif cell.feature in building.blocked_features:
            return False
        if building.clearance_required:
            for neighbour in self.adjacent_cells(x, y):
                if neighbour.building is not None or neighbour.feature == TerrainFeature.MOUNTAIN.value:
                    return False
        return True

    def place(self, x: int, y: int, building: BuildingDefinition) -> bool:
        """Place building. Returns False with no change if not allowed."""
        if not self.can_place(x, y, building):
            return False
        cell = self.cells[y][x]
        cell.building = building.id
        if building.terrain_requirement is None:
            cell.feature = None
        return True

    def place_around(self, x: int, y: int, building: BuildingDefinition) -> list[Cell]:
        """Place building on every neighbour of (x, y) that allows it."""
        return [
            neighbour
            for neighbour in self.adjacent_cells(x, y)
            if self.place(neighbour.x, neighbour.y, building)
        ]

    def remove(self, x: int, y: int) -> str | None:
        """Remove and return the building id at (x, y), dropping any rocket."""
        cell = self.get_cell(x, y)
        if cell is None or cell.building is None:
            return None
        removed = cell.building
        cell.building = None
        cell.rocket = None
        cell.processed_this_turn = False
        return removed

    # =========================================================================
    # Neighbourhood queries
    # =========================================================================

    def adjacent_cells(self, x: int, y: int) -> list[Cell]:
        """Orthogonal neighbours within bounds, in N, E, S, W order."""
        neighbours = []
        for dx, dy in ((0, -1), (1, 0), (0, 1), (-1, 0)):
            cell = self.get_cell(x + dx, y + dy)
            if cell is not None:
                neighbours.append(cell)
        return neighbours

    def is_adjacent_to_building_type(self, x: int, y: int, building_id: str) -> bool:
        for neighbour in self.adjacent_cells(x, y):
            if neighbour.building is None:
                continue
            if building_id == ANY or neighbour.building == building_id:
                return True
        return False

    def count_adjacent_buildings(
        self,
        x: int,
        y: int,
        exclusions: Iterable[str] = (),
    ) -> int:
        excluded = set(exclusions)
        return sum(
            1
            for neighbour in self.adjacent_cells(x, y)
            if neighbour.building is not None and neighbour.building not in excluded
        )

    def buildings(self) -> list[Cell]:
        """Cells holding a building, row-major."""
        return [cell for cell in self if cell.building is not None]

    def clear_processed(self) -> None:
        for cell in self:
            cell.processed_this_turn = False

    # =========================================================================
    # Map setup
    # =========================================================================

    def load_map(self, config: MapConfig) -> None:
        """Reset to the map's size, then apply its cell overrides."""
        self.reset(config.grid_size)
        for override in config.cells:
            cell = self.get_cell(override.x, override.y)
            if cell is None:
                logger.warning(
                    f"Map '{config.map_id}': ignoring override at "
                    f"({override.x}, {override.y}) outside {self.size}x{self.size} grid"
                )
                continue
            if override.terrain is not None:
                cell.terrain = override.terrain
            if override.feature is not None:
                cell.feature = override.feature
            if override.building is not None:
                cell.building = override.building

    def generate_random(
        self,
        rng: Random,
        metal_percentage: int = 10,
        water_percentage: int = 10,
        mountain_percentage: int = 5,
    ) -> None:
        """
        Scatter features over the current grid.

        Each feature type takes its share of cells from those still free,
        so features never overlap.
        """
        total = self.size * self.size
        free = [cell for cell in self if cell.feature is None and cell.building is None]
        for feature, percentage in (
            (TerrainFeature.METAL, metal_percentage),
            (TerrainFeature.WATER, water_percentage),
            (TerrainFeature.MOUNTAIN, mountain_percentage),
        ):
            count = min(len(free), total * percentage // 100)
            chosen = rng.sample(free, count)
            for cell in chosen:
                cell.feature = feature.value
            chosen_ids = {id(cell) for cell in chosen}
            free = [cell for cell in free if id(cell) not in chosen_ids]
