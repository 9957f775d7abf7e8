"""
Production Scheduler - Once-per-turn resource production.

Two passes over the buildings, in row-major order:
1. Producers (no consumption) credit their upgraded production
2. Consumers not yet processed pay their consumption in full, then
   credit their production; if they cannot pay they are skipped

Construction-only resources (energy, drones) are never produced here.
"""

from __future__ import annotations
from collections import Counter
from dataclasses import dataclass, field
import logging

from ..catalog.schema import Catalog, ResourceKind, split_production
from .grid import Cell, Grid
from .resources import ResourceLedger
from .rewards import RewardEngine

logger = logging.getLogger(__name__)


@dataclass
class ProductionReport:
    """What one scheduler run did."""
    produced: dict[tuple[int, int], dict[str, int]] = field(default_factory=dict)
    skipped: list[tuple[int, int]] = field(default_factory=list)
    totals: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "produced": [
                {"x": x, "y": y, "resources": resources}
                for (x, y), resources in self.produced.items()
            ],
            "skipped": [{"x": x, "y": y} for x, y in self.skipped],
            "totals": dict(self.totals),
        }


class ProductionScheduler:

    def __init__(
        self,
        grid: Grid,
        ledger: ResourceLedger,
        rewards: RewardEngine,
        catalog: Catalog,
    ):
        self.grid = grid
        self.ledger = ledger
        self.rewards = rewards
        self.catalog = catalog

    def run(self) -> ProductionReport:
        report = ProductionReport()
        totals: Counter = Counter()
        cells = self.grid.buildings()

        # Pass 1: producers
        for cell in cells:
            building = self.catalog.building(cell.building)
            if building is None:
                logger.warning(f"Unknown building '{cell.building}' at ({cell.x}, {cell.y})")
                continue
            if building.is_consumer:
                continue
            self._credit(cell, report, totals)
            cell.processed_this_turn = True

        # Pass 2: consumers
        for cell in cells:
            building = self.catalog.building(cell.building)
            if building is None or cell.processed_this_turn or not building.is_consumer:
                continue
            if not self.ledger.consume(building.consumption):
                logger.debug(f"{building.id} at ({cell.x}, {cell.y}) skipped: inputs unavailable")
                report.skipped.append((cell.x, cell.y))
                continue
            for kind, amount in building.consumption.items():
                totals[kind.value] -= amount
            self._credit(cell, report, totals)
            cell.processed_this_turn = True

        self.grid.clear_processed()
        report.totals = {kind: amount for kind, amount in totals.items() if amount}
        return report

    def recurring_production(self, cell: Cell) -> dict[ResourceKind, int]:
        """Upgraded production of a cell, without construction-only kinds."""
        building = self.catalog.building(cell.building)
        upgraded = self.rewards.apply_building_upgrades(
            building.id, building.production, cell.x, cell.y
        )
        _, recurring = split_production(upgraded)
        return recurring

    def _credit(self, cell: Cell, report: ProductionReport, totals: Counter) -> None:
        output = {
            kind: amount
            for kind, amount in self.recurring_production(cell).items()
            if amount
        }
        if not output:
            return
        for kind, amount in output.items():
            self.ledger.modify(kind, amount)
            totals[kind.value] += amount
        report.produced[(cell.x, cell.y)] = {kind.value: amount for kind, amount in output.items()}
        logger.debug(f"{cell.building} at ({cell.x}, {cell.y}) produced {report.produced[(cell.x, cell.y)]}")
