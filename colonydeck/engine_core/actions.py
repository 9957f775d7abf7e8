"""
Action & Rocket Lifecycle - Cooldown-gated building actions.

A single table keyed by (x, y, action_id) tracks every engaged action,
rocket launches included. A launch is a timed action whose completion
also lands the cell's rocket, so cooldown and rocket state cannot drift
apart.

Rocket states: UNFUELED -> FUELED -> IN_FLIGHT -> (returns) -> UNFUELED.
Fuel state is recomputed from the ledger; in-flight rockets are left
alone until their return turn.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging

from ..catalog.schema import ActionDescriptor, Catalog, ResourceKind
from .action import ActionResult, ErrorCode
from .events import EventBus, EventKind
from .grid import Cell, Grid, Rocket, RocketState
from .resources import ResourceLedger

logger = logging.getLogger(__name__)


@dataclass
class TimedAction:
    """An engaged action waiting for its cooldown to run out."""
    x: int
    y: int
    action_id: str
    engaged_at_turn: int
    ready_at_turn: int
    launches_rocket: bool = False


class ActionTracker:
    """Cooldown table keyed by (x, y, action_id)."""

    def __init__(self):
        self._entries: dict[tuple[int, int, str], TimedAction] = {}

    def engage(
        self,
        x: int,
        y: int,
        action: ActionDescriptor,
        current_turn: int,
    ) -> TimedAction | None:
        """Start the cooldown of an action. Actions without cooldown are not tracked."""
        cooldown = max(action.cooldown, 1) if action.launches_rocket else action.cooldown
        if cooldown <= 0:
            return None
        entry = TimedAction(
            x=x,
            y=y,
            action_id=action.id,
            engaged_at_turn=current_turn,
            ready_at_turn=current_turn + cooldown,
            launches_rocket=action.launches_rocket,
        )
        self._entries[(x, y, action.id)] = entry
        return entry

    def complete(self, x: int, y: int, action_id: str) -> TimedAction | None:
        return self._entries.pop((x, y, action_id), None)

    def is_action_on_cooldown(self, x: int, y: int, action_id: str) -> bool:
        return (x, y, action_id) in self._entries

    def remaining_turns(self, x: int, y: int, action_id: str, current_turn: int) -> int:
        entry = self._entries.get((x, y, action_id))
        if entry is None:
            return 0
        return max(entry.ready_at_turn - current_turn, 0)

    def due(self, next_turn: int) -> list[TimedAction]:
        """Entries whose cooldown is over once next_turn begins."""
        return [entry for entry in self._entries.values() if entry.ready_at_turn <= next_turn]

    def entries(self) -> list[TimedAction]:
        return list(self._entries.values())

    def clear_cell(self, x: int, y: int) -> None:
        for key in [key for key in self._entries if key[:2] == (x, y)]:
            del self._entries[key]


class RocketLifecycle:
    """Rocket state per launch-capable cell, plus the action protocol."""

    def __init__(
        self,
        grid: Grid,
        ledger: ResourceLedger,
        catalog: Catalog,
        tracker: ActionTracker,
        events: EventBus | None = None,
    ):
        self.grid = grid
        self.ledger = ledger
        self.catalog = catalog
        self.tracker = tracker
        self.events = events
        self._fuel_kinds: frozenset[ResourceKind] = frozenset(
            kind
            for building in catalog.buildings.values()
            if building.launch_cost
            for kind in building.launch_cost
        )

    def create_rocket(self, cell: Cell) -> Rocket:
        """New launch-capable building: its rocket starts unfueled."""
        cell.rocket = Rocket(state=RocketState.UNFUELED)
        self._publish(cell)
        return cell.rocket

    def refresh(self) -> list[Cell]:
        """Recompute fuel state of every grounded rocket. Returns changed cells."""
        changed = []
        for cell in self.grid:
            rocket = cell.rocket
            if rocket is None or rocket.state == RocketState.IN_FLIGHT:
                continue
            building = self.catalog.building(cell.building)
            fueled = building is not None and building.launch_cost is not None and (
                self.ledger.has_sufficient(building.launch_cost)
            )
            state = RocketState.FUELED if fueled else RocketState.UNFUELED
            if state != rocket.state:
                rocket.state = state
                changed.append(cell)
                self._publish(cell)
        return changed

    def on_resource_changed(self, kind: ResourceKind, old: int, new: int) -> None:
        """Ledger listener: refresh when a launch-cost resource moves."""
        if kind in self._fuel_kinds:
            self.refresh()

    def resolve_returns(self, next_turn: int) -> list[TimedAction]:
        """
        Complete every action due by next_turn.

        Landed rockets become unfueled with just_landed set until the next
        resolution. Returns the completed entries.
        """
        for cell in self.grid:
            if cell.rocket is not None:
                cell.rocket.just_landed = False

        completed = []
        for entry in self.tracker.due(next_turn):
            self.tracker.complete(entry.x, entry.y, entry.action_id)
            completed.append(entry)
            if not entry.launches_rocket:
                continue
            cell = self.grid.get_cell(entry.x, entry.y)
            if cell is None or cell.rocket is None:
                continue
            cell.rocket.state = RocketState.UNFUELED
            cell.rocket.returns_at_turn = None
            cell.rocket.just_landed = True
            self._publish(cell)
        return completed

    def execute(
        self,
        x: int,
        y: int,
        action: ActionDescriptor,
        current_turn: int,
    ) -> ActionResult:
        """
        Run a building action.

        Rejected when on cooldown, when a launch finds its rocket not
        fueled, or when the cost cannot be paid. Otherwise the cost is
        debited, the cooldown engaged and the effects applied.
        """
        cell = self.grid.get_cell(x, y)
        if cell is None or cell.building is None:
            return ActionResult.failure(f"No building at ({x}, {y})", ErrorCode.UNKNOWN_ACTION)

        if self.tracker.is_action_on_cooldown(x, y, action.id):
            remaining = self.tracker.remaining_turns(x, y, action.id, current_turn)
            plural = "s" if remaining != 1 else ""
            if action.launches_rocket and cell.rocket is not None and cell.rocket.state == RocketState.IN_FLIGHT:
                message = f"Rocket in flight. Returns in {remaining} turn{plural}."
            else:
                message = f"Action is on cooldown for {remaining} more turn{plural}"
            return ActionResult.failure(message, ErrorCode.ACTION_ON_COOLDOWN)

        rocket = cell.rocket
        if action.launches_rocket and (rocket is None or rocket.state != RocketState.FUELED):
            return ActionResult.failure("Rocket is not fueled", ErrorCode.ROCKET_NOT_READY)

        if not self.ledger.has_sufficient(action.cost):
            return ActionResult.failure(
                "Not enough resources for this action", ErrorCode.INSUFFICIENT_RESOURCES
            )

        entry = self.tracker.engage(x, y, action, current_turn)
        if action.launches_rocket:
            # In flight before the debit so the fuel refresh skips this rocket
            rocket.state = RocketState.IN_FLIGHT
            rocket.returns_at_turn = entry.ready_at_turn
            rocket.just_landed = False
        self.ledger.consume(action.cost)

        for effect in action.effects:
            if not self.ledger.modify(effect.resource, effect.amount):
                logger.warning(f"Effect {effect} of '{action.id}' could not be applied")

        if action.launches_rocket:
            self._publish(cell)
        logger.info(f"{action.name} executed at ({x}, {y}) on turn {current_turn}")
        return ActionResult.ok(
            [f"{action.name} action executed!"],
            x=x,
            y=y,
            action_id=action.id,
            ready_at_turn=entry.ready_at_turn if entry else None,
        )

    def _publish(self, cell: Cell) -> None:
        if self.events is None or cell.rocket is None:
            return
        self.events.publish(
            EventKind.ROCKET_STATE_CHANGED,
            x=cell.x,
            y=cell.y,
            state=cell.rocket.state.value,
            returns_at_turn=cell.rocket.returns_at_turn,
            just_landed=cell.rocket.just_landed,
        )
