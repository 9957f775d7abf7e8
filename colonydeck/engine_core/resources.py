"""
Resource Ledger - Non-negative resource balances for one game.

Every mutation goes through modify(); a change that would take any entry
below zero is rejected with no partial application. Reputation changes
feed the victory check: the goal-reached hook fires once, the first
time reputation reaches the goal while checking is enabled.
"""

from __future__ import annotations
from typing import Any, Callable, Mapping
import logging

from ..catalog.schema import ResourceKind
from .events import EventBus, EventKind

logger = logging.getLogger(__name__)


ChangeListener = Callable[[ResourceKind, int, int], None]


def _coerce_kind(kind: Any) -> ResourceKind | None:
    try:
        return ResourceKind(kind)
    except ValueError:
        return None


class ResourceLedger:
    """
    Mapping ResourceKind -> int >= 0.

    Observers:
    - the EventBus gets a resource_changed event per change
    - change listeners (old, new) are called synchronously
    - on_goal_reached is called once when reputation reaches the goal
    """

    def __init__(
        self,
        initial: Mapping[Any, int] | None = None,
        goal: int | None = None,
        events: EventBus | None = None,
        on_goal_reached: Callable[[], None] | None = None,
    ):
        self._amounts: dict[ResourceKind, int] = {kind: 0 for kind in ResourceKind}
        for raw_kind, amount in (initial or {}).items():
            kind = ResourceKind(raw_kind)
            if amount < 0:
                raise ValueError(f"Initial amount for {kind.value} must be >= 0, got {amount}")
            self._amounts[kind] = amount

        self.goal = goal
        self.events = events
        self.on_goal_reached = on_goal_reached
        self.victory_check_enabled = True
        self._goal_fired = False
        self._listeners: list[ChangeListener] = []

    def add_listener(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def get(self, kind: Any) -> int:
        resolved = _coerce_kind(kind)
        return self._amounts.get(resolved, 0) if resolved else 0

    def modify(self, kind: Any, delta: int) -> bool:
        """Apply delta. Returns False (no change) on underflow or unknown kind."""
        resolved = _coerce_kind(kind)
        if resolved is None:
            logger.warning(f"Rejected change to unknown resource {kind!r}")
            return False

        old = self._amounts[resolved]
        new = old + delta
        if new < 0:
            logger.debug(f"Rejected {resolved.value} {delta:+d}: balance {old}")
            return False
        if delta == 0:
            return True

        self._amounts[resolved] = new
        self._notify(resolved, old, new)
        if resolved == ResourceKind.REPUTATION:
            self._check_goal()
        return True

    def has_sufficient(self, cost: Mapping[Any, int]) -> bool:
        for kind, amount in cost.items():
            if _coerce_kind(kind) is None or self.get(kind) < amount:
                return False
        return True

    def consume(self, cost: Mapping[Any, int]) -> bool:
        """All-or-nothing debit of a cost map."""
        if not self.has_sufficient(cost):
            return False
        for kind, amount in cost.items():
            if amount:
                self.modify(kind, -amount)
        return True

    def credit(self, amounts: Mapping[Any, int]) -> bool:
        """
        Add every entry of amounts.

        Negative entries are allowed as long as no balance would go
        negative; the whole map is rejected otherwise.
        """
        for kind, amount in amounts.items():
            if _coerce_kind(kind) is None or self.get(kind) + amount < 0:
                return False
        for kind, amount in amounts.items():
            self.modify(kind, amount)
        return True

    def snapshot(self) -> dict[str, int]:
        return {kind.value: amount for kind, amount in self._amounts.items()}

    def _notify(self, kind: ResourceKind, old: int, new: int) -> None:
        if self.events is not None:
            self.events.publish(EventKind.RESOURCE_CHANGED, resource=kind.value, amount=new)
        for listener in self._listeners:
            listener(kind, old, new)

    def _check_goal(self) -> None:
        if (
            self.goal is None
            or self._goal_fired
            or not self.victory_check_enabled
            or self._amounts[ResourceKind.REPUTATION] < self.goal
        ):
            return
        self._goal_fired = True
        logger.info(f"Reputation goal {self.goal} reached")
        if self.on_goal_reached is not None:
            self.on_goal_reached()
