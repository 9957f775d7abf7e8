"""
Tests for timed actions and the rocket lifecycle.

Tests:
- Cooldown table bookkeeping
- Rocket states: unfueled -> fueled -> in flight -> landed
- Action rejections
"""

import pytest

from ..catalog.schema import ActionDescriptor, ResourceEffect, ResourceKind
from ..engine_core.action import ErrorCode
from ..engine_core.actions import ActionTracker, RocketLifecycle
from ..engine_core.events import EventBus, EventKind
from ..engine_core.grid import RocketState
from ..engine_core.resources import ResourceLedger

R = ResourceKind

SURVEY = ActionDescriptor(
    "survey", "Survey", {R.CONCRETE: 2}, cooldown=2, effects=(ResourceEffect(R.REPUTATION, 1),)
)
INSTANT = ActionDescriptor("instant", "Instant", cooldown=0)


class TestActionTracker:
    """Tests for the cooldown table."""

    def test_engage_and_due(self):
        """An action engaged on turn T is due once turn T + cooldown begins."""
        tracker = ActionTracker()
        entry = tracker.engage(1, 1, SURVEY, current_turn=3)

        assert entry.ready_at_turn == 5
        assert tracker.is_action_on_cooldown(1, 1, "survey")
        assert tracker.remaining_turns(1, 1, "survey", 4) == 1
        assert tracker.due(4) == []
        assert tracker.due(5) == [entry]

    def test_zero_cooldown_not_tracked(self):
        """Actions without cooldown are never on cooldown."""
        tracker = ActionTracker()

        assert tracker.engage(0, 0, INSTANT, 1) is None
        assert not tracker.is_action_on_cooldown(0, 0, "instant")

    def test_rocket_launch_lasts_at_least_one_turn(self):
        """A launch with cooldown 0 is still in flight for one turn."""
        launch = ActionDescriptor("launch", "Launch", cooldown=0, launches_rocket=True)
        entry = ActionTracker().engage(0, 0, launch, 1)

        assert entry.ready_at_turn == 2

    def test_clear_cell(self):
        """clear_cell drops every entry of one cell."""
        tracker = ActionTracker()
        tracker.engage(0, 0, SURVEY, 1)
        tracker.engage(1, 0, SURVEY, 1)

        tracker.clear_cell(0, 0)

        assert [(e.x, e.y) for e in tracker.entries()] == [(1, 0)]


@pytest.fixture
def pad(small_catalog, grid):
    """A pad at (1, 1) with its rocket, a ledger and an event bus."""
    bus = EventBus()
    ledger = ResourceLedger({R.FUEL: 10, R.STEEL: 10}, events=bus)
    tracker = ActionTracker()
    rockets = RocketLifecycle(grid, ledger, small_catalog, tracker, bus)
    ledger.add_listener(rockets.on_resource_changed)
    grid.place(1, 1, small_catalog.building("pad"))
    cell = grid.get_cell(1, 1)
    rockets.create_rocket(cell)
    launch = small_catalog.building("pad").launch_action()
    return rockets, ledger, tracker, cell, launch, bus


class TestRocketLifecycle:
    """Tests for rocket launches."""

    def test_new_rocket_is_unfueled_until_refresh(self, pad):
        """Rockets start unfueled; refresh fuels them when the cost is covered."""
        rockets, _, _, cell, _, _ = pad
        assert cell.rocket.state == RocketState.UNFUELED

        changed = rockets.refresh()

        assert changed == [cell]
        assert cell.rocket.state == RocketState.FUELED

    def test_launch_and_return(self, pad):
        """Launch pays, rewards and flies; the rocket lands one turn later."""
        rockets, ledger, tracker, cell, launch, _ = pad
        rockets.refresh()

        result = rockets.execute(1, 1, launch, current_turn=1)

        assert result.success
        assert result.messages == ["Launch action executed!"]
        assert ledger.get(R.REPUTATION) == 10
        assert ledger.get(R.FUEL) == 0
        assert ledger.get(R.STEEL) == 0
        assert cell.rocket.state == RocketState.IN_FLIGHT
        assert cell.rocket.returns_at_turn == 2

        rockets.resolve_returns(2)

        assert cell.rocket.state == RocketState.UNFUELED
        assert cell.rocket.just_landed is True
        assert not tracker.is_action_on_cooldown(1, 1, "launchRocket")

        rockets.resolve_returns(3)
        assert cell.rocket.just_landed is False

    def test_relaunch_while_in_flight(self, pad):
        """A second launch is rejected with the turns left."""
        rockets, ledger, _, _, launch, _ = pad
        rockets.refresh()
        rockets.execute(1, 1, launch, 1)
        ledger.credit({R.FUEL: 10, R.STEEL: 10})

        result = rockets.execute(1, 1, launch, 1)

        assert not result.success
        assert result.error_code == ErrorCode.ACTION_ON_COOLDOWN
        assert result.error == "Rocket in flight. Returns in 1 turn."

    def test_unfueled_rocket_cannot_launch(self, pad):
        """Launch requires a fueled rocket."""
        rockets, ledger, _, cell, launch, _ = pad

        result = rockets.execute(1, 1, launch, 1)

        assert result.error_code == ErrorCode.ROCKET_NOT_READY
        assert ledger.get(R.FUEL) == 10

    def test_ledger_changes_refuel(self, pad):
        """Spending launch resources unfuels; refunding fuels again."""
        rockets, ledger, _, cell, _, _ = pad
        rockets.refresh()

        ledger.modify(R.FUEL, -1)
        assert cell.rocket.state == RocketState.UNFUELED
        ledger.modify(R.FUEL, 1)
        assert cell.rocket.state == RocketState.FUELED

    def test_rocket_events(self, pad):
        """Rocket state changes are published."""
        rockets, _, _, _, launch, bus = pad
        events = []
        bus.subscribe(EventKind.ROCKET_STATE_CHANGED, events.append)

        rockets.refresh()
        rockets.execute(1, 1, launch, 1)

        assert [e.data["state"] for e in events] == ["fueled", "in_flight"]


class TestBuildingActions:
    """Tests for non-rocket actions."""

    def test_action_cost_and_cooldown(self, pad, grid):
        """Non-rocket actions pay their cost and go on cooldown."""
        rockets, ledger, _, _, _, _ = pad
        ledger.modify(R.CONCRETE, 2)

        assert rockets.execute(1, 1, SURVEY, 1).success
        assert ledger.get(R.CONCRETE) == 0
        assert ledger.get(R.REPUTATION) == 1

        result = rockets.execute(1, 1, SURVEY, 2)
        assert result.error_code == ErrorCode.ACTION_ON_COOLDOWN
        assert result.error == "Action is on cooldown for 1 more turn"

    def test_insufficient_resources(self, pad):
        """An action that cannot be paid is rejected."""
        rockets, _, tracker, _, _, _ = pad

        result = rockets.execute(1, 1, SURVEY, 1)

        assert result.error_code == ErrorCode.INSUFFICIENT_RESOURCES
        assert not tracker.is_action_on_cooldown(1, 1, "survey")

    def test_no_building(self, pad):
        """Actions on empty cells are unknown."""
        rockets, _, _, _, _, _ = pad

        assert rockets.execute(0, 0, SURVEY, 1).error_code == ErrorCode.UNKNOWN_ACTION
