"""
Action System - Player commands, payloads, and results.

Commands represent:
1. Card offer picks and hand management (choose, discard)
2. Board moves (place a building card, play an event card)
3. Building actions (rocket launches, reward-granted actions)
4. Turn control (end turn)

All player-driven state changes flow through ColonyGame.apply().
Rejections are results, not exceptions: every failed result carries an
ErrorCode and a user-facing message, and leaves the game unchanged.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Why a command was rejected."""
    INVALID_PLACEMENT = "INVALID_PLACEMENT"  # Out of bounds, occupied, terrain mismatch
    INSUFFICIENT_RESOURCES = "INSUFFICIENT_RESOURCES"
    ACTION_ON_COOLDOWN = "ACTION_ON_COOLDOWN"
    ROCKET_NOT_READY = "ROCKET_NOT_READY"
    INVALID_CARD = "INVALID_CARD"  # Bad hand/offer index or wrong card type
    NO_OFFER = "NO_OFFER"
    HAND_OVER_LIMIT = "HAND_OVER_LIMIT"
    GAME_OVER = "GAME_OVER"
    UNKNOWN_ACTION = "UNKNOWN_ACTION"
    REWARD_NOT_AVAILABLE = "REWARD_NOT_AVAILABLE"  # Not offered, already owned, or level not won


class ActionType(Enum):
    """Types of player commands."""
    CHOOSE_CARD = "choose_card"
    PLACE_CARD = "place_card"
    PLAY_EVENT = "play_event"
    DISCARD_CARD = "discard_card"
    PERFORM_ACTION = "perform_action"
    LAUNCH_ROCKET = "launch_rocket"
    END_TURN = "end_turn"


@dataclass
class ActionPayload:
    """
    Parameters of a command.

    Different command types use different fields; validation happens in
    the game's handlers.
    """
    hand_index: int | None = None
    choice_index: int | None = None
    x: int | None = None
    y: int | None = None
    building_action_id: str | None = None
    params: dict[str, Any] = field(default_factory=dict)


@dataclass
class Action:
    """A player command to apply to a ColonyGame."""
    action_type: ActionType
    payload: ActionPayload = field(default_factory=ActionPayload)
    timestamp: float | None = None

    @classmethod
    def choose_card(cls, choice_index: int) -> Action:
        return cls(ActionType.CHOOSE_CARD, ActionPayload(choice_index=choice_index))

    @classmethod
    def place_card(cls, hand_index: int, x: int, y: int) -> Action:
        return cls(ActionType.PLACE_CARD, ActionPayload(hand_index=hand_index, x=x, y=y))

    @classmethod
    def play_event(cls, hand_index: int) -> Action:
        return cls(ActionType.PLAY_EVENT, ActionPayload(hand_index=hand_index))

    @classmethod
    def discard_card(cls, hand_index: int) -> Action:
        return cls(ActionType.DISCARD_CARD, ActionPayload(hand_index=hand_index))

    @classmethod
    def perform_action(cls, x: int, y: int, building_action_id: str) -> Action:
        return cls(
            ActionType.PERFORM_ACTION,
            ActionPayload(x=x, y=y, building_action_id=building_action_id),
        )

    @classmethod
    def launch_rocket(cls, x: int, y: int) -> Action:
        return cls(ActionType.LAUNCH_ROCKET, ActionPayload(x=x, y=y))

    @classmethod
    def end_turn(cls) -> Action:
        return cls(ActionType.END_TURN)


@dataclass
class ActionResult:
    """
    Result of applying a command.

    Contains:
    - Whether the command succeeded
    - Error message and code (if failed)
    - Messages for the player and command-specific data
    """
    success: bool
    error: str | None = None
    error_code: ErrorCode | None = None
    messages: list[str] = field(default_factory=list)
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def failure(cls, error: str, error_code: ErrorCode) -> ActionResult:
        """Create a failure result."""
        return cls(success=False, error=error, error_code=error_code)

    @classmethod
    def ok(cls, messages: list[str] | None = None, **data: Any) -> ActionResult:
        """Create a success result."""
        return cls(success=True, messages=messages or [], data=data)

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "error": self.error,
            "error_code": self.error_code.value if self.error_code else None,
            "messages": list(self.messages),
            "data": self.data,
        }
