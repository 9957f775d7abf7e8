"""
Engine Core - Deterministic, turn-stepped colony simulation.

The engine is the runtime that:
1. Loads a level's map onto the grid
2. Deals cards and runs the turn card offer
3. Places buildings and charges their cost
4. Runs two-wave production with reward upgrades applied
5. Tracks building action cooldowns and the rocket lifecycle
"""

from .action import Action, ActionType, ActionPayload, ActionResult, ErrorCode
from .actions import ActionTracker, RocketLifecycle, TimedAction
from .cards import Card, CardSystem
from .events import EventBus, EventKind, GameEvent, ALL_EVENTS
from .game import ColonyGame, GamePhase, ProgressionHooks
from .grid import Cell, Grid, Rocket, RocketState
from .production import ProductionReport, ProductionScheduler
from .resources import ResourceLedger
from .rewards import RewardEngine, UnlockedRewardSet

__all__ = [
    "Action",
    "ActionType",
    "ActionPayload",
    "ActionResult",
    "ErrorCode",
    "ActionTracker",
    "RocketLifecycle",
    "TimedAction",
    "Card",
    "CardSystem",
    "EventBus",
    "EventKind",
    "GameEvent",
    "ALL_EVENTS",
    "ColonyGame",
    "GamePhase",
    "ProgressionHooks",
    "Cell",
    "Grid",
    "Rocket",
    "RocketState",
    "ProductionReport",
    "ProductionScheduler",
    "ResourceLedger",
    "RewardEngine",
    "UnlockedRewardSet",
]
