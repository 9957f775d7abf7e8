"""
Session Module - Game sessions and level progression.

A session represents one play-through of one level:
- Created for the player's current level (or a chosen unlocked one)
- Holds the ColonyGame and its buffered events
- Ends when the player leaves

Progression is the only persistent state:
- Completed and unlocked levels
- Unlocked rewards and resource bonuses
- Random levels completed after the campaign
"""

from .manager import LevelUnavailableError, Session, SessionManager, SessionNotFoundError
from .progress import (
    InMemoryProgressStore,
    JsonFileProgressStore,
    LevelProgress,
    PersistentRewards,
    ProgressSnapshot,
    ProgressStore,
)

__all__ = [
    "SessionManager",
    "Session",
    "SessionNotFoundError",
    "LevelUnavailableError",
    "LevelProgress",
    "ProgressSnapshot",
    "PersistentRewards",
    "ProgressStore",
    "InMemoryProgressStore",
    "JsonFileProgressStore",
]
