"""
Session Manager - Creates and manages game sessions.

LIFECYCLE:
1. Player starts a session -> the level comes from progress (or is named)
2. During the level:
   - Commands are applied to the session's ColonyGame
   - Engine events are buffered on the session for polling
3. Level won -> player may claim one of the level's rewards
4. Session ends -> removed from memory

PERSISTENCE RULES:
- Sessions are in-memory only
- Progression (levels, rewards) is persisted by LevelProgress
"""

from __future__ import annotations
from dataclasses import dataclass, field
from random import Random
import logging
import time
import uuid

from ..catalog.schema import Catalog, LevelDefinition, ResourceKind
from ..config import DEFAULT_CONFIG, EngineConfig
from ..engine_core.action import ActionResult, ErrorCode
from ..engine_core.events import ALL_EVENTS, GameEvent
from ..engine_core.game import ColonyGame, GamePhase
from .progress import LevelProgress

logger = logging.getLogger(__name__)


class SessionNotFoundError(KeyError):
    """No session with the given id."""


class LevelUnavailableError(ValueError):
    """The requested level is unknown or still locked."""


@dataclass
class Session:
    """
    One play-through of one level.

    Contains:
    - The game being played
    - Engine events not yet polled
    - Whether the level's reward has been claimed
    """
    session_id: str
    game: ColonyGame
    created_at: float
    seed: int | None = None
    reward_claimed: str | None = None
    events: list[GameEvent] = field(default_factory=list)

    @property
    def level(self) -> LevelDefinition:
        return self.game.level

    @property
    def phase(self) -> GamePhase:
        return self.game.phase

    def is_active(self) -> bool:
        return self.game.phase == GamePhase.PLAYING

    def record(self, event: GameEvent) -> None:
        self.events.append(event)

    def drain_events(self) -> list[GameEvent]:
        """Return and forget the buffered events."""
        events, self.events = self.events, []
        return events

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "created_at": self.created_at,
            "level_id": self.level.id,
            "phase": self.phase.value,
            "turn": self.game.turn,
            "reward_claimed": self.reward_claimed,
        }


class SessionManager:
    """
    Manages game sessions.

    Responsibilities:
    - Create sessions for the current (or a chosen unlocked) level
    - Track active sessions
    - Hand out level rewards after a victory
    """

    def __init__(
        self,
        catalog: Catalog,
        progress: LevelProgress | None = None,
        config: EngineConfig = DEFAULT_CONFIG,
    ):
        self.catalog = catalog
        self.progress = progress or LevelProgress(catalog)
        self.config = config
        self._sessions: dict[str, Session] = {}

    def _resolve_level(self, level_id: str | None, rng: Random) -> LevelDefinition:
        if level_id is None:
            return self.progress.current_level() or self.progress.start_random_level(rng)
        level = self.progress.level(level_id)
        if level is None:
            raise LevelUnavailableError(f"Unknown level: {level_id}")
        if not self.progress.is_unlocked(level_id):
            raise LevelUnavailableError(f"Level '{level_id}' is locked")
        return level

    def create_session(self, level_id: str | None = None, seed: int | None = None) -> Session:
        """
        Create a session and start its game.

        Args:
            level_id: Level to play; defaults to the current progression level
            seed: Seed for deck shuffles and random maps

        Raises:
            LevelUnavailableError: level_id is unknown or locked
        """
        rng = Random(seed)
        level = self._resolve_level(level_id, rng)
        game = ColonyGame(
            self.catalog,
            level,
            unlocked_reward_ids=self.progress.unlocked_reward_ids,
            resource_bonuses=self.progress.resource_bonuses,
            rng=rng,
            config=self.config,
            hooks=self.progress,
        )
        session = Session(
            session_id=str(uuid.uuid4()),
            game=game,
            created_at=time.time(),
            seed=seed,
        )
        game.events.subscribe(ALL_EVENTS, session.record)
        game.start()

        self._sessions[session.session_id] = session
        logger.info(f"Session {session.session_id} created for level '{level.id}'")
        return session

    def get_session(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def require_session(self, session_id: str) -> Session:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def list_sessions(self) -> list[str]:
        return list(self._sessions)

    def end_session(self, session_id: str) -> bool:
        """Remove a session. Returns False when it does not exist."""
        session = self._sessions.pop(session_id, None)
        if session is None:
            return False
        session.game.events.unsubscribe(ALL_EVENTS, session.record)
        logger.info(f"Session {session_id} ended ({session.phase.value})")
        return True

    def claim_reward(self, session_id: str, reward_id: str) -> ActionResult:
        """
        Unlock one reward offered by a won level.

        The reward's reputation cost is paid from the finished level's
        reputation. One reward per session.

        Raises:
            SessionNotFoundError: unknown session_id
        """
        session = self.require_session(session_id)
        game = session.game
        if game.phase != GamePhase.VICTORY:
            return ActionResult.failure(
                "Complete the level to claim a reward", ErrorCode.REWARD_NOT_AVAILABLE
            )
        if session.reward_claimed is not None:
            return ActionResult.failure(
                "A reward was already claimed for this level", ErrorCode.REWARD_NOT_AVAILABLE
            )
        reward = self.catalog.reward(reward_id)
        if reward is None or reward_id not in session.level.reward_ids:
            return ActionResult.failure(
                f"Reward '{reward_id}' is not offered by this level", ErrorCode.REWARD_NOT_AVAILABLE
            )
        if game.rewards.is_unlocked(reward_id):
            return ActionResult.failure(
                f"{reward.name} is already unlocked", ErrorCode.REWARD_NOT_AVAILABLE
            )
        if reward.reputation_cost and not game.ledger.modify(
            ResourceKind.REPUTATION, -reward.reputation_cost
        ):
            return ActionResult.failure(
                f"{reward.name} costs {reward.reputation_cost} reputation",
                ErrorCode.INSUFFICIENT_RESOURCES,
            )

        game.unlock_reward(reward_id)
        session.reward_claimed = reward_id
        message = f"Unlocked {reward.name}"
        game.events.message(message)
        return ActionResult.ok([message], reward_id=reward_id)
