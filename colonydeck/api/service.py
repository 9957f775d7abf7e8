"""
API Service - Business logic layer between API and engine.

The service:
1. Translates API requests to engine calls
2. Manages sessions and progression
3. Formats engine results and state for clients

This layer is framework-agnostic (can be used with FastAPI, Flask, etc.)
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable

from .schemas import (
    ActionResponse,
    CreateSessionRequest,
    EventInfo,
    EventsResponse,
    GameStateResponse,
    LevelInfo,
    LevelListResponse,
    ProgressResponse,
    ProgressUpdateRequest,
    RewardInfo,
    RewardListResponse,
    SessionResponse,
)
from ..catalog.schema import LevelDefinition, RewardDefinition
from ..config import load_settings
from ..content.mars import create_mars_catalog
from ..engine_core.action import ActionResult
from ..engine_core.game import ColonyGame, GamePhase
from ..session import (
    JsonFileProgressStore,
    LevelProgress,
    PersistentRewards,
    ProgressSnapshot,
    Session,
    SessionManager,
)


def _default_session_manager() -> SessionManager:
    settings = load_settings()
    catalog = create_mars_catalog()
    store = JsonFileProgressStore(settings.progress_path) if settings.progress_path else None
    return SessionManager(catalog, LevelProgress(catalog, store))


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        session = service.create_session(CreateSessionRequest())
        response = service.choose_card(session.session_id, 0)
        state = service.get_state(session.session_id)

    Session lookups raise SessionNotFoundError; game rejections come
    back as unsuccessful ActionResponses.
    """
    session_manager: SessionManager = field(default_factory=_default_session_manager)

    @property
    def catalog(self):
        return self.session_manager.catalog

    @property
    def progress(self) -> LevelProgress:
        return self.session_manager.progress

    # =========================================================================
    # Levels, rewards, progress
    # =========================================================================

    def _level_info(self, level: LevelDefinition) -> LevelInfo:
        snapshot = self.progress.snapshot
        return LevelInfo(
            level_id=level.id,
            name=level.name,
            description=level.description,
            turn_limit=level.turn_limit,
            reputation_goal=level.reputation_goal,
            starting_resources=self.progress.starting_resources(level),
            reward_ids=list(level.reward_ids),
            unlocked=self.progress.is_unlocked(level.id),
            completed=level.id in snapshot.completed_levels,
            is_random=level.is_random,
        )

    def _reward_info(self, reward: RewardDefinition) -> RewardInfo:
        return RewardInfo(
            reward_id=reward.id,
            name=reward.name,
            description=reward.description,
            application_type=reward.application_type.value,
            reputation_cost=reward.reputation_cost,
            unlocked=reward.id in self.progress.unlocked_reward_ids,
        )

    def list_levels(self) -> LevelListResponse:
        levels = [self._level_info(level) for level in self.catalog.levels.values()]
        current = self.progress.current_level()
        if current is not None and current.is_random:
            levels.append(self._level_info(current))
        return LevelListResponse(
            levels=levels,
            current_level_id=self.progress.snapshot.current_level_id,
        )

    def list_rewards(self) -> RewardListResponse:
        return RewardListResponse(
            rewards=[self._reward_info(reward) for reward in self.catalog.rewards.values()]
        )

    def get_progress(self) -> ProgressResponse:
        snapshot = self.progress.snapshot
        return ProgressResponse(
            completed_levels=list(snapshot.completed_levels),
            unlocked_levels=list(snapshot.unlocked_levels),
            current_level_id=snapshot.current_level_id,
            reward_ids=list(snapshot.persistent_rewards.reward_ids),
            resource_bonuses=dict(snapshot.persistent_rewards.resource_bonuses),
            random_levels_completed=snapshot.random_levels_completed,
            campaign_complete=self.progress.campaign_complete,
        )

    def update_progress(self, request: ProgressUpdateRequest) -> ProgressResponse:
        if request.reset:
            self.progress.reset()
        else:
            self.progress.restore(ProgressSnapshot(
                completed_levels=request.completed_levels,
                unlocked_levels=request.unlocked_levels,
                current_level_id=request.current_level_id,
                persistent_rewards=PersistentRewards(
                    reward_ids=request.reward_ids,
                    resource_bonuses=request.resource_bonuses,
                ),
                random_levels_completed=request.random_levels_completed,
            ))
            self.progress.save()
        return self.get_progress()

    # =========================================================================
    # Sessions
    # =========================================================================

    def _session_response(self, session: Session) -> SessionResponse:
        return SessionResponse(**session.to_dict())

    def create_session(self, request: CreateSessionRequest) -> SessionResponse:
        session = self.session_manager.create_session(request.level_id, request.seed)
        return self._session_response(session)

    def get_session(self, session_id: str) -> SessionResponse:
        return self._session_response(self.session_manager.require_session(session_id))

    def list_sessions(self) -> list[str]:
        return self.session_manager.list_sessions()

    def end_session(self, session_id: str) -> bool:
        return self.session_manager.end_session(session_id)

    def get_state(self, session_id: str) -> GameStateResponse:
        session = self.session_manager.require_session(session_id)
        available = []
        if session.reward_claimed is None and session.game.phase == GamePhase.VICTORY:
            owned = set(self.progress.unlocked_reward_ids)
            for reward_id in session.level.reward_ids:
                reward = self.catalog.reward(reward_id)
                if reward is not None and reward_id not in owned:
                    available.append(self._reward_info(reward))
        return GameStateResponse(
            session_id=session_id,
            state=session.game.to_dict(),
            available_rewards=available,
        )

    def drain_events(self, session_id: str) -> EventsResponse:
        session = self.session_manager.require_session(session_id)
        return EventsResponse(
            session_id=session_id,
            events=[EventInfo(kind=event.kind.value, data=dict(event.data)) for event in session.drain_events()],
        )

    # =========================================================================
    # Game commands
    # =========================================================================

    def _run(self, session_id: str, command: Callable[[ColonyGame], ActionResult]) -> ActionResponse:
        session = self.session_manager.require_session(session_id)
        result = command(session.game)
        return ActionResponse(**result.to_dict(), state=session.game.to_dict())

    def choose_card(self, session_id: str, choice_index: int) -> ActionResponse:
        return self._run(session_id, lambda game: game.choose_card(choice_index))

    def place_card(self, session_id: str, hand_index: int, x: int, y: int) -> ActionResponse:
        return self._run(session_id, lambda game: game.place_card(hand_index, x, y))

    def play_event(self, session_id: str, hand_index: int) -> ActionResponse:
        return self._run(session_id, lambda game: game.play_event(hand_index))

    def discard_card(self, session_id: str, hand_index: int) -> ActionResponse:
        return self._run(session_id, lambda game: game.discard_card(hand_index))

    def perform_action(self, session_id: str, x: int, y: int, action_id: str) -> ActionResponse:
        return self._run(session_id, lambda game: game.perform_action(x, y, action_id))

    def launch_rocket(self, session_id: str, x: int, y: int) -> ActionResponse:
        return self._run(session_id, lambda game: game.launch_rocket(x, y))

    def end_turn(self, session_id: str) -> ActionResponse:
        return self._run(session_id, lambda game: game.end_turn())

    def claim_reward(self, session_id: str, reward_id: str) -> ActionResponse:
        result = self.session_manager.claim_reward(session_id, reward_id)
        session = self.session_manager.require_session(session_id)
        return ActionResponse(**result.to_dict(), state=session.game.to_dict())
