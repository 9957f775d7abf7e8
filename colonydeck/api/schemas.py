"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the contract between a client and the engine.

Error Codes (in addition to the engine's ActionResult codes):
- SESSION_NOT_FOUND: Session does not exist or has ended
- LEVEL_UNAVAILABLE: Level is unknown or still locked
- VALIDATION_ERROR: Request body is invalid
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class APIErrorCode(str, Enum):
    """Structured error codes for non-game failures."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    LEVEL_UNAVAILABLE = "LEVEL_UNAVAILABLE"
    VALIDATION_ERROR = "VALIDATION_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class LevelInfo(BaseModel):
    """Level summary for level selection."""
    level_id: str
    name: str
    description: str = ""
    turn_limit: int
    reputation_goal: int
    starting_resources: dict[str, int] = Field(default_factory=dict)
    reward_ids: list[str] = Field(default_factory=list)
    unlocked: bool = False
    completed: bool = False
    is_random: bool = False


class RewardInfo(BaseModel):
    """Reward summary."""
    reward_id: str
    name: str
    description: str = ""
    application_type: str
    reputation_cost: int = 0
    unlocked: bool = False


class EventInfo(BaseModel):
    """One engine event."""
    kind: str
    data: dict[str, Any] = Field(default_factory=dict)


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Start a session."""
    level_id: Optional[str] = Field(
        default=None,
        description="Level to play. Defaults to the current progression level",
    )
    seed: Optional[int] = Field(default=None, description="Seed for shuffles and random maps")


class ChooseCardRequest(BaseModel):
    choice_index: int = Field(ge=0, description="Index into the current card offer")


class HandCardRequest(BaseModel):
    hand_index: int = Field(ge=0, description="Index into the hand")


class PlaceCardRequest(BaseModel):
    hand_index: int = Field(ge=0, description="Index into the hand")
    x: int
    y: int


class CellRequest(BaseModel):
    x: int
    y: int


class BuildingActionRequest(BaseModel):
    x: int
    y: int
    action_id: str = Field(description="Building action id, e.g. launchRocket or fastLaunch")


class ClaimRewardRequest(BaseModel):
    reward_id: str


class ProgressUpdateRequest(BaseModel):
    """Replace stored progression."""
    completed_levels: list[str] = Field(default_factory=list)
    unlocked_levels: list[str] = Field(default_factory=list)
    current_level_id: Optional[str] = None
    reward_ids: list[str] = Field(default_factory=list)
    resource_bonuses: dict[str, int] = Field(default_factory=dict)
    random_levels_completed: int = Field(default=0, ge=0)
    reset: bool = Field(default=False, description="Ignore the other fields and reset progress")


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    success: bool = False
    error: str
    error_code: str
    details: Optional[dict[str, Any]] = None


class ActionResponse(BaseModel):
    """Result of a game command."""
    success: bool
    error: Optional[str] = None
    error_code: Optional[str] = None
    messages: list[str] = Field(default_factory=list)
    data: dict[str, Any] = Field(default_factory=dict)
    state: Optional[dict[str, Any]] = None


class SessionResponse(BaseModel):
    """Session summary."""
    session_id: str
    level_id: str
    phase: str
    turn: int
    created_at: float
    reward_claimed: Optional[str] = None


class SessionListResponse(BaseModel):
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    success: bool
    session_id: str


class GameStateResponse(BaseModel):
    """Full game view."""
    session_id: str
    state: dict[str, Any]
    available_rewards: list[RewardInfo] = Field(default_factory=list)


class EventsResponse(BaseModel):
    session_id: str
    events: list[EventInfo] = Field(default_factory=list)


class LevelListResponse(BaseModel):
    levels: list[LevelInfo]
    current_level_id: Optional[str] = None


class RewardListResponse(BaseModel):
    rewards: list[RewardInfo]


class ProgressResponse(BaseModel):
    completed_levels: list[str]
    unlocked_levels: list[str]
    current_level_id: Optional[str] = None
    reward_ids: list[str]
    resource_bonuses: dict[str, int]
    random_levels_completed: int
    campaign_complete: bool


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str
    environment: str
    active_sessions: int = 0
