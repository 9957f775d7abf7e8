"""
API Module - HTTP interface for colony clients.

Exposes the engine via REST API.
A client:
1. Lists levels and rewards, reads progression
2. Starts a session for a level
3. Sends commands and polls engine events
4. Claims a reward after winning

Sessions live in memory. Progression is persisted when
COLONYDECK_PROGRESS_PATH is set.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    ChooseCardRequest,
    HandCardRequest,
    PlaceCardRequest,
    CellRequest,
    BuildingActionRequest,
    ClaimRewardRequest,
    ProgressUpdateRequest,
    # Responses
    ActionResponse,
    SessionResponse,
    GameStateResponse,
    EventsResponse,
    ProgressResponse,
    ErrorResponse,
    # Shared
    LevelInfo,
    RewardInfo,
    EventInfo,
)
from .service import APIService
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "ChooseCardRequest",
    "HandCardRequest",
    "PlaceCardRequest",
    "CellRequest",
    "BuildingActionRequest",
    "ClaimRewardRequest",
    "ProgressUpdateRequest",
    # Responses
    "ActionResponse",
    "SessionResponse",
    "GameStateResponse",
    "EventsResponse",
    "ProgressResponse",
    "ErrorResponse",
    # Shared
    "LevelInfo",
    "RewardInfo",
    "EventInfo",
    # Service
    "APIService",
    "create_app",
]
