"""
FastAPI Application - REST API for colony clients.

Endpoints:
    GET    /api/v1/levels                        List levels and their status
    GET    /api/v1/rewards                       List rewards
    GET    /api/v1/progress                      Get progression
    PUT    /api/v1/progress                      Replace or reset progression
    POST   /api/v1/sessions                      Start a level
    GET    /api/v1/sessions                      List sessions
    GET    /api/v1/sessions/{id}                 Get session status
    DELETE /api/v1/sessions/{id}                 End session
    GET    /api/v1/sessions/{id}/state           Full game state
    GET    /api/v1/sessions/{id}/events          Poll buffered engine events
    POST   /api/v1/sessions/{id}/choose          Pick a card from the offer
    POST   /api/v1/sessions/{id}/place           Place a building card
    POST   /api/v1/sessions/{id}/event           Play an event card
    POST   /api/v1/sessions/{id}/discard         Discard a hand card
    POST   /api/v1/sessions/{id}/action          Run a building action
    POST   /api/v1/sessions/{id}/launch          Launch a rocket
    POST   /api/v1/sessions/{id}/end-turn        End the turn
    POST   /api/v1/sessions/{id}/claim-reward    Claim a reward after victory
    GET    /health                               Health check

Game commands always answer 200 with an ActionResponse; a rejected
command has success=false and an error_code. Unknown sessions answer
404, unknown or locked levels 400.
"""

from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .. import __version__
from ..config import load_settings
from ..session import LevelUnavailableError, SessionNotFoundError
from .schemas import (
    APIErrorCode,
    ActionResponse,
    BuildingActionRequest,
    CellRequest,
    ChooseCardRequest,
    ClaimRewardRequest,
    CreateSessionRequest,
    EndSessionResponse,
    ErrorResponse,
    EventsResponse,
    GameStateResponse,
    HandCardRequest,
    HealthResponse,
    LevelListResponse,
    PlaceCardRequest,
    ProgressResponse,
    ProgressUpdateRequest,
    RewardListResponse,
    SessionListResponse,
    SessionResponse,
)
from .service import APIService


def create_app(service: Optional[APIService] = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (creates new if not provided)

    Returns:
        FastAPI application instance
    """
    settings = load_settings()

    app = FastAPI(
        title="Colonydeck API",
        description="Turn-based Mars colony building: cards, grid and rockets.",
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.allowed_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    api_service = service or APIService()

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: APIErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code.value,
                details=details,
            ).model_dump(),
        )

    @app.exception_handler(SessionNotFoundError)
    async def session_not_found(request, exc: SessionNotFoundError) -> JSONResponse:
        return make_error_response(
            APIErrorCode.SESSION_NOT_FOUND,
            f"Session not found: {exc.args[0]}",
            status_code=404,
        )

    @app.exception_handler(LevelUnavailableError)
    async def level_unavailable(request, exc: LevelUnavailableError) -> JSONResponse:
        return make_error_response(APIErrorCode.LEVEL_UNAVAILABLE, str(exc))

    # =========================================================================
    # Levels, rewards, progress
    # =========================================================================

    @app.get(
        "/api/v1/levels",
        response_model=LevelListResponse,
        tags=["Progress"],
        summary="List levels",
    )
    async def list_levels() -> LevelListResponse:
        return api_service.list_levels()

    @app.get(
        "/api/v1/rewards",
        response_model=RewardListResponse,
        tags=["Progress"],
        summary="List rewards",
    )
    async def list_rewards() -> RewardListResponse:
        return api_service.list_rewards()

    @app.get(
        "/api/v1/progress",
        response_model=ProgressResponse,
        tags=["Progress"],
        summary="Get progression",
    )
    async def get_progress() -> ProgressResponse:
        return api_service.get_progress()

    @app.put(
        "/api/v1/progress",
        response_model=ProgressResponse,
        tags=["Progress"],
        summary="Replace or reset progression",
    )
    async def update_progress(request: ProgressUpdateRequest) -> ProgressResponse:
        """Unknown level and reward ids are dropped."""
        return api_service.update_progress(request)

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        "/api/v1/sessions",
        response_model=SessionResponse,
        responses={400: {"model": ErrorResponse, "description": "Unknown or locked level"}},
        tags=["Sessions"],
        summary="Start a level",
    )
    async def create_session(request: CreateSessionRequest) -> SessionResponse:
        """
        Start a session.

        Without level_id the current progression level is played; after
        the campaign this is the next random level.
        """
        return api_service.create_session(request)

    @app.get(
        "/api/v1/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List sessions",
    )
    async def list_sessions() -> SessionListResponse:
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        "/api/v1/sessions/{session_id}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session status",
    )
    async def get_session(session_id: str) -> SessionResponse:
        return api_service.get_session(session_id)

    @app.delete(
        "/api/v1/sessions/{session_id}",
        response_model=EndSessionResponse,
        tags=["Sessions"],
        summary="End a session",
    )
    async def end_session(session_id: str) -> EndSessionResponse:
        success = api_service.end_session(session_id)
        return EndSessionResponse(success=success, session_id=session_id)

    @app.get(
        "/api/v1/sessions/{session_id}/state",
        response_model=GameStateResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Get game state",
    )
    async def get_state(session_id: str) -> GameStateResponse:
        return api_service.get_state(session_id)

    @app.get(
        "/api/v1/sessions/{session_id}/events",
        response_model=EventsResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Poll engine events",
    )
    async def get_events(session_id: str) -> EventsResponse:
        """Events since the last poll. Each event is returned once."""
        return api_service.drain_events(session_id)

    # =========================================================================
    # Game commands
    # =========================================================================

    @app.post(
        "/api/v1/sessions/{session_id}/choose",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Choose a card from the offer",
    )
    async def choose_card(session_id: str, request: ChooseCardRequest) -> ActionResponse:
        return api_service.choose_card(session_id, request.choice_index)

    @app.post(
        "/api/v1/sessions/{session_id}/place",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Place a building card",
    )
    async def place_card(session_id: str, request: PlaceCardRequest) -> ActionResponse:
        return api_service.place_card(session_id, request.hand_index, request.x, request.y)

    @app.post(
        "/api/v1/sessions/{session_id}/event",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Play an event card",
    )
    async def play_event(session_id: str, request: HandCardRequest) -> ActionResponse:
        return api_service.play_event(session_id, request.hand_index)

    @app.post(
        "/api/v1/sessions/{session_id}/discard",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Discard a card",
    )
    async def discard_card(session_id: str, request: HandCardRequest) -> ActionResponse:
        return api_service.discard_card(session_id, request.hand_index)

    @app.post(
        "/api/v1/sessions/{session_id}/action",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Run a building action",
    )
    async def perform_action(session_id: str, request: BuildingActionRequest) -> ActionResponse:
        return api_service.perform_action(session_id, request.x, request.y, request.action_id)

    @app.post(
        "/api/v1/sessions/{session_id}/launch",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="Launch a rocket",
    )
    async def launch_rocket(session_id: str, request: CellRequest) -> ActionResponse:
        return api_service.launch_rocket(session_id, request.x, request.y)

    @app.post(
        "/api/v1/sessions/{session_id}/end-turn",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game"],
        summary="End the turn",
    )
    async def end_turn(session_id: str) -> ActionResponse:
        """Runs production, checks the goal and opens the next card offer."""
        return api_service.end_turn(session_id)

    @app.post(
        "/api/v1/sessions/{session_id}/claim-reward",
        response_model=ActionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Progress"],
        summary="Claim a level reward",
    )
    async def claim_reward(session_id: str, request: ClaimRewardRequest) -> ActionResponse:
        return api_service.claim_reward(session_id, request.reward_id)

    # =========================================================================
    # Health
    # =========================================================================

    @app.get(
        "/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        return HealthResponse(
            version=__version__,
            environment=settings.env,
            active_sessions=len(api_service.list_sessions()),
        )

    return app
