"""
FastAPI Application - REST API for the campaign engine.

Endpoints:
    GET    /api/v1/health                         Health check
    POST   /api/v1/sessions                       Create (or resume) a session
    GET    /api/v1/sessions                       List sessions
    GET    /api/v1/sessions/{id}                  Session state
    DELETE /api/v1/sessions/{id}                  End session
    POST   /api/v1/sessions/{id}/actions          Take an action
    POST   /api/v1/sessions/{id}/events/resolve   Answer the pending event
    POST   /api/v1/sessions/{id}/spin             Spin or reroll the reels
    POST   /api/v1/sessions/{id}/spin/execute     Play the current reels
    POST   /api/v1/sessions/{id}/reset            Start the campaign over
    GET    /api/v1/actions                        Action catalogue (?session_id=)

Rejected intents return 409 with the engine's rejection code in
details.rejection_code. Unknown sessions return 404.

All responses are JSON with explicit Pydantic schemas.
"""

from typing import Optional
import logging

from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .schemas import (
    ActionCatalogueResponse,
    ActionRequest,
    CreateSessionRequest,
    EndSessionResponse,
    ErrorCode,
    ErrorResponse,
    HealthResponse,
    IntentResponse,
    ResolveEventRequest,
    SessionListResponse,
    SessionResponse,
    SpinRequest,
)
from .service import APIService, IntentRejectedError, SessionNotFoundError
from .. import __version__
from ..config import EngineConfig, setup_logging
from ..engine_core.action import Intent
from ..engine_core.errors import UnknownIdError
from ..providers.persistence import JsonStateStore
from ..session import SessionConflictError, SessionManager

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def create_app(service: APIService | None = None, config: EngineConfig | None = None) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        service: Optional APIService instance (built from config if not provided)
        config: Optional EngineConfig (read from the environment if not provided)

    Returns:
        FastAPI application instance
    """
    config = config or EngineConfig.from_env()
    setup_logging(config.log_level)

    app = FastAPI(
        title="Movement Engine API",
        description="""
Turn-based campaign simulation: spend funds and clout on actions, answer
events, spin the reels, and win regions and factions before risk catches up.

## Error Codes

| Code | Status | Description |
|------|--------|-------------|
| `SESSION_NOT_FOUND` | 404 | Session does not exist |
| `INTENT_REJECTED` | 409 | Engine refused the intent; see `details.rejection_code` |
| `UNKNOWN_ID` | 400 | Unknown advisor name or challenge id |
        """,
        version=__version__,
        docs_url="/api/docs",
        redoc_url="/api/redoc",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    if service is None:
        store = JsonStateStore(config.save_dir)
        service = APIService(session_manager=SessionManager(store=store))
    api_service = service

    # =========================================================================
    # Error helpers
    # =========================================================================

    def make_error_response(
        error_code: ErrorCode,
        message: str,
        status_code: int = 400,
        details: Optional[dict] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""
        return JSONResponse(
            status_code=status_code,
            content=ErrorResponse(
                error=message,
                error_code=error_code,
                details=details,
            ).model_dump(mode="json"),
        )

    @app.exception_handler(SessionNotFoundError)
    async def session_not_found(request: Request, exc: SessionNotFoundError) -> JSONResponse:
        return make_error_response(
            ErrorCode.SESSION_NOT_FOUND,
            str(exc),
            status_code=404,
            details={"session_id": exc.session_id},
        )

    @app.exception_handler(IntentRejectedError)
    async def intent_rejected(request: Request, exc: IntentRejectedError) -> JSONResponse:
        return make_error_response(
            ErrorCode.INTENT_REJECTED,
            str(exc),
            status_code=409,
            details={"rejection_code": exc.code.value if exc.code else None},
        )

    @app.exception_handler(UnknownIdError)
    async def unknown_id(request: Request, exc: UnknownIdError) -> JSONResponse:
        return make_error_response(
            ErrorCode.UNKNOWN_ID,
            f"Unknown {exc.kind}: {exc.item_id}",
            status_code=400,
            details={"kind": exc.kind, "id": exc.item_id},
        )

    @app.exception_handler(SessionConflictError)
    async def session_conflict(request: Request, exc: SessionConflictError) -> JSONResponse:
        return make_error_response(
            ErrorCode.SESSION_CONFLICT,
            str(exc),
            status_code=409,
            details={"game_id": exc.game_id},
        )

    # =========================================================================
    # Health Check
    # =========================================================================

    @app.get(
        f"{API_PREFIX}/health",
        response_model=HealthResponse,
        tags=["System"],
        summary="Health check",
    )
    async def health_check() -> HealthResponse:
        """Health check endpoint for load balancers."""
        return HealthResponse(status="healthy", service="movement-engine", version=__version__)

    # =========================================================================
    # Session Endpoints
    # =========================================================================

    @app.post(
        f"{API_PREFIX}/sessions",
        response_model=SessionResponse,
        status_code=201,
        responses={
            400: {"model": ErrorResponse, "description": "Unknown advisor or challenge"},
            409: {"model": ErrorResponse, "description": "Game started with another challenge or roster"},
        },
        tags=["Sessions"],
        summary="Create a new session",
    )
    def create_session(request: CreateSessionRequest) -> SessionResponse:
        """
        Start a campaign, or resume one from the store when `game_id`
        names an existing save.
        """
        return api_service.create_session(request)

    @app.get(
        f"{API_PREFIX}/sessions",
        response_model=SessionListResponse,
        tags=["Sessions"],
        summary="List sessions",
    )
    def list_sessions() -> SessionListResponse:
        sessions = api_service.list_sessions()
        return SessionListResponse(sessions=sessions, count=len(sessions))

    @app.get(
        f"{API_PREFIX}/sessions/{{session_id}}",
        response_model=SessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="Get session state",
    )
    def get_session(session_id: str) -> SessionResponse:
        return api_service.get_session(session_id)

    @app.delete(
        f"{API_PREFIX}/sessions/{{session_id}}",
        response_model=EndSessionResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Sessions"],
        summary="End a session",
    )
    def end_session(session_id: str) -> EndSessionResponse:
        if not api_service.end_session(session_id):
            raise SessionNotFoundError(session_id)
        return EndSessionResponse(success=True, session_id=session_id)

    # =========================================================================
    # Intent Endpoints
    # =========================================================================

    intent_responses = {404: {"model": ErrorResponse}, 409: {"model": ErrorResponse}}

    @app.post(
        f"{API_PREFIX}/sessions/{{session_id}}/actions",
        response_model=IntentResponse,
        responses=intent_responses,
        tags=["Game Loop"],
        summary="Take a campaign action",
    )
    def take_action(session_id: str, request: ActionRequest) -> IntentResponse:
        return api_service.perform(session_id, Intent.action(request.action_id))

    @app.post(
        f"{API_PREFIX}/sessions/{{session_id}}/events/resolve",
        response_model=IntentResponse,
        responses=intent_responses,
        tags=["Game Loop"],
        summary="Answer the pending event",
    )
    def resolve_event(session_id: str, request: ResolveEventRequest) -> IntentResponse:
        return api_service.perform(session_id, Intent.resolve_event(request.option_index))

    @app.post(
        f"{API_PREFIX}/sessions/{{session_id}}/spin",
        response_model=IntentResponse,
        responses=intent_responses,
        tags=["Game Loop"],
        summary="Spin or reroll the reels",
    )
    def spin(session_id: str, request: Optional[SpinRequest] = None) -> IntentResponse:
        locked = request.locked if request is not None else []
        return api_service.perform(session_id, Intent.spin(locked))

    @app.post(
        f"{API_PREFIX}/sessions/{{session_id}}/spin/execute",
        response_model=IntentResponse,
        responses=intent_responses,
        tags=["Game Loop"],
        summary="Play the current reels",
    )
    def execute_spin(session_id: str) -> IntentResponse:
        return api_service.perform(session_id, Intent.execute_spin())

    @app.post(
        f"{API_PREFIX}/sessions/{{session_id}}/reset",
        response_model=IntentResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Game Loop"],
        summary="Start the campaign over",
    )
    def reset(session_id: str) -> IntentResponse:
        return api_service.perform(session_id, Intent.reset())

    # =========================================================================
    # Catalogue
    # =========================================================================

    @app.get(
        f"{API_PREFIX}/actions",
        response_model=ActionCatalogueResponse,
        responses={404: {"model": ErrorResponse}},
        tags=["Catalogue"],
        summary="List actions",
    )
    def list_actions(
        session_id: Optional[str] = Query(None, description="Adjust costs and availability for this session"),
    ) -> ActionCatalogueResponse:
        return api_service.action_catalogue(session_id)

    @app.get("/", tags=["System"])
    async def root():
        """Root endpoint with API info."""
        return {
            "name": "Movement Engine API",
            "version": __version__,
            "docs": "/api/docs",
            "health": f"{API_PREFIX}/health",
        }

    logger.info("API ready (env=%s, save_dir=%s)", config.env, config.save_dir)
    return app
