"""
API Module - HTTP interface.

Exposes the engine via REST API. A client:
1. Creates (or resumes) a session
2. Lists actions with costs and availability
3. Submits intents: actions, event answers, spins, resets
4. Reads the updated campaign state from each response

Sessions live in memory; campaign snapshots go to the JSON store.
"""

from .schemas import (
    # Requests
    CreateSessionRequest,
    ActionRequest,
    ResolveEventRequest,
    SpinRequest,
    # Responses
    SessionResponse,
    GameStateResponse,
    IntentResponse,
    ActionCatalogueResponse,
    ErrorResponse,
    # Enums
    ErrorCode,
)
from .service import APIService, IntentRejectedError, SessionNotFoundError
from .app import create_app

__all__ = [
    # Requests
    "CreateSessionRequest",
    "ActionRequest",
    "ResolveEventRequest",
    "SpinRequest",
    # Responses
    "SessionResponse",
    "GameStateResponse",
    "IntentResponse",
    "ActionCatalogueResponse",
    "ErrorResponse",
    "ErrorCode",
    # Service
    "APIService",
    "IntentRejectedError",
    "SessionNotFoundError",
    "create_app",
]
