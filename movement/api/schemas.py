"""
Pydantic Schemas for API - Request/response models for OpenAPI.

These models define the exact contract between clients and the engine.
All responses include explicit types for OpenAPI schema generation.

Error Codes:
- SESSION_NOT_FOUND: Session does not exist or has ended
- INTENT_REJECTED: The engine refused the intent; details.rejection_code
  carries the engine's reason (ON_COOLDOWN, INSUFFICIENT_FUNDS, ...)
- UNKNOWN_ID: Unknown advisor name or challenge id at session creation
"""

from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, Field


# =============================================================================
# Enums
# =============================================================================

class FactionModeName(str, Enum):
    """Faction sets a campaign can run with."""
    CLASSIC = "classic"
    POLITICAL = "political"


class ErrorCode(str, Enum):
    """Structured error codes."""
    SESSION_NOT_FOUND = "SESSION_NOT_FOUND"
    INTENT_REJECTED = "INTENT_REJECTED"
    UNKNOWN_ID = "UNKNOWN_ID"
    SESSION_CONFLICT = "SESSION_CONFLICT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# =============================================================================
# Shared Models
# =============================================================================

class CostInfo(BaseModel):
    funds: int = 0
    clout: int = 0


class FactionInfo(BaseModel):
    """One faction's support and mood."""
    faction_id: str
    support: int
    mood: str
    momentum: float
    turns_in_mood: int = 0


class ReactionInfo(BaseModel):
    faction_id: str
    message: str
    impact: int
    turn: int


class EventOptionInfo(BaseModel):
    """One choice on the pending event."""
    index: int
    text: str
    preview: Optional[str] = Field(None, description="Outcome preview, only with an event-reveal advisor")


class EventInfo(BaseModel):
    """The event waiting on the player."""
    event_id: str
    title: str
    description: str
    category: str
    options: list[EventOptionInfo] = Field(default_factory=list)
    chain_id: Optional[str] = None


class ComboInfo(BaseModel):
    multiplier: float = 1.0
    matched_tags: list[str] = Field(default_factory=list)
    name: Optional[str] = None
    is_jackpot: bool = False


class SpinInfo(BaseModel):
    """The reels currently showing."""
    action_id: str
    modifier_id: str
    target_id: str
    locked: list[str] = Field(default_factory=list)
    rerolls: int = 0
    label: str = ""
    combo: ComboInfo = Field(default_factory=ComboInfo)
    next_reroll_cost: int = Field(0, description="Clout cost of the next reroll")


class GameStateResponse(BaseModel):
    """Full campaign state."""
    game_id: str
    faction_mode: FactionModeName
    turn: int
    support: dict[str, int]
    average_support: float
    factions: list[FactionInfo] = Field(default_factory=list)
    global_momentum: float = 0.0
    funds: int
    clout: int
    risk: int
    risk_zone: str
    streak: int = 0
    highest_streak: int = 0
    action_cooldowns: dict[str, int] = Field(default_factory=dict)
    pending_event: Optional[EventInfo] = None
    spin: Optional[SpinInfo] = None
    reactions: list[ReactionInfo] = Field(default_factory=list)
    victory: bool = False
    game_over: bool = False
    victory_type: Optional[str] = None
    defeat_type: Optional[str] = None
    news_log: list[str] = Field(default_factory=list)


# =============================================================================
# Request Models
# =============================================================================

class StartingBonusRequest(BaseModel):
    clout: int = 0
    funds: int = 0
    support: int = 0
    faction_bonuses: dict[str, int] = Field(default_factory=dict)


class CreateSessionRequest(BaseModel):
    """Request to start (or resume) a campaign."""
    faction_mode: FactionModeName = FactionModeName.CLASSIC
    seed: Optional[int] = Field(None, description="RNG seed for reproducible play")
    advisors: Optional[list[str]] = Field(None, description="Advisor names; default roster if omitted")
    challenge_id: Optional[str] = None
    starting_bonus: Optional[StartingBonusRequest] = None
    game_id: Optional[str] = Field(None, description="Resume this campaign if a save exists")


class ActionRequest(BaseModel):
    action_id: str


class ResolveEventRequest(BaseModel):
    option_index: int


class SpinRequest(BaseModel):
    locked: list[str] = Field(default_factory=list, description="Reel names to hold: action, modifier, target")


# =============================================================================
# Response Models
# =============================================================================

class ErrorResponse(BaseModel):
    """Standard error response."""
    error: str = Field(..., description="Human-readable error message")
    error_code: ErrorCode = Field(..., description="Machine-readable error code")
    details: Optional[dict[str, Any]] = Field(None, description="Additional error context")
    api_version: str = Field("v1", description="API version")


class SessionResponse(BaseModel):
    """A session and its current state."""
    session_id: str
    game_id: str
    created_at: float
    active: bool
    advisors: list[str] = Field(default_factory=list)
    challenge_id: Optional[str] = None
    seed: Optional[int] = None
    state: GameStateResponse


class SessionListResponse(BaseModel):
    sessions: list[str]
    count: int


class EndSessionResponse(BaseModel):
    success: bool
    session_id: str


class IntentResponse(BaseModel):
    """Result of an accepted intent."""
    success: bool = True
    state_changes: list[str] = Field(default_factory=list)
    critical: bool = False
    first_action_bonus: bool = False
    combo: Optional[ComboInfo] = None
    event_triggered: Optional[str] = None
    state: GameStateResponse


class ActionInfo(BaseModel):
    """One action with its adjusted cost and availability."""
    action_id: str
    name: str
    description: str
    cost: CostInfo
    tags: list[str] = Field(default_factory=list)
    cooldown: int = 0
    available: bool = True
    reason: Optional[str] = None
    reason_code: Optional[str] = None


class ActionCatalogueResponse(BaseModel):
    session_id: Optional[str] = None
    actions: list[ActionInfo]


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    service: str
    version: str
