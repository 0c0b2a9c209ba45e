"""
API Service - Business logic layer between the HTTP app and the engine.

The service:
1. Translates API requests to session and engine calls
2. Manages sessions and their game loops
3. Raises typed errors the app maps to HTTP responses
4. Formats engine state for clients

This layer is framework-agnostic; only app.py knows about FastAPI.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .schemas import (
    ActionCatalogueResponse,
    ActionInfo,
    ComboInfo,
    CostInfo,
    CreateSessionRequest,
    EventInfo,
    EventOptionInfo,
    FactionInfo,
    GameStateResponse,
    IntentResponse,
    ReactionInfo,
    SessionResponse,
    SpinInfo,
)
from ..engine_core.action import ActionResult, Intent
from ..engine_core.action_generator import ActionGenerator
from ..engine_core.errors import RejectionCode
from ..engine_core.registry import default_registry
from ..engine_core.risk import risk_zone
from ..engine_core.state import FactionMode, GameState
from ..providers.bonuses import StartingBonus
from ..session import GameLoop, Session, SessionManager
from ..spin.combo import ComboResult
from ..spin.machine import reroll_cost, resolve_reels


class SessionNotFoundError(LookupError):
    def __init__(self, session_id: str):
        super().__init__(f"Session not found: {session_id}")
        self.session_id = session_id


class IntentRejectedError(Exception):
    """The engine refused an intent. Carries the engine's rejection code."""

    def __init__(self, result: ActionResult):
        super().__init__(result.error or "Intent rejected")
        self.result = result
        self.code: RejectionCode | None = result.error_code


@dataclass
class APIService:
    """
    Main API service.

    Usage:
        service = APIService()

        session = service.create_session(CreateSessionRequest(seed=7))
        result = service.perform(session.session_id, Intent.action("rally"))
    """
    session_manager: SessionManager = field(default_factory=SessionManager)

    # Game loops per session
    _game_loops: dict[str, GameLoop] = field(default_factory=dict)

    def create_session(self, request: CreateSessionRequest) -> SessionResponse:
        """Create a session. Raises UnknownIdError for bad advisors or challenge."""
        bonus = None
        if request.starting_bonus is not None:
            bonus = StartingBonus.from_dict(request.starting_bonus.model_dump())

        session = self.session_manager.create_session(
            faction_mode=FactionMode(request.faction_mode.value),
            seed=request.seed,
            advisors=request.advisors,
            challenge_id=request.challenge_id,
            bonus=bonus,
            game_id=request.game_id,
        )
        if session.session_id not in self._game_loops:
            self._game_loops[session.session_id] = GameLoop(session)
        return self._session_to_response(session)

    def get_session(self, session_id: str) -> SessionResponse:
        return self._session_to_response(self._require_session(session_id))

    def end_session(self, session_id: str) -> bool:
        self._game_loops.pop(session_id, None)
        return self.session_manager.end_session(session_id)

    def list_sessions(self) -> list[str]:
        return [s.session_id for s in self.session_manager.list_sessions()]

    def perform(self, session_id: str, intent: Intent) -> IntentResponse:
        """Run an intent through the session's loop. Raises IntentRejectedError on refusal."""
        loop = self._require_loop(session_id)
        result = loop.submit(intent)
        if not result.success:
            raise IntentRejectedError(result)
        return IntentResponse(
            success=True,
            state_changes=result.state_changes,
            critical=result.critical,
            first_action_bonus=result.first_action_bonus,
            combo=_combo_info(result.combo) if result.combo is not None else None,
            event_triggered=result.event_triggered,
            state=state_to_response(result.new_state),
        )

    def action_catalogue(self, session_id: str | None = None) -> ActionCatalogueResponse:
        """
        Every action in the registry.

        With a session, costs are adjusted and availability is checked
        against its state. Without one, base costs are listed.
        """
        if session_id is None:
            return ActionCatalogueResponse(actions=[
                ActionInfo(
                    action_id=action.id,
                    name=action.name,
                    description=action.description,
                    cost=CostInfo(funds=action.cost.funds, clout=action.cost.clout),
                    tags=list(action.tags),
                    cooldown=action.cooldown,
                )
                for action in default_registry()
            ])

        session = self._require_session(session_id)
        options = ActionGenerator(session.reducer).generate(session.state)
        return ActionCatalogueResponse(
            session_id=session_id,
            actions=[
                ActionInfo(
                    action_id=option.action_id,
                    name=option.name,
                    description=option.description,
                    cost=CostInfo(funds=option.cost.funds, clout=option.cost.clout),
                    tags=list(option.tags),
                    cooldown=option.cooldown,
                    available=option.available,
                    reason=option.reason,
                    reason_code=option.reason_code.value if option.reason_code else None,
                )
                for option in options
            ],
        )

    # =========================================================================
    # Helpers
    # =========================================================================

    def _require_session(self, session_id: str) -> Session:
        session = self.session_manager.get_session(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def _require_loop(self, session_id: str) -> GameLoop:
        session = self._require_session(session_id)
        loop = self._game_loops.get(session_id)
        if loop is None:
            loop = GameLoop(session)
            self._game_loops[session_id] = loop
        return loop

    def _session_to_response(self, session: Session) -> SessionResponse:
        return SessionResponse(
            session_id=session.session_id,
            game_id=session.game_id,
            created_at=session.created_at,
            active=session.is_active(),
            advisors=session.roster.names,
            challenge_id=session.challenge.id if session.challenge else None,
            seed=session.seed,
            state=state_to_response(session.state),
        )


def _combo_info(combo: ComboResult) -> ComboInfo:
    return ComboInfo(**combo.to_dict())


def state_to_response(state: GameState) -> GameStateResponse:
    """Convert engine state to the API model."""
    pending = None
    if state.pending_event is not None:
        event = state.pending_event
        pending = EventInfo(
            event_id=event.event_id,
            title=event.title,
            description=event.description,
            category=event.category,
            options=[
                EventOptionInfo(index=i, text=option.text, preview=option.preview)
                for i, option in enumerate(event.options)
            ],
            chain_id=event.chain_id,
        )

    spin = None
    if state.spin is not None:
        reels = resolve_reels(state.spin)
        spin = SpinInfo(
            action_id=state.spin.action_id,
            modifier_id=state.spin.modifier_id,
            target_id=state.spin.target_id,
            locked=list(state.spin.locked),
            rerolls=state.spin.rerolls,
            label=reels.label,
            combo=_combo_info(reels.combo),
            next_reroll_cost=reroll_cost(state.spin.rerolls),
        )

    return GameStateResponse(
        game_id=state.game_id,
        faction_mode=state.faction_mode.value,
        turn=state.turn,
        support=dict(state.support),
        average_support=round(state.average_support, 2),
        factions=[
            FactionInfo(
                faction_id=fid,
                support=support,
                mood=state.sentiment.factions[fid].mood.name,
                momentum=state.sentiment.factions[fid].momentum,
                turns_in_mood=state.sentiment.factions[fid].turns_in_mood,
            )
            for fid, support in state.faction_support.items()
        ],
        global_momentum=state.sentiment.global_momentum,
        funds=state.funds,
        clout=state.clout,
        risk=state.risk,
        risk_zone=risk_zone(state.risk).value,
        streak=state.streak,
        highest_streak=state.highest_streak,
        action_cooldowns=dict(state.action_cooldowns),
        pending_event=pending,
        spin=spin,
        reactions=[
            ReactionInfo(faction_id=r.faction_id, message=r.message, impact=r.impact, turn=r.turn)
            for r in state.sentiment.reactions
        ],
        victory=state.victory,
        game_over=state.game_over,
        victory_type=state.victory_type.value if state.victory_type else None,
        defeat_type=state.defeat_type.value if state.defeat_type else None,
        news_log=list(state.news_log),
    )
