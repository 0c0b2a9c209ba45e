"""
Campaign Setup - Builds fresh and rehydrated states.

This module handles:
- Default starting values (support, clout, funds, risk)
- Faction tables for the chosen faction mode
- Starting bonuses from meta-progression
- Challenge start modifiers (high risk, low support)
- Rehydrating a saved state with field-by-field defaulting

Starting bonuses are consumed here and nowhere else.
"""

from __future__ import annotations
from typing import Any
import uuid

from .state import (
    GameState,
    FactionMode,
    FactionSentiment,
    SentimentState,
    GameEvent,
    EventContext,
    SpinState,
    VictoryType,
    DefeatType,
    NEWS_LOG_LIMIT,
)
from .regions import REGION_CODES
from ..factions.definitions import factions_for, faction_ids
from ..providers.bonuses import StartingBonus
from ..providers.challenges import Challenge, ChallengeKind

STARTING_SUPPORT = 5
STARTING_CLOUT = 50
STARTING_FUNDS = 100
STARTING_RISK = 0


def _clamp(value: int, low: int = 0, high: int = 100) -> int:
    return max(low, min(high, value))


def create_initial_state(
    game_id: str | None = None,
    faction_mode: FactionMode = FactionMode.CLASSIC,
    bonus: StartingBonus | None = None,
    challenge: Challenge | None = None,
) -> GameState:
    """
    Create a fresh campaign state.

    Args:
        game_id: Identifier for the campaign (random if not provided)
        faction_mode: Which faction set to use
        bonus: Optional meta-progression starting bonus
        challenge: Optional challenge; start modifiers are applied here

    Returns:
        GameState at turn 0, ready for the first action
    """
    bonus = bonus or StartingBonus()
    support_base = STARTING_SUPPORT
    risk = STARTING_RISK

    if challenge is not None:
        if challenge.kind == ChallengeKind.LOW_SUPPORT_START:
            support_base = challenge.amount
        elif challenge.kind == ChallengeKind.HIGH_RISK_START:
            risk = challenge.amount

    support = {code: _clamp(support_base + bonus.support) for code in REGION_CODES}
    faction_support = {
        f.id: _clamp(f.base_support + bonus.faction_bonuses.get(f.id, 0))
        for f in factions_for(faction_mode)
    }
    sentiment = SentimentState(
        factions={fid: FactionSentiment() for fid in faction_support},
    )

    metadata: dict[str, Any] = {}
    if challenge is not None:
        metadata["challenge_id"] = challenge.id

    return GameState(
        game_id=game_id or str(uuid.uuid4()),
        faction_mode=faction_mode,
        turn=0,
        support=support,
        faction_support=faction_support,
        funds=max(0, STARTING_FUNDS + bonus.funds),
        clout=max(0, STARTING_CLOUT + bonus.clout),
        risk=_clamp(risk),
        sentiment=sentiment,
        news_log=["Your movement begins."],
        metadata=metadata,
    )


def state_from_dict(data: dict[str, Any]) -> GameState:
    """
    Rehydrate a saved state.

    Every field falls back to its fresh-state default when absent, so
    saves written by older versions keep loading. session_first_action
    is always reset: a load starts a new session.
    """
    mode = FactionMode(data.get("faction_mode", FactionMode.CLASSIC.value))
    defaults = create_initial_state(game_id=data.get("game_id"), faction_mode=mode)

    saved_support = data.get("support") or {}
    support = {
        code: _clamp(int(saved_support.get(code, defaults.support[code])))
        for code in REGION_CODES
    }
    saved_factions = data.get("faction_support") or {}
    faction_support = {
        fid: _clamp(int(saved_factions.get(fid, defaults.faction_support[fid])))
        for fid in faction_ids(mode)
    }

    pending = data.get("pending_event")
    spin = data.get("spin")
    victory_type = data.get("victory_type")
    defeat_type = data.get("defeat_type")

    return GameState(
        game_id=defaults.game_id,
        faction_mode=mode,
        turn=int(data.get("turn", defaults.turn)),
        support=support,
        faction_support=faction_support,
        funds=max(0, int(data.get("funds", defaults.funds))),
        clout=max(0, int(data.get("clout", defaults.clout))),
        risk=_clamp(int(data.get("risk", defaults.risk))),
        action_cooldowns={
            k: int(v) for k, v in (data.get("action_cooldowns") or {}).items() if int(v) > 0
        },
        consecutive_action_uses={
            k: int(v) for k, v in (data.get("consecutive_action_uses") or {}).items()
        },
        streak=int(data.get("streak", 0)),
        highest_streak=int(data.get("highest_streak", data.get("streak", 0))),
        sentiment=SentimentState.from_dict(data.get("sentiment") or {}, list(faction_support)),
        pending_event=GameEvent.from_dict(pending) if pending else None,
        event_context=EventContext.from_dict(data.get("event_context") or {}),
        spin=SpinState.from_dict(spin) if spin else None,
        total_funds_earned=int(data.get("total_funds_earned", 0)),
        total_clout_earned=int(data.get("total_clout_earned", 0)),
        total_critical_hits=int(data.get("total_critical_hits", 0)),
        consecutive_negative_funds=int(data.get("consecutive_negative_funds", 0)),
        session_first_action=True,
        victory=bool(data.get("victory", False)),
        game_over=bool(data.get("game_over", False)),
        victory_type=VictoryType(victory_type) if victory_type else None,
        defeat_type=DefeatType(defeat_type) if defeat_type else None,
        news_log=list(data.get("news_log") or defaults.news_log)[-NEWS_LOG_LIMIT:],
        metadata=dict(data.get("metadata") or {}),
    )
