"""
Victory/Defeat Evaluator - Pure function over a post-transition state.

Order:
1. Risk collapse (risk >= 100) is a hard defeat checked first; it blocks victory
2. Victory predicates, first true wins:
   Popular Mandate, Faction Dominance, Economic Power, Speed Run
3. Remaining defeats, only if no victory fired:
   Faction Abandonment, Bankruptcy, Time Out
"""

from __future__ import annotations
from dataclasses import dataclass

from .state import DefeatType, GameState, VictoryType
from ..providers.challenges import Challenge, ChallengeKind

MANDATE_AVERAGE = 80
MANDATE_REGION_THRESHOLD = 60
MANDATE_REGION_COUNT = 35
DOMINANCE_THRESHOLD = 95
ECONOMIC_FUNDS_EARNED = 500
ECONOMIC_CLOUT_EARNED = 200
SPEED_RUN_TURNS = 20
SPEED_RUN_AVERAGE = 75
RISK_COLLAPSE_THRESHOLD = 100
BANKRUPTCY_TURNS = 3
TIME_OUT_TURN = 50


@dataclass
class Verdict:
    victory_type: VictoryType | None = None
    defeat_type: DefeatType | None = None

    @property
    def is_terminal(self) -> bool:
        return self.victory_type is not None or self.defeat_type is not None


def check_victory(state: GameState, challenge: Challenge | None = None) -> VictoryType | None:
    average = state.average_support

    strong_regions = sum(1 for value in state.support.values() if value >= MANDATE_REGION_THRESHOLD)
    if average >= MANDATE_AVERAGE and strong_regions >= MANDATE_REGION_COUNT:
        return VictoryType.POPULAR_MANDATE

    if any(value >= DOMINANCE_THRESHOLD for value in state.faction_support.values()):
        return VictoryType.FACTION_DOMINANCE
    if challenge is not None and challenge.kind == ChallengeKind.FACTION_FOCUS:
        if state.faction_support.get(challenge.faction_id, 0) >= challenge.threshold:
            return VictoryType.FACTION_DOMINANCE

    if (state.total_funds_earned >= ECONOMIC_FUNDS_EARNED
            and state.total_clout_earned >= ECONOMIC_CLOUT_EARNED):
        return VictoryType.ECONOMIC_POWER

    turn_limit = SPEED_RUN_TURNS
    if challenge is not None and challenge.speed_run_turns is not None:
        turn_limit = challenge.speed_run_turns
    if state.turn <= turn_limit and average >= SPEED_RUN_AVERAGE:
        return VictoryType.SPEED_RUN

    return None


def check_defeat(state: GameState) -> DefeatType | None:
    """Defeats other than risk collapse."""
    if any(value <= 0 for value in state.faction_support.values()):
        return DefeatType.FACTION_ABANDONMENT
    if state.consecutive_negative_funds >= BANKRUPTCY_TURNS:
        return DefeatType.BANKRUPTCY
    if state.turn >= TIME_OUT_TURN:
        return DefeatType.TIME_OUT
    return None


def evaluate(state: GameState, challenge: Challenge | None = None) -> Verdict:
    if state.risk >= RISK_COLLAPSE_THRESHOLD:
        return Verdict(defeat_type=DefeatType.RISK_COLLAPSE)
    victory = check_victory(state, challenge)
    if victory is not None:
        return Verdict(victory_type=victory)
    return Verdict(defeat_type=check_defeat(state))


VICTORY_MESSAGES: dict[VictoryType, str] = {
    VictoryType.POPULAR_MANDATE: "VICTORY: Popular Mandate. The country is with you.",
    VictoryType.FACTION_DOMINANCE: "VICTORY: Faction Dominance. One faction is yours completely.",
    VictoryType.ECONOMIC_POWER: "VICTORY: Economic Power. Your movement is an institution.",
    VictoryType.SPEED_RUN: "VICTORY: Speed Run. A meteoric rise.",
}

DEFEAT_MESSAGES: dict[DefeatType, str] = {
    DefeatType.RISK_COLLAPSE: "GAME OVER: Risk collapse. The movement implodes under scrutiny.",
    DefeatType.FACTION_ABANDONMENT: "GAME OVER: A faction abandoned you entirely.",
    DefeatType.BANKRUPTCY: "GAME OVER: Bankrupt. The money ran out.",
    DefeatType.TIME_OUT: "GAME OVER: Out of time.",
}


def apply_verdict(state: GameState, challenge: Challenge | None = None) -> GameState:
    """Stamp terminal flags on a state. Already-terminal states are returned as is."""
    if state.is_terminal:
        return state
    verdict = evaluate(state, challenge)
    if verdict.victory_type is not None:
        return state._copy_with(
            victory=True, victory_type=verdict.victory_type,
        ).with_log(VICTORY_MESSAGES[verdict.victory_type])
    if verdict.defeat_type is not None:
        return state._copy_with(
            game_over=True, defeat_type=verdict.defeat_type,
        ).with_log(DEFEAT_MESSAGES[verdict.defeat_type])
    return state
