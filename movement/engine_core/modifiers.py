"""
Modifier Pipeline - Turns a base Outcome into the final Outcome.

Stages, in this exact order:
1. Diminishing returns (consecutive uses of the same action)
2. Critical hit OR first-action-of-session bonus (critical wins)
3. Advisor ability bonuses
4. Challenge scaling (risk gains, funds gains)

Each stage rounds half away from zero before the next stage runs, so
rounding error is visible downstream. The order is load-bearing and
pinned by tests; do not fuse or reorder stages.

Cost adjustment lives here too because it uses the same inputs
(advisor discounts, risk zone).
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from .outcome import Outcome, round_half_away
from .registry import Cost, DiminishingConfig
from .risk import zone_config
from .rng import RandomSource
from ..providers.advisors import AbilityType, AdvisorRoster
from ..providers.challenges import Challenge

logger = logging.getLogger(__name__)

BASE_CRITICAL_CHANCE = 0.10
CRITICAL_MULTIPLIER = 2.0
FIRST_ACTION_MULTIPLIER = 1.5


@dataclass
class PipelineResult:
    """Final outcome plus what each stage did, for logs and UI."""
    outcome: Outcome
    diminishing_multiplier: float = 1.0
    critical: bool = False
    first_action_bonus: bool = False
    notes: list[str] = field(default_factory=list)


def adjusted_cost(
    cost: Cost,
    action_id: str,
    roster: AdvisorRoster,
    risk: int,
    cost_multiplier: float = 1.0,
) -> Cost:
    """
    Cost after advisor discounts and the risk-zone multiplier.

    adjusted = round(base * (1 - discount/100) * zone_multiplier), per resource.
    cost_multiplier is an extra factor (spin modifiers) applied to the base.
    """
    discount = roster.discount_percent(action_id)
    zone_multiplier = zone_config(risk).cost_multiplier

    def adjust(base: int) -> int:
        if base <= 0:
            return 0
        return round_half_away(base * cost_multiplier * (1 - discount / 100) * zone_multiplier)

    return Cost(funds=adjust(cost.funds), clout=adjust(cost.clout))


def critical_chance(roster: AdvisorRoster) -> float:
    return BASE_CRITICAL_CHANCE + roster.critical_bonus_percent() / 100


def apply_pipeline(
    base: Outcome,
    action_id: str,
    diminishing: DiminishingConfig,
    consecutive_uses: int,
    roster: AdvisorRoster,
    rng: RandomSource,
    session_first_action: bool = False,
    challenge: Challenge | None = None,
) -> PipelineResult:
    """
    Run all four stages over a base outcome.

    Consumes exactly one rng.random() draw (the critical roll).
    """
    result = PipelineResult(outcome=base)

    # 1. Diminishing returns
    multiplier = diminishing.multiplier(consecutive_uses)
    result.diminishing_multiplier = multiplier
    if multiplier < 1.0:
        result.outcome = result.outcome.scale_gains(multiplier)
        result.notes.append(f"Diminishing returns: {int(multiplier * 100)}% strength")

    # 2. Critical hit or first-action bonus
    roll = rng.random()
    if roll < critical_chance(roster):
        result.critical = True
        result.outcome = result.outcome.scale_gains(CRITICAL_MULTIPLIER)
        result.notes.append("CRITICAL HIT! Gains doubled.")
    elif session_first_action:
        result.first_action_bonus = True
        result.outcome = result.outcome.scale_gains(FIRST_ACTION_MULTIPLIER)
        result.notes.append("First action bonus: gains x1.5")

    # 3. Advisor bonuses
    result.outcome = apply_advisor_bonuses(result.outcome, action_id, roster)

    # 4. Challenge scaling
    if challenge is not None:
        result.outcome = apply_challenge_scaling(result.outcome, challenge)

    logger.debug(
        "pipeline %s: dim=%.2f crit=%s first=%s -> %s",
        action_id, multiplier, result.critical, result.first_action_bonus, result.outcome,
    )
    return result


def apply_advisor_bonuses(outcome: Outcome, action_id: str, roster: AdvisorRoster) -> Outcome:
    """Advisor stage: action bonus, then global support/clout/funds bonuses, then risk reduction."""
    action_pct = roster.action_bonus_percent(action_id)
    if action_pct:
        outcome = outcome.scale_gains(1 + action_pct / 100)

    support_pct = roster.bonus_percent(AbilityType.SUPPORT_BONUS)
    if support_pct:
        outcome = outcome.scale_gains(1 + support_pct / 100, clout=False, funds=False)

    clout_pct = roster.bonus_percent(AbilityType.CLOUT_BONUS)
    if clout_pct:
        outcome = outcome.scale_gains(1 + clout_pct / 100, support=False, funds=False)

    funds_pct = roster.bonus_percent(AbilityType.FUNDS_BONUS)
    if funds_pct:
        outcome = outcome.scale_gains(1 + funds_pct / 100, support=False, clout=False)

    reduction_pct = min(roster.bonus_percent(AbilityType.RISK_REDUCTION), 100)
    if reduction_pct:
        outcome = outcome.scale_risk_gain(1 - reduction_pct / 100)

    return outcome


def apply_challenge_scaling(outcome: Outcome, challenge: Challenge) -> Outcome:
    """Challenge stage: scale risk gains and funds gains."""
    if challenge.risk_gain_multiplier != 1.0:
        outcome = outcome.scale_risk_gain(challenge.risk_gain_multiplier)
    if challenge.funds_gain_multiplier != 1.0:
        outcome = outcome.scale_gains(challenge.funds_gain_multiplier, support=False, clout=False)
    return outcome
