"""
Spin Machine - Reel draws, rerolls and the spin's base outcome.

Flow of one spin round:
1. spin_reels() with no current spin draws all three reels for free
2. Further spin_reels() calls reroll the unlocked reels; each reroll costs
   clout that grows with the number of rerolls this round
3. build_spin_outcome() turns the reels into a base Outcome, which the
   reducer then runs through the same pipeline as a plain action

The spin itself never touches GameState; the reducer owns bookkeeping.
"""

from __future__ import annotations
from dataclasses import dataclass

from ..engine_core.outcome import Outcome, round_half_away
from ..engine_core.regions import ALL_KEY
from ..engine_core.rng import RandomSource, weighted_choice
from ..engine_core.state import SpinState
from .combo import ComboResult, calculate_combo_multiplier
from .reels import (
    ACTION_REEL,
    MODIFIER_REEL,
    TARGET_REEL,
    REEL_NAMES,
    REELS,
    ReelItem,
    require_reel_item,
)

REROLL_BASE_COST = 5
REROLL_GROWTH = 0.6
MAX_LOCKED_REELS = 2


def reroll_cost(rerolls: int) -> int:
    """Clout cost of the next reroll, given rerolls already made this round."""
    return round_half_away(REROLL_BASE_COST * (1 + rerolls * REROLL_GROWTH))


def draw_reel(reel: str, rng: RandomSource) -> ReelItem:
    items = REELS[reel]
    return weighted_choice(rng, items, [item.weight for item in items])


def spin_reels(current: SpinState | None, locked: list[str] | tuple[str, ...], rng: RandomSource) -> SpinState:
    """
    Draw a new reel result.

    Locked reels keep their current item. Locks only apply to an existing
    spin, and at most MAX_LOCKED_REELS may be held; callers validate that.
    Draws happen in reel order, one rng.random() per unlocked reel.
    """
    held = [name for name in REEL_NAMES if name in locked] if current is not None else []
    picks: dict[str, str] = {}
    for name in REEL_NAMES:
        if name in held:
            picks[name] = getattr(current, f"{name}_id")
        else:
            picks[name] = draw_reel(name, rng).id
    return SpinState(
        action_id=picks[ACTION_REEL],
        modifier_id=picks[MODIFIER_REEL],
        target_id=picks[TARGET_REEL],
        locked=held,
        rerolls=current.rerolls + 1 if current is not None else 0,
    )


@dataclass
class ReelResult:
    """The three resolved reel items plus their combo."""
    action: ReelItem
    modifier: ReelItem
    target: ReelItem
    combo: ComboResult

    @property
    def tags(self) -> list[str]:
        seen: dict[str, None] = {}
        for item in (self.action, self.modifier, self.target):
            seen.update(dict.fromkeys(item.tags))
        return list(seen)

    @property
    def label(self) -> str:
        return f"{self.action.name} + {self.modifier.name} targeting {self.target.name}"


def resolve_reels(spin: SpinState) -> ReelResult:
    """Look up reel items for a spin state. Raises UnknownIdError for bad ids."""
    action = require_reel_item(ACTION_REEL, spin.action_id)
    modifier = require_reel_item(MODIFIER_REEL, spin.modifier_id)
    target = require_reel_item(TARGET_REEL, spin.target_id)
    return ReelResult(action, modifier, target, calculate_combo_multiplier(action, modifier, target))


def risk_threshold_block(result: ReelResult, risk: int) -> str | None:
    """Reason string if any reel item is unusable at this risk level."""
    for item in (result.action, result.modifier, result.target):
        if item.risk_threshold is not None and risk >= item.risk_threshold:
            return f"{item.name} is locked at {item.risk_threshold}% risk or higher"
    return None


def _apply_target(support: dict[str, int], target: ReelItem) -> dict[str, int]:
    if target.target_regions is None:
        return dict(support)
    multiplier = target.effects.support_multiplier
    result: dict[str, int] = {}
    for key, amount in support.items():
        if key == ALL_KEY:
            for code in target.target_regions:
                result[code] = result.get(code, 0) + round_half_away(amount * multiplier)
        elif key in target.target_regions:
            result[key] = result.get(key, 0) + round_half_away(amount * multiplier)
        else:
            result[key] = result.get(key, 0) + amount
    return result


def build_spin_outcome(result: ReelResult) -> Outcome:
    """
    Base outcome of a spin.

    Order: action effects, modifier (support/risk multipliers, flat deltas),
    target (focus support onto its regions, flat deltas, risk multiplier),
    then the combo multiplier on positive gains.
    """
    action = result.action.effects
    modifier = result.modifier.effects
    target = result.target.effects

    support = {
        key: round_half_away(amount * modifier.support_multiplier)
        for key, amount in action.support.items()
    }
    risk = round_half_away(action.risk * modifier.risk_multiplier) + modifier.risk
    funds = action.funds + modifier.funds
    clout = action.clout + modifier.clout

    support = _apply_target(support, result.target)
    risk = round_half_away(risk * target.risk_multiplier) + target.risk
    funds += target.funds
    clout += target.clout

    message = result.label
    if result.combo.name:
        message += f" [{result.combo.name}! x{result.combo.multiplier}]"

    outcome = Outcome(support=support, funds=funds, clout=clout, risk=risk, message=message)
    if result.combo.multiplier > 1.0:
        outcome = outcome.scale_gains(result.combo.multiplier)
    return outcome
