"""
Spin subsystem - Three-reel alternative to picking an action directly.
"""

from .reels import (
    ACTION_REEL,
    MODIFIER_REEL,
    TARGET_REEL,
    REEL_NAMES,
    REELS,
    ReelEffects,
    ReelItem,
    get_reel_item,
    require_reel_item,
)
from .combo import (
    JACKPOT_MULTIPLIER,
    NAMED_COMBOS,
    ComboResult,
    NamedCombo,
    calculate_combo_multiplier,
)
from .machine import (
    MAX_LOCKED_REELS,
    ReelResult,
    build_spin_outcome,
    reroll_cost,
    resolve_reels,
    risk_threshold_block,
    spin_reels,
)

__all__ = [
    "ACTION_REEL",
    "MODIFIER_REEL",
    "TARGET_REEL",
    "REEL_NAMES",
    "REELS",
    "ReelEffects",
    "ReelItem",
    "get_reel_item",
    "require_reel_item",
    "JACKPOT_MULTIPLIER",
    "NAMED_COMBOS",
    "ComboResult",
    "NamedCombo",
    "calculate_combo_multiplier",
    "MAX_LOCKED_REELS",
    "ReelResult",
    "build_spin_outcome",
    "reroll_cost",
    "resolve_reels",
    "risk_threshold_block",
    "spin_reels",
]
