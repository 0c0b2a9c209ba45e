"""
Reel definitions for the three-reel spin front end.

Reel 1 picks the action, reel 2 a modifier, reel 3 a target. Every item
carries theme tags; overlapping tags across reels produce combos.
Action reel items map onto registry action ids so the spin shares cooldown
bookkeeping, diminishing returns and faction modifiers with plain actions.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from ..engine_core.errors import UnknownIdError
from ..engine_core.regions import ALL_KEY, REGION_GROUPS
from ..engine_core.registry import Cost

ACTION_REEL = "action"
MODIFIER_REEL = "modifier"
TARGET_REEL = "target"
REEL_NAMES: tuple[str, ...] = (ACTION_REEL, MODIFIER_REEL, TARGET_REEL)


@dataclass
class ReelEffects:
    """Effect block of a reel item. Multipliers of 1.0 mean untouched."""
    support: dict[str, int] = field(default_factory=dict)
    funds: int = 0
    clout: int = 0
    risk: int = 0
    support_multiplier: float = 1.0
    risk_multiplier: float = 1.0
    cost_multiplier: float = 1.0


@dataclass
class ReelItem:
    id: str
    name: str
    tags: tuple[str, ...]
    effects: ReelEffects = field(default_factory=ReelEffects)
    cost: Cost = field(default_factory=Cost)
    weight: float = 1.0
    risk_threshold: int | None = None  # unusable at or above this risk
    action_id: str | None = None  # registry id, action reel only
    target_regions: tuple[str, ...] | None = None  # None = nationwide, target reel only


ACTION_ITEMS: tuple[ReelItem, ...] = (
    ReelItem(
        id="meme", name="Meme Campaign", action_id="meme_campaign",
        tags=("digital", "viral", "youth", "risky"),
        effects=ReelEffects(support={ALL_KEY: 5}, risk=5),
        cost=Cost(clout=10), weight=1.2,
    ),
    ReelItem(
        id="rally", name="Rally", action_id="rally",
        tags=("grassroots", "aggressive", "rural", "blitz"),
        effects=ReelEffects(support={ALL_KEY: 8}, risk=4),
        cost=Cost(funds=35), weight=1.0,
    ),
    ReelItem(
        id="fundraise", name="Fundraise", action_id="fundraise",
        tags=("digital", "safe", "steady"),
        effects=ReelEffects(funds=40, risk=3),
        weight=1.3,
    ),
    ReelItem(
        id="podcast", name="Podcast", action_id="podcast",
        tags=("broadcast", "safe", "suburban", "steady"),
        effects=ReelEffects(support={ALL_KEY: 2}, clout=10, risk=2),
        cost=Cost(funds=20), weight=1.1,
    ),
    ReelItem(
        id="canvass", name="Canvass", action_id="canvass",
        tags=("grassroots", "safe", "suburban", "steady"),
        effects=ReelEffects(support={ALL_KEY: 4}, clout=2, risk=1),
        cost=Cost(funds=40), weight=1.0,
    ),
    ReelItem(
        id="debate", name="Debate", action_id="debate",
        tags=("broadcast", "aggressive", "risky", "blitz"),
        effects=ReelEffects(support={ALL_KEY: 6}, clout=15, risk=7),
        cost=Cost(funds=30, clout=15), weight=0.7,
    ),
    ReelItem(
        id="botarmy", name="Bot Army", action_id="bot_army",
        tags=("digital", "risky", "aggressive", "viral"),
        effects=ReelEffects(support={ALL_KEY: 4}, risk=12),
        cost=Cost(funds=25, clout=8), weight=0.6, risk_threshold=75,
    ),
    ReelItem(
        id="influencer", name="Influencer", action_id="influencer",
        tags=("digital", "youth", "viral", "urban"),
        effects=ReelEffects(support={ALL_KEY: 4}, clout=12, risk=5),
        cost=Cost(funds=55, clout=18), weight=0.8,
    ),
    ReelItem(
        id="legal", name="Legal Team", action_id="legal_fund",
        tags=("safe", "steady"),
        effects=ReelEffects(risk=-12, clout=3),
        cost=Cost(funds=120), weight=0.5,
    ),
)

MODIFIER_ITEMS: tuple[ReelItem, ...] = (
    ReelItem(
        id="viral", name="Viral", tags=("viral", "digital", "risky"),
        effects=ReelEffects(support_multiplier=1.5, risk=3), weight=0.8,
    ),
    ReelItem(
        id="grassroots", name="Grassroots", tags=("grassroots", "safe", "steady"),
        effects=ReelEffects(support_multiplier=0.8, risk_multiplier=0.5), weight=1.0,
    ),
    ReelItem(
        id="corporate", name="Corporate", tags=("suburban", "steady", "safe"),
        effects=ReelEffects(funds=20, support_multiplier=0.9), weight=0.9,
    ),
    ReelItem(
        id="underground", name="Underground", tags=("risky", "urban", "aggressive"),
        effects=ReelEffects(support_multiplier=1.3, risk=5, cost_multiplier=0.7), weight=0.7,
    ),
    ReelItem(
        id="mainstream", name="Mainstream", tags=("broadcast", "suburban", "safe"),
        effects=ReelEffects(clout=5, support_multiplier=1.1), weight=1.1,
    ),
    ReelItem(
        id="blitz", name="Blitz", tags=("blitz", "aggressive", "risky"),
        effects=ReelEffects(support_multiplier=1.4, risk=4, cost_multiplier=1.3), weight=0.6,
    ),
    ReelItem(
        id="stealth", name="Stealth", tags=("safe", "steady"),
        effects=ReelEffects(risk_multiplier=0.3, support_multiplier=0.7), weight=0.8,
    ),
    ReelItem(
        id="astroturf", name="Astroturf", tags=("digital", "risky", "viral"),
        effects=ReelEffects(support_multiplier=1.6, risk=8), weight=0.5, risk_threshold=80,
    ),
)

TARGET_ITEMS: tuple[ReelItem, ...] = (
    ReelItem(
        id="national", name="National", tags=("broadcast", "steady"),
        weight=1.2,
    ),
    ReelItem(
        id="midwest", name="Midwest", tags=("midwest", "rural", "grassroots"),
        effects=ReelEffects(support_multiplier=1.5),
        target_regions=REGION_GROUPS["midwest"], weight=1.0,
    ),
    ReelItem(
        id="coastal", name="Coastal", tags=("coastal", "urban", "digital"),
        effects=ReelEffects(support_multiplier=1.5),
        target_regions=REGION_GROUPS["coastal"], weight=1.0,
    ),
    ReelItem(
        id="south", name="South", tags=("south", "rural", "grassroots"),
        effects=ReelEffects(support_multiplier=1.5),
        target_regions=REGION_GROUPS["south"], weight=1.0,
    ),
    ReelItem(
        id="swing", name="Swing States", tags=("swing", "blitz", "aggressive"),
        effects=ReelEffects(support_multiplier=1.8, risk=2),
        target_regions=REGION_GROUPS["swing"], weight=0.7,
    ),
    ReelItem(
        id="youth", name="Youth Vote", tags=("youth", "digital", "urban"),
        effects=ReelEffects(support_multiplier=1.4, clout=3),
        target_regions=("CA", "NY", "TX", "FL", "IL", "PA", "OH", "MI", "GA", "NC"),
        weight=0.9,
    ),
    ReelItem(
        id="suburban", name="Suburbs", tags=("suburban", "safe", "steady"),
        effects=ReelEffects(support_multiplier=1.3, risk_multiplier=0.8),
        target_regions=("PA", "GA", "AZ", "MI", "WI", "NC", "VA", "CO", "NV", "NH"),
        weight=1.0,
    ),
    ReelItem(
        id="rural", name="Rural", tags=("rural", "grassroots", "midwest"),
        effects=ReelEffects(support_multiplier=1.4, funds=-10),
        target_regions=("WY", "MT", "ND", "SD", "NE", "KS", "OK", "ID", "WV", "AR"),
        weight=0.8,
    ),
)

REELS: dict[str, tuple[ReelItem, ...]] = {
    ACTION_REEL: ACTION_ITEMS,
    MODIFIER_REEL: MODIFIER_ITEMS,
    TARGET_REEL: TARGET_ITEMS,
}

_ITEMS_BY_REEL: dict[str, dict[str, ReelItem]] = {
    name: {item.id: item for item in items} for name, items in REELS.items()
}


def get_reel_item(reel: str, item_id: str) -> ReelItem | None:
    return _ITEMS_BY_REEL.get(reel, {}).get(item_id)


def require_reel_item(reel: str, item_id: str) -> ReelItem:
    item = get_reel_item(reel, item_id)
    if item is None:
        raise UnknownIdError(f"{reel} reel item", item_id)
    return item
