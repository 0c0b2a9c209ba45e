"""
Engine Core - Deterministic campaign state and turn resolution.

The engine is the runtime that:
1. Builds or rehydrates a GameState
2. Lists actions with adjusted costs and eligibility
3. Runs the modifier pipeline over action outcomes
4. Applies intents atomically via the reducer
5. Stamps victory and defeat

Only leaf modules are re-exported here. Import the reducer, setup,
modifiers and victory modules directly; they depend on the factions,
events, spin and providers packages.
"""

from .errors import RejectionCode, UnknownIdError, InvariantViolation
from .rng import RandomSource, make_rng
from .outcome import Outcome, round_half_away
from .regions import REGION_CODES, REGION_GROUPS, ALL_KEY
from .state import (
    GameState,
    FactionMode,
    MoodLevel,
    VictoryType,
    DefeatType,
    GameEvent,
    EventOption,
    EventContext,
    SpinState,
)
from .registry import ActionDefinition, ActionRegistry, Cost, DiminishingConfig, default_registry
from .risk import RiskZone, risk_zone
from .action import Intent, IntentType, ActionResult
from .action_generator import ActionGenerator, ActionOption

__all__ = [
    "RejectionCode",
    "UnknownIdError",
    "InvariantViolation",
    "RandomSource",
    "make_rng",
    "Outcome",
    "round_half_away",
    "REGION_CODES",
    "REGION_GROUPS",
    "ALL_KEY",
    "GameState",
    "FactionMode",
    "MoodLevel",
    "VictoryType",
    "DefeatType",
    "GameEvent",
    "EventOption",
    "EventContext",
    "SpinState",
    "ActionDefinition",
    "ActionRegistry",
    "Cost",
    "DiminishingConfig",
    "default_registry",
    "RiskZone",
    "risk_zone",
    "Intent",
    "IntentType",
    "ActionResult",
    "ActionGenerator",
    "ActionOption",
]
