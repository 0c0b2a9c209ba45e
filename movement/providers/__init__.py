"""
Providers - External collaborators the core consults.

- advisors: roster provider and ability tables
- challenges: optional run constraints
- bonuses: starting bonuses from meta-progression
- persistence: whole-state JSON store (import movement.providers.persistence)
"""

from .advisors import (
    ADVISORS,
    DEFAULT_ROSTER,
    AbilityType,
    Advisor,
    AdvisorAbility,
    AdvisorRegistry,
    AdvisorRoster,
    AdvisorRosterProvider,
    StaticRoster,
)
from .challenges import CHALLENGES, Challenge, ChallengeKind, get_challenge, require_challenge
from .bonuses import StartingBonus

__all__ = [
    "ADVISORS",
    "DEFAULT_ROSTER",
    "AbilityType",
    "Advisor",
    "AdvisorAbility",
    "AdvisorRegistry",
    "AdvisorRoster",
    "AdvisorRosterProvider",
    "StaticRoster",
    "CHALLENGES",
    "Challenge",
    "ChallengeKind",
    "get_challenge",
    "require_challenge",
    "StartingBonus",
]
