"""
Challenges - Optional run constraints consulted by the core.

A challenge is a single modifier. The core asks it questions at the
points where it matters:
- eligibility: is this action blocked?
- modifier pipeline: risk and funds scaling
- event scheduler: event frequency multiplier
- state construction: starting risk/support overrides
- victory evaluation: speed-run turn limit, faction focus
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum

from ..engine_core.errors import UnknownIdError


class ChallengeKind(Enum):
    DOUBLE_RISK = "double_risk"
    HALF_FUNDS = "half_funds"
    NO_MEMES = "no_memes"
    SPEED_RUN = "speed_run"
    HIGH_RISK_START = "high_risk_start"
    LOW_SUPPORT_START = "low_support_start"
    FACTION_FOCUS = "faction_focus"
    NO_BOT_ARMY = "no_bot_army"
    LIMITED_ACTIONS = "limited_actions"
    DOUBLE_EVENTS = "double_events"


@dataclass
class Challenge:
    """
    One challenge modifier.

    Which optional fields matter depends on kind:
    amount (HIGH_RISK_START, LOW_SUPPORT_START), action_ids (LIMITED_ACTIONS),
    faction_id + threshold (FACTION_FOCUS), turns (SPEED_RUN).
    """
    id: str
    name: str
    kind: ChallengeKind
    description: str = ""
    amount: int = 0
    action_ids: tuple[str, ...] = ()
    faction_id: str | None = None
    threshold: int = 0
    turns: int = 0

    def blocks_action(self, action_id: str) -> bool:
        if self.kind == ChallengeKind.NO_MEMES:
            return action_id == "meme_campaign"
        if self.kind == ChallengeKind.NO_BOT_ARMY:
            return action_id == "bot_army"
        if self.kind == ChallengeKind.LIMITED_ACTIONS:
            return action_id not in self.action_ids
        return False

    @property
    def risk_gain_multiplier(self) -> float:
        return 2.0 if self.kind == ChallengeKind.DOUBLE_RISK else 1.0

    @property
    def funds_gain_multiplier(self) -> float:
        return 0.5 if self.kind == ChallengeKind.HALF_FUNDS else 1.0

    @property
    def event_frequency_multiplier(self) -> float:
        return 2.0 if self.kind == ChallengeKind.DOUBLE_EVENTS else 1.0

    @property
    def speed_run_turns(self) -> int | None:
        return self.turns if self.kind == ChallengeKind.SPEED_RUN else None


CHALLENGES: tuple[Challenge, ...] = (
    Challenge(
        id="grassroots_only",
        name="Grassroots Movement",
        kind=ChallengeKind.LIMITED_ACTIONS,
        description="Bot Army and Influencer Partnership disabled",
        action_ids=(
            "meme_campaign", "fundraise", "rally", "podcast", "hashtag",
            "debate", "canvass", "legal_fund", "platform_hop",
        ),
    ),
    Challenge(
        id="organic_growth",
        name="Organic Growth",
        kind=ChallengeKind.NO_BOT_ARMY,
        description="Bot Army action disabled",
    ),
    Challenge(
        id="event_heavy",
        name="Chaos Mode",
        kind=ChallengeKind.DOUBLE_EVENTS,
        description="Events trigger twice as often",
    ),
    Challenge(
        id="speed_runner",
        name="Speed Runner",
        kind=ChallengeKind.SPEED_RUN,
        description="Win within 20 turns",
        turns=20,
    ),
    Challenge(
        id="budget_campaign",
        name="Budget Campaign",
        kind=ChallengeKind.HALF_FUNDS,
        description="Action funds gains halved",
    ),
    Challenge(
        id="risky_business",
        name="Risky Business",
        kind=ChallengeKind.HIGH_RISK_START,
        description="Start with 30% risk",
        amount=30,
    ),
    Challenge(
        id="underdog_story",
        name="Underdog Story",
        kind=ChallengeKind.LOW_SUPPORT_START,
        description="Start with 1% support in all regions",
        amount=1,
    ),
    Challenge(
        id="tech_focus",
        name="Silicon Valley",
        kind=ChallengeKind.FACTION_FOCUS,
        description="Get Tech Workers to 80% support to win",
        faction_id="tech_workers",
        threshold=80,
    ),
    Challenge(
        id="heartland_focus",
        name="Heartland Hero",
        kind=ChallengeKind.FACTION_FOCUS,
        description="Get Rural Voters to 80% support to win",
        faction_id="rural_voters",
        threshold=80,
    ),
    Challenge(
        id="double_trouble",
        name="Double Trouble",
        kind=ChallengeKind.DOUBLE_RISK,
        description="Action risk increases doubled",
    ),
    Challenge(
        id="blitz_mode",
        name="Blitz Victory",
        kind=ChallengeKind.SPEED_RUN,
        description="Win within 10 turns",
        turns=10,
    ),
    Challenge(
        id="danger_zone",
        name="Danger Zone",
        kind=ChallengeKind.HIGH_RISK_START,
        description="Start with 50% risk",
        amount=50,
    ),
    Challenge(
        id="no_memes_allowed",
        name="Boomer Mode",
        kind=ChallengeKind.NO_MEMES,
        description="Meme Campaign action disabled",
    ),
)

_CHALLENGES_BY_ID: dict[str, Challenge] = {c.id: c for c in CHALLENGES}


def get_challenge(challenge_id: str) -> Challenge | None:
    return _CHALLENGES_BY_ID.get(challenge_id)


def require_challenge(challenge_id: str) -> Challenge:
    challenge = _CHALLENGES_BY_ID.get(challenge_id)
    if challenge is None:
        raise UnknownIdError("challenge", challenge_id)
    return challenge
