"""
Faction Definitions - Static faction tables for both faction modes.

A faction has:
- a base support percentage (starting value)
- an action modifier table: percent adjustment applied to an action's
  national support delta when converting it into this faction's delta
- an interest profile over theme tags, driving mood momentum
- one sabotage and one bonus template, fired from extreme moods
"""

from __future__ import annotations
from dataclasses import dataclass, field

from ..engine_core.errors import UnknownIdError
from ..engine_core.outcome import Outcome
from ..engine_core.state import FactionMode

# Sentiment impact per matched interest tag
LOVE_IMPACT = 15
LIKE_IMPACT = 8
DISLIKE_IMPACT = -8
HATE_IMPACT = -15


@dataclass
class FactionTemplate:
    """A titled outcome a faction can inflict or grant."""
    title: str
    outcome: Outcome


@dataclass
class FactionDefinition:
    """Static definition of one faction."""
    id: str
    name: str
    base_support: int
    action_modifiers: dict[str, int] = field(default_factory=dict)
    loves: tuple[str, ...] = ()
    likes: tuple[str, ...] = ()
    dislikes: tuple[str, ...] = ()
    hates: tuple[str, ...] = ()
    sabotage: FactionTemplate | None = None
    bonus: FactionTemplate | None = None

    def modifier_for(self, action_id: str) -> int:
        return self.action_modifiers.get(action_id, 0)

    def tag_impact(self, tag: str) -> int:
        """Sentiment impact of one theme tag on this faction."""
        if tag in self.loves:
            return LOVE_IMPACT
        if tag in self.likes:
            return LIKE_IMPACT
        if tag in self.dislikes:
            return DISLIKE_IMPACT
        if tag in self.hates:
            return HATE_IMPACT
        return 0


CLASSIC_FACTIONS: tuple[FactionDefinition, ...] = (
    FactionDefinition(
        id="tech_workers",
        name="Tech Workers",
        base_support=40,
        action_modifiers={
            "meme_campaign": 20, "fundraise": 0, "rally": -20, "bot_army": -80,
            "podcast": 50, "hashtag": 30, "debate": 40, "canvass": -30,
            "influencer": 20, "legal_fund": 10, "platform_hop": 60,
        },
        loves=("digital", "urban"),
        likes=("viral", "coastal", "broadcast"),
        dislikes=("rural", "grassroots"),
        hates=("aggressive",),
        sabotage=FactionTemplate(
            "Data Leak",
            Outcome(risk=12, clout=-15, message="Disgruntled engineers leak your internal chats."),
        ),
        bonus=FactionTemplate(
            "Open Source Army",
            Outcome(support={"coastal": 8}, clout=15, message="Volunteer developers rebuild your tooling for free."),
        ),
    ),
    FactionDefinition(
        id="rural_voters",
        name="Rural Voters",
        base_support=30,
        action_modifiers={
            "meme_campaign": -30, "fundraise": -10, "rally": 60, "bot_army": -40,
            "podcast": 20, "hashtag": -50, "debate": 30, "canvass": 80,
            "influencer": -40, "legal_fund": 0, "platform_hop": -20,
        },
        loves=("grassroots", "rural"),
        likes=("midwest", "south", "steady"),
        dislikes=("coastal", "urban"),
        hates=("digital",),
        sabotage=FactionTemplate(
            "Heartland Protest",
            Outcome(support={"random": -8}, risk=10, message="Farm towns turn out to protest your campaign."),
        ),
        bonus=FactionTemplate(
            "Heartland Volunteers",
            Outcome(support={"midwest": 10}, clout=10, message="Church halls across the Midwest open their doors."),
        ),
    ),
    FactionDefinition(
        id="young_activists",
        name="Young Activists",
        base_support=50,
        action_modifiers={
            "meme_campaign": 80, "fundraise": -20, "rally": 40, "bot_army": 10,
            "podcast": 30, "hashtag": 70, "debate": -10, "canvass": 30,
            "influencer": 60, "legal_fund": -30, "platform_hop": 40,
        },
        loves=("youth", "grassroots"),
        likes=("viral", "digital", "urban"),
        dislikes=("safe", "broadcast"),
        hates=("suburban",),
        sabotage=FactionTemplate(
            "Callout Thread",
            Outcome(clout=-20, risk=8, message="A viral thread accuses you of selling out."),
        ),
        bonus=FactionTemplate(
            "Progressive Surge",
            Outcome(support={"coastal": 8}, clout=15, message="Campus organizers adopt your cause."),
        ),
    ),
    FactionDefinition(
        id="moderates",
        name="Moderates",
        base_support=35,
        action_modifiers={
            "meme_campaign": -20, "fundraise": 30, "rally": -10, "bot_army": -90,
            "podcast": 40, "hashtag": -40, "debate": 60, "canvass": 50,
            "influencer": -20, "legal_fund": 50, "platform_hop": 0,
        },
        loves=("safe", "steady"),
        likes=("suburban", "broadcast", "swing"),
        dislikes=("aggressive", "viral"),
        hates=("risky",),
        sabotage=FactionTemplate(
            "Editorial Backlash",
            Outcome(support={"swing": -6}, risk=6, message="Op-ed pages line up against you."),
        ),
        bonus=FactionTemplate(
            "Swing Voter Shift",
            Outcome(support={"swing": 10}, message="Suburban swing voters warm to your message."),
        ),
    ),
    FactionDefinition(
        id="business_class",
        name="Business Class",
        base_support=25,
        action_modifiers={
            "meme_campaign": -10, "fundraise": 70, "rally": 0, "bot_army": 20,
            "podcast": 50, "hashtag": -10, "debate": 30, "canvass": -20,
            "influencer": 40, "legal_fund": 80, "platform_hop": 30,
        },
        loves=("steady", "broadcast"),
        likes=("safe", "suburban", "digital"),
        dislikes=("grassroots", "youth"),
        hates=("aggressive",),
        sabotage=FactionTemplate(
            "Donor Revolt",
            Outcome(funds=-50, clout=-10, message="Major donors freeze their pledges."),
        ),
        bonus=FactionTemplate(
            "Corporate Support",
            Outcome(funds=75, clout=10, message="A business roundtable writes a large check."),
        ),
    ),
)

POLITICAL_FACTIONS: tuple[FactionDefinition, ...] = (
    FactionDefinition(
        id="maga",
        name="MAGA",
        base_support=35,
        action_modifiers={
            "meme_campaign": 30, "fundraise": 20, "rally": 50, "bot_army": 10,
            "podcast": 10, "hashtag": -10, "debate": 20, "canvass": -10,
            "influencer": 0, "legal_fund": -30, "platform_hop": -30,
        },
        loves=("rural", "aggressive"),
        likes=("south", "midwest", "grassroots"),
        dislikes=("urban", "youth"),
        hates=("coastal",),
        sabotage=FactionTemplate(
            "Base Revolt",
            Outcome(support={"south": -6}, risk=10, message="The base turns on you at a packed rally."),
        ),
        bonus=FactionTemplate(
            "Rally Surge",
            Outcome(support={"random": 15}, clout=10, message="Overflow crowds at every stop."),
        ),
    ),
    FactionDefinition(
        id="america_first",
        name="America First",
        base_support=35,
        action_modifiers={
            "meme_campaign": -10, "fundraise": 0, "rally": 0, "bot_army": -20,
            "podcast": 30, "hashtag": 10, "debate": 0, "canvass": 40,
            "influencer": 20, "legal_fund": 30, "platform_hop": 0,
        },
        loves=("swing", "steady"),
        likes=("suburban", "safe", "broadcast"),
        dislikes=("risky", "viral"),
        hates=("aggressive",),
        sabotage=FactionTemplate(
            "Coalition Walkout",
            Outcome(support={"swing": -8}, clout=-10, message="Coalition partners walk out of a joint event."),
        ),
        bonus=FactionTemplate(
            "Coalition Builder",
            Outcome(support={"swing": 12}, funds=30, message="Swing-state chapters merge into your coalition."),
        ),
    ),
    FactionDefinition(
        id="liberal",
        name="Liberals",
        base_support=35,
        action_modifiers={
            "meme_campaign": 40, "fundraise": -10, "rally": -20, "bot_army": 30,
            "podcast": 10, "hashtag": 50, "debate": 0, "canvass": -20,
            "influencer": 30, "legal_fund": 0, "platform_hop": 20,
        },
        loves=("coastal", "digital"),
        likes=("youth", "urban", "viral"),
        dislikes=("rural", "south"),
        hates=("aggressive",),
        sabotage=FactionTemplate(
            "Cancel Campaign",
            Outcome(clout=-20, risk=8, message="A cancel campaign targets your spokespeople."),
        ),
        bonus=FactionTemplate(
            "Viral Moment",
            Outcome(support={"coastal": 10}, clout=20, message="Your clip is everywhere on the coasts."),
        ),
    ),
)

FACTIONS_BY_MODE: dict[FactionMode, tuple[FactionDefinition, ...]] = {
    FactionMode.CLASSIC: CLASSIC_FACTIONS,
    FactionMode.POLITICAL: POLITICAL_FACTIONS,
}

# Percent adjustment of an event's national support delta per faction (classic mode)
EVENT_CATEGORY_MODIFIERS: dict[str, dict[str, int]] = {
    "tech": {"tech_workers": 50, "young_activists": 20, "rural_voters": -20, "moderates": 0, "business_class": 30},
    "media": {"tech_workers": 10, "young_activists": 30, "rural_voters": -10, "moderates": 20, "business_class": 0},
    "political": {"tech_workers": -10, "young_activists": 40, "rural_voters": 20, "moderates": 30, "business_class": 10},
    "economic": {"tech_workers": 20, "young_activists": -20, "rural_voters": 10, "moderates": 20, "business_class": 60},
    "cultural": {"tech_workers": 0, "young_activists": 50, "rural_voters": -30, "moderates": -20, "business_class": -10},
}


def factions_for(mode: FactionMode) -> tuple[FactionDefinition, ...]:
    return FACTIONS_BY_MODE[mode]


def faction_ids(mode: FactionMode) -> list[str]:
    return [f.id for f in FACTIONS_BY_MODE[mode]]


def get_faction(mode: FactionMode, faction_id: str) -> FactionDefinition:
    """Look up a faction; unknown ids raise UnknownIdError."""
    for faction in FACTIONS_BY_MODE[mode]:
        if faction.id == faction_id:
            return faction
    raise UnknownIdError("faction", faction_id)
