"""
One-shot event pool.

Templates either offer options (the event becomes the pending event) or
carry a single narrative outcome applied on the spot.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from ..engine_core.outcome import Outcome
from ..engine_core.state import EventOption

TECH = "tech"
MEDIA = "media"
POLITICAL = "political"
ECONOMIC = "economic"
CULTURAL = "cultural"
EVENT_CATEGORIES: tuple[str, ...] = (TECH, MEDIA, POLITICAL, ECONOMIC, CULTURAL)


@dataclass
class EventTemplate:
    id: str
    category: str
    title: str
    description: str
    options: tuple[EventOption, ...] = ()
    outcome: Outcome | None = None  # narrative events only
    min_turn: int = 0
    max_risk: int | None = None
    min_support: float | None = None

    @property
    def is_narrative(self) -> bool:
        return not self.options

    @property
    def offers_risk_relief(self) -> bool:
        if self.outcome is not None and self.outcome.risk < 0:
            return True
        return any(option.outcome.risk < 0 for option in self.options)


def _option(text: str, **deltas) -> EventOption:
    message = deltas.pop("message", None)
    return EventOption(text=text, outcome=Outcome(message=message, **deltas))


EVENT_POOL: tuple[EventTemplate, ...] = (
    # Tech
    EventTemplate(
        id="algorithm_change",
        category=TECH,
        title="Algorithm Shakeup",
        description="A major platform rewrote its feed ranking. Your reach fell off a cliff overnight.",
        options=(
            _option("Pivot to short-form video", funds=-20, clout=15, risk=3,
                    message="The pivot is pricey, but the new format is catching on."),
            _option("Move your followers to another platform", support={"ALL": -2}, clout=25, risk=-5,
                    message="Casual followers drift away; the core base comes with you."),
            _option("Buy promoted posts", funds=-40, support={"ALL": 3}, risk=5,
                    message="Expensive, but new audiences are seeing you again."),
        ),
    ),
    EventTemplate(
        id="shadowban_warning",
        category=TECH,
        title="Shadowban Warning",
        description="Word is your accounts have been flagged for review.",
        min_turn=3,
        options=(
            _option("Tone it down", risk=-15, clout=-10,
                    message="Safer, though your edgier fans grumble."),
            _option("Go big before the hammer drops", support={"ALL": 5}, clout=20, risk=20,
                    message="The defiance goes viral. You are on borrowed time."),
            _option("Archive everything", funds=-15, risk=-8,
                    message="Your content is backed up and your exposure is lower."),
        ),
    ),
    EventTemplate(
        id="trending_worldwide",
        category=TECH,
        title="You Are Trending",
        description="One of your posts hit the algorithm just right.",
        outcome=Outcome(clout=30, support={"ALL": 4}, risk=8,
                        message="Huge exposure brings huge scrutiny."),
    ),
    # Media
    EventTemplate(
        id="cable_interview",
        category=MEDIA,
        title="Prime Time Invite",
        description="A cable news host wants you on tonight's show.",
        options=(
            _option("Take the interview", support={"ALL": 3}, clout=15, risk=6,
                    message="You hold your own under tough questions."),
            _option("Send a spokesperson", clout=5, risk=1,
                    message="A safe, forgettable segment."),
        ),
    ),
    EventTemplate(
        id="hit_piece",
        category=MEDIA,
        title="Hit Piece",
        description="A national paper runs an unflattering profile of your movement.",
        options=(
            _option("Publish a point-by-point rebuttal", clout=10, risk=-3,
                    message="Your rebuttal gets more reads than the article."),
            _option("Ignore it", support={"ALL": -2},
                    message="The story fades, but some of it sticks."),
            _option("Threaten to sue", funds=-30, risk=-8, clout=-5,
                    message="The paper adds an editor's note."),
        ),
    ),
    EventTemplate(
        id="documentary_feature",
        category=MEDIA,
        title="Documentary Feature",
        description="A streaming documentary spends ten minutes on your movement.",
        min_support=20,
        outcome=Outcome(support={"coastal": 4}, clout=12,
                        message="Viewers on the coasts are curious about you."),
    ),
    # Political
    EventTemplate(
        id="senator_endorsement",
        category=POLITICAL,
        title="Senator Calling",
        description="A sitting senator offers a public endorsement, for a price.",
        min_turn=4,
        options=(
            _option("Accept the endorsement", support={"swing": 6}, funds=-25, risk=4,
                    message="Swing-state voters take notice."),
            _option("Stay independent", clout=8, risk=-2,
                    message="Your independence plays well with the base."),
        ),
    ),
    EventTemplate(
        id="town_hall_protest",
        category=POLITICAL,
        title="Town Hall Showdown",
        description="Counter-protesters plan to disrupt your next town hall.",
        options=(
            _option("Meet them head on", support={"midwest": 5}, risk=10,
                    message="The confrontation makes the evening news."),
            _option("Move the event online", clout=-5, risk=-6,
                    message="A quieter event with no incidents."),
            _option("Invite them onstage", support={"ALL": 2}, clout=10, risk=3,
                    message="The open exchange earns grudging respect."),
        ),
    ),
    EventTemplate(
        id="ethics_complaint",
        category=POLITICAL,
        title="Ethics Complaint",
        description="A watchdog group filed a complaint about your finances.",
        min_turn=6,
        options=(
            _option("Open your books", funds=-20, risk=-12,
                    message="Transparency takes the air out of the story."),
            _option("Call it a smear", clout=6, risk=8,
                    message="Your base rallies; regulators keep watching."),
        ),
    ),
    # Economic
    EventTemplate(
        id="big_donor",
        category=ECONOMIC,
        title="Big Donor",
        description="A wealthy backer offers a large check with strings attached.",
        options=(
            _option("Take the money", funds=80, risk=10, clout=-5,
                    message="Your war chest swells. So do the questions."),
            _option("Decline politely", clout=8,
                    message="Grassroots supporters respect the refusal."),
        ),
    ),
    EventTemplate(
        id="merch_drop",
        category=ECONOMIC,
        title="Merch Drop",
        description="Your design team has a new line of shirts ready.",
        options=(
            _option("Launch it nationally", funds=45, risk=2,
                    message="The shirts sell out in a day."),
            _option("Limited run for volunteers", funds=15, support={"ALL": 1},
                    message="Volunteers wear them proudly."),
        ),
    ),
    EventTemplate(
        id="payment_processor",
        category=ECONOMIC,
        title="Payment Processor Freeze",
        description="Your payment processor froze donations pending a review.",
        min_turn=4,
        options=(
            _option("Switch processors", funds=-15, risk=-4,
                    message="A week of lost donations, then business as usual."),
            _option("Take donations in crypto", funds=30, risk=12,
                    message="Money flows in. So do the headlines."),
        ),
    ),
    EventTemplate(
        id="small_donor_wave",
        category=ECONOMIC,
        title="Small Donor Wave",
        description="A viral clip sends a wave of five-dollar donations your way.",
        outcome=Outcome(funds=35, message="Thousands of small donations arrive overnight."),
    ),
    # Cultural
    EventTemplate(
        id="celebrity_shoutout",
        category=CULTURAL,
        title="Celebrity Shoutout",
        description="A pop star mentioned your movement during a concert.",
        options=(
            _option("Amplify it everywhere", support={"ALL": 3}, clout=12, risk=4,
                    message="Young fans flood your channels."),
            _option("Send a thank-you note", clout=5,
                    message="A classy response that earns some goodwill."),
        ),
    ),
    EventTemplate(
        id="meme_backlash",
        category=CULTURAL,
        title="Meme Backfire",
        description="One of your memes is being read very differently than you intended.",
        options=(
            _option("Apologize", clout=-8, risk=-10,
                    message="The apology lands. The story dies."),
            _option("Double down", support={"ALL": -1}, clout=10, risk=12,
                    message="Your base loves it. Everyone else does not."),
            _option("Turn it into a new meme", clout=6, risk=2,
                    message="The internet appreciates the self-awareness."),
        ),
    ),
    EventTemplate(
        id="county_fair",
        category=CULTURAL,
        title="County Fair Circuit",
        description="Volunteers worked the county fair circuit all weekend.",
        max_risk=60,
        outcome=Outcome(support={"south": 3}, risk=-2,
                        message="Friendly conversations across the South."),
    ),
)
