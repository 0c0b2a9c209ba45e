"""
Event Chains - Multi-step narrative arcs.

A chain is a small state machine: each step shows options, each option
carries an outcome and optionally names the next step. An option with no
next step ends the chain. Loops back to earlier steps are allowed.

ChainRegistry validates every chain when it is built: unknown next steps,
duplicate step ids or a step without options raise InvariantViolation,
since they are data bugs rather than runtime conditions.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable

from ..engine_core.errors import InvariantViolation, UnknownIdError
from ..engine_core.outcome import Outcome
from ..engine_core.state import EventOption, GameEvent
from .pool import ECONOMIC, MEDIA, POLITICAL


@dataclass
class ChainStep:
    step_id: str
    title: str
    description: str
    options: tuple[EventOption, ...]


@dataclass
class ChainDefinition:
    chain_id: str
    name: str
    category: str
    min_turn: int
    trigger_chance: float
    steps: tuple[ChainStep, ...]

    @property
    def first_step(self) -> ChainStep:
        return self.steps[0]

    def get_step(self, step_id: str) -> ChainStep | None:
        for step in self.steps:
            if step.step_id == step_id:
                return step
        return None

    def to_event(self, step: ChainStep) -> GameEvent:
        """Instantiate a step as a pending event (options are copied)."""
        return GameEvent(
            event_id=f"{self.chain_id}:{step.step_id}",
            title=step.title,
            description=step.description,
            category=self.category,
            options=[EventOption(o.text, o.outcome, o.next_step) for o in step.options],
            chain_id=self.chain_id,
            step_id=step.step_id,
        )


class ChainRegistry:
    """Validated catalog of event chains."""

    def __init__(self, chains: Iterable[ChainDefinition]):
        self._chains: dict[str, ChainDefinition] = {}
        for chain in chains:
            self._validate(chain)
            if chain.chain_id in self._chains:
                raise InvariantViolation(f"duplicate chain id: {chain.chain_id}")
            self._chains[chain.chain_id] = chain

    @staticmethod
    def _validate(chain: ChainDefinition) -> None:
        if not chain.steps:
            raise InvariantViolation(f"chain {chain.chain_id} has no steps")
        step_ids = [s.step_id for s in chain.steps]
        if len(set(step_ids)) != len(step_ids):
            raise InvariantViolation(f"chain {chain.chain_id} has duplicate step ids")
        for step in chain.steps:
            if not step.options:
                raise InvariantViolation(f"chain step {step.step_id} has no options")
            for option in step.options:
                if option.next_step is not None and option.next_step not in step_ids:
                    raise InvariantViolation(
                        f"chain step {step.step_id} points at unknown step {option.next_step}"
                    )

    def get(self, chain_id: str) -> ChainDefinition | None:
        return self._chains.get(chain_id)

    def require(self, chain_id: str) -> ChainDefinition:
        chain = self._chains.get(chain_id)
        if chain is None:
            raise UnknownIdError("chain", chain_id)
        return chain

    def __iter__(self):
        return iter(self._chains.values())

    def __len__(self) -> int:
        return len(self._chains)


def _opt(text: str, next_step: str | None = None, **deltas) -> EventOption:
    message = deltas.pop("message", None)
    return EventOption(text=text, outcome=Outcome(message=message, **deltas), next_step=next_step)


WHISTLEBLOWER = ChainDefinition(
    chain_id="whistleblower",
    name="The Whistleblower",
    category=MEDIA,
    min_turn=5,
    trigger_chance=0.15,
    steps=(
        ChainStep(
            "whistleblower_1", "Anonymous Tip",
            "Someone claiming to work at a major platform says they can prove your content is being suppressed.",
            (
                _opt("Meet them in secret", "whistleblower_2a", funds=-20, risk=10,
                     message="You set up a quiet meeting."),
                _opt("Ask for proof first", "whistleblower_2b", risk=5,
                     message="You ask for a sample before committing."),
                _opt("Walk away", risk=-5, message="Could have been a trap. You pass."),
            ),
        ),
        ChainStep(
            "whistleblower_2a", "The Documents Are Real",
            "The internal memos check out. Your reach was throttled on purpose.",
            (
                _opt("Publish everything now", "whistleblower_3_viral",
                     clout=50, support={"ALL": 8}, risk=25,
                     message="The leak explodes. You are vindicated and a target."),
                _opt("Work with journalists", "whistleblower_3_press",
                     funds=-30, clout=35, support={"ALL": 5}, risk=15,
                     message="A coordinated release with some legal cover."),
                _opt("Keep it as leverage", funds=40, clout=10, risk=-10,
                     message="The platform quietly adjusts its ranking."),
            ),
        ),
        ChainStep(
            "whistleblower_2b", "A Sample Arrives",
            "The sample is convincing but incomplete. The source wants assurances.",
            (
                _opt("Promise protection", "whistleblower_2a", funds=-10, risk=5,
                     message="The source sends the full archive."),
                _opt("Post the sample alone", clout=15, support={"ALL": 2}, risk=8,
                     message="Interesting, but critics call it thin."),
            ),
        ),
        ChainStep(
            "whistleblower_3_viral", "Platform Strikes Back",
            "The platform threatens legal action and suspends several of your accounts.",
            (
                _opt("Fight it in court", funds=-60, clout=20, risk=-15,
                     message="A long fight, but public opinion is with you."),
                _opt("Rally followers to protest", support={"ALL": 6}, risk=15,
                     message="The protest trends for days."),
            ),
        ),
        ChainStep(
            "whistleblower_3_press", "Congressional Interest",
            "A congressional committee wants you to testify.",
            (
                _opt("Testify", clout=40, support={"ALL": 6}, risk=-10,
                     message="Your testimony is widely covered."),
                _opt("Send a written statement", clout=10, risk=-5,
                     message="A quieter but respectable contribution."),
            ),
        ),
    ),
)

RIVAL = ChainDefinition(
    chain_id="rival",
    name="The Rival Movement",
    category=POLITICAL,
    min_turn=7,
    trigger_chance=0.12,
    steps=(
        ChainStep(
            "rival_1", "A Rival Appears",
            "A slicker competing movement is poaching your supporters.",
            (
                _opt("Challenge them to a debate", "rival_2_debate", clout=5, risk=5,
                     message="They accept. The date is set."),
                _opt("Dig into their backers", "rival_2_expose", funds=-25, risk=8,
                     message="Your researchers start digging."),
                _opt("Ignore them", "rival_2_ignore", message="You stay focused on your own work."),
            ),
        ),
        ChainStep(
            "rival_2_debate", "Debate Night",
            "Millions are watching the livestream.",
            (
                _opt("Go for the knockout", clout=30, support={"ALL": 5}, risk=12,
                     message="A decisive win, and a bitter rival."),
                _opt("Stick to policy", clout=15, support={"ALL": 3}, risk=2,
                     message="A solid performance that wins over moderates."),
            ),
        ),
        ChainStep(
            "rival_2_expose", "The Paper Trail",
            "Their funding traces back to an industry group.",
            (
                _opt("Publish the findings", clout=25, support={"ALL": 4}, risk=10,
                     message="Their credibility takes a big hit."),
                _opt("Offer them a truce", funds=20, risk=-5,
                     message="They back off and share a donor list."),
            ),
        ),
        ChainStep(
            "rival_2_ignore", "They Keep Growing",
            "The rival's numbers are climbing and your supporters are nervous.",
            (
                _opt("Engage after all", "rival_2_debate", risk=3,
                     message="You finally accept their debate challenge."),
                _opt("Keep ignoring them", support={"ALL": -3}, risk=-3,
                     message="You lose some ground, but avoid the mud."),
            ),
        ),
    ),
)

FUNDING_CRISIS = ChainDefinition(
    chain_id="funding_crisis",
    name="The Funding Crisis",
    category=ECONOMIC,
    min_turn=8,
    trigger_chance=0.10,
    steps=(
        ChainStep(
            "funding_1", "Banks Pull Out",
            "Your bank closed your accounts, citing reputational risk.",
            (
                _opt("Look for alternative banks", "funding_2_alternatives", funds=-15,
                     message="You start calling around."),
                _opt("Go all in on crypto", "funding_2_crypto", risk=10,
                     message="You set up crypto wallets overnight."),
                _opt("Sue the bank", "funding_2_lawsuit", funds=-30, clout=10,
                     message="Your lawyers file the paperwork."),
            ),
        ),
        ChainStep(
            "funding_2_alternatives", "A Credit Union Steps Up",
            "A small credit union will take you on, with strict compliance terms.",
            (
                _opt("Accept the terms", funds=30, risk=-10,
                     message="Stable banking, at last."),
                _opt("Negotiate harder", funds=15, clout=5,
                     message="Looser terms and a smaller line of credit."),
            ),
        ),
        ChainStep(
            "funding_2_crypto", "Crypto Windfall",
            "Donations in crypto are pouring in, and so is regulator interest.",
            (
                _opt("Cash out quickly", funds=70, risk=10,
                     message="A big payday with some awkward questions."),
                _opt("Hold and hope", funds=20, clout=10, risk=15,
                     message="Your supporters love the bet."),
            ),
        ),
        ChainStep(
            "funding_2_lawsuit", "Day in Court",
            "The judge seems sympathetic. The bank wants to settle.",
            (
                _opt("Settle", funds=60, risk=-5, message="A settlement and a quiet exit."),
                _opt("Go to trial", clout=25, support={"ALL": 3}, risk=8,
                     message="A public win that costs you time."),
            ),
        ),
    ),
)

SCANDAL = ChainDefinition(
    chain_id="scandal",
    name="The Staff Scandal",
    category=MEDIA,
    min_turn=10,
    trigger_chance=0.08,
    steps=(
        ChainStep(
            "scandal_1", "Staffer Under Fire",
            "Old posts from a senior staffer have surfaced and they are bad.",
            (
                _opt("Launch an internal review", "scandal_2_investigate", funds=-10, risk=3,
                     message="You promise a full review."),
                _opt("Defend your staffer", "scandal_2_defend", clout=5, risk=10,
                     message="You stand by them, for now."),
                _opt("Fire them immediately", support={"ALL": -1}, risk=-8,
                     message="Swift, and some call it cold."),
            ),
        ),
        ChainStep(
            "scandal_2_investigate", "Review Findings",
            "The review turned up more than expected.",
            (
                _opt("Publish the report", clout=15, risk=-12,
                     message="Transparency wins back some trust."),
                _opt("Keep it internal", risk=8, message="Questions linger."),
            ),
        ),
        ChainStep(
            "scandal_2_defend", "It Gets Worse",
            "More posts surface and your defense looks shaky.",
            (
                _opt("Reverse course and apologize", clout=-20, support={"ALL": -5}, risk=15,
                     message="The reversal hurts. Critics say you waited too long."),
                _opt("Say you were misled", clout=5, support={"ALL": -2}, risk=5,
                     message="A mixed reception."),
            ),
        ),
    ),
)

POLITICAL_RUN = ChainDefinition(
    chain_id="political_run",
    name="The Political Gambit",
    category=POLITICAL,
    min_turn=12,
    trigger_chance=0.10,
    steps=(
        ChainStep(
            "political_1", "Run for Office?",
            "Party operatives are urging you to run for Congress.",
            (
                _opt("Announce your candidacy", "political_2_campaign", clout=40, funds=-50, risk=20,
                     message="You are officially in the race."),
                _opt("Endorse someone else", clout=25, support={"ALL": 5}, risk=5,
                     message="The candidate owes you one."),
                _opt("Stay a movement leader", clout=10, risk=-10,
                     message="You keep your outsider credibility."),
            ),
        ),
        ChainStep(
            "political_2_campaign", "On the Trail",
            "The race is tight and every day counts.",
            (
                _opt("Go negative", "political_3", support={"ALL": 6}, clout=20, risk=15,
                     message="The attack ads land, and you make enemies."),
                _opt("Stay on policy", "political_3", support={"ALL": 4}, clout=15, risk=5,
                     message="Moderates are impressed."),
                _opt("Unleash your online army", "political_3", support={"ALL": 8}, clout=30, risk=25,
                     message="Effective and controversial."),
            ),
        ),
        ChainStep(
            "political_3", "Election Night",
            "The count is coming down to the wire.",
            (
                _opt("Declare victory early", clout=35, support={"ALL": 10}, risk=10,
                     message="Bold, and it pays off."),
                _opt("Wait for official results", clout=25, support={"ALL": 7}, risk=5,
                     message="A narrow win with your legitimacy intact."),
            ),
        ),
    ),
)

DEFAULT_CHAINS: tuple[ChainDefinition, ...] = (
    WHISTLEBLOWER,
    RIVAL,
    FUNDING_CRISIS,
    SCANDAL,
    POLITICAL_RUN,
)


def default_chain_registry() -> ChainRegistry:
    return ChainRegistry(DEFAULT_CHAINS)
