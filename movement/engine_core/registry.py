"""
Action Registry - Static catalog of the campaign actions.

Each ActionDefinition carries its base cost, cooldown, diminishing-returns
configuration, theme tags (read by the sentiment engine) and an effect
function. The effect function is pure given its inputs: it reads the
state and draws from the injected RandomSource, and returns an Outcome.

The registry is built once and validated at construction. Lookups go
through get() (None for unknown ids) or require() (raises UnknownIdError).
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Callable, Iterable
import math

from .errors import InvariantViolation, UnknownIdError
from .outcome import Outcome
from .regions import REGION_CODES, ALL_KEY
from .rng import RandomSource
from .state import GameState

EffectFn = Callable[[GameState, RandomSource], Outcome]
PrerequisiteFn = Callable[[GameState], "str | None"]


@dataclass
class Cost:
    """Resource cost of an action."""
    funds: int = 0
    clout: int = 0

    @property
    def is_free(self) -> bool:
        return self.funds == 0 and self.clout == 0


@dataclass
class DiminishingConfig:
    """How fast repeated use of an action loses strength."""
    reduction_per_stack: float = 0.20
    max_stacks: int = 3
    floor: float = 0.40

    def multiplier(self, consecutive_uses: int) -> float:
        stacks = min(max(consecutive_uses, 0), self.max_stacks)
        return max(self.floor, 1.0 - stacks * self.reduction_per_stack)


@dataclass
class ActionDefinition:
    """A campaign action the player can take."""
    id: str
    name: str
    description: str
    effect: EffectFn
    cost: Cost = field(default_factory=Cost)
    tags: tuple[str, ...] = ()
    cooldown: int = 0
    diminishing: DiminishingConfig = field(default_factory=DiminishingConfig)
    prerequisite: PrerequisiteFn | None = None

    def perform(self, state: GameState, rng: RandomSource) -> Outcome:
        return self.effect(state, rng)

    def check_prerequisite(self, state: GameState) -> str | None:
        """Return a reason string if the prerequisite fails, else None."""
        if self.prerequisite is None:
            return None
        return self.prerequisite(state)


class ActionRegistry:
    """
    Validated catalog of action definitions.

    Usage:
        registry = ActionRegistry(DEFAULT_ACTIONS)
        action = registry.get("rally")      # None if unknown
        action = registry.require("rally")  # UnknownIdError if unknown
    """

    def __init__(self, actions: Iterable[ActionDefinition]):
        self._actions: dict[str, ActionDefinition] = {}
        for action in actions:
            if action.id in self._actions:
                raise InvariantViolation(f"duplicate action id: {action.id}")
            if action.cooldown < 0:
                raise InvariantViolation(f"negative cooldown on {action.id}")
            self._actions[action.id] = action

    def get(self, action_id: str) -> ActionDefinition | None:
        return self._actions.get(action_id)

    def require(self, action_id: str) -> ActionDefinition:
        action = self._actions.get(action_id)
        if action is None:
            raise UnknownIdError("action", action_id)
        return action

    def __contains__(self, action_id: str) -> bool:
        return action_id in self._actions

    def __iter__(self):
        return iter(self._actions.values())

    def __len__(self) -> int:
        return len(self._actions)

    @property
    def ids(self) -> list[str]:
        return list(self._actions)


# =============================================================================
# Effects
# =============================================================================

def _random_regions(rng: RandomSource, count: int) -> list[str]:
    return rng.sample(list(REGION_CODES), count)


def _meme_campaign(state: GameState, rng: RandomSource) -> Outcome:
    regions = _random_regions(rng, 3)
    return Outcome(
        support={code: 5 for code in regions},
        clout=3,
        risk=6,
        message=f"Your memes spread through {', '.join(regions)}.",
    )


def _fundraise(state: GameState, rng: RandomSource) -> Outcome:
    return Outcome(funds=40, risk=5, message="Small donors chip in.")


def _rally(state: GameState, rng: RandomSource) -> Outcome:
    lowest = sorted(state.support.items(), key=lambda item: (item[1], item[0]))[:3]
    boosts = (12, 10, 8)
    return Outcome(
        support={code: boost for (code, _), boost in zip(lowest, boosts)},
        risk=4,
        message=f"Rallies energize your weakest regions: {', '.join(c for c, _ in lowest)}.",
    )


def _bot_army(state: GameState, rng: RandomSource) -> Outcome:
    return Outcome(support={ALL_KEY: 4}, risk=10, message="Thousands of accounts amplify you overnight.")


def _podcast(state: GameState, rng: RandomSource) -> Outcome:
    return Outcome(support={ALL_KEY: 1}, clout=12, risk=2, message="Your podcast tour lands well.")


def _hashtag(state: GameState, rng: RandomSource) -> Outcome:
    regions = _random_regions(rng, 2)
    return Outcome(
        support={code: 12 for code in regions},
        clout=3,
        risk=4,
        message=f"Your hashtag trends in {' and '.join(regions)}.",
    )


def _debate(state: GameState, rng: RandomSource) -> Outcome:
    if rng.random() < 0.6:
        return Outcome(support={ALL_KEY: 6}, clout=25, risk=8, message="You win the debate decisively.")
    return Outcome(support={ALL_KEY: -2}, clout=-5, risk=12, message="The debate goes badly.")


def _canvass(state: GameState, rng: RandomSource) -> Outcome:
    regions = _random_regions(rng, 5)
    return Outcome(
        support={code: 6 for code in regions},
        risk=1,
        message=f"Volunteers knock doors in {', '.join(regions)}.",
    )


def _influencer(state: GameState, rng: RandomSource) -> Outcome:
    return Outcome(support={ALL_KEY: 5}, clout=20, risk=6, message="A major influencer endorses you.")


def _legal_fund(state: GameState, rng: RandomSource) -> Outcome:
    return Outcome(risk=-min(state.risk, 20), clout=5, message="Lawyers clear the pending complaints.")


def _platform_hop(state: GameState, rng: RandomSource) -> Outcome:
    return Outcome(
        support={ALL_KEY: -3},
        risk=-int(math.floor(state.risk * 0.4)),
        clout=10,
        message="You move your base to a friendlier platform.",
    )


def _requires_clout(minimum: int) -> PrerequisiteFn:
    def check(state: GameState) -> str | None:
        if state.clout < minimum:
            return f"Need at least {minimum} clout"
        return None
    return check


def _requires_turn(minimum: int) -> PrerequisiteFn:
    def check(state: GameState) -> str | None:
        if state.turn < minimum:
            return f"Unlocks at turn {minimum}"
        return None
    return check


DEFAULT_ACTIONS: tuple[ActionDefinition, ...] = (
    ActionDefinition(
        id="meme_campaign",
        name="Meme Campaign",
        description="Flood social feeds with memes in three random regions.",
        effect=_meme_campaign,
        cost=Cost(clout=12),
        tags=("digital", "viral", "youth", "risky"),
    ),
    ActionDefinition(
        id="fundraise",
        name="Fundraise",
        description="Run an online donation drive.",
        effect=_fundraise,
        tags=("digital", "safe", "steady"),
        diminishing=DiminishingConfig(reduction_per_stack=0.25, max_stacks=3, floor=0.25),
    ),
    ActionDefinition(
        id="rally",
        name="Rally",
        description="Hold rallies in your three weakest regions.",
        effect=_rally,
        cost=Cost(funds=35),
        tags=("grassroots", "aggressive", "rural", "blitz"),
    ),
    ActionDefinition(
        id="bot_army",
        name="Bot Army",
        description="Deploy automated accounts nationwide.",
        effect=_bot_army,
        cost=Cost(funds=25, clout=8),
        tags=("digital", "risky", "aggressive", "viral"),
    ),
    ActionDefinition(
        id="podcast",
        name="Podcast Tour",
        description="Appear on a round of podcasts.",
        effect=_podcast,
        cost=Cost(funds=15),
        tags=("broadcast", "safe", "suburban", "steady"),
    ),
    ActionDefinition(
        id="hashtag",
        name="Hashtag Push",
        description="Push a hashtag in two random regions.",
        effect=_hashtag,
        cost=Cost(clout=8),
        tags=("digital", "viral", "urban"),
    ),
    ActionDefinition(
        id="debate",
        name="Public Debate",
        description="Challenge an opponent to a televised debate.",
        effect=_debate,
        cost=Cost(funds=25, clout=10),
        tags=("broadcast", "aggressive", "risky", "blitz"),
        cooldown=2,
        prerequisite=_requires_clout(30),
    ),
    ActionDefinition(
        id="canvass",
        name="Canvass",
        description="Send volunteers door to door in five regions.",
        effect=_canvass,
        cost=Cost(funds=40),
        tags=("grassroots", "safe", "suburban", "steady"),
    ),
    ActionDefinition(
        id="influencer",
        name="Influencer Partnership",
        description="Pay a top influencer for a nationwide endorsement.",
        effect=_influencer,
        cost=Cost(funds=50, clout=15),
        tags=("digital", "youth", "viral", "urban"),
        cooldown=2,
        prerequisite=_requires_turn(5),
    ),
    ActionDefinition(
        id="legal_fund",
        name="Legal Fund",
        description="Retain lawyers to bring risk down.",
        effect=_legal_fund,
        cost=Cost(funds=80),
        tags=("safe", "steady"),
        cooldown=3,
    ),
    ActionDefinition(
        id="platform_hop",
        name="Platform Hop",
        description="Move to a new platform, shedding some followers and scrutiny.",
        effect=_platform_hop,
        cost=Cost(clout=20),
        tags=("digital", "safe"),
        cooldown=4,
    ),
)


def default_registry() -> ActionRegistry:
    return ActionRegistry(DEFAULT_ACTIONS)
