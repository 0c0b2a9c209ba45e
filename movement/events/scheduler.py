"""
Event Scheduler - Decides what, if anything, happens after an action.

Priority, evaluated strictly in this order:
1. An active chain always shows its current step
2. On turn 1 a one-shot event always fires
3. Otherwise roll the event chance (doubled by the double_events
   challenge); on a hit, 20% of the time try to start a chain and fall
   back to a one-shot if none triggers, else fire a one-shot

All bookkeeping (shown one-shots, active chain, completed chains) lives
in the EventContext carried on the GameState. The scheduler returns a
new context and never mutates the one it was given.
"""

from __future__ import annotations
from dataclasses import dataclass
import logging

from ..engine_core.errors import InvariantViolation
from ..engine_core.outcome import Outcome
from ..engine_core.rng import RandomSource
from ..engine_core.state import ActiveChain, EventContext, EventOption, GameEvent, GameState
from ..providers.challenges import Challenge
from .chains import ChainRegistry, default_chain_registry
from .pool import ECONOMIC, EVENT_POOL, EventTemplate

logger = logging.getLogger(__name__)

BASE_EVENT_CHANCE = 0.3
CHAIN_START_CHANCE = 0.2
SHOWN_RESET_FRACTION = 0.7
HIGH_RISK_THRESHOLD = 60
LOW_FUNDS_THRESHOLD = 30
ECONOMIC_BIAS_CHANCE = 0.4


@dataclass
class ScheduledEvent:
    """
    What the scheduler decided.

    If narrative_outcome is set the event has no options and the reducer
    applies the outcome immediately; otherwise event becomes pending.
    """
    event: GameEvent
    context: EventContext
    narrative_outcome: Outcome | None = None

    @property
    def is_narrative(self) -> bool:
        return self.narrative_outcome is not None


def describe_outcome(outcome: Outcome) -> str:
    """Short human-readable delta summary, used for event previews."""
    parts = [f"support {key} {amount:+d}" for key, amount in outcome.support.items() if amount]
    for name in ("funds", "clout", "risk"):
        value = getattr(outcome, name)
        if value:
            parts.append(f"{name} {value:+d}")
    return ", ".join(parts) if parts else "no effect"


def reveal_options(event: GameEvent) -> GameEvent:
    """Copy of an event with each option's preview filled in."""
    return GameEvent(
        event_id=event.event_id,
        title=event.title,
        description=event.description,
        category=event.category,
        options=[
            EventOption(o.text, o.outcome, o.next_step, preview=describe_outcome(o.outcome))
            for o in event.options
        ],
        chain_id=event.chain_id,
        step_id=event.step_id,
    )


def _copy_context(context: EventContext) -> EventContext:
    return EventContext(
        shown_event_ids=list(context.shown_event_ids),
        active_chain=(
            ActiveChain(context.active_chain.chain_id, context.active_chain.next_step_id)
            if context.active_chain else None
        ),
        completed_chains=list(context.completed_chains),
    )


class EventScheduler:
    """
    Picks events for a state.

    Usage:
        scheduler = EventScheduler()
        scheduled = scheduler.schedule(state, rng, challenge)
        if scheduled is not None:
            ...
    """

    def __init__(
        self,
        pool: tuple[EventTemplate, ...] = EVENT_POOL,
        chains: ChainRegistry | None = None,
    ):
        self.pool = pool
        self.chains = chains if chains is not None else default_chain_registry()

    def event_chance(self, challenge: Challenge | None = None) -> float:
        multiplier = challenge.event_frequency_multiplier if challenge is not None else 1.0
        return min(1.0, BASE_EVENT_CHANCE * multiplier)

    def schedule(
        self,
        state: GameState,
        rng: RandomSource,
        challenge: Challenge | None = None,
        reveal: bool = False,
    ) -> ScheduledEvent | None:
        """Decide the event for a post-action state, or None for a quiet turn."""
        scheduled = self._pick(state, rng, challenge)
        if scheduled is None:
            return None
        if reveal and scheduled.event.options:
            scheduled.event = reveal_options(scheduled.event)
        logger.debug(
            "scheduled event %s (narrative=%s) at turn %d",
            scheduled.event.event_id, scheduled.is_narrative, state.turn,
        )
        return scheduled

    def _pick(self, state: GameState, rng: RandomSource, challenge: Challenge | None) -> ScheduledEvent | None:
        context = state.event_context

        # 1. Chain continuation always wins
        if context.active_chain is not None:
            return self.continue_chain(context)

        # 2. First turn is guaranteed an event
        if state.turn == 1:
            return self.one_shot(state, rng)

        # 3. Random roll
        if rng.random() >= self.event_chance(challenge):
            return None
        if rng.random() < CHAIN_START_CHANCE:
            started = self.try_start_chain(state, rng)
            if started is not None:
                return started
        return self.one_shot(state, rng)

    # -------------------------------------------------------------------------
    # Chains
    # -------------------------------------------------------------------------

    def continue_chain(self, context: EventContext) -> ScheduledEvent:
        active = context.active_chain
        chain = self.chains.require(active.chain_id)
        step = chain.get_step(active.next_step_id)
        if step is None:
            raise InvariantViolation(
                f"active chain {active.chain_id} points at unknown step {active.next_step_id}"
            )
        return ScheduledEvent(event=chain.to_event(step), context=_copy_context(context))

    def try_start_chain(self, state: GameState, rng: RandomSource) -> ScheduledEvent | None:
        """Each eligible chain rolls its trigger chance; one of the hits starts."""
        context = state.event_context
        if context.active_chain is not None:
            return None
        eligible = []
        for chain in self.chains:
            if chain.chain_id in context.completed_chains or state.turn < chain.min_turn:
                continue
            if rng.random() < chain.trigger_chance:
                eligible.append(chain)
        if not eligible:
            return None

        chain = eligible[0] if len(eligible) == 1 else rng.choice(eligible)
        step = chain.first_step
        new_context = _copy_context(context)
        new_context.active_chain = ActiveChain(chain.chain_id, step.step_id)
        logger.info("chain %s started at turn %d", chain.chain_id, state.turn)
        return ScheduledEvent(event=chain.to_event(step), context=new_context)

    def advance_chain(self, context: EventContext, event: GameEvent, option: EventOption) -> EventContext:
        """Context after an option of a chain event was chosen."""
        new_context = _copy_context(context)
        if not event.is_chain_event:
            return new_context
        if option.next_step is not None:
            new_context.active_chain = ActiveChain(event.chain_id, option.next_step)
        else:
            new_context.active_chain = None
            if event.chain_id not in new_context.completed_chains:
                new_context.completed_chains.append(event.chain_id)
        return new_context

    # -------------------------------------------------------------------------
    # One-shots
    # -------------------------------------------------------------------------

    def _eligible(self, state: GameState, shown: list[str]) -> list[EventTemplate]:
        skip_shown = len(shown) < len(self.pool) * SHOWN_RESET_FRACTION
        average = state.average_support
        eligible = []
        for template in self.pool:
            if skip_shown and template.id in shown:
                continue
            if state.turn < template.min_turn:
                continue
            if template.max_risk is not None and state.risk > template.max_risk:
                continue
            if template.min_support is not None and average < template.min_support:
                continue
            eligible.append(template)
        return eligible

    def one_shot(self, state: GameState, rng: RandomSource) -> ScheduledEvent | None:
        context = _copy_context(state.event_context)
        eligible = self._eligible(state, context.shown_event_ids)
        if not eligible:
            context.shown_event_ids = []
            eligible = self._eligible(state, context.shown_event_ids)
            if not eligible:
                return None

        candidates = eligible
        if state.risk > HIGH_RISK_THRESHOLD:
            relief = [t for t in eligible if t.offers_risk_relief]
            if relief:
                candidates = relief
        if state.funds < LOW_FUNDS_THRESHOLD:
            economic = [t for t in eligible if t.category == ECONOMIC]
            if economic and rng.random() < ECONOMIC_BIAS_CHANCE:
                candidates = economic

        template = rng.choice(candidates)
        context.shown_event_ids.append(template.id)
        event = GameEvent(
            event_id=template.id,
            title=template.title,
            description=template.description,
            category=template.category,
            options=[EventOption(o.text, o.outcome, o.next_step) for o in template.options],
        )
        narrative = None
        if template.is_narrative:
            narrative = template.outcome or Outcome()
        return ScheduledEvent(event=event, context=context, narrative_outcome=narrative)
