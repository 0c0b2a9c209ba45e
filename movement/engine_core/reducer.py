"""
Reducer - Applies player intents to campaign state.

The reducer is the single point of state transition.
All state changes must go through Reducer.apply().

Design principles:
- Pure function: (state, intent, rng) -> ActionResult with a new state
- The input state is never mutated; every step builds a new GameState
- Preconditions are checked before anything changes; a rejection returns
  the input state plus one news-log line and a RejectionCode
- All randomness comes from the injected RandomSource

Action turn, in order:
 1. deduct the adjusted cost
 2. base outcome from the action (or the spin reels)
 3. modifier pipeline
 4. faction engine: clout multiplier, faction deltas, moods, sabotage/bonus
 5. apply outcomes with clamping
 6. turn, cooldowns, consecutive uses, criticals, session flag
 7. event scheduler (narrative events apply immediately)
 8. streak and milestones, bankruptcy counter
 9. victory/defeat evaluation
10. invariant check
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging

from .action import ActionResult, Intent, IntentType
from .errors import RejectionCode
from .modifiers import PipelineResult, adjusted_cost, apply_pipeline
from .outcome import Outcome
from .regions import REGION_CODES, expand_support_delta
from .registry import ActionRegistry, Cost, DiminishingConfig, default_registry
from .risk import is_locked, risk_zone
from .rng import RandomSource
from .setup import create_initial_state
from .state import GameState
from .victory import apply_verdict
from ..events.scheduler import EventScheduler
from ..factions.sentiment import clout_multiplier, event_faction_deltas, process_action
from ..providers.advisors import AdvisorRoster
from ..providers.bonuses import StartingBonus
from ..providers.challenges import Challenge
from ..spin.machine import (
    MAX_LOCKED_REELS,
    ReelResult,
    build_spin_outcome,
    reroll_cost,
    resolve_reels,
    risk_threshold_block,
    spin_reels,
)
from ..spin.reels import REEL_NAMES

logger = logging.getLogger(__name__)

STREAK_CLOUT_MILESTONE = 3
STREAK_FUNDS_MILESTONE = 5
STREAK_SUPPORT_MILESTONE = 10


def _clamp(value: int, low: int = 0, high: int = 100) -> int:
    return max(low, min(high, value))


@dataclass
class Rejection:
    code: RejectionCode
    message: str


@dataclass
class Reducer:
    """
    Reducer applies intents to campaign state.

    Stateless - all campaign state is in GameState. The registry, roster,
    challenge and scheduler are fixed for the lifetime of a session.
    """
    registry: ActionRegistry = field(default_factory=default_registry)
    roster: AdvisorRoster = field(default_factory=AdvisorRoster)
    challenge: Challenge | None = None
    scheduler: EventScheduler = field(default_factory=EventScheduler)
    bonus: StartingBonus | None = None

    def apply(self, state: GameState, intent: Intent, rng: RandomSource) -> ActionResult:
        """
        Apply an intent to the state.

        Returns ActionResult; new_state is always set.
        """
        handler = self._get_handler(intent.intent_type)
        return handler(state, intent, rng)

    def _get_handler(self, intent_type: IntentType):
        handlers = {
            IntentType.ACTION: lambda s, i, r: self.resolve_action(s, i.action_id, r),
            IntentType.RESOLVE_EVENT: lambda s, i, r: self.resolve_event(s, i.option_index, r),
            IntentType.SPIN: lambda s, i, r: self.spin(s, i.locked, r),
            IntentType.EXECUTE_SPIN: lambda s, i, r: self.execute_spin(s, r),
            IntentType.RESET: lambda s, i, r: self.reset(s),
        }
        return handlers[intent_type]

    def _reject(self, state: GameState, code: RejectionCode, message: str) -> ActionResult:
        logger.info("rejected (%s): %s", code.value, message)
        return ActionResult.failure(state, message, code)

    # =========================================================================
    # Preconditions
    # =========================================================================

    def check_action(self, state: GameState, action_id: str) -> Rejection | None:
        """
        Run every precondition for an action, in order.

        Returns the first failure, or None if the action can be taken.
        """
        if state.pending_event is not None:
            return Rejection(RejectionCode.PENDING_EVENT, "Resolve the current event first.")

        action = self.registry.get(action_id)
        if action is None:
            return Rejection(RejectionCode.UNKNOWN_ACTION, f"Unknown action: {action_id}")

        remaining = state.action_cooldowns.get(action_id, 0)
        if remaining > 0:
            return Rejection(
                RejectionCode.ON_COOLDOWN,
                f"{action.name} is on cooldown for {remaining} more turn(s).",
            )

        if self.challenge is not None and self.challenge.blocks_action(action_id):
            return Rejection(
                RejectionCode.CHALLENGE_BLOCKED,
                f"{action.name} is disabled by the {self.challenge.name} challenge.",
            )

        if is_locked(action_id, state.risk):
            return Rejection(
                RejectionCode.RISK_LOCKED,
                f"{action.name} is locked in the {risk_zone(state.risk).name} risk zone.",
            )

        reason = action.check_prerequisite(state)
        if reason is not None:
            return Rejection(RejectionCode.PREREQUISITE, f"{action.name}: {reason}.")

        cost = self.action_cost(state, action_id)
        return self._check_affordable(state, cost)

    def _check_affordable(self, state: GameState, cost: Cost) -> Rejection | None:
        if state.funds < cost.funds:
            return Rejection(
                RejectionCode.INSUFFICIENT_FUNDS,
                f"Not enough funds: need {cost.funds}, have {state.funds}.",
            )
        if state.clout < cost.clout:
            return Rejection(
                RejectionCode.INSUFFICIENT_CLOUT,
                f"Not enough clout: need {cost.clout}, have {state.clout}.",
            )
        return None

    def action_cost(self, state: GameState, action_id: str) -> Cost:
        """Adjusted cost of a registry action at the current risk."""
        action = self.registry.require(action_id)
        return adjusted_cost(action.cost, action_id, self.roster, state.risk)

    def spin_execution_cost(self, state: GameState, reels: ReelResult) -> Cost:
        return adjusted_cost(
            reels.action.cost,
            reels.action.action_id,
            self.roster,
            state.risk,
            cost_multiplier=reels.modifier.effects.cost_multiplier,
        )

    # =========================================================================
    # Intents
    # =========================================================================

    def resolve_action(self, state: GameState, action_id: str, rng: RandomSource) -> ActionResult:
        """Take one campaign action."""
        rejection = self.check_action(state, action_id)
        if rejection is not None:
            return self._reject(state, rejection.code, rejection.message)

        action = self.registry.require(action_id)
        cost = self.action_cost(state, action_id)
        base = action.perform(state, rng)

        # A plain action ends any spin round in progress.
        return self._action_turn(
            state._copy_with(spin=None),
            rng,
            action_id=action_id,
            label=action.name,
            tags=action.tags,
            base=base,
            cost=cost,
            diminishing=action.diminishing,
            cooldown=action.cooldown,
        )

    def spin(self, state: GameState, locked: tuple[str, ...] | list[str], rng: RandomSource) -> ActionResult:
        """
        Spin the reels. The first spin of a round is free; later spins
        reroll the unlocked reels for clout.
        """
        if state.pending_event is not None:
            return self._reject(state, RejectionCode.PENDING_EVENT, "Resolve the current event first.")

        locked = list(dict.fromkeys(locked))
        unknown = [name for name in locked if name not in REEL_NAMES]
        if unknown:
            return self._reject(state, RejectionCode.INVALID_LOCK, f"Unknown reel(s): {', '.join(unknown)}")
        if len(locked) > MAX_LOCKED_REELS:
            return self._reject(
                state, RejectionCode.INVALID_LOCK, f"At most {MAX_LOCKED_REELS} reels can be locked.",
            )

        current = state.spin
        clout = state.clout
        if current is not None:
            cost = reroll_cost(current.rerolls)
            if clout < cost:
                return self._reject(
                    state,
                    RejectionCode.INSUFFICIENT_CLOUT,
                    f"Not enough clout to reroll: need {cost}, have {clout}.",
                )
            clout -= cost

        spin = spin_reels(current, locked, rng)
        reels = resolve_reels(spin)
        message = f"Spin: {reels.label}"
        if reels.combo.name:
            message += f" - {reels.combo.name} x{reels.combo.multiplier}"
        elif reels.combo.multiplier > 1.0:
            message += f" - combo x{reels.combo.multiplier}"

        new_state = state._copy_with(spin=spin, clout=clout).with_log(message)
        result = ActionResult.success_with_state(new_state, [message])
        result.combo = reels.combo
        return result

    def execute_spin(self, state: GameState, rng: RandomSource) -> ActionResult:
        """Play the current reels as an action turn. Cooldowns are not consulted."""
        if state.pending_event is not None:
            return self._reject(state, RejectionCode.PENDING_EVENT, "Resolve the current event first.")
        if state.spin is None:
            return self._reject(state, RejectionCode.NO_SPIN, "Spin the reels first.")

        reels = resolve_reels(state.spin)
        action_id = reels.action.action_id

        if self.challenge is not None and self.challenge.blocks_action(action_id):
            return self._reject(
                state,
                RejectionCode.CHALLENGE_BLOCKED,
                f"{reels.action.name} is disabled by the {self.challenge.name} challenge.",
            )
        if is_locked(action_id, state.risk):
            return self._reject(
                state,
                RejectionCode.RISK_LOCKED,
                f"{reels.action.name} is locked in the {risk_zone(state.risk).name} risk zone.",
            )
        blocked = risk_threshold_block(reels, state.risk)
        if blocked is not None:
            return self._reject(state, RejectionCode.RISK_LOCKED, blocked)

        definition = self.registry.get(action_id)
        if definition is not None:
            reason = definition.check_prerequisite(state)
            if reason is not None:
                return self._reject(state, RejectionCode.PREREQUISITE, f"{definition.name}: {reason}.")

        cost = self.spin_execution_cost(state, reels)
        rejection = self._check_affordable(state, cost)
        if rejection is not None:
            return self._reject(state, rejection.code, rejection.message)

        diminishing = definition.diminishing if definition is not None else DiminishingConfig()

        result = self._action_turn(
            state._copy_with(spin=None),
            rng,
            action_id=action_id,
            label=reels.label,
            tags=tuple(reels.tags),
            base=build_spin_outcome(reels),
            cost=cost,
            diminishing=diminishing,
            cooldown=0,
            impact_multiplier=reels.combo.multiplier,
        )
        result.combo = reels.combo
        return result

    def resolve_event(self, state: GameState, option_index: int | None, rng: RandomSource) -> ActionResult:
        """Answer the pending event. Does not advance the turn."""
        event = state.pending_event
        if event is None:
            return self._reject(state, RejectionCode.NO_PENDING_EVENT, "There is no event to resolve.")
        if option_index is None or not 0 <= option_index < len(event.options):
            return self._reject(
                state,
                RejectionCode.INVALID_OPTION,
                f"Invalid option {option_index} for '{event.title}'.",
            )

        option = event.options[option_index]
        deltas = event_faction_deltas(option.outcome, event.category, state.faction_mode)
        new_state = self._apply_outcome(state, option.outcome, deltas, rng)
        new_state = new_state._copy_with(
            pending_event=None,
            event_context=self.scheduler.advance_chain(state.event_context, event, option),
        )
        new_state = self._update_streak(state, new_state)
        new_state = self._update_funds_counter(new_state, action_turn=False)
        new_state = apply_verdict(new_state, self.challenge)
        new_state.check_invariants()

        logger.debug("event %s resolved with option %d", event.event_id, option_index)
        changes = [f"{event.title}: {option.text}"]
        if option.outcome.message:
            changes.append(option.outcome.message)
        return ActionResult.success_with_state(new_state, changes)

    def reset(self, state: GameState) -> ActionResult:
        """Discard the campaign and start over from defaults plus bonuses."""
        fresh = create_initial_state(
            game_id=state.game_id,
            faction_mode=state.faction_mode,
            bonus=self.bonus,
            challenge=self.challenge,
        )
        fresh = fresh._copy_with(metadata={**fresh.metadata, "advisors": self.roster.names})
        logger.info("game %s reset", state.game_id)
        return ActionResult.success_with_state(fresh, ["Campaign reset."])

    # =========================================================================
    # Turn pipeline
    # =========================================================================

    def _action_turn(
        self,
        state: GameState,
        rng: RandomSource,
        action_id: str,
        label: str,
        tags: tuple[str, ...],
        base: Outcome,
        cost: Cost,
        diminishing: DiminishingConfig,
        cooldown: int,
        impact_multiplier: float = 1.0,
    ) -> ActionResult:
        # 1. Deduct cost
        new_state = state._copy_with(funds=state.funds - cost.funds, clout=state.clout - cost.clout)

        # 2-3. Modifier pipeline over the base outcome
        uses = state.consecutive_action_uses.get(action_id, 0)
        pipeline: PipelineResult = apply_pipeline(
            base,
            action_id,
            diminishing,
            uses,
            self.roster,
            rng,
            session_first_action=state.session_first_action,
            challenge=self.challenge,
        )
        final = pipeline.outcome

        # 4. Faction engine
        multiplier = clout_multiplier(state.sentiment.global_momentum)
        if multiplier != 1.0:
            final = final.scale_gains(multiplier, support=False, funds=False)
        turn = state.turn + 1
        factions = process_action(
            state.sentiment,
            state.faction_mode,
            action_id,
            tags,
            label,
            final,
            turn,
            rng,
            roster=self.roster,
            impact_multiplier=impact_multiplier,
        )

        # 5. Apply outcomes
        new_state = new_state.with_log(f"Turn {turn}: {label}.")
        new_state = new_state.with_log(*pipeline.notes)
        new_state = self._apply_outcome(new_state, final, factions.faction_deltas, rng)
        for faction_event in factions.faction_events:
            new_state = self._apply_outcome(new_state, faction_event.outcome, {}, rng)

        # 6. Bookkeeping
        cooldowns = {
            aid: remaining - 1
            for aid, remaining in state.action_cooldowns.items()
            if remaining - 1 > 0
        }
        if cooldown > 0:
            cooldowns[action_id] = cooldown

        new_state = new_state._copy_with(
            turn=turn,
            sentiment=factions.sentiment,
            action_cooldowns=cooldowns,
            consecutive_action_uses={action_id: uses + 1},
            total_critical_hits=state.total_critical_hits + (1 if pipeline.critical else 0),
            session_first_action=False,
        )

        # 7. Events
        event_title = None
        scheduled = self.scheduler.schedule(
            new_state, rng, self.challenge, reveal=self.roster.reveals_events,
        )
        if scheduled is not None:
            event_title = scheduled.event.title
            new_state = new_state._copy_with(event_context=scheduled.context)
            if scheduled.is_narrative:
                deltas = event_faction_deltas(
                    scheduled.narrative_outcome, scheduled.event.category, new_state.faction_mode,
                )
                new_state = new_state.with_log(f"EVENT: {scheduled.event.title}")
                new_state = self._apply_outcome(new_state, scheduled.narrative_outcome, deltas, rng)
            else:
                new_state = new_state._copy_with(pending_event=scheduled.event)
                new_state = new_state.with_log(f"EVENT: {scheduled.event.title}")

        # 8. Streak, milestones, bankruptcy counter
        new_state = self._update_streak(state, new_state)
        new_state = self._streak_milestone(new_state, rng)
        new_state = self._update_funds_counter(new_state, action_turn=True)

        # 9. Victory / defeat
        new_state = apply_verdict(new_state, self.challenge)

        # 10. Invariants
        new_state.check_invariants()

        logger.debug(
            "turn %d %s: crit=%s outcome=%s factions=%s",
            turn, action_id, pipeline.critical, final, factions.faction_deltas,
        )

        changes = list(pipeline.notes)
        if final.message:
            changes.append(final.message)
        changes.extend(e.outcome.message for e in factions.faction_events if e.outcome.message)
        result = ActionResult.success_with_state(new_state, changes)
        result.critical = pipeline.critical
        result.first_action_bonus = pipeline.first_action_bonus
        result.event_triggered = event_title
        return result

    def _apply_outcome(
        self,
        state: GameState,
        outcome: Outcome,
        faction_deltas: dict[str, int],
        rng: RandomSource,
    ) -> GameState:
        """Apply one outcome with clamping. Lifetime totals grow by positive gains."""
        support = dict(state.support)
        for code, delta in expand_support_delta(outcome.support, rng, REGION_CODES).items():
            if code in support:
                support[code] = _clamp(support[code] + delta)

        faction_support = dict(state.faction_support)
        for faction_id, delta in faction_deltas.items():
            if faction_id in faction_support:
                faction_support[faction_id] = _clamp(faction_support[faction_id] + delta)

        new_state = state._copy_with(
            support=support,
            faction_support=faction_support,
            funds=max(0, state.funds + outcome.funds),
            clout=max(0, state.clout + outcome.clout),
            risk=_clamp(state.risk + outcome.risk),
            total_funds_earned=state.total_funds_earned + max(0, outcome.funds),
            total_clout_earned=state.total_clout_earned + max(0, outcome.clout),
        )
        if outcome.message:
            new_state = new_state.with_log(outcome.message)
        return new_state

    def _update_streak(self, before: GameState, after: GameState) -> GameState:
        streak = 0 if after.risk > before.risk else before.streak + 1
        highest = max(after.highest_streak, before.streak, streak)
        return after._copy_with(streak=streak, highest_streak=highest)

    def _streak_milestone(self, state: GameState, rng: RandomSource) -> GameState:
        if state.streak == STREAK_CLOUT_MILESTONE:
            reward = Outcome(clout=5, message="Streak of 3 quiet turns: +5 clout.")
        elif state.streak == STREAK_FUNDS_MILESTONE:
            reward = Outcome(funds=20, message="Streak of 5 quiet turns: +20 funds.")
        elif state.streak == STREAK_SUPPORT_MILESTONE:
            region = rng.choice(list(REGION_CODES))
            reward = Outcome(support={region: 10}, message=f"Streak of 10 quiet turns: +10 support in {region}.")
        else:
            return state
        return self._apply_outcome(state, reward, {}, rng)

    def _update_funds_counter(self, state: GameState, action_turn: bool) -> GameState:
        if state.funds > 0:
            return state._copy_with(consecutive_negative_funds=0)
        if action_turn:
            return state._copy_with(consecutive_negative_funds=state.consecutive_negative_funds + 1)
        return state


def apply_intent(
    state: GameState,
    intent: Intent,
    rng: RandomSource,
    roster: AdvisorRoster | None = None,
    challenge: Challenge | None = None,
) -> ActionResult:
    """
    Convenience function to apply an intent.

    Creates a Reducer with the default registry and applies the intent.
    """
    reducer = Reducer(roster=roster or AdvisorRoster(), challenge=challenge)
    return reducer.apply(state, intent, rng)
