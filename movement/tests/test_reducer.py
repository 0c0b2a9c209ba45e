"""
Tests for the reducer (state transitions).

Tests:
- Action turns: costs, pipeline, bookkeeping
- Precondition order and rejection shape
- Event resolution and chain advancement
- Spin and spin execution
- Streaks, milestones and the bankruptcy counter
- Reset
"""

import pytest

from .conftest import ScriptedRandom
from ..engine_core.action import Intent
from ..engine_core.errors import RejectionCode
from ..engine_core.outcome import Outcome
from ..engine_core.reducer import Reducer, apply_intent
from ..engine_core.state import (
    DefeatType,
    EventOption,
    GameEvent,
    SentimentState,
    SpinState,
)
from ..events.chains import WHISTLEBLOWER
from ..providers.advisors import AdvisorRoster
from ..providers.bonuses import StartingBonus
from ..providers.challenges import require_challenge

NO_CRIT = 0.99
CRIT = 0.0
QUIET = 0.99  # event roll miss


def sample_event():
    return GameEvent(
        event_id="test_event",
        title="Test Event",
        description="Something happened.",
        category="economic",
        options=[
            EventOption("Take it", Outcome(funds=10, support={"ALL": 2})),
            EventOption("Leave it", Outcome(risk=-3)),
        ],
    )


def assert_rejected(result, state, code):
    assert not result.success
    assert result.error_code == code
    assert result.new_state.news_log == state.news_log + [result.error]
    assert result.new_state.funds == state.funds
    assert result.new_state.turn == state.turn


class TestActionTurn:
    """Tests for a plain action turn."""

    def test_first_fundraise(self, reducer, state):
        """The first action gets the x1.5 bonus and advances the turn."""
        result = reducer.apply(state, Intent.action("fundraise"), ScriptedRandom([NO_CRIT]))

        assert result.success
        assert result.first_action_bonus
        new = result.new_state
        assert new.turn == 1
        assert new.funds == 160
        assert new.risk == 5
        assert new.total_funds_earned == 60
        assert new.consecutive_action_uses == {"fundraise": 1}
        assert not new.session_first_action

    def test_input_state_untouched(self, reducer, state):
        """The reducer never mutates its input."""
        before = state.to_dict()
        reducer.apply(state, Intent.action("fundraise"), ScriptedRandom([NO_CRIT]))
        assert state.to_dict() == before

    def test_diminishing_on_repeat(self, reducer, state):
        """The second fundraise in a row is at 75% strength."""
        first = reducer.apply(state, Intent.action("fundraise"), ScriptedRandom([NO_CRIT])).new_state
        second = reducer.apply(first, Intent.action("fundraise"), ScriptedRandom([NO_CRIT, QUIET]))
        assert second.new_state.funds == first.funds + 30
        assert second.new_state.consecutive_action_uses == {"fundraise": 2}

    def test_other_action_resets_uses(self, reducer, played_state):
        """Consecutive uses only track the last action."""
        state = played_state._copy_with(consecutive_action_uses={"fundraise": 2})
        result = reducer.apply(state, Intent.action("podcast"), ScriptedRandom([NO_CRIT, QUIET]))
        assert result.new_state.consecutive_action_uses == {"podcast": 1}

    def test_cost_deducted(self, reducer, played_state):
        """Podcast costs 15 funds and yields 12 clout."""
        result = reducer.apply(played_state, Intent.action("podcast"), ScriptedRandom([NO_CRIT, QUIET]))
        new = result.new_state
        assert new.funds == 85
        assert new.clout == 62
        assert new.risk == 2
        assert all(value == 6 for value in new.support.values())

    def test_faction_deltas(self, reducer, played_state):
        """A +1 national delta becomes per-faction deltas through the modifier table."""
        result = reducer.apply(played_state, Intent.action("podcast"), ScriptedRandom([NO_CRIT, QUIET]))
        factions = result.new_state.faction_support
        assert factions["tech_workers"] == 42
        assert factions["rural_voters"] == 31
        assert factions["business_class"] == 27

    def test_critical_counted(self, reducer, played_state):
        """Criticals double gains and are counted."""
        result = reducer.apply(played_state, Intent.action("podcast"), ScriptedRandom([CRIT, QUIET]))
        assert result.critical
        assert result.new_state.clout == 74
        assert result.new_state.total_critical_hits == 1

    def test_clout_multiplier_from_momentum(self, reducer, played_state):
        """Positive global momentum scales clout gains."""
        state = played_state._copy_with(
            sentiment=SentimentState(factions=played_state.sentiment.factions, global_momentum=50.0),
        )
        result = reducer.apply(state, Intent.action("podcast"), ScriptedRandom([NO_CRIT, QUIET]))
        assert result.new_state.clout == 64

    def test_cooldowns_tick_and_set(self, reducer, played_state):
        """Cooldowns tick down each action turn; the used action's cooldown is set."""
        state = played_state._copy_with(action_cooldowns={"influencer": 1, "platform_hop": 3})
        result = reducer.apply(state, Intent.action("legal_fund"), ScriptedRandom([NO_CRIT, QUIET]))
        assert result.new_state.action_cooldowns == {"platform_hop": 2, "legal_fund": 3}

    def test_support_clamped(self, reducer, played_state):
        """Support never exceeds 100."""
        state = played_state._copy_with(support={code: 99 for code in played_state.support})
        result = reducer.apply(state, Intent.action("podcast"), ScriptedRandom([NO_CRIT, QUIET]))
        assert all(value == 100 for value in result.new_state.support.values())

    def test_apply_intent_helper(self, state):
        """The module-level helper runs an intent with a default reducer."""
        result = apply_intent(state, Intent.action("fundraise"), ScriptedRandom([NO_CRIT], seed=1))
        assert result.success
        assert result.new_state.turn == 1


class TestPreconditions:
    """Rejections and their order."""

    def test_pending_event(self, reducer, state):
        """Nothing but the event can be answered while one is pending."""
        state = state._copy_with(pending_event=sample_event())
        result = reducer.apply(state, Intent.action("fundraise"), ScriptedRandom())
        assert_rejected(result, state, RejectionCode.PENDING_EVENT)

    def test_pending_event_checked_before_unknown(self, reducer, state):
        """A pending event outranks an unknown action id."""
        state = state._copy_with(pending_event=sample_event())
        result = reducer.apply(state, Intent.action("nope"), ScriptedRandom())
        assert result.error_code == RejectionCode.PENDING_EVENT

    def test_unknown_action(self, reducer, state):
        """Unknown ids are rejected, not raised."""
        result = reducer.apply(state, Intent.action("nope"), ScriptedRandom())
        assert_rejected(result, state, RejectionCode.UNKNOWN_ACTION)

    def test_on_cooldown(self, reducer, state):
        """An action on cooldown is rejected."""
        state = state._copy_with(action_cooldowns={"debate": 2})
        result = reducer.apply(state, Intent.action("debate"), ScriptedRandom())
        assert_rejected(result, state, RejectionCode.ON_COOLDOWN)

    def test_challenge_blocked(self, quiet_scheduler, state):
        """Boomer Mode blocks the meme campaign."""
        reducer = Reducer(scheduler=quiet_scheduler, challenge=require_challenge("no_memes_allowed"))
        result = reducer.apply(state, Intent.action("meme_campaign"), ScriptedRandom())
        assert_rejected(result, state, RejectionCode.CHALLENGE_BLOCKED)

    def test_risk_locked(self, reducer, state):
        """Bot Army is locked in the critical zone."""
        state = state._copy_with(risk=85)
        result = reducer.apply(state, Intent.action("bot_army"), ScriptedRandom())
        assert_rejected(result, state, RejectionCode.RISK_LOCKED)

    def test_prerequisite(self, reducer, state):
        """Influencer unlocks at turn 5."""
        result = reducer.apply(state, Intent.action("influencer"), ScriptedRandom())
        assert_rejected(result, state, RejectionCode.PREREQUISITE)

    def test_insufficient_funds(self, reducer, state):
        """Rally needs 35 funds."""
        state = state._copy_with(funds=10)
        result = reducer.apply(state, Intent.action("rally"), ScriptedRandom())
        assert_rejected(result, state, RejectionCode.INSUFFICIENT_FUNDS)

    def test_insufficient_clout(self, reducer, state):
        """Meme Campaign needs 12 clout."""
        state = state._copy_with(clout=5)
        result = reducer.apply(state, Intent.action("meme_campaign"), ScriptedRandom())
        assert_rejected(result, state, RejectionCode.INSUFFICIENT_CLOUT)

    def test_cooldown_before_funds(self, reducer, state):
        """Cooldown is reported before affordability."""
        state = state._copy_with(funds=0, action_cooldowns={"rally": 1})
        result = reducer.apply(state, Intent.action("rally"), ScriptedRandom())
        assert result.error_code == RejectionCode.ON_COOLDOWN

    def test_rejection_consumes_no_randomness(self, reducer, state):
        """A rejected intent draws nothing from the RNG."""
        rng = ScriptedRandom()
        reducer.apply(state, Intent.action("nope"), rng)
        assert rng.draws == 0


class TestResolveEvent:
    """Tests for answering events."""

    def test_no_pending_event(self, reducer, state):
        """Resolving with nothing pending is rejected."""
        result = reducer.apply(state, Intent.resolve_event(0), ScriptedRandom())
        assert_rejected(result, state, RejectionCode.NO_PENDING_EVENT)

    @pytest.mark.parametrize("index", [-1, 2, 9])
    def test_invalid_option(self, reducer, state, index):
        """Out-of-range options are rejected and the event stays pending."""
        state = state._copy_with(pending_event=sample_event())
        result = reducer.apply(state, Intent.resolve_event(index), ScriptedRandom())
        assert_rejected(result, state, RejectionCode.INVALID_OPTION)
        assert result.new_state.pending_event is not None

    def test_option_applied(self, reducer, state):
        """The chosen option applies, the event clears and the turn does not advance."""
        state = state._copy_with(pending_event=sample_event())
        result = reducer.apply(state, Intent.resolve_event(0), ScriptedRandom())
        new = result.new_state
        assert result.success
        assert new.pending_event is None
        assert new.turn == state.turn
        assert new.funds == 110
        assert all(value == 7 for value in new.support.values())

    def test_challenge_scaling_skips_events(self, quiet_scheduler, state):
        """Budget Campaign halves action funds only; event rewards are paid in full."""
        challenge = require_challenge("budget_campaign")
        assert challenge.description.startswith("Action")
        reducer = Reducer(scheduler=quiet_scheduler, roster=AdvisorRoster(), challenge=challenge)
        state = state._copy_with(pending_event=sample_event())
        result = reducer.apply(state, Intent.resolve_event(0), ScriptedRandom())
        assert result.new_state.funds == 110

    def test_category_faction_modifiers(self, reducer, state):
        """Economic events favour the business class in classic mode."""
        state = state._copy_with(pending_event=sample_event())
        result = reducer.apply(state, Intent.resolve_event(0), ScriptedRandom())
        assert result.new_state.faction_support["business_class"] == 28
        assert result.new_state.faction_support["tech_workers"] == 42

    def test_streak_counts_event(self, reducer, state):
        """Resolving without raising risk extends the streak."""
        state = state._copy_with(risk=10, streak=1, pending_event=sample_event())
        result = reducer.apply(state, Intent.resolve_event(1), ScriptedRandom())
        assert result.new_state.risk == 7
        assert result.new_state.streak == 2

    def test_chain_advances(self, reducer, state):
        """An option with a next step keeps the chain active at that step."""
        event = WHISTLEBLOWER.to_event(WHISTLEBLOWER.first_step)
        state = state._copy_with(pending_event=event)
        result = reducer.apply(state, Intent.resolve_event(0), ScriptedRandom())
        active = result.new_state.event_context.active_chain
        assert active.chain_id == "whistleblower"
        assert active.next_step_id == "whistleblower_2a"

    def test_chain_completes(self, reducer, state):
        """An option without a next step ends the chain and records it."""
        event = WHISTLEBLOWER.to_event(WHISTLEBLOWER.first_step)
        state = state._copy_with(pending_event=event)
        result = reducer.apply(state, Intent.resolve_event(2), ScriptedRandom())
        context = result.new_state.event_context
        assert context.active_chain is None
        assert context.completed_chains == ["whistleblower"]


class TestStreak:
    """Streaks, milestones and the bankruptcy counter."""

    def test_risk_increase_resets(self, reducer, played_state):
        """Any risk increase over the turn resets the streak."""
        state = played_state._copy_with(streak=4, highest_streak=4)
        result = reducer.apply(state, Intent.action("podcast"), ScriptedRandom([NO_CRIT, QUIET]))
        assert result.new_state.streak == 0
        assert result.new_state.highest_streak == 4

    def test_clout_milestone(self, reducer, played_state):
        """Reaching a streak of 3 pays 5 clout."""
        state = played_state._copy_with(risk=30, streak=2)
        result = reducer.apply(state, Intent.action("legal_fund"), ScriptedRandom([NO_CRIT, QUIET]))
        new = result.new_state
        assert new.streak == 3
        assert new.risk == 10
        assert new.clout == 60

    def test_funds_milestone(self, reducer, played_state):
        """Reaching a streak of 5 pays 20 funds."""
        state = played_state._copy_with(risk=30, streak=4)
        result = reducer.apply(state, Intent.action("legal_fund"), ScriptedRandom([NO_CRIT, QUIET]))
        assert result.new_state.streak == 5
        assert result.new_state.funds == 40

    def test_support_milestone(self, reducer, played_state):
        """Reaching a streak of 10 adds 10 support in one region."""
        state = played_state._copy_with(risk=30, streak=9)
        result = reducer.apply(state, Intent.action("legal_fund"), ScriptedRandom([NO_CRIT, QUIET]))
        support = result.new_state.support
        assert sorted(support.values()) == [5] * 50 + [15]

    def test_bankruptcy_counter(self, reducer, played_state):
        """An action turn ending at zero funds counts toward bankruptcy."""
        state = played_state._copy_with(funds=0)
        result = reducer.apply(state, Intent.action("hashtag"), ScriptedRandom([NO_CRIT, QUIET]))
        assert result.new_state.consecutive_negative_funds == 1

    def test_bankruptcy_defeat(self, reducer, played_state):
        """Three broke action turns in a row end the campaign."""
        state = played_state._copy_with(funds=0, consecutive_negative_funds=2)
        result = reducer.apply(state, Intent.action("hashtag"), ScriptedRandom([NO_CRIT, QUIET]))
        assert result.new_state.game_over
        assert result.new_state.defeat_type == DefeatType.BANKRUPTCY

    def test_counter_resets_with_funds(self, reducer, played_state):
        """Any positive funds reset the counter."""
        state = played_state._copy_with(funds=0, consecutive_negative_funds=2)
        result = reducer.apply(state, Intent.action("fundraise"), ScriptedRandom([NO_CRIT, QUIET]))
        assert result.new_state.consecutive_negative_funds == 0

    def test_risk_collapse(self, reducer, played_state):
        """Reaching 100 risk is an immediate defeat."""
        state = played_state._copy_with(risk=99)
        result = reducer.apply(state, Intent.action("podcast"), ScriptedRandom([NO_CRIT, QUIET]))
        assert result.new_state.risk == 100
        assert result.new_state.defeat_type == DefeatType.RISK_COLLAPSE


class TestSpin:
    """Tests for spinning and executing spins."""

    def test_first_spin_free(self, reducer, state):
        """The first spin of a round costs nothing."""
        result = reducer.apply(state, Intent.spin(), ScriptedRandom([0.1, 0.2, 0.3]))
        assert result.success
        assert result.new_state.clout == state.clout
        assert result.new_state.spin is not None
        assert result.new_state.spin.rerolls == 0
        assert result.new_state.turn == state.turn

    def test_reroll_costs_grow(self, reducer, state):
        """Rerolls cost 5, then 8, then 11 clout."""
        rng = ScriptedRandom(seed=4)
        spun = reducer.apply(state, Intent.spin(), rng).new_state
        first = reducer.apply(spun, Intent.spin(), rng).new_state
        second = reducer.apply(first, Intent.spin(), rng).new_state
        third = reducer.apply(second, Intent.spin(), rng).new_state
        assert spun.clout - first.clout == 5
        assert first.clout - second.clout == 8
        assert second.clout - third.clout == 11
        assert third.spin.rerolls == 3

    def test_locked_reels_held(self, reducer, state):
        """Locked reels keep their item across a reroll."""
        rng = ScriptedRandom(seed=9)
        spun = reducer.apply(state, Intent.spin(), rng).new_state
        rerolled = reducer.apply(spun, Intent.spin(["action", "target"]), rng).new_state
        assert rerolled.spin.action_id == spun.spin.action_id
        assert rerolled.spin.target_id == spun.spin.target_id
        assert rerolled.spin.locked == ["action", "target"]

    def test_too_many_locks(self, reducer, state):
        """At most two reels can be locked."""
        spun = reducer.apply(state, Intent.spin(), ScriptedRandom()).new_state
        result = reducer.apply(spun, Intent.spin(["action", "modifier", "target"]), ScriptedRandom())
        assert_rejected(result, spun, RejectionCode.INVALID_LOCK)

    def test_unknown_lock(self, reducer, state):
        """Unknown reel names are rejected."""
        result = reducer.apply(state, Intent.spin(["lever"]), ScriptedRandom())
        assert_rejected(result, state, RejectionCode.INVALID_LOCK)

    def test_reroll_needs_clout(self, reducer, state):
        """A reroll without enough clout is rejected."""
        spun = reducer.apply(state, Intent.spin(), ScriptedRandom()).new_state._copy_with(clout=2)
        result = reducer.apply(spun, Intent.spin(), ScriptedRandom())
        assert_rejected(result, spun, RejectionCode.INSUFFICIENT_CLOUT)

    def test_execute_without_spin(self, reducer, state):
        """Executing needs reels."""
        result = reducer.apply(state, Intent.execute_spin(), ScriptedRandom())
        assert_rejected(result, state, RejectionCode.NO_SPIN)

    def test_execute_jackpot(self, reducer, played_state):
        """Podcast + Mainstream + National is a Suburban Surge jackpot."""
        state = played_state._copy_with(spin=SpinState("podcast", "mainstream", "national"))
        result = reducer.apply(state, Intent.execute_spin(), ScriptedRandom([NO_CRIT, QUIET]))
        new = result.new_state
        assert result.success
        assert result.combo.is_jackpot
        assert result.combo.name == "Suburban Surge"
        assert new.spin is None
        assert new.turn == state.turn + 1
        assert new.funds == 80
        assert new.clout == 95
        assert new.risk == 2
        assert all(value == 11 for value in new.support.values())

    def test_execute_ignores_cooldown(self, reducer, played_state):
        """A spin may play an action on cooldown and sets no new cooldown."""
        state = played_state._copy_with(
            action_cooldowns={"debate": 2},
            spin=SpinState("debate", "grassroots", "national"),
        )
        result = reducer.apply(state, Intent.execute_spin(), ScriptedRandom([NO_CRIT, QUIET]))
        assert result.success
        assert result.new_state.action_cooldowns == {"debate": 1}

    def test_execute_checks_prerequisite(self, reducer, played_state):
        """Influencer stays locked before turn 5 on the reels too."""
        state = played_state._copy_with(spin=SpinState("influencer", "mainstream", "national"))
        result = reducer.apply(state, Intent.execute_spin(), ScriptedRandom())
        assert_rejected(result, state, RejectionCode.PREREQUISITE)

    def test_execute_debate_needs_clout(self, reducer, played_state):
        """Debate via the reels still needs 30 clout."""
        state = played_state._copy_with(clout=20, spin=SpinState("debate", "grassroots", "national"))
        result = reducer.apply(state, Intent.execute_spin(), ScriptedRandom())
        assert_rejected(result, state, RejectionCode.PREREQUISITE)

    def test_action_ends_spin_round(self, reducer, played_state):
        """A plain action clears the reels, so the next spin is free again."""
        state = played_state._copy_with(spin=SpinState("meme", "viral", "national", rerolls=2))
        acted = reducer.apply(state, Intent.action("fundraise"), ScriptedRandom([NO_CRIT, QUIET])).new_state
        assert acted.spin is None
        result = reducer.apply(acted, Intent.spin(), ScriptedRandom([0.1, 0.2, 0.3]))
        assert result.success
        assert result.new_state.clout == acted.clout
        assert result.new_state.spin.rerolls == 0

    def test_execute_risk_threshold(self, reducer, played_state):
        """Astroturf is unusable at 80 risk."""
        state = played_state._copy_with(risk=80, spin=SpinState("podcast", "astroturf", "national"))
        result = reducer.apply(state, Intent.execute_spin(), ScriptedRandom())
        assert_rejected(result, state, RejectionCode.RISK_LOCKED)

    def test_execute_challenge_blocked(self, quiet_scheduler, played_state):
        """Challenges block spun actions too."""
        reducer = Reducer(scheduler=quiet_scheduler, challenge=require_challenge("no_memes_allowed"))
        state = played_state._copy_with(spin=SpinState("meme", "viral", "national"))
        result = reducer.apply(state, Intent.execute_spin(), ScriptedRandom())
        assert_rejected(result, state, RejectionCode.CHALLENGE_BLOCKED)

    def test_spin_blocked_by_event(self, reducer, state):
        """Spinning waits for the pending event."""
        state = state._copy_with(pending_event=sample_event())
        result = reducer.apply(state, Intent.spin(), ScriptedRandom())
        assert_rejected(result, state, RejectionCode.PENDING_EVENT)


class TestReset:
    """Tests for reset."""

    def test_reset_fresh_state(self, quiet_scheduler, played_state):
        """Reset rebuilds from defaults plus the bonus, keeping id and mode."""
        reducer = Reducer(
            scheduler=quiet_scheduler,
            roster=AdvisorRoster(),
            bonus=StartingBonus(funds=50),
        )
        state = played_state._copy_with(funds=3, risk=70, streak=6)
        result = reducer.apply(state, Intent.reset(), ScriptedRandom())
        new = result.new_state
        assert result.success
        assert new.game_id == state.game_id
        assert new.turn == 0
        assert new.funds == 150
        assert new.risk == 0
        assert new.streak == 0
