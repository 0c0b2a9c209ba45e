"""
Tests for the modifier pipeline and cost adjustment.

The stage order (diminishing, critical/first-action, advisors, challenge)
is load-bearing: each stage rounds before the next, so reordering changes
results. The regression cases below pin it.
"""

import pytest

from .conftest import ScriptedRandom
from ..engine_core.modifiers import adjusted_cost, apply_pipeline, critical_chance
from ..engine_core.outcome import Outcome
from ..engine_core.registry import Cost, DiminishingConfig
from ..providers.advisors import AdvisorRegistry, AdvisorRoster, StaticRoster
from ..providers.challenges import require_challenge

NO_CRIT = 0.99
CRIT = 0.0


def roster(*names):
    return AdvisorRoster.resolve(StaticRoster(names), AdvisorRegistry())


class TestStageOrder:
    """Diminishing returns run before the critical multiplier."""

    @pytest.mark.parametrize("base,reduction,expected", [
        (10, 0.5, 10),
        (5, 0.5, 6),
        (3, 0.25, 4),
    ])
    def test_diminishing_rounds_before_crit(self, base, reduction, expected):
        """round(base * dim) is doubled, not round(base * dim * 2)."""
        result = apply_pipeline(
            Outcome(funds=base),
            "fundraise",
            DiminishingConfig(reduction_per_stack=reduction, max_stacks=3, floor=0.1),
            consecutive_uses=1,
            roster=AdvisorRoster(),
            rng=ScriptedRandom([CRIT]),
        )
        assert result.critical
        assert result.outcome.funds == expected

    def test_exactly_one_draw(self):
        """The pipeline consumes exactly one random draw."""
        rng = ScriptedRandom([NO_CRIT])
        apply_pipeline(Outcome(funds=10), "fundraise", DiminishingConfig(), 0, AdvisorRoster(), rng)
        assert rng.draws == 1


class TestDiminishing:
    """Tests for diminishing returns."""

    def test_multiplier_floor(self):
        """Stacks stop at max_stacks and never go below the floor."""
        config = DiminishingConfig(reduction_per_stack=0.25, max_stacks=3, floor=0.25)
        assert config.multiplier(0) == 1.0
        assert config.multiplier(1) == 0.75
        assert config.multiplier(3) == 0.25
        assert config.multiplier(10) == 0.25

    def test_losses_not_reduced(self):
        """Diminishing only shrinks gains."""
        result = apply_pipeline(
            Outcome(funds=20, clout=-6, risk=4),
            "fundraise",
            DiminishingConfig(),
            consecutive_uses=2,
            roster=AdvisorRoster(),
            rng=ScriptedRandom([NO_CRIT]),
        )
        assert result.outcome.funds == 12
        assert result.outcome.clout == -6
        assert result.outcome.risk == 4


class TestCriticalAndFirstAction:
    """Critical hits and the first-action bonus are exclusive."""

    def test_critical_doubles(self):
        """A critical doubles positive gains."""
        result = apply_pipeline(Outcome(clout=7), "podcast", DiminishingConfig(), 0, AdvisorRoster(),
                                ScriptedRandom([CRIT]))
        assert result.critical
        assert result.outcome.clout == 14

    def test_first_action_bonus(self):
        """Without a critical, the first action of a session gets x1.5."""
        result = apply_pipeline(Outcome(clout=7), "podcast", DiminishingConfig(), 0, AdvisorRoster(),
                                ScriptedRandom([NO_CRIT]), session_first_action=True)
        assert result.first_action_bonus
        assert not result.critical
        assert result.outcome.clout == 11

    def test_critical_wins_over_first_action(self):
        """A critical on the first action does not also apply x1.5."""
        result = apply_pipeline(Outcome(clout=10), "podcast", DiminishingConfig(), 0, AdvisorRoster(),
                                ScriptedRandom([CRIT]), session_first_action=True)
        assert result.critical
        assert not result.first_action_bonus
        assert result.outcome.clout == 20

    def test_advisor_critical_chance(self):
        """Critical chance advisors add percentage points."""
        assert critical_chance(AdvisorRoster()) == pytest.approx(0.10)
        assert critical_chance(roster('Mike "MemeLord" Miller', "Jordan Jinx")) == pytest.approx(0.25)
        result = apply_pipeline(Outcome(clout=10), "podcast", DiminishingConfig(), 0,
                                roster("Jordan Jinx"), ScriptedRandom([0.15]))
        assert result.critical


class TestAdvisorAndChallengeStages:
    """Advisor bonuses then challenge scaling."""

    def test_support_bonus(self):
        """Dana Data adds 10% to support gains only."""
        result = apply_pipeline(Outcome(support={"ALL": 10}, clout=10), "podcast", DiminishingConfig(), 0,
                                roster("Dana Data"), ScriptedRandom([NO_CRIT]))
        assert result.outcome.support == {"ALL": 11}
        assert result.outcome.clout == 10

    def test_risk_reduction(self):
        """Lou Lawyer cuts risk gains by 25%."""
        result = apply_pipeline(Outcome(risk=8), "podcast", DiminishingConfig(), 0,
                                roster("Lou Lawyer"), ScriptedRandom([NO_CRIT]))
        assert result.outcome.risk == 6

    def test_double_risk_challenge(self):
        """Double Trouble doubles risk gains after advisors."""
        result = apply_pipeline(Outcome(risk=5), "podcast", DiminishingConfig(), 0, AdvisorRoster(),
                                ScriptedRandom([NO_CRIT]), challenge=require_challenge("double_trouble"))
        assert result.outcome.risk == 10

    def test_half_funds_after_funds_bonus(self):
        """Budget Campaign halves funds after Frank Finance's bonus: round(round(40*1.15)/2)."""
        result = apply_pipeline(Outcome(funds=40), "fundraise", DiminishingConfig(), 0,
                                roster("Frank Finance"), ScriptedRandom([NO_CRIT]),
                                challenge=require_challenge("budget_campaign"))
        assert result.outcome.funds == 23


class TestAdjustedCost:
    """Tests for adjusted_cost."""

    def test_safe_zone_unchanged(self):
        """No discount and low risk leave the cost alone."""
        assert adjusted_cost(Cost(funds=35), "rally", AdvisorRoster(), 0) == Cost(funds=35)

    def test_danger_zone_markup(self):
        """Danger zone costs 25% more, critical 50% more."""
        assert adjusted_cost(Cost(funds=35), "rally", AdvisorRoster(), 60) == Cost(funds=44)
        assert adjusted_cost(Cost(funds=35), "rally", AdvisorRoster(), 80) == Cost(funds=53)

    def test_advisor_discount(self):
        """Riley Rebel takes 25% off rallies."""
        assert adjusted_cost(Cost(funds=35), "rally", roster("Riley Rebel"), 0) == Cost(funds=26)

    def test_discount_only_for_its_action(self):
        """Discounts are per action."""
        assert adjusted_cost(Cost(funds=15), "podcast", roster("Riley Rebel"), 0) == Cost(funds=15)

    def test_cost_multiplier(self):
        """Spin modifiers scale the base cost."""
        assert adjusted_cost(Cost(funds=30, clout=10), "debate", AdvisorRoster(), 0,
                             cost_multiplier=0.7) == Cost(funds=21, clout=7)

    def test_free_stays_free(self):
        """A zero cost never becomes positive."""
        assert adjusted_cost(Cost(), "fundraise", AdvisorRoster(), 90) == Cost()
