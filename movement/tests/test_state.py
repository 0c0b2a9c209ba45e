"""
Tests for campaign state, outcomes and regions.

Tests:
- Initial state construction (bonuses, challenges, modes)
- Serialization with field defaulting
- Invariant checks
- Outcome arithmetic and rounding
- Region delta expansion
"""

from dataclasses import fields

import pytest

from .conftest import ScriptedRandom
from ..engine_core.errors import InvariantViolation
from ..engine_core.outcome import Outcome, round_half_away
from ..engine_core.regions import REGION_CODES, REGION_GROUPS, expand_support_delta
from ..engine_core.risk import RiskZone, is_locked, risk_zone
from ..engine_core.setup import create_initial_state
from ..engine_core.state import (
    NEWS_LOG_LIMIT,
    FactionMode,
    GameState,
    MoodLevel,
    SpinState,
    VictoryType,
)
from ..providers.bonuses import StartingBonus
from ..providers.challenges import CHALLENGES, Challenge, require_challenge


class TestInitialState:
    """Tests for create_initial_state."""

    def test_defaults(self, state):
        """A fresh campaign has 5% everywhere, 100 funds, 50 clout, no risk."""
        assert state.turn == 0
        assert set(state.support) == set(REGION_CODES)
        assert all(value == 5 for value in state.support.values())
        assert state.funds == 100
        assert state.clout == 50
        assert state.risk == 0
        assert state.session_first_action
        assert not state.is_terminal

    def test_classic_factions(self, state):
        """Classic mode starts the five demographic factions at their base support."""
        assert state.faction_support == {
            "tech_workers": 40,
            "rural_voters": 30,
            "young_activists": 50,
            "moderates": 35,
            "business_class": 25,
        }
        assert set(state.sentiment.factions) == set(state.faction_support)
        assert all(fs.mood == MoodLevel.NEUTRAL for fs in state.sentiment.factions.values())

    def test_political_factions(self, political_state):
        """Political mode starts three factions at 35."""
        assert political_state.faction_support == {"maga": 35, "america_first": 35, "liberal": 35}

    def test_starting_bonus(self):
        """Starting bonuses add to resources, every region and named factions."""
        bonus = StartingBonus(clout=10, funds=25, support=3, faction_bonuses={"moderates": 5})
        state = create_initial_state(game_id="g", bonus=bonus)
        assert state.funds == 125
        assert state.clout == 60
        assert all(value == 8 for value in state.support.values())
        assert state.faction_support["moderates"] == 40

    def test_high_risk_challenge(self):
        """The danger zone challenge starts at 50 risk."""
        state = create_initial_state(game_id="g", challenge=require_challenge("danger_zone"))
        assert state.risk == 50
        assert state.metadata["challenge_id"] == "danger_zone"

    def test_low_support_challenge(self):
        """The underdog challenge starts every region at 1%."""
        state = create_initial_state(game_id="g", challenge=require_challenge("underdog_story"))
        assert all(value == 1 for value in state.support.values())

    def test_challenge_fields(self):
        """Challenges carry only the fields the engine reads."""
        assert {f.name for f in fields(Challenge)} == {
            "id", "name", "kind", "description", "amount",
            "action_ids", "faction_id", "threshold", "turns",
        }
        assert len({c.id for c in CHALLENGES}) == len(CHALLENGES)

    def test_random_game_id(self):
        """Without a game id one is generated."""
        assert create_initial_state().game_id != create_initial_state().game_id


class TestSerialization:
    """Tests for to_dict/from_dict."""

    def test_round_trip_keeps_fields(self, state):
        """A serialized state loads back with the same values."""
        modified = state._copy_with(
            turn=7,
            funds=42,
            risk=33,
            streak=2,
            highest_streak=4,
            action_cooldowns={"debate": 1},
            spin=SpinState("rally", "blitz", "swing", locked=["action"], rerolls=2),
            victory=True,
            victory_type=VictoryType.SPEED_RUN,
        )
        loaded = GameState.from_dict(modified.to_dict())
        assert loaded.turn == 7
        assert loaded.funds == 42
        assert loaded.risk == 33
        assert loaded.highest_streak == 4
        assert loaded.action_cooldowns == {"debate": 1}
        assert loaded.spin == modified.spin
        assert loaded.victory_type == VictoryType.SPEED_RUN

    def test_missing_fields_default(self):
        """A sparse save fills every missing field from fresh-state defaults."""
        loaded = GameState.from_dict({"game_id": "old", "funds": 10, "support": {"CA": 40}})
        assert loaded.game_id == "old"
        assert loaded.funds == 10
        assert loaded.clout == 50
        assert loaded.support["CA"] == 40
        assert loaded.support["TX"] == 5
        assert set(loaded.faction_support) == set(create_initial_state().faction_support)
        loaded.check_invariants()

    def test_load_starts_new_session(self, state):
        """session_first_action is always true after a load."""
        data = state._copy_with(session_first_action=False).to_dict()
        assert GameState.from_dict(data).session_first_action

    def test_out_of_range_values_clamped(self):
        """Saved values outside 0..100 are clamped on load."""
        loaded = GameState.from_dict({"game_id": "g", "risk": 140, "support": {"NY": -5}})
        assert loaded.risk == 100
        assert loaded.support["NY"] == 0

    def test_political_mode_round_trip(self, political_state):
        """Faction mode survives serialization."""
        loaded = GameState.from_dict(political_state.to_dict())
        assert loaded.faction_mode == FactionMode.POLITICAL
        assert set(loaded.faction_support) == {"maga", "america_first", "liberal"}


class TestInvariants:
    """Tests for check_invariants."""

    def test_fresh_state_passes(self, state):
        """A fresh state satisfies every invariant."""
        state.check_invariants()

    def test_missing_region(self, state):
        """Dropping a region is an invariant violation."""
        support = dict(state.support)
        del support["CA"]
        with pytest.raises(InvariantViolation):
            state._copy_with(support=support).check_invariants()

    def test_out_of_range_support(self, state):
        """Support above 100 is an invariant violation."""
        with pytest.raises(InvariantViolation):
            state._copy_with(support={**state.support, "TX": 101}).check_invariants()

    def test_negative_funds(self, state):
        """Negative funds are an invariant violation."""
        with pytest.raises(InvariantViolation):
            state._copy_with(funds=-1).check_invariants()

    def test_faction_key_mismatch(self, state):
        """Faction support and sentiment must cover the same factions."""
        faction_support = dict(state.faction_support)
        del faction_support["moderates"]
        with pytest.raises(InvariantViolation):
            state._copy_with(faction_support=faction_support).check_invariants()


class TestNewsLog:
    """Tests for the bounded news log."""

    def test_log_is_capped(self, state):
        """Only the most recent lines are kept."""
        for i in range(NEWS_LOG_LIMIT + 10):
            state = state.with_log(f"line {i}")
        assert len(state.news_log) == NEWS_LOG_LIMIT
        assert state.news_log[-1] == f"line {NEWS_LOG_LIMIT + 9}"

    def test_with_log_does_not_mutate(self, state):
        """with_log returns a new state and leaves the input alone."""
        before = list(state.news_log)
        state.with_log("hello")
        assert state.news_log == before


class TestOutcome:
    """Tests for Outcome arithmetic."""

    def test_round_half_away(self):
        """Ties round away from zero in both directions."""
        assert round_half_away(2.5) == 3
        assert round_half_away(-2.5) == -3
        assert round_half_away(2.4) == 2

    def test_merge(self):
        """Merging adds deltas key-wise and joins messages."""
        merged = Outcome(support={"ALL": 2}, funds=5, message="a").merge(
            Outcome(support={"ALL": 1, "CA": 3}, risk=2, message="b")
        )
        assert merged.support == {"ALL": 3, "CA": 3}
        assert merged.funds == 5
        assert merged.risk == 2
        assert merged.message == "a b"

    def test_scale_gains_skips_losses_and_risk(self):
        """Only positive gains are multiplied."""
        scaled = Outcome(support={"ALL": 3, "CA": -2}, clout=-4, funds=10, risk=6).scale_gains(2.0)
        assert scaled.support == {"ALL": 6, "CA": -2}
        assert scaled.clout == -4
        assert scaled.funds == 20
        assert scaled.risk == 6

    def test_scale_risk_gain(self):
        """Risk reductions pass through risk scaling."""
        assert Outcome(risk=5).scale_risk_gain(2.0).risk == 10
        assert Outcome(risk=-5).scale_risk_gain(2.0).risk == -5


class TestRegions:
    """Tests for support delta expansion."""

    def test_all_key(self):
        """ALL broadcasts to every region."""
        expanded = expand_support_delta({"ALL": 2}, ScriptedRandom())
        assert len(expanded) == len(REGION_CODES)
        assert set(expanded.values()) == {2}

    def test_group_and_code_add_up(self):
        """A group and a member code landing on the same region add."""
        expanded = expand_support_delta({"midwest": 3, "OH": 2}, ScriptedRandom())
        assert set(expanded) == set(REGION_GROUPS["midwest"])
        assert expanded["OH"] == 5

    def test_random_picks_five(self):
        """random touches five distinct regions."""
        expanded = expand_support_delta({"random": 4}, ScriptedRandom(seed=3))
        assert len(expanded) == 5

    def test_unknown_code_ignored(self):
        """Unknown keys are dropped."""
        assert expand_support_delta({"XX": 9}, ScriptedRandom()) == {}


class TestRiskZones:
    """Tests for risk banding."""

    @pytest.mark.parametrize("risk,zone", [
        (0, RiskZone.SAFE),
        (39, RiskZone.SAFE),
        (40, RiskZone.CAUTION),
        (60, RiskZone.DANGER),
        (80, RiskZone.CRITICAL),
        (100, RiskZone.CRITICAL),
    ])
    def test_zone_boundaries(self, risk, zone):
        """Zones start at 40, 60 and 80."""
        assert risk_zone(risk) == zone

    def test_bot_army_locked_in_critical(self):
        """Bot Army is hard-locked at 80 risk and above."""
        assert not is_locked("bot_army", 79)
        assert is_locked("bot_army", 80)
