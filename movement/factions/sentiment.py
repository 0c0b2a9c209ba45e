"""
Faction & Sentiment Engine - Faction support deltas, moods and their side effects.

Responsibilities:
- Convert an outcome's national support delta into per-faction deltas
  through each faction's action modifier table
- Move each faction's momentum by how much it likes the action's tags,
  decay momentum toward neutral every turn, derive MoodLevel
- Produce reactions for display (last REACTION_LIMIT kept)
- Roll at most one sabotage and one bonus per turn from extreme moods
- Scale clout gains by global momentum

Everything here is a pure function of its inputs; randomness comes in
through the injected RandomSource.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from ..engine_core.outcome import Outcome, round_half_away
from ..engine_core.regions import ALL_KEY, RANDOM_KEY, RANDOM_REGION_COUNT, REGION_CODES, REGION_GROUPS
from ..engine_core.rng import RandomSource
from ..engine_core.state import (
    FactionMode,
    FactionSentiment,
    MoodLevel,
    Reaction,
    SentimentState,
    REACTION_LIMIT,
)
from ..providers.advisors import AdvisorRoster
from .definitions import EVENT_CATEGORY_MODIFIERS, FactionDefinition, factions_for

MOMENTUM_MIN = -100.0
MOMENTUM_MAX = 100.0
MOMENTUM_RETENTION = 0.95
RESTING_MOMENTUM = 0.0
DECAY_RATE = 0.05
IMPACT_CAP = 30
REACTION_THRESHOLD = 5

# (minimum momentum, mood), highest first
MOOD_THRESHOLDS: tuple[tuple[float, MoodLevel], ...] = (
    (60.0, MoodLevel.ENTHUSIASTIC),
    (20.0, MoodLevel.ENGAGED),
    (-20.0, MoodLevel.NEUTRAL),
    (-50.0, MoodLevel.WARY),
)

SABOTAGE_MIN_TURNS = 2
SABOTAGE_BASE_CHANCE = 0.10
BONUS_MIN_TURNS = 3
BONUS_BASE_CHANCE = 0.15
EXTREME_EVENT_CHANCE_CAP = 0.35

CLOUT_MULTIPLIER_MIN = 0.6
CLOUT_MULTIPLIER_MAX = 1.4
CLOUT_MOMENTUM_DIVISOR = 250.0


def mood_from_momentum(momentum: float) -> MoodLevel:
    for threshold, mood in MOOD_THRESHOLDS:
        if momentum >= threshold:
            return mood
    return MoodLevel.HOSTILE


def _clamp_momentum(value: float) -> float:
    return max(MOMENTUM_MIN, min(MOMENTUM_MAX, value))


def _global_momentum(factions: dict[str, FactionSentiment]) -> float:
    if not factions:
        return 0.0
    return sum(f.momentum for f in factions.values()) / len(factions)


# =============================================================================
# Faction support deltas
# =============================================================================

def national_delta(support: dict[str, int]) -> int:
    """
    National-equivalent support delta of an outcome.

    The "ALL" delta counts fully; targeted deltas count in proportion to
    how many regions they touch out of the whole map.
    """
    total = support.get(ALL_KEY, 0)
    targeted = 0
    for key, amount in support.items():
        if key == ALL_KEY:
            continue
        if key == RANDOM_KEY:
            targeted += amount * RANDOM_REGION_COUNT
        elif key in REGION_GROUPS:
            targeted += amount * len(REGION_GROUPS[key])
        elif key in REGION_CODES:
            targeted += amount
    return total + round_half_away(targeted / len(REGION_CODES))


def faction_delta(base: int, modifier_percent: int) -> int:
    """
    round(base * (1 + modifier/100)).

    Not clamped: a modifier below -100% flips the sign of the base.
    """
    return round_half_away(base * (1 + modifier_percent / 100))


def action_faction_deltas(
    outcome: Outcome,
    action_id: str,
    mode: FactionMode,
    roster: AdvisorRoster | None = None,
) -> dict[str, int]:
    """Per-faction support deltas for an action outcome."""
    base = national_delta(outcome.support)
    if base == 0:
        return {}
    deltas: dict[str, int] = {}
    for faction in factions_for(mode):
        delta = faction_delta(base, faction.modifier_for(action_id))
        if roster is not None and delta > 0:
            bonus = roster.faction_bonus_percent(faction.id)
            if bonus:
                delta = round_half_away(delta * (1 + bonus / 100))
        deltas[faction.id] = delta
    return deltas


def event_faction_deltas(outcome: Outcome, category: str, mode: FactionMode) -> dict[str, int]:
    """Per-faction support deltas for an event outcome, by event category."""
    base = national_delta(outcome.support)
    if base == 0:
        return {}
    modifiers = EVENT_CATEGORY_MODIFIERS.get(category, {}) if mode == FactionMode.CLASSIC else {}
    return {
        faction.id: faction_delta(base, modifiers.get(faction.id, 0))
        for faction in factions_for(mode)
    }


# =============================================================================
# Sentiment
# =============================================================================

def tag_impact(faction: FactionDefinition, tags: tuple[str, ...] | list[str], multiplier: float = 1.0) -> int:
    """Summed interest of a faction in a set of tags, capped at +/-IMPACT_CAP."""
    impact = sum(faction.tag_impact(tag) for tag in tags)
    impact = round_half_away(impact * multiplier)
    return max(-IMPACT_CAP, min(IMPACT_CAP, impact))


def _reaction_message(faction: FactionDefinition, impact: int, label: str) -> str:
    if impact >= 15:
        verb = "love"
    elif impact > 0:
        verb = "approve of"
    elif impact <= -15:
        verb = "are furious about"
    else:
        verb = "dislike"
    return f"{faction.name} {verb} your {label}."


def react_to_tags(
    sentiment: SentimentState,
    mode: FactionMode,
    tags: tuple[str, ...] | list[str],
    label: str,
    turn: int,
    multiplier: float = 1.0,
) -> SentimentState:
    """
    Apply one action's tag impact to every faction.

    momentum' = momentum * 0.95 + impact, clamped. A mood change resets
    turns_in_mood. Reactions with |impact| >= REACTION_THRESHOLD are kept.
    """
    factions: dict[str, FactionSentiment] = {}
    reactions = list(sentiment.reactions)

    for faction in factions_for(mode):
        current = sentiment.factions.get(faction.id, FactionSentiment())
        impact = tag_impact(faction, tags, multiplier)
        momentum = _clamp_momentum(current.momentum * MOMENTUM_RETENTION + impact)
        mood = mood_from_momentum(momentum)
        changed = mood != current.mood
        factions[faction.id] = FactionSentiment(
            mood=mood,
            momentum=momentum,
            turns_in_mood=0 if changed else current.turns_in_mood,
        )
        if abs(impact) >= REACTION_THRESHOLD:
            reactions.append(Reaction(
                faction_id=faction.id,
                message=_reaction_message(faction, impact, label),
                impact=impact,
                turn=turn,
                mood_change=(current.mood.name, mood.name) if changed else None,
            ))

    return SentimentState(
        factions=factions,
        global_momentum=_global_momentum(factions),
        reactions=reactions[-REACTION_LIMIT:],
    )


def decay(sentiment: SentimentState) -> SentimentState:
    """Drift every faction toward RESTING_MOMENTUM by DECAY_RATE; count turns in mood."""
    factions: dict[str, FactionSentiment] = {}
    for fid, current in sentiment.factions.items():
        momentum = current.momentum + (RESTING_MOMENTUM - current.momentum) * DECAY_RATE
        mood = mood_from_momentum(momentum)
        factions[fid] = FactionSentiment(
            mood=mood,
            momentum=momentum,
            turns_in_mood=current.turns_in_mood + 1 if mood == current.mood else 0,
        )
    return SentimentState(
        factions=factions,
        global_momentum=_global_momentum(factions),
        reactions=list(sentiment.reactions),
    )


def clout_multiplier(global_momentum: float) -> float:
    """Clout yield multiplier from global momentum, bounded on both sides."""
    value = 1 + global_momentum / CLOUT_MOMENTUM_DIVISOR
    return max(CLOUT_MULTIPLIER_MIN, min(CLOUT_MULTIPLIER_MAX, value))


@dataclass
class FactionEvent:
    """A sabotage or bonus fired by a faction."""
    faction_id: str
    title: str
    outcome: Outcome
    is_sabotage: bool


def roll_sabotage(sentiment: SentimentState, mode: FactionMode, rng: RandomSource) -> FactionEvent | None:
    """
    Maybe fire a sabotage from the most hostile faction.

    Only a faction HOSTILE for SABOTAGE_MIN_TURNS qualifies. Chance and
    magnitude grow with distance from neutral.
    """
    candidates = [
        (fid, fs) for fid, fs in sentiment.factions.items()
        if fs.mood == MoodLevel.HOSTILE and fs.turns_in_mood >= SABOTAGE_MIN_TURNS
    ]
    if not candidates:
        return None
    fid, fs = min(candidates, key=lambda item: (item[1].momentum, item[0]))
    faction = _faction(mode, fid)
    if faction is None or faction.sabotage is None:
        return None

    distance = abs(fs.momentum) / 50
    chance = min(EXTREME_EVENT_CHANCE_CAP, SABOTAGE_BASE_CHANCE * distance)
    if rng.random() >= chance:
        return None
    outcome = faction.sabotage.outcome.scale_all(distance)
    return FactionEvent(
        faction_id=fid,
        title=faction.sabotage.title,
        outcome=outcome.with_message(f"SABOTAGE - {faction.sabotage.title}: {outcome.message}"),
        is_sabotage=True,
    )


def roll_bonus(sentiment: SentimentState, mode: FactionMode, rng: RandomSource) -> FactionEvent | None:
    """Maybe fire a bonus from the most enthusiastic faction."""
    candidates = [
        (fid, fs) for fid, fs in sentiment.factions.items()
        if fs.mood == MoodLevel.ENTHUSIASTIC and fs.turns_in_mood >= BONUS_MIN_TURNS
    ]
    if not candidates:
        return None
    fid, fs = max(candidates, key=lambda item: (item[1].momentum, item[0]))
    faction = _faction(mode, fid)
    if faction is None or faction.bonus is None:
        return None

    distance = fs.momentum / 60
    chance = min(EXTREME_EVENT_CHANCE_CAP, BONUS_BASE_CHANCE * distance)
    if rng.random() >= chance:
        return None
    outcome = faction.bonus.outcome.scale_all(distance)
    return FactionEvent(
        faction_id=fid,
        title=faction.bonus.title,
        outcome=outcome.with_message(f"BONUS - {faction.bonus.title}: {outcome.message}"),
        is_sabotage=False,
    )


def _faction(mode: FactionMode, faction_id: str) -> FactionDefinition | None:
    for faction in factions_for(mode):
        if faction.id == faction_id:
            return faction
    return None


@dataclass
class SentimentTurn:
    """Everything the faction engine contributes to one action turn."""
    sentiment: SentimentState
    faction_deltas: dict[str, int] = field(default_factory=dict)
    faction_events: list[FactionEvent] = field(default_factory=list)


def process_action(
    sentiment: SentimentState,
    mode: FactionMode,
    action_id: str,
    tags: tuple[str, ...] | list[str],
    label: str,
    outcome: Outcome,
    turn: int,
    rng: RandomSource,
    roster: AdvisorRoster | None = None,
    impact_multiplier: float = 1.0,
) -> SentimentTurn:
    """
    Run the faction engine for one resolved action.

    Order: faction deltas from the final outcome, tag reactions, decay,
    then sabotage and bonus rolls against the decayed moods.
    """
    deltas = action_faction_deltas(outcome, action_id, mode, roster)
    updated = react_to_tags(sentiment, mode, tags, label, turn, impact_multiplier)
    updated = decay(updated)

    events: list[FactionEvent] = []
    sabotage = roll_sabotage(updated, mode, rng)
    if sabotage is not None:
        events.append(sabotage)
    bonus = roll_bonus(updated, mode, rng)
    if bonus is not None:
        events.append(bonus)

    return SentimentTurn(sentiment=updated, faction_deltas=deltas, faction_events=events)
