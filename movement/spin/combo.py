"""
Combo detection for spins.

A tag is "matched" when it shows up on at least two of the three reels.
Tiers, highest first:
- JACKPOT: a tag on all three reels, or every tag of a named triple matched
- named pair: every tag of a named pair matched
- two or more matched tags
- one matched tag
- nothing
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .reels import ReelItem

JACKPOT_MULTIPLIER = 3.0
SINGLE_MATCH_MULTIPLIER = 1.5
MULTI_MATCH_BASE = 1.5
MULTI_MATCH_STEP = 0.15
MULTI_MATCH_CAP = 2.4


@dataclass
class NamedCombo:
    name: str
    required_tags: tuple[str, ...]
    multiplier: float
    description: str = ""

    @property
    def is_triple(self) -> bool:
        return len(self.required_tags) >= 3


# Listed in priority order; the first full match of a kind wins.
NAMED_COMBOS: tuple[NamedCombo, ...] = (
    NamedCombo("Digital Blitz", ("digital", "viral", "blitz"), JACKPOT_MULTIPLIER,
               "Maximum viral reach across every feed"),
    NamedCombo("Battleground Blitz", ("swing", "blitz", "aggressive"), JACKPOT_MULTIPLIER,
               "All-out push in the swing states"),
    NamedCombo("Grassroots Wave", ("grassroots", "rural", "midwest"), JACKPOT_MULTIPLIER,
               "A homegrown movement sweeps the heartland"),
    NamedCombo("Youth Uprising", ("youth", "digital", "urban"), JACKPOT_MULTIPLIER,
               "Young voters mobilize in the big cities"),
    NamedCombo("Southern Strategy", ("south", "rural", "grassroots"), JACKPOT_MULTIPLIER,
               "Deep roots across the South"),
    NamedCombo("Coastal Elite", ("coastal", "urban", "broadcast"), JACKPOT_MULTIPLIER,
               "Media dominance on both coasts"),
    NamedCombo("Suburban Surge", ("suburban", "safe", "steady"), JACKPOT_MULTIPLIER,
               "Cul-de-sacs and swing voters line up"),
    NamedCombo("Chaos Agent", ("risky", "aggressive", "viral"), JACKPOT_MULTIPLIER,
               "Embrace the chaos"),
    NamedCombo("Safe Harbor", ("safe", "steady", "suburban"), JACKPOT_MULTIPLIER,
               "Slow and steady"),
    NamedCombo("Meme Machine", ("digital", "viral"), 2.0, "Content takes off online"),
    NamedCombo("Risk Taker", ("risky", "blitz"), 1.9, "Fortune favors the bold"),
    NamedCombo("Ground Game", ("grassroots", "rural"), 1.8, "Boots on the ground pay off"),
    NamedCombo("Media Darling", ("broadcast", "safe"), 1.7, "Friendly coverage everywhere"),
    NamedCombo("Steady Eddie", ("safe", "steady"), 1.5, "Reliable progress"),
)


@dataclass
class ComboResult:
    multiplier: float = 1.0
    matched_tags: list[str] = field(default_factory=list)
    name: str | None = None
    is_jackpot: bool = False

    def to_dict(self) -> dict:
        return {
            "multiplier": self.multiplier,
            "matched_tags": list(self.matched_tags),
            "name": self.name,
            "is_jackpot": self.is_jackpot,
        }


def _tag_reel_counts(items: tuple[ReelItem, ...]) -> dict[str, int]:
    """How many reels each tag appears on, in first-seen order."""
    counts: dict[str, int] = {}
    for item in items:
        for tag in dict.fromkeys(item.tags):
            counts[tag] = counts.get(tag, 0) + 1
    return counts


def _best_named(matched: set[str], triples: bool) -> NamedCombo | None:
    best: NamedCombo | None = None
    for combo in NAMED_COMBOS:
        if combo.is_triple != triples:
            continue
        if not all(tag in matched for tag in combo.required_tags):
            continue
        if best is None or combo.multiplier > best.multiplier:
            best = combo
    return best


def calculate_combo_multiplier(action: ReelItem, modifier: ReelItem, target: ReelItem) -> ComboResult:
    """Score a reel result. Deterministic: no randomness involved."""
    counts = _tag_reel_counts((action, modifier, target))
    matched = [tag for tag, count in counts.items() if count >= 2]
    full = [tag for tag, count in counts.items() if count >= 3]
    matched_set = set(matched)

    triple = _best_named(matched_set, triples=True)
    if full or triple is not None:
        name = triple.name if triple is not None else f"{full[0].upper()} JACKPOT"
        return ComboResult(JACKPOT_MULTIPLIER, matched, name, is_jackpot=True)

    pair = _best_named(matched_set, triples=False)
    if pair is not None:
        return ComboResult(pair.multiplier, matched, pair.name)

    if len(matched) >= 2:
        multiplier = min(MULTI_MATCH_CAP, MULTI_MATCH_BASE + MULTI_MATCH_STEP * len(matched))
        return ComboResult(round(multiplier, 2), matched)

    if len(matched) == 1:
        return ComboResult(SINGLE_MATCH_MULTIPLIER, matched)

    return ComboResult()
