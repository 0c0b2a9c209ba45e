"""
Random Source - The injectable randomness seam.

Every random draw the engine makes (critical rolls, event selection,
reel draws, sabotage/bonus triggers, random region picks) goes through
a RandomSource passed in by the caller. Nothing in the engine touches
the module-level `random` functions.

random.Random already satisfies the protocol, so production code just
passes a seeded instance; tests pass a scripted source.
"""

from __future__ import annotations
import random
from typing import Any, Protocol, Sequence, TypeVar

T = TypeVar("T")


class RandomSource(Protocol):
    """Minimal random interface used by the engine."""

    def random(self) -> float:
        """Return a float in [0.0, 1.0)."""
        ...

    def choice(self, seq: Sequence[T]) -> T:
        ...

    def sample(self, population: Sequence[T], k: int) -> list[T]:
        ...


def make_rng(seed: int | None = None) -> random.Random:
    """Create the default random source, optionally seeded."""
    return random.Random(seed)


def weighted_choice(rng: RandomSource, items: Sequence[Any], weights: Sequence[float]) -> Any:
    """
    Pick one item with probability proportional to its weight.

    Consumes exactly one rng.random() draw.
    """
    if not items:
        raise ValueError("weighted_choice needs at least one item")
    total = sum(weights)
    if total <= 0:
        return items[0]
    roll = rng.random() * total
    upto = 0.0
    for item, weight in zip(items, weights):
        upto += weight
        if roll < upto:
            return item
    return items[-1]
