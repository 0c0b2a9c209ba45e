"""
Regions - The fixed 51-code map and named region groups.
"""

from __future__ import annotations

from .rng import RandomSource

REGION_CODES: tuple[str, ...] = (
    "AL", "AK", "AZ", "AR", "CA", "CO", "CT", "DE", "DC", "FL",
    "GA", "HI", "ID", "IL", "IN", "IA", "KS", "KY", "LA", "ME",
    "MD", "MA", "MI", "MN", "MS", "MO", "MT", "NE", "NV", "NH",
    "NJ", "NM", "NY", "NC", "ND", "OH", "OK", "OR", "PA", "RI",
    "SC", "SD", "TN", "TX", "UT", "VT", "VA", "WA", "WV", "WI",
    "WY",
)

ALL_KEY = "ALL"
RANDOM_KEY = "random"
RANDOM_REGION_COUNT = 5

REGION_GROUPS: dict[str, tuple[str, ...]] = {
    "midwest": ("OH", "MI", "WI", "MN", "IA", "IN", "IL", "MO", "KS", "NE", "ND", "SD"),
    "coastal": ("CA", "WA", "OR", "NY", "MA", "CT", "RI", "NJ", "MD", "DE"),
    "south": ("TX", "FL", "GA", "NC", "SC", "VA", "TN", "AL", "MS", "LA", "AR", "KY"),
    "swing": ("PA", "MI", "WI", "AZ", "GA", "NV", "NC"),
}


def expand_support_delta(
    deltas: dict[str, int],
    rng: RandomSource,
    known_regions: tuple[str, ...] | list[str] = REGION_CODES,
) -> dict[str, int]:
    """
    Flatten a support delta map into per-region deltas.

    - "ALL" broadcasts to every region
    - "random" picks RANDOM_REGION_COUNT distinct regions
    - group names ("midwest", "coastal", ...) expand to their members
    - a plain code applies only if it is a known region

    Deltas that land on the same region add up.
    """
    known = set(known_regions)
    result: dict[str, int] = {}

    def add(code: str, amount: int) -> None:
        if code in known:
            result[code] = result.get(code, 0) + amount

    for key, amount in deltas.items():
        if key == ALL_KEY:
            for code in known_regions:
                add(code, amount)
        elif key == RANDOM_KEY:
            for code in rng.sample(list(known_regions), min(RANDOM_REGION_COUNT, len(known_regions))):
                add(code, amount)
        elif key in REGION_GROUPS:
            for code in REGION_GROUPS[key]:
                add(code, amount)
        else:
            add(key, amount)
    return result


def average_support(support: dict[str, int | float]) -> float:
    """Mean support across all regions."""
    if not support:
        return 0.0
    return sum(support.values()) / len(support)
