"""
Starting bonuses from meta-progression.

Consumed once, when a fresh state is built. Never applied mid-game.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any


@dataclass
class StartingBonus:
    """Additive bonuses applied to a fresh campaign."""
    clout: int = 0
    funds: int = 0
    support: int = 0  # flat, added to every region
    faction_bonuses: dict[str, int] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> StartingBonus:
        data = data or {}
        return cls(
            clout=int(data.get("clout", 0)),
            funds=int(data.get("funds", 0)),
            support=int(data.get("support", 0)),
            faction_bonuses={k: int(v) for k, v in (data.get("faction_bonuses") or {}).items()},
        )
