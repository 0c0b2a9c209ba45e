"""
Outcome - The value object every effect in the game produces.

An action, a spin, an event option, a faction bonus or a sabotage all
describe their effect as an Outcome: a support delta map (region codes,
"ALL", or aggregate keys), plus clout/funds/risk deltas and an optional
message. Outcomes are never stored on the state; they are composed and
then applied once by the reducer.

Design principles:
- Outcomes compose by structural merge (deltas add, messages join)
- Every transform returns a new Outcome
- Multipliers only ever touch positive gains unless a caller says otherwise
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import math


def round_half_away(value: float) -> int:
    """Round to the nearest integer, ties away from zero (2.5 -> 3, -2.5 -> -3)."""
    if value >= 0:
        return int(math.floor(value + 0.5))
    return -int(math.floor(-value + 0.5))


def _scale_if_positive(value: int, multiplier: float) -> int:
    if value > 0:
        return round_half_away(value * multiplier)
    return value


@dataclass
class Outcome:
    """Deltas to apply to a GameState."""
    support: dict[str, int] = field(default_factory=dict)
    funds: int = 0
    clout: int = 0
    risk: int = 0
    message: str | None = None

    @property
    def is_empty(self) -> bool:
        return not any(self.support.values()) and not (self.funds or self.clout or self.risk)

    def merge(self, other: Outcome) -> Outcome:
        """Combine two outcomes: deltas add key-wise, messages are joined."""
        support = dict(self.support)
        for key, amount in other.support.items():
            support[key] = support.get(key, 0) + amount
        messages = [m for m in (self.message, other.message) if m]
        return Outcome(
            support=support,
            funds=self.funds + other.funds,
            clout=self.clout + other.clout,
            risk=self.risk + other.risk,
            message=" ".join(messages) if messages else None,
        )

    def scale_gains(
        self,
        multiplier: float,
        support: bool = True,
        clout: bool = True,
        funds: bool = True,
    ) -> Outcome:
        """
        Multiply positive support/clout/funds deltas.

        Negative deltas and risk are never touched.
        """
        return Outcome(
            support={
                key: _scale_if_positive(amount, multiplier) if support else amount
                for key, amount in self.support.items()
            },
            funds=_scale_if_positive(self.funds, multiplier) if funds else self.funds,
            clout=_scale_if_positive(self.clout, multiplier) if clout else self.clout,
            risk=self.risk,
            message=self.message,
        )

    def scale_risk_gain(self, multiplier: float) -> Outcome:
        """Multiply a positive risk delta; risk reductions pass through."""
        return self._copy_with(risk=_scale_if_positive(self.risk, multiplier))

    def scale_all(self, multiplier: float) -> Outcome:
        """Scale every delta, sign included. Used for faction bonus magnitudes."""
        return Outcome(
            support={k: round_half_away(v * multiplier) for k, v in self.support.items()},
            funds=round_half_away(self.funds * multiplier),
            clout=round_half_away(self.clout * multiplier),
            risk=round_half_away(self.risk * multiplier),
            message=self.message,
        )

    def with_message(self, message: str | None) -> Outcome:
        return self._copy_with(message=message)

    def _copy_with(self, **kwargs) -> Outcome:
        return Outcome(
            support=kwargs.get("support", dict(self.support)),
            funds=kwargs.get("funds", self.funds),
            clout=kwargs.get("clout", self.clout),
            risk=kwargs.get("risk", self.risk),
            message=kwargs.get("message", self.message),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "support": dict(self.support),
            "funds": self.funds,
            "clout": self.clout,
            "risk": self.risk,
            "message": self.message,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Outcome:
        return cls(
            support={k: int(v) for k, v in (data.get("support") or {}).items()},
            funds=int(data.get("funds", 0)),
            clout=int(data.get("clout", 0)),
            risk=int(data.get("risk", 0)),
            message=data.get("message"),
        )
