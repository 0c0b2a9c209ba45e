"""
Risk Zones - Banded classification of the risk meter.

Zones scale action costs and hard-lock some actions.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum


class RiskZone(Enum):
    SAFE = "safe"
    CAUTION = "caution"
    DANGER = "danger"
    CRITICAL = "critical"


@dataclass
class RiskZoneConfig:
    zone: RiskZone
    min_risk: int
    cost_multiplier: float
    locked_actions: frozenset[str] = frozenset()


# Ordered highest band first
RISK_ZONES: tuple[RiskZoneConfig, ...] = (
    RiskZoneConfig(RiskZone.CRITICAL, 80, 1.5, frozenset({"bot_army"})),
    RiskZoneConfig(RiskZone.DANGER, 60, 1.25),
    RiskZoneConfig(RiskZone.CAUTION, 40, 1.0),
    RiskZoneConfig(RiskZone.SAFE, 0, 1.0),
)


def zone_config(risk: int) -> RiskZoneConfig:
    for config in RISK_ZONES:
        if risk >= config.min_risk:
            return config
    return RISK_ZONES[-1]


def risk_zone(risk: int) -> RiskZone:
    return zone_config(risk).zone


def is_locked(action_id: str, risk: int) -> bool:
    """True if the current risk zone hard-locks the action."""
    return action_id in zone_config(risk).locked_actions
