"""
Advisors - Ability tables and the roster provider seam.

Roster generation is external: a provider just returns advisor names.
The engine resolves those names once, against AdvisorRegistry, into an
AdvisorRoster that answers the aggregate questions the Modifier Pipeline
asks (discount for an action, bonus percent of a type, critical bonus).

An unknown advisor name is an error at session construction, never a
silent no-op at resolution time.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Protocol

from ..engine_core.errors import InvariantViolation, UnknownIdError

MAX_DISCOUNT_PERCENT = 50


class AbilityType(Enum):
    ACTION_BONUS = "action_bonus"
    ACTION_DISCOUNT = "action_discount"
    RISK_REDUCTION = "risk_reduction"
    CLOUT_BONUS = "clout_bonus"
    FUNDS_BONUS = "funds_bonus"
    SUPPORT_BONUS = "support_bonus"
    CRITICAL_CHANCE = "critical_chance"
    FACTION_BONUS = "faction_bonus"
    EVENT_REVEAL = "event_reveal"


@dataclass
class AdvisorAbility:
    """One effect an advisor grants. value is a percent (or percentage points)."""
    type: AbilityType
    value: int = 0
    action_id: str | None = None
    faction_id: str | None = None


@dataclass
class Advisor:
    name: str
    role: str
    abilities: list[AdvisorAbility] = field(default_factory=list)


ADVISORS: tuple[Advisor, ...] = (
    Advisor(
        name='Mike "MemeLord" Miller',
        role="Social Media Strategist",
        abilities=[
            AdvisorAbility(AbilityType.ACTION_BONUS, 20, action_id="meme_campaign"),
            AdvisorAbility(AbilityType.CRITICAL_CHANCE, 5),
        ],
    ),
    Advisor(
        name="Dana Data",
        role="Analytics Guru",
        abilities=[
            AdvisorAbility(AbilityType.SUPPORT_BONUS, 10),
            AdvisorAbility(AbilityType.EVENT_REVEAL),
        ],
    ),
    Advisor(
        name="Riley Rebel",
        role="Grassroots Organizer",
        abilities=[AdvisorAbility(AbilityType.ACTION_DISCOUNT, 25, action_id="rally")],
    ),
    Advisor(
        name="Frank Finance",
        role="Treasurer",
        abilities=[AdvisorAbility(AbilityType.FUNDS_BONUS, 15)],
    ),
    Advisor(
        name="Casey Clout",
        role="Brand Manager",
        abilities=[AdvisorAbility(AbilityType.CLOUT_BONUS, 15)],
    ),
    Advisor(
        name="Lou Lawyer",
        role="General Counsel",
        abilities=[
            AdvisorAbility(AbilityType.RISK_REDUCTION, 25),
            AdvisorAbility(AbilityType.ACTION_DISCOUNT, 25, action_id="legal_fund"),
        ],
    ),
    Advisor(
        name="Jordan Jinx",
        role="Chaos Consultant",
        abilities=[AdvisorAbility(AbilityType.CRITICAL_CHANCE, 10)],
    ),
    Advisor(
        name="Pat Pollster",
        role="Pollster",
        abilities=[AdvisorAbility(AbilityType.FACTION_BONUS, 20, faction_id="moderates")],
    ),
)

DEFAULT_ROSTER: tuple[str, ...] = ('Mike "MemeLord" Miller', "Dana Data", "Riley Rebel")


class AdvisorRegistry:
    """Validated lookup of advisors by name."""

    def __init__(self, advisors: Iterable[Advisor] = ADVISORS):
        self._advisors: dict[str, Advisor] = {}
        for advisor in advisors:
            if advisor.name in self._advisors:
                raise InvariantViolation(f"duplicate advisor: {advisor.name}")
            self._advisors[advisor.name] = advisor

    def get(self, name: str) -> Advisor | None:
        return self._advisors.get(name)

    def require(self, name: str) -> Advisor:
        advisor = self._advisors.get(name)
        if advisor is None:
            raise UnknownIdError("advisor", name)
        return advisor

    @property
    def names(self) -> list[str]:
        return list(self._advisors)


class AdvisorRosterProvider(Protocol):
    """Supplies the names of the advisors hired for a campaign."""

    def roster(self) -> list[str]:
        ...


@dataclass
class StaticRoster:
    """Roster provider returning a fixed list of names."""
    names: tuple[str, ...] = DEFAULT_ROSTER

    def roster(self) -> list[str]:
        return list(self.names)


@dataclass
class AdvisorRoster:
    """
    Resolved advisors for one campaign.

    Sums abilities of the same type across all advisors.
    """
    advisors: list[Advisor] = field(default_factory=list)

    @classmethod
    def resolve(
        cls,
        provider: AdvisorRosterProvider,
        registry: AdvisorRegistry | None = None,
    ) -> AdvisorRoster:
        registry = registry or AdvisorRegistry()
        return cls(advisors=[registry.require(name) for name in provider.roster()])

    @property
    def names(self) -> list[str]:
        return [a.name for a in self.advisors]

    def _abilities(self, ability_type: AbilityType):
        for advisor in self.advisors:
            for ability in advisor.abilities:
                if ability.type == ability_type:
                    yield ability

    def discount_percent(self, action_id: str) -> int:
        """Summed discount for an action, capped at MAX_DISCOUNT_PERCENT."""
        total = sum(
            a.value for a in self._abilities(AbilityType.ACTION_DISCOUNT)
            if a.action_id == action_id
        )
        return min(total, MAX_DISCOUNT_PERCENT)

    def action_bonus_percent(self, action_id: str) -> int:
        return sum(
            a.value for a in self._abilities(AbilityType.ACTION_BONUS)
            if a.action_id == action_id
        )

    def bonus_percent(self, ability_type: AbilityType) -> int:
        """Summed value of a global ability type (support/clout/funds bonus, risk reduction)."""
        return sum(a.value for a in self._abilities(ability_type))

    def critical_bonus_percent(self) -> int:
        return self.bonus_percent(AbilityType.CRITICAL_CHANCE)

    def faction_bonus_percent(self, faction_id: str) -> int:
        return sum(
            a.value for a in self._abilities(AbilityType.FACTION_BONUS)
            if a.faction_id == faction_id
        )

    @property
    def reveals_events(self) -> bool:
        return any(True for _ in self._abilities(AbilityType.EVENT_REVEAL))
