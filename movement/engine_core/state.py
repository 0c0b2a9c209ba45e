"""
Game State - The single root aggregate of a campaign.

Design principles:
- Immutable-friendly: the reducer never mutates a state it was handed,
  every transition builds a new one via _copy_with()
- Serializable: to_dict()/from_dict() round-trip through JSON, and
  from_dict() defaults any missing field so old saves keep loading
- Self-checking: check_invariants() raises InvariantViolation when a
  structural guarantee (full region map, bounded values) is broken
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any
from copy import deepcopy

from .errors import InvariantViolation
from .outcome import Outcome
from .regions import REGION_CODES, average_support

NEWS_LOG_LIMIT = 50
REACTION_LIMIT = 10


class FactionMode(Enum):
    """Which faction set a campaign runs with."""
    CLASSIC = "classic"  # five demographic factions
    POLITICAL = "political"  # three political factions


class MoodLevel(IntEnum):
    """Ordered faction mood, hostile lowest."""
    HOSTILE = 0
    WARY = 1
    NEUTRAL = 2
    ENGAGED = 3
    ENTHUSIASTIC = 4


class VictoryType(Enum):
    POPULAR_MANDATE = "POPULAR_MANDATE"
    FACTION_DOMINANCE = "FACTION_DOMINANCE"
    ECONOMIC_POWER = "ECONOMIC_POWER"
    SPEED_RUN = "SPEED_RUN"


class DefeatType(Enum):
    RISK_COLLAPSE = "RISK_COLLAPSE"
    FACTION_ABANDONMENT = "FACTION_ABANDONMENT"
    BANKRUPTCY = "BANKRUPTCY"
    TIME_OUT = "TIME_OUT"


@dataclass
class FactionSentiment:
    """Mood and momentum for one faction."""
    mood: MoodLevel = MoodLevel.NEUTRAL
    momentum: float = 0.0
    turns_in_mood: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "mood": self.mood.name,
            "momentum": self.momentum,
            "turns_in_mood": self.turns_in_mood,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> FactionSentiment:
        return cls(
            mood=MoodLevel[data.get("mood", MoodLevel.NEUTRAL.name)],
            momentum=float(data.get("momentum", 0.0)),
            turns_in_mood=int(data.get("turns_in_mood", 0)),
        )


@dataclass
class Reaction:
    """A faction's visible reaction to something the player did."""
    faction_id: str
    message: str
    impact: int
    turn: int
    mood_change: tuple[str, str] | None = None  # (old mood, new mood)

    def to_dict(self) -> dict[str, Any]:
        return {
            "faction_id": self.faction_id,
            "message": self.message,
            "impact": self.impact,
            "turn": self.turn,
            "mood_change": list(self.mood_change) if self.mood_change else None,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Reaction:
        change = data.get("mood_change")
        return cls(
            faction_id=data["faction_id"],
            message=data.get("message", ""),
            impact=int(data.get("impact", 0)),
            turn=int(data.get("turn", 0)),
            mood_change=tuple(change) if change else None,
        )


@dataclass
class SentimentState:
    """Per-faction moods plus the aggregate momentum and recent reactions."""
    factions: dict[str, FactionSentiment] = field(default_factory=dict)
    global_momentum: float = 0.0
    reactions: list[Reaction] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "factions": {fid: fs.to_dict() for fid, fs in self.factions.items()},
            "global_momentum": self.global_momentum,
            "reactions": [r.to_dict() for r in self.reactions],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any], faction_ids: list[str]) -> SentimentState:
        raw = data.get("factions") or {}
        factions = {
            fid: FactionSentiment.from_dict(raw[fid]) if fid in raw else FactionSentiment()
            for fid in faction_ids
        }
        return cls(
            factions=factions,
            global_momentum=float(data.get("global_momentum", 0.0)),
            reactions=[Reaction.from_dict(r) for r in data.get("reactions") or []][-REACTION_LIMIT:],
        )


@dataclass
class EventOption:
    """One choice on a pending event."""
    text: str
    outcome: Outcome
    next_step: str | None = None
    preview: str | None = None  # filled in by event-reveal advisors

    def to_dict(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "outcome": self.outcome.to_dict(),
            "next_step": self.next_step,
            "preview": self.preview,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EventOption:
        return cls(
            text=data.get("text", ""),
            outcome=Outcome.from_dict(data.get("outcome") or {}),
            next_step=data.get("next_step"),
            preview=data.get("preview"),
        )


@dataclass
class GameEvent:
    """
    An event instance waiting on the player.

    Events with options become the state's pending_event. Chain events
    carry chain_id/step_id so resolution can advance the chain.
    """
    event_id: str
    title: str
    description: str
    category: str
    options: list[EventOption] = field(default_factory=list)
    chain_id: str | None = None
    step_id: str | None = None

    @property
    def is_chain_event(self) -> bool:
        return self.chain_id is not None

    def to_dict(self) -> dict[str, Any]:
        return {
            "event_id": self.event_id,
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "options": [o.to_dict() for o in self.options],
            "chain_id": self.chain_id,
            "step_id": self.step_id,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GameEvent:
        return cls(
            event_id=data.get("event_id", ""),
            title=data.get("title", ""),
            description=data.get("description", ""),
            category=data.get("category", "political"),
            options=[EventOption.from_dict(o) for o in data.get("options") or []],
            chain_id=data.get("chain_id"),
            step_id=data.get("step_id"),
        )


@dataclass
class ActiveChain:
    """The chain in progress and the step it will show next."""
    chain_id: str
    next_step_id: str


@dataclass
class EventContext:
    """
    Per-game event bookkeeping.

    Lives on the state so two games never share shown-event or chain
    tracking, and so it is saved and reset with everything else.
    """
    shown_event_ids: list[str] = field(default_factory=list)
    active_chain: ActiveChain | None = None
    completed_chains: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "shown_event_ids": list(self.shown_event_ids),
            "active_chain": (
                {"chain_id": self.active_chain.chain_id, "next_step_id": self.active_chain.next_step_id}
                if self.active_chain else None
            ),
            "completed_chains": list(self.completed_chains),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> EventContext:
        active = data.get("active_chain")
        return cls(
            shown_event_ids=list(data.get("shown_event_ids") or []),
            active_chain=ActiveChain(active["chain_id"], active["next_step_id"]) if active else None,
            completed_chains=list(data.get("completed_chains") or []),
        )


@dataclass
class SpinState:
    """The reels currently showing, by reel item id."""
    action_id: str
    modifier_id: str
    target_id: str
    locked: list[str] = field(default_factory=list)  # reel names: action/modifier/target
    rerolls: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "action_id": self.action_id,
            "modifier_id": self.modifier_id,
            "target_id": self.target_id,
            "locked": list(self.locked),
            "rerolls": self.rerolls,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> SpinState:
        return cls(
            action_id=data["action_id"],
            modifier_id=data["modifier_id"],
            target_id=data["target_id"],
            locked=list(data.get("locked") or []),
            rerolls=int(data.get("rerolls", 0)),
        )


@dataclass
class GameState:
    """
    Complete campaign state at a point in time.

    This is the canonical state the engine operates on.
    All state changes go through the reducer.
    """
    game_id: str
    faction_mode: FactionMode = FactionMode.CLASSIC

    turn: int = 0
    support: dict[str, int] = field(default_factory=dict)
    faction_support: dict[str, int] = field(default_factory=dict)
    funds: int = 0
    clout: int = 0
    risk: int = 0

    # Per-action bookkeeping
    action_cooldowns: dict[str, int] = field(default_factory=dict)
    consecutive_action_uses: dict[str, int] = field(default_factory=dict)

    streak: int = 0
    highest_streak: int = 0

    sentiment: SentimentState = field(default_factory=SentimentState)

    # Events
    pending_event: GameEvent | None = None
    event_context: EventContext = field(default_factory=EventContext)

    spin: SpinState | None = None

    # Lifetime counters, never decremented
    total_funds_earned: int = 0
    total_clout_earned: int = 0
    total_critical_hits: int = 0

    consecutive_negative_funds: int = 0
    session_first_action: bool = True

    # Terminal flags
    victory: bool = False
    game_over: bool = False
    victory_type: VictoryType | None = None
    defeat_type: DefeatType | None = None

    news_log: list[str] = field(default_factory=list)

    # Metadata (challenge id, advisor names, ...)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def is_terminal(self) -> bool:
        return self.victory or self.game_over

    @property
    def average_support(self) -> float:
        return average_support(self.support)

    def with_log(self, *messages: str) -> GameState:
        """Return new state with lines appended to the news log."""
        log = (self.news_log + [m for m in messages if m])[-NEWS_LOG_LIMIT:]
        return self._copy_with(news_log=log)

    def check_invariants(self) -> None:
        """Raise InvariantViolation if the state is structurally broken."""
        missing = [code for code in REGION_CODES if code not in self.support]
        if missing:
            raise InvariantViolation(f"support is missing regions: {missing}")
        extra = set(self.support) - set(REGION_CODES)
        if extra:
            raise InvariantViolation(f"support has unknown regions: {sorted(extra)}")
        for code, value in self.support.items():
            if not 0 <= value <= 100:
                raise InvariantViolation(f"support[{code}]={value} out of range")
        for fid, value in self.faction_support.items():
            if not 0 <= value <= 100:
                raise InvariantViolation(f"faction_support[{fid}]={value} out of range")
        if set(self.sentiment.factions) != set(self.faction_support):
            raise InvariantViolation("sentiment factions do not match faction_support")
        if not 0 <= self.risk <= 100:
            raise InvariantViolation(f"risk={self.risk} out of range")
        if self.funds < 0 or self.clout < 0:
            raise InvariantViolation(f"negative resources: funds={self.funds} clout={self.clout}")
        if self.pending_event is not None and not self.pending_event.options:
            raise InvariantViolation("pending event has no options")

    def _copy_with(self, **kwargs) -> GameState:
        """Create a copy with some fields replaced."""
        return GameState(
            game_id=kwargs.get("game_id", self.game_id),
            faction_mode=kwargs.get("faction_mode", self.faction_mode),
            turn=kwargs.get("turn", self.turn),
            support=kwargs.get("support", self.support),
            faction_support=kwargs.get("faction_support", self.faction_support),
            funds=kwargs.get("funds", self.funds),
            clout=kwargs.get("clout", self.clout),
            risk=kwargs.get("risk", self.risk),
            action_cooldowns=kwargs.get("action_cooldowns", self.action_cooldowns),
            consecutive_action_uses=kwargs.get("consecutive_action_uses", self.consecutive_action_uses),
            streak=kwargs.get("streak", self.streak),
            highest_streak=kwargs.get("highest_streak", self.highest_streak),
            sentiment=kwargs.get("sentiment", self.sentiment),
            pending_event=kwargs.get("pending_event", self.pending_event),
            event_context=kwargs.get("event_context", self.event_context),
            spin=kwargs.get("spin", self.spin),
            total_funds_earned=kwargs.get("total_funds_earned", self.total_funds_earned),
            total_clout_earned=kwargs.get("total_clout_earned", self.total_clout_earned),
            total_critical_hits=kwargs.get("total_critical_hits", self.total_critical_hits),
            consecutive_negative_funds=kwargs.get(
                "consecutive_negative_funds", self.consecutive_negative_funds
            ),
            session_first_action=kwargs.get("session_first_action", self.session_first_action),
            victory=kwargs.get("victory", self.victory),
            game_over=kwargs.get("game_over", self.game_over),
            victory_type=kwargs.get("victory_type", self.victory_type),
            defeat_type=kwargs.get("defeat_type", self.defeat_type),
            news_log=kwargs.get("news_log", self.news_log),
            metadata=kwargs.get("metadata", self.metadata),
        )

    def clone(self) -> GameState:
        """Deep copy the state."""
        return deepcopy(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> GameState:
        """Rehydrate a saved state, defaulting missing fields. See setup.state_from_dict."""
        from .setup import state_from_dict
        return state_from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to plain JSON-compatible data."""
        return {
            "game_id": self.game_id,
            "faction_mode": self.faction_mode.value,
            "turn": self.turn,
            "support": dict(self.support),
            "faction_support": dict(self.faction_support),
            "funds": self.funds,
            "clout": self.clout,
            "risk": self.risk,
            "action_cooldowns": dict(self.action_cooldowns),
            "consecutive_action_uses": dict(self.consecutive_action_uses),
            "streak": self.streak,
            "highest_streak": self.highest_streak,
            "sentiment": self.sentiment.to_dict(),
            "pending_event": self.pending_event.to_dict() if self.pending_event else None,
            "event_context": self.event_context.to_dict(),
            "spin": self.spin.to_dict() if self.spin else None,
            "total_funds_earned": self.total_funds_earned,
            "total_clout_earned": self.total_clout_earned,
            "total_critical_hits": self.total_critical_hits,
            "consecutive_negative_funds": self.consecutive_negative_funds,
            "session_first_action": self.session_first_action,
            "victory": self.victory,
            "game_over": self.game_over,
            "victory_type": self.victory_type.value if self.victory_type else None,
            "defeat_type": self.defeat_type.value if self.defeat_type else None,
            "news_log": list(self.news_log),
            "metadata": dict(self.metadata),
        }
