"""
Intent System - Player intents and transition results.

Intents represent:
1. Taking a campaign action by id
2. Answering the pending event
3. Spinning (or rerolling) the reels
4. Executing the current spin
5. Resetting the campaign

All state changes flow through intents applied by the reducer.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .errors import RejectionCode


class IntentType(Enum):
    """Types of intents the reducer accepts."""
    ACTION = "action"
    RESOLVE_EVENT = "resolve_event"
    SPIN = "spin"
    EXECUTE_SPIN = "execute_spin"
    RESET = "reset"


@dataclass
class Intent:
    """
    One player intent.

    Which fields matter depends on intent_type: action_id (ACTION),
    option_index (RESOLVE_EVENT), locked reel names (SPIN).
    """
    intent_type: IntentType
    action_id: str | None = None
    option_index: int | None = None
    locked: tuple[str, ...] = ()
    params: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def action(cls, action_id: str) -> Intent:
        return cls(intent_type=IntentType.ACTION, action_id=action_id)

    @classmethod
    def resolve_event(cls, option_index: int) -> Intent:
        return cls(intent_type=IntentType.RESOLVE_EVENT, option_index=option_index)

    @classmethod
    def spin(cls, locked: list[str] | tuple[str, ...] = ()) -> Intent:
        return cls(intent_type=IntentType.SPIN, locked=tuple(locked))

    @classmethod
    def execute_spin(cls) -> Intent:
        return cls(intent_type=IntentType.EXECUTE_SPIN)

    @classmethod
    def reset(cls) -> Intent:
        return cls(intent_type=IntentType.RESET)


@dataclass
class ActionResult:
    """
    Result of applying an intent.

    A rejected intent still carries a new_state: the input state with one
    news-log line appended. Nothing else about it differs.
    """
    success: bool
    new_state: Any | None = None  # GameState
    error: str | None = None
    error_code: RejectionCode | None = None

    # For UI/presentation
    state_changes: list[str] = field(default_factory=list)

    critical: bool = False
    first_action_bonus: bool = False
    combo: Any | None = None  # ComboResult for spin executions
    event_triggered: str | None = None

    @classmethod
    def failure(cls, state: Any, error: str, error_code: RejectionCode) -> ActionResult:
        """Create a rejection: unchanged state plus one log line."""
        return cls(
            success=False,
            new_state=state.with_log(error),
            error=error,
            error_code=error_code,
        )

    @classmethod
    def success_with_state(cls, state: Any, changes: list[str] | None = None) -> ActionResult:
        """Create a success result with new state."""
        return cls(success=True, new_state=state, state_changes=changes or [])
