"""
Action Generator - Lists every action with its adjusted cost and availability.

The action generator is used by:
1. The CLI and the simulate policy to pick a move
2. The API's action catalogue
3. UI hints (why is this greyed out?)

It runs the reducer's own precondition check, so "available" here means
exactly "resolve_action would accept it".
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, TYPE_CHECKING

from .errors import RejectionCode
from .registry import Cost
from .state import GameState

if TYPE_CHECKING:
    from .reducer import Reducer


@dataclass
class ActionOption:
    """One action as currently offered to the player."""
    action_id: str
    name: str
    description: str
    cost: Cost
    tags: tuple[str, ...] = ()
    cooldown: int = 0
    available: bool = True
    reason: str | None = None
    reason_code: RejectionCode | None = None
    extra: dict[str, Any] = field(default_factory=dict)


@dataclass
class ActionGenerator:
    """
    Generates the action catalogue for a state.

    Uses the reducer for costs and eligibility so the two never disagree.
    """
    reducer: Reducer

    def generate(self, state: GameState) -> list[ActionOption]:
        """All registry actions, available or not, in registry order."""
        options = []
        for action in self.reducer.registry:
            rejection = self.reducer.check_action(state, action.id)
            options.append(ActionOption(
                action_id=action.id,
                name=action.name,
                description=action.description,
                cost=self.reducer.action_cost(state, action.id),
                tags=action.tags,
                cooldown=state.action_cooldowns.get(action.id, 0),
                available=rejection is None,
                reason=rejection.message if rejection else None,
                reason_code=rejection.code if rejection else None,
            ))
        return options

    def available(self, state: GameState) -> list[ActionOption]:
        """Only the actions resolve_action would accept right now."""
        return [option for option in self.generate(state) if option.available]
