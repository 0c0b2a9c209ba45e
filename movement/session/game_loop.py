"""
Game Loop - Single-writer driver for one session.

The loop:
1. Takes the session lock
2. Refuses anything but a reset once the campaign is over
3. Hands the intent to the reducer with the session's RNG
4. Adopts the returned state (a rejection still carries its log line)
5. Saves after accepted transitions

Intents for the same session never interleave.
"""

from __future__ import annotations
from typing import TYPE_CHECKING
import logging

from ..engine_core.action import ActionResult, Intent, IntentType
from ..engine_core.action_generator import ActionGenerator, ActionOption
from ..engine_core.errors import RejectionCode

if TYPE_CHECKING:
    from .manager import Session

logger = logging.getLogger(__name__)

GAME_OVER_MESSAGE = "The campaign is over. Reset to play again."


class GameLoop:
    """
    The main game loop driver.

    Usage:
        loop = GameLoop(session)

        result = loop.take_action("rally")
        if result.new_state.pending_event:
            result = loop.resolve_event(0)
    """

    def __init__(self, session: Session):
        self.session = session
        self.generator = ActionGenerator(session.reducer)

    def submit(self, intent: Intent) -> ActionResult:
        """Apply one intent under the session lock."""
        session = self.session
        with session.lock:
            state = session.state
            if state.is_terminal and intent.intent_type != IntentType.RESET:
                logger.info("session %s: intent %s refused, game over", session.session_id, intent.intent_type.value)
                result = ActionResult.failure(state, GAME_OVER_MESSAGE, RejectionCode.GAME_OVER)
            else:
                result = session.reducer.apply(state, intent, session.rng)

            session.state = result.new_state
            if result.success:
                session.save()
            return result

    def take_action(self, action_id: str) -> ActionResult:
        return self.submit(Intent.action(action_id))

    def resolve_event(self, option_index: int) -> ActionResult:
        return self.submit(Intent.resolve_event(option_index))

    def spin(self, locked: list[str] | tuple[str, ...] = ()) -> ActionResult:
        return self.submit(Intent.spin(locked))

    def execute_spin(self) -> ActionResult:
        return self.submit(Intent.execute_spin())

    def reset(self) -> ActionResult:
        return self.submit(Intent.reset())

    def actions(self) -> list[ActionOption]:
        """Action catalogue for the current state."""
        return self.generator.generate(self.session.state)
