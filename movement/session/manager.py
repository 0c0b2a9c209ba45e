"""
Session Manager - Creates and manages campaign sessions.

LIFECYCLE:
1. Caller starts a session: mode, seed, advisors, challenge, bonus
2. Advisors and challenge are resolved up front; unknown ids fail here,
   never mid-game
3. If a store is configured and a save exists for the game id, the
   session resumes from it with the saved challenge and advisors
4. One session per game id: asking for an open game returns its session
5. During play every intent goes through the session's GameLoop
6. Ending a session drops it from memory; the save is kept unless asked

PERSISTENCE RULES:
- Whole-state snapshots only, written after accepted transitions
- A failed save never fails the intent that caused it
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any
import logging
import random
import threading
import time
import uuid

from ..engine_core.reducer import Reducer
from ..engine_core.rng import make_rng
from ..engine_core.setup import create_initial_state
from ..engine_core.state import FactionMode, GameState
from ..providers.advisors import DEFAULT_ROSTER, AdvisorRegistry, AdvisorRoster, StaticRoster
from ..providers.bonuses import StartingBonus
from ..providers.challenges import Challenge, require_challenge
from ..providers.persistence import JsonStateStore

logger = logging.getLogger(__name__)


class SessionConflictError(ValueError):
    """A game was resumed with a different challenge or advisor roster."""

    def __init__(self, game_id: str, reason: str):
        self.game_id = game_id
        self.reason = reason
        super().__init__(f"Game {game_id} was started with {reason}")


def _check_resume(
    game_id: str,
    metadata: dict[str, Any],
    advisors: list[str] | tuple[str, ...] | None,
    challenge_id: str | None,
) -> None:
    saved_challenge = metadata.get("challenge_id")
    if challenge_id is not None and challenge_id != saved_challenge:
        raise SessionConflictError(game_id, f"challenge {saved_challenge or 'none'}")
    saved_advisors = metadata.get("advisors")
    if advisors is not None and saved_advisors is not None and list(advisors) != list(saved_advisors):
        raise SessionConflictError(game_id, f"advisors {', '.join(saved_advisors)}")


@dataclass
class Session:
    """
    One running campaign.

    Contains:
    - Current canonical game state
    - The session's RNG (seeded when a seed is given)
    - Resolved advisor roster and optional challenge
    - The reducer built from them
    - Optional store for snapshots

    The lock serialises writers; GameLoop holds it for every transition.
    """
    session_id: str
    state: GameState
    rng: random.Random
    roster: AdvisorRoster
    reducer: Reducer
    created_at: float
    challenge: Challenge | None = None
    bonus: StartingBonus | None = None
    store: JsonStateStore | None = None
    seed: int | None = None
    lock: threading.Lock = field(default_factory=threading.Lock, repr=False)
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def game_id(self) -> str:
        return self.state.game_id

    def is_active(self) -> bool:
        """Check if the campaign is still being played."""
        return not self.state.is_terminal

    def save(self) -> None:
        if self.store is not None:
            self.store.save(self.game_id, self.state)


class SessionManager:
    """
    Manages campaign sessions.

    Responsibilities:
    - Create sessions with their providers resolved
    - Track sessions in memory
    - Clean up finished sessions
    """

    def __init__(
        self,
        store: JsonStateStore | None = None,
        advisor_registry: AdvisorRegistry | None = None,
    ):
        self.store = store
        self.advisor_registry = advisor_registry or AdvisorRegistry()
        self._sessions: dict[str, Session] = {}
        self._games: dict[str, str] = {}  # game_id -> session_id
        self._lock = threading.Lock()

    def create_session(
        self,
        faction_mode: FactionMode = FactionMode.CLASSIC,
        seed: int | None = None,
        advisors: list[str] | tuple[str, ...] | None = None,
        challenge_id: str | None = None,
        bonus: StartingBonus | None = None,
        game_id: str | None = None,
    ) -> Session:
        """
        Create a new session, or return the one already open for game_id.

        A resumed game keeps the challenge and advisors it was started
        with; passing None for them means "whatever the save says".

        Args:
            faction_mode: Faction set for a fresh campaign
            seed: Optional RNG seed for reproducible play
            advisors: Advisor names (default roster if None)
            challenge_id: Optional challenge id from the catalogue
            bonus: Optional starting bonus for a fresh campaign
            game_id: Resume this campaign from the store if it has it

        Returns:
            Session ready for intents

        Raises:
            UnknownIdError: for an unknown advisor name or challenge id
            SessionConflictError: if game_id is open or saved with a
                different challenge or roster
        """
        with self._lock:
            if game_id and game_id in self._games:
                session = self._sessions[self._games[game_id]]
                _check_resume(game_id, session.state.metadata, advisors, challenge_id)
                logger.info("game %s already open in session %s", game_id, session.session_id)
                return session

            state = None
            if game_id and self.store is not None:
                state = self.store.load(game_id)
            if state is not None:
                _check_resume(game_id, state.metadata, advisors, challenge_id)
                challenge_id = state.metadata.get("challenge_id")
                advisors = state.metadata.get("advisors", advisors)

            names = tuple(advisors) if advisors is not None else DEFAULT_ROSTER
            roster = AdvisorRoster.resolve(StaticRoster(names), self.advisor_registry)
            challenge = require_challenge(challenge_id) if challenge_id else None

            if state is None:
                state = create_initial_state(
                    game_id=game_id,
                    faction_mode=faction_mode,
                    bonus=bonus,
                    challenge=challenge,
                )
                state = state._copy_with(metadata={**state.metadata, "advisors": roster.names})

            session = Session(
                session_id=str(uuid.uuid4()),
                state=state,
                rng=make_rng(seed),
                roster=roster,
                reducer=Reducer(roster=roster, challenge=challenge, bonus=bonus),
                created_at=time.time(),
                challenge=challenge,
                bonus=bonus,
                store=self.store,
                seed=seed,
            )
            self._sessions[session.session_id] = session
            self._games[session.game_id] = session.session_id
            session.save()

        logger.info(
            "session %s created for game %s (mode=%s, challenge=%s)",
            session.session_id, state.game_id, state.faction_mode.value, challenge_id,
        )
        return session

    def get_session(self, session_id: str) -> Session | None:
        """Get a session by ID."""
        return self._sessions.get(session_id)

    def get_session_for_game(self, game_id: str) -> Session | None:
        """Get the open session playing a game, if any."""
        session_id = self._games.get(game_id)
        return self._sessions.get(session_id) if session_id else None

    def end_session(self, session_id: str, delete_save: bool = False) -> bool:
        """
        End a session and drop it from memory.

        Returns False if no such session.
        """
        with self._lock:
            session = self._sessions.pop(session_id, None)
            if session is not None:
                self._games.pop(session.game_id, None)
        if session is None:
            return False
        if delete_save and session.store is not None:
            session.store.delete(session.game_id)
        logger.info("session %s ended (game %s)", session_id, session.game_id)
        return True

    def list_sessions(self) -> list[Session]:
        return list(self._sessions.values())

    def list_active_sessions(self) -> list[str]:
        """List IDs of sessions whose campaign is not over."""
        return [sid for sid, session in self._sessions.items() if session.is_active()]

    def cleanup_finished_sessions(self, max_age_seconds: int = 3600) -> int:
        """
        Drop finished sessions older than max_age.

        Called periodically to free memory. Returns how many were dropped.
        """
        now = time.time()
        stale = [
            sid for sid, session in self._sessions.items()
            if now - session.created_at > max_age_seconds and not session.is_active()
        ]
        for sid in stale:
            self.end_session(sid)
        return len(stale)
