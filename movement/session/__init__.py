"""
Session Module - Manages running campaigns.

A session represents one play-through:
- Created when a player starts or resumes a campaign
- Holds the current state, RNG and resolved providers
- Serialises intents through its GameLoop
- Snapshots to the store after accepted transitions
"""

from .manager import SessionManager, Session, SessionConflictError
from .game_loop import GameLoop

__all__ = [
    "SessionManager",
    "Session",
    "SessionConflictError",
    "GameLoop",
]
