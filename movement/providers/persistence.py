"""
State Store - Saves whole campaign states as JSON files.

The store:
- Keys files by game id
- Stores on local disk, one JSON document per campaign
- No database required
- Saves are whole-state snapshots, never partial updates

Design decisions:
- save() is fire-and-forget: I/O failures are logged, never raised,
  so a full disk cannot take down a running session
- load() defaults missing fields, so saves from older versions load
- A loaded state always starts a new session (session_first_action)
"""

from __future__ import annotations
import json
import logging
from pathlib import Path

from ..engine_core.state import GameState

logger = logging.getLogger(__name__)


class JsonStateStore:
    """
    File-based store for campaign states.

    Usage:
        store = JsonStateStore(save_dir="~/.movement/saves")

        state = store.load(game_id)
        if state is None:
            state = create_initial_state(game_id=game_id)

        store.save(game_id, state)
    """

    def __init__(self, save_dir: str | Path | None = None):
        if save_dir is None:
            save_dir = Path.home() / ".movement" / "saves"
        self.save_dir = Path(save_dir).expanduser()
        self.save_dir.mkdir(parents=True, exist_ok=True)

    def load(self, game_id: str) -> GameState | None:
        """
        Load a saved campaign.

        Returns None if nothing is saved under game_id or the file is unreadable.
        """
        path = self._get_path(game_id)
        if not path.exists():
            return None

        try:
            with open(path, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("could not read save %s: %s", path, exc)
            return None

        return GameState.from_dict(data)

    def save(self, game_id: str, state: GameState) -> None:
        """Write a campaign snapshot. Errors are logged, not raised."""
        path = self._get_path(game_id)
        tmp_path = path.with_suffix(".tmp")
        try:
            with open(tmp_path, "w") as f:
                json.dump(state.to_dict(), f, indent=2)
            tmp_path.replace(path)
        except (OSError, TypeError, ValueError) as exc:
            logger.warning("could not save %s: %s", path, exc)

    def delete(self, game_id: str) -> bool:
        """Remove a save. Returns True if one existed."""
        path = self._get_path(game_id)
        if not path.exists():
            return False
        try:
            path.unlink()
        except OSError as exc:
            logger.warning("could not delete %s: %s", path, exc)
            return False
        return True

    def list_saves(self) -> list[str]:
        """Game ids with a save on disk."""
        return sorted(p.stem for p in self.save_dir.glob("*.json"))

    def _get_path(self, game_id: str) -> Path:
        safe_id = "".join(c for c in game_id if c.isalnum() or c in "-_")
        return self.save_dir / f"{safe_id}.json"
