"""
Configuration - Environment-driven settings and logging setup.

Environment variables:
    MOVEMENT_ENV           environment name (default: development)
    MOVEMENT_SAVE_DIR      persistence directory (default: ~/.movement/saves)
    MOVEMENT_LOG_LEVEL     logging level (default: INFO)
    ALLOWED_ORIGINS        comma-separated CORS origins (default: *)
    MOVEMENT_FACTION_MODE  classic or political (default: classic)
    MOVEMENT_SEED          integer seed for new sessions (default: unset)

Gameplay constants are not configuration; they live next to the code
that uses them.
"""

from __future__ import annotations
from dataclasses import dataclass, field
import logging
import os
from pathlib import Path

from .engine_core.state import FactionMode

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


@dataclass
class EngineConfig:
    """Runtime settings for the CLI and the API."""
    env: str = "development"
    save_dir: Path = field(default_factory=lambda: Path.home() / ".movement" / "saves")
    log_level: str = "INFO"
    allowed_origins: list[str] = field(default_factory=lambda: ["*"])
    faction_mode: FactionMode = FactionMode.CLASSIC
    seed: int | None = None

    @classmethod
    def from_env(cls) -> EngineConfig:
        save_dir = os.getenv("MOVEMENT_SAVE_DIR")
        seed = os.getenv("MOVEMENT_SEED")
        origins = os.getenv("ALLOWED_ORIGINS", "*")
        return cls(
            env=os.getenv("MOVEMENT_ENV", "development"),
            save_dir=Path(save_dir).expanduser() if save_dir else Path.home() / ".movement" / "saves",
            log_level=os.getenv("MOVEMENT_LOG_LEVEL", "INFO").upper(),
            allowed_origins=[o.strip() for o in origins.split(",") if o.strip()],
            faction_mode=FactionMode(os.getenv("MOVEMENT_FACTION_MODE", "classic").lower()),
            seed=int(seed) if seed else None,
        )


def setup_logging(level: str | int = "INFO") -> None:
    """Configure root logging once. Library code never calls this."""
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT)
