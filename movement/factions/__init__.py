"""
Factions - Faction tables and the sentiment engine.
"""

from .definitions import (
    CLASSIC_FACTIONS,
    POLITICAL_FACTIONS,
    EVENT_CATEGORY_MODIFIERS,
    FactionDefinition,
    FactionTemplate,
    factions_for,
    faction_ids,
    get_faction,
)
from .sentiment import (
    FactionEvent,
    SentimentTurn,
    action_faction_deltas,
    clout_multiplier,
    decay,
    event_faction_deltas,
    mood_from_momentum,
    process_action,
    react_to_tags,
)

__all__ = [
    "CLASSIC_FACTIONS",
    "POLITICAL_FACTIONS",
    "EVENT_CATEGORY_MODIFIERS",
    "FactionDefinition",
    "FactionTemplate",
    "factions_for",
    "faction_ids",
    "get_faction",
    "FactionEvent",
    "SentimentTurn",
    "action_faction_deltas",
    "clout_multiplier",
    "decay",
    "event_faction_deltas",
    "mood_from_momentum",
    "process_action",
    "react_to_tags",
]
