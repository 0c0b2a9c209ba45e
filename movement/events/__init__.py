"""
Events - One-shot pool, narrative chains and the scheduler that picks between them.
"""

from .pool import EVENT_CATEGORIES, EVENT_POOL, EventTemplate
from .chains import (
    DEFAULT_CHAINS,
    ChainDefinition,
    ChainRegistry,
    ChainStep,
    default_chain_registry,
)
from .scheduler import EventScheduler, ScheduledEvent, describe_outcome, reveal_options

__all__ = [
    "EVENT_CATEGORIES",
    "EVENT_POOL",
    "EventTemplate",
    "DEFAULT_CHAINS",
    "ChainDefinition",
    "ChainRegistry",
    "ChainStep",
    "default_chain_registry",
    "EventScheduler",
    "ScheduledEvent",
    "describe_outcome",
    "reveal_options",
]
