"""
Engine errors.

Rejected player intents are NOT exceptions - they come back as a failed
ActionResult with a RejectionCode. The exceptions here are for the two
cases that indicate a wiring or data-definition bug:

- UnknownIdError: a registry was asked to resolve an id it does not hold
- InvariantViolation: a state or definition broke a structural invariant
"""

from __future__ import annotations
from enum import Enum


class RejectionCode(str, Enum):
    """Stable codes for recoverable intent rejections."""
    PENDING_EVENT = "PENDING_EVENT"
    UNKNOWN_ACTION = "UNKNOWN_ACTION"
    ON_COOLDOWN = "ON_COOLDOWN"
    RISK_LOCKED = "RISK_LOCKED"
    PREREQUISITE = "PREREQUISITE"
    CHALLENGE_BLOCKED = "CHALLENGE_BLOCKED"
    INSUFFICIENT_FUNDS = "INSUFFICIENT_FUNDS"
    INSUFFICIENT_CLOUT = "INSUFFICIENT_CLOUT"
    NO_PENDING_EVENT = "NO_PENDING_EVENT"
    INVALID_OPTION = "INVALID_OPTION"
    NO_SPIN = "NO_SPIN"
    INVALID_LOCK = "INVALID_LOCK"
    GAME_OVER = "GAME_OVER"


class UnknownIdError(KeyError):
    """Raised by registry.require() for an id that is not registered."""

    def __init__(self, kind: str, item_id: str):
        self.kind = kind
        self.item_id = item_id
        super().__init__(f"Unknown {kind}: {item_id!r}")


class InvariantViolation(AssertionError):
    """A state or definition broke an invariant that correct wiring guarantees."""
