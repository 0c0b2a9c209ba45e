"""
Pytest fixtures for Movement tests.
"""

import random

import pytest

from ..engine_core.reducer import Reducer
from ..engine_core.setup import create_initial_state
from ..engine_core.state import FactionMode, GameState
from ..events.chains import ChainRegistry
from ..events.scheduler import EventScheduler
from ..providers.advisors import AdvisorRoster


class ScriptedRandom:
    """
    Random source that returns queued floats from random(), then falls
    back to a seeded random.Random. choice() and sample() always use the
    fallback so they stay reproducible.
    """

    def __init__(self, values=(), seed: int = 0):
        self.values = list(values)
        self.fallback = random.Random(seed)
        self.draws = 0

    def push(self, *values: float) -> None:
        self.values.extend(values)

    def random(self) -> float:
        self.draws += 1
        if self.values:
            return self.values.pop(0)
        return self.fallback.random()

    def choice(self, seq):
        return self.fallback.choice(seq)

    def sample(self, population, k):
        return self.fallback.sample(population, k)


@pytest.fixture
def rng() -> ScriptedRandom:
    """Scripted RNG with an empty queue."""
    return ScriptedRandom()


@pytest.fixture
def state() -> GameState:
    """Fresh classic-mode campaign at turn 0."""
    return create_initial_state(game_id="test_game")


@pytest.fixture
def political_state() -> GameState:
    """Fresh political-mode campaign at turn 0."""
    return create_initial_state(game_id="test_game", faction_mode=FactionMode.POLITICAL)


@pytest.fixture
def quiet_scheduler() -> EventScheduler:
    """Scheduler with no events and no chains."""
    return EventScheduler(pool=(), chains=ChainRegistry([]))


@pytest.fixture
def reducer(quiet_scheduler: EventScheduler) -> Reducer:
    """Reducer with no advisors, no challenge and no events."""
    return Reducer(scheduler=quiet_scheduler, roster=AdvisorRoster())


@pytest.fixture
def played_state(state: GameState) -> GameState:
    """A state past the first action, so the first-action bonus is spent."""
    return state._copy_with(turn=2, session_first_action=False)
