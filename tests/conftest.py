"""
Pytest fixtures for the game engine and API tests.

Provides a controllable clock, a scripted random source, and an in-memory store.
"""

import itertools

import pytest
from fastapi.testclient import TestClient

from app.db.session import MemorySessionStore
from app.main import create_app
from app.schemas.game import GameState
from app.services.game import GameContext

START_MS = 1_700_000_000_000


class FakeClock:
    """Epoch-millisecond clock that only moves when told to."""

    def __init__(self, now: int = START_MS):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


class ScriptedRandom:
    """Returns queued values, then `default` forever. Counts draws."""

    def __init__(self, default: float = 0.5):
        self.queue: list[float] = []
        self.default = default
        self.calls = 0

    def push(self, *values: float) -> None:
        self.queue.extend(values)

    def __call__(self) -> float:
        self.calls += 1
        if self.queue:
            return self.queue.pop(0)
        return self.default


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def rng():
    return ScriptedRandom()


@pytest.fixture
def ctx(clock, rng):
    counter = itertools.count(1)
    return GameContext(now=clock, random=rng, new_id=lambda: f"id-{next(counter)}")


@pytest.fixture
def state():
    """Fresh game state."""
    return GameState()


@pytest.fixture
def store():
    return MemorySessionStore()


@pytest.fixture
def client(store, ctx):
    """Test client with in-memory store and deterministic context."""
    app = create_app(store=store, context=ctx)
    with TestClient(app) as c:
        yield c
