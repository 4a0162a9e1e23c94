"""Session-scoped game state storage.

Each session holds exactly one ``GameState`` snapshot. Requests read the
snapshot, compute the next one and write it back; two browser tabs sharing a
session are not coordinated and the last write wins.
"""
import logging
import threading
import time
from typing import Callable, Protocol, runtime_checkable

from fastapi import Request

from app.core.errors import StoreError
from app.schemas.game import GameState
from app.services.game import new_game_state

logger = logging.getLogger(__name__)


@runtime_checkable
class SessionStore(Protocol):
    """
    Storage interface for game snapshots keyed by session id.

    Implementations:
    - MemorySessionStore: process-local dict (default)
    """

    def get(self, session_id: str) -> GameState | None:
        """Return the snapshot for session_id, or None if there is none."""
        ...

    def put(self, session_id: str, state: GameState) -> None:
        """Replace the snapshot for session_id."""
        ...

    def reset(self, session_id: str) -> GameState:
        """Replace the snapshot with a fresh game and return it."""
        ...


class MemorySessionStore:
    """In-memory snapshots; idle sessions are dropped lazily on access."""

    def __init__(self, ttl_seconds: int = 60 * 60 * 24, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[GameState, float]] = {}
        self._lock = threading.Lock()

    def _prune(self, now: float) -> None:
        expired = [sid for sid, (_, seen) in self._entries.items() if now - seen > self.ttl_seconds]
        for sid in expired:
            del self._entries[sid]
        if expired:
            logger.debug(f"Pruned {len(expired)} idle sessions")

    def get(self, session_id: str) -> GameState | None:
        with self._lock:
            now = self._clock()
            self._prune(now)
            entry = self._entries.get(session_id)
            if entry is None:
                return None
            state, _ = entry
            self._entries[session_id] = (state, now)
            return state

    def put(self, session_id: str, state: GameState) -> None:
        if not isinstance(state, GameState):
            raise StoreError(f"Refusing to store {type(state).__name__} as game state")
        with self._lock:
            self._entries[session_id] = (state, self._clock())

    def reset(self, session_id: str) -> GameState:
        state = new_game_state()
        self.put(session_id, state)
        logger.debug(f"Session {session_id} reset")
        return state

    def __len__(self) -> int:
        return len(self._entries)


def get_store(request: Request) -> SessionStore:
    """FastAPI dependency: the store attached to the running app."""
    return request.app.state.store
