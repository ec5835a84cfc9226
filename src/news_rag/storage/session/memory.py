"""
In-memory session storage implementation.

Keeps each session's history in a dictionary with an expiry timestamp,
suitable for testing and single-instance deployments. For production with
multiple replicas, use the Redis implementation instead.
"""

import logging
import time
from typing import Callable, Dict, List, Sequence, Tuple

from news_rag.models import ConversationTurn

logger = logging.getLogger(__name__)


class InMemorySessionStore:
    """
    In-memory implementation of the SessionStore protocol.

    Expired entries are treated as absent when read and dropped lazily;
    nothing sweeps them in the background. Data is lost on restart.
    """

    def __init__(self, ttl_seconds: int = 3600, clock: Callable[[], float] = time.monotonic):
        """
        Initialize the store.

        Args:
            ttl_seconds: Expiry window, refreshed on every write (default: 1 hour)
            clock: Monotonic time source in seconds
        """
        self._sessions: Dict[str, Tuple[float, List[ConversationTurn]]] = {}
        self._ttl_seconds = ttl_seconds
        self._clock = clock

        logger.info(f"InMemorySessionStore initialized (ttl={ttl_seconds}s)")

    async def store_history(self, session_id: str, turns: Sequence[ConversationTurn]) -> None:
        expires_at = self._clock() + self._ttl_seconds
        self._sessions[session_id] = (expires_at, [turn.model_copy() for turn in turns])
        logger.debug(f"Stored {len(turns)} turns for session {session_id}")

    async def get_history(self, session_id: str) -> List[ConversationTurn]:
        entry = self._sessions.get(session_id)
        if entry is None:
            return []

        expires_at, turns = entry
        if self._clock() >= expires_at:
            del self._sessions[session_id]
            logger.debug(f"Session {session_id} expired")
            return []

        return [turn.model_copy() for turn in turns]

    async def clear_history(self, session_id: str) -> None:
        self._sessions.pop(session_id, None)
        logger.info(f"Cleared history for session {session_id}")

    async def close(self) -> None:
        pass
