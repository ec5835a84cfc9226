"""
Redis session storage implementation.

Stores each session's full history as one JSON string with an expiry,
suitable for production deployments with multiple replicas. Expired keys
are reclaimed by Redis itself.
"""

import logging
from typing import List, Optional, Sequence

import redis.asyncio as redis
from pydantic import TypeAdapter, ValidationError
from redis.exceptions import RedisError

from news_rag.exceptions import SessionStoreUnavailable
from news_rag.models import ConversationTurn

logger = logging.getLogger(__name__)

_turns_adapter = TypeAdapter(List[ConversationTurn])


class RedisSessionStore:
    """
    Redis implementation of the SessionStore protocol.

    Every write is a SETEX of the whole sequence, so concurrent writers to
    one session resolve last-writer-wins.
    """

    def __init__(
        self,
        url: str = "redis://localhost:6379",
        ttl_seconds: int = 3600,
        key_prefix: str = "session:",
        timeout: float = 5.0,
        client: Optional[redis.Redis] = None,
    ):
        """
        Initialize the Redis store.

        Args:
            url: Redis connection URL
            ttl_seconds: Expiry window, refreshed on every write (default: 1 hour)
            key_prefix: Prefix for Redis keys (default: "session:")
            timeout: Connect and per-command socket timeout in seconds
            client: Pre-built async client (tests)
        """
        self.client = client or redis.Redis.from_url(
            url,
            decode_responses=True,
            socket_timeout=timeout,
            socket_connect_timeout=timeout,
        )
        self._ttl_seconds = ttl_seconds
        self._key_prefix = key_prefix

    def _get_key(self, session_id: str) -> str:
        """Get the Redis key for a session's history."""
        return f"{self._key_prefix}{session_id}:history"

    async def initialize(self) -> None:
        """Verify the connection."""
        try:
            await self.client.ping()
        except RedisError as e:
            logger.error(f"Failed to connect to Redis: {e}")
            raise SessionStoreUnavailable(f"Redis unavailable: {e}") from e

        logger.info(f"RedisSessionStore initialized (ttl={self._ttl_seconds}s)")

    async def store_history(self, session_id: str, turns: Sequence[ConversationTurn]) -> None:
        key = self._get_key(session_id)
        data = _turns_adapter.dump_json(list(turns)).decode("utf-8")

        try:
            await self.client.setex(key, self._ttl_seconds, data)
        except RedisError as e:
            logger.error(f"Error storing history for session {session_id}: {e}")
            raise SessionStoreUnavailable(f"Could not save history: {e}") from e

        logger.debug(f"Stored {len(turns)} turns for session {session_id}")

    async def get_history(self, session_id: str) -> List[ConversationTurn]:
        key = self._get_key(session_id)

        try:
            raw = await self.client.get(key)
        except RedisError as e:
            logger.error(f"Error getting history for session {session_id}: {e}")
            raise SessionStoreUnavailable(f"Could not load history: {e}") from e

        if raw is None:
            return []

        try:
            turns = _turns_adapter.validate_json(raw)
        except ValidationError as e:
            logger.warning(f"Discarding unreadable history for session {session_id}: {e}")
            return []

        logger.debug(f"Retrieved {len(turns)} turns for session {session_id}")
        return turns

    async def clear_history(self, session_id: str) -> None:
        try:
            await self.client.delete(self._get_key(session_id))
        except RedisError as e:
            logger.error(f"Error clearing history for session {session_id}: {e}")
            raise SessionStoreUnavailable(f"Could not clear history: {e}") from e

        logger.info(f"Cleared history for session {session_id}")

    async def close(self) -> None:
        await self.client.aclose()
