"""Integration tests for the Redis session store."""

from uuid import uuid4

import pytest

from news_rag.models import ConversationTurn
from news_rag.storage.session.redis import RedisSessionStore


@pytest.mark.integration
@pytest.mark.asyncio
async def test_redis_store_and_get_history(skip_if_no_redis):
    """Test storing and retrieving a history with Redis."""
    store = RedisSessionStore(url="redis://localhost:6379/15")  # Separate DB for testing
    await store.initialize()
    session_id = f"test-{uuid4().hex[:8]}"

    try:
        history = [
            ConversationTurn(role="user", content="What happened in the election?"),
            ConversationTurn(role="assistant", content="According to Source 1, the incumbent won."),
        ]

        await store.store_history(session_id, history)
        retrieved = await store.get_history(session_id)

        assert retrieved == history
        ttl = await store.client.ttl(f"session:{session_id}:history")
        assert 0 < ttl <= 3600

    finally:
        await store.clear_history(session_id)
        await store.close()


@pytest.mark.integration
@pytest.mark.asyncio
async def test_redis_clear_history(skip_if_no_redis):
    store = RedisSessionStore(url="redis://localhost:6379/15")
    session_id = f"test-{uuid4().hex[:8]}"

    try:
        await store.store_history(session_id, [ConversationTurn(role="user", content="hello")])

        await store.clear_history(session_id)
        await store.clear_history(session_id)

        assert await store.get_history(session_id) == []

    finally:
        await store.close()
