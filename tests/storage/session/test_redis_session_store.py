"""Unit tests for the Redis session store against a mocked client."""

import json
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import TimeoutError as RedisTimeoutError

from news_rag.exceptions import SessionStoreUnavailable
from news_rag.models import ConversationTurn
from news_rag.storage.session.redis import RedisSessionStore


@pytest.fixture
def mock_client():
    client = AsyncMock()
    client.get = AsyncMock(return_value=None)
    client.setex = AsyncMock(return_value=True)
    client.delete = AsyncMock(return_value=1)
    client.ping = AsyncMock(return_value=True)
    return client


@pytest.fixture
def store(mock_client):
    return RedisSessionStore(ttl_seconds=3600, client=mock_client)


@pytest.fixture
def turns():
    return [
        ConversationTurn(role="user", content="Hello", timestamp="2024-01-01T10:00:00+00:00"),
        ConversationTurn(role="assistant", content="Hi!", timestamp="2024-01-01T10:00:01+00:00"),
    ]


@pytest.mark.asyncio
async def test_store_history_uses_setex_with_ttl(store, mock_client, turns):
    await store.store_history("abc", turns)

    key, ttl, data = mock_client.setex.call_args.args
    assert key == "session:abc:history"
    assert ttl == 3600
    assert [t["content"] for t in json.loads(data)] == ["Hello", "Hi!"]


@pytest.mark.asyncio
async def test_get_history_parses_stored_json(store, mock_client, turns):
    mock_client.get.return_value = json.dumps([t.model_dump() for t in turns])

    history = await store.get_history("abc")

    mock_client.get.assert_awaited_once_with("session:abc:history")
    assert history == turns


@pytest.mark.asyncio
async def test_get_history_missing_key_is_empty(store):
    assert await store.get_history("abc") == []


@pytest.mark.asyncio
async def test_get_history_unreadable_value_is_empty(store, mock_client):
    mock_client.get.return_value = "not json"

    assert await store.get_history("abc") == []


@pytest.mark.asyncio
async def test_clear_history_deletes_key(store, mock_client):
    await store.clear_history("abc")

    mock_client.delete.assert_awaited_once_with("session:abc:history")


@pytest.mark.asyncio
async def test_connection_failures_raise_session_store_unavailable(store, mock_client, turns):
    mock_client.get.side_effect = RedisConnectionError("refused")
    mock_client.setex.side_effect = RedisConnectionError("refused")
    mock_client.delete.side_effect = RedisConnectionError("refused")

    with pytest.raises(SessionStoreUnavailable):
        await store.get_history("abc")
    with pytest.raises(SessionStoreUnavailable):
        await store.store_history("abc", turns)
    with pytest.raises(SessionStoreUnavailable):
        await store.clear_history("abc")


@pytest.mark.asyncio
async def test_initialize_pings(store, mock_client):
    await store.initialize()

    mock_client.ping.assert_awaited_once()


@pytest.mark.asyncio
async def test_initialize_failure(store, mock_client):
    mock_client.ping.side_effect = RedisConnectionError("refused")

    with pytest.raises(SessionStoreUnavailable):
        await store.initialize()


def test_client_is_built_with_socket_timeouts():
    store = RedisSessionStore(url="redis://localhost:6379/0", timeout=2.5)

    connection_kwargs = store.client.connection_pool.connection_kwargs
    assert connection_kwargs["socket_timeout"] == 2.5
    assert connection_kwargs["socket_connect_timeout"] == 2.5


@pytest.mark.asyncio
async def test_command_timeout_becomes_store_unavailable(store, mock_client):
    mock_client.get.side_effect = RedisTimeoutError("Timeout reading from socket")

    with pytest.raises(SessionStoreUnavailable):
        await store.get_history("abc")
