"""Tests for the OpenAI-compatible embedding adapter."""

import os
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from news_rag.exceptions import EmbeddingFailure


@pytest.fixture
def mock_embedding_env(monkeypatch):
    """Set mock API key for testing."""
    monkeypatch.setenv("EMBEDDING_API_KEY", "jina-test-key-for-testing")


def make_embedder(model="jina-embeddings-v2-base-en", vector=None, error=None, **kwargs):
    from news_rag.embeddings import OpenAIEmbedding

    embedder = OpenAIEmbedding(model=model, api_key="test-key", **kwargs)
    response = SimpleNamespace(data=[SimpleNamespace(embedding=vector)] if vector else [])
    embedder._client.embeddings.create = AsyncMock(return_value=response, side_effect=error)
    return embedder


def test_jina_defaults(mock_embedding_env):
    """Default model and endpoint are Jina v2 base at 768 dimensions."""
    from news_rag.embeddings import OpenAIEmbedding

    embedder = OpenAIEmbedding()

    assert embedder.model_name == "jina-embeddings-v2-base-en"
    assert embedder.dimension == 768
    assert str(embedder._client.base_url).startswith("https://api.jina.ai/v1")


def test_known_model_dimensions(mock_embedding_env):
    from news_rag.embeddings import OpenAIEmbedding

    assert OpenAIEmbedding(model="text-embedding-3-small", base_url=None).dimension == 1536
    assert OpenAIEmbedding(model="text-embedding-3-large", base_url=None).dimension == 3072
    assert OpenAIEmbedding(model="jina-embeddings-v2-small-en").dimension == 512


def test_unknown_model_requires_dimensions(mock_embedding_env):
    from news_rag.embeddings import OpenAIEmbedding

    with pytest.raises(ValueError):
        OpenAIEmbedding(model="custom-embedder")

    assert OpenAIEmbedding(model="custom-embedder", dimensions=384).dimension == 384


@pytest.mark.asyncio
async def test_embed_document_calls_endpoint():
    embedder = make_embedder(vector=[0.1] * 768)

    vector = await embedder.embed_document("Election results announced")

    assert len(vector) == 768
    embedder._client.embeddings.create.assert_awaited_once_with(
        model="jina-embeddings-v2-base-en",
        input=["Election results announced"],
        encoding_format="float",
    )


@pytest.mark.asyncio
async def test_dimensions_sent_for_shortenable_models():
    embedder = make_embedder(
        model="text-embedding-3-small", vector=[0.1] * 768, dimensions=768, base_url=None
    )

    await embedder.embed_query("election")

    assert embedder._client.embeddings.create.call_args.kwargs["dimensions"] == 768


@pytest.mark.asyncio
async def test_document_and_query_vectors_match():
    embedder = make_embedder(vector=[0.5] * 768)

    assert await embedder.embed_document("election") == await embedder.embed_query("election")


@pytest.mark.asyncio
async def test_request_error_becomes_embedding_failure():
    embedder = make_embedder(error=RuntimeError("401 Unauthorized"))

    with pytest.raises(EmbeddingFailure, match="401 Unauthorized"):
        await embedder.embed_query("election")


@pytest.mark.asyncio
async def test_wrong_vector_length_is_rejected():
    embedder = make_embedder(vector=[0.1] * 512)

    with pytest.raises(EmbeddingFailure):
        await embedder.embed_document("election")


@pytest.mark.asyncio
async def test_empty_response_is_rejected():
    embedder = make_embedder(vector=None)

    with pytest.raises(EmbeddingFailure):
        await embedder.embed_document("election")


@pytest.mark.asyncio
async def test_empty_text_raises():
    embedder = make_embedder(vector=[0.1] * 768)

    with pytest.raises(ValueError, match="Cannot embed empty text"):
        await embedder.embed_document("   ")

    embedder._client.embeddings.create.assert_not_awaited()


@pytest.mark.asyncio
@pytest.mark.skipif(
    not os.getenv("JINA_API_KEY"),
    reason="Requires JINA_API_KEY for integration test",
)
async def test_jina_embed_query_integration():
    """Integration test against the Jina endpoint (requires a valid key)."""
    from news_rag.embeddings import OpenAIEmbedding

    embedder = OpenAIEmbedding(api_key=os.getenv("JINA_API_KEY"))

    vector = await embedder.embed_query("What happened in the election?")

    assert len(vector) == 768
    assert all(isinstance(v, float) for v in vector)
