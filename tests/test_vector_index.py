"""
Unit tests for VectorIndex.

Uses the in-memory article store and a deterministic embedder so scores
are exact cosine similarities.
"""

from unittest.mock import AsyncMock

import pytest

from news_rag.exceptions import EmbeddingFailure, InvalidInput, StoreWriteFailure
from news_rag.storage.vector.memory import InMemoryArticleStore
from news_rag.vector_index import VectorIndex

QUERY = "What happened in the election?"


@pytest.fixture
def embedding(make_embedding):
    return make_embedding(
        {
            QUERY: [1.0, 0.0, 0.0, 0.0],
            "Election results announced": [0.8, 0.6, 0.0, 0.0],
            "Turnout hits record high": [0.6, 0.8, 0.0, 0.0],
            "Local bakery wins award": [0.2, 0.0, 0.979796, 0.0],
        }
    )


@pytest.fixture
def index(embedding):
    return VectorIndex(store=InMemoryArticleStore(), embedding=embedding, vector_size=4)


async def _populate(index):
    await index.initialize()
    for title in ("Election results announced", "Turnout hits record high", "Local bakery wins award"):
        await index.add_document(title.lower().replace(" ", "-"), title, {"title": title, "source": "rss"})


def test_dimension_mismatch_is_rejected(embedding):
    with pytest.raises(ValueError):
        VectorIndex(store=InMemoryArticleStore(), embedding=embedding, vector_size=768)


@pytest.mark.asyncio
async def test_initialize_twice_creates_one_collection(embedding):
    store = InMemoryArticleStore()
    store.ensure_collection = AsyncMock(return_value=True)
    index = VectorIndex(store=store, embedding=embedding, vector_size=4)

    await index.initialize()
    await index.initialize()

    store.ensure_collection.assert_awaited_once_with(4)
    assert index.initialized


@pytest.mark.asyncio
async def test_search_similar_orders_and_thresholds(index):
    await _populate(index)

    results = await index.search_similar(QUERY, limit=3)

    assert [r.title for r in results] == ["Election results announced", "Turnout hits record high"]
    assert results[0].score == pytest.approx(0.8)
    assert results[1].score == pytest.approx(0.6)
    scores = [r.score for r in results]
    assert scores == sorted(scores, reverse=True)
    assert all(score >= 0.5 for score in scores)


@pytest.mark.asyncio
async def test_search_similar_limit(index):
    await _populate(index)

    results = await index.search_similar(QUERY, limit=1)

    assert len(results) == 1


@pytest.mark.asyncio
async def test_search_similar_no_match_returns_empty(index):
    await _populate(index)

    assert await index.search_similar("completely unrelated question", limit=3) == []


@pytest.mark.asyncio
async def test_add_document_stores_text_and_metadata(index):
    await index.initialize()

    await index.add_document(
        "doc-1",
        "Election results announced",
        {"title": "Election results announced", "url": "https://example.com/1", "published": "2024-11-06"},
    )

    results = await index.search_similar(QUERY, limit=3)
    payload = results[0].document.payload
    assert payload.text == "Election results announced"
    assert payload.url == "https://example.com/1"
    assert payload.published == "2024-11-06"
    info = await index.get_collection_info()
    assert info.points_count == 1


@pytest.mark.asyncio
async def test_add_document_empty_text(index):
    with pytest.raises(InvalidInput):
        await index.add_document("doc-1", "   ", {"title": "Empty"})


@pytest.mark.asyncio
async def test_add_document_ignores_missing_metadata_values(index):
    await index.initialize()

    await index.add_document(
        "doc-1", "Election results announced", {"title": None, "url": "https://example.com/1", "source": None}
    )

    results = await index.search_similar(QUERY, limit=3)
    payload = results[0].document.payload
    assert payload.title == ""
    assert payload.url == "https://example.com/1"
    assert payload.source is None


@pytest.mark.asyncio
async def test_add_document_malformed_metadata_is_invalid_input(index):
    await index.initialize()

    with pytest.raises(InvalidInput):
        await index.add_document("doc-1", "Election results announced", {"title": ["not", "a", "string"]})

    info = await index.get_collection_info()
    assert info.points_count == 0


@pytest.mark.asyncio
async def test_add_document_embedding_failure_writes_nothing(index, embedding):
    await index.initialize()
    embedding.embed_document = AsyncMock(side_effect=EmbeddingFailure("service down"))

    with pytest.raises(EmbeddingFailure):
        await index.add_document("doc-1", "Election results announced", {"title": "x"})

    info = await index.get_collection_info()
    assert info.points_count == 0


@pytest.mark.asyncio
async def test_add_document_store_failure_propagates(index):
    await index.initialize()
    index.store.upsert = AsyncMock(side_effect=StoreWriteFailure("write failed"))

    with pytest.raises(StoreWriteFailure):
        await index.add_document("doc-1", "Election results announced", {"title": "x"})


@pytest.mark.asyncio
async def test_search_embedding_failure_propagates(index, embedding):
    await index.initialize()
    embedding.embed_query = AsyncMock(side_effect=EmbeddingFailure("timeout"))

    with pytest.raises(EmbeddingFailure):
        await index.search_similar(QUERY, limit=3)


@pytest.mark.asyncio
async def test_reset_removes_documents(index):
    await _populate(index)

    await index.reset()

    assert (await index.get_collection_info()).points_count == 0
    assert await index.search_similar(QUERY, limit=3) == []
