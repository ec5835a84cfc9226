"""Shared fakes and fixtures for news-rag tests."""

from typing import Dict, List, Optional

import pytest

from news_rag.generation import prompts
from news_rag.models import ArticlePayload, Document, GenerationResult, RetrievalResult

QUERY_VECTOR = [1.0, 0.0, 0.0, 0.0]


class FakeEmbedding:
    """Deterministic embedder: known texts map to fixed vectors."""

    def __init__(self, vectors: Optional[Dict[str, List[float]]] = None, dimension: int = 4):
        self.vectors = vectors or {}
        self._dimension = dimension
        self.calls: List[str] = []

    @property
    def dimension(self) -> int:
        return self._dimension

    @property
    def model_name(self) -> str:
        return "fake-embedding"

    def _lookup(self, text: str) -> List[float]:
        self.calls.append(text)
        if text in self.vectors:
            return self.vectors[text]
        return [0.0] * (self._dimension - 1) + [1.0]

    async def embed_document(self, text: str) -> List[float]:
        return self._lookup(text)

    async def embed_query(self, text: str) -> List[float]:
        return self._lookup(text)


class FakeBackend:
    """Generative backend answering the probe and returning a canned result."""

    def __init__(
        self,
        model_name: str = "fake-model",
        result: Optional[GenerationResult] = None,
        error: Optional[Exception] = None,
        probe_text: str = "OK",
        probe_error: Optional[Exception] = None,
    ):
        self._model_name = model_name
        self.result = result or GenerationResult(
            text="According to Source 1, the incumbent won the election.", stop_reason="STOP"
        )
        self.error = error
        self.probe_text = probe_text
        self.probe_error = probe_error
        self.prompts: List[str] = []

    @property
    def model_name(self) -> str:
        return self._model_name

    async def generate(self, prompt: str) -> GenerationResult:
        if prompt == prompts.PROBE_PROMPT:
            if self.probe_error:
                raise self.probe_error
            return GenerationResult(text=self.probe_text, stop_reason="STOP")

        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return self.result


def make_result(
    title: str, score: float, text: str = "", doc_id: Optional[str] = None
) -> RetrievalResult:
    return RetrievalResult(
        document=Document(
            id=doc_id or title.lower().replace(" ", "-"),
            payload=ArticlePayload(
                text=text or f"{title}. Full coverage of the story.",
                title=title,
                url=f"https://news.example.com/{title.lower().replace(' ', '-')}",
                source="https://news.example.com/rss",
            ),
        ),
        score=score,
    )


@pytest.fixture
def fake_embedding():
    return FakeEmbedding()


@pytest.fixture
def election_results():
    """Two retrieved articles scoring 0.8 and 0.6."""
    return [
        make_result("Election results announced", 0.8),
        make_result("Turnout hits record high", 0.6),
    ]


@pytest.fixture
def make_backend():
    """Factory for FakeBackend instances."""
    return FakeBackend


@pytest.fixture
def make_embedding():
    """Factory for FakeEmbedding instances."""
    return FakeEmbedding


@pytest.fixture
def retrieval_result():
    """Factory for RetrievalResult instances."""
    return make_result
