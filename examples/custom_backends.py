"""
Custom Backends Example

Runs a full chat exchange offline: a toy keyword embedding stands in for
the embedding service, an echoing model stands in for Gemini, and both
stores are in memory. Any object with the right methods satisfies the
TextEmbedding and GenerativeBackend protocols.
"""

import asyncio
import hashlib
from typing import List

from news_rag.generation import ResponseGenerator
from news_rag.ingestion import RawArticle, ingest_articles
from news_rag.models import GenerationResult
from news_rag.orchestrator import ChatOrchestrator
from news_rag.storage import InMemoryArticleStore, InMemorySessionStore
from news_rag.vector_index import VectorIndex

DIMENSION = 64


class HashedBagOfWords:
    """Maps each word to a hashed bucket. No model download needed."""

    dimension = DIMENSION
    model_name = "hashed-bag-of-words"

    def _embed(self, text: str) -> List[float]:
        vector = [0.0] * DIMENSION
        for word in text.lower().split():
            bucket = int(hashlib.md5(word.strip(".,?!").encode()).hexdigest(), 16) % DIMENSION
            vector[bucket] += 1.0
        return vector

    async def embed_document(self, text: str) -> List[float]:
        return self._embed(text)

    async def embed_query(self, text: str) -> List[float]:
        return self._embed(text)


class HeadlineModel:
    """Answers the probe and otherwise quotes the first source line."""

    model_name = "headline-model"

    async def generate(self, prompt: str) -> GenerationResult:
        if prompt.startswith("Hello"):
            return GenerationResult(text="OK", stop_reason="STOP")
        sources = [line for line in prompt.splitlines() if line.startswith("Source 1:")]
        text = f"According to {sources[0]}" if sources else "No matching news today."
        return GenerationResult(text=text, stop_reason="STOP")


ARTICLES = [
    RawArticle(
        title="Election results announced",
        text="The incumbent won the election with a clear majority after a record turnout. " * 3,
        url="https://news.example.com/election",
    ),
    RawArticle(
        title="New bakery opens downtown",
        text="A family bakery opened downtown this week selling sourdough and pastries daily. " * 3,
        url="https://news.example.com/bakery",
    ),
]


async def main():
    print("=== Custom Backends Example ===\n")

    index = VectorIndex(
        store=InMemoryArticleStore(),
        embedding=HashedBagOfWords(),
        vector_size=DIMENSION,
        score_threshold=0.2,
    )
    report = await ingest_articles(index, ARTICLES)
    print(f"Ingested {report.ingested} articles\n")

    orchestrator = ChatOrchestrator(
        session_store=InMemorySessionStore(ttl_seconds=3600),
        vector_index=index,
        generator=ResponseGenerator(
            backend_factory=lambda name: HeadlineModel(), candidate_models=["headline-model"]
        ),
    )

    async def emit(event, data=None):
        print(f"  <- {event}: {data}")

    session_id = await orchestrator.open_session(emit)
    await orchestrator.send_message(session_id, "Who won the election?", emit)
    await orchestrator.get_chat_history(session_id, emit)

    print("\n=== Example Complete ===")


if __name__ == "__main__":
    asyncio.run(main())
