"""
In-memory vector storage implementation.

Provides a simple in-memory store for article vectors and cosine
similarity search, suitable for testing and development. For production,
use the Qdrant implementation.
"""

import logging
from typing import Any, Dict, List

from news_rag.models import ArticlePayload, CollectionInfo, Document, RetrievalResult

logger = logging.getLogger(__name__)


class InMemoryArticleStore:
    """
    In-memory implementation of the ArticleVectorStore protocol.

    Stores vectors and payloads in a dictionary. Data is lost on restart.
    """

    def __init__(self, collection_name: str = "news_articles"):
        self.collection_name = collection_name
        self._vector_size: int | None = None
        self._points: Dict[str, Dict[str, Any]] = {}  # id -> {vector, payload}

        logger.info("InMemoryArticleStore initialized")

    async def ensure_collection(self, vector_size: int) -> bool:
        if self._vector_size is not None:
            return False
        self._vector_size = vector_size
        logger.info(f"Created in-memory collection {self.collection_name} (size={vector_size})")
        return True

    @staticmethod
    def _cosine_similarity(vec1: List[float], vec2: List[float]) -> float:
        """Calculate cosine similarity between two vectors."""
        if len(vec1) != len(vec2):
            raise ValueError("Vectors must have the same length")

        dot_product = sum(a * b for a, b in zip(vec1, vec2))
        magnitude1 = sum(a * a for a in vec1) ** 0.5
        magnitude2 = sum(b * b for b in vec2) ** 0.5

        if magnitude1 == 0 or magnitude2 == 0:
            return 0.0

        return dot_product / (magnitude1 * magnitude2)

    async def upsert(self, document_id: str, vector: List[float], payload: dict) -> None:
        if self._vector_size is not None and len(vector) != self._vector_size:
            raise ValueError(f"Expected vector of size {self._vector_size}, got {len(vector)}")

        self._points[document_id] = {"vector": list(vector), "payload": dict(payload)}
        logger.debug(f"Upserted document {document_id}: '{(payload.get('title') or '')[:50]}'")

    async def search(
        self, query_vector: List[float], limit: int, score_threshold: float
    ) -> List[RetrievalResult]:
        results = []

        for document_id, point in self._points.items():
            score = self._cosine_similarity(query_vector, point["vector"])
            if score >= score_threshold:
                document = Document(
                    id=document_id,
                    vector=point["vector"],
                    payload=ArticlePayload(**point["payload"]),
                )
                results.append(RetrievalResult(document=document, score=min(score, 1.0)))

        # Sort by score (highest first) and limit
        results.sort(key=lambda r: r.score, reverse=True)
        results = results[:limit]

        logger.debug(f"{len(results)} results found (threshold={score_threshold})")
        return results

    async def collection_info(self) -> CollectionInfo:
        return CollectionInfo(
            name=self.collection_name,
            points_count=len(self._points),
            vector_size=self._vector_size,
            distance="Cosine",
            status="green",
        )

    async def reset(self, vector_size: int) -> None:
        count = len(self._points)
        self._points.clear()
        self._vector_size = vector_size
        logger.info(f"Cleared all articles ({count} total)")

    async def close(self) -> None:
        pass
