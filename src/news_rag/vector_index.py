import logging
from typing import List, Optional

from pydantic import ValidationError

from news_rag.embeddings import TextEmbedding
from news_rag.exceptions import InvalidInput
from news_rag.models import ArticlePayload, CollectionInfo, RetrievalResult
from news_rag.storage import ArticleVectorStore

logger = logging.getLogger(__name__)


class VectorIndex:
    """
    Semantic index over ingested news articles.

    Embeds text through a TextEmbedding and delegates storage and
    nearest-neighbour search to an ArticleVectorStore. Only results at or
    above ``score_threshold`` are ever returned, so weak matches fall back to
    general-knowledge answers instead of injecting noisy context.
    """

    def __init__(
        self,
        store: ArticleVectorStore,
        embedding: TextEmbedding,
        vector_size: int = 768,
        score_threshold: float = 0.5,
    ):
        if embedding.dimension != vector_size:
            raise ValueError(
                f"Embedding model {embedding.model_name} produces {embedding.dimension}-dimensional "
                f"vectors but the collection expects {vector_size}"
            )

        self.store = store
        self.embedding = embedding
        self.vector_size = vector_size
        self.score_threshold = score_threshold
        self._initialized = False

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """
        Ensure the collection exists. Safe to call repeatedly.

        Raises:
            BackendUnavailable: If the vector store cannot be reached
        """
        if self._initialized:
            return

        await self.store.ensure_collection(self.vector_size)
        self._initialized = True

    async def add_document(self, document_id: str, text: str, metadata: Optional[dict] = None) -> None:
        """
        Embed an article and upsert it into the index.

        Args:
            document_id: Unique article identifier
            text: Article text (already cleaned and truncated by the caller)
            metadata: title, url, source, published, ingestedAt

        Raises:
            InvalidInput: If text is empty or metadata does not fit the payload schema
            EmbeddingFailure: If embedding fails (nothing is written)
            StoreWriteFailure: If the upsert fails
        """
        if not text or not text.strip():
            raise InvalidInput("Cannot index an article with empty text")

        metadata = {key: value for key, value in (metadata or {}).items() if value is not None}
        metadata.pop("text", None)
        try:
            payload = ArticlePayload(text=text, **metadata).model_dump(exclude_none=True)
        except ValidationError as e:
            raise InvalidInput(f"Invalid metadata for document {document_id}: {e}") from e

        vector = await self.embedding.embed_document(text)
        await self.store.upsert(document_id, vector, payload)

        logger.debug(f"Added document {document_id}: '{(payload.get('title') or '')[:50]}'")

    async def search_similar(self, query: str, limit: int = 3) -> List[RetrievalResult]:
        """
        Find articles semantically similar to a query.

        Args:
            query: Free-text query
            limit: Maximum number of results

        Returns:
            Up to ``limit`` results scoring at least ``score_threshold``,
            highest first. Empty when nothing clears the threshold.

        Raises:
            EmbeddingFailure: If the query cannot be embedded
            BackendUnavailable: If the search fails
        """
        if not query or not query.strip():
            raise InvalidInput("Cannot search with an empty query")
        if limit <= 0:
            return []

        query_vector = await self.embedding.embed_query(query)
        results = await self.store.search(query_vector, limit=limit, score_threshold=self.score_threshold)

        results = [r for r in results if r.score >= self.score_threshold]
        results.sort(key=lambda r: r.score, reverse=True)
        results = results[:limit]

        logger.info(
            f"Found {len(results)} similar articles "
            f"(threshold={self.score_threshold}, scores={[round(r.score, 3) for r in results]})"
        )
        return results

    async def get_collection_info(self) -> CollectionInfo:
        """Point count and collection metadata, for observability."""
        return await self.store.collection_info()

    async def reset(self) -> None:
        """Delete every indexed article."""
        await self.store.reset(self.vector_size)
        self._initialized = True

    async def shutdown(self) -> None:
        await self.store.close()
        self._initialized = False
