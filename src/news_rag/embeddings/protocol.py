"""
Text embedding protocol for news-rag.

Provides a unified interface for turning article text and user queries
into dense vectors for the vector index.
"""

from typing import List, Protocol

from typing_extensions import runtime_checkable


@runtime_checkable
class TextEmbedding(Protocol):
    """
    Protocol for text embedding providers.

    Implementations must:

    1. Return vectors of exactly ``dimension`` elements
    2. Raise ``EmbeddingFailure`` when the underlying service fails
    3. Bound their own latency (per-call timeout)

    Example:
        >>> embedder = OpenAIEmbedding(api_key="jina_...", base_url="https://api.jina.ai/v1")
        >>> vector = await embedder.embed_query("What happened in the election?")
        >>> len(vector) == embedder.dimension
        True
    """

    @property
    def dimension(self) -> int:
        """
        Vector dimension produced by this embedder.

        Must match the vector size of the collection it feeds.
        """
        ...

    @property
    def model_name(self) -> str:
        """Identifier of the embedding model."""
        ...

    async def embed_document(self, text: str) -> List[float]:
        """
        Generate embedding for an article to be stored.

        Args:
            text: Article text to embed

        Returns:
            Embedding vector

        Raises:
            ValueError: If text is empty
            EmbeddingFailure: If the embedding service fails
        """
        ...

    async def embed_query(self, text: str) -> List[float]:
        """
        Generate embedding for a search query.

        Args:
            text: Query text to embed

        Returns:
            Embedding vector

        Raises:
            ValueError: If text is empty
            EmbeddingFailure: If the embedding service fails
        """
        ...
