"""OpenAI-compatible embedding adapter for news-rag."""

import logging
import os
from typing import List, Optional

from news_rag.exceptions import EmbeddingFailure

logger = logging.getLogger(__name__)

KNOWN_DIMENSIONS = {
    "jina-embeddings-v2-base-en": 768,
    "jina-embeddings-v2-small-en": 512,
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
}


class OpenAIEmbedding:
    """
    Embedding adapter for any endpoint speaking the OpenAI embeddings API.

    The reference deployment points this at Jina AI
    (``https://api.jina.ai/v1``, ``jina-embeddings-v2-base-en``, 768 dims).
    Plain OpenAI, Azure and OpenRouter endpoints work the same way.

    Example:
        >>> embedder = OpenAIEmbedding(
        ...     model="jina-embeddings-v2-base-en",
        ...     base_url="https://api.jina.ai/v1",
        ...     api_key="jina_...",
        ... )
        >>> vector = await embedder.embed_document("Election results are in")
        >>> len(vector)
        768
    """

    def __init__(
        self,
        model: str = "jina-embeddings-v2-base-en",
        api_key: Optional[str] = None,
        base_url: Optional[str] = "https://api.jina.ai/v1",
        dimensions: Optional[int] = None,
        timeout: float = 30.0,
        max_retries: int = 2,
    ):
        """
        Initialize the embedder.

        Args:
            model: Embedding model name
            api_key: API key (None = use EMBEDDING_API_KEY, then OPENAI_API_KEY env var)
            base_url: Endpoint base URL (None = official OpenAI)
            dimensions: Output dimension. Sent to the API only for
                text-embedding-3 models, which support shortening.
            timeout: Request timeout in seconds
            max_retries: Number of retry attempts for failed requests
        """
        try:
            from openai import AsyncOpenAI
        except ImportError as e:
            raise ImportError(
                "openai is required for OpenAIEmbedding. Install with: pip install openai"
            ) from e

        self._model = model
        self._send_dimensions = dimensions is not None and model.startswith("text-embedding-3")

        self._client = AsyncOpenAI(
            api_key=api_key or os.getenv("EMBEDDING_API_KEY") or os.getenv("OPENAI_API_KEY"),
            base_url=base_url,
            timeout=timeout,
            max_retries=max_retries,
        )

        if dimensions is not None:
            self._dimension = dimensions
        elif model in KNOWN_DIMENSIONS:
            self._dimension = KNOWN_DIMENSIONS[model]
        else:
            raise ValueError(
                f"Unknown embedding model {model}; pass dimensions explicitly"
            )

        logger.info(f"OpenAI-compatible embedder initialized: {model} ({self._dimension} dimensions)")

    @property
    def dimension(self) -> int:
        """Vector dimension produced by this model."""
        return self._dimension

    @property
    def model_name(self) -> str:
        """Identifier of the embedding model."""
        return self._model

    async def _embed_single(self, text: str) -> List[float]:
        """Embed one text, translating client errors into EmbeddingFailure."""
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")

        kwargs = {"model": self._model, "input": [text], "encoding_format": "float"}
        if self._send_dimensions:
            kwargs["dimensions"] = self._dimension

        try:
            response = await self._client.embeddings.create(**kwargs)
        except Exception as e:
            logger.error(f"Embedding request failed ({self._model}): {e}")
            raise EmbeddingFailure(f"Embedding request failed: {e}") from e

        if not response.data:
            raise EmbeddingFailure("Embedding service returned no vectors")

        vector = list(response.data[0].embedding)
        if len(vector) != self._dimension:
            raise EmbeddingFailure(
                f"Expected {self._dimension}-dimensional vector, got {len(vector)}"
            )
        return vector

    async def embed_document(self, text: str) -> List[float]:
        """
        Generate embedding for an article.

        OpenAI-style models don't distinguish documents from queries, so
        this is identical to embed_query().
        """
        return await self._embed_single(text)

    async def embed_query(self, text: str) -> List[float]:
        """Generate embedding for a search query."""
        return await self._embed_single(text)
