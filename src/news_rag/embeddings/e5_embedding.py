"""E5 embedding adapter for news-rag."""

import asyncio
import logging
from typing import List, Optional

from news_rag.exceptions import EmbeddingFailure

logger = logging.getLogger(__name__)


class E5Embedding:
    """
    Local E5 model embedding adapter.

    E5 models are instruction-tuned and expect prefixes:
    - "passage: " for articles to be stored
    - "query: " for search queries

    Useful for running the index without a hosted embedding API.
    ``intfloat/e5-base-v2`` produces 768-dimensional vectors, matching the
    default collection size.

    Example:
        >>> embedder = E5Embedding(model_name="intfloat/e5-base-v2", device="cpu")
        >>> doc_vector = await embedder.embed_document("Parliament passed the budget")
        >>> query_vector = await embedder.embed_query("budget vote")
        >>> len(doc_vector)
        768
    """

    def __init__(
        self,
        model_name: str = "intfloat/e5-base-v2",
        device: Optional[str] = None,
        normalize_embeddings: bool = True,
        cache_folder: Optional[str] = None,
    ):
        """
        Initialize E5 embedder.

        Args:
            model_name: HuggingFace model identifier (default: e5-base-v2)
            device: Device for computation ("cuda", "cpu", or None for auto)
            normalize_embeddings: L2 normalize vectors (required for cosine similarity)
            cache_folder: Directory for model cache (None = default ~/.cache)
        """
        try:
            from sentence_transformers import SentenceTransformer
        except ImportError as e:
            raise ImportError(
                "sentence-transformers is required for E5Embedding. "
                "Install with: pip install news-rag[embeddings-local]"
            ) from e

        self._model_name = model_name
        self._normalize = normalize_embeddings

        logger.info(f"Loading E5 model: {model_name}")
        self._model = SentenceTransformer(model_name, device=device, cache_folder=cache_folder)
        self._dimension = self._model.get_sentence_embedding_dimension()
        logger.info(f"Model loaded: {model_name} ({self._dimension} dimensions)")

    @property
    def dimension(self) -> int:
        """Vector dimension produced by this model."""
        return self._dimension

    @property
    def model_name(self) -> str:
        """Identifier of the loaded model."""
        return self._model_name

    async def _encode(self, prefixed_text: str) -> List[float]:
        try:
            # encode() is CPU bound; keep it off the event loop
            embedding = await asyncio.to_thread(
                self._model.encode,
                prefixed_text,
                normalize_embeddings=self._normalize,
                show_progress_bar=False,
            )
        except Exception as e:
            logger.error(f"E5 encoding failed: {e}")
            raise EmbeddingFailure(f"Local embedding failed: {e}") from e
        return embedding.tolist()

    async def embed_document(self, text: str) -> List[float]:
        """
        Generate embedding for an article to be stored.

        Automatically adds "passage: " prefix.
        """
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")

        return await self._encode(f"passage: {text}")

    async def embed_query(self, text: str) -> List[float]:
        """
        Generate embedding for a search query.

        Automatically adds "query: " prefix.
        """
        if not text or not text.strip():
            raise ValueError("Cannot embed empty text")

        return await self._encode(f"query: {text}")
