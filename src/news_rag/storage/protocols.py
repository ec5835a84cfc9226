"""
Storage protocol definitions for articles and conversation history.

These protocols define the interface that storage implementations must
provide. Production uses Qdrant and Redis; the in-memory implementations
satisfy the same protocols for tests and local development.
"""

from typing import List, Protocol, Sequence

from news_rag.models import CollectionInfo, ConversationTurn, RetrievalResult


class ArticleVectorStore(Protocol):
    """
    Protocol for vector storage of news articles.

    Stores (id, vector, payload) triples and answers nearest-neighbour
    queries under cosine similarity.
    """

    async def ensure_collection(self, vector_size: int) -> bool:
        """
        Create the collection if it does not exist.

        Args:
            vector_size: Dimensionality of stored vectors

        Returns:
            True if the collection was created, False if it already existed

        Raises:
            BackendUnavailable: If the store cannot be reached
        """
        ...

    async def upsert(self, document_id: str, vector: List[float], payload: dict) -> None:
        """
        Insert or replace a single point, waiting for the write to apply.

        Raises:
            StoreWriteFailure: If the write fails
        """
        ...

    async def search(
        self, query_vector: List[float], limit: int, score_threshold: float
    ) -> List[RetrievalResult]:
        """
        Nearest-neighbour search.

        Returns:
            Up to ``limit`` results with score >= ``score_threshold``,
            highest score first

        Raises:
            BackendUnavailable: If the store cannot be reached
        """
        ...

    async def collection_info(self) -> CollectionInfo:
        """Point count and collection metadata."""
        ...

    async def reset(self, vector_size: int) -> None:
        """Drop every stored point by recreating the collection."""
        ...

    async def close(self) -> None:
        ...


class SessionStore(Protocol):
    """
    Protocol for per-session conversation history.

    Every write replaces the whole sequence and refreshes the expiry
    window. Expired or unknown sessions read as empty.
    """

    async def store_history(self, session_id: str, turns: Sequence[ConversationTurn]) -> None:
        """
        Persist the full ordered turn sequence for a session.

        Raises:
            SessionStoreUnavailable: If the backend cannot be reached
        """
        ...

    async def get_history(self, session_id: str) -> List[ConversationTurn]:
        """
        Load a session's turns, oldest first.

        Returns:
            The stored turns, or an empty list if absent or expired

        Raises:
            SessionStoreUnavailable: If the backend cannot be reached
        """
        ...

    async def clear_history(self, session_id: str) -> None:
        """
        Delete a session's turns. No error if absent.

        Raises:
            SessionStoreUnavailable: If the backend cannot be reached
        """
        ...

    async def close(self) -> None:
        ...
