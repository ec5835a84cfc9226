"""
Service construction and lifecycle.

Builds the process-wide services (vector index, session store, response
generator) from ``Settings`` and injects them into the orchestrator.
Startup and shutdown are explicit; nothing is looked up globally.
"""

import logging
from typing import Optional

from news_rag.config import Settings
from news_rag.embeddings import TextEmbedding
from news_rag.exceptions import NoModelAvailable
from news_rag.generation import ResponseGenerator, create_backend_factory
from news_rag.orchestrator import ChatOrchestrator
from news_rag.storage import ArticleVectorStore, InMemoryArticleStore, InMemorySessionStore, SessionStore
from news_rag.vector_index import VectorIndex

logger = logging.getLogger(__name__)


def _secret(value) -> Optional[str]:
    return value.get_secret_value() if value is not None else None


def create_embedding(settings: Settings) -> TextEmbedding:
    if settings.EMBEDDING_PROVIDER == "e5":
        from news_rag.embeddings.e5_embedding import E5Embedding

        return E5Embedding(model_name=settings.EMBEDDING_MODEL)

    from news_rag.embeddings.openai_embedding import OpenAIEmbedding

    return OpenAIEmbedding(
        model=settings.EMBEDDING_MODEL,
        api_key=_secret(settings.EMBEDDING_API_KEY),
        base_url=settings.EMBEDDING_BASE_URL,
        dimensions=settings.VECTOR_SIZE,
        timeout=settings.EMBEDDING_TIMEOUT,
    )


def create_vector_store(settings: Settings) -> ArticleVectorStore:
    if settings.VECTOR_BACKEND == "memory":
        return InMemoryArticleStore(collection_name=settings.QDRANT_COLLECTION)

    from news_rag.storage.vector.qdrant import QdrantArticleStore

    return QdrantArticleStore(
        url=settings.QDRANT_URL,
        collection_name=settings.QDRANT_COLLECTION,
        api_key=_secret(settings.QDRANT_API_KEY),
        timeout=settings.QDRANT_TIMEOUT,
    )


def create_session_store(settings: Settings) -> SessionStore:
    if settings.SESSION_BACKEND == "memory":
        return InMemorySessionStore(ttl_seconds=settings.SESSION_TTL_SECONDS)

    from news_rag.storage.session.redis import RedisSessionStore

    return RedisSessionStore(
        url=settings.REDIS_URL,
        ttl_seconds=settings.SESSION_TTL_SECONDS,
        timeout=settings.REDIS_TIMEOUT,
    )


def create_generator(settings: Settings) -> ResponseGenerator:
    factory = create_backend_factory(
        settings.GENERATION_PROVIDER,
        api_key=_secret(settings.GENERATION_API_KEY),
        base_url=settings.GENERATION_BASE_URL,
        timeout=settings.GENERATION_TIMEOUT,
    )
    return ResponseGenerator(
        backend_factory=factory,
        candidate_models=settings.GENERATION_MODELS,
        max_context_articles=settings.MAX_CONTEXT_ARTICLES,
        article_char_budget=settings.ARTICLE_CHAR_BUDGET,
        history_turns=settings.HISTORY_CONTEXT_TURNS,
        response_word_limit=settings.RESPONSE_WORD_LIMIT,
        timeout=settings.GENERATION_TIMEOUT,
    )


class NewsRagServices:
    """Holds the process-wide services and their lifecycle."""

    def __init__(
        self,
        vector_index: VectorIndex,
        session_store: SessionStore,
        generator: ResponseGenerator,
        retrieval_limit: int = 3,
        history_turns: int = 3,
        serialize_sessions: bool = True,
    ):
        self.vector_index = vector_index
        self.session_store = session_store
        self.generator = generator
        self.orchestrator = ChatOrchestrator(
            session_store=session_store,
            vector_index=vector_index,
            generator=generator,
            retrieval_limit=retrieval_limit,
            history_turns=history_turns,
            serialize_sessions=serialize_sessions,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "NewsRagServices":
        vector_index = VectorIndex(
            store=create_vector_store(settings),
            embedding=create_embedding(settings),
            vector_size=settings.VECTOR_SIZE,
            score_threshold=settings.SCORE_THRESHOLD,
        )
        return cls(
            vector_index=vector_index,
            session_store=create_session_store(settings),
            generator=create_generator(settings),
            retrieval_limit=settings.RETRIEVAL_LIMIT,
            history_turns=settings.HISTORY_CONTEXT_TURNS,
            serialize_sessions=settings.SERIALIZE_SESSIONS,
        )

    async def initialize(self) -> None:
        """
        Connect the session store, ensure the collection, select a model.

        Raises:
            SessionStoreUnavailable: If the session store cannot be reached
            BackendUnavailable: If the vector store cannot be reached
        """
        initialize_sessions = getattr(self.session_store, "initialize", None)
        if initialize_sessions is not None:
            await initialize_sessions()

        await self.vector_index.initialize()

        try:
            await self.generator.initialize()
        except NoModelAvailable as e:
            logger.error(f"Continuing in fallback mode: {e}")

        logger.info("All services initialized successfully")

    async def shutdown(self) -> None:
        await self.vector_index.shutdown()
        await self.session_store.close()
        logger.info("All services shut down")
