"""
news-rag: Retrieval-augmented chat over ingested news articles.

Core components:
- vector_index: Article embedding, storage and similarity search
- generation: Grounded response generation with model selection and fallback
- storage: Protocols plus Qdrant/Redis and in-memory backends
- orchestrator: Per-message exchange over the session channel protocol
- models: Core data models (ConversationTurn, Document, RetrievalResult, etc.)
"""

__version__ = "0.1.0"

from news_rag.exceptions import (
    BackendUnavailable,
    EmbeddingFailure,
    GenerationFailure,
    InvalidInput,
    NewsRagError,
    NoModelAvailable,
    SessionStoreUnavailable,
    StoreWriteFailure,
)
from news_rag.generation import ResponseGenerator
from news_rag.models import (
    ArticlePayload,
    CollectionInfo,
    ConversationTurn,
    Document,
    GenerationRequest,
    GenerationResult,
    RetrievalResult,
)
from news_rag.orchestrator import ChatOrchestrator
from news_rag.vector_index import VectorIndex

__all__ = [
    "__version__",
    # Models
    "ArticlePayload",
    "CollectionInfo",
    "ConversationTurn",
    "Document",
    "GenerationRequest",
    "GenerationResult",
    "RetrievalResult",
    # Services
    "ChatOrchestrator",
    "ResponseGenerator",
    "VectorIndex",
    # Errors
    "BackendUnavailable",
    "EmbeddingFailure",
    "GenerationFailure",
    "InvalidInput",
    "NewsRagError",
    "NoModelAvailable",
    "SessionStoreUnavailable",
    "StoreWriteFailure",
]
