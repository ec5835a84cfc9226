"""
Storage backends for news-rag.

Provides protocol definitions plus Qdrant/Redis implementations for
production and in-memory implementations for tests and local development.
"""

from news_rag.storage.protocols import ArticleVectorStore, SessionStore
from news_rag.storage.session.memory import InMemorySessionStore
from news_rag.storage.vector.memory import InMemoryArticleStore

__all__ = [
    "ArticleVectorStore",
    "SessionStore",
    "InMemoryArticleStore",
    "InMemorySessionStore",
]

try:
    from news_rag.storage.vector.qdrant import QdrantArticleStore  # noqa: F401

    __all__.append("QdrantArticleStore")
except ImportError:
    pass

try:
    from news_rag.storage.session.redis import RedisSessionStore  # noqa: F401

    __all__.append("RedisSessionStore")
except ImportError:
    pass
