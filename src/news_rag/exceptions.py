"""
Error taxonomy for news-rag.

Dependency adapters translate their client library's exceptions into these
types so the orchestrator can decide what reaches the caller.
"""

from typing import Literal


class NewsRagError(Exception):
    """Base class for all news-rag errors."""


class InvalidInput(NewsRagError):
    """Caller supplied unusable input (e.g. an empty message)."""


class BackendUnavailable(NewsRagError):
    """The vector database could not be reached or refused the request."""


class EmbeddingFailure(NewsRagError):
    """The embedding service failed to produce a vector."""


class StoreWriteFailure(NewsRagError):
    """An upsert into the vector database failed."""


class SessionStoreUnavailable(NewsRagError):
    """Conversation history could not be loaded, saved or cleared."""


class NoModelAvailable(NewsRagError):
    """None of the candidate generative models passed the startup probe."""


FailureReason = Literal["safety", "quota", "service"]


class GenerationFailure(NewsRagError):
    """A generative backend call failed."""

    def __init__(self, message: str, reason: FailureReason = "service"):
        super().__init__(message)
        self.reason: FailureReason = reason
