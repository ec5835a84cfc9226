"""
Text embedding clients for news-rag.

Provides a protocol-based embedding interface with two adapters:
- OpenAIEmbedding: any OpenAI-compatible embeddings endpoint (Jina, OpenAI, Azure)
- E5Embedding: local sentence-transformers E5 models
"""

from news_rag.embeddings.protocol import TextEmbedding

__all__ = [
    "TextEmbedding",
]

# Optional adapters (import only if dependencies available)
try:
    from news_rag.embeddings.openai_embedding import OpenAIEmbedding  # noqa: F401

    __all__.append("OpenAIEmbedding")
except ImportError:
    pass

try:
    from news_rag.embeddings.e5_embedding import E5Embedding  # noqa: F401

    __all__.append("E5Embedding")
except ImportError:
    pass
