"""
Response generation for news-rag.

- backends: GenerativeBackend protocol with Gemini and casual-llm adapters
- generator: ResponseGenerator (model selection, prompt assembly, fallback)
"""

from news_rag.generation.backends import (
    BackendFactory,
    CasualLLMBackend,
    GeminiBackend,
    GenerativeBackend,
    create_backend_factory,
)
from news_rag.generation.generator import GeneratorState, ResponseGenerator

__all__ = [
    "BackendFactory",
    "CasualLLMBackend",
    "GeminiBackend",
    "GenerativeBackend",
    "GeneratorState",
    "ResponseGenerator",
    "create_backend_factory",
]
