"""
Centralized configuration for news-rag.

All settings load from environment variables and an optional ``.env`` file
via ``pydantic-settings``. Components never read ``Settings`` themselves;
``news_rag.bootstrap`` turns a ``Settings`` instance into constructor
arguments.
"""

from typing import Annotated, List, Literal, Optional

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_GENERATION_MODELS = [
    "gemini-2.5-flash",
    "gemini-2.5-pro",
    "gemini-2.0-flash",
]


class Settings(BaseSettings):
    # Vector index
    QDRANT_URL: str = "http://localhost:6333"
    QDRANT_API_KEY: Optional[SecretStr] = None
    QDRANT_COLLECTION: str = "news_articles"
    QDRANT_TIMEOUT: int = 10
    VECTOR_BACKEND: Literal["qdrant", "memory"] = "qdrant"
    VECTOR_SIZE: int = 768
    SCORE_THRESHOLD: float = 0.5
    RETRIEVAL_LIMIT: int = 3

    # Session store
    REDIS_URL: str = "redis://localhost:6379"
    REDIS_TIMEOUT: float = 5.0
    SESSION_BACKEND: Literal["redis", "memory"] = "redis"
    SESSION_TTL_SECONDS: int = 3600
    HISTORY_CONTEXT_TURNS: int = 3
    SERIALIZE_SESSIONS: bool = True

    # Prompt assembly
    ARTICLE_CHAR_BUDGET: int = 400
    MAX_CONTEXT_ARTICLES: int = 3
    RESPONSE_WORD_LIMIT: int = 250

    # Embeddings
    EMBEDDING_PROVIDER: Literal["openai", "e5"] = "openai"
    EMBEDDING_MODEL: str = "jina-embeddings-v2-base-en"
    EMBEDDING_BASE_URL: Optional[str] = "https://api.jina.ai/v1"
    EMBEDDING_API_KEY: Optional[SecretStr] = None
    EMBEDDING_TIMEOUT: float = 30.0

    # Generation
    GENERATION_PROVIDER: Literal["gemini", "openai", "ollama"] = "gemini"
    GENERATION_MODELS: Annotated[List[str], NoDecode] = list(DEFAULT_GENERATION_MODELS)
    GENERATION_API_KEY: Optional[SecretStr] = None
    GENERATION_BASE_URL: Optional[str] = None
    GENERATION_TIMEOUT: float = 60.0

    # Transport
    HOST: str = "0.0.0.0"
    PORT: int = 5000
    CORS_ORIGINS: Annotated[List[str], NoDecode] = ["http://localhost:3000"]
    LOG_LEVEL: str = "INFO"

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    @field_validator("GENERATION_MODELS", "CORS_ORIGINS", mode="before")
    @classmethod
    def _split_csv(cls, v):
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("GENERATION_MODELS")
    @classmethod
    def _models_not_empty(cls, v: List[str]) -> List[str]:
        if not v:
            raise ValueError("GENERATION_MODELS must name at least one model")
        return v

    @field_validator("SCORE_THRESHOLD")
    @classmethod
    def _threshold_range(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError(f"SCORE_THRESHOLD must be within [0, 1], got {v}")
        return v

    @field_validator(
        "VECTOR_SIZE",
        "RETRIEVAL_LIMIT",
        "SESSION_TTL_SECONDS",
        "HISTORY_CONTEXT_TURNS",
        "ARTICLE_CHAR_BUDGET",
        "MAX_CONTEXT_ARTICLES",
        "RESPONSE_WORD_LIMIT",
    )
    @classmethod
    def _positive(cls, v: int, info) -> int:
        if v <= 0:
            raise ValueError(f"{info.field_name} must be positive, got {v}")
        return v
