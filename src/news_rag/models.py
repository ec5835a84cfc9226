from datetime import datetime, timezone
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ConversationTurn(BaseModel):
    """A single message in a session's history."""

    role: Literal["user", "assistant"]
    content: str
    timestamp: str = Field(default_factory=utc_now_iso)


class ArticlePayload(BaseModel):
    """
    Payload stored alongside each article vector.

    Extra keys supplied at ingestion are preserved.
    """

    model_config = ConfigDict(extra="allow")

    text: str
    title: str = ""
    url: Optional[str] = None
    source: Optional[str] = None
    published: Optional[str] = None
    ingestedAt: Optional[str] = None
    document_id: Optional[str] = None


class Document(BaseModel):
    """An indexed article: id, embedding and payload."""

    model_config = ConfigDict(frozen=True)

    id: str
    vector: List[float] = Field(default_factory=list)
    payload: ArticlePayload


class RetrievalResult(BaseModel):
    document: Document
    score: float = Field(..., ge=0.0, le=1.0)

    @property
    def title(self) -> str:
        return self.document.payload.title

    @property
    def text(self) -> str:
        return self.document.payload.text


class GenerationRequest(BaseModel):
    query: str
    context: List[RetrievalResult] = Field(default_factory=list)
    history: List[ConversationTurn] = Field(default_factory=list)


class GenerationResult(BaseModel):
    """What a generative backend returns for one prompt."""

    text: str = ""
    stop_reason: Optional[str] = None
    safety_blocked: bool = False


class CollectionInfo(BaseModel):
    name: str
    points_count: int = 0
    vector_size: Optional[int] = None
    distance: Optional[str] = None
    status: Optional[str] = None
