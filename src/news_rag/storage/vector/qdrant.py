import logging
import uuid
from typing import List, Optional

from qdrant_client import AsyncQdrantClient
from qdrant_client.models import Distance, PointStruct, VectorParams

from news_rag.exceptions import BackendUnavailable, StoreWriteFailure
from news_rag.models import ArticlePayload, CollectionInfo, Document, RetrievalResult

logger = logging.getLogger(__name__)


def to_point_id(document_id: str) -> str:
    """
    Map a document id onto an id Qdrant accepts.

    UUIDs pass through unchanged; anything else is hashed with UUIDv5 so the
    same document id always lands on the same point.
    """
    try:
        return str(uuid.UUID(str(document_id)))
    except ValueError:
        return str(uuid.uuid5(uuid.NAMESPACE_URL, str(document_id)))


class QdrantArticleStore:
    def __init__(
        self,
        url: str = "http://localhost:6333",
        collection_name: str = "news_articles",
        api_key: Optional[str] = None,
        timeout: int = 10,
        client: Optional[AsyncQdrantClient] = None,
    ):
        """
        Initialize Qdrant article store.

        Args:
            url: Qdrant URL (default: http://localhost:6333)
            collection_name: Collection name (default: news_articles)
            api_key: Optional Qdrant Cloud API key
            timeout: Per-request timeout in seconds
            client: Pre-built async client (tests)
        """
        self.client = client or AsyncQdrantClient(url=url, api_key=api_key, timeout=timeout)
        self.collection_name = collection_name

    async def ensure_collection(self, vector_size: int) -> bool:
        try:
            if await self.client.collection_exists(self.collection_name):
                logger.info(f"Collection {self.collection_name} already exists")
                return False

            await self.client.create_collection(
                collection_name=self.collection_name,
                vectors_config=VectorParams(size=vector_size, distance=Distance.COSINE),
            )
        except Exception as e:
            # Another process may have created it between the check and the create
            if await self._exists_quietly():
                logger.info(f"Collection {self.collection_name} created concurrently")
                return False
            logger.error(f"Failed to initialize collection {self.collection_name}: {e}")
            raise BackendUnavailable(f"Qdrant unavailable: {e}") from e

        logger.info(f"Created collection {self.collection_name} (size={vector_size}, distance=Cosine)")
        return True

    async def _exists_quietly(self) -> bool:
        try:
            return await self.client.collection_exists(self.collection_name)
        except Exception:
            return False

    async def upsert(self, document_id: str, vector: List[float], payload: dict) -> None:
        point_id = to_point_id(document_id)
        if point_id != document_id:
            payload = {**payload, "document_id": document_id}

        try:
            await self.client.upsert(
                collection_name=self.collection_name,
                points=[PointStruct(id=point_id, vector=vector, payload=payload)],
                wait=True,
            )
        except Exception as e:
            logger.error(f"Failed to upsert document {document_id}: {e}")
            raise StoreWriteFailure(f"Failed to store document {document_id}: {e}") from e

        logger.debug(f"Upserted document {document_id}: '{(payload.get('title') or '')[:50]}'")

    async def search(
        self, query_vector: List[float], limit: int, score_threshold: float
    ) -> List[RetrievalResult]:
        try:
            response = await self.client.query_points(
                collection_name=self.collection_name,
                query=query_vector,
                limit=limit,
                score_threshold=score_threshold,
                with_payload=True,
                with_vectors=False,
            )
        except Exception as e:
            logger.error(f"Vector search failed: {e}")
            raise BackendUnavailable(f"Qdrant search failed: {e}") from e

        results = []
        for hit in response.points:
            # Qdrant applies the threshold server-side as well
            if hit.score < score_threshold:
                logger.debug(f"Skipping due to low score: {hit.score}")
                continue
            payload = hit.payload or {}
            document = Document(
                id=payload.get("document_id") or str(hit.id),
                vector=hit.vector if isinstance(hit.vector, list) else [],
                payload=ArticlePayload(**payload),
            )
            results.append(RetrievalResult(document=document, score=min(hit.score, 1.0)))

        results.sort(key=lambda r: r.score, reverse=True)
        logger.debug(f"{len(results)} hits found (threshold={score_threshold})")
        return results[:limit]

    async def collection_info(self) -> CollectionInfo:
        try:
            info = await self.client.get_collection(self.collection_name)
        except Exception as e:
            logger.error(f"Failed to get collection info: {e}")
            raise BackendUnavailable(f"Qdrant unavailable: {e}") from e

        vectors = info.config.params.vectors
        vector_size = getattr(vectors, "size", None)
        distance = getattr(vectors, "distance", None)
        return CollectionInfo(
            name=self.collection_name,
            points_count=info.points_count or 0,
            vector_size=vector_size,
            distance=getattr(distance, "value", distance),
            status=getattr(info.status, "value", str(info.status)),
        )

    async def reset(self, vector_size: int) -> None:
        """Clear ALL articles from the collection (dangerous!)"""
        try:
            if await self.client.collection_exists(self.collection_name):
                await self.client.delete_collection(self.collection_name)
            await self.client.create_collection(
                collection_name=self.collection_name,
                vectors_config=VectorParams(size=vector_size, distance=Distance.COSINE),
            )
        except Exception as e:
            logger.error(f"Failed to reset collection {self.collection_name}: {e}")
            raise BackendUnavailable(f"Qdrant unavailable: {e}") from e

        logger.info(f"Reset collection {self.collection_name}")

    async def close(self) -> None:
        await self.client.close()
